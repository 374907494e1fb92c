"""Controller that turns external ids back into playable urls at playback time."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cloud_sources.helpers.util import redact_url
from cloud_sources.providers import get_source_type

if TYPE_CHECKING:
    from cloud_sources import CloudSources
    from cloud_sources.models.host import StreamResolver
    from cloud_sources.models.source import ResolvedStream, Source


class StreamsController:
    """Build stream urls (and headers) for the tracks of a source.

    Resolving never touches the network and never raises: a track that can not be
    resolved is unplayable, which must not affect playback of other tracks.
    """

    domain: str = "streams"

    def __init__(self, cs: CloudSources) -> None:
        """Initialize controller."""
        self.cs = cs
        self.logger = cs.logger.getChild(self.domain)

    def resolve(self, source: Source, external_id: str) -> ResolvedStream | None:
        """Return the playable url and headers for an external id, None on failure."""
        try:
            stream = get_source_type(source.type).resolve(source.config, external_id)
        except Exception as err:
            self.logger.error(
                "Could not resolve stream %s of source %s: %s", external_id, source.name, err
            )
            return None
        self.logger.debug("Resolved stream of source %s: %s", source.name, redact_url(stream.url))
        return stream

    def get_resolver(self, source: Source) -> StreamResolver:
        """Return the resolver (external id -> url or None) for a source."""

        def resolver(external_id: str) -> str | None:
            if stream := self.resolve(source, external_id):
                return stream.url
            return None

        return resolver
