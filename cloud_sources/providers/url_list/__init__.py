"""URL list SourceType for Cloud Sources: a pasted list of direct audio links."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from music_assistant_models.errors import SetupFailedError

from cloud_sources.constants import CONF_AUTH_HEADER, CONF_URL_LIST, UNKNOWN_TRACK
from cloud_sources.helpers.util import safe_unquote, strip_query
from cloud_sources.models.source import SourceType, Track
from cloud_sources.models.source_type import (
    FieldKind,
    ProbeRequest,
    SourceField,
    SourceTypeProvider,
    config_value,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from cloud_sources.models.source import Source
    from cloud_sources.models.source_type import ScanContext

extension_pattern = re.compile(r"\.[^.]+$")


def parse_url_list(value: str) -> list[str]:
    """Return the non-empty (trimmed) lines of a pasted url list."""
    return [line.strip() for line in value.splitlines() if line.strip()]


def create_url_track(url: str, album: str = "") -> Track:
    """Create a Track for a direct link, titled after its (decoded) filename."""
    file_name = safe_unquote(strip_query(url).rsplit("/", 1)[-1])
    return Track(
        title=extension_pattern.sub("", file_name) or UNKNOWN_TRACK,
        album=album,
        external_id=url,
    )


class UrlListProvider(SourceTypeProvider):
    """Literal list of audio urls, one per line.

    The external id of a track is the url itself.
    """

    type = SourceType.URL_LIST
    label = "URL List (paste links)"
    description = (
        "Paste a list of direct audio URLs, one per line. "
        "Great for quick imports from any source."
    )
    fields = (
        SourceField(
            key=CONF_URL_LIST,
            label="Audio URLs (one per line)",
            kind=FieldKind.TEXTAREA,
            placeholder="https://example.com/song1.mp3\nhttps://example.com/song2.flac",
            help="Direct links to audio files. Supports mp3, flac, ogg, m4a, wav, etc.",
            required=True,
        ),
        SourceField(
            key=CONF_AUTH_HEADER,
            label="Auth Header (optional)",
            placeholder="Bearer mytoken",
            help="Sent as Authorization header if your URLs require auth",
        ),
    )
    scan_requires = (CONF_URL_LIST,)

    def build_stream_url(self, config: Mapping[str, str], external_id: str) -> str:
        """Build the playable url for an external id."""
        return external_id

    def build_headers(self, config: Mapping[str, str]) -> dict[str, str]:
        """Build the (auth) headers needed for requests to this source."""
        if auth_header := config_value(config, CONF_AUTH_HEADER):
            return {"Authorization": auth_header}
        return {}

    def get_probe_request(self, config: Mapping[str, str]) -> ProbeRequest:
        """Return a HEAD request for the first url of the list."""
        urls = parse_url_list(config_value(config, CONF_URL_LIST))
        if not urls:
            msg = "No URLs provided"
            raise SetupFailedError(msg)
        return ProbeRequest(url=urls[0], method="HEAD", headers=self.build_headers(config))

    async def scan(self, source: Source, context: ScanContext) -> list[Track]:
        """Parse the pasted list, no network involved."""
        return [
            create_url_track(url, album=source.name)
            for url in parse_url_list(source.get_value(CONF_URL_LIST))
        ]
