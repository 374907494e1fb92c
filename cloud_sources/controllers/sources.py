"""Controller that manages the (persisted) list of user configured sources."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import shortuuid
from mashumaro.exceptions import InvalidFieldValue, MissingField
from music_assistant_models.errors import InvalidDataError, SetupFailedError

from cloud_sources.constants import CONF_STORAGE_KEY, DEFAULT_STORAGE_KEY, SLUG_PREFIX
from cloud_sources.helpers.json import JSON_DECODE_EXCEPTIONS, json_dumps, json_loads
from cloud_sources.helpers.util import create_slug
from cloud_sources.models.source import Source, SourceType
from cloud_sources.providers import get_source_type

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from cloud_sources import CloudSources


class SourcesController:
    """Controller holding the sources of a session and their stream resolvers."""

    domain: str = "sources"

    def __init__(self, cs: CloudSources) -> None:
        """Initialize controller."""
        self.cs = cs
        self.logger = cs.logger.getChild(self.domain)
        self._sources: dict[str, Source] = {}

    def __iter__(self) -> Iterator[Source]:
        """Iterate over all sources."""
        return iter(list(self._sources.values()))

    def __len__(self) -> int:
        """Return the number of sources."""
        return len(self._sources)

    @property
    def storage_key(self) -> str:
        """Return the key under which the source list is stored."""
        return str(self.cs.get_value(CONF_STORAGE_KEY) or DEFAULT_STORAGE_KEY)

    async def setup(self) -> None:
        """Load the persisted sources and register their resolvers."""
        await self.load()
        for source in self:
            self.register_resolver(source)

    def close(self) -> None:
        """Deregister the resolvers of all sources."""
        for source in self:
            self.unregister_resolver(source.slug)

    async def load(self) -> None:
        """Load the source list from storage (a json string or an already decoded list)."""
        if self.cs.storage is None:
            return
        try:
            raw = await self.cs.storage.get(self.storage_key)
        except Exception as err:
            self.logger.warning("Could not load sources: %s", err)
            return
        if not raw:
            return
        if isinstance(raw, str | bytes):
            try:
                raw = json_loads(raw)
            except JSON_DECODE_EXCEPTIONS as err:
                self.logger.warning("Could not load sources: %s", err)
                return
        if not isinstance(raw, list):
            self.logger.warning("Could not load sources: unexpected data in storage")
            return
        self._sources = {}
        for item in raw:
            if not isinstance(item, dict):
                self.logger.warning("Skipping invalid source %s", item)
                continue
            try:
                source = Source.from_dict(item)
            except (InvalidFieldValue, MissingField) as err:
                self.logger.warning("Skipping invalid source %s: %s", item, err)
                continue
            self._sources[source.id] = source
        self.logger.debug("Loaded %s source(s)", len(self._sources))

    async def save(self) -> None:
        """Persist the source list."""
        if self.cs.storage is None:
            return
        data = json_dumps([x.to_dict() for x in self._sources.values()])
        try:
            await self.cs.storage.set(self.storage_key, data)
        except Exception as err:
            self.logger.error("Could not save sources: %s", err)

    def get_source(self, source_id: str) -> Source | None:
        """Return a source by its id."""
        return self._sources.get(source_id)

    def get_source_by_slug(self, slug: str) -> Source | None:
        """Return a source by its slug (the source_type of its library tracks)."""
        return next((x for x in self._sources.values() if x.slug == slug), None)

    def create_source(
        self, name: str, source_type: SourceType | str, config: Mapping[str, Any] | None = None
    ) -> Source:
        """Create a new (not yet added) Source."""
        name = name.strip()
        if not name:
            msg = "A source needs a name"
            raise SetupFailedError(msg)
        provider = get_source_type(source_type)
        return Source(
            id=f"src-{shortuuid.uuid()}",
            name=name,
            type=provider.type,
            slug=self._create_slug(name),
            config=self._clean_config(config),
        )

    async def add_source(self, source: Source) -> Source:
        """Add a source, register its resolver and persist the list."""
        get_source_type(source.type)
        self._check_slug(source)
        self._sources[source.id] = source
        self.register_resolver(source)
        await self.save()
        self.logger.info("Added source %s (%s)", source.name, source.type)
        return source

    async def update_source(
        self,
        source_id: str,
        name: str | None = None,
        config: Mapping[str, Any] | None = None,
    ) -> Source:
        """Update name and/or config of a source, re-registering its resolver."""
        if not (current := self.get_source(source_id)):
            msg = f"Unknown source: {source_id}"
            raise InvalidDataError(msg)
        new_name = name.strip() if name is not None else current.name
        if not new_name:
            msg = "A source needs a name"
            raise SetupFailedError(msg)
        updated = Source(
            id=current.id,
            name=new_name,
            type=current.type,
            slug=self._create_slug(new_name) if new_name != current.name else current.slug,
            config=self._clean_config(config) if config is not None else dict(current.config),
        )
        self._check_slug(updated)
        if updated.slug != current.slug:
            self.unregister_resolver(current.slug)
        self._sources[source_id] = updated
        self.register_resolver(updated)
        await self.save()
        return updated

    async def delete_source(self, source_id: str) -> None:
        """Delete a source and deregister its resolver."""
        if not (source := self._sources.pop(source_id, None)):
            msg = f"Unknown source: {source_id}"
            raise InvalidDataError(msg)
        self.unregister_resolver(source.slug)
        await self.save()
        self.logger.info("Deleted source %s", source.name)

    def register_resolver(self, source: Source) -> None:
        """Register the stream resolver of a source with the host."""
        if self.cs.stream_registry is None:
            return
        self.cs.stream_registry.register_resolver(
            source.slug, self.cs.streams.get_resolver(source)
        )
        self.logger.debug('Resolver registered for source_type="%s"', source.slug)

    def unregister_resolver(self, slug: str) -> None:
        """Remove the stream resolver registered under a slug."""
        if self.cs.stream_registry is None:
            return
        self.cs.stream_registry.unregister_resolver(slug)
        self.logger.debug('Resolver removed for source_type="%s"', slug)

    def _create_slug(self, name: str) -> str:
        slug = create_slug(name)
        if slug == SLUG_PREFIX:
            msg = f"Source name {name!r} needs at least one letter or digit"
            raise SetupFailedError(msg)
        return slug

    def _check_slug(self, source: Source) -> None:
        for other in self._sources.values():
            if other.id != source.id and other.slug == source.slug:
                msg = f"Source {other.name!r} already uses the name {source.slug!r}"
                raise InvalidDataError(msg)

    @staticmethod
    def _clean_config(config: Mapping[str, Any] | None) -> dict[str, str]:
        return {
            key: str(value).strip() for key, value in (config or {}).items() if value is not None
        }
