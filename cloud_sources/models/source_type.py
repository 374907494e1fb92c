"""Model/base for a SourceType implementation within Cloud Sources."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, ClassVar, final
from urllib.parse import urlsplit

from music_assistant_models.config_entries import ConfigEntry
from music_assistant_models.enums import ConfigEntryType, ContentType
from music_assistant_models.errors import InvalidDataError, SetupFailedError

from cloud_sources.constants import (
    CONF_BASE_URL,
    DEFAULT_MAX_CRAWL_DEPTH,
    DEFAULT_SCAN_LIMIT,
    LOGGER_NAME,
)
from cloud_sources.models.source import ResolvedStream, ScanProgress

if TYPE_CHECKING:
    from cloud_sources.helpers.http import HttpClient
    from cloud_sources.models.source import Source, SourceType, Track

ProgressCallback = Callable[[ScanProgress], None]


class FieldKind(StrEnum):
    """Input kind of a source configuration field."""

    TEXT = "text"
    PASSWORD = "password"
    TEXTAREA = "textarea"


@dataclass(frozen=True)
class SourceField:
    """A single configuration field of a SourceType."""

    key: str
    label: str
    kind: FieldKind = FieldKind.TEXT
    placeholder: str = ""
    help: str = ""
    required: bool = False

    def to_config_entry(self) -> ConfigEntry:
        """Return this field as a Music Assistant ConfigEntry."""
        return ConfigEntry(
            key=self.key,
            type=(
                ConfigEntryType.SECURE_STRING
                if self.kind == FieldKind.PASSWORD
                else ConfigEntryType.STRING
            ),
            label=self.label,
            description=self.help or None,
            default_value=None if self.required else "",
            required=self.required,
        )


@dataclass(frozen=True)
class ProbeRequest:
    """Lightweight request used to test the connection to a source."""

    url: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    data: str | None = None


@dataclass
class ScanContext:
    """Everything a scanner needs from the session that started it."""

    http: HttpClient
    max_depth: int = DEFAULT_MAX_CRAWL_DEPTH
    limit: int = DEFAULT_SCAN_LIMIT
    on_progress: ProgressCallback | None = None


def config_value(config: Mapping[str, str], key: str, default: str = "") -> str:
    """Return a stripped config value (or the default when empty/missing)."""
    value = config.get(key)
    if value is None:
        return default
    return str(value).strip() or default


class SourceTypeProvider:
    """
    Base representation of a SourceType implementation.

    Every SourceType implements the same capability interface: building a stream url
    and the auth headers for an external id (pure functions of the source config),
    and scanning a source into a list of tracks.
    """

    type: ClassVar[SourceType]
    label: ClassVar[str]
    description: ClassVar[str] = ""
    fields: ClassVar[tuple[SourceField, ...]] = ()
    # fields without which a scan can not even start
    scan_requires: ClassVar[tuple[str, ...]] = (CONF_BASE_URL,)
    # recursive types report progress while crawling
    is_recursive: ClassVar[bool] = False

    def __init__(self) -> None:
        """Initialize SourceTypeProvider."""
        self.logger = logging.getLogger(LOGGER_NAME).getChild(self.domain)

    @property
    @final
    def domain(self) -> str:
        """Return domain (the persisted type tag) for this SourceType."""
        return self.type.value

    def build_stream_url(self, config: Mapping[str, str], external_id: str) -> str:
        """Build the playable url for an external id."""
        raise NotImplementedError

    def build_headers(self, config: Mapping[str, str]) -> dict[str, str]:
        """Build the (auth) headers needed for requests to this source."""
        return {}

    @final
    def resolve(self, config: Mapping[str, str], external_id: str) -> ResolvedStream:
        """Build url and headers for an external id, without touching the network."""
        url = self.build_stream_url(config, external_id)
        return ResolvedStream(
            url=url,
            headers=self.build_headers(config),
            content_type=ContentType.try_parse(url),
        )

    def validate(self, config: Mapping[str, str]) -> None:
        """Raise SetupFailedError if the config can not possibly be scanned."""
        missing = [
            next((x.label for x in self.fields if x.key == key), key)
            for key in self.scan_requires
            if not config_value(config, key)
        ]
        if missing:
            msg = f"{self.label}: missing required field(s): {', '.join(missing)}"
            raise SetupFailedError(msg)
        if base_url := config_value(config, CONF_BASE_URL):
            try:
                scheme = urlsplit(base_url).scheme
            except ValueError as err:
                msg = f"{self.label}: invalid URL"
                raise SetupFailedError(msg) from err
            if scheme not in ("http", "https"):
                msg = f"{self.label}: URL must start with http:// or https://"
                raise SetupFailedError(msg)

    def get_config_entries(self) -> tuple[ConfigEntry, ...]:
        """Return Config entries to setup a source of this type."""
        return tuple(x.to_config_entry() for x in self.fields)

    def get_probe_request(self, config: Mapping[str, str]) -> ProbeRequest:
        """Return the request used to test the connection (the base url by default)."""
        return ProbeRequest(
            url=config_value(config, CONF_BASE_URL), headers=self.build_headers(config)
        )

    async def scan(self, source: Source, context: ScanContext) -> list[Track]:
        """Enumerate all tracks reachable from the source."""
        raise NotImplementedError

    async def get_json(
        self, http: HttpClient, url: str, headers: dict[str, str] | None = None
    ) -> Any:
        """GET a json document, return None (and log) if the body is not valid json."""
        try:
            return await http.get_json(url, headers=headers)
        except InvalidDataError as err:
            self.logger.warning("%s", err)
            return None
