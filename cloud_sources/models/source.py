"""Models for sources, scan results and resolved streams."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from mashumaro.config import BaseConfig
from mashumaro.mixins.dict import DataClassDictMixin
from mashumaro.mixins.json import DataClassJSONMixin
from music_assistant_models.enums import ContentType

from cloud_sources.constants import UNKNOWN_ARTIST, UNKNOWN_TRACK


class SourceType(StrEnum):
    """Protocol family a Source speaks."""

    HTTP_INDEX = "http_index"
    WEBDAV = "webdav"
    S3 = "s3"
    JELLYFIN = "jellyfin"
    NAVIDROME = "navidrome"
    JSON_API = "json_api"
    URL_LIST = "url_list"


class _BaseModel(DataClassJSONMixin):
    """Model shared between (persisted) definitions."""

    class Config(BaseConfig):
        """Base configuration."""

        forbid_extra_keys = False


@dataclass
class Source(_BaseModel):
    """
    A user configured remote repository of audio.

    The slug is the source_type under which tracks of this source are stored in the
    host library and under which its stream resolver is registered.
    """

    id: str
    name: str
    type: SourceType
    slug: str
    config: dict[str, str] = field(default_factory=dict)

    def get_value(self, key: str, default: str = "") -> str:
        """Return a (stripped) config value for this source."""
        value = self.config.get(key)
        if value is None:
            return default
        return str(value).strip() or default


@dataclass(kw_only=True)
class Track(DataClassDictMixin):
    """A single (ephemeral) scan result."""

    title: str
    artist: str = UNKNOWN_ARTIST
    album: str = ""
    track_number: int = 0
    duration: int = 0
    cover_url: str = ""
    external_id: str

    def to_library_item(self, source_type: str) -> dict[str, Any]:
        """Return the external track record handed to the host library."""
        return {
            "title": self.title or UNKNOWN_TRACK,
            "artist": self.artist or UNKNOWN_ARTIST,
            "album": self.album or "",
            "track_number": self.track_number or 0,
            "duration": self.duration or 0,
            "cover_url": self.cover_url or "",
            "source_type": source_type,
            "external_id": self.external_id,
        }


@dataclass(kw_only=True)
class ScanProgress(DataClassDictMixin):
    """Transient progress state of a running crawl."""

    folders_visited: int
    tracks_found: int
    current_folder: str
    elapsed_ms: int
    eta_seconds: int | None = None


@dataclass(kw_only=True)
class ScanResult(DataClassDictMixin):
    """Outcome of a scan as reported to the caller, never raised."""

    ok: bool
    tracks: list[Track] = field(default_factory=list)
    error: str | None = None


@dataclass(kw_only=True)
class ConnectionTestResult(DataClassDictMixin):
    """Outcome of a connection test."""

    ok: bool
    status: int | None = None
    error: str | None = None


@dataclass(kw_only=True)
class ResolvedStream(DataClassDictMixin):
    """A freshly built, playable url plus the headers needed to fetch it."""

    url: str
    headers: dict[str, str] = field(default_factory=dict)
    content_type: ContentType = ContentType.UNKNOWN
