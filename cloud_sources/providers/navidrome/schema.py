"""Schema for the (json flavoured) Subsonic API.

Only what is needed.
https://www.subsonic.org/pages/api.jsp
"""

from dataclasses import dataclass, field

from mashumaro import field_options
from mashumaro.config import BaseConfig
from mashumaro.mixins.json import DataClassJSONMixin


class _BaseModel(DataClassJSONMixin):
    """Model shared between schema definitions."""

    class Config(BaseConfig):
        """Base configuration."""

        forbid_extra_keys = False
        serialize_by_alias = True


@dataclass(kw_only=True)
class SubsonicSong(_BaseModel):
    """Child element of type song."""

    id: str | None = None
    title: str | None = None
    artist: str | None = None
    album: str | None = None
    track: int | None = None
    duration: int | None = None
    cover_art: str | None = field(metadata=field_options(alias="coverArt"), default=None)
    suffix: str | None = None


@dataclass(kw_only=True)
class SubsonicError(_BaseModel):
    """Error element of a failed response."""

    code: int = 0
    message: str = ""


@dataclass(kw_only=True)
class SubsonicSearchResult3(_BaseModel):
    """searchResult3 element (only the songs)."""

    song: list[SubsonicSong] = field(default_factory=list)


@dataclass(kw_only=True)
class SubsonicResponse(_BaseModel):
    """The subsonic-response envelope."""

    status: str = "ok"
    version: str | None = None
    error: SubsonicError | None = None
    search_result3: SubsonicSearchResult3 | None = field(
        metadata=field_options(alias="searchResult3"), default=None
    )
