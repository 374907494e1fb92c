"""Schema for the Jellyfin/Emby Items API.

Only what is needed.
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
class JellyfinNameIdPair(_BaseModel):
    """NameIdPair, used for (album) artists."""

    name: str | None = field(metadata=field_options(alias="Name"), default=None)
    id: str | None = field(metadata=field_options(alias="Id"), default=None)


@dataclass(kw_only=True)
class JellyfinItem(_BaseModel):
    """BaseItemDto of an Audio item."""

    id: str | None = field(metadata=field_options(alias="Id"), default=None)
    name: str | None = field(metadata=field_options(alias="Name"), default=None)
    album: str | None = field(metadata=field_options(alias="Album"), default=None)
    album_artist: str | None = field(metadata=field_options(alias="AlbumArtist"), default=None)
    album_artists: list[JellyfinNameIdPair] | None = field(
        metadata=field_options(alias="AlbumArtists"), default=None
    )
    artists: list[str] | None = field(metadata=field_options(alias="Artists"), default=None)
    run_time_ticks: int | None = field(metadata=field_options(alias="RunTimeTicks"), default=None)
    index_number: int | None = field(metadata=field_options(alias="IndexNumber"), default=None)
    image_tags: dict[str, str] | None = field(
        metadata=field_options(alias="ImageTags"), default=None
    )
    parent_id: str | None = field(metadata=field_options(alias="ParentId"), default=None)


@dataclass(kw_only=True)
class JellyfinItemsResponse(_BaseModel):
    """Response of /Users/{userId}/Items."""

    items: list[JellyfinItem] = field(metadata=field_options(alias="Items"), default_factory=list)
    total_record_count: int = field(
        metadata=field_options(alias="TotalRecordCount"), default=0
    )
