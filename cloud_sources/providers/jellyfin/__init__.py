"""Jellyfin/Emby SourceType for Cloud Sources."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote, urlencode

from mashumaro.exceptions import InvalidFieldValue, MissingField

from cloud_sources.constants import (
    CONF_API_KEY,
    CONF_BASE_URL,
    CONF_USER_ID,
    UNKNOWN_ARTIST,
    UNKNOWN_TITLE,
)
from cloud_sources.helpers.util import strip_trailing_slash
from cloud_sources.models.source import SourceType, Track
from cloud_sources.models.source_type import (
    FieldKind,
    ProbeRequest,
    SourceField,
    SourceTypeProvider,
    config_value,
)
from cloud_sources.providers.jellyfin.schema import JellyfinItem, JellyfinItemsResponse

if TYPE_CHECKING:
    from collections.abc import Mapping

    from cloud_sources.models.source import Source
    from cloud_sources.models.source_type import ScanContext

# 1 tick = 100 nanoseconds
TICKS_PER_SECOND = 10_000_000
ITEM_FIELDS = "ParentId,AlbumArtist,Album,RunTimeTicks"


class JellyfinProvider(SourceTypeProvider):
    """Jellyfin or Emby media server, using their REST API.

    The external id of a track is the Jellyfin item id.
    """

    type = SourceType.JELLYFIN
    label = "Jellyfin / Emby"
    description = "Stream from a Jellyfin or Emby media server using their REST API."
    fields = (
        SourceField(
            key=CONF_BASE_URL,
            label="Server URL",
            placeholder="https://jellyfin.myserver.com",
            help="Your Jellyfin/Emby server address",
            required=True,
        ),
        SourceField(
            key=CONF_API_KEY,
            label="API Key",
            kind=FieldKind.PASSWORD,
            placeholder="your-api-key",
            help="Dashboard > API Keys > + (Jellyfin) or Admin > API Keys (Emby)",
            required=True,
        ),
        SourceField(
            key=CONF_USER_ID,
            label="User ID",
            placeholder="abc123...",
            help="Found in Admin > Users > click your user",
            required=True,
        ),
    )
    scan_requires = (CONF_BASE_URL, CONF_USER_ID)

    def build_stream_url(self, config: Mapping[str, str], external_id: str) -> str:
        """Build the playable url for an external id."""
        base_url = strip_trailing_slash(config_value(config, CONF_BASE_URL))
        params = {
            "api_key": config_value(config, CONF_API_KEY),
            "UserId": config_value(config, CONF_USER_ID),
            "AudioCodec": "mp3",
            "TranscodingProtocol": "http",
        }
        return f"{base_url}/Audio/{quote(external_id, safe='')}/universal?{urlencode(params)}"

    def get_probe_request(self, config: Mapping[str, str]) -> ProbeRequest:
        """Return the request used to test the connection."""
        base_url = strip_trailing_slash(config_value(config, CONF_BASE_URL))
        return ProbeRequest(url=f"{base_url}/System/Info/Public")

    def get_cover_url(self, config: Mapping[str, str], item: JellyfinItem) -> str:
        """Return the url of the primary image of an item (if it has one)."""
        if not item.id or not (item.image_tags or {}).get("Primary"):
            return ""
        base_url = strip_trailing_slash(config_value(config, CONF_BASE_URL))
        params = {"api_key": config_value(config, CONF_API_KEY), "width": 300}
        return f"{base_url}/Items/{quote(item.id, safe='')}/Images/Primary?{urlencode(params)}"

    async def scan(self, source: Source, context: ScanContext) -> list[Track]:
        """List all audio items of the configured user."""
        base_url = strip_trailing_slash(source.get_value(CONF_BASE_URL))
        user_id = source.get_value(CONF_USER_ID)
        params = {
            "IncludeItemTypes": "Audio",
            "Recursive": "true",
            "Fields": ITEM_FIELDS,
            "Limit": context.limit,
            "api_key": source.get_value(CONF_API_KEY),
        }
        url = f"{base_url}/Users/{quote(user_id, safe='')}/Items?{urlencode(params)}"
        data = await self.get_json(context.http, url)
        if not isinstance(data, dict):
            return []
        try:
            response = JellyfinItemsResponse.from_dict(data)
        except (InvalidFieldValue, MissingField) as err:
            self.logger.warning("Unexpected response from Jellyfin: %s", err)
            return []
        tracks = [
            self.parse_track(source.config, item) for item in response.items if item.id
        ]
        self.logger.debug(
            "Received %s of %s audio items", len(tracks), response.total_record_count
        )
        return tracks

    def parse_track(self, config: Mapping[str, str], item: JellyfinItem) -> Track:
        """Parse a Jellyfin audio item into a Track."""
        assert item.id is not None  # for type checking
        if item.album_artists and item.album_artists[0].name:
            artist = item.album_artists[0].name
        elif item.album_artist:
            artist = item.album_artist
        elif item.artists:
            artist = item.artists[0]
        else:
            artist = UNKNOWN_ARTIST
        return Track(
            title=item.name or UNKNOWN_TITLE,
            artist=artist,
            album=item.album or "",
            track_number=item.index_number or 0,
            duration=round(item.run_time_ticks / TICKS_PER_SECOND) if item.run_time_ticks else 0,
            cover_url=self.get_cover_url(config, item),
            external_id=item.id,
        )
