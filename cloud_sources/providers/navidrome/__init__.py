"""Navidrome/Subsonic SourceType for Cloud Sources."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlencode

from mashumaro.exceptions import InvalidFieldValue, MissingField
from music_assistant_models.errors import LoginFailed

from cloud_sources.constants import (
    CONF_BASE_URL,
    CONF_PASSWORD,
    CONF_USERNAME,
    SUBSONIC_API_VERSION,
    SUBSONIC_CLIENT_NAME,
    UNKNOWN_ARTIST,
    UNKNOWN_TITLE,
)
from cloud_sources.errors import SourceRequestError
from cloud_sources.helpers.util import strip_trailing_slash
from cloud_sources.models.source import SourceType, Track
from cloud_sources.models.source_type import (
    FieldKind,
    ProbeRequest,
    SourceField,
    SourceTypeProvider,
    config_value,
)
from cloud_sources.providers.navidrome.schema import SubsonicResponse, SubsonicSong

if TYPE_CHECKING:
    from collections.abc import Mapping

    from cloud_sources.models.source import Source
    from cloud_sources.models.source_type import ScanContext

# subsonic error codes that mean the credentials were not accepted
AUTH_ERROR_CODES = (40, 41, 50)


class NavidromeProvider(SourceTypeProvider):
    """Any Subsonic compatible server: Navidrome, Airsonic, Funkwhale, etc.

    The external id of a track is the Subsonic song id.
    """

    type = SourceType.NAVIDROME
    label = "Navidrome / Subsonic"
    description = "Any Subsonic-compatible server: Navidrome, Airsonic, Funkwhale, etc."
    fields = (
        SourceField(
            key=CONF_BASE_URL,
            label="Server URL",
            placeholder="https://music.myserver.com",
            help="Your Navidrome/Subsonic server",
            required=True,
        ),
        SourceField(key=CONF_USERNAME, label="Username", placeholder="admin", required=True),
        SourceField(
            key=CONF_PASSWORD, label="Password", kind=FieldKind.PASSWORD, required=True
        ),
    )

    def get_auth_params(self, config: Mapping[str, str]) -> dict[str, str]:
        """Return the authentication/client query parameters of every Subsonic request."""
        return {
            "u": config_value(config, CONF_USERNAME),
            "p": config_value(config, CONF_PASSWORD),
            "v": SUBSONIC_API_VERSION,
            "c": SUBSONIC_CLIENT_NAME,
        }

    def get_api_url(self, config: Mapping[str, str], endpoint: str, **params: str | int) -> str:
        """Return the url for a Subsonic REST endpoint."""
        base_url = strip_trailing_slash(config_value(config, CONF_BASE_URL))
        query = urlencode({**params, **self.get_auth_params(config)})
        return f"{base_url}/rest/{endpoint}?{query}"

    def build_stream_url(self, config: Mapping[str, str], external_id: str) -> str:
        """Build the playable url for an external id."""
        base_url = strip_trailing_slash(config_value(config, CONF_BASE_URL))
        params = {**self.get_auth_params(config), "id": external_id, "format": "mp3"}
        return f"{base_url}/rest/stream?{urlencode(params)}"

    def get_probe_request(self, config: Mapping[str, str]) -> ProbeRequest:
        """Return the request used to test the connection."""
        return ProbeRequest(url=self.get_api_url(config, "ping", f="json"))

    async def scan(self, source: Source, context: ScanContext) -> list[Track]:
        """List all songs using an empty search3 query."""
        url = self.get_api_url(
            source.config, "search3", query="", songCount=context.limit, f="json"
        )
        data = await self.get_json(context.http, url)
        if not isinstance(data, dict) or not isinstance(data.get("subsonic-response"), dict):
            self.logger.warning("Unexpected response from Subsonic server")
            return []
        try:
            response = SubsonicResponse.from_dict(data["subsonic-response"])
        except (InvalidFieldValue, MissingField) as err:
            self.logger.warning("Unexpected response from Subsonic server: %s", err)
            return []
        if response.status == "failed":
            code = response.error.code if response.error else 0
            message = response.error.message if response.error else "Unknown error"
            if code in AUTH_ERROR_CODES:
                raise LoginFailed(message)
            msg = f"Subsonic error {code}: {message}"
            raise SourceRequestError(msg)
        songs = response.search_result3.song if response.search_result3 else []
        return [self.parse_track(source.config, song) for song in songs if song.id]

    def parse_track(self, config: Mapping[str, str], song: SubsonicSong) -> Track:
        """Parse a Subsonic song into a Track."""
        assert song.id is not None  # for type checking
        cover_url = ""
        if song.cover_art:
            cover_url = self.get_api_url(config, "getCoverArt", id=song.cover_art, size=300)
        return Track(
            title=song.title or UNKNOWN_TITLE,
            artist=song.artist or UNKNOWN_ARTIST,
            album=song.album or "",
            track_number=song.track or 0,
            duration=song.duration or 0,
            cover_url=cover_url,
            external_id=song.id,
        )
