"""Custom JSON API SourceType for Cloud Sources."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from cloud_sources.constants import (
    CONF_API_KEY,
    CONF_BASE_URL,
    CONF_STREAM_ENDPOINT,
    CONF_TRACKS_ENDPOINT,
    DEFAULT_STREAM_ENDPOINT,
    DEFAULT_TRACKS_ENDPOINT,
    UNKNOWN_ARTIST,
    UNKNOWN_TITLE,
)
from cloud_sources.helpers.util import strip_trailing_slash, try_parse_int
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

# keys a track list may be wrapped in when the response is an object
LIST_KEYS = ("tracks", "items", "results")


def _first_value(item: dict[str, Any], *keys: str) -> Any:
    """Return the first truthy value of item for the given keys."""
    for key in keys:
        if value := item.get(key):
            return value
    return None


def get_track_list(data: Any) -> list[Any]:
    """Return the list of track objects from a (wrapped) json response."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in LIST_KEYS:
            if isinstance(data.get(key), list):
                return data[key]
    return []


def parse_track(item: dict[str, Any]) -> Track | None:
    """Parse a single json track object, None if it has no usable id."""
    external_id = _first_value(item, "id", "key", "url")
    if external_id is None or not str(external_id).strip():
        return None
    return Track(
        title=str(_first_value(item, "title", "name") or UNKNOWN_TITLE),
        artist=str(_first_value(item, "artist", "artist_name") or UNKNOWN_ARTIST),
        album=str(_first_value(item, "album", "album_name") or ""),
        track_number=try_parse_int(_first_value(item, "track_number", "track"), 0) or 0,
        duration=try_parse_int(item.get("duration"), 0) or 0,
        cover_url=str(_first_value(item, "cover_url", "artwork", "image") or ""),
        external_id=str(external_id),
    )


class JsonApiProvider(SourceTypeProvider):
    """Your own API server returning a json track list.

    The external id of a track is the id (or key, or url) the API returns for it.
    """

    type = SourceType.JSON_API
    label = "Custom JSON API"
    description = (
        "Your own API server. You define how to fetch track lists "
        "and stream URLs using URL templates."
    )
    fields = (
        SourceField(
            key=CONF_BASE_URL,
            label="API Base URL",
            placeholder="https://api.myserver.com/v1",
            help="Base URL for your API",
            required=True,
        ),
        SourceField(
            key=CONF_API_KEY,
            label="API Key / Bearer Token (opt.)",
            kind=FieldKind.PASSWORD,
            placeholder="Bearer abc123...",
            help="Sent as Authorization header",
        ),
        SourceField(
            key=CONF_TRACKS_ENDPOINT,
            label="Tracks List Endpoint",
            placeholder=DEFAULT_TRACKS_ENDPOINT,
            help=(
                "Path to fetch track list. Should return "
                "[{id, title, artist, album, duration, cover_url}]"
            ),
        ),
        SourceField(
            key=CONF_STREAM_ENDPOINT,
            label="Stream URL Template",
            placeholder=DEFAULT_STREAM_ENDPOINT,
            help=(
                "Use {id} as placeholder for track ID. "
                "Should return a redirect or audio file."
            ),
        ),
    )

    def get_tracks_url(self, config: Mapping[str, str]) -> str:
        """Return the url of the track list."""
        base_url = strip_trailing_slash(config_value(config, CONF_BASE_URL))
        return base_url + config_value(config, CONF_TRACKS_ENDPOINT, DEFAULT_TRACKS_ENDPOINT)

    def build_stream_url(self, config: Mapping[str, str], external_id: str) -> str:
        """Build the playable url for an external id."""
        base_url = strip_trailing_slash(config_value(config, CONF_BASE_URL))
        endpoint = config_value(config, CONF_STREAM_ENDPOINT, DEFAULT_STREAM_ENDPOINT)
        return base_url + endpoint.replace("{id}", quote(external_id, safe=""), 1)

    def build_headers(self, config: Mapping[str, str]) -> dict[str, str]:
        """Build the (auth) headers needed for requests to this source."""
        if api_key := config_value(config, CONF_API_KEY):
            return {"Authorization": api_key}
        return {}

    def get_probe_request(self, config: Mapping[str, str]) -> ProbeRequest:
        """Return the request used to test the connection (the track list)."""
        return ProbeRequest(url=self.get_tracks_url(config), headers=self.build_headers(config))

    async def scan(self, source: Source, context: ScanContext) -> list[Track]:
        """Fetch the track list of the API."""
        data = await self.get_json(
            context.http,
            self.get_tracks_url(source.config),
            headers=self.build_headers(source.config),
        )
        tracks: list[Track] = []
        for item in get_track_list(data):
            if not isinstance(item, dict):
                continue
            if track := parse_track(item):
                tracks.append(track)
            else:
                self.logger.debug("Skipping track without id: %s", item)
        return tracks
