"""Test the custom JSON API source type."""

import pathlib

import aiofiles
import pytest
from aiohttp import web

from cloud_sources import CloudSources
from cloud_sources.models.source import Source, SourceType
from cloud_sources.providers.json_api import JsonApiProvider, get_track_list, parse_track

FIXTURES_DIR = pathlib.Path(__file__).parent / "fixtures"


def create_source(base_url: str, **config: str) -> Source:
    """Return a JSON API source for a base url."""
    return Source(
        id="src-api",
        name="My API",
        type=SourceType.JSON_API,
        slug="custom-my-api",
        config={"baseUrl": base_url, **config},
    )


async def serve_tracks(serve, path: str, content: str, headers: list[str | None]) -> str:
    """Serve content on path, remember the Authorization headers, return the base url."""

    async def handler(request: web.Request) -> web.Response:
        headers.append(request.headers.get("Authorization"))
        return web.Response(text=content, content_type="application/json")

    app = web.Application()
    app.router.add_get(path, handler)
    server = await serve(app)
    return str(server.make_url("/v1"))


async def test_scan(serve, cloud_sources: CloudSources) -> None:
    """Test a wrapped track list with alternative field names."""
    async with aiofiles.open(FIXTURES_DIR / "tracks.json") as fp:
        content = await fp.read()
    headers: list[str | None] = []
    base_url = await serve_tracks(serve, "/v1/library/tracks", content, headers)

    result = await cloud_sources.scanner.scan(
        create_source(base_url, apiKey="Bearer abc", tracksEndpoint="/library/tracks")
    )

    assert result.ok
    assert headers == ["Bearer abc"]
    assert [x.external_id for x in result.tracks] == [
        "42",
        "tracks/legacy-7",
        "https://cdn.example/loose.mp3",
    ]
    answer, legacy, loose = result.tracks
    assert (answer.title, answer.artist, answer.album) == ("Answer", "Deep Thought", "Hitchhiker")
    assert answer.duration == 215
    assert answer.track_number == 3
    assert answer.cover_url == "https://api.example/covers/42.jpg"
    assert (legacy.title, legacy.artist, legacy.album) == (
        "Legacy Name",
        "Old Field Artist",
        "Old Field Album",
    )
    assert legacy.track_number == 9
    assert legacy.cover_url == "https://api.example/art/7.png"
    assert loose.title == "Unknown"
    assert loose.artist == "Unknown Artist"
    assert loose.cover_url == "https://cdn.example/loose.jpg"


async def test_scan_default_endpoint(serve, cloud_sources: CloudSources) -> None:
    """Test a bare list on the default endpoint, without auth header."""
    headers: list[str | None] = []
    base_url = await serve_tracks(serve, "/v1/tracks", '[{"id": "a", "title": "A"}]', headers)

    result = await cloud_sources.scanner.scan(create_source(base_url + "/"))

    assert result.ok
    assert headers == [None]
    assert [x.title for x in result.tracks] == ["A"]


async def test_scan_invalid_json(serve, cloud_sources: CloudSources) -> None:
    """Test a body that is not json gives an empty (but successful) scan."""
    base_url = await serve_tracks(serve, "/v1/tracks", "{oops", [])

    result = await cloud_sources.scanner.scan(create_source(base_url))

    assert result.ok
    assert result.tracks == []


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        ([{"id": 1}], [{"id": 1}]),
        ({"items": [{"id": 1}]}, [{"id": 1}]),
        ({"results": [{"id": 1}]}, [{"id": 1}]),
        ({"tracks": "nope", "items": [{"id": 2}]}, [{"id": 2}]),
        ({"data": [{"id": 1}]}, []),
        (None, []),
    ],
)
def test_get_track_list(data: object, expected: list[object]) -> None:
    """Test the track list is found in plain and wrapped responses."""
    assert get_track_list(data) == expected


def test_parse_track_without_id() -> None:
    """Test items without any usable id are skipped."""
    assert parse_track({"title": "x"}) is None
    assert parse_track({"id": "  "}) is None
    assert parse_track({"id": "", "key": "k"}) is not None


def test_build_stream_url() -> None:
    """Test the id is substituted (and quoted) into the stream template."""
    provider = JsonApiProvider()
    config = {"baseUrl": "https://api.example/v1/"}
    assert provider.build_stream_url(config, "42") == "https://api.example/v1/stream/42"
    config["streamEndpoint"] = "/files/{id}/download?quality=high"
    assert (
        provider.build_stream_url(config, "tracks/legacy 7")
        == "https://api.example/v1/files/tracks%2Flegacy%207/download?quality=high"
    )
    assert provider.build_headers({"apiKey": "Bearer abc"}) == {"Authorization": "Bearer abc"}
    assert provider.get_probe_request(config).url == "https://api.example/v1/tracks"
