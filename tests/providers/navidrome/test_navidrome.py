"""Test the Navidrome/Subsonic source type against a local web server."""

import pathlib

import aiofiles
from aiohttp import web

from cloud_sources import CloudSources
from cloud_sources.models.source import Source, SourceType
from cloud_sources.providers.navidrome import NavidromeProvider

FIXTURES_DIR = pathlib.Path(__file__).parent / "fixtures"


def create_source(base_url: str) -> Source:
    """Return a Navidrome source for a base url."""
    return Source(
        id="src-nd",
        name="Navidrome",
        type=SourceType.NAVIDROME,
        slug="custom-navidrome",
        config={"baseUrl": base_url, "username": "admin", "password": "secret"},
    )


async def serve_json(serve, content: str, queries: list[dict[str, str]] | None = None) -> str:
    """Serve content on the search3 endpoint and return the base url."""

    async def handler(request: web.Request) -> web.Response:
        if queries is not None:
            queries.append(dict(request.query))
        return web.Response(text=content, content_type="application/json")

    app = web.Application()
    app.router.add_get("/rest/search3", handler)
    server = await serve(app)
    return str(server.make_url("/")).rstrip("/")


async def test_scan(serve, cloud_sources: CloudSources) -> None:
    """Test all songs are listed with an empty search3 query."""
    async with aiofiles.open(FIXTURES_DIR / "search3_ok.json") as fp:
        content = await fp.read()
    queries: list[dict[str, str]] = []
    base_url = await serve_json(serve, content, queries)

    result = await cloud_sources.scanner.scan(create_source(base_url))

    assert result.ok
    assert queries == [
        {
            "query": "",
            "songCount": "500",
            "f": "json",
            "u": "admin",
            "p": "secret",
            "v": "1.16.1",
            "c": "cloudsources",
        }
    ]
    hey_you, untagged = result.tracks
    assert hey_you.external_id == "song-1"
    assert hey_you.title == "Hey You"
    assert hey_you.artist == "Pink Floyd"
    assert hey_you.album == "The Wall"
    assert hey_you.track_number == 1
    assert hey_you.duration == 280
    assert hey_you.cover_url.startswith(f"{base_url}/rest/getCoverArt?id=al-album-1&size=300&")
    assert untagged.artist == "Unknown Artist"
    assert untagged.cover_url == ""


async def test_scan_wrong_credentials(serve, cloud_sources: CloudSources) -> None:
    """Test a failed response with an auth error code fails the scan."""
    async with aiofiles.open(FIXTURES_DIR / "failed_auth.json") as fp:
        content = await fp.read()
    base_url = await serve_json(serve, content)

    result = await cloud_sources.scanner.scan(create_source(base_url))

    assert not result.ok
    assert result.error == "Wrong username or password"


async def test_scan_server_error(serve, cloud_sources: CloudSources) -> None:
    """Test any other failed response is reported with its code."""
    content = (
        '{"subsonic-response": {"status": "failed", "version": "1.16.1",'
        ' "error": {"code": 70, "message": "Not found"}}}'
    )
    base_url = await serve_json(serve, content)

    result = await cloud_sources.scanner.scan(create_source(base_url))

    assert not result.ok
    assert result.error == "Subsonic error 70: Not found"


async def test_scan_unexpected_response(serve, cloud_sources: CloudSources) -> None:
    """Test a response without envelope gives an empty scan."""
    base_url = await serve_json(serve, '{"hello": "world"}')

    result = await cloud_sources.scanner.scan(create_source(base_url))

    assert result.ok
    assert result.tracks == []


def test_build_stream_url() -> None:
    """Test the stream endpoint carries the auth params and the song id."""
    provider = NavidromeProvider()
    config = {"baseUrl": "https://nd.example/", "username": "admin", "password": "s&cret"}
    assert provider.build_stream_url(config, "song-1") == (
        "https://nd.example/rest/stream"
        "?u=admin&p=s%26cret&v=1.16.1&c=cloudsources&id=song-1&format=mp3"
    )
    assert provider.get_probe_request(config).url == (
        "https://nd.example/rest/ping?f=json&u=admin&p=s%26cret&v=1.16.1&c=cloudsources"
    )
