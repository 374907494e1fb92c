"""Test the Jellyfin/Emby source type against a local web server."""

import pathlib

import aiofiles
from aiohttp import web

from cloud_sources import CloudSources
from cloud_sources.models.source import Source, SourceType
from cloud_sources.providers.jellyfin import JellyfinProvider
from cloud_sources.providers.jellyfin.schema import JellyfinItem

FIXTURES_DIR = pathlib.Path(__file__).parent / "fixtures"


def create_source(base_url: str) -> Source:
    """Return a Jellyfin source for a base url."""
    return Source(
        id="src-jf",
        name="Jellyfin",
        type=SourceType.JELLYFIN,
        slug="custom-jellyfin",
        config={"baseUrl": base_url, "apiKey": "key123", "userId": "user1"},
    )


async def test_scan(serve, cloud_sources: CloudSources) -> None:
    """Test all audio items of the user are listed."""
    async with aiofiles.open(FIXTURES_DIR / "items.json") as fp:
        content = await fp.read()
    queries: list[dict[str, str]] = []

    async def handler(request: web.Request) -> web.Response:
        queries.append(dict(request.query))
        return web.Response(text=content, content_type="application/json")

    app = web.Application()
    app.router.add_get("/Users/user1/Items", handler)
    server = await serve(app)
    base_url = str(server.make_url("/")).rstrip("/")

    result = await cloud_sources.scanner.scan(create_source(base_url + "/"))

    assert result.ok
    assert queries == [
        {
            "IncludeItemTypes": "Audio",
            "Recursive": "true",
            "Fields": "ParentId,AlbumArtist,Album,RunTimeTicks",
            "Limit": "500",
            "api_key": "key123",
        }
    ]
    assert [x.external_id for x in result.tracks] == ["a1b2c3", "d4e5f6", "g7h8i9"]
    numb, guest, bare = result.tracks
    assert numb.title == "Comfortably Numb"
    assert numb.artist == "Pink Floyd"
    assert numb.album == "The Wall"
    assert numb.track_number == 6
    assert numb.duration == 383
    assert numb.cover_url == f"{base_url}/Items/a1b2c3/Images/Primary?api_key=key123&width=300"
    assert guest.artist == "Someone"
    assert guest.duration == 123
    assert guest.cover_url == ""
    assert bare.artist == "Unknown Artist"
    assert bare.album == ""
    assert bare.duration == 0


async def test_scan_invalid_json(serve, cloud_sources: CloudSources) -> None:
    """Test a garbled response gives an empty (but successful) scan."""

    async def handler(request: web.Request) -> web.Response:
        return web.Response(text="<html>login</html>", content_type="text/html")

    app = web.Application()
    app.router.add_get("/Users/user1/Items", handler)
    server = await serve(app)

    result = await cloud_sources.scanner.scan(create_source(str(server.make_url("/"))))

    assert result.ok
    assert result.tracks == []


async def test_scan_requires_user_id(cloud_sources: CloudSources) -> None:
    """Test a source without user id fails before any request is made."""
    source = create_source("http://127.0.0.1:1")
    source.config["userId"] = "  "

    result = await cloud_sources.scanner.scan(source)

    assert not result.ok
    assert "User ID" in (result.error or "")


def test_parse_track_artist_fallback() -> None:
    """Test the album artist field is used when there are no album artists."""
    provider = JellyfinProvider()
    item = JellyfinItem.from_dict({"Id": "x", "Name": "Song", "AlbumArtist": "Band"})
    track = provider.parse_track({"baseUrl": "http://jf"}, item)
    assert track.artist == "Band"
    assert track.track_number == 0


def test_build_stream_url() -> None:
    """Test the universal audio endpoint is used."""
    provider = JellyfinProvider()
    config = {"baseUrl": "https://jf.example/", "apiKey": "key123", "userId": "user1"}
    assert provider.build_stream_url(config, "a1b2c3") == (
        "https://jf.example/Audio/a1b2c3/universal"
        "?api_key=key123&UserId=user1&AudioCodec=mp3&TranscodingProtocol=http"
    )
    assert provider.get_probe_request(config).url == "https://jf.example/System/Info/Public"
    assert provider.build_headers(config) == {}
