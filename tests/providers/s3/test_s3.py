"""Test the S3 source type against a local web server."""

from aiohttp import web

from cloud_sources import CloudSources
from cloud_sources.models.source import Source, SourceType
from cloud_sources.providers.s3 import S3Provider

LISTING = """<?xml version="1.0" encoding="UTF-8"?>
<ListBucketResult xmlns="http://s3.amazonaws.com/doc/2006-03-01/">
  <Name>music</Name>
  <KeyCount>{count}</KeyCount>
  <IsTruncated>{truncated}</IsTruncated>
  {token}
  {contents}
</ListBucketResult>
"""


def make_listing(keys: list[str], next_token: str | None = None) -> str:
    """Return a ListObjectsV2 response for the given keys."""
    contents = "".join(f"<Contents><Key>{key}</Key><Size>1</Size></Contents>" for key in keys)
    return LISTING.format(
        count=len(keys),
        truncated="true" if next_token else "false",
        token=f"<NextContinuationToken>{next_token}</NextContinuationToken>" if next_token else "",
        contents=contents,
    )


def create_source(base_url: str, **config: str) -> Source:
    """Return a S3 source for a base url."""
    return Source(
        id="src-s3",
        name="Bucket",
        type=SourceType.S3,
        slug="custom-bucket",
        config={"baseUrl": base_url, **config},
    )


async def test_scan_bucket_listing(serve, cloud_sources: CloudSources) -> None:
    """Test all pages of a bucket listing are followed."""
    queries: list[dict[str, str]] = []

    async def handler(request: web.Request) -> web.Response:
        queries.append(dict(request.query))
        if request.query.get("continuation-token") == "page/2":
            body = make_listing(["Artist - Album/02 - Second.flac", "notes.txt"])
        else:
            body = make_listing(["Artist - Album/01 - First.flac", "cover.jpg"], "page/2")
        return web.Response(text=body, content_type="application/xml")

    app = web.Application()
    app.router.add_get("/music/", handler)
    server = await serve(app)
    base_url = str(server.make_url("/music/"))

    result = await cloud_sources.scanner.scan(create_source(base_url, authParam="?sig=abc"))

    assert result.ok
    assert queries == [
        {"list-type": "2", "sig": "abc"},
        {"list-type": "2", "continuation-token": "page/2", "sig": "abc"},
    ]
    assert [x.external_id for x in result.tracks] == [
        f"{base_url}Artist%20-%20Album/01%20-%20First.flac",
        f"{base_url}Artist%20-%20Album/02%20-%20Second.flac",
    ]
    first = result.tracks[0]
    assert (first.title, first.artist, first.album, first.track_number) == (
        "First",
        "Artist",
        "Album",
        1,
    )


async def test_scan_invalid_listing(serve, cloud_sources: CloudSources) -> None:
    """Test a listing that is not xml gives an empty scan."""

    async def handler(request: web.Request) -> web.Response:
        return web.Response(text="<<not xml", content_type="application/xml")

    app = web.Application()
    app.router.add_get("/music/", handler)
    server = await serve(app)

    result = await cloud_sources.scanner.scan(create_source(str(server.make_url("/music/"))))

    assert result.ok
    assert result.tracks == []


async def test_scan_access_denied(serve, cloud_sources: CloudSources) -> None:
    """Test a refused listing fails the scan."""

    async def handler(request: web.Request) -> web.Response:
        raise web.HTTPForbidden

    app = web.Application()
    app.router.add_get("/music/", handler)
    server = await serve(app)

    result = await cloud_sources.scanner.scan(create_source(str(server.make_url("/music/"))))

    assert not result.ok
    assert result.error == "HTTP 403 Forbidden"


async def test_scan_url_list(cloud_sources: CloudSources) -> None:
    """Test pasted object urls are used instead of listing the bucket."""
    source = create_source(
        "https://bucket.example/",
        urlList="https://bucket.example/a/Song.mp3\nhttps://bucket.example/b/Other.m4a",
    )

    result = await cloud_sources.scanner.scan(source)

    assert result.ok
    assert [x.title for x in result.tracks] == ["Song", "Other"]
    assert all(x.album == "Bucket" for x in result.tracks)


def test_build_stream_url() -> None:
    """Test object keys and full urls get the auth params appended."""
    provider = S3Provider()
    config = {"baseUrl": "https://bucket.example/", "authParam": "?X-Amz-Signature=abc"}
    assert (
        provider.build_stream_url(config, "Artist/01 Song.mp3")
        == "https://bucket.example/Artist/01%20Song.mp3?X-Amz-Signature=abc"
    )
    assert (
        provider.build_stream_url(config, "https://cdn.example/a.mp3")
        == "https://cdn.example/a.mp3?X-Amz-Signature=abc"
    )
    assert provider.build_stream_url({"baseUrl": "https://b/"}, "a.mp3") == "https://b/a.mp3"
