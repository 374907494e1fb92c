"""Shared fixtures and fake host collaborators for the Cloud Sources tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

import pytest
from aiohttp import ClientSession, web
from aiohttp.test_utils import TestServer

from cloud_sources import CloudSources
from cloud_sources.helpers.http import HttpClient
from cloud_sources.models.host import StreamResolver

ServeFunc = Callable[[web.Application], Awaitable[TestServer]]


class MemoryStorage:
    """In memory SourceStorage."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        """Initialize."""
        self.data: dict[str, Any] = data or {}

    async def get(self, key: str) -> Any:
        """Return the stored value for key or None."""
        return self.data.get(key)

    async def set(self, key: str, value: Any) -> None:
        """Store value under key."""
        self.data[key] = value


class FakeLibrary:
    """In memory HostLibrary."""

    def __init__(self, tracks: list[dict[str, Any]] | None = None) -> None:
        """Initialize."""
        self.tracks: list[dict[str, Any]] = tracks or []

    async def get_tracks(self) -> list[dict[str, Any]]:
        """Return all library tracks."""
        return list(self.tracks)

    async def add_external_track(self, track: dict[str, Any]) -> None:
        """Add an external track."""
        self.tracks.append(track)


class FakePlayer:
    """HostPlayer that remembers what it was asked to play."""

    def __init__(self) -> None:
        """Initialize."""
        self.played: list[dict[str, Any]] = []

    async def set_track(self, track: dict[str, Any]) -> None:
        """Start playback of the given track."""
        self.played.append(track)


class FakeStreamRegistry:
    """StreamRegistry keeping resolvers in a dict."""

    def __init__(self) -> None:
        """Initialize."""
        self.resolvers: dict[str, StreamResolver] = {}

    def register_resolver(self, source_type: str, resolver: StreamResolver) -> None:
        """Register the resolver for a source_type."""
        self.resolvers[source_type] = resolver

    def unregister_resolver(self, source_type: str) -> None:
        """Remove the resolver for a source_type."""
        self.resolvers.pop(source_type, None)


@pytest.fixture
async def http_session() -> AsyncGenerator[ClientSession, None]:
    """Return an aiohttp ClientSession."""
    async with ClientSession() as session:
        yield session


@pytest.fixture
async def http(http_session: ClientSession) -> HttpClient:
    """Return a HttpClient."""
    return HttpClient(http_session)


@pytest.fixture
async def serve() -> AsyncGenerator[ServeFunc, None]:
    """Return a function that starts an aiohttp application on a local port."""
    servers: list[TestServer] = []

    async def _serve(app: web.Application) -> TestServer:
        server = TestServer(app)
        await server.start_server()
        servers.append(server)
        return server

    yield _serve
    for server in servers:
        await server.close()


@pytest.fixture
def storage() -> MemoryStorage:
    """Return an empty in memory storage."""
    return MemoryStorage()


@pytest.fixture
def library() -> FakeLibrary:
    """Return an empty host library."""
    return FakeLibrary()


@pytest.fixture
def player() -> FakePlayer:
    """Return a host player."""
    return FakePlayer()


@pytest.fixture
def stream_registry() -> FakeStreamRegistry:
    """Return a stream resolver registry."""
    return FakeStreamRegistry()


@pytest.fixture
async def cloud_sources(
    http_session: ClientSession,
    storage: MemoryStorage,
    library: FakeLibrary,
    player: FakePlayer,
    stream_registry: FakeStreamRegistry,
) -> AsyncGenerator[CloudSources, None]:
    """Return a set up Cloud Sources session wired to the fake host."""
    cs = CloudSources(
        http_session,
        storage=storage,
        library=library,
        player=player,
        stream_registry=stream_registry,
    )
    await cs.setup()
    yield cs
    await cs.close()
