"""Interfaces of the host application that Cloud Sources is plugged into."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

# resolver registered per source slug: external_id -> playable url (or None)
StreamResolver = Callable[[str], str | None]


class SourceStorage(Protocol):
    """Opaque key/value persistence used for the source list."""

    async def get(self, key: str) -> Any:
        """Return the stored value for key or None."""

    async def set(self, key: str, value: Any) -> None:
        """Store value under key."""


class HostLibrary(Protocol):
    """The host media-player's library store."""

    async def get_tracks(self) -> list[dict[str, Any]]:
        """Return all library tracks (each with at least source_type and external_id)."""

    async def add_external_track(self, track: dict[str, Any]) -> None:
        """Add an external (streamed) track to the library."""


class HostPlayer(Protocol):
    """The host media player."""

    async def set_track(self, track: dict[str, Any]) -> None:
        """Start playback of the given track immediately."""


class StreamRegistry(Protocol):
    """Registry of stream resolvers, keyed by source_type."""

    def register_resolver(self, source_type: str, resolver: StreamResolver) -> None:
        """Register the resolver for a source_type."""

    def unregister_resolver(self, source_type: str) -> None:
        """Remove the resolver for a source_type."""
