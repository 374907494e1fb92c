"""Controller that imports tracks into the host library and keeps the dedup index."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cloud_sources.constants import SLUG_PREFIX

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cloud_sources import CloudSources
    from cloud_sources.models.source import Source, Track


class LibraryController:
    """
    Import/play handoff to the host and the index of already imported tracks.

    The index only holds external ids and is a cache: the host library is the
    system of record and a refresh replaces the whole index.
    """

    domain: str = "library"

    def __init__(self, cs: CloudSources) -> None:
        """Initialize controller."""
        self.cs = cs
        self.logger = cs.logger.getChild(self.domain)
        self._known_ids: set[str] = set()

    @property
    def known_ids(self) -> frozenset[str]:
        """Return the external ids of all imported tracks."""
        return frozenset(self._known_ids)

    async def refresh_index(self) -> None:
        """Rebuild the index from all host library tracks that belong to a source."""
        if self.cs.library is None:
            return
        try:
            library_tracks = await self.cs.library.get_tracks() or []
        except Exception as err:
            self.logger.warning("Could not index library: %s", err)
            return
        self._known_ids = {
            str(item["external_id"])
            for item in library_tracks
            if isinstance(item, dict)
            and str(item.get("source_type") or "").startswith(SLUG_PREFIX)
            and item.get("external_id") is not None
        }
        self.logger.debug("Indexed %s library track(s)", len(self._known_ids))

    def is_known(self, external_id: str) -> bool:
        """Return True if a track with this external id is already imported."""
        return external_id in self._known_ids

    def filter_new(self, tracks: Iterable[Track]) -> list[Track]:
        """Return only the tracks that are not imported yet."""
        return [x for x in tracks if not self.is_known(x.external_id)]

    def count_new(self, tracks: Iterable[Track]) -> int:
        """Return the number of tracks that are not imported yet."""
        return len(self.filter_new(tracks))

    async def save_track(self, source: Source, track: Track) -> bool:
        """Add a track to the host library, return False if it was not added."""
        if self.cs.library is None or self.is_known(track.external_id):
            return False
        try:
            await self.cs.library.add_external_track(track.to_library_item(source.slug))
        except Exception as err:
            self.logger.error("Could not save track %s: %s", track.title, err)
            return False
        self._known_ids.add(track.external_id)
        return True

    async def save_tracks(self, source: Source, tracks: Iterable[Track]) -> int:
        """Add many tracks to the host library, return the number of added tracks."""
        saved = 0
        for track in tracks:
            if await self.save_track(source, track):
                saved += 1
        self.logger.info("Saved %s track(s) of source %s", saved, source.name)
        await self.refresh_index()
        return saved

    async def play_track(self, source: Source, track: Track) -> bool:
        """Hand a track to the host player for immediate playback."""
        if self.cs.player is None:
            return False
        try:
            await self.cs.player.set_track(track.to_library_item(source.slug))
        except Exception as err:
            self.logger.error("Playback of %s failed: %s", track.title, err)
            return False
        return True
