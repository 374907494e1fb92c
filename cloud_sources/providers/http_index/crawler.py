"""Depth limited crawler for HTML directory listings."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from cloud_sources.constants import DEFAULT_MAX_CRAWL_DEPTH
from cloud_sources.errors import SourceRequestError
from cloud_sources.helpers.util import (
    ensure_trailing_slash,
    get_relative_depth,
    redact_url,
    safe_unquote,
    sort_tracks,
)
from cloud_sources.models.source import ScanProgress
from cloud_sources.providers.http_index.parsers import parse_listing

if TYPE_CHECKING:
    from cloud_sources.helpers.http import HttpClient
    from cloud_sources.models.source import Track
    from cloud_sources.models.source_type import ProgressCallback

# url of an audio file -> Track
TrackBuilder = Callable[[str], "Track"]


@dataclass
class CrawlState:
    """State owned by a single crawl: visited folders, results and timings."""

    base_url: str
    visited: set[str] = field(default_factory=set)
    results: list[Track] = field(default_factory=list)
    # milliseconds spent per completed folder
    timings: list[float] = field(default_factory=list)
    found: set[str] = field(default_factory=set)
    start: float = field(default_factory=time.monotonic)

    @property
    def pending(self) -> int:
        """Return the (estimated) number of folders discovered but not yet completed."""
        return max(0, len(self.visited) - len(self.timings) - 1)

    def get_folder_name(self, url: str) -> str:
        """Return the human readable name of a folder for progress reports."""
        relative = url.replace(self.base_url, "", 1).rstrip("/")
        return safe_unquote(relative.rsplit("/", 1)[-1] or "/")

    def get_progress(self, current_folder: str) -> ScanProgress:
        """Return the current progress of this crawl."""
        avg_ms = sum(self.timings) / len(self.timings) if self.timings else 0
        return ScanProgress(
            folders_visited=len(self.timings),
            tracks_found=len(self.results),
            current_folder=current_folder,
            elapsed_ms=int((time.monotonic() - self.start) * 1000),
            eta_seconds=round(self.pending * avg_ms / 1000) if avg_ms > 0 else None,
        )


class HtmlIndexCrawler:
    """
    Crawl an HTML directory index, depth first, collecting audio files.

    Only the root listing is mandatory: when a subfolder can not be fetched it is
    logged and skipped while its siblings are still crawled.
    """

    def __init__(
        self,
        http: HttpClient,
        base_url: str,
        build_track: TrackBuilder,
        headers: dict[str, str] | None = None,
        max_depth: int = DEFAULT_MAX_CRAWL_DEPTH,
        on_progress: ProgressCallback | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize."""
        self.http = http
        self.base_url = ensure_trailing_slash(base_url)
        self.build_track = build_track
        self.headers = headers or {}
        self.max_depth = max_depth
        self.on_progress = on_progress
        self.logger = logger or logging.getLogger(__name__)

    async def crawl(self) -> list[Track]:
        """Crawl the index and return all found tracks, sorted."""
        state = CrawlState(base_url=self.base_url)
        state.visited.add(self.base_url)
        stack = [self.base_url]
        while stack:
            url = stack.pop()
            subfolders = await self._crawl_folder(state, url)
            # reversed so folders are visited in listing order
            stack.extend(reversed(subfolders))
        self.logger.debug(
            "Crawled %s folders below %s, found %s tracks",
            len(state.timings),
            redact_url(self.base_url),
            len(state.results),
        )
        return sort_tracks(state.results)

    async def _crawl_folder(self, state: CrawlState, url: str) -> list[str]:
        """Fetch and parse a single listing, return the subfolders to visit next."""
        folder_start = time.monotonic()
        folder_name = state.get_folder_name(url)
        self._report(state, folder_name)
        try:
            content = await self.http.get_text(url, headers=self.headers)
        except SourceRequestError as err:
            if url == self.base_url:
                raise
            self.logger.warning("Could not fetch %s: %s", redact_url(url), err)
            state.timings.append((time.monotonic() - folder_start) * 1000)
            return []

        links = parse_listing(content, url, self.base_url)
        for audio_url in links.audio:
            if audio_url in state.found:
                continue
            state.found.add(audio_url)
            state.results.append(self.build_track(audio_url))

        state.timings.append((time.monotonic() - folder_start) * 1000)
        self._report(state, folder_name)

        if get_relative_depth(url, self.base_url) >= self.max_depth:
            self.logger.debug("Not descending below %s: max depth reached", redact_url(url))
            return []
        subfolders = [x for x in links.folders if x not in state.visited]
        state.visited.update(subfolders)
        return subfolders

    def _report(self, state: CrawlState, folder_name: str) -> None:
        if self.on_progress is not None:
            self.on_progress(state.get_progress(folder_name))
