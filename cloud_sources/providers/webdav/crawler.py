"""Crawler for WebDAV shares (Nextcloud, ownCloud, Seafile, ...)."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING
from urllib.parse import quote, urlsplit
from xml.parsers.expat import ExpatError

from cloud_sources.constants import DEFAULT_MAX_CRAWL_DEPTH
from cloud_sources.errors import SourceRequestError
from cloud_sources.helpers.metadata import create_track
from cloud_sources.helpers.util import (
    ensure_trailing_slash,
    get_origin,
    is_audio_path,
    redact_url,
    safe_unquote,
    sort_tracks,
)
from cloud_sources.providers.http_index.crawler import CrawlState, HtmlIndexCrawler
from cloud_sources.providers.webdav.parsers import PROPFIND_BODY, DavEntry, parse_multistatus

if TYPE_CHECKING:
    from cloud_sources.helpers.http import HttpClient
    from cloud_sources.models.source import Track
    from cloud_sources.models.source_type import ProgressCallback


class WebDavCrawler:
    """
    Collect all audio files of a WebDAV share.

    Strategies, first one with results wins:
    1. a single PROPFIND with Depth: infinity on the base url
    2. PROPFIND with Depth: 1 per folder (a folder that fails is read as HTML index)
    3. the whole share read as an HTML directory index

    The external id of a track is its (decoded) path relative to the base url.
    """

    def __init__(
        self,
        http: HttpClient,
        base_url: str,
        headers: dict[str, str] | None = None,
        fallback_album: str = "",
        max_depth: int = DEFAULT_MAX_CRAWL_DEPTH,
        on_progress: ProgressCallback | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize."""
        self.http = http
        self.base_url = ensure_trailing_slash(base_url)
        self.base_path = ensure_trailing_slash(safe_unquote(urlsplit(self.base_url).path))
        self.origin = get_origin(self.base_url)
        self.headers = headers or {}
        self.fallback_album = fallback_album
        self.max_depth = max_depth
        self.on_progress = on_progress
        self.logger = logger or logging.getLogger(__name__)

    def get_external_id(self, path: str) -> str:
        """Return the external id (path relative to the base) for a decoded server path."""
        if path.startswith(self.base_path):
            return path[len(self.base_path) :]
        return path.replace(self.base_path.rstrip("/"), "", 1).lstrip("/")

    def create_track(self, path: str) -> Track:
        """Create a Track for a decoded server path."""
        return create_track(
            path, self.base_path, self.get_external_id(path), fallback_album=self.fallback_album
        )

    def create_track_from_url(self, url: str) -> Track:
        """Create a Track for an audio url found in an HTML listing."""
        return self.create_track(safe_unquote(urlsplit(url).path))

    def get_folder_url(self, path: str) -> str:
        """Return the url for a decoded folder path."""
        if path == self.base_path:
            return self.base_url
        return self.origin + quote(ensure_trailing_slash(path), safe="/")

    async def crawl(self) -> list[Track]:
        """Crawl the share and return all found tracks, sorted."""
        results = await self._propfind_infinity()
        if not results:
            results = await self._crawl_depth_one()
        if not results:
            self.logger.debug(
                "No audio found with PROPFIND, reading %s as HTML index",
                redact_url(self.base_url),
            )
            results = await HtmlIndexCrawler(
                self.http,
                self.base_url,
                build_track=self.create_track_from_url,
                headers=self.headers,
                max_depth=self.max_depth,
                on_progress=self.on_progress,
                logger=self.logger,
            ).crawl()
        return sort_tracks(results)

    async def _propfind(self, url: str, depth: str) -> list[DavEntry] | None:
        """Perform a PROPFIND, return None if the request itself failed."""
        headers = {**self.headers, "Depth": depth, "Content-Type": "application/xml"}
        try:
            response = await self.http.request("PROPFIND", url, headers=headers, data=PROPFIND_BODY)
            response.raise_for_status()
        except SourceRequestError as err:
            self.logger.debug(
                "PROPFIND (depth %s) failed for %s: %s", depth, redact_url(url), err
            )
            return None
        try:
            return parse_multistatus(response.text)
        except ExpatError as err:
            self.logger.warning("Invalid PROPFIND response from %s: %s", redact_url(url), err)
            return []

    async def _propfind_infinity(self) -> list[Track]:
        entries = await self._propfind(self.base_url, "infinity")
        if not entries:
            return []
        results = [
            self.create_track(entry.path)
            for entry in entries
            if not entry.is_collection
            and entry.path.startswith(self.base_path)
            and is_audio_path(entry.path)
        ]
        self.logger.debug("PROPFIND (depth infinity) found %s tracks", len(results))
        return results

    async def _crawl_depth_one(self) -> list[Track]:
        state = CrawlState(base_url=self.base_path)
        state.visited.add(self.base_path)
        stack = [self.base_path]
        while stack:
            path = stack.pop()
            folder_start = time.monotonic()
            folder_name = state.get_folder_name(path)
            self._report(state, folder_name)
            depth = path[len(self.base_path) :].count("/")
            subfolders = await self._crawl_folder(state, path, depth)
            state.timings.append((time.monotonic() - folder_start) * 1000)
            self._report(state, folder_name)
            if depth >= self.max_depth:
                continue
            subfolders = [x for x in subfolders if x not in state.visited]
            state.visited.update(subfolders)
            stack.extend(reversed(subfolders))
        return state.results

    async def _crawl_folder(self, state: CrawlState, path: str, depth: int) -> list[str]:
        """Collect the audio files of a single folder, return its subfolders."""
        url = self.get_folder_url(path)
        entries = await self._propfind(url, "1")
        if entries is None:
            await self._crawl_folder_as_html(state, url, depth)
            return []
        subfolders: list[str] = []
        for entry in entries:
            if not entry.path.startswith(self.base_path):
                continue
            if entry.is_collection:
                folder_path = ensure_trailing_slash(entry.path)
                if folder_path != ensure_trailing_slash(path):
                    subfolders.append(folder_path)
            elif is_audio_path(entry.path):
                self._add_track(state, self.create_track(entry.path))
        return subfolders

    async def _crawl_folder_as_html(self, state: CrawlState, url: str, depth: int) -> None:
        crawler = HtmlIndexCrawler(
            self.http,
            url,
            build_track=self.create_track_from_url,
            headers=self.headers,
            max_depth=max(0, self.max_depth - depth),
            logger=self.logger,
        )
        try:
            tracks = await crawler.crawl()
        except SourceRequestError as err:
            self.logger.warning("Could not read folder %s: %s", redact_url(url), err)
            return
        for track in tracks:
            self._add_track(state, track)

    def _add_track(self, state: CrawlState, track: Track) -> None:
        if track.external_id in state.found:
            return
        state.found.add(track.external_id)
        state.results.append(track)

    def _report(self, state: CrawlState, folder_name: str) -> None:
        if self.on_progress is not None:
            self.on_progress(state.get_progress(folder_name))
