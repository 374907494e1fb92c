"""Controller that scans sources for tracks and tests their connection."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from music_assistant_models.errors import MusicAssistantError, SetupFailedError

from cloud_sources.constants import (
    CONF_MAX_CRAWL_DEPTH,
    CONF_SCAN_LIMIT,
    DEFAULT_MAX_CRAWL_DEPTH,
    DEFAULT_SCAN_LIMIT,
)
from cloud_sources.errors import SourceRequestError
from cloud_sources.helpers.util import redact_url, try_parse_int
from cloud_sources.models.source import ConnectionTestResult, ScanResult
from cloud_sources.models.source_type import ScanContext
from cloud_sources.providers import get_source_type

if TYPE_CHECKING:
    from cloud_sources import CloudSources
    from cloud_sources.models.source import Source
    from cloud_sources.models.source_type import ProgressCallback


class ScanController:
    """
    Dispatch sources to the scanner of their SourceType.

    Nothing raised while scanning or testing a source escapes this controller:
    every failure is reported in the returned result.
    """

    domain: str = "scanner"

    def __init__(self, cs: CloudSources) -> None:
        """Initialize controller."""
        self.cs = cs
        self.logger = cs.logger.getChild(self.domain)

    def create_context(self, on_progress: ProgressCallback | None = None) -> ScanContext:
        """Create the context for a single scan."""
        return ScanContext(
            http=self.cs.http,
            max_depth=try_parse_int(self.cs.get_value(CONF_MAX_CRAWL_DEPTH), None)
            or DEFAULT_MAX_CRAWL_DEPTH,
            limit=try_parse_int(self.cs.get_value(CONF_SCAN_LIMIT), None) or DEFAULT_SCAN_LIMIT,
            on_progress=on_progress,
        )

    async def scan(
        self, source: Source, on_progress: ProgressCallback | None = None
    ) -> ScanResult:
        """Scan a source and return all its tracks (or the reason why that failed)."""
        start = time.monotonic()
        self.logger.info("Scanning source %s (%s)", source.name, source.type)
        try:
            provider = get_source_type(source.type)
            provider.validate(source.config)
            # only crawling source types report progress
            context = self.create_context(on_progress if provider.is_recursive else None)
            tracks = await provider.scan(source, context)
        except MusicAssistantError as err:
            self.logger.warning("Scan of source %s failed: %s", source.name, err)
            return ScanResult(ok=False, error=str(err))
        self.logger.info(
            "Scan of source %s finished in %.2fs, found %s tracks",
            source.name,
            time.monotonic() - start,
            len(tracks),
        )
        return ScanResult(ok=True, tracks=tracks)

    async def test_source(self, source: Source) -> ConnectionTestResult:
        """Perform a single lightweight request to check a source is reachable."""
        try:
            provider = get_source_type(source.type)
            probe = provider.get_probe_request(source.config)
            if not probe.url:
                msg = "No URL configured"
                raise SetupFailedError(msg)
            response = await self.cs.http.request(
                probe.method, probe.url, headers=probe.headers, data=probe.data
            )
        except MusicAssistantError as err:
            self.logger.warning("Connection test of source %s failed: %s", source.name, err)
            return ConnectionTestResult(ok=False, error=str(err))
        self.logger.debug(
            "Connection test of source %s: %s %s -> %s",
            source.name,
            probe.method,
            redact_url(probe.url),
            response.status,
        )
        if not response.ok:
            error = SourceRequestError.from_status(response.status, response.reason, probe.url)
            return ConnectionTestResult(ok=False, status=response.status, error=str(error))
        return ConnectionTestResult(ok=True, status=response.status)
