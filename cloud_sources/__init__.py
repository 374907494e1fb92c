"""Cloud Sources: scan remote audio repositories and stream their tracks."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from cloud_sources.constants import (
    CONF_LOG_LEVEL,
    CONF_VERIFY_SSL,
    CONFIG_ENTRIES,
    LOGGER_NAME,
    VERBOSE_LOG_LEVEL,
)
from cloud_sources.controllers.library import LibraryController
from cloud_sources.controllers.scanner import ScanController
from cloud_sources.controllers.sources import SourcesController
from cloud_sources.controllers.streams import StreamsController
from cloud_sources.helpers.http import HttpClient
from cloud_sources.helpers.storage import FileStorage

if TYPE_CHECKING:
    from aiohttp import ClientSession

    from cloud_sources.models.host import HostLibrary, HostPlayer, SourceStorage, StreamRegistry

logging.addLevelName(VERBOSE_LOG_LEVEL, "VERBOSE")


class CloudSources:
    """
    A Cloud Sources session.

    Holds the configured sources and everything needed to scan and stream them.
    All host collaborators are injected, a host that lacks one of them simply
    does not get that functionality (e.g. no storage means no persistence).
    Hosts without a key/value store of their own can pass a FileStorage.
    """

    def __init__(
        self,
        http_session: ClientSession,
        storage: SourceStorage | None = None,
        library: HostLibrary | None = None,
        player: HostPlayer | None = None,
        stream_registry: StreamRegistry | None = None,
        config: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the session."""
        self.storage = storage
        self.library = library
        self.player = player
        self.stream_registry = stream_registry
        self.config: dict[str, Any] = {x.key: x.default_value for x in CONFIG_ENTRIES}
        for key, value in (config or {}).items():
            if key in self.config and value is not None:
                self.config[key] = value
        self.logger = logging.getLogger(LOGGER_NAME)
        self._set_log_level(str(self.config[CONF_LOG_LEVEL]).upper())
        self.http = HttpClient(http_session, verify_ssl=bool(self.config[CONF_VERIFY_SSL]))
        self.streams = StreamsController(self)
        self.sources = SourcesController(self)
        self.scanner = ScanController(self)
        self.library_index = LibraryController(self)

    def get_value(self, key: str) -> Any:
        """Return a session config value."""
        return self.config.get(key)

    async def setup(self) -> None:
        """Load the sources, register their resolvers and index the host library."""
        await self.sources.setup()
        await self.library_index.refresh_index()
        self.logger.info("Ready, %s source(s) loaded", len(self.sources))

    async def close(self) -> None:
        """Deregister all resolvers of this session."""
        self.sources.close()

    def _set_log_level(self, log_level: str) -> None:
        if log_level == "GLOBAL":
            self.logger.setLevel(logging.NOTSET)
        else:
            self.logger.setLevel(log_level)
        if logging.getLogger().level > self.logger.level > logging.NOTSET:
            # if the root logger's level is higher, we need to adjust that too
            logging.getLogger().setLevel(self.logger.level)
        self.logger.debug("Log level configured to %s", log_level)


__all__ = ["CloudSources", "FileStorage"]
