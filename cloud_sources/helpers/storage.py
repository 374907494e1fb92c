"""Simple file backed key/value storage for hosts without a store of their own."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any

import aiofiles
from aiofiles.os import replace, wrap

from cloud_sources.constants import LOGGER_NAME
from cloud_sources.helpers.json import JSON_DECODE_EXCEPTIONS, json_dumps, json_loads

LOGGER = logging.getLogger(f"{LOGGER_NAME}.storage")

isfile = wrap(os.path.isfile)


class FileStorage:
    """Key/value storage persisted as a single json document on disk."""

    def __init__(self, filename: str) -> None:
        """Initialize."""
        self.filename = filename
        self._data: dict[str, Any] | None = None
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Any:
        """Return the stored value for key or None."""
        data = await self._load()
        return data.get(key)

    async def set(self, key: str, value: Any) -> None:
        """Store value under key and write the document to disk."""
        async with self._lock:
            data = await self._load()
            data[key] = value
            tmp_filename = f"{self.filename}.tmp"
            async with aiofiles.open(tmp_filename, "w", encoding="utf-8") as _file:
                await _file.write(json_dumps(data, indent=True))
            await replace(tmp_filename, self.filename)

    async def _load(self) -> dict[str, Any]:
        if self._data is not None:
            return self._data
        self._data = {}
        if not await isfile(self.filename):
            return self._data
        async with aiofiles.open(self.filename, encoding="utf-8") as _file:
            content = await _file.read()
        try:
            data = json_loads(content)
        except JSON_DECODE_EXCEPTIONS:
            LOGGER.warning("Ignoring corrupt storage file %s", self.filename)
            return self._data
        if isinstance(data, dict):
            self._data = data
        return self._data
