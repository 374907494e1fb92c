"""Thin HTTP client around the (injected) aiohttp ClientSession.

This is the only place in the package that talks to aiohttp directly.
All transport level problems are converted into SourceRequestError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from aiohttp import ClientError
from music_assistant_models.errors import InvalidDataError

from cloud_sources.constants import LOGGER_NAME, VERBOSE_LOG_LEVEL
from cloud_sources.errors import SourceRequestError
from cloud_sources.helpers.json import JSON_DECODE_EXCEPTIONS, json_loads
from cloud_sources.helpers.util import redact_url

if TYPE_CHECKING:
    from aiohttp import ClientSession

LOGGER = logging.getLogger(f"{LOGGER_NAME}.http")


@dataclass
class HttpResponse:
    """Fully read response of a single request."""

    url: str
    status: int
    reason: str | None
    body: bytes
    charset: str | None = None
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Return True if the status is 2xx."""
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        """Return the body decoded as text."""
        return self.body.decode(self.charset or "utf-8", errors="replace")

    def json(self) -> Any:
        """Return the body decoded as json."""
        try:
            return json_loads(self.body)
        except JSON_DECODE_EXCEPTIONS as err:
            msg = f"Invalid JSON received from {redact_url(self.url)}"
            raise InvalidDataError(msg) from err

    def raise_for_status(self) -> None:
        """Raise SourceRequestError if the status is not 2xx."""
        if not self.ok:
            raise SourceRequestError.from_status(self.status, self.reason, self.url)


class HttpClient:
    """Simple client that performs requests on behalf of the scanners."""

    def __init__(self, session: ClientSession, verify_ssl: bool = True) -> None:
        """Initialize."""
        self.session = session
        self.verify_ssl = verify_ssl

    async def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        data: str | bytes | None = None,
    ) -> HttpResponse:
        """Perform a request and read the full response, whatever its status."""
        LOGGER.log(VERBOSE_LOG_LEVEL, "%s %s", method, redact_url(url))
        try:
            async with self.session.request(
                method,
                url,
                headers=headers,
                data=data,
                ssl=self.verify_ssl,
            ) as response:
                body = await response.read()
                return HttpResponse(
                    url=url,
                    status=response.status,
                    reason=response.reason,
                    body=body,
                    charset=response.charset,
                    headers=dict(response.headers),
                )
        except (ClientError, TimeoutError, ValueError) as err:
            # ValueError covers urls aiohttp refuses to parse
            msg = str(err) or err.__class__.__name__
            raise SourceRequestError(msg, url=url) from err

    async def get(self, url: str, headers: dict[str, str] | None = None) -> HttpResponse:
        """GET a url, raise SourceRequestError on a non-2xx status."""
        response = await self.request("GET", url, headers=headers)
        response.raise_for_status()
        return response

    async def get_text(self, url: str, headers: dict[str, str] | None = None) -> str:
        """GET a url and return the body as text."""
        return (await self.get(url, headers=headers)).text

    async def get_json(self, url: str, headers: dict[str, str] | None = None) -> Any:
        """GET a url and return the decoded json body."""
        return (await self.get(url, headers=headers)).json()
