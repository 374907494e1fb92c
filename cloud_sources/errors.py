"""Errors raised by Cloud Sources on top of the Music Assistant error types."""

from __future__ import annotations

from music_assistant_models.errors import MusicAssistantError


class SourceRequestError(MusicAssistantError):
    """Error raised when a request to a remote source fails (transport or non-2xx status)."""

    error_code = 950

    def __init__(
        self,
        message: str,
        status: int | None = None,
        reason: str | None = None,
        url: str | None = None,
    ) -> None:
        """Initialize error."""
        super().__init__(message)
        self.status = status
        self.reason = reason
        self.url = url

    @classmethod
    def from_status(cls, status: int, reason: str | None, url: str) -> SourceRequestError:
        """Create error for a non-2xx HTTP response."""
        message = f"HTTP {status} {reason}" if reason else f"HTTP {status}"
        return cls(message, status=status, reason=reason, url=url)
