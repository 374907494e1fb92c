"""Various (url/string) tools and helpers."""

from __future__ import annotations

import posixpath
import re
from typing import TYPE_CHECKING, Any
from urllib.parse import quote, unquote, urlsplit, urlunsplit

from aiohttp import BasicAuth
from music_assistant_models.errors import SetupFailedError

from cloud_sources.constants import (
    AUDIO_EXTENSION_PATTERN,
    SECRET_QUERY_PARAMS,
    SLUG_PREFIX,
    TRACK_NUMBER_SORT_SENTINEL,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cloud_sources.models.source import Track

slug_separator_pattern = re.compile(r"[^a-z0-9]+")
double_slash_pattern = re.compile(r"([^:])//+")


def try_parse_int(possible_int: Any, default: int | None = 0) -> int | None:
    """Try to parse an int."""
    try:
        return int(possible_int)
    except (TypeError, ValueError):
        return default


def create_slug(name: str) -> str:
    """
    Create the (host library) source_type slug for a source name.

    Names that only differ in case or in their runs of punctuation map to the same
    slug ("My NAS!" and "my-nas" both become "custom-my-nas"). The sources controller
    refuses to store two sources with one slug.
    """
    return SLUG_PREFIX + slug_separator_pattern.sub("-", name.lower()).strip("-")


def safe_unquote(value: str) -> str:
    """Percent-decode a string, returning it untouched if it does not decode to utf-8."""
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError:
        return value


def strip_trailing_slash(url: str) -> str:
    """Return url without trailing slash(es)."""
    return url.rstrip("/")


def ensure_trailing_slash(url: str) -> str:
    """Return url with exactly one trailing slash."""
    return url.rstrip("/") + "/"


def normalize_slashes(url: str) -> str:
    """Collapse accidental doubled slashes in a url, keeping the scheme separator."""
    return double_slash_pattern.sub(r"\1/", url)


def remove_dot_segments(url: str) -> str:
    """Resolve "." and ".." path segments of a url, keeping a trailing slash.

    Raises ValueError for urls that can not be split.
    """
    parts = urlsplit(url)
    segments = parts.path.split("/")
    if "." not in segments and ".." not in segments:
        return url
    path = posixpath.normpath(parts.path)
    if path.startswith("//"):
        path = "/" + path.lstrip("/")
    if parts.path.endswith(("/", "/.", "/..")) and not path.endswith("/"):
        path += "/"
    return urlunsplit(parts._replace(path=path))


def get_origin(url: str) -> str:
    """Return scheme://host[:port] part of a url."""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


def strip_query(url: str) -> str:
    """Return url without query string and fragment."""
    return url.split("#", 1)[0].split("?", 1)[0]


def is_audio_path(path: str) -> bool:
    """Return True if the path/url ends in one of the supported audio extensions."""
    return AUDIO_EXTENSION_PATTERN.search(path) is not None


def get_relative_depth(url: str, base_url: str) -> int:
    """Return the number of path separators in url below base_url."""
    if not url.startswith(base_url):
        return 0
    return url[len(base_url) :].count("/")


def join_url(base_url: str, path: str, quote_path: bool = True) -> str:
    """Join a (relative) path onto a base url."""
    if quote_path:
        path = quote(path, safe="/")
    return f"{strip_trailing_slash(base_url)}/{path.lstrip('/')}"


def append_query(url: str, query: str) -> str:
    """Append a raw query string (with or without leading ?) to a url."""
    query = query.lstrip("?&")
    if not query:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{query}"


def add_url_credentials(url: str, username: str, password: str) -> str:
    """Embed (basic auth) credentials into the userinfo part of a url."""
    parts = urlsplit(url)
    host = parts.netloc.rsplit("@", 1)[-1]
    userinfo = quote(username, safe="")
    if password:
        userinfo += ":" + quote(password, safe="")
    return urlunsplit(parts._replace(netloc=f"{userinfo}@{host}"))


def basic_auth_header(username: str, password: str) -> str:
    """Return the value for a Basic Authorization header."""
    try:
        return BasicAuth(username, password).encode()
    except ValueError as err:
        msg = f"Invalid credentials: {err}"
        raise SetupFailedError(msg) from err


def redact_url(url: str) -> str:
    """Mask credentials and secret query parameters in a url so it can be logged."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    netloc = parts.netloc
    if "@" in netloc:
        netloc = "***@" + netloc.rsplit("@", 1)[1]
    query_parts: list[str] = []
    for pair in parts.query.split("&") if parts.query else ():
        key = pair.split("=", 1)[0]
        if unquote(key).lower() in SECRET_QUERY_PARAMS:
            query_parts.append(f"{key}=***")
        else:
            query_parts.append(pair)
    return urlunsplit(parts._replace(netloc=netloc, query="&".join(query_parts)))


def track_sort_key(track: Track) -> tuple[str, int, str]:
    """Sort key for scan results: album, then track number, then title."""
    return (
        (track.album or "").casefold(),
        track.track_number or TRACK_NUMBER_SORT_SENTINEL,
        (track.title or "").casefold(),
    )


def sort_tracks(tracks: Iterable[Track]) -> list[Track]:
    """Return scan results in (album, track number, title) order."""
    return sorted(tracks, key=track_sort_key)
