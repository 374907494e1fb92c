"""Link extraction from HTML directory listings (nginx/apache/caddy autoindex pages).

Links are scraped with a regular expression on href attributes.
Everything that knows about HTML markup lives in this module.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field

from cloud_sources.helpers.util import (
    ensure_trailing_slash,
    get_origin,
    is_audio_path,
    normalize_slashes,
    remove_dot_segments,
    strip_query,
    strip_trailing_slash,
)

href_pattern = re.compile(r"""href\s*=\s*["']([^"']*)["']""", re.IGNORECASE)
scheme_pattern = re.compile(r"^[a-z][a-z0-9+.-]*:", re.IGNORECASE)

IGNORED_HREFS = ("/", ".", "./", "..", "../")


@dataclass
class ListingLinks:
    """Audio files and subfolders linked from a single listing page."""

    audio: list[str] = field(default_factory=list)
    folders: list[str] = field(default_factory=list)


def resolve_href(href: str, page_url: str) -> str:
    """
    Resolve a href against the url of the page it was found on.

    Dot segments are resolved so the result can be compared with the base url.
    Raises ValueError for hrefs that do not form a valid url.
    """
    if href.startswith(("http://", "https://")):
        full_url = href
    elif href.startswith("/"):
        full_url = get_origin(page_url) + href
    else:
        full_url = f"{strip_trailing_slash(page_url)}/{href}"
    return remove_dot_segments(normalize_slashes(full_url))


def parse_listing(content: str, page_url: str, base_url: str) -> ListingLinks:
    """
    Extract the audio files and subfolders linked from a directory listing page.

    Links to parent folders, sort/query links, fragments and anything outside
    base_url (which must end with a slash) are ignored.
    """
    links = ListingLinks()
    for match in href_pattern.finditer(content):
        href = html.unescape(match.group(1).strip())
        if not href or href in IGNORED_HREFS or href.startswith(("?", "#", "../")):
            continue
        if scheme_pattern.match(href) and not href.startswith(("http://", "https://")):
            # mailto:, javascript: and friends
            continue
        href = strip_query(href)
        if not href:
            continue
        try:
            full_url = resolve_href(href, page_url)
        except ValueError:
            continue
        if not full_url.startswith(base_url):
            continue
        if is_audio_path(href):
            if full_url not in links.audio:
                links.audio.append(full_url)
        elif href.endswith("/") or "." not in href.rsplit("/", 1)[-1]:
            folder_url = ensure_trailing_slash(full_url)
            if folder_url != page_url and folder_url not in links.folders:
                links.folders.append(folder_url)
    return links
