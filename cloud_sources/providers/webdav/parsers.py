"""Parse WebDAV multistatus (PROPFIND) responses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

import xmltodict

from cloud_sources.helpers.util import safe_unquote

PROPFIND_BODY = (
    '<?xml version="1.0"?>'
    '<d:propfind xmlns:d="DAV:"><d:prop>'
    "<d:displayname/><d:getcontenttype/><d:resourcetype/>"
    "</d:prop></d:propfind>"
)


@dataclass
class DavEntry:
    """A single resource (file or collection) of a multistatus response."""

    # percent-decoded absolute path on the server
    path: str
    is_collection: bool = False
    content_type: str | None = None


def _get_text(value: Any) -> str | None:
    if isinstance(value, dict):
        value = value.get("#text")
    if value is None:
        return None
    return str(value).strip()


def _parse_response(response: dict[str, Any]) -> DavEntry | None:
    href = _get_text(response.get("href"))
    if not href:
        return None
    if href.startswith(("http://", "https://")):
        href = urlsplit(href).path
    entry = DavEntry(path=safe_unquote(href))
    for propstat in response.get("propstat") or []:
        prop = (propstat or {}).get("prop") or {}
        resource_type = prop.get("resourcetype")
        if isinstance(resource_type, dict) and "collection" in resource_type:
            entry.is_collection = True
        if content_type := _get_text(prop.get("getcontenttype")):
            entry.content_type = content_type
    return entry


def parse_multistatus(content: str) -> list[DavEntry]:
    """
    Parse the body of a PROPFIND response into entries.

    Raises xml.parsers.expat.ExpatError on malformed xml.
    """
    data = xmltodict.parse(
        content,
        process_namespaces=True,
        namespaces={"DAV:": None},
        force_list=("response", "propstat"),
    )
    multistatus = (data or {}).get("multistatus") or {}
    entries: list[DavEntry] = []
    for response in multistatus.get("response") or []:
        if not isinstance(response, dict):
            continue
        if entry := _parse_response(response):
            entries.append(entry)
    return entries
