"""Registry of all supported SourceTypes."""

from __future__ import annotations

from music_assistant_models.errors import InvalidDataError

from cloud_sources.models.source import SourceType
from cloud_sources.models.source_type import SourceTypeProvider
from cloud_sources.providers.http_index import HttpIndexProvider
from cloud_sources.providers.jellyfin import JellyfinProvider
from cloud_sources.providers.json_api import JsonApiProvider
from cloud_sources.providers.navidrome import NavidromeProvider
from cloud_sources.providers.s3 import S3Provider
from cloud_sources.providers.url_list import UrlListProvider
from cloud_sources.providers.webdav import WebDavProvider

SOURCE_TYPES: dict[SourceType, SourceTypeProvider] = {
    provider.type: provider
    for provider in (
        HttpIndexProvider(),
        WebDavProvider(),
        S3Provider(),
        JellyfinProvider(),
        NavidromeProvider(),
        JsonApiProvider(),
        UrlListProvider(),
    )
}


def get_source_type(source_type: SourceType | str) -> SourceTypeProvider:
    """Return the provider implementing a SourceType, raise InvalidDataError if unknown."""
    try:
        return SOURCE_TYPES[SourceType(source_type)]
    except ValueError as err:
        msg = f"Unknown source type: {source_type}"
        raise InvalidDataError(msg) from err
