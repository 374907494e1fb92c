"""S3 / R2 / MinIO SourceType for Cloud Sources."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote
from xml.parsers.expat import ExpatError

import xmltodict

from cloud_sources.constants import CONF_AUTH_PARAM, CONF_BASE_URL, CONF_URL_LIST
from cloud_sources.helpers.metadata import create_track
from cloud_sources.helpers.util import (
    append_query,
    ensure_trailing_slash,
    is_audio_path,
    join_url,
    redact_url,
)
from cloud_sources.models.source import SourceType
from cloud_sources.models.source_type import (
    FieldKind,
    SourceField,
    SourceTypeProvider,
    config_value,
)
from cloud_sources.providers.url_list import create_url_track, parse_url_list

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Mapping

    from cloud_sources.models.source import Source, Track
    from cloud_sources.models.source_type import ScanContext

S3_NAMESPACE = "http://s3.amazonaws.com/doc/2006-03-01/"


class S3Provider(SourceTypeProvider):
    """Amazon S3, Cloudflare R2, MinIO or any S3 compatible storage.

    The base url is the public (or CDN) url of the bucket root. The external id of a
    track is the full object url, auth query params are appended at playback time.
    """

    type = SourceType.S3
    label = "S3 / R2 / MinIO (Pre-signed URLs)"
    description = (
        "Amazon S3, Cloudflare R2, MinIO, or any S3-compatible storage. "
        "You provide a pre-signed base URL and the plugin appends file keys."
    )
    fields = (
        SourceField(
            key=CONF_BASE_URL,
            label="Bucket Public/Pre-signed Base URL",
            placeholder="https://my-bucket.s3.amazonaws.com/",
            help="Your bucket's public URL or CDN URL. Files will be appended to this base.",
            required=True,
        ),
        SourceField(
            key=CONF_AUTH_PARAM,
            label="Auth Query Param (optional)",
            placeholder="?X-Amz-Signature=abc&...",
            help=(
                "If your bucket requires signed URLs, paste the signature params here. "
                "They'll be appended to each file URL."
            ),
        ),
        SourceField(
            key=CONF_URL_LIST,
            label="Object URLs (optional, one per line)",
            kind=FieldKind.TEXTAREA,
            help="Leave empty to list the bucket, or paste the object URLs to import.",
        ),
    )

    def build_stream_url(self, config: Mapping[str, str], external_id: str) -> str:
        """Build the playable url for an external id."""
        if external_id.startswith(("http://", "https://")):
            url = external_id
        else:
            url = join_url(config_value(config, CONF_BASE_URL), external_id)
        return append_query(url, config_value(config, CONF_AUTH_PARAM))

    async def scan(self, source: Source, context: ScanContext) -> list[Track]:
        """List the objects of the bucket (or parse the pasted object urls)."""
        if url_list := source.get_value(CONF_URL_LIST):
            return [create_url_track(url, album=source.name) for url in parse_url_list(url_list)]
        base_url = source.get_value(CONF_BASE_URL)
        tracks: list[Track] = []
        async for key in self.iter_keys(source.config, context):
            if not is_audio_path(key):
                continue
            tracks.append(
                create_track(key, "", join_url(base_url, key), fallback_album=source.name)
            )
        return tracks

    async def iter_keys(
        self, config: Mapping[str, str], context: ScanContext
    ) -> AsyncGenerator[str, None]:
        """Yield all object keys of the bucket, following continuation tokens."""
        list_url = ensure_trailing_slash(config_value(config, CONF_BASE_URL)) + "?list-type=2"
        auth_param = config_value(config, CONF_AUTH_PARAM)
        token: str | None = None
        while True:
            url = list_url
            if token:
                url += f"&continuation-token={quote(token, safe='')}"
            url = append_query(url, auth_param)
            content = await context.http.get_text(url)
            try:
                data = xmltodict.parse(
                    content,
                    process_namespaces=True,
                    namespaces={S3_NAMESPACE: None},
                    force_list=("Contents",),
                )
            except ExpatError as err:
                self.logger.warning("Invalid bucket listing from %s: %s", redact_url(url), err)
                return
            result = (data or {}).get("ListBucketResult")
            if not isinstance(result, dict):
                self.logger.warning("Unexpected bucket listing from %s", redact_url(url))
                return
            for item in result.get("Contents") or []:
                if isinstance(item, dict) and (key := item.get("Key")):
                    yield key
            token = result.get("NextContinuationToken")
            if result.get("IsTruncated") != "true" or not token:
                return
