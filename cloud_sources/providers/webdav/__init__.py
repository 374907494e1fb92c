"""WebDAV SourceType for Cloud Sources (Nextcloud, ownCloud, Seafile, ...)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cloud_sources.constants import CONF_BASE_URL, CONF_PASSWORD, CONF_USERNAME
from cloud_sources.helpers.util import add_url_credentials, basic_auth_header, join_url
from cloud_sources.models.source import SourceType
from cloud_sources.models.source_type import (
    FieldKind,
    ProbeRequest,
    SourceField,
    SourceTypeProvider,
    config_value,
)
from cloud_sources.providers.webdav.crawler import WebDavCrawler
from cloud_sources.providers.webdav.parsers import PROPFIND_BODY

if TYPE_CHECKING:
    from collections.abc import Mapping

    from cloud_sources.models.source import Source, Track
    from cloud_sources.models.source_type import ScanContext


class WebDavProvider(SourceTypeProvider):
    """Any WebDAV server.

    The external id of a track is its path relative to the base url, so the base url
    can be relocated without rescanning.
    """

    type = SourceType.WEBDAV
    label = "WebDAV / Nextcloud / ownCloud"
    description = "Any WebDAV server. Works with Nextcloud, ownCloud, Seafile, and more."
    fields = (
        SourceField(
            key=CONF_BASE_URL,
            label="WebDAV URL",
            placeholder="https://cloud.myserver.com/remote.php/dav/files/username/Music/",
            help="Full WebDAV path to your music folder",
            required=True,
        ),
        SourceField(key=CONF_USERNAME, label="Username", placeholder="yourname", required=True),
        SourceField(
            key=CONF_PASSWORD,
            label="Password / App Token",
            kind=FieldKind.PASSWORD,
            help="Use an App Password for better security",
            required=True,
        ),
    )
    is_recursive = True

    def build_stream_url(self, config: Mapping[str, str], external_id: str) -> str:
        """Build the playable url for an external id."""
        url = join_url(config_value(config, CONF_BASE_URL), external_id)
        if username := config_value(config, CONF_USERNAME):
            return add_url_credentials(url, username, config_value(config, CONF_PASSWORD))
        return url

    def build_headers(self, config: Mapping[str, str]) -> dict[str, str]:
        """Build the (auth) headers needed for requests to this source."""
        username = config_value(config, CONF_USERNAME)
        password = config_value(config, CONF_PASSWORD)
        if username or password:
            return {"Authorization": basic_auth_header(username, password)}
        return {}

    def get_probe_request(self, config: Mapping[str, str]) -> ProbeRequest:
        """Return the request used to test the connection."""
        return ProbeRequest(
            url=config_value(config, CONF_BASE_URL),
            method="PROPFIND",
            headers={
                **self.build_headers(config),
                "Depth": "0",
                "Content-Type": "application/xml",
            },
            data=PROPFIND_BODY,
        )

    async def scan(self, source: Source, context: ScanContext) -> list[Track]:
        """Crawl the WebDAV share of the source."""
        crawler = WebDavCrawler(
            context.http,
            source.get_value(CONF_BASE_URL),
            headers=self.build_headers(source.config),
            fallback_album=source.name,
            max_depth=context.max_depth,
            on_progress=context.on_progress,
            logger=self.logger,
        )
        return await crawler.crawl()
