"""HTTP file server (directory index) SourceType for Cloud Sources."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cloud_sources.constants import CONF_BASE_URL, CONF_PASSWORD, CONF_USERNAME
from cloud_sources.helpers.metadata import create_track
from cloud_sources.helpers.util import (
    add_url_credentials,
    basic_auth_header,
    ensure_trailing_slash,
)
from cloud_sources.models.source import SourceType
from cloud_sources.models.source_type import (
    FieldKind,
    SourceField,
    SourceTypeProvider,
    config_value,
)
from cloud_sources.providers.http_index.crawler import HtmlIndexCrawler

if TYPE_CHECKING:
    from collections.abc import Mapping

    from cloud_sources.models.source import Source, Track
    from cloud_sources.models.source_type import ScanContext


class HttpIndexProvider(SourceTypeProvider):
    """Nginx/Apache/Caddy directory listing, crawled for audio files.

    The external id of a track is the full url of the audio file.
    """

    type = SourceType.HTTP_INDEX
    label = "HTTP File Server"
    description = "Nginx/Apache/Caddy directory listing. Scans HTML links to find audio files."
    fields = (
        SourceField(
            key=CONF_BASE_URL,
            label="Server URL",
            placeholder="https://music.myserver.com/",
            help="URL of the directory index page",
            required=True,
        ),
        SourceField(
            key=CONF_USERNAME,
            label="Username (optional)",
            placeholder="admin",
            help="For HTTP Basic Auth",
        ),
        SourceField(
            key=CONF_PASSWORD,
            label="Password (optional)",
            kind=FieldKind.PASSWORD,
            help="For HTTP Basic Auth",
        ),
    )
    is_recursive = True

    def build_stream_url(self, config: Mapping[str, str], external_id: str) -> str:
        """Build the playable url for an external id."""
        username = config_value(config, CONF_USERNAME)
        password = config_value(config, CONF_PASSWORD)
        if username and password:
            return add_url_credentials(external_id, username, password)
        return external_id

    def build_headers(self, config: Mapping[str, str]) -> dict[str, str]:
        """Build the (auth) headers needed for requests to this source."""
        username = config_value(config, CONF_USERNAME)
        password = config_value(config, CONF_PASSWORD)
        if username and password:
            return {"Authorization": basic_auth_header(username, password)}
        return {}

    async def scan(self, source: Source, context: ScanContext) -> list[Track]:
        """Crawl the directory index of the source."""
        base_url = ensure_trailing_slash(source.get_value(CONF_BASE_URL))
        crawler = HtmlIndexCrawler(
            context.http,
            base_url,
            build_track=lambda url: create_track(url, base_url, url, source.name),
            headers=self.build_headers(source.config),
            max_depth=context.max_depth,
            on_progress=context.on_progress,
            logger=self.logger,
        )
        return await crawler.crawl()
