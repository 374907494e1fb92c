"""All constants for Cloud Sources."""

import re
from typing import Final

from music_assistant_models.config_entries import ConfigEntry, ConfigValueOption
from music_assistant_models.enums import ConfigEntryType

LOGGER_NAME: Final[str] = "cloud_sources"
VERBOSE_LOG_LEVEL: Final[int] = 5

# every source_type we write into the host library starts with this tag
SLUG_PREFIX: Final[str] = "custom-"

UNKNOWN_ARTIST: Final[str] = "Unknown Artist"
UNKNOWN_TRACK: Final[str] = "Unknown Track"
UNKNOWN_TITLE: Final[str] = "Unknown"

# source config keys (these are persisted, keep them stable)
CONF_BASE_URL: Final[str] = "baseUrl"
CONF_USERNAME: Final[str] = "username"
CONF_PASSWORD: Final[str] = "password"
CONF_API_KEY: Final[str] = "apiKey"
CONF_USER_ID: Final[str] = "userId"
CONF_AUTH_PARAM: Final[str] = "authParam"
CONF_TRACKS_ENDPOINT: Final[str] = "tracksEndpoint"
CONF_STREAM_ENDPOINT: Final[str] = "streamEndpoint"
CONF_URL_LIST: Final[str] = "urlList"
CONF_AUTH_HEADER: Final[str] = "authHeader"

# session config keys
CONF_LOG_LEVEL: Final[str] = "log_level"
CONF_MAX_CRAWL_DEPTH: Final[str] = "max_crawl_depth"
CONF_SCAN_LIMIT: Final[str] = "scan_limit"
CONF_STORAGE_KEY: Final[str] = "storage_key"
CONF_VERIFY_SSL: Final[str] = "verify_ssl"

# config default values
DEFAULT_MAX_CRAWL_DEPTH: Final[int] = 8
DEFAULT_SCAN_LIMIT: Final[int] = 500
DEFAULT_STORAGE_KEY: Final[str] = "cc-sources"
DEFAULT_TRACKS_ENDPOINT: Final[str] = "/tracks"
DEFAULT_STREAM_ENDPOINT: Final[str] = "/stream/{id}"

# missing track numbers sort after everything else
TRACK_NUMBER_SORT_SENTINEL: Final[int] = 999_999

AUDIO_EXTENSIONS: Final[tuple[str, ...]] = (
    "mp3",
    "flac",
    "ogg",
    "m4a",
    "aac",
    "wav",
    "opus",
    "wma",
    "aiff",
    "alac",
)
AUDIO_EXTENSION_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"\.(?:" + "|".join(AUDIO_EXTENSIONS) + r")(?:\?.*)?$", re.IGNORECASE
)

SUBSONIC_API_VERSION: Final[str] = "1.16.1"
SUBSONIC_CLIENT_NAME: Final[str] = "cloudsources"

# query parameters that carry secrets and are masked in log output
SECRET_QUERY_PARAMS: Final[tuple[str, ...]] = (
    "api_key",
    "apikey",
    "p",
    "t",
    "s",
    "token",
    "x-amz-signature",
    "x-amz-credential",
    "sig",
)


####### REUSABLE CONFIG ENTRIES #######

CONF_ENTRY_LOG_LEVEL = ConfigEntry(
    key=CONF_LOG_LEVEL,
    type=ConfigEntryType.STRING,
    label="Log level",
    options=(
        ConfigValueOption("global", "GLOBAL"),
        ConfigValueOption("info", "INFO"),
        ConfigValueOption("warning", "WARNING"),
        ConfigValueOption("error", "ERROR"),
        ConfigValueOption("debug", "DEBUG"),
        ConfigValueOption("verbose", "VERBOSE"),
    ),
    default_value="GLOBAL",
    category="advanced",
)

CONF_ENTRY_MAX_CRAWL_DEPTH = ConfigEntry(
    key=CONF_MAX_CRAWL_DEPTH,
    type=ConfigEntryType.INTEGER,
    label="Maximum folder depth",
    description="Folders nested deeper than this below the base URL are not crawled.",
    default_value=DEFAULT_MAX_CRAWL_DEPTH,
    required=False,
    category="advanced",
)

CONF_ENTRY_SCAN_LIMIT = ConfigEntry(
    key=CONF_SCAN_LIMIT,
    type=ConfigEntryType.INTEGER,
    label="Maximum number of tracks requested from media servers",
    default_value=DEFAULT_SCAN_LIMIT,
    required=False,
    category="advanced",
)

CONF_ENTRY_STORAGE_KEY = ConfigEntry(
    key=CONF_STORAGE_KEY,
    type=ConfigEntryType.STRING,
    label="Storage key for the source list",
    default_value=DEFAULT_STORAGE_KEY,
    required=False,
    category="advanced",
)

CONF_ENTRY_VERIFY_SSL = ConfigEntry(
    key=CONF_VERIFY_SSL,
    type=ConfigEntryType.BOOLEAN,
    label="Verify SSL certificates",
    description="Disable for self-hosted servers with self-signed certificates.",
    default_value=True,
    required=False,
    category="advanced",
)

CONFIG_ENTRIES = (
    CONF_ENTRY_LOG_LEVEL,
    CONF_ENTRY_MAX_CRAWL_DEPTH,
    CONF_ENTRY_SCAN_LIMIT,
    CONF_ENTRY_STORAGE_KEY,
    CONF_ENTRY_VERIFY_SSL,
)
