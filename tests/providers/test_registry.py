"""Tests for the registry of supported source types."""

import pytest
from music_assistant_models.enums import ConfigEntryType
from music_assistant_models.errors import InvalidDataError

from cloud_sources.models.source import SourceType
from cloud_sources.providers import SOURCE_TYPES, get_source_type


def test_all_source_types_registered() -> None:
    """Test every SourceType has a provider with a label and fields."""
    assert set(SOURCE_TYPES) == set(SourceType)
    for source_type, provider in SOURCE_TYPES.items():
        assert provider.type == source_type
        assert provider.domain == source_type.value
        assert provider.label
        assert provider.fields


def test_get_source_type() -> None:
    """Test lookup by enum or persisted string, unknown types raise."""
    assert get_source_type("webdav") is SOURCE_TYPES[SourceType.WEBDAV]
    assert get_source_type(SourceType.S3) is SOURCE_TYPES[SourceType.S3]
    with pytest.raises(InvalidDataError):
        get_source_type("ftp")


def test_recursive_source_types() -> None:
    """Test only crawling source types report progress."""
    assert {x.type for x in SOURCE_TYPES.values() if x.is_recursive} == {
        SourceType.HTTP_INDEX,
        SourceType.WEBDAV,
    }


def test_config_entries() -> None:
    """Test fields are exposed as config entries in their declared order."""
    entries = get_source_type(SourceType.JELLYFIN).get_config_entries()
    assert [x.key for x in entries] == ["baseUrl", "apiKey", "userId"]
    assert entries[1].type == ConfigEntryType.SECURE_STRING
    assert entries[0].type == ConfigEntryType.STRING
    assert all(x.required for x in entries)

    entries = get_source_type(SourceType.HTTP_INDEX).get_config_entries()
    assert [x.required for x in entries] == [True, False, False]
