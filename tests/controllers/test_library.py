"""Tests for importing tracks into the host library."""

from aiohttp import ClientSession

from cloud_sources import CloudSources
from cloud_sources.models.source import Source, SourceType, Track

SOURCE = Source(
    id="src-1",
    name="My NAS",
    type=SourceType.HTTP_INDEX,
    slug="custom-my-nas",
    config={"baseUrl": "https://nas.example/music/"},
)


def create_tracks(*external_ids: str) -> list[Track]:
    """Return a track per external id."""
    return [Track(title=f"Track {x}", external_id=x) for x in external_ids]


async def test_refresh_index(cloud_sources: CloudSources, library) -> None:
    """Test only tracks of custom sources are indexed."""
    library.tracks.extend(
        [
            {"source_type": "custom-my-nas", "external_id": "a"},
            {"source_type": "custom-other", "external_id": "b"},
            {"source_type": "spotify", "external_id": "c"},
            {"source_type": "custom-broken"},
            "garbage",
        ]
    )

    await cloud_sources.library_index.refresh_index()

    assert cloud_sources.library_index.known_ids == {"a", "b"}
    tracks = create_tracks("a", "c", "d")
    assert [x.external_id for x in cloud_sources.library_index.filter_new(tracks)] == ["c", "d"]
    assert cloud_sources.library_index.count_new(tracks) == 2


async def test_save_tracks(cloud_sources: CloudSources, library) -> None:
    """Test tracks are added once and the index follows the library."""
    tracks = create_tracks("a", "b")
    tracks[0].artist = "Artist"
    tracks[0].duration = 123

    assert await cloud_sources.library_index.save_tracks(SOURCE, tracks) == 2
    assert library.tracks[0] == {
        "title": "Track a",
        "artist": "Artist",
        "album": "",
        "track_number": 0,
        "duration": 123,
        "cover_url": "",
        "source_type": "custom-my-nas",
        "external_id": "a",
    }
    assert cloud_sources.library_index.is_known("b")

    # saving a known track is a no-op
    assert not await cloud_sources.library_index.save_track(SOURCE, tracks[0])
    assert await cloud_sources.library_index.save_tracks(SOURCE, create_tracks("b", "c")) == 1
    assert [x["external_id"] for x in library.tracks] == ["a", "b", "c"]


async def test_save_track_failing_library(cloud_sources: CloudSources, library) -> None:
    """Test a library that refuses a track does not mark it as imported."""

    async def add_external_track(track: dict) -> None:
        raise RuntimeError("disk full")

    library.add_external_track = add_external_track

    assert not await cloud_sources.library_index.save_track(SOURCE, create_tracks("a")[0])
    assert not cloud_sources.library_index.is_known("a")


async def test_play_track(cloud_sources: CloudSources, player) -> None:
    """Test a track is handed to the host player."""
    track = create_tracks("a")[0]
    assert await cloud_sources.library_index.play_track(SOURCE, track)
    assert player.played == [track.to_library_item("custom-my-nas")]


async def test_without_library(http_session: ClientSession) -> None:
    """Test a session without host library or player does nothing."""
    cs = CloudSources(http_session)
    await cs.setup()
    track = create_tracks("a")[0]
    assert not await cs.library_index.save_track(SOURCE, track)
    assert not await cs.library_index.play_track(SOURCE, track)
    assert cs.library_index.known_ids == frozenset()
