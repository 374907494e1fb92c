"""Infer track metadata from folder and file naming conventions.

Handles folder/file layouts like:
  "Artist - Album (Year) [Format] {Catalog}/01 - Title.flac"
  "Artist/Album (Year)/01. Title.flac"
  "Artist/Album/Disc1/01-Title.flac"
  "01 Title.mp3", "Artist - Title.mp3"

The result is best effort: for exotic naming schemes attribution may be wrong.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from cloud_sources.constants import UNKNOWN_ARTIST, UNKNOWN_TRACK
from cloud_sources.helpers.util import safe_unquote, strip_query, strip_trailing_slash
from cloud_sources.models.source import Track

# "Artist - Album (Year) [FLAC] (Deluxe)"
folder_album_pattern = re.compile(
    r"^(.+?)\s*[-–]\s*(.+?)(?:\s*[\(\[]\s*(\d{4})\s*[\)\]])?(?:\s*[\[\(][^\]\)]*[\]\)])*\s*$"
)
year_pattern = re.compile(r"[\(\[]\s*(\d{4})\s*[\)\]]")
bracket_tag_pattern = re.compile(r"\s*[\[\(][^\]\)]*[\]\)]\s*")
dash_suffix_pattern = re.compile(r"\s*[-–]\s*.+$")
extension_pattern = re.compile(r"\.[^.]+$")
# "D1T01 Title", "Disc 1 - 01 Title", "Track 01 - Title", "01 - Title"
disc_track_pattern = re.compile(
    r"^(?:d(?:isc|isk?)?\s*\d+\s*[_-]?\s*)?t?r?a?c?k?\s*(\d+)[_.\s-]+(.+)$", re.IGNORECASE
)
track_pattern = re.compile(r"^(\d{1,3})[_.\s-]+(.+)$")
leading_separator_pattern = re.compile(r"^[-_.\s]+")
artist_title_pattern = re.compile(r"^(.+?)\s+[-–]\s+(.+)$")


@dataclass
class PathMetadata:
    """Metadata derived from the path of a single audio resource."""

    title: str
    artist: str
    album: str
    track_number: int = 0


def get_relative_resource_path(resource_path: str, base_path: str) -> str:
    """Return the (percent-decoded) path of a resource below the base path/url."""
    if "://" in resource_path:
        resource_path = strip_query(resource_path)
    base_path = strip_trailing_slash(base_path)
    if base_path:
        resource_path = resource_path.replace(base_path, "", 1)
    relative_path = safe_unquote(resource_path)
    if relative_path.startswith("/"):
        relative_path = relative_path[1:]
    return relative_path


def _strip_bracket_tags(value: str) -> str:
    return bracket_tag_pattern.sub("", value).strip()


def infer_metadata(resource_path: str, base_path: str, fallback_album: str = "") -> PathMetadata:
    """
    Infer title, artist, album and track number of a resource from its path.

    Folders are walked from the outermost inwards. An "Artist - Album" folder sets
    both artist and album when it is the first folder, a deeper match only sets the
    album. Plain folders are an artist when they are the first of several folders and
    an album otherwise. The filename provides the track number and title.
    Never raises, always returns usable defaults.
    """
    parts = get_relative_resource_path(resource_path, base_path).split("/")
    file_name = extension_pattern.sub("", parts[-1])
    folder_parts = parts[:-1]

    artist = UNKNOWN_ARTIST
    album = ""
    year = ""

    for index, part in enumerate(folder_parts):
        if match := folder_album_pattern.match(part):
            candidate_artist = match.group(1).strip()
            candidate_album = _strip_bracket_tags(match.group(2).strip())
            candidate_year = match.group(3)
            if not candidate_year and (year_match := year_pattern.search(part)):
                candidate_year = year_match.group(1)
            if index == 0 and len(folder_parts) == 1:
                artist = candidate_artist
                album = candidate_album
            elif index == 0:
                # a more specific (deeper) album folder may still override the album
                artist = candidate_artist
                album = candidate_album or folder_parts[1]
            else:
                album = candidate_album
            if candidate_year:
                year = candidate_year
        else:
            clean_part = _strip_bracket_tags(part)
            if year_match := year_pattern.search(part):
                year = year_match.group(1)
            if index == 0 and len(folder_parts) > 1:
                artist = clean_part or artist
            elif index > 0 or len(folder_parts) == 1:
                album = clean_part or album

    if not album and folder_parts:
        deepest = folder_parts[-1]
        album = dash_suffix_pattern.sub("", bracket_tag_pattern.sub("", deepest)).strip()
        if not year and (year_match := year_pattern.search(deepest)):
            year = year_match.group(1)

    track_number = 0
    title = file_name
    if (match := disc_track_pattern.match(file_name)) and match.group(2):
        track_number = int(match.group(1))
        title = match.group(2).strip()
    elif (match := track_pattern.match(file_name)) and match.group(2):
        track_number = int(match.group(1))
        title = leading_separator_pattern.sub("", match.group(2)).strip()

    if artist == UNKNOWN_ARTIST and not folder_parts:
        if match := artist_title_pattern.match(title):
            artist = match.group(1).strip()
            title = match.group(2).strip()

    if album and year and year not in album:
        album = f"{album} ({year})"

    return PathMetadata(
        title=title or file_name or UNKNOWN_TRACK,
        artist=artist or UNKNOWN_ARTIST,
        album=album or fallback_album or "",
        track_number=track_number,
    )


def create_track(
    resource_path: str, base_path: str, external_id: str, fallback_album: str = ""
) -> Track:
    """Create a Track for a path based resource, with metadata inferred from its path."""
    metadata = infer_metadata(resource_path, base_path, fallback_album)
    return Track(
        title=metadata.title,
        artist=metadata.artist,
        album=metadata.album,
        track_number=metadata.track_number,
        external_id=external_id,
    )
