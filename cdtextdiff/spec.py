"""Building projects from JSON specs and built-in fixtures."""

from __future__ import annotations

from typing import Any

from .project import CdProject, CdTextLanguage, Track

TWO_TRACK_JAPANESE = "two-track-japanese"


class ProjectSpecError(ValueError):
    """Raised when a project spec or fixture name cannot produce a project."""


def _value_str(obj: dict[str, Any], key: str, default: str = "") -> str:
    value = obj.get(key)
    return value if isinstance(value, str) else default


def _value_bool(obj: dict[str, Any], key: str, default: bool) -> bool:
    value = obj.get(key)
    return value if isinstance(value, bool) else default


def _value_int(obj: dict[str, Any], key: str, default: int) -> int:
    value = obj.get(key)
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return default


def _track_from_json(track_object: dict[str, Any], index: int) -> Track:
    number = _value_int(track_object, "number", index + 1)
    artist = _value_str(track_object, "artist") or _value_str(track_object, "performer")
    return Track(
        number=number,
        file_path=_value_str(track_object, "filePath", f"/music/track-{number:02d}.wav"),
        title=_value_str(track_object, "title"),
        artist=artist,
        title_present=_value_bool(track_object, "titlePresent", True),
        artist_present=_value_bool(track_object, "artistPresent", True),
        duration_seconds=_value_int(track_object, "durationSeconds", 180),
    )


def project_from_json(spec: dict[str, Any]) -> CdProject:
    """Build a project from a JSON spec; raise ProjectSpecError if it has no tracks."""
    language_name = _value_str(spec, "cdTextLanguage", "japanese").lower()
    language = (
        CdTextLanguage.LATIN if language_name == "latin" else CdTextLanguage.JAPANESE
    )

    track_values = spec.get("tracks")
    if not isinstance(track_values, list) or not track_values:
        raise ProjectSpecError("Project JSON must contain at least one track.")

    tracks = [
        _track_from_json(item if isinstance(item, dict) else {}, index)
        for index, item in enumerate(track_values)
    ]

    return CdProject(
        album_title=_value_str(spec, "albumTitle") or _value_str(spec, "title"),
        album_artist=_value_str(spec, "albumArtist") or _value_str(spec, "albumPerformer"),
        album_title_present=_value_bool(spec, "albumTitlePresent", True),
        album_artist_present=_value_bool(spec, "albumArtistPresent", True),
        cd_text_language=language,
        track_gap_seconds=_value_int(spec, "trackGapSeconds", 2),
        allow_overburn=_value_bool(spec, "allowOverburn", False),
        tracks=tracks,
    )


def two_track_japanese_project() -> CdProject:
    """A small Japanese album with fullwidth text and empty track artists."""
    return CdProject(
        album_title="Ａｔａｒａｙｏ　ＣＯＬＬＥＣＴＩＯＮ　０１",
        album_artist="あたらよ",
        album_title_present=True,
        album_artist_present=True,
        cd_text_language=CdTextLanguage.JAPANESE,
        track_gap_seconds=2,
        allow_overburn=False,
        tracks=[
            Track(1, "/music/01-akanechirru.wav", "アカネチル", "", True, True, 259),
            Track(2, "/music/02-88.wav", "８．８", "", True, True, 354),
        ],
    )


_FIXTURES = {
    TWO_TRACK_JAPANESE: two_track_japanese_project,
}


def fixture_project(name: str) -> CdProject:
    """Return the built-in fixture called ``name``; raise ProjectSpecError if unknown."""
    builder = _FIXTURES.get(name)
    if builder is None:
        raise ProjectSpecError(f"Unknown fixture: {name}")
    return builder()


def project_summary_json(project: CdProject) -> dict[str, Any]:
    """Short JSON summary of a project as used in export reports."""
    return {
        "albumTitle": project.album_title,
        "albumArtist": project.album_artist,
        "trackGapSeconds": project.track_gap_seconds,
        "allowOverburn": project.allow_overburn,
        "trackCount": len(project.tracks),
    }