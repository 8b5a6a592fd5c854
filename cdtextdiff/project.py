"""Project, track and CD-TEXT field model, plus validation report types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

_ALL_ENCODABLE_SUMMARY = "All CD-TEXT fields can be encoded as MS-JIS."


class CdTextFieldId(Enum):
    """Which CD-TEXT slot a field fills."""

    ALBUM_TITLE = "album-title"
    ALBUM_ARTIST = "album-artist"
    TRACK_TITLE = "track-title"
    TRACK_ARTIST = "track-artist"


class CdTextLanguage(Enum):
    """Character set family a CD-TEXT block is written in."""

    LATIN = "latin"
    JAPANESE = "japanese"


class CdTextValueState(Enum):
    """Whether a field holds a value, was absent on disc, or was cleared."""

    PRESENT = "present"
    MISSING_ON_DISC = "missing-on-disc"
    EMPTY_BY_EDIT = "empty-by-edit"


@dataclass
class OriginalEncodedBytes:
    """Bytes read from an existing disc, kept so they can be written back unchanged."""

    data: bytes = b""
    source_description: str = ""


@dataclass
class CdTextField:
    """One CD-TEXT value together with its encoding constraints."""

    field_id: CdTextFieldId = CdTextFieldId.ALBUM_TITLE
    label: str = ""
    value: str = ""
    language: CdTextLanguage = CdTextLanguage.JAPANESE
    max_encoded_bytes: int = 80
    track_number: Optional[int] = None
    value_state: CdTextValueState = CdTextValueState.PRESENT
    preserved_bytes: Optional[OriginalEncodedBytes] = None


@dataclass
class Track:
    """One audio track of a project."""

    number: int = 0
    file_path: str = ""
    title: str = ""
    artist: str = ""
    title_present: bool = True
    artist_present: bool = True
    duration_seconds: int = 0


@dataclass
class CdProject:
    """Album-level metadata and the ordered list of tracks."""

    album_title: str = ""
    album_artist: str = ""
    album_title_present: bool = True
    album_artist_present: bool = True
    cd_text_language: CdTextLanguage = CdTextLanguage.JAPANESE
    track_gap_seconds: int = 2
    allow_overburn: bool = False
    tracks: list[Track] = field(default_factory=list)


@dataclass
class EncodedText:
    """Result of encoding one text value."""

    ok: bool = False
    data: bytes = b""
    error_message: str = ""


@dataclass
class ValidationIssue:
    """A problem found with one labelled field."""

    field_label: str = ""
    message: str = ""


@dataclass
class ValidationReport:
    """Outcome of validating every CD-TEXT field of a project."""

    ok: bool = True
    issues: list[ValidationIssue] = field(default_factory=list)

    def summary(self) -> str:
        if self.ok:
            return _ALL_ENCODABLE_SUMMARY
        return "\n".join(f"{issue.field_label}: {issue.message}" for issue in self.issues)