"""Reading captured reference sample directories and comparing SIZE_INFO data."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

from .project import CdProject
from .spec import ProjectSpecError, project_from_json
from .types import ParsedCdTextDocument

SIZE_INFO_PACK_TYPE = 0x8F

SUMMARY_FILE_NAME = "cdtext-summary.json"
DRUTIL_FILE_NAME = "drutil-cdtext.plist"
CDRDAO_FILE_NAME = "cdrdao-cdtext.txt"

_PREVIEW_LIMIT = 8

_CDRDAO_TITLE = re.compile(r'TITLE\s+"([^"]*)"')
_CDRDAO_PERFORMER = re.compile(r'PERFORMER\s+"([^"]*)"')
_CDRDAO_SIZE_INFO = re.compile(r"SIZE_INFO\s*\{([^}]*)\}", re.DOTALL)

_DRUTIL_BLOCK = re.compile(
    r"<dict>\s*<key>Properties</key>\s*<dict>(.*?)</dict>\s*<key>Tracks</key>"
    r"\s*<array>(.*?)</array>\s*</dict>",
    re.DOTALL,
)
_DRUTIL_LANGUAGE = re.compile(r"<key>DRCDTextLanguageKey</key>\s*<string>([^<]*)</string>")
_DRUTIL_CHAR_CODE = re.compile(r"<key>DRCDTextCharacterCodeKey</key>\s*<integer>(\d+)</integer>")
_DRUTIL_TRACK = re.compile(r"<dict>(.*?)</dict>", re.DOTALL)
_DRUTIL_TITLE = re.compile(r"<key>DRCDTextTitleKey</key>\s*<string>([^<]*)</string>")
_DRUTIL_PERFORMER = re.compile(r"<key>DRCDTextPerformerKey</key>\s*<string>([^<]*)</string>")


@dataclass
class ReferenceSampleMetadata:
    """Metadata and notes gathered from a captured reference sample."""

    metadata: dict[str, Any] = field(default_factory=dict)
    notes: list[str] = field(default_factory=list)
    sample_dir: str = ""
    spec: dict[str, Any] = field(default_factory=dict)
    project: CdProject | None = None


def _to_int(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        return 0


def _first_group(pattern: re.Pattern[str], text: str) -> str:
    match = pattern.search(text)
    return match.group(1) if match else ""


def _or_empty(text: str) -> str:
    return text if text else "(empty)"


def _preview(values: list[int]) -> str:
    return ", ".join(str(value) for value in values[:_PREVIEW_LIMIT])


def parse_cdrdao_reference_metadata(text: str) -> ReferenceSampleMetadata:
    """Extract titles, performers and SIZE_INFO groups from a cdrdao CD-TEXT dump."""
    titles = [m.group(1) for m in _CDRDAO_TITLE.finditer(text)]
    performers = [m.group(1) for m in _CDRDAO_PERFORMER.finditer(text)]

    size_info_groups: list[list[int]] = []
    size_info_notes: list[str] = []
    for index, match in enumerate(_CDRDAO_SIZE_INFO.finditer(text)):
        values = [_to_int(part) for part in match.group(1).split(",") if part]
        size_info_groups.append(values)
        size_info_notes.append(
            f"cdrdao block{index} SIZE_INFO count={len(values)} preview=[{_preview(values)}]"
        )

    metadata: dict[str, Any] = {}
    if titles:
        metadata["cdrdaoTitle"] = titles[0]
        metadata["cdrdaoTitles"] = titles
    if performers:
        metadata["cdrdaoPerformer"] = performers[0]
        metadata["cdrdaoPerformers"] = performers
    if size_info_groups:
        metadata["cdrdaoSizeInfo"] = size_info_groups[0]
        metadata["cdrdaoSizeInfoGroups"] = size_info_groups

    notes = [f"cdrdao group count={len(size_info_groups)}"]
    for index in range(len(size_info_groups)):
        title = titles[index] if index < len(titles) else "(missing)"
        performer = performers[index] if index < len(performers) else "(missing)"
        notes.append(
            f"cdrdao block{index} title={_or_empty(title)} performer={_or_empty(performer)}"
        )
    notes.extend(size_info_notes)
    if len(size_info_groups) > 1:
        notes.append(
            "cdrdao dump contains multiple CD-TEXT groups; later groups may carry the real "
            "Japanese payload even if the first group is an empty Latin placeholder."
        )

    return ReferenceSampleMetadata(metadata=metadata, notes=notes)


def parse_drutil_reference_metadata(text: Union[str, bytes]) -> ReferenceSampleMetadata:
    """Extract per-language block summaries from a drutil CD-TEXT plist."""
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")

    blocks: list[dict[str, Any]] = []
    block_notes: list[str] = []
    for block_index, block_match in enumerate(_DRUTIL_BLOCK.finditer(text)):
        properties_text, tracks_text = block_match.group(1), block_match.group(2)
        language = _first_group(_DRUTIL_LANGUAGE, properties_text)
        character_code = _to_int(_first_group(_DRUTIL_CHAR_CODE, properties_text))

        album_title = ""
        album_performer = ""
        non_blank_titles = 0
        non_blank_performers = 0
        for track_index, track_match in enumerate(_DRUTIL_TRACK.finditer(tracks_text)):
            track_text = track_match.group(1)
            title = _first_group(_DRUTIL_TITLE, track_text)
            performer = _first_group(_DRUTIL_PERFORMER, track_text)
            if track_index == 0:
                album_title, album_performer = title, performer
            if title.strip():
                non_blank_titles += 1
            if performer.strip():
                non_blank_performers += 1

        blocks.append(
            {
                "blockNumber": block_index,
                "language": language,
                "characterCode": character_code,
                "albumTitle": album_title,
                "albumPerformer": album_performer,
                "nonBlankTitles": non_blank_titles,
                "nonBlankPerformers": non_blank_performers,
            }
        )
        block_notes.append(
            f"block{block_index} language={_or_empty(language)} char={character_code} "
            f"albumTitle={_or_empty(album_title)} "
            f"albumPerformer={_or_empty(album_performer)} "
            f"nonBlankTitles={non_blank_titles} nonBlankPerformers={non_blank_performers}"
        )

    if not blocks:
        return ReferenceSampleMetadata()

    notes = [f"drutil block count={len(blocks)}"]
    notes.extend(f"drutil {note}" for note in block_notes)
    if len(blocks) > 1:
        notes.append(
            "drutil plist contains multiple language blocks; cdtext-summary.json may only "
            "describe the first block and can underrepresent the real disc structure."
        )
    return ReferenceSampleMetadata(
        metadata={"drutilBlockCount": len(blocks), "drutilBlocks": blocks},
        notes=notes,
    )


def collect_size_info_payload_bytes(document: ParsedCdTextDocument) -> bytes:
    """Concatenate the 12-byte payloads of every complete SIZE_INFO pack."""
    return b"".join(
        pack.data[4:16]
        for pack in document.packs
        if pack.pack_type() == SIZE_INFO_PACK_TYPE and len(pack.data) >= 16
    )


def build_generated_metadata(document: ParsedCdTextDocument) -> dict[str, Any]:
    """Summarise block and SIZE_INFO data of a generated document."""
    size_info = collect_size_info_payload_bytes(document)
    return {
        "blockCount": document.block_count(),
        "sizeInfoPackCount": sum(
            1 for pack in document.packs if pack.pack_type() == SIZE_INFO_PACK_TYPE
        ),
        "sizeInfoValueCount": len(size_info),
        "sizeInfoValues": list(size_info),
    }


def size_info_comparison_notes(
    reference_metadata: dict[str, Any],
    generated_metadata: dict[str, Any],
    document: ParsedCdTextDocument,
) -> list[str]:
    """Notes comparing generated SIZE_INFO values with the cdrdao reference values."""
    reference_values = reference_metadata.get("cdrdaoSizeInfo") or []
    if not reference_values:
        return []

    generated_values = generated_metadata.get("sizeInfoValues") or []
    generated_pack_count = generated_metadata.get("sizeInfoPackCount", 0)

    notes = [
        f"Generated blockCount={generated_metadata.get('blockCount', 0)}",
        f"Generated SIZE_INFO pack(s)={generated_pack_count} "
        f"valueCount={len(generated_values)} "
        f"preview=[{_preview(list(collect_size_info_payload_bytes(document)))}]",
        f"Reference blockCount={document.block_count()}",
        f"Reference SIZE_INFO valueCount={len(reference_values)} "
        f"preview=[{_preview(list(reference_values))}]",
    ]

    if len(generated_values) != len(reference_values):
        notes.append(
            f"SIZE_INFO mismatch: generated value count {len(generated_values)} differs "
            f"from reference {len(reference_values)}. This means the current compare path "
            "is text-synthetic and not yet matching the captured disc-style summary structure."
        )
        return notes

    differing = [
        f"[{index}]{generated}->{reference}"
        for index, (generated, reference) in enumerate(zip(generated_values, reference_values))
        if generated != reference
    ]
    if differing:
        notes.append(
            "SIZE_INFO mismatch: same value count but differing entries "
            + ", ".join(differing)
        )
    return notes


def load_reference_sample_metadata(sample_dir: Union[str, Path]) -> ReferenceSampleMetadata:
    """Load the project summary and captured dumps from a reference sample directory."""
    dir_text = str(sample_dir)
    directory = Path(dir_text)

    summary_path = directory / SUMMARY_FILE_NAME
    try:
        summary_data = summary_path.read_bytes()
    except OSError as exc:
        raise ProjectSpecError(
            f"Failed to open reference sample summary: {summary_path}"
        ) from exc
    try:
        spec_value = json.loads(summary_data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ProjectSpecError(f"Invalid reference sample summary JSON: {exc}") from exc

    spec = spec_value if isinstance(spec_value, dict) else {}
    project = project_from_json(spec)

    result = ReferenceSampleMetadata(sample_dir=dir_text, spec=spec, project=project)
    result.notes.append(f"Reference sample directory: {dir_text}")

    try:
        drutil_data = (directory / DRUTIL_FILE_NAME).read_bytes()
    except OSError:
        result.notes.append(f"{DRUTIL_FILE_NAME} not found in reference sample directory.")
    else:
        drutil = parse_drutil_reference_metadata(drutil_data)
        result.metadata.update(drutil.metadata)
        result.notes.extend(drutil.notes)

    try:
        cdrdao_data = (directory / CDRDAO_FILE_NAME).read_bytes()
    except OSError:
        result.notes.append(f"{CDRDAO_FILE_NAME} not found in reference sample directory.")
    else:
        cdrdao = parse_cdrdao_reference_metadata(
            cdrdao_data.decode("utf-8", errors="replace")
        )
        # The cdrdao dump is the authoritative reference and replaces drutil metadata.
        result.metadata = cdrdao.metadata
        result.notes.extend(cdrdao.notes)

    return result