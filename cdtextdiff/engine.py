"""Pack-by-pack comparison of two parsed CD-TEXT documents."""

from __future__ import annotations

from itertools import groupby, zip_longest

from .types import (
    CdTextDiffByteDelta,
    CdTextDiffPackDelta,
    CdTextDiffReport,
    CompareMode,
    ParsedCdTextDocument,
    ParsedCdTextPack,
)

SIZE_INFO_PACK_TYPE = 0x8F

_CRC_MISMATCH = "One side contains CRC bytes and the other side does not."
_LENGTH_MISMATCH = "Pack byte length differs."
_RECONSTRUCTED_NOTE = (
    "At least one side is rebuilt from captured reference metadata rather than "
    "parsed from raw lead-in pack bytes."
)


def _collapsed_pack_type_groups(document: ParsedCdTextDocument) -> list[int]:
    return [pack_type for pack_type, _ in groupby(p.pack_type() for p in document.packs)]


def _pack_count_for_type(document: ParsedCdTextDocument, pack_type: int) -> int:
    return sum(1 for pack in document.packs if pack.pack_type() == pack_type)


def _unique_pack_sizes(document: ParsedCdTextDocument) -> list[int]:
    return sorted({len(pack.data) for pack in document.packs})


def _format_groups(groups: list[int]) -> str:
    return ", ".join(f"0x{value:02x}".upper() for value in groups)


def _append_byte_delta(delta: CdTextDiffPackDelta, offset: int, left: int, right: int) -> None:
    if left != right:
        delta.byte_deltas.append(CdTextDiffByteDelta(offset, left, right))


def _append_all_byte_deltas(delta: CdTextDiffPackDelta) -> None:
    pairs = zip_longest(delta.left.data, delta.right.data, fillvalue=-1)
    for offset, (left, right) in enumerate(pairs):
        _append_byte_delta(delta, offset, left, right)


def _schema_notes(left: ParsedCdTextDocument, right: ParsedCdTextDocument) -> list[str]:
    notes: list[str] = []

    if left.block_count() != right.block_count():
        notes.append(
            f"Block count differs: left={left.block_count()} right={right.block_count()}"
        )

    left_crc = left.has_any_crc()
    right_crc = right.has_any_crc()
    if left_crc != right_crc:
        notes.append(
            f"CRC presence differs: left={'yes' if left_crc else 'no'} "
            f"right={'yes' if right_crc else 'no'}"
        )

    left_groups = _collapsed_pack_type_groups(left)
    right_groups = _collapsed_pack_type_groups(right)
    if left_groups != right_groups:
        notes.append(
            f"Collapsed pack type groups differ: left=[{_format_groups(left_groups)}] "
            f"right=[{_format_groups(right_groups)}]"
        )

    left_size_info = _pack_count_for_type(left, SIZE_INFO_PACK_TYPE)
    right_size_info = _pack_count_for_type(right, SIZE_INFO_PACK_TYPE)
    if left_size_info != right_size_info:
        notes.append(
            f"SIZE_INFO pack count differs: left={left_size_info} right={right_size_info}"
        )

    left_sizes = _unique_pack_sizes(left)
    right_sizes = _unique_pack_sizes(right)
    if left_sizes != right_sizes:
        notes.append(
            "Pack byte sizes differ: "
            f"left=[{', '.join(map(str, left_sizes))}] "
            f"right=[{', '.join(map(str, right_sizes))}]"
        )

    return notes


def _structure_delta(delta: CdTextDiffPackDelta) -> None:
    left, right = delta.left, delta.right
    _append_byte_delta(delta, 0, left.pack_type(), right.pack_type())
    _append_byte_delta(delta, 1, left.track_number(), right.track_number())
    _append_byte_delta(delta, 2, left.sequence_number(), right.sequence_number())
    _append_byte_delta(delta, 3, left.block_byte(), right.block_byte())

    if left.has_crc != right.has_crc:
        delta.reason = _CRC_MISMATCH

    if len(left.data) != len(right.data):
        delta.reason = _LENGTH_MISMATCH
        _append_all_byte_deltas(delta)
    elif SIZE_INFO_PACK_TYPE in (left.pack_type(), right.pack_type()):
        _append_all_byte_deltas(delta)


def _exact_delta(delta: CdTextDiffPackDelta) -> None:
    _append_all_byte_deltas(delta)
    if delta.left.has_crc != delta.right.has_crc:
        delta.reason = _CRC_MISMATCH


def compare(
    left: ParsedCdTextDocument,
    right: ParsedCdTextDocument,
    mode: CompareMode = CompareMode.EXACT,
) -> CdTextDiffReport:
    """Compare two documents and report every difference found under ``mode``."""
    report = CdTextDiffReport(left=left, right=right, mode=mode, identical=True)

    if left.reconstructed_from_reference_metadata or right.reconstructed_from_reference_metadata:
        report.document_notes.append(_RECONSTRUCTED_NOTE)

    if mode is CompareMode.SCHEMA:
        notes = _schema_notes(left, right)
        if notes:
            report.identical = False
            report.document_notes.extend(notes)
        return report

    if left.pack_count() != right.pack_count():
        report.identical = False
        report.document_notes.append(
            f"Pack count differs: left={left.pack_count()} right={right.pack_count()}"
        )

    pairs = zip_longest(left.packs, right.packs)
    for index, (left_pack, right_pack) in enumerate(pairs):
        if left_pack is None or right_pack is None:
            report.pack_deltas.append(
                CdTextDiffPackDelta(
                    pack_index=index,
                    reason=(
                        "Pack missing on left side."
                        if left_pack is None
                        else "Pack missing on right side."
                    ),
                    left=left_pack if left_pack is not None else ParsedCdTextPack(),
                    right=right_pack if right_pack is not None else ParsedCdTextPack(),
                )
            )
            report.identical = False
            continue

        delta = CdTextDiffPackDelta(pack_index=index, left=left_pack, right=right_pack)
        if mode is CompareMode.STRUCTURE:
            _structure_delta(delta)
        else:
            _exact_delta(delta)

        if delta.byte_deltas:
            report.identical = False
            report.pack_deltas.append(delta)

    return report