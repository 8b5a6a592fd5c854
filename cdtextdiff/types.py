"""Data model for parsed CD-TEXT pack documents and diff reports."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

_PACK_TYPE_LABELS = {
    0x80: "TITLE",
    0x81: "PERFORMER",
    0x82: "SONGWRITER",
    0x83: "COMPOSER",
    0x84: "ARRANGER",
    0x85: "MESSAGE",
    0x86: "DISC_ID",
    0x87: "GENRE",
    0x8E: "UPC_ISRC",
    0x8F: "SIZE_INFO",
}


class InputFormat(Enum):
    """Supported CD-TEXT input sources."""

    CDT = "cdt"
    PACKS_JSON = "packs-json"
    SAMPLE_DUMP = "sample-dump"
    REFERENCE_SAMPLE = "reference-sample"


class CompareMode(Enum):
    """How strictly two documents are compared."""

    EXACT = "exact"
    STRUCTURE = "structure"
    SCHEMA = "schema"


_INPUT_FORMAT_DESCRIPTIONS = {
    InputFormat.CDT: "Compiled CD-TEXT binary or raw pack blob",
    InputFormat.PACKS_JSON: "CDManager exported pack JSON",
    InputFormat.SAMPLE_DUMP: "Legacy CCD/CDM CDText dump",
    InputFormat.REFERENCE_SAMPLE: (
        "Captured reference sample directory rebuilt from parsed metadata, "
        "not direct raw lead-in packs"
    ),
}


def _hex2(value: int) -> str:
    return f"{value:02X}"


def _hex_byte(value: int) -> str:
    return "--" if value < 0 else _hex2(value)


@dataclass
class ParsedCdTextPack:
    """One CD-TEXT pack as read from some input, with or without CRC bytes."""

    data: bytes = b""
    has_crc: bool = False
    source_index: int = 0
    source_label: str = ""

    def is_valid(self) -> bool:
        return len(self.data) >= 4

    def pack_type(self) -> int:
        return self.data[0] if self.is_valid() else 0

    def track_number(self) -> int:
        return self.data[1] if len(self.data) >= 2 else 0

    def sequence_number(self) -> int:
        return self.data[2] if len(self.data) >= 3 else 0

    def block_byte(self) -> int:
        return self.data[3] if len(self.data) >= 4 else 0

    def block_number(self) -> int:
        return (self.block_byte() >> 4) & 0x0F

    def character_position(self) -> int:
        return self.block_byte() & 0x0F

    def pack_type_label(self) -> str:
        pack_type = self.pack_type()
        label = _PACK_TYPE_LABELS.get(pack_type)
        if label is not None:
            return label
        return f"0x{pack_type:02x}".upper()

    def type_key(self) -> str:
        """Label plus hex type, as used in fingerprint counts."""
        return f"{self.pack_type_label()}(0x{self.pack_type():02x})".upper()

    def byte_hex(self) -> str:
        return self.data.hex(" ").upper()

    def core_hex(self) -> str:
        return self.data[:16].hex(" ").upper()

    def to_json(self) -> dict[str, Any]:
        return {
            "sourceIndex": self.source_index,
            "sourceLabel": self.source_label,
            "hasCrc": self.has_crc,
            "packType": self.pack_type(),
            "packTypeLabel": self.pack_type_label(),
            "trackNumber": self.track_number(),
            "sequenceNumber": self.sequence_number(),
            "blockByte": self.block_byte(),
            "blockNumber": self.block_number(),
            "characterPosition": self.character_position(),
            "rawHex": self.data.hex().upper(),
            "bytes": list(self.data),
        }


def _pack_type_counts(document: ParsedCdTextDocument) -> dict[str, int]:
    counts = Counter(pack.type_key() for pack in document.packs)
    return dict(sorted(counts.items()))


def _block_summaries(document: ParsedCdTextDocument) -> list[dict[str, Any]]:
    summaries: dict[int, dict[str, Any]] = {}
    for pack in document.packs:
        summary = summaries.setdefault(
            pack.block_number(),
            {"packCount": 0, "min": 255, "max": -1, "types": Counter()},
        )
        summary["packCount"] += 1
        summary["min"] = min(summary["min"], pack.sequence_number())
        summary["max"] = max(summary["max"], pack.sequence_number())
        summary["types"][pack.type_key()] += 1

    return [
        {
            "blockNumber": block,
            "packCount": summary["packCount"],
            "sequenceMin": -1 if summary["min"] == 255 else summary["min"],
            "sequenceMax": summary["max"],
            "packTypeCounts": dict(sorted(summary["types"].items())),
        }
        for block, summary in sorted(summaries.items())
    ]


def _sequence_summary(document: ParsedCdTextDocument) -> dict[str, int]:
    if not document.packs:
        return {"min": -1, "max": -1}
    sequences = [pack.sequence_number() for pack in document.packs]
    return {"min": min(min(sequences), 255), "max": max(sequences)}


def _counts_text(counts: dict[str, int]) -> str:
    return ", ".join(f"{key}={value}" for key, value in sorted(counts.items()))


def _pack_type_counts_text(document: ParsedCdTextDocument) -> str:
    return _counts_text(_pack_type_counts(document))


def _block_summaries_text(document: ParsedCdTextDocument) -> str:
    return " | ".join(
        f"block{block['blockNumber']} packs={block['packCount']} "
        f"seq={block['sequenceMin']}..{block['sequenceMax']} "
        f"[{_counts_text(block['packTypeCounts'])}]"
        for block in _block_summaries(document)
    )


@dataclass
class ParsedCdTextDocument:
    """An ordered list of packs read from one source."""

    input_format: InputFormat = InputFormat.CDT
    source_path: str = ""
    packs: list[ParsedCdTextPack] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    reconstructed_from_reference_metadata: bool = False

    def has_any_crc(self) -> bool:
        return any(pack.has_crc for pack in self.packs)

    def pack_count(self) -> int:
        return len(self.packs)

    def block_count(self) -> int:
        if not self.packs:
            return 0
        return max(pack.block_number() for pack in self.packs) + 1

    def to_json(self) -> dict[str, Any]:
        return {
            "format": input_format_name(self.input_format),
            "formatDescription": input_format_description(self.input_format),
            "sourcePath": self.source_path,
            "packCount": self.pack_count(),
            "blockCount": self.block_count(),
            "hasAnyCrc": self.has_any_crc(),
            "reconstructedFromReferenceMetadata": self.reconstructed_from_reference_metadata,
            "sequenceSummary": _sequence_summary(self),
            "packTypeCounts": _pack_type_counts(self),
            "blockSummaries": _block_summaries(self),
            "notes": list(self.notes),
            "packs": packs_to_json(self.packs),
        }


@dataclass
class CdTextDiffByteDelta:
    """A single differing byte; -1 marks a byte absent on that side."""

    byte_offset: int = 0
    left_value: int = -1
    right_value: int = -1


@dataclass
class CdTextDiffPackDelta:
    """Differences found between the packs at one index."""

    pack_index: int = 0
    reason: str = ""
    left: ParsedCdTextPack = field(default_factory=ParsedCdTextPack)
    right: ParsedCdTextPack = field(default_factory=ParsedCdTextPack)
    byte_deltas: list[CdTextDiffByteDelta] = field(default_factory=list)

    def identical(self) -> bool:
        return not self.reason and not self.byte_deltas

    def to_json(self) -> dict[str, Any]:
        return {
            "packIndex": self.pack_index,
            "reason": self.reason,
            "left": self.left.to_json(),
            "right": self.right.to_json(),
            "byteDeltas": [
                {
                    "byteOffset": delta.byte_offset,
                    "leftValue": delta.left_value,
                    "rightValue": delta.right_value,
                }
                for delta in self.byte_deltas
            ],
        }


@dataclass
class CdTextDiffReport:
    """Outcome of comparing two documents."""

    left: ParsedCdTextDocument = field(default_factory=ParsedCdTextDocument)
    right: ParsedCdTextDocument = field(default_factory=ParsedCdTextDocument)
    mode: CompareMode = CompareMode.EXACT
    identical: bool = False
    pack_deltas: list[CdTextDiffPackDelta] = field(default_factory=list)
    document_notes: list[str] = field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        return {
            "compareMode": compare_mode_name(self.mode),
            "identical": self.identical,
            "notes": list(self.document_notes),
            "left": self.left.to_json(),
            "right": self.right.to_json(),
            "packDeltas": [delta.to_json() for delta in self.pack_deltas],
        }

    def to_text(self) -> str:
        verdict = "identical" if self.identical else "different"
        lines = [
            f"CD-TEXT compare result ({compare_mode_name(self.mode)}): {verdict}",
            f"Left : {self.left.source_path} ({self.left.pack_count()} packs)",
            f"Right: {self.right.source_path} ({self.right.pack_count()} packs)",
            f"Left fingerprint : {_pack_type_counts_text(self.left)}",
            f"Right fingerprint: {_pack_type_counts_text(self.right)}",
            f"Left blocks : {_block_summaries_text(self.left)}",
            f"Right blocks: {_block_summaries_text(self.right)}",
        ]
        lines.extend(f"Note : {note}" for note in self.document_notes)

        if self.identical:
            return "\n".join(lines)

        for delta in self.pack_deltas:
            lines.append(f"--- pack {delta.pack_index} ---")
            if delta.reason:
                lines.append(f"Reason: {delta.reason}")
            lines.append(f"Left : {delta.left.byte_hex()}")
            lines.append(f"Right: {delta.right.byte_hex()}")
            lines.extend(
                f"  byte[{byte_delta.byte_offset}]: "
                f"{_hex_byte(byte_delta.left_value)} -> {_hex_byte(byte_delta.right_value)}"
                for byte_delta in delta.byte_deltas
            )
        return "\n".join(lines)


def input_format_name(input_format: InputFormat) -> str:
    return input_format.value


def input_format_description(input_format: InputFormat) -> str:
    return _INPUT_FORMAT_DESCRIPTIONS.get(input_format, "Unknown")


def compare_mode_name(mode: CompareMode) -> str:
    return mode.value


def packs_to_json(packs: list[ParsedCdTextPack]) -> list[dict[str, Any]]:
    return [pack.to_json() for pack in packs]