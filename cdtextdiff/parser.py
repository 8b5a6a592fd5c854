"""Readers that turn CD-TEXT files and dumps into parsed documents."""

from __future__ import annotations

import json
import re
import string
from pathlib import Path
from typing import Any

from .types import InputFormat, ParsedCdTextDocument, ParsedCdTextPack

_HEX_DIGITS = frozenset(string.hexdigits)
_ENTRY_PATTERN = re.compile(r"^Entry\s+(\d+)\s*=\s*(.+)$")


class ParseError(ValueError):
    """Raised when an input cannot be turned into a CD-TEXT document."""


def _parse_hex_bytes(text: str) -> bytes:
    collapsed = "".join(text.split())
    if len(collapsed) % 2 != 0:
        raise ParseError("Hex string length must be even.")

    # Characters that are not hex digits are skipped, as a lenient hex decoder would.
    digits = "".join(ch for ch in collapsed if ch in _HEX_DIGITS)
    if len(digits) % 2:
        digits = "0" + digits
    data = bytes.fromhex(digits)
    if not data and collapsed:
        raise ParseError("Failed to decode hex string.")
    return data


def _json_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return default


def _json_object(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _json_array(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _parse_cdt(data: bytes, source_label: str) -> ParsedCdTextDocument:
    if not data:
        raise ParseError("CDT input is empty.")

    document = ParsedCdTextDocument(input_format=InputFormat.CDT, source_path=source_label)
    if len(data) % 18 == 0:
        pack_size, has_crc = 18, True
        document.notes.append(
            "Input length is divisible by 18; treating as full CD-TEXT packs with CRC."
        )
    elif len(data) % 16 == 0:
        pack_size, has_crc = 16, False
        document.notes.append(
            "Input length is divisible by 16 only; treating as CRC-less raw pack core data."
        )
    else:
        raise ParseError(f"CDT/raw input length {len(data)} is not divisible by 18 or 16.")

    document.packs = [
        ParsedCdTextPack(
            data=data[offset : offset + pack_size],
            has_crc=has_crc,
            source_index=index,
            source_label=f"pack {index}",
        )
        for index, offset in enumerate(range(0, len(data), pack_size))
    ]
    return document


def _parse_packs_json(data: bytes, source_label: str) -> ParsedCdTextDocument:
    try:
        root_value = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ParseError(f"Invalid JSON: {exc}") from exc

    root = _json_object(root_value)
    if "packAssembly" in root:
        pack_array = _json_array(_json_object(root["packAssembly"]).get("packs"))
    elif "packs" in root:
        pack_array = _json_array(root["packs"])
    else:
        raise ParseError("JSON does not contain packAssembly.packs or packs.")

    document = ParsedCdTextDocument(
        input_format=InputFormat.PACKS_JSON, source_path=source_label
    )
    for index, item in enumerate(pack_array):
        pack_object = _json_object(item)
        if "rawHex" in pack_object:
            raw_hex = pack_object["rawHex"]
            try:
                raw = _parse_hex_bytes(raw_hex if isinstance(raw_hex, str) else "")
            except ParseError as exc:
                raise ParseError(f"Pack {index} hex decode failed: {exc}") from exc
        else:
            raw = bytes(
                _json_int(value, 0) & 0xFF for value in _json_array(pack_object.get("bytes"))
            )

        label = pack_object.get("label")
        document.packs.append(
            ParsedCdTextPack(
                data=raw,
                has_crc=len(raw) >= 18,
                source_index=_json_int(pack_object.get("index"), index),
                source_label=label if isinstance(label, str) else f"pack {index}",
            )
        )

    document.notes.append("Parsed CDManager pack export JSON.")
    return document


def _parse_sample_dump(data: bytes, source_label: str) -> ParsedCdTextDocument:
    text = data.decode("utf-8", errors="replace")
    document = ParsedCdTextDocument(
        input_format=InputFormat.SAMPLE_DUMP, source_path=source_label
    )

    in_section = False
    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if line == "[CDText]":
            in_section = True
            continue
        if in_section and line.startswith("["):
            break
        if not in_section:
            continue

        match = _ENTRY_PATTERN.match(line)
        if match is None:
            continue

        entry, hex_text = match.group(1), match.group(2)
        try:
            raw = _parse_hex_bytes(hex_text)
        except ParseError as exc:
            raise ParseError(f"Failed to decode sample dump entry {entry}: {exc}") from exc

        source_index = int(entry)
        document.packs.append(
            ParsedCdTextPack(
                data=raw,
                has_crc=False,
                source_index=source_index,
                source_label=f"Entry {source_index}",
            )
        )

    if not document.packs:
        raise ParseError("No [CDText] entries found in sample dump.")

    document.notes.append(
        "Sample dump entries usually omit CRC bytes; compare core 16-byte payloads first."
    )
    return document


def _parse_reference_sample(path: str) -> ParsedCdTextDocument:
    if not Path(path).is_dir():
        raise ParseError(f"Reference sample directory does not exist: {path}")
    raise ParseError(
        "Reference sample rebuilding requires the CD-TEXT pack assembly pipeline, "
        f"which is not available: {path}"
    )


def parse_bytes(
    data: bytes, input_format: InputFormat, source_label: str
) -> ParsedCdTextDocument:
    """Parse in-memory ``data`` in ``input_format``; raise ParseError on failure."""
    if input_format is InputFormat.CDT:
        return _parse_cdt(data, source_label)
    if input_format is InputFormat.PACKS_JSON:
        return _parse_packs_json(data, source_label)
    if input_format is InputFormat.SAMPLE_DUMP:
        return _parse_sample_dump(data, source_label)
    if input_format is InputFormat.REFERENCE_SAMPLE:
        raise ParseError(
            "Reference sample parsing requires a directory path, not raw bytes."
        )
    raise ParseError("Unsupported input format.")


def parse_file(path: str | Path, input_format: InputFormat) -> ParsedCdTextDocument:
    """Read and parse the file (or reference directory) at ``path``."""
    path_text = str(path)
    if input_format is InputFormat.REFERENCE_SAMPLE:
        return _parse_reference_sample(path_text)

    try:
        data = Path(path_text).read_bytes()
    except OSError as exc:
        raise ParseError(f"Failed to open file: {path_text}") from exc

    document = parse_bytes(data, input_format, path_text)
    document.source_path = path_text
    return document