"""Command line entry point: parse, compare and export CD-TEXT pack data."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from .engine import compare
from .parser import ParseError, parse_file
from .reference import load_reference_sample_metadata
from .spec import TWO_TRACK_JAPANESE, ProjectSpecError, fixture_project, project_from_json
from .types import CompareMode, InputFormat, ParsedCdTextDocument, input_format_name

PROGRAM_NAME = "cdtext-diff"
USAGE = "Usage: cdtext-diff <parse|compare|export-current> [options]"
PREVIEW_PACK_COUNT = 8

_FORMATS = {fmt.value: fmt for fmt in InputFormat}
_MODES = {mode.value: mode for mode in CompareMode}

PathLike = Union[str, Path, None]


class _UsageError(Exception):
    """Raised by the argument parser instead of exiting."""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise _UsageError(message)


def _fail(message: str) -> int:
    print(message, file=sys.stderr)
    return 1


def _required_format(raw_value: str) -> Optional[InputFormat]:
    return _FORMATS.get(raw_value.strip().lower())


def _required_compare_mode(raw_value: str) -> Optional[CompareMode]:
    value = raw_value.strip().lower()
    if not value:
        return CompareMode.EXACT
    return _MODES.get(value)


def document_summary_text(document: ParsedCdTextDocument) -> str:
    """Human-readable summary of a parsed document with a short pack preview."""
    lines = [
        f"Parsed {document.pack_count()} packs from {document.source_path} "
        f"({input_format_name(document.input_format)})"
    ]
    lines.extend(f"Note : {note}" for note in document.notes)

    preview = document.packs[:PREVIEW_PACK_COUNT]
    for index, pack in enumerate(preview):
        lines.append(
            f"Pack {index}: {pack.pack_type_label()} track={pack.track_number()} "
            f"seq={pack.sequence_number()} block={pack.block_number()} "
            f"cpos={pack.character_position()} {pack.byte_hex()}"
        )

    omitted = len(document.packs) - len(preview)
    if omitted > 0:
        lines.append(f"... {omitted} more pack(s) omitted from text preview.")
    return "\n".join(lines)


def write_json(obj: Any, path: PathLike) -> None:
    """Write ``obj`` as indented JSON to ``path``; an empty path writes nothing."""
    if not path:
        return
    text = json.dumps(obj, indent=4, ensure_ascii=False)
    Path(path).write_text(text + "\n", encoding="utf-8")


def _concatenated_packs(document: ParsedCdTextDocument) -> bytes:
    return b"".join(pack.data for pack in document.packs)


def write_raw_blob(document: ParsedCdTextDocument, path: PathLike) -> None:
    """Write all pack bytes back to back; an empty path writes nothing."""
    if not path:
        return
    Path(path).write_bytes(_concatenated_packs(document))


def write_sony_bin(document: ParsedCdTextDocument, path: PathLike) -> None:
    """Write all pack bytes followed by one NUL terminator; an empty path writes nothing."""
    if not path:
        return
    Path(path).write_bytes(_concatenated_packs(document) + b"\0")


def _run_parse(args: Sequence[str]) -> int:
    parser = _ArgumentParser(
        prog=f"{PROGRAM_NAME} parse",
        description="Parse CD-TEXT binary/dump inputs into a normalized structure.",
        allow_abbrev=False,
    )
    parser.add_argument("input", nargs="?", help="Input file path.")
    parser.add_argument(
        "--format",
        default="",
        help="Input format: cdt | packs-json | sample-dump | reference-sample",
    )
    parser.add_argument("--json", default="", help="Write parsed JSON report to path.")
    options = parser.parse_args(list(args))

    if not options.input:
        parser.print_help(sys.stderr)
        return 1

    input_format = _required_format(options.format)
    if input_format is None:
        return _fail("Unknown --format value.")

    try:
        document = parse_file(options.input, input_format)
    except ParseError as exc:
        return _fail(str(exc))

    try:
        write_json(document.to_json(), options.json)
    except OSError:
        return _fail(f"Failed to open JSON output: {options.json}")

    print(document_summary_text(document))
    return 0


def _run_compare(args: Sequence[str]) -> int:
    parser = _ArgumentParser(
        prog=f"{PROGRAM_NAME} compare",
        description="Strictly compare two CD-TEXT sources pack-by-pack and byte-by-byte.",
        allow_abbrev=False,
    )
    parser.add_argument("left", nargs="?", help="Left input path.")
    parser.add_argument("right", nargs="?", help="Right input path.")
    parser.add_argument("--left-format", default="", help="Left input format.")
    parser.add_argument("--right-format", default="", help="Right input format.")
    parser.add_argument(
        "--mode", default="exact", help="Compare mode: exact | structure | schema"
    )
    parser.add_argument("--json", default="", help="Write diff JSON report to path.")
    options = parser.parse_args(list(args))

    if not options.left or not options.right:
        parser.print_help(sys.stderr)
        return 1

    left_format = _required_format(options.left_format)
    right_format = _required_format(options.right_format)
    if left_format is None or right_format is None:
        return _fail(
            "Both --left-format and --right-format must be one of: "
            "cdt, packs-json, sample-dump, reference-sample."
        )
    mode = _required_compare_mode(options.mode)
    if mode is None:
        return _fail("Unknown --mode value. Use exact, structure, or schema.")

    try:
        left = parse_file(options.left, left_format)
        right = parse_file(options.right, right_format)
    except ParseError as exc:
        return _fail(str(exc))

    report = compare(left, right, mode)

    try:
        write_json(report.to_json(), options.json)
    except OSError:
        return _fail(f"Failed to open JSON output: {options.json}")

    print(report.to_text())
    return 0 if report.identical else 2


def _run_export_current(args: Sequence[str]) -> int:
    parser = _ArgumentParser(
        prog=f"{PROGRAM_NAME} export-current",
        description="Export the current pack assembly pipeline into a normalized report.",
        allow_abbrev=False,
    )
    parser.add_argument(
        "--fixture",
        default=TWO_TRACK_JAPANESE,
        help="Built-in fixture name: sample-project | two-track-japanese",
    )
    parser.add_argument(
        "--project-json", default="", help="Path to JSON project spec instead of a fixture."
    )
    parser.add_argument(
        "--sample-dir",
        default="",
        help="Path to a captured reference sample directory containing cdtext-summary.json.",
    )
    parser.add_argument("--json", default="", help="Write export JSON report to path.")
    parser.add_argument("--raw-out", default="", help="Write concatenated raw pack bytes.")
    parser.add_argument("--cdt-out", default="", help="Write raw pack bytes as a .cdt file.")
    parser.add_argument(
        "--sony-bin-out", default="", help="Write a Sony-style lead-in BIN artifact."
    )
    options = parser.parse_args(list(args))

    if options.project_json and options.sample_dir:
        return _fail("Use only one of --project-json or --sample-dir.")
    if options.raw_out and options.cdt_out:
        return _fail("Use only one of --raw-out or --cdt-out.")

    try:
        if options.sample_dir:
            source_label = f"reference-sample:{options.sample_dir}"
            load_reference_sample_metadata(options.sample_dir)
        elif options.project_json:
            source_label = "project-spec"
            try:
                data = Path(options.project_json).read_bytes()
            except OSError:
                return _fail(f"Failed to open project JSON: {options.project_json}")
            try:
                spec = json.loads(data)
            except (json.JSONDecodeError, UnicodeDecodeError) as exc:
                return _fail(f"Invalid project JSON: {exc}")
            project_from_json(spec if isinstance(spec, dict) else {})
        else:
            source_label = f"fixture:{options.fixture}"
            fixture_project(options.fixture)
    except ProjectSpecError as exc:
        return _fail(str(exc))

    return _fail(
        f"CD-TEXT pack assembly is not available; cannot export packs for {source_label}."
    )


_COMMANDS = {
    "parse": _run_parse,
    "compare": _run_compare,
    "export-current": _run_export_current,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line tool and return its exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        return _fail(USAGE)

    command = args[0].strip().lower()
    handler = _COMMANDS.get(command)
    if handler is None:
        return _fail(f"Unknown command: {command}")

    try:
        return handler(args[1:])
    except _UsageError as exc:
        return _fail(f"{exc}\n{USAGE}")
    except SystemExit as exc:
        code = exc.code
        if code is None:
            return 0
        return code if isinstance(code, int) else 1


if __name__ == "__main__":
    sys.exit(main())