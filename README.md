# cdtextdiff

Developer tooling for CD-TEXT data. It reads CD-TEXT packs from several
kinds of input, turns them into a normalized structure, and compares two
sources pack by pack and byte by byte. It also reads project specs and
captured reference sample files (cdrdao and drutil CD-TEXT dumps) and
summarises their SIZE_INFO data.

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Input formats

| Name          | What it reads                                                    |
|---------------|------------------------------------------------------------------|
| `cdt`         | A compiled CD-TEXT binary or raw pack blob. Lengths divisible by 18 are read as full packs with CRC; lengths divisible only by 16 are read as CRC-less pack cores. |
| `packs-json`  | A pack export JSON holding `packAssembly.packs` or `packs`, each pack given as `rawHex` or a `bytes` array. |
| `sample-dump` | A legacy CCD/CDM dump; `Entry N = <hex>` lines in the `[CDText]` section. |

The name `reference-sample` is accepted as a format, but parsing it always
fails (see "What is not included" below).

## Command line

Parse one input and print a summary of its packs (the first eight packs are
shown in detail):

```
cdtext-diff parse --format cdt disc.cdt
cdtext-diff parse --format sample-dump disc.ccd --json parsed.json
```

Compare two inputs:

```
cdtext-diff compare --left-format cdt --right-format sample-dump left.cdt right.ccd
cdtext-diff compare --left-format cdt --right-format cdt --mode structure a.cdt b.cdt --json diff.json
```

Compare modes:

- `exact` (default): every byte of every pack; a difference in CRC presence
  is noted as the reason on a differing pack.
- `structure`: pack headers (type, track, sequence, block byte), pack
  lengths, and the full contents of SIZE_INFO (0x8F) packs.
- `schema`: only document shape — block count, CRC presence, the sequence
  of pack type groups, the SIZE_INFO pack count and the set of pack sizes.

`parse` exits with 0 on success and 1 on any error. `compare` exits with 0
when the two sides are identical, 2 when they differ, and 1 on any error.
`--json PATH` writes the parsed document or the full report as indented
JSON. Leaving out the input path(s) prints the command's help and exits
with 1.

## Library use

```python
from cdtextdiff.types import InputFormat, CompareMode
from cdtextdiff.parser import parse_file, ParseError
from cdtextdiff.engine import compare

try:
    left = parse_file("left.cdt", InputFormat.CDT)
    right = parse_file("right.ccd", InputFormat.SAMPLE_DUMP)
except ParseError as exc:
    raise SystemExit(str(exc))

report = compare(left, right, CompareMode.EXACT)
print(report.to_text())
```

Modules:

- `cdtextdiff.types` — `ParsedCdTextPack`, `ParsedCdTextDocument`,
  `CdTextDiffReport` and friends. Each pack exposes its header fields
  (`pack_type()`, `track_number()`, `sequence_number()`, `block_number()`,
  `character_position()`), a readable `pack_type_label()` such as `TITLE`
  or `SIZE_INFO`, and hex renderings via `byte_hex()` and `core_hex()`.
  Documents, deltas and reports serialize with `to_json()`; reports also
  render with `to_text()`.
- `cdtextdiff.parser` — `parse_file(path, input_format)` and
  `parse_bytes(data, input_format, source_label)`; both raise `ParseError`.
- `cdtextdiff.engine` — `compare(left, right, mode)`.
- `cdtextdiff.project` — the project model: `CdProject`, `Track`,
  `CdTextField` with its enums, and `ValidationReport` with `summary()`.
- `cdtextdiff.spec` — `project_from_json(spec)` builds a `CdProject` from a
  JSON project spec (raising `ProjectSpecError` when it has no tracks),
  `fixture_project(name)` returns a built-in fixture (only
  `two-track-japanese` exists), and `project_summary_json(project)` gives a
  short summary.
- `cdtextdiff.reference` — `parse_cdrdao_reference_metadata(text)` and
  `parse_drutil_reference_metadata(text)` extract titles, performers,
  language blocks and SIZE_INFO values from captured dumps;
  `collect_size_info_payload_bytes`, `build_generated_metadata` and
  `size_info_comparison_notes` compare SIZE_INFO data of a document with a
  reference; `load_reference_sample_metadata(sample_dir)` reads
  `cdtext-summary.json`, `drutil-cdtext.plist` and `cdrdao-cdtext.txt` from
  a sample directory.
- `cdtextdiff.cli` — the `cdtext-diff` command, plus `document_summary_text`,
  `write_json`, `write_raw_blob` and `write_sony_bin` (pack bytes followed
  by one NUL byte).

## What is not included

This package does not generate CD-TEXT packs from a project: there is no
pack assembler and no text encoder. As a result:

- The `export-current` command accepts `--fixture`, `--project-json` and
  `--sample-dir`, checks that the chosen input can be read and turned into a
  project, and then always exits with 1 and a message that pack assembly is
  not available. Its output options (`--json`, `--raw-out`, `--cdt-out`,
  `--sony-bin-out`) write nothing.
- The `reference-sample` input format cannot be parsed or compared, since
  rebuilding its packs needs that assembly step.

It also does not read discs or burn them; it works only on files.