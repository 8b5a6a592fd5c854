import json

import pytest

from cdtextdiff.reference import (
    build_generated_metadata,
    collect_size_info_payload_bytes,
    load_reference_sample_metadata,
    parse_cdrdao_reference_metadata,
    parse_drutil_reference_metadata,
    size_info_comparison_notes,
)
from cdtextdiff.spec import ProjectSpecError
from cdtextdiff.types import ParsedCdTextDocument, ParsedCdTextPack

CDRDAO_TEXT = """CD_TEXT {
  LANGUAGE_MAP { 0 : 9 }
  LANGUAGE 0 {
    TITLE "Album"
    PERFORMER ""
    SIZE_INFO { 0, 1, 2, 3, 4, 5, 6, 7, 8, 9 }
  }
}
"""

CDRDAO_TWO_GROUPS = """
LANGUAGE 0 {
  TITLE ""
  PERFORMER ""
  SIZE_INFO { 0, 0 }
}
LANGUAGE 1 {
  TITLE "Second"
  PERFORMER "Singer"
  SIZE_INFO { 128, 1 }
}
"""

DRUTIL_PLIST = """<array>
<dict>
<key>Properties</key>
<dict>
<key>DRCDTextLanguageKey</key>
<string>ja</string>
<key>DRCDTextCharacterCodeKey</key>
<integer>128</integer>
</dict>
<key>Tracks</key>
<array>
<dict>
<key>DRCDTextTitleKey</key>
<string>Album</string>
<key>DRCDTextPerformerKey</key>
<string>Artist</string>
</dict>
<dict>
<key>DRCDTextTitleKey</key>
<string>Song</string>
<key>DRCDTextPerformerKey</key>
<string> </string>
</dict>
</array>
</dict>
</array>
"""


def _size_info_document(values):
    header = bytes([0x8F, 0x00, 0x00, 0x00])
    pack = ParsedCdTextPack(data=header + bytes(values) + b"\x00\x00", has_crc=True)
    title = ParsedCdTextPack(data=bytes([0x80, 0, 1, 0]) + bytes(14), has_crc=True)
    return ParsedCdTextDocument(packs=[title, pack])


def test_cdrdao_metadata_values():
    result = parse_cdrdao_reference_metadata(CDRDAO_TEXT)
    assert result.metadata["cdrdaoTitle"] == "Album"
    assert result.metadata["cdrdaoPerformer"] == ""
    assert result.metadata["cdrdaoSizeInfo"] == list(range(10))
    assert result.metadata["cdrdaoSizeInfoGroups"] == [list(range(10))]


def test_cdrdao_notes():
    notes = parse_cdrdao_reference_metadata(CDRDAO_TEXT).notes
    assert notes[0] == "cdrdao group count=1"
    assert notes[1] == "cdrdao block0 title=Album performer=(empty)"
    assert notes[2] == "cdrdao block0 SIZE_INFO count=10 preview=[0, 1, 2, 3, 4, 5, 6, 7]"
    assert len(notes) == 3


def test_cdrdao_multiple_groups_adds_note():
    result = parse_cdrdao_reference_metadata(CDRDAO_TWO_GROUPS)
    assert result.metadata["cdrdaoTitles"] == ["", "Second"]
    assert result.metadata["cdrdaoSizeInfoGroups"] == [[0, 0], [128, 1]]
    assert result.notes[0] == "cdrdao group count=2"
    assert "cdrdao block1 title=Second performer=Singer" in result.notes
    assert result.notes[-1].startswith("cdrdao dump contains multiple CD-TEXT groups")


def test_cdrdao_empty_text():
    result = parse_cdrdao_reference_metadata("")
    assert result.metadata == {}
    assert result.notes == ["cdrdao group count=0"]


def test_drutil_metadata_block():
    result = parse_drutil_reference_metadata(DRUTIL_PLIST)
    assert result.metadata["drutilBlockCount"] == 1
    block = result.metadata["drutilBlocks"][0]
    assert block == {
        "blockNumber": 0,
        "language": "ja",
        "characterCode": 128,
        "albumTitle": "Album",
        "albumPerformer": "Artist",
        "nonBlankTitles": 2,
        "nonBlankPerformers": 1,
    }


def test_drutil_notes_and_bytes_input():
    result = parse_drutil_reference_metadata(DRUTIL_PLIST.encode("utf-8"))
    assert result.notes == [
        "drutil block count=1",
        "drutil block0 language=ja char=128 albumTitle=Album albumPerformer=Artist "
        "nonBlankTitles=2 nonBlankPerformers=1",
    ]


def test_drutil_no_blocks():
    result = parse_drutil_reference_metadata("<plist></plist>")
    assert result.metadata == {}
    assert result.notes == []


def test_collect_size_info_payload_bytes():
    values = list(range(1, 13))
    document = _size_info_document(values)
    assert collect_size_info_payload_bytes(document) == bytes(values)


def test_collect_size_info_skips_short_packs():
    short = ParsedCdTextPack(data=bytes([0x8F, 0, 0, 0, 1, 2]))
    document = ParsedCdTextDocument(packs=[short])
    assert collect_size_info_payload_bytes(document) == b""


def test_build_generated_metadata():
    values = list(range(12))
    metadata = build_generated_metadata(_size_info_document(values))
    assert metadata["blockCount"] == 1
    assert metadata["sizeInfoPackCount"] == 1
    assert metadata["sizeInfoValueCount"] == 12
    assert metadata["sizeInfoValues"] == values


def test_comparison_without_reference_values():
    document = _size_info_document(list(range(12)))
    assert size_info_comparison_notes({}, build_generated_metadata(document), document) == []


def test_comparison_matching_values():
    values = list(range(12))
    document = _size_info_document(values)
    notes = size_info_comparison_notes(
        {"cdrdaoSizeInfo": values}, build_generated_metadata(document), document
    )
    assert len(notes) == 4
    assert notes[0] == "Generated blockCount=1"
    assert not any(note.startswith("SIZE_INFO mismatch") for note in notes)


def test_comparison_count_mismatch():
    document = _size_info_document(list(range(12)))
    notes = size_info_comparison_notes(
        {"cdrdaoSizeInfo": [1, 2, 3]}, build_generated_metadata(document), document
    )
    assert notes[-1].startswith("SIZE_INFO mismatch: generated value count 12 differs")


def test_comparison_differing_entries():
    values = list(range(12))
    document = _size_info_document(values)
    reference = [9] + values[1:]
    notes = size_info_comparison_notes(
        {"cdrdaoSizeInfo": reference}, build_generated_metadata(document), document
    )
    assert notes[-1] == "SIZE_INFO mismatch: same value count but differing entries [0]0->9"


def _write_summary(directory, spec):
    (directory / "cdtext-summary.json").write_text(json.dumps(spec), encoding="utf-8")


def test_load_missing_summary(tmp_path):
    with pytest.raises(ProjectSpecError, match="Failed to open reference sample summary"):
        load_reference_sample_metadata(tmp_path)


def test_load_invalid_summary_json(tmp_path):
    (tmp_path / "cdtext-summary.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(ProjectSpecError, match="Invalid reference sample summary JSON"):
        load_reference_sample_metadata(tmp_path)


def test_load_summary_without_tracks(tmp_path):
    _write_summary(tmp_path, {"albumTitle": "Album"})
    with pytest.raises(ProjectSpecError, match="at least one track"):
        load_reference_sample_metadata(tmp_path)


def test_load_summary_only(tmp_path):
    _write_summary(tmp_path, {"title": "Album", "tracks": [{"title": "Song"}]})
    result = load_reference_sample_metadata(tmp_path)
    assert result.project.album_title == "Album"
    assert result.project.tracks[0].title == "Song"
    assert result.notes == [
        f"Reference sample directory: {tmp_path}",
        "drutil-cdtext.plist not found in reference sample directory.",
        "cdrdao-cdtext.txt not found in reference sample directory.",
    ]
    assert result.metadata == {}


def test_load_drutil_only_keeps_drutil_metadata(tmp_path):
    _write_summary(tmp_path, {"tracks": [{"title": "Song"}]})
    (tmp_path / "drutil-cdtext.plist").write_text(DRUTIL_PLIST, encoding="utf-8")
    result = load_reference_sample_metadata(tmp_path)
    assert result.metadata["drutilBlockCount"] == 1
    assert "drutil block count=1" in result.notes


def test_load_cdrdao_replaces_drutil_metadata(tmp_path):
    _write_summary(tmp_path, {"tracks": [{"title": "Song"}]})
    (tmp_path / "drutil-cdtext.plist").write_text(DRUTIL_PLIST, encoding="utf-8")
    (tmp_path / "cdrdao-cdtext.txt").write_text(CDRDAO_TEXT, encoding="utf-8")
    result = load_reference_sample_metadata(tmp_path)
    assert "drutilBlockCount" not in result.metadata
    assert result.metadata["cdrdaoSizeInfo"] == list(range(10))
    assert "drutil block count=1" in result.notes
    assert "cdrdao group count=1" in result.notes