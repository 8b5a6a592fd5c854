import pytest

from cdtextdiff.types import (
    CdTextDiffByteDelta,
    CdTextDiffPackDelta,
    CdTextDiffReport,
    CompareMode,
    InputFormat,
    ParsedCdTextDocument,
    ParsedCdTextPack,
    compare_mode_name,
    input_format_description,
    input_format_name,
    packs_to_json,
)


def make_pack(pack_type, track=0, seq=0, block_byte=0, length=18, has_crc=True):
    header = bytes([pack_type, track, seq, block_byte])
    return ParsedCdTextPack(
        data=header + bytes(length - 4), has_crc=has_crc, source_label="pack"
    )


def test_pack_header_accessors():
    pack = make_pack(0x80, track=1, seq=2, block_byte=0x13)
    assert pack.is_valid()
    assert pack.pack_type() == 0x80
    assert pack.track_number() == 1
    assert pack.sequence_number() == 2
    assert pack.block_byte() == 0x13
    assert pack.block_number() == 1
    assert pack.character_position() == 3


def test_short_pack_is_invalid_and_defaults_to_zero():
    pack = ParsedCdTextPack(data=bytes([0x80, 0x05]))
    assert not pack.is_valid()
    assert pack.pack_type() == 0
    assert pack.track_number() == 0x05
    assert pack.sequence_number() == 0
    assert pack.block_number() == 0


@pytest.mark.parametrize(
    "pack_type, label",
    [
        (0x80, "TITLE"),
        (0x81, "PERFORMER"),
        (0x86, "DISC_ID"),
        (0x8E, "UPC_ISRC"),
        (0x8F, "SIZE_INFO"),
    ],
)
def test_pack_type_labels(pack_type, label):
    assert make_pack(pack_type).pack_type_label() == label


def test_unknown_pack_type_label_is_uppercased_hex():
    assert make_pack(0x8A).pack_type_label() == "0X8A"


def test_pack_to_json_round_trips_bytes():
    pack = make_pack(0x81, track=2, seq=7)
    obj = pack.to_json()
    assert obj["bytes"] == list(pack.data)
    assert bytes.fromhex(obj["rawHex"]) == pack.data
    assert obj["packTypeLabel"] == "PERFORMER"
    assert obj["trackNumber"] == 2
    assert obj["sequenceNumber"] == 7
    assert obj["hasCrc"] is True


def test_empty_document_summary():
    document = ParsedCdTextDocument()
    assert document.pack_count() == 0
    assert document.block_count() == 0
    assert not document.has_any_crc()
    obj = document.to_json()
    assert obj["sequenceSummary"] == {"min": -1, "max": -1}
    assert obj["packs"] == []
    assert obj["format"] == "cdt"


def test_document_counts_and_blocks():
    packs = [
        make_pack(0x80, seq=0, block_byte=0x00, has_crc=False),
        make_pack(0x80, seq=1, block_byte=0x00, has_crc=False),
        make_pack(0x8F, seq=2, block_byte=0x20, has_crc=True),
    ]
    document = ParsedCdTextDocument(packs=packs, source_path="x")
    assert document.pack_count() == len(packs)
    assert document.has_any_crc()
    assert document.block_count() == 3
    obj = document.to_json()
    assert obj["packCount"] == len(packs)
    assert sum(obj["packTypeCounts"].values()) == len(packs)
    assert [b["blockNumber"] for b in obj["blockSummaries"]] == [0, 2]
    assert sum(b["packCount"] for b in obj["blockSummaries"]) == len(packs)
    assert obj["sequenceSummary"] == {"min": 0, "max": 2}


@pytest.mark.parametrize(
    "fmt, name",
    [
        (InputFormat.CDT, "cdt"),
        (InputFormat.PACKS_JSON, "packs-json"),
        (InputFormat.SAMPLE_DUMP, "sample-dump"),
        (InputFormat.REFERENCE_SAMPLE, "reference-sample"),
    ],
)
def test_input_format_names(fmt, name):
    assert input_format_name(fmt) == name


def test_input_format_descriptions():
    assert input_format_description(InputFormat.PACKS_JSON) == "CDManager exported pack JSON"
    assert input_format_description(InputFormat.SAMPLE_DUMP) == "Legacy CCD/CDM CDText dump"


@pytest.mark.parametrize(
    "mode, name",
    [
        (CompareMode.EXACT, "exact"),
        (CompareMode.STRUCTURE, "structure"),
        (CompareMode.SCHEMA, "schema"),
    ],
)
def test_compare_mode_names(mode, name):
    assert compare_mode_name(mode) == name


def test_pack_delta_identical_and_json():
    assert CdTextDiffPackDelta().identical()
    assert not CdTextDiffPackDelta(reason="Pack byte length differs.").identical()
    delta = CdTextDiffPackDelta(
        pack_index=4, byte_deltas=[CdTextDiffByteDelta(5, 1, -1)]
    )
    assert not delta.identical()
    obj = delta.to_json()
    assert obj["packIndex"] == 4
    assert obj["byteDeltas"] == [{"byteOffset": 5, "leftValue": 1, "rightValue": -1}]


def test_report_text_identical():
    doc = ParsedCdTextDocument(packs=[make_pack(0x80)], source_path="left.cdt")
    report = CdTextDiffReport(left=doc, right=doc, identical=True, document_notes=["n"])
    lines = report.to_text().split("\n")
    assert lines[0] == "CD-TEXT compare result (exact): identical"
    assert "Note : n" in lines
    assert not any(line.startswith("--- pack") for line in lines)


def test_report_text_lists_byte_deltas():
    left = make_pack(0x80, block_byte=0x13)
    right = ParsedCdTextPack(data=left.data[:3])
    delta = CdTextDiffPackDelta(
        pack_index=0,
        reason="Pack byte length differs.",
        left=left,
        right=right,
        byte_deltas=[CdTextDiffByteDelta(3, 0x13, -1)],
    )
    report = CdTextDiffReport(mode=CompareMode.STRUCTURE, pack_deltas=[delta])
    text = report.to_text()
    assert text.startswith("CD-TEXT compare result (structure): different")
    assert "Reason: Pack byte length differs." in text
    assert "  byte[3]: 13 -> --" in text
    assert report.to_json()["compareMode"] == "structure"
    assert len(report.to_json()["packDeltas"]) == 1


def test_packs_to_json_keeps_order():
    packs = [make_pack(0x80, seq=i) for i in range(3)]
    result = packs_to_json(packs)
    assert [p["sequenceNumber"] for p in result] == [0, 1, 2]