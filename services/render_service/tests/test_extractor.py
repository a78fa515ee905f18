import struct

import pytest

from services.render_service.src.exceptions import ExtractionError
from services.render_service.src.extractor import extract, select_entry
from services.render_service.src.schemas import FormatTag, SourceDocument

SCORE_XML = b"<?xml version=\"1.0\"?><score-partwise version=\"4.0\"/>"

@pytest.mark.parametrize("data", [b"", SCORE_XML, b"PK\x03\x04 not really a zip", bytes(range(256))])
def test_plain_payload_is_passed_through(data):
    payload = extract(data, FormatTag.PLAIN, "song.xml")
    assert payload.data == data
    assert payload.title == "song.xml"
    assert payload.entry_name is None

def test_preferred_entry_wins_regardless_of_position(make_mxl):
    mxl = make_mxl([("a.xml", b"<fallback/>"), ("b.musicxml", b"<preferred/>")])
    payload = extract(mxl, FormatTag.CONTAINER)
    assert payload.entry_name == "b.musicxml"
    assert payload.data == b"<preferred/>"

def test_first_preferred_match_in_listing_order(make_mxl):
    mxl = make_mxl([
        ("score/second.MUSICXML", b"<one/>"),
        ("score/first.musicxml", b"<two/>"),
    ])
    assert extract(mxl, FormatTag.CONTAINER).data == b"<one/>"

def test_fallback_takes_first_xml_in_listing_order(make_mxl):
    mxl = make_mxl([
        ("mimetype", b"application/vnd.recordare.musicxml"),
        ("META-INF/container.xml", b"<container/>"),
        ("score.xml", b"<score/>"),
    ])
    payload = extract(mxl, FormatTag.CONTAINER)
    assert payload.entry_name == "META-INF/container.xml"
    assert payload.data == b"<container/>"

def test_container_without_markup_fails(make_mxl):
    mxl = make_mxl([("readme.txt", b"hello"), ("cover.png", b"\x89PNG")])
    with pytest.raises(ExtractionError, match="no MusicXML"):
        extract(mxl, FormatTag.CONTAINER)

def test_invalid_archive_fails_as_extraction_error():
    with pytest.raises(ExtractionError, match="invalid MXL container"):
        extract(SCORE_XML, FormatTag.CONTAINER)

def test_select_entry_needs_suffix_match():
    assert select_entry(["notes.xml.bak", "dir.musicxml.txt"]) is None
    assert select_entry([]) is None

@pytest.mark.parametrize("key,expected", [
    ("scores/song.mxl", FormatTag.CONTAINER),
    ("scores/SONG.MXL", FormatTag.CONTAINER),
    ("scores/song.xml", FormatTag.PLAIN),
    ("scores/song.musicxml", FormatTag.PLAIN),
    ("scores/mxl", FormatTag.PLAIN),
])
def test_format_tag_from_key(key, expected):
    assert FormatTag.from_key(key) is expected

def test_source_document_is_immutable():
    doc = SourceDocument(key="a.xml", data=SCORE_XML, format_tag=FormatTag.PLAIN)
    with pytest.raises(Exception):
        doc.data = b"other"  # type: ignore[misc]

def _corrupt_first_entry(mxl, count=20):
    # local file header: 30 fixed bytes, then name and extra field
    name_len, extra_len = struct.unpack("<HH", mxl[26:30])
    start = 30 + name_len + extra_len + 4
    damaged = bytearray(mxl)
    for i in range(start, start + count):
        damaged[i] ^= 0xFF
    return bytes(damaged)

def test_corrupt_entry_data_is_extraction_error(make_mxl):
    markup = "".join(f'<note id="n{i}"><pitch step="{"CDEFGAB"[i % 7]}"/></note>' for i in range(400))
    mxl = _corrupt_first_entry(make_mxl([("score.musicxml", markup.encode("utf-8"))]))
    with pytest.raises(ExtractionError):
        extract(mxl, FormatTag.CONTAINER)

def test_corrupt_entry_is_reported_under_extraction_stage(make_mxl, fake_store_cls, fake_engine_cls, cfg):
    from services.render_service.src.service import render_score

    markup = "".join(f'<measure number="{i}"><note/></measure>' for i in range(400))
    mxl = _corrupt_first_entry(make_mxl([("score.musicxml", markup.encode("utf-8"))]))
    engine = fake_engine_cls()

    result = render_score("scores/song.mxl", None, fake_store_cls({"scores/song.mxl": mxl}), engine, cfg=cfg)

    assert result.failure.stage == "extraction"
    assert engine.launches == 0
