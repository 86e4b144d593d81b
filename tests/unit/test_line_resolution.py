# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
import pytest

from conftest import VAULT_PATH, VAULT_SOURCE
from srcloc.linebreaks import build_line_break_index
from srcloc.model import SourcePosition, SourceSpan
from srcloc.srcmap import (
    FormatError,
    SourceMapEntry,
    decompress_source_map,
    parse_entry,
    resolve_entry,
)


def test_lines_001_index_has_one_start_per_terminator_plus_one() -> None:
    index = build_line_break_index(VAULT_SOURCE, file_name=VAULT_PATH)

    assert index.line_starts == (0, 24, 25, 42, 73, 107, 109)
    assert index.line_count == VAULT_SOURCE.count("\n") + 1
    assert index.size == 109
    assert index.file_name == VAULT_PATH


def test_lines_002_empty_and_terminator_free_sources() -> None:
    assert build_line_break_index("").line_starts == (0,)
    assert build_line_break_index("contract A {}").line_starts == (0,)
    assert build_line_break_index("\n\n").line_starts == (0, 1, 2)


def test_lines_003_offsets_are_utf8_bytes_and_crlf_keeps_carriage_return() -> None:
    index = build_line_break_index("// é\r\nx")

    assert index.line_starts == (0, 7)
    assert index.position(5) == SourcePosition(line=1, column=5)
    assert index.position(7) == SourcePosition(line=2, column=0)


def test_lines_004_every_line_start_resolves_to_column_zero() -> None:
    index = build_line_break_index(VAULT_SOURCE)

    for line_number, start in enumerate(index.line_starts, start=1):
        assert index.position(start) == SourcePosition(line=line_number, column=0)


def test_lines_005_resolution_is_monotonic_over_all_offsets() -> None:
    index = build_line_break_index(VAULT_SOURCE)
    positions = [index.position(offset) for offset in range(index.size + 1)]

    for earlier, later in zip(positions, positions[1:]):
        assert earlier < later


def test_lines_006_negative_offset_is_rejected() -> None:
    index = build_line_break_index(VAULT_SOURCE)

    with pytest.raises(ValueError):
        index.position(-1)


def test_srcmap_001_text_entry_resolves_to_line_and_column_span() -> None:
    index = build_line_break_index(VAULT_SOURCE)

    assert resolve_entry("30:2:0", index) == SourceSpan(
        start=SourcePosition(line=3, column=5),
        end=SourcePosition(line=3, column=7),
    )
    assert resolve_entry("46:25:0:i:1", index) == SourceSpan(
        start=SourcePosition(line=4, column=4),
        end=SourcePosition(line=4, column=29),
    )


def test_srcmap_002_entry_without_source_file_is_unresolved() -> None:
    index = build_line_break_index(VAULT_SOURCE)

    span = resolve_entry("0:10:-1", index)

    assert span == SourceSpan.unresolved()
    assert span.start == SourcePosition(line=-1, column=0)
    assert span.end is None
    assert not span.is_resolved


@pytest.mark.parametrize("text", ["", "30", "30:2", "a:2:0", "30:2:x", "30::0"])
def test_srcmap_003_malformed_entries_raise_format_error(text: str) -> None:
    with pytest.raises(FormatError):
        parse_entry(text)


def test_srcmap_004_parse_ignores_fields_after_file_index() -> None:
    assert parse_entry("444:1:0:o:2") == SourceMapEntry(start=444, length=1, file_index=0)


def test_srcmap_005_decompression_inherits_empty_fields() -> None:
    entries = decompress_source_map("0:60:0:-:0;;;25:10;;:5;::-1:i")

    assert [(e.start, e.length, e.file_index) for e in entries] == [
        (0, 60, 0),
        (0, 60, 0),
        (0, 60, 0),
        (25, 10, 0),
        (25, 10, 0),
        (25, 5, 0),
        (25, 5, -1),
    ]
    assert entries[-1].jump == "i"
    assert entries[0].jump == "-"
    assert not entries[-1].has_source


def test_srcmap_006_decompression_rejects_non_numeric_fields() -> None:
    assert decompress_source_map("") == ()
    with pytest.raises(FormatError):
        decompress_source_map("0:1:0;x:2")
