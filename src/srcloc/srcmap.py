# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Source-map entry parsing and line/column resolution."""

import logging
from dataclasses import dataclass

from srcloc.linebreaks import LineBreakIndex
from srcloc.model import SourceSpan

logger = logging.getLogger(__name__)

NO_FILE = -1


class FormatError(ValueError):
    """Represent malformed source-map entry text."""


@dataclass(frozen=True)
class SourceMapEntry:
    """Represent one decoded source-map entry.

    Attributes:
        start: Start byte offset in the source file.
        length: Length of the range in bytes.
        file_index: Index into the source list; ``-1`` for generated code.
        jump: Jump marker (``i``, ``o`` or ``-``).
        modifier_depth: Modifier depth recorded by the compiler.
    """

    start: int
    length: int
    file_index: int
    jump: str = "-"
    modifier_depth: int = 0

    @property
    def has_source(self) -> bool:
        return self.file_index != NO_FILE and self.start >= 0 and self.length >= 0


def parse_entry(text: str) -> SourceMapEntry:
    """Parse a ``start:length:fileIndex`` entry.

    Fields beyond the third are ignored.

    Args:
        text: Entry text.

    Returns:
        Parsed entry.

    Raises:
        FormatError: If fewer than three fields are present or a field is not
            an integer.
    """
    fields = text.strip().split(":")
    if len(fields) < 3:
        raise FormatError(f"Expected start:length:fileIndex, got {text!r}")
    try:
        start, length, file_index = (int(value, 10) for value in fields[:3])
    except ValueError as exc:
        raise FormatError(f"Non-numeric field in source-map entry {text!r}") from exc
    return SourceMapEntry(start=start, length=length, file_index=file_index)


def decompress_source_map(compressed: str) -> tuple[SourceMapEntry, ...]:
    """Decode the compiler's compressed source map.

    Entries are separated by ``;`` and hold ``s:l:f:j:m`` fields. Empty or
    missing fields repeat the value of the previous entry.

    Args:
        compressed: Compressed source-map text.

    Returns:
        One entry per instruction, in instruction order.

    Raises:
        FormatError: If a present field is not valid.
    """
    if not compressed:
        return ()
    entries: list[SourceMapEntry] = []
    start, length, file_index, jump, modifier_depth = 0, 0, NO_FILE, "-", 0
    for raw in compressed.split(";"):
        fields = raw.split(":")
        try:
            if len(fields) > 0 and fields[0]:
                start = int(fields[0], 10)
            if len(fields) > 1 and fields[1]:
                length = int(fields[1], 10)
            if len(fields) > 2 and fields[2]:
                file_index = int(fields[2], 10)
            if len(fields) > 4 and fields[4]:
                modifier_depth = int(fields[4], 10)
        except ValueError as exc:
            raise FormatError(f"Non-numeric field in source map at {raw!r}") from exc
        if len(fields) > 3 and fields[3]:
            jump = fields[3]
        entries.append(
            SourceMapEntry(
                start=start,
                length=length,
                file_index=file_index,
                jump=jump,
                modifier_depth=modifier_depth,
            )
        )
    return tuple(entries)


def span_for_range(start: int, length: int, index: LineBreakIndex) -> SourceSpan:
    """Convert a byte range to a line/column span.

    This is the single conversion routine shared by every resolution path.

    Args:
        start: Start byte offset.
        length: Range length in bytes.
        index: Line-start index of the file the range belongs to.

    Returns:
        Resolved span, or the sentinel span for a negative range.
    """
    if start < 0 or length < 0:
        return SourceSpan.unresolved()
    return SourceSpan(start=index.position(start), end=index.position(start + length))


def resolve_entry(text: str, index: LineBreakIndex) -> SourceSpan:
    """Resolve a textual source-map entry against a file's line index.

    Args:
        text: ``start:length:fileIndex`` entry.
        index: Line-start index of the file named by the entry's file index.

    Returns:
        Resolved span; the sentinel span for generated code.

    Raises:
        FormatError: If the entry is malformed.
    """
    entry = parse_entry(text)
    if entry.file_index == NO_FILE:
        logger.debug(f"Entry has no source origin (entry={text})")
        return SourceSpan.unresolved()
    return span_for_range(entry.start, entry.length, index)

