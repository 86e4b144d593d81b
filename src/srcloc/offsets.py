# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Bytecode offset to source location resolution."""

import logging

from srcloc.bytecode import InstructionTable
from srcloc.linebreaks import LineBreakIndex
from srcloc.model import SourceSpan
from srcloc.srcmap import SourceMapEntry, span_for_range

logger = logging.getLogger(__name__)


class OffsetResolver:
    """Map bytecode offsets to source-map entries and source spans."""

    def __init__(
        self, table: InstructionTable, source_map: tuple[SourceMapEntry, ...]
    ) -> None:
        """Initialize resolver.

        Args:
            table: Instruction table of the bytecode the offsets refer to.
            source_map: Decoded source map aligned 1:1 with the instructions.
        """
        self._table = table
        self._source_map = source_map

    def entry_at(self, offset: int) -> SourceMapEntry | None:
        """Return the source-map entry of the instruction starting at ``offset``.

        Args:
            offset: Bytecode offset.

        Returns:
            Entry with a source origin, or ``None`` when the offset is out of
            range, falls inside push data, has no entry, or maps to generated
            code.
        """
        if offset < 0 or offset >= self._table.byte_length:
            logger.debug(
                f"Offset outside bytecode (offset={offset} length={self._table.byte_length})"
            )
            return None
        instruction = self._table.instruction_at(offset)
        if instruction is None:
            logger.debug(f"No instruction starts at offset (offset={offset})")
            return None
        if instruction >= len(self._source_map):
            logger.debug(
                f"Instruction has no source-map entry (offset={offset} instruction={instruction})"
            )
            return None
        entry = self._source_map[instruction]
        if not entry.has_source:
            return None
        return entry

    def resolve(self, offset: int, index: LineBreakIndex) -> SourceSpan:
        """Resolve a bytecode offset to a span in one file.

        Args:
            offset: Bytecode offset.
            index: Line-start index of the file the entry refers to.

        Returns:
            Resolved span, or the sentinel span when the offset is unmapped.
        """
        entry = self.entry_at(offset)
        if entry is None:
            return SourceSpan.unresolved()
        return span_for_range(entry.start, entry.length, index)
