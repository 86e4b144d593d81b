# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Line-start index for byte offset to line/column conversion."""

import bisect
from dataclasses import dataclass

from srcloc.model import SourcePosition


@dataclass(frozen=True)
class LineBreakIndex:
    """Represent the byte offsets at which each line of a file begins.

    Attributes:
        file_name: Source identifier the index was built for.
        line_starts: Ascending line-start byte offsets; always starts with ``0``.
        size: Total size of the source in bytes.
    """

    file_name: str
    line_starts: tuple[int, ...]
    size: int

    @property
    def line_count(self) -> int:
        return len(self.line_starts)

    def position(self, offset: int) -> SourcePosition:
        """Convert a byte offset to a line/column position.

        The line is the greatest line whose start offset is ``<= offset``.

        Args:
            offset: Non-negative byte offset into the source.

        Returns:
            Position with a 1-based line and 0-based byte column.

        Raises:
            ValueError: If ``offset`` is negative.
        """
        if offset < 0:
            raise ValueError(f"offset must be >= 0, got {offset}")
        line_index = bisect.bisect_right(self.line_starts, offset) - 1
        return SourcePosition(
            line=line_index + 1, column=offset - self.line_starts[line_index]
        )


def build_line_break_index(source: str | bytes, file_name: str = "") -> LineBreakIndex:
    """Build the line-start index of a source text.

    Offsets are measured in UTF-8 bytes, matching compiler source maps. Every
    ``\\n`` ends exactly one line, so ``k`` terminators yield ``k + 1`` starts;
    a ``\\r`` before it stays part of the line it ends.

    Args:
        source: Raw source text or its encoded bytes.
        file_name: Source identifier recorded on the index.

    Returns:
        Immutable line-start index.
    """
    data = source.encode("utf-8") if isinstance(source, str) else source
    starts = [0]
    position = data.find(b"\n")
    while position != -1:
        starts.append(position + 1)
        position = data.find(b"\n", position + 1)
    return LineBreakIndex(file_name=file_name, line_starts=tuple(starts), size=len(data))
