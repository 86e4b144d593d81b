# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Per-contract resolution context and the location resolution entry point."""

import logging
import posixpath
from dataclasses import dataclass
from typing import Mapping

from srcloc.artifact import CompiledArtifact
from srcloc.linebreaks import LineBreakIndex, build_line_break_index
from srcloc.model import RawLocation, SourceSpan
from srcloc.srcmap import NO_FILE, SourceMapEntry, parse_entry, span_for_range

logger = logging.getLogger(__name__)

BYTECODE_FORMAT = "evm-byzantium-bytecode"


def basename(path: str) -> str:
    """Return a path's file name, accepting POSIX and Windows separators."""
    return posixpath.basename(path.replace("\\", "/"))


@dataclass(frozen=True)
class SourceContext:
    """Hold the immutable per-contract data needed to resolve locations.

    Attributes:
        artifact: Compiled contract.
        line_indexes: Line-start indexes keyed by source path.
    """

    artifact: CompiledArtifact
    line_indexes: Mapping[str, LineBreakIndex]

    @classmethod
    def build(
        cls, artifact: CompiledArtifact, sources: Mapping[str, str | bytes]
    ) -> "SourceContext":
        """Build a context, indexing every supplied source text once.

        Args:
            artifact: Compiled contract.
            sources: Raw source text keyed by the names used in source lists.

        Returns:
            Resolution context.
        """
        return cls(
            artifact=artifact,
            line_indexes={
                name: build_line_break_index(text, file_name=name)
                for name, text in sources.items()
            },
        )

    def line_index(self, file_name: str) -> LineBreakIndex | None:
        """Return the line index for a path, falling back to a basename match.

        The fallback only applies when exactly one supplied source shares the
        path's file name.

        Args:
            file_name: Path as named by a source list.

        Returns:
            Line index, or ``None`` when no source or several sources match.
        """
        index = self.line_indexes.get(file_name)
        if index is not None:
            return index
        wanted = basename(file_name)
        candidates = [name for name in self.line_indexes if basename(name) == wanted]
        if len(candidates) != 1:
            logger.debug(
                f"No unique source for file name (file={file_name} "
                f"candidates={candidates})"
            )
            return None
        logger.debug(
            f"Resolving file by file name (file={file_name} source={candidates[0]})"
        )
        return self.line_indexes[candidates[0]]

    def file_name(self, file_index: int, source_list: tuple[str, ...]) -> str | None:
        if file_index == NO_FILE or not 0 <= file_index < len(source_list):
            return None
        return source_list[file_index]

    def is_main_source(
        self, entry: SourceMapEntry, source_list: tuple[str, ...]
    ) -> bool:
        """Return whether an entry points into the file the artifact AST covers."""
        file_name = self.file_name(entry.file_index, source_list)
        if file_name is None:
            return False
        return basename(file_name) == basename(self.artifact.source_path)

    def resolve_range(
        self, entry: SourceMapEntry, source_list: tuple[str, ...]
    ) -> SourceSpan:
        """Resolve an entry's byte range in the file its index names.

        Args:
            entry: Decoded source-map entry.
            source_list: Source list the entry's file index refers to.

        Returns:
            Resolved span, or the sentinel span when the file is unknown.
        """
        file_name = self.file_name(entry.file_index, source_list)
        if file_name is None:
            return SourceSpan.unresolved()
        index = self.line_index(file_name)
        if index is None:
            logger.warning(
                f"No unique source text for referenced file "
                f"(contract={self.artifact.contract_name} "
                f"file={file_name})"
            )
            return SourceSpan.unresolved()
        return span_for_range(entry.start, entry.length, index)


def bytecode_offset(location: RawLocation) -> int:
    """Return the bytecode offset a bytecode-format location refers to.

    An explicit ``address`` wins; otherwise the first field of the location's
    ``sourceMap`` text is the offset.

    Raises:
        FormatError: If neither field yields an offset.
    """
    if location.address is not None:
        return location.address
    return parse_entry(location.source_map or "").start


def location_entry(
    location: RawLocation,
    source_format: str,
    context: SourceContext,
    source_list: tuple[str, ...],
) -> tuple[SourceMapEntry | None, tuple[str, ...]]:
    """Return the source-map entry a location denotes and its source list.

    Bytecode-format locations go through the instruction table and the
    artifact's source list; other formats carry the entry directly.

    Raises:
        FormatError: If the location text is malformed.
        ArtifactError: If a bytecode format is requested for an artifact
            without bytecode or runtime source map.
    """
    if source_format == BYTECODE_FORMAT:
        resolver = context.artifact.offset_resolver
        entry = resolver.entry_at(bytecode_offset(location))
        return entry, context.artifact.source_list or source_list
    entry = parse_entry(location.source_map or "")
    return (entry if entry.has_source else None), source_list


def resolve_location(
    location: RawLocation,
    source_format: str,
    context: SourceContext,
    source_list: tuple[str, ...] = (),
) -> SourceSpan:
    """Resolve one diagnostic location to a source span.

    Args:
        location: Raw location from the analysis service.
        source_format: Batch format tag.
        context: Resolution context of the analyzed contract.
        source_list: Source list of the batch.

    Returns:
        Resolved span, or the sentinel span for unmapped locations.

    Raises:
        FormatError: If the location text is malformed.
        ArtifactError: If the artifact cannot back a bytecode-format lookup.
    """
    entry, names = location_entry(location, source_format, context, source_list)
    if entry is None:
        return SourceSpan.unresolved()
    return context.resolve_range(entry, names)
