# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Normalization of raw analysis diagnostics into canonical diagnostics."""

import logging
from dataclasses import dataclass, field

from srcloc.ast_heuristics import is_dynamic_array_declaration
from srcloc.context import SourceContext, location_entry
from srcloc.model import (
    UNRESOLVED_LINE,
    AnalysisBatch,
    CanonicalDiagnostic,
    RawDiagnostic,
    RawLocation,
    Severity,
    SourceSpan,
)
from srcloc.srcmap import FormatError, parse_entry

logger = logging.getLogger(__name__)

DEFAULT_SUPPRESSIBLE_RULES = frozenset({"SWC-109", "SWC-131"})


@dataclass(frozen=True)
class NormalizerOptions:
    """Options controlling normalization.

    Attributes:
        verbose: Log suppressed diagnostics at INFO instead of DEBUG.
        space_limited: Use only the description head as message.
        suppressible_rules: Rule IDs eligible for dynamic-array suppression.
    """

    verbose: bool = False
    space_limited: bool = False
    suppressible_rules: frozenset[str] = field(
        default_factory=lambda: DEFAULT_SUPPRESSIBLE_RULES
    )


@dataclass(frozen=True)
class LocationError:
    """Represent one location that could not be normalized."""

    file_path: str
    rule_id: str
    location: str
    message: str


@dataclass(frozen=True)
class SourceBatch:
    """Represent the diagnostics of one batch attributed to one source file."""

    source: str
    source_format: str
    source_list: tuple[str, ...]
    items: tuple[tuple[RawDiagnostic, RawLocation], ...]


def split_batch_by_source(batch: AnalysisBatch) -> list[SourceBatch]:
    """Split a batch into per-source batches keyed by location file index.

    Locations whose file index is ``-1``, out of range, or unparsable are
    attributed to the first source so they are never dropped.

    Args:
        batch: Raw analysis batch.

    Returns:
        One batch per entry of the source list, in source-list order.
    """
    sources = batch.source_list or ("",)
    buckets: list[list[tuple[RawDiagnostic, RawLocation]]] = [[] for _ in sources]
    for issue in batch.issues:
        for location in issue.locations:
            buckets[_source_slot(location, len(sources))].append((issue, location))
    return [
        SourceBatch(
            source=source,
            source_format=batch.source_format,
            source_list=batch.source_list,
            items=tuple(items),
        )
        for source, items in zip(sources, buckets)
    ]


def _source_slot(location: RawLocation, source_count: int) -> int:
    if not location.source_map:
        return 0
    try:
        file_index = parse_entry(location.source_map).file_index
    except FormatError:
        return 0
    return file_index if 0 <= file_index < source_count else 0


class IssueNormalizer:
    """Convert raw diagnostics of one contract into canonical diagnostics."""

    def __init__(
        self, context: SourceContext, options: NormalizerOptions | None = None
    ) -> None:
        """Initialize normalizer.

        Args:
            context: Resolution context of the analyzed contract.
            options: Normalization options; defaults apply when omitted.
        """
        self._context = context
        self._options = options or NormalizerOptions()

    def normalize(
        self, batch: AnalysisBatch
    ) -> tuple[list[CanonicalDiagnostic], list[LocationError]]:
        """Normalize every location of a batch.

        A malformed location yields a ``LocationError`` and does not stop the
        remaining locations.

        Args:
            batch: Raw analysis batch.

        Returns:
            Canonical diagnostics grouped by source in source-list order, and
            per-location errors.

        Raises:
            ArtifactError: If a bytecode format is requested for an artifact
                without bytecode or runtime source map.
        """
        diagnostics: list[CanonicalDiagnostic] = []
        errors: list[LocationError] = []
        for source_batch in split_batch_by_source(batch):
            for issue, location in source_batch.items:
                try:
                    diagnostic = self.normalize_location(
                        issue=issue,
                        location=location,
                        source_format=source_batch.source_format,
                        file_path=source_batch.source,
                        source_list=source_batch.source_list,
                    )
                except FormatError as exc:
                    logger.warning(
                        f"Skipping malformed location (file={source_batch.source} "
                        f"rule={issue.swc_id} location={location} error={exc})"
                    )
                    errors.append(
                        LocationError(
                            file_path=source_batch.source,
                            rule_id=issue.swc_id,
                            location=str(location.source_map or location.address),
                            message=str(exc),
                        )
                    )
                    continue
                if diagnostic is not None:
                    diagnostics.append(diagnostic)
        return diagnostics, errors

    def normalize_location(
        self,
        issue: RawDiagnostic,
        location: RawLocation,
        source_format: str,
        file_path: str,
        source_list: tuple[str, ...] = (),
    ) -> CanonicalDiagnostic | None:
        """Normalize one issue location.

        Args:
            issue: Raw diagnostic.
            location: One of the diagnostic's locations.
            source_format: Batch format tag.
            file_path: Batch source the location is attributed to; used only
                when the location does not resolve to a span.
            source_list: Source list of the batch.

        Returns:
            Canonical diagnostic, or ``None`` when the location is suppressed.
            A resolved span is reported under the file its entry names.
            Unmapped locations produce a diagnostic with line ``-1``.

        Raises:
            FormatError: If the location text is malformed.
        """
        entry, names = location_entry(location, source_format, self._context, source_list)
        if entry is None:
            return self._to_canonical(issue, SourceSpan.unresolved(), file_path)
        if self._context.is_main_source(entry, names) and self._is_suppressed(
            issue, entry.start, entry.length
        ):
            return None
        span = self._context.resolve_range(entry, names)
        if span.is_resolved:
            file_path = self._context.file_name(entry.file_index, names) or file_path
        return self._to_canonical(issue, span, file_path)

    def _is_suppressed(self, issue: RawDiagnostic, start: int, length: int) -> bool:
        if issue.swc_id not in self._options.suppressible_rules:
            return False
        if not is_dynamic_array_declaration(self._context.artifact.ast, start, length):
            return False
        level = logging.INFO if self._options.verbose else logging.DEBUG
        logger.log(
            level,
            f"Suppressing issue around dynamically sized array declaration "
            f"(contract={self._context.artifact.contract_name} rule={issue.swc_id} "
            f"start={start} length={length})",
        )
        return True

    def _to_canonical(
        self, issue: RawDiagnostic, span: SourceSpan, file_path: str
    ) -> CanonicalDiagnostic:
        if self._options.space_limited or not issue.tail:
            message = issue.head
        else:
            message = f"{issue.head} {issue.tail}"
        end = span.end
        return CanonicalDiagnostic(
            rule_id=issue.swc_id,
            line=span.start.line,
            column=span.start.column,
            end_line=end.line if end is not None else UNRESOLVED_LINE,
            end_col=end.column if end is not None else 0,
            severity=Severity.from_raw(issue.severity),
            message=message,
            fatal=False,
            file_path=file_path,
        )
