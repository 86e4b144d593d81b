# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Grouping and ordering of canonical diagnostics."""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from srcloc.context import basename
from srcloc.model import CanonicalDiagnostic, FileReport, GroupedReport, Severity

logger = logging.getLogger(__name__)

_ERROR_SEVERITIES = frozenset({Severity.HIGH})
_WARNING_SEVERITIES = frozenset({Severity.MEDIUM, Severity.LOW})


def compare_line_col(line1: int, column1: int, line2: int, column2: int) -> int:
    """Compare two line/column positions.

    Returns:
        Zero when equal, negative when the first position comes first,
        positive otherwise.
    """
    if line1 == line2:
        return column1 - column2
    return line1 - line2


def compare_message_range(
    message1: CanonicalDiagnostic, message2: CanonicalDiagnostic
) -> int:
    """Compare two diagnostics by start position, then by end position."""
    result = compare_line_col(
        message1.line, message1.column, message2.line, message2.column
    )
    if result != 0:
        return result
    return compare_line_col(
        message1.end_line, message1.end_col, message2.end_line, message2.end_col
    )


def message_sort_key(
    message: CanonicalDiagnostic,
) -> tuple[int, int, int, int, str, str, str, str]:
    """Return the ordering key of a diagnostic.

    The leading four fields order exactly like ``compare_message_range``;
    the rest only separate diagnostics at the same range, so the resulting
    order does not depend on insertion order.
    """
    return (
        message.line,
        message.column,
        message.end_line,
        message.end_col,
        message.rule_id,
        message.message,
        message.severity.value,
        message.file_path,
    )


def sort_messages(
    messages: Iterable[CanonicalDiagnostic],
) -> tuple[CanonicalDiagnostic, ...]:
    return tuple(sorted(messages, key=message_sort_key))


def build_file_reports(diagnostics: Iterable[CanonicalDiagnostic]) -> list[FileReport]:
    """Fold diagnostics into one report per file path.

    Identical diagnostics for the same file are counted once. ``High`` counts
    as an error, ``Medium`` and ``Low`` as warnings, anything else is kept
    but not counted.

    Args:
        diagnostics: Canonical diagnostics in any order.

    Returns:
        Reports sorted by file path, each with sorted messages.
    """
    by_path: dict[str, dict[CanonicalDiagnostic, None]] = {}
    for diagnostic in diagnostics:
        by_path.setdefault(diagnostic.file_path, {}).setdefault(diagnostic, None)

    reports: list[FileReport] = []
    for file_path in sorted(by_path):
        messages = sort_messages(by_path[file_path])
        reports.append(
            FileReport(
                file_path=file_path,
                error_count=sum(1 for message in messages if _is_error(message)),
                warning_count=sum(1 for message in messages if _is_warning(message)),
                messages=messages,
            )
        )
    return reports


def _is_error(message: CanonicalDiagnostic) -> bool:
    return message.fatal or message.severity in _ERROR_SEVERITIES


def _is_warning(message: CanonicalDiagnostic) -> bool:
    return not message.fatal and message.severity in _WARNING_SEVERITIES


@dataclass
class _GroupAccumulator:
    file_path: str
    error_count: int = 0
    warning_count: int = 0
    fixable_error_count: int = 0
    fixable_warning_count: int = 0
    messages: list[CanonicalDiagnostic] = field(default_factory=list)

    def add(self, report: FileReport) -> None:
        self.error_count += report.error_count
        self.warning_count += report.warning_count
        self.fixable_error_count += report.fixable_error_count
        self.fixable_warning_count += report.fixable_warning_count
        self.messages.extend(report.messages)

    def build(self) -> FileReport:
        return FileReport(
            file_path=self.file_path,
            error_count=self.error_count,
            warning_count=self.warning_count,
            fixable_error_count=self.fixable_error_count,
            fixable_warning_count=self.fixable_warning_count,
            messages=sort_messages(self.messages),
        )


def group_by_basename(reports: Iterable[FileReport]) -> GroupedReport:
    """Merge per-file reports whose paths share a file name.

    Counts are summed, fixable counts carried through, and messages merged
    and sorted. The group keeps the first path seen for its file name.

    Args:
        reports: Per-file reports from any number of batches and contracts.

    Returns:
        Reports keyed by file name, in file-name order.
    """
    groups: dict[str, _GroupAccumulator] = {}
    for report in reports:
        key = basename(report.file_path)
        if key not in groups:
            groups[key] = _GroupAccumulator(file_path=report.file_path)
        groups[key].add(report)
    logger.debug(f"Grouped reports by file name (groups={len(groups)})")
    return {key: groups[key].build() for key in sorted(groups)}


def aggregate(diagnostics: Iterable[CanonicalDiagnostic]) -> GroupedReport:
    """Build the grouped report for a full run."""
    return group_by_basename(build_file_reports(diagnostics))


def has_errors(report: GroupedReport) -> bool:
    return any(group.error_count > 0 for group in report.values())
