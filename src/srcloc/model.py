# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Domain models for located diagnostics."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

UNRESOLVED_LINE = -1


@dataclass(frozen=True, order=True)
class SourcePosition:
    """Represent one position in source text.

    Attributes:
        line: Line number (1-based); ``-1`` when unresolved.
        column: Byte column within the line (0-based).
    """

    line: int
    column: int


@dataclass(frozen=True)
class SourceSpan:
    """Represent a resolved source range.

    Attributes:
        start: Inclusive start position.
        end: Exclusive end position; ``None`` is the empty end marker.
    """

    start: SourcePosition
    end: SourcePosition | None

    @classmethod
    def unresolved(cls) -> "SourceSpan":
        """Return the sentinel span for offsets without a source origin."""
        return cls(start=SourcePosition(line=UNRESOLVED_LINE, column=0), end=None)

    @property
    def is_resolved(self) -> bool:
        return self.start.line != UNRESOLVED_LINE


class Severity(str, Enum):
    """Severity values reported by the analysis service."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    INFO = "Info"

    @classmethod
    def from_raw(cls, value: object) -> "Severity":
        """Map a raw severity value, treating unknown values as informational."""
        for member in (cls.HIGH, cls.MEDIUM, cls.LOW):
            if value == member.value:
                return member
        return cls.INFO


@dataclass(frozen=True)
class RawLocation:
    """Represent one location attached to a raw diagnostic.

    Attributes:
        source_map: ``start:length:fileIndex`` text, possibly with extra fields.
        address: Explicit bytecode offset, when the service provides one.
    """

    source_map: str | None = None
    address: int | None = None

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "RawLocation":
        address = payload.get("address")
        return cls(
            source_map=payload.get("sourceMap"),
            address=int(address) if address is not None else None,
        )


@dataclass(frozen=True)
class RawDiagnostic:
    """Represent one issue as emitted by the analysis service."""

    head: str
    tail: str
    locations: tuple[RawLocation, ...]
    severity: str
    swc_id: str
    swc_title: str = ""

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "RawDiagnostic":
        """Build a diagnostic from the service's JSON issue object.

        Args:
            payload: Issue mapping with ``description``, ``locations``,
                ``severity``, ``swcID`` and ``swcTitle`` keys.

        Returns:
            Parsed raw diagnostic.
        """
        description = payload.get("description") or {}
        return cls(
            head=str(description.get("head", "")),
            tail=str(description.get("tail", "")),
            locations=tuple(
                RawLocation.from_json(location)
                for location in payload.get("locations") or ()
            ),
            severity=str(payload.get("severity", "")),
            swc_id=str(payload.get("swcID", "")),
            swc_title=str(payload.get("swcTitle", "")),
        )


@dataclass(frozen=True)
class AnalysisBatch:
    """Represent one batch of raw diagnostics with its source metadata.

    Attributes:
        source_format: ``evm-byzantium-bytecode`` or a source-level format tag.
        source_type: Kind of submitted input, e.g. ``raw-bytecode``.
        source_list: File identifiers referenced by location file indexes.
        issues: Raw diagnostics of the batch.
    """

    source_format: str
    source_type: str
    source_list: tuple[str, ...]
    issues: tuple[RawDiagnostic, ...]

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "AnalysisBatch":
        return cls(
            source_format=str(payload.get("sourceFormat", "")),
            source_type=str(payload.get("sourceType", "")),
            source_list=tuple(payload.get("sourceList") or ()),
            issues=tuple(
                RawDiagnostic.from_json(issue) for issue in payload.get("issues") or ()
            ),
        )


@dataclass(frozen=True)
class CanonicalDiagnostic:
    """Represent one normalized diagnostic ready for grouping.

    Attributes:
        rule_id: Weakness classification identifier.
        line: Start line (1-based); ``-1`` when unresolved.
        column: Start column (0-based).
        end_line: End line; ``-1`` when the end is unknown.
        end_col: End column.
        severity: Mapped severity.
        message: Human-readable message.
        fatal: Reserved for parse failures; never set during resolution.
        file_path: Source path the diagnostic belongs to.
    """

    rule_id: str
    line: int
    column: int
    end_line: int
    end_col: int
    severity: Severity
    message: str
    fatal: bool = False
    file_path: str = ""

    def to_json(self) -> dict[str, Any]:
        return {
            "ruleId": self.rule_id,
            "line": self.line,
            "column": self.column,
            "endLine": self.end_line,
            "endCol": self.end_col,
            "severity": self.severity.value,
            "message": self.message,
            "fatal": self.fatal,
            "filePath": self.file_path,
        }


@dataclass(frozen=True)
class FileReport:
    """Represent aggregated diagnostics for one file."""

    file_path: str
    error_count: int = 0
    warning_count: int = 0
    fixable_error_count: int = 0
    fixable_warning_count: int = 0
    messages: tuple[CanonicalDiagnostic, ...] = field(default_factory=tuple)

    def to_json(self) -> dict[str, Any]:
        return {
            "errorCount": self.error_count,
            "warningCount": self.warning_count,
            "fixableErrorCount": self.fixable_error_count,
            "fixableWarningCount": self.fixable_warning_count,
            "filePath": self.file_path,
            "messages": [message.to_json() for message in self.messages],
        }


GroupedReport = dict[str, FileReport]
"""Mapping from file basename to its aggregated report."""
