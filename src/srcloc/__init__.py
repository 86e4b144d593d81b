# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Public import surface for source location resolution and reporting."""

from srcloc.aggregator import aggregate, group_by_basename, has_errors
from srcloc.artifact import ArtifactError, CompiledArtifact
from srcloc.context import SourceContext, resolve_location
from srcloc.linebreaks import LineBreakIndex, build_line_break_index
from srcloc.model import (
    AnalysisBatch,
    CanonicalDiagnostic,
    FileReport,
    GroupedReport,
    RawDiagnostic,
    Severity,
    SourcePosition,
    SourceSpan,
)
from srcloc.normalizer import IssueNormalizer, NormalizerOptions
from srcloc.pipeline import ContractJob, run_pipeline
from srcloc.srcmap import FormatError, resolve_entry

__all__ = [
    "AnalysisBatch",
    "ArtifactError",
    "CanonicalDiagnostic",
    "CompiledArtifact",
    "ContractJob",
    "FileReport",
    "FormatError",
    "GroupedReport",
    "IssueNormalizer",
    "LineBreakIndex",
    "NormalizerOptions",
    "RawDiagnostic",
    "Severity",
    "SourceContext",
    "SourcePosition",
    "SourceSpan",
    "aggregate",
    "build_line_break_index",
    "group_by_basename",
    "has_errors",
    "resolve_entry",
    "resolve_location",
    "run_pipeline",
]
