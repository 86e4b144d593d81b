# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
import logging
from typing import Any

import pytest

from conftest import VAULT_PATH, VAULT_SOURCE, vault_build_json
from srcloc.artifact import ArtifactError, CompiledArtifact
from srcloc.context import BYTECODE_FORMAT, SourceContext
from srcloc.model import AnalysisBatch, CanonicalDiagnostic, Severity
from srcloc.normalizer import IssueNormalizer, NormalizerOptions, split_batch_by_source

SOURCE_NAME = "/tmp/contracts/Vault.sol"


def _batch(
    *locations: str,
    source_format: str = "text",
    swc_id: str = "SWC-110",
    severity: str = "High",
    source_list: list[str] | None = None,
) -> AnalysisBatch:
    payload: dict[str, Any] = {
        "sourceFormat": source_format,
        "sourceType": "raw-bytecode" if source_format == BYTECODE_FORMAT else "solidity-file",
        "sourceList": source_list or [SOURCE_NAME],
        "issues": [
            {
                "description": {"head": "Head message", "tail": "Tail message"},
                "locations": [{"sourceMap": location} for location in locations],
                "severity": severity,
                "swcID": swc_id,
                "swcTitle": "Test Title",
            }
        ],
        "meta": {"selected_compiler": "0.5.0", "error": [], "warning": []},
    }
    return AnalysisBatch.from_json(payload)


def test_norm_001_text_location_becomes_canonical_diagnostic(
    vault_context: SourceContext,
) -> None:
    diagnostics, errors = IssueNormalizer(vault_context).normalize(_batch("25:10:0"))

    assert errors == []
    assert diagnostics == [
        CanonicalDiagnostic(
            rule_id="SWC-110",
            line=3,
            column=0,
            end_line=3,
            end_col=10,
            severity=Severity.HIGH,
            message="Head message Tail message",
            fatal=False,
            file_path=SOURCE_NAME,
        )
    ]


def test_norm_002_bytecode_location_goes_through_instruction_table(
    vault_context: SourceContext,
) -> None:
    diagnostics, errors = IssueNormalizer(vault_context).normalize(
        _batch("8:1:0", source_format=BYTECODE_FORMAT)
    )

    assert errors == []
    assert len(diagnostics) == 1
    diagnostic = diagnostics[0]
    assert (diagnostic.line, diagnostic.column) == (3, 15)
    assert (diagnostic.end_line, diagnostic.end_col) == (4, 6)
    assert diagnostic.file_path == VAULT_PATH


def test_norm_003_unmapped_offset_is_kept_with_sentinel_line(
    vault_context: SourceContext,
) -> None:
    diagnostics, errors = IssueNormalizer(vault_context).normalize(
        _batch("9:1:0", "16:1:0", source_format=BYTECODE_FORMAT)
    )

    assert errors == []
    assert [(d.line, d.column, d.end_line, d.end_col) for d in diagnostics] == [
        (-1, 0, -1, 0),
        (-1, 0, -1, 0),
    ]


def test_norm_004_dynamic_array_declaration_suppresses_variable_rules(
    vault_context: SourceContext,
) -> None:
    normalizer = IssueNormalizer(vault_context)

    suppressed, _ = normalizer.normalize(_batch("46:25:0", swc_id="SWC-131"))
    by_offset, _ = normalizer.normalize(
        _batch("15:1:0", source_format=BYTECODE_FORMAT, swc_id="SWC-131")
    )
    other_rule, _ = normalizer.normalize(_batch("46:25:0", swc_id="SWC-110"))
    fixed_array, _ = normalizer.normalize(_batch("77:28:0", swc_id="SWC-131"))

    assert suppressed == []
    assert by_offset == []
    assert len(other_rule) == 1
    assert len(fixed_array) == 1


def test_norm_005_suppression_is_logged_at_info_when_verbose(
    vault_context: SourceContext, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="srcloc.normalizer")
    quiet = IssueNormalizer(vault_context)
    verbose = IssueNormalizer(vault_context, NormalizerOptions(verbose=True))

    quiet.normalize(_batch("46:25:0", swc_id="SWC-131"))
    assert "Suppressing issue" not in caplog.text

    verbose.normalize(_batch("46:25:0", swc_id="SWC-131"))
    assert "Suppressing issue" in caplog.text


def test_norm_006_malformed_location_does_not_abort_siblings(
    vault_context: SourceContext,
) -> None:
    diagnostics, errors = IssueNormalizer(vault_context).normalize(
        _batch("25:10:0", "not-an-entry", "5:x:0")
    )

    assert len(diagnostics) == 1
    assert [error.location for error in errors] == ["not-an-entry", "5:x:0"]
    assert all(error.rule_id == "SWC-110" for error in errors)


def test_norm_007_unknown_severity_becomes_informational(
    vault_context: SourceContext,
) -> None:
    diagnostics, _ = IssueNormalizer(vault_context).normalize(
        _batch("25:10:0", severity="Critical")
    )

    assert diagnostics[0].severity is Severity.INFO
    assert diagnostics[0].fatal is False


def test_norm_008_space_limited_messages_use_head_only(
    vault_context: SourceContext,
) -> None:
    normalizer = IssueNormalizer(vault_context, NormalizerOptions(space_limited=True))

    diagnostics, _ = normalizer.normalize(_batch("25:10:0"))

    assert diagnostics[0].message == "Head message"


def test_norm_009_bytecode_format_without_source_map_is_a_hard_failure() -> None:
    artifact = CompiledArtifact.from_build_json(vault_build_json(deployedSourceMap=None))
    context = SourceContext.build(artifact, {VAULT_PATH: VAULT_SOURCE})

    text_diagnostics, _ = IssueNormalizer(context).normalize(_batch("25:10:0"))
    assert len(text_diagnostics) == 1
    with pytest.raises(ArtifactError):
        IssueNormalizer(context).normalize(_batch("8:1:0", source_format=BYTECODE_FORMAT))


def test_norm_010_locations_are_attributed_to_the_file_they_index() -> None:
    batch = _batch(
        "1:2:1",
        "3:4:0",
        "5:6:-1",
        "7:8:9",
        source_list=["a/First.sol", "b/Second.sol"],
    )

    first, second = split_batch_by_source(batch)

    assert first.source == "a/First.sol"
    assert [location.source_map for _, location in first.items] == [
        "3:4:0",
        "5:6:-1",
        "7:8:9",
    ]
    assert second.source == "b/Second.sol"
    assert [location.source_map for _, location in second.items] == ["1:2:1"]


def test_norm_011_generated_code_entry_in_text_format_is_unresolved(
    vault_context: SourceContext,
) -> None:
    diagnostics, errors = IssueNormalizer(vault_context).normalize(_batch("25:10:-1"))

    assert errors == []
    assert diagnostics[0].line == -1
    assert diagnostics[0].file_path == SOURCE_NAME


LIB_PATH = "contracts/Lib.sol"
LIB_SOURCE = "library Lib {\nfunction f() {}\n}\n"


def test_norm_012_bytecode_span_in_imported_file_is_reported_under_that_file() -> None:
    artifact = CompiledArtifact.from_build_json(
        vault_build_json(
            deployedSourceMap="0:60:0:-:0;;;25:10;;;40:8;14:10:1;::-1;;46:25:0",
            sourceList=[VAULT_PATH, LIB_PATH],
        )
    )
    context = SourceContext.build(artifact, {VAULT_PATH: VAULT_SOURCE, LIB_PATH: LIB_SOURCE})
    batch = _batch("11:1:0", "8:1:0", "12:1:0", source_format=BYTECODE_FORMAT)

    diagnostics, errors = IssueNormalizer(context).normalize(batch)

    assert errors == []
    assert [
        (d.file_path, d.line, d.column, d.end_line, d.end_col) for d in diagnostics
    ] == [
        (LIB_PATH, 2, 0, 2, 10),
        (VAULT_PATH, 3, 15, 4, 6),
        (SOURCE_NAME, -1, 0, -1, 0),
    ]
