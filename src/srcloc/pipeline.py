# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Parallel per-contract normalization followed by one grouping fold."""

import concurrent.futures
import logging
from dataclasses import dataclass
from typing import Mapping

from srcloc.aggregator import aggregate
from srcloc.artifact import ArtifactError, CompiledArtifact
from srcloc.context import SourceContext
from srcloc.model import AnalysisBatch, CanonicalDiagnostic, GroupedReport
from srcloc.normalizer import IssueNormalizer, LocationError, NormalizerOptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContractJob:
    """Describe the inputs of one contract's resolution.

    Attributes:
        artifact: Compiled contract.
        batches: Raw analysis batches reported for the contract.
        sources: Raw source text keyed by source-list names.
    """

    artifact: CompiledArtifact
    batches: tuple[AnalysisBatch, ...]
    sources: Mapping[str, str]


@dataclass(frozen=True)
class ContractError:
    """Represent a contract whose artifact could not back resolution."""

    contract_name: str
    message: str


@dataclass(frozen=True)
class PipelineResult:
    """Represent the outcome of one full run."""

    report: GroupedReport
    location_errors: list[LocationError]
    errors: list[ContractError]


def normalize_contract(
    job: ContractJob, options: NormalizerOptions
) -> tuple[list[CanonicalDiagnostic], list[LocationError]]:
    """Normalize every batch of one contract.

    Raises:
        ArtifactError: If the artifact cannot back a bytecode-format batch.
    """
    normalizer = IssueNormalizer(SourceContext.build(job.artifact, job.sources), options)
    diagnostics: list[CanonicalDiagnostic] = []
    location_errors: list[LocationError] = []
    for batch in job.batches:
        batch_diagnostics, batch_errors = normalizer.normalize(batch)
        diagnostics.extend(batch_diagnostics)
        location_errors.extend(batch_errors)
    return diagnostics, location_errors


def run_pipeline(
    jobs: list[ContractJob],
    options: NormalizerOptions | None = None,
    max_workers: int = 4,
) -> PipelineResult:
    """Resolve all contracts concurrently and fold the results.

    Args:
        jobs: One job per analyzed contract.
        options: Normalization options.
        max_workers: Maximum number of worker threads.

    Returns:
        Grouped report plus recoverable location and contract errors.

    Raises:
        ValueError: If ``max_workers`` is not greater than zero.
    """
    if max_workers <= 0:
        raise ValueError("max_workers must be > 0")
    options = options or NormalizerOptions()
    diagnostics: list[CanonicalDiagnostic] = []
    location_errors: list[LocationError] = []
    errors: list[ContractError] = []

    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_job = {
            executor.submit(normalize_contract, job, options): job for job in jobs
        }
        for future in concurrent.futures.as_completed(future_to_job):
            job = future_to_job[future]
            try:
                job_diagnostics, job_errors = future.result()
            except ArtifactError as exc:
                logger.warning(
                    f"Contract could not be resolved (contract={job.artifact.contract_name} "
                    f"error={exc})"
                )
                errors.append(
                    ContractError(contract_name=job.artifact.contract_name, message=str(exc))
                )
                continue
            diagnostics.extend(job_diagnostics)
            location_errors.extend(job_errors)

    report = aggregate(diagnostics)
    logger.info(
        f"Normalization completed (contracts={len(jobs)} diagnostics={len(diagnostics)} "
        f"files={len(report)} errors={len(errors)})"
    )
    errors.sort(key=lambda error: error.contract_name)
    location_errors.sort(key=lambda error: (error.file_path, error.rule_id, error.location))
    return PipelineResult(report=report, location_errors=location_errors, errors=errors)
