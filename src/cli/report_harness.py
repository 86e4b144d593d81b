# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""CLI verification harness resolving stored analysis results to a report."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, TextIO

from rich.console import Console
from rich.logging import RichHandler

from srcloc.aggregator import has_errors
from srcloc.artifact import ArtifactError, CompiledArtifact
from srcloc.model import AnalysisBatch
from srcloc.normalizer import NormalizerOptions
from srcloc.pipeline import ContractJob, PipelineResult, run_pipeline
from srcloc.render import SPACE_LIMITED_STYLES, ReportRenderer, available_styles, get_renderer

logger = logging.getLogger(__name__)


class InputError(RuntimeError):
    """Represent unreadable or inconsistent harness input."""


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="srcloc")
    parser.add_argument(
        "--artifact",
        action="append",
        required=True,
        help="Build JSON of one contract; repeat once per contract.",
    )
    parser.add_argument(
        "--issues",
        action="append",
        required=True,
        help="Analysis result JSON for the artifact at the same position.",
    )
    parser.add_argument(
        "--source-root",
        default=".",
        help="Directory used to locate relative source paths.",
    )
    parser.add_argument(
        "--style",
        choices=available_styles(),
        default="stylish",
        help="Report output style.",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=4,
        help="Contracts resolved in parallel.",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Log suppressed issues and details."
    )
    return parser


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run CLI command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code: ``0`` without errors, ``1`` if any file reports an error,
        ``2`` for invalid input.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return 2
    if args.max_workers <= 0:
        logger.warning(f"Invalid worker count (max_workers={args.max_workers})")
        stderr.write("max-workers must be > 0\n")
        return 2
    if len(args.artifact) != len(args.issues):
        stderr.write("Each --artifact needs exactly one matching --issues file\n")
        return 2

    renderer = get_renderer(args.style)
    options = NormalizerOptions(
        verbose=args.debug, space_limited=args.style in SPACE_LIMITED_STYLES
    )
    try:
        jobs = [
            load_job(
                artifact_path=Path(artifact_path),
                issues_path=Path(issues_path),
                source_root=Path(args.source_root),
            )
            for artifact_path, issues_path in zip(args.artifact, args.issues)
        ]
    except InputError as exc:
        logger.warning(f"Failed to load input (error={exc})")
        stderr.write(f"{exc}\n")
        return 2

    result = run_pipeline(jobs=jobs, options=options, max_workers=args.max_workers)
    _write_errors(result=result, stderr=stderr)
    _write_report(result=result, renderer=renderer, stdout=stdout)
    return 1 if has_errors(result.report) else 0


def load_job(artifact_path: Path, issues_path: Path, source_root: Path) -> ContractJob:
    """Load one contract job from disk.

    Args:
        artifact_path: Build JSON path.
        issues_path: Analysis result JSON path; a batch object or a list of them.
        source_root: Directory used to locate relative source paths.

    Returns:
        Job with every readable referenced source loaded.

    Raises:
        InputError: If a JSON file cannot be read or the artifact is invalid.
    """
    try:
        artifact = CompiledArtifact.from_build_json(_read_json(artifact_path))
    except ArtifactError as exc:
        raise InputError(f"Invalid artifact {artifact_path}: {exc}") from exc
    payload = _read_json(issues_path)
    raw_batches = payload if isinstance(payload, list) else [payload]
    batches = tuple(AnalysisBatch.from_json(batch) for batch in raw_batches)

    names = {artifact.source_path, *artifact.source_list}
    for batch in batches:
        names.update(batch.source_list)
    sources: dict[str, str] = {}
    for name in sorted(names):
        text = _read_source(name=name, source_root=source_root)
        if text is not None:
            sources[name] = text
    return ContractJob(artifact=artifact, batches=batches, sources=sources)


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise InputError(f"Cannot read JSON file {path}: {exc}") from exc


def _read_source(name: str, source_root: Path) -> str | None:
    """Read a source by name, trying the name itself then below the root."""
    candidates = [Path(name), source_root / name, source_root / Path(name).name]
    for candidate in candidates:
        if not candidate.is_file():
            continue
        try:
            return candidate.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(f"Skipping unreadable source (path={candidate} error={exc})")
            return None
    logger.warning(f"Source not found (name={name} source_root={source_root})")
    return None


def _write_errors(result: PipelineResult, stderr: TextIO) -> None:
    """Write recoverable contract and location errors to stderr."""
    for error in result.errors:
        stderr.write(f"contract_error: {error.contract_name}: {error.message}\n")
    for location_error in result.location_errors:
        stderr.write(
            f"location_error: {location_error.file_path} {location_error.rule_id} "
            f"{location_error.location}: {location_error.message}\n"
        )


def _write_report(
    result: PipelineResult, renderer: ReportRenderer, stdout: TextIO
) -> None:
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    console.print(
        renderer.render(result.report),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    if "--debug" in sys.argv[1:]:
        logging.getLogger().setLevel(logging.DEBUG)
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
