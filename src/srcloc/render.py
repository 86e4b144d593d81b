# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Report renderers selectable by style name."""

import io
import json
from typing import Protocol

from rich.console import Console
from rich.style import Style
from rich.table import Table
from rich.text import Text

from srcloc.model import GroupedReport, Severity

SPACE_LIMITED_STYLES = frozenset({"tap", "markdown"})

_SEVERITY_STYLES: dict[Severity, str] = {
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "yellow",
    Severity.INFO: "blue",
}


class ReportRenderer(Protocol):
    """Render a grouped report to text."""

    def render(self, report: GroupedReport) -> str:
        """Render the report."""


class StylishRenderer:
    """Render one table per file, similar to eslint's stylish output."""

    def __init__(self, width: int = 120) -> None:
        self._width = width

    def render(self, report: GroupedReport) -> str:
        buffer = io.StringIO()
        console = Console(
            file=buffer, force_terminal=False, color_system=None, width=self._width
        )
        errors = sum(group.error_count for group in report.values())
        warnings = sum(group.warning_count for group in report.values())
        for group in report.values():
            if not group.messages:
                continue
            console.rule(Text(group.file_path), style=Style(color="cyan"), characters="-")
            table = Table(show_header=True, expand=True)
            table.add_column("location", justify="right", no_wrap=True)
            table.add_column("severity", no_wrap=True)
            table.add_column("message", ratio=5, overflow="fold")
            table.add_column("rule", no_wrap=True)
            for message in group.messages:
                location = (
                    f"{message.line}:{message.column}" if message.line >= 0 else "-"
                )
                table.add_row(
                    location,
                    f"[{_SEVERITY_STYLES[message.severity]}]{message.severity.value}[/]",
                    Text(message.message),
                    Text(message.rule_id),
                )
            console.print(table)
        total = errors + warnings
        if total:
            console.print(
                f"{total} problems ({errors} errors, {warnings} warnings)",
                markup=False,
                highlight=False,
            )
        return buffer.getvalue()


class JsonRenderer:
    """Render the report as a JSON list of file reports."""

    def render(self, report: GroupedReport) -> str:
        payload = [group.to_json() for group in report.values()]
        return json.dumps(payload, indent=2, sort_keys=True)


class CompactRenderer:
    """Render one ``path:line:col: severity message [rule]`` line per message."""

    def render(self, report: GroupedReport) -> str:
        lines = [
            f"{group.file_path}:{message.line}:{message.column}: "
            f"{message.severity.value} {message.message} [{message.rule_id}]"
            for group in report.values()
            for message in group.messages
        ]
        return "\n".join(lines)


_RENDERERS: dict[str, type] = {
    "stylish": StylishRenderer,
    "json": JsonRenderer,
    "compact": CompactRenderer,
    "unix": CompactRenderer,
    "tap": CompactRenderer,
    "markdown": CompactRenderer,
}


def available_styles() -> list[str]:
    return sorted(_RENDERERS)


def get_renderer(style: str | None) -> ReportRenderer:
    """Resolve a renderer by style name.

    Args:
        style: Style name; ``None`` selects ``stylish``.

    Returns:
        Renderer instance.

    Raises:
        ValueError: If the style is unknown.
    """
    name = style or "stylish"
    renderer_type = _RENDERERS.get(name)
    if renderer_type is None:
        raise ValueError(
            f"Unsupported report style: {name} (available: {', '.join(available_styles())})"
        )
    return renderer_type()
