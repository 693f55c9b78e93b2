# leakgate — Pre-release Leak Gate for Script Repositories
# Copyright (C) 2026 leakgate Project Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""Rich terminal output for scan results.

One block per file with the three named checks, then a summary panel.
Passing files are listed only with --verbose; failing files always are.
"""

from __future__ import annotations

from typing import Any, Iterable

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from leakgate.models.report import FileResult, ScanReport


def _make_console() -> Console:
    """Console with soft wrap, sized to the live terminal."""
    return Console(soft_wrap=True)


console = _make_console()
err_console = Console(stderr=True, soft_wrap=True)


def _safe_print(*args: Any, **kwargs: Any) -> None:
    """Print without cropping; long paths and matches fold instead."""
    kwargs.setdefault("crop", False)
    kwargs.setdefault("overflow", "fold")
    console.print(*args, **kwargs)


# ── Verdict icons ──

ICON_PASS = "[bold green][PASS][/bold green]"
ICON_FAIL = "[bold red][FAIL][/bold red]"
ICON_INFO = "[bold blue][INFO][/bold blue]"


def print_scan_header(report: ScanReport, file_count: int) -> None:
    terms = "enabled" if report.confidential_check_enabled else "disabled (no terms)"
    _safe_print(
        Panel(
            f"Target: {escape(report.scan_target)}\n"
            f"Manifest: {report.manifest_source} ({file_count} script files)\n"
            f"Confidential-term check: {terms}",
            title=f"leakgate v{report.leakgate_version}",
            border_style="blue",
        )
    )


def _format_matches(matches: Iterable[str]) -> str:
    return ", ".join(escape(m) for m in matches)


def print_file_result(result: FileResult) -> None:
    icon = ICON_PASS if result.passed else ICON_FAIL
    _safe_print(f"{icon} [bold]{escape(result.file)}[/bold]")
    for check in result.checks():
        mark = ICON_PASS if check.passed else ICON_FAIL
        line = f"    {mark} {check.title}"
        if check.matches:
            line += f": {_format_matches(check.matches)}"
        _safe_print(line)


def print_file_results(report: ScanReport, verbose: bool = False) -> None:
    """Per-file check triples. Passing files only when verbose."""
    for result in report.results:
        if verbose or not result.passed:
            print_file_result(result)


def print_summary(report: ScanReport) -> None:
    summary = report.summary()

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("label")
    table.add_column("count", justify="right")
    table.add_row("Files scanned", str(summary.files_scanned))
    table.add_row("Files failing", str(summary.files_failed))
    table.add_row("  with confidential terms", str(summary.confidential_hits))
    table.add_row("  with private commands", str(summary.private_command_hits))
    table.add_row("  with private modules", str(summary.private_module_hits))
    table.add_row("  that failed to parse", str(summary.parse_failures))

    if report.passed:
        title, style = f"{ICON_PASS} Ready to publish", "green"
    else:
        title, style = f"{ICON_FAIL} Leaks found", "red"
    _safe_print(Panel(table, title=title, border_style=style))


def print_extraction(
    file_name: str,
    invocations: list[tuple[str, int]],
    declarations: list[str],
    imports: list[str],
    mocks: list[str],
) -> None:
    """Raw extraction dump for the `extract` command."""
    table = Table(title=escape(file_name), show_lines=False)
    table.add_column("Kind", style="cyan")
    table.add_column("Name")
    table.add_column("Line", justify="right", style="dim")

    for name, line in invocations:
        table.add_row("invocation", escape(name), str(line))
    for name in declarations:
        table.add_row("declaration", escape(name), "")
    for name in imports:
        table.add_row("import", escape(name), "")
    for name in mocks:
        table.add_row("mock", escape(name), "")

    _safe_print(table)


def print_error(message: str) -> None:
    err_console.print(f"[red]Error: {escape(message)}[/red]")
