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

"""leakgate CLI — Typer entry point.

Commands:
- leakgate scan <path>     — Scan a script tree for leaks before publishing
- leakgate extract <file>  — Show the raw references found in one file
- leakgate version         — Show the leakgate version

Exit codes for scan: 0 clean, 1 leaks found, 2 bad input or configuration.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from leakgate import __version__
from leakgate.errors import LeakGateError
from leakgate.models.report import ScanReport
from leakgate.policy.config_loader import build_config
from leakgate.reporter.console_out import (
    console,
    print_error,
    print_extraction,
    print_file_results,
    print_scan_header,
    print_summary,
)
from leakgate.reporter.json_out import report_to_dict, to_canonical_json, write_report
from leakgate.scanner.coordinator import discover_files, get_script_files
from leakgate.scanner.mock_scanner import scan_mock_references
from leakgate.scanner.pipeline import build_context, scan_files
from leakgate.scanner.syntax_extractor import extract_syntax, read_script

app = typer.Typer(
    name="leakgate",
    help=(
        "leakgate: pre-release leak gate for PowerShell script trees. "
        "Run 'leakgate <command> --help' for flags."
    ),
    add_completion=False,
)

logger = logging.getLogger("leakgate")

EXIT_CLEAN = 0
EXIT_LEAKS = 1
EXIT_ERROR = 2


def _configure_logging(verbose: bool, quiet: bool) -> None:
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)


def _run_scan(
    path: str,
    *,
    config_path: Optional[str],
    overrides: dict,
    output_json: bool,
    output: Optional[str],
    verbose: bool,
    quiet: bool,
) -> ScanReport:
    target_dir = Path(path).resolve()

    # ── Step 1: Discover files (fails fast on a bad root) ──
    all_files, manifest_source = discover_files(target_dir)

    # ── Step 2: Configuration, allow-list and terms ──
    config = build_config(target_dir, config_path=config_path, overrides=overrides)
    context = build_context(config)
    script_files = get_script_files(all_files, config.extensions)
    logger.info("%d script files selected (%s)", len(script_files), ", ".join(config.extensions))

    report = ScanReport(
        scan_target=str(target_dir),
        manifest_source=manifest_source,
        confidential_check_enabled=context.confidential.enabled,
    )

    if not quiet and not output_json:
        print_scan_header(report, len(script_files))

    # ── Step 3: Scan ──
    report.results = scan_files(target_dir, script_files, context, workers=config.workers)

    # ── Step 4: Output ──
    if output:
        write_report(report, Path(output))

    if output_json:
        print(to_canonical_json(report_to_dict(report)), end="")
    elif not quiet:
        print_file_results(report, verbose=verbose)
        print_summary(report)

    return report


@app.command()
def scan(
    path: str = typer.Argument(".", help="Root directory to scan (default: current directory)"),
    term: Optional[List[str]] = typer.Option(
        None, "--term", "-t", help="Confidentiality term (regular expression). Repeatable."
    ),
    terms_file: Optional[List[str]] = typer.Option(
        None, "--terms-file", help="File with one confidentiality term per line. Repeatable."
    ),
    allowlist: Optional[List[str]] = typer.Option(
        None, "--allowlist", help="Extra allow-list YAML (commands/modules/aliases). Repeatable."
    ),
    ext: Optional[List[str]] = typer.Option(
        None, "--ext", help="Script extension to scan (default: .ps1 .psm1 .psd1). Repeatable."
    ),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", help="Parallel file workers"),
    case_sensitive: bool = typer.Option(
        False, "--case-sensitive", help="Match confidentiality terms case-sensitively"
    ),
    no_default_allowlist: bool = typer.Option(
        False, "--no-default-allowlist", help="Do not load the bundled allow-list"
    ),
    config: Optional[str] = typer.Option(
        None, "--config", "-c", help="Config file (default: <path>/.leakgate.yaml)"
    ),
    output_json: bool = typer.Option(False, "--json", help="Output raw JSON to stdout (for CI)"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Also write the JSON report to a file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="List passing files and debug logs"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress all output except errors"),
) -> None:
    """Scan a script tree for confidential terms, private commands and private modules."""
    _configure_logging(verbose, quiet)

    overrides = {
        "terms": term,
        "terms_files": terms_file,
        "allowlists": allowlist,
        "extensions": ext,
        "workers": workers,
        "case_sensitive": True if case_sensitive else None,
        "include_default_allowlist": False if no_default_allowlist else None,
    }

    try:
        report = _run_scan(
            path,
            config_path=config,
            overrides=overrides,
            output_json=output_json,
            output=output,
            verbose=verbose,
            quiet=quiet,
        )
    except LeakGateError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_ERROR)

    if not report.passed:
        raise typer.Exit(code=EXIT_LEAKS)


@app.command()
def extract(
    file: str = typer.Argument(..., help="Script file to inspect"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logs"),
) -> None:
    """Print the invocations, declarations, imports and mocks found in one file.

    Useful when tuning an allow-list: this is exactly what the classifier sees.
    """
    _configure_logging(verbose, quiet=not verbose)

    file_path = Path(file)
    try:
        text = read_script(file_path, str(file_path))
        extraction = extract_syntax(text, str(file_path))
    except LeakGateError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_ERROR)

    print_extraction(
        str(file_path),
        [(inv.name, inv.line) for inv in extraction.invocations],
        extraction.declarations,
        extraction.imports,
        scan_mock_references(text),
    )


@app.command()
def version() -> None:
    """Show the leakgate version."""
    console.print(f"leakgate v{__version__}")


if __name__ == "__main__":
    app()
