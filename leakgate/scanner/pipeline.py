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

"""Per-file scan pipeline and batch map.

Each file moves discovered -> parsed -> classified -> reported. A file
that fails to read or tokenize goes straight to reported with its parse
error recorded; it never stops the other files.

The ScanContext is built once per run and only read afterwards, so the
batch can be fanned out to a thread pool without locking.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from leakgate.errors import ParseError
from leakgate.models.allowlist import AllowList
from leakgate.models.config import ScanConfig
from leakgate.models.report import FileResult, FileState
from leakgate.policy.allowlist_loader import load_allowlist
from leakgate.policy.config_loader import collect_terms
from leakgate.scanner.alias_resolver import AliasResolver
from leakgate.scanner.classifier import ReferenceClassifier
from leakgate.scanner.confidential_scanner import ConfidentialScanner
from leakgate.scanner.mock_scanner import scan_mock_references
from leakgate.scanner.syntax_extractor import extract_syntax, read_script

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanContext:
    """Run-wide, read-only scan dependencies."""

    allowlist: AllowList
    resolver: AliasResolver
    classifier: ReferenceClassifier
    confidential: ConfidentialScanner


def make_context(
    allowlist: AllowList,
    terms: Iterable[str] = (),
    case_sensitive: bool = False,
) -> ScanContext:
    """Wire an allow-list and terms into a ScanContext.

    Raises:
        PatternError: if any term is not a valid regular expression.
    """
    resolver = AliasResolver(allowlist.aliases)
    return ScanContext(
        allowlist=allowlist,
        resolver=resolver,
        classifier=ReferenceClassifier(allowlist, resolver),
        confidential=ConfidentialScanner(terms, case_sensitive=case_sensitive),
    )


def build_context(config: ScanConfig) -> ScanContext:
    """Load the allow-list and terms named by a ScanConfig.

    Raises:
        ConfigError: on a bad allow-list or terms file.
        PatternError: on an invalid term.
    """
    allowlist = load_allowlist(
        config.allowlists, include_defaults=config.include_default_allowlist
    )
    return make_context(
        allowlist, collect_terms(config), case_sensitive=config.case_sensitive
    )


def scan_text(text: str, rel_path: str, context: ScanContext) -> FileResult:
    """Run all three checks over one file's text."""
    result = FileResult(file=rel_path)

    try:
        extraction = extract_syntax(text, rel_path)
    except ParseError as e:
        logger.warning("Parse error in %s: %s", rel_path, e)
        result.parse_error = str(e)
        result.state = FileState.REPORTED
        return result
    result.state = FileState.PARSED

    classification = context.classifier.classify(extraction, scan_mock_references(text))
    result.private_commands = classification.private_commands
    result.private_modules = classification.private_modules
    result.confidential_matches = context.confidential.scan(text)
    result.state = FileState.CLASSIFIED

    result.state = FileState.REPORTED
    return result


def scan_file(root: Path, rel_path: Path | str, context: ScanContext) -> FileResult:
    """Read and scan one file. Never raises ParseError."""
    rel_name = Path(rel_path).as_posix()
    try:
        text = read_script(root / rel_path, rel_name)
    except ParseError as e:
        return FileResult(file=rel_name, state=FileState.REPORTED, parse_error=str(e))
    return scan_text(text, rel_name, context)


def scan_files(
    root: Path,
    files: Iterable[Path | str],
    context: ScanContext,
    workers: int = 1,
) -> list[FileResult]:
    """Scan every file and return results sorted by relative path.

    With workers > 1 the files are scanned on a thread pool; the output
    is the same for any worker count.
    """
    files = list(files)
    results: list[FileResult] = []

    if workers <= 1 or len(files) <= 1:
        results = [scan_file(root, f, context) for f in files]
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(scan_file, root, f, context) for f in files]
            for future in as_completed(futures):
                results.append(future.result())

    results.sort(key=lambda r: r.file)
    logger.info(
        "Scanned %d files (%d failing)",
        len(results),
        sum(1 for r in results if not r.passed),
    )
    return results
