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

"""Pydantic models for per-file outcomes and the scan report."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from leakgate import __version__


class FileState(str, Enum):
    """Lifecycle of one file. Strictly sequential, no retries."""

    DISCOVERED = "discovered"
    PARSED = "parsed"
    CLASSIFIED = "classified"
    REPORTED = "reported"


class CheckName(str, Enum):
    """Named pass/fail checks rendered per file."""

    CONFIDENTIAL_TERMS = "confidential_terms"
    PRIVATE_COMMANDS = "private_commands"
    PRIVATE_MODULES = "private_modules"
    PARSE = "parse"


CHECK_TITLES: dict[str, str] = {
    "confidential_terms": "No confidential terms",
    "private_commands": "No private commands",
    "private_modules": "No private modules",
    "parse": "File parses",
}


class CheckOutcome(BaseModel):
    """One pass/fail check with the evidence behind it."""

    name: CheckName
    passed: bool
    matches: list[str] = Field(default_factory=list)

    @property
    def title(self) -> str:
        return CHECK_TITLES[self.name.value]


class FileResult(BaseModel):
    """Classification result for a single script file.

    Invariant: every name in private_commands is absent from both the
    command allow-list and the file's own declarations.
    """

    file: str
    state: FileState = FileState.DISCOVERED
    parse_error: Optional[str] = None
    confidential_matches: list[str] = Field(default_factory=list)
    private_commands: list[str] = Field(default_factory=list)
    private_modules: list[str] = Field(default_factory=list)

    @property
    def parse_failed(self) -> bool:
        return self.parse_error is not None

    @property
    def passed(self) -> bool:
        return all(check.passed for check in self.checks())

    def checks(self) -> list[CheckOutcome]:
        """Return the pass/fail triple, or a single parse check on failure."""
        if self.parse_failed:
            return [
                CheckOutcome(
                    name=CheckName.PARSE,
                    passed=False,
                    matches=[self.parse_error or ""],
                )
            ]
        return [
            CheckOutcome(
                name=CheckName.CONFIDENTIAL_TERMS,
                passed=not self.confidential_matches,
                matches=list(self.confidential_matches),
            ),
            CheckOutcome(
                name=CheckName.PRIVATE_COMMANDS,
                passed=not self.private_commands,
                matches=list(self.private_commands),
            ),
            CheckOutcome(
                name=CheckName.PRIVATE_MODULES,
                passed=not self.private_modules,
                matches=list(self.private_modules),
            ),
        ]


class ScanSummary(BaseModel):
    """Counts over all file results."""

    files_scanned: int = 0
    files_failed: int = 0
    parse_failures: int = 0
    confidential_hits: int = 0
    private_command_hits: int = 0
    private_module_hits: int = 0


class ScanReport(BaseModel):
    """The complete scan report."""

    leakgate_version: str = __version__
    scan_target: str = ""
    scan_timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    manifest_source: str = "directory"  # "git" or "directory"
    confidential_check_enabled: bool = False
    results: list[FileResult] = Field(default_factory=list)

    @property
    def failed_results(self) -> list[FileResult]:
        return [r for r in self.results if not r.passed]

    @property
    def passed(self) -> bool:
        return not self.failed_results

    def summary(self) -> ScanSummary:
        return ScanSummary(
            files_scanned=len(self.results),
            files_failed=len(self.failed_results),
            parse_failures=sum(1 for r in self.results if r.parse_failed),
            confidential_hits=sum(1 for r in self.results if r.confidential_matches),
            private_command_hits=sum(1 for r in self.results if r.private_commands),
            private_module_hits=sum(1 for r in self.results if r.private_modules),
        )
