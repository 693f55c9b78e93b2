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

"""Error taxonomy.

File-scoped errors (ParseError) are caught by the pipeline and reported as a
failing outcome for that file only. Run-scoped errors (PatternError,
InputError, ConfigError) abort the scan before any file is processed.
"""

from __future__ import annotations

from typing import Optional


class LeakGateError(Exception):
    """Base class for all leakgate errors."""


class ParseError(LeakGateError):
    """A script file could not be read or tokenized."""

    def __init__(self, path: str, diagnostic: str, line: Optional[int] = None) -> None:
        self.path = path
        self.diagnostic = diagnostic
        self.line = line
        location = f"{path}:{line}" if line is not None else path
        super().__init__(f"{location}: {diagnostic}")


class PatternError(LeakGateError):
    """A confidentiality term is not a valid regular expression."""

    def __init__(self, term: str, reason: str) -> None:
        self.term = term
        self.reason = reason
        super().__init__(f"Invalid confidentiality term {term!r}: {reason}")


class InputError(LeakGateError):
    """The scan root does not exist or is not a directory."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{reason}: {path}")


class ConfigError(LeakGateError):
    """A config or allow-list file is missing, unreadable, or malformed."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: {reason}")
