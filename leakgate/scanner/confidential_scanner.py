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

"""Confidentiality scanner.

Caller-supplied terms are regular expressions (project code names,
internal host names, ticket prefixes). They are validated one by one so
a bad term is reported by name, then compiled once into a single
alternation shared by every file in the run.

Capturing groups keep their numbers only in the first term that has any,
so a numbered backreference (\\1) in a later term is rejected; named
groups and (?P=name) work anywhere.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from leakgate.errors import PatternError

logger = logging.getLogger(__name__)

_NUMBERED_BACKREF = re.compile(r"""(?<!\\)(?:\\\\)*\\(?:[1-9]|g<\d)""")


class ConfidentialScanner:
    """Find confidential-term matches in raw file text."""

    def __init__(self, terms: Iterable[str] = (), case_sensitive: bool = False) -> None:
        flags = 0 if case_sensitive else re.IGNORECASE
        self.terms: list[str] = []
        groups_before = 0

        for term in terms:
            if not term or not term.strip():
                logger.warning("Ignoring blank confidentiality term")
                continue
            try:
                compiled = re.compile(f"(?:{term})", flags)
            except re.error as e:
                raise PatternError(term, str(e)) from e
            if groups_before and _NUMBERED_BACKREF.search(term):
                raise PatternError(
                    term,
                    "numbered backreference after an earlier term with groups; "
                    "use a named group and (?P=name)",
                )
            groups_before += compiled.groups
            self.terms.append(term)

        self._pattern: Optional[re.Pattern] = None
        if self.terms:
            self._pattern = self._compile(flags)
            logger.info("Confidentiality check enabled (%d terms)", len(self.terms))

    def _compile(self, flags: int) -> re.Pattern:
        """Join all terms into one alternation; blame the term that breaks it."""
        parts: list[str] = []
        for term in self.terms:
            parts.append(f"(?:{term})")
            try:
                pattern = re.compile("|".join(parts), flags)
            except re.error as e:
                raise PatternError(term, str(e)) from e
        return pattern

    @property
    def enabled(self) -> bool:
        return self._pattern is not None

    def scan(self, text: str) -> list[str]:
        """Return every distinct matched substring, in first-occurrence order."""
        if self._pattern is None:
            return []
        matches: list[str] = []
        seen: set[str] = set()
        for match in self._pattern.finditer(text):
            found = match.group(0)
            if found and found not in seen:
                seen.add(found)
                matches.append(found)
        return matches
