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

"""Mock reference scanner.

Test files stub out commands with `Mock "Name" { ... }`. Those names are
real dependencies of the code under test, so they count as invocations
even when the stubbed command is never called directly in the file.
Only quoted names are recognised; the same quote must close the name.
"""

from __future__ import annotations

import re

MOCK_PATTERN = re.compile(r"""\bmock\s+(['"])(?P<name>[^'"\r\n]+)\1""", re.IGNORECASE)


def scan_mock_references(text: str) -> list[str]:
    """Return mocked command names in first-occurrence order, without duplicates."""
    names: list[str] = []
    seen: set[str] = set()
    for line in text.splitlines():
        for match in MOCK_PATTERN.finditer(line):
            name = match.group("name").strip()
            if name and name not in seen:
                seen.add(name)
                names.append(name)
    return names
