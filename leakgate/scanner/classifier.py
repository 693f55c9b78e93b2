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

"""Reference classifier — decides which references are private.

A command reference is private when, after alias resolution, it is:
- not in the command allow-list,
- not declared in the same file (whole-name, case-insensitive),
- a plain name (starts with a word character; paths such as .\build.ps1
  and variable invocations are local by construction),
- not environment noise (pwsh, powershell).

Module imports are private when they are not in the module allow-list.
Local declarations never make an import safe.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable

from leakgate.models.allowlist import AllowList
from leakgate.scanner.alias_resolver import AliasResolver
from leakgate.scanner.syntax_extractor import SyntaxExtraction

logger = logging.getLogger(__name__)

_WORD_START = re.compile(r"""^\w""")


@dataclass
class Classification:
    private_commands: list[str] = field(default_factory=list)
    private_modules: list[str] = field(default_factory=list)


def _unique(names: Iterable[str]) -> list[str]:
    """Drop case-insensitive duplicates, keeping the first spelling."""
    seen: set[str] = set()
    result = []
    for name in names:
        key = name.lower()
        if key not in seen:
            seen.add(key)
            result.append(name)
    return result


class ReferenceClassifier:
    """Classify one file's references against the run-wide allow-list."""

    def __init__(self, allowlist: AllowList, resolver: AliasResolver) -> None:
        self.allowlist = allowlist
        self.resolver = resolver

    def is_private_command(self, name: str, declarations: set[str]) -> bool:
        if not _WORD_START.match(name):
            return False
        if name.lower() in declarations:
            return False
        if self.allowlist.is_noise(name):
            return False
        return not self.allowlist.is_safe_command(name)

    def classify(
        self, extraction: SyntaxExtraction, mock_names: Iterable[str] = ()
    ) -> Classification:
        declarations = {name.lower() for name in extraction.declarations}

        candidates = _unique(
            self.resolver.resolve(name)
            for name in [*extraction.invocation_names, *mock_names]
        )
        private_commands = [
            name for name in candidates if self.is_private_command(name, declarations)
        ]

        private_modules = [
            name for name in _unique(extraction.imports)
            if not self.allowlist.is_safe_module(name)
        ]

        logger.debug(
            "Classified %d candidates: %d private commands, %d private modules",
            len(candidates),
            len(private_commands),
            len(private_modules),
        )
        return Classification(
            private_commands=private_commands,
            private_modules=private_modules,
        )
