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

"""Alias resolution: map an alias (gci, %, iex) to its canonical command."""

from __future__ import annotations

from typing import Mapping


class AliasResolver:
    """Case-insensitive, read-only alias lookup."""

    def __init__(self, aliases: Mapping[str, str]) -> None:
        self._aliases = {alias.lower(): target for alias, target in aliases.items()}

    def __len__(self) -> int:
        return len(self._aliases)

    def resolve(self, name: str) -> str:
        """Return the alias target, or ``name`` unchanged if it is not an alias."""
        return self._aliases.get(name.lower(), name)
