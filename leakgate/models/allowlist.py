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

"""Pydantic model for the allow-list registry.

Names are stored case-folded: PowerShell resolves commands and modules
without regard to case, so "get-childitem" and "Get-ChildItem" are the
same allow-list entry.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _fold(name: str) -> str:
    return name.strip().lower()


class AllowList(BaseModel):
    """Known-safe command and module names for one run.

    Built once at startup and passed explicitly to the classifier.
    The model is frozen and never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    commands: frozenset[str] = Field(default_factory=frozenset)
    modules: frozenset[str] = Field(default_factory=frozenset)
    aliases: dict[str, str] = Field(default_factory=dict)  # alias -> canonical command
    noise_commands: frozenset[str] = Field(default_factory=frozenset)

    @field_validator("commands", "modules", "noise_commands", mode="before")
    @classmethod
    def _fold_names(cls, value: object) -> frozenset[str]:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        return frozenset(_fold(str(v)) for v in value if str(v).strip())

    @field_validator("aliases", mode="before")
    @classmethod
    def _fold_aliases(cls, value: object) -> dict[str, str]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("aliases must be a mapping of alias -> command")
        # Keys fold; targets keep their canonical spelling for reporting.
        return {_fold(str(k)): str(v).strip() for k, v in value.items() if str(k).strip()}

    def is_safe_command(self, name: str) -> bool:
        return _fold(name) in self.commands

    def is_safe_module(self, name: str) -> bool:
        return _fold(name) in self.modules

    def is_noise(self, name: str) -> bool:
        return _fold(name) in self.noise_commands

    def merged_with(self, other: "AllowList") -> "AllowList":
        """Return a new AllowList containing entries from both lists.

        Aliases from ``other`` win on conflict.
        """
        return AllowList(
            commands=self.commands | other.commands,
            modules=self.modules | other.modules,
            aliases={**self.aliases, **other.aliases},
            noise_commands=self.noise_commands | other.noise_commands,
        )
