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

"""Pydantic model for scan configuration (.leakgate.yaml + CLI overrides)."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

DEFAULT_EXTENSIONS = [".ps1", ".psm1", ".psd1"]


class ScanConfig(BaseModel):
    """Run-wide scan settings.

    Paths in terms_files and allowlists are resolved relative to the
    config file that declared them (see policy.config_loader).
    """

    terms: list[str] = Field(default_factory=list)
    terms_files: list[str] = Field(default_factory=list)
    allowlists: list[str] = Field(default_factory=list)
    extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    workers: int = Field(default=1, ge=1, le=64)
    case_sensitive: bool = False
    include_default_allowlist: bool = True

    @field_validator("terms", "terms_files", "allowlists", mode="before")
    @classmethod
    def _coerce_list(cls, value: object) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return [str(v) for v in value]

    @field_validator("extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value: object) -> list[str]:
        if value is None:
            return list(DEFAULT_EXTENSIONS)
        if isinstance(value, str):
            value = [value]
        normalized = []
        for ext in value:
            ext = str(ext).strip().lower()
            if not ext:
                continue
            if not ext.startswith("."):
                ext = "." + ext
            if ext not in normalized:
                normalized.append(ext)
        return normalized or list(DEFAULT_EXTENSIONS)
