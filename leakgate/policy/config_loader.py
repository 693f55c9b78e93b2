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

"""Scan configuration loading.

Sources, lowest precedence first:
  1. <root>/.leakgate.yaml (or an explicit --config file)
  2. LEAKGATE_TERMS environment variable (";"-separated, appended to terms)
  3. CLI options (lists are appended, scalars override)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import ValidationError

from leakgate.errors import ConfigError
from leakgate.models.config import ScanConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".leakgate.yaml"
TERMS_ENV_VAR = "LEAKGATE_TERMS"


def find_config(root: Path) -> Optional[Path]:
    """Return <root>/.leakgate.yaml if present."""
    candidate = root / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def load_config_file(path: str | Path) -> ScanConfig:
    """Load a ScanConfig from YAML.

    Relative terms_files / allowlists entries are resolved against the
    config file's directory.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise ConfigError(str(path), "config file not found") from None
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(str(path), f"could not read config: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(str(path), "config must be a YAML mapping")

    try:
        config = ScanConfig(**data)
    except ValidationError as e:
        raise ConfigError(str(path), f"invalid config: {e}") from e

    base = path.parent.resolve()
    return config.model_copy(
        update={
            "terms_files": [str(base / p) for p in config.terms_files],
            "allowlists": [str(base / p) for p in config.allowlists],
        }
    )


def read_terms_file(path: str | Path) -> list[str]:
    """Read confidentiality terms, one per line. '#' starts a comment line."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise ConfigError(str(path), f"could not read terms file: {e}") from e

    terms = []
    for line in text.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            terms.append(stripped)
    return terms


def collect_terms(config: ScanConfig) -> list[str]:
    """All configured terms: inline terms first, then terms files in order."""
    terms = list(config.terms)
    for terms_file in config.terms_files:
        terms.extend(read_terms_file(terms_file))
    return terms


def build_config(
    root: Path,
    config_path: Optional[str | Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ScanConfig:
    """Assemble the effective ScanConfig for a run.

    ``overrides`` holds CLI values; None entries mean "not given".
    """
    environ = os.environ if environ is None else environ

    if config_path is not None:
        config = load_config_file(config_path)
    else:
        found = find_config(root)
        config = load_config_file(found) if found else ScanConfig()
        if found:
            logger.info("Using config %s", found)

    data = config.model_dump()

    env_terms = environ.get(TERMS_ENV_VAR, "")
    if env_terms:
        data["terms"].extend(t.strip() for t in env_terms.split(";") if t.strip())

    for key, value in (overrides or {}).items():
        if value is None:
            continue
        if key in ("terms", "terms_files", "allowlists"):
            data[key].extend(str(v) for v in value)
        elif key == "extensions":
            if value:
                data[key] = list(value)
        else:
            data[key] = value

    try:
        return ScanConfig(**data)
    except ValidationError as e:
        raise ConfigError("command line", f"invalid option: {e}") from e
