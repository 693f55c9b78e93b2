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

"""Allow-list loading.

The host inventory of built-in commands, modules and aliases comes from
YAML: the bundled rules/default_allowlist.yaml plus any user-supplied
files (for example an inventory exported from a real host session with
Get-Command / Get-Alias / Get-Module -ListAvailable). All sources merge
into one immutable AllowList, built once per run.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import yaml
from pydantic import ValidationError

from leakgate.errors import ConfigError
from leakgate.models.allowlist import AllowList

logger = logging.getLogger(__name__)

DEFAULT_ALLOWLIST_PATH = Path(__file__).parent.parent / "rules" / "default_allowlist.yaml"

_ALLOWED_KEYS = {"commands", "modules", "aliases", "noise_commands"}


def load_allowlist_file(path: str | Path) -> AllowList:
    """Load a single allow-list YAML file.

    Raises:
        ConfigError: if the file is missing, not YAML, or has bad keys/values.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigError(str(path), "allow-list file not found") from None
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(str(path), f"could not read allow-list: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(str(path), "allow-list must be a YAML mapping")

    unknown = set(data) - _ALLOWED_KEYS
    if unknown:
        raise ConfigError(
            str(path), f"unknown allow-list keys: {', '.join(sorted(unknown))}"
        )

    try:
        allowlist = AllowList(**data)
    except ValidationError as e:
        raise ConfigError(str(path), f"invalid allow-list: {e}") from e

    logger.debug(
        "Loaded allow-list %s (%d commands, %d modules, %d aliases)",
        path,
        len(allowlist.commands),
        len(allowlist.modules),
        len(allowlist.aliases),
    )
    return allowlist


def load_allowlist(
    extra_paths: Iterable[str | Path] = (),
    include_defaults: bool = True,
) -> AllowList:
    """Build the run-wide allow-list from the bundled inventory and user files."""
    allowlist = AllowList()
    if include_defaults:
        allowlist = load_allowlist_file(DEFAULT_ALLOWLIST_PATH)

    for path in extra_paths:
        allowlist = allowlist.merged_with(load_allowlist_file(path))

    logger.info(
        "Allow-list ready: %d commands, %d modules, %d aliases",
        len(allowlist.commands),
        len(allowlist.modules),
        len(allowlist.aliases),
    )
    return allowlist
