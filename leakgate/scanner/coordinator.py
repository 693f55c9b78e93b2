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

"""File walker — discovers script files using git or a directory walk.

Primary strategy: git ls-files (if .git/ exists)
Fallback: recursive directory walk
Both honour the default ignore patterns plus .leakgateignore, and record
manifest_source ("git" or "directory") for the report.
"""

from __future__ import annotations

import fnmatch
import logging
import subprocess
from pathlib import Path
from typing import Iterable

from leakgate.errors import InputError
from leakgate.models.config import DEFAULT_EXTENSIONS

logger = logging.getLogger(__name__)

IGNORE_FILENAME = ".leakgateignore"

DEFAULT_IGNORE_PATTERNS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    ".venv",
    "venv",
    "__pycache__",
    ".pytest_cache",
    "bin",
    "obj",
    "*.dll",
    "*.nupkg",
    # leakgate's own report files
    "leakgate_report.json",
}


def load_ignore_patterns(target_dir: Path) -> set[str]:
    """Default ignore patterns plus .leakgateignore entries."""
    ignore_file = target_dir / IGNORE_FILENAME
    patterns = set(DEFAULT_IGNORE_PATTERNS)

    if ignore_file.is_file():
        for line in ignore_file.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if line and not line.startswith("#"):
                patterns.add(line.rstrip("/"))

    return patterns


def should_ignore(path: Path, ignore_patterns: set[str]) -> bool:
    """Check a relative path against name, directory, and glob patterns."""
    posix = path.as_posix()
    for pattern in ignore_patterns:
        if any(ch in pattern for ch in "*?["):
            if fnmatch.fnmatch(path.name, pattern) or fnmatch.fnmatch(posix, pattern):
                return True
        elif path.name == pattern or pattern in path.parts or posix == pattern:
            return True
    return False


def get_files_git(target_dir: Path) -> list[Path] | None:
    """Get tracked and untracked-but-not-ignored files from git.

    Returns None if git is not available or target_dir is not a git repo.
    """
    try:
        result = subprocess.run(
            ["git", "ls-files", "--cached", "--others", "--exclude-standard"],
            cwd=str(target_dir),
            capture_output=True,
            text=True,
            timeout=30,
        )
    except FileNotFoundError:
        logger.debug("git not found in PATH")
        return None
    except subprocess.TimeoutExpired:
        logger.warning("git ls-files timed out")
        return None
    except OSError as e:
        logger.debug("git ls-files error: %s", e)
        return None

    if result.returncode != 0:
        logger.debug("git ls-files failed: %s", result.stderr)
        return None

    files = []
    for line in result.stdout.splitlines():
        if line and (target_dir / line).is_file():
            files.append(Path(line))
    return sorted(files)


def get_files_directory(target_dir: Path) -> list[Path]:
    """Get files via a recursive directory walk."""
    files = []
    for item in target_dir.rglob("*"):
        if item.is_file():
            files.append(item.relative_to(target_dir))
    return sorted(files)


def get_script_files(
    all_files: Iterable[Path], extensions: Iterable[str] = DEFAULT_EXTENSIONS
) -> list[Path]:
    """Filter to script files. Extension matching ignores case."""
    wanted = {ext.lower() for ext in extensions}
    return [f for f in all_files if f.suffix.lower() in wanted]


def discover_files(target_dir: Path) -> tuple[list[Path], str]:
    """Discover candidate files under the scan root.

    Returns:
        tuple of (files, manifest_source) where files are relative to
        target_dir and manifest_source is "git" or "directory".

    Raises:
        InputError: if target_dir does not exist or is not a directory.
    """
    target_dir = target_dir.resolve()

    if not target_dir.exists():
        raise InputError(str(target_dir), "Scan root does not exist")

    if not target_dir.is_dir():
        raise InputError(str(target_dir), "Scan root is not a directory")

    ignore_patterns = load_ignore_patterns(target_dir)

    files = None
    source = "directory"
    if (target_dir / ".git").exists():
        files = get_files_git(target_dir)
        if files is not None:
            source = "git"
    if files is None:
        files = get_files_directory(target_dir)

    files = [f for f in files if not should_ignore(f, ignore_patterns)]
    logger.info("Using %s manifest (%d files)", source, len(files))
    return files, source
