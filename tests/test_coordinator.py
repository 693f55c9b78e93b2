"""Tests for the file walker / coordinator."""

from pathlib import Path

import pytest

from leakgate.errors import InputError
from leakgate.scanner.coordinator import (
    discover_files,
    get_files_directory,
    get_script_files,
    load_ignore_patterns,
    should_ignore,
)

FIXTURES = Path(__file__).parent / "fixtures"


class TestDiscoverFiles:
    """Test file discovery under the scan root."""

    def test_fixture_tree(self):
        files, source = discover_files(FIXTURES / "clean_module")
        assert source == "directory"  # No .git in fixtures
        assert Path("CleanModule.psm1") in files
        assert Path("tests/CleanModule.Tests.ps1") in files

    def test_nonexistent_dir_raises(self):
        with pytest.raises(InputError, match="does not exist"):
            discover_files(Path("/nonexistent/path"))

    def test_not_a_dir_raises(self):
        with pytest.raises(InputError, match="not a directory"):
            discover_files(FIXTURES / "clean_module" / "CleanModule.psm1")

    def test_leakgateignore(self, tmp_path: Path):
        (tmp_path / "keep.ps1").write_text("Get-Item", encoding="utf-8")
        vendor = tmp_path / "vendor"
        vendor.mkdir()
        (vendor / "third_party.ps1").write_text("Get-Item", encoding="utf-8")
        (tmp_path / "scratch.ps1").write_text("Get-Item", encoding="utf-8")
        (tmp_path / ".leakgateignore").write_text("# ignored\nvendor/\nscratch*.ps1\n", encoding="utf-8")

        files, _ = discover_files(tmp_path)
        assert Path("keep.ps1") in files
        assert Path("vendor/third_party.ps1") not in files
        assert Path("scratch.ps1") not in files


class TestDirectoryWalk:

    def test_relative_sorted_paths(self, tmp_path: Path):
        (tmp_path / "b.ps1").write_text("", encoding="utf-8")
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "z.ps1").write_text("", encoding="utf-8")
        assert get_files_directory(tmp_path) == [Path("a/z.ps1"), Path("b.ps1")]

    def test_default_ignores(self):
        patterns = load_ignore_patterns(FIXTURES / "clean_module")
        assert should_ignore(Path(".git/config"), patterns)
        assert should_ignore(Path("bin/Release/tool.dll"), patterns)
        assert not should_ignore(Path("src/Module.psm1"), patterns)


class TestScriptFilter:

    def test_default_extensions(self):
        files = [Path("a.ps1"), Path("b.psm1"), Path("c.psd1"), Path("d.txt"), Path("e.py")]
        assert get_script_files(files) == [Path("a.ps1"), Path("b.psm1"), Path("c.psd1")]

    def test_extension_case_ignored(self):
        assert get_script_files([Path("Setup.PS1")], [".ps1"]) == [Path("Setup.PS1")]

    def test_custom_extensions(self):
        files = [Path("a.ps1"), Path("b.psm1")]
        assert get_script_files(files, [".psm1"]) == [Path("b.psm1")]
