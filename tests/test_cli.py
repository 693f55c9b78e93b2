"""Integration tests for the leakgate CLI.

Tests end-to-end scans against the fixture trees.
"""

import json
from pathlib import Path

from typer.testing import CliRunner

from leakgate import __version__
from leakgate.cli import app

runner = CliRunner()
FIXTURES = Path(__file__).parent / "fixtures"


class TestCleanScan:
    """A tree with nothing to hide exits 0."""

    def test_clean_module_exit_zero(self):
        result = runner.invoke(app, ["scan", str(FIXTURES / "clean_module")])
        assert result.exit_code == 0, result.output

    def test_clean_module_json(self):
        result = runner.invoke(app, ["scan", str(FIXTURES / "clean_module"), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["passed"] is True
        assert data["manifest_source"] == "directory"
        assert data["confidential_check_enabled"] is False
        assert [r["file"] for r in data["results"]] == [
            "CleanModule.psd1",
            "CleanModule.psm1",
            "tests/CleanModule.Tests.ps1",
        ]
        checks = data["results"][0]["checks"]
        assert [c["name"] for c in checks] == [
            "confidential_terms", "private_commands", "private_modules",
        ]

    def test_verbose_lists_passing_files(self):
        result = runner.invoke(app, ["scan", str(FIXTURES / "clean_module"), "--verbose"])
        assert result.exit_code == 0
        assert "CleanModule.psm1" in result.stdout


class TestLeakyScan:
    """Leaks and parse failures exit 1."""

    def test_exit_one(self):
        result = runner.invoke(app, ["scan", str(FIXTURES / "leaky"), "-t", "Acme Corporation"])
        assert result.exit_code == 1
        assert "Deploy.ps1" in result.stdout
        assert "Get-AcmeBuildServer" in result.stdout

    def test_json_results(self):
        result = runner.invoke(
            app, ["scan", str(FIXTURES / "leaky"), "--term", "Acme Corporation", "--json"]
        )
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        by_file = {r["file"]: r for r in data["results"]}
        assert set(by_file) == {"Broken.ps1", "Deploy.ps1", "Deploy.Tests.ps1"}
        assert by_file["Deploy.ps1"]["confidential_matches"] == ["Acme Corporation"]
        assert by_file["Deploy.ps1"]["private_modules"] == ["Internal.Utilities"]
        assert by_file["Deploy.Tests.ps1"]["private_commands"] == ["Invoke-Deploy", "Get-SecretToken"]
        assert by_file["Broken.ps1"]["parse_error"]
        assert [c["name"] for c in by_file["Broken.ps1"]["checks"]] == ["parse"]
        assert data["summary"]["parse_failures"] == 1

    def test_output_file_matches_stdout(self, tmp_path: Path):
        out = tmp_path / "report.json"
        result = runner.invoke(
            app, ["scan", str(FIXTURES / "leaky"), "--json", "--output", str(out)]
        )
        assert result.exit_code == 1
        assert out.read_text(encoding="utf-8") == result.stdout

    def test_extension_filter(self):
        result = runner.invoke(
            app, ["scan", str(FIXTURES / "leaky"), "--ext", "psm1", "--json"]
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout)["results"] == []

    def test_user_allowlist(self, tmp_path: Path):
        extra = tmp_path / "corp.yaml"
        extra.write_text(
            "commands: [Get-AcmeBuildServer, Publish-Internal, Invoke-Deploy, Get-SecretToken]\n"
            "modules: [Internal.Utilities]\n",
            encoding="utf-8",
        )
        result = runner.invoke(
            app,
            ["scan", str(FIXTURES / "leaky"), "--allowlist", str(extra), "--ext", ".ps1", "--json"],
        )
        data = json.loads(result.stdout)
        failing = [r["file"] for r in data["results"] if not r["passed"]]
        assert failing == ["Broken.ps1"]


class TestConfiguredScan:

    def test_config_terms_and_allowlist(self):
        result = runner.invoke(app, ["scan", str(FIXTURES / "configured"), "--json"])
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        (run,) = data["results"]
        assert run["file"] == "Run.ps1"
        assert run["confidential_matches"] == ["Contoso"]
        assert run["private_commands"] == []

    def test_case_sensitive_flag(self):
        result = runner.invoke(
            app,
            ["scan", str(FIXTURES / "configured"), "--case-sensitive", "-t", "CONTOSO", "--json"],
        )
        data = json.loads(result.stdout)
        assert data["results"][0]["confidential_matches"] == ["Contoso"]


class TestFatalErrors:
    """Bad input aborts with exit code 2."""

    def test_missing_root(self, tmp_path: Path):
        result = runner.invoke(app, ["scan", str(tmp_path / "nope")])
        assert result.exit_code == 2

    def test_root_is_a_file(self):
        result = runner.invoke(app, ["scan", str(FIXTURES / "leaky" / "Deploy.ps1")])
        assert result.exit_code == 2

    def test_invalid_term(self):
        result = runner.invoke(app, ["scan", str(FIXTURES / "clean_module"), "-t", "bad("])
        assert result.exit_code == 2

    def test_conflicting_terms(self):
        result = runner.invoke(
            app, ["scan", str(FIXTURES / "clean_module"), "-t", "(?P<id>a)", "-t", "(?P<id>b)"]
        )
        assert result.exit_code == 2

    def test_missing_allowlist(self, tmp_path: Path):
        result = runner.invoke(
            app, ["scan", str(FIXTURES / "clean_module"), "--allowlist", str(tmp_path / "x.yaml")]
        )
        assert result.exit_code == 2


class TestOtherCommands:

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_extract(self):
        result = runner.invoke(app, ["extract", str(FIXTURES / "leaky" / "Deploy.ps1")])
        assert result.exit_code == 0
        assert "Get-AcmeBuildServer" in result.stdout
        assert "Internal.Utilities" in result.stdout
        assert "Invoke-Deploy" in result.stdout

    def test_extract_broken_file(self):
        result = runner.invoke(app, ["extract", str(FIXTURES / "leaky" / "Broken.ps1")])
        assert result.exit_code == 2
