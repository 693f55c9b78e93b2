"""Tests for the reference classifier."""

import pytest

from leakgate.models.allowlist import AllowList
from leakgate.policy.allowlist_loader import load_allowlist
from leakgate.scanner.alias_resolver import AliasResolver
from leakgate.scanner.classifier import ReferenceClassifier
from leakgate.scanner.mock_scanner import scan_mock_references
from leakgate.scanner.syntax_extractor import extract_syntax


@pytest.fixture(scope="module")
def allowlist() -> AllowList:
    return load_allowlist()


@pytest.fixture(scope="module")
def classifier(allowlist) -> ReferenceClassifier:
    return ReferenceClassifier(allowlist, AliasResolver(allowlist.aliases))


def classify(classifier, text):
    return classifier.classify(extract_syntax(text), scan_mock_references(text))


class TestPrivateCommands:
    """Commands that are neither allow-listed nor declared."""

    def test_builtins_are_safe(self, classifier):
        result = classify(classifier, "Get-ChildItem | Where-Object { $_ } | Select-Object -First 1")
        assert result.private_commands == []

    def test_allow_list_ignores_case(self, classifier):
        assert classify(classifier, "get-childitem\nWRITE-OUTPUT x").private_commands == []

    def test_undeclared_command_is_private(self, classifier):
        assert classify(classifier, "Get-AcmeServer -Name x").private_commands == ["Get-AcmeServer"]

    def test_aliases_resolve_to_builtins(self, classifier):
        text = "gci | % { $_ } | ? { $_ } | select -First 1\nls; iex 'x'"
        assert classify(classifier, text).private_commands == []

    def test_local_declaration_is_safe(self, classifier):
        text = "function Invoke-Foo { Get-Item x }\nInvoke-Foo\nInvoke-Bar"
        assert classify(classifier, text).private_commands == ["Invoke-Bar"]

    def test_declaration_match_is_whole_name(self, classifier):
        text = "function Foo { }\nInvoke-Foo"
        assert classify(classifier, text).private_commands == ["Invoke-Foo"]

    def test_declaration_match_ignores_case(self, classifier):
        text = "function invoke-foo { }\nInvoke-Foo"
        assert classify(classifier, text).private_commands == []

    def test_declaration_shadowing_builtin_is_safe(self, classifier):
        text = "function Get-Item { }\nGet-Item"
        assert classify(classifier, text).private_commands == []

    def test_paths_and_noise_are_excluded(self, classifier):
        text = ". .\\helpers.ps1\n& ./build.ps1\npwsh -NoProfile -File x.ps1\npowershell.exe -c 1"
        assert classify(classifier, text).private_commands == []

    def test_duplicates_ignore_case_and_keep_first(self, classifier):
        text = "Invoke-Corp\ninvoke-corp\nGet-Corp\nInvoke-Corp"
        assert classify(classifier, text).private_commands == ["Invoke-Corp", "Get-Corp"]

    def test_mock_only_reference_is_private(self, classifier):
        text = "Describe 'x' {\n  It 'y' {\n    Mock \"Get-SecretToken\" { 'token' }\n  }\n}"
        assert classify(classifier, text).private_commands == ["Get-SecretToken"]

    def test_mock_of_builtin_is_safe(self, classifier):
        assert classify(classifier, "Mock 'Get-Date' { 0 }").private_commands == []

    def test_tree_invocations_come_before_mocks(self, classifier):
        text = "Mock 'Get-Mocked' { }\nInvoke-Direct"
        assert classify(classifier, text).private_commands == ["Invoke-Direct", "Get-Mocked"]

    def test_soundness(self, classifier, allowlist):
        text = (
            "function Invoke-Local { Get-Corp }\n"
            "Invoke-Local; gci; Send-Corp | % { Format-Corp $_ }\n"
            "Mock 'Remove-Corp' { }\n"
        )
        extraction = extract_syntax(text)
        result = classifier.classify(extraction, scan_mock_references(text))
        declared = {d.lower() for d in extraction.declarations}
        assert result.private_commands == ["Get-Corp", "Send-Corp", "Format-Corp", "Remove-Corp"]
        for name in result.private_commands:
            assert not allowlist.is_safe_command(name)
            assert name.lower() not in declared


class TestPrivateModules:
    """Imports outside the module allow-list."""

    def test_internal_module_is_private(self, classifier):
        result = classify(classifier, "Import-Module Internal.Utilities")
        assert result.private_modules == ["Internal.Utilities"]

    def test_allow_listed_module_is_safe(self, classifier):
        result = classify(classifier, "Import-Module Microsoft.PowerShell.Management")
        assert result.private_modules == []

    def test_declarations_do_not_cover_imports(self, classifier):
        text = "function Internal.Utilities { }\nImport-Module Internal.Utilities"
        assert classify(classifier, text).private_modules == ["Internal.Utilities"]


class TestCustomAllowList:
    """Classifier honours an explicitly passed allow-list."""

    def test_user_entries(self):
        allowlist = AllowList(commands=["Invoke-Shared"], modules=["Shared"], aliases={"ish": "Invoke-Shared"})
        classifier = ReferenceClassifier(allowlist, AliasResolver(allowlist.aliases))
        result = classify(classifier, "Import-Module Shared\nish\nInvoke-Shared\nGet-Item")
        assert result.private_commands == ["Import-Module", "Get-Item"]
        assert result.private_modules == []

    def test_unresolved_alias_target_keeps_spelling(self):
        allowlist = AllowList(aliases={"dep": "Invoke-Deploy"})
        classifier = ReferenceClassifier(allowlist, AliasResolver(allowlist.aliases))
        assert classify(classifier, "dep").private_commands == ["Invoke-Deploy"]
