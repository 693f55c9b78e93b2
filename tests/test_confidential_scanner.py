"""Tests for confidential-term scanning."""

import pytest

from leakgate.errors import PatternError
from leakgate.scanner.confidential_scanner import ConfidentialScanner


class TestConfidentialScanner:

    def test_literal_term_single_match(self):
        scanner = ConfidentialScanner(["Acme Corporation"])
        assert scanner.scan("# Copyright Acme Corporation\nGet-Item") == ["Acme Corporation"]

    def test_no_terms_disables_check(self):
        scanner = ConfidentialScanner([])
        assert not scanner.enabled
        assert scanner.scan("Acme Corporation secret internal") == []

    def test_case_insensitive_by_default(self):
        scanner = ConfidentialScanner(["acme"])
        assert scanner.scan("ACME and Acme") == ["ACME", "Acme"]

    def test_case_sensitive(self):
        scanner = ConfidentialScanner(["acme"], case_sensitive=True)
        assert scanner.scan("ACME and acme") == ["acme"]

    def test_distinct_matches_in_order(self):
        scanner = ConfidentialScanner(["corp-\\d+", "Project Falcon"])
        text = "Project Falcon uses corp-12 and corp-7, then corp-12 again"
        assert scanner.scan(text) == ["Project Falcon", "corp-12", "corp-7"]

    def test_blank_terms_dropped(self):
        scanner = ConfidentialScanner(["", "   ", "Falcon"])
        assert scanner.terms == ["Falcon"]
        assert scanner.enabled

    def test_invalid_term_names_the_term(self):
        with pytest.raises(PatternError) as exc:
            ConfidentialScanner(["good", "bad("])
        assert exc.value.term == "bad("

    def test_term_cannot_break_alternation(self):
        with pytest.raises(PatternError):
            ConfidentialScanner(["a)|(b"])

    def test_backreference_in_first_term(self):
        scanner = ConfidentialScanner([r"(acme)-\1", "Falcon"])
        assert scanner.scan("acme-acme, acme-beta, Falcon") == ["acme-acme", "Falcon"]

    def test_named_backreference_in_later_term(self):
        scanner = ConfidentialScanner([r"(corp)-\d+", r"(?P<tag>ops)/(?P=tag)"])
        assert scanner.scan("corp-1 ops/ops ops/dev") == ["corp-1", "ops/ops"]

    def test_numbered_backreference_after_groups_is_rejected(self):
        with pytest.raises(PatternError) as exc:
            ConfidentialScanner([r"(corp)-\d+", r"(ops)/\1"])
        assert exc.value.term == r"(ops)/\1"

    def test_conflicting_group_names_raise_pattern_error(self):
        with pytest.raises(PatternError) as exc:
            ConfidentialScanner([r"(?P<id>a+)", r"(?P<id>b+)"])
        assert exc.value.term == r"(?P<id>b+)"
