"""
Tests for hostname normalization.

Tests root-domain extraction, SSL candidate filtering and set building.
"""

import pytest
from hypothesis import given, strategies as st

from domain_expiry.normalizer import (
    TXT_PATTERNS,
    normalize_hostnames,
    root_of,
    ssl_candidate_of,
)


label = st.text(alphabet='abcdefghijklmnopqrstuvwxyz0123456789', min_size=1, max_size=12)


class TestRootOf:
    """Tests for root_of function."""

    def test_plain_domain(self):
        assert root_of("example.com") == "example.com"

    def test_subdomain(self):
        assert root_of("a.b.example.com") == "example.com"

    def test_wildcard_matches_plain(self):
        """Test that a wildcard host maps to the same root as its base."""
        assert root_of("*.sub.example.com") == root_of("sub.example.com") == "example.com"

    def test_case_and_whitespace(self):
        assert root_of("  WWW.Example.COM \n") == "example.com"

    def test_multi_label_suffix_keeps_last_two_labels(self):
        """Test the documented last-two-labels approximation."""
        assert root_of("shop.example.co.uk") == "co.uk"

    def test_unknown_tld(self):
        assert root_of("host.corp.zzlocal") == "corp.zzlocal"

    def test_trailing_dot(self):
        assert root_of("www.example.com.") == "example.com"

    def test_bare_suffix(self):
        assert root_of("co.uk") is None

    @pytest.mark.parametrize("hostname", ["", "   ", "localhost", "*.com", "a..b.com", "exa mple.com", "192.168.0.1"])
    def test_unparsable(self, hostname):
        assert root_of(hostname) is None

    @given(st.text().filter(lambda s: '.' not in s))
    def test_single_label_is_none(self, hostname):
        """Test that names with fewer than two labels never yield a root."""
        assert root_of(hostname) is None


class TestSslCandidateOf:
    """Tests for ssl_candidate_of function."""

    def test_plain_host(self):
        assert ssl_candidate_of("www.example.com") == "www.example.com"

    def test_wildcard_rewritten(self):
        assert ssl_candidate_of("*.example.com") == "test.example.com"

    def test_lowercase_trim(self):
        assert ssl_candidate_of(" API.Example.com ") == "api.example.com"

    def test_trailing_dot(self):
        """Test that fully qualified names match their relative form."""
        assert ssl_candidate_of("WWW.example.com.") == ssl_candidate_of("www.example.com") == "www.example.com"

    @pytest.mark.parametrize("hostname", [
        "_dmarc.example.com",
        "selector._domainkey.example.com",
        "_acme-challenge.www.example.com",
        "_spf.example.com",
    ])
    def test_txt_records_rejected(self, hostname):
        assert ssl_candidate_of(hostname) is None

    def test_partial_label_match_is_kept(self):
        """Test that only exact label matches are rejected."""
        assert ssl_candidate_of("_dmarc2.example.com") == "_dmarc2.example.com"

    @given(st.text().filter(lambda s: '.' not in s))
    def test_single_label_is_none(self, hostname):
        assert ssl_candidate_of(hostname) is None

    @given(st.lists(label, min_size=1, max_size=3), st.sampled_from(sorted(TXT_PATTERNS)), st.lists(label, min_size=1, max_size=3))
    def test_any_txt_label_rejected(self, before, txt_label, after):
        hostname = '.'.join(before + [txt_label] + after)
        assert ssl_candidate_of(hostname) is None


class TestNormalizeHostnames:
    """Tests for normalize_hostnames function."""

    def test_acme_challenge_only_affects_ssl(self):
        roots, candidates = normalize_hostnames({"a.example.com", "_acme-challenge.a.example.com"})

        assert roots == {"example.com"}
        assert candidates == {"a.example.com"}

    def test_deduplicates_roots(self):
        roots, candidates = normalize_hostnames(["a.example.com", "b.example.com", "*.example.com"])

        assert roots == {"example.com"}
        assert candidates == {"a.example.com", "b.example.com", "test.example.com"}

    def test_empty(self):
        assert normalize_hostnames([]) == (set(), set())
