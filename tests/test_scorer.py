"""Tests for heuristic risk scoring."""

from dataclasses import replace

import pytest

from phishguard.analyzer.features import Features
from phishguard.analyzer.scorer import RiskScorer


@pytest.fixture
def scorer():
    """Create a risk scorer for testing."""
    return RiskScorer()


def _clean_features(**overrides) -> Features:
    base = Features(
        url_length=20,
        domain_length=11,
        path_length=1,
        num_dots=1,
        num_hyphens=0,
        num_digits=0,
        num_special_chars=3,
        has_https=True,
        has_ip_address=False,
        has_suspicious_tld=False,
        has_at_symbol=False,
        has_double_slash=False,
        suspicious_keyword_count=0,
        typosquatting_score=0,
        encoded_char_count=0,
        has_encoded_chars=False,
        has_unicode_chars=False,
        num_subdomains=0,
        has_long_subdomain=False,
        is_free_hosting=False,
    )
    return replace(base, **overrides)


class TestRiskScorer:
    """Test URL scoring functionality."""

    def test_trusted_domain_bypass(self, scorer):
        result = scorer.analyze("https://www.google.com/search?q=login")
        assert result.is_trusted
        assert result.score == 0
        assert result.confidence == 1.0
        assert result.features is None

    def test_trusted_match_is_exact(self, scorer):
        assert scorer.is_trusted_domain("google.com")
        assert not scorer.is_trusted_domain("login.google.com")
        assert not scorer.is_trusted_domain("evil-google.com")
        assert not scorer.analyze("https://login.google.com/").is_trusted

    def test_trailing_dot_host_is_not_trusted(self, scorer):
        result = scorer.analyze("https://GOOGLE.COM./")
        assert not result.is_trusted
        assert result.features is not None

    def test_malformed_url_falls_back_to_neutral(self, scorer):
        result = scorer.analyze("not a url")
        assert result.score == 50
        assert result.confidence == 0.3
        assert result.error
        assert result.features is None

    def test_ip_http_at_symbol(self, scorer):
        """No HTTPS (+25), IP host (+30) and "@" (+25)."""
        result = scorer.analyze("http://1.2.3.4/@x")
        assert result.score == 80
        assert result.confidence == pytest.approx(0.8)

    def test_plain_http_site(self, scorer):
        result = scorer.analyze("http://example.com/")
        assert result.score == 25

    def test_score_capped_at_100(self, scorer):
        result = scorer.analyze("http://paypal-secure-login-verify-account.tk/")
        assert result.score == 100
        assert result.confidence == 0.95

    def test_clean_features_score_zero(self, scorer):
        assert scorer.calculate_risk_score(_clean_features()) == 0
        assert scorer.calculate_confidence(_clean_features()) == 0.5

    def test_length_thresholds_stack(self, scorer):
        assert scorer.calculate_risk_score(_clean_features(url_length=200)) == 10
        assert scorer.calculate_risk_score(_clean_features(url_length=300)) == 20

    def test_special_char_thresholds_stack(self, scorer):
        assert scorer.calculate_risk_score(_clean_features(num_special_chars=25)) == 10
        assert scorer.calculate_risk_score(_clean_features(num_special_chars=45)) == 25

    def test_encoded_char_tiers(self, scorer):
        assert scorer.calculate_risk_score(_clean_features(encoded_char_count=5)) == 0
        assert scorer.calculate_risk_score(_clean_features(encoded_char_count=6)) == 5
        assert scorer.calculate_risk_score(_clean_features(encoded_char_count=11)) == 15

    def test_keywords_and_typosquatting_add(self, scorer):
        f = _clean_features(suspicious_keyword_count=3, typosquatting_score=45)
        assert scorer.calculate_risk_score(f) == 69

    def test_negative_subdomain_count_is_harmless(self, scorer):
        assert scorer.calculate_risk_score(_clean_features(num_subdomains=-1)) == 0
        assert scorer.calculate_risk_score(_clean_features(num_subdomains=4)) == 15

    def test_confidence_clamped(self, scorer):
        f = _clean_features(
            has_ip_address=True,
            has_suspicious_tld=True,
            typosquatting_score=45,
            has_https=False,
            is_free_hosting=True,
            suspicious_keyword_count=5,
        )
        assert scorer.calculate_confidence(f) == 0.95
