"""Tests for edit-distance typosquatting detection."""

import pytest

from phishguard.analyzer.typosquatting import TyposquattingDetector, levenshtein, similarity


def test_levenshtein_classic_examples():
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("", "abc") == 3
    assert levenshtein("same", "same") == 0


def test_similarity_bounds():
    assert similarity("", "") == 1.0
    assert similarity("abc", "") == 0.0
    assert similarity("paypal.com", "paypa1.com") == pytest.approx(0.9)


class TestTyposquattingDetector:
    @pytest.fixture
    def detector(self):
        return TyposquattingDetector()

    def test_one_character_swap_scores_high(self, detector):
        assert detector.score("paypa1.com") == 45
        assert detector.score("gooogle.com") == 45

    def test_two_substitutions_score_medium(self, detector):
        # 2 edits over 10 characters -> similarity 0.8
        assert detector.score("g00gle.com") == 25

    def test_exact_match_scores_zero(self, detector):
        assert detector.max_similarity("google.com") == 1.0
        assert detector.score("google.com") == 0

    def test_unrelated_domain_scores_zero(self, detector):
        assert detector.score("zzzzzzzzzzzzzzzzzzzz.net") == 0

    def test_custom_reference_set(self):
        detector = TyposquattingDetector(reference_domains=["Kaspa.org"])
        assert detector.score("kaspa.org") == 0
        assert detector.score("kaspe.org") == 45

    def test_similarity_band_edges(self):
        # 3 edits over 20 characters -> exactly 0.85, the top of the medium band
        detector = TyposquattingDetector(reference_domains=["abcdefghijklmnopqrst"])
        assert detector.max_similarity("abcdefghijklmnopqxyz") == 0.85
        assert detector.score("abcdefghijklmnopqxyz") == 25

        # 1 edit over 4 characters -> exactly 0.75, below the medium band
        detector = TyposquattingDetector(reference_domains=["abcd"])
        assert detector.max_similarity("abcx") == 0.75
        assert detector.score("abcx") == 0
