"""Typosquatting detection by edit-distance similarity to well-known domains."""

from __future__ import annotations

from typing import Iterable

from rapidfuzz.distance import Levenshtein

from ..constants import POPULAR_DOMAINS

HIGH_SIMILARITY = 0.85
MEDIUM_SIMILARITY = 0.75
HIGH_SIMILARITY_POINTS = 45
MEDIUM_SIMILARITY_POINTS = 25


def levenshtein(a: str, b: str) -> int:
    """Unit-cost edit distance (insertion, deletion, substitution)."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """Normalized similarity in [0, 1]: (longest - distance) / longest."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - levenshtein(a, b)) / longest


class TyposquattingDetector:
    """Scores how closely a domain imitates a popular brand domain."""

    def __init__(self, reference_domains: Iterable[str] = POPULAR_DOMAINS):
        self.reference_domains = tuple(d.lower() for d in reference_domains)

    def max_similarity(self, domain: str) -> float:
        """Highest similarity of `domain` against the reference set."""
        domain = (domain or "").lower()
        best = 0.0
        for reference in self.reference_domains:
            value = similarity(domain, reference)
            if value > best:
                best = value
        return best

    def score(self, domain: str) -> int:
        """
        Risk points contributed by typosquatting.

        An exact match scores 0: the real domains are handled by the
        trusted-domain bypass before scoring.
        """
        best = self.max_similarity(domain)
        if HIGH_SIMILARITY < best < 1.0:
            return HIGH_SIMILARITY_POINTS
        if MEDIUM_SIMILARITY < best <= HIGH_SIMILARITY:
            return MEDIUM_SIMILARITY_POINTS
        return 0
