"""Heuristic URL risk scoring for phishing detection."""

import logging
from dataclasses import dataclass
from typing import AbstractSet, Optional

from ..constants import MAX_CONFIDENCE, MAX_SCORE, TRUSTED_DOMAINS
from ..errors import ParseError
from ..utils.domains import extract_hostname
from .features import FeatureExtractor, Features

logger = logging.getLogger(__name__)

FALLBACK_SCORE = 50
FALLBACK_CONFIDENCE = 0.3


@dataclass
class ScoreResult:
    """Result of local URL scoring."""

    score: int
    confidence: float
    features: Optional[Features] = None
    is_trusted: bool = False
    error: Optional[str] = None


class RiskScorer:
    """
    Fixed additive model over URL features.

    Each active signal adds a fixed number of points (some thresholds stack,
    e.g. URL length > 150 and > 250 both fire). The sum is capped at 100.
    Confidence grows with the strongest signals and is capped at 0.95.
    """

    def __init__(
        self,
        extractor: Optional[FeatureExtractor] = None,
        trusted_domains: AbstractSet[str] = TRUSTED_DOMAINS,
    ):
        self.extractor = extractor or FeatureExtractor()
        self.trusted_domains = frozenset(d.lower() for d in trusted_domains)

    def is_trusted_domain(self, hostname: str) -> bool:
        """Exact host match only; subdomains and look-alikes are not trusted."""
        return (hostname or "").lower() in self.trusted_domains

    def analyze(self, url: str) -> ScoreResult:
        """Score a URL. Never raises: malformed input yields a neutral result."""
        try:
            hostname = extract_hostname(url)
            if self.is_trusted_domain(hostname):
                logger.debug(f"Trusted domain (exact match): {hostname}")
                return ScoreResult(score=0, confidence=1.0, is_trusted=True)

            features = self.extractor.extract(url)
        except ParseError as e:
            logger.debug(f"Falling back to neutral score: {e}")
            return ScoreResult(
                score=FALLBACK_SCORE,
                confidence=FALLBACK_CONFIDENCE,
                error=str(e),
            )

        score = self.calculate_risk_score(features)
        confidence = self.calculate_confidence(features)
        logger.debug(f"Risk score for {hostname}: {score} (confidence {confidence:.2f})")
        return ScoreResult(score=score, confidence=confidence, features=features)

    def calculate_risk_score(self, f: Features) -> int:
        """Sum the fixed per-signal points and clamp to [0, 100]."""
        score = 0

        # Free hosting is heavily abused for throwaway phishing pages
        if f.is_free_hosting:
            score += 35

        # Length
        if f.url_length > 150:
            score += 10
        if f.url_length > 250:
            score += 10
        if f.domain_length > 40:
            score += 15

        # Character anomalies
        if f.num_dots > 5:
            score += 10
        if f.num_hyphens > 3:
            score += 10
        if f.num_digits > 4:
            score += 10
        if f.num_special_chars > 20:
            score += 10
        if f.num_special_chars > 40:
            score += 15

        # Transport and host
        if not f.has_https:
            score += 25
        if f.has_ip_address:
            score += 30

        # Suspicious patterns
        if f.has_suspicious_tld:
            score += 35
        if f.has_at_symbol:
            score += 25
        if f.has_double_slash:
            score += 20

        score += f.suspicious_keyword_count * 8
        score += f.typosquatting_score

        # Obfuscation
        if f.encoded_char_count > 10:
            score += 15
        elif f.encoded_char_count > 5:
            score += 5
        if f.has_unicode_chars:
            score += 15

        # Subdomains
        if f.num_subdomains > 3:
            score += 15
        if f.has_long_subdomain:
            score += 15

        return max(0, min(score, MAX_SCORE))

    def calculate_confidence(self, f: Features) -> float:
        """Confidence in the score, base 0.5, capped at 0.95."""
        confidence = 0.5

        if f.has_ip_address:
            confidence += 0.2
        if f.has_suspicious_tld:
            confidence += 0.2
        if f.typosquatting_score > 30:
            confidence += 0.15
        if not f.has_https:
            confidence += 0.1
        if f.is_free_hosting:
            confidence += 0.15
        if f.suspicious_keyword_count > 2:
            confidence += 0.1

        return round(max(0.0, min(confidence, MAX_CONFIDENCE)), 4)
