"""Local analysis modules for PhishGuard."""

from .features import FeatureExtractor, Features
from .lists import ListOverride, ListOverrideResolver, ListSet
from .scorer import RiskScorer, ScoreResult
from .typosquatting import TyposquattingDetector, levenshtein, similarity

__all__ = [
    "FeatureExtractor",
    "Features",
    "ListOverride",
    "ListOverrideResolver",
    "ListSet",
    "RiskScorer",
    "ScoreResult",
    "TyposquattingDetector",
    "levenshtein",
    "similarity",
]
