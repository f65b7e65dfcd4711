"""Centralized constants for PhishGuard.

This module contains the verdict enums and the fixed lookup tables shared by
the analyzer, the orchestrator and the service layer. The tables are
process-wide and never mutated at runtime.
"""

from enum import Enum


class Status(str, Enum):
    """Classification outcome for a URL."""

    SAFE = "safe"
    SUSPICIOUS = "suspicious"
    MALICIOUS = "malicious"
    ERROR = "error"

    @classmethod
    def from_score(cls, score: int) -> "Status":
        """Map a normalized 0-100 score onto a status."""
        if score >= MALICIOUS_THRESHOLD:
            return cls.MALICIOUS
        if score >= SUSPICIOUS_THRESHOLD:
            return cls.SUSPICIOUS
        return cls.SAFE

    def __str__(self) -> str:
        return self.value


class Reason(str, Enum):
    """Why the orchestrator settled on a verdict."""

    INVALID_URL = "invalid_url"
    WHITELISTED = "whitelisted"
    BLACKLISTED = "blacklisted"
    TRUSTED_DOMAIN = "trusted_domain"
    PHISHING_INDICATORS = "phishing_indicators"
    NO_API_KEY = "no_api_key"
    RATE_LIMITED = "rate_limited"
    REMOTE_UNAVAILABLE = "remote_unavailable"
    COMBINED_ANALYSIS = "combined_analysis"
    INTERNAL_ERROR = "internal_error"

    def __str__(self) -> str:
        return self.value


MALICIOUS_THRESHOLD = 70
SUSPICIOUS_THRESHOLD = 40

# Fusion weights for the remote lookup (local heuristics vs. engine consensus)
INDICATOR_WEIGHT = 0.3
REMOTE_WEIGHT = 0.7

MAX_SCORE = 100
MAX_CONFIDENCE = 0.95
HISTORY_LIMIT = 100

SUSPICIOUS_TLDS: tuple[str, ...] = (
    ".tk",
    ".ml",
    ".ga",
    ".cf",
    ".gq",
    ".pw",
    ".cc",
    ".top",
    ".xyz",
    ".club",
    ".work",
    ".click",
    ".website",
    ".site",
    ".online",
    ".space",
    ".info",
)

# Reference set for typosquatting similarity
POPULAR_DOMAINS: tuple[str, ...] = (
    "google.com",
    "facebook.com",
    "amazon.com",
    "microsoft.com",
    "apple.com",
    "netflix.com",
    "paypal.com",
    "linkedin.com",
    "twitter.com",
    "instagram.com",
    "youtube.com",
    "github.com",
    "reddit.com",
    "wikipedia.org",
    "stackoverflow.com",
)

SUSPICIOUS_KEYWORDS: tuple[str, ...] = (
    "login",
    "signin",
    "account",
    "verify",
    "security",
    "update",
    "confirm",
    "suspend",
    "restore",
    "unlock",
    "secure",
    "banking",
    "paypal",
    "amazon",
    "microsoft",
    "apple",
    "netflix",
    "validation",
    "authentication",
    "credential",
    "password-reset",
    "account-recovery",
)

# Matched as exact host or as a dot-suffix
FREE_HOSTING_SERVICES: tuple[str, ...] = (
    "weebly.com",
    "wixsite.com",
    "wordpress.com",
    "blogspot.com",
    "tumblr.com",
    "square.site",
    "webflow.io",
    "000webhostapp.com",
    "tk",
    "ml",
    "ga",
    "cf",
    "gq",
)

# Exact host matches only: "evil-google.com" and "login.google.com" are not trusted.
TRUSTED_DOMAINS: frozenset[str] = frozenset(
    {
        "google.com",
        "www.google.com",
        "google.co.in",
        "www.google.co.in",
        "bing.com",
        "www.bing.com",
        "yahoo.com",
        "www.yahoo.com",
        "duckduckgo.com",
        "www.duckduckgo.com",
        "youtube.com",
        "www.youtube.com",
        "facebook.com",
        "www.facebook.com",
        "twitter.com",
        "www.twitter.com",
        "x.com",
        "www.x.com",
        "instagram.com",
        "www.instagram.com",
        "linkedin.com",
        "www.linkedin.com",
        "github.com",
        "www.github.com",
        "reddit.com",
        "www.reddit.com",
        "wikipedia.org",
        "en.wikipedia.org",
        "stackoverflow.com",
        "www.stackoverflow.com",
        "microsoft.com",
        "www.microsoft.com",
        "apple.com",
        "www.apple.com",
        "amazon.com",
        "www.amazon.com",
        "netflix.com",
        "www.netflix.com",
        "spotify.com",
        "open.spotify.com",
        "discord.com",
        "www.discord.com",
        "cloudflare.com",
        "www.cloudflare.com",
    }
)
