"""Structural feature extraction for URLs."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Iterable, Optional

from ..constants import FREE_HOSTING_SERVICES, SUSPICIOUS_KEYWORDS, SUSPICIOUS_TLDS
from ..utils.domains import parse_url
from .typosquatting import TyposquattingDetector

# Loose heuristic: octet ranges are not validated and IPv6 is not detected.
IPV4_PATTERN = re.compile(r"\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}")
ENCODED_CHAR_PATTERN = re.compile(r"%[0-9A-Fa-f]{2}")
SPECIAL_CHAR_PATTERN = re.compile(r"[^a-zA-Z0-9.-]")
DIGIT_PATTERN = re.compile(r"\d")

LONG_SUBDOMAIN_LENGTH = 20


@dataclass(frozen=True)
class Features:
    """Structural signals of a single URL."""

    url_length: int
    domain_length: int
    path_length: int
    num_dots: int
    num_hyphens: int
    num_digits: int
    num_special_chars: int
    has_https: bool
    has_ip_address: bool
    has_suspicious_tld: bool
    has_at_symbol: bool
    has_double_slash: bool
    suspicious_keyword_count: int
    typosquatting_score: int
    encoded_char_count: int
    has_encoded_chars: bool
    has_unicode_chars: bool
    num_subdomains: int
    has_long_subdomain: bool
    is_free_hosting: bool

    def to_dict(self) -> dict:
        return asdict(self)


class FeatureExtractor:
    """Computes Features from an absolute URL without any network access."""

    def __init__(
        self,
        typosquatting: Optional[TyposquattingDetector] = None,
        suspicious_tlds: Iterable[str] = SUSPICIOUS_TLDS,
        suspicious_keywords: Iterable[str] = SUSPICIOUS_KEYWORDS,
        free_hosting: Iterable[str] = FREE_HOSTING_SERVICES,
    ):
        self.typosquatting = typosquatting or TyposquattingDetector()
        self.suspicious_tlds = tuple(t.lower() for t in suspicious_tlds)
        self.suspicious_keywords = tuple(k.lower() for k in suspicious_keywords)
        self.free_hosting = tuple(s.lower() for s in free_hosting)

    def extract(self, url: str) -> Features:
        """Extract features; raises ParseError for malformed input."""
        parsed = parse_url(url)
        domain = (parsed.hostname or "").lower()
        path = parsed.path or "/"
        full_url = url.strip()
        url_lower = full_url.lower()
        labels = domain.split(".")

        encoded_char_count = len(ENCODED_CHAR_PATTERN.findall(full_url))

        return Features(
            url_length=len(full_url),
            domain_length=len(domain),
            path_length=len(path),
            num_dots=full_url.count("."),
            num_hyphens=domain.count("-"),
            num_digits=len(DIGIT_PATTERN.findall(domain)),
            num_special_chars=len(SPECIAL_CHAR_PATTERN.findall(full_url)),
            has_https=parsed.scheme.lower() == "https",
            has_ip_address=bool(IPV4_PATTERN.search(domain)),
            has_suspicious_tld=self._has_suspicious_tld(domain),
            has_at_symbol="@" in full_url,
            has_double_slash="//" in path,
            suspicious_keyword_count=sum(
                1 for keyword in self.suspicious_keywords if keyword in url_lower
            ),
            typosquatting_score=self.typosquatting.score(domain),
            encoded_char_count=encoded_char_count,
            has_encoded_chars=encoded_char_count > 0,
            has_unicode_chars=not full_url.isascii(),
            num_subdomains=len(labels) - 2,
            has_long_subdomain=any(len(label) > LONG_SUBDOMAIN_LENGTH for label in labels),
            is_free_hosting=self._is_free_hosting(domain),
        )

    def _has_suspicious_tld(self, domain: str) -> bool:
        return any(domain.endswith(tld) for tld in self.suspicious_tlds)

    def _is_free_hosting(self, domain: str) -> bool:
        """Exact provider host, or any host under the provider/free TLD."""
        for service in self.free_hosting:
            if domain == service or domain.endswith(f".{service}"):
                return True
        return False
