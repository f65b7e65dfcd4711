"""Shared helpers for PhishGuard."""

from .domains import canonicalize_domain, extract_hostname, parse_url

__all__ = ["canonicalize_domain", "extract_hostname", "parse_url"]
