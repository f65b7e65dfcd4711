"""URL and domain normalization utilities."""

from __future__ import annotations

import re
from urllib.parse import SplitResult, urlsplit

from ..errors import ParseError

# Characters that can never appear in a host name
FORBIDDEN_HOST_CHARS = re.compile(r"[\x00-\x20\x7f#%/:<>?@\[\\\]^|\"`{}]")


def parse_url(url: str) -> SplitResult:
    """
    Split an absolute URL, raising ParseError when it has no scheme or host.

    Relative references, bare hostnames, unbalanced IPv6 brackets, invalid
    ports and hosts with forbidden characters are all rejected; the caller
    decides how to degrade.
    """
    raw = (url or "").strip()
    if not raw:
        raise ParseError(url, "Empty URL")

    try:
        parsed = urlsplit(raw)
        host = parsed.hostname
        # Raises ValueError for non-numeric or out-of-range ports
        parsed.port
    except ValueError as exc:
        raise ParseError(url, str(exc)) from exc

    if not parsed.scheme or "://" not in raw:
        raise ParseError(url, "URL has no scheme")
    if not host:
        raise ParseError(url, "URL has no host")
    # IPv6 literals keep their colons inside brackets
    bare_host = host.replace(":", "") if "[" in parsed.netloc else host
    if FORBIDDEN_HOST_CHARS.search(bare_host):
        raise ParseError(url, "URL host contains invalid characters")
    return parsed


def extract_hostname(url: str) -> str:
    """Return the lowercased hostname of an absolute URL, trailing dot included."""
    return (parse_url(url).hostname or "").lower()


def canonicalize_domain(value: str) -> str:
    """
    Normalize a user-entered domain/URL to a host key for list matching.

    - Lowercase
    - Strip leading "www."
    - Ignore scheme, port, path, query and fragment
    """
    raw = (value or "").strip()
    if not raw:
        return ""

    candidate = raw if "://" in raw else f"https://{raw}"
    try:
        host = urlsplit(candidate).hostname or ""
    except ValueError:
        host = ""
    host = (host or raw.split("/")[0]).strip().lower().strip(".")
    if not host:
        return ""

    if host.startswith("www.") and len(host) > 4:
        host = host[4:]

    return host
