"""Exception taxonomy for PhishGuard."""

from typing import Optional


class PhishGuardError(Exception):
    """Base exception for PhishGuard errors."""

    pass


class ParseError(PhishGuardError):
    """URL could not be parsed into a scheme and host."""

    def __init__(self, url: str, message: str = "Malformed URL"):
        self.url = url
        self.message = message
        super().__init__(f"{message}: {url!r}")


class RemoteLookupError(PhishGuardError):
    """Reputation service unreachable or returned a non-success response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        self.message = message
        if status_code is not None:
            super().__init__(f"Reputation API error {status_code}: {message}")
        else:
            super().__init__(f"Reputation lookup failed: {message}")


class StorageError(PhishGuardError):
    """Persistent store read or write failed."""

    pass
