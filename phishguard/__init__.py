"""PhishGuard URL classification engine."""

__version__ = "1.0.0"
