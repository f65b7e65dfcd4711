"""HTTP API for PhishGuard."""

from .server import ApiServer

__all__ = ["ApiServer"]
