"""Remote reputation intelligence for PhishGuard."""

from .rate_limiter import RateLimiter
from .reputation import ReputationClient, ReputationResult

__all__ = ["RateLimiter", "ReputationClient", "ReputationResult"]
