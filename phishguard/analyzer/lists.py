"""Whitelist / blacklist / trusted-domain overrides."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, Iterable, Optional

from ..constants import TRUSTED_DOMAINS, Reason, Status


@dataclass(frozen=True)
class ListSet:
    """User-managed domain lists, matched by substring."""

    whitelist: tuple[str, ...] = ()
    blacklist: tuple[str, ...] = ()

    @classmethod
    def from_lists(cls, whitelist: Iterable[str] = (), blacklist: Iterable[str] = ()) -> "ListSet":
        return cls(
            whitelist=tuple(w.lower() for w in whitelist if w),
            blacklist=tuple(b.lower() for b in blacklist if b),
        )

    def to_dict(self) -> dict:
        return {"whitelist": list(self.whitelist), "blacklist": list(self.blacklist)}


@dataclass(frozen=True)
class ListOverride:
    """A short-circuit decision made before any scoring."""

    status: Status
    score: int
    reason: Reason


@dataclass
class ListOverrideResolver:
    """
    Resolves list overrides in fixed precedence: whitelist, blacklist, trusted.

    A domain present in both user lists resolves as whitelisted.
    """

    lists: ListSet = field(default_factory=ListSet)
    trusted_domains: AbstractSet[str] = TRUSTED_DOMAINS

    def is_whitelisted(self, domain: str) -> bool:
        return any(entry in domain for entry in self.lists.whitelist)

    def is_blacklisted(self, domain: str) -> bool:
        return any(entry in domain for entry in self.lists.blacklist)

    def is_trusted(self, domain: str) -> bool:
        return domain in self.trusted_domains

    def resolve(self, domain: str) -> Optional[ListOverride]:
        """Return the override for `domain`, or None when scoring must run."""
        domain = (domain or "").lower()
        if not domain:
            return None
        if self.is_whitelisted(domain):
            return ListOverride(Status.SAFE, 0, Reason.WHITELISTED)
        if self.is_blacklisted(domain):
            return ListOverride(Status.MALICIOUS, 100, Reason.BLACKLISTED)
        if self.is_trusted(domain):
            return ListOverride(Status.SAFE, 0, Reason.TRUSTED_DOMAIN)
        return None
