"""User-managed whitelist and blacklist persistence."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from ..analyzer.lists import ListSet
from ..utils.domains import canonicalize_domain
from .base import KeyValueStore

logger = logging.getLogger(__name__)

WHITELIST_KEY = "lists:whitelist"
BLACKLIST_KEY = "lists:blacklist"

LIST_KEYS = {
    "whitelist": WHITELIST_KEY,
    "blacklist": BLACKLIST_KEY,
}


class ListStore:
    """Ordered, de-duplicated domain lists stored in a key-value store."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def seed(self, whitelist: Iterable[str] = (), blacklist: Iterable[str] = ()) -> None:
        """Merge configured entries into the stored lists (keeps user additions)."""
        for name, entries in (("whitelist", whitelist), ("blacklist", blacklist)):
            for entry in entries:
                await self.add(name, entry)

    async def add(self, list_name: str, domain: str) -> bool:
        """Append `domain` to a list. Returns False if absent/invalid or already present."""
        key = _key_for(list_name)
        entry = canonicalize_domain(domain)
        if not entry:
            return False
        added = False

        def append(current: Any) -> list:
            nonlocal added
            items = list(current or [])
            if entry not in items:
                items.append(entry)
                added = True
            return items

        await self.store.update(key, append, default=[])
        if added:
            logger.info(f"Added {entry} to {list_name}")
        return added

    async def remove(self, list_name: str, domain: str) -> bool:
        key = _key_for(list_name)
        entry = canonicalize_domain(domain) or (domain or "").strip().lower()
        removed = False

        def drop(current: Any) -> list:
            nonlocal removed
            items = list(current or [])
            kept = [item for item in items if item != entry]
            removed = len(kept) != len(items)
            return kept

        await self.store.update(key, drop, default=[])
        if removed:
            logger.info(f"Removed {entry} from {list_name}")
        return removed

    async def get(self, list_name: str) -> list[str]:
        return list(await self.store.get(_key_for(list_name), []) or [])

    async def load(self) -> ListSet:
        return ListSet.from_lists(
            whitelist=await self.get("whitelist"),
            blacklist=await self.get("blacklist"),
        )


def _key_for(list_name: str) -> str:
    try:
        return LIST_KEYS[list_name]
    except KeyError:
        raise ValueError(f"Unknown list: {list_name!r}") from None
