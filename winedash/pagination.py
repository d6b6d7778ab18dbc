"""Pagination state for cursor-paged drill-downs and offset-paged listings.

Cursors are opaque: they are only ever handed back to the backend. A cursor
feed keeps going until the backend reports ``has_next == False``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, List, Optional, Sequence, Set, Tuple

logger = logging.getLogger(__name__)

# fetch(cursor) -> (items, next_cursor, has_next, total)
CursorFetch = Callable[[Optional[str]], Tuple[Sequence[Any], Optional[str], bool, Optional[int]]]


def _item_id(item: Any) -> Optional[Hashable]:
    if isinstance(item, dict):
        return item.get("id")
    return getattr(item, "id", None)


@dataclass
class CursorFeed:
    key: Optional[Hashable] = None
    items: List[Any] = field(default_factory=list)
    cursor: Optional[str] = None
    has_next: bool = False
    total: Optional[int] = None
    failed: bool = False
    _seen: Set[Hashable] = field(default_factory=set, repr=False)

    @property
    def can_load_more(self) -> bool:
        # a has_next without a cursor cannot be continued without refetching page one
        return self.key is not None and self.has_next and self.cursor is not None

    def reset(self, key: Optional[Hashable] = None) -> None:
        self.key = key
        self.items = []
        self.cursor = None
        self.has_next = False
        self.total = None
        self.failed = False
        self._seen = set()

    def absorb(self, items: Sequence[Any], next_cursor: Optional[str], has_next: bool, total: Optional[int] = None) -> int:
        """Append a page; returns how many items were actually added."""
        added = 0
        for item in items:
            item_id = _item_id(item)
            if item_id is not None:
                if item_id in self._seen:
                    continue
                self._seen.add(item_id)
            self.items.append(item)
            added += 1
        self.cursor = next_cursor or None
        self.has_next = bool(has_next)
        if total is not None:
            self.total = int(total)
        if added < len(items):
            logger.debug("feed %r skipped %d duplicate items", self.key, len(items) - added)
        return added

    def load_first(self, key: Hashable, fetch: CursorFetch) -> int:
        """Start over for ``key``; a failure leaves the feed empty and ``failed`` set until the next load."""
        self.reset(key)
        try:
            items, next_cursor, has_next, total = fetch(None)
        except Exception:
            self.failed = True
            raise
        return self.absorb(items, next_cursor, has_next, total)

    def load_more(self, fetch: CursorFetch) -> int:
        if not self.can_load_more:
            return 0
        items, next_cursor, has_next, total = fetch(self.cursor)
        return self.absorb(items, next_cursor, has_next, total)


@dataclass
class PageAccumulator:
    """Offset pages fetched one after another until an empty page comes back."""

    items: List[Any] = field(default_factory=list)
    pages_loaded: int = 0
    exhausted: bool = False
    bucket_size: Optional[Tuple[float, float]] = None

    @property
    def next_page(self) -> int:
        return self.pages_loaded + 1

    def absorb(self, page: int, items: Sequence[Any]) -> int:
        if page != self.next_page:
            logger.warning("ignoring out-of-order page %s (expected %s)", page, self.next_page)
            return 0
        if not items:
            self.exhausted = True
            return 0
        self.items.extend(items)
        self.pages_loaded = page
        return len(items)


def clamp_page(page: int, pages: int) -> int:
    return max(1, min(int(page), max(1, int(pages))))


def page_window(page: int, pages: int) -> Tuple[bool, bool]:
    """(has_previous, has_next) for an offset-paged result."""
    return page > 1, page < pages
