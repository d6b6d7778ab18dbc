from __future__ import annotations

import logging
from typing import Callable, List, Optional

from cachetools import LRUCache  # type: ignore[import-untyped]

from winedash.schemas import RagAnswerResponse, RagSource, WineSearchResult

logger = logging.getLogger(__name__)


def normalize_query(query: Optional[str]) -> str:
    return (query or "").strip()


class RagAnswerCache:
    """Answers already fetched for a question, least recently used evicted first."""

    def __init__(self, max_entries: int = 64):
        self.max_entries = max(1, int(max_entries))
        self._entries: LRUCache = LRUCache(maxsize=self.max_entries)
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, query: object) -> bool:
        return isinstance(query, str) and normalize_query(query) in self._entries

    def queries(self) -> List[str]:
        """Cached questions, oldest asked first."""
        return list(self._entries.keys())

    def get(self, query: str) -> Optional[RagAnswerResponse]:
        key = normalize_query(query)
        if not key:
            return None
        answer = self._entries.get(key)
        if answer is None:
            self.misses += 1
            return None
        self.hits += 1
        return answer

    def put(self, query: str, answer: RagAnswerResponse) -> None:
        key = normalize_query(query)
        if not key:
            return
        self._entries[key] = answer
        logger.debug("cached answer for %r (%d/%d)", key, len(self._entries), self.max_entries)

    def ask(self, query: str, fetch: Callable[[str], RagAnswerResponse]) -> Optional[RagAnswerResponse]:
        key = normalize_query(query)
        if not key:
            return None
        cached = self.get(key)
        if cached is not None:
            return cached
        # a failed fetch raises before anything is stored
        answer = fetch(key)
        self.put(key, answer)
        return answer


def source_to_search_result(source: RagSource) -> WineSearchResult:
    wine_id = int(source.id) if isinstance(source.id, str) else source.id
    return WineSearchResult(id=wine_id, title=source.title, country=source.country, variety=source.variety)
