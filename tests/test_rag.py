"""
Tests for the question/answer cache
"""

import pytest

from winedash.errors import WineApiError
from winedash.rag import RagAnswerCache, normalize_query, source_to_search_result
from winedash.schemas import RagAnswerResponse, RagSource


def answer(text):
    return RagAnswerResponse(answer=text, sources=[])


class CountingFetch:
    def __init__(self):
        self.calls = []

    def __call__(self, query):
        self.calls.append(query)
        return answer(f"answer to {query}")


def test_repeated_question_is_served_from_cache():
    cache = RagAnswerCache()
    fetch = CountingFetch()
    first = cache.ask("best malbec?", fetch)
    second = cache.ask("  best malbec?  ", fetch)
    assert first is second
    assert fetch.calls == ["best malbec?"]
    assert (cache.hits, cache.misses) == (1, 1)
    assert "best malbec?" in cache


def test_blank_question_never_fetches():
    cache = RagAnswerCache()
    fetch = CountingFetch()
    assert cache.ask("   ", fetch) is None
    assert fetch.calls == []
    assert len(cache) == 0


def test_failures_are_not_cached():
    cache = RagAnswerCache()

    def broken(query):
        raise WineApiError("Failed to fetch RAG answer", status_code=500)

    with pytest.raises(WineApiError):
        cache.ask("rosé", broken)
    assert "rosé" not in cache
    assert cache.ask("rosé", CountingFetch()).answer == "answer to rosé"


def test_oldest_question_is_evicted():
    cache = RagAnswerCache(max_entries=2)
    cache.put("a", answer("1"))
    cache.put("b", answer("2"))
    cache.get("a")
    cache.put("c", answer("3"))
    assert set(cache.queries()) == {"a", "c"}
    assert "b" not in cache


def test_normalize_query():
    assert normalize_query(None) == ""
    assert normalize_query("  syrah ") == "syrah"


def test_source_ids_become_integers():
    result = source_to_search_result(RagSource(id="42", title="Syrah 2018", country="France"))
    assert result.id == 42
    assert result.country == "France"
    with pytest.raises(ValueError):
        source_to_search_result(RagSource(id="doc-1", title="Note"))
