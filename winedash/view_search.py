from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional

from winedash.data import search_results_frame
from winedash.filters import ListingFilters, SearchFilters
from winedash.pagination import clamp_page, page_window
from winedash.rag import source_to_search_result
from winedash.schemas import RagAnswerResponse, WineListResponse, WineSearchResponse, WineSearchResult


def compute_search_results(filters: SearchFilters, response: Optional[WineSearchResponse], *, searched: bool = False) -> Dict[str, Any]:
    items = response.items if response is not None else []
    pages = int(response.pages) if response is not None else 0
    has_previous, has_next = page_window(filters.page, pages)
    message = "No wines found." if searched and not items else None
    return {
        "filters": asdict(filters),
        "items": items,
        "table": search_results_frame(items),
        "total": int(response.total) if response is not None else 0,
        "page": filters.page,
        "pages": pages,
        "show_pagination": pages > 1,
        "has_previous": has_previous,
        "has_next": has_next,
        "message": message,
    }


def out_of_range_page(filters: SearchFilters, response: Optional[WineSearchResponse]) -> Optional[int]:
    """Last valid page when ``filters.page`` points past the results (e.g. a stale URL), else None."""
    if response is None or response.pages < 1:
        return None
    page = clamp_page(filters.page, response.pages)
    return page if page != filters.page else None


def compute_listing(filters: ListingFilters, response: WineListResponse) -> Dict[str, Any]:
    limit = max(1, int(response.limit or filters.limit))
    pages = max(1, -(-int(response.total) // limit))
    has_previous, has_next = page_window(filters.page, pages)
    return {
        "filters": asdict(filters),
        "wines": response.wines,
        "total": int(response.total),
        "page": filters.page,
        "pages": pages,
        "has_previous": has_previous,
        "has_next": has_next,
    }


def compute_rag_answer(result: Optional[RagAnswerResponse], *, submitted: bool = False) -> Dict[str, Any]:
    sources: List[Dict[str, Any]] = []
    for source in result.sources if result is not None else []:
        card: Optional[WineSearchResult]
        try:
            card = source_to_search_result(source)
        except ValueError:
            # non-numeric ids cannot be opened in the detail view
            card = None
        sources.append(
            {
                "wine_id": card.id if card is not None else None,
                "title": source.title,
                "country": source.country,
                "variety": source.variety,
                "description": source.description or "",
            }
        )
    answer = (result.answer if result is not None else "") or ""
    return {
        "answer": answer,
        "sources": sources,
        "message": "No answer found." if submitted and not answer else None,
    }
