"""Core (UI-agnostic) wine dashboard logic.

This package contains:
- the HTTP client for the wine review API (httpx -> pydantic models)
- filter normalization and query-string encoding
- bucket and pagination helpers (scatter clicks, cursor feeds)
- page view functions (pandas frames + Vega-Lite spec dicts)
"""

__version__ = "0.1.0"
