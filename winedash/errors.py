from __future__ import annotations

from typing import Optional


class WineApiError(Exception):
    """Any failure talking to the wine API, transport or non-2xx alike."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message
