from __future__ import annotations

from typing import Generic, List, TypeVar

from fastapi import Request
from pydantic import BaseModel, Field

from ..state import AppState

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """
    Envelope for paginated list responses.
    """
    items: List[T] = Field(..., description="Records on this page, in stored order")
    total: int = Field(..., description="Total number of records matching the query")
    limit: int = Field(..., description="Limit applied to the query")
    offset: int = Field(..., description="Offset applied to the query")


# PUBLIC_INTERFACE
def get_state(request: Request) -> AppState:
    """FastAPI dependency returning the AppState the app was created with."""
    return request.app.state.eztodo
