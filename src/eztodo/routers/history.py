from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from .. import commands
from ..models import HistoryEntry
from ..state import AppState
from . import get_state

router = APIRouter(
    prefix="/api/v1/history",
    tags=["history"],
)


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=List[HistoryEntry],
    summary="List History",
    description="Completions and generated plan occurrences, oldest first. Read only.",
)
def list_history(state: AppState = Depends(get_state)) -> List[HistoryEntry]:
    return commands.history_list(state)
