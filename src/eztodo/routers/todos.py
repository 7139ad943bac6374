from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from .. import commands
from ..models import Todo
from ..repositories import ListQuery
from ..schemas import TodoCreate, TodoUpdate
from ..state import AppState
from . import Page, get_state

router = APIRouter(
    prefix="/api/v1/todos",
    tags=["todos"],
)


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=Todo,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo item and return the created resource.",
    responses={
        201: {"description": "Todo created successfully"},
        422: {"description": "Validation error"},
    },
)
def create_todo(payload: TodoCreate, state: AppState = Depends(get_state)) -> Todo:
    """
    Create a new Todo.
    """
    return commands.todo_create(state, payload)


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=Page[Todo],
    summary="List Todos",
    description=(
        "List todos in stored (creation) order with optional filters and pagination.\n\n"
        "Query parameters:\n"
        "- limit: max number of items to return (0..1000)\n"
        "- offset: number of items to skip (>=0)\n"
        "- completed: filter by completion status\n"
        "- q: search query for title/description (substring match)\n"
        "- plan_id: only todos generated by this plan\n"
    ),
)
def list_todos(
    limit: int = Query(50, ge=0, le=1000, description="Maximum number of items to return"),
    offset: int = Query(0, ge=0, description="Number of items to skip"),
    completed: Optional[bool] = Query(None, description="Filter by completion status"),
    q: Optional[str] = Query(None, description="Search text for title/description"),
    plan_id: Optional[str] = Query(None, description="Filter by originating plan id"),
    state: AppState = Depends(get_state),
) -> Page[Todo]:
    """
    List todos with pagination and filters.
    """
    query = ListQuery(
        limit=limit,
        offset=offset,
        completed=completed,
        search=q.strip() if q else None,
        origin_plan_id=plan_id,
    )
    items = commands.todo_list(state, query)
    total = state.todos.count(query)
    return Page[Todo](items=items, total=total, limit=limit, offset=offset)


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}",
    response_model=Todo,
    summary="Get Todo",
    responses={404: {"description": "Todo not found"}},
)
def get_todo(todo_id: str, state: AppState = Depends(get_state)) -> Todo:
    return commands.todo_get(state, todo_id)


# PUBLIC_INTERFACE
@router.patch(
    "/{todo_id}",
    response_model=Todo,
    summary="Update Todo",
    description="Partially update fields of a Todo item. Completing it records a history entry.",
    responses={
        404: {"description": "Todo not found"},
        422: {"description": "Validation error"},
    },
)
def patch_todo(todo_id: str, payload: TodoUpdate, state: AppState = Depends(get_state)) -> Todo:
    """
    Partial update of a Todo item.
    """
    return commands.todo_update(state, todo_id, payload)


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Todo",
    responses={
        204: {"description": "Todo deleted"},
        404: {"description": "Todo not found"},
    },
)
def delete_todo(todo_id: str, state: AppState = Depends(get_state)) -> None:
    """
    Delete a Todo. History entries that reference it are kept.
    """
    commands.todo_delete(state, todo_id)
