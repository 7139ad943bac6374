"""
Command surface - one entry point per operation the UI shell can invoke.

Each command takes the AppState first. Inputs may be plain dicts (as sent by
the UI) or schema instances; dicts are validated here so that bad input is
reported as a ValidationError before any store is touched.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .models import HistoryEntry, Plan, Todo
from .refresh import RefreshReport
from .repositories import ListQuery
from .schemas import PlanCreate, PlanUpdate, TodoCreate, TodoUpdate
from .state import AppState

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=BaseModel)
Payload = Union[BaseModel, Dict[str, Any]]


def _validate(schema: Type[S], payload: Optional[Payload]) -> S:
    if isinstance(payload, schema):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_unset=True)
    try:
        return schema.model_validate(payload if payload is not None else {})
    except PydanticValidationError as exc:
        raise ValidationError(
            f"invalid {schema.__name__}",
            errors=exc.errors(include_url=False, include_context=False, include_input=False),
        ) from exc


# PUBLIC_INTERFACE
def todo_create(state: AppState, payload: Payload) -> Todo:
    """Create a todo from `payload` (title required)."""
    logger.debug("todo_create")
    return state.todos.create(_validate(TodoCreate, payload))


# PUBLIC_INTERFACE
def todo_list(state: AppState, query: Optional[ListQuery] = None) -> List[Todo]:
    logger.debug("todo_list %s", query)
    return state.todos.list(query)


# PUBLIC_INTERFACE
def todo_get(state: AppState, todo_id: str) -> Todo:
    logger.debug("todo_get %s", todo_id)
    return state.todos.get(todo_id)


# PUBLIC_INTERFACE
def todo_update(state: AppState, todo_id: str, patch: Optional[Payload] = None) -> Todo:
    """Apply only the fields present in `patch`; completing a todo records it in history."""
    logger.debug("todo_update %s", todo_id)
    return state.todos.update(todo_id, _validate(TodoUpdate, patch))


# PUBLIC_INTERFACE
def todo_delete(state: AppState, todo_id: str) -> None:
    logger.debug("todo_delete %s", todo_id)
    state.todos.delete(todo_id)


# PUBLIC_INTERFACE
def plan_create(state: AppState, payload: Payload) -> Plan:
    logger.debug("plan_create")
    return state.plans.create(_validate(PlanCreate, payload))


# PUBLIC_INTERFACE
def plan_list(state: AppState, query: Optional[ListQuery] = None) -> List[Plan]:
    logger.debug("plan_list %s", query)
    return state.plans.list(query)


# PUBLIC_INTERFACE
def plan_get(state: AppState, plan_id: str) -> Plan:
    logger.debug("plan_get %s", plan_id)
    return state.plans.get(plan_id)


# PUBLIC_INTERFACE
def plan_update(state: AppState, plan_id: str, patch: Optional[Payload] = None) -> Plan:
    logger.debug("plan_update %s", plan_id)
    return state.plans.update(plan_id, _validate(PlanUpdate, patch))


# PUBLIC_INTERFACE
def plan_delete(state: AppState, plan_id: str) -> None:
    """Delete a plan. Todos it generated keep their origin_plan_id."""
    logger.debug("plan_delete %s", plan_id)
    state.plans.delete(plan_id)


# PUBLIC_INTERFACE
def plan_refresh_report(state: AppState, now: Optional[datetime] = None) -> RefreshReport:
    """Materialize due plan occurrences and return the full report."""
    logger.debug("plan_refresh now=%s", now)
    return state.refresher.refresh(now)


# PUBLIC_INTERFACE
def plan_refresh(state: AppState, now: Optional[datetime] = None) -> int:
    """Materialize due plan occurrences; returns the number of todos generated."""
    return plan_refresh_report(state, now).count


# PUBLIC_INTERFACE
def history_list(state: AppState) -> List[HistoryEntry]:
    logger.debug("history_list")
    return state.history.list()
