from __future__ import annotations

from typing import Dict, List

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from .. import commands
from ..models import Plan, Todo
from ..schemas import PlanCreate, PlanUpdate
from ..state import AppState
from . import get_state

router = APIRouter(
    prefix="/api/v1/plans",
    tags=["plans"],
)


class RefreshOut(BaseModel):
    """
    Result of a refresh pass.
    """
    generated: int = Field(..., description="Number of todos generated")
    todos: List[Todo] = Field(default_factory=list, description="The generated todos, oldest occurrence first")
    errors: Dict[str, str] = Field(default_factory=dict, description="Skipped plan id -> reason")


# PUBLIC_INTERFACE
@router.post(
    "/refresh",
    response_model=RefreshOut,
    summary="Refresh Plans",
    description="Generate todos for every plan occurrence due up to now.",
)
def refresh_plans(state: AppState = Depends(get_state)) -> RefreshOut:
    report = commands.plan_refresh_report(state)
    return RefreshOut(generated=report.count, todos=report.generated, errors=report.errors)


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=Plan,
    status_code=status.HTTP_201_CREATED,
    summary="Create Plan",
    responses={422: {"description": "Validation error"}},
)
def create_plan(payload: PlanCreate, state: AppState = Depends(get_state)) -> Plan:
    return commands.plan_create(state, payload)


# PUBLIC_INTERFACE
@router.get("/", response_model=List[Plan], summary="List Plans")
def list_plans(state: AppState = Depends(get_state)) -> List[Plan]:
    return commands.plan_list(state)


# PUBLIC_INTERFACE
@router.get(
    "/{plan_id}",
    response_model=Plan,
    summary="Get Plan",
    responses={404: {"description": "Plan not found"}},
)
def get_plan(plan_id: str, state: AppState = Depends(get_state)) -> Plan:
    return commands.plan_get(state, plan_id)


# PUBLIC_INTERFACE
@router.patch(
    "/{plan_id}",
    response_model=Plan,
    summary="Update Plan",
    responses={
        404: {"description": "Plan not found"},
        422: {"description": "Validation error"},
    },
)
def patch_plan(plan_id: str, payload: PlanUpdate, state: AppState = Depends(get_state)) -> Plan:
    return commands.plan_update(state, plan_id, payload)


# PUBLIC_INTERFACE
@router.delete(
    "/{plan_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Plan",
    responses={404: {"description": "Plan not found"}},
)
def delete_plan(plan_id: str, state: AppState = Depends(get_state)) -> None:
    """
    Delete a Plan. Todos it generated are kept.
    """
    commands.plan_delete(state, plan_id)
