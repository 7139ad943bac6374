from __future__ import annotations

from datetime import datetime, time
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SubjectKind(str, Enum):
    TODO = "todo"
    PLAN = "plan"


class HistoryEvent(str, Enum):
    COMPLETED = "completed"
    GENERATED = "generated"


class DailySchedule(BaseModel):
    """Due every day at `at`."""

    kind: Literal["daily"] = "daily"
    at: time = Field(default=time(0, 0), description="Time of day the occurrence is due")


class WeeklySchedule(BaseModel):
    """Due on each listed weekday (0 = Monday ... 6 = Sunday) at `at`."""

    kind: Literal["weekly"] = "weekly"
    weekdays: List[int] = Field(default_factory=list, description="Weekdays, 0 = Monday")
    at: time = Field(default=time(0, 0))


class MonthlySchedule(BaseModel):
    """Due on each listed day of the month at `at`; days a month lacks are skipped."""

    kind: Literal["monthly"] = "monthly"
    days: List[int] = Field(default_factory=list, description="Days of month, 1..31")
    at: time = Field(default=time(0, 0))


class IntervalSchedule(BaseModel):
    """Due at start_at + k * every_seconds for k >= 0."""

    kind: Literal["interval"] = "interval"
    every_seconds: int = Field(..., description="Length of one interval in seconds")


Schedule = Annotated[
    Union[DailySchedule, WeeklySchedule, MonthlySchedule, IntervalSchedule],
    Field(discriminator="kind"),
]


# PUBLIC_INTERFACE
class Todo(BaseModel):
    """
    A one-off task as stored in todos.json.

    Fields:
    - id: Opaque unique identifier assigned by the store
    - title: Short title (validated on input via schemas)
    - description: Optional detailed description
    - completed: Completion flag
    - important: Starred flag
    - priority: low / medium / high
    - category: Free-form grouping label
    - due_date: Optional due datetime
    - completed_at: When the todo was last completed, cleared when reopened
    - origin_plan_id: Weak reference to the plan that generated this todo
    - created_at / updated_at: Local timestamps; updated_at moves on every mutation
    """

    id: str
    title: str
    description: Optional[str] = None
    completed: bool = False
    important: bool = False
    priority: Priority = Priority.MEDIUM
    category: str = ""
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    origin_plan_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# PUBLIC_INTERFACE
class Plan(BaseModel):
    """
    A recurring plan that materializes todos on refresh.

    `last_refreshed_at` is the timestamp of the latest occurrence already turned
    into a todo; it only ever moves forward. Stored plans are not re-validated
    beyond their types, so a malformed schedule on disk still loads and is
    reported by the refresh engine instead.
    """

    id: str
    title: str
    description: str = ""
    schedule: Schedule
    start_at: datetime
    end_at: Optional[datetime] = None
    last_refreshed_at: Optional[datetime] = None
    active: bool = True
    important: bool = False
    category: str = ""
    repeat_count: Optional[int] = None
    generated_count: int = 0
    created_at: datetime
    updated_at: datetime


# PUBLIC_INTERFACE
class HistoryEntry(BaseModel):
    """An append-only ledger record. `subject_id` may outlive the subject."""

    id: str
    subject_kind: SubjectKind
    subject_id: str
    event: HistoryEvent
    title: str = ""
    occurred_at: datetime
