from __future__ import annotations

from datetime import date, datetime
from typing import Any, ClassVar, Dict, FrozenSet, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import ScheduleError
from .models import Priority, Schedule
from .schedules import validate_schedule

# Shared type for incoming datetimes which can be a date, datetime, or ISO8601 string
DateTimeInput = Union[date, datetime, str]


def _parse_datetime(value: Optional[DateTimeInput]) -> Optional[datetime]:
    """
    Normalize a date/datetime input into a naive local datetime.
    - If value is a string, attempt to parse via datetime.fromisoformat; if time is missing, set to 00:00.
    - If value is a date (not datetime), convert to datetime at 00:00.
    - If value is a datetime, return as-is.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return value

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, 0, 0, 0)

    if isinstance(value, str):
        s = value.strip()
        try:
            return datetime.fromisoformat(s)
        except ValueError:
            try:
                d = date.fromisoformat(s)
                return datetime(d.year, d.month, d.day, 0, 0, 0)
            except ValueError as e:
                raise ValueError(
                    "Invalid datetime format. Use ISO8601 date or datetime string (e.g., '2025-01-31' or '2025-01-31T13:45:00')."
                ) from e

    raise ValueError("Invalid type; expected date, datetime, or ISO8601 string.")


def _clean_title(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    s = v.strip()
    if not (1 <= len(s) <= 200):
        raise ValueError("title length must be between 1 and 200 characters")
    return s


def _check_schedule(v: Optional[Schedule]) -> Optional[Schedule]:
    if v is None:
        return v
    try:
        validate_schedule(v)
    except ScheduleError as e:
        raise ValueError(str(e)) from e
    return v


class _Patch(BaseModel):
    """
    Base for partial updates. Only fields the caller actually sent are applied;
    an explicit null is honoured only for fields listed in NULLABLE.
    """

    model_config = ConfigDict(extra="forbid")

    NULLABLE: ClassVar[FrozenSet[str]] = frozenset()

    def changes(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if value is None and name not in self.NULLABLE:
                continue
            result[name] = value
        return result


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.
    """

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "completed": False,
                "important": True,
                "priority": "high",
                "category": "home",
                "due_date": "2025-02-01",
            }
        },
    )

    title: str = Field(..., description="Short title for the todo item", min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: bool = Field(default=False, description="Completion status flag")
    important: bool = Field(default=False, description="Starred flag")
    priority: Priority = Field(default=Priority.MEDIUM, description="low, medium or high")
    category: str = Field(default="", description="Free-form grouping label")
    due_date: Optional[datetime] = Field(
        default=None,
        description="Due date/time of the todo item. Accepts ISO8601 date or datetime; dates are set to 00:00",
    )
    origin_plan_id: Optional[str] = Field(default=None, description="Plan that generated this todo, if any")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """
        Strip whitespace and enforce 1..200 length.
        """
        if v is None:
            raise ValueError("title is required")
        return _clean_title(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DateTimeInput]) -> Optional[datetime]:
        return _parse_datetime(v)


# PUBLIC_INTERFACE
class TodoUpdate(_Patch):
    """
    Schema for updating an existing Todo item.
    All fields are optional; only provided fields will be updated.
    """

    NULLABLE: ClassVar[FrozenSet[str]] = frozenset({"description", "due_date"})

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "title": "Buy groceries and supplies",
                "completed": True,
                "due_date": None,
            }
        },
    )

    title: Optional[str] = Field(default=None, description="Short title for the todo item", min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: Optional[bool] = Field(default=None, description="Completion status flag")
    important: Optional[bool] = Field(default=None, description="Starred flag")
    priority: Optional[Priority] = Field(default=None, description="low, medium or high")
    category: Optional[str] = Field(default=None, description="Free-form grouping label")
    due_date: Optional[datetime] = Field(
        default=None,
        description="Due date/time of the todo item. Send null to clear it",
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        """
        If title is provided, strip whitespace and enforce 1..200 length.
        """
        return _clean_title(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DateTimeInput]) -> Optional[datetime]:
        return _parse_datetime(v)


# PUBLIC_INTERFACE
class PlanCreate(BaseModel):
    """
    Schema for creating a recurring Plan.

    `last_refreshed_at` may be given when importing a plan that was already
    materialized up to some point. `start_at` defaults to it, or to the creation
    time when neither is given. No occurrence after `end_at` is generated.
    """

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "title": "Water the plants",
                "schedule": {"kind": "weekly", "weekdays": [0, 3], "at": "08:00"},
                "category": "home",
                "repeat_count": None,
            }
        },
    )

    title: str = Field(..., description="Title copied onto generated todos", min_length=1, max_length=200)
    description: str = Field(default="", description="Description copied onto generated todos")
    schedule: Schedule = Field(..., description="Recurrence rule, tagged by 'kind'")
    start_at: Optional[datetime] = Field(default=None, description="No occurrence is due before this instant")
    end_at: Optional[datetime] = Field(default=None, description="No occurrence is due after this instant")
    last_refreshed_at: Optional[datetime] = Field(default=None, description="Latest occurrence already materialized")
    active: bool = Field(default=True, description="Inactive plans are skipped by refresh")
    important: bool = Field(default=False)
    category: str = Field(default="")
    repeat_count: Optional[int] = Field(default=None, ge=1, description="Total occurrences to generate; null = unlimited")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _clean_title(v)

    @field_validator("schedule")
    @classmethod
    def check_schedule(cls, v: Schedule) -> Schedule:
        return _check_schedule(v)

    @field_validator("start_at", "end_at", "last_refreshed_at", mode="before")
    @classmethod
    def parse_timestamps(cls, v: Optional[DateTimeInput]) -> Optional[datetime]:
        return _parse_datetime(v)


# PUBLIC_INTERFACE
class PlanUpdate(_Patch):
    """
    Schema for partially updating a Plan. `last_refreshed_at` can only move forward.
    """

    NULLABLE: ClassVar[FrozenSet[str]] = frozenset({"repeat_count", "end_at"})

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    schedule: Optional[Schedule] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    last_refreshed_at: Optional[datetime] = None
    active: Optional[bool] = None
    important: Optional[bool] = None
    category: Optional[str] = None
    repeat_count: Optional[int] = Field(default=None, ge=1)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        return _clean_title(v)

    @field_validator("schedule")
    @classmethod
    def check_schedule(cls, v: Optional[Schedule]) -> Optional[Schedule]:
        return _check_schedule(v)

    @field_validator("start_at", "end_at", "last_refreshed_at", mode="before")
    @classmethod
    def parse_timestamps(cls, v: Optional[DateTimeInput]) -> Optional[datetime]:
        return _parse_datetime(v)
