from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel

from . import codec
from .errors import NotFound, PersistenceError, ValidationError
from .history import HistoryLedger
from .ids import IdAllocator, IdFactory
from .models import HistoryEvent, Plan, SubjectKind, Todo
from .schemas import PlanCreate, TodoCreate, TodoUpdate

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)
Clock = Callable[[], datetime]


@dataclass(frozen=True)
class ListQuery:
    """
    Filters for listing records. Results keep stored (insertion) order.
    """
    limit: Optional[int] = None
    offset: int = 0
    completed: Optional[bool] = None
    search: Optional[str] = None
    origin_plan_id: Optional[str] = None
    category: Optional[str] = None
    important: Optional[bool] = None

    def matches(self, record: BaseModel) -> bool:
        if self.completed is not None and getattr(record, "completed", None) != self.completed:
            return False
        if self.origin_plan_id is not None and getattr(record, "origin_plan_id", None) != self.origin_plan_id:
            return False
        if self.category is not None and getattr(record, "category", None) != self.category:
            return False
        if self.important is not None and getattr(record, "important", None) != self.important:
            return False
        if self.search:
            s = self.search.lower()
            title = (getattr(record, "title", None) or "").lower()
            description = (getattr(record, "description", None) or "").lower()
            return s in title or s in description
        return True


# PUBLIC_INTERFACE
class RecordStore(ABC, Generic[T]):
    """
    Thread-safe, file-backed ordered collection of records.

    Every operation, reads included, runs under one re-entrant lock, and the
    collection is flushed to disk before the lock is released. A new
    collection only replaces the in-memory one after a successful flush, so a
    PersistenceError leaves memory and disk agreeing on the previous state.
    """

    kind: str = "Record"
    model: Type[T]

    def __init__(
        self,
        path: Union[str, Path],
        clock: Optional[Clock] = None,
        id_factory: Optional[IdFactory] = None,
    ) -> None:
        self._lock = RLock()
        self._path = Path(path)
        self._clock = clock or datetime.now
        self._items: List[T] = codec.load(self._path, self.model)
        self._allocate_id = IdAllocator(id_factory, (r.id for r in self._items))  # type: ignore[attr-defined]

    @property
    def path(self) -> Path:
        return self._path

    def _now(self) -> datetime:
        return self._clock()

    def _index(self, record_id: str) -> int:
        for i, record in enumerate(self._items):
            if record.id == record_id:  # type: ignore[attr-defined]
                return i
        raise NotFound(self.kind, record_id)

    def _commit(self, items: List[T]) -> None:
        codec.save(self._path, items, self.model)
        self._items = items

    @contextmanager
    def exclusive(self) -> Iterator["RecordStore[T]"]:
        """Hold the store lock across several operations."""
        with self._lock:
            yield self

    @abstractmethod
    def _build(self, record_id: str, data: Any, now: datetime) -> T:
        """Turn validated create input into a new record."""

    def _apply(self, current: T, changes: Dict[str, Any], now: datetime) -> T:
        """Return `current` with `changes` applied and updated_at bumped."""
        return current.model_copy(update={**changes, "updated_at": now}, deep=True)

    def create(self, data: Any) -> T:
        with self._lock:
            record = self._build(self._allocate_id(), data, self._now())
            self._commit([*self._items, record])
            logger.info("Created %s %s", self.kind, record.id)  # type: ignore[attr-defined]
            return record.model_copy(deep=True)

    def list(self, query: Optional[ListQuery] = None) -> List[T]:
        q = query or ListQuery()
        with self._lock:
            items = [r for r in self._items if q.matches(r)]
            start = max(q.offset, 0)
            end = None if q.limit is None else start + max(q.limit, 0)
            return [r.model_copy(deep=True) for r in items[start:end]]

    def count(self, query: Optional[ListQuery] = None) -> int:
        q = query or ListQuery()
        with self._lock:
            return sum(1 for r in self._items if q.matches(r))

    def get(self, record_id: str) -> T:
        with self._lock:
            return self._items[self._index(record_id)].model_copy(deep=True)

    def update(self, record_id: str, data: Any) -> T:
        with self._lock:
            idx = self._index(record_id)
            updated = self._apply(self._items[idx], data.changes(), self._now())
            items = list(self._items)
            items[idx] = updated
            self._commit(items)
            logger.info("Updated %s %s", self.kind, record_id)
            return updated.model_copy(deep=True)

    def delete(self, record_id: str) -> None:
        with self._lock:
            idx = self._index(record_id)
            self._commit(self._items[:idx] + self._items[idx + 1:])
            logger.info("Deleted %s %s", self.kind, record_id)


# PUBLIC_INTERFACE
class TodoStore(RecordStore[Todo]):
    """
    Todo collection. Completing a todo and recording the completion in the
    history ledger happen as one operation: if the ledger cannot be written
    the todo change is rolled back.
    """

    kind = "Todo"
    model = Todo

    def __init__(
        self,
        path: Union[str, Path],
        history: Optional[HistoryLedger] = None,
        clock: Optional[Clock] = None,
        id_factory: Optional[IdFactory] = None,
    ) -> None:
        super().__init__(path, clock=clock, id_factory=id_factory)
        self._history = history

    def _build(self, record_id: str, data: TodoCreate, now: datetime) -> Todo:
        return Todo(
            id=record_id,
            title=data.title,
            description=data.description,
            completed=data.completed,
            important=data.important,
            priority=data.priority,
            category=data.category,
            due_date=data.due_date,
            completed_at=now if data.completed else None,
            origin_plan_id=data.origin_plan_id,
            created_at=now,
            updated_at=now,
        )

    def _apply(self, current: Todo, changes: Dict[str, Any], now: datetime) -> Todo:
        if "completed" in changes and changes["completed"] != current.completed:
            changes = {**changes, "completed_at": now if changes["completed"] else None}
        return super()._apply(current, changes, now)

    def create(self, data: TodoCreate) -> Todo:
        with self._lock:
            before = self._items
            todo = super().create(data)
            if todo.completed:
                self._record_completion(todo, before)
            return todo

    def update(self, todo_id: str, data: TodoUpdate) -> Todo:
        with self._lock:
            before = self._items
            was_completed = before[self._index(todo_id)].completed
            todo = super().update(todo_id, data)
            if todo.completed and not was_completed:
                self._record_completion(todo, before)
            return todo

    def create_generated(self, plan: Plan, occurrence: datetime) -> Todo:
        """Create the todo for one occurrence of `plan`, due at the occurrence."""
        # Stored plans were validated on input; a hand-edited file is taken as is.
        return self.create(
            TodoCreate.model_construct(
                title=plan.title,
                description=plan.description or None,
                important=plan.important,
                category=plan.category,
                due_date=occurrence,
                origin_plan_id=plan.id,
            )
        )

    def _record_completion(self, todo: Todo, rollback_to: List[Todo]) -> None:
        if self._history is None:
            return
        try:
            self._history.append(
                SubjectKind.TODO,
                todo.id,
                HistoryEvent.COMPLETED,
                title=todo.title,
                occurred_at=todo.completed_at,
            )
        except PersistenceError:
            logger.error("Rolling back completion of Todo %s, history could not be saved", todo.id)
            try:
                self._commit(rollback_to)
            except PersistenceError:
                logger.error("Rollback of Todo %s failed; the completion stays without a history entry", todo.id)
            raise


# PUBLIC_INTERFACE
class PlanStore(RecordStore[Plan]):
    """Plan collection. `last_refreshed_at` never moves backwards."""

    kind = "Plan"
    model = Plan

    def _build(self, record_id: str, data: PlanCreate, now: datetime) -> Plan:
        return Plan(
            id=record_id,
            title=data.title,
            description=data.description,
            schedule=data.schedule,
            start_at=data.start_at or data.last_refreshed_at or now,
            end_at=data.end_at,
            last_refreshed_at=data.last_refreshed_at,
            active=data.active,
            important=data.important,
            category=data.category,
            repeat_count=data.repeat_count,
            generated_count=0,
            created_at=now,
            updated_at=now,
        )

    def _apply(self, current: Plan, changes: Dict[str, Any], now: datetime) -> Plan:
        new_mark = changes.get("last_refreshed_at")
        if new_mark is not None and current.last_refreshed_at is not None and new_mark < current.last_refreshed_at:
            raise ValidationError(
                "last_refreshed_at cannot move backwards",
                errors=[{
                    "loc": ["last_refreshed_at"],
                    "msg": f"must not be earlier than {current.last_refreshed_at.isoformat()}",
                    "type": "value_error",
                }],
            )
        return super()._apply(current, changes, now)

    def mark_refreshed(self, plan_id: str, last_occurrence: datetime, generated: int) -> Plan:
        """Advance a plan past `generated` materialized occurrences, the latest being `last_occurrence`."""
        with self._lock:
            idx = self._index(plan_id)
            current = self._items[idx]
            mark = last_occurrence
            if current.last_refreshed_at is not None and current.last_refreshed_at > mark:
                mark = current.last_refreshed_at
            updated = current.model_copy(
                update={
                    "last_refreshed_at": mark,
                    "generated_count": current.generated_count + generated,
                    "updated_at": self._now(),
                },
                deep=True,
            )
            items = list(self._items)
            items[idx] = updated
            self._commit(items)
            return updated.model_copy(deep=True)
