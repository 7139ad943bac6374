"""
Plan refresh - turns due occurrences of recurring plans into todos.

Refresh is explicit: the UI shell decides when to call it (app start, window
focus, ...). Each plan keeps `last_refreshed_at`, the latest occurrence already
materialized, and only occurrences after it are considered, which makes
repeated refreshes at the same instant generate nothing new.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional

from . import schedules
from .errors import PersistenceError, ScheduleError, StoreError
from .history import HistoryLedger
from .models import HistoryEvent, Plan, SubjectKind, Todo
from .repositories import PlanStore, TodoStore

logger = logging.getLogger(__name__)


@dataclass
class RefreshReport:
    """Outcome of one refresh pass."""
    generated: List[Todo] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)  # plan id -> reason it was skipped

    @property
    def count(self) -> int:
        return len(self.generated)


# PUBLIC_INTERFACE
class PlanRefreshEngine:
    """
    Materializes due plan occurrences.

    The whole pass runs while holding the plan store lock; todos and history
    are written through their own stores (lock order plans -> todos -> history).
    """

    def __init__(
        self,
        plans: PlanStore,
        todos: TodoStore,
        history: HistoryLedger,
        max_occurrences_per_plan: int = 366,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._plans = plans
        self._todos = todos
        self._history = history
        self._max_occurrences = max(1, max_occurrences_per_plan)
        self._clock = clock or datetime.now

    def refresh(self, now: Optional[datetime] = None) -> RefreshReport:
        now = now or self._clock()
        report = RefreshReport()
        with self._plans.exclusive():
            for plan in self._plans.list():
                if not plan.active:
                    continue
                limit = self._budget(plan)
                if limit == 0:
                    continue
                until = now if plan.end_at is None else min(now, plan.end_at)
                try:
                    due = schedules.occurrences(plan.schedule, plan.start_at, plan.last_refreshed_at, until, limit)
                except ScheduleError as exc:
                    logger.error("Skipping plan %s (%s): %s", plan.id, plan.title, exc)
                    report.errors[plan.id] = str(exc)
                    continue
                if due:
                    self._materialize(plan, due, report)
        if report.count:
            logger.info("Refresh generated %d todo(s)", report.count)
        return report

    def _budget(self, plan: Plan) -> int:
        if plan.repeat_count is None:
            return self._max_occurrences
        return min(self._max_occurrences, max(plan.repeat_count - plan.generated_count, 0))

    def _materialize(self, plan: Plan, due: List[datetime], report: RefreshReport) -> None:
        processed: List[datetime] = []
        try:
            for occurrence in due:
                todo = self._todos.create_generated(plan, occurrence)
                try:
                    self._history.append(
                        SubjectKind.PLAN,
                        plan.id,
                        HistoryEvent.GENERATED,
                        title=plan.title,
                        occurred_at=occurrence,
                    )
                except PersistenceError:
                    if not self._discard(todo):
                        processed.append(occurrence)
                    raise
                processed.append(occurrence)
                report.generated.append(todo)
        except StoreError:
            # Occurrences that already produced a todo must not be generated again.
            if processed:
                try:
                    self._plans.mark_refreshed(plan.id, processed[-1], len(processed))
                except PersistenceError as exc:
                    logger.error(
                        "Plan %s: %d generated todo(s) not recorded, they will be generated again: %s",
                        plan.id, len(processed), exc,
                    )
            raise
        self._plans.mark_refreshed(plan.id, processed[-1], len(processed))

    def _discard(self, todo: Todo) -> bool:
        """Remove a generated todo whose history entry could not be written."""
        try:
            self._todos.delete(todo.id)
        except PersistenceError:
            logger.error("Generated Todo %s kept without a history entry", todo.id)
            return False
        return True
