from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Union

from .history import HistoryLedger
from .refresh import PlanRefreshEngine
from .ids import IdFactory
from .repositories import PlanStore, TodoStore
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
@dataclass
class AppState:
    """
    Process-wide data layer state: the two record stores, the history ledger
    and the refresh engine wired to them. Built once at startup and passed to
    command handlers explicitly.
    """

    settings: Settings
    todos: TodoStore
    plans: PlanStore
    history: HistoryLedger
    refresher: PlanRefreshEngine

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[IdFactory] = None,
    ) -> "AppState":
        """Load every collection from the configured data directory."""
        settings = settings or get_settings()
        settings.data_dir.mkdir(parents=True, exist_ok=True)

        history = HistoryLedger(settings.history_path, clock=clock, id_factory=id_factory)
        todos = TodoStore(settings.todos_path, history=history, clock=clock, id_factory=id_factory)
        plans = PlanStore(settings.plans_path, clock=clock, id_factory=id_factory)
        refresher = PlanRefreshEngine(
            plans,
            todos,
            history,
            max_occurrences_per_plan=settings.max_occurrences_per_plan,
            clock=clock,
        )
        logger.info(
            "Data layer ready in %s: %d todo(s), %d plan(s), %d history entr(ies)",
            settings.data_dir,
            todos.count(),
            plans.count(),
            len(history),
        )
        return cls(settings=settings, todos=todos, plans=plans, history=history, refresher=refresher)

    @classmethod
    def open(cls, data_dir: Union[str, Path], **kwargs) -> "AppState":
        """Like from_settings, with the environment's settings pointed at `data_dir`."""
        settings = dataclasses.replace(get_settings(), data_dir=Path(data_dir))
        return cls.from_settings(settings, **kwargs)
