from __future__ import annotations

import uuid
from threading import Lock
from typing import Callable, Iterable, Optional, Set

IdFactory = Callable[[], str]


def new_id() -> str:
    return uuid.uuid4().hex


class IdAllocator:
    """
    Hands out ids from `factory`, regenerating any id already issued or
    loaded, so an id is never reused within one data directory.
    """

    def __init__(self, factory: Optional[IdFactory] = None, issued: Iterable[str] = ()) -> None:
        self._lock = Lock()
        self._factory = factory or new_id
        self._issued: Set[str] = set(issued)

    def __call__(self) -> str:
        with self._lock:
            i = self._factory()
            while i in self._issued:
                i = self._factory()
            self._issued.add(i)
            return i
