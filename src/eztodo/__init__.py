"""
EzTodo data layer package.

Owns the todo and plan collections, the completion history, and the plan
refresh engine. `eztodo.commands` is the command surface; `eztodo.main`
serves the same commands over local HTTP.
"""

from .errors import NotFound, PersistenceError, StoreError, ValidationError
from .state import AppState

__all__ = ["AppState", "NotFound", "PersistenceError", "StoreError", "ValidationError"]
