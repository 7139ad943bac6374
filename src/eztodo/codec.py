"""
Persistence codec - JSON files holding one record collection each.

Loading fails soft: a missing, unreadable or corrupt file yields an empty
collection (a corrupt file is first copied aside so it can be inspected).
Saving writes the whole collection to a temporary file in the same directory
and atomically replaces the target, so a crash never leaves a truncated file.
"""

from __future__ import annotations

import contextlib
import logging
import os
import shutil
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import List, Sequence, Type, TypeVar, Union

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import CorruptData, PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)
PathLike = Union[str, Path]


@lru_cache(maxsize=None)
def _adapter(model: Type[BaseModel]) -> TypeAdapter:
    return TypeAdapter(List[model])  # type: ignore[valid-type]


# PUBLIC_INTERFACE
def encode(records: Sequence[T], model: Type[T]) -> bytes:
    """Serialize records as a pretty-printed JSON array."""
    return _adapter(model).dump_json(list(records), indent=2)


# PUBLIC_INTERFACE
def decode(raw: Union[str, bytes], model: Type[T]) -> List[T]:
    """
    Parse a JSON array of records.

    Raises:
        CorruptData: the payload is not valid JSON or a record does not match `model`.
    """
    try:
        return _adapter(model).validate_json(raw)
    except PydanticValidationError as exc:
        raise CorruptData(f"{exc.error_count()} error(s) decoding {model.__name__} collection") from exc


# PUBLIC_INTERFACE
def load(path: PathLike, model: Type[T]) -> List[T]:
    """Return the collection stored at `path`, or an empty list if it is missing or corrupt."""
    path = Path(path)
    if not path.exists():
        logger.info("No %s file at %s, starting empty", model.__name__, path)
        return []

    try:
        raw = path.read_bytes()
    except OSError as exc:
        logger.warning("Could not read %s, starting empty: %s", path, exc)
        return []

    try:
        records = decode(raw, model)
    except CorruptData as exc:
        logger.warning("Corrupt data in %s, starting empty: %s", path, exc)
        _set_aside(path)
        return []

    logger.debug("Loaded %d %s record(s) from %s", len(records), model.__name__, path)
    return records


# PUBLIC_INTERFACE
def save(path: PathLike, records: Sequence[T], model: Type[T]) -> None:
    """
    Atomically replace the file at `path` with the full collection.

    Raises:
        PersistenceError: the directory or file could not be written.
    """
    path = Path(path)
    tmp = path.with_name(path.name + ".tmp")
    try:
        payload = encode(records, model)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp, "wb") as fh:
            fh.write(payload)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp, path)
    except OSError as exc:
        logger.error("Failed to persist %d record(s) to %s: %s", len(records), path, exc)
        with contextlib.suppress(OSError):
            tmp.unlink()
        raise PersistenceError(path, exc) from exc


def _set_aside(path: Path) -> None:
    target = path.with_name(f"{path.name}.corrupt-{datetime.now():%Y%m%d%H%M%S}")
    try:
        shutil.copy2(path, target)
    except OSError as exc:
        logger.warning("Could not keep a copy of corrupt file %s: %s", path, exc)
        return
    logger.warning("Kept a copy of the corrupt file at %s", target)
