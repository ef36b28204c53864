"""Persistence collaborators for the event store.

Every backend offers the same four calls, each all-or-nothing:

    load()      -> list of interchange dicts, or None when nothing is stored
    save(rows)  -> replace the stored collection
    erase()     -> remove the stored collection and remember that it was erased
    is_erased() -> True between an erase() and the next save()

Read and write failures surface as PersistenceError.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Protocol

from sqlalchemy import create_engine, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from campus_events.core.errors import PersistenceError
from campus_events.models.models_storage import Base, CatalogState, EventRow
from campus_events.utils.config import CONFIG
from campus_events.utils.persistance import read_json, remove_json, save_json

logger = logging.getLogger(__name__)


class Persistence(Protocol):
    def load(self) -> Optional[List[Any]]: ...

    def save(self, rows: List[dict]) -> None: ...

    def erase(self) -> None: ...

    def is_erased(self) -> bool: ...


class MemoryPersistence:
    """Keeps the collection in process memory (tests, embedding)."""

    def __init__(self, rows: Optional[List[Any]] = None):
        self._rows = copy.deepcopy(rows)
        self._erased = False
        self.save_count = 0

    def load(self) -> Optional[List[Any]]:
        return copy.deepcopy(self._rows)

    def save(self, rows: List[dict]) -> None:
        self._rows = copy.deepcopy(rows)
        self._erased = False
        self.save_count += 1

    def erase(self) -> None:
        self._rows = None
        self._erased = True

    def is_erased(self) -> bool:
        return self._erased


class JsonFilePersistence:
    """The collection as one JSON array file; erasure leaves a `.cleared` marker."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    @property
    def marker_path(self) -> Path:
        return self.path.with_suffix(self.path.suffix + ".cleared")

    def load(self) -> Optional[List[Any]]:
        if not self.path.exists():
            return None
        try:
            data = read_json(self.path)
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"Could not read {self.path}: {exc}") from exc
        # None is reserved for "nothing stored"
        if data is None:
            raise PersistenceError(f"{self.path} holds null instead of an event list")
        return data

    def save(self, rows: List[dict]) -> None:
        try:
            save_json(self.path, rows)
            self.marker_path.unlink(missing_ok=True)
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Could not write {self.path}: {exc}") from exc

    def erase(self) -> None:
        try:
            self.marker_path.parent.mkdir(parents=True, exist_ok=True)
            self.marker_path.touch()
            remove_json(self.path)
        except OSError as exc:
            raise PersistenceError(f"Could not erase {self.path}: {exc}") from exc

    def is_erased(self) -> bool:
        return self.marker_path.exists() and not self.path.exists()


class SqlPersistence:
    """The collection as ordered rows in a SQL database (sqlite by default)."""

    ERASED_KEY = "erased"

    def __init__(self, database_url: str):
        connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
        try:
            self.engine = create_engine(database_url, connect_args=connect_args)
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not open database {database_url}: {exc}") from exc
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)

    def load(self) -> Optional[List[Any]]:
        try:
            with self.SessionLocal() as s:
                rows = s.query(EventRow).order_by(EventRow.position).all()
                if not rows:
                    return None
                return [json.loads(r.payload) for r in rows]
        except (SQLAlchemyError, ValueError) as exc:
            raise PersistenceError(f"Could not read events table: {exc}") from exc

    def save(self, rows: List[dict]) -> None:
        try:
            with self.SessionLocal() as s, s.begin():
                s.execute(delete(EventRow))
                s.execute(delete(CatalogState).where(CatalogState.key == self.ERASED_KEY))
                for pos, row in enumerate(rows):
                    s.add(EventRow(
                        position=pos,
                        event_id=str(row.get("id")),
                        payload=json.dumps(row, ensure_ascii=False),
                    ))
        except (SQLAlchemyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Could not write events table: {exc}") from exc

    def erase(self) -> None:
        try:
            with self.SessionLocal() as s, s.begin():
                s.execute(delete(EventRow))
                s.merge(CatalogState(key=self.ERASED_KEY, value="1"))
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not erase events table: {exc}") from exc

    def is_erased(self) -> bool:
        try:
            with self.SessionLocal() as s:
                return s.get(CatalogState, self.ERASED_KEY) is not None
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not read catalog state: {exc}") from exc


def backend_from_config(storage: Optional[dict] = None) -> Persistence:
    storage = storage or CONFIG["storage"]
    kind = (storage.get("backend") or "json").lower()
    if kind == "json":
        logger.debug("Using JSON file backend at %s", storage["json_path"])
        return JsonFilePersistence(storage["json_path"])
    if kind == "sql":
        logger.debug("Using SQL backend at %s", storage["database_url"])
        return SqlPersistence(storage["database_url"])
    if kind == "memory":
        return MemoryPersistence()
    raise ValueError(f"Unknown storage backend: {kind!r}")


__all__ = [
    "Persistence",
    "MemoryPersistence",
    "JsonFilePersistence",
    "SqlPersistence",
    "backend_from_config",
]
