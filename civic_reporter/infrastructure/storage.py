"""
Key-value storage backends for the civic reporter.

SqlKeyValueStore persists to any SQLAlchemy database (SQLite by default),
one row per key. InMemoryKeyValueStore keeps a plain dict and is meant for
tests and throwaway sessions.
"""
import logging
import threading
from typing import Dict, Iterable, Mapping, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..domain.exceptions import StorageError
from ..domain.services.interfaces import IKeyValueStore
from .database import build_engine, build_session_factory, init_db
from .models import KeyValueEntry

logger = logging.getLogger(__name__)

__all__ = ["SqlKeyValueStore", "InMemoryKeyValueStore", "StorageError"]


class SqlKeyValueStore(IKeyValueStore):
    """
    Key-value store on top of a single SQL table.

    Multi-key writes and removals run in one transaction, so a register or
    logout either lands completely or not at all.
    """

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine or build_engine()
        try:
            init_db(self.engine)
        except SQLAlchemyError as e:
            logger.error(f"Failed to initialize key-value table: {e}")
            raise StorageError("init", str(e))
        self._session_factory = build_session_factory(self.engine)

    def get(self, key: str) -> Optional[str]:
        try:
            with self._session_factory() as db:
                entry = db.get(KeyValueEntry, key)
                return entry.value if entry is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Read of '{key}' failed: {e}")
            raise StorageError("get", str(e))

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def set_many(self, items: Mapping[str, str]) -> None:
        try:
            with self._session_factory.begin() as db:
                for key, value in items.items():
                    db.merge(KeyValueEntry(key=key, value=value))
        except SQLAlchemyError as e:
            logger.error(f"Write of {sorted(items)} failed: {e}")
            raise StorageError("set", str(e))

    def remove(self, key: str) -> None:
        self.remove_many([key])

    def remove_many(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        if not keys:
            return
        try:
            with self._session_factory.begin() as db:
                db.query(KeyValueEntry).filter(
                    KeyValueEntry.key.in_(keys)
                ).delete(synchronize_session=False)
        except SQLAlchemyError as e:
            logger.error(f"Removal of {keys} failed: {e}")
            raise StorageError("remove", str(e))


class InMemoryKeyValueStore(IKeyValueStore):
    """Process-local store. Nothing survives a restart."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def set_many(self, items: Mapping[str, str]) -> None:
        with self._lock:
            self._data.update(items)

    def remove(self, key: str) -> None:
        self.remove_many([key])

    def remove_many(self, keys: Iterable[str]) -> None:
        with self._lock:
            for key in keys:
                self._data.pop(key, None)

    def keys(self):
        with self._lock:
            return sorted(self._data)

