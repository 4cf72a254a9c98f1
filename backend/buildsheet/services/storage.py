"""
Storage backends for persisted documents.

A backend is a flat key → text store with an optional hard capacity. Size is
accounted as UTF-8 bytes of key plus value, so a rewrite of an existing key
only costs the difference. A write that would take the store past capacity
raises ``StorageQuotaExceeded`` and leaves the previous value in place.
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy import Engine, func, select

from buildsheet.db import init_db, session_factory
from buildsheet.models.orm_models import StoredDocument

logger = logging.getLogger("buildsheet-store")


class StorageError(Exception):
    """Any failure to read or write the document store."""


class StorageQuotaExceeded(StorageError):
    def __init__(self, key: str, needed: int, capacity: int):
        self.key = key
        self.needed = needed
        self.capacity = capacity
        super().__init__(f"Writing {key!r} needs {needed} bytes, capacity is {capacity}")


def _entry_size(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


class StorageBackend:
    capacity_bytes: Optional[int] = None

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError

    def keys(self) -> List[str]:
        raise NotImplementedError

    def used_bytes(self) -> int:
        raise NotImplementedError

    def _check_quota(self, key: str, value: str, current_size: int) -> None:
        if not self.capacity_bytes:
            return
        needed = self.used_bytes() - current_size + _entry_size(key, value)
        if needed > self.capacity_bytes:
            raise StorageQuotaExceeded(key, needed, self.capacity_bytes)


class MemoryStorage(StorageBackend):
    """Dict-backed store. Used by tests and ephemeral runs."""

    def __init__(self, capacity_bytes: Optional[int] = None):
        self.capacity_bytes = capacity_bytes or None
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        current = self._data.get(key)
        self._check_quota(key, value, _entry_size(key, current) if current is not None else 0)
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data)

    def used_bytes(self) -> int:
        return sum(_entry_size(k, v) for k, v in self._data.items())


class SqlStorage(StorageBackend):
    """One row per key in the ``stored_documents`` table."""

    def __init__(self, engine: Engine, capacity_bytes: Optional[int] = None):
        self.capacity_bytes = capacity_bytes or None
        self.engine = engine
        self._Session = session_factory(engine)
        init_db(engine)

    def get(self, key: str) -> Optional[str]:
        try:
            with self._Session() as db:
                row = db.get(StoredDocument, key)
                return row.body if row else None
        except Exception as e:
            raise StorageError(f"Read of {key!r} failed: {e}") from e

    def set(self, key: str, value: str) -> None:
        size = _entry_size(key, value)
        try:
            with self._Session() as db:
                row = db.get(StoredDocument, key)
                current = row.byte_size if row else 0
                if self.capacity_bytes:
                    needed = self._used(db) - current + size
                    if needed > self.capacity_bytes:
                        raise StorageQuotaExceeded(key, needed, self.capacity_bytes)
                if row is None:
                    db.add(StoredDocument(key=key, body=value, byte_size=size))
                else:
                    row.body = value
                    row.byte_size = size
                db.commit()
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Write of {key!r} failed: {e}") from e

    def remove(self, key: str) -> None:
        try:
            with self._Session() as db:
                row = db.get(StoredDocument, key)
                if row is not None:
                    db.delete(row)
                    db.commit()
        except Exception as e:
            raise StorageError(f"Delete of {key!r} failed: {e}") from e

    def keys(self) -> List[str]:
        with self._Session() as db:
            return list(db.scalars(select(StoredDocument.key)))

    def used_bytes(self) -> int:
        with self._Session() as db:
            return self._used(db)

    @staticmethod
    def _used(db) -> int:
        total = db.scalar(select(func.coalesce(func.sum(StoredDocument.byte_size), 0)))
        return int(total or 0)
