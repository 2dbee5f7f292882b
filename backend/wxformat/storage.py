from __future__ import annotations

from datetime import datetime
from typing import Callable, Protocol

from sqlalchemy.orm import Session

from wxformat.models import LocalStorageEntry


class LocalStorage(Protocol):
    """Browser-style key/value storage holding string values."""

    def get_item(self, key: str) -> str | None:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class SqlLocalStorage:
    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get_item(self, key: str) -> str | None:
        db = self.session_factory()
        try:
            row = db.get(LocalStorageEntry, key)
            return row.value if row else None
        finally:
            db.close()

    def set_item(self, key: str, value: str) -> None:
        db = self.session_factory()
        try:
            row = db.get(LocalStorageEntry, key)
            if row is None:
                row = LocalStorageEntry(key=key, value=value)
            else:
                row.value = value
                row.updated_at = datetime.utcnow()
            db.add(row)
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def remove_item(self, key: str) -> None:
        db = self.session_factory()
        try:
            row = db.get(LocalStorageEntry, key)
            if row is not None:
                db.delete(row)
                db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


class MemoryLocalStorage:
    def __init__(self, initial: dict[str, str] | None = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)
