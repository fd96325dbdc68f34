"""
Persistent storage for the user's course cart.

The cart is stored in a small keyed storage file (by default
coursecart/data/storage.json) that looks like:

    {"wlacZtcCartV1": [{"course": "MATH 101", "section": "001", ...}, ...]}

Every session pointing at the same file sees the same cart. Other keys in the
file are left untouched.

Design rationale:
- the catalog is re-fetched on every run, the cart must survive independently
- callers depend on the CartStore interface, so tests use MemoryCartStore
- reads are forgiving (broken file -> empty cart), writes are not
  (a failed write raises StorageWriteFailure and nothing counts as added)

Concurrent sessions are not coordinated: the last write wins.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from coursecart import config
from coursecart.errors import StorageReadCorrupt, StorageWriteFailure
from coursecart.model import CourseRecord


log = logging.getLogger(__name__)


class CartStore(ABC):
    """
    The only way selections are read or changed.

    add() does not reject duplicates; use add_if_absent() for the
    at-most-one-per-(course, section) behaviour the UI wants.
    """

    @abstractmethod
    def list(self) -> list[CourseRecord]:
        ...

    @abstractmethod
    def add(self, item: CourseRecord) -> None:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...

    def contains(self, course: str, section: str) -> bool:
        return any(i.course == course and i.section == section for i in self.list())


class MemoryCartStore(CartStore):
    """In-process cart, used for tests and throwaway sessions."""

    def __init__(self, items: list[CourseRecord] | None = None) -> None:
        self._items: list[CourseRecord] = list(items or [])

    def list(self) -> list[CourseRecord]:
        return list(self._items)

    def add(self, item: CourseRecord) -> None:
        self._items.append(CourseRecord.from_mapping(item.to_dict()))

    def clear(self) -> None:
        self._items = []


class JsonFileCartStore(CartStore):
    """
    Cart kept under one key of a shared JSON storage file.

    Each mutation re-reads the file, applies the change and replaces the file
    atomically before returning.
    """

    def __init__(self, path: str | Path | None = None, key: str = config.STORAGE_KEY) -> None:
        # Using a parameter instead of the constant directly lets tests
        # point the store at a temporary file.
        self.path = Path(path) if path is not None else config.CART_PATH
        self.key = key

    # -- reading ------------------------------------------------------------

    def _read_storage(self) -> dict[str, Any]:
        """
        Load the whole storage file. Missing file -> {}.

        Raises StorageReadCorrupt if the file exists but cannot be decoded.
        """
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise StorageReadCorrupt(f"{self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageReadCorrupt(f"{self.path}: expected a JSON object")
        return data

    def _decode_items(self, raw: Any) -> list[CourseRecord]:
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise StorageReadCorrupt(f"{self.path}: {self.key!r} is not a list")
        return [CourseRecord.from_mapping(x) for x in raw if isinstance(x, dict)]

    def list(self) -> list[CourseRecord]:
        try:
            return self._decode_items(self._read_storage().get(self.key))
        except StorageReadCorrupt as exc:
            log.warning("Ignoring unreadable cart storage: %s", exc)
            return []

    # -- writing ------------------------------------------------------------

    def _load_for_update(self) -> tuple[dict[str, Any], list[CourseRecord]]:
        try:
            storage = self._read_storage()
        except StorageReadCorrupt as exc:
            log.warning("Replacing unreadable cart storage: %s", exc)
            return {}, []
        try:
            items = self._decode_items(storage.get(self.key))
        except StorageReadCorrupt as exc:
            log.warning("Resetting unreadable cart entry: %s", exc)
            items = []
        return storage, items

    def _commit(self, storage: dict[str, Any], items: list[CourseRecord]) -> None:
        storage[self.key] = [i.to_dict() for i in items]
        payload = json.dumps(storage, indent=2, ensure_ascii=False)

        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".cart-", suffix=".json", dir=self.path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            if self.path.exists():
                # mkstemp creates 0600; keep the permissions the shared file already had
                shutil.copymode(self.path, tmp_name)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageWriteFailure(f"Could not write cart to {self.path}: {exc}") from exc

    def add(self, item: CourseRecord) -> None:
        storage, items = self._load_for_update()
        items.append(item)
        self._commit(storage, items)

    def clear(self) -> None:
        storage, _ = self._load_for_update()
        self._commit(storage, [])


def add_if_absent(store: CartStore, record: CourseRecord) -> bool:
    """
    Add `record` unless its (course, section) pair is already in the cart.

    Returns True if it was added. This is the guard every UI path uses.
    """
    if store.contains(record.course, record.section):
        return False
    store.add(record)
    return True
