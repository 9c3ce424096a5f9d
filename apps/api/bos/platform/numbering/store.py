from __future__ import annotations

import threading
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from bos.platform.options.models import Option


class MissingOptionError(LookupError):
    """Raised when a counter or schema option is absent or malformed."""

    def __init__(self, key: str, reason: str = "option is not configured") -> None:
        self.key = key
        super().__init__(f"{key}: {reason}")


class CounterStore(Protocol):
    """Storage for business-ID counters and their schema templates."""

    def get_counter(self, key: str) -> int:
        ...

    def get_schema(self, key: str) -> str:
        ...

    def increment_and_get(self, key: str) -> int:
        ...


def _counter_from_value(key: str, value: Any) -> int:
    if not isinstance(value, dict) or "counter" not in value:
        raise MissingOptionError(key, "value has no 'counter'")
    raw = value["counter"]
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    if isinstance(raw, str) and raw.strip().isdigit():
        raw = int(raw.strip())
    if not isinstance(raw, int) or isinstance(raw, bool) or raw < 0:
        raise MissingOptionError(key, "counter is not a non-negative integer")
    return raw


def _schema_from_value(key: str, value: Any) -> str:
    if not isinstance(value, dict) or not isinstance(value.get("schema"), str):
        raise MissingOptionError(key, "value has no 'schema'")
    return value["schema"]


class InMemoryCounterStore:
    def __init__(self, counters: dict[str, int] | None = None, schemas: dict[str, str] | None = None) -> None:
        self._lock = threading.Lock()
        self._counters = dict(counters or {})
        self._schemas = dict(schemas or {})

    def get_counter(self, key: str) -> int:
        with self._lock:
            if key not in self._counters:
                raise MissingOptionError(key)
            return self._counters[key]

    def get_schema(self, key: str) -> str:
        with self._lock:
            if key not in self._schemas:
                raise MissingOptionError(key)
            return self._schemas[key]

    def increment_and_get(self, key: str) -> int:
        with self._lock:
            if key not in self._counters:
                raise MissingOptionError(key)
            self._counters[key] += 1
            return self._counters[key]


class OptionCounterStore:
    """Counter store over the ``option`` table.

    ``increment_and_get`` takes a row lock (``SELECT ... FOR UPDATE``) and only
    flushes; the lock and the new value are released/committed by the caller's
    transaction, so the entity that consumes the number commits atomically with
    the counter advance.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_counter(self, key: str) -> int:
        return _counter_from_value(key, self._load(key, lock=False).value)

    def get_schema(self, key: str) -> str:
        return _schema_from_value(key, self._load(key, lock=False).value)

    def increment_and_get(self, key: str) -> int:
        option = self._load(key, lock=True)
        next_value = _counter_from_value(key, option.value) + 1
        option.value = {**option.value, "counter": next_value}
        self._session.add(option)
        self._session.flush()
        return next_value

    def _load(self, key: str, *, lock: bool) -> Option:
        stmt = select(Option).where(Option.key == str(key))
        if lock:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        option = self._session.scalar(stmt)
        if option is None:
            raise MissingOptionError(key)
        return option
