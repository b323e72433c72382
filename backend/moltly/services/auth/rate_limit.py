# backend/moltly/services/auth/rate_limit.py
"""
Password-login throttling.

Five failures for one key inside a five minute window lock that key out for
fifteen minutes. A successful login clears the key. The attempt records live
behind LoginAttemptStore so a deployment with several workers can back them
with shared storage; the app gets its instance from ``app.state``.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Optional
import time

MAX_ATTEMPTS = 5
WINDOW_SECONDS = 5 * 60
LOCKOUT_SECONDS = 15 * 60


@dataclass
class AttemptRecord:
    count: int
    expires_at: float
    locked_until: Optional[float] = None


class LoginAttemptStore(ABC):
    @abstractmethod
    def get(self, key: str) -> Optional[AttemptRecord]: ...

    @abstractmethod
    def set(self, key: str, record: AttemptRecord) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> None: ...


class InMemoryLoginAttemptStore(LoginAttemptStore):
    def __init__(self):
        self._records: dict[str, AttemptRecord] = {}
        self._lock = Lock()

    def get(self, key):
        with self._lock:
            return self._records.get(key)

    def set(self, key, record):
        with self._lock:
            self._records[key] = record

    def delete(self, key):
        with self._lock:
            self._records.pop(key, None)


class LoginRateLimiter:
    def __init__(self, store: LoginAttemptStore, clock: Callable[[], float] = time.monotonic):
        self.store = store
        self.clock = clock

    def _current(self, key: str) -> Optional[AttemptRecord]:
        record = self.store.get(key)
        if record is None:
            return None
        now = self.clock()
        if record.locked_until is not None and record.locked_until <= now:
            self.store.delete(key)
            return None
        if record.locked_until is None and record.expires_at <= now:
            self.store.delete(key)
            return None
        return record

    def is_locked(self, key: str) -> bool:
        record = self._current(key)
        return bool(record and record.locked_until and record.locked_until > self.clock())

    def record_failure(self, key: str) -> None:
        now = self.clock()
        record = self._current(key)
        if record is None:
            self.store.set(key, AttemptRecord(count=1, expires_at=now + WINDOW_SECONDS))
            return
        record = AttemptRecord(count=record.count + 1, expires_at=record.expires_at)
        if record.count >= MAX_ATTEMPTS:
            record.locked_until = now + LOCKOUT_SECONDS
        self.store.set(key, record)

    def clear(self, key: str) -> None:
        self.store.delete(key)
