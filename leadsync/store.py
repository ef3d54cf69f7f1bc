"""Process-lifetime bookkeeping for sessions that were pushed to the sink."""

import threading
from typing import Iterable, Optional, Protocol, Set


class DeliveredStore(Protocol):
    def contains(self, session_id: str) -> bool:
        ...

    def add(self, session_id: str) -> None:
        ...


class InMemoryDeliveredStore:
    """Delivered-session ids for the lifetime of the process.

    Nothing is persisted: after a restart every session is evaluated again and
    the delivery evidence inside the session itself keeps it from being
    pushed twice.
    """

    def __init__(self, session_ids: Optional[Iterable[str]] = None) -> None:
        self._ids: Set[str] = set(session_ids or [])
        self._lock = threading.Lock()

    def contains(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._ids

    def add(self, session_id: str) -> None:
        with self._lock:
            self._ids.add(session_id)

    def clear(self) -> None:
        with self._lock:
            self._ids.clear()


class InFlightGuard:
    """Session ids currently being pushed by any pass."""

    def __init__(self) -> None:
        self._ids: Set[str] = set()
        self._lock = threading.Lock()

    def acquire(self, session_id: str) -> bool:
        with self._lock:
            if session_id in self._ids:
                return False
            self._ids.add(session_id)
            return True

    def release(self, session_id: str) -> None:
        with self._lock:
            self._ids.discard(session_id)
