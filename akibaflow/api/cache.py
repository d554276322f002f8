from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

QueryKey = Tuple[str, Tuple[Tuple[str, Any], ...]]

IDLE = "idle"
LOADING = "loading"
SUCCESS = "success"
ERROR = "error"


@dataclass(frozen=True)
class QueryState:
    status: str = IDLE
    data: Any = None
    error: Optional[BaseException] = None
    updated_at: Optional[datetime] = None

    @property
    def is_loading(self) -> bool:
        return self.status == LOADING

    @property
    def is_error(self) -> bool:
        return self.status == ERROR

    @property
    def is_success(self) -> bool:
        return self.status == SUCCESS


class QueryCache:
    """
    Response cache keyed by endpoint + normalized parameters.

    Concurrent fetches of the same key share one in-flight call. Entries are
    only dropped by ``invalidate``/``clear`` or replaced by ``refetch``;
    nothing is refreshed implicitly.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: Dict[QueryKey, QueryState] = {}
        self._in_flight: Dict[QueryKey, Future] = {}
        self._subscribers: Dict[QueryKey, List[Callable[[QueryState], None]]] = {}
        self._generation = 0

    @staticmethod
    def make_key(endpoint: str, params: Optional[Dict[str, Any]] = None) -> QueryKey:
        items = sorted((k, v) for k, v in (params or {}).items() if v is not None)
        return endpoint, tuple(items)

    def state(self, key: QueryKey) -> QueryState:
        with self._lock:
            return self._entries.get(key, QueryState())

    def subscribe(self, key: QueryKey, callback: Callable[[QueryState], None]) -> Callable[[], None]:
        with self._lock:
            self._subscribers.setdefault(key, []).append(callback)

        def unsubscribe() -> None:
            with self._lock:
                callbacks = self._subscribers.get(key, [])
                if callback in callbacks:
                    callbacks.remove(callback)

        return unsubscribe

    def fetch(self, key: QueryKey, loader: Callable[[], Any], refetch: bool = False) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if not refetch and entry is not None and entry.is_success:
                logger.debug("cache hit %s", key)
                return entry.data
            future = self._in_flight.get(key)
            owner = future is None
            if owner:
                future = Future()
                generation = self._generation
                self._in_flight[key] = future
                self._entries[key] = QueryState(
                    status=LOADING, data=entry.data if entry else None
                )

        if not owner:
            logger.debug("joining in-flight request %s", key)
            return future.result()

        try:
            data = loader()
        except Exception as exc:
            state = QueryState(status=ERROR, error=exc, updated_at=datetime.now())
            callbacks = self._resolve(key, future, generation, state)
            future.set_exception(exc)
            self._notify(key, callbacks, state)
            raise
        state = QueryState(status=SUCCESS, data=data, updated_at=datetime.now())
        callbacks = self._resolve(key, future, generation, state)
        future.set_result(data)
        self._notify(key, callbacks, state)
        return data

    def _resolve(self, key: QueryKey, future: Future, generation: int, state: QueryState) -> List[Callable]:
        with self._lock:
            if self._in_flight.get(key) is future:
                del self._in_flight[key]
            if generation != self._generation:
                # cleared while in flight: the caller still gets its result
                logger.debug("dropping stale result for %s", key)
                return []
            self._entries[key] = state
            return list(self._subscribers.get(key, []))

    @staticmethod
    def _notify(key: QueryKey, callbacks: List[Callable], state: QueryState) -> None:
        # runs after the future is resolved so joined callers never wait on a subscriber
        for callback in callbacks:
            try:
                callback(state)
            except Exception:
                logger.exception("subscriber for %s failed", key)

    def invalidate(self, endpoint: Optional[str] = None) -> None:
        """Forget resolved entries for ``endpoint`` (every parameter set), or all."""
        with self._lock:
            for key in list(self._entries):
                if (endpoint is None or key[0] == endpoint) and key not in self._in_flight:
                    del self._entries[key]

    def clear(self) -> None:
        """Drop every entry and subscriber; requests still in flight resolve into nothing."""
        with self._lock:
            self._generation += 1
            self._entries.clear()
            self._in_flight.clear()
            self._subscribers.clear()
