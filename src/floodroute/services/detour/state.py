"""Per-session detour attempt state with stale-result protection."""

from __future__ import annotations

import itertools
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, replace
from typing import Callable

from ...config import settings
from ...models.domain import GeoPoint
from ..routing.models import Route
from .models import DetourAttemptState, NavigationRequest

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SessionEntry:
    """Attempt state for the session's current (origin, destination, profile) key.

    ``generation`` changes on every reset; a search may only commit while the
    generation it started with is still current.
    """

    request: NavigationRequest
    generation: int
    state: DetourAttemptState = DetourAttemptState.NOT_ATTEMPTED
    active_route: Route | None = None
    waypoints: tuple[GeoPoint, ...] = ()
    best_effort: bool = False
    last_seen: float = 0.0


class DetourAttemptStore:
    """Thread-safe map of session id to attempt state.

    Sessions idle for longer than ``ttl_s`` are dropped, and the least
    recently used ones go first once ``max_entries`` is exceeded. A session
    with a search in flight is never evicted.
    """

    def __init__(
        self,
        *,
        ttl_s: float | None = None,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_s = settings.session_ttl_seconds if ttl_s is None else ttl_s
        self._max_entries = max(1, int(settings.session_max_entries if max_entries is None else max_entries))
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: OrderedDict[str, SessionEntry] = OrderedDict()
        self._generations = itertools.count(1)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _fresh(self, request: NavigationRequest) -> SessionEntry:
        return SessionEntry(
            request=request,
            generation=next(self._generations),
            waypoints=(request.origin, request.destination),
        )

    def _is_expired(self, entry: SessionEntry, now: float) -> bool:
        return (now - entry.last_seen) > self._ttl_s

    def _evict(self, now: float) -> None:
        # Entries are kept in least-recently-used order.
        for session_id, entry in list(self._entries.items()):
            if not self._is_expired(entry, now):
                break
            if entry.state is not DetourAttemptState.EVALUATING:
                del self._entries[session_id]
                logger.debug("Dropping idle detour session %s", session_id)

        if len(self._entries) <= self._max_entries:
            return
        for session_id, entry in list(self._entries.items()):
            if len(self._entries) <= self._max_entries:
                break
            if entry.state is not DetourAttemptState.EVALUATING:
                del self._entries[session_id]
                logger.debug("Evicting detour session %s, store is full", session_id)

    def _touch(self, session_id: str, entry: SessionEntry, now: float) -> None:
        entry.last_seen = now
        self._entries[session_id] = entry
        self._entries.move_to_end(session_id)

    def sync(self, request: NavigationRequest) -> SessionEntry:
        """Record the latest request and apply reset rules; returns a snapshot.

        The state returns to not-attempted when the key changes or when
        avoidance is switched off. Switching off also drops an applied detour
        so the plain two-point route is requested again.
        """
        with self._lock:
            now = self._clock()
            self._evict(now)
            entry = self._entries.get(request.session_id)
            if entry is None or entry.request.key != request.key:
                if entry is not None:
                    logger.info("Route inputs changed for session %s, resetting detour state", request.session_id)
                entry = self._fresh(request)
            elif entry.request.avoid_hazards and not request.avoid_hazards:
                logger.info("Hazard avoidance switched off for session %s", request.session_id)
                entry = self._fresh(request)
            else:
                entry.request = request
            self._touch(request.session_id, entry, now)
            self._evict(now)
            return replace(entry)

    def get(self, session_id: str) -> SessionEntry | None:
        with self._lock:
            self._evict(self._clock())
            entry = self._entries.get(session_id)
            return replace(entry) if entry is not None else None

    def forget(self, session_id: str) -> bool:
        with self._lock:
            return self._entries.pop(session_id, None) is not None

    def _current(self, session_id: str, generation: int) -> SessionEntry | None:
        entry = self._entries.get(session_id)
        if entry is None or entry.generation != generation:
            return None
        return entry

    def remember_route(self, session_id: str, generation: int, route: Route) -> None:
        with self._lock:
            entry = self._current(session_id, generation)
            if entry is not None:
                entry.active_route = route

    def begin_evaluation(self, session_id: str, generation: int) -> bool:
        """Enter the evaluating state; False if a search already ran or is running."""
        with self._lock:
            entry = self._current(session_id, generation)
            if entry is None or entry.state is not DetourAttemptState.NOT_ATTEMPTED:
                return False
            entry.state = DetourAttemptState.EVALUATING
            return True

    def commit(
        self,
        session_id: str,
        generation: int,
        route: Route,
        waypoints: tuple[GeoPoint, ...],
        *,
        best_effort: bool = False,
    ) -> bool:
        with self._lock:
            entry = self._current(session_id, generation)
            if entry is None or entry.state is not DetourAttemptState.EVALUATING:
                return False
            entry.state = DetourAttemptState.APPLIED
            entry.active_route = route
            entry.waypoints = waypoints
            entry.best_effort = best_effort
            return True

    def fail(self, session_id: str, generation: int) -> bool:
        with self._lock:
            entry = self._current(session_id, generation)
            if entry is None or entry.state is not DetourAttemptState.EVALUATING:
                return False
            entry.state = DetourAttemptState.FAILED
            return True
