"""Session progress tracking with callback-based listener notification.

Tracks the current phase and fetch progress of each universe session and
broadcasts updates to registered listener callbacks.  Listeners are keyed
by session id so several sessions can run side by side without cross-talk.

    UniverseSession ──update()──→ ProgressTracker ──callback()──→ CLI progress line
                                                   ──callback()──→ (any other listener)

Progress within a phase never goes backwards: an update reporting less than
the last recorded value for the same phase keeps the recorded value.

A listener that raises is logged and skipped.  This also covers listeners
whose owner has gone away mid-fetch: the session keeps running and its
results still reach the cache.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog
from cachetools import TTLCache

from castgraph.models.pipeline import UniversePhase
from castgraph.utils.logging import get_logger


@dataclass
class _SessionStatus:
    """Internal snapshot of a single session's progress."""

    phase: UniversePhase = UniversePhase.IDLE
    progress: float = 0.0
    message: str = ""


class ProgressTracker:
    """Tracks and broadcasts session progress via callbacks.

    Statuses live in a ``cachetools.TTLCache``: a session's phase stays
    queryable for *status_ttl* seconds after its last update, then reads
    as IDLE again.  At most *max_sessions* statuses are kept.
    """

    def __init__(
        self,
        status_ttl: float = 3600.0,
        max_sessions: int = 1024,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._statuses: TTLCache[str, _SessionStatus] = TTLCache(
            maxsize=max_sessions,
            ttl=status_ttl,
            timer=timer,
        )
        self._listeners: dict[str, list[Callable]] = {}
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def update(
        self,
        session_id: str,
        phase: UniversePhase,
        progress: float,
        message: str = "",
    ) -> None:
        """Record a progress update and notify all registered listeners.

        Parameters
        ----------
        session_id:
            The session to update.
        phase:
            The session's current phase.
        progress:
            Completion percentage (0.0 – 100.0), clamped.
        message:
            Human-readable status message.
        """
        progress = max(0.0, min(100.0, progress))

        previous = self._statuses.get(session_id)
        if previous is not None and previous.phase == phase:
            progress = max(progress, previous.progress)

        self._statuses[session_id] = _SessionStatus(
            phase=phase,
            progress=progress,
            message=message,
        )

        self._logger.debug(
            "progress_update",
            session_id=session_id,
            phase=phase.value,
            progress=round(progress, 1),
            message=message,
        )

        await self._notify_listeners(session_id, phase, progress, message)

    def register_listener(self, session_id: str, callback: Callable) -> None:
        """Register a sync or async ``(session_id, phase, progress, message)`` callback."""
        listeners = self._listeners.setdefault(session_id, [])
        if callback not in listeners:
            listeners.append(callback)
            self._logger.debug(
                "listener_registered",
                session_id=session_id,
                total_listeners=len(listeners),
            )

    def unregister_listener(self, session_id: str, callback: Callable) -> None:
        """Remove a previously registered callback (no-op if absent)."""
        listeners = self._listeners.get(session_id, [])
        if callback in listeners:
            listeners.remove(callback)
            if not listeners:
                del self._listeners[session_id]
            self._logger.debug(
                "listener_unregistered",
                session_id=session_id,
                remaining_listeners=len(listeners),
            )

    def get_status(self, session_id: str) -> dict:
        """Return ``phase``, ``progress`` and ``message`` for a session.

        Unknown sessions report IDLE at 0 %.
        """
        status = self._statuses.get(session_id)
        if status is None:
            return {
                "phase": UniversePhase.IDLE.value,
                "progress": 0.0,
                "message": "",
            }

        return {
            "phase": status.phase.value,
            "progress": status.progress,
            "message": status.message,
        }

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _notify_listeners(
        self,
        session_id: str,
        phase: UniversePhase,
        progress: float,
        message: str,
    ) -> None:
        # Iterate over a copy: a callback may unregister itself.
        for callback in list(self._listeners.get(session_id, [])):
            try:
                result = callback(session_id, phase, progress, message)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as exc:
                self._logger.warning(
                    "listener_callback_error",
                    session_id=session_id,
                    error=str(exc),
                    callback=getattr(callback, "__name__", repr(callback)),
                )
