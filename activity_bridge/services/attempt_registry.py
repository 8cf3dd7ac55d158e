# FILE: activity_bridge/services/attempt_registry.py
"""
Attempt registry: latest attempt per mounted activity, plus history

Bridges never hold on to an attempt captured at mount time. They re-read
this registry whenever an event arrives, because the attempt may have been
replaced while the event was in flight.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Dict, List, Optional

from activity_bridge.models.attempts import AttemptRecord, AttemptState

logger = logging.getLogger(__name__)


class AttemptRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._current: Dict[str, AttemptState] = {}
        self._history: List[AttemptRecord] = []
        self._writers: Dict[str, asyncio.Lock] = {}

    def set(self, activity_id: str, attempt: AttemptState) -> None:
        with self._lock:
            self._current[activity_id] = attempt
        logger.debug(f"Registry set {activity_id} -> {attempt.attempt_guid}")

    def get(self, activity_id: str) -> Optional[AttemptState]:
        with self._lock:
            return self._current.get(activity_id)

    def delete(self, activity_id: str) -> None:
        with self._lock:
            self._current.pop(activity_id, None)
            writer = self._writers.get(activity_id)
            if writer is not None and not writer.locked():
                del self._writers[activity_id]
        logger.debug(f"Registry delete {activity_id}")

    def __contains__(self, activity_id: str) -> bool:
        with self._lock:
            return activity_id in self._current

    def __len__(self) -> int:
        with self._lock:
            return len(self._current)

    def record(self, activity_id: str, attempt_guid: str, attempt: AttemptState) -> AttemptRecord:
        """Append an observed attempt to the history (never removed)"""
        entry = AttemptRecord(
            activity_id=activity_id,
            attempt_guid=attempt_guid,
            attempt=attempt,
            recorded_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._history.append(entry)
        logger.debug(f"Recorded attempt {attempt_guid} for {activity_id}")
        return entry

    def has_record(self, activity_id: str, attempt_guid: str) -> bool:
        return self.find_record(activity_id, attempt_guid) is not None

    def find_record(self, activity_id: str, attempt_guid: str) -> Optional[AttemptRecord]:
        """Latest history entry for an activity and attempt guid"""
        with self._lock:
            history = list(self._history)
        for entry in reversed(history):
            if entry.activity_id == activity_id and entry.attempt_guid == attempt_guid:
                return entry
        return None

    def history(self, activity_id: Optional[str] = None) -> List[AttemptRecord]:
        """Snapshot of the history, optionally for one activity, oldest first"""
        with self._lock:
            history = list(self._history)
        if activity_id is None:
            return history
        return [entry for entry in history if entry.activity_id == activity_id]

    @asynccontextmanager
    async def writer(self, activity_id: str) -> AsyncIterator["AttemptRegistry"]:
        """
        Exclusive write transaction for one activity identity.

        Transactions on different identities do not wait on each other.
        """
        with self._lock:
            lock = self._writers.setdefault(activity_id, asyncio.Lock())
        async with lock:
            yield self
