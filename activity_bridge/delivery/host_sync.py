# FILE: activity_bridge/delivery/host_sync.py
"""
Host synchronization: turns host state transitions into bridge notifications

Check cycle:     last_check_triggered changes -> CHECK_STARTED
                 matching last_check_results  -> CHECK_COMPLETE (async)
Init complete:   init_phase_complete -> True  -> CONTEXT_CHANGED (async)
Mutation:        last_mutate_triggered changes -> STATE_CHANGED
"""
import asyncio
import logging
from typing import Coroutine, Optional, Set

from activity_bridge.delivery.bridge import ActivityBridge
from activity_bridge.delivery.host_store import HostStore
from activity_bridge.models.host import HostState
from activity_bridge.services.telemetry import record_event

logger = logging.getLogger(__name__)


def _changed(previous: Optional[HostState], current: HostState, name: str) -> bool:
    return previous is None or getattr(previous, name) != getattr(current, name)


class HostSynchronizer:
    def __init__(self, bridge: ActivityBridge, store: HostStore):
        self.bridge = bridge
        self.store = store
        self._pending: Set[asyncio.Task] = set()
        self._attached = False

    def attach(self) -> None:
        """Subscribe and react once to the state as it is right now"""
        if self._attached:
            return
        self.store.subscribe(self.on_change)
        self._attached = True
        self.on_change(None, self.store.state)

    def detach(self) -> None:
        self.store.unsubscribe(self.on_change)
        self._attached = False

    def on_change(self, previous: Optional[HostState], current: HostState) -> None:
        if _changed(previous, current, "last_check_triggered") and current.last_check_triggered is not None:
            self.bridge.notify_check_started(current.last_check_triggered)

        if _changed(previous, current, "last_check_triggered") or _changed(previous, current, "last_check_results"):
            results = current.last_check_results
            if (
                results is not None
                and results.timestamp == current.last_check_triggered
                and self.bridge.check_matches(results)
            ):
                self._schedule(self.bridge.notify_check_complete(results))

        if _changed(previous, current, "init_phase_complete") and current.init_phase_complete:
            self._schedule(self.bridge.notify_context_changed(
                current.current_activity_id,
                bool(current.history_navigation_activity),
                list(current.init_state_facts),
            ))

        if _changed(previous, current, "last_mutate_triggered") and current.last_mutate_triggered is not None:
            self.bridge.notify_state_changed(current.last_mutate_changes)

    def _schedule(self, coro: Coroutine) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop; dropping host sync work for {self.bridge.activity_id}")
            coro.close()
            return
        task = loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Host sync failed for {self.bridge.activity_id}: {exc}", exc_info=exc)
            record_event("host_sync_error", activity_id=self.bridge.activity_id, error=str(exc))

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def settle(self) -> None:
        """Wait until all scheduled notification work has finished"""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
