# FILE: activity_bridge/delivery/event_bus.py
"""
Page-level event bus carrying bridge events from activities to renderers
"""
import asyncio
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, List, Optional

from activity_bridge.config import get_settings
from activity_bridge.models.bridge import BridgeEvent, BridgeEventType

logger = logging.getLogger(__name__)

Listener = Callable[[BridgeEvent], Awaitable[None]]


class EventBus:
    """Every listener of an event type sees every event of that type"""

    def __init__(self) -> None:
        self._listeners: Dict[BridgeEventType, List[Listener]] = defaultdict(list)

    def add_listener(self, event_type: BridgeEventType, listener: Listener) -> None:
        self._listeners[BridgeEventType(event_type)].append(listener)

    def remove_listener(self, event_type: BridgeEventType, listener: Listener) -> None:
        listeners = self._listeners.get(BridgeEventType(event_type), [])
        if listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event_type: Optional[BridgeEventType] = None) -> int:
        if event_type is not None:
            return len(self._listeners.get(BridgeEventType(event_type), []))
        return sum(len(listeners) for listeners in self._listeners.values())

    async def dispatch(self, event: BridgeEvent) -> None:
        """Deliver an event to every listener; one failing listener does not stop the others"""
        listeners = list(self._listeners.get(BridgeEventType(event.type), []))
        if not listeners:
            logger.debug(f"No listeners for {event.type.value}")
            return

        results = await asyncio.gather(
            *(listener(event) for listener in listeners),
            return_exceptions=True
        )
        for result in results:
            if isinstance(result, Exception):
                logger.error(f"Listener failed for {event.type.value}: {result}", exc_info=result)

    async def request(
        self,
        event_type: BridgeEventType,
        attempt_guid: str,
        part_attempt_guid: Optional[str] = None,
        payload: Any = None,
        timeout: Optional[float] = None
    ) -> Any:
        """
        Dispatch an event with a continuation and wait for its result.

        Raises asyncio.TimeoutError when nobody answers within the timeout
        (CONTINUATION_TIMEOUT_SECONDS by default).
        """
        continuation = asyncio.get_running_loop().create_future()
        event = BridgeEvent(
            type=BridgeEventType(event_type),
            attempt_guid=attempt_guid,
            part_attempt_guid=part_attempt_guid,
            payload=payload,
            continuation=continuation,
        )
        await self.dispatch(event)

        if timeout is None:
            timeout = get_settings().continuation_timeout_seconds
        return await asyncio.wait_for(continuation, timeout)
