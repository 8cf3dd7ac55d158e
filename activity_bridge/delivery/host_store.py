# FILE: activity_bridge/delivery/host_store.py
"""
Observable host state
"""
import logging
from typing import Callable, List, Optional

from activity_bridge.models.host import HostState

logger = logging.getLogger(__name__)

StateListener = Callable[[HostState, HostState], None]


class HostStore:
    """Holds the current HostState and tells subscribers about every update"""

    def __init__(self, state: Optional[HostState] = None):
        self._state = state or HostState()
        self._listeners: List[StateListener] = []

    @property
    def state(self) -> HostState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def update(self, **changes) -> HostState:
        """Replace fields of the state and call listeners with (previous, current)"""
        unknown = set(changes) - set(HostState.model_fields)
        if unknown:
            raise KeyError(f"Unknown host state fields: {sorted(unknown)}")

        previous = self._state
        current = previous.model_copy(update=changes)
        self._state = current

        for listener in list(self._listeners):
            listener(previous, current)
        return current
