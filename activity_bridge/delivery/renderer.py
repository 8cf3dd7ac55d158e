# FILE: activity_bridge/delivery/renderer.py
"""
Activity renderer: one mounted activity with its bridge and host sync

Handles any activity type; events are bubbled up to the host callbacks.
"""
import logging
from collections import ChainMap
from typing import Any, Optional

from activity_bridge.config import get_settings
from activity_bridge.delivery.bridge import ActivityBridge, DeliveryElement, LifecycleCallbacks
from activity_bridge.delivery.event_bus import EventBus
from activity_bridge.delivery.host_store import HostStore
from activity_bridge.delivery.host_sync import HostSynchronizer
from activity_bridge.models.activities import ActivityDescriptor
from activity_bridge.models.attempts import AttemptState
from activity_bridge.services.attempt_registry import AttemptRegistry

logger = logging.getLogger(__name__)


class ActivityRenderer:
    def __init__(
        self,
        activity: ActivityDescriptor,
        attempt: AttemptState,
        bus: EventBus,
        registry: AttemptRegistry,
        store: HostStore,
        callbacks: Optional[LifecycleCallbacks] = None,
        user_id: Optional[int] = None,
        global_env: "Optional[ChainMap[str, Any]]" = None
    ):
        settings = get_settings()
        self.bridge = ActivityBridge(
            activity,
            attempt,
            bus,
            registry,
            callbacks=callbacks,
            preview=store.state.preview_mode or settings.preview_mode,
            user_id=user_id if user_id is not None else settings.default_user_id,
            global_env=global_env,
        )
        self.synchronizer = HostSynchronizer(self.bridge, store)

    @property
    def element(self) -> Optional[DeliveryElement]:
        return self.bridge.element

    def mount(self) -> Optional[DeliveryElement]:
        element = self.bridge.mount()
        self.synchronizer.attach()
        logger.info(f"Mounted activity {self.bridge.activity_id}")
        return element

    def unmount(self) -> None:
        self.synchronizer.detach()
        self.bridge.unmount()
        logger.info(f"Unmounted activity {self.bridge.activity_id}")

    async def settle(self) -> None:
        await self.synchronizer.settle()
