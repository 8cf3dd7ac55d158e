"""
Delivery runtime: event bus, activity bridge and host synchronization
"""
from activity_bridge.delivery.bridge import ActivityBridge, ElementProps, LifecycleCallbacks
from activity_bridge.delivery.event_bus import EventBus
from activity_bridge.delivery.host_store import HostStore
from activity_bridge.delivery.host_sync import HostSynchronizer
from activity_bridge.delivery.renderer import ActivityRenderer
