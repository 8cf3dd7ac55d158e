# FILE: activity_bridge/delivery/bridge.py
"""
Activity bridge: routes bus events of one mounted activity to host callbacks
and pushes host notifications back to the activity.

Lifecycle: UNMOUNTED -> LISTENING -> READY -> UNMOUNTED. Listeners are
registered before the rendering capability is invoked so that no event sent
during the first render is lost.
"""
import asyncio
import logging
from collections import ChainMap
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, Mapping, Optional, Protocol

from pydantic import BaseModel

from activity_bridge.errors import BridgeStateError
from activity_bridge.delivery.event_bus import EventBus
from activity_bridge.delivery.scripting import create_child_scope
from activity_bridge.models.activities import ActivityDescriptor
from activity_bridge.models.attempts import AttemptState
from activity_bridge.models.bridge import (
    BridgeEvent,
    BridgeEventType,
    BridgeState,
    NavigationMode,
    NotificationType,
    ReadyResponse,
    Success,
)
from activity_bridge.models.host import CheckResults
from activity_bridge.services.attempt_registry import AttemptRegistry
from activity_bridge.services.correlation import generate_correlation_id
from activity_bridge.services.telemetry import record_event

logger = logging.getLogger(__name__)


async def default_handler(*args: Any, **kwargs: Any) -> Success:
    return Success()


async def default_request_latest_state() -> Dict[str, Any]:
    return {"snapshot": {}}


@dataclass
class LifecycleCallbacks:
    """
    Host callbacks, one per inbound event type.

    Signatures:
        on_save(activity_id, attempt_guid, part_responses)
        on_submit(activity_id, attempt_guid, part_responses)
        on_reset(activity_id, attempt_guid)
        on_save_part(activity_id, attempt_guid, part_attempt_guid, response)
        on_submit_part(activity_id, attempt_guid, part_attempt_guid, response)
        on_reset_part(activity_id, attempt_guid, part_attempt_guid)
        on_request_hint(activity_id, attempt_guid, part_attempt_guid)
        on_submit_evaluations(activity_id, attempt_guid, client_evaluations)
        on_ready(activity_id, attempt_guid)
        on_request_latest_state() -> {"snapshot": {...}}
    """
    on_save: Callable[..., Awaitable[Any]] = default_handler
    on_submit: Callable[..., Awaitable[Any]] = default_handler
    on_reset: Callable[..., Awaitable[Any]] = default_handler
    on_save_part: Callable[..., Awaitable[Any]] = default_handler
    on_submit_part: Callable[..., Awaitable[Any]] = default_handler
    on_reset_part: Callable[..., Awaitable[Any]] = default_handler
    on_request_hint: Callable[..., Awaitable[Any]] = default_handler
    on_submit_evaluations: Callable[..., Awaitable[Any]] = default_handler
    on_ready: Callable[..., Awaitable[Any]] = default_handler
    on_request_latest_state: Callable[[], Awaitable[Dict[str, Any]]] = default_request_latest_state


class DeliveryElement(Protocol):
    def notify(self, notification_type: NotificationType, payload: Dict[str, Any]) -> Any:
        ...


@dataclass
class ElementProps:
    """Everything a rendering capability is built from"""
    activity: ActivityDescriptor
    model: str
    state: str
    preview: bool
    user_id: Optional[int]
    handlers: Mapping[BridgeEventType, Callable[..., Awaitable[Any]]] = field(default_factory=dict)
    graded: bool = False


def _as_dict(result: Any) -> Dict[str, Any]:
    if isinstance(result, BaseModel):
        return result.model_dump()
    if isinstance(result, Mapping):
        return dict(result)
    return {}


class ActivityBridge:
    def __init__(
        self,
        activity: ActivityDescriptor,
        attempt: AttemptState,
        bus: EventBus,
        registry: AttemptRegistry,
        callbacks: Optional[LifecycleCallbacks] = None,
        preview: bool = False,
        user_id: Optional[int] = None,
        global_env: "Optional[ChainMap[str, Any]]" = None
    ):
        self.activity = activity
        self.initial_attempt = attempt
        self.bus = bus
        self.registry = registry
        self.callbacks = callbacks or LifecycleCallbacks()
        self.preview = preview
        self.user_id = user_id
        self.global_env = global_env

        self.state = BridgeState.UNMOUNTED
        self.element: Optional[DeliveryElement] = None
        self.model_json = ""
        self.state_json = ""
        self._live = False
        self._check_in_progress = False
        self._check_started_ts: Optional[float] = None

        self._handlers: Dict[BridgeEventType, Callable[..., Awaitable[Any]]] = {
            BridgeEventType.SAVE: self._on_save,
            BridgeEventType.SUBMIT: self._on_submit,
            BridgeEventType.RESET: self._on_reset,
            BridgeEventType.SAVE_PART: self._on_save_part,
            BridgeEventType.SUBMIT_PART: self._on_submit_part,
            BridgeEventType.RESET_PART: self._on_reset_part,
            BridgeEventType.REQUEST_HINT: self._on_request_hint,
            BridgeEventType.SUBMIT_EVALUATIONS: self._on_submit_evaluations,
            BridgeEventType.READY: self._on_ready,
            BridgeEventType.RESIZE_PART: self._on_resize,
        }

    @property
    def activity_id(self) -> str:
        return self.activity.id

    @property
    def is_live(self) -> bool:
        return self._live

    @property
    def check_in_progress(self) -> bool:
        return self._check_in_progress

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def mount(self) -> Optional[DeliveryElement]:
        """Start listening, publish the attempt, then build the rendering capability"""
        if self.state is not BridgeState.UNMOUNTED:
            raise BridgeStateError(f"Bridge for {self.activity_id} is already {self.state.value}")

        for event_type in self._handlers:
            self.bus.add_listener(event_type, self.handle)
        self._live = True
        self.state = BridgeState.LISTENING

        self.state_json = self.initial_attempt.model_dump_json()
        self.registry.set(self.activity_id, self.initial_attempt)
        self.model_json = self.activity.serialized_model()
        self.state = BridgeState.READY
        logger.debug(f"Bridge ready for {self.activity_id}")

        self.element = self._render()
        return self.element

    def _render(self) -> Optional[DeliveryElement]:
        activity_type = self.activity.activity_type
        factory = activity_type.delivery_element if activity_type else None
        if factory is None:
            logger.warning(f"No delivery element for activity {self.activity_id}; rendering nothing")
            return None

        props = ElementProps(
            activity=self.activity,
            model=self.model_json,
            state=self.state_json,
            preview=self.preview,
            user_id=self.user_id,
            handlers=dict(self._handlers),
        )
        return factory(props)

    def unmount(self) -> None:
        """Stop listening and forget the attempt; in-flight work becomes a no-op"""
        if self.state is BridgeState.UNMOUNTED:
            return

        for event_type in self._handlers:
            self.bus.remove_listener(event_type, self.handle)
        self._live = False
        self._check_in_progress = False
        self.registry.delete(self.activity_id)
        self.element = None
        self.state = BridgeState.UNMOUNTED
        logger.debug(f"Bridge unmounted for {self.activity_id}")

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def is_addressed(self, attempt_guid: str) -> bool:
        """Whether an attempt guid belongs to this activity, now or in its history"""
        if not self._live:
            return False
        current = self.registry.get(self.activity_id)
        if current is not None and current.attempt_guid == attempt_guid:
            return True
        return self.registry.has_record(self.activity_id, attempt_guid)

    async def handle(self, event: BridgeEvent) -> None:
        """
        Bus listener. Events for other activities are ignored without
        touching their continuation. Handler failures are reported and never
        re-raised into the bus.
        """
        if not self.is_addressed(event.attempt_guid):
            return
        handler = self._handlers.get(event.type)
        if handler is None:
            return

        try:
            result = await handler(event.attempt_guid, event.part_attempt_guid, event.payload)
        except Exception as e:
            correlation_id = generate_correlation_id()
            logger.error(
                f"[{correlation_id}] {event.type.value} handler failed for {self.activity_id}: {e}",
                exc_info=True
            )
            record_event(
                "bridge_handler_error",
                correlation_id=correlation_id,
                activity_id=self.activity_id,
                event_type=event.type.value,
                attempt_guid=event.attempt_guid,
                error=str(e),
            )
            self._settle(event.continuation, exception=e)
            return

        self._settle(event.continuation, result=result)

    @staticmethod
    def _settle(
        continuation: "Optional[asyncio.Future[Any]]",
        result: Any = None,
        exception: Optional[BaseException] = None
    ) -> None:
        if continuation is None or continuation.done():
            return
        if exception is not None:
            continuation.set_exception(exception)
        else:
            continuation.set_result(result)

    async def _on_save(self, attempt_guid, part_attempt_guid, payload):
        return await self.callbacks.on_save(self.activity_id, attempt_guid, payload)

    async def _on_submit(self, attempt_guid, part_attempt_guid, payload):
        return await self.callbacks.on_submit(self.activity_id, attempt_guid, payload)

    async def _on_reset(self, attempt_guid, part_attempt_guid, payload):
        return await self.callbacks.on_reset(self.activity_id, attempt_guid)

    async def _on_save_part(self, attempt_guid, part_attempt_guid, payload):
        return await self.callbacks.on_save_part(
            self.activity_id, attempt_guid, part_attempt_guid, payload)

    async def _on_submit_part(self, attempt_guid, part_attempt_guid, payload):
        return await self.callbacks.on_submit_part(
            self.activity_id, attempt_guid, part_attempt_guid, payload)

    async def _on_reset_part(self, attempt_guid, part_attempt_guid, payload):
        return await self.callbacks.on_reset_part(self.activity_id, attempt_guid, part_attempt_guid)

    async def _on_request_hint(self, attempt_guid, part_attempt_guid, payload):
        return await self.callbacks.on_request_hint(self.activity_id, attempt_guid, part_attempt_guid)

    async def _on_submit_evaluations(self, attempt_guid, part_attempt_guid, payload):
        return await self.callbacks.on_submit_evaluations(self.activity_id, attempt_guid, payload)

    async def _on_ready(self, attempt_guid, part_attempt_guid, payload):
        results = await self.callbacks.on_ready(self.activity_id, attempt_guid)
        # local scope derived from the global one, for same-screen adaptivity
        env = create_child_scope(self.global_env)
        return ReadyResponse(**{**_as_dict(results), "type": "success", "env": env})

    async def _on_resize(self, attempt_guid, part_attempt_guid, payload):
        return None

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    def notify(self, notification_type: NotificationType, payload: Dict[str, Any]) -> bool:
        """Push a notification to the rendering capability if it is still alive"""
        if not self._live or self.element is None:
            logger.debug(f"Dropped {notification_type.value} for {self.activity_id}: not live")
            record_event(
                "bridge_notify_dropped",
                activity_id=self.activity_id,
                notification=notification_type.value,
            )
            return False

        try:
            self.element.notify(notification_type, payload)
        except Exception as e:
            logger.error(
                f"{notification_type.value} notification failed for {self.activity_id}: {e}",
                exc_info=True
            )
            record_event(
                "bridge_notify_error",
                activity_id=self.activity_id,
                notification=notification_type.value,
                error=str(e),
            )
            return False
        return True

    async def _request_snapshot(self) -> Dict[str, Any]:
        latest = await self.callbacks.on_request_latest_state()
        return dict((latest or {}).get("snapshot") or {})

    def notify_check_started(self, ts: float) -> bool:
        if self.state is not BridgeState.READY or self.element is None:
            return False
        self._check_in_progress = True
        self._check_started_ts = ts
        record_event("check_started", activity_id=self.activity_id, ts=ts)
        return self.notify(NotificationType.CHECK_STARTED, {"ts": ts})

    def check_matches(self, results: Optional[CheckResults]) -> bool:
        return (
            self._check_in_progress
            and results is not None
            and results.timestamp == self._check_started_ts
        )

    async def notify_check_complete(self, results: CheckResults) -> bool:
        """
        Finish a check cycle: fetch a fresh snapshot, store the graded
        attempt, then notify. Nothing is stored or sent once unmounted.
        """
        if not self.check_matches(results):
            return False
        # consumed before the first await so a cycle completes only once
        self._check_in_progress = False

        snapshot = await self._request_snapshot()
        if not self._live:
            logger.debug(f"Check complete for {self.activity_id} arrived after unmount")
            record_event(
                "bridge_notify_dropped",
                activity_id=self.activity_id,
                notification=NotificationType.CHECK_COMPLETE.value,
            )
            return False

        graded = results.attempt
        async with self.registry.writer(self.activity_id):
            current = self.registry.get(self.activity_id)
            if current is not None and current.activity_id == graded.activity_id:
                self.registry.set(self.activity_id, graded)
                self.registry.record(self.activity_id, graded.attempt_guid, graded)
            else:
                logger.warning(
                    f"Check results for {graded.activity_id} do not belong to {self.activity_id}"
                )

        payload = {**results.model_dump(mode="json"), "snapshot": snapshot}
        record_event("check_complete", activity_id=self.activity_id, ts=results.timestamp)
        return self.notify(NotificationType.CHECK_COMPLETE, payload)

    async def notify_context_changed(
        self,
        current_activity_id: Optional[str],
        review_mode: bool,
        init_state_facts: Iterable[str]
    ) -> bool:
        if self.element is None:
            return False

        snapshot = await self._request_snapshot()
        if not self._live:
            logger.debug(f"Context change for {self.activity_id} arrived after unmount")
            record_event(
                "bridge_notify_dropped",
                activity_id=self.activity_id,
                notification=NotificationType.CONTEXT_CHANGED.value,
            )
            return False

        init_snapshot = {key: snapshot.get(key) for key in init_state_facts}
        mode = NavigationMode.REVIEW if review_mode else NavigationMode.VIEWER
        return self.notify(NotificationType.CONTEXT_CHANGED, {
            "current_activity_id": current_activity_id,
            "mode": mode.value,
            "snapshot": snapshot,
            "init_state_facts": init_snapshot,
        })

    def notify_state_changed(self, mutate_changes: Dict[str, Any]) -> bool:
        if self.element is None:
            return False
        return self.notify(NotificationType.STATE_CHANGED, {"mutate_changes": mutate_changes})
