# FILE: tests/test_activity_bridge.py

import asyncio
from collections import ChainMap

import pytest
from activity_bridge.delivery.bridge import ActivityBridge, LifecycleCallbacks
from activity_bridge.errors import BridgeStateError
from activity_bridge.models.attempts import PartState
from activity_bridge.models.bridge import (
    BridgeEvent,
    BridgeEventType,
    BridgeState,
    EvaluationResponse,
    PartActivityResponse,
    ReadyResponse,
    RequestHintResponse,
    ResetActivityResponse,
    Success,
)
from activity_bridge.models.content import Hint, from_text
from activity_bridge.services.telemetry import get_telemetry_summary


def make_bridge(activity, attempt, bus, registry, **kwargs):
    return ActivityBridge(activity, attempt, bus, registry, **kwargs)


def test_mount_listens_before_rendering(bus, registry, make_activity, make_attempt):
    seen = {}

    def factory(props):
        seen["listeners"] = bus.listener_count()
        seen["registered"] = registry.get("a1")
        seen["props"] = props
        return object()

    bridge = make_bridge(make_activity("a1", factory), make_attempt("a1", "g1"), bus, registry)
    bridge.mount()

    assert seen["listeners"] == len(BridgeEventType)
    assert seen["registered"].attempt_guid == "g1"
    assert '"attempt_guid":"g1"' in seen["props"].state
    assert '"id":"a1"' in seen["props"].model
    assert "delivery_element" not in seen["props"].model
    assert set(seen["props"].handlers) == set(BridgeEventType)
    assert bridge.state is BridgeState.READY
    assert bridge.is_live


def test_mount_passes_preview_and_user(bus, registry, make_activity, make_attempt):
    bridge = make_bridge(
        make_activity("a1"), make_attempt("a1", "g1"), bus, registry, preview=True, user_id=42)

    element = bridge.mount()

    assert element.props.preview is True
    assert element.props.user_id == 42
    assert bridge.element is element


def test_mount_twice_raises(bus, registry, make_activity, make_attempt):
    bridge = make_bridge(make_activity("a1"), make_attempt("a1", "g1"), bus, registry)
    bridge.mount()

    with pytest.raises(BridgeStateError):
        bridge.mount()


def test_missing_delivery_element_renders_nothing(bus, registry, make_activity, make_attempt):
    bridge = make_bridge(make_activity("a1", None), make_attempt("a1", "g1"), bus, registry)

    assert bridge.mount() is None
    assert bridge.state is BridgeState.READY
    assert bridge.notify_state_changed({"x": 1}) is False


def test_unmount_removes_listeners_and_attempt(bus, registry, make_activity, make_attempt):
    bridge = make_bridge(make_activity("a1"), make_attempt("a1", "g1"), bus, registry)
    bridge.mount()

    bridge.unmount()

    assert bus.listener_count() == 0
    assert registry.get("a1") is None
    assert bridge.element is None
    assert bridge.state is BridgeState.UNMOUNTED
    assert not bridge.is_live
    bridge.unmount()


@pytest.mark.asyncio
async def test_events_reach_only_the_addressed_bridge(bus, registry, make_activity, make_attempt, recorder):
    on_save_a, on_save_b = recorder(), recorder()
    make_bridge(make_activity("A"), make_attempt("A", "g1"), bus, registry,
                callbacks=LifecycleCallbacks(on_save=on_save_a)).mount()
    make_bridge(make_activity("B"), make_attempt("B", "g2"), bus, registry,
                callbacks=LifecycleCallbacks(on_save=on_save_b)).mount()

    await bus.dispatch(BridgeEvent(type=BridgeEventType.SAVE, attempt_guid="g1", payload=[{"part": 1}]))

    assert on_save_a.calls == [("A", "g1", [{"part": 1}])]
    assert on_save_b.calls == []


@pytest.mark.asyncio
async def test_request_returns_callback_result(bus, registry, make_activity, make_attempt, recorder):
    on_submit = recorder(Success(score=3))
    make_bridge(make_activity("A"), make_attempt("A", "g1"), bus, registry,
                callbacks=LifecycleCallbacks(on_submit=on_submit)).mount()

    result = await bus.request(BridgeEventType.SUBMIT, "g1", payload=[])

    assert result.type == "success"
    assert result.model_extra == {"score": 3}
    assert on_submit.calls == [("A", "g1", [])]


@pytest.mark.asyncio
async def test_unaddressed_event_leaves_continuation_pending(bus, registry, make_activity, make_attempt):
    make_bridge(make_activity("A"), make_attempt("A", "g1"), bus, registry).mount()
    continuation = asyncio.get_running_loop().create_future()

    await bus.dispatch(BridgeEvent(type=BridgeEventType.SAVE, attempt_guid="unknown", continuation=continuation))

    assert not continuation.done()
    continuation.cancel()

    with pytest.raises(asyncio.TimeoutError):
        await bus.request(BridgeEventType.SAVE, "unknown", timeout=0.01)


@pytest.mark.asyncio
async def test_event_for_recorded_attempt_is_addressed(bus, registry, make_activity, make_attempt, recorder):
    on_reset = recorder()
    make_bridge(make_activity("A"), make_attempt("A", "g2"), bus, registry,
                callbacks=LifecycleCallbacks(on_reset=on_reset)).mount()
    registry.record("A", "g1", make_attempt("A", "g1"))

    await bus.request(BridgeEventType.RESET, "g1")

    assert on_reset.calls == [("A", "g1")]


@pytest.mark.asyncio
async def test_events_after_unmount_are_ignored(bus, registry, make_activity, make_attempt, recorder):
    on_save = recorder()
    bridge = make_bridge(make_activity("A"), make_attempt("A", "g1"), bus, registry,
                         callbacks=LifecycleCallbacks(on_save=on_save))
    bridge.mount()
    handle = bridge.handle
    bridge.unmount()

    await handle(BridgeEvent(type=BridgeEventType.SAVE, attempt_guid="g1"))

    assert on_save.calls == []


@pytest.mark.asyncio
async def test_handler_failure_settles_continuation_and_spares_other_listeners(
        bus, registry, make_activity, make_attempt, recorder):
    async def broken(*args):
        raise RuntimeError("host exploded")

    on_save_b = recorder()
    make_bridge(make_activity("A"), make_attempt("A", "g1"), bus, registry,
                callbacks=LifecycleCallbacks(on_save=broken)).mount()
    make_bridge(make_activity("B"), make_attempt("B", "g1"), bus, registry,
                callbacks=LifecycleCallbacks(on_save=on_save_b)).mount()
    continuation = asyncio.get_running_loop().create_future()

    await bus.dispatch(BridgeEvent(type=BridgeEventType.SAVE, attempt_guid="g1", continuation=continuation))

    assert on_save_b.calls == [("B", "g1", None)]
    assert isinstance(continuation.exception(), RuntimeError)
    assert get_telemetry_summary()["counters_in_memory"]["bridge_handler_error"] == 1


@pytest.mark.asyncio
async def test_request_raises_handler_failure(bus, registry, make_activity, make_attempt):
    async def broken(*args):
        raise RuntimeError("host exploded")

    make_bridge(make_activity("A"), make_attempt("A", "g1"), bus, registry,
                callbacks=LifecycleCallbacks(on_submit=broken)).mount()

    with pytest.raises(RuntimeError, match="host exploded"):
        await bus.request(BridgeEventType.SUBMIT, "g1")


@pytest.mark.asyncio
async def test_ready_returns_child_scripting_scope(bus, registry, make_activity, make_attempt, recorder):
    global_env = ChainMap({"lives": 3})
    on_ready = recorder(Success(context={"page": 1}))
    make_bridge(make_activity("A"), make_attempt("A", "g1"), bus, registry,
                callbacks=LifecycleCallbacks(on_ready=on_ready), global_env=global_env).mount()

    result = await bus.request(BridgeEventType.READY, "g1")

    assert isinstance(result, ReadyResponse)
    assert result.type == "success"
    assert result.model_extra == {"context": {"page": 1}}
    assert result.env["lives"] == 3
    result.env["lives"] = 2
    assert global_env["lives"] == 3
    assert on_ready.calls == [("A", "g1")]


@pytest.mark.asyncio
async def test_default_callbacks_succeed(bus, registry, make_activity, make_attempt):
    make_bridge(make_activity("A"), make_attempt("A", "g1"), bus, registry).mount()

    result = await bus.request(BridgeEventType.REQUEST_HINT, "g1", part_attempt_guid="p1")

    assert result == Success()


@pytest.mark.asyncio
async def test_part_events_forward_part_attempt(bus, registry, make_activity, make_attempt, recorder):
    on_save_part, on_reset_part = recorder(), recorder()
    make_bridge(make_activity("A"), make_attempt("A", "g1"), bus, registry,
                callbacks=LifecycleCallbacks(on_save_part=on_save_part, on_reset_part=on_reset_part)).mount()

    await bus.request(BridgeEventType.SAVE_PART, "g1", part_attempt_guid="p1", payload={"input": "c1"})
    await bus.request(BridgeEventType.RESET_PART, "g1", part_attempt_guid="p1")

    assert on_save_part.calls == [("A", "g1", "p1", {"input": "c1"})]
    assert on_reset_part.calls == [("A", "g1", "p1")]


@pytest.mark.asyncio
async def test_tagged_results_are_routed_unchanged(bus, registry, make_activity, make_attempt, recorder):
    graded_part = PartState(attempt_guid="p1", part_id="1", score=1, out_of=1)
    hint = from_text("Count the sides", Hint)
    callbacks = LifecycleCallbacks(
        on_submit_part=recorder(PartActivityResponse(attempt_state=graded_part)),
        on_request_hint=recorder(RequestHintResponse(hint=hint, has_more_hints=False)),
        on_reset=recorder(ResetActivityResponse(attempt_state=make_attempt("A", "g2"))),
        on_submit_evaluations=recorder(EvaluationResponse(actions=[{"type": "FeedbackAction"}])),
    )
    make_bridge(make_activity("A"), make_attempt("A", "g1"), bus, registry, callbacks=callbacks).mount()

    submitted = await bus.request(BridgeEventType.SUBMIT_PART, "g1", part_attempt_guid="p1", payload={"input": "c1"})
    hinted = await bus.request(BridgeEventType.REQUEST_HINT, "g1", part_attempt_guid="p1")
    reset = await bus.request(BridgeEventType.RESET, "g1")
    evaluated = await bus.request(BridgeEventType.SUBMIT_EVALUATIONS, "g1", payload=[])

    assert submitted.attempt_state.score == 1
    assert hinted.hint == hint
    assert not hinted.has_more_hints
    assert reset.attempt_state.attempt_guid == "g2"
    assert evaluated.actions == [{"type": "FeedbackAction"}]


@pytest.mark.asyncio
async def test_resize_part_is_acknowledged_without_callback(bus, registry, make_activity, make_attempt):
    make_bridge(make_activity("A"), make_attempt("A", "g1"), bus, registry).mount()

    assert await bus.request(BridgeEventType.RESIZE_PART, "g1", payload={"height": 300}) is None
