# FILE: tests/conftest.py

import os
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Keep telemetry in memory while testing
os.environ.setdefault("TELEMETRY_PERSIST", "false")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from activity_bridge.cata.utils import make_response, update_response_rules
from activity_bridge.config import reload_settings
from activity_bridge.delivery.event_bus import EventBus
from activity_bridge.delivery.host_store import HostStore
from activity_bridge.models.activities import ActivityDescriptor, ActivityType
from activity_bridge.models.attempts import AttemptState
from activity_bridge.models.bridge import Success
from activity_bridge.models.cata import (
    CATAAuthoring,
    CheckAllThatApplyModel,
    Choice,
    Part,
    ResponseMapping,
    Stem,
)
from activity_bridge.models.content import Hint, from_text, rich_text
from activity_bridge.rules.algebra import create_rule_for_ids
from activity_bridge.services.attempt_registry import AttemptRegistry
from activity_bridge.services.telemetry import reset_telemetry


class RecordingElement:
    """Stand-in rendering capability that remembers every notification"""

    def __init__(self, props):
        self.props = props
        self.notifications = []

    def notify(self, notification_type, payload):
        self.notifications.append((notification_type, payload))


class CallRecorder:
    """Async host callback that records its arguments"""

    def __init__(self, result=None):
        self.calls = []
        self.result = result if result is not None else Success()

    async def __call__(self, *args):
        self.calls.append(args)
        return self.result


@pytest.fixture(autouse=True)
def fresh_settings_and_telemetry():
    """Every test sees settings built from its own environment"""
    reload_settings()
    reset_telemetry()
    yield
    reset_telemetry()


@pytest.fixture
def settings():
    """Provide settings for tests"""
    return reload_settings()


@pytest.fixture
def registry():
    return AttemptRegistry()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def store():
    return HostStore()


@pytest.fixture
def make_activity():
    """Activity descriptor whose rendering capability records notifications"""

    def _make(activity_id, element_factory=RecordingElement):
        return ActivityDescriptor(
            id=activity_id,
            activity_type=ActivityType(slug="oli_check_all_that_apply", delivery_element=element_factory),
            content={"stem": f"Question {activity_id}"},
        )

    return _make


@pytest.fixture
def make_attempt():
    def _make(activity_id, attempt_guid, **fields):
        return AttemptState(activity_id=activity_id, attempt_guid=attempt_guid, **fields)

    return _make


@pytest.fixture
def build_cata():
    """CATA model with fixed choice ids and consistent rules"""

    def _build(choice_ids, correct_ids, cata_type="SimpleCATA"):
        choices = [Choice(id=i, content=rich_text(f"Choice {i}")) for i in choice_ids]
        correct = make_response(create_rule_for_ids([], []), 1, "Correct")
        incorrect = make_response(create_rule_for_ids([], []), 0, "Incorrect")
        model = CheckAllThatApplyModel(
            type=cata_type,
            stem=from_text("Select all that apply", Stem),
            choices=choices,
            authoring=CATAAuthoring(
                parts=[
                    Part(
                        id="1",
                        responses=[correct, incorrect],
                        hints=[from_text("", Hint), from_text("", Hint), from_text("Bottom out", Hint)],
                    )
                ],
                correct=ResponseMapping(choice_ids=list(correct_ids), response_id=correct.id),
                incorrect=ResponseMapping(
                    choice_ids=[i for i in choice_ids if i not in correct_ids],
                    response_id=incorrect.id,
                ),
                targeted=[] if cata_type == "TargetedCATA" else None,
            ),
        )
        update_response_rules(model)
        return model

    return _build


@pytest.fixture
def recorder():
    """Factory for recording host callbacks"""
    return CallRecorder
