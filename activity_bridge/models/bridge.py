"""
Bridge protocol models: inbound events, tagged results, outbound notifications
"""
import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

from activity_bridge.models.attempts import AttemptState, PartState
from activity_bridge.models.content import Hint


class BridgeEventType(str, Enum):
    """Inbound event names an activity may dispatch on the bus"""
    SAVE = "save"
    SUBMIT = "submit"
    RESET = "reset"
    SAVE_PART = "savePart"
    SUBMIT_PART = "submitPart"
    RESET_PART = "resetPart"
    REQUEST_HINT = "requestHint"
    SUBMIT_EVALUATIONS = "submitEvaluations"
    READY = "ready"
    RESIZE_PART = "resizePart"


class NotificationType(str, Enum):
    """Outbound notifications pushed from the host to an activity"""
    CHECK_STARTED = "checkStarted"
    CHECK_COMPLETE = "checkComplete"
    CONTEXT_CHANGED = "contextChanged"
    STATE_CHANGED = "stateChanged"


class NavigationMode(str, Enum):
    REVIEW = "review"
    VIEWER = "viewer"


class BridgeState(str, Enum):
    UNMOUNTED = "unmounted"
    LISTENING = "listening"
    READY = "ready"


@dataclass
class BridgeEvent:
    """
    An event dispatched by an activity.

    continuation, when present, is settled at most once by the bridge that
    the event is addressed to. It stays pending when no bridge claims it.
    """
    type: BridgeEventType
    attempt_guid: str
    part_attempt_guid: Optional[str] = None
    payload: Any = None
    continuation: "Optional[asyncio.Future[Any]]" = None


class Success(BaseModel):
    """Tagged success result; operation specific fields are carried as extras"""
    model_config = ConfigDict(extra="allow")

    type: Literal["success"] = "success"


class EvaluationResponse(Success):
    actions: List[Dict[str, Any]] = Field(default_factory=list)


class ResetActivityResponse(Success):
    attempt_state: AttemptState
    model: Dict[str, Any] = Field(default_factory=dict)


class PartActivityResponse(Success):
    attempt_state: PartState


class RequestHintResponse(Success):
    hint: Optional[Hint] = None
    has_more_hints: bool = False


class ReadyResponse(Success):
    """Result of the ready handshake; env is the activity's local scripting scope"""
    env: Any = None
