"""
Attempt models
"""
from typing import Any, List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from activity_bridge.models.content import Feedback, Hint


class PartState(BaseModel):
    """State of one part of an activity attempt"""
    model_config = ConfigDict(frozen=True)

    attempt_guid: str
    attempt_number: int = 1
    date_evaluated: Optional[datetime] = None
    score: Optional[float] = None
    out_of: Optional[float] = None
    response: Optional[Any] = None
    feedback: Optional[Feedback] = None
    hints: List[Hint] = Field(default_factory=list)
    part_id: str
    has_more_attempts: bool = True
    has_more_hints: bool = True


class AttemptState(BaseModel):
    """
    Latest known state of an activity attempt.

    Frozen: a graded attempt replaces the previous one wholesale.
    """
    model_config = ConfigDict(frozen=True)

    activity_id: Optional[str] = None
    attempt_guid: str
    attempt_number: int = 1
    date_evaluated: Optional[datetime] = None
    score: Optional[float] = None
    out_of: Optional[float] = None
    parts: List[PartState] = Field(default_factory=list)
    has_more_attempts: bool = True
    has_more_hints: bool = True


class AttemptRecord(BaseModel):
    """One entry of the append-only attempt history"""
    model_config = ConfigDict(frozen=True)

    activity_id: str
    attempt_guid: str
    attempt: AttemptState
    recorded_at: datetime
