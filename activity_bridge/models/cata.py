"""
Check-all-that-apply (CATA) authoring models
"""
from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from activity_bridge.models.content import Feedback, Hint, Identifiable, RichText

CATAType = Literal["SimpleCATA", "TargetedCATA"]


class Choice(Identifiable):
    """A selectable choice"""


class Stem(Identifiable):
    """The question prompt"""


class Response(BaseModel):
    """
    A gradable response.

    rule is the canonical text of a rule built by activity_bridge.rules;
    it is regenerated whenever the choice set or classification changes.
    """
    id: str
    rule: str
    score: float = 0
    feedback: Feedback


class Part(BaseModel):
    """A gradable part with its responses and hints"""
    id: str = "1"
    responses: List[Response] = Field(default_factory=list)
    hints: List[Hint] = Field(default_factory=list)
    scoring_strategy: str = "average"


class ResponseMapping(BaseModel):
    """Association of a set of choice ids with the response that grades it"""
    choice_ids: List[str] = Field(default_factory=list)
    response_id: str


class CATAAuthoring(BaseModel):
    """Authoring-only data: classification of choices and targeted feedback"""
    parts: List[Part]
    correct: ResponseMapping
    incorrect: ResponseMapping
    targeted: Optional[List[ResponseMapping]] = None
    preview_text: str = ""


class CheckAllThatApplyModel(BaseModel):
    """A CATA activity model, Simple or Targeted"""
    type: CATAType = "SimpleCATA"
    stem: Stem
    choices: List[Choice] = Field(default_factory=list)
    authoring: CATAAuthoring


class SelectionEvaluation(BaseModel):
    """Outcome of grading a selection against a model"""
    selection: List[str]
    response_id: Optional[str] = None
    score: float = 0
    out_of: float = 0
    feedback: Optional[RichText] = None
    matched_response_ids: List[str] = Field(default_factory=list)
