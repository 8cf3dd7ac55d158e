# FILE: activity_bridge/routes/cata.py
"""
CATA authoring endpoints
"""
import inspect
import logging
from typing import Any, Dict, List
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, ValidationError

from activity_bridge.cata.actions import ACTIONS
from activity_bridge.cata.grading import evaluate_selection
from activity_bridge.cata.utils import default_cata_model
from activity_bridge.errors import ActivityBridgeError, RuleSyntaxError
from activity_bridge.models.cata import CheckAllThatApplyModel, SelectionEvaluation
from activity_bridge.models.content import RichText

logger = logging.getLogger(__name__)
router = APIRouter()


class ApplyActionRequest(BaseModel):
    """Apply one editing operation to a model"""
    model: CheckAllThatApplyModel
    action: str = Field(..., description="Name of the editing operation, e.g. add_choice")
    args: Dict[str, Any] = Field(default_factory=dict)


class EvaluateRequest(BaseModel):
    """Grade a selection"""
    model: CheckAllThatApplyModel
    selection: List[str] = Field(default_factory=list)


def _domain_error(e: ActivityBridgeError) -> HTTPException:
    if isinstance(e, RuleSyntaxError):
        return HTTPException(status_code=422, detail=f"Invalid rule: {e}")
    return HTTPException(status_code=404, detail=f"Not found: {e}")


@router.post("/default", response_model=CheckAllThatApplyModel)
async def create_default_model():
    """New Simple CATA model with consistent rules"""
    return default_cata_model()


@router.post("/apply", response_model=CheckAllThatApplyModel)
async def apply_action(request: ApplyActionRequest):
    """Apply an editing operation and return the updated model"""
    action = ACTIONS.get(request.action)
    if action is None:
        raise HTTPException(status_code=422, detail=f"Unknown action: {request.action}")

    args = dict(request.args)
    try:
        if "content" in args:
            args["content"] = RichText.model_validate(args["content"])
        inspect.signature(action).bind(request.model, **args)
    except (TypeError, ValidationError) as e:
        raise HTTPException(status_code=422, detail=f"Invalid arguments for {request.action}: {e}")

    logger.info(f"Apply CATA action: {request.action}")
    try:
        return action(request.model, **args)
    except ActivityBridgeError as e:
        raise _domain_error(e)


@router.post("/evaluate", response_model=SelectionEvaluation)
async def evaluate(request: EvaluateRequest):
    """Match a selection to the model's responses"""
    try:
        return evaluate_selection(request.model, request.selection)
    except ActivityBridgeError as e:
        raise _domain_error(e)
