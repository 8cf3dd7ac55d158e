# FILE: activity_bridge/cata/grading.py
"""
Grade a student's selection against a CATA model
"""
import logging
from typing import Iterable, List

from activity_bridge.cata.utils import get_correct_response, get_incorrect_response, get_responses
from activity_bridge.models.cata import CheckAllThatApplyModel, Response, SelectionEvaluation
from activity_bridge.rules.parser import parse_rule

logger = logging.getLogger(__name__)


def match_responses(model: CheckAllThatApplyModel, selection: Iterable[str]) -> List[Response]:
    """Responses whose rule is satisfied by selection, in model order"""
    selected = frozenset(selection)
    return [r for r in get_responses(model) if parse_rule(r.rule).evaluate(selected)]


def evaluate_selection(model: CheckAllThatApplyModel, selection: Iterable[str]) -> SelectionEvaluation:
    """
    Pick the response for a selection.

    Targeted responses win over the incorrect catch-all; the correct response
    wins over everything.
    """
    selection = list(selection)
    matches = match_responses(model, selection)
    out_of = max((r.score for r in get_responses(model)), default=0)

    if not matches:
        logger.warning(f"No response matched selection {selection}")
        return SelectionEvaluation(selection=selection, out_of=out_of)

    correct_id = get_correct_response(model).id
    incorrect_id = get_incorrect_response(model).id
    ranked = sorted(
        matches,
        key=lambda r: 0 if r.id == correct_id else (2 if r.id == incorrect_id else 1))
    chosen = ranked[0]

    return SelectionEvaluation(
        selection=selection,
        response_id=chosen.id,
        score=chosen.score,
        out_of=out_of,
        feedback=chosen.feedback.content,
        matched_response_ids=[r.id for r in matches],
    )
