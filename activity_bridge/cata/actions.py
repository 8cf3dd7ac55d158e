# FILE: activity_bridge/cata/actions.py
"""
CATA editing operations

Each operation mutates the model in place and returns it. Operations that
change the choice set or the correct/incorrect classification finish by
regenerating every response rule.
"""
import logging
from typing import Callable, Dict, List

from activity_bridge.cata.utils import (
    get_choice,
    get_choice_ids,
    get_hint,
    get_response,
    get_responses,
    is_simple_cata,
    make_response,
    update_response_rules,
)
from activity_bridge.models.cata import CheckAllThatApplyModel, Choice, ResponseMapping
from activity_bridge.models.content import Hint, RichText, from_text, to_simple_text
from activity_bridge.rules.algebra import create_rule_for_ids

logger = logging.getLogger(__name__)


def _remove_from_list(item, items: List) -> None:
    if item in items:
        items.remove(item)


def toggle_type(model: CheckAllThatApplyModel) -> CheckAllThatApplyModel:
    """Switch between Simple and Targeted, starting or discarding targeted feedback"""
    if is_simple_cata(model):
        model.type = "TargetedCATA"
        model.authoring.targeted = []
    else:
        targeted_ids = {assoc.response_id for assoc in model.authoring.targeted or []}
        part = model.authoring.parts[0]
        part.responses = [r for r in part.responses if r.id not in targeted_ids]
        model.type = "SimpleCATA"
        model.authoring.targeted = None

    update_response_rules(model)
    return model


def edit_stem(model: CheckAllThatApplyModel, content: RichText) -> CheckAllThatApplyModel:
    model.stem.content = content
    model.authoring.preview_text = to_simple_text(content)
    return model


def add_choice(model: CheckAllThatApplyModel) -> CheckAllThatApplyModel:
    """Append an empty choice, classified as incorrect"""
    new_choice = from_text("", Choice)

    model.choices.append(new_choice)
    model.authoring.incorrect.choice_ids.append(new_choice.id)
    update_response_rules(model)
    return model


def edit_choice_content(
    model: CheckAllThatApplyModel,
    choice_id: str,
    content: RichText
) -> CheckAllThatApplyModel:
    get_choice(model, choice_id).content = content
    return model


def remove_choice(model: CheckAllThatApplyModel, choice_id: str) -> CheckAllThatApplyModel:
    """Remove a choice everywhere it is referenced; unknown ids leave the model as is"""
    model.choices = [choice for choice in model.choices if choice.id != choice_id]

    _remove_from_list(choice_id, model.authoring.correct.choice_ids)
    _remove_from_list(choice_id, model.authoring.incorrect.choice_ids)

    if not is_simple_cata(model):
        for assoc in model.authoring.targeted or []:
            _remove_from_list(choice_id, assoc.choice_ids)

    update_response_rules(model)
    return model


def toggle_choice_correctness(model: CheckAllThatApplyModel, choice_id: str) -> CheckAllThatApplyModel:
    """Move a choice between the correct and incorrect sets"""
    if choice_id not in get_choice_ids(model):
        logger.warning(f"Ignoring correctness toggle for unknown choice {choice_id}")
        return model

    # targeted response choices do not change
    for ids in (model.authoring.correct.choice_ids, model.authoring.incorrect.choice_ids):
        if choice_id in ids:
            ids.remove(choice_id)
        else:
            ids.append(choice_id)

    update_response_rules(model)
    return model


def edit_response_feedback(
    model: CheckAllThatApplyModel,
    response_id: str,
    content: RichText
) -> CheckAllThatApplyModel:
    get_response(model, response_id).feedback.content = content
    return model


def add_targeted_feedback(model: CheckAllThatApplyModel) -> CheckAllThatApplyModel:
    """Add targeted feedback for the empty selection (Targeted models only)"""
    if is_simple_cata(model):
        return model

    response = make_response(create_rule_for_ids([], get_choice_ids(model)), 0, "")
    get_responses(model).append(response)
    model.authoring.targeted.append(ResponseMapping(choice_ids=[], response_id=response.id))
    update_response_rules(model)
    return model


def remove_targeted_feedback(model: CheckAllThatApplyModel, response_id: str) -> CheckAllThatApplyModel:
    """Remove a targeted response and its association (Targeted models only)"""
    if is_simple_cata(model):
        return model

    assoc = next(
        (a for a in model.authoring.targeted or [] if a.response_id == response_id), None)
    if assoc is None:
        logger.debug(f"No targeted feedback for response {response_id}")
        return model

    model.authoring.targeted.remove(assoc)
    part = model.authoring.parts[0]
    part.responses = [r for r in part.responses if r.id != response_id]
    update_response_rules(model)
    return model


def edit_targeted_feedback_choices(
    model: CheckAllThatApplyModel,
    response_id: str,
    choice_ids: List[str]
) -> CheckAllThatApplyModel:
    """Reserved: editing the choices of a targeted association is not supported yet"""
    logger.debug(f"edit_targeted_feedback_choices ignored for response {response_id}")
    return model


def add_hint(model: CheckAllThatApplyModel) -> CheckAllThatApplyModel:
    """Insert a new cognitive hint just before the bottom-out hint"""
    hints = model.authoring.parts[0].hints
    bottom_out_index = max(len(hints) - 1, 0)
    hints.insert(bottom_out_index, from_text("", Hint))
    return model


def edit_hint(model: CheckAllThatApplyModel, hint_id: str, content: RichText) -> CheckAllThatApplyModel:
    get_hint(model, hint_id).content = content
    return model


def remove_hint(model: CheckAllThatApplyModel, hint_id: str) -> CheckAllThatApplyModel:
    part = model.authoring.parts[0]
    part.hints = [h for h in part.hints if h.id != hint_id]
    return model


ACTIONS: Dict[str, Callable[..., CheckAllThatApplyModel]] = {
    "toggle_type": toggle_type,
    "edit_stem": edit_stem,
    "add_choice": add_choice,
    "edit_choice_content": edit_choice_content,
    "remove_choice": remove_choice,
    "toggle_choice_correctness": toggle_choice_correctness,
    "edit_response_feedback": edit_response_feedback,
    "add_targeted_feedback": add_targeted_feedback,
    "remove_targeted_feedback": remove_targeted_feedback,
    "edit_targeted_feedback_choices": edit_targeted_feedback_choices,
    "add_hint": add_hint,
    "edit_hint": edit_hint,
    "remove_hint": remove_hint,
}
