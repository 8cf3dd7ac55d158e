# FILE: activity_bridge/cata/utils.py
"""
CATA model helpers: construction, lookups and rule recomputation
"""
import logging
from typing import List

from activity_bridge.errors import UnknownChoiceError, UnknownHintError, UnknownResponseError
from activity_bridge.models.cata import (
    CATAAuthoring,
    CheckAllThatApplyModel,
    Choice,
    Part,
    Response,
    ResponseMapping,
    Stem,
)
from activity_bridge.models.content import Feedback, Hint, from_text
from activity_bridge.rules.algebra import (
    Rule,
    create_rule_for_ids,
    invert_rule,
    set_difference,
    union_rules,
)
from activity_bridge.services.correlation import generate_guid

logger = logging.getLogger(__name__)


def make_response(rule: Rule, score: float, text: str) -> Response:
    return Response(
        id=generate_guid(),
        rule=rule.to_expression(),
        score=score,
        feedback=from_text(text, Feedback),
    )


def default_cata_model() -> CheckAllThatApplyModel:
    """New Simple CATA model: one correct and one incorrect choice, three hints"""
    choice_a = from_text("Choice A", Choice)
    choice_b = from_text("Choice B", Choice)

    correct_response = make_response(create_rule_for_ids([choice_a.id], [choice_b.id]), 1, "")
    incorrect_response = make_response(
        invert_rule(create_rule_for_ids([choice_a.id], [choice_b.id])), 0, "")

    return CheckAllThatApplyModel(
        type="SimpleCATA",
        stem=from_text("", Stem),
        choices=[choice_a, choice_b],
        authoring=CATAAuthoring(
            parts=[
                Part(
                    id="1",
                    responses=[correct_response, incorrect_response],
                    hints=[from_text("", Hint), from_text("", Hint), from_text("", Hint)],
                )
            ],
            correct=ResponseMapping(choice_ids=[choice_a.id], response_id=correct_response.id),
            incorrect=ResponseMapping(choice_ids=[choice_b.id], response_id=incorrect_response.id),
        ),
    )


def is_simple_cata(model: CheckAllThatApplyModel) -> bool:
    return model.type == "SimpleCATA"


def get_choice_ids(model: CheckAllThatApplyModel) -> List[str]:
    return [choice.id for choice in model.choices]


def get_correct_choice_ids(model: CheckAllThatApplyModel) -> List[str]:
    return model.authoring.correct.choice_ids


def get_incorrect_choice_ids(model: CheckAllThatApplyModel) -> List[str]:
    return model.authoring.incorrect.choice_ids


def get_choice(model: CheckAllThatApplyModel, choice_id: str) -> Choice:
    for choice in model.choices:
        if choice.id == choice_id:
            return choice
    raise UnknownChoiceError(choice_id)


def get_responses(model: CheckAllThatApplyModel) -> List[Response]:
    return model.authoring.parts[0].responses


def get_response(model: CheckAllThatApplyModel, response_id: str) -> Response:
    for response in get_responses(model):
        if response.id == response_id:
            return response
    raise UnknownResponseError(response_id)


def get_correct_response(model: CheckAllThatApplyModel) -> Response:
    return get_response(model, model.authoring.correct.response_id)


def get_incorrect_response(model: CheckAllThatApplyModel) -> Response:
    return get_response(model, model.authoring.incorrect.response_id)


def get_hint(model: CheckAllThatApplyModel, hint_id: str) -> Hint:
    for hint in model.authoring.parts[0].hints:
        if hint.id == hint_id:
            return hint
    raise UnknownHintError(hint_id)


def _in_choice_order(model: CheckAllThatApplyModel, ids: List[str]) -> List[str]:
    # Rules depend on the classification, not on the order ids were toggled in
    wanted = set(ids)
    return [i for i in get_choice_ids(model) if i in wanted]


def update_response_rules(model: CheckAllThatApplyModel) -> None:
    """
    Regenerate every response rule from the current choices and classification.

    Simple: correct = required correct ids and no incorrect ids, incorrect =
    its negation.
    Targeted: each association matches its exact choice subset; the
    incorrect response is the union of the negated targeted rules and the
    negated correct rule. Grading precedence settles overlaps.
    """
    correct_rule = create_rule_for_ids(
        _in_choice_order(model, get_correct_choice_ids(model)),
        _in_choice_order(model, get_incorrect_choice_ids(model)))
    get_correct_response(model).rule = correct_rule.to_expression()

    if is_simple_cata(model):
        get_incorrect_response(model).rule = invert_rule(correct_rule).to_expression()
        return

    all_choice_ids = get_choice_ids(model)
    targeted_rules: List[Rule] = []
    for assoc in model.authoring.targeted or []:
        targeted_rule = create_rule_for_ids(
            _in_choice_order(model, assoc.choice_ids),
            set_difference(all_choice_ids, assoc.choice_ids))
        targeted_rules.append(targeted_rule)
        get_response(model, assoc.response_id).rule = targeted_rule.to_expression()

    get_incorrect_response(model).rule = union_rules(
        [invert_rule(rule) for rule in targeted_rules] + [invert_rule(correct_rule)]).to_expression()
