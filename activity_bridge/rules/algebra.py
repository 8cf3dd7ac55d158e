# FILE: activity_bridge/rules/algebra.py
"""
Response rule algebra

Rules are immutable boolean expressions over the set of choice ids a
student selected. They are only ever built through the functions in this
module; their canonical text (to_expression) is what gets stored on a
Response and compared for equality.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Iterable, List, Sequence, Tuple


class Rule:
    """Base class for rule expressions"""

    def evaluate(self, selection: AbstractSet[str]) -> bool:
        raise NotImplementedError

    def to_expression(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.to_expression()


@dataclass(frozen=True)
class Match(Rule):
    """True when choice_id is selected"""
    choice_id: str

    def evaluate(self, selection: AbstractSet[str]) -> bool:
        return self.choice_id in selection

    def to_expression(self) -> str:
        return f"input like {{{self.choice_id}}}"


@dataclass(frozen=True)
class Not(Rule):
    rule: Rule

    def evaluate(self, selection: AbstractSet[str]) -> bool:
        return not self.rule.evaluate(selection)

    def to_expression(self) -> str:
        return f"!({self.rule.to_expression()})"


@dataclass(frozen=True)
class AllOf(Rule):
    """Conjunction; the empty conjunction is always true"""
    rules: Tuple[Rule, ...]

    def evaluate(self, selection: AbstractSet[str]) -> bool:
        return all(r.evaluate(selection) for r in self.rules)

    def to_expression(self) -> str:
        if not self.rules:
            return "true"
        return " && ".join(_operand(r) for r in self.rules)


@dataclass(frozen=True)
class AnyOf(Rule):
    """Disjunction; the empty disjunction is always false"""
    rules: Tuple[Rule, ...]

    def evaluate(self, selection: AbstractSet[str]) -> bool:
        return any(r.evaluate(selection) for r in self.rules)

    def to_expression(self) -> str:
        if not self.rules:
            return "false"
        return " || ".join(_operand(r) for r in self.rules)


def _operand(rule: Rule) -> str:
    # Nested conjunctions/disjunctions are parenthesized so that the text
    # parses back to the same tree.
    if isinstance(rule, (AllOf, AnyOf)) and rule.rules:
        return f"({rule.to_expression()})"
    return rule.to_expression()


ALWAYS = AllOf(())
NEVER = AnyOf(())


def create_match_rule(choice_id: str) -> Rule:
    return Match(choice_id)


def invert_rule(rule: Rule) -> Rule:
    """Logical negation"""
    return Not(rule)


def intersect_rules(rules: Iterable[Rule]) -> Rule:
    """Logical AND across a sequence of rules"""
    rules = tuple(rules)
    if len(rules) == 1:
        return rules[0]
    return AllOf(rules)


def union_rules(rules: Iterable[Rule]) -> Rule:
    """Logical OR across a sequence of rules"""
    rules = tuple(rules)
    if len(rules) == 1:
        return rules[0]
    return AnyOf(rules)


def create_rule_for_ids(required_ids: Sequence[str], excluded_ids: Sequence[str]) -> Rule:
    """
    Rule satisfied exactly when the selection contains every id in
    required_ids and none in excluded_ids.

    Both sequences may be empty: with nothing required and nothing excluded
    the rule matches every selection.
    """
    return intersect_rules(
        [create_match_rule(i) for i in required_ids]
        + [invert_rule(create_match_rule(i)) for i in excluded_ids]
    )


def set_difference(all_ids: Sequence[str], subset: Iterable[str]) -> List[str]:
    """Ids of all_ids not in subset, preserving all_ids order"""
    excluded = set(subset)
    return [i for i in all_ids if i not in excluded]
