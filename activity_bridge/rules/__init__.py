"""
Response rule algebra
"""
from activity_bridge.rules.algebra import (
    Rule,
    create_rule_for_ids,
    intersect_rules,
    invert_rule,
    set_difference,
    union_rules,
)
from activity_bridge.rules.parser import parse_rule
