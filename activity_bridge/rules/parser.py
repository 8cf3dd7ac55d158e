# FILE: activity_bridge/rules/parser.py
"""
Parser for the canonical rule text produced by Rule.to_expression()

Grammar:
    expr    := and ("||" and)*
    and     := unary ("&&" unary)*
    unary   := "!" unary | "(" expr ")" | "input like {" id "}" | "true" | "false"
"""
import re
from typing import List, Tuple

from activity_bridge.errors import RuleSyntaxError
from activity_bridge.rules.algebra import ALWAYS, NEVER, AllOf, AnyOf, Match, Not, Rule

_TOKEN_RE = re.compile(
    r"\s*(?:"
    r"(?P<match>input\s+like\s+\{(?P<id>[^}]*)\})"
    r"|(?P<op>&&|\|\||!|\(|\))"
    r"|(?P<literal>true|false)"
    r")"
)


def _tokenize(text: str) -> List[Tuple[str, str]]:
    tokens = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None or m.end() == pos:
            raise RuleSyntaxError(f"Unexpected input at {pos}: {text[pos:pos + 20]!r}")
        if m.group("match") is not None:
            tokens.append(("match", m.group("id")))
        elif m.group("op") is not None:
            tokens.append(("op", m.group("op")))
        else:
            tokens.append(("literal", m.group("literal")))
        pos = m.end()
    return tokens


class _Parser:
    def __init__(self, tokens: List[Tuple[str, str]]):
        self.tokens = tokens
        self.pos = 0

    def peek(self, value: str) -> bool:
        return self.pos < len(self.tokens) and self.tokens[self.pos] == ("op", value)

    def expect(self, value: str):
        if not self.peek(value):
            raise RuleSyntaxError(f"Expected {value!r} at token {self.pos}")
        self.pos += 1

    def parse_expr(self) -> Rule:
        operands = [self.parse_and()]
        while self.peek("||"):
            self.pos += 1
            operands.append(self.parse_and())
        return operands[0] if len(operands) == 1 else AnyOf(tuple(operands))

    def parse_and(self) -> Rule:
        operands = [self.parse_unary()]
        while self.peek("&&"):
            self.pos += 1
            operands.append(self.parse_unary())
        return operands[0] if len(operands) == 1 else AllOf(tuple(operands))

    def parse_unary(self) -> Rule:
        if self.pos >= len(self.tokens):
            raise RuleSyntaxError("Unexpected end of rule")
        kind, value = self.tokens[self.pos]
        if kind == "op" and value == "!":
            self.pos += 1
            return Not(self.parse_unary())
        if kind == "op" and value == "(":
            self.pos += 1
            inner = self.parse_expr()
            self.expect(")")
            return inner
        if kind == "match":
            self.pos += 1
            return Match(value)
        if kind == "literal":
            self.pos += 1
            return ALWAYS if value == "true" else NEVER
        raise RuleSyntaxError(f"Unexpected token {value!r}")


def parse_rule(text: str) -> Rule:
    """Parse canonical rule text back into a Rule"""
    parser = _Parser(_tokenize(text))
    rule = parser.parse_expr()
    if parser.pos != len(parser.tokens):
        raise RuleSyntaxError(f"Trailing input after token {parser.pos}")
    return rule
