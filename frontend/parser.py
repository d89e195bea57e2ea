# frontend/parser.py

import collections
import logging
from typing import Iterable, Mapping, Optional

from .ast import RELATION_OPS, Node, BinOpNode, CallNode, CompareNode, NumNode, UnaryOpNode, VarNode, depth
from .config import DEFAULT_MAX_DEPTH, DEFAULT_PRECEDENCE
from .diagnostics import Diagnostics
from .errors import ParseError
from .lexer import OPERATOR_KINDS, Token, tokenize

logger = logging.getLogger(__name__)

# Relations spelled with two adjacent single-character tokens.
COMPOSITE_OPERATORS = {
    ('LT', 'EQ'): '<=',
    ('GT', 'EQ'): '>=',
    ('LT', 'GT'): '<>',
}


class TokenStream:
    """Significant tokens of one parse with the precedence table to read them by."""

    def __init__(self, tokens: Iterable[Token], precedence: Mapping[str, int],
                 diagnostics: Diagnostics, max_depth: int):
        self.tokens = collections.deque(t for t in tokens if t.kind != 'WHITESPACE')
        self.precedence = precedence
        self.diagnostics = diagnostics
        self.max_depth = max_depth
        self.nesting = 0
        # Unary minus only absorbs operators that bind tighter than '*'.
        self.unary_precedence = precedence.get('^', max(precedence.values(), default=0) + 1)

    def peek(self, offset: int = 0) -> Optional[Token]:
        return self.tokens[offset] if len(self.tokens) > offset else None

    def next(self) -> Optional[Token]:
        return self.tokens.popleft() if self.tokens else None

    def peek_operator(self):
        """Return ``(symbol, token_count)`` for the operator at the head, or ``None``."""
        token = self.peek()
        if token is None or token.kind not in OPERATOR_KINDS:
            return None
        following = self.peek(1)
        if following is not None and following.start == token.end:
            symbol = COMPOSITE_OPERATORS.get((token.kind, following.kind))
            if symbol is not None:
                return symbol, 2
        return token.text, 1

    def operator_precedence(self) -> int:
        operator = self.peek_operator()
        if operator is None:
            return -1
        return self.precedence.get(operator[0], -1)

    def enter(self):
        """Count one level of recursive descent against ``max_depth``."""
        self.nesting += 1
        if self.nesting > self.max_depth:
            self.fail(f"expression is nested more than {self.max_depth} levels deep")

    def leave(self):
        self.nesting -= 1

    def fail(self, message: str):
        self.diagnostics.error(message)
        raise ParseError(message)


def _describe(token: Optional[Token]) -> str:
    return 'end of input' if token is None else f"'{token.text}'"


def parse_number(ts: TokenStream) -> Node:
    token = ts.next()
    # Any identifier suffix ("2x") is kept in the token but carries no value.
    return NumNode(float(token.number_text)).with_span((token.start, token.end))


def parse_paren(ts: TokenStream) -> Node:
    ts.next()  # eat (
    expr = parse_expression(ts)
    token = ts.peek()
    if token is None or token.kind != 'RPAREN':
        ts.fail(f"expected ')' but found {_describe(token)}")
    ts.next()
    return expr


def parse_identifier(ts: TokenStream) -> Node:
    token = ts.next()
    following = ts.peek()
    if following is None or following.kind != 'LPAREN':
        return VarNode(token.text).with_span((token.start, token.end))

    ts.next()  # eat (
    args = []
    closing = ts.peek()
    if closing is None or closing.kind != 'RPAREN':
        while True:
            args.append(parse_expression(ts))
            closing = ts.peek()
            if closing is not None and closing.kind == 'RPAREN':
                break
            if closing is None or closing.kind != 'COMMA':
                ts.fail(f"Expected ')' or ',' in argument list but found {_describe(closing)}")
            ts.next()  # eat ,
    ts.next()  # eat )
    return CallNode(token.text, args).with_span((token.start, closing.end))


def parse_negation(ts: TokenStream) -> Node:
    token = ts.next()  # eat -
    ts.enter()
    try:
        operand = parse_primary(ts)
        operand = parse_bin_op_rhs(ts, ts.unary_precedence, operand)
    finally:
        ts.leave()
    return UnaryOpNode('-', operand).with_span(_join_span((token.start, token.end), operand.span))


def parse_primary(ts: TokenStream) -> Node:
    """
    primary ::= identifier | identifier '(' args ')' | number
              | '(' expression ')' | '-' primary
    """
    token = ts.peek()
    if token is None:
        ts.fail("expected an expression but found end of input")
    if token.kind == 'IDENT':
        return parse_identifier(ts)
    if token.kind == 'NUMBER':
        return parse_number(ts)
    if token.kind == 'LPAREN':
        return parse_paren(ts)
    if token.kind == 'MINUS':
        return parse_negation(ts)
    ts.fail(f"unknown token when expecting an expression: {_describe(token)}")


def _join_span(first, last):
    if first is None or last is None:
        return first or last
    return (first[0], last[1])


def _make_binary(symbol: str, left: Node, right: Node) -> Node:
    node_type = CompareNode if symbol in RELATION_OPS else BinOpNode
    return node_type(left, symbol, right).with_span(_join_span(left.span, right.span))


def parse_bin_op_rhs(ts: TokenStream, min_precedence: int, lhs: Node) -> Node:
    """
    bin_op_rhs ::= (binary_operator primary)*

    Operators binding less tightly than ``min_precedence`` end this level.
    """
    while True:
        tok_precedence = ts.operator_precedence()
        if tok_precedence < min_precedence:
            return lhs

        symbol, width = ts.peek_operator()
        for _ in range(width):
            ts.next()

        rhs = parse_primary(ts)

        # If the operator after rhs binds tighter, it takes rhs as its lhs.
        if tok_precedence < ts.operator_precedence():
            rhs = parse_bin_op_rhs(ts, tok_precedence + 1, rhs)

        lhs = _make_binary(symbol, lhs, rhs)


def parse_expression(ts: TokenStream) -> Node:
    """expression ::= primary bin_op_rhs"""
    ts.enter()
    try:
        lhs = parse_primary(ts)
        return parse_bin_op_rhs(ts, 0, lhs)
    finally:
        ts.leave()


def parse(tokens: Iterable[Token], precedence: Optional[Mapping[str, int]] = None,
          diagnostics: Optional[Diagnostics] = None, max_depth: int = DEFAULT_MAX_DEPTH) -> Node:
    """Parse one top-level expression from ``tokens``.

    The first structural error is recorded in ``diagnostics`` and raised as
    :class:`ParseError`; no partial tree is returned.
    """
    if precedence is None:
        precedence = DEFAULT_PRECEDENCE
    if diagnostics is None:
        diagnostics = Diagnostics()
    ts = TokenStream(tokens, precedence, diagnostics, max_depth)
    if ts.peek() is None:
        ts.fail("expected an expression but found end of input")

    ast = parse_expression(ts)
    if ts.peek() is not None:
        ts.fail(f"unexpected token {_describe(ts.peek())} after expression")

    if depth(ast) > max_depth:
        ts.fail(f"expression is nested more than {max_depth} levels deep")
    logger.debug("parsed %r", ast)
    return ast


def parse_input(expression: str, precedence: Optional[Mapping[str, int]] = None,
                diagnostics: Optional[Diagnostics] = None, max_depth: int = DEFAULT_MAX_DEPTH) -> Node:
    return parse(tokenize(expression), precedence, diagnostics, max_depth)
