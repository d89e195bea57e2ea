# symbolic/differentiate.py
import copy
import logging
from typing import Callable, Dict, List, Optional, Tuple

from frontend.ast import (
    BinOpNode, CallNode, CompareNode, Node, NumNode, UnaryOpNode, VarNode, contains_var,
)
from frontend.config import DEFAULT_VARIABLE
from frontend.diagnostics import Diagnostics
from frontend.errors import DifferentiationError

logger = logging.getLogger(__name__)

# A derivative together with the pending sign factors f/abs(f) collected
# below it; they are multiplied in once the whole tree is done.
Derivative = Tuple[Node, List[Node]]

RELATION_NAMES = {
    '=': 'an equality',
    '<>': 'a not-equal',
    '<': 'a less than',
    '>': 'a greater than',
    '<=': 'a less than or equal',
    '>=': 'a greater than or equal',
}


def _c(node: Node) -> Node:
    # Output trees never share nodes with the input or with each other.
    return copy.deepcopy(node)


def _num(value: float) -> Node:
    return NumNode(value)


def _add(a, b):
    return BinOpNode(a, '+', b)


def _sub(a, b):
    return BinOpNode(a, '-', b)


def _mul(a, b):
    return BinOpNode(a, '*', b)


def _div(a, b):
    return BinOpNode(a, '/', b)


def _pow(a, b):
    return BinOpNode(a, '^', b)


def _call(name, *args):
    return CallNode(name, list(args))


# f'(g) * g' for each supported single-argument function, given g and g'.
FUNCTION_RULES: Dict[str, Callable[[Node, Node], Node]] = {
    # (sin f)' = cos(f) * f'
    'sin': lambda f, df: _mul(_call('cos', _c(f)), df),
    # (cos f)' = -sin(f) * f'
    'cos': lambda f, df: _mul(UnaryOpNode('-', _call('sin', _c(f))), df),
    # (tan f)' = f' / cos(f)^2
    'tan': lambda f, df: _div(df, _pow(_call('cos', _c(f)), _num(2))),
    # (ln f)' = f' / f
    'ln': lambda f, df: _div(df, _c(f)),
    # (ln1p f)' = f' / (f + 1)
    'ln1p': lambda f, df: _div(df, _add(_c(f), _num(1))),
    # (log2 f)' = f' / (f * ln 2)
    'log2': lambda f, df: _div(df, _mul(_c(f), _call('ln', _num(2)))),
    # (log10 f)' = f' / (f * ln 10)
    'log10': lambda f, df: _div(df, _mul(_c(f), _call('ln', _num(10)))),
    # (sqrt f)' = f' / (2 * sqrt(f))
    'sqrt': lambda f, df: _div(df, _mul(_num(2), _call('sqrt', _c(f)))),
    # (cbrt f)' = f' / (3 * cbrt(f)^2)
    'cbrt': lambda f, df: _div(df, _mul(_num(3), _pow(_call('cbrt', _c(f)), _num(2)))),
    # (exp f)' = exp(f) * f'
    'exp': lambda f, df: _mul(_call('exp', _c(f)), df),
    # (exp f - 1)' = exp(f) * f'
    'expm1': lambda f, df: _mul(_call('exp', _c(f)), df),
}


class Differentiator:
    """Symbolic derivative with respect to a single variable."""

    def __init__(self, variable: str = DEFAULT_VARIABLE):
        self.variable = variable

    def diff(self, node: Node) -> Derivative:
        return node.accept(self)

    def depends(self, node: Node) -> bool:
        return contains_var(node, self.variable)

    def visit_compare(self, node: CompareNode) -> Derivative:
        raise DifferentiationError(f"Cannot differentiate {RELATION_NAMES[node.op]} expression")

    def visit_unary(self, node: UnaryOpNode) -> Derivative:
        d, pending = self.diff(node.operand)
        return UnaryOpNode('-', d), pending

    def visit_binop(self, node: BinOpNode) -> Derivative:
        if node.op == '%':
            raise DifferentiationError("Cannot differentiate a modulo expression")
        if node.op == '^':
            return self._power(node.left, node.right)

        f, g = node.left, node.right
        df, pending_f = self.diff(f)
        dg, pending_g = self.diff(g)
        pending = pending_f + pending_g

        if node.op == '+':
            return _add(df, dg), pending
        if node.op == '-':
            return _sub(df, dg), pending
        if node.op == '*':
            # (f * g)' = f' * g + f * g'
            return _add(_mul(df, _c(g)), _mul(_c(f), dg)), pending
        # (f / g)' = (f' * g - f * g') / g^2
        return _div(_sub(_mul(df, _c(g)), _mul(_c(f), dg)), _pow(_c(g), _num(2))), pending

    def _power(self, base: Node, exponent: Node) -> Derivative:
        in_base = self.depends(base)
        in_exponent = self.depends(exponent)

        if not in_base and not in_exponent:
            return _num(0), []

        if in_base and not in_exponent:
            # (f ^ c)' = c * f^(c - 1) * f'
            d_base, pending = self.diff(base)
            power = _pow(_c(base), _sub(_c(exponent), _num(1)))
            return _mul(_mul(_c(exponent), power), d_base), pending

        if in_exponent and not in_base:
            # (c ^ g)' = c^g * ln(c) * g'
            d_exponent, pending = self.diff(exponent)
            return _mul(_mul(_pow(_c(base), _c(exponent)), _call('ln', _c(base))), d_exponent), pending

        # (f ^ g)' = (g' * ln(f) + g * (f' / f)) * f^g, only valid for f > 0
        d_base, pending_base = self.diff(base)
        d_exponent, pending_exponent = self.diff(exponent)
        inner = _add(
            _mul(d_exponent, _call('ln', _c(base))),
            _mul(_c(exponent), _div(d_base, _c(base))),
        )
        return _mul(inner, _pow(_c(base), _c(exponent))), pending_exponent + pending_base

    def visit_call(self, node: CallNode) -> Derivative:
        name = node.func_name
        args = node.args

        if name == 'log' and len(args) == 2:
            # log(a, b) = ln(a) / ln(b)
            return self.diff(_div(_call('ln', _c(args[0])), _call('ln', _c(args[1]))))
        if name == 'pow' and len(args) == 2:
            return self._power(args[0], args[1])

        if name == 'abs' and len(args) == 1:
            # (abs f)' = f' * f / abs(f); the sign factor is deferred.
            f = args[0]
            df, pending = self.diff(f)
            return df, pending + [_div(_c(f), _call('abs', _c(f)))]

        rule = FUNCTION_RULES.get(name)
        if rule is None:
            raise DifferentiationError(f"Cannot differentiate function {name}")
        if len(args) != 1:
            raise DifferentiationError(
                f"Cannot differentiate function {name} with {len(args)} arguments, expected 1")
        df, pending = self.diff(args[0])
        return rule(args[0], df), pending

    def visit_var(self, node: VarNode) -> Derivative:
        return _num(1 if node.name == self.variable else 0), []

    def visit_num(self, node: NumNode) -> Derivative:
        return _num(0), []


def differentiate(ast: Node, variable: str = DEFAULT_VARIABLE,
                  diagnostics: Optional[Diagnostics] = None) -> Node:
    """Return the derivative of ``ast`` with respect to ``variable``.

    Relations, ``%`` and functions without a derivative rule raise
    :class:`DifferentiationError`; the message is also recorded in
    ``diagnostics`` when one is given. The result is not simplified.
    """
    try:
        derivative, pending = Differentiator(variable).diff(ast)
    except DifferentiationError as exc:
        if diagnostics is not None:
            diagnostics.error(str(exc))
        raise

    for factor in pending:
        derivative = _mul(derivative, factor)
    logger.debug("d/d%s %r -> %r", variable, ast, derivative)
    return derivative
