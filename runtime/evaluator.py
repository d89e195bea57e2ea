# runtime/evaluator.py
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import numpy as np

from frontend.ast import BinOpNode, CallNode, CompareNode, Node, NumNode, UnaryOpNode, VarNode
from frontend.config import DEFAULT_EQUALITY_EPSILON
from frontend.diagnostics import Diagnostics
from frontend.errors import EvaluationError, UnknownFunctionError

logger = logging.getLogger(__name__)

# '%' truncates like JavaScript's remainder, so both back ends agree on
# negative operands.
BINARY_OPS = {
    '+': np.add,
    '-': np.subtract,
    '*': np.multiply,
    '/': np.divide,
    '%': np.fmod,
    '^': np.power,
}

RELATIONS = {
    '=': lambda lhs, rhs, eps: np.abs(lhs - rhs) < eps,
    '<>': lambda lhs, rhs, eps: np.abs(lhs - rhs) >= eps,
    '<': lambda lhs, rhs, eps: lhs < rhs,
    '>': lambda lhs, rhs, eps: lhs > rhs,
    '<=': lambda lhs, rhs, eps: lhs <= rhs,
    '>=': lambda lhs, rhs, eps: lhs >= rhs,
}


@dataclass(frozen=True)
class EvalResult:
    lhs: Any
    operator: str
    rhs: Any
    verdict: Any

    def __bool__(self):
        return bool(np.all(self.verdict))


def _unwrap(value):
    """Plain Python scalars for 0-d results, arrays otherwise."""
    if np.ndim(value) == 0:
        return value.item() if hasattr(value, 'item') else value
    return value


class EvaluationVisitor:
    """Reduce a relation-free expression to a float64 value (or array)."""

    def __init__(self, bindings: Mapping[str, Any], diagnostics: Diagnostics):
        self.bindings = {name: np.asarray(value, dtype=np.float64) for name, value in bindings.items()}
        self.diagnostics = diagnostics

    def fail(self, message: str, error=EvaluationError):
        self.diagnostics.error(message)
        raise error(message)

    def visit_compare(self, node: CompareNode):
        self.fail(f"relation '{node.op}' cannot be used as a value")

    def visit_binop(self, node: BinOpNode):
        left = node.left.accept(self)
        right = node.right.accept(self)
        return BINARY_OPS[node.op](left, right)

    def visit_unary(self, node: UnaryOpNode):
        return np.negative(node.operand.accept(self))

    def visit_call(self, node: CallNode):
        spec = node.function
        if spec is None:
            self.fail(f"Function {node.func_name} is not defined", UnknownFunctionError)
        supplied = len(node.args)
        if supplied < spec.arity:
            self.fail(f"Function {spec.name} expects {spec.arity} arguments, got {supplied}")
        if supplied > spec.arity:
            self.diagnostics.warning(
                f"Function {spec.name} expects {spec.arity} arguments, got {supplied}; "
                f"extra arguments are ignored")
        args = [arg.accept(self) for arg in node.args[:spec.arity]]
        return spec.op(*args)

    def visit_var(self, node: VarNode):
        if node.name not in self.bindings:
            self.fail(f"Variable {node.name} is not defined")
        return self.bindings[node.name]

    def visit_num(self, node: NumNode):
        return np.float64(node.value)


def evaluate_expr(ast: Node, bindings: Mapping[str, Any],
                  diagnostics: Optional[Diagnostics] = None):
    """Fold a relation-free expression with the given bindings.

    Bindings may be numpy arrays, in which case the expression is evaluated
    element-wise and an array comes back. Division and remainder by zero give
    inf/NaN as in IEEE arithmetic.
    """
    if diagnostics is None:
        diagnostics = Diagnostics()
    visitor = EvaluationVisitor(bindings, diagnostics)
    with np.errstate(all='ignore'):
        return _unwrap(ast.accept(visitor))


def evaluate(ast: Node, bindings: Mapping[str, Any],
             equality_epsilon: float = DEFAULT_EQUALITY_EPSILON,
             diagnostics: Optional[Diagnostics] = None) -> EvalResult:
    """Evaluate both sides of an equation and decide its relation.

    The tree is expected to have passed validation and to have its relation
    at the root. Equality is approximate: ``|lhs - rhs| < equality_epsilon``.
    """
    if diagnostics is None:
        diagnostics = Diagnostics()
    if not isinstance(ast, CompareNode):
        message = "equation must have a relation as its outermost operation"
        diagnostics.error(message)
        raise EvaluationError(message)

    visitor = EvaluationVisitor(bindings, diagnostics)
    with np.errstate(all='ignore'):
        lhs = ast.left.accept(visitor)
        rhs = ast.right.accept(visitor)
        verdict = RELATIONS[ast.op](lhs, rhs, equality_epsilon)

    result = EvalResult(_unwrap(lhs), ast.op, _unwrap(rhs), _unwrap(verdict))
    logger.debug("evaluated %s %s %s -> %s", result.lhs, result.operator, result.rhs, result.verdict)
    return result
