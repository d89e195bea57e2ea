# runtime/roots.py
import logging
import math
from dataclasses import dataclass
from typing import Mapping, Optional

import numpy as np

from frontend.ast import BinOpNode, CompareNode, Node
from frontend.config import DEFAULT_VARIABLE
from frontend.diagnostics import Diagnostics
from optimizer.simplify import simplify
from runtime.evaluator import evaluate_expr
from symbolic.differentiate import differentiate

logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 100
DEFAULT_TOLERANCE = 1e-12


@dataclass(frozen=True)
class RootResult:
    root: float
    residual: float
    iterations: int
    converged: bool


def residual_function(ast: Node) -> Node:
    """The expression whose zero solves ``ast``: ``left - right`` for a relation."""
    if isinstance(ast, CompareNode):
        return BinOpNode(ast.left, '-', ast.right)
    return ast


def find_root(ast: Node, x0: float, iterations: int = DEFAULT_ITERATIONS,
              variable: str = DEFAULT_VARIABLE, bindings: Optional[Mapping[str, float]] = None,
              tolerance: float = DEFAULT_TOLERANCE,
              diagnostics: Optional[Diagnostics] = None) -> RootResult:
    """Newton iteration on ``ast`` starting from ``x0``.

    Each step moves to where the tangent crosses zero,
    ``x = (gradient * x - y) / gradient``. Iteration stops once a step is no
    larger than ``tolerance`` (converged), when the gradient is NaN, or when
    the next estimate is not finite. Other identifiers take their values
    from ``bindings``.
    """
    if diagnostics is None:
        diagnostics = Diagnostics()
    function = residual_function(ast)
    gradient = simplify(differentiate(function, variable, diagnostics))

    env = dict(bindings or {})
    x = float(x0)
    converged = False
    steps = 0
    for steps in range(1, iterations + 1):
        env[variable] = x
        y = evaluate_expr(function, env, diagnostics)
        slope = evaluate_expr(gradient, env, diagnostics)
        if math.isnan(slope):
            break
        with np.errstate(all='ignore'):
            next_x = float((np.float64(slope) * x - y) / slope)
        if not math.isfinite(next_x):
            break
        logger.debug("newton step %d: x=%r y=%r gradient=%r -> %r", steps, x, y, slope, next_x)
        step = abs(next_x - x)
        x = next_x
        if step <= tolerance:
            converged = True
            break

    env[variable] = x
    residual = evaluate_expr(function, env, diagnostics)
    if not converged:
        diagnostics.warning(f"root search from {x0} did not converge after {steps} iterations")
    return RootResult(x, residual, steps, converged)
