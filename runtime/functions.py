# runtime/functions.py
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import numpy as np


@dataclass(frozen=True)
class FunctionSpec:
    """A built-in function callable from an equation.

    ``op`` works on numpy scalars and arrays alike. ``js_name`` is the name
    the code generator emits for the JavaScript runtime.
    """
    name: str
    arity: int
    op: Callable
    js_name: str


def _log(value, base):
    return np.log(value) / np.log(base)


def _round(value):
    # Math.round rounds halves towards +inf; np.round would round to even.
    return np.floor(value + 0.5)


FUNCTIONS: Dict[str, FunctionSpec] = {
    spec.name: spec for spec in [
        FunctionSpec('abs', 1, np.abs, 'Math.abs'),
        FunctionSpec('acos', 1, np.arccos, 'Math.acos'),
        FunctionSpec('acosh', 1, np.arccosh, 'Math.acosh'),
        FunctionSpec('asin', 1, np.arcsin, 'Math.asin'),
        FunctionSpec('asinh', 1, np.arcsinh, 'Math.asinh'),
        FunctionSpec('atan', 1, np.arctan, 'Math.atan'),
        FunctionSpec('atan2', 2, np.arctan2, 'Math.atan2'),
        FunctionSpec('atanh', 1, np.arctanh, 'Math.atanh'),
        FunctionSpec('cbrt', 1, np.cbrt, 'Math.cbrt'),
        FunctionSpec('ceil', 1, np.ceil, 'Math.ceil'),
        FunctionSpec('cos', 1, np.cos, 'Math.cos'),
        FunctionSpec('cosh', 1, np.cosh, 'Math.cosh'),
        FunctionSpec('exp', 1, np.exp, 'Math.exp'),
        FunctionSpec('expm1', 1, np.expm1, 'Math.expm1'),
        FunctionSpec('floor', 1, np.floor, 'Math.floor'),
        FunctionSpec('hypot', 2, np.hypot, 'Math.hypot'),
        FunctionSpec('ln', 1, np.log, 'Math.log'),
        FunctionSpec('ln1p', 1, np.log1p, 'Math.log1p'),
        # No direct Math.* equivalent; the code generator expands it inline.
        FunctionSpec('log', 2, _log, ''),
        FunctionSpec('log10', 1, np.log10, 'Math.log10'),
        FunctionSpec('log2', 1, np.log2, 'Math.log2'),
        FunctionSpec('max', 2, np.maximum, 'Math.max'),
        FunctionSpec('min', 2, np.minimum, 'Math.min'),
        FunctionSpec('pow', 2, np.power, 'Math.pow'),
        FunctionSpec('round', 1, _round, 'Math.round'),
        FunctionSpec('sin', 1, np.sin, 'Math.sin'),
        FunctionSpec('sinh', 1, np.sinh, 'Math.sinh'),
        FunctionSpec('sqrt', 1, np.sqrt, 'Math.sqrt'),
        FunctionSpec('tan', 1, np.tan, 'Math.tan'),
        FunctionSpec('tanh', 1, np.tanh, 'Math.tanh'),
    ]
}


def lookup(name: str) -> Optional[FunctionSpec]:
    return FUNCTIONS.get(name)
