# tests/test_roots.py

import math

import pytest

from frontend.diagnostics import Diagnostics, Level
from frontend.errors import DifferentiationError
from frontend.parser import parse_input
from runtime.roots import find_root


@pytest.mark.parametrize("text, x0, expected", [
    ("x^2 - 2", 1.0, math.sqrt(2)),
    ("x^2 = 2", -1.0, -math.sqrt(2)),
    ("cos(x)", 1.0, math.pi / 2),
    ("sin(x) = 0.5", 0.0, math.pi / 6),
    ("x^3 - x - 2", 1.5, 1.5213797068045676),
])
def test_known_roots(text, x0, expected):
    result = find_root(parse_input(text), x0)
    assert result.converged
    assert result.root == pytest.approx(expected, abs=1e-10)
    assert result.residual == pytest.approx(0.0, abs=1e-9)
    assert result.iterations < 100


def test_other_identifiers_come_from_bindings():
    result = find_root(parse_input("exp(t) = a"), 0.0, variable='t', bindings={'a': 3.0})
    assert result.converged
    assert result.root == pytest.approx(math.log(3.0))


def test_nan_gradient_stops_the_search():
    diagnostics = Diagnostics()
    result = find_root(parse_input("sqrt(x)"), -1.0, diagnostics=diagnostics)
    assert not result.converged
    assert result.root == -1.0
    assert result.iterations == 1
    assert diagnostics[0].level is Level.WARNING


def test_flat_function_stops_the_search():
    result = find_root(parse_input("x - x + 5"), 2.0)
    assert not result.converged
    assert result.root == 2.0
    assert result.residual == 5.0


def test_iteration_limit():
    result = find_root(parse_input("x^2 - 2"), 100.0, iterations=2)
    assert not result.converged
    assert result.iterations == 2


def test_underivable_equation_is_an_error():
    diagnostics = Diagnostics()
    with pytest.raises(DifferentiationError):
        find_root(parse_input("x % 2"), 1.0, diagnostics=diagnostics)
    assert diagnostics.has_errors


if __name__ == "__main__":
    test_known_roots("x^2 - 2", 1.0, math.sqrt(2))
    test_known_roots("cos(x)", 1.0, math.pi / 2)
    test_other_identifiers_come_from_bindings()
    test_nan_gradient_stops_the_search()
    test_flat_function_stops_the_search()
    test_iteration_limit()
    test_underivable_equation_is_an_error()
    print("test_roots passed.")
