# tests/test_evaluator.py

import math

import numpy as np
import pytest

from frontend.diagnostics import Diagnostics
from frontend.errors import EvaluationError, UnknownFunctionError
from frontend.parser import parse_input
from runtime.evaluator import evaluate, evaluate_expr


def test_equality():
    result = evaluate(parse_input("x + 1 = 2"), {'x': 1.0}, 0.001)
    assert result.lhs == 2.0
    assert result.rhs == 2.0
    assert result.operator == '='
    assert result.verdict is True
    assert result


def test_ordering():
    assert evaluate(parse_input("x < y"), {'x': 1.0, 'y': 2.0}).verdict is True
    assert evaluate(parse_input("x > y"), {'x': 1.0, 'y': 2.0}).verdict is False
    assert evaluate(parse_input("x <= 1"), {'x': 1.0}).verdict is True
    assert evaluate(parse_input("x >= 1"), {'x': 1.0}).verdict is True
    assert evaluate(parse_input("x <> 1"), {'x': 2.0}).verdict is True
    assert evaluate(parse_input("x <> 1"), {'x': 1.0}).verdict is False


def test_equality_is_approximate():
    ast = parse_input("x = 1")
    assert evaluate(ast, {'x': 1.0001}, 1e-3).verdict is True
    assert evaluate(ast, {'x': 1.0001}, 1e-5).verdict is False
    assert evaluate(parse_input("x = 0.1 + 0.2"), {'x': 0.3}).verdict is True


def test_division_by_zero_follows_ieee():
    result = evaluate(parse_input("x / 0 > 1"), {'x': 1.0})
    assert result.lhs == math.inf
    assert result.verdict is True

    result = evaluate(parse_input("0 / 0 = x"), {'x': 0.0})
    assert math.isnan(result.lhs)
    assert result.verdict is False

    assert math.isnan(evaluate_expr(parse_input("x % 0"), {'x': 1.0}))


def test_remainder_truncates():
    assert evaluate_expr(parse_input("x % 3"), {'x': -7.0}) == -1.0
    assert evaluate_expr(parse_input("7.5 % 2"), {}) == 1.5


def test_functions():
    assert evaluate_expr(parse_input("round(x)"), {'x': 2.5}) == 3.0
    assert evaluate_expr(parse_input("round(x)"), {'x': -2.5}) == -2.0
    assert evaluate(parse_input("log(8, 2) = 3"), {}).verdict is True
    assert evaluate_expr(parse_input("hypot(3, 4)"), {}) == 5.0
    assert evaluate_expr(parse_input("max(x, 2) + min(x, 2)"), {'x': 5.0}) == 7.0
    assert evaluate_expr(parse_input("ln1p(0) + expm1(0)"), {}) == 0.0
    assert evaluate_expr(parse_input("-x^2"), {'x': 3.0}) == -9.0


def test_extra_arguments_are_ignored_with_a_warning():
    diagnostics = Diagnostics()
    result = evaluate(parse_input("max(x, 1, 5) = 1"), {'x': 0.0}, diagnostics=diagnostics)
    assert result.verdict is True
    assert len(diagnostics.warnings) == 1
    assert "max" in diagnostics.warnings[0].message


def test_missing_arguments_fail():
    diagnostics = Diagnostics()
    with pytest.raises(EvaluationError):
        evaluate(parse_input("atan2(x) = 1"), {'x': 1.0}, diagnostics=diagnostics)
    assert diagnostics.has_errors


def test_unknown_function_is_an_invariant_violation():
    with pytest.raises(UnknownFunctionError):
        evaluate(parse_input("foo(x) = 1"), {'x': 1.0})


def test_relation_must_be_outermost():
    with pytest.raises(EvaluationError):
        evaluate(parse_input("(x = 1) + 1"), {'x': 1.0})
    with pytest.raises(EvaluationError):
        evaluate(parse_input("x + 1"), {'x': 1.0})


def test_unbound_variable_fails():
    with pytest.raises(EvaluationError):
        evaluate(parse_input("x = 1"), {})


def test_evaluate_expr_returns_float():
    value = evaluate_expr(parse_input("x * 2"), {'x': 1.5})
    assert isinstance(value, float)
    assert value == 3.0


def test_evaluate_expr_samples_arrays():
    xs = np.linspace(-2.0, 2.0, 41)
    ast = parse_input("x^2 + sin(x)")
    ys = evaluate_expr(ast, {'x': xs})
    np.testing.assert_allclose(ys, xs ** 2 + np.sin(xs))
    for x, y in zip(xs[::10], ys[::10]):
        assert evaluate_expr(ast, {'x': x}) == pytest.approx(y)


def test_evaluate_with_array_bindings():
    xs = np.array([0.0, 1.0, 2.0])
    result = evaluate(parse_input("x < 1.5"), {'x': xs})
    np.testing.assert_array_equal(result.verdict, [True, True, False])


if __name__ == "__main__":
    test_equality()
    test_ordering()
    test_equality_is_approximate()
    test_division_by_zero_follows_ieee()
    test_remainder_truncates()
    test_functions()
    test_extra_arguments_are_ignored_with_a_warning()
    test_missing_arguments_fail()
    test_unknown_function_is_an_invariant_violation()
    test_relation_must_be_outermost()
    test_unbound_variable_fails()
    test_evaluate_expr_returns_float()
    test_evaluate_expr_samples_arrays()
    test_evaluate_with_array_bindings()
    print("test_evaluator passed.")
