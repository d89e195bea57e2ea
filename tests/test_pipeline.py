# tests/test_pipeline.py

import json

import pytest

from driver.cli import main
from driver.pipeline import Compilation
from frontend.config import CompilerConfig
from frontend.diagnostics import Diagnostics
from frontend.errors import DifferentiationError, ParseError, ValidationError
from frontend.parser import parse_input


def test_evaluate():
    compilation = Compilation("x + 1 = 2")
    result = compilation.evaluate({'x': 1.0})
    assert result.verdict is True
    assert len(compilation.diagnostics) == 0


def test_evaluate_rejects_invalid_equation():
    compilation = Compilation("x + 1 = y")
    with pytest.raises(ValidationError):
        compilation.evaluate({'x': 1.0})
    assert "Variable y is not defined" in compilation.diagnostics.to_json()


def test_parse_error_is_recorded():
    diagnostics = Diagnostics()
    with pytest.raises(ParseError):
        Compilation("(1 + x", diagnostics=diagnostics)
    assert diagnostics.has_errors


def test_compilations_do_not_share_diagnostics():
    first = Compilation("x = 1")
    second = Compilation("x = 1")
    first.validate({'x': 1.0, 'unused': 2.0})
    assert len(first.diagnostics) == 1
    assert len(second.diagnostics) == 0


def test_config_is_applied():
    config = CompilerConfig(equality_epsilon=0.5, variable='t')
    compilation = Compilation("t^2", config)
    assert compilation.differentiate() == parse_input("2*t")
    assert Compilation("x = 1.2", config).evaluate({'x': 1.0}).verdict is True


def test_config_rejects_bad_values():
    with pytest.raises(ValueError):
        CompilerConfig(equality_epsilon=0)
    with pytest.raises(ValueError):
        CompilerConfig(precedence={'+': -1})
    config = CompilerConfig().with_overrides(max_depth=5)
    assert config.max_depth == 5
    with pytest.raises(ParseError):
        Compilation("((((((x))))))", config)


def test_differentiate_and_simplify():
    compilation = Compilation("x^2")
    assert compilation.differentiate() == parse_input("2*x")
    assert compilation.differentiate(simplified=False) != parse_input("2*x")
    with pytest.raises(DifferentiationError):
        Compilation("x = 1").differentiate()
    assert Compilation("0 + x * 1 = 2 * 3").simplify() == parse_input("x = 6")


def test_emit():
    compilation = Compilation("sin(pi * x) = 0")
    code = compilation.emit(['x'])
    assert code == "(Math.abs(Math.sin((Math.PI * x)) - 0) < 1e-05)"
    assert len(compilation.diagnostics) == 0
    assert "function f(x) {" in compilation.emit_function(['x'], 'f')


def test_emit_requires_known_identifiers():
    with pytest.raises(ValidationError):
        Compilation("x < y").emit(['x'])


def test_fold_and_to_source():
    assert Compilation("2 * (3 + x)").fold({'x': 1.0}) == 8.0
    assert Compilation("2*(3+x)").to_source() == "(2 * (3 + x))"


def test_find_root():
    result = Compilation("x^3 = 8").find_root(1.0)
    assert result.converged
    assert result.root == pytest.approx(2.0)

    config = CompilerConfig(variable='t')
    result = Compilation("t^2 = k", config).find_root(1.0, {'k': 9.0})
    assert result.root == pytest.approx(3.0)


def test_cli_root(capsys):
    with pytest.raises(SystemExit) as exit_info:
        main(['root', 'x^2 = 2', '--start', '1'])
    assert exit_info.value.code == 0
    assert capsys.readouterr().out.startswith("1.41421356")

    with pytest.raises(SystemExit) as exit_info:
        main(['root', 'sqrt(x)', '--start', '-1'])
    assert exit_info.value.code == 1


def test_cli_eval(capsys):
    with pytest.raises(SystemExit) as exit_info:
        main(['eval', 'x + 1 = 2', '--var', 'x=1'])
    assert exit_info.value.code == 0
    captured = capsys.readouterr()
    assert captured.out.strip() == "2.0 = 2.0: True"
    assert json.loads(captured.err.strip().splitlines()[-1]) == []


def test_cli_diff(capsys):
    with pytest.raises(SystemExit) as exit_info:
        main(['diff', 'x^2'])
    assert exit_info.value.code == 0
    assert capsys.readouterr().out.strip() == "(2 * x)"


def test_cli_reports_errors(capsys):
    with pytest.raises(SystemExit) as exit_info:
        main(['check', 'x < y < z', '--var', 'x=1', '--var', 'y=2', '--var', 'z=3'])
    assert exit_info.value.code == 1
    diagnostics = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert diagnostics[0]["level"] == "Error"

    with pytest.raises(SystemExit) as exit_info:
        main(['simplify', '1 +'])
    assert exit_info.value.code == 1


def test_cli_tokens(capsys):
    with pytest.raises(SystemExit) as exit_info:
        main(['tokens', 'x+1'])
    assert exit_info.value.code == 0
    assert len(capsys.readouterr().out.strip().splitlines()) == 3


if __name__ == "__main__":
    test_evaluate()
    test_evaluate_rejects_invalid_equation()
    test_parse_error_is_recorded()
    test_compilations_do_not_share_diagnostics()
    test_config_is_applied()
    test_config_rejects_bad_values()
    test_differentiate_and_simplify()
    test_emit()
    test_emit_requires_known_identifiers()
    test_fold_and_to_source()
    test_find_root()
    print("test_pipeline passed.")
