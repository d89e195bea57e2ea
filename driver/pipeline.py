# driver/pipeline.py
import logging
from typing import Mapping, Optional, Sequence

from frontend.ast import Node, VarNode, format_expr, walk
from frontend.config import CompilerConfig
from frontend.diagnostics import Diagnostics
from frontend.errors import ValidationError
from frontend.lexer import tokenize
from frontend.parser import parse
from frontend.validator import validate
from codegen.js_codegen import generate, generate_function
from optimizer.simplify import simplify
from runtime.evaluator import EvalResult, evaluate, evaluate_expr
from runtime.roots import DEFAULT_ITERATIONS, RootResult, find_root
from symbolic.differentiate import differentiate

logger = logging.getLogger(__name__)


class Compilation:
    """One compile of one equation.

    Owns the diagnostics of the compile, so separate ``Compilation`` objects
    can be used side by side. Construction parses the source and raises
    :class:`ParseError` on malformed input.
    """

    def __init__(self, source: str, config: Optional[CompilerConfig] = None,
                 diagnostics: Optional[Diagnostics] = None):
        self.source = source
        self.config = config if config is not None else CompilerConfig()
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.ast: Node = parse(tokenize(source), self.config.precedence,
                               self.diagnostics, self.config.max_depth)
        logger.debug("compiled %r", source)

    def identifiers(self):
        return sorted({node.name for node in walk(self.ast) if isinstance(node, VarNode)})

    def validate(self, bindings: Mapping[str, float]) -> bool:
        return validate(self.ast, bindings, self.diagnostics)

    def _require_valid(self, bindings: Mapping[str, float]):
        if not self.validate(bindings):
            raise ValidationError(f"equation {self.source!r} failed validation")

    def evaluate(self, bindings: Mapping[str, float]) -> EvalResult:
        self._require_valid(bindings)
        return evaluate(self.ast, bindings, self.config.equality_epsilon, self.diagnostics)

    def fold(self, bindings: Optional[Mapping[str, float]] = None):
        return evaluate_expr(self.ast, bindings or {}, self.diagnostics)

    def simplify(self) -> Node:
        return simplify(self.ast)

    def differentiate(self, simplified: bool = True) -> Node:
        derivative = differentiate(self.ast, self.config.variable, self.diagnostics)
        return simplify(derivative) if simplified else derivative

    def find_root(self, x0: float, bindings: Optional[Mapping[str, float]] = None,
                  iterations: int = DEFAULT_ITERATIONS) -> RootResult:
        return find_root(self.ast, x0, iterations, self.config.variable, bindings,
                         diagnostics=self.diagnostics)

    def _codegen_bindings(self, params: Sequence[str]):
        # Constants of the target runtime count as bound when they are used.
        used = set(self.identifiers())
        names = list(params) + [name for name in self.config.constant_names
                                if name in used and name not in params]
        return {name: 0.0 for name in names}

    def emit(self, params: Sequence[str]) -> str:
        self._require_valid(self._codegen_bindings(params))
        return generate(self.ast, self.config.constant_names, self.config.equality_epsilon)

    def emit_function(self, params: Sequence[str], name: str = 'equation') -> str:
        self._require_valid(self._codegen_bindings(params))
        return generate_function(self.ast, params, name, self.config.constant_names,
                                 self.config.equality_epsilon)

    def to_source(self) -> str:
        return format_expr(self.ast)
