# codegen/js_codegen.py
import logging
import math
import os
from typing import Mapping, Optional, Sequence

from jinja2 import Environment, FileSystemLoader

from frontend.ast import BinOpNode, CallNode, CompareNode, Node, NumNode, UnaryOpNode, VarNode, format_expr, walk
from frontend.config import DEFAULT_CONSTANT_NAMES, DEFAULT_EQUALITY_EPSILON

logger = logging.getLogger(__name__)

JS_OPERATORS = {
    '+': '+',
    '-': '-',
    '*': '*',
    '/': '/',
    '%': '%',
    '^': '**',
}


def js_number(value: float) -> str:
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'Infinity' if value > 0 else '(-Infinity)'
    if value == 0 and math.copysign(1.0, value) < 0:
        text = '-0'
    elif value.is_integer() and abs(value) < 1e16:
        text = str(int(value))
    else:
        text = repr(value)
    # A bare negative base before ** is a syntax error in JavaScript.
    return f"({text})" if text.startswith('-') else text


class JSCodeGenerator:
    """Render an AST as a fully parenthesised JavaScript expression."""

    def __init__(self, constant_names: Optional[Mapping[str, str]] = None,
                 equality_epsilon: float = DEFAULT_EQUALITY_EPSILON):
        self.constant_names = constant_names if constant_names is not None else {}
        self.equality_epsilon = equality_epsilon

    def visit_compare(self, node: CompareNode) -> str:
        left = node.left.accept(self)
        right = node.right.accept(self)
        epsilon = js_number(self.equality_epsilon)
        if node.op == '=':
            return f"(Math.abs({left} - {right}) < {epsilon})"
        if node.op == '<>':
            return f"(Math.abs({left} - {right}) >= {epsilon})"
        return f"({left} {node.op} {right})"

    def visit_binop(self, node: BinOpNode) -> str:
        left = node.left.accept(self)
        right = node.right.accept(self)
        return f"({left} {JS_OPERATORS[node.op]} {right})"

    def visit_unary(self, node: UnaryOpNode) -> str:
        return f"(-{node.operand.accept(self)})"

    def visit_call(self, node: CallNode) -> str:
        spec = node.function
        if spec is None:
            raise ValueError(f"Unsupported function: {node.func_name}")
        args = [arg.accept(self) for arg in node.args]
        if spec.name == 'log':
            # log(a, b) has no Math.* equivalent; use the change of base.
            if len(args) != 2:
                raise ValueError(f"Function log expects 2 arguments, got {len(args)}")
            return f"(Math.log2({args[0]}) / Math.log2({args[1]}))"
        return f"{spec.js_name}({', '.join(args)})"

    def visit_var(self, node: VarNode) -> str:
        return self.constant_names.get(node.name, node.name)

    def visit_num(self, node: NumNode) -> str:
        return js_number(node.value)


def generate(ast: Node, constant_names: Optional[Mapping[str, str]] = None,
             equality_epsilon: float = DEFAULT_EQUALITY_EPSILON) -> str:
    """Emit ``ast`` as a JavaScript expression using the ``Math`` library."""
    code = ast.accept(JSCodeGenerator(constant_names, equality_epsilon))
    logger.debug("generated %s", code)
    return code


def get_template_env():
    templates_dir = os.path.join(os.path.dirname(__file__), 'templates')
    return Environment(loader=FileSystemLoader(templates_dir), keep_trailing_newline=True)


def generate_function(ast: Node, params: Sequence[str], name: str = 'equation',
                      constant_names: Optional[Mapping[str, str]] = None,
                      equality_epsilon: float = DEFAULT_EQUALITY_EPSILON) -> str:
    """Emit a complete JavaScript function whose body returns the expression.

    Identifiers listed in ``params`` become parameters. Other identifiers
    found in ``constant_names`` are bound to the runtime constant at the top
    of the function body instead of being substituted inline.
    """
    if constant_names is None:
        constant_names = DEFAULT_CONSTANT_NAMES
    used = {node.name for node in walk(ast) if isinstance(node, VarNode)}
    constants = [(ident, constant_names[ident]) for ident in sorted(used)
                 if ident in constant_names and ident not in params]
    body = generate(ast, {}, equality_epsilon)

    env = get_template_env()
    template = env.get_template('function.js.j2')
    return template.render(
        name=name,
        params=list(params),
        constants=constants,
        body=body,
        doc=format_expr(ast),
    )
