# frontend/ast.py
import copy
import math
from typing import List, Optional, Tuple
from abc import ABC, abstractmethod

from runtime.functions import FunctionSpec, lookup

Span = Tuple[int, int]

ARITHMETIC_OPS = ('+', '-', '*', '/', '%', '^')
RELATION_OPS = ('=', '<>', '<', '>', '<=', '>=')


class Node(ABC):
    """Base AST node with visitor pattern support.

    Nodes are never mutated after construction; passes that rewrite a tree
    build a new one. Attributes starting with ``_`` (the source span, the
    resolved function) are bookkeeping and take no part in equality.
    """

    _span: Optional[Span] = None

    @abstractmethod
    def accept(self, visitor):
        pass

    @abstractmethod
    def children(self) -> List['Node']:
        pass

    @property
    def span(self) -> Optional[Span]:
        return self._span

    def with_span(self, span: Optional[Span]) -> 'Node':
        self._span = span
        return self

    def _fields(self):
        return {k: v for k, v in self.__dict__.items() if not k.startswith('_')}

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self._fields() == other._fields()

    __hash__ = None

    def __repr__(self):
        attrs = [f"{k}={v!r}" for k, v in self._fields().items()]
        return f"{self.__class__.__name__}({', '.join(attrs)})"


class CompareNode(Node):
    """Relational node; a valid equation holds exactly one."""
    def __init__(self, left: Node, op: str, right: Node):
        if op not in RELATION_OPS:
            raise ValueError(f"Unknown relation: {op}")
        self.left = left
        self.op = op  # '=', '<>', '<', '>', '<=', '>='
        self.right = right

    def accept(self, visitor):
        return visitor.visit_compare(self)

    def children(self):
        return [self.left, self.right]


class BinOpNode(Node):
    def __init__(self, left: Node, op: str, right: Node):
        if op not in ARITHMETIC_OPS:
            raise ValueError(f"Unknown binary operation: {op}")
        self.left = left
        self.op = op  # '+', '-', '*', '/', '%', '^'
        self.right = right

    def accept(self, visitor):
        return visitor.visit_binop(self)

    def children(self):
        return [self.left, self.right]


class UnaryOpNode(Node):
    def __init__(self, op: str, operand: Node):
        if op != '-':
            raise ValueError(f"Unknown unary operation: {op}")
        self.op = op
        self.operand = operand

    def accept(self, visitor):
        return visitor.visit_unary(self)

    def children(self):
        return [self.operand]


class CallNode(Node):
    """Call of a built-in function.

    The registry entry is resolved once here; ``function`` is ``None`` for
    names the registry does not know, which the validator reports.
    """
    def __init__(self, func_name: str, args: List[Node]):
        self.func_name = func_name
        self.args = list(args)
        self._function = lookup(func_name)

    @property
    def function(self) -> Optional[FunctionSpec]:
        return self._function

    def __deepcopy__(self, memo):
        # The registry entry is shared configuration, never copied.
        args = [copy.deepcopy(arg, memo) for arg in self.args]
        return CallNode(self.func_name, args).with_span(self._span)

    def accept(self, visitor):
        return visitor.visit_call(self)

    def children(self):
        return list(self.args)


class VarNode(Node):
    def __init__(self, name: str):
        self.name = name

    def accept(self, visitor):
        return visitor.visit_var(self)

    def children(self):
        return []


class NumNode(Node):
    def __init__(self, value: float):
        self.value = float(value)

    def accept(self, visitor):
        return visitor.visit_num(self)

    def children(self):
        return []


def walk(node: Node):
    """Yield every node of the tree in pre-order, using an explicit stack."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children()))


def depth(node: Node) -> int:
    """Height of the tree, computed without recursion."""
    deepest = 0
    stack = [(node, 1)]
    while stack:
        current, level = stack.pop()
        deepest = max(deepest, level)
        stack.extend((child, level + 1) for child in current.children())
    return deepest


def contains_var(node: Node, name: str) -> bool:
    return any(isinstance(n, VarNode) and n.name == name for n in walk(node))


def _format_number(value: float) -> str:
    if value != value:
        return 'nan'
    if value == 0 and math.copysign(1.0, value) < 0:
        return '-0'
    if value in (float('inf'), float('-inf')):
        return 'inf' if value > 0 else '-inf'
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


class ExprFormatter:
    """Render a tree back to fully parenthesised equation text."""

    def visit_compare(self, node: CompareNode) -> str:
        return f"({node.left.accept(self)} {node.op} {node.right.accept(self)})"

    def visit_binop(self, node: BinOpNode) -> str:
        return f"({node.left.accept(self)} {node.op} {node.right.accept(self)})"

    def visit_unary(self, node: UnaryOpNode) -> str:
        return f"(-{node.operand.accept(self)})"

    def visit_call(self, node: CallNode) -> str:
        args = ', '.join(arg.accept(self) for arg in node.args)
        return f"{node.func_name}({args})"

    def visit_var(self, node: VarNode) -> str:
        return node.name

    def visit_num(self, node: NumNode) -> str:
        text = _format_number(node.value)
        return f"({text})" if text.startswith('-') else text


def format_expr(node: Node) -> str:
    return node.accept(ExprFormatter())


def print_ast(node: Node, level: int = 0):
    indent = '  ' * level
    if isinstance(node, CompareNode):
        print(f"{indent}Compare: {node.op}")
    elif isinstance(node, BinOpNode):
        print(f"{indent}Op: {node.op}")
    elif isinstance(node, UnaryOpNode):
        print(f"{indent}Unary: {node.op}")
    elif isinstance(node, CallNode):
        print(f"{indent}Call: {node.func_name}")
    elif isinstance(node, VarNode):
        print(f"{indent}Var: {node.name}")
    elif isinstance(node, NumNode):
        print(f"{indent}Num: {_format_number(node.value)}")
    for child in node.children():
        print_ast(child, level + 1)
