# optimizer/simplify.py
import logging

import numpy as np

from frontend.ast import BinOpNode, CallNode, CompareNode, Node, NumNode, UnaryOpNode, VarNode
from runtime.evaluator import BINARY_OPS

logger = logging.getLogger(__name__)


def _is_const(node: Node, value=None) -> bool:
    if not isinstance(node, NumNode):
        return False
    return value is None or node.value == value


def _fold(op, *values) -> NumNode:
    with np.errstate(all='ignore'):
        return NumNode(float(op(*(np.float64(v) for v in values))))


class SimplifyVisitor:
    """Bottom-up constant folding and algebraic identities.

    Every rule returns either a literal or one of its already simplified
    children, so one pass reaches a fixed point.
    """

    def visit_compare(self, node: CompareNode) -> Node:
        return CompareNode(node.left.accept(self), node.op, node.right.accept(self))

    def visit_binop(self, node: BinOpNode) -> Node:
        left = node.left.accept(self)
        right = node.right.accept(self)
        op = node.op

        # Constant folding
        if _is_const(left) and _is_const(right):
            return _fold(BINARY_OPS[op], left.value, right.value)

        if op == '+':
            # x + 0 = x, 0 + x = x
            if _is_const(right, 0):
                return left
            if _is_const(left, 0):
                return right
        elif op == '-':
            # x - 0 = x
            if _is_const(right, 0):
                return left
        elif op == '*':
            # x * 0 = 0
            if _is_const(left, 0) or _is_const(right, 0):
                return NumNode(0)
            # x * 1 = x, 1 * x = x
            if _is_const(right, 1):
                return left
            if _is_const(left, 1):
                return right
        elif op == '/':
            # x / 1 = x
            if _is_const(right, 1):
                return left
        elif op == '^':
            # x ^ 0 = 1, x ^ 1 = x, 0 ^ x = 0
            if _is_const(right, 0):
                return NumNode(1)
            if _is_const(right, 1):
                return left
            if _is_const(left, 0):
                return NumNode(0)

        return BinOpNode(left, op, right)

    def visit_unary(self, node: UnaryOpNode) -> Node:
        operand = node.operand.accept(self)
        if _is_const(operand):
            return NumNode(-operand.value)
        # --x = x
        if isinstance(operand, UnaryOpNode):
            return operand.operand
        return UnaryOpNode('-', operand)

    def visit_call(self, node: CallNode) -> Node:
        args = [arg.accept(self) for arg in node.args]
        spec = node.function
        if spec is not None and len(args) == spec.arity and all(_is_const(arg) for arg in args):
            return _fold(spec.op, *(arg.value for arg in args))
        return CallNode(node.func_name, args)

    def visit_var(self, node: VarNode) -> Node:
        return VarNode(node.name)

    def visit_num(self, node: NumNode) -> Node:
        return NumNode(node.value)


def simplify(ast: Node) -> Node:
    """Return a simplified copy of ``ast``; the input tree is left untouched."""
    result = ast.accept(SimplifyVisitor())
    logger.debug("simplified %r -> %r", ast, result)
    return result
