# frontend/validator.py
import logging
from typing import Mapping, Optional

from .ast import CallNode, CompareNode, Node, VarNode, walk
from .diagnostics import Diagnostics

logger = logging.getLogger(__name__)


def _collect(ast: Node):
    """Referenced identifiers, called names (first-seen order) and relation count."""
    ids = {}
    calls = {}
    relations = 0
    for node in walk(ast):
        if isinstance(node, VarNode):
            ids.setdefault(node.name, None)
        elif isinstance(node, CallNode):
            calls.setdefault(node.func_name, node)
        elif isinstance(node, CompareNode):
            relations += 1
    return list(ids), list(calls.values()), relations


def validate(ast: Node, bindings: Mapping[str, float],
             diagnostics: Optional[Diagnostics] = None) -> bool:
    """Check an equation against its variable bindings.

    Unbound identifiers stop validation at once. Unused bindings are only
    warned about. Unknown functions and a relation count other than one are
    errors, and all of them are reported. Returns ``True`` when this run
    recorded no error.
    """
    if diagnostics is None:
        diagnostics = Diagnostics()
    errors_before = len(diagnostics.errors)
    ids, calls, relations = _collect(ast)

    unbound = [name for name in ids if name not in bindings]
    for name in unbound:
        diagnostics.error(f"Variable {name} is not defined")
    if unbound:
        return False

    for name in bindings:
        if name not in ids:
            diagnostics.warning(f"Variable {name} is not used")

    for call in calls:
        if call.function is None:
            diagnostics.error(f"Function {call.func_name} is not defined")

    if relations != 1:
        diagnostics.error(f"relation expression must be used once, found {relations}")

    ok = len(diagnostics.errors) == errors_before
    logger.debug("validated %d identifiers, %d calls, %d relations: %s",
                 len(ids), len(calls), relations, 'ok' if ok else 'failed')
    return ok
