# driver/cli.py
"""
Command line front end for the equation compiler.

    eqc tokens "x + 1 = 2"
    eqc eval "x + 1 = 2" --var x=1
    eqc diff "sin(x) * x"
    eqc emit "x^2 < y" --param x --param y --function inside
    eqc root "x^2 = 2" --start 1
"""
import argparse
import logging
import sys

from frontend.ast import format_expr, print_ast
from frontend.config import CompilerConfig
from frontend.diagnostics import Diagnostics
from frontend.errors import CompileError
from frontend.lexer import tokenize
from driver.pipeline import Compilation
from runtime.roots import DEFAULT_ITERATIONS

logger = logging.getLogger(__name__)


def _binding(text):
    name, sep, value = text.partition('=')
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {text!r}")
    try:
        return name.strip(), float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"value of {name!r} is not a number: {value!r}")


def build_parser():
    parser = argparse.ArgumentParser(prog='eqc', description="Compile single-relation equations.")
    parser.add_argument('-v', '--verbose', action='store_true', help="log every stage at DEBUG level")
    parser.add_argument('--epsilon', type=float, default=None, help="tolerance of '=' comparisons")
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('tokens', help="print the token stream")
    p.add_argument('expression')

    p = sub.add_parser('ast', help="print the parsed tree")
    p.add_argument('expression')

    for command, help_text in [('check', "validate against bindings"),
                               ('eval', "evaluate against bindings")]:
        p = sub.add_parser(command, help=help_text)
        p.add_argument('expression')
        p.add_argument('--var', dest='bindings', type=_binding, action='append', default=[],
                       metavar='NAME=VALUE')

    p = sub.add_parser('simplify', help="constant-fold and simplify")
    p.add_argument('expression')

    p = sub.add_parser('diff', help="differentiate")
    p.add_argument('expression')
    p.add_argument('--variable', default=None)
    p.add_argument('--raw', action='store_true', help="do not simplify the derivative")

    p = sub.add_parser('root', help="find a root by Newton iteration")
    p.add_argument('expression')
    p.add_argument('--start', type=float, default=0.0, metavar='X0')
    p.add_argument('--iterations', type=int, default=DEFAULT_ITERATIONS)
    p.add_argument('--variable', default=None)
    p.add_argument('--var', dest='bindings', type=_binding, action='append', default=[],
                   metavar='NAME=VALUE')

    p = sub.add_parser('emit', help="generate JavaScript")
    p.add_argument('expression')
    p.add_argument('--param', dest='params', action='append', default=[])
    p.add_argument('--function', default=None, metavar='NAME',
                   help="wrap the expression in a named function")
    return parser


def run(args) -> int:
    if args.command == 'tokens':
        for token in tokenize(args.expression):
            print(f"{token.kind:<10} {token.text!r}")
        return 0

    overrides = {}
    if args.epsilon is not None:
        overrides['equality_epsilon'] = args.epsilon
    if getattr(args, 'variable', None):
        overrides['variable'] = args.variable
    config = CompilerConfig().with_overrides(**overrides)

    diagnostics = Diagnostics()
    status = 0
    try:
        compilation = Compilation(args.expression, config, diagnostics)
        if args.command == 'ast':
            print_ast(compilation.ast)
        elif args.command == 'check':
            status = 0 if compilation.validate(dict(args.bindings)) else 1
        elif args.command == 'eval':
            result = compilation.evaluate(dict(args.bindings))
            print(f"{result.lhs} {result.operator} {result.rhs}: {result.verdict}")
        elif args.command == 'simplify':
            print(format_expr(compilation.simplify()))
        elif args.command == 'diff':
            print(format_expr(compilation.differentiate(simplified=not args.raw)))
        elif args.command == 'root':
            result = compilation.find_root(args.start, dict(args.bindings), args.iterations)
            print(f"{result.root} (residual {result.residual}, {result.iterations} iterations)")
            status = 0 if result.converged else 1
        elif args.command == 'emit':
            if args.function:
                print(compilation.emit_function(args.params, args.function), end='')
            else:
                print(compilation.emit(args.params))
    except CompileError as exc:
        logger.debug("compile failed: %s", exc)
        status = 1

    print(diagnostics.to_json(), file=sys.stderr)
    return status


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )
    sys.exit(run(args))


if __name__ == "__main__":
    main()
