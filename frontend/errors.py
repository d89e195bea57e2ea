# frontend/errors.py


class CompileError(Exception):
    """Base class for every failure raised by the compiler stages."""


class ParseError(CompileError):
    pass


class ValidationError(CompileError):
    pass


class EvaluationError(CompileError):
    pass


class UnknownFunctionError(EvaluationError):
    """A call reached the evaluator without a registry entry.

    The validator rejects unknown function names, so this only happens when
    evaluation is run on a tree that was never validated.
    """


class DifferentiationError(CompileError):
    pass
