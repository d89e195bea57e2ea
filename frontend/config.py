# frontend/config.py
from dataclasses import dataclass, field, replace
from typing import Dict

# Binding strength of every binary operator the parser can build. Relations
# share the lowest level so a chain like "x < y < z" nests left to right and
# is then rejected by the validator.
DEFAULT_PRECEDENCE: Dict[str, int] = {
    '=': 10,
    '<>': 10,
    '<': 10,
    '>': 10,
    '<=': 10,
    '>=': 10,
    '+': 20,
    '-': 20,
    '*': 40,
    '/': 40,
    '%': 40,
    '^': 60,
}

DEFAULT_EQUALITY_EPSILON = 1e-5

DEFAULT_CONSTANT_NAMES: Dict[str, str] = {
    'pi': 'Math.PI',
    'e': 'Math.E',
}

DEFAULT_MAX_DEPTH = 200

DEFAULT_VARIABLE = 'x'


@dataclass(frozen=True)
class CompilerConfig:
    """Read-only settings shared by every stage of one compile."""
    precedence: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_PRECEDENCE))
    equality_epsilon: float = DEFAULT_EQUALITY_EPSILON
    constant_names: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_CONSTANT_NAMES))
    max_depth: int = DEFAULT_MAX_DEPTH
    variable: str = DEFAULT_VARIABLE

    def __post_init__(self):
        if self.equality_epsilon <= 0:
            raise ValueError("equality_epsilon must be positive")
        if self.max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        for op, prec in self.precedence.items():
            if prec < 0:
                raise ValueError(f"Precedence of '{op}' must be non-negative, got {prec}")

    def with_overrides(self, **overrides) -> 'CompilerConfig':
        return replace(self, **overrides)
