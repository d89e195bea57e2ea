# frontend/lexer.py
import re
from typing import Iterator, NamedTuple, Optional


class Token(NamedTuple):
    kind: str
    text: str
    start: int
    # Offset inside ``text`` where a number literal's suffix begins.
    suffix_start: Optional[int] = None

    @property
    def end(self) -> int:
        return self.start + len(self.text)

    @property
    def number_text(self) -> str:
        if self.suffix_start is None:
            return self.text
        return self.text[:self.suffix_start]


# A leading zero followed by more digits is consumed as one digit run; there
# is no separate octal or leading-zero form.
token_specification = [
    ('WHITESPACE', r'\s+'),
    ('IDENT',      r'[^\W\d]\w*'),
    ('NUMBER',     r'(?P<DIGITS>\d+(?:\.\d+)?)(?P<SUFFIX>[^\W\d]\w*)?'),
    ('LPAREN',     r'\('),
    ('RPAREN',     r'\)'),
    ('DOT',        r'\.'),
    ('COMMA',      r','),
    ('EQ',         r'='),
    ('LT',         r'<'),
    ('GT',         r'>'),
    ('PLUS',       r'\+'),
    ('MINUS',      r'-'),
    ('TIMES',      r'\*'),
    ('DIVIDE',     r'/'),
    ('MOD',        r'%'),
    ('OR',         r'\|'),
    ('AND',        r'&'),
    ('CARET',      r'\^'),
    ('UNKNOWN',    r'.'),
]

# Only these kinds can act as binary operators; the parser looks their text
# up in the precedence table.
OPERATOR_KINDS = frozenset(['EQ', 'LT', 'GT', 'PLUS', 'MINUS', 'TIMES', 'DIVIDE', 'MOD', 'CARET'])

_TOKEN_RE = re.compile(
    '|'.join(f'(?P<{name}>{pattern})' for name, pattern in token_specification),
    re.DOTALL,
)


def tokenize(text: str) -> Iterator[Token]:
    """Lazily split ``text`` into tokens, whitespace included.

    Never raises: characters that fit no rule come out as ``UNKNOWN`` tokens
    and are left for the parser to report.
    """
    for mo in _TOKEN_RE.finditer(text):
        kind = mo.lastgroup
        suffix_start = None
        if kind == 'NUMBER' and mo.group('SUFFIX') is not None:
            suffix_start = len(mo.group('DIGITS'))
        yield Token(kind, mo.group(), mo.start(), suffix_start)
