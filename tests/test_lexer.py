# tests/test_lexer.py

from frontend.lexer import tokenize


def kinds(text):
    return [token.kind for token in tokenize(text)]


def test_basic_equation():
    assert kinds("x + 1 = 2") == [
        'IDENT', 'WHITESPACE', 'PLUS', 'WHITESPACE', 'NUMBER',
        'WHITESPACE', 'EQ', 'WHITESPACE', 'NUMBER',
    ]


def test_tokenize_is_deterministic_and_lazy():
    text = "sin(x) * 2.5 <= y^2"
    assert list(tokenize(text)) == list(tokenize(text))
    stream = tokenize(text)
    assert next(stream).text == 'sin'


def test_tokens_cover_the_whole_input():
    text = "  max(x_1, 0.25) % θ\t- 3  "
    tokens = list(tokenize(text))
    assert ''.join(t.text for t in tokens) == text
    assert sum(len(t.text) for t in tokens) == len(text)
    for prev, cur in zip(tokens, tokens[1:]):
        assert prev.end == cur.start


def test_whitespace_run_is_one_token():
    tokens = list(tokenize(" \t\n "))
    assert len(tokens) == 1
    assert tokens[0].kind == 'WHITESPACE'


def test_single_character_tokens():
    assert kinds("().,=<>+-*/%|&^") == [
        'LPAREN', 'RPAREN', 'DOT', 'COMMA', 'EQ', 'LT', 'GT', 'PLUS',
        'MINUS', 'TIMES', 'DIVIDE', 'MOD', 'OR', 'AND', 'CARET',
    ]


def test_identifiers():
    tokens = list(tokenize("_a1 θ2 x"))
    idents = [t.text for t in tokens if t.kind == 'IDENT']
    assert idents == ['_a1', 'θ2', 'x']


def test_numbers():
    assert [t.text for t in tokenize("12.5")] == ['12.5']
    assert [t.text for t in tokenize("007")] == ['007']
    # A fraction needs a digit right after the dot.
    assert [(t.kind, t.text) for t in tokenize("1.")] == [('NUMBER', '1'), ('DOT', '.')]
    assert [(t.kind, t.text) for t in tokenize("1.x")] == [('NUMBER', '1'), ('DOT', '.'), ('IDENT', 'x')]


def test_number_suffix():
    token, = tokenize("2x")
    assert token.kind == 'NUMBER'
    assert token.suffix_start == 1
    assert token.number_text == '2'

    token, = tokenize("3.5em")
    assert token.suffix_start == 3
    assert token.number_text == '3.5'

    token, = tokenize("42")
    assert token.suffix_start is None
    assert token.number_text == '42'


def test_unknown_characters_never_raise():
    tokens = list(tokenize("a $ b # !"))
    unknown = [t.text for t in tokens if t.kind == 'UNKNOWN']
    assert unknown == ['$', '#', '!']


def test_empty_input():
    assert list(tokenize("")) == []


if __name__ == "__main__":
    test_basic_equation()
    test_tokenize_is_deterministic_and_lazy()
    test_tokens_cover_the_whole_input()
    test_whitespace_run_is_one_token()
    test_single_character_tokens()
    test_identifiers()
    test_numbers()
    test_number_suffix()
    test_unknown_characters_never_raise()
    test_empty_input()
    print("test_lexer passed.")
