import pytest

from plugins.graphing_calculator.core import LexError, tokenize


def _kinds(text):
    return [token.kind for token in tokenize(text)]


def test_tokenize_mixed_expression():
    tokens = tokenize("sin(x) + 2.5*pi")
    assert [t.kind for t in tokens] == [
        "identifier",
        "lparen",
        "identifier",
        "rparen",
        "operator",
        "number",
        "operator",
        "identifier",
        "end",
    ]
    assert tokens[0].value == "sin"
    assert tokens[5].value == 2.5
    assert tokens[5].position == 9


def test_whitespace_is_skipped_and_end_marker_added():
    assert _kinds("  1 \t+\n2 ") == ["number", "operator", "number", "end"]
    assert _kinds("") == ["end"]


def test_numbers_accept_optional_decimal_point():
    values = [t.value for t in tokenize("3 .5 4.") if t.kind == "number"]
    assert values == [3.0, 0.5, 4.0]


def test_identifiers_are_maximal_letter_runs():
    tokens = tokenize("sqrtx")
    assert tokens[0].kind == "identifier"
    assert tokens[0].value == "sqrtx"


def test_comma_and_parentheses():
    assert _kinds("(,)") == ["lparen", "comma", "rparen", "end"]


def test_bare_decimal_point_is_rejected():
    with pytest.raises(LexError) as excinfo:
        tokenize("1 + .")
    assert excinfo.value.kind == "bad_number"
    assert excinfo.value.position == 4


@pytest.mark.parametrize("text", ["2 % 3", "x = 1", "a_b", "2 ** 3 $", "π"])
def test_unrecognized_characters_are_rejected(text):
    with pytest.raises(LexError) as excinfo:
        tokenize(text)
    assert excinfo.value.kind == "bad_character"


def test_incomplete_expression_is_lexically_valid():
    assert _kinds("2+") == ["number", "operator", "end"]
