"""Test the combinators built from engine primitives."""

import pytest

import parcook
import parsetest
from parcook import Literal, Pattern


@pytest.mark.parametrize(
    "text,found,remaining",
    [
        ("-5", True, "5"),
        ("5", False, "5"),
        ("", False, ""),
    ],
)
def test_has(text, found, remaining):
    """Test has reports whether a literal was present."""
    result = parcook.parse(text, parcook.has("-"))
    parsetest.assert_success(result, remaining=remaining)
    assert result.value is found


def test_has_rule():
    """Test has with a rule that may partly match."""
    @parcook.rule
    def pair(session):
        session.match(Literal("a"))
        session.match(Literal("b"))

    parsetest.assert_success(parcook.parse("abc", parcook.has(pair)), True, remaining="c")
    # A partial match consumes nothing
    result = parcook.parse("acb", parcook.has(pair))
    parsetest.assert_success(result, remaining="acb")
    assert result.value is False


def test_has_choice():
    """Test has with raw choice alternatives."""
    result = parcook.parse("yes", parcook.has(["no", "yes"]))
    parsetest.assert_success(result, True, remaining="")


def test_optional():
    """Test optional returns the match or None."""
    def grammar(session):
        sign = session.match(parcook.optional("+", "-"))
        digits = session.match(Pattern(r"^\d+"))[0]
        return (sign, digits)

    parsetest.assert_success(parcook.parse("-12", grammar), ("-", "12"))
    parsetest.assert_success(parcook.parse("+12", grammar), ("+", "12"))
    parsetest.assert_success(parcook.parse("12", grammar), (None, "12"))


def test_optional_rule_value():
    """Test optional passes through rule values."""
    @parcook.rule
    def minutes(session):
        session.match(Literal(":"))
        return int(session.match(Pattern(r"^\d+"))[0])

    parsetest.assert_success(parcook.parse(":30", parcook.optional(minutes)), 30)
    result = parcook.parse("am", parcook.optional(minutes))
    parsetest.assert_success(result, remaining="am")
    assert result.value is None


def test_must_end():
    """Test must_end only matches exhausted input."""
    parsetest.assert_success(parcook.parse("", parcook.must_end))
    error = parsetest.assert_failure(parcook.parse("x", parcook.must_end), remaining="x", iteration=0)
    assert error.failed_node == parcook.END


def test_must_end_ignores_trailing_newline_rule():
    """Test a trailing newline is not the end of input."""
    result = parcook.parse("\n", parcook.must_end)
    parsetest.assert_failure(result, remaining="\n")


def test_must_end_in_grammar():
    """Test must_end failure is nested under the rule."""
    def grammar(session):
        session.match(Literal("ab"))
        session.match(parcook.must_end)
        return "done"

    parsetest.assert_success(parcook.parse("ab", grammar), "done")
    error = parsetest.assert_failure(parcook.parse("abc", grammar), remaining="c", iteration=1)
    assert error.failed_node == parcook.must_end
    assert error.nested == (parcook.ParseError(0, parcook.END),)


def test_has_more():
    """Test looping while input remains."""
    def grammar(session):
        letters = []
        while session.match(parcook.has_more):
            letters.append(session.match(Pattern(r"^[a-z]"))[0])
        return letters

    parsetest.assert_success(parcook.parse("abc", grammar), ["a", "b", "c"])
    parsetest.assert_success(parcook.parse("", grammar), [])


def test_look_ahead():
    """Test look_ahead checks without consuming."""
    def grammar(session):
        ahead = session.match(parcook.look_ahead(r"^(\d+)px"))
        number = session.match(Pattern(r"^\d+"))[0]
        return (ahead.text, ahead[1], number)

    parsetest.assert_success(parcook.parse("12px", grammar), ("", "12", "12"), remaining="px")
    parsetest.assert_failure(parcook.parse("12em", grammar), remaining="12em", iteration=0)


def test_look_ahead_without_anchor():
    """Test look_ahead accepts patterns with or without anchors."""
    assert parcook.look_ahead("abc") == Pattern("^(?=abc)")
    assert parcook.look_ahead(r"^abc") == Pattern("^(?=abc)")


def test_sequence():
    """Test sequence returns every match value."""
    grammar = parcook.sequence("a", Pattern(r"^\d"), "c")
    result = parcook.parse("a1cd", grammar)
    values = parsetest.assert_success(result, remaining="d")
    assert values[0] == "a"
    assert values[1][0] == "1"
    assert values[2] == "c"


def test_sequence_failure():
    """Test sequence fails at the first mismatch."""
    result = parcook.parse("abcdef", parcook.sequence("abc", "wrong"))
    parsetest.assert_failure(result, remaining="def", iteration=1, node=Literal("wrong"))
