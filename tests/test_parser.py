"""Tests for the token tree parser and token model."""

import pytest

from seqc.parser import TokenCursor, parse_source
from seqc.parser.token_tree import (
    Delimiter, Group, Ident, Literal, LiteralKind, Punct, Spacing, Span,
    parse_integer, walk,
)


class TestGroups:
    """Tests for delimiter matching."""

    def test_nested_groups(self):
        """Test groups nest and own their contents."""
        stream = parse_source("f(a, [b]) { c }")

        assert stream[0] == Ident("f")
        paren = stream[1]
        assert isinstance(paren, Group)
        assert paren.delimiter is Delimiter.PARENTHESIS
        assert paren.stream[0] == Ident("a")
        assert paren.stream[1] == Punct(",")
        assert paren.stream[3].delimiter is Delimiter.BRACKET
        assert stream[2].delimiter is Delimiter.BRACE

    def test_empty_source(self):
        """Test empty input gives an empty stream."""
        assert parse_source("") == ()
        assert parse_source("  // just a comment\n") == ()

    def test_mismatched_delimiter(self):
        """Test a closer for the wrong opener is rejected."""
        with pytest.raises(SyntaxError, match=r"t\.rs:1:3: Mismatched closing delimiter"):
            parse_source("(a]", "t.rs")

    def test_unclosed_delimiter(self):
        """Test an unclosed group reports where it was opened."""
        with pytest.raises(SyntaxError, match=r"t\.rs:2:1: Unclosed delimiter '\{'"):
            parse_source("a\n{ b", "t.rs")

    def test_stray_closer(self):
        """Test a closer with nothing open is rejected."""
        with pytest.raises(SyntaxError, match="Unexpected closing delimiter"):
            parse_source("a )", "t.rs")


class TestSpans:
    """Tests for span tracking."""

    def test_spans_record_positions(self):
        """Test every token remembers where it was lexed."""
        stream = parse_source("a\n  (b)")

        assert stream[0].span == Span(1, 1)
        assert stream[1].span == Span(2, 3)
        assert stream[1].stream[0].span == Span(2, 4)

    def test_equality_ignores_spans(self):
        """Test that the same text lexed in different places compares equal."""
        assert parse_source("x + 1") == parse_source("\n\n   x +   1")

    def test_equality_includes_spacing(self):
        """Test joint and alone punctuation differ."""
        assert Punct('.', Spacing.JOINT) != Punct('.', Spacing.ALONE)


class TestLiterals:
    """Tests for literal values."""

    def test_integer_values(self):
        """Test integer literals decode in every base."""
        assert parse_integer("42") == 42
        assert parse_integer("1_000") == 1000
        assert parse_integer("0xff") == 255
        assert parse_integer("0o17") == 15
        assert parse_integer("0b101") == 5
        assert parse_integer("7u64") == 7
        assert parse_integer("0x10_usize") == 16

    def test_integer_rejects_garbage(self):
        """Test invalid digits are rejected."""
        with pytest.raises(ValueError):
            parse_integer("0b102")
        with pytest.raises(ValueError):
            parse_integer("12ab")

    def test_string_values(self):
        """Test string escapes and raw strings decode."""
        stream = parse_source(r'"a\tb\"c" r#"x\y"# b"hi" '"'\\n'")

        assert stream[0].value == 'a\tb"c'
        assert stream[1].value == 'x\\y'
        assert stream[2].value == b'hi'
        assert stream[3].value == '\n'

    def test_float_value(self):
        """Test float literals decode."""
        assert Literal("2.5f64", LiteralKind.FLOAT).value == 2.5

    def test_string_constructor_escapes(self):
        """Test Literal.string quotes and escapes its value."""
        literal = Literal.string('say "hi"')
        assert literal.text == r'"say \"hi\""'
        assert literal.value == 'say "hi"'

    def test_unsuffixed_integer(self):
        """Test Literal.integer carries the given span."""
        literal = Literal.integer(3, Span(4, 5))
        assert literal.text == "3"
        assert literal.kind is LiteralKind.INTEGER
        assert literal.span == Span(4, 5)


def test_walk_visits_depth_first():
    """Test walk yields groups before their contents."""
    stream = parse_source("a (b [c]) d")
    texts = [t.text for t in walk(stream) if isinstance(t, Ident)]
    assert texts == ["a", "b", "c", "d"]


class TestCursor:
    """Tests for reading token trees with a cursor."""

    def test_peek_and_advance(self):
        cursor = TokenCursor(parse_source("a b c"))

        assert cursor.peek(2) == Ident("c")
        assert cursor.peek(3) is None
        assert cursor.advance() == Ident("a")
        assert cursor.rest() == parse_source("b c")

    def test_skip_stops_at_end(self):
        cursor = TokenCursor(parse_source("a b"))
        cursor.skip(5)
        assert cursor.at_end()
        assert cursor.advance() is None

    def test_span_at_end_is_call_site(self):
        """Test running out of input reports the invocation's span."""
        cursor = TokenCursor(parse_source("x"), Span(3, 7))
        assert cursor.span() == Span(1, 1)
        cursor.advance()
        assert cursor.span() == Span(3, 7)
