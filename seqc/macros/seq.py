"""
Sequence macro: seq!(N in 0..4 { ... }).

Stamps out copies of a token body, one per integer in a range. Two forms:

- Marked sections: every #( ... )* in the body (at any depth) is replaced by
  one copy of its contents per index; the rest of the body appears once.
- Whole body: with no marked sections, the whole body is repeated.

Inside each copy the binding identifier becomes an unsuffixed integer
literal, and `name~N` is pasted into the single identifier `name3`.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from ..diagnostics import BadIntegerLiteral, InvalidRange, MalformedHeader
from ..parser.cursor import TokenCursor
from ..parser.token_tree import (
    Delimiter, Group, Ident, Literal, LiteralKind, Spacing, Span, TokenTree,
    is_group, is_ident, is_punct, parse_integer,
)


U64_MAX = 2 ** 64 - 1

RUST_KEYWORDS = frozenset({
    'as', 'async', 'await', 'break', 'const', 'continue', 'crate', 'dyn',
    'else', 'enum', 'extern', 'false', 'fn', 'for', 'if', 'impl', 'in',
    'let', 'loop', 'match', 'mod', 'move', 'mut', 'pub', 'ref', 'return',
    'self', 'Self', 'static', 'struct', 'super', 'trait', 'true', 'type',
    'unsafe', 'use', 'where', 'while', 'abstract', 'become', 'box', 'do',
    'final', 'macro', 'override', 'priv', 'typeof', 'unsized', 'virtual',
    'yield', 'try', '_',
})


@dataclass(frozen=True)
class SeqSpec:
    """Parsed seq! header and body."""
    ident: Ident
    start: int
    end: int
    inclusive: bool
    body: Tuple[TokenTree, ...]
    start_literal: Literal
    end_literal: Literal

    def indices(self) -> range:
        """The index range; raises InvalidRange if start is past end."""
        if self.start > self.end:
            raise InvalidRange("invalid range", self.start_literal.span)
        if self.inclusive:
            return range(self.start, self.end + 1)
        return range(self.start, self.end)


def parse_header(stream, call_site: Optional[Span] = None) -> SeqSpec:
    """
    Parse `N in START..END { BODY }` (or `..=`) from an invocation's tokens.

    Args:
        stream: Tokens between the invocation's delimiters
        call_site: Span reported when the input ends early

    Returns:
        SeqSpec for the invocation

    Raises:
        MalformedHeader: A token is missing or of the wrong kind
        BadIntegerLiteral: A bound does not fit in an unsigned 64-bit integer
    """
    cursor = TokenCursor(stream, call_site)

    ident = cursor.peek()
    if not is_ident(ident) or ident.text in RUST_KEYWORDS:
        raise MalformedHeader("expected identifier", cursor.span())
    cursor.advance()

    if not is_ident(cursor.peek(), 'in'):
        raise MalformedHeader("expected `in`", cursor.span())
    cursor.advance()

    start_literal, start = _parse_bound(cursor)

    inclusive = _parse_range_op(cursor)

    end_literal, end = _parse_bound(cursor)

    body = cursor.peek()
    if not is_group(body, Delimiter.BRACE):
        raise MalformedHeader("expected curly braces", cursor.span())
    cursor.advance()

    if not cursor.at_end():
        raise MalformedHeader("unexpected token", cursor.span())

    return SeqSpec(ident, start, end, inclusive, body.stream, start_literal, end_literal)


def _parse_bound(cursor: TokenCursor) -> Tuple[Literal, int]:
    """Parse an integer literal range bound as an unsigned 64-bit value."""
    literal = cursor.peek()
    if not isinstance(literal, Literal) or literal.kind is not LiteralKind.INTEGER:
        raise MalformedHeader("expected integer literal", cursor.span())
    cursor.advance()

    try:
        value = parse_integer(literal.text)
    except ValueError:
        raise BadIntegerLiteral("invalid digit found in integer literal", literal.span)
    if value > U64_MAX:
        raise BadIntegerLiteral("number too large to fit in target type", literal.span)
    return literal, value


def _parse_range_op(cursor: TokenCursor) -> bool:
    """Parse `..` or `..=`, returning True for the inclusive form."""
    first, second = cursor.peek(), cursor.peek(1)
    if not (is_punct(first, '.') and first.spacing is Spacing.JOINT and is_punct(second, '.')):
        raise MalformedHeader("expected `..` or `..=`", cursor.span())

    if second.spacing is Spacing.JOINT and is_punct(cursor.peek(2), '='):
        cursor.skip(3)
        return True
    cursor.skip(2)
    return False


class SeqMacro:
    """Expands one seq! invocation."""

    def __init__(self, spec: SeqSpec):
        self.spec = spec
        self.ident = spec.ident.text

    @classmethod
    def parse(cls, stream, call_site: Optional[Span] = None) -> 'SeqMacro':
        """Parse an invocation's tokens into a macro ready to expand."""
        return cls(parse_header(stream, call_site))

    def expand(self) -> Tuple[TokenTree, ...]:
        """Expand the body, preferring marked sections over whole-body repetition."""
        expanded, found = self.expand_sections(self.spec.body)
        if not found:
            expanded = self.expand_range(self.spec.body)
        return expanded

    def expand_sections(self, stream) -> Tuple[Tuple[TokenTree, ...], bool]:
        """
        Replace every #( ... )* section in stream, searching nested groups.

        Returns the rewritten stream and whether any section was found.
        """
        tokens = []
        found = False
        cursor = TokenCursor(stream)

        while not cursor.at_end():
            token = cursor.advance()

            if isinstance(token, Group):
                inner, inner_found = self.expand_sections(token.stream)
                found = found or inner_found
                tokens.append(token.with_stream(inner))
            elif (is_punct(token, '#') and is_group(cursor.peek(), Delimiter.PARENTHESIS)
                    and is_punct(cursor.peek(1), '*')):
                section = cursor.peek()
                cursor.skip(2)
                found = True
                tokens.extend(self.expand_range(section.stream))
            else:
                tokens.append(token)

        return tuple(tokens), found

    def expand_range(self, stream) -> Tuple[TokenTree, ...]:
        """One copy of stream per index, or the invalid range payload."""
        try:
            indices = self.spec.indices()
        except InvalidRange as e:
            return e.to_compile_error()

        tokens = []
        for index in indices:
            tokens.extend(self.expand_index(stream, index))
        return tuple(tokens)

    def expand_index(self, stream, index: int) -> Tuple[TokenTree, ...]:
        """Copy of stream with the binding replaced by index."""
        tokens = []
        cursor = TokenCursor(stream)

        while not cursor.at_end():
            token = cursor.advance()

            if isinstance(token, Group):
                tokens.append(token.with_stream(self.expand_index(token.stream, index)))
            elif is_ident(token, self.ident):
                tokens.append(Literal.integer(index, token.span))
            elif (is_ident(token) and is_punct(cursor.peek(), '~')
                    and is_ident(cursor.peek(1), self.ident)):
                # name~N pastes into a single identifier
                tokens.append(Ident(f"{token.text}{index}", token.span))
                cursor.skip(2)
            else:
                tokens.append(token)

        return tuple(tokens)


def seq(stream, call_site: Optional[Span] = None) -> Tuple[TokenTree, ...]:
    """Expand a seq! invocation given the tokens between its delimiters."""
    return SeqMacro.parse(stream, call_site).expand()
