"""
Token tree definitions.

A token tree is an ordered sequence of identifiers, literals, punctuation
and delimited groups. Groups own their inner sequence, so trees never share
nodes. All tokens are immutable; rewriting a tree always builds new tokens.

Spans record where a token came from and are ignored by equality, so two
trees with the same text compare equal wherever they were lexed.
"""

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Iterator, Optional, Tuple, Union


@dataclass(frozen=True)
class Span:
    """Source position (1-based line and column) of a token."""
    line: int = 0
    column: int = 0

    @classmethod
    def call_site(cls) -> 'Span':
        """Span for tokens with no source anchor."""
        return cls(0, 0)

    def __str__(self):
        return f"{self.line}:{self.column}"


class Delimiter(Enum):
    """Group delimiter kinds."""
    PARENTHESIS = auto()  # ( ... )
    BRACE = auto()        # { ... }
    BRACKET = auto()      # [ ... ]

    @property
    def open(self) -> str:
        return {Delimiter.PARENTHESIS: '(', Delimiter.BRACE: '{', Delimiter.BRACKET: '['}[self]

    @property
    def close(self) -> str:
        return {Delimiter.PARENTHESIS: ')', Delimiter.BRACE: '}', Delimiter.BRACKET: ']'}[self]


class Spacing(Enum):
    """Whether a punct is glued to the punct after it (as in `..=`)."""
    ALONE = auto()
    JOINT = auto()


class LiteralKind(Enum):
    """Literal kinds."""
    INTEGER = auto()
    FLOAT = auto()
    STRING = auto()
    BYTE_STRING = auto()
    CHAR = auto()
    BYTE = auto()


INTEGER_SUFFIXES = (
    'u8', 'u16', 'u32', 'u64', 'u128', 'usize',
    'i8', 'i16', 'i32', 'i64', 'i128', 'isize',
)

ESCAPES = {'n': '\n', 't': '\t', 'r': '\r', '0': '\0', '\\': '\\', '"': '"', "'": "'"}


@dataclass(frozen=True)
class Ident:
    """Identifier or keyword."""
    text: str
    span: Span = field(default_factory=Span.call_site, compare=False)

    def __repr__(self):
        return f"Ident({self.text})"


@dataclass(frozen=True)
class Punct:
    """Single punctuation character."""
    char: str
    spacing: Spacing = Spacing.ALONE
    span: Span = field(default_factory=Span.call_site, compare=False)

    def __repr__(self):
        joint = '+' if self.spacing is Spacing.JOINT else ''
        return f"Punct({self.char!r}{joint})"


@dataclass(frozen=True)
class Literal:
    """Literal kept in its original textual form."""
    text: str
    kind: LiteralKind
    span: Span = field(default_factory=Span.call_site, compare=False)

    @classmethod
    def integer(cls, value: int, span: Optional[Span] = None) -> 'Literal':
        """Unsuffixed integer literal."""
        return cls(str(value), LiteralKind.INTEGER, span or Span.call_site())

    @classmethod
    def string(cls, value: str, span: Optional[Span] = None) -> 'Literal':
        """String literal with the characters that need it escaped."""
        escaped = value.replace('\\', '\\\\').replace('"', '\\"').replace('\n', '\\n')
        return cls(f'"{escaped}"', LiteralKind.STRING, span or Span.call_site())

    @property
    def value(self) -> Union[int, float, str, bytes]:
        """Decoded value of the literal."""
        if self.kind is LiteralKind.INTEGER:
            return parse_integer(self.text)
        if self.kind is LiteralKind.FLOAT:
            text = self.text.replace('_', '')
            if text.endswith(('f32', 'f64')):
                text = text[:-3]
            return float(text)

        text = self.text
        if self.kind in (LiteralKind.BYTE_STRING, LiteralKind.BYTE):
            text = text[1:]
        if text.startswith('r'):
            body = text[1:].strip('#')[1:-1]
        else:
            body = unescape(text[1:-1])
        if self.kind in (LiteralKind.BYTE_STRING, LiteralKind.BYTE):
            return body.encode('latin-1')
        return body

    def __repr__(self):
        return f"Literal({self.text})"


@dataclass(frozen=True)
class Group:
    """Delimited group owning its inner token sequence."""
    delimiter: Delimiter
    stream: Tuple['TokenTree', ...] = ()
    span: Span = field(default_factory=Span.call_site, compare=False)

    def with_stream(self, stream) -> 'Group':
        """Rebuild the group around a new inner sequence, keeping delimiter and span."""
        return replace(self, stream=tuple(stream))

    def __repr__(self):
        return f"Group({self.delimiter.open}{len(self.stream)} tokens{self.delimiter.close})"


TokenTree = Union[Ident, Punct, Literal, Group]


def is_punct(token: Optional[TokenTree], char: str) -> bool:
    """Check whether token is the punctuation character char."""
    return isinstance(token, Punct) and token.char == char


def is_ident(token: Optional[TokenTree], text: Optional[str] = None) -> bool:
    """Check whether token is an identifier (optionally with the given text)."""
    return isinstance(token, Ident) and (text is None or token.text == text)


def is_group(token: Optional[TokenTree], delimiter: Optional[Delimiter] = None) -> bool:
    """Check whether token is a group (optionally with the given delimiter)."""
    return isinstance(token, Group) and (delimiter is None or token.delimiter is delimiter)


def walk(stream) -> Iterator[TokenTree]:
    """Yield every token of a tree depth-first, groups before their contents."""
    for token in stream:
        yield token
        if isinstance(token, Group):
            yield from walk(token.stream)


def parse_integer(text: str) -> int:
    """
    Parse the text of an integer literal.

    Underscores are ignored, 0x/0o/0b prefixes and integer type suffixes
    are accepted. Raises ValueError if the text is not an integer literal.
    """
    digits = text.replace('_', '')
    for suffix in INTEGER_SUFFIXES:
        if digits.endswith(suffix) and len(digits) > len(suffix):
            digits = digits[:-len(suffix)]
            break

    base = 10
    if digits[:2] in ('0x', '0o', '0b'):
        base = {'0x': 16, '0o': 8, '0b': 2}[digits[:2]]
        digits = digits[2:]

    if not digits or not all(ch.isascii() and ch.isalnum() for ch in digits):
        raise ValueError(f"invalid integer literal: {text}")
    return int(digits, base)


def unescape(body: str) -> str:
    """Decode backslash escapes in a string or char literal body."""
    chars = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch != '\\' or i + 1 >= len(body):
            chars.append(ch)
            i += 1
            continue

        nxt = body[i + 1]
        if nxt in ESCAPES:
            chars.append(ESCAPES[nxt])
            i += 2
        elif nxt == 'x':
            chars.append(chr(int(body[i + 2:i + 4], 16)))
            i += 4
        elif nxt == 'u' and body[i + 2:i + 3] == '{':
            end = body.index('}', i)
            chars.append(chr(int(body[i + 3:end].replace('_', ''), 16)))
            i = end + 1
        elif nxt == '\n':
            # Line continuation: skip the newline and leading whitespace
            i += 2
            while i < len(body) and body[i].isspace():
                i += 1
        else:
            chars.append(nxt)
            i += 2

    return ''.join(chars)
