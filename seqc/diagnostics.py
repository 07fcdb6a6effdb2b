"""
Expansion errors and their token payloads.

Macro expansion reports problems two ways. Structural problems (a header that
does not parse) raise an ExpansionError and abort the one invocation. Problems
found once a body exists (a backwards range, an unsorted enum)
are embedded in the output as a compile_error!{"message"} payload, so the
surrounding code still receives well-formed tokens.

Either way the driver ends up with payloads in the output, and
find_compile_errors() collects them back into positioned messages.
"""

from dataclasses import dataclass
from typing import List, Tuple

from .parser.token_tree import (
    Delimiter, Group, Ident, Literal, LiteralKind, Punct, Span, TokenTree,
    is_group, is_ident, is_punct,
)


COMPILE_ERROR = 'compile_error'


class ExpansionError(Exception):
    """An error anchored at the span of the token that caused it."""

    def __init__(self, message: str, span: Span = None):
        super().__init__(message)
        self.message = message
        self.span = span or Span.call_site()

    def format(self, filename: str = "<input>") -> str:
        """Format as filename:line:col: message."""
        return f"{filename}:{self.span.line}:{self.span.column}: {self.message}"

    def to_compile_error(self) -> Tuple[TokenTree, ...]:
        """Token payload standing in for the failed expansion."""
        return compile_error(self.message, self.span)

    def __str__(self):
        return f"{self.span}: {self.message}"


class MalformedHeader(ExpansionError):
    """Missing or misordered tokens in a macro header."""


class BadIntegerLiteral(ExpansionError):
    """Integer literal that is not a valid unsigned 64-bit value."""


class InvalidRange(ExpansionError):
    """Range whose start is greater than its end."""


class OutOfOrder(ExpansionError):
    """Item that should sort before one already seen."""


class UnsupportedConstruct(ExpansionError):
    """Item or pattern shape a validator does not handle."""


class RecursionLimitExceeded(ExpansionError):
    """Macro expansion nested deeper than the configured limit."""


def compile_error(message: str, span: Span) -> Tuple[TokenTree, ...]:
    """Build compile_error!{"message"} with every token at span."""
    return (
        Ident(COMPILE_ERROR, span),
        Punct('!', span=span),
        Group(Delimiter.BRACE, (Literal.string(message, span),), span),
    )


@dataclass(frozen=True)
class Diagnostic:
    """An embedded error found in expanded output."""
    message: str
    span: Span

    def format(self, filename: str = "<input>") -> str:
        return f"{filename}:{self.span.line}:{self.span.column}: {self.message}"


def find_compile_errors(stream) -> List[Diagnostic]:
    """Collect every compile_error! payload in a token tree, in source order."""
    found = []
    stream = tuple(stream)
    for i, token in enumerate(stream):
        if isinstance(token, Group):
            found.extend(find_compile_errors(token.stream))
            continue

        if not is_ident(token, COMPILE_ERROR) or i + 2 >= len(stream):
            continue
        bang, group = stream[i + 1], stream[i + 2]
        if not is_punct(bang, '!') or not is_group(group):
            continue
        if (len(group.stream) == 1 and isinstance(group.stream[0], Literal)
                and group.stream[0].kind is LiteralKind.STRING):
            found.append(Diagnostic(group.stream[0].value, token.span))

    return found
