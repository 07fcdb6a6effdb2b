"""
Cursor over a token sequence.

Macros read their input with peek/advance like the file-level parser does.
Multi-token patterns are matched with peek(offset), and skip(n) commits the
match only once the whole pattern is confirmed.
"""

from typing import Optional, Tuple

from .token_tree import Span, TokenTree


class TokenCursor:
    """Position in an immutable token sequence."""

    def __init__(self, tokens, call_site: Optional[Span] = None):
        self.tokens: Tuple[TokenTree, ...] = tuple(tokens)
        self.call_site = call_site or Span.call_site()
        self.pos = 0

    def peek(self, offset: int = 0) -> Optional[TokenTree]:
        """Peek at token at current position + offset."""
        pos = self.pos + offset
        if pos < len(self.tokens):
            return self.tokens[pos]
        return None

    def advance(self) -> Optional[TokenTree]:
        """Consume and return current token (None at the end)."""
        token = self.peek()
        if token is not None:
            self.pos += 1
        return token

    def skip(self, count: int):
        """Consume count tokens already matched by peeking."""
        self.pos = min(self.pos + count, len(self.tokens))

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def span(self) -> Span:
        """Span of the current token, or of the call site at the end of input."""
        token = self.peek()
        return token.span if token is not None else self.call_site

    def rest(self) -> Tuple[TokenTree, ...]:
        """Remaining tokens, without consuming them."""
        return self.tokens[self.pos:]

