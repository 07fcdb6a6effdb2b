"""
Source printer - converts token trees back to source text.

Spacing follows the tokens: joint punctuation is glued to what follows,
calls and indexing hug their identifier, and separators hug what precedes
them. Braced blocks that contain statements are laid out one statement per
line. Lexing the printed text gives back an equal token tree.
"""

from typing import Optional

from ..parser.token_tree import (
    Delimiter, Group, Ident, Literal, Punct, Spacing, TokenTree,
    is_group, is_ident, is_punct,
)


# Keywords that take a parenthesized/bracketed operand rather than being called
SPACED_KEYWORDS = frozenset({
    'as', 'else', 'for', 'if', 'in', 'let', 'match', 'move', 'mut', 'return',
    'while', 'where', 'yield',
})

TIGHT_BEFORE = ',;:?'


class SourcePrinter:
    """Renders token trees as source text."""

    def __init__(self, indent: str = "    "):
        self.indent = indent

    def render(self, stream) -> str:
        """Render a top-level stream."""
        return self.render_stream(tuple(stream), 0, block=True)

    def render_stream(self, stream, depth: int, block: bool) -> str:
        """Render a stream; in block context statements go on separate lines."""
        parts = []
        prev2: Optional[TokenTree] = None
        prev: Optional[TokenTree] = None

        for token in stream:
            if prev is not None:
                if block and self.ends_line(prev, token):
                    parts.append('\n' + self.indent * depth)
                elif self.needs_space(prev2, prev, token):
                    parts.append(' ')
            parts.append(self.render_token(token, depth))
            prev2, prev = prev, token

        return ''.join(parts)

    def render_token(self, token: TokenTree, depth: int) -> str:
        """Render a single token tree."""
        if isinstance(token, Ident):
            return token.text
        if isinstance(token, Literal):
            return token.text
        if isinstance(token, Punct):
            return token.char

        delimiter = token.delimiter
        if delimiter is not Delimiter.BRACE:
            return delimiter.open + self.render_stream(token.stream, depth, False) + delimiter.close
        if not token.stream:
            return '{}'
        if self.is_block(token.stream):
            inner = self.render_stream(token.stream, depth + 1, True)
            pad = self.indent * depth
            return '{\n' + self.indent * (depth + 1) + inner + '\n' + pad + '}'
        return '{ ' + self.render_stream(token.stream, depth, False) + ' }'

    def is_block(self, stream) -> bool:
        """Whether a braced stream holds statements or nested blocks."""
        return any(is_punct(t, ';') or is_group(t, Delimiter.BRACE) for t in stream)

    def ends_line(self, prev: TokenTree, token: TokenTree) -> bool:
        """Whether a line break belongs between prev and token in block context."""
        if is_punct(prev, ';') and prev.spacing is Spacing.ALONE:
            return True
        return (is_group(prev, Delimiter.BRACE) and not isinstance(token, Punct)
                and not is_ident(token, 'else'))

    def needs_space(self, prev2: Optional[TokenTree], prev: TokenTree, token: TokenTree) -> bool:
        """Whether a space separates prev from token."""
        if isinstance(prev, Punct):
            if prev.spacing is Spacing.JOINT:
                return False
            if isinstance(token, Punct):
                # Two alone puncts must stay apart to stay alone
                return True
            if prev.char == '.':
                # 1 . 5 must not print as the float 1.5
                return isinstance(token, Literal) and isinstance(prev2, Literal)
            if prev.char == ':' and is_punct(prev2, ':') and prev2.spacing is Spacing.JOINT:
                return False
            if prev.char in '!#' and isinstance(token, Group):
                return False
            return True

        if isinstance(token, Punct):
            if token.char in TIGHT_BEFORE:
                return False
            if token.char == '.':
                return False
            if token.char == '!' and token.spacing is Spacing.ALONE and isinstance(prev, Ident):
                return False
            return True

        if (isinstance(token, Group) and token.delimiter is not Delimiter.BRACE
                and (isinstance(prev, Group) or
                     (isinstance(prev, Ident) and prev.text not in SPACED_KEYWORDS))):
            return False
        return True


def to_source(stream, indent: str = "    ") -> str:
    """Convenience function to render a token tree as source text."""
    return SourcePrinter(indent).render(stream)
