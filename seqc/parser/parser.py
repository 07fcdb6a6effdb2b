"""
Token tree parser - Builds token trees from flat lexer tokens.

Matches opening and closing delimiters into Groups and converts the
remaining flat tokens into Ident, Literal and Punct leaves.
"""

from typing import List, Optional, Tuple

from ..lexer import Token, TokenType, tokenize
from ..lexer.lexer import LITERAL_TYPES
from .token_tree import (
    Delimiter, Group, Ident, Literal, LiteralKind, Punct, Spacing, Span, TokenTree,
)


OPENERS = {
    TokenType.LPAREN: Delimiter.PARENTHESIS,
    TokenType.LBRACE: Delimiter.BRACE,
    TokenType.LBRACKET: Delimiter.BRACKET,
}

CLOSERS = {
    TokenType.RPAREN: Delimiter.PARENTHESIS,
    TokenType.RBRACE: Delimiter.BRACE,
    TokenType.RBRACKET: Delimiter.BRACKET,
}

LITERAL_KINDS = {
    TokenType.INTEGER: LiteralKind.INTEGER,
    TokenType.FLOAT: LiteralKind.FLOAT,
    TokenType.STRING: LiteralKind.STRING,
    TokenType.BYTE_STRING: LiteralKind.BYTE_STRING,
    TokenType.CHAR: LiteralKind.CHAR,
    TokenType.BYTE: LiteralKind.BYTE,
}


class Parser:
    """Parses flat tokens into a token tree."""

    def __init__(self, tokens: List[Token], filename: str = "<input>"):
        self.tokens = tokens
        self.filename = filename
        self.pos = 0
        self.current_token = self.tokens[0] if tokens else None

    def error(self, message: str, token: Optional[Token] = None):
        """Raise a parser error with location information."""
        token = token or self.current_token
        if token:
            raise SyntaxError(f"{self.filename}:{token.line}:{token.column}: {message}")
        else:
            raise SyntaxError(f"{self.filename}: {message}")

    def peek(self, offset: int = 0) -> Optional[Token]:
        """Peek at token at current position + offset."""
        pos = self.pos + offset
        if pos < len(self.tokens):
            return self.tokens[pos]
        return None

    def advance(self) -> Token:
        """Consume and return current token."""
        token = self.current_token
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
            self.current_token = self.tokens[self.pos]
        return token

    def at_eof(self) -> bool:
        return self.current_token is None or self.current_token.type == TokenType.EOF

    def parse(self) -> Tuple[TokenTree, ...]:
        """Parse the whole token list into a top-level stream."""
        stream = self.parse_stream(None)
        if not self.at_eof():
            # parse_stream only stops early on a closing delimiter
            self.error(f"Unexpected closing delimiter {self.current_token.value!r}")
        return stream

    def parse_stream(self, opener: Optional[Token]) -> Tuple[TokenTree, ...]:
        """Parse tokens until the closing delimiter matching opener (or EOF)."""
        stream = []

        while not self.at_eof():
            token = self.current_token

            if token.type in CLOSERS:
                if opener is None:
                    break
                if CLOSERS[token.type] is not OPENERS[opener.type]:
                    self.error(
                        f"Mismatched closing delimiter {token.value!r} "
                        f"for {opener.value!r} opened at {opener.line}:{opener.column}"
                    )
                return tuple(stream)

            stream.append(self.parse_tree())

        if opener is not None:
            self.error(f"Unclosed delimiter {opener.value!r}", opener)
        return tuple(stream)

    def parse_tree(self) -> TokenTree:
        """Parse a single token tree at the current position."""
        token = self.advance()
        span = Span(token.line, token.column)

        if token.type in OPENERS:
            inner = self.parse_stream(token)
            self.advance()  # closing delimiter
            return Group(OPENERS[token.type], inner, span)

        if token.type == TokenType.IDENT:
            return Ident(token.value, span)

        if token.type == TokenType.PUNCT:
            spacing = Spacing.JOINT if token.joint else Spacing.ALONE
            return Punct(token.value, spacing, span)

        if token.type in LITERAL_TYPES:
            return Literal(token.value, LITERAL_KINDS[token.type], span)

        self.error(f"Unexpected token {token.type.name}", token)


def parse_source(source: str, filename: str = "<input>") -> Tuple[TokenTree, ...]:
    """Convenience function to lex and parse source text into a token tree."""
    return Parser(tokenize(source, filename), filename).parse()
