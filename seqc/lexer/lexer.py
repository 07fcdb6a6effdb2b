"""
Lexer - Tokenizes Rust-style source text into flat tokens.

Handles:
- Identifiers and keywords (including raw identifiers r#name)
- Integer and float literals (with _ separators and type suffixes)
- Strings, raw strings, byte strings, chars and bytes
- Lifetimes ('a becomes a joint quote punct followed by an identifier)
- Punctuation, with joint/alone spacing
- Delimiters () [] {}
- Line and (nested) block comments
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Optional, List


PUNCT_CHARS = "~!@#$%^&*-=+|;:,<.>/?'"

DIGITS = {
    2: "01",
    8: "01234567",
    10: "0123456789",
    16: "0123456789abcdefABCDEF",
}

# Characters allowed after a backslash besides x, u and a line break
ESCAPE_CHARS = "ntr0\\\"'"


class TokenType(Enum):
    """Flat token types."""
    # Delimiters
    LPAREN = auto()      # (
    RPAREN = auto()      # )
    LBRACKET = auto()    # [
    RBRACKET = auto()    # ]
    LBRACE = auto()      # {
    RBRACE = auto()      # }

    IDENT = auto()       # identifier or keyword
    PUNCT = auto()       # single punctuation character

    # Literals (value is the verbatim source text)
    INTEGER = auto()     # 42, 0xff_u8
    FLOAT = auto()       # 1.5, 2e10f64
    STRING = auto()      # "text", r#"text"#
    BYTE_STRING = auto() # b"text", br"text"
    CHAR = auto()        # 'c'
    BYTE = auto()        # b'c'

    # End of file
    EOF = auto()


LITERAL_TYPES = frozenset({
    TokenType.INTEGER, TokenType.FLOAT, TokenType.STRING,
    TokenType.BYTE_STRING, TokenType.CHAR, TokenType.BYTE,
})


@dataclass
class Token:
    """Represents a single token."""
    type: TokenType
    value: str
    line: int
    column: int
    joint: bool = False  # PUNCT only: immediately followed by another punct

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


class Lexer:
    """Tokenizes Rust-style source text."""

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []

    def error(self, message: str):
        """Raise a lexer error with location information."""
        raise SyntaxError(f"{self.filename}:{self.line}:{self.column}: {message}")

    def peek(self, offset: int = 0) -> Optional[str]:
        """Peek at character at current position + offset."""
        pos = self.pos + offset
        if pos < len(self.source):
            return self.source[pos]
        return None

    def advance(self) -> Optional[str]:
        """Consume and return current character."""
        if self.pos >= len(self.source):
            return None

        ch = self.source[self.pos]
        self.pos += 1

        if ch == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1

        return ch

    def skip_whitespace(self):
        """Skip whitespace characters."""
        while self.peek() is not None and self.peek().isspace():
            self.advance()

    def skip_line_comment(self):
        """Skip a // comment up to the end of the line."""
        while self.peek() is not None and self.peek() != '\n':
            self.advance()

    def skip_block_comment(self):
        """Skip a /* ... */ comment. Block comments nest."""
        start_line = self.line
        start_col = self.column
        self.advance()  # /
        self.advance()  # *
        depth = 1

        while depth > 0 and self.peek() is not None:
            if self.peek() == '/' and self.peek(1) == '*':
                self.advance()
                self.advance()
                depth += 1
            elif self.peek() == '*' and self.peek(1) == '/':
                self.advance()
                self.advance()
                depth -= 1
            else:
                self.advance()

        if depth != 0:
            self.error(f"Unterminated block comment starting at {start_line}:{start_col}")

    def is_ident_start(self, ch: Optional[str]) -> bool:
        """Check if character can start an identifier."""
        return ch is not None and (ch.isalpha() or ch == '_')

    def is_ident_char(self, ch: Optional[str]) -> bool:
        """Check if character can continue an identifier."""
        return ch is not None and (ch.isalnum() or ch == '_')

    def is_digit(self, ch: Optional[str]) -> bool:
        """Check for an ASCII decimal digit (str.isdigit accepts other scripts)."""
        return ch is not None and ch in DIGITS[10]

    def read_ident(self) -> str:
        """Read an identifier or keyword."""
        chars = []
        while self.is_ident_char(self.peek()):
            chars.append(self.advance())
        return ''.join(chars)

    def read_suffix(self) -> str:
        """Read a literal suffix such as u8 or f64 (may be empty)."""
        if self.is_ident_start(self.peek()):
            return self.read_ident()
        return ''

    def read_digits(self, base: int) -> str:
        """Read digits of the given base, allowing _ separators."""
        allowed = DIGITS[base] + '_'
        chars = []
        while self.peek() is not None and self.peek() in allowed:
            chars.append(self.advance())
        return ''.join(chars)

    def read_number(self) -> Token:
        """Read an integer or float literal, keeping its source text."""
        line = self.line
        col = self.column
        chars = []

        # Base prefixes are integers only
        if self.peek() == '0' and self.peek(1) in ('x', 'o', 'b'):
            base = {'x': 16, 'o': 8, 'b': 2}[self.peek(1)]
            chars.append(self.advance())
            chars.append(self.advance())
            digits = self.read_digits(base)
            if not digits.strip('_'):
                self.error(f"Missing digits after integer base prefix {''.join(chars)}")
            chars.append(digits)
            chars.append(self.read_suffix())
            return Token(TokenType.INTEGER, ''.join(chars), line, col)

        chars.append(self.read_digits(10))
        token_type = TokenType.INTEGER

        # A fraction needs a digit after the dot, so 0..3 is a range and
        # 1.foo is a method call
        if self.peek() == '.' and self.is_digit(self.peek(1)):
            chars.append(self.advance())
            chars.append(self.read_digits(10))
            token_type = TokenType.FLOAT

        # Exponent
        if self.peek() in ('e', 'E'):
            offset = 1
            if self.peek(offset) in ('+', '-'):
                offset += 1
            if self.is_digit(self.peek(offset)):
                for _ in range(offset):
                    chars.append(self.advance())
                chars.append(self.read_digits(10))
                token_type = TokenType.FLOAT

        suffix = self.read_suffix()
        if suffix in ('f32', 'f64'):
            token_type = TokenType.FLOAT
        chars.append(suffix)
        return Token(token_type, ''.join(chars), line, col)

    def read_quoted(self, quote: str) -> str:
        """Read a quoted string or char body including both quotes."""
        start_line = self.line
        start_col = self.column
        chars = [self.advance()]  # opening quote

        while self.peek() is not None and self.peek() != quote:
            if self.peek() == '\\':
                chars.append(self.read_escape())
            else:
                chars.append(self.advance())

        if self.peek() != quote:
            kind = "string" if quote == '"' else "character literal"
            self.error(f"Unterminated {kind} starting at {start_line}:{start_col}")

        chars.append(self.advance())  # closing quote
        return ''.join(chars)

    def read_escape(self) -> str:
        """
        Read a backslash escape, keeping it verbatim.

        The escaped char never closes the literal. Hex and unicode escapes
        must be well formed so that the literal can be decoded later.
        """
        chars = [self.advance()]  # backslash
        ch = self.peek()
        if ch is None:
            return chars[0]  # reported as unterminated by the caller

        if ch == 'x':
            digits = self.source[self.pos + 1:self.pos + 3]
            if len(digits) != 2 or any(d not in DIGITS[16] for d in digits):
                self.error("Invalid escape: \\x must be followed by two hex digits")
            count = 3
        elif ch == 'u':
            end = self.source.find('}', self.pos)
            digits = self.source[self.pos + 2:end].replace('_', '')
            if (self.peek(1) != '{' or end < 0 or not 0 < len(digits) <= 6
                    or any(d not in DIGITS[16] for d in digits)
                    or not self.is_scalar_value(int(digits, 16))):
                self.error("Invalid escape: \\u{...} must name a unicode scalar value")
            count = end - self.pos + 1
        elif ch in ESCAPE_CHARS or ch == '\n':
            count = 1
        else:
            self.error(f"Invalid escape: unknown character escape {ch!r}")

        for _ in range(count):
            chars.append(self.advance())
        return ''.join(chars)

    def is_scalar_value(self, code: int) -> bool:
        return code <= 0x10FFFF and not 0xD800 <= code <= 0xDFFF

    def read_raw_string(self, prefix: str) -> str:
        """Read a raw string r#"..."# after its prefix letters."""
        start_line = self.line
        start_col = self.column
        chars = [prefix]
        for _ in prefix:
            self.advance()

        hashes = 0
        while self.peek() == '#':
            chars.append(self.advance())
            hashes += 1

        if self.peek() != '"':
            self.error("Expected '\"' to start raw string")
        chars.append(self.advance())

        closing = '"' + '#' * hashes
        while True:
            if self.peek() is None:
                self.error(f"Unterminated raw string starting at {start_line}:{start_col}")
            if self.source.startswith(closing, self.pos):
                for _ in closing:
                    chars.append(self.advance())
                break
            chars.append(self.advance())

        return ''.join(chars)

    def is_char_literal(self) -> bool:
        """Distinguish a char literal 'x' from a lifetime 'x at a quote."""
        if self.peek(1) == '\\':
            return True
        # 'x' is a char literal; 'xy and 'x (no closing quote) are lifetimes
        return self.peek(1) is not None and self.peek(2) == "'"

    def add_punct(self, line: int, col: int):
        """Add a punctuation token, marking it joint if glued to the next one."""
        ch = self.advance()
        nxt = self.peek()
        joint = nxt is not None and nxt in PUNCT_CHARS
        # A following comment does not glue
        if ch != '/' and nxt == '/' and self.peek(1) in ('/', '*'):
            joint = False
        self.tokens.append(Token(TokenType.PUNCT, ch, line, col, joint))

    def tokenize(self) -> List[Token]:
        """Tokenize the entire source code."""
        while self.pos < len(self.source):
            self.skip_whitespace()

            if self.pos >= len(self.source):
                break

            ch = self.peek()
            line = self.line
            col = self.column

            # Comments
            if ch == '/' and self.peek(1) == '/':
                self.skip_line_comment()
                continue
            if ch == '/' and self.peek(1) == '*':
                self.skip_block_comment()
                continue

            # Delimiters
            if ch == '(':
                self.advance()
                self.tokens.append(Token(TokenType.LPAREN, '(', line, col))
            elif ch == ')':
                self.advance()
                self.tokens.append(Token(TokenType.RPAREN, ')', line, col))
            elif ch == '[':
                self.advance()
                self.tokens.append(Token(TokenType.LBRACKET, '[', line, col))
            elif ch == ']':
                self.advance()
                self.tokens.append(Token(TokenType.RBRACKET, ']', line, col))
            elif ch == '{':
                self.advance()
                self.tokens.append(Token(TokenType.LBRACE, '{', line, col))
            elif ch == '}':
                self.advance()
                self.tokens.append(Token(TokenType.RBRACE, '}', line, col))

            # Raw strings: r"..." r#"..."#
            elif ch == 'r' and (self.peek(1) == '"' or
                                (self.peek(1) == '#' and self.peek(2) in ('"', '#'))):
                value = self.read_raw_string('r')
                self.tokens.append(Token(TokenType.STRING, value, line, col))
            # Raw identifiers: r#name
            elif ch == 'r' and self.peek(1) == '#' and self.is_ident_start(self.peek(2)):
                self.advance()  # r
                self.advance()  # #
                value = 'r#' + self.read_ident()
                self.tokens.append(Token(TokenType.IDENT, value, line, col))

            # Byte literals: b"..." br"..." b'x'
            elif ch == 'b' and self.peek(1) == '"':
                self.advance()  # b
                value = 'b' + self.read_quoted('"')
                self.tokens.append(Token(TokenType.BYTE_STRING, value, line, col))
            elif ch == 'b' and self.peek(1) == 'r' and self.peek(2) in ('"', '#'):
                value = self.read_raw_string('br')
                self.tokens.append(Token(TokenType.BYTE_STRING, value, line, col))
            elif ch == 'b' and self.peek(1) == "'":
                self.advance()  # b
                value = 'b' + self.read_quoted("'")
                self.tokens.append(Token(TokenType.BYTE, value, line, col))

            # Identifiers and keywords
            elif self.is_ident_start(ch):
                value = self.read_ident()
                self.tokens.append(Token(TokenType.IDENT, value, line, col))

            # Numbers
            elif self.is_digit(ch):
                self.tokens.append(self.read_number())

            # Strings
            elif ch == '"':
                value = self.read_quoted('"')
                self.tokens.append(Token(TokenType.STRING, value, line, col))

            # Char literal or lifetime
            elif ch == "'":
                if self.is_char_literal():
                    value = self.read_quoted("'")
                    self.tokens.append(Token(TokenType.CHAR, value, line, col))
                else:
                    # Lifetime: the quote is glued to the following identifier
                    self.advance()
                    self.tokens.append(Token(TokenType.PUNCT, "'", line, col, True))

            # Punctuation
            elif ch in PUNCT_CHARS:
                self.add_punct(line, col)

            else:
                self.error(f"Unexpected character: {ch!r}")

        # Add EOF token
        self.tokens.append(Token(TokenType.EOF, '', self.line, self.column))
        return self.tokens


def tokenize(source: str, filename: str = "<input>") -> List[Token]:
    """Convenience function to tokenize source text."""
    lexer = Lexer(source, filename)
    return lexer.tokenize()
