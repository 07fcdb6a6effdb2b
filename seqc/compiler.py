"""
Main expander.

Coordinates lexing, token tree parsing, macro expansion, and printing.
"""

import sys
from typing import Callable, List, Optional, Tuple

from .lexer import tokenize
from .parser import Parser
from .parser.cursor import TokenCursor
from .parser.token_tree import (
    Delimiter, Group, Spacing, Span, TokenTree,
    is_group, is_ident, is_punct, walk,
)
from .macros import SeqMacro, check_attr, sorted_attr
from .diagnostics import ExpansionError, RecursionLimitExceeded, find_compile_errors
from .codegen.printer import to_source


ATTRIBUTE_MACROS = {
    'sorted': sorted_attr,
    'sorted::check': check_attr,
}


class SeqCompiler:
    """Main expander class."""

    def __init__(self, verbose: bool = False, recursion_limit: int = 128):
        self.verbose = verbose
        self.recursion_limit = recursion_limit  # Nested expansions allowed before giving up
        self.filename = "<input>"
        self.warnings: List[str] = []  # Expansion warnings
        self.errors: List[str] = []  # Diagnostics embedded in the output

    def log(self, message: str):
        """Print log message if verbose mode is enabled."""
        if self.verbose:
            print(f"[seqc] {message}", file=sys.stderr)

    def warn(self, code: str, message: str):
        """Add an expansion warning with a code."""
        warning = f"{code}: {message}"
        self.warnings.append(warning)
        if self.verbose:
            print(f"[seqc] Warning: {warning}", file=sys.stderr)

    def get_warnings(self) -> List[str]:
        """Get all warnings generated during expansion."""
        return self.warnings.copy()

    def get_errors(self) -> List[str]:
        """Get all errors found in the expanded output."""
        return self.errors.copy()

    def expand_file(self, input_path: str, output_path: Optional[str] = None) -> bool:
        """
        Expand the macros in a source file.

        Args:
            input_path: Path to the source file
            output_path: Path to write the expanded source (stdout if None)

        Returns:
            True if expansion succeeded without errors, False otherwise
        """
        try:
            # Read source file
            self.log(f"Reading {input_path}...")
            with open(input_path, 'r', encoding='utf-8') as f:
                source = f.read()

            # Expand
            output = self.expand_string(source, str(input_path))

            # Write output
            if output_path is None:
                sys.stdout.write(output)
            else:
                self.log(f"Writing {output_path}...")
                with open(output_path, 'w', encoding='utf-8') as f:
                    f.write(output)

        except FileNotFoundError:
            print(f"Error: File not found: {input_path}", file=sys.stderr)
            return False
        except SyntaxError as e:
            print(f"Syntax error: {e}", file=sys.stderr)
            return False
        except Exception as e:
            print(f"Expansion error: {e}", file=sys.stderr)
            if self.verbose:
                import traceback
                traceback.print_exc()
            return False

        for error in self.errors:
            print(f"error: {error}", file=sys.stderr)
        for warning in self.warnings:
            print(f"warning: {warning}", file=sys.stderr)

        if self.errors:
            self.log(f"Expansion finished with {len(self.errors)} error(s)")
            return False
        self.log("Expansion successful")
        return True

    def expand_string(self, source: str, filename: str = "<input>") -> str:
        """Expand the macros in source text and print the result."""
        self.log("Lexing...")
        tokens = tokenize(source, filename)
        self.log(f"  {len(tokens)} tokens")

        self.log("Parsing token trees...")
        stream = Parser(tokens, filename).parse()

        expanded = self.expand_tokens(stream, filename)
        return to_source(expanded) + '\n'

    def expand_tokens(self, stream, filename: str = "<input>") -> Tuple[TokenTree, ...]:
        """
        Expand every macro invocation in a token tree.

        Errors embedded in the result are recorded and available from
        get_errors() as filename:line:col: message.
        """
        self.filename = filename
        self.errors = []
        self.warnings = []

        self.log("Expanding macros...")
        expanded = self.expand_stream(stream, 0)

        for diagnostic in find_compile_errors(expanded):
            self.errors.append(diagnostic.format(filename))
        return expanded

    def expand_stream(self, stream, depth: int) -> Tuple[TokenTree, ...]:
        """Find and expand invocations in stream, descending into groups."""
        tokens = []
        cursor = TokenCursor(stream)

        while not cursor.at_end():
            token = cursor.advance()

            if is_ident(token, 'seq') and is_punct(cursor.peek(), '!') and is_group(cursor.peek(1)):
                invocation = cursor.peek(1)
                cursor.skip(2)
                tokens.extend(self.invoke(
                    'seq!', lambda: self.expand_seq(invocation, token.span), token.span, depth))

            elif is_punct(token, '#') and attribute_path(cursor.peek()) in ATTRIBUTE_MACROS:
                name = attribute_path(cursor.advance())
                item = take_item(cursor)
                handler = ATTRIBUTE_MACROS[name]
                tokens.extend(self.invoke(
                    f"#[{name}]", lambda: handler(item, token.span), token.span, depth))

            elif isinstance(token, Group):
                tokens.append(token.with_stream(self.expand_stream(token.stream, depth)))

            else:
                tokens.append(token)

        return tuple(tokens)

    def invoke(self, name: str, expand: Callable[[], Tuple[TokenTree, ...]],
               call_site: Span, depth: int) -> Tuple[TokenTree, ...]:
        """
        Run one macro expansion and expand any invocations in its output.

        A header error replaces the invocation with its error payload only.
        """
        if depth >= self.recursion_limit:
            error = RecursionLimitExceeded(
                f"recursion limit reached while expanding `{name}`", call_site)
            self.log(f"  {error.format(self.filename)}")
            return error.to_compile_error()

        try:
            output = expand()
        except ExpansionError as e:
            self.log(f"  {name} failed: {e.format(self.filename)}")
            return e.to_compile_error()

        self.log(f"  Expanded {name} at {call_site}: {len(output)} tokens")
        return self.expand_stream(output, depth + 1)

    def expand_seq(self, invocation: Group, call_site: Span) -> Tuple[TokenTree, ...]:
        """Parse and expand one seq! invocation."""
        macro = SeqMacro.parse(invocation.stream, call_site)

        binding = macro.ident
        if not any(is_ident(t, binding) for t in walk(macro.spec.body)):
            self.warn("SEQ0001", f"{self.filename}:{call_site}: "
                                 f"binding `{binding}` is never used in the seq! body")

        return macro.expand()


def attribute_path(token: Optional[TokenTree]) -> Optional[str]:
    """Path text of a #[path] attribute group, or None if it is not a bare path."""
    if not is_group(token, Delimiter.BRACKET):
        return None
    cursor = TokenCursor(token.stream)
    segments = []
    while True:
        segment = cursor.advance()
        if not is_ident(segment):
            return None
        segments.append(segment.text)
        if cursor.at_end():
            return '::'.join(segments)

        # Segments are separated by a joint `::` pair only
        first = cursor.peek()
        if not (is_punct(first, ':') and first.spacing is Spacing.JOINT
                and is_punct(cursor.peek(1), ':')):
            return None
        cursor.skip(2)


def take_item(cursor: TokenCursor) -> Tuple[TokenTree, ...]:
    """Consume the item following an attribute: up to its first block or `;`."""
    item = []
    while not cursor.at_end():
        token = cursor.advance()
        item.append(token)
        if is_group(token, Delimiter.BRACE) or is_punct(token, ';'):
            break
    return tuple(item)


def main():
    """Command-line interface for the expander."""
    import argparse

    parser = argparse.ArgumentParser(
        description='seqc - Expand seq! and #[sorted] macros in Rust-style source'
    )
    parser.add_argument('input', help='Input source file')
    parser.add_argument('-o', '--output', help='Output file (default: stdout)')
    parser.add_argument('--recursion-limit', type=int, default=128,
                        metavar='N',
                        help='Maximum nesting of macro expansions (default: 128)')
    parser.add_argument('--verbose', action='store_true',
                        help='Verbose output')

    args = parser.parse_args()

    compiler = SeqCompiler(verbose=args.verbose, recursion_limit=args.recursion_limit)
    success = compiler.expand_file(args.input, args.output)

    sys.exit(0 if success else 1)


if __name__ == '__main__':
    main()
