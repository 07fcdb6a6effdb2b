"""
Test fixtures and helpers for seqc.

The key abstractions are:

- toks(): lexes and parses source text into a token tree
- AssertExpansion: fluent API for checking what a source file expands to,
  which errors end up embedded in the output, and which warnings are raised
"""

import pytest
import sys
from pathlib import Path
from typing import List, Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from seqc.compiler import SeqCompiler
from seqc.parser import parse_source


def toks(source: str):
    """Parse source text into a token tree."""
    return parse_source(source, "<test>")


class ExpansionAssertion:
    """
    Fluent assertion helper for testing macro expansion.

    Usage:
        AssertExpansion('seq!(N in 0..2 { f~N(); })').expands_to('f0(); f1();')
        AssertExpansion('seq!(N in 3..1 {})').has_errors('<test>:1:11: invalid range')
    """

    def __init__(self, source: str):
        self.source = source
        self.recursion_limit = 128
        self.expected_warnings: Optional[List[str]] = None
        self.expect_no_warnings: bool = False

    def with_recursion_limit(self, limit: int) -> 'ExpansionAssertion':
        self.recursion_limit = limit
        return self

    def with_warnings(self, *codes: str) -> 'ExpansionAssertion':
        self.expected_warnings = list(codes) if codes else None
        return self

    def without_warnings(self) -> 'ExpansionAssertion':
        self.expect_no_warnings = True
        return self

    def _expand(self) -> SeqCompiler:
        compiler = SeqCompiler(recursion_limit=self.recursion_limit)
        self.output = compiler.expand_tokens(toks(self.source), "<test>")
        return compiler

    def expands_to(self, expected: str) -> None:
        """Assert that the source expands, without errors, to expected."""
        compiler = self._expand()
        assert not compiler.get_errors(), f"Expected no errors, got: {compiler.get_errors()}"
        assert self.output == toks(expected), \
            f"Expected {toks(expected)!r}, got {self.output!r}"
        self._check_warnings(compiler)

    def has_errors(self, *errors: str) -> None:
        """Assert that exactly these positioned errors are embedded in the output."""
        compiler = self._expand()
        assert compiler.get_errors() == list(errors), \
            f"Expected errors {list(errors)}, got {compiler.get_errors()}"
        self._check_warnings(compiler)

    def _check_warnings(self, compiler: SeqCompiler) -> None:
        """Check warning expectations."""
        warnings = compiler.get_warnings()
        if self.expect_no_warnings:
            assert not warnings, f"Expected no warnings, got: {warnings}"
        elif self.expected_warnings is not None:
            for code in self.expected_warnings:
                assert any(code in w for w in warnings), \
                    f"Expected warning {code}, got {warnings}"


def AssertExpansion(source: str) -> ExpansionAssertion:
    """Create an expansion assertion."""
    return ExpansionAssertion(source)


@pytest.fixture
def compiler():
    """Fixture for a quiet expander."""
    return SeqCompiler()
