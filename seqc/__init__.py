"""
Sequence expander (seqc) - Expands token-tree macros in Rust-style source.

This package provides a stand-alone implementation of the `seq!` sequence
macro and the `#[sorted]` order checks, operating on token trees lexed
from source text and printed back out after expansion.
"""

__version__ = "0.1.0"
__author__ = "seqc project"
