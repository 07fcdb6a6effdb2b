"""Built-in macros: seq! and the sorted-order checks."""

from .seq import SeqMacro, SeqSpec, parse_header, seq
from .sorted import check_attr, sorted_attr

__all__ = ['SeqMacro', 'SeqSpec', 'parse_header', 'seq', 'check_attr', 'sorted_attr']
