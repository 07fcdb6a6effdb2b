"""Source printing - converts token trees back to text."""

from .printer import SourcePrinter, to_source

__all__ = ['SourcePrinter', 'to_source']
