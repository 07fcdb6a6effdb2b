"""Token tree parser - Builds token trees from flat tokens."""

from .parser import Parser, parse_source
from .cursor import TokenCursor
from .token_tree import *

__all__ = ['Parser', 'parse_source', 'TokenCursor']
