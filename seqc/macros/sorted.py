"""
Sorted-order checks: #[sorted] and #[sorted::check].

#[sorted] on an enum checks that its variants are declared in lexical order.
#[sorted::check] on a function checks every `#[sorted] match` inside it:
arms must be sorted by their pattern path, a `_` wildcard must come last,
and other pattern shapes are rejected. The `#[sorted]` attributes on match
expressions are removed from the output.

The checked item is passed through unchanged and every problem found is
appended to it as a compile_error! payload.
"""

import bisect
from typing import List, Optional, Tuple

from ..diagnostics import ExpansionError, OutOfOrder, UnsupportedConstruct
from ..parser.cursor import TokenCursor
from ..parser.token_tree import (
    Delimiter, Group, Ident, Spacing, Span, TokenTree,
    is_group, is_ident, is_punct,
)


def sorted_attr(item, call_site: Optional[Span] = None) -> Tuple[TokenTree, ...]:
    """Expand #[sorted] applied to item."""
    item = tuple(item)
    variants = enum_variants(item)
    if variants is None:
        error = UnsupportedConstruct("expected enum or match expression", call_site)
        return item + error.to_compile_error()

    errors = check_order([(v.text, v.span) for v in variants])
    return item + payloads(errors)


def check_attr(item, call_site: Optional[Span] = None) -> Tuple[TokenTree, ...]:
    """Expand #[sorted::check] applied to item."""
    item = tuple(item)
    if not _is_fn(item):
        error = UnsupportedConstruct("expected `fn`", call_site)
        return item + error.to_compile_error()

    rewritten, errors = check_matches(item)
    return rewritten + payloads(errors)


def payloads(errors: List[ExpansionError]) -> Tuple[TokenTree, ...]:
    """All errors as consecutive compile_error! payloads."""
    tokens = ()
    for error in errors:
        tokens += error.to_compile_error()
    return tokens


def check_order(names: List[Tuple[str, Span]]) -> List[ExpansionError]:
    """
    Report every name that sorts before the name declared just above it.

    The message names the first earlier name it should precede.
    """
    errors = []
    checked: List[str] = []
    seen: List[str] = []  # kept sorted for the insertion point

    for name, span in names:
        if checked and name < checked[-1]:
            after = seen[bisect.bisect_right(seen, name)]
            errors.append(OutOfOrder(f"{name} should sort before {after}", span))
        checked.append(name)
        bisect.insort(seen, name)

    return errors


def skip_attributes(cursor: TokenCursor):
    """Skip any #[...] outer attributes at the cursor."""
    while is_punct(cursor.peek(), '#') and is_group(cursor.peek(1), Delimiter.BRACKET):
        cursor.skip(2)


def skip_visibility(cursor: TokenCursor):
    """Skip `pub` or `pub(...)`."""
    if is_ident(cursor.peek(), 'pub'):
        cursor.advance()
        if is_group(cursor.peek(), Delimiter.PARENTHESIS):
            cursor.advance()


def split_top_level(stream, separator: str = ',') -> List[Tuple[TokenTree, ...]]:
    """Split a stream on separator punctuation outside nested groups."""
    chunks = []
    current = []
    for token in stream:
        if is_punct(token, separator):
            chunks.append(tuple(current))
            current = []
        else:
            current.append(token)
    if current:
        chunks.append(tuple(current))
    return chunks


def enum_variants(item) -> Optional[List[Ident]]:
    """Variant identifiers if item is an enum, else None."""
    cursor = TokenCursor(item)
    skip_attributes(cursor)
    skip_visibility(cursor)

    if not is_ident(cursor.peek(), 'enum') or not is_ident(cursor.peek(1)):
        return None
    cursor.skip(2)

    # Generics and where clauses come before the variant block
    while not cursor.at_end() and not is_group(cursor.peek(), Delimiter.BRACE):
        cursor.advance()
    body = cursor.advance()
    if body is None:
        return None

    variants = []
    for chunk in split_top_level(body.stream):
        chunk_cursor = TokenCursor(chunk)
        skip_attributes(chunk_cursor)
        if is_ident(chunk_cursor.peek()):
            variants.append(chunk_cursor.peek())
    return variants


def _is_fn(item) -> bool:
    """Whether item is a function: `fn` appears before its body block."""
    for token in item:
        if is_ident(token, 'fn'):
            return True
        if is_group(token, Delimiter.BRACE):
            return False
    return False


def _is_sorted_attribute(token: Optional[TokenTree]) -> bool:
    return (is_group(token, Delimiter.BRACKET) and len(token.stream) == 1
            and is_ident(token.stream[0], 'sorted'))


def check_matches(stream) -> Tuple[Tuple[TokenTree, ...], List[ExpansionError]]:
    """
    Check every `#[sorted] match` in stream, at any depth.

    Returns the stream with those attributes removed, and the errors found.
    """
    tokens = []
    errors = []
    cursor = TokenCursor(stream)

    while not cursor.at_end():
        token = cursor.advance()

        if (is_punct(token, '#') and _is_sorted_attribute(cursor.peek())
                and is_ident(cursor.peek(1), 'match')):
            cursor.advance()  # drop the attribute
            tokens.append(cursor.advance())  # match

            # The scrutinee cannot contain a bare block, so the first brace group holds the arms
            while not cursor.at_end() and not is_group(cursor.peek(), Delimiter.BRACE):
                tokens.append(cursor.advance())
            arms = cursor.advance()
            if arms is None:
                break

            errors.extend(check_arms(arms.stream))
            inner, inner_errors = check_matches(arms.stream)
            errors.extend(inner_errors)
            tokens.append(arms.with_stream(inner))
        elif isinstance(token, Group):
            inner, inner_errors = check_matches(token.stream)
            errors.extend(inner_errors)
            tokens.append(token.with_stream(inner))
        else:
            tokens.append(token)

    return tuple(tokens), errors


def match_arms(stream) -> List[Tuple[TokenTree, ...]]:
    """Split the contents of a match block into arm patterns (guards included)."""
    patterns = []
    cursor = TokenCursor(stream)

    while not cursor.at_end():
        skip_attributes(cursor)

        pattern = []
        while not cursor.at_end() and not _at_fat_arrow(cursor):
            pattern.append(cursor.advance())
        if cursor.at_end():
            break
        cursor.skip(2)  # =>
        patterns.append(tuple(pattern))

        # Block bodies may omit the trailing comma
        if is_group(cursor.peek(), Delimiter.BRACE):
            cursor.advance()
            if is_punct(cursor.peek(), ','):
                cursor.advance()
            continue
        while not cursor.at_end() and not is_punct(cursor.peek(), ','):
            cursor.advance()
        cursor.advance()  # ,

    return patterns


def _at_fat_arrow(cursor: TokenCursor) -> bool:
    first = cursor.peek()
    return (is_punct(first, '=') and first.spacing is Spacing.JOINT
            and is_punct(cursor.peek(1), '>'))


def arm_path(pattern) -> Optional[str]:
    """
    The `::`-joined path of an arm pattern, or None for other shapes.

    Accepts `Name`, `a::b::Name`, `Name(..)` and `Name { .. }`, and
    identifier bindings `ref mut name` and `name @ subpattern`, whose path
    is the bound name.
    """
    cursor = TokenCursor(pattern)
    segments = []

    binding = False
    while is_ident(cursor.peek(), 'ref') or is_ident(cursor.peek(), 'mut'):
        cursor.advance()
        binding = True

    if binding or (is_ident(cursor.peek()) and is_punct(cursor.peek(1), '@')):
        name = cursor.advance()
        if not is_ident(name) or name.text == '_':
            return None
        if cursor.at_end() or is_punct(cursor.peek(), '@'):
            return name.text
        return None

    if is_punct(cursor.peek(), ':') and is_punct(cursor.peek(1), ':'):
        cursor.skip(2)
    while True:
        segment = cursor.peek()
        if not is_ident(segment) or segment.text == '_':
            return None
        segments.append(segment.text)
        cursor.advance()
        first = cursor.peek()
        if not (is_punct(first, ':') and first.spacing is Spacing.JOINT
                and is_punct(cursor.peek(1), ':')):
            break
        cursor.skip(2)

    if is_group(cursor.peek(), Delimiter.PARENTHESIS) or is_group(cursor.peek(), Delimiter.BRACE):
        cursor.advance()
    if not cursor.at_end():
        return None
    return '::'.join(segments)


def _strip_pattern(pattern) -> Tuple[TokenTree, ...]:
    """Drop a leading `|` and any `if` guard."""
    pattern = tuple(pattern)
    if pattern and is_punct(pattern[0], '|'):
        pattern = pattern[1:]
    for i, token in enumerate(pattern):
        if is_ident(token, 'if'):
            return pattern[:i]
    return pattern


def check_arms(stream) -> List[ExpansionError]:
    """Check the arms of one sorted match; every problem is reported."""
    errors = []
    names = []
    found_wildcard = False

    for pattern in match_arms(stream):
        pattern = _strip_pattern(pattern)
        if not pattern:
            continue
        span = pattern[0].span

        if found_wildcard:
            errors.append(UnsupportedConstruct("wildcard must be last arm", span))

        path = arm_path(pattern)
        if path is not None:
            names.append((path, span))
        elif len(pattern) == 1 and is_ident(pattern[0], '_'):
            found_wildcard = True
        else:
            errors.append(UnsupportedConstruct("unsupported by #[sorted]", span))

    # Order errors are interleaved with shape errors by position
    errors.extend(check_order(names))
    errors.sort(key=lambda e: (e.span.line, e.span.column))
    return errors
