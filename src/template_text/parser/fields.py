"""Field tokenizer - splits a text line into literal text and expressions.

Two field syntaxes are supported:

- ``$(expr)``: the expression spans balanced parentheses;
- ``«expr»``: the alternative delimiters, content matched non-greedily.
"""

from __future__ import annotations

import re
from typing import Callable, Optional, Tuple

from .quoting import count_backslashes, unquote
from .spec import Segment, Tokens

ALT_FIELD = re.compile(r"«(.*?)»")

# (token start, token end, expression text)
Match = Tuple[int, int, str]


def _balanced_end(line: str, open_index: int) -> Optional[int]:
    """Return the index past the parenthesis closing the one at ``open_index``."""
    depth = 0
    for index in range(open_index, len(line)):
        char = line[index]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index + 1
    return None


def find_default_field(line: str, position: int) -> Optional[Match]:
    start = line.find("$(", position)
    while start != -1:
        end = _balanced_end(line, start + 1)
        if end is not None:
            return start, end, line[start + 2 : end - 1]
        # unbalanced here, a later '$(' may still match
        start = line.find("$(", start + 1)
    return None


def find_alt_field(line: str, position: int) -> Optional[Match]:
    match = ALT_FIELD.search(line, position)
    if match is None:
        return None
    return match.start(), match.end(), match.group(1)


def get_field_finder(alt_delimiters: bool = False) -> Callable[[str, int], Optional[Match]]:
    return find_alt_field if alt_delimiters else find_default_field


def tokenize(line: str, alt_delimiters: bool = False) -> Tokens:
    """Split a line into segments, left to right, applying quoting per field.

    Args:
        line: A text line (no line terminator).
        alt_delimiters: Match ``«expr»`` fields instead of ``$(expr)``.

    Returns:
        One segment per field found, plus the literal suffix after the last
        field. A line without fields has no segments and the whole line as
        suffix.
    """
    find_field = get_field_finder(alt_delimiters)
    tokens = Tokens()
    position = 0

    while True:
        found = find_field(line, position)
        if found is None:
            break
        start, end, expression = found

        run = count_backslashes(line, start, position)
        literal = line[position : start - run]
        backslashes, escaped = unquote(run)
        if escaped:
            tokens.segments.append(Segment(literal + backslashes + line[start:end]))
        else:
            tokens.segments.append(Segment(literal + backslashes, expression))
        position = end

    tokens.suffix = line[position:]
    return tokens
