"""Backslash quoting of special tokens.

A run of ``n`` backslashes right before a token that would otherwise be
processed stands for ``n // 2`` literal backslashes; an odd run also
escapes the token itself, which is then copied verbatim.
"""

from typing import Tuple


def unquote(backslashes: int) -> Tuple[str, bool]:
    """Resolve a backslash run.

    Returns:
        The literal backslashes to emit, and whether the token is escaped.
    """
    return "\\" * (backslashes // 2), backslashes % 2 == 1


def count_backslashes(text: str, end: int, start: int = 0) -> int:
    """Count consecutive backslashes in ``text[start:end]`` ending at ``end``."""
    count = 0
    while end - count > start and text[end - count - 1] == "\\":
        count += 1
    return count
