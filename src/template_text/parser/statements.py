"""Statement scanner - reads the layout of the code of an '@' line.

Only what block tracking needs is extracted: the indentation of the code,
the code without its trailing comment, and the brackets it leaves open.
String literals are skipped, so '#' and brackets inside them do not count.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

OPENING = "([{"
CLOSING = ")]}"
QUOTES = "'\""


@dataclass(frozen=True)
class Statement:
    """The code of one '@' line."""

    indent: int  # columns of leading blanks, tabs expanded
    text: str  # stripped code, comment included
    code: str  # stripped code, comment removed
    brackets: int  # opened minus closed brackets

    @property
    def blank(self) -> bool:
        """Nothing but blanks or a comment."""
        return not self.code


def _strip_comment(code: str) -> Tuple[str, int]:
    depth = 0
    quote = ""
    index = 0
    while index < len(code):
        char = code[index]
        if quote:
            if char == "\\":
                index += 2
                continue
            if code.startswith(quote, index):
                index += len(quote)
                quote = ""
                continue
        elif char == "#":
            return code[:index], depth
        elif char in QUOTES:
            quote = char * 3 if code.startswith(char * 3, index) else char
            index += len(quote)
            continue
        elif char in OPENING:
            depth += 1
        elif char in CLOSING:
            depth -= 1
        index += 1
    return code, depth


def scan_statement(code: str) -> Statement:
    """Scan the code following the '@' of a statement line.

    Example:
        >>> scan_statement("    for x in xs:  # loop")
        Statement(indent=4, text='for x in xs:  # loop', code='for x in xs:', brackets=0)
    """
    stripped = code.lstrip()
    leading = code[: len(code) - len(stripped)]
    without_comment, brackets = _strip_comment(stripped)
    return Statement(
        indent=len(leading.expandtabs()),
        text=stripped.rstrip(),
        code=without_comment.rstrip(),
        brackets=brackets,
    )
