"""Line classifier - decides what each template line stands for."""

from __future__ import annotations

import re

from .spec import IncludeLine, Line, ListLine, StatementLine, TextLine

# Checked in this order, first match wins.
STATEMENT = re.compile(r"\s*@")
# Names and expressions are matched greedily: only one token per line.
INCLUDE = re.compile(r"(\s*)(\\*)\$<(.*)>\s*")
LIST_EXPANSION = re.compile(r"(\s*)(\\*)\$\{(.*)\}(\s*)")


def classify(line: str) -> Line:
    """Classify one source line and extract its payload.

    A token is only recognized when it is alone on its line (surrounding
    blanks aside); anything else falls through to a plain text line.
    """
    match = STATEMENT.match(line)
    if match:
        return StatementLine(code=line[match.end() :])

    match = INCLUDE.fullmatch(line)
    if match:
        indent, backslashes, name = match.groups()
        return IncludeLine(
            indent=indent, backslashes=len(backslashes), name=name, text=line
        )

    match = LIST_EXPANSION.fullmatch(line)
    if match:
        indent, backslashes, expression, trailing = match.groups()
        return ListLine(
            indent=indent,
            backslashes=len(backslashes),
            expression=expression,
            trailing=trailing,
            text=line,
        )

    return TextLine(text=line)
