"""Functions bound into the scope of a template while it is evaluated."""

from __future__ import annotations

import builtins
from collections.abc import Iterable, Iterator
from typing import Any, Callable, Dict, List, Union

from template_text.exceptions import BadConversionError, UndefinedReferenceError

# Scope key of the custom value-to-text conversion.
CONVERTER = "to_text"

# Supplied only when the scope does not define them.
DEFAULT_PRIMITIVES: Dict[str, Any] = {"__builtins__": builtins}

LineSource = Union[Iterable[Any], Callable[[], Iterable[Any]]]


def make_to_text(converter: Callable[[Any], Any] = str) -> Callable[[Any, str], str]:
    """Create the conversion used for fields.

    Args:
        converter: Turns a value into text; its result must be a string.

    Returns:
        A function of the value and of the expression text it came from.
    """

    def to_text(value: Any, expression: str = "<??>") -> str:
        if value is None:
            raise UndefinedReferenceError(expression)
        text = converter(value)
        if not isinstance(text, str):
            raise BadConversionError(text)
        return text

    return to_text


def make_insert_lines(
    to_text: Callable[[Any, str], str],
) -> Callable[[List[str], LineSource, str, str], None]:
    """Create the function used by list expansions."""

    def insert_lines(
        text: List[str], lines: LineSource, indent: str, expression: str = "<??>"
    ) -> None:
        if lines is None:
            raise UndefinedReferenceError(expression)
        if callable(lines):
            lines = lines()
        if isinstance(lines, (str, bytes)) or not isinstance(lines, Iterable):
            raise TypeError(
                f"Expression '{expression}' must give an iterable of lines, "
                f"or a function returning one (was {type(lines).__name__})"
            )

        count = 0
        for line in lines:
            count += 1
            if not isinstance(line, str):
                line = to_text(line, expression)
            text.append(indent + line if line != "" else "")

        if count == 0 and indent:
            text.append(indent)

    return insert_lines


def decorate_lines(
    source: LineSource, prefix: str = "", suffix: str = ""
) -> Callable[[], Iterator[str]]:
    """Wrap every non-empty line of a sequence with a prefix and a suffix.

    The source is not modified; empty lines are passed through as they are.

    Example:
        >>> lines = decorate_lines(["a", "", "b"], "-- ", ";")
        >>> list(lines())
        ['-- a;', '', '-- b;']

    Args:
        source: An iterable, or a function returning one.
        prefix: Text put before each line.
        suffix: Text put after each line.

    Returns:
        A function returning a fresh iterator over the decorated lines,
        suitable for a list expansion.
    """

    def generate() -> Iterator[str]:
        items = source() if callable(source) else source
        for item in items:
            yield f"{prefix}{item}{suffix}" if item != "" else ""

    return generate
