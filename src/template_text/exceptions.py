"""Template Text Exceptions

Every failure carries a ``trail``: the ordered, human-readable lines that
attribute the failure to a line of the user template.
"""

from __future__ import annotations

import copy
from typing import Any, List, Optional


class TemplateError(Exception):
    """Base exception for all template errors."""

    def __init__(self, message: str, trail: Optional[List[str]] = None):
        self.message = message
        self.trail: List[str] = list(trail) if trail else []
        super().__init__(message)

    def format_trail(self) -> str:
        """Return the trail as a single block of text."""
        return "\n".join(self.trail or [self.message])


class ExpansionError(TemplateError):
    """Raised when a template cannot be expanded into a program."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        trail = [message if line is None else f"line {line}: {message}"]
        super().__init__(message, trail)


class UnresolvedIncludeError(ExpansionError):
    """Raised when an inclusion names a template that was not supplied."""

    def __init__(self, name: str, line: Optional[int] = None):
        self.name = name
        super().__init__(f"Included template not found: '{name}'", line)


class TemplateSyntaxError(TemplateError):
    """Raised when the code generated from a template does not compile.

    The expanded program is attached for inspection, even though it cannot
    be evaluated.
    """

    def __init__(
        self,
        message: str,
        trail: Optional[List[str]] = None,
        program: Any = None,
        line: Optional[int] = None,
    ):
        self.program = program
        self.line = line
        super().__init__(message, trail)


class EvaluationError(TemplateError):
    """Raised when evaluating a loaded template fails."""

    def __init__(
        self,
        message: str,
        trail: Optional[List[str]] = None,
        cause: Optional[BaseException] = None,
        line: Optional[int] = None,
    ):
        self.cause = cause
        self.line = line  # template line of the failure, when in the template itself
        super().__init__(message, trail)

    def wrap(self, trail: List[str], line: Optional[int] = None) -> "EvaluationError":
        """Return a copy of this error, of the same class, with a new trail.

        Used when a template evaluated by another one fails: the outer
        template re-raises the failure with its own trail prepended.
        """
        wrapped = copy.copy(self)
        wrapped.trail = list(trail)
        wrapped.line = line
        wrapped.cause = self
        return wrapped


class UndefinedReferenceError(EvaluationError):
    """Raised when an expression has no value in the current scope."""

    def __init__(self, expression: str, message: Optional[str] = None):
        self.expression = expression
        super().__init__(
            message
            or f"Expression '{expression}' is undefined in the current scope"
        )


class BadConversionError(EvaluationError):
    """Raised when the custom string conversion does not return a string."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            "The given 'to_text' function did not return a string "
            f"(got {type(value).__name__})"
        )
