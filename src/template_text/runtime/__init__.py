"""Template runtime - evaluation of programs, and failure diagnostics."""

from template_text.runtime.diagnostics import (
    Diagnostic,
    build_error_trace,
    parse_diagnostic,
)
from template_text.runtime.helpers import decorate_lines
from template_text.runtime.loader import BoundTemplate, load, render

__all__ = [
    "BoundTemplate",
    "load",
    "render",
    "decorate_lines",
    "Diagnostic",
    "parse_diagnostic",
    "build_error_trace",
]
