"""Template Text - line-oriented text templates with Python code.

Usage:
    from template_text import render

    text = render("Hello $(name)!", {"name": "world"})
"""

from template_text._version import __version__
from template_text.compiler import Program, expand
from template_text.exceptions import (
    BadConversionError,
    EvaluationError,
    ExpansionError,
    TemplateError,
    TemplateSyntaxError,
    UndefinedReferenceError,
    UnresolvedIncludeError,
)
from template_text.options import EvaluationOptions, ExpansionOptions, load_scope_file
from template_text.parser import Template
from template_text.runtime import (
    BoundTemplate,
    build_error_trace,
    decorate_lines,
    load,
    parse_diagnostic,
    render,
)

__all__ = [
    "__version__",
    # Core
    "Template",
    "Program",
    "BoundTemplate",
    "expand",
    "load",
    "render",
    "decorate_lines",
    # Configuration
    "ExpansionOptions",
    "EvaluationOptions",
    "load_scope_file",
    # Diagnostics
    "parse_diagnostic",
    "build_error_trace",
    # Errors
    "TemplateError",
    "ExpansionError",
    "UnresolvedIncludeError",
    "TemplateSyntaxError",
    "EvaluationError",
    "UndefinedReferenceError",
    "BadConversionError",
]
