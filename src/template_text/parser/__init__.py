"""Template parsing - line classification and field tokenizing."""

from template_text.parser.fields import tokenize
from template_text.parser.lines import classify
from template_text.parser.statements import Statement, scan_statement
from template_text.parser.spec import (
    IncludeLine,
    ListLine,
    Segment,
    StatementLine,
    Template,
    TextLine,
    Tokens,
)

__all__ = [
    "classify",
    "tokenize",
    "scan_statement",
    "Statement",
    "Template",
    "StatementLine",
    "IncludeLine",
    "ListLine",
    "TextLine",
    "Segment",
    "Tokens",
]
