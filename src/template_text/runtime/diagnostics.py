"""Diagnostics - attribute failures of generated code to template lines.

Line numbers of the generated code are taken from the interpreter's own
reports: the ``File "<user template>", line N`` entries of syntax errors,
and the frames of runtime tracebacks. They are then resolved through the
source map of the program, down into included programs.
"""

from __future__ import annotations

import re
import traceback
from dataclasses import dataclass
from types import CodeType
from typing import AbstractSet, List, Optional, Set, Tuple

from template_text.compiler.spec import CHUNK_NAME, Program
from template_text.exceptions import TemplateError

CHUNK_LOCATION = re.compile(
    r'File "' + re.escape(CHUNK_NAME) + r'", line (\d+)(?:, in (.*))?'
)

NESTED_INDENT = "  "


@dataclass(frozen=True)
class Diagnostic:
    """A message, and the generated code line it refers to, when known."""

    line: Optional[int]
    message: str


def parse_diagnostic(text: str) -> Diagnostic:
    """Extract the generated code line number from an interpreter report.

    Text without a location in the generated code is kept as an opaque
    message, with no line.
    """
    match = CHUNK_LOCATION.search(text)
    if match is None:
        return Diagnostic(line=None, message=text.strip())
    residual = text[match.end() :].strip() or match.group(2) or ""
    return Diagnostic(line=int(match.group(1)), message=residual.strip())


def code_objects(code: CodeType) -> Set[CodeType]:
    """The code object and every function body compiled within it."""
    found = {code}
    for const in code.co_consts:
        if isinstance(const, CodeType):
            found |= code_objects(const)
    return found


def failure_message(error: BaseException) -> str:
    if isinstance(error, TemplateError):
        return error.message
    text = str(error)
    return f"{type(error).__name__}: {text}" if text else type(error).__name__


def describe_failure(
    error: BaseException, codes: Optional[AbstractSet[CodeType]] = None
) -> Tuple[Diagnostic, List[Diagnostic]]:
    """Locate a runtime failure in the generated code.

    Args:
        error: The exception raised while executing the generated code.
        codes: Code objects of the program; frames of other code (such as a
            nested template sharing the file name) are left out. When None,
            frames are selected by file name.

    Returns:
        The cause, located at the innermost frame of the program, and one
        entry per frame of the program, outermost first.
    """
    stack: List[Diagnostic] = []
    for frame, lineno in traceback.walk_tb(error.__traceback__):
        code = frame.f_code
        if codes is not None:
            if code not in codes:
                continue
        elif code.co_filename != CHUNK_NAME:
            continue
        stack.append(Diagnostic(line=lineno, message=f"in {code.co_name}"))

    line = stack[-1].line if stack else None
    return Diagnostic(line=line, message=failure_message(error)), stack


def describe_syntax_error(error: SyntaxError) -> Diagnostic:
    """Locate a compilation failure in the generated code."""
    line = None
    for text in traceback.format_exception_only(type(error), error):
        found = parse_diagnostic(text)
        if found.line is not None:
            line = found.line
            break
    if line is None and error.filename == CHUNK_NAME:
        line = error.lineno
    return Diagnostic(line=line, message=error.msg or failure_message(error))


def build_error_trace(
    trail: List[str], program: Program, index: int, indent: str = ""
) -> None:
    """Append the template lines responsible for generated code line ``index``.

    Positions inside an included program are followed into that program,
    one indentation level deeper per inclusion.
    """

    def put(text: str) -> None:
        trail.append(indent + text)

    target = program.source_map.get(index)
    if target is None:
        put(f"Internal error: could not back track the given line number {index}")
        return

    if isinstance(target, int):
        put(f"[{program.name}]:{target}: >>> {program.source_line(target)} <<<")
        return

    inclusion = program.inclusion_at(index)
    if inclusion is None:
        put(f"Internal error: no inclusion of '{target}' at line number {index}")
        return

    put(f"in template '{inclusion.name}' included at line {inclusion.at_line}")
    build_error_trace(
        trail, inclusion.program, inclusion.nested_index(index), indent + NESTED_INDENT
    )


def syntax_error_trail(program: Program, error: SyntaxError) -> Tuple[List[str], Diagnostic]:
    found = describe_syntax_error(error)
    trail = [f"Syntax error in the template: {found.message}"]
    if found.line is not None:
        build_error_trace(trail, program, found.line)
    return trail, found


def evaluation_trail(
    program: Program,
    error: BaseException,
    message: Optional[str] = None,
    codes: Optional[AbstractSet[CodeType]] = None,
) -> List[str]:
    """Build the trail of a failed evaluation.

    Args:
        program: The program being evaluated.
        error: The exception raised by the generated code.
        message: Headline message; defaults to the exception's.
        codes: Code objects of the program; see describe_failure.

    Returns:
        Header, location of the cause, and a "Possible stacktrace" section
        when frames of the program were found.
    """
    cause, stack = describe_failure(error, codes)
    trail = [f"Template evaluation failed: {message or cause.message}"]
    if cause.line is not None:
        build_error_trace(trail, program, cause.line)
    if stack:
        trail.append("Possible stacktrace:")
        for entry in stack:
            if entry.line is not None:
                build_error_trace(trail, program, entry.line, NESTED_INDENT)
    return trail
