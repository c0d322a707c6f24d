"""Loader - binds programs to a scope, and evaluates them into text."""

from __future__ import annotations

import logging
from types import CodeType
from typing import Any, Dict, List, Mapping, Optional, Union

from template_text.compiler.compiler import TemplateSource, expand
from template_text.compiler.spec import (
    CHUNK_NAME,
    INSERT_LINES,
    RUNTIME_BINDINGS,
    TEXT,
    TO_TEXT,
    Program,
)
from template_text.exceptions import (
    EvaluationError,
    TemplateSyntaxError,
    UndefinedReferenceError,
)
from template_text.options import EvaluationOptions, ExpansionOptions
from template_text.runtime.diagnostics import (
    NESTED_INDENT,
    code_objects,
    describe_failure,
    evaluation_trail,
    failure_message,
    syntax_error_trail,
)
from template_text.runtime.helpers import (
    CONVERTER,
    DEFAULT_PRIMITIVES,
    make_insert_lines,
    make_to_text,
)

log = logging.getLogger(__name__)

Scope = Dict[str, Any]
Rendered = Union[str, List[str]]


class BoundTemplate:
    """A compiled program bound to the scope its code runs in.

    The scope is the caller's mapping, not a copy: it is read again at every
    evaluation, and statements of the template may change it.
    """

    def __init__(self, program: Program, scope: Scope, code: CodeType):
        self.program = program
        self.scope = scope
        self.code = code
        self._codes = code_objects(code)

    def evaluate(
        self,
        options: Optional[EvaluationOptions] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> Rendered:
        """Evaluate the template into text.

        Args:
            options: Output options; defaults keep every line and join them.
            overrides: Values merged into the scope first, winning over
                existing ones.

        Returns:
            The text, or its list of lines if ``options.return_lines``.

        Raises:
            UndefinedReferenceError: An expression has no value.
            BadConversionError: The scope's 'to_text' returned a non-string.
            EvaluationError: Any other failure of the template's code.
        """
        options = options or EvaluationOptions()
        scope = self.scope
        if overrides:
            scope.update(overrides)
        for key, value in DEFAULT_PRIMITIVES.items():
            scope.setdefault(key, value)

        to_text = make_to_text(scope.get(CONVERTER) or str)
        saved = {key: scope[key] for key in RUNTIME_BINDINGS if key in scope}
        scope[TO_TEXT] = to_text
        scope[INSERT_LINES] = make_insert_lines(to_text)
        try:
            exec(self.code, scope)
            lines: List[str] = scope[TEXT]
        except EvaluationError as error:
            if error.trail:
                # failure of another template evaluated by this one
                trail = self._trail(error) + [NESTED_INDENT + t for t in error.trail]
                raise error.wrap(trail, line=self._line(error)) from error
            error.trail = self._trail(error)
            error.line = self._line(error)
            raise
        except NameError as error:
            name = getattr(error, "name", None) or str(error)
            missing = UndefinedReferenceError(
                name, f"Name '{name}' is undefined in the current scope"
            )
            missing.cause = error
            missing.trail = self._trail(error, missing.message)
            missing.line = self._line(error)
            raise missing from error
        except Exception as error:
            message = failure_message(error)
            raise EvaluationError(
                message, self._trail(error, message), cause=error, line=self._line(error)
            ) from error
        finally:
            for key in RUNTIME_BINDINGS:
                if key in saved:
                    scope[key] = saved[key]
                else:
                    scope.pop(key, None)

        if self.program.ends_with_newline and lines and lines[-1] == "":
            lines = filter_lines(lines[:-1], options) + [""]
        else:
            lines = filter_lines(lines, options)
        if options.return_lines:
            return lines
        return "\n".join(lines)

    def _trail(self, error: BaseException, message: Optional[str] = None) -> List[str]:
        trail = evaluation_trail(self.program, error, message, self._codes)
        log.debug("%s", "\n".join(trail))
        return trail

    def _line(self, error: BaseException) -> Optional[int]:
        cause, _ = describe_failure(error, self._codes)
        if cause.line is None:
            return None
        target = self.program.source_map.get(cause.line)
        return target if isinstance(target, int) else None


def filter_lines(lines: List[str], options: EvaluationOptions) -> List[str]:
    """Apply the blank and empty line options.

    A line of blanks only becomes empty unless blank lines are preserved;
    an empty line is then dropped unless empty lines are preserved.
    """
    if options.preserve_blank_lines and options.preserve_empty_lines:
        return list(lines)

    result: List[str] = []
    for line in lines:
        if line and not line.strip() and not options.preserve_blank_lines:
            line = ""
        if line == "" and not options.preserve_empty_lines:
            continue
        result.append(line)
    return result


def load(
    template: TemplateSource,
    options: Optional[ExpansionOptions] = None,
    scope: Optional[Scope] = None,
    included: Optional[Mapping[str, TemplateSource]] = None,
) -> BoundTemplate:
    """Expand a template, compile its code and bind it to a scope.

    Args:
        template: The template text, or a Template.
        options: Expansion options.
        scope: Variables visible to the template; a new dict when omitted.
        included: Templates available for inclusion, by name.

    Returns:
        The BoundTemplate, ready to be evaluated.

    Raises:
        TemplateSyntaxError: The generated code does not compile; the
            program is attached to the error.
        ExpansionError: The template cannot be expanded.
    """
    program = expand(template, options, included)
    try:
        code = compile(program.code, CHUNK_NAME, "exec")
    except SyntaxError as error:
        trail, found = syntax_error_trail(program, error)
        target = program.source_map.get(found.line) if found.line is not None else None
        log.debug("%s", "\n".join(trail))
        raise TemplateSyntaxError(
            found.message,
            trail,
            program=program,
            line=target if isinstance(target, int) else None,
        ) from error

    return BoundTemplate(program, scope if scope is not None else {}, code)


def render(
    template: TemplateSource,
    scope: Optional[Scope] = None,
    *,
    expansion: Optional[ExpansionOptions] = None,
    evaluation: Optional[EvaluationOptions] = None,
    included: Optional[Mapping[str, TemplateSource]] = None,
) -> Rendered:
    """Load and evaluate a template in one go."""
    return load(template, expansion, scope, included).evaluate(evaluation)
