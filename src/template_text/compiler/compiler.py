"""Compiler - expands a template into Program IR."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import List, Mapping, Optional, Tuple, Union

from template_text.compiler.spec import (
    EmitExpression,
    EmitListExpansion,
    EmitLiteral,
    IncludeMarker,
    Inclusion,
    Instruction,
    Program,
    Prologue,
    RawStatement,
)
from template_text.exceptions import ExpansionError, UnresolvedIncludeError
from template_text.options import ExpansionOptions
from template_text.parser.fields import tokenize
from template_text.parser.lines import classify
from template_text.parser.quoting import unquote
from template_text.parser.statements import scan_statement
from template_text.parser.spec import (
    IncludeLine,
    ListLine,
    StatementLine,
    Template,
)

log = logging.getLogger(__name__)

TemplateSource = Union[str, Template]

# '@end' closes the innermost block
BLOCK_END = re.compile(r"end\s*(#.*)?")
# clauses continuing the block they follow
BLOCK_CONTINUATION = re.compile(r"(else|elif|except|finally)\b")


class Compiler:
    """Compiles templates to Program IR."""

    def __init__(
        self,
        options: Optional[ExpansionOptions] = None,
        included: Optional[Mapping[str, TemplateSource]] = None,
    ):
        """Initialize compiler.

        Args:
            options: Expansion options; defaults apply when omitted.
            included: Templates that inclusion tokens may reference, by name.
                Included templates resolve their own inclusions here too.
        """
        self.options = options or ExpansionOptions()
        self.included: Mapping[str, TemplateSource] = included or {}

    def compile(self, template: TemplateSource) -> Program:
        """Expand a template into a Program.

        Every line of the template becomes one instruction, except
        inclusions, which splice the included program in place.

        Args:
            template: The template text, or a Template.

        Returns:
            The Program, with its source map and included programs.

        Raises:
            UnresolvedIncludeError: An inclusion names an unknown template.
            ExpansionError: Malformed inclusion, circular inclusion or
                unbalanced '@end'.
        """
        template = Template.coerce(template)
        builder = _ProgramBuilder(self, template, " " * self.options.indent, ())
        return builder.build()

    def resolve(self, name: str, line: int) -> Template:
        if name not in self.included:
            raise UnresolvedIncludeError(name, line)
        return Template.coerce(self.included[name], name)


@dataclass
class _Block:
    """A statement block left open by an '@' line ending with ':'."""

    line: int  # source line of the header
    indent: int  # columns of the header code
    body: Optional[int] = None  # columns of the body statements, once seen
    empty: bool = True  # no instruction emitted in the current branch

    @property
    def indented(self) -> bool:
        """Body written with Python indentation; a dedent closes the block."""
        return self.body is not None and self.body > self.indent


class _ProgramBuilder:
    """Builds the Program of one template."""

    def __init__(
        self,
        compiler: Compiler,
        template: Template,
        indent: str,
        chain: Tuple[str, ...],
    ):
        self.compiler = compiler
        self.template = template
        self.indent = indent
        self.chain = chain  # names of the templates being included
        self.program = Program(name=template.name, source_lines=template.lines)
        self.depth = 0
        self.open_blocks: List[_Block] = []
        # brackets left open by a statement spanning several '@' lines,
        # and (indent, line) of its first line
        self.brackets = 0
        self.pending: Optional[Tuple[int, int]] = None

    def build(self) -> Program:
        source_lines = self.program.source_lines
        self.program.append(Prologue(), 1)

        for number, line in enumerate(source_lines, start=1):
            parsed = classify(line)
            if isinstance(parsed, StatementLine):
                self._statement(parsed.code, number)
            elif isinstance(parsed, IncludeLine):
                self._include(parsed, number)
            elif isinstance(parsed, ListLine):
                self._list_expansion(parsed, number)
            else:
                self._text(parsed.text, number)

        # the end of the template is a dedent for Python-indented blocks
        unclosed = [b.line for b in self.open_blocks if not b.indented]
        if unclosed:
            log.warning(
                "Template '%s': block(s) opened at line(s) %s are never closed with '@end'",
                self.template.name,
                ", ".join(str(n) for n in unclosed),
            )
        last = max(len(source_lines), 1)
        while self.open_blocks:
            self._close(last)

        if self.template.ends_with_newline:
            # preserves the line terminator once lines are joined
            self.program.append(EmitLiteral(""), len(source_lines))
            self.program.ends_with_newline = True

        return self.program

    def _emit(self, instruction: Instruction, number: int) -> None:
        if self.open_blocks:
            self.open_blocks[-1].empty = False
        self.program.append(replace(instruction, depth=self.depth), number)

    def _open(self, indent: int, number: int) -> None:
        self.open_blocks.append(_Block(line=number, indent=indent))
        self.depth += 1

    def _close(self, number: int) -> None:
        # 'pass' keeps empty blocks valid
        self._emit(RawStatement("pass"), number)
        self.open_blocks.pop()
        self.depth -= 1

    def _close_dedented(self, indent: int, number: int, keep_equal: bool = False) -> None:
        """Close the Python-indented blocks that a statement at ``indent`` leaves.

        With ``keep_equal``, a block whose header has the same indentation
        stays open: the statement closes or continues that block itself.
        """
        while self.open_blocks:
            block = self.open_blocks[-1]
            if not block.indented or indent > block.indent:
                break
            if keep_equal and indent == block.indent:
                break
            self._close(number)

    def _check_indent(self, indent: int, number: int) -> None:
        if not self.open_blocks:
            return
        block = self.open_blocks[-1]
        if block.body is None:
            if indent < block.indent:
                raise ExpansionError(
                    f"'@' code is indented less than the block opened at line {block.line}",
                    number,
                )
            block.body = indent
        elif indent != block.body:
            raise ExpansionError(
                f"Inconsistent indentation of '@' code: {indent} columns, "
                f"the block opened at line {block.line} uses {block.body}",
                number,
            )

    def _statement(self, code: str, number: int) -> None:
        statement = scan_statement(code)

        if self.pending is not None:
            # continuation line of a statement with open brackets
            self._emit(RawStatement(statement.text), number)
            self.brackets += statement.brackets
            if self.brackets <= 0:
                indent, first = self.pending
                self.pending = None
                self.brackets = 0
                if statement.code.endswith(":"):
                    self._open(indent, first)
            return

        if statement.blank:
            # a comment does not count as a block body
            self.program.append(RawStatement(statement.text, depth=self.depth), number)
            return

        if BLOCK_END.fullmatch(statement.text):
            self._close_dedented(statement.indent, number, keep_equal=True)
            if not self.open_blocks:
                raise ExpansionError("'@end' does not close any block", number)
            self._close(number)
            return

        if BLOCK_CONTINUATION.match(statement.code):
            self._close_dedented(statement.indent, number, keep_equal=True)
            if self.open_blocks:
                block = self.open_blocks[-1]
                if block.empty:
                    self._emit(RawStatement("pass"), number)
                self.program.append(RawStatement(statement.text, depth=self.depth - 1), number)
                block.body = None
                block.empty = True
                return
        else:
            self._close_dedented(statement.indent, number)

        self._check_indent(statement.indent, number)
        self._emit(RawStatement(statement.text), number)
        if statement.brackets > 0:
            self.pending = (statement.indent, number)
            self.brackets = statement.brackets
        elif statement.code.endswith(":"):
            self._open(statement.indent, number)

    def _text(self, text: str, number: int) -> None:
        tokens = tokenize(text, self.compiler.options.alt_delimiters)
        if not tokens.matched:
            # no padding for empty lines, they would come out as blanks
            self._emit(EmitLiteral(self.indent + text if text else ""), number)
            return

        self._emit(
            EmitExpression(
                segments=tuple(tokens.segments),
                suffix=tokens.suffix,
                indent=self.indent,
            ),
            number,
        )

    def _escaped(self, parsed: Union[IncludeLine, ListLine], backslashes: str, number: int) -> None:
        token = parsed.text[len(parsed.indent) + parsed.backslashes :]
        self._emit(EmitLiteral(self.indent + parsed.indent + backslashes + token), number)

    def _list_expansion(self, parsed: ListLine, number: int) -> None:
        backslashes, escaped = unquote(parsed.backslashes)
        if escaped:
            self._escaped(parsed, backslashes, number)
            return

        indent = self.indent + parsed.indent + backslashes
        if not parsed.expression.strip():
            # keeps the alignment of an intentionally empty expansion
            self._emit(EmitLiteral(indent), number)
        else:
            self._emit(EmitListExpansion(parsed.expression, indent=indent), number)

    def _include(self, parsed: IncludeLine, number: int) -> None:
        backslashes, escaped = unquote(parsed.backslashes)
        if escaped:
            self._escaped(parsed, backslashes, number)
            return

        name = parsed.name
        if not name:
            raise ExpansionError("Malformed inclusion: empty template name", number)
        template = self.compiler.resolve(name, number)
        if name in self.chain:
            cycle = " -> ".join(self.chain + (name,))
            raise ExpansionError(f"Circular inclusion: {cycle}", number)

        log.debug(
            "Including '%s' at line %d of '%s'", name, number, self.template.name
        )
        nested = _ProgramBuilder(
            self.compiler,
            template,
            self.indent + parsed.indent + backslashes,
            self.chain + (name,),
        ).build()

        program = self.program
        self._emit(IncludeMarker(name, number), number)
        first_index = len(program.instructions) + 1
        for instruction in nested.body:
            program.append(replace(instruction, depth=instruction.depth + self.depth), name)
        program.included.setdefault(name, []).append(
            Inclusion(
                name=name,
                program=nested,
                at_line=number,
                first_index=first_index,
                size=len(nested.body),
            )
        )
        self._emit(IncludeMarker(name, number, closing=True), number)


def expand(
    template: TemplateSource,
    options: Optional[ExpansionOptions] = None,
    included: Optional[Mapping[str, TemplateSource]] = None,
) -> Program:
    """Expand a template into a Program; see Compiler.compile."""
    return Compiler(options, included).compile(template)
