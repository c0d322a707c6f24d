"""Renderer - converts Program IR to Python source."""

from typing import List

from template_text.compiler.spec import (
    INSERT_LINES,
    TEXT,
    TO_TEXT,
    EmitExpression,
    EmitListExpansion,
    EmitLiteral,
    IncludeMarker,
    Instruction,
    Program,
    Prologue,
    RawStatement,
)


class Renderer:
    """Renders a Program to Python module source, one line per instruction."""

    INDENT = "    "

    def render(self, program: Program) -> str:
        """Render a Program to Python source.

        Args:
            program: The Program IR to render.

        Returns:
            Source text whose line N is the instruction at position N.
        """
        return "\n".join(self.render_lines(program)) + "\n"

    def render_lines(self, program: Program) -> List[str]:
        return [self._render_instruction(i) for i in program.instructions]

    def _render_instruction(self, instruction: Instruction) -> str:
        code = self._render_code(instruction)
        if not code:
            return ""
        return self.INDENT * instruction.depth + code

    def _render_code(self, instruction: Instruction) -> str:
        if isinstance(instruction, Prologue):
            return f"{TEXT} = []"

        if isinstance(instruction, EmitLiteral):
            return f"{TEXT}.append({instruction.text!r})"

        if isinstance(instruction, EmitExpression):
            return f"{TEXT}.append({self._render_concat(instruction)})"

        if isinstance(instruction, EmitListExpansion):
            expression = instruction.expression
            return (
                f"{INSERT_LINES}({TEXT}, ({expression}), "
                f"{instruction.indent!r}, {expression!r})"
            )

        if isinstance(instruction, RawStatement):
            return instruction.code.strip()

        if isinstance(instruction, IncludeMarker):
            if instruction.closing:
                return f"# end of {instruction.name!r}"
            return f"# {instruction.name!r} included at line {instruction.at_line}"

        raise TypeError(f"Unknown instruction: {type(instruction).__name__}")

    def _render_concat(self, instruction: EmitExpression) -> str:
        """Build a string concatenation like ``'  ' + 'a=' + __to_text__((a), 'a')``."""
        pieces: List[str] = []
        if instruction.indent:
            pieces.append(repr(instruction.indent))

        for segment in instruction.segments:
            if segment.literal:
                pieces.append(repr(segment.literal))
            expression = segment.expression
            # an empty field has no value and emits its literal only
            if expression is not None and expression.strip():
                pieces.append(f"{TO_TEXT}(({expression}), {expression!r})")

        if instruction.suffix:
            pieces.append(repr(instruction.suffix))

        return " + ".join(pieces) or "''"
