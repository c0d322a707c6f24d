"""Compiler IR spec - the program a template expands to."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from template_text.parser.spec import DEFAULT_TEMPLATE_NAME, Segment

# File name given to the generated code; diagnostics look for it.
CHUNK_NAME = "<user template>"

# Names the generated code expects in its scope.
TEXT = "__text__"
INSERT_LINES = "__insert_lines__"
TO_TEXT = "__to_text__"
RUNTIME_BINDINGS = (TEXT, INSERT_LINES, TO_TEXT)

# Instructions every program starts with; not spliced into includers.
PROLOGUE_SIZE = 1


@dataclass(frozen=True)
class Instruction:
    """One line of generated code, at a block ``depth``."""

    depth: int = field(default=0, kw_only=True)


@dataclass(frozen=True)
class Prologue(Instruction):
    """Creates the output list."""


@dataclass(frozen=True)
class EmitLiteral(Instruction):
    """Appends a fixed line of text."""

    text: str


@dataclass(frozen=True)
class EmitExpression(Instruction):
    """Appends a line made of literal text and evaluated fields."""

    segments: Tuple[Segment, ...]
    suffix: str = ""
    indent: str = ""


@dataclass(frozen=True)
class EmitListExpansion(Instruction):
    """Appends one indented line per element of a sequence."""

    expression: str
    indent: str = ""


@dataclass(frozen=True)
class RawStatement(Instruction):
    """User code, copied verbatim."""

    code: str


@dataclass(frozen=True)
class IncludeMarker(Instruction):
    """Boundary around the instructions spliced from an included template."""

    name: str
    at_line: int
    closing: bool = False


@dataclass
class Inclusion:
    """An included program, spliced into its includer."""

    name: str
    program: "Program"
    at_line: int  # includer's source line holding the token
    first_index: int  # includer's position of the first spliced instruction
    size: int

    def contains(self, index: int) -> bool:
        return self.first_index <= index < self.first_index + self.size

    def nested_index(self, index: int) -> int:
        """Translate an includer position into a position of the included program."""
        return index - self.first_index + PROLOGUE_SIZE + 1


@dataclass
class Program:
    """An expanded template.

    Positions are 1-based and equal to the line numbers of the generated
    code, one instruction per line.
    """

    name: str = DEFAULT_TEMPLATE_NAME
    source_lines: List[str] = field(default_factory=list)
    instructions: List[Instruction] = field(default_factory=list)
    # position -> own source line, or name of the included template
    source_map: Dict[int, Union[int, str]] = field(default_factory=dict)
    included: Dict[str, List[Inclusion]] = field(default_factory=dict)
    # the last instruction emits the empty line of a final line terminator
    ends_with_newline: bool = False

    def append(self, instruction: Instruction, origin: Union[int, str]) -> int:
        """Append an instruction and record where it comes from."""
        self.instructions.append(instruction)
        position = len(self.instructions)
        self.source_map[position] = origin
        return position

    @property
    def body(self) -> List[Instruction]:
        return self.instructions[PROLOGUE_SIZE:]

    def inclusion_at(self, index: int) -> Optional[Inclusion]:
        name = self.source_map.get(index)
        if not isinstance(name, str):
            return None
        for inclusion in self.included.get(name, []):
            if inclusion.contains(index):
                return inclusion
        return None

    def source_line(self, number: int) -> Optional[str]:
        if 1 <= number <= len(self.source_lines):
            return self.source_lines[number - 1]
        return None

    @property
    def code(self) -> str:
        """The generated Python source."""
        from template_text.compiler.renderer import Renderer

        return Renderer().render(self)
