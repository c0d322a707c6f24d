"""Template compiler - expands templates into programs of Python code."""

from template_text.compiler.compiler import Compiler, expand
from template_text.compiler.renderer import Renderer
from template_text.compiler.spec import Inclusion, Instruction, Program

__all__ = ["Compiler", "Renderer", "Program", "Instruction", "Inclusion", "expand"]
