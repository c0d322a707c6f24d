from dataclasses import dataclass, field
from typing import List, Optional, Union

DEFAULT_TEMPLATE_NAME = "user template"


@dataclass(frozen=True)
class Template:
    """Template source text, split into lines on demand."""

    text: str
    name: str = DEFAULT_TEMPLATE_NAME

    @classmethod
    def coerce(cls, value: Union[str, "Template"], name: Optional[str] = None) -> "Template":
        if isinstance(value, Template):
            if name is None or name == value.name:
                return value
            return cls(text=value.text, name=name)
        if not isinstance(value, str):
            raise TypeError(
                f"Template '{name or DEFAULT_TEMPLATE_NAME}' must be a string or Template"
            )
        return cls(text=value, name=name or DEFAULT_TEMPLATE_NAME)

    @property
    def lines(self) -> List[str]:
        """Source lines; a final line terminator does not start a new line."""
        text = self.text
        if text.endswith("\n"):
            text = text[:-1]
        return text.split("\n")

    @property
    def ends_with_newline(self) -> bool:
        return self.text.endswith("\n")


@dataclass(frozen=True)
class StatementLine:
    """A line starting with '@': the rest of it is code."""

    code: str


@dataclass(frozen=True)
class IncludeLine:
    """A line holding only a '$<name>' inclusion token."""

    indent: str
    backslashes: int
    name: str
    text: str


@dataclass(frozen=True)
class ListLine:
    """A line holding only a '${expr}' list expansion token."""

    indent: str
    backslashes: int
    expression: str
    trailing: str
    text: str


@dataclass(frozen=True)
class TextLine:
    """Any other line: literal text, possibly with fields."""

    text: str


Line = Union[StatementLine, IncludeLine, ListLine, TextLine]


@dataclass(frozen=True)
class Segment:
    """Literal text followed by an optional field expression.

    ``expression`` is None when the field was quoted and "" when the field
    was empty; in both cases the segment emits only ``literal``.
    """

    literal: str
    expression: Optional[str] = None


@dataclass
class Tokens:
    """Result of tokenizing a text line."""

    segments: List[Segment] = field(default_factory=list)
    suffix: str = ""

    @property
    def matched(self) -> bool:
        return bool(self.segments)
