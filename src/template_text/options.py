"""Configuration for template expansion and evaluation.

- ExpansionOptions: how a template is turned into a program
- EvaluationOptions: how the produced lines are post-processed and returned
- scope files: YAML mappings loaded as the variables of a template
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


class ExpansionOptions(BaseModel):
    """Options of the template expander."""

    model_config = {"populate_by_name": True, "frozen": True}

    indent: int = Field(
        default=0,
        ge=0,
        alias="indentColumns",
        description="Blanks prepended to every output line",
    )
    alt_delimiters: bool = Field(
        default=False,
        alias="useAltDelimiters",
        description="Match fields written as «expr» instead of $(expr)",
    )


class EvaluationOptions(BaseModel):
    """Options of template evaluation."""

    model_config = {"populate_by_name": True, "frozen": True}

    return_lines: bool = Field(
        default=False,
        alias="returnAsLines",
        description="Return the list of lines instead of the joined text",
    )
    preserve_blank_lines: bool = Field(
        default=True,
        alias="preserveBlankLines",
        description="Keep lines made of blanks only; otherwise they become empty",
    )
    preserve_empty_lines: bool = Field(
        default=True,
        alias="preserveEmptyLines",
        description="Keep empty lines; otherwise they are dropped",
    )


def load_scope_file(path: Path) -> dict[str, Any]:
    """Load template variables from a YAML file."""
    if not path.exists():
        raise FileNotFoundError(f"Scope file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Scope file must hold a mapping at the top level: {path}")

    return data
