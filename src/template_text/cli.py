"""Template Text CLI Main Entry Point

Usage:
    template-text render page.tpl                    # Print the evaluated template
    template-text render page.tpl -s scope.yaml      # Evaluate with variables from YAML
    template-text render page.tpl -I header.tpl      # Make 'header' available to $<header>
    template-text render page.tpl -I hdr=header.tpl  # ... under an explicit name
    template-text render page.tpl -o out.txt         # Write to file
    template-text code page.tpl                      # Show the generated Python code
    template-text --version                          # Show version
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

import typer

from template_text._version import __version__
from template_text.compiler import expand
from template_text.options import EvaluationOptions, ExpansionOptions, load_scope_file
from template_text.parser import Template
from template_text.runtime import load
from template_text.utils import console, exit_with_error, handle_error, setup_logging

log = logging.getLogger(__name__)

typer_app = typer.Typer(
    help="Evaluate line-oriented text templates.", no_args_is_help=True
)


def read_template(path: Path, name: Optional[str] = None) -> Template:
    """Read a template file.

    Included templates lose the final line terminator of their file, which
    would otherwise come out as an empty line after each inclusion.
    """
    if not path.exists():
        exit_with_error(f"File not found: {path}")
    text = path.read_text(encoding="utf-8")
    if name is None:
        return Template(text)
    if text.endswith("\n"):
        text = text[:-1]
    return Template(text, name)


def parse_includes(specs: Optional[List[str]]) -> Dict[str, Template]:
    """Parse '-I NAME=PATH' and '-I PATH' options into templates by name."""
    included: Dict[str, Template] = {}
    for spec in specs or []:
        name, sep, raw = spec.partition("=")
        if not sep:
            path = Path(spec)
            name = path.stem
        else:
            path = Path(raw)
        if not name:
            exit_with_error(f"Missing template name in '{spec}'")
        included[name] = read_template(path, name)
        log.info("Template '%s' available from %s", name, path)
    return included


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"template-text {__version__}")
        raise typer.Exit()


@typer_app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Line-oriented text templates, with Python statements and expressions."""


@typer_app.command()
def render(
    template: Path = typer.Argument(..., help="Template file to evaluate."),
    scope_file: Optional[Path] = typer.Option(
        None, "-s", "--scope", help="YAML file with the template variables."
    ),
    include: Optional[List[str]] = typer.Option(
        None, "-I", "--include", help="Template available for inclusion (NAME=PATH or PATH)."
    ),
    indent: int = typer.Option(0, "--indent", min=0, help="Indent every line by N blanks."),
    alt_delimiters: bool = typer.Option(
        False, "--alt-delimiters", help="Fields are written «expr» instead of $(expr)."
    ),
    drop_blank_lines: bool = typer.Option(
        False, "--drop-blank-lines", help="Turn lines of blanks only into empty lines."
    ),
    drop_empty_lines: bool = typer.Option(
        False, "--drop-empty-lines", help="Remove empty lines from the output."
    ),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write the result to a file instead of stdout."
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output."),
) -> None:
    """Evaluate a template and print the resulting text.

    Examples:
        template-text render page.tpl -s scope.yaml
        template-text render page.tpl -I header.tpl -o page.txt
    """
    setup_logging(verbose)

    source = read_template(template)
    included = parse_includes(include)
    expansion = ExpansionOptions(indent=indent, alt_delimiters=alt_delimiters)
    evaluation = EvaluationOptions(
        preserve_blank_lines=not drop_blank_lines,
        preserve_empty_lines=not drop_empty_lines,
    )

    try:
        scope = load_scope_file(scope_file) if scope_file is not None else {}
        text = load(source, expansion, scope, included).evaluate(evaluation)
    except Exception as exc:
        handle_error(exc)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
        console.print(f"[green]✓[/green] Wrote {output}")
    else:
        typer.echo(text, nl=False)


@typer_app.command()
def code(
    template: Path = typer.Argument(..., help="Template file to expand."),
    include: Optional[List[str]] = typer.Option(
        None, "-I", "--include", help="Template available for inclusion (NAME=PATH or PATH)."
    ),
    indent: int = typer.Option(0, "--indent", min=0, help="Indent every line by N blanks."),
    alt_delimiters: bool = typer.Option(
        False, "--alt-delimiters", help="Fields are written «expr» instead of $(expr)."
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output."),
) -> None:
    """Print the Python code generated for a template."""
    setup_logging(verbose)

    source = read_template(template)
    included = parse_includes(include)
    options = ExpansionOptions(indent=indent, alt_delimiters=alt_delimiters)

    try:
        program = expand(source, options, included)
    except Exception as exc:
        handle_error(exc)

    typer.echo(program.code, nl=False)


def app() -> None:
    """Entry point for the CLI."""
    typer_app()


if __name__ == "__main__":
    app()
