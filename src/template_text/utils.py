"""Shared utilities for CLI commands"""

from __future__ import annotations

import logging
import os
import sys
from typing import NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler

from template_text.exceptions import TemplateError

DEBUG_ENV = "TEMPLATE_TEXT_DEBUG"

console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the template-text CLI.

    Log levels:
    - Normal: Only warnings/errors shown
    - Verbose (-v): INFO level - shows inclusions being expanded
    - Debug (TEMPLATE_TEXT_DEBUG=1): DEBUG level - shows everything, error trails included
    """
    debug = bool(os.environ.get(DEBUG_ENV))
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=console,
        show_time=verbose,
        show_path=debug,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("template_text")
    logger.setLevel(level)
    logger.handlers = [handler]
    logger.propagate = False


def exit_with_error(message: str, exit_code: int = 1) -> NoReturn:
    """Exit the program with an error message."""
    typer.secho(f"Error: {message}", err=True, fg=typer.colors.RED)
    sys.exit(exit_code)


def handle_error(error: Exception) -> NoReturn:
    """Report a failure and exit; template errors are shown with their trail."""
    if isinstance(error, TemplateError):
        typer.secho(error.format_trail(), err=True, fg=typer.colors.RED)
        sys.exit(1)
    exit_with_error(str(error) or type(error).__name__)
