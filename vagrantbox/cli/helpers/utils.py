# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Utility functions for CLI helpers."""

import functools
import sys
from typing import Callable, Optional

from rich.panel import Panel

from vagrantbox.errors import FilesystemError, PrerequisiteError, VagrantboxError
from vagrantbox.utils.logging import console, get_logger

logger = get_logger(__name__)


def show_error_panel(title: str, message: str, hint: Optional[str] = None) -> None:
    """Display a formatted error panel.

    Args:
        title: Panel title (shown in red)
        message: Main error message
        hint: Optional hint text (shown with blue "Hint:" prefix)
    """
    content = message
    if hint:
        content += f"\n\n[blue]Hint:[/blue] {hint}"
    console.print(Panel(content, title=f"[red]{title}[/red]", border_style="red"))


def handle_errors(func: Callable) -> Callable:
    """Decorator that wraps CLI commands with standard error handling.

    Catches exceptions, prints error with nice formatting, and exits with code 1.
    Special handling for:
    - FilesystemError: names the path; the profile was left unmodified
    - PrerequisiteError: shows the missing tool or image with a hint
    - ClickException: passed through to click
    - Other exceptions: generic error panel

    Usage:
        @cli.command()
        @handle_errors
        def my_command():
            ...
    """
    import click

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SystemExit:
            raise
        except FilesystemError as exc:
            logger.error(str(exc), exc=exc.error, console_output=False)
            content = f"{exc}\n\n[bold]Path:[/bold] {exc.path}\nThe file was not modified."
            show_error_panel("Filesystem Error", content, exc.hint)
            sys.exit(1)
        except PrerequisiteError as exc:
            logger.error(str(exc), console_output=False)
            show_error_panel("Missing Prerequisite", str(exc), exc.hint)
            sys.exit(1)
        except VagrantboxError as exc:
            logger.error(str(exc), console_output=False)
            show_error_panel("Error", str(exc), exc.hint)
            sys.exit(1)
        except (click.ClickException, click.Abort):
            # Let Click handle its own exceptions (they already have formatting)
            raise
        except Exception as exc:
            logger.logger.exception("Unexpected error")
            show_error_panel("Error", str(exc))
            sys.exit(1)

    return wrapper
