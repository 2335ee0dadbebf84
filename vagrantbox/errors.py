# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Exceptions and warnings raised by vagrantbox.

Errors bubble up to the CLI's handle_errors decorator, which formats them
as panels and exits with code 1. Warnings never abort; they are returned
alongside results and logged.
"""

from pathlib import Path
from typing import Optional, Union


class VagrantboxError(Exception):
    """Base class for fatal vagrantbox errors."""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.hint = hint


class FilesystemError(VagrantboxError):
    """Raised when a profile file cannot be read or written.

    The profile file is guaranteed to be unmodified when this is raised.
    """

    def __init__(
        self,
        path: Union[str, Path],
        error: Optional[OSError] = None,
        action: str = "write",
        hint: Optional[str] = None,
    ):
        self.path = Path(path)
        self.error = error
        self.action = action
        reason = error.strerror if error is not None and error.strerror else str(error or "")
        message = f"Cannot {action} {self.path}"
        if reason:
            message += f": {reason}"
        super().__init__(message, hint=hint)


class PrerequisiteError(VagrantboxError):
    """Raised when a required tool, file or image is missing."""


class ProbeWarning(UserWarning):
    """A platform probe failed; a documented default was used instead."""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.hint = hint


class AmbiguousStateWarning(UserWarning):
    """More than one generated block was found in a profile file."""

    def __init__(self, path: Union[str, Path], count: int):
        self.path = Path(path)
        self.count = count
        super().__init__(
            f"Found {count} vagrant function blocks in {self.path}; "
            "only the first was replaced. Remove the others manually."
        )
