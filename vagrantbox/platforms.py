# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Host platform and shell family detection.

Both are resolved once at the CLI boundary and passed down as plain enum
values, so nothing below the CLI sniffs the environment itself.
"""

import os
import sys
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional


class Platform(Enum):
    """Host operating system family."""

    MACOS = "macos"
    LINUX = "linux"
    OTHER = "other"


class ShellFamily(Enum):
    """Shell family whose profile file receives the vagrant function."""

    ZSH = "zsh"
    BASH = "bash"


def detect_platform(os_identifier: Optional[str] = None) -> Platform:
    """Map an OS identifier (sys.platform or $OSTYPE style) to a Platform.

    Args:
        os_identifier: e.g. "darwin", "darwin23", "linux", "linux-gnu".
            Defaults to sys.platform.
    """
    ident = (os_identifier if os_identifier is not None else sys.platform).lower()
    if ident.startswith("darwin"):
        return Platform.MACOS
    if ident.startswith("linux"):
        return Platform.LINUX
    return Platform.OTHER


def detect_shell_family(environ: Optional[Mapping[str, str]] = None) -> ShellFamily:
    """Guess the caller's shell family from environment markers.

    ZSH_VERSION / BASH_VERSION win when exported; otherwise the login
    shell in $SHELL decides. Anything unrecognized is treated as bash.
    """
    env = os.environ if environ is None else environ
    if env.get("ZSH_VERSION"):
        return ShellFamily.ZSH
    if env.get("BASH_VERSION"):
        return ShellFamily.BASH
    shell = env.get("SHELL", "")
    if shell and Path(shell).name == "zsh":
        return ShellFamily.ZSH
    return ShellFamily.BASH
