# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Capabilities that talk to real shells.

The installer and verifier only see these small objects, so tests can
swap them for stubs without spawning any process.
"""

import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Protocol, Union

from vagrantbox.platforms import ShellFamily

logger = logging.getLogger(__name__)

FUNCTION_NAME = "vagrant"

Runner = Callable[..., subprocess.CompletedProcess]


class ShadowCheck(Protocol):
    """Reports a live shell function that would shadow the vagrant command."""

    def __call__(self) -> Optional[str]:
        """Return the function's `type` description, or None if there is none."""
        ...


def _describes_function(output: str) -> bool:
    return "function" in output


class LoginShellShadowCheck:
    """Ask the user's interactive shell whether `vagrant` is a function.

    The Python process cannot inspect its parent shell, so a fresh
    interactive shell (which reads the same rc files) stands in for it.
    Any failure counts as "no function".
    """

    def __init__(
        self,
        shell: Optional[str] = None,
        runner: Runner = subprocess.run,
        timeout: float = 20.0,
    ):
        self.shell = shell or os.environ.get("SHELL") or "/bin/bash"
        self._run = runner
        self.timeout = timeout

    def __call__(self) -> Optional[str]:
        try:
            result = self._run(
                [self.shell, "-ic", f"type {FUNCTION_NAME}"],
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug(f"Shadow check via {self.shell} failed: {e}")
            return None
        if result.returncode == 0 and _describes_function(result.stdout):
            return result.stdout.strip()
        return None


# Interactive, so rc-file guards on $- do not return early, but without
# reading any rc file on its own; only the given profile is sourced.
_INTERACTIVE_ARGS = {"bash": ["--norc", "-i"], "zsh": ["-f", "-i"]}


class ShellSession:
    """Runs commands in a fresh interactive shell with a profile sourced."""

    def __init__(
        self,
        shell: str = "bash",
        runner: Runner = subprocess.run,
        timeout: float = 20.0,
        env: Optional[Mapping[str, str]] = None,
    ):
        self.shell = shell
        self._run = runner
        self.timeout = timeout
        self.env = dict(env) if env is not None else None

    @classmethod
    def for_family(cls, family: ShellFamily, **kwargs) -> "ShellSession":
        return cls(shell=family.value, **kwargs)

    def _argv(self, script: str) -> List[str]:
        flags = _INTERACTIVE_ARGS.get(os.path.basename(self.shell), ["-i"])
        return [self.shell, *flags, "-c", script]

    def run_in_profile(
        self, profile_path: Union[str, Path], command: str
    ) -> Optional[subprocess.CompletedProcess]:
        """Source the profile, then run command.

        Returns None when the shell could not be spawned or timed out.
        """
        script = f". {shlex.quote(str(profile_path))} >/dev/null 2>&1; {command}"
        try:
            return self._run(
                self._argv(script),
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=self.env,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug(f"Fresh {self.shell} session failed: {e}")
            return None

    def function_type(
        self, profile_path: Union[str, Path]
    ) -> Optional[subprocess.CompletedProcess]:
        return self.run_in_profile(profile_path, f"type {FUNCTION_NAME}")
