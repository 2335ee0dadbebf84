# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Thin wrapper around the podman CLI.

Only the handful of podman calls vagrantbox needs. A missing podman binary
yields False/None results rather than exceptions; callers decide whether
that is fatal.
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Union

logger = logging.getLogger(__name__)

# Timeout for quick podman queries (seconds)
QUERY_TIMEOUT = 30


class PodmanClient:
    """Runs podman commands.

    Args:
        binary: podman executable name or path
        runner: subprocess.run compatible callable (injectable for tests)
        which: shutil.which compatible lookup
    """

    def __init__(
        self,
        binary: str = "podman",
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        which: Callable[[str], Optional[str]] = shutil.which,
    ):
        self.binary = binary
        self._run = runner
        self._which = which

    def _query(
        self, *args: str, timeout: Optional[float] = QUERY_TIMEOUT
    ) -> Optional[subprocess.CompletedProcess]:
        """Run a podman command with captured output; None if it cannot start."""
        cmd = [self.binary, *args]
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            return self._run(cmd, capture_output=True, text=True, timeout=timeout)
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug(f"podman {args[0]} failed: {e}")
            return None

    def _stream(self, *args: str) -> bool:
        """Run a long podman command with output going to the terminal."""
        cmd = [self.binary, *args]
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            return self._run(cmd, check=False).returncode == 0
        except OSError as e:
            logger.debug(f"podman {args[0]} failed: {e}")
            return False

    def is_installed(self) -> bool:
        return self._which(self.binary) is not None

    def version(self) -> Optional[str]:
        result = self._query("--version")
        if result is None or result.returncode != 0:
            return None
        return result.stdout.strip()

    def info_ok(self) -> bool:
        """podman info succeeds (runtime configured correctly)."""
        result = self._query("info")
        return result is not None and result.returncode == 0

    def image_exists(self, ref: str) -> bool:
        result = self._query("image", "exists", ref)
        return result is not None and result.returncode == 0

    def build(self, ref: str, context: Union[str, Path] = ".", dev: bool = False) -> bool:
        args: List[str] = ["build"]
        if dev:
            args += ["--build-arg", "DEV_MODE=true"]
        args += ["-t", ref, str(context)]
        return self._stream(*args)

    def tag(self, source: str, target: str) -> bool:
        result = self._query("tag", source, target)
        return result is not None and result.returncode == 0

    def push(self, ref: str) -> bool:
        return self._stream("push", ref)

    def pull(self, ref: str, quiet: bool = True) -> bool:
        if quiet:
            result = self._query("pull", ref, timeout=None)
            return result is not None and result.returncode == 0
        return self._stream("pull", ref)

    def run_version(self, ref: str) -> bool:
        """Run `vagrant --version` inside the image."""
        result = self._query("run", "--rm", ref, "vagrant", "--version", timeout=120)
        return result is not None and result.returncode == 0

    def is_logged_in(self, registry: str) -> bool:
        result = self._query("login", "--get-login", registry)
        return result is not None and result.returncode == 0

    def inspect_summary(self, ref: str) -> Optional[str]:
        """Tags, size and creation date of an image."""
        result = self._query(
            "image", "inspect", ref, "--format", "{{.RepoTags}} {{.Size}} {{.Created}}"
        )
        if result is None or result.returncode != 0:
            return None
        return result.stdout.strip()
