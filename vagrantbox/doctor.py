# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Installation health checks (libvirt, podman, image, shell function)."""

import os
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from vagrantbox.paths import HostPaths
from vagrantbox.platforms import Platform
from vagrantbox.podman import PodmanClient
from vagrantbox.resolver import HomebrewProbe
from vagrantbox.shell import ShellSession
from vagrantbox.verifier import CheckState, verify

# (style, text) pairs rendered by the CLI: "success", "info", "warning", "error"
Message = Tuple[str, str]

Runner = Callable[..., subprocess.CompletedProcess]


@dataclass
class CheckOutcome:
    """Result of one health check."""

    name: str
    ok: bool = True
    messages: List[Message] = field(default_factory=list)

    def success(self, text: str) -> None:
        self.messages.append(("success", text))

    def info(self, text: str) -> None:
        self.messages.append(("info", text))

    def warning(self, text: str) -> None:
        self.messages.append(("warning", text))

    def fail(self, text: str) -> None:
        self.ok = False
        self.messages.append(("error", text))


def _run_quiet(
    runner: Runner, cmd: List[str], timeout: float = 10
) -> Optional[subprocess.CompletedProcess]:
    try:
        return runner(cmd, capture_output=True, text=True, timeout=timeout)
    except (OSError, subprocess.TimeoutExpired):
        return None


def _count_sockets(socket_dir: str) -> int:
    try:
        return sum(1 for _ in Path(socket_dir).rglob("*.sock"))
    except OSError:
        return 0


def check_libvirt(
    platform: Platform,
    runner: Runner = subprocess.run,
    which: Optional[Callable[[str], Optional[str]]] = None,
    isdir: Callable[[str], bool] = os.path.isdir,
) -> CheckOutcome:
    """libvirt installed, service running, socket directory present."""
    which = which or shutil.which
    outcome = CheckOutcome("libvirt")

    if platform is Platform.MACOS:
        outcome.info("Detected macOS system")
        if which("brew") is None:
            outcome.fail("Homebrew is not installed. Please install Homebrew first:")
            outcome.info("https://brew.sh/")
            return outcome

        probe = HomebrewProbe(runner=runner, isdir=isdir)
        if not probe.libvirt_installed():
            outcome.fail("libvirt is not installed via Homebrew")
            outcome.info("Install it with: brew install libvirt")
            outcome.info("Then start it with: brew services start libvirt")
            return outcome
        outcome.success("libvirt is installed via Homebrew")

        services = _run_quiet(runner, ["brew", "services", "list"])
        status = None
        if services is not None:
            for line in services.stdout.splitlines():
                parts = line.split()
                if parts and parts[0] == "libvirt" and len(parts) > 1:
                    status = parts[1]
                    break
        if status == "started":
            outcome.success("libvirt service is running")
        elif status == "error":
            outcome.warning("libvirt service is in error state")
            outcome.info("Try restarting: brew services restart libvirt")
        else:
            outcome.warning("libvirt service is not running")
            outcome.info("Start it with: brew services start libvirt")

        socket_dir = HostPaths.HOMEBREW_LIBVIRT_SOCKET_DIR
        if isdir(socket_dir):
            outcome.success(f"libvirt socket directory exists: {socket_dir}")
            count = _count_sockets(socket_dir)
            if count:
                outcome.success(f"Found {count} libvirt socket file(s)")
            else:
                outcome.warning("No libvirt socket files found")
        else:
            outcome.warning(f"libvirt socket directory not found at {socket_dir}")
        return outcome

    outcome.info("Detected Linux system" if platform is Platform.LINUX else "Detected Unix system")
    if which("virsh") is None:
        outcome.fail("libvirt is not installed")
        outcome.info(
            "Install it with your package manager (e.g., apt install libvirt-daemon-system)"
        )
        return outcome
    outcome.success("libvirt is installed")

    active = _run_quiet(runner, ["systemctl", "is-active", "--quiet", "libvirtd"])
    if active is not None and active.returncode == 0:
        outcome.success("libvirt service is running")
    else:
        outcome.warning("libvirt service is not running")
        outcome.info("Start it with: sudo systemctl start libvirtd")

    socket_dir = HostPaths.DEFAULT_LIBVIRT_SOCKET_DIR
    if isdir(socket_dir):
        outcome.success(f"libvirt socket directory exists: {socket_dir}")
    else:
        outcome.warning(f"libvirt socket directory not found at {socket_dir}")
    return outcome


def check_podman(podman: PodmanClient) -> CheckOutcome:
    outcome = CheckOutcome("podman")
    if not podman.is_installed():
        outcome.fail("Podman is not installed")
        outcome.info("Installation instructions: https://podman.io/getting-started/installation")
        return outcome

    outcome.success("Podman is installed")
    version = podman.version()
    if version:
        outcome.info(f"Podman version: {version}")
    if podman.info_ok():
        outcome.success("Podman is working correctly")
    else:
        outcome.warning("Podman is installed but may have configuration issues")
    return outcome


def check_image(podman: PodmanClient, image_ref: str) -> CheckOutcome:
    outcome = CheckOutcome("image")
    if not podman.image_exists(image_ref):
        outcome.fail(f"Vagrant container image not found: {image_ref}")
        outcome.info("Build it with: vagrantbox build")
        return outcome

    outcome.success(f"Vagrant container image exists: {image_ref}")
    if podman.run_version(image_ref):
        outcome.success("Vagrant container is working correctly")
    else:
        outcome.warning("Vagrant container exists but may have issues")
    return outcome


def check_shell_function(profile_path: Path, session: ShellSession) -> CheckOutcome:
    outcome = CheckOutcome("shell function")
    report = verify(profile_path, session=session)

    if report.in_profile is CheckState.ABSENT:
        outcome.fail(f"vagrant function is not in {profile_path}")
        outcome.info("Install it with: vagrantbox install")
        return outcome
    if report.in_profile is CheckState.UNKNOWN:
        outcome.warning(f"Could not read {profile_path}")

    if report.loadable is CheckState.PRESENT:
        outcome.success("vagrant function is defined in shell")
    elif report.loadable is CheckState.ABSENT:
        outcome.fail("vagrant function is not defined after sourcing the profile")
        return outcome
    else:
        outcome.warning(f"Could not start a fresh {session.shell} session to load the function")
        return outcome

    if report.runnable is CheckState.PRESENT:
        outcome.success("vagrant function is working correctly")
    elif report.runnable is CheckState.ABSENT:
        outcome.warning("vagrant function exists but may have issues")
    else:
        outcome.warning("Could not run the vagrant function")
    return outcome


def run_checks(
    platform: Platform,
    podman: PodmanClient,
    image_ref: str,
    profile_path: Path,
    session: ShellSession,
    runner: Runner = subprocess.run,
) -> List[CheckOutcome]:
    """Run every check in order; a failing check never stops the others."""
    return [
        check_libvirt(platform, runner=runner),
        check_podman(podman),
        check_image(podman, image_ref),
        check_shell_function(profile_path, session),
    ]
