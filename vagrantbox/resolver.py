# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Resolve the runtime configuration baked into the vagrant function.

The resolver never fails on probe problems: whenever the preferred value
cannot be confirmed it falls back to the generic libvirt socket directory
and reports a ProbeWarning instead.
"""

import logging
import os
import subprocess
from typing import Callable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from vagrantbox.errors import ProbeWarning
from vagrantbox.paths import HostPaths, ImageDefaults
from vagrantbox.platforms import Platform

logger = logging.getLogger(__name__)


class ResolvedConfig(BaseModel):
    """Immutable configuration for one installer invocation."""

    model_config = ConfigDict(frozen=True)

    image_name: str
    image_tag: str
    host_socket_dir: str
    workdir_mount_expr: str = ImageDefaults.WORKDIR_MOUNT_EXPR

    @field_validator("image_name", "image_tag", "workdir_mount_expr")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("host_socket_dir")
    @classmethod
    def must_be_absolute(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError(f"host socket directory must be absolute, got {v!r}")
        return v

    @property
    def image_ref(self) -> str:
        return ImageDefaults.image_ref(self.image_name, self.image_tag)


class HomebrewProbe:
    """Asks Homebrew about its libvirt installation.

    Args:
        runner: subprocess.run compatible callable (injectable for tests)
        isdir: directory existence predicate
        timeout: seconds to wait for brew
    """

    def __init__(
        self,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        isdir: Callable[[str], bool] = os.path.isdir,
        timeout: float = 5.0,
    ):
        self._run = runner
        self._isdir = isdir
        self.timeout = timeout

    def libvirt_installed(self) -> Optional[bool]:
        """True/False from `brew list libvirt`, None if brew cannot be run."""
        try:
            result = self._run(
                ["brew", "list", "libvirt"],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug(f"brew probe failed: {e}")
            return None
        return result.returncode == 0

    def socket_dir_exists(self, path: str) -> bool:
        return self._isdir(path)


def _resolve_socket_dir(
    platform: Platform, probe: Optional[HomebrewProbe]
) -> Tuple[str, List[ProbeWarning]]:
    default = HostPaths.DEFAULT_LIBVIRT_SOCKET_DIR
    if platform is not Platform.MACOS:
        return default, []

    probe = probe or HomebrewProbe()
    installed = probe.libvirt_installed()
    if installed is None:
        return default, [
            ProbeWarning(
                "Homebrew not found; cannot locate libvirt. "
                f"Using default socket directory {default}",
                hint="Install Homebrew from https://brew.sh/ then: brew install libvirt",
            )
        ]
    if not installed:
        return default, [
            ProbeWarning(
                f"libvirt not found via Homebrew. Using default socket directory {default}",
                hint="brew install libvirt && brew services start libvirt",
            )
        ]

    brew_dir = HostPaths.HOMEBREW_LIBVIRT_SOCKET_DIR
    if not probe.socket_dir_exists(brew_dir):
        return default, [
            ProbeWarning(
                f"Homebrew libvirt installed but socket directory not found at {brew_dir}. "
                f"Using default socket directory {default}",
                hint="brew services start libvirt",
            )
        ]
    return brew_dir, []


def resolve_config_with_warnings(
    platform: Platform,
    probe: Optional[HomebrewProbe] = None,
    image_name: Optional[str] = None,
    image_tag: Optional[str] = None,
    workdir_mount_expr: Optional[str] = None,
    host_socket_dir: Optional[str] = None,
) -> Tuple[ResolvedConfig, List[ProbeWarning]]:
    """Build a ResolvedConfig and return the advisories raised on the way.

    An explicit host_socket_dir skips probing entirely.
    """
    if host_socket_dir:
        socket_dir, warnings = host_socket_dir, []
    else:
        socket_dir, warnings = _resolve_socket_dir(platform, probe)

    config = ResolvedConfig(
        image_name=image_name or ImageDefaults.IMAGE_NAME,
        image_tag=image_tag or ImageDefaults.IMAGE_TAG,
        host_socket_dir=socket_dir,
        workdir_mount_expr=workdir_mount_expr or ImageDefaults.WORKDIR_MOUNT_EXPR,
    )
    logger.debug(f"Resolved config for {platform.value}: {config!r}")
    return config, warnings


def resolve_config(
    platform: Platform, probe: Optional[HomebrewProbe] = None, **overrides
) -> ResolvedConfig:
    """Like resolve_config_with_warnings, logging the advisories instead."""
    config, warnings = resolve_config_with_warnings(platform, probe, **overrides)
    for warning in warnings:
        logger.warning(str(warning))
    return config
