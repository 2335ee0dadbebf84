# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Resolve everything a command needs from flags, environment and config."""

import os
from pathlib import Path
from typing import List, NamedTuple, Optional

from vagrantbox.errors import ProbeWarning
from vagrantbox.host_config import HostConfig, get_config
from vagrantbox.locator import locate_profile
from vagrantbox.platforms import Platform, ShellFamily, detect_platform, detect_shell_family
from vagrantbox.resolver import HomebrewProbe, ResolvedConfig, resolve_config_with_warnings


class InstallContext(NamedTuple):
    """Container for common command context values."""

    platform: Platform
    family: ShellFamily
    config: ResolvedConfig
    warnings: List[ProbeWarning]
    profile_path: Path
    profile_explicit: bool
    host_config: HostConfig


def _get_install_context(
    image: Optional[str] = None,
    tag: Optional[str] = None,
    profile: Optional[str] = None,
    host_config: Optional[HostConfig] = None,
    probe: Optional[HomebrewProbe] = None,
) -> InstallContext:
    """Resolve platform, shell family, runtime config and profile path.

    This reduces boilerplate for the common pattern:
        platform = detect_platform()
        family = detect_shell_family()
        config, warnings = resolve_config_with_warnings(platform, ...)
        profile_path = locate_profile(family, Path.home(), ...)

    Args:
        image: --image flag
        tag: --tag flag
        profile: --profile flag
        host_config: HostConfig instance. Global config if not provided.
        probe: Homebrew probe. Created from config timeouts if not provided.

    Returns:
        InstallContext with everything resolved
    """
    host_config = host_config or get_config()
    platform = detect_platform()
    family = detect_shell_family(os.environ)

    config, warnings = resolve_config_with_warnings(
        platform,
        probe=probe or HomebrewProbe(timeout=host_config.probe_timeout),
        image_name=image or host_config.image_name,
        image_tag=tag or host_config.image_tag,
        workdir_mount_expr=host_config.workdir_mount_expr,
        host_socket_dir=host_config.socket_dir,
    )

    override = profile or host_config.profile
    profile_path = locate_profile(family, Path.home(), override=override)

    return InstallContext(
        platform=platform,
        family=family,
        config=config,
        warnings=warnings,
        profile_path=profile_path,
        profile_explicit=profile is not None,
        host_config=host_config,
    )
