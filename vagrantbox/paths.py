# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Centralized path definitions for vagrantbox.

This module provides a single source of truth for all paths used throughout
the vagrantbox codebase. Paths are organized by context:

- HostPaths: Paths on the host machine (where the vagrantbox CLI runs)
- ContainerPaths: Paths inside the vagrant-libvirt container
- ProfilePaths: Shell profile candidates relative to a home directory

Usage:
    from vagrantbox.paths import HostPaths, ContainerPaths, ProfilePaths

    config_file = HostPaths.config_file()
    socket_dir = HostPaths.DEFAULT_LIBVIRT_SOCKET_DIR
    candidates = ProfilePaths.candidates("zsh", Path.home())
"""

import os
from pathlib import Path
from typing import Tuple


class HostPaths:
    """Paths on the host machine where the vagrantbox CLI runs."""

    # XDG config directory for vagrantbox
    @staticmethod
    def config_dir() -> Path:
        """~/.config/vagrantbox/"""
        return Path.home() / ".config" / "vagrantbox"

    @staticmethod
    def config_file() -> Path:
        """~/.config/vagrantbox/config.yml (VAGRANTBOX_CONFIG overrides)."""
        env_config = os.environ.get("VAGRANTBOX_CONFIG")
        if env_config:
            return Path(env_config).expanduser()
        return HostPaths.config_dir() / "config.yml"

    # XDG state directory
    @staticmethod
    def state_dir() -> Path:
        """~/.local/state/vagrantbox/"""
        return Path.home() / ".local" / "state" / "vagrantbox"

    @staticmethod
    def log_dir() -> Path:
        """~/.local/state/vagrantbox/logs/"""
        return HostPaths.state_dir() / "logs"

    # libvirt control socket directories
    DEFAULT_LIBVIRT_SOCKET_DIR = "/var/run/libvirt/"
    HOMEBREW_LIBVIRT_SOCKET_DIR = "/opt/homebrew/var/run/libvirt/"

    # Vagrant state shared with the container
    VAGRANT_HOME = "~/.vagrant.d"


class ContainerPaths:
    """Paths inside the vagrant-libvirt container."""

    # libvirt socket mount point
    LIBVIRT_SOCKET_DIR = "/var/run/libvirt/"

    # Vagrant home inside the container
    VAGRANT_HOME = "/.vagrant.d"

    ENTRYPOINT = "/bin/bash"


class ProfilePaths:
    """Shell profile candidates, in preference order per shell family."""

    ZSH_CANDIDATES: Tuple[str, ...] = (".zshrc", ".zprofile")
    BASH_CANDIDATES: Tuple[str, ...] = (".bashrc", ".bash_profile")

    @staticmethod
    def candidates(family: str, home: Path) -> Tuple[Path, ...]:
        """Candidate profile files for a shell family ("zsh" or "bash")."""
        names = ProfilePaths.ZSH_CANDIDATES if family == "zsh" else ProfilePaths.BASH_CANDIDATES
        return tuple(home / name for name in names)


class ImageDefaults:
    """Default values for the container image and registry."""

    IMAGE_NAME = "vagrant-libvirt"
    IMAGE_TAG = "latest"
    REGISTRY = "docker.io"

    # Shell expression evaluated by the user's shell for the work dir mount
    WORKDIR_MOUNT_EXPR = "$(pwd)"

    # Environment variable passed through for the libvirt connection URI
    LIBVIRT_URI_ENV = "LIBVIRT_DEFAULT_URI"

    @staticmethod
    def image_ref(name: str, tag: str) -> str:
        """Full local image reference."""
        return f"{name}:{tag}"
