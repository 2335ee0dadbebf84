# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Registry naming and the standalone installer handed to image users."""

import os
import stat
from pathlib import Path
from typing import Union

from vagrantbox.injector import START_MARKER, atomic_write_text, render_block
from vagrantbox.paths import HostPaths, ImageDefaults
from vagrantbox.resolver import ResolvedConfig


def registry_repository(registry: str, username: str, name: str) -> str:
    """registry/username/name, the image name users pass to `vagrantbox install -i`."""
    return f"{registry.rstrip('/')}/{username}/{name}"


def registry_image(registry: str, username: str, name: str, tag: str) -> str:
    """registry/username/name:tag"""
    return ImageDefaults.image_ref(registry_repository(registry, username, name), tag)


def installer_filename(username: str, name: str) -> str:
    return f"install-{username}-{name}.sh"


def render_user_installer(
    username: str, name: str, tag: str, registry: str = ImageDefaults.REGISTRY
) -> str:
    """Shell script that pulls the published image and installs the function.

    The script re-runs safely: an existing vagrant function block is removed
    from the profile before the fresh one is appended.
    """
    image = registry_repository(registry, username, name)
    block = render_block(
        ResolvedConfig(
            image_name=image,
            image_tag=tag,
            host_socket_dir=HostPaths.DEFAULT_LIBVIRT_SOCKET_DIR,
        )
    )
    return f"""#!/bin/bash
# Auto-generated installation script for {image}:{tag}

set -e

IMAGE_NAME="{image}"
TAG="{tag}"

echo "Installing Vagrant Podman container..."

if ! command -v podman >/dev/null 2>&1; then
    echo "Error: Podman is not installed. Please install Podman first."
    exit 1
fi

echo "Pulling image: ${{IMAGE_NAME}}:${{TAG}}"
podman pull "${{IMAGE_NAME}}:${{TAG}}"

SHELL_PROFILE="$HOME/.bashrc"
if [ -n "$ZSH_VERSION" ] || [ "$(basename "${{SHELL:-}}")" = "zsh" ]; then
    SHELL_PROFILE="$HOME/.zshrc"
fi
touch "$SHELL_PROFILE"

if grep -q '^{START_MARKER}' "$SHELL_PROFILE"; then
    tmp="$(mktemp)"
    sed '/^{START_MARKER}/,/^}}/d' "$SHELL_PROFILE" > "$tmp"
    cat "$tmp" > "$SHELL_PROFILE"
    rm -f "$tmp"
fi

if [ -s "$SHELL_PROFILE" ] && [ -n "$(tail -n 1 "$SHELL_PROFILE")" ]; then
    echo "" >> "$SHELL_PROFILE"
fi
cat >> "$SHELL_PROFILE" << 'VAGRANT_FUNCTION'
{block}VAGRANT_FUNCTION

echo "Installation completed!"
echo "Please reload your shell profile: source $SHELL_PROFILE"
echo "Then test with: vagrant --version"
"""


def write_user_installer(
    directory: Union[str, Path],
    username: str,
    name: str,
    tag: str,
    registry: str = ImageDefaults.REGISTRY,
) -> Path:
    """Write the installer script into directory and mark it executable."""
    path = Path(directory) / installer_filename(username, name)
    atomic_write_text(path, render_user_installer(username, name, tag, registry))
    mode = os.stat(path).st_mode
    os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path
