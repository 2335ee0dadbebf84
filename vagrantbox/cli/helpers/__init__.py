# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Shared helpers for the vagrantbox CLI.

- context.py: flag/env/config resolution into an InstallContext
- image_ops.py: podman prerequisites and image builds
- utils.py: error handling and panels

All functions are re-exported here for convenience.
"""

from vagrantbox.utils.logging import console

from vagrantbox.cli.helpers.utils import (
    handle_errors,
    show_error_panel,
)

from vagrantbox.cli.helpers.context import (
    InstallContext,
    _get_install_context,
)

from vagrantbox.cli.helpers.image_ops import (
    PODMAN_INSTALL_URL,
    _build_image,
    _check_prerequisites,
    _require_podman,
)

__all__ = [
    "console",
    "handle_errors",
    "show_error_panel",
    "InstallContext",
    "_get_install_context",
    "PODMAN_INSTALL_URL",
    "_build_image",
    "_check_prerequisites",
    "_require_podman",
]
