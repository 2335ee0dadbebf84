# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""vagrantbox - Vagrant with libvirt plugins, packaged in a Podman container."""

__version__ = "0.2.0"
