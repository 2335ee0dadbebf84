# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Image prerequisites and build steps shared by install, build and publish."""

from pathlib import Path

from vagrantbox.errors import PrerequisiteError
from vagrantbox.podman import PodmanClient
from vagrantbox.utils.logging import get_logger

logger = get_logger(__name__)

PODMAN_INSTALL_URL = "https://podman.io/getting-started/installation"

# Files the image build context must provide
BUILD_CONTEXT_FILES = ("Dockerfile", "entrypoint.sh")


def _require_podman(podman: PodmanClient) -> None:
    """Raise PrerequisiteError if podman is not on PATH."""
    if not podman.is_installed():
        raise PrerequisiteError(
            "Podman is not installed. Please install Podman first.",
            hint=f"Installation instructions: {PODMAN_INSTALL_URL}",
        )


def _require_build_context(context: Path) -> None:
    for name in BUILD_CONTEXT_FILES:
        if not (context / name).is_file():
            raise PrerequisiteError(
                f"{name} not found in {context}",
                hint="Run from the vagrantbox source checkout or pass --context",
            )


def _build_image(podman: PodmanClient, ref: str, context: Path, dev: bool = False) -> None:
    """Build ref from context and check the result.

    Raises:
        PrerequisiteError: build context incomplete or podman build failed
    """
    _require_build_context(context)
    logger.info(f"Building image: {ref}")
    if dev:
        logger.info("Development mode enabled")

    if not podman.build(ref, context, dev=dev):
        raise PrerequisiteError(f"Failed to build image {ref}")
    logger.success("Image built successfully")

    if not podman.image_exists(ref):
        raise PrerequisiteError(f"Image {ref} not found after build")

    logger.info("Testing image...")
    if podman.run_version(ref):
        logger.success("Image test passed")
    else:
        logger.warning("Image test failed - vagrant may not be working correctly")

    summary = podman.inspect_summary(ref)
    if summary:
        logger.info(f"Image details: {summary}")


def _check_prerequisites(podman: PodmanClient, ref: str, context: Path) -> None:
    """Podman present and image available, building it when possible."""
    logger.info("Checking prerequisites...")
    _require_podman(podman)

    if not podman.image_exists(ref):
        if not (context / "Dockerfile").is_file():
            raise PrerequisiteError(
                f"Image {ref} not found and no Dockerfile in {context} to build it from.",
                hint=f"vagrantbox build, or podman pull <registry>/{ref}",
            )
        logger.warning(f"Image {ref} not found. Building image...")
        _build_image(podman, ref, context)

    logger.success("Prerequisites check passed")
