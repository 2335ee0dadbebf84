# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Image commands: build and publish."""

from pathlib import Path

import click

from vagrantbox.cli import cli
from vagrantbox.cli.helpers import _build_image, _require_podman, console, handle_errors
from vagrantbox.errors import PrerequisiteError
from vagrantbox.host_config import get_config
from vagrantbox.paths import ImageDefaults
from vagrantbox.podman import PodmanClient
from vagrantbox.publish import registry_image, registry_repository, write_user_installer
from vagrantbox.utils.logging import get_logger

logger = get_logger(__name__)


@cli.command()
@click.option("-n", "--name", help="Image name (default: vagrant-libvirt)")
@click.option("-t", "--tag", help="Tag for the image (default: latest)")
@click.option("-d", "--dev", is_flag=True, help="Build with development tools")
@click.option(
    "-C",
    "--context",
    "context_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Build context holding Dockerfile and entrypoint.sh",
)
@handle_errors
def build(name, tag, dev, context_dir):
    """Build the vagrant-libvirt container image.

    \b
    Examples:
      vagrantbox build
      vagrantbox build -t v1.0.0
      vagrantbox build --dev
      vagrantbox build -n my-vagrant -t dev
    """
    config = get_config()
    ref = ImageDefaults.image_ref(name or config.image_name, tag or config.image_tag)
    podman = PodmanClient()

    logger.info("Checking prerequisites...")
    _require_podman(podman)
    _build_image(podman, ref, context_dir, dev=dev)

    console.print()
    console.print("[green]Build completed successfully![/green]")
    console.print()
    console.print("Next steps:")
    console.print("1. Install on local machine: vagrantbox install")
    console.print("2. Publish to registry: vagrantbox publish -u <username>")
    console.print(f"3. Test the container: podman run --rm {ref} vagrant --version")
    console.print()


@cli.command()
@click.option("-u", "--username", help="Registry username (or DOCKER_USERNAME)")
@click.option("-i", "--image", "name", help="Image name (default: vagrant-libvirt)")
@click.option("-t", "--tag", help="Image tag (default: latest)")
@click.option("-r", "--registry", help="Registry URL (default: docker.io)")
@click.option("--no-build", is_flag=True, help="Skip building the image")
@click.option("--no-push", is_flag=True, help="Skip pushing to the registry")
@click.option(
    "--write-installer/--no-write-installer",
    default=True,
    help="Write install-<user>-<image>.sh for image users",
)
@click.option(
    "-C",
    "--context",
    "context_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Build context holding Dockerfile and entrypoint.sh",
)
@handle_errors
def publish(username, name, tag, registry, no_build, no_push, write_installer, context_dir):
    """Build and publish the image to a container registry.

    Registry credentials are whatever `podman login` has stored; you may be
    prompted by podman during the push.

    \b
    Examples:
      vagrantbox publish -u myusername
      vagrantbox publish -u myusername -t v1.0.0
      vagrantbox publish -u myusername --no-push
      vagrantbox publish -u myusername --no-build
    """
    config = get_config()
    username = username or config.registry_username
    name = name or config.image_name
    tag = tag or config.image_tag
    registry = registry or config.registry_url
    podman = PodmanClient()

    logger.info("Checking prerequisites...")
    _require_podman(podman)
    if not username:
        raise PrerequisiteError(
            "Registry username is required.",
            hint="Set DOCKER_USERNAME, registry.username in config.yml, or use -u",
        )
    if not no_push and not podman.is_logged_in(registry):
        logger.warning(f"Not logged in to {registry}")
        logger.info("You may be prompted to login during push.")
    logger.success("Prerequisites check passed")

    local_ref = ImageDefaults.image_ref(name, tag)
    if no_build:
        logger.info("Skipping build (--no-build specified)")
        if not podman.image_exists(local_ref):
            raise PrerequisiteError(
                f"Image {local_ref} not found", hint="Build it with: vagrantbox build"
            )
    else:
        _build_image(podman, local_ref, context_dir)

    remote_ref = registry_image(registry, username, name, tag)
    logger.info(f"Tagging image for registry: {remote_ref}")
    if not podman.tag(local_ref, remote_ref):
        raise PrerequisiteError(f"Failed to tag image {local_ref} as {remote_ref}")
    logger.success("Image tagged successfully")

    if no_push:
        logger.info("Skipping push (--no-push specified)")
    else:
        logger.info(f"Pushing image to registry: {remote_ref}")
        if not podman.push(remote_ref):
            raise PrerequisiteError(f"Failed to push image {remote_ref}")
        logger.success("Image pushed successfully")

        logger.info("Verifying published image...")
        if podman.pull(remote_ref):
            logger.success("Published image is accessible")
        else:
            logger.warning("Could not verify published image accessibility")

    if write_installer:
        script = write_user_installer(Path.cwd(), username, name, tag, registry)
        logger.success(f"Created user installation script: {script.name}")

    user_image = registry_repository(registry, username, name)
    console.print()
    console.print("[green]Image published successfully![/green]")
    console.print()
    console.print(f"Registry: {registry}")
    console.print(f"Image: {remote_ref}")
    console.print()
    console.print("To use the published image:")
    console.print(f"1. Pull the image:\n   podman pull {remote_ref}")
    console.print(f"2. Install on another machine:\n   vagrantbox install -i {user_image} -t {tag}")
    console.print(f"3. Run directly:\n   podman run --rm {remote_ref} vagrant --version")
    console.print()
