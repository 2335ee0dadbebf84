# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Installation check command."""

import sys

import click

from vagrantbox.cli import cli
from vagrantbox.cli.helpers import _get_install_context, console, handle_errors
from vagrantbox.doctor import CheckOutcome, run_checks
from vagrantbox.podman import PodmanClient
from vagrantbox.shell import ShellSession
from vagrantbox.utils.logging import get_logger

logger = get_logger(__name__)

_STYLES = {
    "success": ("green", "✓ "),
    "info": ("blue", ""),
    "warning": ("yellow", "⚠ "),
    "error": ("red", "✗ "),
}


def _print_outcome(outcome: CheckOutcome) -> None:
    console.print(f"[bold]Checking {outcome.name}...[/bold]")
    for style, text in outcome.messages:
        color, prefix = _STYLES[style]
        console.print(f"[{color}]{prefix}{text}[/{color}]")
    console.print()


@cli.command()
@click.option("-i", "--image", help="Image name to check (default: vagrant-libvirt)")
@click.option("-t", "--tag", help="Image tag to check (default: latest)")
@click.option(
    "-p", "--profile", type=click.Path(dir_okay=False), help="Shell profile file (auto-detected)"
)
@handle_errors
def check(image, tag, profile):
    """Check libvirt, podman, the image and the vagrant function.

    \b
    Examples:
      vagrantbox check
      vagrantbox check -i my-vagrant
      vagrantbox check -t v1.0.0
    """
    logger.info("Starting installation check...")
    console.print()
    ctx = _get_install_context(image, tag, profile)

    session = ShellSession.for_family(ctx.family, timeout=ctx.host_config.shell_timeout)
    outcomes = run_checks(
        ctx.platform,
        PodmanClient(),
        ctx.config.image_ref,
        ctx.profile_path,
        session,
    )
    for outcome in outcomes:
        logger.debug(f"Check {outcome.name}: ok={outcome.ok} {outcome.messages}")
        _print_outcome(outcome)

    if all(outcome.ok for outcome in outcomes):
        logger.success("All checks passed! Your Vagrant Podman container is ready to use.")
    else:
        failed = ", ".join(outcome.name for outcome in outcomes if not outcome.ok)
        logger.warning(f"Some checks failed ({failed}). Please address the issues above.")
        sys.exit(1)
