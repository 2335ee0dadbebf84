# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Shell function commands: install, uninstall, render."""

import sys
from pathlib import Path

import click

from vagrantbox.cli import cli
from vagrantbox.cli.helpers import (
    InstallContext,
    _check_prerequisites,
    _get_install_context,
    console,
    handle_errors,
)
from vagrantbox.injector import install as install_function
from vagrantbox.injector import render_block, uninstall as uninstall_function
from vagrantbox.platforms import Platform
from vagrantbox.podman import PodmanClient
from vagrantbox.shell import LoginShellShadowCheck, ShellSession
from vagrantbox.utils.logging import get_logger
from vagrantbox.verifier import CheckState, verify

logger = get_logger(__name__)


def _report_probe_warnings(ctx: InstallContext) -> None:
    for warning in ctx.warnings:
        logger.warning(str(warning))
        if warning.hint:
            logger.info(warning.hint)


def _confirm_replace(description: str) -> bool:
    """Show the live function and ask before replacing it."""
    console.print("Current vagrant function:")
    console.print(description, markup=False, highlight=False)
    console.print()
    try:
        return click.confirm("Do you want to replace it?", default=False)
    except click.Abort:
        return False


def _show_post_installation(ctx: InstallContext) -> None:
    console.print()
    console.print("[green]Installation completed successfully![/green]")
    console.print()
    console.print("To start using vagrant:")
    console.print()
    console.print(f"1. Reload your shell profile:\n   source {ctx.profile_path}")
    console.print("2. Test the installation:\n   vagrant --version")
    console.print("3. Check available plugins:\n   vagrant plugin list")
    console.print("4. Create a test Vagrantfile:\n   vagrant init generic/ubuntu2204")
    console.print("5. Start a VM:\n   vagrant up")
    console.print()
    console.print("[yellow]Important Notes:[/yellow]")
    console.print("- Make sure libvirt is running on your system")
    if ctx.platform is Platform.MACOS:
        console.print("- For macOS with Homebrew libvirt:")
        console.print("  brew services start libvirt")
        console.print(
            f"  # The libvirt socket should be available at: {ctx.config.host_socket_dir}"
        )
    else:
        console.print("- You may need to add your user to the libvirt group:")
        console.print("  sudo usermod -a -G libvirt $USER")
        console.print("- For rootless mode, ensure proper socket permissions")
    console.print()


def _verify_installation(ctx: InstallContext, block: str) -> None:
    """Fail if the function is definitely missing; warn on anything unclear."""
    logger.info("Testing installation...")
    session = ShellSession.for_family(ctx.family, timeout=ctx.host_config.shell_timeout)
    report = verify(ctx.profile_path, session=session, expected_block=block)

    if report.failed:
        logger.error("Vagrant function not found after installation")
        sys.exit(1)

    if report.loadable is CheckState.UNKNOWN:
        logger.warning(
            f"Could not start a fresh {session.shell} session; "
            "open a new shell and run: type vagrant"
        )
        return

    logger.success("Vagrant function installed successfully")
    if report.runnable is CheckState.PRESENT:
        logger.success("Vagrant function is working correctly")
    else:
        logger.warning("Vagrant function installed but may need libvirt setup")


@cli.command()
@click.option("-i", "--image", help="Image name (default: vagrant-libvirt)")
@click.option("-t", "--tag", help="Image tag (default: latest)")
@click.option(
    "-p", "--profile", type=click.Path(dir_okay=False), help="Shell profile file (auto-detected)"
)
@click.option(
    "-f", "--force", is_flag=True, help="Replace an existing vagrant function without asking"
)
@click.option("--skip-prereqs", is_flag=True, help="Don't check podman or the image")
@click.option("--no-verify", is_flag=True, help="Don't test the function in a fresh shell")
@click.option("--dry-run", is_flag=True, help="Show the function that would be installed")
@handle_errors
def install(image, tag, profile, force, skip_prereqs, no_verify, dry_run):
    """Install the vagrant function into your shell profile.

    The function runs vagrant from the container image with the libvirt
    socket and the current directory mounted. Re-running replaces the
    previously installed function in place.

    \b
    Examples:
      vagrantbox install
      vagrantbox install -i my-vagrant
      vagrantbox install -p ~/.zshrc
      vagrantbox install --force
    """
    logger.info("Starting installation process...")
    ctx = _get_install_context(image, tag, profile)
    _report_probe_warnings(ctx)
    if not ctx.profile_explicit:
        logger.info(f"Detected shell profile: {ctx.profile_path}")
    logger.info(f"Using libvirt path: {ctx.config.host_socket_dir}")

    if dry_run:
        console.print(f"[blue]Would add to {ctx.profile_path}:[/blue]")
        console.print(render_block(ctx.config), markup=False, highlight=False)
        return

    if not skip_prereqs:
        _check_prerequisites(PodmanClient(), ctx.config.image_ref, Path.cwd())

    shadow_check = LoginShellShadowCheck(timeout=ctx.host_config.shell_timeout)
    result = install_function(
        ctx.profile_path,
        ctx.config,
        force=force,
        shadow_check=shadow_check,
        confirm=_confirm_replace,
        override_requested=ctx.profile_explicit,
    )

    if not result.installed:
        logger.info("Installation cancelled.")
        sys.exit(1)

    for warning in result.warnings:
        logger.warning(str(warning))
    logger.success(f"Vagrant function added to {ctx.profile_path}")

    if not no_verify:
        _verify_installation(ctx, result.block)

    _show_post_installation(ctx)


@cli.command()
@click.option(
    "-p", "--profile", type=click.Path(dir_okay=False), help="Shell profile file (auto-detected)"
)
@handle_errors
def uninstall(profile):
    """Remove the vagrant function from your shell profile."""
    ctx = _get_install_context(profile=profile)
    removed = uninstall_function(ctx.profile_path)
    if removed:
        logger.success(f"Removed vagrant function from {ctx.profile_path}")
        console.print("[dim]Open a new shell or run: unset -f vagrant[/dim]")
    else:
        logger.info(f"No vagrant function found in {ctx.profile_path}")


@cli.command()
@click.option("-i", "--image", help="Image name (default: vagrant-libvirt)")
@click.option("-t", "--tag", help="Image tag (default: latest)")
@handle_errors
def render(image, tag):
    """Print the vagrant function for this machine without installing it."""
    ctx = _get_install_context(image, tag)
    # Keep stdout clean so the output can be redirected or sourced
    for warning in ctx.warnings:
        logger.warning(str(warning), console_output=False)
        click.echo(f"Warning: {warning}", err=True)
    click.echo(render_block(ctx.config), nl=False)
