# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""vagrantbox CLI package."""

import click

from vagrantbox import __version__
from vagrantbox.utils.logging import configure_logging, log_startup_info


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="vagrantbox")
@click.option("--debug", is_flag=True, help="Verbose output (same as VAGRANTBOX_DEBUG=1)")
def cli(debug: bool):
    """vagrantbox - Vagrant with libvirt plugins, run from a Podman container."""
    configure_logging(debug=debug)
    log_startup_info()

    ctx = click.get_current_context()
    if ctx.invoked_subcommand is None:
        click.echo("Usage: vagrantbox [OPTIONS] COMMAND [ARGS]...\n")

        def _print_table(title: str, rows: list[tuple[str, str]], width: int) -> None:
            click.echo(f"{title}:")
            for name, desc in rows:
                click.echo(f"  {name.ljust(width)}  {desc}")
            click.echo("")

        groups = [
            (
                "Shell Function",
                [
                    ("install", "Add the vagrant function to your shell profile"),
                    ("uninstall", "Remove the vagrant function from your shell profile"),
                    ("render", "Print the vagrant function without installing it"),
                    ("check", "Check libvirt, podman, image and shell function"),
                ],
            ),
            (
                "Image",
                [
                    ("build", "Build the vagrant-libvirt image"),
                    ("publish", "Build, tag and push the image to a registry"),
                ],
            ),
        ]

        width = max(len(name) for _, rows in groups for name, _ in rows)
        for title, rows in groups:
            _print_table(title, rows, width)
        click.echo("Use --help for full command details.")


def main():
    """Main entry point."""
    cli()


from vagrantbox.cli.commands import check  # noqa: E402,F401
from vagrantbox.cli.commands import image  # noqa: E402,F401
from vagrantbox.cli.commands import install  # noqa: E402,F401
