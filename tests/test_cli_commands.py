# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Tests for the vagrantbox CLI commands.

Context resolution, podman and the user's shell are replaced with stubs;
profile files are real temp files.
"""

from pathlib import Path
from unittest.mock import Mock

import pytest
from click.testing import CliRunner

from tests.conftest import completed, run_vagrantbox
from vagrantbox import __version__
from vagrantbox.cli import cli
from vagrantbox.cli.helpers import InstallContext
from vagrantbox.doctor import CheckOutcome
from vagrantbox.host_config import HostConfig
from vagrantbox.injector import render_block
from vagrantbox.platforms import Platform, ShellFamily
from vagrantbox.podman import PodmanClient
from vagrantbox.shell import ShellSession

INSTALL_MODULE = "vagrantbox.cli.commands.install"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def install_ctx(tmp_path, resolved_config, monkeypatch):
    """Linux bash context with a real profile file and no live vagrant function."""
    profile = tmp_path / ".bashrc"
    profile.write_text("export PATH=/x\n")
    ctx = InstallContext(
        platform=Platform.LINUX,
        family=ShellFamily.BASH,
        config=resolved_config,
        warnings=[],
        profile_path=profile,
        profile_explicit=False,
        host_config=HostConfig(),
    )
    monkeypatch.setattr(f"{INSTALL_MODULE}._get_install_context", lambda *a, **kw: ctx)
    monkeypatch.setattr(f"{INSTALL_MODULE}.LoginShellShadowCheck", lambda **kw: lambda: None)
    return ctx


@pytest.fixture
def podman(monkeypatch):
    """PodmanClient stub where everything succeeds."""
    client = Mock(spec=PodmanClient)
    client.is_installed.return_value = True
    client.image_exists.return_value = True
    client.build.return_value = True
    client.run_version.return_value = True
    client.inspect_summary.return_value = "[localhost/vagrant-libvirt:latest] 1 now"
    client.is_logged_in.return_value = True
    client.tag.return_value = True
    client.push.return_value = True
    client.pull.return_value = True
    factory = Mock(return_value=client)
    monkeypatch.setattr(f"{INSTALL_MODULE}.PodmanClient", factory)
    monkeypatch.setattr("vagrantbox.cli.commands.check.PodmanClient", factory)
    monkeypatch.setattr("vagrantbox.cli.commands.image.PodmanClient", factory)
    return client


@pytest.fixture
def build_context(tmp_path):
    context = tmp_path / "src"
    context.mkdir()
    (context / "Dockerfile").write_text("FROM scratch\n")
    (context / "entrypoint.sh").write_text("#!/bin/bash\n")
    return context


def shadowed(monkeypatch, description="vagrant is a function\nvagrant () { ... }"):
    monkeypatch.setattr(f"{INSTALL_MODULE}.LoginShellShadowCheck", lambda **kw: lambda: description)


class TestInstallCommand:
    """Test the install command end to end against a temp profile."""

    def test_install_appends_function(self, runner, install_ctx):
        result = runner.invoke(cli, ["install", "--skip-prereqs", "--no-verify"])

        assert result.exit_code == 0, result.output
        content = install_ctx.profile_path.read_text()
        assert content == "export PATH=/x\n\n" + render_block(install_ctx.config)
        assert "Installation completed successfully!" in result.output

    def test_install_twice_keeps_one_block(self, runner, install_ctx):
        runner.invoke(cli, ["install", "--skip-prereqs", "--no-verify"])
        result = runner.invoke(cli, ["install", "--skip-prereqs", "--no-verify"])

        assert result.exit_code == 0, result.output
        assert install_ctx.profile_path.read_text().count("vagrant(){") == 1

    def test_declining_replacement_cancels(self, runner, install_ctx, monkeypatch):
        shadowed(monkeypatch)

        result = runner.invoke(cli, ["install", "--skip-prereqs", "--no-verify"], input="n\n")

        assert result.exit_code == 1
        assert "Do you want to replace it?" in result.output
        assert "Installation cancelled." in result.output
        assert install_ctx.profile_path.read_text() == "export PATH=/x\n"

    def test_accepting_replacement_installs(self, runner, install_ctx, monkeypatch):
        shadowed(monkeypatch)

        result = runner.invoke(cli, ["install", "--skip-prereqs", "--no-verify"], input="y\n")

        assert result.exit_code == 0, result.output
        assert "vagrant(){" in install_ctx.profile_path.read_text()

    def test_force_does_not_prompt(self, runner, install_ctx, monkeypatch):
        shadowed(monkeypatch)

        result = runner.invoke(cli, ["install", "--skip-prereqs", "--no-verify", "--force"])

        assert result.exit_code == 0, result.output
        assert "Do you want to replace it?" not in result.output

    def test_dry_run_writes_nothing(self, runner, install_ctx):
        result = runner.invoke(cli, ["install", "--dry-run"])

        assert result.exit_code == 0, result.output
        assert "vagrant-libvirt:latest" in result.output
        assert install_ctx.profile_path.read_text() == "export PATH=/x\n"

    def test_missing_podman_is_fatal(self, runner, install_ctx, podman):
        podman.is_installed.return_value = False

        result = runner.invoke(cli, ["install", "--no-verify"])

        assert result.exit_code == 1
        assert "Podman is not installed" in result.output
        assert install_ctx.profile_path.read_text() == "export PATH=/x\n"

    def test_missing_image_without_dockerfile_is_fatal(
        self, runner, install_ctx, podman, tmp_path
    ):
        podman.image_exists.return_value = False

        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(cli, ["install", "--no-verify"])

        assert result.exit_code == 1
        assert "Missing Prerequisite" in result.output
        podman.build.assert_not_called()

    def test_unwritable_profile_reports_filesystem_error(self, runner, install_ctx, tmp_path):
        directory = tmp_path / "profile-dir"
        directory.mkdir()
        ctx = install_ctx._replace(profile_path=directory)

        with pytest.MonkeyPatch.context() as mp:
            mp.setattr(f"{INSTALL_MODULE}._get_install_context", lambda *a, **kw: ctx)
            result = runner.invoke(cli, ["install", "--skip-prereqs", "--no-verify"])

        assert result.exit_code == 1
        assert "Filesystem Error" in result.output


class TestInstallVerification:
    """Test the post-install fresh shell check."""

    @pytest.fixture
    def session(self, monkeypatch):
        stub = Mock(spec=ShellSession)
        stub.shell = "bash"
        stub.function_type.return_value = completed(0, stdout="vagrant is a function\n")
        stub.run_in_profile.return_value = completed(0, stdout="Vagrant 2.4.1\n")
        factory = Mock()
        factory.for_family.return_value = stub
        monkeypatch.setattr(f"{INSTALL_MODULE}.ShellSession", factory)
        return stub

    def test_verified_install(self, runner, install_ctx, session):
        result = runner.invoke(cli, ["install", "--skip-prereqs"])

        assert result.exit_code == 0, result.output
        assert "Vagrant function is working correctly" in result.output

    def test_function_missing_after_install_is_fatal(self, runner, install_ctx, session):
        session.function_type.return_value = completed(1, stderr="vagrant: not found")

        result = runner.invoke(cli, ["install", "--skip-prereqs"])

        assert result.exit_code == 1
        assert "Vagrant function not found after installation" in result.output

    def test_shell_unavailable_is_a_warning(self, runner, install_ctx, session):
        session.function_type.return_value = None

        result = runner.invoke(cli, ["install", "--skip-prereqs"])

        assert result.exit_code == 0, result.output
        assert "Could not start a fresh bash session" in result.output


class TestOtherShellCommands:
    def test_uninstall(self, runner, install_ctx):
        runner.invoke(cli, ["install", "--skip-prereqs", "--no-verify"])

        result = runner.invoke(cli, ["uninstall"])

        assert result.exit_code == 0, result.output
        assert install_ctx.profile_path.read_text() == "export PATH=/x\n"

    def test_uninstall_nothing_installed(self, runner, install_ctx):
        result = runner.invoke(cli, ["uninstall"])

        assert result.exit_code == 0
        assert "No vagrant function found" in result.output

    def test_render_prints_only_the_block(self, runner, install_ctx):
        result = runner.invoke(cli, ["render"])

        assert result.exit_code == 0, result.output
        assert result.output == render_block(install_ctx.config)


class TestCheckCommand:
    @pytest.fixture
    def check_ctx(self, install_ctx, monkeypatch):
        monkeypatch.setattr(
            "vagrantbox.cli.commands.check._get_install_context", lambda *a, **kw: install_ctx
        )
        return install_ctx

    def test_all_checks_pass(self, runner, check_ctx, monkeypatch):
        outcome = CheckOutcome("podman")
        outcome.success("Podman is installed")
        monkeypatch.setattr("vagrantbox.cli.commands.check.run_checks", lambda *a: [outcome])

        result = runner.invoke(cli, ["check"])

        assert result.exit_code == 0, result.output
        assert "Checking podman..." in result.output
        assert "All checks passed!" in result.output

    def test_failed_check_exits_nonzero(self, runner, check_ctx, monkeypatch):
        outcome = CheckOutcome("image")
        outcome.fail("Vagrant container image not found")
        monkeypatch.setattr("vagrantbox.cli.commands.check.run_checks", lambda *a: [outcome])

        result = runner.invoke(cli, ["check"])

        assert result.exit_code == 1
        assert "Some checks failed (image)" in result.output


class TestImageCommands:
    def test_build(self, runner, podman, build_context):
        result = runner.invoke(cli, ["build", "-t", "v1", "-C", str(build_context)])

        assert result.exit_code == 0, result.output
        podman.build.assert_called_once_with("vagrant-libvirt:v1", Path(build_context), dev=False)
        assert "Build completed successfully!" in result.output

    def test_build_dev(self, runner, podman, build_context):
        result = runner.invoke(cli, ["build", "--dev", "-C", str(build_context)])

        assert result.exit_code == 0, result.output
        assert podman.build.call_args.kwargs["dev"] is True

    def test_build_without_dockerfile(self, runner, podman, tmp_path):
        result = runner.invoke(cli, ["build", "-C", str(tmp_path)])

        assert result.exit_code == 1
        podman.build.assert_not_called()

    def test_build_failure(self, runner, podman, build_context):
        podman.build.return_value = False

        result = runner.invoke(cli, ["build", "-C", str(build_context)])

        assert result.exit_code == 1
        assert "Failed to build image" in result.output

    def test_publish_requires_username(self, runner, podman):
        result = runner.invoke(cli, ["publish", "--no-build"])

        assert result.exit_code == 1
        assert "Registry username is required" in result.output

    def test_publish_tags_pushes_and_writes_installer(self, runner, podman, tmp_path):
        with runner.isolated_filesystem(temp_dir=tmp_path) as cwd:
            result = runner.invoke(cli, ["publish", "-u", "me", "--no-build"])
            installer = Path(cwd) / "install-me-vagrant-libvirt.sh"

            assert result.exit_code == 0, result.output
            assert installer.exists()

        podman.tag.assert_called_once_with(
            "vagrant-libvirt:latest", "docker.io/me/vagrant-libvirt:latest"
        )
        podman.push.assert_called_once_with("docker.io/me/vagrant-libvirt:latest")

    def test_publish_custom_registry_in_installer(self, runner, podman, tmp_path):
        with runner.isolated_filesystem(temp_dir=tmp_path) as cwd:
            result = runner.invoke(cli, ["publish", "-u", "me", "-r", "ghcr.io", "--no-build"])
            script = (Path(cwd) / "install-me-vagrant-libvirt.sh").read_text()

        assert result.exit_code == 0, result.output
        podman.push.assert_called_once_with("ghcr.io/me/vagrant-libvirt:latest")
        assert 'IMAGE_NAME="ghcr.io/me/vagrant-libvirt"' in script
        assert "    ghcr.io/me/vagrant-libvirt:latest \\\n" in script
        assert "vagrantbox install -i ghcr.io/me/vagrant-libvirt -t latest" in result.output

    def test_publish_no_push(self, runner, podman, tmp_path):
        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(
                cli, ["publish", "-u", "me", "--no-build", "--no-push", "--no-write-installer"]
            )

        assert result.exit_code == 0, result.output
        podman.push.assert_not_called()
        podman.is_logged_in.assert_not_called()

    def test_publish_username_from_environment(self, runner, podman, tmp_path, monkeypatch):
        monkeypatch.setenv("DOCKER_USERNAME", "envuser")

        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(cli, ["publish", "--no-build", "--no-write-installer"])

        assert result.exit_code == 0, result.output
        podman.push.assert_called_once_with("docker.io/envuser/vagrant-libvirt:latest")


class TestGroup:
    def test_no_command_lists_commands(self, runner):
        result = runner.invoke(cli, [])

        assert result.exit_code == 0
        for name in ("install", "uninstall", "render", "check", "build", "publish"):
            assert name in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert __version__ in result.output

    def test_module_entry_point(self, tmp_path):
        result = run_vagrantbox("--help", cwd=tmp_path)

        assert "install" in result.stdout
