# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Pytest fixtures for vagrantbox tests.

Nothing here spawns a real shell, brew or podman: every subprocess is
replaced by a recording fake runner. Only run_vagrantbox starts a real
Python process, to smoke-test the module entry point.
"""

import os
import subprocess
import sys
import tempfile
from pathlib import Path

import pytest

# Keep test runs out of the user's real log directory. Set before any
# vagrantbox module is imported, since CLI modules configure logging on import.
os.environ.setdefault(
    "VAGRANTBOX_LOG_FILE", str(Path(tempfile.gettempdir()) / "vagrantbox-tests.log")
)

from vagrantbox.host_config import reset_config  # noqa: E402
from vagrantbox.resolver import ResolvedConfig  # noqa: E402


def run_vagrantbox(*args, cwd=None, check=True, env=None):
    """Run the vagrantbox CLI via python module (tests local code, not installed version)."""
    project_root = Path(__file__).parent.parent

    run_env = os.environ.copy()
    run_env["PYTHONPATH"] = str(project_root)
    if env:
        run_env.update(env)

    return subprocess.run(
        [sys.executable, "-m", "vagrantbox.cli", *args],
        cwd=cwd,
        check=check,
        capture_output=True,
        text=True,
        env=run_env,
    )


class FakeRunner:
    """subprocess.run stand-in that records commands and replays responses.

    responses maps a command prefix (tuple) to a CompletedProcess or an
    exception instance to raise. The longest matching prefix wins; commands
    without a match succeed with empty output.
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append((list(cmd), kwargs))
        match = None
        for prefix in self.responses:
            if tuple(cmd[: len(prefix)]) == prefix:
                if match is None or len(prefix) > len(match):
                    match = prefix
        if match is None:
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")
        response = self.responses[match]
        if isinstance(response, BaseException):
            raise response
        return response

    @property
    def commands(self):
        return [cmd for cmd, _ in self.calls]


def completed(returncode=0, stdout="", stderr=""):
    """Shorthand for a CompletedProcess used in FakeRunner responses."""
    return subprocess.CompletedProcess([], returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def resolved_config():
    """Default Linux configuration."""
    return ResolvedConfig(
        image_name="vagrant-libvirt",
        image_tag="latest",
        host_socket_dir="/var/run/libvirt/",
    )


@pytest.fixture(autouse=True)
def isolated_host(tmp_path, monkeypatch):
    """Point HOME and the config file at a temp dir and clear vagrantbox env vars."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("VAGRANTBOX_CONFIG", str(tmp_path / "config.yml"))
    for var in ("VAGRANTBOX_IMAGE", "VAGRANTBOX_TAG", "DOCKER_USERNAME"):
        monkeypatch.delenv(var, raising=False)
    reset_config()
    yield home
    reset_config()
