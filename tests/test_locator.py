# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Tests for shell profile selection."""

from pathlib import Path

from vagrantbox.locator import locate_profile
from vagrantbox.platforms import ShellFamily


class TestLocateProfile:
    """Test candidate ordering and overrides."""

    def test_zsh_prefers_zshrc(self, tmp_path):
        (tmp_path / ".zshrc").touch()
        (tmp_path / ".zprofile").touch()

        assert locate_profile(ShellFamily.ZSH, tmp_path) == tmp_path / ".zshrc"

    def test_zsh_falls_back_to_zprofile(self, tmp_path):
        (tmp_path / ".zprofile").touch()

        assert locate_profile(ShellFamily.ZSH, tmp_path) == tmp_path / ".zprofile"

    def test_bash_prefers_bashrc(self, tmp_path):
        (tmp_path / ".bashrc").touch()
        (tmp_path / ".bash_profile").touch()

        assert locate_profile(ShellFamily.BASH, tmp_path) == tmp_path / ".bashrc"

    def test_bash_falls_back_to_bash_profile(self, tmp_path):
        (tmp_path / ".bash_profile").touch()

        assert locate_profile(ShellFamily.BASH, tmp_path) == tmp_path / ".bash_profile"

    def test_nothing_exists_returns_first_candidate(self, tmp_path):
        assert locate_profile(ShellFamily.ZSH, tmp_path) == tmp_path / ".zshrc"
        assert locate_profile(ShellFamily.BASH, tmp_path) == tmp_path / ".bashrc"

    def test_other_family_files_ignored(self, tmp_path):
        (tmp_path / ".bashrc").touch()

        assert locate_profile(ShellFamily.ZSH, tmp_path) == tmp_path / ".zshrc"

    def test_override_used_even_if_missing(self, tmp_path):
        (tmp_path / ".zshrc").touch()
        override = tmp_path / "custom" / "profile.sh"

        assert locate_profile(ShellFamily.ZSH, tmp_path, override=override) == override

    def test_override_expands_home(self, isolated_host):
        result = locate_profile(ShellFamily.BASH, Path("/unused"), override="~/.profile")

        assert result == isolated_host / ".profile"

    def test_exists_predicate_is_only_filesystem_access(self):
        seen = []

        def exists(path):
            seen.append(path.name)
            return path.name == ".bash_profile"

        result = locate_profile(ShellFamily.BASH, Path("/home/u"), exists=exists)

        assert result == Path("/home/u/.bash_profile")
        assert seen == [".bashrc", ".bash_profile"]
