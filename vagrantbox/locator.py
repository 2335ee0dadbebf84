# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Choose the shell profile file that receives the vagrant function."""

from pathlib import Path
from typing import Callable, Optional, Union

from vagrantbox.paths import ProfilePaths
from vagrantbox.platforms import ShellFamily


def locate_profile(
    family: ShellFamily,
    home: Path,
    override: Optional[Union[str, Path]] = None,
    exists: Callable[[Path], bool] = Path.exists,
) -> Path:
    """Return the profile path to modify.

    An override is used as given (after ~ expansion); it may not exist yet.
    Otherwise the first existing candidate for the shell family wins, and
    when none exists the first candidate is returned so it gets created.

    Args:
        family: Shell family of the caller
        home: Home directory the candidates live in
        override: Explicit profile path
        exists: Existence predicate (the only filesystem access)
    """
    if override:
        return Path(override).expanduser().absolute()

    candidates = ProfilePaths.candidates(family.value, home)
    for candidate in candidates:
        if exists(candidate):
            return candidate
    return candidates[0]
