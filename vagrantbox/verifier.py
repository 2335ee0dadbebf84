# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Confirm an installed vagrant function without touching the profile.

Each aspect is reported as PRESENT, ABSENT or UNKNOWN. UNKNOWN means the
aspect could not be determined (unreadable file, shell would not start)
and is never reported as ABSENT.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from vagrantbox.errors import FilesystemError
from vagrantbox.injector import find_blocks, read_profile
from vagrantbox.shell import FUNCTION_NAME, ShellSession

logger = logging.getLogger(__name__)


class CheckState(Enum):
    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class VerificationReport:
    """Per-aspect verification result."""

    profile_path: Path
    in_profile: CheckState
    loadable: CheckState
    runnable: CheckState

    @property
    def ok(self) -> bool:
        """The function is in the profile and a fresh shell can load it."""
        return self.in_profile is CheckState.PRESENT and self.loadable is CheckState.PRESENT

    @property
    def failed(self) -> bool:
        """A definite negative: either aspect is known to be absent."""
        return CheckState.ABSENT in (self.in_profile, self.loadable)


def check_profile(
    profile_path: Union[str, Path], expected_block: Optional[str] = None
) -> CheckState:
    """Search the profile text for the block (or the exact expected text)."""
    try:
        content = read_profile(profile_path)
    except FilesystemError as e:
        logger.debug(f"Cannot read {profile_path}: {e}")
        return CheckState.UNKNOWN

    if expected_block is not None:
        found = expected_block in content
    else:
        found = bool(find_blocks(content.splitlines(keepends=True)))
    return CheckState.PRESENT if found else CheckState.ABSENT


def check_loadable(profile_path: Union[str, Path], session: ShellSession) -> CheckState:
    """Source the profile in a fresh shell and ask `type vagrant`."""
    result = session.function_type(profile_path)
    if result is None:
        return CheckState.UNKNOWN
    if result.returncode == 0 and "function" in result.stdout:
        return CheckState.PRESENT
    return CheckState.ABSENT


def check_runnable(profile_path: Union[str, Path], session: ShellSession) -> CheckState:
    """Run `vagrant --version` through the sourced function."""
    result = session.run_in_profile(profile_path, f"{FUNCTION_NAME} --version")
    if result is None:
        return CheckState.UNKNOWN
    return CheckState.PRESENT if result.returncode == 0 else CheckState.ABSENT


def verify(
    profile_path: Union[str, Path],
    session: Optional[ShellSession] = None,
    expected_block: Optional[str] = None,
    run_function: bool = True,
) -> VerificationReport:
    """Check an installation.

    Args:
        profile_path: Profile file that should hold the function
        session: Fresh-shell capability; without one, shell aspects are UNKNOWN
        expected_block: Exact rendered text to look for
        run_function: Also try `vagrant --version` (starts a container)
    """
    path = Path(profile_path)
    in_profile = check_profile(path, expected_block)

    loadable = CheckState.UNKNOWN
    runnable = CheckState.UNKNOWN
    if session is not None:
        loadable = check_loadable(path, session)
        if run_function and loadable is CheckState.PRESENT:
            runnable = check_runnable(path, session)

    report = VerificationReport(
        profile_path=path, in_profile=in_profile, loadable=loadable, runnable=runnable
    )
    logger.debug(f"Verification of {path}: {report}")
    return report
