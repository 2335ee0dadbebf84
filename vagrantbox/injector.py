# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Install the vagrant shell function into a shell profile file.

The function lives in a generated block that starts with a line beginning
with ``vagrant(){`` and ends with the next line beginning with ``}``.
Everything outside that block belongs to the user and is written back
untouched. The profile is only ever replaced as a whole through a
temporary file and rename, so readers never see a half-written file.
"""

import logging
import os
import stat
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from vagrantbox.errors import AmbiguousStateWarning, FilesystemError
from vagrantbox.paths import ContainerPaths, HostPaths, ImageDefaults
from vagrantbox.resolver import ResolvedConfig
from vagrantbox.shell import FUNCTION_NAME, ShadowCheck

logger = logging.getLogger(__name__)

START_MARKER = f"{FUNCTION_NAME}(){{"
END_MARKER = "}"

# Comment line older installers wrote right above the function
LEGACY_HEADER = "# Vagrant Podman container function"

Confirm = Callable[[str], bool]


class InstallStatus(Enum):
    INSTALLED = "installed"
    CANCELLED = "cancelled"


@dataclass
class InstallResult:
    """Outcome of install().

    block is the rendered function text (None when cancelled).
    replaced counts prior blocks removed (0 or 1); remaining_blocks counts
    well-formed blocks left behind because the profile held more than one.
    """

    status: InstallStatus
    profile_path: Path
    block: Optional[str] = None
    replaced: int = 0
    remaining_blocks: int = 0
    warnings: List[Warning] = field(default_factory=list)

    @property
    def installed(self) -> bool:
        return self.status is InstallStatus.INSTALLED


def render_block(config: ResolvedConfig) -> str:
    """Render the vagrant function for a resolved configuration."""
    lines = [
        START_MARKER,
        "  podman run -it --rm \\",
        f"    -e {ImageDefaults.LIBVIRT_URI_ENV} \\",
        f"    -v {config.host_socket_dir}:{ContainerPaths.LIBVIRT_SOCKET_DIR} \\",
        f"    -v {HostPaths.VAGRANT_HOME}:{ContainerPaths.VAGRANT_HOME} \\",
        f"    -v {config.workdir_mount_expr}:${{PWD}} \\",
        '    -w "${PWD}" \\',
        "    --network host \\",
        f"    --entrypoint {ContainerPaths.ENTRYPOINT} \\",
        "    --security-opt label=disable \\",
        f"    {config.image_ref} \\",
        f'      {FUNCTION_NAME} "$@"',
        END_MARKER,
    ]
    return "\n".join(lines) + "\n"


def _bare(line: str) -> str:
    return line.rstrip("\r\n")


def find_blocks(lines: List[str]) -> List[Tuple[int, int]]:
    """Locate well-formed generated blocks.

    Args:
        lines: Profile content as lines (line endings may be kept)

    Returns:
        (start, end) index pairs, end inclusive. A legacy header comment
        directly above the start marker is included in the range. A start
        marker without a closing line is not a block, and neither is
        anything above a later start marker: only the innermost
        start/end pair counts.
    """
    blocks = []
    i = 0
    while i < len(lines):
        if not lines[i].startswith(START_MARKER):
            i += 1
            continue
        start = i
        end = None
        for j in range(i + 1, len(lines)):
            if lines[j].startswith(START_MARKER):
                start = j
            elif lines[j].startswith(END_MARKER):
                end = j
                break
        if end is None:
            break
        if start > 0 and _bare(lines[start - 1]).strip() == LEGACY_HEADER:
            start -= 1
        blocks.append((start, end))
        i = end + 1
    return blocks


# Profiles are not guaranteed to be UTF-8; surrogateescape round-trips any byte
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def read_profile(profile_path: Union[str, Path]) -> str:
    """Read a profile file; a missing file reads as empty."""
    path = Path(profile_path)
    try:
        with open(path, encoding=_ENCODING, errors=_ERRORS, newline="") as f:
            return f.read()
    except FileNotFoundError:
        return ""
    except OSError as e:
        raise FilesystemError(path, e, action="read") from e


def _ensure_trailing_newline(lines: List[str]) -> None:
    if lines and not lines[-1].endswith(("\n", "\r")):
        lines[-1] += "\n"


def splice_block(content: str, block: str) -> Tuple[str, int]:
    """Compute new profile content with block installed. No I/O.

    An existing block is replaced where it stands. Without one, the block is
    appended after a single blank separator line. With several, only the
    first is replaced.

    Returns:
        (new_content, blocks_found)
    """
    lines = content.splitlines(keepends=True)
    blocks = find_blocks(lines)
    block_lines = block.splitlines(keepends=True)

    if blocks:
        start, end = blocks[0]
        before = lines[:start]
        _ensure_trailing_newline(before)
        new_lines = before + block_lines + lines[end + 1 :]
    else:
        new_lines = list(lines)
        _ensure_trailing_newline(new_lines)
        if new_lines and new_lines[-1].strip():
            new_lines.append("\n")
        new_lines.extend(block_lines)

    return "".join(new_lines), len(blocks)


def atomic_write_text(path: Union[str, Path], content: str) -> None:
    """Replace path with content in one rename.

    The temporary file lives next to the target so os.replace stays on one
    filesystem. It is removed on every failure path; the target is then
    left exactly as it was. Symlinked profiles are written through to
    their target.

    Raises:
        FilesystemError: parent cannot be created or the write fails
    """
    target = Path(path)
    if target.is_symlink():
        target = target.resolve()
    parent = target.parent

    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(parent, e, action="create directory") from e

    try:
        mode = stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        mode = None
    except OSError as e:
        raise FilesystemError(target, e, action="stat") from e

    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=parent)
    except OSError as e:
        raise FilesystemError(target, e) from e

    try:
        with os.fdopen(fd, "w", encoding=_ENCODING, errors=_ERRORS, newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        if mode is not None:
            os.chmod(tmp_name, mode)
        else:
            os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, target)
    except BaseException as e:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        if isinstance(e, OSError):
            raise FilesystemError(target, e) from e
        raise


def install(
    profile_path: Union[str, Path],
    config: ResolvedConfig,
    force: bool = False,
    shadow_check: Optional[ShadowCheck] = None,
    confirm: Optional[Confirm] = None,
    override_requested: bool = False,
    write: Callable[[Path, str], None] = atomic_write_text,
) -> InstallResult:
    """Install or replace the vagrant function in a profile file.

    Args:
        profile_path: Shell profile to modify (created if missing)
        config: Resolved configuration rendered into the function
        force: Skip the live-function confirmation
        shadow_check: Reports a live vagrant function in the user's shell
        confirm: Asked before replacing a live function; False cancels
        override_requested: The caller picked the profile explicitly,
            which also skips the confirmation
        write: Commit step (atomic_write_text unless testing)

    Returns:
        InstallResult; status CANCELLED means nothing was written.

    Raises:
        FilesystemError: profile unreadable or not writable (file unchanged)
    """
    path = Path(profile_path)
    content = read_profile(path)

    if not force and not override_requested and shadow_check is not None:
        description = shadow_check()
        if description:
            logger.warning(f"{FUNCTION_NAME} function already exists in your shell environment")
            try:
                proceed = confirm(description) if confirm is not None else False
            except KeyboardInterrupt:
                proceed = False
            if not proceed:
                logger.info("Installation cancelled")
                return InstallResult(status=InstallStatus.CANCELLED, profile_path=path)

    block = render_block(config)
    new_content, found = splice_block(content, block)
    result = InstallResult(
        status=InstallStatus.INSTALLED,
        profile_path=path,
        block=block,
        replaced=min(found, 1),
        remaining_blocks=max(found - 1, 0),
    )
    if found > 1:
        warning = AmbiguousStateWarning(path, found)
        logger.warning(str(warning))
        result.warnings.append(warning)
    if found:
        logger.info(f"Replacing existing {FUNCTION_NAME} function in {path}")

    write(path, new_content)
    logger.info(f"Installed {FUNCTION_NAME} function for {config.image_ref} in {path}")
    return result


def remove_blocks(content: str) -> Tuple[str, int]:
    """Strip every well-formed block and the blank separator above it."""
    lines = content.splitlines(keepends=True)
    blocks = find_blocks(lines)
    if not blocks:
        return content, 0

    kept: List[str] = []
    cursor = 0
    for start, end in blocks:
        kept.extend(lines[cursor:start])
        # Drop the separator line the installer added, if the block was last
        if end + 1 >= len(lines) and kept and not kept[-1].strip():
            kept.pop()
        cursor = end + 1
    kept.extend(lines[cursor:])
    return "".join(kept), len(blocks)


def uninstall(
    profile_path: Union[str, Path],
    write: Callable[[Path, str], None] = atomic_write_text,
) -> int:
    """Remove all generated blocks from a profile file.

    Returns:
        Number of blocks removed. Nothing is written when it is 0.
    """
    path = Path(profile_path)
    if not path.exists():
        return 0
    content, removed = remove_blocks(read_profile(path))
    if removed:
        write(path, content)
        logger.info(f"Removed {removed} {FUNCTION_NAME} function block(s) from {path}")
    return removed
