"""Directory size probing.

This module measures the quantity a check compares against its limit:

- Used space: the sum of ``lstat`` sizes of every non-directory entry below
  a root directory. Symbolic links and special files count whatever size
  ``lstat`` reports for the entry itself; symlinked directories are not
  descended into.
- Available space: the bytes available to unprivileged users on the
  filesystem containing the root directory, from ``statvfs``.

Any unreadable entry aborts the walk with ProbeError. A partial sum would
silently under-report usage.
"""

import logging
import os
import stat
from collections.abc import Iterator
from pathlib import Path

from sizechecker.types.models import RunType

logger = logging.getLogger(__name__)


class ProbeError(RuntimeError):
    """Raised when a directory cannot be measured."""

    def __init__(self, message: str, *, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path: Path | str | None = path


def validate_directory(path: Path | str) -> Path:
    """Resolve a path to an absolute directory path.

    Args:
        path: Directory to check, relative paths are resolved against the
            current working directory

    Returns:
        Absolute path of the directory

    Raises:
        ProbeError: If the path does not exist, cannot be accessed or is not
            a directory
    """
    absolute = Path(os.path.abspath(path))

    try:
        mode = absolute.stat().st_mode
    except OSError as exc:
        msg = f"cannot access directory {absolute}: {exc.strerror or exc}"
        raise ProbeError(msg, path=absolute) from exc

    if not stat.S_ISDIR(mode):
        msg = f"path {absolute} is not a directory"
        raise ProbeError(msg, path=absolute)

    return absolute


def iter_entry_sizes(root: Path) -> Iterator[tuple[str, int]]:
    """Yield ``(path, size)`` for every non-directory entry under ``root``.

    Traversal is depth-first and does not follow symbolic links.

    Raises:
        ProbeError: On the first entry or directory that cannot be read
    """
    pending: list[str] = [os.fspath(root)]

    while pending:
        current = pending.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            pending.append(entry.path)
                            continue
                        size = entry.stat(follow_symlinks=False).st_size
                    except OSError as exc:
                        msg = f"cannot read {entry.path}: {exc.strerror or exc}"
                        raise ProbeError(msg, path=entry.path) from exc
                    yield entry.path, size
        except OSError as exc:
            msg = f"cannot read directory {current}: {exc.strerror or exc}"
            raise ProbeError(msg, path=current) from exc


def get_used_space(root: Path) -> int:
    """Return the total size in bytes of all files under ``root``.

    Raises:
        ProbeError: If any part of the tree cannot be read
    """
    total_bytes = 0
    processed_entries = 0

    for _, size in iter_entry_sizes(root):
        total_bytes += size
        processed_entries += 1

    logger.debug(
        "Used space calculation complete",
        extra={"path": str(root), "total_bytes": total_bytes, "entries": processed_entries},
    )
    return total_bytes


def get_available_space(root: Path) -> int:
    """Return the bytes available on the filesystem containing ``root``.

    Uses the blocks available to unprivileged users, which excludes the
    reserved root blocks that ``f_bfree`` would include.

    Raises:
        ProbeError: If filesystem statistics are unsupported or the call fails
    """
    try:
        stats = os.statvfs(root)
    except AttributeError as exc:
        msg = "filesystem statistics are not supported on this platform"
        raise ProbeError(msg, path=root) from exc
    except OSError as exc:
        msg = f"cannot read filesystem statistics for {root}: {exc.strerror or exc}"
        raise ProbeError(msg, path=root) from exc

    block_size = stats.f_frsize or stats.f_bsize
    available = stats.f_bavail * block_size

    logger.debug(
        "Available space calculation complete",
        extra={"path": str(root), "available_bytes": available, "block_size": block_size},
    )
    return available


def probe(root: Path, run_type: RunType) -> int:
    """Measure ``root`` according to ``run_type``.

    Args:
        root: Absolute directory path, already checked by validate_directory
        run_type: Used-space or available-space mode

    Returns:
        Non-negative byte count

    Raises:
        ProbeError: If the measurement fails
    """
    if run_type is RunType.USED:
        return get_used_space(root)
    return get_available_space(root)
