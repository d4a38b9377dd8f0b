"""Per-destination notification cooldown backed by lock-protected files.

Each destination (webhook URL or push target) owns one record file holding
the UNIX timestamp of its last successful notification. The file name embeds
the SHA-256 of the destination, so a destination always maps to the same
record and the secret URL itself never appears on disk.

Overlapping runs of the checker (cron jobs that outlast their interval)
serialize on an exclusive ``flock`` of the record file. The check in
``should_notify`` and the write in ``record_notification`` take the lock
separately, so two runs can both pass the check before either records its
send. The window is the duration of one HTTP request.
"""

import fcntl
import hashlib
import logging
import os
import re
import tempfile
import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import timedelta
from pathlib import Path
from typing import Final

logger = logging.getLogger(__name__)

RECORD_FILE_PREFIX: Final[str] = "disk_space_checker_last_notification_"
RECORD_FILE_MODE: Final[int] = 0o644

# Signed decimal integer, ASCII digits only
_TIMESTAMP_PATTERN: Final[re.Pattern[str]] = re.compile(r"[+-]?[0-9]+")
_INT64_MIN: Final[int] = -(2**63)
_INT64_MAX: Final[int] = 2**63 - 1


class GateError(RuntimeError):
    """Raised when a cooldown record cannot be opened, locked, read or written."""

    def __init__(self, message: str, *, path: Path) -> None:
        super().__init__(message)
        self.path: Path = path


def record_path(destination: str, state_dir: Path | None = None) -> Path:
    """Return the cooldown record path for ``destination``.

    Args:
        destination: Webhook URL or other destination identifier
        state_dir: Directory holding the records, defaults to the system
            temporary directory

    Returns:
        ``<state_dir>/disk_space_checker_last_notification_<sha256 hex>``
    """
    digest = hashlib.sha256(destination.encode("utf-8")).hexdigest()
    base = state_dir if state_dir is not None else Path(tempfile.gettempdir())
    return base / f"{RECORD_FILE_PREFIX}{digest}"


@contextmanager
def locked_record(path: Path) -> Iterator[int]:
    """Open ``path`` read/write (creating it) and hold an exclusive lock.

    Blocks until the lock is available. The lock is released and the
    descriptor closed when the block exits, whether or not it raised.

    Yields:
        The locked file descriptor

    Raises:
        GateError: If the file cannot be opened or locked
    """
    try:
        fd = os.open(path, os.O_RDWR | os.O_CREAT, RECORD_FILE_MODE)
    except OSError as exc:
        msg = f"error opening timestamp file: {exc.strerror or exc}"
        raise GateError(msg, path=path) from exc

    try:
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
        except OSError as exc:
            msg = f"error acquiring file lock: {exc.strerror or exc}"
            raise GateError(msg, path=path) from exc
        try:
            yield fd
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
    finally:
        os.close(fd)


def _read_all(fd: int) -> bytes:
    chunks: list[bytes] = []
    while chunk := os.read(fd, 4096):
        chunks.append(chunk)
    return b"".join(chunks)


def _parse_timestamp(text: str) -> int | None:
    """Return the record's UNIX timestamp, or None if it is not a 64-bit decimal."""
    if _TIMESTAMP_PATTERN.fullmatch(text) is None:
        return None
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        return None
    return value


def should_notify(
    destination: str,
    cooldown: timedelta,
    *,
    state_dir: Path | None = None,
) -> bool:
    """Decide whether ``destination`` may be notified now.

    A missing, empty or unparseable record means the destination has never
    been notified, which allows the send. The record is not written here;
    see record_notification.

    Args:
        destination: Webhook URL or other destination identifier
        cooldown: Minimum interval between notifications
        state_dir: Directory holding the records

    Returns:
        True if at least ``cooldown`` has elapsed since the recorded send

    Raises:
        GateError: If the record cannot be opened, locked or read
    """
    path = record_path(destination, state_dir)

    with locked_record(path) as fd:
        try:
            raw = _read_all(fd)
        except OSError as exc:
            msg = f"error reading timestamp file: {exc.strerror or exc}"
            raise GateError(msg, path=path) from exc

    text = raw.decode("utf-8", errors="replace").strip()
    if not text:
        return True

    last_sent = _parse_timestamp(text)
    if last_sent is None:
        logger.debug("Ignoring unparseable cooldown record", extra={"record": str(path)})
        return True

    elapsed = time.time() - last_sent
    if elapsed >= cooldown.total_seconds():
        return True

    logger.debug(
        "Destination is cooling down",
        extra={"record": str(path), "elapsed_seconds": round(elapsed, 3)},
    )
    return False


def record_notification(destination: str, *, state_dir: Path | None = None) -> None:
    """Persist the current UNIX time as the last notification for ``destination``.

    Call only after a send has been confirmed, so that failed deliveries
    never start a cooldown.

    Raises:
        GateError: If the record cannot be opened, locked or written
    """
    path = record_path(destination, state_dir)

    with locked_record(path) as fd:
        try:
            os.ftruncate(fd, 0)
            _ = os.lseek(fd, 0, os.SEEK_SET)
            _ = os.write(fd, str(int(time.time())).encode("ascii"))
            os.fsync(fd)
        except OSError as exc:
            msg = f"error writing timestamp file: {exc.strerror or exc}"
            raise GateError(msg, path=path) from exc
