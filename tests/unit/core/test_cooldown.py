"""Unit tests for the per-destination cooldown gate.

Tests cover:
- Record path derivation from the destination hash
- First notification, recent notification and expired cooldown
- Independence of destinations
- Corrupt, empty and unwritable records
- Serialization of record access across processes
"""

import hashlib
import multiprocessing
import os
import tempfile
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from multiprocessing.synchronize import Event
from pathlib import Path

import pytest

from sizechecker.core.cooldown import (
    RECORD_FILE_PREFIX,
    GateError,
    locked_record,
    record_notification,
    record_path,
    should_notify,
)

MINUTE = timedelta(minutes=1)


class TestRecordPath:
    def test_named_by_sha256_of_destination(self, state_dir: Path, webhook_url: str) -> None:
        digest = hashlib.sha256(webhook_url.encode("utf-8")).hexdigest()
        assert record_path(webhook_url, state_dir) == state_dir / f"{RECORD_FILE_PREFIX}{digest}"

    def test_defaults_to_system_temp_dir(self, webhook_url: str) -> None:
        assert record_path(webhook_url).parent == Path(tempfile.gettempdir())

    def test_secret_not_in_file_name(self, state_dir: Path, webhook_url: str) -> None:
        assert "token" not in record_path(webhook_url, state_dir).name

    def test_distinct_destinations_distinct_records(self, state_dir: Path) -> None:
        assert record_path("alpha", state_dir) != record_path("beta", state_dir)


class TestShouldNotify:
    def test_first_notification_allowed(self, state_dir: Path, webhook_url: str) -> None:
        assert should_notify(webhook_url, MINUTE, state_dir=state_dir)

    def test_check_does_not_write_timestamp(self, state_dir: Path, webhook_url: str) -> None:
        _ = should_notify(webhook_url, MINUTE, state_dir=state_dir)
        assert record_path(webhook_url, state_dir).read_text() == ""

    def test_recent_notification_denied(self, state_dir: Path, webhook_url: str) -> None:
        record_notification(webhook_url, state_dir=state_dir)
        assert not should_notify(webhook_url, MINUTE, state_dir=state_dir)

    def test_expired_cooldown_allowed(self, state_dir: Path, webhook_url: str) -> None:
        _ = record_path(webhook_url, state_dir).write_text(str(int(time.time()) - 61))
        assert should_notify(webhook_url, MINUTE, state_dir=state_dir)

    def test_zero_cooldown_always_allowed(self, state_dir: Path, webhook_url: str) -> None:
        record_notification(webhook_url, state_dir=state_dir)
        assert should_notify(webhook_url, timedelta(0), state_dir=state_dir)

    def test_destinations_are_independent(self, state_dir: Path) -> None:
        record_notification("https://example.com/api/webhooks/1/a", state_dir=state_dir)

        assert not should_notify("https://example.com/api/webhooks/1/a", MINUTE, state_dir=state_dir)
        assert should_notify("https://example.com/api/webhooks/2/b", MINUTE, state_dir=state_dir)

    @pytest.mark.parametrize(
        "contents",
        ["", "   \n", "not-a-timestamp", "12.5", "9" * 30, "-" + "9" * 30, "١٧٠٠٠٠٠٠٠٠"],
    )
    def test_unusable_record_allows(self, state_dir: Path, webhook_url: str, contents: str) -> None:
        _ = record_path(webhook_url, state_dir).write_text(contents, encoding="utf-8")
        assert should_notify(webhook_url, MINUTE, state_dir=state_dir)

    def test_underscore_separated_timestamp_allows(self, state_dir: Path, webhook_url: str) -> None:
        now = str(int(time.time()))
        _ = record_path(webhook_url, state_dir).write_text(f"{now[:1]}_{now[1:]}")
        assert should_notify(webhook_url, MINUTE, state_dir=state_dir)

    def test_signed_timestamp_accepted(self, state_dir: Path, webhook_url: str) -> None:
        _ = record_path(webhook_url, state_dir).write_text(f"+{int(time.time())}")
        assert not should_notify(webhook_url, MINUTE, state_dir=state_dir)

    def test_surrounding_whitespace_tolerated(self, state_dir: Path, webhook_url: str) -> None:
        _ = record_path(webhook_url, state_dir).write_text(f"  {int(time.time())}\n")
        assert not should_notify(webhook_url, MINUTE, state_dir=state_dir)

    def test_missing_state_dir_raises_gate_error(self, tmp_path: Path, webhook_url: str) -> None:
        missing = tmp_path / "does-not-exist"
        with pytest.raises(GateError, match="error opening timestamp file") as exc_info:
            _ = should_notify(webhook_url, MINUTE, state_dir=missing)
        assert exc_info.value.path == record_path(webhook_url, missing)


class TestRecordNotification:
    def test_writes_current_unix_time(self, state_dir: Path, webhook_url: str) -> None:
        before = int(time.time())
        record_notification(webhook_url, state_dir=state_dir)
        after = int(time.time())

        written = int(record_path(webhook_url, state_dir).read_text())
        assert before <= written <= after

    def test_truncates_previous_contents(self, state_dir: Path, webhook_url: str) -> None:
        _ = record_path(webhook_url, state_dir).write_text("9" * 40)
        record_notification(webhook_url, state_dir=state_dir)

        assert len(record_path(webhook_url, state_dir).read_text()) < 40

    def test_record_file_mode(self, state_dir: Path, webhook_url: str) -> None:
        old_umask = os.umask(0o022)
        try:
            record_notification(webhook_url, state_dir=state_dir)
        finally:
            _ = os.umask(old_umask)
        assert record_path(webhook_url, state_dir).stat().st_mode & 0o777 == 0o644

    def test_missing_state_dir_raises_gate_error(self, tmp_path: Path, webhook_url: str) -> None:
        with pytest.raises(GateError):
            record_notification(webhook_url, state_dir=tmp_path / "absent")


class TestLockedRecord:
    def test_lock_released_after_error(self, state_dir: Path) -> None:
        path = state_dir / "record"

        with pytest.raises(RuntimeError, match="inside"):
            with locked_record(path):
                raise RuntimeError("inside")

        # A second exclusive lock in the same process would block if the first leaked
        with locked_record(path) as fd:
            assert fd >= 0


def _hold_record_lock(path: str, locked: Event, release: Event) -> None:
    with locked_record(Path(path)):
        locked.set()
        _ = release.wait(timeout=10)


class TestCrossProcessLocking:
    def test_check_waits_for_lock_held_by_another_process(self, state_dir: Path, webhook_url: str) -> None:
        ctx = multiprocessing.get_context("fork")
        locked, release = ctx.Event(), ctx.Event()
        holder = ctx.Process(
            target=_hold_record_lock,
            args=(str(record_path(webhook_url, state_dir)), locked, release),
        )
        holder.start()
        try:
            assert locked.wait(timeout=10)

            with ThreadPoolExecutor(max_workers=1) as pool:
                pending = pool.submit(should_notify, webhook_url, MINUTE, state_dir=state_dir)

                with pytest.raises(TimeoutError):
                    _ = pending.result(timeout=0.3)

                release.set()
                assert pending.result(timeout=10)
        finally:
            release.set()
            holder.join(timeout=10)

        assert holder.exitcode == 0
