"""Notification dispatch through the cooldown gate.

Notifiers are handled one after another in the order they were configured.
For each one the dispatcher consults the cooldown gate, sends the message
when allowed, and records the send only after the provider confirms it.
Gate failures and delivery failures are logged and never abort the run.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import timedelta
from enum import StrEnum
from pathlib import Path

from sizechecker.core.cooldown import GateError, record_notification, should_notify
from sizechecker.types import Notifier
from sizechecker.utils.formatting import format_duration
from sizechecker.utils.logging import get_logger, log_with_context

__all__ = ["DispatchOutcome", "NotificationDispatcher"]


class DispatchOutcome(StrEnum):
    """What happened to one notifier during a dispatch."""

    SENT = "sent"
    RATE_LIMITED = "rate_limited"
    FAILED = "failed"
    GATE_ERROR = "gate_error"
    DRY_RUN = "dry_run"


class NotificationDispatcher:
    """Send a message to each notifier whose cooldown has elapsed."""

    def __init__(
        self,
        notifiers: Sequence[Notifier],
        *,
        cooldown: timedelta,
        state_dir: Path | None = None,
        dry_run_enabled: bool = False,
        logger_obj: logging.Logger | None = None,
    ) -> None:
        if cooldown < timedelta(0):
            msg = "cooldown must not be negative"
            raise ValueError(msg)

        self._notifiers: tuple[Notifier, ...] = tuple(notifiers)
        self._cooldown: timedelta = cooldown
        self._state_dir: Path | None = state_dir
        self._dry_run_enabled: bool = dry_run_enabled
        self._logger: logging.Logger = logger_obj or get_logger(__name__)

    @property
    def notifiers(self) -> tuple[Notifier, ...]:
        return self._notifiers

    async def dispatch(self, message: str) -> tuple[DispatchOutcome, ...]:
        """Deliver ``message`` to every configured notifier.

        Returns:
            One outcome per notifier, in configuration order
        """
        if not self._notifiers:
            self._logger.debug("No notifiers configured, nothing to dispatch")
            return ()

        outcomes: list[DispatchOutcome] = []
        for notifier in self._notifiers:
            outcomes.append(await self._dispatch_one(notifier, message))
        return tuple(outcomes)

    async def _dispatch_one(self, notifier: Notifier, message: str) -> DispatchOutcome:
        try:
            allowed = should_notify(
                notifier.destination,
                self._cooldown,
                state_dir=self._state_dir,
            )
        except GateError as exc:
            log_with_context(
                self._logger,
                logging.ERROR,
                f"Error checking notification cooldown: {exc}",
                extra={"provider": notifier.name, "record": str(exc.path)},
            )
            return DispatchOutcome.GATE_ERROR

        if not allowed:
            log_with_context(
                self._logger,
                logging.INFO,
                "Notification not sent due to rate limiting.",
                extra={
                    "provider": notifier.name,
                    "cooldown": format_duration(self._cooldown.total_seconds()),
                },
            )
            return DispatchOutcome.RATE_LIMITED

        if self._dry_run_enabled:
            log_with_context(
                self._logger,
                logging.INFO,
                f"Dry-run: {notifier.name} notification not sent.",
                extra={"provider": notifier.name, "notification_message": message},
            )
            return DispatchOutcome.DRY_RUN

        result = await notifier.send_notification(message)
        if not result.success:
            log_with_context(
                self._logger,
                logging.ERROR,
                f"Error sending {notifier.name} notification: {result.error_message}",
                extra={"provider": notifier.name, "delivery_time_ms": round(result.delivery_time_ms, 2)},
            )
            return DispatchOutcome.FAILED

        log_with_context(
            self._logger,
            logging.INFO,
            f"{notifier.name} notification sent successfully.",
            extra={"provider": notifier.name, "delivery_time_ms": round(result.delivery_time_ms, 2)},
        )

        try:
            record_notification(notifier.destination, state_dir=self._state_dir)
        except GateError as exc:
            log_with_context(
                self._logger,
                logging.ERROR,
                f"Error updating notification timestamp: {exc}",
                extra={"provider": notifier.name, "record": str(exc.path)},
            )

        return DispatchOutcome.SENT
