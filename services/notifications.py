"""
Status-change notifications.
Delivery is fire-and-forget: a failing sink is logged and never fails the transition.
"""
from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    def notify(self, applicant_id: str, new_status: str) -> None: ...


class LoggingNotificationSink:
    """Default sink: records the event in the application log."""

    def notify(self, applicant_id: str, new_status: str) -> None:
        logger.info("Loan status update for applicant %s: %s", applicant_id, new_status)


class NotificationDispatcher:
    def __init__(self, sink: NotificationSink | None = None):
        self.sink = sink or LoggingNotificationSink()

    def status_changed(self, applicant_id: str, new_status: str) -> None:
        try:
            self.sink.notify(applicant_id, new_status)
        except Exception:
            logger.exception("Notification delivery failed for applicant %s (%s)", applicant_id, new_status)
