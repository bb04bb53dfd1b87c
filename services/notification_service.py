"""
Outbound notifications and effect dispatch.

Notifications are best-effort: a delivery failure is logged and never reaches
the business operation that asked for it. Three notifiers are available:
- LoggingNotifier: writes the message to the application log
- OutboxNotifier: queues the message in the `notifications` collection for an
  external mailer
- WebhookNotifier: POSTs the message as JSON to a configured URL

EffectDispatcher executes the effects returned by core operations once their
writes have been committed.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Callable, Iterable, Optional, Protocol
from uuid import uuid4

import requests

from domain.context import OperationContext
from domain.effects import Effect, LogActivity, NotifyRep
from domain.time import utc_now
from repositories.serialization import to_iso_utc
from repositories.store import NOTIFICATIONS, DocumentStore, Insert
from services.activity_service import append_activity

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, recipient_rep_id: str, subject: str, body: str) -> None:
        ...


class LoggingNotifier:
    def notify(self, recipient_rep_id: str, subject: str, body: str) -> None:
        logger.info(
            f"Notification to rep {recipient_rep_id}: {subject}",
            extra={"recipient_rep_id": recipient_rep_id, "subject": subject, "body": body},
        )


class OutboxNotifier:
    """Queue notifications for delivery by a separate mailer process."""

    def __init__(self, store: DocumentStore, clock: Callable[[], datetime] = utc_now) -> None:
        self._store = store
        self._clock = clock

    def notify(self, recipient_rep_id: str, subject: str, body: str) -> None:
        self._store.commit([
            Insert(
                collection=NOTIFICATIONS,
                record={
                    "id": str(uuid4()),
                    "recipient_rep_id": recipient_rep_id,
                    "subject": subject,
                    "body": body,
                    "status": "queued",
                    "created_at_utc": to_iso_utc(self._clock(), name="created_at"),
                },
            )
        ])


class WebhookNotifier:
    def __init__(self, url: str, timeout: float = 5.0) -> None:
        self._url = url
        self._timeout = timeout

    def notify(self, recipient_rep_id: str, subject: str, body: str) -> None:
        payload = {"rep_id": recipient_rep_id, "subject": subject, "body": body}
        response = requests.post(self._url, json=payload, timeout=self._timeout)
        response.raise_for_status()


def notifier_from_env(store: DocumentStore, clock: Callable[[], datetime] = utc_now) -> Notifier:
    """
    Build the notifier selected by CRM_NOTIFIER (log, outbox or webhook).

    The webhook notifier needs CRM_NOTIFICATION_WEBHOOK_URL; without it the
    logging notifier is used.
    """

    kind = os.getenv("CRM_NOTIFIER", "log").lower()
    if kind == "outbox":
        return OutboxNotifier(store, clock)
    if kind == "webhook":
        url = os.getenv("CRM_NOTIFICATION_WEBHOOK_URL")
        if url:
            return WebhookNotifier(url)
        logger.warning("CRM_NOTIFIER=webhook but CRM_NOTIFICATION_WEBHOOK_URL is not set; logging notifications")
    return LoggingNotifier()


def deliver(notifier: Notifier, notification: NotifyRep) -> bool:
    """Send one notification; failures are logged and reported as False."""

    try:
        notifier.notify(notification.rep_id, notification.subject, notification.body)
        return True
    except Exception as e:
        logger.warning(
            f"Failed to notify rep {notification.rep_id}: {e}",
            extra={"recipient_rep_id": notification.rep_id, "subject": notification.subject},
        )
        return False


class EffectDispatcher:
    """
    Executes effects after a commit.

    Activities are appended first and their failures propagate; notifications
    follow and are best-effort.
    """

    def __init__(self, store: DocumentStore, notifier: Optional[Notifier] = None) -> None:
        self._store = store
        self._notifier = notifier or LoggingNotifier()

    def log_activities(self, ctx: OperationContext, effects: Iterable[Effect]) -> None:
        for effect in effects:
            if isinstance(effect, LogActivity):
                append_activity(self._store, ctx, effect.title, effect.description)

    def send_notifications(self, effects: Iterable[Effect]) -> int:
        """Deliver every NotifyRep effect; returns how many were delivered."""
        return sum(1 for effect in effects if isinstance(effect, NotifyRep) and deliver(self._notifier, effect))

    def dispatch(self, ctx: OperationContext, effects: Iterable[Effect]) -> None:
        effects = tuple(effects)
        self.log_activities(ctx, effects)
        self.send_notifications(effects)


__all__ = [
    "Notifier",
    "LoggingNotifier",
    "OutboxNotifier",
    "WebhookNotifier",
    "notifier_from_env",
    "deliver",
    "EffectDispatcher",
]
