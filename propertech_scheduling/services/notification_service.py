"""
Notification Sink

Signals that a user should be told about a scheduling event. Delivery
(email, SMS, push) belongs to the notifications service; this module only
hands the event over.

  * Every event is logged.
  * If NOTIFICATION_WEBHOOK_URL is set, the event is POSTed there as JSON.
    Inside a request the POST runs as a background task after the response
    is sent. A failed POST is logged and dropped.
"""
from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

import httpx
from fastapi import BackgroundTasks

from propertech_scheduling.core.config import settings

logger = logging.getLogger(__name__)


class NotificationEvent:
    VIEWING_REQUESTED = "viewing_requested"
    VIEWING_UPDATED = "viewing_updated"
    VIEWING_CONFIRMED = "viewing_confirmed"
    VIEWING_CANCELLED = "viewing_cancelled"
    FOLLOW_UP_SCHEDULED = "follow_up_scheduled"
    MAINTENANCE_COMPLETED = "scheduled_maintenance_completed"


class NotificationSink:
    """Fire-and-forget notification signals."""

    def __init__(
        self,
        webhook_url: Optional[str] = None,
        timeout: Optional[float] = None,
        background: Optional[BackgroundTasks] = None,
    ):
        self.webhook_url = webhook_url if webhook_url is not None else settings.NOTIFICATION_WEBHOOK_URL
        self.timeout = timeout or settings.NOTIFICATION_TIMEOUT_SECONDS
        # With a request's BackgroundTasks, webhook delivery runs after the response is sent
        self.background = background

    def notify(self, user_id: uuid.UUID, event_kind: str, payload: Dict[str, Any]) -> None:
        body = {
            "user_id": str(user_id),
            "event": event_kind,
            "payload": payload,
        }
        logger.info(f"[NOTIFY] {event_kind} -> user {user_id}")

        if not self.webhook_url:
            return

        if self.background is not None:
            self.background.add_task(self.deliver, body)
        else:
            self.deliver(body)

    def deliver(self, body: Dict[str, Any]) -> None:
        """POST one event to the webhook. Failures are logged, never raised."""
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(
                    self.webhook_url,
                    content=json.dumps(body, default=str),
                    headers={"Content-Type": "application/json"},
                )
            if response.status_code >= 400:
                logger.warning(
                    f"[NOTIFY] Webhook rejected {body['event']} for {body['user_id']}: "
                    f"HTTP {response.status_code}"
                )
        except httpx.HTTPError as exc:
            logger.error(f"[NOTIFY] Webhook delivery failed for {body['event']}: {exc}")


class RecordingNotificationSink(NotificationSink):
    """Keeps events in memory instead of delivering them. Used by tests and local runs."""

    def __init__(self):
        super().__init__(webhook_url="")
        self.events: List[Tuple[uuid.UUID, str, Dict[str, Any]]] = []

    def notify(self, user_id: uuid.UUID, event_kind: str, payload: Dict[str, Any]) -> None:
        self.events.append((user_id, event_kind, payload))

    def kinds(self) -> List[str]:
        return [kind for _, kind, _ in self.events]


_default_sink: Optional[NotificationSink] = None


def default_notification_sink() -> NotificationSink:
    """Process-wide sink for services used outside a request."""
    global _default_sink
    if _default_sink is None:
        _default_sink = NotificationSink()
    return _default_sink


def get_notification_sink(background_tasks: BackgroundTasks) -> NotificationSink:
    """FastAPI dependency: a sink that defers webhook delivery until after the response."""
    return NotificationSink(background=background_tasks)
