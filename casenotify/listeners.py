"""Queue-facing entry points.

Each listener takes one raw message payload, validates it, computes the
envelopes and hands them to the delivery dispatcher: emails first, then
in-app notifications. Errors are logged and re-raised so the hosting
queue consumer can retry or dead-letter the message.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from casenotify.config import NotifyConfig
from casenotify.core.dispatch import DispatchOutput
from casenotify.core.matching import NotifyMeEngine, NotifyMeResult
from casenotify.core.reminders import build_reminder_events
from casenotify.core.urls import UrlBuilder
from casenotify.directory import RecipientDirectory, SubscriptionStore
from casenotify.directory.sqlite_store import SqliteSubscriptionStore
from casenotify.handlers import run_handler
from casenotify.models.recipients import DomainContext
from casenotify.models.subscriptions import NotifyMeEvent
from casenotify.routing.dispatcher import DeliveryDispatcher

logger = logging.getLogger(__name__)


class InvalidPayloadError(ValueError):
    """A queue message did not validate against its model."""

    def __init__(self, message: str, errors: ValidationError) -> None:
        super().__init__(f"{message}: {errors.error_count()} validation error(s)")
        self.errors = errors


class NotificationMessage(BaseModel):
    """Envelope of a business-event message on the notifications queue."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    request_user: DomainContext = Field(alias="requestUser")
    type: str
    data: dict[str, Any] = {}


def notify_me_listener(
    payload: NotifyMeEvent | dict[str, Any],
    *,
    store: SubscriptionStore,
    directory: RecipientDirectory,
    dispatcher: DeliveryDispatcher,
    urls: UrlBuilder | None = None,
    settings: NotifyConfig | None = None,
) -> NotifyMeResult:
    """Match one runtime event and deliver what it fires.

    Matching and ONCE deletions run inside ``store.transaction()``.
    Delivery happens after the transaction commits.
    """
    try:
        event = (
            payload if isinstance(payload, NotifyMeEvent) else NotifyMeEvent.model_validate(payload)
        )
    except ValidationError as exc:
        raise InvalidPayloadError("Invalid notify-me event", exc) from exc

    engine = NotifyMeEngine(store, directory, urls, settings=settings)
    try:
        with store.transaction():
            result = engine.execute(event)
        dispatcher.deliver_all(result.emails, result.in_apps)
    except Exception:
        logger.exception("Notify-me listener failed for %s on %s", event.type.value, event.innovation_id)
        raise

    logger.info(
        "%s on %s: %d email(s), %d in-app, %d subscription(s) consumed",
        event.type.value,
        event.innovation_id,
        len(result.emails),
        len(result.in_apps),
        len(result.deleted_subscription_ids),
    )
    return result


def notifications_listener(
    payload: NotificationMessage | dict[str, Any],
    *,
    directory: RecipientDirectory,
    dispatcher: DeliveryDispatcher,
    urls: UrlBuilder | None = None,
) -> DispatchOutput:
    """Run the handler named by the message ``type`` and deliver its output."""
    try:
        message = (
            payload
            if isinstance(payload, NotificationMessage)
            else NotificationMessage.model_validate(payload)
        )
    except ValidationError as exc:
        raise InvalidPayloadError("Invalid notification message", exc) from exc

    try:
        output = run_handler(message.type, message.request_user, message.data, directory, urls)
    except ValidationError as exc:
        raise InvalidPayloadError(f"Invalid {message.type} payload", exc) from exc

    try:
        dispatcher.deliver_all(output.emails, output.in_apps)
    except Exception:
        logger.exception("Delivery failed for %s", message.type)
        raise
    return output


def reminders_listener(
    *,
    store: SqliteSubscriptionStore,
    directory: RecipientDirectory,
    dispatcher: DeliveryDispatcher,
    urls: UrlBuilder | None = None,
    now: datetime | None = None,
    settings: NotifyConfig | None = None,
) -> list[NotifyMeResult]:
    """Fire every due reminder, then clear the schedules that were sent.

    A reminder that fails to deliver keeps its schedule row and is retried
    by the next sweep inside the grace window.
    """
    results: list[NotifyMeResult] = []
    sent: list[str] = []
    for scheduled, event in build_reminder_events(store, now, settings=settings):
        try:
            results.append(
                notify_me_listener(
                    event,
                    store=store,
                    directory=directory,
                    dispatcher=dispatcher,
                    urls=urls,
                    settings=settings,
                )
            )
        except Exception:
            logger.warning("Reminder for subscription %s left scheduled", scheduled.subscription_id)
            continue
        sent.append(scheduled.subscription_id)

    store.delete_scheduled_notifications(sent)
    return results
