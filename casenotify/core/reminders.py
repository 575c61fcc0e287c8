"""Scheduled reminders: turn due schedule rows into REMINDER events.

A reminder event carries ``subscriptionId`` in its params, so the matcher
fires exactly the subscription that scheduled it and nothing else.
"""

from __future__ import annotations

import logging
from datetime import datetime

from casenotify.config import NotifyConfig
from casenotify.core.preconditions import SUBSCRIPTION_ID_PARAM
from casenotify.directory.sqlite_store import SqliteSubscriptionStore
from casenotify.models.enums import NotifyMeEventType, ServiceRole
from casenotify.models.recipients import DomainContext
from casenotify.models.subscriptions import NotifyMeEvent, ScheduledNotification

logger = logging.getLogger(__name__)

# Acting user of scheduler-triggered events.
SYSTEM_USER = DomainContext(
    id="system",
    identity_id="system",
    role_id="system",
    role=ServiceRole.ADMIN,
)


def build_reminder_events(
    store: SqliteSubscriptionStore,
    now: datetime | None = None,
    *,
    settings: NotifyConfig | None = None,
) -> list[tuple[ScheduledNotification, NotifyMeEvent]]:
    """Return the due reminders paired with the event that fires each one.

    Schedules whose subscription no longer exists are logged and skipped.
    """
    settings = settings or NotifyConfig()
    due = store.get_scheduled_notifications(now, grace_hours=settings.reminder_grace_hours)

    events: list[tuple[ScheduledNotification, NotifyMeEvent]] = []
    for scheduled in due:
        subscription = store.get_subscription(scheduled.subscription_id)
        if subscription is None:
            logger.debug("Schedule %s has no subscription, skipped", scheduled.subscription_id)
            continue
        event = NotifyMeEvent(
            type=NotifyMeEventType.REMINDER,
            innovation_id=subscription.innovation_id,
            request_user=SYSTEM_USER,
            params={**scheduled.params, SUBSCRIPTION_ID_PARAM: subscription.id},
        )
        events.append((scheduled, event))

    logger.debug("%d reminder(s) due, %d with a live subscription", len(due), len(events))
    return events
