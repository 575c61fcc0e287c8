"""Notify-me subscription and runtime event models."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from casenotify.models.enums import NotifyMeEventType, SubscriptionType
from casenotify.models.recipients import DomainContext


class SubscriptionConfig(BaseModel):
    """What a subscription listens for and how long it lives.

    ``pre_conditions`` is a partial field map compared against the event
    params: list values mean "one of", scalar values mean "equal to".
    """

    model_config = ConfigDict(frozen=True)

    event_type: NotifyMeEventType
    subscription_type: SubscriptionType = SubscriptionType.INSTANTLY
    pre_conditions: dict[str, Any] = {}
    notification_type: str | None = None  # e.g. SUGGESTED_SUPPORT_UPDATED
    custom_message: str | None = None  # SCHEDULED reminders only
    date: datetime | None = None  # SCHEDULED send date


class Subscription(BaseModel):
    """A stored notify-me request owned by one user role."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    role_id: str
    innovation_id: str
    config: SubscriptionConfig

    @property
    def event_type(self) -> NotifyMeEventType:
        return self.config.event_type

    @property
    def subscription_type(self) -> SubscriptionType:
        return self.config.subscription_type

    @property
    def notification_detail(self) -> str:
        """The detail tag shown in-app and used as the email template."""
        return self.config.notification_type or self.config.event_type.value


class NotifyMeEvent(BaseModel):
    """A runtime event matched against stored subscriptions.

    Reminder-class events carry ``subscriptionId`` in ``params`` and only
    ever match the subscription with that id.
    """

    model_config = ConfigDict(frozen=True)

    type: NotifyMeEventType
    innovation_id: str
    request_user: DomainContext
    params: dict[str, Any] = {}

    @property
    def subscription_id(self) -> str | None:
        value = self.params.get("subscriptionId")
        return None if value is None else str(value)


class ScheduledNotification(BaseModel):
    """A reminder due for a SCHEDULED subscription."""

    model_config = ConfigDict(frozen=True)

    subscription_id: str
    role_id: str
    send_date: datetime
    params: dict[str, Any] = {}
