"""Channel envelopes handed to the delivery collaborators.

An envelope is a fully-formed, channel-specific notification payload.
Envelopes are frozen Pydantic models created fresh per invocation; they
carry no persisted identity beyond the optional ``notification_id`` used to
correlate an email link with its in-app counterpart.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from casenotify.models.enums import NotificationCategory
from casenotify.models.recipients import EmailRecipient, Recipient


class ChannelKind(str, Enum):
    """The two outbound channels."""

    EMAIL = "email"
    IN_APP = "in_app"


class EmailOptions(BaseModel):
    """Per-envelope overrides of the default recipient policy."""

    model_config = ConfigDict(frozen=True)

    include_self: bool = False  # send to the user that made the request
    include_locked: bool = False  # send even if the account is locked
    ignore_preferences: bool = False  # bypass the category preference check


class InAppOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    include_self: bool = False
    include_locked: bool = False


class EmailEnvelope(BaseModel):
    """One email to exactly one recipient.

    While accumulated by a handler run the recipient is either a directory
    ``Recipient`` or a plain ``EmailRecipient``; once resolved for delivery
    it is always an ``EmailRecipient``.
    """

    model_config = ConfigDict(frozen=True)

    channel: ChannelKind = ChannelKind.EMAIL
    template_id: str
    category: NotificationCategory | None
    recipient: Recipient | EmailRecipient
    params: dict[str, Any] = {}
    options: EmailOptions = EmailOptions()
    notification_id: str | None = None

    @property
    def is_resolved(self) -> bool:
        """Whether the recipient is a deliverable email address."""
        return isinstance(self.recipient, EmailRecipient)


class InAppContext(BaseModel):
    """What an in-app notification is about: category, detail and entity id."""

    model_config = ConfigDict(frozen=True)

    type: NotificationCategory
    detail: str
    id: str


class InAppEnvelope(BaseModel):
    """One in-app notification fanned out to a set of user roles."""

    model_config = ConfigDict(frozen=True)

    channel: ChannelKind = ChannelKind.IN_APP
    template_id: str
    context: InAppContext
    innovation_id: str
    user_role_ids: list[str]
    params: dict[str, Any] = {}
    notification_id: str | None = None
    options: InAppOptions = InAppOptions()

    @property
    def category(self) -> NotificationCategory:
        return self.context.type


Envelope = EmailEnvelope | InAppEnvelope
