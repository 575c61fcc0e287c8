"""casenotify data models: all Pydantic v2, all frozen (immutable)."""

from casenotify.models.enums import (
    NotificationCategory,
    NotificationPreference,
    NotifierType,
    NotifyMeEventType,
    ServiceRole,
    SubscriptionType,
    SupportStatus,
)
from casenotify.models.envelopes import (
    ChannelKind,
    EmailEnvelope,
    EmailOptions,
    Envelope,
    InAppContext,
    InAppEnvelope,
    InAppOptions,
)
from casenotify.models.recipients import (
    DomainContext,
    EmailRecipient,
    IdentityInfo,
    InnovationInfo,
    OrganisationUnitRef,
    Recipient,
)
from casenotify.models.subscriptions import (
    NotifyMeEvent,
    ScheduledNotification,
    Subscription,
    SubscriptionConfig,
)

__all__ = [
    # enums
    "NotificationCategory",
    "NotificationPreference",
    "NotifierType",
    "NotifyMeEventType",
    "ServiceRole",
    "SubscriptionType",
    "SupportStatus",
    # envelopes
    "ChannelKind",
    "EmailEnvelope",
    "EmailOptions",
    "Envelope",
    "InAppContext",
    "InAppEnvelope",
    "InAppOptions",
    # recipients
    "DomainContext",
    "EmailRecipient",
    "IdentityInfo",
    "InnovationInfo",
    "OrganisationUnitRef",
    "Recipient",
    # subscriptions
    "NotifyMeEvent",
    "ScheduledNotification",
    "Subscription",
    "SubscriptionConfig",
]
