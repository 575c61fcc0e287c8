"""Platform enumerations shared by handlers, the dispatch core and notify-me.

Values mirror the platform's wire format (upper-case identifiers), so
payloads coming off the event queues validate without translation.
"""

from __future__ import annotations

from enum import Enum


class ServiceRole(str, Enum):
    """Roles a platform user can act under."""

    ADMIN = "ADMIN"
    ASSESSMENT = "ASSESSMENT"
    INNOVATOR = "INNOVATOR"
    ACCESSOR = "ACCESSOR"
    QUALIFYING_ACCESSOR = "QUALIFYING_ACCESSOR"


class NotificationCategory(str, Enum):
    """Preference buckets a notification can belong to.

    A user's email preference is stored per role and per category.
    Notifications without a category always fire.
    """

    TASK = "TASK"
    MESSAGE = "MESSAGE"
    SUPPORT = "SUPPORT"
    DOCUMENT = "DOCUMENT"
    AUTOMATIC = "AUTOMATIC"
    INNOVATION_MANAGEMENT = "INNOVATION_MANAGEMENT"
    NOTIFY_ME = "NOTIFY_ME"
    ACCOUNT = "ACCOUNT"
    ADMIN = "ADMIN"


class NotificationPreference(str, Enum):
    """Explicit per-category email preference. Absence means unset."""

    YES = "YES"
    NO = "NO"


class SubscriptionType(str, Enum):
    """Lifecycle of a notify-me subscription.

    * ``INSTANTLY``: fires on every match and stays.
    * ``ONCE``: fires on the first match and is deleted.
    * ``SCHEDULED``: fires when its reminder comes due and stays until the
      schedule is cleared.
    """

    INSTANTLY = "INSTANTLY"
    ONCE = "ONCE"
    SCHEDULED = "SCHEDULED"


class NotifyMeEventType(str, Enum):
    """Runtime events a notify-me subscription can listen for."""

    SUPPORT_UPDATED = "SUPPORT_UPDATED"
    PROGRESS_UPDATE_CREATED = "PROGRESS_UPDATE_CREATED"
    INNOVATION_RECORD_UPDATED = "INNOVATION_RECORD_UPDATED"
    DOCUMENT_UPLOADED = "DOCUMENT_UPLOADED"
    REMINDER = "REMINDER"


class SupportStatus(str, Enum):
    """Status of an organisation unit's support for an innovation."""

    SUGGESTED = "SUGGESTED"
    ENGAGING = "ENGAGING"
    WAITING = "WAITING"
    UNASSIGNED = "UNASSIGNED"
    UNSUITABLE = "UNSUITABLE"
    CLOSED = "CLOSED"


class NotifierType(str, Enum):
    """Business events handled by the registered notification handlers."""

    SUPPORT_STATUS_UPDATE = "SUPPORT_STATUS_UPDATE"
    DOCUMENT_UPLOADED = "DOCUMENT_UPLOADED"
    COLLABORATOR_INVITE = "COLLABORATOR_INVITE"
    USER_EMAIL_ADDRESS_UPDATED = "USER_EMAIL_ADDRESS_UPDATED"
    LOCK_USER = "LOCK_USER"
