"""Collaborator protocols consumed by the dispatch core and notify-me engine.

Both collaborators are narrow and injected explicitly so that in-memory
fakes can stand in for the real services:

* ``RecipientDirectory``: read-only lookups of recipients, identities,
  email preferences and innovation info.
* ``SubscriptionStore``: notify-me subscription reads and deletes, plus
  the unit of work that keeps a ONCE deletion atomic with its read.
"""

from __future__ import annotations

from collections.abc import Iterable
from contextlib import AbstractContextManager
from typing import Protocol, runtime_checkable

from casenotify.models.enums import (
    NotificationCategory,
    NotificationPreference,
    NotifyMeEventType,
)
from casenotify.models.recipients import IdentityInfo, InnovationInfo, Recipient
from casenotify.models.subscriptions import Subscription

EmailPreferences = dict[str, dict[NotificationCategory, NotificationPreference]]


@runtime_checkable
class RecipientDirectory(Protocol):
    """Resolves role and identity ids into contactable recipients."""

    def resolve_by_role_ids(self, role_ids: Iterable[str]) -> list[Recipient]:
        """Return the recipients for the given role ids.

        Unknown role ids are omitted from the result; order follows the
        input where the ids resolve.
        """
        ...

    def resolve_identities(self, identity_ids: Iterable[str]) -> dict[str, IdentityInfo]:
        """Return identity info keyed by identity id; unknown ids are omitted."""
        ...

    def get_email_preferences(self, role_ids: Iterable[str]) -> EmailPreferences:
        """Return explicit email preferences keyed by role id.

        A role with no stored preference for a category has no entry for
        that category (unset).
        """
        ...

    def innovation_info(self, innovation_id: str) -> InnovationInfo | None:
        """Return innovation name and ownership, or ``None`` if unknown."""
        ...


@runtime_checkable
class SubscriptionStore(Protocol):
    """Storage of notify-me subscriptions."""

    def get_innovation_event_subscriptions(
        self, innovation_id: str, event_type: NotifyMeEventType
    ) -> list[Subscription]:
        ...

    def delete_subscription(self, subscription_id: str) -> None:
        ...

    def transaction(self) -> AbstractContextManager[None]:
        """Unit of work spanning a matching pass's reads and deletes."""
        ...
