"""In-memory recipient directory and subscription store.

Used by tests, the CLI (loaded from a JSON fixture file) and
single-process deployments that have the directory data at hand.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from casenotify.directory import EmailPreferences
from casenotify.models.enums import (
    NotificationCategory,
    NotificationPreference,
    NotifyMeEventType,
)
from casenotify.models.recipients import IdentityInfo, InnovationInfo, Recipient
from casenotify.models.subscriptions import Subscription

logger = logging.getLogger(__name__)


class InMemoryRecipientDirectory:
    """Dictionary-backed ``RecipientDirectory``.

    Parameters
    ----------
    recipients:
        Recipients with a role id; keyed internally by role id.
    identities:
        Identity provider records.
    preferences:
        Explicit email preferences per role id.
    innovations:
        Known innovations.
    """

    def __init__(
        self,
        recipients: Iterable[Recipient] = (),
        identities: Iterable[IdentityInfo] = (),
        preferences: EmailPreferences | None = None,
        innovations: Iterable[InnovationInfo] = (),
    ) -> None:
        self._recipients: dict[str, Recipient] = {
            r.role_id: r for r in recipients if r.role_id is not None
        }
        self._identities = {i.identity_id: i for i in identities}
        self._preferences: EmailPreferences = dict(preferences or {})
        self._innovations = {i.id: i for i in innovations}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InMemoryRecipientDirectory:
        preferences = {
            role_id: {
                NotificationCategory(category): NotificationPreference(value)
                for category, value in prefs.items()
            }
            for role_id, prefs in data.get("preferences", {}).items()
        }
        return cls(
            recipients=[Recipient.model_validate(r) for r in data.get("recipients", [])],
            identities=[IdentityInfo.model_validate(i) for i in data.get("identities", [])],
            preferences=preferences,
            innovations=[InnovationInfo.model_validate(i) for i in data.get("innovations", [])],
        )

    @classmethod
    def from_json(cls, path: Path | str) -> InMemoryRecipientDirectory:
        """Load a directory fixture file (see ``from_dict`` for the layout)."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        logger.debug("Loaded recipient directory from %s", path)
        return cls.from_dict(data)

    # ------------------------------------------------------------------
    # RecipientDirectory
    # ------------------------------------------------------------------

    def resolve_by_role_ids(self, role_ids: Iterable[str]) -> list[Recipient]:
        return [self._recipients[r] for r in role_ids if r in self._recipients]

    def resolve_identities(self, identity_ids: Iterable[str]) -> dict[str, IdentityInfo]:
        return {i: self._identities[i] for i in identity_ids if i in self._identities}

    def get_email_preferences(self, role_ids: Iterable[str]) -> EmailPreferences:
        return {r: dict(self._preferences[r]) for r in role_ids if r in self._preferences}

    def innovation_info(self, innovation_id: str) -> InnovationInfo | None:
        return self._innovations.get(innovation_id)


class InMemorySubscriptionStore:
    """Dictionary-backed ``SubscriptionStore``.

    ``transaction()`` snapshots the store and restores it if the block
    raises, so a failed matching pass leaves no half-applied deletions.
    """

    def __init__(self, subscriptions: Iterable[Subscription] = ()) -> None:
        self._subscriptions: dict[str, Subscription] = {s.id: s for s in subscriptions}

    def add_subscription(self, subscription: Subscription) -> Subscription:
        self._subscriptions[subscription.id] = subscription
        return subscription

    def get_innovation_event_subscriptions(
        self, innovation_id: str, event_type: NotifyMeEventType
    ) -> list[Subscription]:
        return [
            s
            for s in self._subscriptions.values()
            if s.innovation_id == innovation_id and s.config.event_type == event_type
        ]

    def get_subscription(self, subscription_id: str) -> Subscription | None:
        return self._subscriptions.get(subscription_id)

    def delete_subscription(self, subscription_id: str) -> None:
        self._subscriptions.pop(subscription_id, None)

    def list_subscriptions(self) -> list[Subscription]:
        return list(self._subscriptions.values())

    @contextmanager
    def transaction(self) -> Iterator[None]:
        snapshot = dict(self._subscriptions)
        try:
            yield
        except BaseException:
            self._subscriptions = snapshot
            raise
