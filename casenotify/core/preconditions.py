"""Notify-me precondition matching.

Matching is a partial comparison over normalized maps: only keys present
in both the subscription's preconditions and the event params are
compared. A key on one side only is ignored, so adding a field to an event
never breaks existing subscriptions, and a subscription sharing no keys
with the event matches.

Both functions here are pure.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from casenotify.models.subscriptions import NotifyMeEvent, Subscription

SUBSCRIPTION_ID_PARAM = "subscriptionId"


def normalize_values(value: Any) -> list[Any]:
    """Lists, tuples and sets become lists; ``None`` is empty; scalars wrap."""
    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


def normalize_map(values: Mapping[str, Any]) -> dict[str, list[Any]]:
    return {key: normalize_values(value) for key, value in values.items()}


def _event_values(value: Any) -> list[Any]:
    # An event value of None is a literal value, not an empty collection.
    if value is None:
        return [None]
    return normalize_values(value)


def match_preconditions(pre_conditions: Mapping[str, Any], params: Mapping[str, Any]) -> bool:
    """Whether ``params`` satisfies ``pre_conditions`` on their shared keys.

    For each shared key every event value must be one of the precondition
    values (a scalar precondition therefore means equality). An event
    value of ``None`` matches only a precondition that allows ``None``.
    """
    expected = normalize_map(pre_conditions)
    for key in expected.keys() & params.keys():
        allowed = expected[key]
        if any(value not in allowed for value in _event_values(params[key])):
            return False
    return True


def validate_preconditions(subscription: Subscription, event: NotifyMeEvent) -> bool:
    """Decide whether ``event`` fires ``subscription``.

    Reminder-class events carry a ``subscriptionId`` param and match only
    that subscription; no other field is considered for them.
    """
    if event.type != subscription.config.event_type:
        return False

    if SUBSCRIPTION_ID_PARAM in event.params:
        return event.subscription_id == subscription.id

    return match_preconditions(subscription.config.pre_conditions, event.params)
