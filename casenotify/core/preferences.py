"""Shared recipient policy: self suppression, locked accounts, preferences.

Two deliberately different defaults live here:

* self and locked suppression default to *exclude* (a receipt to the acting
  user, or mail to a locked account, must be opted into per envelope);
* category email preferences default to *allow* (only an explicit ``NO``
  suppresses).
"""

from __future__ import annotations

from collections.abc import Mapping

from casenotify.models.enums import NotificationCategory, NotificationPreference
from casenotify.models.recipients import DomainContext, EmailRecipient, Recipient


def should_send_email(
    category: NotificationCategory,
    preferences: Mapping[NotificationCategory, NotificationPreference] | None,
) -> bool:
    """Whether a role's stored preference allows email for ``category``.

    Unset (no map, or no entry) and ``YES`` send; only ``NO`` suppresses.
    """
    if not preferences:
        return True
    return preferences.get(category) != NotificationPreference.NO


def is_self(recipient: Recipient | EmailRecipient | str, request_user: DomainContext) -> bool:
    """Whether ``recipient`` is the acting user.

    Role-id strings compare against the acting role; directory recipients
    compare by identity; plain addresses compare by email, case-insensitive.
    """
    if isinstance(recipient, str):
        return recipient == request_user.role_id
    if isinstance(recipient, Recipient):
        if recipient.identity_id == request_user.identity_id:
            return True
        if recipient.role_id is not None and recipient.role_id == request_user.role_id:
            return True
    return _same_email(recipient.email, request_user.email)


def is_locked(recipient: Recipient | EmailRecipient) -> bool:
    return isinstance(recipient, Recipient) and recipient.locked


def _same_email(a: str | None, b: str | None) -> bool:
    return bool(a) and bool(b) and a.strip().lower() == b.strip().lower()
