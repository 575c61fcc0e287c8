"""Account administration notifications.

These must reach the affected user whatever the state of their account,
so they opt into locked recipients and carry no preference category.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from casenotify.handlers.base import HandlerContext, HandlerSpec
from casenotify.models.enums import NotifierType
from casenotify.models.envelopes import EmailOptions
from casenotify.models.recipients import EmailRecipient

AP01_USER_LOCKED = "AP01_USER_LOCKED_TO_LOCKED_USER"
AP10_EMAIL_UPDATED = "AP10_USER_EMAIL_ADDRESS_UPDATED"


class UserEmailAddressUpdatedPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    old_email: str
    new_email: str
    display_name: str | None = None


class LockUserPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    role_id: str


def compute_email_updated(ctx: HandlerContext, payload: UserEmailAddressUpdatedPayload) -> None:
    # Both addresses are told; the user may be changing their own address.
    ctx.dispatch.add_emails(
        AP10_EMAIL_UPDATED,
        [
            EmailRecipient(email=payload.old_email, display_name=payload.display_name),
            EmailRecipient(email=payload.new_email, display_name=payload.display_name),
        ],
        category=None,
        params={"new_email": payload.new_email},
        options=EmailOptions(include_self=True, include_locked=True),
    )


def compute_lock_user(ctx: HandlerContext, payload: LockUserPayload) -> None:
    ctx.dispatch.add_emails(
        AP01_USER_LOCKED,
        ctx.recipients([payload.role_id]),
        category=None,
        options=EmailOptions(include_locked=True),
    )


EMAIL_UPDATED_SPEC = HandlerSpec(
    notifier_type=NotifierType.USER_EMAIL_ADDRESS_UPDATED,
    payload_model=UserEmailAddressUpdatedPayload,
    compute=compute_email_updated,
)

LOCK_USER_SPEC = HandlerSpec(
    notifier_type=NotifierType.LOCK_USER,
    payload_model=LockUserPayload,
    compute=compute_lock_user,
)
