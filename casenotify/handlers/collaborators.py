"""Collaboration invitations.

Registered users get an email and an in-app notification; people without
an account yet are emailed at the invited address only, each with their
own invitation link.
"""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict

from casenotify.handlers.base import HandlerContext, HandlerSpec
from casenotify.models.enums import NotificationCategory, NotifierType
from casenotify.models.envelopes import InAppContext
from casenotify.models.recipients import EmailRecipient

MC01_EXISTING_USER = "MC01_COLLABORATOR_INVITE_EXISTING_USER"
MC02_NEW_USER = "MC02_COLLABORATOR_INVITE_NEW_USER"


class Invitation(BaseModel):
    model_config = ConfigDict(frozen=True)

    collaborator_id: str
    email: str
    role_id: str | None = None  # set when the invitee already has an account


class CollaboratorInvitePayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    innovation_id: str
    invitations: list[Invitation]


def compute(ctx: HandlerContext, payload: CollaboratorInvitePayload) -> None:
    innovation = ctx.directory.innovation_info(payload.innovation_id)
    if innovation is None:
        return
    innovator_name = ctx.request_user_name()

    for invitation in payload.invitations:
        if invitation.role_id is None:
            continue
        recipients = ctx.recipients([invitation.role_id])
        if not recipients:
            continue
        notification_id = str(uuid.uuid4())
        ctx.dispatch.notify(
            MC01_EXISTING_USER,
            recipients,
            email={
                "category": NotificationCategory.INNOVATION_MANAGEMENT,
                "notification_id": notification_id,
                "params": {
                    "innovation_name": innovation.name,
                    "innovator_name": innovator_name,
                    "invitation_url": ctx.urls.collaboration_invite(
                        innovation.id, invitation.collaborator_id
                    ),
                },
            },
            in_app={
                "context": InAppContext(
                    type=NotificationCategory.INNOVATION_MANAGEMENT,
                    detail=MC01_EXISTING_USER,
                    id=invitation.collaborator_id,
                ),
                "innovation_id": innovation.id,
                "notification_id": notification_id,
                "params": {
                    "innovationName": innovation.name,
                    "requestUserName": innovator_name,
                    "collaboratorId": invitation.collaborator_id,
                },
            },
        )

    new_users = [i for i in payload.invitations if i.role_id is None]
    ctx.dispatch.add_emails(
        MC02_NEW_USER,
        [EmailRecipient(email=i.email) for i in new_users],
        category=NotificationCategory.INNOVATION_MANAGEMENT,
        params=[
            {
                "innovation_name": innovation.name,
                "innovator_name": innovator_name,
                "create_account_url": ctx.urls.collaboration_invite(
                    innovation.id, i.collaborator_id
                ),
            }
            for i in new_users
        ],
    )


SPEC = HandlerSpec(
    notifier_type=NotifierType.COLLABORATOR_INVITE,
    payload_model=CollaboratorInvitePayload,
    compute=compute,
)
