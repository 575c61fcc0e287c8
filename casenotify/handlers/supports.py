"""Support status change notifications to the innovation's innovators."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict

from casenotify.core.translations import transform_into_bullets, translate_lower
from casenotify.handlers.base import HandlerContext, HandlerSpec
from casenotify.models.enums import (
    NotificationCategory,
    NotifierType,
    ServiceRole,
    SupportStatus,
)
from casenotify.models.envelopes import InAppContext
from casenotify.models.recipients import InnovationInfo, Recipient

ST01_ENGAGING = "ST01_SUPPORT_STATUS_TO_ENGAGING"
ST02_OTHER = "ST02_SUPPORT_STATUS_TO_OTHER"
ST03_WAITING = "ST03_SUPPORT_STATUS_TO_WAITING"
ST09_CLOSED = "ST09_SUPPORT_STATUS_TO_CLOSED"


class SupportRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    status: SupportStatus
    message: str = ""
    new_assigned_accessor_role_ids: list[str] = []


class SupportStatusUpdatePayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    innovation_id: str
    thread_id: str
    support: SupportRef


def _accessor_names(ctx: HandlerContext, payload: SupportStatusUpdatePayload) -> list[str]:
    accessors = ctx.recipients(payload.support.new_assigned_accessor_role_ids)
    identities = ctx.directory.resolve_identities([a.identity_id for a in accessors])
    return [identities[a.identity_id].display_name for a in accessors if a.identity_id in identities]


def _context(template_id: str, payload: SupportStatusUpdatePayload) -> InAppContext:
    return InAppContext(type=NotificationCategory.SUPPORT, detail=template_id, id=payload.support.id)


def _engaging(
    ctx: HandlerContext,
    payload: SupportStatusUpdatePayload,
    innovation: InnovationInfo,
    recipients: list[Recipient],
) -> None:
    notification_id = str(uuid.uuid4())
    unit_name = ctx.request_unit_name()
    ctx.dispatch.notify(
        ST01_ENGAGING,
        recipients,
        email={
            "category": NotificationCategory.SUPPORT,
            "notification_id": notification_id,
            "params": {
                "accessors_name": transform_into_bullets(_accessor_names(ctx, payload)),
                "innovation_name": innovation.name,
                "message": payload.support.message,
                "unit_name": unit_name,
                "message_url": ctx.urls.thread(
                    ServiceRole.INNOVATOR, innovation.id, payload.thread_id, notification_id
                ),
            },
        },
        in_app={
            "context": _context(ST01_ENGAGING, payload),
            "innovation_id": innovation.id,
            "notification_id": notification_id,
            "params": {
                "innovationName": innovation.name,
                "threadId": payload.thread_id,
                "unitName": unit_name,
            },
        },
    )


def _status_changed(
    template_id: str,
    ctx: HandlerContext,
    payload: SupportStatusUpdatePayload,
    innovation: InnovationInfo,
    recipients: list[Recipient],
) -> None:
    notification_id = str(uuid.uuid4())
    unit_name = ctx.request_unit_name()
    unit_id = ctx.request_user.organisation_unit.id if ctx.request_user.organisation_unit else ""
    status = translate_lower(f"SUPPORT_STATUS.{payload.support.status.value}")

    email_params = {
        "innovation_name": innovation.name,
        "unit_name": unit_name,
        "message": payload.support.message,
        "status": status,
        "support_summary_url": ctx.urls.support_summary(
            ServiceRole.INNOVATOR, innovation.id, notification_id, unit_id or None
        ),
    }
    if template_id == ST03_WAITING:
        email_params["accessors_name"] = transform_into_bullets(_accessor_names(ctx, payload))

    ctx.dispatch.notify(
        template_id,
        recipients,
        email={
            "category": NotificationCategory.SUPPORT,
            "notification_id": notification_id,
            "params": email_params,
        },
        in_app={
            "context": _context(template_id, payload),
            "innovation_id": innovation.id,
            "notification_id": notification_id,
            "params": {
                "innovationName": innovation.name,
                "status": status,
                "unitId": unit_id,
                "unitName": unit_name,
            },
        },
    )


def _closed(
    ctx: HandlerContext,
    payload: SupportStatusUpdatePayload,
    innovation: InnovationInfo,
    recipients: list[Recipient],
) -> None:
    notification_id = str(uuid.uuid4())
    unit_name = ctx.request_unit_name()
    unit_id = ctx.request_user.organisation_unit.id if ctx.request_user.organisation_unit else ""
    ctx.dispatch.notify(
        ST09_CLOSED,
        recipients,
        email={
            "category": NotificationCategory.SUPPORT,
            "notification_id": notification_id,
            "params": {
                "innovation_name": innovation.name,
                "message": payload.support.message,
                "unit_name": unit_name,
                "start_survey_page": ctx.urls.surveys_initial_page(
                    ServiceRole.INNOVATOR, innovation.id, notification_id
                ),
            },
        },
        in_app={
            "context": _context(ST09_CLOSED, payload),
            "innovation_id": innovation.id,
            "notification_id": notification_id,
            "params": {
                "innovationName": innovation.name,
                "unitId": unit_id,
                "unitName": unit_name,
            },
        },
    )


def compute(ctx: HandlerContext, payload: SupportStatusUpdatePayload) -> None:
    innovation = ctx.directory.innovation_info(payload.innovation_id)
    if innovation is None:
        return
    recipients = ctx.innovators(innovation)

    status = payload.support.status
    if status == SupportStatus.ENGAGING:
        _engaging(ctx, payload, innovation, recipients)
    elif status == SupportStatus.WAITING:
        _status_changed(ST03_WAITING, ctx, payload, innovation, recipients)
    elif status == SupportStatus.UNSUITABLE:
        _status_changed(ST02_OTHER, ctx, payload, innovation, recipients)
    elif status == SupportStatus.CLOSED:
        _closed(ctx, payload, innovation, recipients)


SPEC = HandlerSpec(
    notifier_type=NotifierType.SUPPORT_STATUS_UPDATE,
    payload_model=SupportStatusUpdatePayload,
    compute=compute,
)
