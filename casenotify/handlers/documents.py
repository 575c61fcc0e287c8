"""Document upload notifications."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict

from casenotify.handlers.base import HandlerContext, HandlerSpec
from casenotify.models.enums import NotificationCategory, NotifierType, ServiceRole
from casenotify.models.envelopes import EmailOptions, InAppContext

DC01_TO_INNOVATOR = "DC01_UPLOADED_DOCUMENT_TO_INNOVATOR"
DC02_RECEIPT = "DC02_UPLOADED_DOCUMENT_RECEIPT"


class DocumentFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""


class DocumentUploadedPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    innovation_id: str
    file: DocumentFile


def compute(ctx: HandlerContext, payload: DocumentUploadedPayload) -> None:
    innovation = ctx.directory.innovation_info(payload.innovation_id)
    if innovation is None:
        return

    unit_name = ctx.request_unit_name()
    notification_id = str(uuid.uuid4())

    # Owner and collaborators; an innovation without an owner just has fewer.
    innovators = ctx.innovators(innovation)
    ctx.dispatch.notify(
        DC01_TO_INNOVATOR,
        innovators,
        email={
            "category": NotificationCategory.DOCUMENT,
            "notification_id": notification_id,
            "params": {
                "accessor_name": ctx.request_user_name(),
                "unit_name": unit_name,
                "document_url": ctx.urls.documents(
                    ServiceRole.INNOVATOR, innovation.id, notification_id
                ),
            },
        },
        in_app={
            "context": InAppContext(
                type=NotificationCategory.DOCUMENT, detail=DC01_TO_INNOVATOR, id=payload.file.id
            ),
            "innovation_id": innovation.id,
            "notification_id": notification_id,
            "params": {"fileId": payload.file.id, "unitName": unit_name},
        },
    )

    uploader = ctx.recipients([ctx.request_user.role_id])
    ctx.dispatch.add_emails(
        DC02_RECEIPT,
        uploader,
        category=None,
        params={"innovation_name": innovation.name, "document_name": payload.file.name},
        options=EmailOptions(include_self=True),
    )


SPEC = HandlerSpec(
    notifier_type=NotifierType.DOCUMENT_UPLOADED,
    payload_model=DocumentUploadedPayload,
    compute=compute,
)
