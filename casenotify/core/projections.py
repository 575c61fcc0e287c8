"""Per-event-type param projections for notify-me notifications.

Each runtime event type has one ``EventProjection`` record holding two pure
functions: the in-app param projection and the email param projection.
The records live in ``PROJECTIONS``, keyed by event type.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict

from casenotify.config import NotifyConfig
from casenotify.core.translations import request_unit_name, translate_lower
from casenotify.core.urls import UrlBuilder
from casenotify.models.enums import NotifyMeEventType, SubscriptionType
from casenotify.models.recipients import InnovationInfo, Recipient
from casenotify.models.subscriptions import NotifyMeEvent, Subscription

SUGGESTED_SUPPORT_UPDATED = "SUGGESTED_SUPPORT_UPDATED"


class ProjectionContext(BaseModel):
    """Everything a projection may read for one matched subscription."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    event: NotifyMeEvent
    subscription: Subscription
    innovation: InnovationInfo
    recipient: Recipient
    notification_id: str
    urls: UrlBuilder
    settings: NotifyConfig

    @property
    def organisation(self) -> str:
        return request_unit_name(self.event.request_user)

    @property
    def request_unit_id(self) -> str | None:
        unit = self.event.request_user.organisation_unit
        return unit.id if unit is not None else None

    def param(self, name: str, default: Any = None) -> Any:
        return self.event.params.get(name, default)


Projection = Callable[[ProjectionContext], dict[str, Any]]


class EventProjection(BaseModel):
    model_config = ConfigDict(frozen=True)

    event_type: NotifyMeEventType
    in_app: Projection
    email: Projection


class UnsupportedEventError(LookupError):
    """No projection is registered for a notify-me event type."""


def _support_status(ctx: ProjectionContext) -> str:
    return translate_lower(f"SUPPORT_STATUS.{ctx.param('status')}")


def _section_label(ctx: ProjectionContext) -> str:
    return translate_lower(f"SECTION.{ctx.param('sections')}")


def _support_summary_url(ctx: ProjectionContext) -> str:
    return ctx.urls.support_summary(
        ctx.recipient.role,
        ctx.event.innovation_id,
        ctx.notification_id,
        ctx.request_unit_id,
    )


def _reminder_reason(ctx: ProjectionContext, default: str) -> str:
    config = ctx.subscription.config
    if config.subscription_type == SubscriptionType.SCHEDULED and config.custom_message:
        return config.custom_message
    return default


# ---------------------------------------------------------------------------
# SUPPORT_UPDATED
# ---------------------------------------------------------------------------


def _support_updated_in_app(ctx: ProjectionContext) -> dict[str, Any]:
    return {
        "innovation": ctx.innovation.name,
        "event": ctx.event.type.value,
        "organisation": ctx.organisation,
        "supportStatus": _support_status(ctx),
        "unitId": ctx.param("units"),
    }


def _support_updated_email(ctx: ProjectionContext) -> dict[str, Any]:
    params = {
        "innovation": ctx.innovation.name,
        "organisation": ctx.organisation,
        "supportStatus": _support_status(ctx),
        "supportSummaryUrl": _support_summary_url(ctx),
    }
    if ctx.subscription.config.notification_type == SUGGESTED_SUPPORT_UPDATED:
        params["message"] = ctx.param("message")
    return params


# ---------------------------------------------------------------------------
# PROGRESS_UPDATE_CREATED
# ---------------------------------------------------------------------------


def _progress_update_in_app(ctx: ProjectionContext) -> dict[str, Any]:
    return {
        "innovation": ctx.innovation.name,
        "organisation": ctx.organisation,
        "event": ctx.event.type.value,
        "unitId": ctx.param("units"),
    }


def _progress_update_email(ctx: ProjectionContext) -> dict[str, Any]:
    return {
        "innovation": ctx.innovation.name,
        "organisation": ctx.organisation,
        "supportSummaryUrl": _support_summary_url(ctx),
    }


# ---------------------------------------------------------------------------
# INNOVATION_RECORD_UPDATED
# ---------------------------------------------------------------------------


def _record_updated_in_app(ctx: ProjectionContext) -> dict[str, Any]:
    return {
        "innovation": ctx.innovation.name,
        "section": ctx.param("sections"),
        "sectionLabel": _section_label(ctx),
        "event": ctx.event.type.value,
    }


def _record_updated_email(ctx: ProjectionContext) -> dict[str, Any]:
    return {
        "innovation": ctx.innovation.name,
        "section": _section_label(ctx),
        "sectionUrl": ctx.urls.innovation_record_section(
            ctx.recipient.role,
            ctx.event.innovation_id,
            str(ctx.param("sections")),
            ctx.notification_id,
        ),
    }


# ---------------------------------------------------------------------------
# DOCUMENT_UPLOADED
# ---------------------------------------------------------------------------


def _document_uploaded_in_app(ctx: ProjectionContext) -> dict[str, Any]:
    return {
        "innovationName": ctx.innovation.name,
        "documentName": ctx.param("documentName"),
        "event": ctx.event.type.value,
    }


def _document_uploaded_email(ctx: ProjectionContext) -> dict[str, Any]:
    return {
        "innovation_name": ctx.innovation.name,
        "document_name": ctx.param("documentName"),
        "documents_url": ctx.urls.documents(
            ctx.recipient.role, ctx.innovation.id, ctx.notification_id
        ),
    }


# ---------------------------------------------------------------------------
# REMINDER
# ---------------------------------------------------------------------------


def _reminder_in_app(ctx: ProjectionContext) -> dict[str, Any]:
    return {
        "event": ctx.event.type.value,
        "innovation": ctx.innovation.name,
        "reason": _reminder_reason(ctx, ctx.settings.default_reminder_in_app_message),
    }


def _reminder_email(ctx: ProjectionContext) -> dict[str, Any]:
    return {
        "innovation": ctx.innovation.name,
        "reason": _reminder_reason(ctx, ctx.settings.default_reminder_email_message),
        "innovation_overview_url": ctx.urls.innovation_overview(
            ctx.recipient.role, ctx.innovation.id, ctx.notification_id
        ),
    }


PROJECTIONS: dict[NotifyMeEventType, EventProjection] = {
    p.event_type: p
    for p in (
        EventProjection(
            event_type=NotifyMeEventType.SUPPORT_UPDATED,
            in_app=_support_updated_in_app,
            email=_support_updated_email,
        ),
        EventProjection(
            event_type=NotifyMeEventType.PROGRESS_UPDATE_CREATED,
            in_app=_progress_update_in_app,
            email=_progress_update_email,
        ),
        EventProjection(
            event_type=NotifyMeEventType.INNOVATION_RECORD_UPDATED,
            in_app=_record_updated_in_app,
            email=_record_updated_email,
        ),
        EventProjection(
            event_type=NotifyMeEventType.DOCUMENT_UPLOADED,
            in_app=_document_uploaded_in_app,
            email=_document_uploaded_email,
        ),
        EventProjection(
            event_type=NotifyMeEventType.REMINDER,
            in_app=_reminder_in_app,
            email=_reminder_email,
        ),
    )
}


def get_projection(event_type: NotifyMeEventType) -> EventProjection:
    try:
        return PROJECTIONS[NotifyMeEventType(event_type)]
    except KeyError:
        raise UnsupportedEventError(f"No notify-me projection for {event_type}") from None
