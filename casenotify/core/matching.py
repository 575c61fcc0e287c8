"""NotifyMeEngine: matches runtime events against notify-me subscriptions.

Subscription lifecycle::

    CREATED --(no match)--> CREATED
    CREATED --(match, INSTANTLY | SCHEDULED)--> fires, stays CREATED
    CREATED --(match, ONCE)--> fires --> DELETED (terminal)

One ``execute`` call is one unit of work: one event in, zero or more
envelopes and zero or more ONCE deletions out. The ONCE deletion must share
a transaction with the subscription read; callers run ``execute`` inside
``store.transaction()`` (see ``casenotify.listeners``).
"""

from __future__ import annotations

import logging
import uuid

from pydantic import BaseModel, ConfigDict

from casenotify.config import NotifyConfig
from casenotify.core.preconditions import validate_preconditions
from casenotify.core.preferences import should_send_email
from casenotify.core.projections import ProjectionContext, get_projection
from casenotify.core.urls import UrlBuilder
from casenotify.directory import RecipientDirectory, SubscriptionStore
from casenotify.models.enums import NotificationCategory, SubscriptionType
from casenotify.models.envelopes import (
    EmailEnvelope,
    EmailOptions,
    InAppContext,
    InAppEnvelope,
)
from casenotify.models.recipients import EmailRecipient
from casenotify.models.subscriptions import NotifyMeEvent, Subscription

logger = logging.getLogger(__name__)


class NotifyMeResult(BaseModel):
    """Envelopes and deletions produced by one matching pass."""

    model_config = ConfigDict(frozen=True)

    emails: list[EmailEnvelope] = []
    in_apps: list[InAppEnvelope] = []
    deleted_subscription_ids: list[str] = []


class NotifyMeEngine:
    """Matches one event against the stored subscriptions of its innovation.

    Parameters
    ----------
    store:
        Subscription storage.
    directory:
        Recipient directory for owners, identities, preferences and
        innovation names.
    urls:
        Deep-link builder for email params.
    settings:
        Runtime configuration (default reminder texts).
    """

    def __init__(
        self,
        store: SubscriptionStore,
        directory: RecipientDirectory,
        urls: UrlBuilder | None = None,
        *,
        settings: NotifyConfig | None = None,
    ) -> None:
        self._store = store
        self._directory = directory
        self._settings = settings or NotifyConfig()
        self._urls = urls or UrlBuilder(self._settings.web_base_transactional_url)

    def validate_preconditions(self, subscription: Subscription, event: NotifyMeEvent) -> bool:
        return validate_preconditions(subscription, event)

    def execute(self, event: NotifyMeEvent) -> NotifyMeResult:
        """Fire every subscription ``event`` matches.

        Owners or identities that cannot be resolved are skipped without
        any envelope. Lookup and storage errors propagate to the caller.
        """
        subscriptions = self._store.get_innovation_event_subscriptions(
            event.innovation_id, event.type
        )
        if not subscriptions:
            return NotifyMeResult()

        matched = [s for s in subscriptions if validate_preconditions(s, event)]
        logger.debug(
            "Event %s on %s: %d/%d subscription(s) matched",
            event.type.value,
            event.innovation_id,
            len(matched),
            len(subscriptions),
        )
        if not matched:
            return NotifyMeResult()

        innovation = self._directory.innovation_info(event.innovation_id)
        if innovation is None:
            logger.debug("Innovation %s not found, nothing to notify", event.innovation_id)
            return NotifyMeResult()

        owners = list(dict.fromkeys(s.role_id for s in matched))
        recipients = {
            r.role_id: r for r in self._directory.resolve_by_role_ids(owners) if r.role_id
        }
        if not recipients:
            return NotifyMeResult()

        identities = self._directory.resolve_identities(
            list(dict.fromkeys(r.identity_id for r in recipients.values()))
        )
        preferences = self._directory.get_email_preferences(list(recipients))
        projection = get_projection(event.type)

        emails: list[EmailEnvelope] = []
        in_apps: list[InAppEnvelope] = []
        deleted: list[str] = []

        for subscription in matched:
            recipient = recipients.get(subscription.role_id)
            if recipient is None:
                continue
            identity = identities.get(recipient.identity_id)
            if identity is None:
                continue

            notification_id = str(uuid.uuid4())
            ctx = ProjectionContext(
                event=event,
                subscription=subscription,
                innovation=innovation,
                recipient=recipient,
                notification_id=notification_id,
                urls=self._urls,
                settings=self._settings,
            )
            detail = subscription.notification_detail

            in_apps.append(
                InAppEnvelope(
                    template_id=detail,
                    context=InAppContext(
                        type=NotificationCategory.NOTIFY_ME,
                        detail=detail,
                        id=subscription.id,
                    ),
                    innovation_id=event.innovation_id,
                    user_role_ids=[subscription.role_id],
                    params=projection.in_app(ctx),
                    notification_id=notification_id,
                )
            )

            if should_send_email(
                NotificationCategory.NOTIFY_ME, preferences.get(subscription.role_id)
            ):
                email_params = {
                    **projection.email(ctx),
                    "displayName": identity.display_name,
                    "unsubscribeUrl": self._urls.unsubscribe(),
                }
                emails.append(
                    EmailEnvelope(
                        template_id=detail,
                        category=NotificationCategory.NOTIFY_ME,
                        recipient=EmailRecipient(
                            email=identity.email,
                            display_name=identity.display_name,
                            role_id=subscription.role_id,
                        ),
                        params=email_params,
                        options=EmailOptions(ignore_preferences=True),
                        notification_id=notification_id,
                    )
                )
            else:
                logger.debug("Subscription %s: email suppressed by preference", subscription.id)

            if subscription.config.subscription_type == SubscriptionType.ONCE:
                self._store.delete_subscription(subscription.id)
                deleted.append(subscription.id)
                logger.info("Consumed ONCE subscription %s", subscription.id)

        return NotifyMeResult(emails=emails, in_apps=in_apps, deleted_subscription_ids=deleted)
