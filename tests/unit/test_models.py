"""Unit tests for casenotify models: envelopes, recipients, subscriptions."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from casenotify.models import (
    ChannelKind,
    EmailEnvelope,
    EmailRecipient,
    InAppContext,
    InAppEnvelope,
    NotificationCategory,
    NotifyMeEvent,
    NotifyMeEventType,
    Recipient,
    ServiceRole,
    Subscription,
    SubscriptionConfig,
    SubscriptionType,
)


class TestEnvelopes:
    def test_email_channel_and_resolution(self):
        envelope = EmailEnvelope(
            template_id="X", category=None, recipient=EmailRecipient(email="a@example.test")
        )
        assert envelope.channel == ChannelKind.EMAIL
        assert envelope.is_resolved

    def test_email_with_directory_recipient_is_unresolved(self):
        envelope = EmailEnvelope(
            template_id="X",
            category=NotificationCategory.SUPPORT,
            recipient=Recipient(role_id="r", identity_id="i", role=ServiceRole.INNOVATOR),
        )
        assert not envelope.is_resolved

    def test_in_app_category_is_context_type(self):
        envelope = InAppEnvelope(
            template_id="X",
            context=InAppContext(type=NotificationCategory.DOCUMENT, detail="X", id="f-1"),
            innovation_id="inno-1",
            user_role_ids=["r"],
        )
        assert envelope.category == NotificationCategory.DOCUMENT
        assert envelope.channel == ChannelKind.IN_APP

    def test_envelopes_are_frozen(self):
        envelope = EmailEnvelope(
            template_id="X", category=None, recipient=EmailRecipient(email="a@example.test")
        )
        with pytest.raises(ValidationError):
            envelope.template_id = "Y"


class TestSubscriptions:
    def test_defaults(self):
        sub = Subscription(
            role_id="r",
            innovation_id="inno-1",
            config=SubscriptionConfig(event_type=NotifyMeEventType.SUPPORT_UPDATED),
        )
        assert sub.id
        assert sub.subscription_type == SubscriptionType.INSTANTLY
        assert sub.notification_detail == "SUPPORT_UPDATED"

    def test_ids_are_unique(self):
        config = SubscriptionConfig(event_type=NotifyMeEventType.SUPPORT_UPDATED)
        a = Subscription(role_id="r", innovation_id="i", config=config)
        b = Subscription(role_id="r", innovation_id="i", config=config)
        assert a.id != b.id

    def test_notification_type_overrides_detail(self):
        sub = Subscription(
            role_id="r",
            innovation_id="inno-1",
            config=SubscriptionConfig(
                event_type=NotifyMeEventType.SUPPORT_UPDATED,
                notification_type="SUGGESTED_SUPPORT_UPDATED",
            ),
        )
        assert sub.notification_detail == "SUGGESTED_SUPPORT_UPDATED"

    def test_wire_values(self):
        config = SubscriptionConfig.model_validate(
            {"event_type": "REMINDER", "subscription_type": "SCHEDULED"}
        )
        assert config.event_type == NotifyMeEventType.REMINDER
        assert config.subscription_type == SubscriptionType.SCHEDULED

    def test_unknown_event_type_rejected(self):
        with pytest.raises(ValidationError):
            SubscriptionConfig.model_validate({"event_type": "NOPE"})

    def test_event_subscription_id(self, request_user):
        event = NotifyMeEvent(
            type=NotifyMeEventType.REMINDER,
            innovation_id="inno-1",
            request_user=request_user,
            params={"subscriptionId": 42},
        )
        assert event.subscription_id == "42"

    def test_event_without_subscription_id(self, make_event):
        assert make_event().subscription_id is None
