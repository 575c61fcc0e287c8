"""Preference gate: applies category email preferences before delivery.

Wraps an email sink. An email passes through when it has no category,
when its options say preferences were already resolved or must be
ignored, when its recipient has no role id to look preferences up by,
or when the role's preference for the category is not an explicit NO.
"""

from __future__ import annotations

import logging

from casenotify.core.preferences import should_send_email
from casenotify.directory import RecipientDirectory
from casenotify.models.envelopes import ChannelKind, EmailEnvelope, Envelope
from casenotify.models.recipients import EmailRecipient
from casenotify.routing.sinks import BaseSink

logger = logging.getLogger(__name__)


class PreferenceGateSink:
    """Email sink decorator that drops emails a recipient opted out of."""

    def __init__(self, inner: BaseSink, directory: RecipientDirectory) -> None:
        if inner.channel != ChannelKind.EMAIL:
            raise ValueError(f"PreferenceGateSink wraps email sinks, got {inner.channel.value}")
        self._inner = inner
        self._directory = directory
        self.suppressed: int = 0

    @property
    def sink_name(self) -> str:
        return f"preference_gate({self._inner.sink_name})"

    @property
    def channel(self) -> ChannelKind:
        return ChannelKind.EMAIL

    def accept(self, envelope: Envelope) -> None:
        if isinstance(envelope, EmailEnvelope) and not self._allowed(envelope):
            self.suppressed += 1
            logger.debug("%s: suppressed by %s preference", envelope.template_id, envelope.category)
            return
        self._inner.accept(envelope)

    def _allowed(self, envelope: EmailEnvelope) -> bool:
        if envelope.category is None or envelope.options.ignore_preferences:
            return True
        recipient = envelope.recipient
        role_id = recipient.role_id
        if not isinstance(recipient, EmailRecipient) or role_id is None:
            return True
        preferences = self._directory.get_email_preferences([role_id])
        return should_send_email(envelope.category, preferences.get(role_id))
