"""Outbox sinks: buffer envelopes for a transport layer to pick up.

These sinks do NOT send anything. They keep accepted envelopes in a
buffer for later retrieval by a mail sender, an in-app store writer or a
test harness.
"""

from __future__ import annotations

import logging

from casenotify.models.envelopes import ChannelKind, Envelope

logger = logging.getLogger(__name__)


class OutboxSink:
    """Buffers envelopes of one channel.

    Parameters
    ----------
    channel:
        The channel this outbox serves.
    name:
        Sink name. Defaults to ``"<channel>_outbox"``.
    """

    def __init__(self, channel: ChannelKind, name: str | None = None) -> None:
        self._channel = ChannelKind(channel)
        self._name = name or f"{self._channel.value}_outbox"
        self._pending: list[Envelope] = []

    @property
    def sink_name(self) -> str:
        return self._name

    @property
    def channel(self) -> ChannelKind:
        return self._channel

    def accept(self, envelope: Envelope) -> None:
        self._pending.append(envelope)
        logger.debug("%s: queued %s", self._name, envelope.template_id)

    def flush(self) -> list[Envelope]:
        """Return and clear all pending envelopes."""
        pending = list(self._pending)
        self._pending.clear()
        return pending

    @property
    def pending_count(self) -> int:
        return len(self._pending)


class OutboxEmailSink(OutboxSink):
    def __init__(self, name: str = "email_outbox") -> None:
        super().__init__(ChannelKind.EMAIL, name)


class OutboxInAppSink(OutboxSink):
    def __init__(self, name: str = "in_app_outbox") -> None:
        super().__init__(ChannelKind.IN_APP, name)
