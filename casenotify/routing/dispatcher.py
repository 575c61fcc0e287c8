"""DeliveryDispatcher: hands envelopes to the delivery sinks of their channel.

Every envelope is fanned out to every sink registered for its channel.
Sink failures are logged but do not prevent delivery to remaining sinks;
retry is the sinks' business.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from casenotify.models.envelopes import EmailEnvelope, Envelope, InAppEnvelope

if TYPE_CHECKING:
    from casenotify.routing.sinks import BaseSink

logger = logging.getLogger(__name__)


class DeliveryError(RuntimeError):
    """Raised when every sink of a channel failed for an envelope."""


class DeliveryDispatcher:
    """Routes envelopes to the sinks registered for their channel.

    Usage
    -----
    >>> dispatcher = DeliveryDispatcher()
    >>> dispatcher.register_sink(OutboxEmailSink())
    >>> dispatcher.register_sink(OutboxInAppSink())
    >>> dispatcher.deliver_all(result.emails, result.in_apps)
    """

    def __init__(self) -> None:
        self._sinks: list[BaseSink] = []

    # ------------------------------------------------------------------
    # Sink management
    # ------------------------------------------------------------------

    def register_sink(self, sink: BaseSink) -> None:
        """Register a sink. Duplicate registration of an instance is ignored."""
        if sink not in self._sinks:
            self._sinks.append(sink)
            logger.info("Registered %s sink: %s", sink.channel.value, sink.sink_name)

    def unregister_sink(self, sink: BaseSink) -> None:
        try:
            self._sinks.remove(sink)
            logger.info("Unregistered sink: %s", sink.sink_name)
        except ValueError:
            pass

    @property
    def registered_sinks(self) -> list[BaseSink]:
        return list(self._sinks)

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def deliver(self, envelope: Envelope) -> list[str]:
        """Deliver an envelope to every sink of its channel.

        Returns the names of the sinks that accepted it.

        Raises
        ------
        DeliveryError
            If *all* sinks of the channel fail. Individual failures are
            tolerated.
        """
        sinks = [s for s in self._sinks if s.channel == envelope.channel]
        if not sinks:
            logger.warning(
                "No %s sinks registered, %s dropped",
                envelope.channel.value,
                envelope.template_id,
            )
            return []

        succeeded: list[str] = []
        errors: list[tuple[str, Exception]] = []

        for sink in sinks:
            try:
                sink.accept(envelope)
                succeeded.append(sink.sink_name)
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "Sink %s failed for %s: %s",
                    sink.sink_name,
                    envelope.template_id,
                    exc,
                )
                errors.append((sink.sink_name, exc))

        if errors and not succeeded:
            raise DeliveryError(
                f"All {len(errors)} {envelope.channel.value} sinks failed for "
                f"{envelope.template_id}: "
                + "; ".join(f"{name}: {exc}" for name, exc in errors)
            )

        if errors:
            logger.warning(
                "%s: %d/%d sinks succeeded, %d failed",
                envelope.template_id,
                len(succeeded),
                len(sinks),
                len(errors),
            )

        return succeeded

    def deliver_all(
        self,
        emails: Iterable[EmailEnvelope] = (),
        in_apps: Iterable[InAppEnvelope] = (),
    ) -> int:
        """Deliver emails, then in-app notifications. Returns the count delivered."""
        delivered = 0
        for envelope in [*emails, *in_apps]:
            if self.deliver(envelope):
                delivered += 1
        return delivered
