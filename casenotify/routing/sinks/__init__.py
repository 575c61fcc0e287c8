"""Sink protocol for delivery collaborators.

All sinks implement the ``BaseSink`` protocol: a ``sink_name`` property,
the ``channel`` they serve, and an ``accept(envelope)`` method. The
delivery dispatcher calls ``accept`` on every registered sink of the
envelope's channel.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from casenotify.models.envelopes import ChannelKind, Envelope


@runtime_checkable
class BaseSink(Protocol):
    """Protocol that every delivery sink must implement.

    Sinks own transport, storage and retry. Once ``accept`` returns, the
    notification layer has no further responsibility for the envelope.

    Attributes
    ----------
    sink_name : str
        A unique human-readable identifier for this sink instance
        (e.g. ``"email_outbox"``, ``"local_file"``).
    channel : ChannelKind
        The channel whose envelopes this sink receives.
    """

    @property
    def sink_name(self) -> str:
        ...

    @property
    def channel(self) -> ChannelKind:
        ...

    def accept(self, envelope: Envelope) -> None:
        """Accept and process an envelope.

        Critical failures may raise; the dispatcher logs them and continues
        with the next sink.
        """
        ...
