"""Delivery routing: hands resolved envelopes to the delivery collaborators.

Sinks are pluggable targets per channel: in-memory outboxes, a local JSON
file outbox, a preference gate in front of an email sink, or any custom
sink implementing the BaseSink protocol.
"""
