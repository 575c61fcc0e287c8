"""Local file sink: writes envelopes to local JSON files.

Layout: {base_path}/{channel}/{template_id}/{file_id}.json

``file_id`` is the envelope's notification id when it has one (suffixed
for multi-recipient emails), otherwise a fresh uuid.
"""

from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path

from casenotify.models.envelopes import ChannelKind, EmailEnvelope, Envelope

logger = logging.getLogger(__name__)


def canonical_json_bytes(obj: object) -> bytes:
    """Deterministic JSON: sorted keys, compact separators, UTF-8."""
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True).encode("utf-8")


class LocalFileSink:
    """Writes envelopes of one channel to local JSON files.

    Parameters
    ----------
    channel:
        The channel served by this sink.
    base_path:
        Root directory for outbox files. Defaults to ``.casenotify/outbox``.
    """

    def __init__(self, channel: ChannelKind, base_path: Path | str | None = None) -> None:
        self._channel = ChannelKind(channel)
        self._base = Path(base_path) if base_path else Path(".casenotify/outbox")
        self._base.mkdir(parents=True, exist_ok=True)

    @property
    def sink_name(self) -> str:
        return f"local_file_{self._channel.value}"

    @property
    def channel(self) -> ChannelKind:
        return self._channel

    def accept(self, envelope: Envelope) -> None:
        target_dir = self._base / self._channel.value / envelope.template_id
        target_dir.mkdir(parents=True, exist_ok=True)

        file_id = envelope.notification_id or str(uuid.uuid4())
        if isinstance(envelope, EmailEnvelope):
            file_id = f"{file_id}-{uuid.uuid4().hex[:8]}"

        target_file = target_dir / f"{file_id}.json"
        target_file.write_bytes(canonical_json_bytes(envelope.model_dump(mode="json")))
        logger.debug("LocalFileSink: wrote %s to %s", envelope.template_id, target_file)

    def list_envelopes(self, template_id: str | None = None) -> list[Path]:
        """List written envelope files, optionally for one template."""
        channel_dir = self._base / self._channel.value
        if template_id:
            channel_dir = channel_dir / template_id
        if not channel_dir.exists():
            return []
        return sorted(channel_dir.rglob("*.json"))

    def read_envelope(self, path: Path) -> dict:
        return json.loads(path.read_bytes())
