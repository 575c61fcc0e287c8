"""SQLite-backed subscription store with scheduled reminders.

Design:
- One row per subscription; the config is stored as JSON.
- ``transaction()`` opens a ``BEGIN IMMEDIATE`` unit of work so that the
  subscription read and the ONCE deletion of a matching pass commit or roll
  back together, and a concurrent pass cannot match the same ONCE
  subscription twice.
- Scheduled notifications reference their subscription; clearing them also
  deletes SCHEDULED subscriptions.
- WAL journal mode for concurrent readers.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from collections.abc import Iterable, Iterator
from contextlib import closing, contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from casenotify.models.enums import NotifyMeEventType, SubscriptionType
from casenotify.models.subscriptions import (
    ScheduledNotification,
    Subscription,
    SubscriptionConfig,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

_CREATE_SUBSCRIPTIONS = """
CREATE TABLE IF NOT EXISTS notify_me_subscription (
    id                 TEXT PRIMARY KEY,
    role_id            TEXT NOT NULL,
    innovation_id      TEXT NOT NULL,
    event_type         TEXT NOT NULL,
    subscription_type  TEXT NOT NULL,
    config_json        TEXT NOT NULL,
    created_at         TEXT NOT NULL
);
"""

_CREATE_IDX_INNOVATION_EVENT = """
CREATE INDEX IF NOT EXISTS idx_innovation_event
    ON notify_me_subscription(innovation_id, event_type);
"""

_CREATE_SCHEDULE = """
CREATE TABLE IF NOT EXISTS notification_schedule (
    subscription_id  TEXT PRIMARY KEY
        REFERENCES notify_me_subscription(id) ON DELETE CASCADE,
    role_id          TEXT NOT NULL,
    send_date        TEXT NOT NULL,
    params_json      TEXT NOT NULL DEFAULT '{}'
);
"""


def _to_utc_text(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


class SqliteSubscriptionStore:
    """Notify-me subscriptions persisted in SQLite.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Created if it does not exist.
    """

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._local = threading.local()
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    def _init_schema(self) -> None:
        with closing(self._connect()) as conn:
            conn.execute(_CREATE_SUBSCRIPTIONS)
            conn.execute(_CREATE_IDX_INNOVATION_EVENT)
            conn.execute(_CREATE_SCHEDULE)
            conn.commit()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Yield the open transaction's connection, or a short-lived one."""
        tx_conn: sqlite3.Connection | None = getattr(self._local, "conn", None)
        if tx_conn is not None:
            yield tx_conn
            return
        with closing(self._connect()) as conn:
            yield conn
            conn.commit()

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Run the enclosed reads and writes as one immediate transaction.

        Nested calls join the outer transaction.
        """
        if getattr(self._local, "conn", None) is not None:
            yield
            return

        conn = self._connect()
        conn.isolation_level = None
        conn.execute("BEGIN IMMEDIATE")
        self._local.conn = conn
        try:
            yield
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        else:
            conn.execute("COMMIT")
        finally:
            self._local.conn = None
            conn.close()

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def add_subscription(self, subscription: Subscription) -> Subscription:
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO notify_me_subscription
                    (id, role_id, innovation_id, event_type, subscription_type,
                     config_json, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    subscription.id,
                    subscription.role_id,
                    subscription.innovation_id,
                    subscription.config.event_type.value,
                    subscription.config.subscription_type.value,
                    subscription.config.model_dump_json(),
                    _to_utc_text(datetime.now(timezone.utc)),
                ),
            )
        logger.debug("Stored subscription %s for role %s", subscription.id, subscription.role_id)
        return subscription

    def get_innovation_event_subscriptions(
        self, innovation_id: str, event_type: NotifyMeEventType
    ) -> list[Subscription]:
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT id, role_id, innovation_id, config_json FROM notify_me_subscription "
                "WHERE innovation_id = ? AND event_type = ? ORDER BY created_at, id",
                (innovation_id, NotifyMeEventType(event_type).value),
            ).fetchall()
        return [self._row_to_subscription(row) for row in rows]

    def get_subscription(self, subscription_id: str) -> Subscription | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT id, role_id, innovation_id, config_json FROM notify_me_subscription "
                "WHERE id = ?",
                (subscription_id,),
            ).fetchone()
        return self._row_to_subscription(row) if row else None

    def list_subscriptions(self, innovation_id: str | None = None) -> list[Subscription]:
        query = "SELECT id, role_id, innovation_id, config_json FROM notify_me_subscription"
        args: tuple[Any, ...] = ()
        if innovation_id is not None:
            query += " WHERE innovation_id = ?"
            args = (innovation_id,)
        with self._connection() as conn:
            rows = conn.execute(query + " ORDER BY created_at, id", args).fetchall()
        return [self._row_to_subscription(row) for row in rows]

    def delete_subscription(self, subscription_id: str) -> None:
        with self._connection() as conn:
            conn.execute("DELETE FROM notify_me_subscription WHERE id = ?", (subscription_id,))
        logger.debug("Deleted subscription %s", subscription_id)

    @staticmethod
    def _row_to_subscription(row: tuple[Any, ...]) -> Subscription:
        sub_id, role_id, innovation_id, config_json = row
        return Subscription(
            id=sub_id,
            role_id=role_id,
            innovation_id=innovation_id,
            config=SubscriptionConfig.model_validate_json(config_json),
        )

    # ------------------------------------------------------------------
    # Scheduled notifications
    # ------------------------------------------------------------------

    def schedule_notification(
        self,
        subscription: Subscription,
        send_date: datetime | None = None,
        params: dict[str, Any] | None = None,
    ) -> ScheduledNotification:
        """Schedule a reminder for a subscription.

        The send date defaults to the subscription's configured ``date`` for
        SCHEDULED subscriptions and to now otherwise. Re-scheduling replaces
        any pending reminder for the same subscription.
        """
        if send_date is None:
            if (
                subscription.config.subscription_type == SubscriptionType.SCHEDULED
                and subscription.config.date is not None
            ):
                send_date = subscription.config.date
            else:
                send_date = datetime.now(timezone.utc)

        scheduled = ScheduledNotification(
            subscription_id=subscription.id,
            role_id=subscription.role_id,
            send_date=send_date,
            params=params or {},
        )
        with self._connection() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO notification_schedule "
                "(subscription_id, role_id, send_date, params_json) VALUES (?, ?, ?, ?)",
                (
                    scheduled.subscription_id,
                    scheduled.role_id,
                    _to_utc_text(scheduled.send_date),
                    json.dumps(scheduled.params),
                ),
            )
        return scheduled

    def get_scheduled_notifications(
        self, now: datetime | None = None, grace_hours: int = 2
    ) -> list[ScheduledNotification]:
        """Return reminders due between ``now - grace_hours`` and ``now``.

        The grace window keeps a reminder deliverable if a previous sweep
        failed.
        """
        now = now or datetime.now(timezone.utc)
        since = now - timedelta(hours=grace_hours)
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT subscription_id, role_id, send_date, params_json "
                "FROM notification_schedule WHERE send_date BETWEEN ? AND ? "
                "ORDER BY send_date",
                (_to_utc_text(since), _to_utc_text(now)),
            ).fetchall()
        return [
            ScheduledNotification(
                subscription_id=sub_id,
                role_id=role_id,
                send_date=datetime.fromisoformat(send_date),
                params=json.loads(params_json),
            )
            for sub_id, role_id, send_date, params_json in rows
        ]

    def delete_scheduled_notifications(self, subscription_ids: Iterable[str]) -> None:
        """Clear reminders and delete the SCHEDULED subscriptions behind them."""
        ids = list(subscription_ids)
        if not ids:
            return
        marks = ",".join("?" for _ in ids)
        with self._connection() as conn:
            conn.execute(
                f"DELETE FROM notification_schedule WHERE subscription_id IN ({marks})",
                ids,
            )
            conn.execute(
                f"DELETE FROM notify_me_subscription WHERE id IN ({marks}) "
                "AND subscription_type = ?",
                (*ids, SubscriptionType.SCHEDULED.value),
            )
        logger.info("Cleared %d scheduled notification(s)", len(ids))
