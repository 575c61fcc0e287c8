"""``casenotify subscriptions`` and ``casenotify subscribe``: manage the store."""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError

from casenotify.cli.common import console, print_subscriptions, read_json
from casenotify.config import config
from casenotify.directory.sqlite_store import SqliteSubscriptionStore
from casenotify.models.enums import SubscriptionType
from casenotify.models.subscriptions import Subscription


def subscriptions_cmd(
    innovation_id: str = typer.Argument(None, help="Only list this innovation's subscriptions."),
    db_path: Path = typer.Option(
        config.subscriptions_db_path,
        "--db",
        help="Path to the subscriptions SQLite database.",
    ),
) -> None:
    """List stored notify-me subscriptions."""
    store = SqliteSubscriptionStore(db_path)
    print_subscriptions(store.list_subscriptions(innovation_id))


def subscribe_cmd(
    subscription_file: Path = typer.Argument(
        ..., help="JSON file with role_id, innovation_id and config."
    ),
    db_path: Path = typer.Option(
        config.subscriptions_db_path,
        "--db",
        help="Path to the subscriptions SQLite database.",
    ),
) -> None:
    """Store a subscription. SCHEDULED subscriptions also get their reminder scheduled."""
    try:
        subscription = Subscription.model_validate(read_json(subscription_file))
    except ValidationError as exc:
        console.print(f"[bold red]Invalid subscription:[/bold red] {exc}")
        raise typer.Exit(code=1) from exc

    store = SqliteSubscriptionStore(db_path)
    with store.transaction():
        store.add_subscription(subscription)
        if subscription.subscription_type == SubscriptionType.SCHEDULED:
            scheduled = store.schedule_notification(subscription)
            console.print(f"[dim]Reminder scheduled for {scheduled.send_date.isoformat()}[/dim]")

    console.print(f"[bold green]Subscribed:[/bold green] {subscription.id}")
