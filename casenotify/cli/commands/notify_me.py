"""``casenotify notify-me EVENT_JSON``: match one event against subscriptions.

Loads the event from a JSON file, runs the matching engine against the
SQLite subscription store inside one transaction and delivers the result
to the outbox.
"""

from __future__ import annotations

from pathlib import Path

import typer

from casenotify.cli.common import (
    build_dispatcher,
    console,
    load_directory,
    print_emails,
    print_in_apps,
    read_json,
)
from casenotify.config import config
from casenotify.directory.sqlite_store import SqliteSubscriptionStore
from casenotify.listeners import InvalidPayloadError, notify_me_listener


def notify_me_cmd(
    event_file: Path = typer.Argument(
        ...,
        help="JSON file with the event: type, innovation_id, request_user, params.",
    ),
    directory_file: Path = typer.Option(
        config.directory_path,
        "--directory",
        "-d",
        help="JSON recipient directory fixture.",
    ),
    db_path: Path = typer.Option(
        config.subscriptions_db_path,
        "--db",
        help="Path to the subscriptions SQLite database.",
    ),
    outbox: Path = typer.Option(
        config.outbox_path,
        "--outbox",
        "-o",
        help="Directory the envelopes are written to.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Keep envelopes in memory instead of writing the outbox.",
    ),
) -> None:
    """Match a notify-me event and deliver the notifications it fires."""
    payload = read_json(event_file)
    directory = load_directory(directory_file)
    store = SqliteSubscriptionStore(db_path)
    dispatcher = build_dispatcher(directory, None if dry_run else outbox)

    try:
        result = notify_me_listener(payload, store=store, directory=directory, dispatcher=dispatcher)
    except InvalidPayloadError as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        console.print(str(exc.errors))
        raise typer.Exit(code=1) from exc

    print_emails(result.emails)
    print_in_apps(result.in_apps)
    if result.deleted_subscription_ids:
        console.print(
            f"[yellow]Consumed ONCE subscription(s):[/yellow] "
            + ", ".join(result.deleted_subscription_ids)
        )
