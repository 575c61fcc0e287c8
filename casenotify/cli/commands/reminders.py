"""``casenotify reminders``: sweep and send due scheduled reminders."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import typer

from casenotify.cli.common import (
    build_dispatcher,
    console,
    load_directory,
    print_emails,
    print_in_apps,
)
from casenotify.config import config
from casenotify.directory.sqlite_store import SqliteSubscriptionStore
from casenotify.listeners import reminders_listener


def reminders_cmd(
    now: datetime = typer.Option(
        None,
        "--now",
        help="Sweep as if it were this time (ISO 8601). Defaults to the current time.",
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
    """Send every reminder due within the grace window."""
    directory = load_directory(directory_file)
    store = SqliteSubscriptionStore(db_path)
    dispatcher = build_dispatcher(directory, None if dry_run else outbox)

    results = reminders_listener(store=store, directory=directory, dispatcher=dispatcher, now=now)
    if not results:
        console.print("[dim]No reminders due.[/dim]")
        return

    print_emails([e for r in results for e in r.emails])
    print_in_apps([n for r in results for n in r.in_apps])
