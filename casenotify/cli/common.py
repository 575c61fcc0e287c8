"""Shared wiring and rendering for CLI commands."""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from casenotify.directory.memory import InMemoryRecipientDirectory
from casenotify.models.envelopes import ChannelKind, EmailEnvelope, InAppEnvelope
from casenotify.models.subscriptions import Subscription
from casenotify.routing.dispatcher import DeliveryDispatcher
from casenotify.routing.sinks.local_file import LocalFileSink
from casenotify.routing.sinks.outbox import OutboxEmailSink, OutboxInAppSink
from casenotify.routing.sinks.preference_gate import PreferenceGateSink

console = Console()


def read_json(path: Path) -> Any:
    """Read a JSON file or exit with a readable error."""
    if not path.exists():
        console.print(f"[bold red]File not found:[/bold red] {path}")
        raise typer.Exit(code=1)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        console.print(f"[bold red]Invalid JSON in {path}:[/bold red] {exc}")
        raise typer.Exit(code=1) from exc


def load_directory(path: Path) -> InMemoryRecipientDirectory:
    return InMemoryRecipientDirectory.from_dict(read_json(path))


def build_dispatcher(
    directory: InMemoryRecipientDirectory, outbox: Path | None
) -> DeliveryDispatcher:
    """Email and in-app sinks: JSON files under ``outbox``, or in-memory when None."""
    dispatcher = DeliveryDispatcher()
    if outbox is None:
        email_sink = OutboxEmailSink()
        in_app_sink = OutboxInAppSink()
    else:
        email_sink = LocalFileSink(ChannelKind.EMAIL, outbox)
        in_app_sink = LocalFileSink(ChannelKind.IN_APP, outbox)
    dispatcher.register_sink(PreferenceGateSink(email_sink, directory))
    dispatcher.register_sink(in_app_sink)
    return dispatcher


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def print_emails(emails: Sequence[EmailEnvelope]) -> None:
    if not emails:
        console.print("[dim]No emails.[/dim]")
        return
    table = Table(title=f"Emails ({len(emails)})")
    table.add_column("Template", style="cyan")
    table.add_column("Category")
    table.add_column("To", style="green")
    table.add_column("Params", overflow="fold")
    for email in emails:
        to = getattr(email.recipient, "email", None) or email.recipient.role_id or "?"
        table.add_row(
            email.template_id,
            email.category.value if email.category else "-",
            to,
            json.dumps(email.params, sort_keys=True, default=str),
        )
    console.print(table)


def print_in_apps(in_apps: Sequence[InAppEnvelope]) -> None:
    if not in_apps:
        console.print("[dim]No in-app notifications.[/dim]")
        return
    table = Table(title=f"In-app notifications ({len(in_apps)})")
    table.add_column("Template", style="cyan")
    table.add_column("Context")
    table.add_column("Roles", style="green")
    table.add_column("Params", overflow="fold")
    for in_app in in_apps:
        table.add_row(
            in_app.template_id,
            f"{in_app.context.type.value}/{in_app.context.detail}",
            ", ".join(in_app.user_role_ids),
            json.dumps(in_app.params, sort_keys=True, default=str),
        )
    console.print(table)


def print_subscriptions(subscriptions: Sequence[Subscription]) -> None:
    if not subscriptions:
        console.print("[dim]No subscriptions.[/dim]")
        return
    table = Table(title=f"Subscriptions ({len(subscriptions)})")
    table.add_column("ID", style="cyan")
    table.add_column("Role")
    table.add_column("Event")
    table.add_column("Type")
    table.add_column("Preconditions", overflow="fold")
    for sub in subscriptions:
        table.add_row(
            sub.id,
            sub.role_id,
            sub.event_type.value,
            sub.subscription_type.value,
            json.dumps(sub.config.pre_conditions, sort_keys=True),
        )
    console.print(table)
