"""``casenotify handler TYPE PAYLOAD_JSON``: run one business-event handler.

The payload file holds ``requestUser`` (the acting user) and ``data``
(the handler payload).
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
from casenotify.handlers import HANDLERS, UnknownNotifierTypeError
from casenotify.listeners import InvalidPayloadError, notifications_listener


def handler_cmd(
    notifier_type: str = typer.Argument(..., help="Notifier type, e.g. SUPPORT_STATUS_UPDATE."),
    payload_file: Path = typer.Argument(..., help="JSON file with requestUser and data."),
    directory_file: Path = typer.Option(
        config.directory_path,
        "--directory",
        "-d",
        help="JSON recipient directory fixture.",
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
    """Run a handler and deliver the notifications it computes."""
    payload = read_json(payload_file)
    directory = load_directory(directory_file)
    dispatcher = build_dispatcher(directory, None if dry_run else outbox)

    message = {
        "requestUser": payload.get("requestUser"),
        "type": notifier_type.upper(),
        "data": payload.get("data", {}),
    }
    try:
        output = notifications_listener(message, directory=directory, dispatcher=dispatcher)
    except UnknownNotifierTypeError as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        console.print("[bold]Known types:[/bold] " + ", ".join(t.value for t in HANDLERS))
        raise typer.Exit(code=1) from exc
    except InvalidPayloadError as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        console.print(str(exc.errors))
        raise typer.Exit(code=1) from exc

    print_emails(output.emails)
    print_in_apps(output.in_apps)
