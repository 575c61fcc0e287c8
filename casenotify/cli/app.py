"""Main Typer application: imports and registers all CLI commands.

Entry point: ``casenotify`` (configured via pyproject.toml project.scripts).

Commands: notify-me, handler, subscriptions, subscribe, reminders.
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from casenotify.cli.commands.handler import handler_cmd
from casenotify.cli.commands.notify_me import notify_me_cmd
from casenotify.cli.commands.reminders import reminders_cmd
from casenotify.cli.commands.subscriptions import subscribe_cmd, subscriptions_cmd
from casenotify.config import config

app = typer.Typer(
    name="casenotify",
    help="casenotify: email and in-app notifications for innovation case management.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="notify-me", help="Match a notify-me event against subscriptions.")(notify_me_cmd)
app.command(name="handler", help="Run a business-event handler.")(handler_cmd)
app.command(name="subscriptions", help="List notify-me subscriptions.")(subscriptions_cmd)
app.command(name="subscribe", help="Store a notify-me subscription.")(subscribe_cmd)
app.command(name="reminders", help="Send due scheduled reminders.")(reminders_cmd)


def configure_logging(level: str | None = None) -> None:
    """Route ``casenotify`` logs through Rich at ``level`` (default: config)."""
    logging.basicConfig(
        level=(level or config.log_level).upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=config.debug, show_path=config.debug)],
        force=True,
    )


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Override CASENOTIFY_LOG_LEVEL for this invocation.",
    ),
) -> None:
    configure_logging(log_level)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
