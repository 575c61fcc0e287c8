"""casenotify CLI: Typer-based command-line interface.

Provides the ``casenotify`` command with subcommands for matching
notify-me events, running business-event handlers, managing
subscriptions and sweeping scheduled reminders.

All output uses Rich for formatted terminal display.
"""
