"""Runtime configuration: env-driven.

Centralized config using pydantic-settings for environment variable
support. Reads from a .env file and CASENOTIFY_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class NotifyConfig(BaseSettings):
    """Notification layer configuration with environment variable overrides.

    All settings can be overridden via CASENOTIFY_* environment variables
    or a .env file in the project root.

    Examples
    --------
    Override via environment::

        export CASENOTIFY_ENVIRONMENT=staging
        export CASENOTIFY_LOG_LEVEL=DEBUG
        export CASENOTIFY_WEB_BASE_TRANSACTIONAL_URL=https://example.org/transactional

    Or via .env file::

        CASENOTIFY_ENVIRONMENT=production
        CASENOTIFY_SUBSCRIPTIONS_DB_PATH=/data/subscriptions.db
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CASENOTIFY_",
        env_file_encoding="utf-8",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Links placed in emails
    web_base_transactional_url: str = "http://localhost:4200/transactional"

    # Storage paths
    subscriptions_db_path: Path = Path(".casenotify/subscriptions.db")
    outbox_path: Path = Path(".casenotify/outbox")
    directory_path: Path = Path(".casenotify/directory.json")

    # Scheduled reminders
    reminder_grace_hours: int = 2
    default_reminder_in_app_message: str = "This is a default description for the inApp"
    default_reminder_email_message: str = "This is a default description for the email"


# Module-level singleton: import as `from casenotify.config import config`
config = NotifyConfig()
