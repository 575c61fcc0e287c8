"""casenotify: notification layer for innovation case management.

  - Dispatch Core: accumulate email and in-app envelopes per business
    event, apply self and locked-account policy, resolve addresses
  - Notify-me engine: match runtime events against user subscriptions,
    consume ONCE subscriptions atomically
  - Business-event handlers (support status, documents, collaborators,
    account changes) in a registry keyed by notifier type
  - SQLite subscription store with scheduled reminders
  - Delivery routing to pluggable email / in-app sinks
"""

__version__ = "0.1.0"
__description__ = "Email and in-app notification dispatch with notify-me subscriptions"

from casenotify.core.dispatch import NotificationDispatch
from casenotify.core.matching import NotifyMeEngine
from casenotify.handlers import run_handler

__all__ = ["NotificationDispatch", "NotifyMeEngine", "run_handler", "__version__"]
