"""Business event handlers and their registry.

``HANDLERS`` maps each ``NotifierType`` to its ``HandlerSpec``;
``run_handler`` is the single entry point: validate the payload, compute
the envelopes on a fresh dispatch accumulator, resolve them.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel

from casenotify.core.dispatch import DispatchOutput
from casenotify.core.urls import UrlBuilder
from casenotify.directory import RecipientDirectory
from casenotify.handlers import account, collaborators, documents, supports
from casenotify.handlers.base import HandlerContext, HandlerSpec
from casenotify.models.enums import NotifierType
from casenotify.models.recipients import DomainContext

logger = logging.getLogger(__name__)


class UnknownNotifierTypeError(LookupError):
    """No handler is registered for the requested notifier type."""


HANDLERS: dict[NotifierType, HandlerSpec] = {
    spec.notifier_type: spec
    for spec in (
        supports.SPEC,
        documents.SPEC,
        collaborators.SPEC,
        account.EMAIL_UPDATED_SPEC,
        account.LOCK_USER_SPEC,
    )
}


def get_handler(notifier_type: NotifierType | str) -> HandlerSpec:
    try:
        return HANDLERS[NotifierType(notifier_type)]
    except (KeyError, ValueError):
        raise UnknownNotifierTypeError(f"No handler for {notifier_type!r}") from None


def run_handler(
    notifier_type: NotifierType | str,
    request_user: DomainContext,
    payload: BaseModel | dict[str, Any],
    directory: RecipientDirectory,
    urls: UrlBuilder | None = None,
) -> DispatchOutput:
    """Run one handler and return its resolved envelopes.

    Raises
    ------
    UnknownNotifierTypeError
        If ``notifier_type`` has no registered handler.
    pydantic.ValidationError
        If ``payload`` does not fit the handler's payload model.
    """
    spec = get_handler(notifier_type)
    if not isinstance(payload, spec.payload_model):
        payload = spec.payload_model.model_validate(payload)

    ctx = HandlerContext(request_user, directory, urls or UrlBuilder())
    spec.compute(ctx, payload)
    output = ctx.dispatch.resolve(directory)
    logger.info(
        "%s: %d email(s), %d in-app notification(s)",
        spec.notifier_type.value,
        len(output.emails),
        len(output.in_apps),
    )
    return output


__all__ = [
    "HANDLERS",
    "HandlerContext",
    "HandlerSpec",
    "UnknownNotifierTypeError",
    "get_handler",
    "run_handler",
]
