"""Handler records and the context a handler computes against.

A business event handler is a ``HandlerSpec``: the notifier type it serves,
the payload model it validates, and a ``compute`` function that records
envelopes on the run's ``NotificationDispatch``. There is no handler class
hierarchy; the registry maps notifier types to specs.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict

from casenotify.core.dispatch import NotificationDispatch
from casenotify.core.translations import request_unit_name
from casenotify.core.urls import UrlBuilder
from casenotify.directory import RecipientDirectory
from casenotify.models.enums import NotifierType, ServiceRole
from casenotify.models.recipients import DomainContext, InnovationInfo, Recipient

_ROLE_FALLBACK_NAMES: dict[ServiceRole, str] = {
    ServiceRole.ACCESSOR: "accessor user",
    ServiceRole.QUALIFYING_ACCESSOR: "accessor user",
    ServiceRole.ASSESSMENT: "assessment user",
    ServiceRole.INNOVATOR: "innovator user",
}


class HandlerContext:
    """Dependencies and accumulator of one handler run."""

    def __init__(
        self,
        request_user: DomainContext,
        directory: RecipientDirectory,
        urls: UrlBuilder,
    ) -> None:
        self.request_user = request_user
        self.directory = directory
        self.urls = urls
        self.dispatch = NotificationDispatch(request_user, urls)
        self._request_user_name: str | None = None

    def user_name(self, identity_id: str | None, role: ServiceRole | None = None) -> str:
        """Display name of a user, or a generic label for their role."""
        if identity_id:
            identity = self.directory.resolve_identities([identity_id]).get(identity_id)
            if identity is not None and identity.display_name:
                return identity.display_name
        role = role or self.request_user.role
        return _ROLE_FALLBACK_NAMES.get(role, "user")

    def request_user_name(self) -> str:
        if self._request_user_name is None:
            self._request_user_name = self.user_name(self.request_user.identity_id)
        return self._request_user_name

    def request_unit_name(self) -> str:
        return request_unit_name(self.request_user)

    def recipients(self, role_ids: Sequence[str | None]) -> list[Recipient]:
        """Resolve role ids, silently dropping ``None`` and unknown ids."""
        wanted = [r for r in role_ids if r]
        return self.directory.resolve_by_role_ids(wanted) if wanted else []

    def innovators(self, innovation: InnovationInfo) -> list[Recipient]:
        """Owner (when there is one) followed by the collaborators."""
        return self.recipients([innovation.owner_role_id, *innovation.collaborator_role_ids])


Compute = Callable[[HandlerContext, Any], None]


class HandlerSpec(BaseModel):
    """One business event handler as data."""

    model_config = ConfigDict(frozen=True)

    notifier_type: NotifierType
    payload_model: type[BaseModel]
    compute: Compute
