"""NotificationDispatch: the per-run accumulator of channel envelopes.

A handler run owns exactly one ``NotificationDispatch``. It records the
email and in-app envelopes the run wants to emit, then resolves them for
delivery, applying the cross-cutting recipient policy:

* self suppression: the acting user is dropped from both channels unless
  the envelope opts in with ``include_self``;
* locked accounts: locked recipients are dropped unless the envelope opts
  in with ``include_locked``;
* per-call deduplication: a role id appears once per in-app envelope and
  an address receives one email per ``add_emails`` call.

Dedup is never cross-call: handlers must build each recipient list once.
Nothing here is shared between runs, so concurrent runs need no
coordination.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict

from casenotify.core.preferences import is_locked, is_self
from casenotify.core.urls import UrlBuilder
from casenotify.directory import RecipientDirectory
from casenotify.models.enums import NotificationCategory
from casenotify.models.envelopes import (
    EmailEnvelope,
    EmailOptions,
    InAppContext,
    InAppEnvelope,
    InAppOptions,
)
from casenotify.models.recipients import (
    DomainContext,
    EmailRecipient,
    IdentityInfo,
    Recipient,
)

logger = logging.getLogger(__name__)


class DispatchContractError(ValueError):
    """A handler called the dispatch core incorrectly (a coding defect)."""


class ParamsMismatchError(DispatchContractError):
    """Positional params were supplied for a different number of recipients."""


class MissingRoleIdError(DispatchContractError):
    """An in-app recipient has no role id to address."""


class DispatchOutput(BaseModel):
    """Resolved envelopes of one run, ready for the delivery collaborators."""

    model_config = ConfigDict(frozen=True)

    emails: list[EmailEnvelope] = []
    in_apps: list[InAppEnvelope] = []

    @property
    def is_empty(self) -> bool:
        return not self.emails and not self.in_apps


class NotificationDispatch:
    """Accumulates one handler run's email and in-app envelopes.

    Parameters
    ----------
    request_user:
        The acting user, used for self suppression.
    urls:
        Builder for the unsubscribe link added to resolved emails. When
        ``None`` no unsubscribe link is added.
    """

    def __init__(self, request_user: DomainContext, urls: UrlBuilder | None = None) -> None:
        self.request_user = request_user
        self._urls = urls
        self._emails: list[tuple[int, EmailEnvelope]] = []
        self._in_apps: list[InAppEnvelope] = []
        self._role_recipients: dict[str, Recipient] = {}
        self._calls = 0

    # ------------------------------------------------------------------
    # Accumulation
    # ------------------------------------------------------------------

    def add_emails(
        self,
        template_id: str,
        recipients: Sequence[Recipient | EmailRecipient],
        *,
        category: NotificationCategory | None,
        params: Mapping[str, Any] | Sequence[Mapping[str, Any]] | None = None,
        options: EmailOptions | None = None,
        notification_id: str | None = None,
    ) -> list[EmailEnvelope]:
        """Record one email envelope per recipient and return them.

        ``params`` is either shared by every recipient or a list matching
        ``recipients`` position by position.

        Raises
        ------
        ParamsMismatchError
            If a params list does not have one entry per recipient.
        """
        if params is None:
            per_recipient: list[Mapping[str, Any]] = [{}] * len(recipients)
        elif isinstance(params, Mapping):
            per_recipient = [params] * len(recipients)
        else:
            per_recipient = list(params)
            if len(per_recipient) != len(recipients):
                raise ParamsMismatchError(
                    f"{template_id}: {len(per_recipient)} params for "
                    f"{len(recipients)} recipients"
                )

        call = self._next_call()
        added: list[EmailEnvelope] = []
        for recipient, recipient_params in zip(recipients, per_recipient):
            envelope = EmailEnvelope(
                template_id=template_id,
                category=category,
                recipient=recipient,
                params=dict(recipient_params),
                options=options or EmailOptions(),
                notification_id=notification_id,
            )
            self._emails.append((call, envelope))
            added.append(envelope)
        return added

    def add_in_app(
        self,
        template_id: str,
        recipients: Sequence[Recipient | str],
        *,
        context: InAppContext,
        innovation_id: str,
        params: Mapping[str, Any] | None = None,
        options: InAppOptions | None = None,
        notification_id: str | None = None,
    ) -> InAppEnvelope | None:
        """Record a single in-app envelope addressed to all ``recipients``.

        Recipients are directory recipients or bare role ids. Role ids keep
        input order with duplicates removed. An empty list records nothing.

        Raises
        ------
        MissingRoleIdError
            If a directory recipient has no role id.
        """
        if not recipients:
            return None

        role_ids: list[str] = []
        for recipient in recipients:
            if isinstance(recipient, Recipient):
                if recipient.role_id is None:
                    raise MissingRoleIdError(
                        f"{template_id}: recipient {recipient.identity_id} has no role id"
                    )
                self._role_recipients.setdefault(recipient.role_id, recipient)
                role_id = recipient.role_id
            else:
                role_id = recipient
            if role_id not in role_ids:
                role_ids.append(role_id)

        self._next_call()
        envelope = InAppEnvelope(
            template_id=template_id,
            context=context,
            innovation_id=innovation_id,
            user_role_ids=role_ids,
            params=dict(params or {}),
            options=options or InAppOptions(),
            notification_id=notification_id,
        )
        self._in_apps.append(envelope)
        return envelope

    def notify(
        self,
        template_id: str,
        recipients: Sequence[Recipient],
        *,
        email: Mapping[str, Any],
        in_app: Mapping[str, Any],
    ) -> None:
        """Record both channels for the same recipients.

        ``email`` and ``in_app`` hold the keyword arguments of
        ``add_emails`` and ``add_in_app``. Recipients without a role id get
        the email only.
        """
        if not recipients:
            return
        self.add_emails(template_id, recipients, **email)
        self.add_in_app(
            template_id,
            [r for r in recipients if r.role_id is not None],
            **in_app,
        )

    def _next_call(self) -> int:
        self._calls += 1
        return self._calls

    @property
    def pending_emails(self) -> list[EmailEnvelope]:
        """Every recorded email envelope, before policy is applied."""
        return [envelope for _, envelope in self._emails]

    @property
    def pending_in_apps(self) -> list[InAppEnvelope]:
        return list(self._in_apps)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def identity_ids(self) -> list[str]:
        """Identity ids of the recorded directory recipients, deduplicated."""
        seen: list[str] = []
        for _, envelope in self._emails:
            recipient = envelope.recipient
            if isinstance(recipient, Recipient) and recipient.identity_id not in seen:
                seen.append(recipient.identity_id)
        return seen

    def emails(self, identities: Mapping[str, IdentityInfo]) -> list[EmailEnvelope]:
        """Resolve recorded emails into deliverable envelopes.

        Applies self and locked policy, resolves directory recipients to
        addresses through ``identities`` (unresolvable ones are skipped) and
        drops repeated addresses within one ``add_emails`` call. Params gain
        ``display_name`` and, with a URL builder, ``unsubscribe_url``.
        """
        resolved: list[EmailEnvelope] = []
        seen: set[tuple[int, str]] = set()

        for call, envelope in self._emails:
            recipient = envelope.recipient
            if not envelope.options.include_locked and is_locked(recipient):
                logger.debug("%s: skipping locked recipient", envelope.template_id)
                continue
            if not envelope.options.include_self and is_self(recipient, self.request_user):
                logger.debug("%s: skipping request user", envelope.template_id)
                continue

            if isinstance(recipient, Recipient):
                identity = identities.get(recipient.identity_id)
                if identity is None:
                    logger.debug(
                        "%s: identity %s not found, skipping",
                        envelope.template_id,
                        recipient.identity_id,
                    )
                    continue
                target = EmailRecipient(
                    email=identity.email,
                    display_name=identity.display_name,
                    role_id=recipient.role_id,
                )
                if not envelope.options.include_self and is_self(target, self.request_user):
                    continue
            else:
                target = recipient

            key = (call, target.email.strip().lower())
            if key in seen:
                continue
            seen.add(key)

            params = dict(envelope.params)
            if target.display_name:
                params["display_name"] = target.display_name
            if self._urls is not None:
                params["unsubscribe_url"] = self._urls.unsubscribe(envelope.notification_id)

            resolved.append(envelope.model_copy(update={"recipient": target, "params": params}))

        return resolved

    def in_apps(self) -> list[InAppEnvelope]:
        """Recorded in-app envelopes with self and locked role ids removed.

        Envelopes left without any role id are dropped.
        """
        resolved: list[InAppEnvelope] = []
        for envelope in self._in_apps:
            role_ids = [
                role_id
                for role_id in envelope.user_role_ids
                if (envelope.options.include_self or role_id != self.request_user.role_id)
                and (
                    envelope.options.include_locked
                    or not self._is_locked_role(role_id)
                )
            ]
            if not role_ids:
                logger.debug("%s: no in-app recipients left", envelope.template_id)
                continue
            if role_ids != envelope.user_role_ids:
                envelope = envelope.model_copy(update={"user_role_ids": role_ids})
            resolved.append(envelope)
        return resolved

    def _is_locked_role(self, role_id: str) -> bool:
        recipient = self._role_recipients.get(role_id)
        return recipient is not None and recipient.locked

    def resolve(self, directory: RecipientDirectory) -> DispatchOutput:
        """Resolve both channels, fetching identities in one directory call."""
        ids = self.identity_ids()
        identities = directory.resolve_identities(ids) if ids else {}
        return DispatchOutput(emails=self.emails(identities), in_apps=self.in_apps())
