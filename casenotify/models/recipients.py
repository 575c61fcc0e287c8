"""Recipient and identity models resolved through the recipient directory."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from casenotify.models.enums import ServiceRole


class Recipient(BaseModel):
    """A contactable platform user under one of their roles.

    ``role_id`` may be missing for users resolved without a role (for
    example invitees that have not finished registering); such recipients
    can still be emailed but never receive in-app notifications.
    """

    model_config = ConfigDict(frozen=True)

    role_id: str | None = None
    user_id: str | None = None
    identity_id: str
    role: ServiceRole
    organisation_unit_id: str | None = None
    locked: bool = False
    email: str | None = None


class EmailRecipient(BaseModel):
    """A plain email address, optionally with a display name."""

    model_config = ConfigDict(frozen=True)

    email: str
    display_name: str | None = None
    role_id: str | None = None  # kept when resolved from a directory recipient


class IdentityInfo(BaseModel):
    """Identity provider view of a user."""

    model_config = ConfigDict(frozen=True)

    identity_id: str
    display_name: str
    email: str


class InnovationInfo(BaseModel):
    """Minimal innovation data needed to address and word notifications."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    owner_role_id: str | None = None
    collaborator_role_ids: list[str] = []


class OrganisationUnitRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    acronym: str = ""


class DomainContext(BaseModel):
    """The acting user of a request: who triggered the business event."""

    model_config = ConfigDict(frozen=True)

    id: str
    identity_id: str
    role_id: str
    role: ServiceRole
    email: str | None = None
    organisation_unit: OrganisationUnitRef | None = None
