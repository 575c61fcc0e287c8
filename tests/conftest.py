"""Shared test fixtures for casenotify."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from casenotify.config import NotifyConfig
from casenotify.core.urls import UrlBuilder
from casenotify.directory.memory import InMemoryRecipientDirectory, InMemorySubscriptionStore
from casenotify.directory.sqlite_store import SqliteSubscriptionStore
from casenotify.models.enums import (
    NotifyMeEventType,
    ServiceRole,
    SubscriptionType,
)
from casenotify.models.recipients import (
    DomainContext,
    IdentityInfo,
    InnovationInfo,
    OrganisationUnitRef,
    Recipient,
)
from casenotify.models.subscriptions import NotifyMeEvent, Subscription, SubscriptionConfig

BASE_URL = "https://example.test/transactional"


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test databases and outboxes."""
    return tmp_path


@pytest.fixture
def settings() -> NotifyConfig:
    """Provide a config that ignores the caller's environment and .env file."""
    return NotifyConfig(_env_file=None, web_base_transactional_url=BASE_URL)


@pytest.fixture
def urls() -> UrlBuilder:
    return UrlBuilder(BASE_URL)


@pytest.fixture
def sqlite_store(tmp_dir: Path) -> SqliteSubscriptionStore:
    """Provide a fresh SqliteSubscriptionStore backed by a temp database."""
    return SqliteSubscriptionStore(tmp_dir / "subscriptions.db")


# ---------------------------------------------------------------------------
# People: an innovator owner, a collaborator, an accessor acting user
# ---------------------------------------------------------------------------


OWNER = Recipient(
    role_id="role-owner",
    user_id="user-owner",
    identity_id="id-owner",
    role=ServiceRole.INNOVATOR,
)
COLLABORATOR = Recipient(
    role_id="role-collab",
    user_id="user-collab",
    identity_id="id-collab",
    role=ServiceRole.INNOVATOR,
)
ACCESSOR = Recipient(
    role_id="role-accessor",
    user_id="user-accessor",
    identity_id="id-accessor",
    role=ServiceRole.ACCESSOR,
    organisation_unit_id="unit-1",
)
LOCKED = Recipient(
    role_id="role-locked",
    user_id="user-locked",
    identity_id="id-locked",
    role=ServiceRole.INNOVATOR,
    locked=True,
)

IDENTITIES = [
    IdentityInfo(identity_id="id-owner", display_name="Olive Owner", email="owner@example.test"),
    IdentityInfo(identity_id="id-collab", display_name="Cal Collab", email="collab@example.test"),
    IdentityInfo(identity_id="id-accessor", display_name="Ada Accessor", email="ada@example.test"),
    IdentityInfo(identity_id="id-locked", display_name="Lou Locked", email="locked@example.test"),
]

INNOVATION = InnovationInfo(
    id="inno-1",
    name="Smart Inhaler",
    owner_role_id="role-owner",
    collaborator_role_ids=["role-collab"],
)


@pytest.fixture
def owner() -> Recipient:
    return OWNER


@pytest.fixture
def collaborator() -> Recipient:
    return COLLABORATOR


@pytest.fixture
def accessor() -> Recipient:
    return ACCESSOR


@pytest.fixture
def locked_recipient() -> Recipient:
    return LOCKED


@pytest.fixture
def innovation() -> InnovationInfo:
    return INNOVATION


@pytest.fixture
def request_user() -> DomainContext:
    """The acting accessor, speaking for organisation unit 1."""
    return DomainContext(
        id="user-accessor",
        identity_id="id-accessor",
        role_id="role-accessor",
        role=ServiceRole.ACCESSOR,
        email="ada@example.test",
        organisation_unit=OrganisationUnitRef(id="unit-1", name="Health Unit", acronym="HU"),
    )


@pytest.fixture
def make_directory() -> Callable[..., InMemoryRecipientDirectory]:
    """Factory fixture: a directory with the standard people and innovation."""

    def _factory(**overrides: Any) -> InMemoryRecipientDirectory:
        defaults: dict[str, Any] = {
            "recipients": [OWNER, COLLABORATOR, ACCESSOR, LOCKED],
            "identities": IDENTITIES,
            "preferences": {},
            "innovations": [INNOVATION],
        }
        defaults.update(overrides)
        return InMemoryRecipientDirectory(**defaults)

    return _factory


@pytest.fixture
def directory(make_directory: Callable[..., InMemoryRecipientDirectory]) -> InMemoryRecipientDirectory:
    return make_directory()


# ---------------------------------------------------------------------------
# Subscription and event factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_subscription() -> Callable[..., Subscription]:
    """Factory fixture: build a Subscription owned by the innovation owner."""

    def _factory(
        pre_conditions: dict[str, Any] | None = None,
        subscription_type: SubscriptionType = SubscriptionType.INSTANTLY,
        event_type: NotifyMeEventType = NotifyMeEventType.SUPPORT_UPDATED,
        role_id: str = "role-owner",
        innovation_id: str = "inno-1",
        **config_overrides: Any,
    ) -> Subscription:
        return Subscription(
            role_id=role_id,
            innovation_id=innovation_id,
            config=SubscriptionConfig(
                event_type=event_type,
                subscription_type=subscription_type,
                pre_conditions=pre_conditions or {},
                **config_overrides,
            ),
        )

    return _factory


@pytest.fixture
def make_event(request_user: DomainContext) -> Callable[..., NotifyMeEvent]:
    """Factory fixture: build a NotifyMeEvent raised by the acting accessor."""

    def _factory(
        params: dict[str, Any] | None = None,
        event_type: NotifyMeEventType = NotifyMeEventType.SUPPORT_UPDATED,
        innovation_id: str = "inno-1",
    ) -> NotifyMeEvent:
        return NotifyMeEvent(
            type=event_type,
            innovation_id=innovation_id,
            request_user=request_user,
            params=params or {},
        )

    return _factory


@pytest.fixture
def memory_store() -> InMemorySubscriptionStore:
    return InMemorySubscriptionStore()
