"""Unit tests for NotificationDispatch: accumulation and resolution.

Exercises envelope counts, params alignment, in-app role-id dedup, self and
locked suppression, address resolution and email decoration.
"""

from __future__ import annotations

import pytest

from casenotify.core.dispatch import (
    DispatchContractError,
    MissingRoleIdError,
    NotificationDispatch,
    ParamsMismatchError,
)
from casenotify.models.enums import NotificationCategory, ServiceRole
from casenotify.models.envelopes import EmailOptions, InAppContext, InAppOptions
from casenotify.models.recipients import EmailRecipient, Recipient

CONTEXT = InAppContext(type=NotificationCategory.SUPPORT, detail="ST01", id="support-1")


def _in_app(dispatch: NotificationDispatch, recipients, **kwargs):
    return dispatch.add_in_app(
        "ST01", recipients, context=CONTEXT, innovation_id="inno-1", **kwargs
    )


# ---------------------------------------------------------------------------
# Test: add_emails
# ---------------------------------------------------------------------------


class TestAddEmails:
    def test_one_envelope_per_recipient(self, request_user, owner, collaborator):
        dispatch = NotificationDispatch(request_user)
        envelopes = dispatch.add_emails(
            "DC01", [owner, collaborator], category=NotificationCategory.DOCUMENT
        )
        assert len(envelopes) == 2
        assert [e.recipient for e in envelopes] == [owner, collaborator]
        assert all(e.category == NotificationCategory.DOCUMENT for e in envelopes)

    def test_shared_params(self, request_user, owner, collaborator):
        dispatch = NotificationDispatch(request_user)
        envelopes = dispatch.add_emails(
            "DC01", [owner, collaborator], category=None, params={"a": 1}
        )
        assert [e.params for e in envelopes] == [{"a": 1}, {"a": 1}]

    def test_params_list_aligned_by_position(self, request_user):
        dispatch = NotificationDispatch(request_user)
        recipients = [EmailRecipient(email="x@example.test"), EmailRecipient(email="y@example.test")]
        params = [{"name": "x"}, {"name": "y"}]
        envelopes = dispatch.add_emails("MC02", recipients, category=None, params=params)
        assert [e.params for e in envelopes] == params

    def test_params_list_length_mismatch(self, request_user, owner, collaborator):
        dispatch = NotificationDispatch(request_user)
        with pytest.raises(ParamsMismatchError):
            dispatch.add_emails("MC02", [owner, collaborator], category=None, params=[{}])
        assert dispatch.pending_emails == []

    def test_contract_errors_are_value_errors(self):
        assert issubclass(ParamsMismatchError, DispatchContractError)
        assert issubclass(MissingRoleIdError, ValueError)

    def test_empty_recipients_records_nothing(self, request_user):
        dispatch = NotificationDispatch(request_user)
        assert dispatch.add_emails("DC01", [], category=None) == []
        assert dispatch.pending_emails == []


# ---------------------------------------------------------------------------
# Test: add_in_app
# ---------------------------------------------------------------------------


class TestAddInApp:
    def test_single_envelope_with_role_ids_in_order(self, request_user, owner, collaborator):
        dispatch = NotificationDispatch(request_user)
        envelope = _in_app(dispatch, [collaborator, owner])
        assert envelope is not None
        assert envelope.user_role_ids == ["role-collab", "role-owner"]
        assert dispatch.pending_in_apps == [envelope]

    def test_duplicates_removed(self, request_user, owner):
        dispatch = NotificationDispatch(request_user)
        envelope = _in_app(dispatch, [owner, "role-x", owner, "role-x"])
        assert envelope.user_role_ids == ["role-owner", "role-x"]

    def test_empty_list_records_nothing(self, request_user):
        dispatch = NotificationDispatch(request_user)
        assert _in_app(dispatch, []) is None
        assert dispatch.pending_in_apps == []

    def test_missing_role_id_raises(self, request_user):
        dispatch = NotificationDispatch(request_user)
        orphan = Recipient(identity_id="id-orphan", role=ServiceRole.INNOVATOR)
        with pytest.raises(MissingRoleIdError):
            _in_app(dispatch, [orphan])


# ---------------------------------------------------------------------------
# Test: notify
# ---------------------------------------------------------------------------


class TestNotify:
    def test_both_channels(self, request_user, owner, collaborator):
        dispatch = NotificationDispatch(request_user)
        dispatch.notify(
            "ST01",
            [owner, collaborator],
            email={"category": NotificationCategory.SUPPORT, "params": {"k": "v"}},
            in_app={"context": CONTEXT, "innovation_id": "inno-1"},
        )
        assert len(dispatch.pending_emails) == 2
        assert len(dispatch.pending_in_apps) == 1
        assert dispatch.pending_in_apps[0].user_role_ids == ["role-owner", "role-collab"]

    def test_recipient_without_role_id_gets_email_only(self, request_user):
        dispatch = NotificationDispatch(request_user)
        no_role = Recipient(identity_id="id-new", role=ServiceRole.INNOVATOR)
        dispatch.notify(
            "MC01",
            [no_role],
            email={"category": None},
            in_app={"context": CONTEXT, "innovation_id": "inno-1"},
        )
        assert len(dispatch.pending_emails) == 1
        assert dispatch.pending_in_apps == []


# ---------------------------------------------------------------------------
# Test: resolution policy
# ---------------------------------------------------------------------------


class TestResolve:
    def test_request_user_suppressed_by_default(self, request_user, directory, owner, accessor):
        dispatch = NotificationDispatch(request_user)
        dispatch.add_emails("X", [owner, accessor], category=None)
        _in_app(dispatch, [owner, accessor])

        output = dispatch.resolve(directory)

        assert [e.recipient.email for e in output.emails] == ["owner@example.test"]
        assert output.in_apps[0].user_role_ids == ["role-owner"]

    def test_request_user_matched_by_email_address(self, request_user, directory):
        dispatch = NotificationDispatch(request_user)
        dispatch.add_emails("X", [EmailRecipient(email="ADA@example.test ")], category=None)
        assert dispatch.resolve(directory).emails == []

    def test_include_self(self, request_user, directory, accessor):
        dispatch = NotificationDispatch(request_user)
        dispatch.add_emails("X", [accessor], category=None, options=EmailOptions(include_self=True))
        _in_app(dispatch, [accessor], options=InAppOptions(include_self=True))

        output = dispatch.resolve(directory)

        assert [e.recipient.email for e in output.emails] == ["ada@example.test"]
        assert output.in_apps[0].user_role_ids == ["role-accessor"]

    def test_locked_suppressed_by_default(self, request_user, directory, owner, locked_recipient):
        dispatch = NotificationDispatch(request_user)
        dispatch.add_emails("X", [owner, locked_recipient], category=None)
        _in_app(dispatch, [owner, locked_recipient])

        output = dispatch.resolve(directory)

        assert [e.recipient.email for e in output.emails] == ["owner@example.test"]
        assert output.in_apps[0].user_role_ids == ["role-owner"]

    def test_include_locked(self, request_user, directory, locked_recipient):
        dispatch = NotificationDispatch(request_user)
        dispatch.add_emails(
            "X", [locked_recipient], category=None, options=EmailOptions(include_locked=True)
        )
        output = dispatch.resolve(directory)
        assert [e.recipient.email for e in output.emails] == ["locked@example.test"]

    def test_in_app_left_empty_is_dropped(self, request_user, directory, accessor):
        dispatch = NotificationDispatch(request_user)
        _in_app(dispatch, [accessor])
        assert dispatch.resolve(directory).in_apps == []

    def test_unknown_identity_skipped(self, request_user, make_directory, owner):
        directory = make_directory(identities=[])
        dispatch = NotificationDispatch(request_user)
        dispatch.add_emails("X", [owner], category=None)
        assert dispatch.resolve(directory).emails == []

    def test_dedup_within_one_call_only(self, request_user, directory, owner):
        dispatch = NotificationDispatch(request_user)
        dispatch.add_emails("X", [owner, owner], category=None)
        dispatch.add_emails("Y", [owner], category=None)

        emails = dispatch.resolve(directory).emails

        assert [e.template_id for e in emails] == ["X", "Y"]

    def test_resolved_recipient_keeps_role_id(self, request_user, directory, owner):
        dispatch = NotificationDispatch(request_user)
        dispatch.add_emails("X", [owner], category=NotificationCategory.SUPPORT)
        email = dispatch.resolve(directory).emails[0]
        assert email.is_resolved
        assert email.recipient == EmailRecipient(
            email="owner@example.test", display_name="Olive Owner", role_id="role-owner"
        )

    def test_email_decoration(self, request_user, directory, urls, owner):
        dispatch = NotificationDispatch(request_user, urls)
        dispatch.add_emails("X", [owner], category=None, params={"k": 1}, notification_id="n-1")
        params = dispatch.resolve(directory).emails[0].params
        assert params["k"] == 1
        assert params["display_name"] == "Olive Owner"
        assert params["unsubscribe_url"].endswith(
            "/account/email-notifications?dismissNotification=n-1"
        )

    def test_no_unsubscribe_url_without_builder(self, request_user, directory, owner):
        dispatch = NotificationDispatch(request_user)
        dispatch.add_emails("X", [owner], category=None)
        assert "unsubscribe_url" not in dispatch.resolve(directory).emails[0].params

    def test_identities_fetched_once(self, request_user, directory, owner, collaborator):
        calls: list[list[str]] = []
        original = directory.resolve_identities

        def _spy(ids):
            calls.append(list(ids))
            return original(ids)

        directory.resolve_identities = _spy
        dispatch = NotificationDispatch(request_user)
        dispatch.add_emails("X", [owner, collaborator], category=None)
        dispatch.add_emails("Y", [owner], category=None)
        dispatch.resolve(directory)

        assert calls == [["id-owner", "id-collab"]]

    def test_no_identity_lookup_without_directory_recipients(self, request_user, directory):
        directory.resolve_identities = lambda ids: pytest.fail("unexpected identity lookup")
        dispatch = NotificationDispatch(request_user)
        dispatch.add_emails("X", [EmailRecipient(email="x@example.test")], category=None)
        assert len(dispatch.resolve(directory).emails) == 1
