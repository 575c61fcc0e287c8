"""Unit tests for the business-event handler registry and shipped handlers."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from casenotify.handlers import HANDLERS, UnknownNotifierTypeError, get_handler, run_handler
from casenotify.handlers.account import AP01_USER_LOCKED, AP10_EMAIL_UPDATED
from casenotify.handlers.collaborators import MC01_EXISTING_USER, MC02_NEW_USER
from casenotify.handlers.documents import DC01_TO_INNOVATOR, DC02_RECEIPT, DocumentUploadedPayload
from casenotify.handlers.supports import ST01_ENGAGING, ST02_OTHER, ST03_WAITING, ST09_CLOSED
from casenotify.models.enums import NotificationCategory, NotifierType, ServiceRole
from casenotify.models.recipients import DomainContext, InnovationInfo


def _support_payload(status: str, **support) -> dict:
    return {
        "innovation_id": "inno-1",
        "thread_id": "thread-1",
        "support": {"id": "support-1", "status": status, "message": "Notes", **support},
    }


def _addresses(output) -> list[str]:
    return [e.recipient.email for e in output.emails]


# ---------------------------------------------------------------------------
# Test: registry
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_every_notifier_type_registered(self):
        assert set(HANDLERS) == set(NotifierType)

    def test_get_handler_accepts_string(self):
        assert get_handler("LOCK_USER").notifier_type == NotifierType.LOCK_USER

    def test_unknown_type(self, request_user, directory):
        with pytest.raises(UnknownNotifierTypeError):
            run_handler("NOT_A_TYPE", request_user, {}, directory)

    def test_invalid_payload(self, request_user, directory):
        with pytest.raises(ValidationError):
            run_handler(NotifierType.DOCUMENT_UPLOADED, request_user, {"file": {}}, directory)

    def test_payload_model_instance_accepted(self, request_user, directory, urls):
        payload = DocumentUploadedPayload.model_validate(
            {"innovation_id": "inno-1", "file": {"id": "file-1", "name": "plan.pdf"}}
        )
        output = run_handler(NotifierType.DOCUMENT_UPLOADED, request_user, payload, directory, urls)
        assert not output.is_empty


# ---------------------------------------------------------------------------
# Test: support status updates
# ---------------------------------------------------------------------------


class TestSupportStatusUpdate:
    def test_engaging(self, request_user, directory, urls):
        output = run_handler(
            NotifierType.SUPPORT_STATUS_UPDATE,
            request_user,
            _support_payload("ENGAGING", new_assigned_accessor_role_ids=["role-accessor"]),
            directory,
            urls,
        )

        assert _addresses(output) == ["owner@example.test", "collab@example.test"]
        assert {e.template_id for e in output.emails} == {ST01_ENGAGING}
        assert all(e.category == NotificationCategory.SUPPORT for e in output.emails)
        email = output.emails[0]
        assert email.params["accessors_name"] == "* Ada Accessor \n"
        assert email.params["unit_name"] == "Health Unit"
        assert "/innovator/innovations/inno-1/threads/thread-1" in email.params["message_url"]

        assert len(output.in_apps) == 1
        in_app = output.in_apps[0]
        assert in_app.user_role_ids == ["role-owner", "role-collab"]
        assert in_app.context.id == "support-1"
        assert in_app.notification_id == email.notification_id

    @pytest.mark.parametrize(
        "status, template_id",
        [("WAITING", ST03_WAITING), ("UNSUITABLE", ST02_OTHER)],
    )
    def test_other_statuses(self, request_user, directory, urls, status, template_id):
        output = run_handler(
            NotifierType.SUPPORT_STATUS_UPDATE, request_user, _support_payload(status), directory, urls
        )
        assert {e.template_id for e in output.emails} == {template_id}
        assert output.emails[0].params["status"] == status.lower()
        assert output.in_apps[0].params["unitId"] == "unit-1"

    def test_closed_links_to_surveys(self, request_user, directory, urls):
        output = run_handler(
            NotifierType.SUPPORT_STATUS_UPDATE, request_user, _support_payload("CLOSED"), directory, urls
        )

        assert {e.template_id for e in output.emails} == {ST09_CLOSED}
        email = output.emails[0]
        assert "status" not in email.params
        assert "support_summary_url" not in email.params
        assert email.params["unit_name"] == "Health Unit"
        assert email.params["start_survey_page"] == (
            "https://example.test/transactional/innovator/innovations/inno-1/surveys"
            f"?dismissNotification={email.notification_id}"
        )
        in_app = output.in_apps[0]
        assert in_app.params == {
            "innovationName": "Smart Inhaler",
            "unitId": "unit-1",
            "unitName": "Health Unit",
        }

    def test_unhandled_status_emits_nothing(self, request_user, directory):
        output = run_handler(
            NotifierType.SUPPORT_STATUS_UPDATE, request_user, _support_payload("SUGGESTED"), directory
        )
        assert output.is_empty

    def test_unknown_innovation_emits_nothing(self, request_user, directory):
        payload = _support_payload("ENGAGING")
        payload["innovation_id"] = "inno-missing"
        output = run_handler(NotifierType.SUPPORT_STATUS_UPDATE, request_user, payload, directory)
        assert output.is_empty


# ---------------------------------------------------------------------------
# Test: document uploads
# ---------------------------------------------------------------------------


class TestDocumentUploaded:
    PAYLOAD = {"innovation_id": "inno-1", "file": {"id": "file-1", "name": "plan.pdf"}}

    def test_innovators_and_receipt(self, request_user, directory, urls):
        output = run_handler(NotifierType.DOCUMENT_UPLOADED, request_user, self.PAYLOAD, directory, urls)

        by_template = {e.template_id: [] for e in output.emails}
        for e in output.emails:
            by_template[e.template_id].append(e.recipient.email)
        assert by_template[DC01_TO_INNOVATOR] == ["owner@example.test", "collab@example.test"]
        # The uploader's receipt opts into self delivery.
        assert by_template[DC02_RECEIPT] == ["ada@example.test"]
        assert output.in_apps[0].template_id == DC01_TO_INNOVATOR
        assert output.in_apps[0].params["fileId"] == "file-1"

    def test_no_owner_still_notifies_others(self, request_user, make_directory, urls):
        """An ownerless innovation gets no owner envelopes; the rest still go out."""
        directory = make_directory(
            innovations=[
                InnovationInfo(id="inno-1", name="Smart Inhaler", collaborator_role_ids=["role-collab"])
            ]
        )

        output = run_handler(NotifierType.DOCUMENT_UPLOADED, request_user, self.PAYLOAD, directory, urls)

        assert "owner@example.test" not in _addresses(output)
        assert all("role-owner" not in n.user_role_ids for n in output.in_apps)
        assert sorted(_addresses(output)) == ["ada@example.test", "collab@example.test"]
        assert output.in_apps[0].user_role_ids == ["role-collab"]

    def test_receipt_has_no_category(self, request_user, directory):
        output = run_handler(NotifierType.DOCUMENT_UPLOADED, request_user, self.PAYLOAD, directory)
        receipt = next(e for e in output.emails if e.template_id == DC02_RECEIPT)
        assert receipt.category is None


# ---------------------------------------------------------------------------
# Test: collaborator invites
# ---------------------------------------------------------------------------


class TestCollaboratorInvite:
    def test_existing_and_new_users(self, directory, urls):
        owner_user = DomainContext(
            id="user-owner", identity_id="id-owner", role_id="role-owner", role=ServiceRole.INNOVATOR
        )
        payload = {
            "innovation_id": "inno-1",
            "invitations": [
                {"collaborator_id": "c-1", "email": "collab@example.test", "role_id": "role-collab"},
                {"collaborator_id": "c-2", "email": "new1@example.test"},
                {"collaborator_id": "c-3", "email": "new2@example.test"},
            ],
        }

        output = run_handler(NotifierType.COLLABORATOR_INVITE, owner_user, payload, directory, urls)

        existing = [e for e in output.emails if e.template_id == MC01_EXISTING_USER]
        new = [e for e in output.emails if e.template_id == MC02_NEW_USER]
        assert [e.recipient.email for e in existing] == ["collab@example.test"]
        assert [e.recipient.email for e in new] == ["new1@example.test", "new2@example.test"]
        assert new[0].params["create_account_url"].endswith("/collaborations/c-2")
        assert new[1].params["create_account_url"].endswith("/collaborations/c-3")
        assert new[0].params["innovator_name"] == "Olive Owner"
        assert [n.user_role_ids for n in output.in_apps] == [["role-collab"]]


# ---------------------------------------------------------------------------
# Test: account notifications
# ---------------------------------------------------------------------------


class TestAccount:
    def test_email_updated_reaches_self(self, request_user, directory):
        payload = {"old_email": "ada@example.test", "new_email": "ada@new.test", "display_name": "Ada"}
        output = run_handler(NotifierType.USER_EMAIL_ADDRESS_UPDATED, request_user, payload, directory)

        assert _addresses(output) == ["ada@example.test", "ada@new.test"]
        assert {e.template_id for e in output.emails} == {AP10_EMAIL_UPDATED}
        assert all(e.category is None for e in output.emails)

    def test_lock_user_reaches_locked_account(self, request_user, directory):
        output = run_handler(
            NotifierType.LOCK_USER, request_user, {"role_id": "role-locked"}, directory
        )
        assert _addresses(output) == ["locked@example.test"]
        assert output.emails[0].template_id == AP01_USER_LOCKED
        assert output.in_apps == []
