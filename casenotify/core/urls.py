"""Deep links placed in notification emails.

Every link carries ``dismissNotification=<notification id>`` so that
following it from an email marks the matching in-app notification read.
"""

from __future__ import annotations

from urllib.parse import urlencode

from casenotify.config import NotifyConfig
from casenotify.models.enums import ServiceRole

_FRONTEND_BASE: dict[ServiceRole, str] = {
    ServiceRole.ASSESSMENT: "assessment",
    ServiceRole.ACCESSOR: "accessor",
    ServiceRole.QUALIFYING_ACCESSOR: "accessor",
    ServiceRole.INNOVATOR: "innovator",
    ServiceRole.ADMIN: "admin",
}


def frontend_base_url(role: ServiceRole) -> str:
    """Path prefix of the frontend area that serves ``role``."""
    return _FRONTEND_BASE[ServiceRole(role)]


class UrlBuilder:
    """Builds transactional URLs relative to the configured web base URL.

    Parameters
    ----------
    base_url:
        Transactional web base URL. Defaults to
        ``NotifyConfig().web_base_transactional_url``.
    """

    def __init__(self, base_url: str | None = None) -> None:
        if base_url is None:
            base_url = NotifyConfig().web_base_transactional_url
        self._base = base_url.rstrip("/")

    def build(self, path: str, **query: str | None) -> str:
        params = {k: v for k, v in query.items() if v}
        url = f"{self._base}/{path.lstrip('/')}"
        return f"{url}?{urlencode(params)}" if params else url

    def innovation_overview(self, role: ServiceRole, innovation_id: str, notification_id: str) -> str:
        return self.build(
            f"{frontend_base_url(role)}/innovations/{innovation_id}/overview",
            dismissNotification=notification_id,
        )

    def innovation_record_section(
        self, role: ServiceRole, innovation_id: str, section: str, notification_id: str
    ) -> str:
        return self.build(
            f"{frontend_base_url(role)}/innovations/{innovation_id}/record/sections/{section}",
            dismissNotification=notification_id,
        )

    def support_summary(
        self,
        role: ServiceRole,
        innovation_id: str,
        notification_id: str,
        unit_id: str | None = None,
    ) -> str:
        return self.build(
            f"{frontend_base_url(role)}/innovations/{innovation_id}/support-summary",
            dismissNotification=notification_id,
            unitId=unit_id,
        )

    def surveys_initial_page(self, role: ServiceRole, innovation_id: str, notification_id: str) -> str:
        return self.build(
            f"{frontend_base_url(role)}/innovations/{innovation_id}/surveys",
            dismissNotification=notification_id,
        )

    def documents(self, role: ServiceRole, innovation_id: str, notification_id: str) -> str:
        return self.build(
            f"{frontend_base_url(role)}/innovations/{innovation_id}/documents",
            dismissNotification=notification_id,
        )

    def thread(self, role: ServiceRole, innovation_id: str, thread_id: str, notification_id: str) -> str:
        return self.build(
            f"{frontend_base_url(role)}/innovations/{innovation_id}/threads/{thread_id}",
            dismissNotification=notification_id,
        )

    def collaboration_invite(self, innovation_id: str, collaborator_id: str) -> str:
        return self.build(f"innovator/innovations/{innovation_id}/collaborations/{collaborator_id}")

    def unsubscribe(self, notification_id: str | None = None) -> str:
        return self.build("account/email-notifications", dismissNotification=notification_id)
