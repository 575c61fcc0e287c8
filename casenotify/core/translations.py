"""English labels for enum values rendered into notification params."""

from __future__ import annotations

from casenotify.models.enums import ServiceRole
from casenotify.models.recipients import DomainContext

TRANSLATIONS: dict[str, dict[str, str]] = {
    "SUPPORT_STATUS": {
        "SUGGESTED": "Suggested",
        "ENGAGING": "Engaging",
        "WAITING": "Waiting",
        "UNASSIGNED": "Unassigned",
        "UNSUITABLE": "Unsuitable",
        "CLOSED": "Closed",
    },
    "SECTION": {
        "INNOVATION_DESCRIPTION": "Description of innovation",
        "UNDERSTANDING_OF_NEEDS": "Detailed understanding of needs and benefits",
        "EVIDENCE_OF_EFFECTIVENESS": "Evidence of impact and benefit",
        "MARKET_RESEARCH": "Market research",
        "CURRENT_CARE_PATHWAY": "Current care pathway",
        "TESTING_WITH_USERS": "Testing with users",
        "REGULATIONS_AND_STANDARDS": "Regulatory approvals, standards and certifications",
        "INTELLECTUAL_PROPERTY": "Intellectual property",
        "REVENUE_MODEL": "Revenue Model",
        "COST_OF_INNOVATION": "Cost of your innovation",
        "DEPLOYMENT": "Deployment",
    },
    "SERVICE_ROLES": {
        "ADMIN": "Administrator",
        "ASSESSMENT": "Needs Assessor",
        "INNOVATOR": "Innovator",
        "ACCESSOR": "Accessor",
        "QUALIFYING_ACCESSOR": "Qualifying Accessor",
    },
    "TEAMS": {
        "ADMIN": "Service administrators",
        "ASSESSMENT": "Needs assessment team",
    },
}


def translate(key: str) -> str:
    """Look up a dotted key such as ``"SUPPORT_STATUS.ENGAGING"``.

    Unknown keys fall back to the last key segment so a new enum value
    renders as itself instead of failing the whole notification.
    """
    group, _, item = key.partition(".")
    return TRANSLATIONS.get(group, {}).get(item, item or group)


def translate_lower(key: str) -> str:
    return translate(key).lower()


def request_unit_name(request_user: DomainContext) -> str:
    """Display name of the team or unit the acting user speaks for."""
    if request_user.role == ServiceRole.ASSESSMENT:
        return translate(f"TEAMS.{request_user.role.value}")
    if request_user.organisation_unit is None:
        return ""
    return request_user.organisation_unit.name


def transform_into_bullets(items: list[str], prefix: str = "*") -> str:
    return "".join(f"{prefix} {item} \n" for item in items)
