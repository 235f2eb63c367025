# app/services/templates.py
from __future__ import annotations

import re
from typing import Any, Dict, Mapping

# Built-in defaults; seeded into message_templates and used whenever the
# stored set cannot be loaded.
DEFAULT_TEMPLATES: Dict[str, str] = {
    "responsible_subject": "ACTION REQUIRED: {{license_name}} expires in {{days_left}} days",
    "responsible_body": (
        "Dear {{person_name}},\n"
        "\n"
        'You are the PRIMARY RESPONSIBLE for the license "{{license_name}}".\n'
        "\n"
        "Expiry Date: {{expiry_date}}\n"
        "Days Remaining: {{days_left}}\n"
        "\n"
        "Please initiate renewal immediately.\n"
        "\n"
        "-- License Management System"
    ),
    "stakeholder_subject": "INFO: {{license_name}} expiry update ({{days_left}} days left)",
    "stakeholder_body": (
        "Dear {{person_name}},\n"
        "\n"
        'This is an informational update for the license "{{license_name}}".\n'
        "\n"
        "Expiry Date: {{expiry_date}}\n"
        "Days Remaining: {{days_left}}\n"
        "\n"
        "No action required from you.\n"
        "\n"
        "-- License Management System"
    ),
}

TEMPLATE_FIELDS = tuple(DEFAULT_TEMPLATES.keys())

PLACEHOLDERS = (
    "person_name",
    "person_email",
    "license_name",
    "provider",
    "expiry_date",
    "issued_date",
    "start_date",
    "days_left",
    "role",
)

_TOKEN = re.compile(r"\{\{\s*([a-zA-Z0-9_]+)\s*\}\}")


def render_template(template: Any, values: Mapping[str, Any]) -> str:
    """
    Substitute {{name}} tokens. Unknown or None values render as "".
    """

    def _sub(match: "re.Match[str]") -> str:
        v = values.get(match.group(1))
        return "" if v is None else str(v)

    return _TOKEN.sub(_sub, str(template or ""))


def pick_templates(templates: Mapping[str, str], is_responsible: bool) -> tuple[str, str]:
    """(subject, body) template pair for a recipient class."""
    prefix = "responsible" if is_responsible else "stakeholder"
    subject = templates.get(f"{prefix}_subject") or DEFAULT_TEMPLATES[f"{prefix}_subject"]
    body = templates.get(f"{prefix}_body") or DEFAULT_TEMPLATES[f"{prefix}_body"]
    return subject, body
