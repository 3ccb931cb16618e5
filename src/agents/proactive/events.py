"""
Proactive events

Every webhook payload (Gmail, Calendar, HubSpot) and every side effect the
executor performs is normalised into a ProactiveEvent before matching.
"""

import re
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

SENDER_PATTERN = re.compile(r"^\s*\"?([^\"<]*?)\"?\s*<([^>]+)>\s*$")


def parse_sender(from_header: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Split a From header into (name, email).

    "Jane Doe <jane@acme.io>" -> ("Jane Doe", "jane@acme.io")
    "jane@acme.io"            -> (None, "jane@acme.io")
    """
    if not from_header:
        return None, None
    match = SENDER_PATTERN.match(from_header)
    if match:
        name = match.group(1).strip() or None
        return name, match.group(2).strip()
    value = from_header.strip()
    return None, value if "@" in value else None


class ProactiveEvent(BaseModel):
    """Normalised event: what happened, in which service, for which user"""
    model_config = ConfigDict(populate_by_name=True)

    event: str
    service: str
    data: Dict[str, Any] = Field(default_factory=dict)
    user_id: str = Field(alias="userId")

    @classmethod
    def from_gmail(cls, user_id: str, email_data: Dict[str, Any]) -> "ProactiveEvent":
        data = dict(email_data)
        if not data.get("senderEmail") and data.get("from"):
            name, email = parse_sender(data["from"])
            data["senderEmail"] = email
            data.setdefault("senderName", name)
        return cls(event="new_email", service="gmail", data=data, user_id=user_id)

    @classmethod
    def from_calendar(cls, user_id: str, event_data: Dict[str, Any]) -> "ProactiveEvent":
        return cls(event="event_created", service="calendar", data=dict(event_data), user_id=user_id)

    @classmethod
    def from_hubspot(cls, user_id: str, contact_data: Dict[str, Any]) -> "ProactiveEvent":
        # HubSpot objects nest fields under "properties"; matching reads them flat
        data = dict(contact_data.get("properties") or {})
        data.update({k: v for k, v in contact_data.items() if k != "properties"})
        return cls(event="contact_created", service="hubspot", data=data, user_id=user_id)
