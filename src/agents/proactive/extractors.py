"""
Parameter extractors for the pattern families that map to an action.

Each extractor reads the event payload (and the instruction text for
optional extras) and returns the action parameters, including "action".
"""

import re
from typing import Any, Callable, Dict

WITH_NOTE = re.compile(r"with\s+(?:a\s+)?note", re.IGNORECASE)
THANK_YOU_FOR = re.compile(r"thank\s+you\s+for\s+(.+?)(?:\.|$)", re.IGNORECASE)


def extract_email_to_contact(instruction: str, data: Dict[str, Any]) -> Dict[str, Any]:
    sender_name = data.get("senderName") or ""
    name_parts = sender_name.split(" ")
    params = {
        "action": "create_contact_from_email",
        "email": data.get("senderEmail"),
        "firstName": name_parts[0] or None,
        "lastName": " ".join(name_parts[1:]) or None,
        "emailSubject": data.get("subject"),
        "emailContent": data.get("snippet") or data.get("content"),
    }
    if WITH_NOTE.search(instruction):
        params["addNote"] = True
        params["noteContent"] = f'Email received: "{data.get("subject")}"\n{data.get("snippet") or ""}'
    return params


def extract_contact_created(instruction: str, data: Dict[str, Any]) -> Dict[str, Any]:
    name = f"{data.get('firstname') or ''} {data.get('lastname') or ''}".strip()
    params = {
        "action": "send_welcome_email",
        "contactEmail": data.get("email"),
        "contactName": name,
    }
    thank_you = THANK_YOU_FOR.search(instruction)
    if thank_you:
        params["emailSubject"] = "Thank you for connecting!"
        params["emailBody"] = (
            f"Dear {name or 'Valued Client'},\n\n"
            f"Thank you for {thank_you.group(1)}.\n\n"
            "I look forward to working with you.\n\nBest regards"
        )
    return params


def extract_calendar_event(instruction: str, data: Dict[str, Any]) -> Dict[str, Any]:
    start = data.get("start") or {}
    end = data.get("end") or {}
    return {
        "action": "notify_attendees",
        "eventTitle": data.get("summary"),
        "eventStart": start.get("dateTime") or start.get("date"),
        "eventEnd": end.get("dateTime") or end.get("date"),
        "attendees": data.get("attendees") or [],
        "description": data.get("description"),
    }


EXTRACTORS: Dict[str, Callable[[str, Dict[str, Any]], Dict[str, Any]]] = {
    "email_not_in_hubspot": extract_email_to_contact,
    "contact_created": extract_contact_created,
    "calendar_event": extract_calendar_event,
}
