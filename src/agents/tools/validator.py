"""
Tool call validation

Rejects calls carrying placeholder or hallucinated data and enforces the
per-tool required-field rules. Email bodies get template placeholders
filled in rather than rejected. Unknown tools pass through.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Pattern, Tuple

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from src.agents.tools.models import (
    AddContactNoteParameters,
    ContactListingParameters,
    CreateCalendarEventParameters,
    CreateContactParameters,
    ScheduleMeetingParameters,
    SearchContactsParameters,
    SendEmailParameters,
    ToolCall,
    ToolParameters,
)
from src.config.settings import settings
from src.utils.dates import is_parseable_date

PLACEHOLDER_RECIPIENT_PATTERNS: Tuple[Pattern, ...] = tuple(re.compile(p, re.IGNORECASE) for p in (
    r"\[Email Address\]",
    r"\[First Name\]",
    r"\[Last Name\]",
    r"\[Company Name\]",
    r"placeholder",
    r"example\.com",
))

PLACEHOLDER_RECIPIENT_REASON = "Email recipient contains placeholder values"

CONTACT_LISTING_TOOLS = ("get_all_contacts", "get_all_contacts_with_notes")


@dataclass
class ValidationResult:
    """Outcome of validating one call; `call` is the (possibly repaired) call when valid"""
    valid: bool
    reason: Optional[str] = None
    call: Optional[ToolCall] = None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _has_brackets(value: Optional[str]) -> bool:
    return bool(value) and ("[" in value or "]" in value)


def _body_replacements(now: datetime) -> Tuple[Tuple[Pattern, str], ...]:
    return (
        (re.compile(r"\[Your Name\]", re.IGNORECASE), settings.advisor_signature),
        (re.compile(r"\[topic\]", re.IGNORECASE), "our upcoming meeting"),
        (re.compile(r"\[date\]", re.IGNORECASE), now.strftime("%B %d, %Y")),
        (re.compile(r"\[time\]", re.IGNORECASE), now.strftime("%I:%M %p")),
    )


def fill_body_placeholders(body: str, now: Optional[datetime] = None) -> str:
    """Replace template tokens like [Your Name] in an email body"""
    for pattern, replacement in _body_replacements(now or datetime.now()):
        body = pattern.sub(replacement, body)
    return body


# ============================================================================
# Per-tool rules: (typed parameters) -> rejection reason or None
# ============================================================================


def _check_send_email(params: SendEmailParameters) -> Optional[str]:
    if not params.to and not params.contact_name:
        return "Email requires a recipient (to) or contactName"
    if params.to and "@" not in params.to:
        return "Invalid email address"
    if not (params.subject or "").strip():
        return "Email subject is required"
    if not (params.body or "").strip():
        return "Email body is required"
    return None


def _check_calendar_event(params: CreateCalendarEventParameters) -> Optional[str]:
    if not (params.title or "").strip():
        return "Event title is required"
    if params.start is not None and not is_parseable_date(params.start):
        return "Invalid event start date"
    if params.end is not None and not is_parseable_date(params.end):
        return "Invalid event end date"
    return None


def _check_schedule_meeting(params: ScheduleMeetingParameters) -> Optional[str]:
    if not params.contact_email and not params.contact_name:
        return "Meeting requires contactEmail or contactName"
    if params.contact_email and "@" not in params.contact_email:
        return "Invalid contact email address"
    return None


def _check_add_note(params: AddContactNoteParameters) -> Optional[str]:
    if not (params.contact_id or params.email or params.contact_name):
        return "Note requires contactId, email or contactName"
    if not params.note or not params.note.strip():
        return "Note content is required"
    return None


def _check_search_contacts(params: SearchContactsParameters) -> Optional[str]:
    if not (params.query or params.email or params.name):
        return "Search requires query, email or name"
    return None


def _check_create_contact(params: CreateContactParameters) -> Optional[str]:
    email = params.email or ""
    if "@" not in email:
        return "Contact email is required and must be a valid address"
    if "[" in email or "]" in email or "example.com" in email.lower():
        return "Contact email contains placeholder values"
    if not params.first_name and not params.last_name:
        return "Contact requires firstName or lastName"
    if _has_brackets(params.first_name) or _has_brackets(params.last_name):
        return "Contact name contains placeholder values"
    return None


def _check_contact_listing(params: ContactListingParameters) -> Optional[str]:
    if params.include_properties is not None and not isinstance(params.include_properties, list):
        return "includeProperties must be an array"
    if params.limit is not None and (not _is_number(params.limit) or params.limit <= 0):
        return "limit must be a positive number"
    if params.offset is not None and (not _is_number(params.offset) or params.offset < 0):
        return "offset must be a non-negative number"
    return None


TOOL_RULES: Dict[str, Callable[[Any], Optional[str]]] = {
    "send_email": _check_send_email,
    "create_calendar_event": _check_calendar_event,
    "schedule_meeting_with_contact": _check_schedule_meeting,
    "add_contact_note": _check_add_note,
    "search_contacts": _check_search_contacts,
    "create_contact": _check_create_contact,
    "get_all_contacts": _check_contact_listing,
    "get_all_contacts_with_notes": _check_contact_listing,
}


def _placeholder_recipient(call: ToolCall) -> bool:
    recipient = call.parameters.get("to")
    if not recipient:
        return False
    return any(pattern.search(str(recipient)) for pattern in PLACEHOLDER_RECIPIENT_PATTERNS)


def _repair(call: ToolCall) -> ToolCall:
    if call.name == "send_email" and isinstance(call.parameters.get("body"), str):
        return call.with_parameters(body=fill_body_placeholders(call.parameters["body"]))
    return call


def validate(call: ToolCall) -> ValidationResult:
    """
    Validate one tool call.

    Never raises. The input call is not mutated; a repaired copy is returned
    on the result when the call is valid.
    """
    if not call.is_known:
        logger.warning(f"⚠️  Unknown tool '{call.name}', passing through")
        return ValidationResult(valid=True, call=call)

    try:
        params: ToolParameters = call.typed_parameters()
    except PydanticValidationError as e:
        first = e.errors()[0]
        field_name = ".".join(str(part) for part in first.get("loc", ()))
        return ValidationResult(valid=False, reason=f"Invalid parameter {field_name}: {first.get('msg')}")

    if call.name not in CONTACT_LISTING_TOOLS and _placeholder_recipient(call):
        return ValidationResult(valid=False, reason=PLACEHOLDER_RECIPIENT_REASON)

    rule = TOOL_RULES.get(call.name)
    reason = rule(params) if rule else None
    if reason:
        return ValidationResult(valid=False, reason=reason)

    return ValidationResult(valid=True, call=_repair(call))


def partition(calls: List[ToolCall]) -> Tuple[List[ToolCall], List[Tuple[ToolCall, str]]]:
    """
    Split calls into valid (repaired) calls and rejected (call, reason) pairs.

    Order is preserved in both lists.
    """
    valid: List[ToolCall] = []
    rejected: List[Tuple[ToolCall, str]] = []
    for call in calls:
        result = validate(call)
        if result.valid:
            valid.append(result.call)
        else:
            logger.warning(f"❌ Rejected {call.name}: {result.reason}")
            rejected.append((call, result.reason or "invalid"))
    return valid, rejected


def validate_all(calls: List[ToolCall]) -> List[ToolCall]:
    """Drop invalid calls, logging each rejection; never raises"""
    valid, _rejected = partition(calls)
    return valid
