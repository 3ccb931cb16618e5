"""
Fallback rules for responses that yield no parseable tool call

The model often narrates success ("I've sent the email") without emitting a
call. These rules synthesize narrowly-scoped calls from the original query
so nothing is reported as done without a real action behind it. Each rule
is independent; several may fire for one response.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from loguru import logger

from src.agents.assistant.intent import ALL_CONTACTS_NOTES_PHRASES, Intent
from src.agents.tools.models import ToolCall
from src.config.constants import DEFAULT_CONTACTS_LIMIT, DEFAULT_CONTACTS_WITH_NOTES_LIMIT
from src.config.settings import settings
from src.utils.dates import parse_date

CLAIMED_EXECUTION_PHRASES: Tuple[str, ...] = (
    "I've executed",
    "I have executed",
    "executed the",
    "tool to schedule",
    "meeting has been",
    "successfully scheduled",
    "I've sent",
    "email has been sent",
    "Event created and invitation sent",
    "Here is the email",
    "event has been created",
)

FABRICATED_MEETING_PHRASES: Tuple[str, ...] = ("I've scheduled", "Meeting with", "Date:", "Time:")

# Superset of the intent table's phrases, used by the last rule
ALL_CONTACTS_NOTES_QUERY_PHRASES: Tuple[str, ...] = ALL_CONTACTS_NOTES_PHRASES + (
    "show contacts and their notes",
    "contacts and notes",
    "show all my contacts and their notes",
    "can you show all my contacts and their notes",
)

EMAIL_RECIPIENT = re.compile(
    r"(?:send.*email.*to|email.*to|message.*to)\s+([A-Za-z\s]+?)(?:\s+about|\s+regarding|$)", re.IGNORECASE
)
EMAIL_SUBJECT = re.compile(r"(?:about|regarding)\s+(.+?)(?:\s*$)", re.IGNORECASE)
EMAIL_BODY_PATTERNS = (
    re.compile(r"Dear\s+\w+,[\s\S]*?Best regards", re.IGNORECASE),
    re.compile(r"Subject:.*?\n\n([\s\S]*?)(?:\n\nBest|$)", re.IGNORECASE),
    re.compile(r"Here is the email:\s*\n\n([\s\S]*?)(?:\n\n|$)", re.IGNORECASE),
)
LEADING_SUBJECT_LINE = re.compile(r"^Subject:.*?\n\n", re.IGNORECASE)

AVAILABILITY_DATE_PATTERNS = (
    re.compile(r"(?:on\s+)?(\d{1,2}(?:st|nd|rd|th)?\s+\w+(?:\s+\d{4})?)", re.IGNORECASE),
    re.compile(r"(\d{4}-\d{2}-\d{2})", re.IGNORECASE),
    re.compile(r"(today|tomorrow|this week|next week)", re.IGNORECASE),
)

MEETING_CONTACT = re.compile(
    r"(?:schedule.*meeting.*with|meet.*with|meeting.*with)\s+([A-Za-z\s]+?)(?:\s+on|\s+at|\s+for|$)", re.IGNORECASE
)
MEETING_DATE = re.compile(r"(?:on\s+|for\s+)?(\d{1,2}(?:st|nd|rd|th)?\s+\w+(?:\s+\d{4})?)", re.IGNORECASE)
MEETING_TIME_PATTERNS = (
    re.compile(r"\bat\s+(\d{1,2}(?::\d{2})?\s*(?:am|pm)?)\b", re.IGNORECASE),
    re.compile(r"\b(\d{1,2}(?::\d{2})?\s*(?:am|pm))\b", re.IGNORECASE),
)
FABRICATED_MEETING_CONTACT = re.compile(
    r"(?:schedule.*meeting.*with|meet.*with)\s+([A-Za-z\s]+?)(?:\s+on|\s+at|$)", re.IGNORECASE
)

DEFAULT_EMAIL_SUBJECT = "Follow-up"
DEFAULT_EMAIL_BODY = "Please see the message below."


@dataclass(frozen=True)
class FallbackContext:
    response: str
    query: str
    intent: Intent

    @property
    def query_lower(self) -> str:
        return self.query.lower()

    @property
    def claims_execution(self) -> bool:
        return any(phrase in self.response for phrase in CLAIMED_EXECUTION_PHRASES)


@dataclass(frozen=True)
class FallbackRule:
    """
    A synthesized call for one recognisable failure shape.

    skip_if_present: do not add the call when one with the same tool name
    was already produced by an earlier rule.
    """
    name: str
    tool: str
    applies: Callable[[FallbackContext], bool]
    build: Callable[[FallbackContext], Optional[ToolCall]]
    skip_if_present: bool = False


# ============================================================================
# Query shape checks
# ============================================================================


def is_email_query(query_lower: str) -> bool:
    return "send" in query_lower and ("email" in query_lower or "message" in query_lower)


def is_availability_query(query_lower: str) -> bool:
    return (
        "availability" in query_lower
        or "available" in query_lower
        or ("calendar" in query_lower and ("check" in query_lower or "show" in query_lower))
        or "free time" in query_lower
        or ("schedule" in query_lower and "on" in query_lower)
    )


def is_meeting_scheduling_query(query_lower: str) -> bool:
    return (
        ("schedule" in query_lower and "meeting" in query_lower)
        or "book meeting" in query_lower
        or "set up meeting" in query_lower
    )


def resolve_date_text(text: str) -> str:
    """ISO date for a recognisable date description, the raw text otherwise"""
    resolved = parse_date(text)
    return resolved.isoformat() if resolved else text


def extract_meeting_time(query: str) -> Optional[str]:
    """First "at <time>" or am/pm time in the query, without inner spaces"""
    for pattern in MEETING_TIME_PATTERNS:
        match = pattern.search(query)
        if match:
            return re.sub(r"\s+", "", match.group(1)).lower()
    return None


def extract_email_body(response: str) -> str:
    for pattern in EMAIL_BODY_PATTERNS:
        match = pattern.search(response)
        if match:
            body = match.group(0) if match.lastindex is None else (match.group(1) or match.group(0))
            return LEADING_SUBJECT_LINE.sub("", body).strip() or DEFAULT_EMAIL_BODY
    return DEFAULT_EMAIL_BODY


# ============================================================================
# Builders
# ============================================================================


def _build_get_all_contacts(ctx: FallbackContext) -> ToolCall:
    return ToolCall("get_all_contacts", {"limit": DEFAULT_CONTACTS_LIMIT, "offset": 0})


def _build_contacts_with_notes(ctx: FallbackContext) -> ToolCall:
    return ToolCall("get_all_contacts_with_notes", {
        "limit": DEFAULT_CONTACTS_WITH_NOTES_LIMIT,
        "includeContactsWithoutNotes": "all contacts" in ctx.query_lower,
    })


def _build_email(ctx: FallbackContext) -> Optional[ToolCall]:
    recipient = EMAIL_RECIPIENT.search(ctx.query)
    if not recipient:
        return None
    subject = EMAIL_SUBJECT.search(ctx.query)
    return ToolCall("send_email", {
        "contactName": recipient.group(1).strip(),
        "subject": subject.group(1).strip() if subject else DEFAULT_EMAIL_SUBJECT,
        "body": extract_email_body(ctx.response),
    })


def _build_availability(ctx: FallbackContext) -> ToolCall:
    date_param = ""
    for pattern in AVAILABILITY_DATE_PATTERNS:
        match = pattern.search(ctx.query)
        if match:
            date_param = resolve_date_text(match.group(1))
            break
    return ToolCall("get_available_times", {
        "date": date_param,
        "duration": settings.default_meeting_duration_minutes,
    })


def _build_meeting(ctx: FallbackContext) -> Optional[ToolCall]:
    contact = MEETING_CONTACT.search(ctx.query)
    if not contact:
        return None
    contact_name = contact.group(1).strip()
    parameters = {
        "contactName": contact_name,
        "title": f"Meeting with {contact_name}",
        "description": "Scheduled meeting",
    }

    date_match = MEETING_DATE.search(ctx.query)
    if date_match:
        parameters["date"] = resolve_date_text(date_match.group(1))
    meeting_time = extract_meeting_time(ctx.query)
    if meeting_time:
        parameters["time"] = meeting_time
    return ToolCall("schedule_meeting_with_contact", parameters)


def _build_fabricated_meeting(ctx: FallbackContext) -> Optional[ToolCall]:
    contact = FABRICATED_MEETING_CONTACT.search(ctx.query)
    if not contact:
        return None
    contact_name = contact.group(1).strip()
    return ToolCall("schedule_meeting_with_contact", {
        "contactName": contact_name,
        "title": f"Meeting with {contact_name}",
        "description": "Scheduled meeting",
    })


# ============================================================================
# Rule table (applied in order)
# ============================================================================

FALLBACK_RULES: Tuple[FallbackRule, ...] = (
    FallbackRule(
        "contact_query", "get_all_contacts",
        lambda ctx: ctx.intent.is_contact_query,
        _build_get_all_contacts,
    ),
    FallbackRule(
        "all_contacts_notes_intent", "get_all_contacts_with_notes",
        lambda ctx: ctx.intent.type == "all_contacts_notes",
        _build_contacts_with_notes,
    ),
    FallbackRule(
        "claimed_email", "send_email",
        lambda ctx: ctx.claims_execution and is_email_query(ctx.query_lower),
        _build_email,
    ),
    FallbackRule(
        "claimed_availability", "get_available_times",
        lambda ctx: ctx.claims_execution and is_availability_query(ctx.query_lower),
        _build_availability,
    ),
    FallbackRule(
        "claimed_meeting", "schedule_meeting_with_contact",
        lambda ctx: ctx.claims_execution and is_meeting_scheduling_query(ctx.query_lower),
        _build_meeting,
    ),
    FallbackRule(
        "fabricated_meeting", "schedule_meeting_with_contact",
        lambda ctx: (
            any(phrase in ctx.response for phrase in FABRICATED_MEETING_PHRASES)
            and "schedule" in ctx.query_lower
            and "meeting" in ctx.query_lower
        ),
        _build_fabricated_meeting,
    ),
    FallbackRule(
        "all_contacts_notes_phrase", "get_all_contacts_with_notes",
        lambda ctx: any(phrase in ctx.query_lower for phrase in ALL_CONTACTS_NOTES_QUERY_PHRASES),
        _build_contacts_with_notes,
        skip_if_present=True,
    ),
)


def apply_fallback_rules(response: str, intent: Intent, query: str) -> List[ToolCall]:
    """
    Run every fallback rule against a response that produced no calls.

    Returns:
        Synthesized calls in rule order
    """
    ctx = FallbackContext(response=response, query=query, intent=intent)
    calls: List[ToolCall] = []

    for rule in FALLBACK_RULES:
        if not rule.applies(ctx):
            continue
        if rule.skip_if_present and any(call.name == rule.tool for call in calls):
            continue
        call = rule.build(ctx)
        if call is not None:
            logger.warning(f"🔧 Fallback rule '{rule.name}' synthesized {call.name}")
            calls.append(call)

    return calls
