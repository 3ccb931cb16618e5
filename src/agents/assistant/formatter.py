"""
Assistant formatter - final reply preparation
"""

import re
from typing import Any, Dict, List, Optional, Tuple

from src.agents.executor.executor import ExecutionLog, ExecutionResult
from src.agents.tools.models import ToolCall
from src.agents.tools.parser import FENCED_JSON_PATTERN, INLINE_CALL_PATTERNS

CONTACT_LISTING_TOOLS = ("get_all_contacts", "get_all_contacts_with_notes")
NO_CONTACTS_REPLY = "You don't have any contacts in HubSpot yet."
CONTACTS_UNAVAILABLE_REPLY = "I'm sorry, I couldn't retrieve your contacts right now. Please try again."


def handle_rag_error(error: Exception) -> str:
    """User-facing message for a failure anywhere in the query workflow"""
    message = str(error).lower()
    if "rate limit" in message:
        return "I'm currently experiencing high demand. Please try your request again in a moment."
    if "context" in message:
        return (
            "I'm having trouble accessing the relevant information right now. "
            "Could you please rephrase your question or be more specific?"
        )
    return (
        "I apologize, but I encountered an error processing your request. "
        "Please try again or contact support if the issue persists."
    )


def strip_tool_json(text: str) -> str:
    """Remove tool-call JSON (fenced or inline) from model text"""
    def drop_fenced(match: re.Match) -> str:
        return "" if '"tool"' in match.group(1) else match.group(0)

    text = FENCED_JSON_PATTERN.sub(drop_fenced, text)
    for pattern in INLINE_CALL_PATTERNS:
        text = pattern.sub("", text)
    return re.sub(r"\n{3,}", "\n\n", text).strip()


def format_contacts_reply(result: ExecutionResult) -> str:
    """Direct reply for a contact listing result"""
    if not result.success:
        return CONTACTS_UNAVAILABLE_REPLY

    data = result.data
    if not data.get("contacts") and not data.get("totalCount"):
        return NO_CONTACTS_REPLY

    if result.tool == "get_all_contacts_with_notes":
        reply = f"Here are your contacts with their notes:\n\n{data.get('contactsSummary') or 'No summary available'}"
    else:
        reply = f"Here are your contacts:\n\n{data.get('contactSummary') or 'No summary available'}"

    if data.get("hasMore"):
        reply += f"\n\n📊 Showing {data.get('displayedCount')} of {data.get('totalCount')} total contacts."
        reply += "\n💡 Let me know if you'd like to see more contacts."
    return reply


def _lead_text(text: str, log: ExecutionLog) -> str:
    availability = log.find("get_available_times")
    if availability is not None:
        return availability.data.get("availabilitySummary") or (
            f"I found {availability.data.get('totalSlots', 0)} available time slots."
        )

    for tool in CONTACT_LISTING_TOOLS:
        listing = log.find(tool)
        if listing is not None:
            return format_contacts_reply(listing)

    meeting = log.find("schedule_meeting_with_contact")
    if meeting is not None:
        return f"I've scheduled the meeting successfully. {meeting.description}."
    return text


def compose_reply(
    response_text: str,
    log: Optional[ExecutionLog] = None,
    rejected: Optional[List[Tuple[ToolCall, str]]] = None,
) -> str:
    """
    Model text (tool JSON removed) followed by completed, failed and
    skipped actions. Some results replace the model text outright:
    availability listings, contact listings and scheduled meetings.
    """
    log = log or ExecutionLog()
    sections = [_lead_text(strip_tool_json(response_text), log)]

    if log.successful():
        sections.append("✅ Completed actions:\n" + "\n".join(f"• {r.description}" for r in log.successful()))
    if log.failed():
        sections.append("❌ Failed actions:\n" + "\n".join(
            f"• {r.description}: {r.error}" for r in log.failed()
        ))
    if rejected:
        sections.append("⚠️ Skipped invalid actions:\n" + "\n".join(
            f"• {call.name}: {reason}" for call, reason in rejected
        ))
    return "\n\n".join(s for s in sections if s)


def follow_up_line(pending_count: int) -> str:
    return f"📋 Follow-up: {pending_count} tasks awaiting completion"


def tool_calls_payload(calls: List[ToolCall]) -> List[Dict[str, Any]]:
    return [call.to_dict() for call in calls]
