"""
Assistant routing - picks the path a query takes through the workflow
"""

import re

from src.agents.assistant.intent import Intent
from src.agents.tools.heuristics import ALL_CONTACTS_NOTES_QUERY_PHRASES

ROUTE_MEETING_SCHEDULING = "meeting_scheduling"
ROUTE_CONTACTS_WITH_NOTES = "contacts_with_notes"
ROUTE_CONTACTS = "contacts"
ROUTE_RAG = "rag"

MEETING_SCHEDULING_PATTERNS = tuple(re.compile(p, re.IGNORECASE) for p in (
    r"schedule\s+(a\s+)?meeting\s+with",
    r"meet\s+with.*\s+(on|at)",
    r"book\s+(a\s+)?meeting\s+with",
))


def is_meeting_scheduling_request(query: str) -> bool:
    if any(pattern.search(query) for pattern in MEETING_SCHEDULING_PATTERNS):
        return True
    lowered = query.lower()
    return "schedule" in lowered and "with" in lowered and ("on" in lowered or "at" in lowered)


def detect_route(query: str, intent: Intent) -> str:
    """
    Route a query. Checked in order: meeting scheduling, contacts with
    notes, plain contact listing, everything else through retrieval.
    """
    if is_meeting_scheduling_request(query):
        return ROUTE_MEETING_SCHEDULING

    lowered = query.lower()
    if any(phrase in lowered for phrase in ALL_CONTACTS_NOTES_QUERY_PHRASES):
        return ROUTE_CONTACTS_WITH_NOTES
    if intent.is_contact_query:
        return ROUTE_CONTACTS
    return ROUTE_RAG
