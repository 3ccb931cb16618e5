"""
Application constants

Centralized constants used across the application.
"""

from typing import Dict, Set

# ============================================================================
# Tool Catalog
# ============================================================================

# Single Source of Truth: every tool the assistant may call, with the one-line
# description shown to the language model. Insertion order is the order the
# catalog is rendered in the system prompt.
TOOL_CATALOG: Dict[str, str] = {
    "send_email": "Send email to contact (requires contactName or email address)",
    "create_calendar_event": "Create calendar event",
    "schedule_meeting_with_contact": "Schedule meeting with existing contact",
    "search_contacts": "Search for existing contacts",
    "create_contact": "Create new contact (only with real data)",
    "add_contact_note": "Add note to contact",
    "get_contact_notes": "Get notes for a specific contact",
    "get_all_contacts": "Get all contacts",
    "get_all_contacts_with_notes": "Get all contacts with their notes",
    "get_available_times": "Get available time slots for meetings",
}

KNOWN_TOOLS: Set[str] = set(TOOL_CATALOG)


# ============================================================================
# Pipeline Constants
# ============================================================================

# Intent types that get the creative temperature
CREATIVE_INTENTS: Set[str] = {"creative"}

# Retrieval fan-out sizes
BROAD_SEARCH_LIMIT = 5
SCOPED_SEARCH_LIMIT = 3
RECENT_ACTIVITY_DAYS = 30

# Context assembly
RECENT_CONTEXT_MESSAGES = 5
RECENT_CONTEXT_MAX_CHARS = 200

# Contact listing defaults used by synthesized calls
DEFAULT_CONTACTS_LIMIT = 100
DEFAULT_CONTACTS_WITH_NOTES_LIMIT = 50
NOTES_BATCH_SIZE = 5

APOLOGY_MESSAGE = (
    "I apologize, but I'm having trouble processing your request right now. "
    "Please try again later."
)
