"""
Direct contact listing nodes - synthesize the listing call without the model
"""

from src.agents.assistant.context import AssistantContext
from src.agents.assistant.state import AssistantState
from src.agents.tools.models import ToolCall
from src.config.constants import DEFAULT_CONTACTS_LIMIT, DEFAULT_CONTACTS_WITH_NOTES_LIMIT


def contacts_listing_node(state: AssistantState, ctx: AssistantContext) -> AssistantState:
    state = dict(state)
    state["tool_calls"] = [ToolCall("get_all_contacts", {"limit": DEFAULT_CONTACTS_LIMIT, "offset": 0})]
    return state


def contacts_with_notes_listing_node(state: AssistantState, ctx: AssistantContext) -> AssistantState:
    state = dict(state)
    state["tool_calls"] = [ToolCall("get_all_contacts_with_notes", {
        "limit": DEFAULT_CONTACTS_WITH_NOTES_LIMIT,
        "includeContactsWithoutNotes": "all contacts" in state["query"].lower(),
    })]
    return state
