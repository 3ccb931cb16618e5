"""
Parse and validate nodes
"""

from src.agents.assistant.context import AssistantContext
from src.agents.assistant.state import AssistantState
from src.agents.tools.parser import parse
from src.agents.tools.validator import partition


def parse_node(state: AssistantState, ctx: AssistantContext) -> AssistantState:
    state = dict(state)
    state["tool_calls"] = parse(state.get("llm_response") or "", state["intent"], state["query"])
    return state


def validate_node(state: AssistantState, ctx: AssistantContext) -> AssistantState:
    """Keep valid (repaired) calls; rejected ones are kept for the reply."""
    state = dict(state)
    valid, rejected = partition(state.get("tool_calls") or [])
    state["tool_calls"] = valid
    state["rejected_calls"] = rejected
    return state
