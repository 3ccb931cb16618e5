"""
Store-instruction and execute nodes
"""

from loguru import logger

from src.agents.assistant.context import AssistantContext
from src.agents.assistant.state import AssistantState
from src.models.domain import InstructionPriority


def store_instruction_node(state: AssistantState, ctx: AssistantContext) -> AssistantState:
    """Save a conditional instruction instead of acting on it now."""
    state = dict(state)
    ctx.store.create_instruction(state["user_id"], state["query"], priority=InstructionPriority.NORMAL.value)
    state["instruction_stored"] = True
    state["tool_calls"] = []
    logger.info(f"📋 Stored conditional instruction: {state['query']}")
    return state


async def execute_node(state: AssistantState, ctx: AssistantContext) -> AssistantState:
    """Run valid calls one after another, in the order they were found."""
    state = dict(state)
    state["execution_log"] = await ctx.executor.execute_all(
        state["user_id"],
        state.get("tool_calls") or [],
        context={"query": state["query"], "route": state.get("route")},
    )
    return state
