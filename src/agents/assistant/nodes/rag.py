"""
Retrieval and generation nodes
"""

from loguru import logger

from src.agents.assistant.context import AssistantContext
from src.agents.assistant.intent import Intent
from src.agents.assistant.prompts import compose
from src.agents.assistant.state import AssistantState
from src.config.constants import APOLOGY_MESSAGE, CREATIVE_INTENTS
from src.config.settings import settings


def _fail(state: dict, error: Exception) -> dict:
    state["error"] = str(error)
    state["llm_response"] = APOLOGY_MESSAGE
    state["intent"] = Intent(type="unknown", confidence=0.0)
    state["tool_calls"] = []
    return state


async def retrieve_node(state: AssistantState, ctx: AssistantContext) -> AssistantState:
    """Gather documents, instructions, recent messages and pending tasks."""
    state = dict(state)
    try:
        state["context_sections"] = await ctx.retriever.gather_context(
            state["user_id"], state["query"], state["intent"], trigger=state.get("trigger")
        )
    except Exception as e:
        logger.error(f"❌ Context retrieval failed: {e}")
        return _fail(state, e)
    return state


async def generate_node(state: AssistantState, ctx: AssistantContext) -> AssistantState:
    """Call the language model with the composed prompt."""
    state = dict(state)
    intent = state["intent"]
    history = list(state.get("conversation_history") or [])[-settings.history_messages_in_prompt:]

    messages = [{"role": "system", "content": compose(state["context_sections"], intent)}]
    messages.extend({"role": m.get("role", "user"), "content": m.get("content", "")} for m in history)
    messages.append({"role": "user", "content": state["query"]})

    temperature = settings.creative_temperature if intent.type in CREATIVE_INTENTS else settings.default_temperature
    try:
        state["llm_response"] = await ctx.llm.generate_response(messages, temperature=temperature)
    except Exception as e:
        logger.error(f"❌ Response generation failed: {e}")
        return _fail(state, e)
    return state
