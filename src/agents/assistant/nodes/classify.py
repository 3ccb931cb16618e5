"""
Classify node - intent plus route
"""

from loguru import logger

from src.agents.assistant.context import AssistantContext
from src.agents.assistant.intent import classify
from src.agents.assistant.routing import detect_route
from src.agents.assistant.state import AssistantState


def classify_node(state: AssistantState, ctx: AssistantContext) -> AssistantState:
    """Classify the query and choose the route."""
    state = dict(state)
    intent = classify(state["query"])
    state["intent"] = intent
    state["route"] = detect_route(state["query"], intent)
    logger.info(f"🎯 Intent: {intent.type} ({intent.confidence:.2f}), route: {state['route']}")
    return state
