"""
Assistant - intent classification, context retrieval, prompt composition

The LangGraph workflow lives in src.agents.assistant.agent and is imported
from there directly.
"""

from src.agents.assistant.context_sections import ContextSection, build_context_sections
from src.agents.assistant.intent import Intent, classify
from src.agents.assistant.prompts import compose
from src.agents.assistant.retrieval import ContextRetriever

__all__ = [
    "ContextSection",
    "build_context_sections",
    "Intent",
    "classify",
    "compose",
    "ContextRetriever",
]
