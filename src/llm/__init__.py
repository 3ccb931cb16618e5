"""
LLM layer - Multi-provider client and response utilities
"""

from src.llm.client import LLMClient, clamp_temperature, create_chat_model
from src.llm.response_utils import extract_text_from_response, to_langchain_messages

__all__ = [
    "LLMClient",
    "clamp_temperature",
    "create_chat_model",
    "extract_text_from_response",
    "to_langchain_messages",
]
