"""
LLM message and response utilities.

Converts the pipeline's plain {role, content} message dicts into LangChain
messages and pulls the text back out of whatever the chat model returned.
"""

import json
from typing import Any, Dict, List, Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from loguru import logger


_ROLE_TO_MESSAGE = {
    "system": SystemMessage,
    "user": HumanMessage,
    "human": HumanMessage,
    "assistant": AIMessage,
    "ai": AIMessage,
}


def to_langchain_messages(messages: Sequence[Dict[str, Any]]) -> List[BaseMessage]:
    """
    Convert role/content dicts into LangChain messages.

    Non-string content is JSON-encoded; unknown roles are sent as user turns.

    Args:
        messages: Ordered messages, most recent last

    Returns:
        LangChain message list in the same order
    """
    converted: List[BaseMessage] = []
    for message in messages:
        role = str(message.get("role", "user")).lower()
        content = message.get("content", "")
        if not isinstance(content, str):
            content = json.dumps(content)

        message_cls = _ROLE_TO_MESSAGE.get(role)
        if message_cls is None:
            logger.debug(f"Unknown message role '{role}', sending as user message")
            message_cls = HumanMessage
        converted.append(message_cls(content=content))
    return converted


def extract_text_from_response(response: Any) -> str:
    """
    Extract text content from an LLM response.

    Handles plain strings, AIMessage objects and structured content blocks
    (lists of {'type': 'text', 'text': ...} dicts); reasoning blocks are ignored.

    Args:
        response: LLM response (AIMessage, str, or list of blocks)

    Returns:
        Extracted text content as string ("" when nothing usable was returned)
    """
    content = response.content if hasattr(response, "content") else response

    if not content:
        return ""

    if isinstance(content, str):
        return content

    if isinstance(content, list):
        text_parts = []
        for block in content:
            if isinstance(block, str):
                text_parts.append(block)
            elif isinstance(block, dict) and "text" in block and block.get("type") != "reasoning":
                text_parts.append(block["text"])

        result = "".join(text_parts)
        if not result:
            logger.warning(f"No text blocks found in structured response: {str(content)[:200]}")
        return result

    return str(content)
