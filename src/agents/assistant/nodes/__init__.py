"""
Assistant workflow nodes
"""

from src.agents.assistant.nodes.actions import execute_node, store_instruction_node
from src.agents.assistant.nodes.classify import classify_node
from src.agents.assistant.nodes.direct import contacts_listing_node, contacts_with_notes_listing_node
from src.agents.assistant.nodes.finalize import finalize_node
from src.agents.assistant.nodes.rag import generate_node, retrieve_node
from src.agents.assistant.nodes.tool_calls import parse_node, validate_node

__all__ = [
    "classify_node",
    "contacts_listing_node",
    "contacts_with_notes_listing_node",
    "retrieve_node",
    "generate_node",
    "parse_node",
    "validate_node",
    "store_instruction_node",
    "execute_node",
    "finalize_node",
]
