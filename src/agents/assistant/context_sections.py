"""
Context bundle handed to the prompt composer
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from src.config.constants import RECENT_CONTEXT_MAX_CHARS, RECENT_CONTEXT_MESSAGES
from src.services.protocols import InstructionRecord, MessageRecord, TaskRecord


@dataclass
class ContextSection:
    """Everything the model is told about the user's current state"""
    documents: List[Dict[str, Any]] = field(default_factory=list)
    instructions: List[Dict[str, Any]] = field(default_factory=list)
    recent_context: List[Dict[str, Any]] = field(default_factory=list)
    pending_tasks: List[Dict[str, Any]] = field(default_factory=list)
    trigger: Optional[Dict[str, Any]] = None
    summary: Dict[str, Any] = field(default_factory=dict)


def build_context_sections(
    documents: Sequence[Dict[str, Any]],
    instructions: Sequence[InstructionRecord] = (),
    recent_messages: Sequence[MessageRecord] = (),
    pending_tasks: Sequence[TaskRecord] = (),
    trigger: Optional[Dict[str, Any]] = None,
) -> ContextSection:
    """
    Reshape retrieval and store results into a ContextSection.

    Only the first few recent messages are kept and their content is
    truncated. A trigger ({"event", "data"}) marks the request as proactive.
    """
    return ContextSection(
        documents=[
            {
                "source": doc.get("source"),
                "title": doc.get("title"),
                "content": doc.get("content"),
                "metadata": doc.get("doc_metadata"),
                "similarity": doc.get("similarity"),
                "created": doc.get("createdAt"),
            }
            for doc in documents
        ],
        instructions=[
            {
                "instruction": inst.instruction,
                "created": inst.created_at,
                "priority": inst.priority or "normal",
            }
            for inst in instructions
        ],
        recent_context=[
            {
                "role": msg.role,
                "content": msg.content[:RECENT_CONTEXT_MAX_CHARS],
                "created": msg.created_at,
            }
            for msg in list(recent_messages)[:RECENT_CONTEXT_MESSAGES]
        ],
        pending_tasks=[
            {
                "description": task.description,
                "status": task.status,
                "created": task.created_at,
            }
            for task in pending_tasks
        ],
        trigger=(
            {"event": trigger.get("event"), "data": trigger.get("data"), "isProactive": True}
            if trigger and trigger.get("event")
            else None
        ),
        summary={
            "totalDocuments": len(documents),
            "totalInstructions": len(instructions),
            "totalTasks": len(pending_tasks),
            "hasRecentContext": len(recent_messages) > 0,
        },
    )
