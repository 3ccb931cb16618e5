"""
Assistant workflow state
"""

from typing import Any, Dict, List, Optional, Tuple, TypedDict

from src.agents.assistant.context_sections import ContextSection
from src.agents.assistant.intent import Intent
from src.agents.executor.executor import ExecutionLog
from src.agents.tools.models import ToolCall


class AssistantState(TypedDict):
    """State for the query workflow"""
    user_id: str
    query: str
    conversation_history: List[Dict[str, Any]]
    trigger: Optional[Dict[str, Any]]
    intent: Optional[Intent]
    route: str  # meeting_scheduling | contacts_with_notes | contacts | rag
    context_sections: Optional[ContextSection]
    llm_response: Optional[str]
    tool_calls: List[ToolCall]
    rejected_calls: List[Tuple[ToolCall, str]]  # (call, validation reason)
    execution_log: Optional[ExecutionLog]
    instruction_stored: bool
    error: Optional[str]
    final_answer: Optional[str]
