"""
Tool calls - models, response parsing, fallback rules and validation
"""

from src.agents.tools.models import ToolCall, tool_call_from_json
from src.agents.tools.parser import parse
from src.agents.tools.validator import ValidationResult, partition, validate, validate_all

__all__ = [
    "ToolCall",
    "tool_call_from_json",
    "parse",
    "ValidationResult",
    "validate",
    "validate_all",
    "partition",
]
