"""
Action executor - dispatches tool calls and proactive actions as tracked tasks
"""

from src.agents.executor.executor import ActionExecutor, ExecutionLog, ExecutionResult, ToolOutcome

__all__ = ["ActionExecutor", "ExecutionLog", "ExecutionResult", "ToolOutcome"]
