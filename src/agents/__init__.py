"""
Agent workflows module.
Contains the LangGraph query workflow (assistant), the webhook-driven
proactive agent, tool-call parsing/validation and the action executor.
"""
