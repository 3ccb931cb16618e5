"""
Custom error classes for the application
"""

from typing import List


class AgentError(Exception):
    """Base exception for agent errors"""
    pass


class LLMProviderError(AgentError):
    """A single LLM provider failed to produce a completion"""
    pass


class NoProvidersConfiguredError(LLMProviderError):
    """No LLM provider has an API key"""

    def __init__(self):
        super().__init__("No LLM providers available. Please configure API keys.")


class AllProvidersFailedError(LLMProviderError):
    """Every configured LLM provider failed for one request"""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("All LLM providers failed:\n" + "\n".join(self.errors))


class ToolExecutionError(AgentError):
    """A tool call failed while talking to an external service"""
    pass


class ContactNotFoundError(ToolExecutionError):
    """Contact lookup returned no match"""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Contact "{name}" not found in HubSpot')


class UnknownToolError(ToolExecutionError):
    """No handler is registered for the tool or action name"""
    pass
