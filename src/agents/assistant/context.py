"""
Assistant context - dependencies passed to workflow nodes
"""

from dataclasses import dataclass

from src.agents.assistant.retrieval import ContextRetriever
from src.agents.executor.executor import ActionExecutor
from src.services.protocols import AgentStore, ChatModel


@dataclass
class AssistantContext:
    """Collaborators shared by every node of one AssistantAgent"""

    llm: ChatModel
    retriever: ContextRetriever
    executor: ActionExecutor
    store: AgentStore
