"""
Service wiring for the HTTP layer

The Gmail, Calendar and HubSpot clients are provided by the host application
(they own the OAuth tokens). Once they are registered on app.state.services
the agents are built once and cached on app.state.agents.
"""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from src.agents.assistant.agent import AssistantAgent
from src.agents.assistant.retrieval import ContextRetriever
from src.agents.executor.executor import ActionExecutor
from src.agents.proactive.agent import ProactiveAgent
from src.services.protocols import (
    AgentStore,
    CalendarService,
    ChatModel,
    DocumentSearch,
    GmailService,
    HubSpotService,
)


@dataclass
class ServiceBundle:
    """External collaborators injected by the host application"""
    gmail: GmailService
    calendar: CalendarService
    hubspot: HubSpotService
    documents: DocumentSearch
    llm: ChatModel


@dataclass
class AgentBundle:
    assistant: AssistantAgent
    proactive: ProactiveAgent
    executor: ActionExecutor


def build_agents(services: ServiceBundle, store: AgentStore, threshold: Optional[float] = None) -> AgentBundle:
    """
    Build the executor and both agents around one store.

    Side effects of the executor are fed back into the proactive agent, so
    e.g. a contact created from a query can trigger a welcome email.
    """
    executor = ActionExecutor(
        store=store,
        gmail=services.gmail,
        calendar=services.calendar,
        hubspot=services.hubspot,
        documents=services.documents,
    )
    proactive = ProactiveAgent(
        store=store,
        executor=executor,
        gmail=services.gmail,
        calendar=services.calendar,
        llm=services.llm,
        threshold=threshold,
    )
    executor.on_event = proactive.handle_event

    assistant = AssistantAgent(
        llm=services.llm,
        retriever=ContextRetriever(services.documents, store),
        executor=executor,
        store=store,
    )
    logger.info("✅ Agents wired: assistant, proactive, executor")
    return AgentBundle(assistant=assistant, proactive=proactive, executor=executor)
