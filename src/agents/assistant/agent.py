"""
Assistant Agent - Main LangGraph workflow

Turns a user query into a reply plus zero or more executed tool calls.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from langgraph.graph import END, StateGraph
from loguru import logger

from src.agents.assistant.context import AssistantContext
from src.agents.assistant.formatter import handle_rag_error, tool_calls_payload
from src.agents.assistant.nodes import (
    classify_node,
    contacts_listing_node,
    contacts_with_notes_listing_node,
    execute_node,
    finalize_node,
    generate_node,
    parse_node,
    retrieve_node,
    store_instruction_node,
    validate_node,
)
from src.agents.assistant.retrieval import ContextRetriever
from src.agents.assistant.routing import ROUTE_CONTACTS, ROUTE_CONTACTS_WITH_NOTES
from src.agents.assistant.state import AssistantState
from src.agents.executor.executor import ActionExecutor
from src.services.protocols import AgentStore, ChatModel


@dataclass
class AssistantReply:
    response: str
    intent: Dict[str, Any]
    tool_calls: List[Dict[str, Any]] = field(default_factory=list)
    execution_log: List[Dict[str, Any]] = field(default_factory=list)
    route: Optional[str] = None


def _route_after_classification(state: AssistantState) -> str:
    route = state.get("route")
    if route == ROUTE_CONTACTS_WITH_NOTES:
        return "contacts_with_notes_listing"
    if route == ROUTE_CONTACTS:
        return "contacts_listing"
    return "retrieve"


def _continue_unless_failed(next_node: str):
    def route(state: AssistantState) -> str:
        return "finalize" if state.get("error") else next_node
    return route


def _route_after_validation(state: AssistantState) -> str:
    intent = state.get("intent")
    if intent is not None and intent.is_conditional_instruction:
        return "store_instruction"
    if state.get("tool_calls"):
        return "execute_calls"
    return "finalize"


class AssistantAgent:
    """
    Query workflow.

    START → classify → [contacts_listing | contacts_with_notes_listing | retrieve → generate → parse_calls]
          → validate_calls → [store_instruction | execute_calls] → finalize → END
    """

    def __init__(
        self,
        llm: ChatModel,
        retriever: ContextRetriever,
        executor: ActionExecutor,
        store: AgentStore,
    ):
        self.ctx = AssistantContext(llm=llm, retriever=retriever, executor=executor, store=store)
        self.workflow = self._build_workflow()
        logger.info("Initialized AssistantAgent")

    def _build_workflow(self):
        """Build the LangGraph workflow."""
        ctx = self.ctx
        workflow = StateGraph(AssistantState)

        async def retrieve(s):
            return await retrieve_node(s, ctx)

        async def generate(s):
            return await generate_node(s, ctx)

        async def execute_calls(s):
            return await execute_node(s, ctx)

        workflow.add_node("classify", lambda s: classify_node(s, ctx))
        workflow.add_node("contacts_listing", lambda s: contacts_listing_node(s, ctx))
        workflow.add_node("contacts_with_notes_listing", lambda s: contacts_with_notes_listing_node(s, ctx))
        workflow.add_node("retrieve", retrieve)
        workflow.add_node("generate", generate)
        workflow.add_node("parse_calls", lambda s: parse_node(s, ctx))
        workflow.add_node("validate_calls", lambda s: validate_node(s, ctx))
        workflow.add_node("store_instruction", lambda s: store_instruction_node(s, ctx))
        workflow.add_node("execute_calls", execute_calls)
        workflow.add_node("finalize", lambda s: finalize_node(s, ctx))

        workflow.set_entry_point("classify")
        workflow.add_conditional_edges(
            "classify",
            _route_after_classification,
            {
                "contacts_listing": "contacts_listing",
                "contacts_with_notes_listing": "contacts_with_notes_listing",
                "retrieve": "retrieve",
            }
        )
        workflow.add_edge("contacts_listing", "validate_calls")
        workflow.add_edge("contacts_with_notes_listing", "validate_calls")
        workflow.add_conditional_edges(
            "retrieve", _continue_unless_failed("generate"), {"generate": "generate", "finalize": "finalize"}
        )
        workflow.add_conditional_edges(
            "generate", _continue_unless_failed("parse_calls"), {"parse_calls": "parse_calls", "finalize": "finalize"}
        )
        workflow.add_edge("parse_calls", "validate_calls")
        workflow.add_conditional_edges(
            "validate_calls",
            _route_after_validation,
            {"store_instruction": "store_instruction", "execute_calls": "execute_calls", "finalize": "finalize"}
        )
        workflow.add_edge("store_instruction", "finalize")
        workflow.add_edge("execute_calls", "finalize")
        workflow.add_edge("finalize", END)

        return workflow.compile()

    async def ask(
        self,
        user_id: str,
        query: str,
        conversation_history: Optional[List[Dict[str, Any]]] = None,
        trigger: Optional[Dict[str, Any]] = None,
    ) -> AssistantReply:
        """Run one query through the workflow; never raises."""
        logger.info(f"\n{'='*80}\nASSISTANT QUERY: {query}\n{'='*80}")

        initial_state: AssistantState = {
            "user_id": user_id,
            "query": query,
            "conversation_history": list(conversation_history or []),
            "trigger": trigger,
            "intent": None,
            "route": "",
            "context_sections": None,
            "llm_response": None,
            "tool_calls": [],
            "rejected_calls": [],
            "execution_log": None,
            "instruction_stored": False,
            "error": None,
            "final_answer": None,
        }

        try:
            final_state = await self.workflow.ainvoke(initial_state)
        except Exception as e:
            logger.error(f"❌ Assistant workflow error: {e}")
            return AssistantReply(response=handle_rag_error(e), intent={"type": "unknown", "confidence": 0.0})

        intent = final_state.get("intent")
        log = final_state.get("execution_log")
        reply = AssistantReply(
            response=final_state.get("final_answer") or "",
            intent=intent.to_dict() if intent else {"type": "unknown", "confidence": 0.0},
            tool_calls=tool_calls_payload(final_state.get("tool_calls") or []),
            execution_log=log.to_list() if log else [],
            route=final_state.get("route"),
        )
        logger.info(f"\nRoute taken: {reply.route}\nAnswer: {reply.response}\n")
        return reply
