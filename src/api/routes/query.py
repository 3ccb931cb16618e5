"""
Query endpoint

Runs one user query through the assistant workflow and returns the reply
together with the tool calls that were executed.
"""

from fastapi import APIRouter, Depends
from loguru import logger

from src.api.dependencies import get_agents, get_user_id
from src.api.models import QueryRequest, QueryResponse
from src.api.services import AgentBundle


router = APIRouter(prefix="/api", tags=["query"])


@router.post("/query", response_model=QueryResponse)
async def run_query(
    request: QueryRequest,
    user_id: str = Depends(get_user_id),
    agents: AgentBundle = Depends(get_agents),
) -> QueryResponse:
    """
    Answer a query, executing any actions it asks for

    Returns:
        QueryResponse with the reply, detected intent, tool calls and execution log
    """
    logger.info(f"Query from user={user_id}: {request.query[:100]}")

    history = [m.model_dump() for m in request.conversation_history]
    reply = await agents.assistant.ask(user_id, request.query, conversation_history=history)

    return QueryResponse(
        response=reply.response,
        intent=reply.intent,
        tool_calls=reply.tool_calls,
        execution_log=reply.execution_log,
    )
