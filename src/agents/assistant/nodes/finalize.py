"""
Finalize node - composes the reply and persists the exchange
"""

from datetime import datetime, timedelta

from src.agents.assistant.context import AssistantContext
from src.agents.assistant.formatter import compose_reply, follow_up_line, format_contacts_reply
from src.agents.assistant.routing import ROUTE_CONTACTS, ROUTE_CONTACTS_WITH_NOTES
from src.agents.assistant.state import AssistantState
from src.agents.executor.executor import ExecutionLog

FOLLOW_UP_WINDOW = timedelta(hours=1)
DIRECT_ROUTES = (ROUTE_CONTACTS, ROUTE_CONTACTS_WITH_NOTES)


def finalize_node(state: AssistantState, ctx: AssistantContext) -> AssistantState:
    state = dict(state)
    log = state.get("execution_log") or ExecutionLog()
    user_id = state["user_id"]

    if state.get("error"):
        answer = state.get("llm_response") or ""
    elif state.get("route") in DIRECT_ROUTES and log.results:
        answer = format_contacts_reply(log.results[0])
    else:
        answer = compose_reply(state.get("llm_response") or "", log, state.get("rejected_calls"))
        if state.get("instruction_stored"):
            answer += f'\n\n📋 Saved as an ongoing instruction: "{state["query"]}"'
        pending = ctx.store.count_recent_pending_tasks(user_id, datetime.utcnow() - FOLLOW_UP_WINDOW)
        if pending:
            answer += f"\n\n{follow_up_line(pending)}"

    ctx.store.save_message(user_id, "user", state["query"])
    ctx.store.save_message(user_id, "assistant", answer)

    state["final_answer"] = answer
    return state
