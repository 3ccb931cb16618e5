"""
System prompt composition for the assistant

Pure functions: context + intent in, prompt text out.
"""

import json
from datetime import date
from typing import Any, Dict, List, Optional

from src.agents.assistant.context_sections import ContextSection
from src.agents.assistant.intent import Intent
from src.config.constants import TOOL_CATALOG

DOCUMENT_SNIPPET_CHARS = 300

POLICY_RULES = """CRITICAL: NEVER GENERATE FAKE CONTACT DATA OR MALFORMED TOOL CALLS
- NEVER create fictional contacts or example contact lists
- NEVER use placeholder names or emails such as [First Name], [Email Address] or anything at example.com
- NEVER use asterisk syntax like *tool_name parameters*; tool calls are JSON only
- ONLY provide contact information after tools have executed successfully
- If asked for contacts, use the appropriate tool and wait for results

FOR MEETING SCHEDULING:
- NEVER say "I've scheduled a meeting" unless you actually emit a tool call
- NEVER provide fake meeting confirmations
- ALWAYS use schedule_meeting_with_contact for meetings with contacts, never create_calendar_event
- Extract date and time from the query; format dates as YYYY-MM-DD and times as HH:MM"""

RESPONSE_RULES = """RESPONSE GUIDELINES:
- Execute tools silently without describing them
- Only execute tools when you have ACTUAL data to work with
- Present real data naturally; never invent information
- Never answer with an example tool call you do not intend to run"""


def _example_tool_call(today: date) -> str:
    example = {
        "tool": "schedule_meeting_with_contact",
        "parameters": {
            "contactName": "Brian Halligan",
            "contactEmail": "brian@hubspot.com",
            "date": f"{today.year}-07-16",
            "time": "12:00",
            "title": "Meeting with Brian Halligan",
            "description": "Scheduled meeting",
        },
    }
    return "```json\n" + json.dumps(example, indent=2) + "\n```"


def render_tool_catalog() -> str:
    """Numbered tool list, one line per tool"""
    return "\n".join(
        f"{i}. {name} - {description}"
        for i, (name, description) in enumerate(TOOL_CATALOG.items(), start=1)
    )


def _render_documents(documents: List[Dict[str, Any]]) -> str:
    lines = []
    for doc in documents:
        content = (doc.get("content") or "").strip().replace("\n", " ")
        if len(content) > DOCUMENT_SNIPPET_CHARS:
            content = content[:DOCUMENT_SNIPPET_CHARS] + "..."
        lines.append(f"- [{doc.get('source') or 'unknown'}] {doc.get('title') or 'Untitled'}: {content}")
    return "\n".join(lines)


def _render_context(sections: ContextSection) -> str:
    parts = []
    if sections.documents:
        parts.append("RELEVANT DOCUMENTS:\n" + _render_documents(sections.documents))
    if sections.instructions:
        parts.append("ONGOING INSTRUCTIONS:\n" + "\n".join(
            f"- ({inst['priority']}) {inst['instruction']}" for inst in sections.instructions
        ))
    if sections.pending_tasks:
        parts.append("PENDING TASKS:\n" + "\n".join(
            f"- {task['description']} [{task['status']}]" for task in sections.pending_tasks
        ))
    if sections.trigger:
        parts.append(
            f"TRIGGER EVENT: {sections.trigger['event']}\n"
            f"TRIGGER DATA: {json.dumps(sections.trigger.get('data'), default=str)}"
        )
    return "\n\n".join(parts)


def compose(sections: ContextSection, intent: Intent, today: Optional[date] = None) -> str:
    """
    Build the system prompt for one request.

    Args:
        sections: Assembled context
        intent: Classified intent (drives the conditional paragraphs)
        today: Date to anchor scheduling (defaults to today)

    Returns:
        Prompt text with the tool catalog, policy rules, current date and context
    """
    today = today or date.today()
    summary = sections.summary or {}

    blocks = [
        "You are an AI assistant for a financial advisor. You have access to context about "
        "clients, emails, calendar events, and HubSpot data.",
        POLICY_RULES,
        "AVAILABLE TOOLS:\n" + render_tool_catalog(),
        f"CURRENT DATE: {today.isoformat()}\n"
        f"When scheduling meetings, ALWAYS use dates in {today.year} or later.",
        "TOOL CALL FORMAT (CRITICAL):\n"
        'ALWAYS emit tool calls as a JSON object with "tool" and "parameters" keys in a json code block:\n\n'
        + _example_tool_call(today),
        RESPONSE_RULES,
    ]

    if intent.is_conditional_instruction:
        blocks.append(
            "CONDITIONAL INSTRUCTION DETECTED:\n"
            'This is a future/conditional instruction ("when X happens, do Y"). '
            "Acknowledge it naturally; it will be stored and applied to future events. "
            "Do not emit tool calls for it now."
        )

    if intent.is_contact_query:
        blocks.append(
            "CONTACT QUERY DETECTED:\n"
            "Use the appropriate get_ tool and present real data only."
        )

    blocks.append(
        "CONTEXT SUMMARY:\n"
        f"- Documents: {summary.get('totalDocuments', 0)}\n"
        f"- Instructions: {summary.get('totalInstructions', 0)}\n"
        f"- Tasks: {summary.get('totalTasks', 0)}\n"
        f"- Recent Context: {summary.get('hasRecentContext', False)}"
    )

    context_text = _render_context(sections)
    if context_text:
        blocks.append(context_text)

    blocks.append(
        "Respond helpfully using real data only and proper tool call syntax. "
        "You must use tools for all actions. Never fake responses."
    )
    return "\n\n".join(blocks)
