"""
Proactive Agent - reacts to webhook events using the user's ongoing instructions

Flow per event:
1. load active instructions (newest first)
2. match them against the event
3. dispatch matches above the confidence threshold, each independently
4. when nothing matched, ask the model for a tool call
5. answer meeting inquiries in incoming email from the calendar
"""

import json
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Dict, List, Optional, Sequence

from loguru import logger

from src.agents.executor.executor import ActionExecutor, ExecutionResult, jsonable
from src.agents.proactive.events import ProactiveEvent
from src.agents.proactive.matcher import InstructionMatch, match_all
from src.agents.tools.models import ToolCall
from src.agents.tools.parser import parse
from src.agents.tools.validator import validate_all
from src.config.settings import settings
from src.services.protocols import AgentStore, CalendarService, ChatModel, GmailService, InstructionRecord

MEETING_INQUIRY_PATTERNS = tuple(re.compile(p, re.IGNORECASE) for p in (
    r"when\s+(?:is|are)\s+(?:our|the)\s+(?:next\s+)?(?:meeting|appointment|call)",
    r"what\s+time\s+(?:is|are)\s+(?:we|our)\s+meeting",
    r"(?:do|did)\s+we\s+have\s+(?:a|any)\s+meeting\s+scheduled",
    r"when\s+(?:do|did)\s+we\s+(?:meet|schedule)",
))

NO_ACTION = "NO_ACTION"


def is_meeting_inquiry(text: str) -> bool:
    return any(pattern.search(text) for pattern in MEETING_INQUIRY_PATTERNS)


@dataclass
class ProactiveReport:
    """What happened for one event"""
    matches: List[InstructionMatch] = field(default_factory=list)
    results: List[ExecutionResult] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    auto_replied: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "matched": len(self.matches),
            "results": [r.to_dict() for r in self.results],
            "skipped": self.skipped,
            "errors": self.errors,
            "autoReplied": self.auto_replied,
        }


class ProactiveAgent:
    """Matches events against ongoing instructions and runs the resulting actions"""

    def __init__(
        self,
        store: AgentStore,
        executor: ActionExecutor,
        gmail: GmailService,
        calendar: CalendarService,
        llm: Optional[ChatModel] = None,
        threshold: Optional[float] = None,
    ):
        self.store = store
        self.executor = executor
        self.gmail = gmail
        self.calendar = calendar
        self.llm = llm
        self.threshold = threshold if threshold is not None else settings.proactive_confidence_threshold

    async def handle_event(self, event: ProactiveEvent) -> ProactiveReport:
        logger.info(f"🤖 Proactive agent activated for {event.event}/{event.service}")
        report = ProactiveReport()

        try:
            instructions = self.store.get_active_instructions(event.user_id)
        except Exception as e:
            logger.error(f"❌ Could not load ongoing instructions: {e}")
            report.errors.append(str(e))
            instructions = []
        logger.info(f"📋 Found {len(instructions)} active instructions")

        report.matches = match_all(event, instructions)
        dispatched = 0
        for match in report.matches:
            if match.confidence <= self.threshold:
                continue
            dispatched += 1
            await self._dispatch(event, match, report)

        if not dispatched and instructions and settings.proactive_llm_fallback:
            await self._dispatch_model_suggestion(event, instructions, report)

        try:
            report.auto_replied = await self.reply_to_meeting_inquiry(event)
        except Exception as e:
            logger.error(f"❌ Contextual auto-reply failed: {e}")
            report.errors.append(str(e))

        return report

    async def _dispatch(self, event: ProactiveEvent, match: InstructionMatch, report: ProactiveReport) -> None:
        params = dict(match.extracted_params)
        action = params.pop("action", None)
        if action is None:
            logger.info(f"⚠️  Instruction matched '{match.pattern}' but no action is wired for it, skipping")
            report.skipped.append(match.instruction.instruction)
            return

        logger.info(f"✅ Executing instruction: {match.instruction.instruction}")
        await self._run(
            event,
            action,
            self.executor.execute_action(
                event.user_id, action, params, context={"event": event.event, "service": event.service}
            ),
            {"instruction": match.instruction.instruction, "action": action, "params": params},
            report,
        )

    async def _dispatch_model_suggestion(
        self,
        event: ProactiveEvent,
        instructions: Sequence[InstructionRecord],
        report: ProactiveReport,
    ) -> None:
        call = await self.analyze_with_llm(event, instructions)
        if call is None:
            return

        logger.info(f"🧠 Model suggested {call.name} for {event.event}")
        await self._run(
            event,
            call.name,
            self.executor.execute(
                event.user_id, call, context={"event": event.event, "service": event.service, "source": "llm"}
            ),
            {"action": call.name, "params": call.parameters, "source": "llm"},
            report,
        )

    async def _run(
        self,
        event: ProactiveEvent,
        action: str,
        execution: Awaitable[ExecutionResult],
        details: Dict[str, Any],
        report: ProactiveReport,
    ) -> None:
        """Await one execution and log its outcome; failures land on the report"""
        try:
            result = await execution
            report.results.append(result)
            if result.success:
                self.store.log_activity(event.user_id, "proactive_action_executed", event.service, jsonable(details))
        except Exception as e:
            self._record_failure(event, action, str(e), report)
            return

        if not result.success:
            self._record_failure(event, action, result.error or "unknown error", report)

    def _record_failure(self, event: ProactiveEvent, action: str, error: str, report: ProactiveReport) -> None:
        logger.error(f"❌ Proactive action {action} failed: {error}")
        report.errors.append(error)
        self.store.log_activity(event.user_id, "proactive_action_failed", event.service, {
            "event": event.event,
            "error": error,
        })

    async def reply_to_meeting_inquiry(self, event: ProactiveEvent, now: Optional[datetime] = None) -> bool:
        """
        Answer "when is our next meeting?" emails from the calendar.

        Returns:
            True when a reply was sent
        """
        if event.service != "gmail" or event.event != "new_email":
            return False

        data = event.data
        if not is_meeting_inquiry(data.get("content") or data.get("snippet") or ""):
            return False

        sender = data.get("senderEmail")
        if not sender:
            return False

        logger.info("📅 Email is asking about meetings, checking calendar")
        meetings = await self.calendar.search_events(event.user_id, sender, time_min=now or datetime.now(), max_results=5)
        if not meetings:
            return False

        next_meeting = meetings[0]
        start = next_meeting.get("start") or {}
        start_value = start.get("dateTime") or start.get("date")
        if not start_value:
            logger.error("❌ Meeting has no valid start date")
            return False

        await self.gmail.send_email(
            event.user_id,
            sender,
            f"Re: {data.get('subject') or ''}",
            _meeting_reply_body(next_meeting, start_value, len(meetings)),
            thread_id=data.get("threadId"),
        )
        self.store.create_notification(
            event.user_id,
            type="auto_response_sent",
            service="gmail",
            title="Auto-Response Sent",
            message=f"Answered meeting inquiry from {data.get('senderName') or sender}",
            data={
                "recipient": sender,
                "meetingInfo": next_meeting.get("summary"),
                "originalEmail": data.get("subject"),
            },
        )
        return True

    async def analyze_with_llm(
        self,
        event: ProactiveEvent,
        instructions: Optional[Sequence[InstructionRecord]] = None,
    ) -> Optional[ToolCall]:
        """
        Ask the model whether the event warrants an action.

        Returns:
            The first valid tool call in the answer, or None for NO_ACTION
        """
        if self.llm is None:
            return None
        if instructions is None:
            instructions = self.store.get_active_instructions(event.user_id)
        if not instructions:
            return None

        prompt = f"""EVENT: {event.event}
EVENT DATA: {json.dumps(event.data, default=str)}

ONGOING INSTRUCTIONS:
{chr(10).join(f"- {i.instruction}" for i in instructions)}

Should I take any proactive action based on this event and the ongoing instructions?
If yes, respond with the appropriate tool call in JSON format.
If no, respond with "{NO_ACTION}"."""

        try:
            response = await self.llm.generate_response(
                [{"role": "user", "content": prompt}], temperature=settings.default_temperature
            )
        except Exception as e:
            logger.error(f"❌ Proactive analysis failed: {e}")
            return None

        if NO_ACTION in response:
            return None
        calls = validate_all(parse(response))
        return calls[0] if calls else None


def _meeting_reply_body(meeting: Dict[str, Any], start_value: str, total: int) -> str:
    start = datetime.fromisoformat(start_value.replace("Z", "+00:00"))
    lines = [
        "Hello,",
        "",
        "I noticed you were asking about our meeting. Here's the information:",
        "",
        f"Meeting: {meeting.get('summary') or 'Meeting'}",
        f"Date: {start.strftime('%B %d, %Y')}",
    ]
    if "T" in start_value:
        lines.append(f"Time: {start.strftime('%I:%M %p')}")
    if meeting.get("location"):
        lines.append(f"Location: {meeting['location']}")
    if meeting.get("description"):
        lines.extend(["", f"Details: {meeting['description']}"])
    if total > 1:
        lines.extend(["", f"We also have {total - 1} other meetings scheduled."])
    lines.extend(["", "Let me know if you need any other information!", "", "Best regards"])
    return "\n".join(lines)
