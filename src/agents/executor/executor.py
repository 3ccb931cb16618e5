"""
Action executor

Dispatches validated tool calls and proactive actions to Gmail, Calendar and
HubSpot. Every dispatch is tracked as a task:

    pending -> in_progress -> completed | failed

The task row is written before the external call, so a crash in between
leaves an open task behind (at-least-once, not exactly-once).
"""

import asyncio
import json
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Awaitable, Callable, Dict, List, Optional

from loguru import logger

from src.agents.executor.formatting import (
    contact_email,
    contact_name,
    flatten_contact,
    flatten_note,
    format_availability,
    format_contact_notes,
    format_contacts,
    format_contacts_with_notes,
)
from src.agents.proactive.events import ProactiveEvent
from src.agents.tools.models import ToolCall
from src.agents.tools.validator import validate
from src.config.constants import DEFAULT_CONTACTS_LIMIT, DEFAULT_CONTACTS_WITH_NOTES_LIMIT, NOTES_BATCH_SIZE
from src.config.settings import settings
from src.models.domain import TaskStatus
from src.services.protocols import AgentStore, CalendarService, DocumentSearch, GmailService, HubSpotService
from src.utils.dates import event_time_value, parse_date, parse_iso_datetime, parse_natural_date, parse_time
from src.utils.errors import ContactNotFoundError, ToolExecutionError, UnknownToolError

DEFAULT_MEETING_TIME = time(14, 0)

EventSink = Callable[[ProactiveEvent], Awaitable[Any]]


@dataclass
class ToolOutcome:
    """What a handler hands back: a one-line description plus result data"""
    description: str
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ExecutionResult:
    tool: str
    success: bool
    description: str
    error: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    task_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tool": self.tool,
            "success": self.success,
            "description": self.description,
            "error": self.error,
            "data": self.data,
            "taskId": self.task_id,
        }


@dataclass
class ExecutionLog:
    results: List[ExecutionResult] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failure_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

    def successful(self) -> List[ExecutionResult]:
        return [r for r in self.results if r.success]

    def failed(self) -> List[ExecutionResult]:
        return [r for r in self.results if not r.success]

    def find(self, tool: str) -> Optional[ExecutionResult]:
        """First successful result for a tool"""
        return next((r for r in self.results if r.tool == tool and r.success), None)

    def to_list(self) -> List[Dict[str, Any]]:
        return [r.to_dict() for r in self.results]


def jsonable(value: Any) -> Any:
    return json.loads(json.dumps(value, default=str))


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _to_datetime(value: Any) -> Optional[datetime]:
    value = event_time_value(value)
    parsed = parse_iso_datetime(value)
    if parsed is not None:
        return parsed
    return parse_natural_date(value) if isinstance(value, str) else None


def _attendee_emails(attendees: Any) -> List[str]:
    if not attendees:
        return []
    if isinstance(attendees, str):
        attendees = attendees.split(",")
    emails = []
    for attendee in attendees:
        email = attendee.get("email") if isinstance(attendee, dict) else attendee
        if isinstance(email, str) and "@" in email:
            emails.append(email.strip())
    return emails


def _event_payload(
    title: str,
    description: Optional[str],
    start: datetime,
    end: datetime,
    attendees: List[Dict[str, Any]],
    location: Optional[str] = None,
) -> Dict[str, Any]:
    payload = {
        "summary": title,
        "description": description or "",
        "start": {"dateTime": start.isoformat(), "timeZone": settings.default_timezone},
        "end": {"dateTime": end.isoformat(), "timeZone": settings.default_timezone},
        "attendees": attendees,
    }
    if location:
        payload["location"] = location
    return payload


def resolve_meeting_start(date_text: Optional[str], time_text: Optional[str], now: Optional[datetime] = None) -> datetime:
    """Date/time of a meeting request; tomorrow at 14:00 when nothing resolves"""
    now = now or datetime.now()
    if date_text:
        resolved = parse_natural_date(date_text, time_text, now=now)
        if resolved is not None:
            return resolved
        logger.warning(f"⚠️  Could not parse meeting date '{date_text}', defaulting to tomorrow")
    tomorrow = now.date() + timedelta(days=1)
    return datetime.combine(tomorrow, parse_time(time_text) or DEFAULT_MEETING_TIME)


class ActionExecutor:
    """
    Runs tool calls and proactive actions against the external services.

    Calls from one response are executed one after another in the order
    they were found; later calls may rely on what earlier ones created.
    """

    def __init__(
        self,
        store: AgentStore,
        gmail: GmailService,
        calendar: CalendarService,
        hubspot: HubSpotService,
        documents: Optional[DocumentSearch] = None,
        on_event: Optional[EventSink] = None,
    ):
        self.store = store
        self.gmail = gmail
        self.calendar = calendar
        self.hubspot = hubspot
        self.documents = documents
        self.on_event = on_event

        self.tool_handlers: Dict[str, Callable[[str, ToolCall], Awaitable[ToolOutcome]]] = {
            "send_email": self._send_email,
            "create_calendar_event": self._create_calendar_event,
            "schedule_meeting_with_contact": self._schedule_meeting_with_contact,
            "search_contacts": self._search_contacts,
            "create_contact": self._create_contact,
            "add_contact_note": self._add_contact_note,
            "get_contact_notes": self._get_contact_notes,
            "get_all_contacts": self._get_all_contacts,
            "get_all_contacts_with_notes": self._get_all_contacts_with_notes,
            "get_available_times": self._get_available_times,
        }
        self.action_handlers: Dict[str, Callable[[str, Dict[str, Any]], Awaitable[ToolOutcome]]] = {
            "create_contact_from_email": self._create_contact_from_email,
            "send_welcome_email": self._send_welcome_email,
            "notify_attendees": self._notify_attendees,
        }

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def execute(self, user_id: str, call: ToolCall, context: Optional[Dict[str, Any]] = None) -> ExecutionResult:
        """
        Validate and run one tool call.

        A call that fails validation is refused without creating a task.
        Handler errors never propagate; they mark the task failed.
        """
        verdict = validate(call)
        if not verdict.valid:
            logger.warning(f"❌ Refusing {call.name}: {verdict.reason}")
            return ExecutionResult(
                tool=call.name,
                success=False,
                description=f"Invalid parameters for tool {call.name}",
                error=verdict.reason,
            )

        call = verdict.call
        handler = self.tool_handlers.get(call.name)

        async def run() -> ToolOutcome:
            if handler is None:
                raise UnknownToolError(f"Unknown tool: {call.name}")
            return await handler(user_id, call)

        return await self._tracked(user_id, call.name, call.parameters, context, run)

    async def execute_all(
        self,
        user_id: str,
        calls: List[ToolCall],
        context: Optional[Dict[str, Any]] = None,
    ) -> ExecutionLog:
        """Run calls sequentially in order; a failure does not stop the rest"""
        log = ExecutionLog()
        for call in calls:
            log.results.append(await self.execute(user_id, call, context))
        logger.info(f"✅ Executed {len(calls)} call(s): {log.success_count} succeeded, {log.failure_count} failed")
        return log

    async def execute_action(
        self,
        user_id: str,
        action: str,
        params: Dict[str, Any],
        context: Optional[Dict[str, Any]] = None,
    ) -> ExecutionResult:
        """Run a proactive action produced by the instruction matcher"""
        handler = self.action_handlers.get(action)

        async def run() -> ToolOutcome:
            if handler is None:
                raise UnknownToolError(f"Unknown proactive action: {action}")
            return await handler(user_id, params)

        return await self._tracked(user_id, action, params, context, run)

    async def _tracked(
        self,
        user_id: str,
        name: str,
        params: Dict[str, Any],
        context: Optional[Dict[str, Any]],
        run: Callable[[], Awaitable[ToolOutcome]],
    ) -> ExecutionResult:
        task = self.store.create_task(
            user_id,
            f"Execute {name}",
            context=jsonable({"tool": name, "parameters": params, "context": context or {}}),
        )
        self.store.update_task_status(user_id, task.id, TaskStatus.IN_PROGRESS.value)
        logger.info(f"🤖 Task {task.id} in progress: {name}")

        try:
            outcome = await run()
        except Exception as e:
            logger.error(f"❌ Task {task.id} failed ({name}): {e}")
            self.store.update_task_status(user_id, task.id, TaskStatus.FAILED.value, result=str(e))
            return ExecutionResult(
                tool=name,
                success=False,
                description=f"Failed to execute {name}",
                error=str(e),
                task_id=task.id,
            )

        self.store.update_task_status(
            user_id, task.id, TaskStatus.COMPLETED.value, result=json.dumps(outcome.data, default=str)
        )
        logger.info(f"✅ Task {task.id} completed: {outcome.description}")
        return ExecutionResult(
            tool=name,
            success=True,
            description=outcome.description,
            data=outcome.data,
            task_id=task.id,
        )

    async def _emit(self, user_id: str, event: str, service: str, data: Dict[str, Any]) -> None:
        if self.on_event is None:
            return
        try:
            await self.on_event(ProactiveEvent(event=event, service=service, data=data, user_id=user_id))
        except Exception as e:
            # The action itself already succeeded
            logger.error(f"❌ Event hook failed for {event}/{service}: {e}")

    # ------------------------------------------------------------------
    # Contact lookup
    # ------------------------------------------------------------------

    async def _find_contact(self, user_id: str, query: str) -> Optional[Dict[str, Any]]:
        matches = await self.hubspot.search_contacts(user_id, query)
        return matches[0] if matches else None

    async def _require_contact(self, user_id: str, query: str) -> Dict[str, Any]:
        contact = await self._find_contact(user_id, query)
        if contact is None:
            raise ContactNotFoundError(query)
        return contact

    async def _resolve_contact(
        self,
        user_id: str,
        contact_id: Optional[str],
        email: Optional[str],
        name: Optional[str],
    ) -> Dict[str, Any]:
        if contact_id:
            return {"id": contact_id, "properties": {"email": email}}
        query = email or name
        if not query:
            raise ToolExecutionError("Missing contact identifier")
        return await self._require_contact(user_id, query)

    # ------------------------------------------------------------------
    # Tool handlers
    # ------------------------------------------------------------------

    async def _send_email(self, user_id: str, call: ToolCall) -> ToolOutcome:
        params = call.typed_parameters()
        to = params.to
        if not to:
            contact = await self._require_contact(user_id, params.contact_name)
            to = contact_email(contact)
            if not to:
                raise ToolExecutionError(f'Contact "{params.contact_name}" found but has no email address')
        if "@" not in to:
            raise ToolExecutionError(f'Invalid email format "{to}"')

        sent = await self.gmail.send_email(user_id, to, params.subject, params.body, cc=params.cc, bcc=params.bcc)
        await self._emit(user_id, "email_sent", "gmail", {
            "to": to,
            "contactName": params.contact_name,
            "subject": params.subject,
            "messageId": sent.get("id"),
        })

        recipient = f"{params.contact_name} ({to})" if params.contact_name else to
        return ToolOutcome(f"Email sent to {recipient}", {"messageId": sent.get("id"), "to": to, "subject": params.subject})

    async def _create_calendar_event(self, user_id: str, call: ToolCall) -> ToolOutcome:
        params = call.typed_parameters()
        title = params.title or params.summary

        start = _to_datetime(params.start) if params.start else None
        if start is None and params.date:
            start = parse_natural_date(params.date, params.time)
        if start is None:
            raise ToolExecutionError(f"Could not determine a start time for event: {title}")
        end = _to_datetime(params.end) if params.end else None
        if end is None:
            end = start + timedelta(minutes=settings.default_meeting_duration_minutes)

        attendees = [{"email": email} for email in _attendee_emails(params.attendees)]
        payload = _event_payload(title, params.description, start, end, attendees, params.location)
        event = await self.calendar.create_event(user_id, payload)
        await self._emit(user_id, "event_created", "calendar", {**payload, **event})

        return ToolOutcome(f"Calendar event created: {title}", {
            "eventId": event.get("id"),
            "start": start.isoformat(),
            "end": end.isoformat(),
        })

    async def _schedule_meeting_with_contact(self, user_id: str, call: ToolCall) -> ToolOutcome:
        params = call.typed_parameters()

        if params.contact_email:
            contact = await self._find_contact(user_id, params.contact_email)
            email = params.contact_email
            name = params.contact_name or (contact_name(contact) if contact else "") or email
        else:
            contact = await self._require_contact(user_id, params.contact_name)
            email = contact_email(contact)
            if not email:
                raise ToolExecutionError(f'Contact "{params.contact_name}" found but has no email address')
            name = contact_name(contact) or params.contact_name

        start = resolve_meeting_start(params.date, params.time)
        end = start + timedelta(minutes=_as_int(params.duration, settings.default_meeting_duration_minutes))
        title = params.title or f"Meeting with {name}"
        when = start.strftime("%B %d, %Y at %I:%M %p")

        payload = _event_payload(
            title,
            params.description or f"Meeting with {name}",
            start,
            end,
            [{"email": email, "displayName": name}],
        )
        event = await self.calendar.create_event(user_id, payload)

        if contact and contact.get("id"):
            try:
                await self.hubspot.add_note(user_id, contact["id"], f"Meeting scheduled: {title} on {when}")
            except Exception as e:
                logger.warning(f"⚠️  Could not add meeting note for {name}: {e}")

        await self._emit(user_id, "meeting_scheduled", "calendar", {**payload, **event, "contactName": name})

        return ToolOutcome(f"Meeting scheduled with {name} for {when}", {
            "eventId": event.get("id"),
            "contactName": name,
            "contactEmail": email,
            "start": start.isoformat(),
            "end": end.isoformat(),
        })

    async def _search_contacts(self, user_id: str, call: ToolCall) -> ToolOutcome:
        params = call.typed_parameters()
        query = params.query or params.email or params.name

        contacts = await self.hubspot.search_contacts(user_id, query)
        references: List[Dict[str, Any]] = []
        if self.documents is not None:
            references = await self.documents.search_similar_documents(user_id, query, 5)

        return ToolOutcome(
            f"Found {len(contacts)} HubSpot contacts and {len(references)} local references",
            {"contacts": [flatten_contact(c) for c in contacts], "references": references},
        )

    async def _create_contact(self, user_id: str, call: ToolCall) -> ToolOutcome:
        params = call.typed_parameters()
        contact_data = {
            key: value
            for key, value in {
                "email": params.email,
                "firstname": params.first_name,
                "lastname": params.last_name,
                "company": params.company,
                "phone": params.phone,
            }.items()
            if value
        }
        contact = await self.hubspot.create_contact(user_id, contact_data)
        if params.notes and contact.get("id"):
            await self.hubspot.add_note(user_id, contact["id"], params.notes)

        await self._emit(user_id, "contact_created", "hubspot", {**contact_data, "id": contact.get("id")})
        full_name = f"{params.first_name or ''} {params.last_name or ''}".strip()
        return ToolOutcome(f"Contact created: {full_name}", {"contactId": contact.get("id"), **contact_data})

    async def _add_contact_note(self, user_id: str, call: ToolCall) -> ToolOutcome:
        params = call.typed_parameters()
        contact = await self._resolve_contact(user_id, params.contact_id, params.email, params.contact_name)
        note = await self.hubspot.add_note(user_id, contact["id"], params.note)
        await self._emit(user_id, "note_added", "hubspot", {"contactId": contact["id"], "note": params.note})
        return ToolOutcome("Note added to contact", {"contactId": contact["id"], "noteId": note.get("id")})

    async def _get_contact_notes(self, user_id: str, call: ToolCall) -> ToolOutcome:
        params = call.typed_parameters()
        contact = await self._resolve_contact(user_id, params.contact_id, params.email, params.contact_name)
        notes = [flatten_note(n) for n in await self.hubspot.get_contact_notes(user_id, contact["id"])]
        details = flatten_contact(contact)
        return ToolOutcome(
            f"Retrieved {len(notes)} notes for {details['name'] or details['email'] or contact['id']}",
            {"contact": details, "notes": notes, "contactSummary": format_contact_notes(details, notes)},
        )

    async def _get_all_contacts(self, user_id: str, call: ToolCall) -> ToolOutcome:
        params = call.typed_parameters()
        page = await self.hubspot.get_contacts(
            user_id,
            limit=_as_int(params.limit, DEFAULT_CONTACTS_LIMIT),
            offset=_as_int(params.offset, 0),
            properties=params.include_properties,
        )
        contacts = [flatten_contact(c) for c in page.get("contacts", [])]
        total = page.get("total", len(contacts))

        description = f"Retrieved {len(contacts)} contacts from HubSpot"
        if total > len(contacts):
            description += f" ({total} total contacts available)"
        return ToolOutcome(description, {
            "contacts": contacts,
            "contactSummary": format_contacts(contacts),
            "totalCount": total,
            "hasMore": bool(page.get("hasMore")),
            "displayedCount": len(contacts),
        })

    async def _notes_for(self, user_id: str, contact: Dict[str, Any]) -> List[Dict[str, Any]]:
        try:
            return [flatten_note(n) for n in await self.hubspot.get_contact_notes(user_id, contact["id"])]
        except Exception as e:
            logger.warning(f"⚠️  Failed to retrieve notes for contact {contact.get('id')}: {e}")
            return []

    async def _get_all_contacts_with_notes(self, user_id: str, call: ToolCall) -> ToolOutcome:
        params = call.typed_parameters()
        include_without_notes = bool(params.include_contacts_without_notes)
        page = await self.hubspot.get_contacts(
            user_id,
            limit=_as_int(params.limit, DEFAULT_CONTACTS_WITH_NOTES_LIMIT),
            offset=_as_int(params.offset, 0),
            properties=params.include_properties,
        )
        contacts = page.get("contacts", [])

        with_notes: List[Dict[str, Any]] = []
        without_notes: List[Dict[str, Any]] = []
        for start in range(0, len(contacts), NOTES_BATCH_SIZE):
            batch = contacts[start:start + NOTES_BATCH_SIZE]
            batch_notes = await asyncio.gather(*(self._notes_for(user_id, c) for c in batch))
            for contact, notes in zip(batch, batch_notes):
                entry = {**flatten_contact(contact), "notes": notes}
                (with_notes if notes else without_notes).append(entry)

        listed = with_notes + (without_notes if include_without_notes else [])
        notes_count = sum(len(c["notes"]) for c in with_notes)
        return ToolOutcome(f"Retrieved {len(contacts)} contacts with {notes_count} total notes", {
            "contacts": listed,
            "contactsSummary": format_contacts_with_notes(with_notes, without_notes, len(contacts), include_without_notes),
            "totalCount": page.get("total", len(contacts)),
            "hasMore": bool(page.get("hasMore")),
            "displayedCount": len(listed),
            "notesCount": notes_count,
        })

    async def _get_available_times(self, user_id: str, call: ToolCall) -> ToolOutcome:
        params = call.typed_parameters()
        duration = _as_int(params.duration, settings.default_meeting_duration_minutes)
        target: Optional[date] = parse_date(params.date) if params.date else None

        slots = await self.calendar.get_available_time_slots(user_id, duration)
        if target is not None:
            slots = [
                slot for slot in slots
                if (parse_iso_datetime(slot.get("start")) or datetime.min).date() == target
            ]
        if not slots:
            await self._emit(user_id, "no_availability_found", "calendar", {"date": params.date, "duration": duration})

        suffix = f" for {params.date}" if target else ""
        return ToolOutcome(f"Found {len(slots)} available time slots{suffix}", {
            "availableSlots": slots,
            "availabilitySummary": format_availability(slots, target, params.date),
            "requestedDate": params.date,
            "totalSlots": len(slots),
        })

    # ------------------------------------------------------------------
    # Proactive actions
    # ------------------------------------------------------------------

    async def _create_contact_from_email(self, user_id: str, params: Dict[str, Any]) -> ToolOutcome:
        email = params.get("email")
        if not email:
            raise ToolExecutionError("Sender email is missing")

        existing = await self.hubspot.search_contacts(user_id, email)
        if existing:
            logger.info(f"📋 Contact {email} already exists, skipping creation")
            return ToolOutcome(f"Contact {email} already exists", {"contactId": existing[0].get("id"), "skipped": True})

        contact = await self.hubspot.create_contact(user_id, {
            "email": email,
            "firstname": params.get("firstName"),
            "lastname": params.get("lastName"),
        })
        if params.get("addNote") and contact.get("id"):
            await self.hubspot.add_note(user_id, contact["id"], params.get("noteContent") or "")

        name = f"{params.get('firstName') or ''} {params.get('lastName') or ''}".strip()
        self.store.create_notification(
            user_id,
            type="contact_created",
            service="hubspot",
            title="Contact Auto-Created",
            message=f"Created contact {params.get('firstName') or email} from email",
            data={
                "contactId": contact.get("id"),
                "email": email,
                "name": name,
                "source": "proactive_agent",
                "triggerEmail": params.get("emailSubject"),
            },
        )
        return ToolOutcome(f"Contact created from email: {name or email}", {"contactId": contact.get("id")})

    async def _send_welcome_email(self, user_id: str, params: Dict[str, Any]) -> ToolOutcome:
        email = params.get("contactEmail")
        if not email:
            raise ToolExecutionError("Contact email is missing")
        name = params.get("contactName") or ""
        subject = params.get("emailSubject") or "Welcome!"
        body = params.get("emailBody") or (
            f"Dear {name},\n\nThank you for connecting with us. We're excited to work with you!\n\nBest regards"
        )

        await self.gmail.send_email(user_id, email, subject, body)
        self.store.create_notification(
            user_id,
            type="email_sent",
            service="gmail",
            title="Welcome Email Sent",
            message=f"Sent welcome email to {name} ({email})",
            data={"recipient": email, "subject": subject},
        )
        return ToolOutcome(f"Welcome email sent to {email}", {"recipient": email, "subject": subject})

    async def _notify_attendees(self, user_id: str, params: Dict[str, Any]) -> ToolOutcome:
        title = params.get("eventTitle") or "Meeting"
        attendees = params.get("attendees") or []
        start = parse_iso_datetime(params.get("eventStart"))
        when = start.strftime("%B %d, %Y at %I:%M %p") if start else (params.get("eventStart") or "TBD")
        details = f"\nDetails: {params['description']}" if params.get("description") else ""

        notified = []
        for attendee in attendees:
            email = attendee.get("email")
            if not email or email == "self" or attendee.get("self"):
                continue
            body = (
                f"Hello {attendee.get('displayName') or email},\n\n"
                "This is a reminder about our upcoming meeting:\n\n"
                f"Title: {title}\nWhen: {when}\n{details}\n\n"
                "Looking forward to meeting with you!\n\nBest regards"
            )
            await self.gmail.send_email(user_id, email, f"Meeting Reminder: {title}", body)
            notified.append(email)

        self.store.create_notification(
            user_id,
            type="meeting_notifications_sent",
            service="calendar",
            title="Meeting Notifications Sent",
            message=f'Sent notifications to {len(notified)} attendees for "{title}"',
            data={"eventTitle": title, "attendeeCount": len(notified)},
        )
        return ToolOutcome(f"Notified {len(notified)} attendees of {title}", {"notified": notified})
