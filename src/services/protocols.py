"""
Interfaces for the external services the assistant talks to.

Concrete Gmail, Calendar and HubSpot clients live outside this package; the
agents only depend on these protocols. Payload shapes follow the upstream
APIs:

- contact: {"id": str, "properties": {"firstname", "lastname", "email", "phone", "company"}}
- note: {"id": str, "properties": {"hs_note_body", "createdate"}}
- calendar event: {"id", "summary", "start": {"dateTime"|"date"}, "end": {...}, "attendees": [{"email", "displayName"}]}
- time slot: {"start": iso8601, "end": iso8601}
- document hit: {"content", "documentId", "title", "source", "doc_metadata", "createdAt", "sourceId", "similarity"}
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable


# ============================================================================
# Store records
# ============================================================================


@dataclass
class InstructionRecord:
    """Detached view of an OngoingInstruction row"""
    id: int
    user_id: str
    instruction: str
    is_active: bool = True
    priority: str = "normal"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class TaskRecord:
    """Detached view of a Task row"""
    id: int
    user_id: str
    description: str
    status: str
    context: Dict[str, Any] = field(default_factory=dict)
    result: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class MessageRecord:
    """Detached view of a Message row"""
    role: str
    content: str
    created_at: Optional[datetime] = None


# ============================================================================
# Collaborators
# ============================================================================


@runtime_checkable
class DocumentSearch(Protocol):
    async def search_similar_documents(
        self,
        user_id: str,
        query: str,
        limit: int = 5,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """filters may hold "source" and "dateRange" ({"start": datetime, "end": datetime})"""
        ...


@runtime_checkable
class GmailService(Protocol):
    async def send_email(
        self,
        user_id: str,
        to: str,
        subject: str,
        body: str,
        cc: Optional[str] = None,
        bcc: Optional[str] = None,
        thread_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        ...


@runtime_checkable
class CalendarService(Protocol):
    async def create_event(self, user_id: str, event_data: Dict[str, Any]) -> Dict[str, Any]:
        ...

    async def search_events(
        self,
        user_id: str,
        query: str,
        time_min: Optional[datetime] = None,
        max_results: int = 5,
    ) -> List[Dict[str, Any]]:
        ...

    async def get_available_time_slots(self, user_id: str, duration_minutes: int = 60) -> List[Dict[str, Any]]:
        ...


@runtime_checkable
class HubSpotService(Protocol):
    async def search_contacts(self, user_id: str, query: str) -> List[Dict[str, Any]]:
        ...

    async def create_contact(self, user_id: str, contact_data: Dict[str, Any]) -> Dict[str, Any]:
        ...

    async def add_note(self, user_id: str, contact_id: str, note: str) -> Dict[str, Any]:
        ...

    async def get_contacts(
        self,
        user_id: str,
        limit: int = 100,
        offset: int = 0,
        properties: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """Returns {"contacts": [...], "total": int, "hasMore": bool}"""
        ...

    async def get_contact_notes(self, user_id: str, contact_id: str) -> List[Dict[str, Any]]:
        ...


@runtime_checkable
class ChatModel(Protocol):
    async def generate_response(self, messages: Sequence[Dict[str, Any]], temperature: float = 0.7) -> str:
        ...


@runtime_checkable
class AgentStore(Protocol):
    """Persistence for instructions, tasks, notifications, activity and messages"""

    def create_instruction(self, user_id: str, instruction: str, priority: str = "normal", is_active: bool = True) -> InstructionRecord: ...

    def list_instructions(self, user_id: str) -> List[InstructionRecord]: ...

    def get_active_instructions(self, user_id: str) -> List[InstructionRecord]: ...

    def update_instruction(self, user_id: str, instruction_id: int, **changes: Any) -> Optional[InstructionRecord]: ...

    def delete_instruction(self, user_id: str, instruction_id: int) -> bool: ...

    def instruction_stats(self, user_id: str, instruction: str) -> Dict[str, Any]: ...

    def create_task(self, user_id: str, description: str, context: Optional[Dict[str, Any]] = None) -> TaskRecord: ...

    def update_task_status(self, user_id: str, task_id: int, status: str, result: Optional[str] = None) -> None: ...

    def get_pending_tasks(self, user_id: str, limit: int = 10) -> List[TaskRecord]: ...

    def count_recent_pending_tasks(self, user_id: str, since: datetime) -> int: ...

    def create_notification(
        self, user_id: str, type: str, service: str, title: str, message: str, data: Optional[Dict[str, Any]] = None
    ) -> None: ...

    def log_activity(self, user_id: str, action: str, service: str, details: Optional[Dict[str, Any]] = None) -> None: ...

    def save_message(self, user_id: str, role: str, content: str) -> None: ...

    def get_recent_messages(self, user_id: str, limit: int = 10) -> List[MessageRecord]: ...
