"""
Tool call models

A ToolCall is a name plus raw parameters. The parameters are interpreted
through a variant model chosen by the tool name; names without a variant
fall back to a passthrough model that accepts anything.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Type

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ToolParameters(BaseModel):
    """Base for every parameter variant; unknown keys are kept and numbers are read as strings"""
    model_config = ConfigDict(
        extra="allow", alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True
    )


class SendEmailParameters(ToolParameters):
    to: Optional[str] = None
    contact_name: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    cc: Optional[str] = None
    bcc: Optional[str] = None


class CreateCalendarEventParameters(ToolParameters):
    title: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    start: Optional[Any] = None
    end: Optional[Any] = None
    date: Optional[str] = None
    time: Optional[str] = None
    attendees: Optional[Any] = None
    location: Optional[str] = None


class ScheduleMeetingParameters(ToolParameters):
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    duration: Optional[Any] = None
    title: Optional[str] = None
    description: Optional[str] = None


class SearchContactsParameters(ToolParameters):
    query: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None


class CreateContactParameters(ToolParameters):
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None


class AddContactNoteParameters(ToolParameters):
    contact_id: Optional[str] = None
    email: Optional[str] = None
    contact_name: Optional[str] = None
    note: Optional[str] = None


class GetContactNotesParameters(ToolParameters):
    contact_id: Optional[str] = None
    email: Optional[str] = None
    contact_name: Optional[str] = None


class ContactListingParameters(ToolParameters):
    # Range and type checks for these live in the validator
    limit: Optional[Any] = None
    offset: Optional[Any] = None
    include_properties: Optional[Any] = None


class GetAllContactsWithNotesParameters(ContactListingParameters):
    include_contacts_without_notes: Optional[bool] = None


class GetAvailableTimesParameters(ToolParameters):
    date: Optional[str] = None
    duration: Optional[Any] = None


class PassthroughParameters(ToolParameters):
    """Parameters of a tool this version does not know about"""
    pass


PARAMETER_MODELS: Dict[str, Type[ToolParameters]] = {
    "send_email": SendEmailParameters,
    "create_calendar_event": CreateCalendarEventParameters,
    "schedule_meeting_with_contact": ScheduleMeetingParameters,
    "search_contacts": SearchContactsParameters,
    "create_contact": CreateContactParameters,
    "add_contact_note": AddContactNoteParameters,
    "get_contact_notes": GetContactNotesParameters,
    "get_all_contacts": ContactListingParameters,
    "get_all_contacts_with_notes": GetAllContactsWithNotesParameters,
    "get_available_times": GetAvailableTimesParameters,
}


def parameters_model_for(name: str) -> Type[ToolParameters]:
    return PARAMETER_MODELS.get(name, PassthroughParameters)


@dataclass
class ToolCall:
    """One side-effecting action requested by the model or synthesized by a fallback rule"""
    name: str
    parameters: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_known(self) -> bool:
        return self.name in PARAMETER_MODELS

    def typed_parameters(self) -> ToolParameters:
        """
        Interpret parameters through the variant for this tool name.

        Raises:
            pydantic.ValidationError: a field has the wrong type
        """
        return parameters_model_for(self.name).model_validate(self.parameters)

    def with_parameters(self, **updates: Any) -> "ToolCall":
        return ToolCall(name=self.name, parameters={**self.parameters, **updates})

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "parameters": dict(self.parameters)}


def tool_call_from_json(data: Any) -> Optional[ToolCall]:
    """Build a ToolCall from a parsed {"tool": ..., "parameters": {...}} object"""
    if not isinstance(data, dict):
        return None
    name = data.get("tool")
    parameters = data.get("parameters")
    if not name or not isinstance(name, str) or not isinstance(parameters, dict):
        return None
    return ToolCall(name=name, parameters=parameters)
