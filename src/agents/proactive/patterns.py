"""
Instruction pattern library

Each entry recognises one family of conditional instruction ("when X
happens, do Y") and names the (event, service) pair it reacts to. Entries
with an action have a parameter extractor; the others match without
producing an executable action.
"""

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple

MATCH_CONFIDENCE = 0.9


@dataclass(frozen=True)
class InstructionPattern:
    name: str
    pattern: Pattern
    event: str
    service: str
    action: Optional[str] = None

    def applies_to(self, event: str, service: str) -> bool:
        return self.event == event and self.service == service


def _p(regex: str) -> Pattern:
    return re.compile(regex, re.IGNORECASE)


# Iteration order matters: when an instruction matches several entries the
# last one wins (see matcher.match_instruction)
INSTRUCTION_PATTERNS: Tuple[InstructionPattern, ...] = (
    InstructionPattern(
        "email_not_in_hubspot",
        _p(r"when\s+(?:someone|anyone|a person)\s+emails?\s+(?:me|us).*(?:not\s+in|not\s+already\s+in|doesn't exist in)\s+hubspot"),
        "new_email", "gmail", action="create_contact_from_email",
    ),
    InstructionPattern(
        "contact_created",
        _p(r"when\s+(?:i|we)\s+create\s+(?:a\s+)?contact\s+in\s+hubspot.*(?:send|email)"),
        "contact_created", "hubspot", action="send_welcome_email",
    ),
    InstructionPattern(
        "calendar_event",
        _p(r"when\s+(?:i|we)\s+(?:add|create|schedule)\s+(?:an?\s+)?(?:event|meeting|appointment).*(?:send|email|notify)"),
        "event_created", "calendar", action="notify_attendees",
    ),
    InstructionPattern(
        "email_sent",
        _p(r"when\s+(?:i|we)\s+send\s+(?:an?\s+)?email.*(?:add|create|log)\s+(?:a\s+)?note"),
        "email_sent", "gmail",
    ),
    InstructionPattern(
        "meeting_scheduled",
        _p(r"when\s+(?:i|we)\s+schedule\s+(?:a\s+)?meeting.*(?:send|email|notify|remind)"),
        "meeting_scheduled", "calendar",
    ),
    InstructionPattern(
        "note_added",
        _p(r"when\s+(?:i|we)\s+add\s+(?:a\s+)?note.*(?:send|email|notify|follow)"),
        "note_added", "hubspot",
    ),
    InstructionPattern(
        "no_availability",
        _p(r"when\s+(?:i|we)\s+(?:have\s+)?no\s+availability.*(?:suggest|recommend|offer)"),
        "no_availability_found", "calendar",
    ),
    InstructionPattern(
        "contact_email_sent",
        _p(r"when\s+(?:i|we)\s+email\s+(?:a\s+)?contact.*(?:log|track|record)"),
        "email_sent", "gmail",
    ),
    InstructionPattern(
        "meeting_with_contact",
        _p(r"when\s+(?:i|we)\s+meet\s+with\s+(?:a\s+)?contact.*(?:follow|send|email)"),
        "meeting_scheduled", "calendar",
    ),
)
