"""
Tests for the instruction pattern library and matcher
"""

import pytest

from src.agents.proactive.events import ProactiveEvent, parse_sender
from src.agents.proactive.matcher import match_all, match_instruction
from src.agents.proactive.patterns import INSTRUCTION_PATTERNS, MATCH_CONFIDENCE
from src.services.protocols import InstructionRecord

USER_ID = "advisor-1"


def instruction(text, id=1, active=True):
    return InstructionRecord(id=id, user_id=USER_ID, instruction=text, is_active=active)


def event(name, service, **data):
    return ProactiveEvent(event=name, service=service, data=data, user_id=USER_ID)


# One instruction per library entry, with the event it reacts to
PATTERN_CASES = [
    ("email_not_in_hubspot", "When someone emails me and they are not in HubSpot, create a contact", "new_email", "gmail"),
    ("contact_created", "When I create a contact in HubSpot, send them a welcome email", "contact_created", "hubspot"),
    ("calendar_event", "When I add an event to my calendar, notify the attendees", "event_created", "calendar"),
    ("email_sent", "When I send an email, add a note to the contact", "email_sent", "gmail"),
    ("meeting_scheduled", "When I schedule a meeting, send a reminder", "meeting_scheduled", "calendar"),
    ("note_added", "When I add a note, send a follow up", "note_added", "hubspot"),
    ("no_availability", "When I have no availability, suggest other times", "no_availability_found", "calendar"),
    ("contact_email_sent", "When I email a contact, log it", "email_sent", "gmail"),
    ("meeting_with_contact", "When I meet with a contact, follow up the next day", "meeting_scheduled", "calendar"),
]


class TestPatternLibrary:
    def test_library_size(self):
        assert len(INSTRUCTION_PATTERNS) == 9
        assert [p.name for p in INSTRUCTION_PATTERNS] == [case[0] for case in PATTERN_CASES]

    @pytest.mark.parametrize("name,text,event_name,service", PATTERN_CASES)
    def test_each_pattern_matches_its_event(self, name, text, event_name, service):
        match = match_instruction(instruction(text), event(event_name, service))
        assert match.confidence == MATCH_CONFIDENCE
        assert match.pattern == name

    @pytest.mark.parametrize("name,text,event_name,service", PATTERN_CASES)
    def test_wrong_event_scores_zero(self, name, text, event_name, service):
        match = match_instruction(instruction(text), event("unrelated_event", service))
        assert match.confidence == 0
        assert match.pattern is None

    def test_only_three_families_have_actions(self):
        assert {p.name for p in INSTRUCTION_PATTERNS if p.action} == {
            "email_not_in_hubspot", "contact_created", "calendar_event",
        }


class TestMatchInstruction:
    def test_unknown_sender_instruction(self):
        """Email from an unknown sender yields the sender's details"""
        match = match_instruction(
            instruction("When someone emails me who is not in HubSpot, create a contact"),
            event("new_email", "gmail", senderEmail="x@y.com", senderName="X Y"),
        )

        assert match.confidence == 0.9
        assert match.extracted_params["email"] == "x@y.com"
        assert match.extracted_params["firstName"] == "X"
        assert match.extracted_params["lastName"] == "Y"
        assert match.action == "create_contact_from_email"

    def test_note_requested(self):
        match = match_instruction(
            instruction("When someone emails me who is not in HubSpot, create a contact with a note about the email"),
            event("new_email", "gmail", senderEmail="x@y.com", senderName="X", subject="Rates", snippet="What are rates?"),
        )
        assert match.extracted_params["addNote"] is True
        assert match.extracted_params["noteContent"] == 'Email received: "Rates"\nWhat are rates?'
        assert match.extracted_params["lastName"] is None

    def test_welcome_email_with_thank_you(self):
        match = match_instruction(
            instruction("When I create a contact in HubSpot, send them an email saying thank you for being a client"),
            event("contact_created", "hubspot", email="ann@acme.io", firstname="Ann", lastname="Lee"),
        )
        params = match.extracted_params
        assert params["contactEmail"] == "ann@acme.io"
        assert params["contactName"] == "Ann Lee"
        assert params["emailSubject"] == "Thank you for connecting!"
        assert "Thank you for being a client." in params["emailBody"]

    def test_calendar_event_params(self):
        match = match_instruction(
            instruction("When I create a meeting, email the attendees"),
            event(
                "event_created", "calendar",
                summary="Portfolio review",
                start={"dateTime": "2025-07-16T14:00:00Z"},
                end={"dateTime": "2025-07-16T15:00:00Z"},
                attendees=[{"email": "jane@acme.io"}],
            ),
        )
        assert match.extracted_params["eventTitle"] == "Portfolio review"
        assert match.extracted_params["eventStart"] == "2025-07-16T14:00:00Z"
        assert match.extracted_params["attendees"] == [{"email": "jane@acme.io"}]

    def test_last_matching_pattern_wins(self):
        """An instruction that reads as two families keeps the later one"""
        text = "When I schedule a meeting, send a reminder. When I meet with a contact, follow up."
        match = match_instruction(instruction(text), event("meeting_scheduled", "calendar"))

        assert match.pattern == "meeting_with_contact"
        assert match.confidence == MATCH_CONFIDENCE
        assert match.action is None

    def test_inactive_instruction_never_matches(self):
        text = "When someone emails me who is not in HubSpot, create a contact"
        match = match_instruction(instruction(text, active=False), event("new_email", "gmail", senderEmail="x@y.com"))
        assert match.confidence == 0


class TestMatchAll:
    def test_only_positive_matches_sorted(self):
        instructions = [
            instruction("Always be polite", id=1),
            instruction("When someone emails me who is not in HubSpot, create a contact", id=2),
            instruction("When I send an email, add a note", id=3),
        ]
        matches = match_all(event("new_email", "gmail", senderEmail="x@y.com"), instructions)
        assert [m.instruction.id for m in matches] == [2]

    def test_inactive_instructions_skipped(self):
        instructions = [instruction("When someone emails me who is not in HubSpot, create a contact", active=False)]
        assert match_all(event("new_email", "gmail"), instructions) == []


class TestEvents:
    @pytest.mark.parametrize("header,expected", [
        ("Jane Doe <jane@acme.io>", ("Jane Doe", "jane@acme.io")),
        ('"Doe, Jane" <jane@acme.io>', ("Doe, Jane", "jane@acme.io")),
        ("jane@acme.io", (None, "jane@acme.io")),
        ("", (None, None)),
    ])
    def test_parse_sender(self, header, expected):
        assert parse_sender(header) == expected

    def test_from_gmail_fills_sender(self):
        evt = ProactiveEvent.from_gmail(USER_ID, {"from": "Jane Doe <jane@acme.io>", "subject": "Hi"})
        assert (evt.event, evt.service) == ("new_email", "gmail")
        assert evt.data["senderEmail"] == "jane@acme.io"
        assert evt.data["senderName"] == "Jane Doe"

    def test_from_hubspot_flattens_properties(self):
        evt = ProactiveEvent.from_hubspot(USER_ID, {"id": "c-9", "properties": {"email": "a@b.io", "firstname": "A"}})
        assert evt.data == {"email": "a@b.io", "firstname": "A", "id": "c-9"}

    def test_user_id_alias(self):
        evt = ProactiveEvent.model_validate({"event": "x", "service": "gmail", "userId": "u-1"})
        assert evt.user_id == "u-1"
