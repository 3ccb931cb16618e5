"""
Tests for tool call validation, one case per rule
"""

import pytest

from src.agents.tools.models import ToolCall
from src.agents.tools.validator import (
    PLACEHOLDER_RECIPIENT_REASON,
    fill_body_placeholders,
    partition,
    validate,
    validate_all,
)
from src.config.settings import settings


def check(tool, **parameters):
    return validate(ToolCall(tool, parameters))


class TestSendEmail:
    def test_placeholder_domain_rejected(self):
        result = check("send_email", to="bob@example.com", subject="Hi", body="Hello")
        assert result.valid is False
        assert result.reason == PLACEHOLDER_RECIPIENT_REASON
        assert "placeholder" in result.reason

    @pytest.mark.parametrize("recipient", ["[Email Address]", "[First Name]@acme.io", "placeholder@acme.io"])
    def test_placeholder_tokens_rejected(self, recipient):
        assert check("send_email", to=recipient, subject="Hi", body="Hello").valid is False

    def test_real_recipient_accepted(self):
        result = check("send_email", to="bob@realcompany.io", subject="Hi", body="Hello")
        assert result.valid is True
        assert result.call.parameters["to"] == "bob@realcompany.io"

    def test_contact_name_instead_of_address(self):
        assert check("send_email", contactName="Jane Smith", subject="Hi", body="Hello").valid

    def test_recipient_required(self):
        assert check("send_email", subject="Hi", body="Hello").valid is False

    def test_address_needs_at_sign(self):
        assert check("send_email", to="bob", subject="Hi", body="Hello").reason == "Invalid email address"

    def test_subject_and_body_required(self):
        assert check("send_email", to="bob@realcompany.io", body="Hello").valid is False
        assert check("send_email", to="bob@realcompany.io", subject="Hi").valid is False

    @pytest.mark.parametrize("subject,body", [("   ", "Hello"), ("Hi", "\n\t "), ("", "Hello")])
    def test_blank_subject_or_body_rejected(self, subject, body):
        assert check("send_email", to="bob@realcompany.io", subject=subject, body=body).valid is False

    def test_numeric_body_is_read_as_text(self):
        assert check("send_email", to="bob@realcompany.io", subject="Totals", body=1250).valid is True

    def test_body_placeholders_are_filled(self):
        """Template tokens in the body are replaced rather than rejected"""
        call = ToolCall("send_email", {"to": "bob@realcompany.io", "subject": "Hi", "body": "About [topic].\n[Your Name]"})
        result = validate(call)

        assert result.valid is True
        assert result.call.parameters["body"] == f"About our upcoming meeting.\n{settings.advisor_signature}"
        # the input call is left untouched
        assert call.parameters["body"] == "About [topic].\n[Your Name]"

    def test_fill_body_placeholders_is_case_insensitive(self):
        assert fill_body_placeholders("[your name]") == settings.advisor_signature


class TestCalendarEvent:
    def test_title_required(self):
        assert check("create_calendar_event", start="2025-07-16T14:00:00").valid is False

    def test_parseable_dates(self):
        assert check("create_calendar_event", title="Review", start="2025-07-16T14:00:00", end="2025-07-16T15:00:00").valid
        assert check("create_calendar_event", title="Review", start="tomorrow").valid

    def test_unparseable_start(self):
        assert check("create_calendar_event", title="Review", start="whenever").reason == "Invalid event start date"

    def test_blank_title_rejected(self):
        assert check("create_calendar_event", title="   ", start="2025-07-16T14:00:00").reason == "Event title is required"

    def test_calendar_time_objects(self):
        """Start and end may arrive as {"dateTime": ...} or all-day {"date": ...} objects"""
        result = check(
            "create_calendar_event",
            title="Review",
            start={"dateTime": "2026-07-16T14:00:00Z"},
            end={"dateTime": "2026-07-16T15:00:00Z"},
        )
        assert result.valid is True
        assert check("create_calendar_event", title="Offsite", start={"date": "2026-07-16"}).valid is True
        assert check("create_calendar_event", title="Review", start={"dateTime": "whenever"}).valid is False


class TestScheduleMeeting:
    def test_name_or_email_required(self):
        assert check("schedule_meeting_with_contact", date="2025-07-16").valid is False

    def test_name_only_is_enough(self):
        """Date and time are optional"""
        assert check("schedule_meeting_with_contact", contactName="Jane").valid

    def test_bad_contact_email(self):
        assert check("schedule_meeting_with_contact", contactEmail="jane").valid is False


class TestContacts:
    def test_create_contact_placeholder_email_rejected(self):
        assert check("create_contact", email="[Email Address]", firstName="Jane").valid is False

    def test_create_contact_accepted(self):
        assert check("create_contact", email="a@b.com", firstName="Jane").valid is True

    @pytest.mark.parametrize("parameters", [
        {"email": "jane@example.com", "firstName": "Jane"},
        {"email": "[jane]@acme.io", "firstName": "Jane"},
        {"email": "jane@acme.io"},
        {"email": "jane@acme.io", "lastName": "[Last Name]"},
    ])
    def test_create_contact_rejections(self, parameters):
        assert check("create_contact", **parameters).valid is False

    def test_add_note_rules(self):
        assert check("add_contact_note", contactName="Jane", note="Called about bonds").valid
        assert check("add_contact_note", contactId="c-1", note="   ").valid is False
        assert check("add_contact_note", note="orphan").valid is False

    def test_numeric_contact_id_accepted(self):
        """HubSpot ids often arrive as numbers"""
        assert check("add_contact_note", contactId=12345, note="Called today").valid is True
        assert check("get_contact_notes", contactId=12345).valid is True

    def test_search_needs_a_term(self):
        assert check("search_contacts", name="Jane").valid
        assert check("search_contacts").valid is False


class TestContactListing:
    def test_no_parameters_required(self):
        assert check("get_all_contacts").valid
        assert check("get_all_contacts_with_notes").valid

    @pytest.mark.parametrize("parameters,valid", [
        ({"limit": 10, "offset": 0}, True),
        ({"limit": 0}, False),
        ({"limit": "10"}, False),
        ({"offset": -1}, False),
        ({"includeProperties": ["email"]}, True),
        ({"includeProperties": "email"}, False),
    ])
    def test_paging_checks(self, parameters, valid):
        assert check("get_all_contacts", **parameters).valid is valid


class TestUnknownTools:
    def test_unknown_tool_passes_through(self):
        result = check("launch_rocket", target="moon")
        assert result.valid is True
        assert result.call.name == "launch_rocket"


class TestBatch:
    def test_validate_all_drops_invalid(self):
        calls = [
            ToolCall("send_email", {"to": "bob@example.com", "subject": "Hi", "body": "Hello"}),
            ToolCall("get_all_contacts", {}),
        ]
        assert [c.name for c in validate_all(calls)] == ["get_all_contacts"]

    def test_partition_keeps_reasons(self):
        valid, rejected = partition([ToolCall("search_contacts", {}), ToolCall("get_all_contacts", {})])
        assert [c.name for c in valid] == ["get_all_contacts"]
        assert rejected[0][1] == "Search requires query, email or name"
