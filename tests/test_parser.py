"""
Tests for the response-to-tool-call parser (stages 1-3)
"""

import json

from src.agents.assistant.intent import classify
from src.agents.tools.parser import (
    extract_fenced_calls,
    extract_inline_calls,
    extract_leaked_call,
    is_instructional,
    parse,
)


def fenced(obj) -> str:
    return "```json\n" + json.dumps(obj) + "\n```"


EMAIL_CALL = {
    "tool": "send_email",
    "parameters": {"to": "bob@realcompany.io", "subject": "Hi", "body": "Hello"},
}


class TestFencedBlocks:
    def test_single_fenced_call(self):
        """One fenced call yields exactly one matching ToolCall"""
        response = "Sending it now.\n\n" + fenced(EMAIL_CALL)
        calls = parse(response)

        assert len(calls) == 1
        assert calls[0].name == "send_email"
        assert calls[0].parameters == EMAIL_CALL["parameters"]

    def test_parse_is_pure(self):
        """Parsing the same text twice gives identical results"""
        response = "Sending it now.\n\n" + fenced(EMAIL_CALL)
        assert parse(response) == parse(response)

    def test_multiple_blocks_keep_discovery_order(self):
        response = "\n".join([
            fenced({"tool": "create_contact", "parameters": {"email": "a@b.com", "firstName": "Ann"}}),
            "then",
            fenced({"tool": "add_contact_note", "parameters": {"email": "a@b.com", "note": "met at conference"}}),
        ])
        assert [c.name for c in parse(response)] == ["create_contact", "add_contact_note"]

    def test_malformed_block_is_skipped(self):
        """A broken block does not stop the others from parsing"""
        response = "```json\n{not json}\n```\n" + fenced(EMAIL_CALL)
        assert [c.name for c in extract_fenced_calls(response)] == ["send_email"]

    def test_block_without_parameters_is_ignored(self):
        assert extract_fenced_calls(fenced({"tool": "send_email"})) == []

    def test_instructional_response_skips_blocks(self):
        response = "Here's the tool call:\n" + fenced(EMAIL_CALL)
        assert is_instructional(response)
        assert parse(response) == []


class TestResponseLeakage:
    def test_leaked_call_yields_only_the_call(self):
        """An echoed {"tool", "parameters", "response"} object is one call at most"""
        response = '{"tool": "get_all_contacts", "parameters": {"limit": 10}, "response": "Here are your contacts"}'
        calls = parse(response)

        assert len(calls) <= 1
        assert calls[0].name == "get_all_contacts"
        assert calls[0].parameters == {"limit": 10}

    def test_fenced_leak_is_not_counted_twice(self):
        response = fenced({"tool": "get_all_contacts", "parameters": {"limit": 10}, "response": "done"})
        calls = parse(response)
        assert [c.name for c in calls] == ["get_all_contacts"]

    def test_no_leak_without_response_key(self):
        assert extract_leaked_call(json.dumps(EMAIL_CALL)) == []


class TestInlineCalls:
    def test_inline_call_in_prose(self):
        response = 'Sure. {"tool": "search_contacts", "parameters": {"query": "Jane"}} Done.'
        calls = parse(response)
        assert [(c.name, c.parameters) for c in calls] == [("search_contacts", {"query": "Jane"})]

    def test_inline_calls_are_deduplicated(self):
        text = '{"tool": "search_contacts", "parameters": {"query": "Jane"}}'
        assert len(extract_inline_calls(text)) == 1

    def test_inline_skipped_when_explaining(self):
        response = 'I\'ll use {"tool": "search_contacts", "parameters": {"query": "Jane"}} for that.'
        assert parse(response) == []

    def test_plain_text_has_no_calls(self):
        assert parse("Jane is a client at Acme.") == []

    def test_fallbacks_need_intent_and_query(self):
        """Without intent/query a narrated success produces nothing"""
        assert parse("I've sent the email.") == []
        query = "show all contacts"
        assert [c.name for c in parse("Here you go.", classify(query), query)] == ["get_all_contacts"]
