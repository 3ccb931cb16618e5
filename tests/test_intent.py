"""
Tests for intent classification
"""

import pytest

from src.agents.assistant.intent import (
    GENERAL_INTENT,
    INTENT_KEYWORDS,
    MIN_CONFIDENCE,
    classify,
    score_intents,
)


class TestClassify:
    """Keyword scoring, boosts and flags"""

    def test_contact_listing_query(self):
        """"show all contacts" is a contact query classified as search"""
        intent = classify("show all contacts")

        assert intent.is_contact_query is True
        assert intent.type == "search"
        assert intent.confidence > 0.1
        assert intent.contact_query_type == "get_all_contacts"

    def test_conditional_instruction(self):
        """A "when someone emails" request is a conditional instruction"""
        intent = classify("when someone emails me, create a contact")

        assert intent.type == "instruction"
        assert intent.is_conditional_instruction is True

    def test_from_now_on_is_instruction(self):
        intent = classify("From now on cc my assistant on client emails")
        assert intent.is_conditional_instruction is True

    def test_no_match_is_general(self):
        """Nothing matched: general with the minimum confidence"""
        intent = classify("xyz")

        assert intent.type == GENERAL_INTENT
        assert intent.confidence == MIN_CONFIDENCE
        assert intent.keywords == []
        assert intent.is_contact_query is False
        assert intent.is_conditional_instruction is False

    def test_confidence_is_capped(self):
        """Boosted short queries cannot exceed 1.0"""
        assert classify("list contacts").confidence == 1.0

    def test_confidence_is_score_over_word_count(self):
        # "analyze" and "report" score 2 for analysis over 6 words
        intent = classify("please analyze this quarterly report now")
        assert intent.type == "analysis"
        assert intent.confidence == pytest.approx(2 / 6)

    def test_tie_break_follows_table_order(self):
        """On equal scores the category listed first wins"""
        # "schedule" scores 1 for both action and meeting; action comes first
        scores, _ = score_intents("schedule")
        assert scores["action"] == scores["meeting"] == 1
        assert list(INTENT_KEYWORDS).index("action") < list(INTENT_KEYWORDS).index("meeting")
        assert classify("schedule").type == "action"

    def test_all_contacts_notes_boost(self):
        intent = classify("contacts with notes")
        assert intent.type == "all_contacts_notes"

    def test_meeting_with_person_boost(self):
        scores, _ = score_intents("book a slot with jane smith")
        assert scores["meeting"] >= 4

    def test_to_dict_uses_camel_case(self):
        data = classify("show all contacts").to_dict()
        assert data["type"] == "search"
        assert data["isContactQuery"] is True
        assert data["isConditionalInstruction"] is False
