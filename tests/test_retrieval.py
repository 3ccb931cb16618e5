"""
Tests for context retrieval and context assembly
"""

import asyncio
from datetime import datetime

import pytest

from src.agents.assistant import retrieval
from src.agents.assistant.intent import Intent
from src.agents.assistant.retrieval import ContextRetriever, SearchPlan, plan_searches
from tests.conftest import USER_ID
from tests.fakes import FakeDocuments


def _hits(n):
    return [{"content": f"doc {i}", "title": f"Doc {i}", "source": "email"} for i in range(n)]


class TestSearchPlans:
    def test_question_adds_email_and_hubspot_searches(self):
        plans = plan_searches(Intent(type="question", confidence=0.5))
        assert [(p.limit, p.source) for p in plans] == [(5, None), (3, "email"), (3, "hubspot")]

    def test_action_adds_recent_search(self):
        plans = plan_searches(Intent(type="action", confidence=0.5))
        assert len(plans) == 2
        assert plans[1].recent_days == 30

    def test_general_is_broad_only(self):
        assert len(plan_searches(Intent(type="general", confidence=0.1))) == 1

    def test_date_range_filter(self):
        now = datetime(2025, 3, 31, 12, 0)
        filters = SearchPlan(limit=5, recent_days=30).filters(now)
        assert filters["dateRange"]["end"] == now
        assert (now - filters["dateRange"]["start"]).days == 30


class TestContextRetriever:
    def test_merged_results_are_capped(self, monkeypatch):
        """Four searches of five hits each are truncated to fifteen"""
        monkeypatch.setitem(retrieval.INTENT_SEARCH_PLANS, "question", (
            SearchPlan(limit=3, source="email"),
            SearchPlan(limit=3, source="hubspot"),
            SearchPlan(limit=3, source="calendar"),
        ))
        documents = FakeDocuments(hits=_hits(5))
        retriever = ContextRetriever(documents)

        merged = asyncio.run(retriever.retrieve(USER_ID, "who is jane?", Intent(type="question", confidence=0.5)))

        assert len(documents.calls) == 4
        assert len(merged) <= 15
        assert len(merged) == 15

    def test_duplicates_are_kept(self):
        """Overlapping hits from different searches are not de-duplicated"""
        documents = FakeDocuments(hits=_hits(2))
        retriever = ContextRetriever(documents)

        merged = asyncio.run(retriever.retrieve(USER_ID, "who is jane?", Intent(type="question", confidence=0.5)))

        assert len(merged) == 6
        assert [d["title"] for d in merged[:2]] == ["Doc 0", "Doc 1"]

    def test_failed_search_fails_retrieval(self):
        retriever = ContextRetriever(FakeDocuments(fail=True))
        with pytest.raises(RuntimeError):
            asyncio.run(retriever.retrieve(USER_ID, "anything", Intent(type="general", confidence=0.1)))

    def test_gather_context_reads_store(self, store):
        store.create_instruction(USER_ID, "When someone emails me, create a contact")
        store.save_message(USER_ID, "user", "hello")
        store.create_task(USER_ID, "Execute send_email")
        retriever = ContextRetriever(FakeDocuments(hits=_hits(1)), store)

        sections = asyncio.run(retriever.gather_context(
            USER_ID, "hi", Intent(type="general", confidence=0.1), trigger={"event": "new_email", "data": {"a": 1}}
        ))

        assert sections.summary == {
            "totalDocuments": 1,
            "totalInstructions": 1,
            "totalTasks": 1,
            "hasRecentContext": True,
        }
        assert sections.instructions[0]["priority"] == "normal"
        assert sections.trigger["isProactive"] is True
