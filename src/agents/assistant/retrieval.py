"""
Context retrieval

One broad semantic search per query plus intent-specific scoped searches,
all issued concurrently. Results are concatenated without de-duplication
and truncated to the configured cap.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from src.agents.assistant.context_sections import ContextSection, build_context_sections
from src.agents.assistant.intent import Intent
from src.config.constants import BROAD_SEARCH_LIMIT, RECENT_ACTIVITY_DAYS, SCOPED_SEARCH_LIMIT
from src.config.settings import settings
from src.services.protocols import AgentStore, DocumentSearch


@dataclass(frozen=True)
class SearchPlan:
    """One semantic search to issue for a query"""
    limit: int
    source: Optional[str] = None
    recent_days: Optional[int] = None

    def filters(self, now: datetime) -> Optional[Dict[str, Any]]:
        filters: Dict[str, Any] = {}
        if self.source:
            filters["source"] = self.source
        if self.recent_days:
            filters["dateRange"] = {"start": now - timedelta(days=self.recent_days), "end": now}
        return filters or None


BROAD_SEARCH = SearchPlan(limit=BROAD_SEARCH_LIMIT)

INTENT_SEARCH_PLANS: Dict[str, Tuple[SearchPlan, ...]] = {
    "question": (
        SearchPlan(limit=SCOPED_SEARCH_LIMIT, source="email"),
        SearchPlan(limit=SCOPED_SEARCH_LIMIT, source="hubspot"),
    ),
    "action": (SearchPlan(limit=BROAD_SEARCH_LIMIT, recent_days=RECENT_ACTIVITY_DAYS),),
    "search": (SearchPlan(limit=SCOPED_SEARCH_LIMIT, source="hubspot"),),
}


def plan_searches(intent: Intent) -> List[SearchPlan]:
    """Broad search first, then the intent's scoped searches"""
    return [BROAD_SEARCH, *INTENT_SEARCH_PLANS.get(intent.type, ())]


class ContextRetriever:
    """
    Fetches documents and store state for one request.

    Args:
        documents: Semantic search collaborator
        store: Persistence collaborator (instructions, messages, tasks)
        max_documents: Cap on merged search results (defaults to settings)
    """

    def __init__(
        self,
        documents: DocumentSearch,
        store: Optional[AgentStore] = None,
        max_documents: Optional[int] = None,
    ):
        self.documents = documents
        self.store = store
        self.max_documents = max_documents or settings.max_context_documents

    async def retrieve(
        self,
        user_id: str,
        query: str,
        intent: Intent,
        now: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """
        Run every planned search concurrently and merge the results.

        All searches are awaited before merging; a search that raises fails
        the whole retrieval.

        Returns:
            Concatenated hits in plan order, at most max_documents
        """
        now = now or datetime.utcnow()
        plans = plan_searches(intent)

        batches = await asyncio.gather(*(
            self.documents.search_similar_documents(user_id, query, plan.limit, plan.filters(now))
            for plan in plans
        ))

        merged = [doc for batch in batches for doc in batch]
        logger.debug(f"Retrieved {len(merged)} documents from {len(plans)} searches (cap {self.max_documents})")
        return merged[: self.max_documents]

    async def gather_context(
        self,
        user_id: str,
        query: str,
        intent: Intent,
        trigger: Optional[Dict[str, Any]] = None,
    ) -> ContextSection:
        """Retrieve documents and store state, then build the ContextSection"""
        documents = await self.retrieve(user_id, query, intent)

        instructions, recent_messages, pending_tasks = [], [], []
        if self.store is not None:
            instructions = self.store.get_active_instructions(user_id)
            recent_messages = self.store.get_recent_messages(user_id, settings.recent_messages_limit)
            pending_tasks = self.store.get_pending_tasks(user_id)

        return build_context_sections(documents, instructions, recent_messages, pending_tasks, trigger)
