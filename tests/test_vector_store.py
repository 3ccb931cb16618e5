"""
Tests for the chromadb-backed document store (collection replaced by a fake)
"""

import asyncio
import json
from datetime import datetime

from src.utils.rag.vector_store import DocumentVectorStore, build_where_clause


class FakeCollection:
    def __init__(self, results=None, error=None):
        self.added = []
        self.queries = []
        self.results = results or {"documents": [[]], "metadatas": [[]], "distances": [[]]}
        self.error = error

    def add(self, ids, documents, metadatas):
        self.added.append({"ids": ids, "documents": documents, "metadatas": metadatas})

    def query(self, **kwargs):
        self.queries.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.results

    def count(self):
        return sum(len(batch["ids"]) for batch in self.added)


class FakeChromaClient:
    def __init__(self, collection):
        self.collection = collection

    def get_or_create_collection(self, name, embedding_function=None, metadata=None):
        return self.collection


def make_store(collection, **kwargs):
    return DocumentVectorStore(client=FakeChromaClient(collection), embedding_function=object(), **kwargs)


class TestWhereClause:
    def test_user_only(self):
        assert build_where_clause("advisor-1") == {"user_id": "advisor-1"}

    def test_source_and_date_range(self):
        start, end = datetime(2025, 1, 1), datetime(2025, 1, 31)

        where = build_where_clause("advisor-1", {"source": "email", "dateRange": {"start": start, "end": end}})

        assert where == {"$and": [
            {"user_id": "advisor-1"},
            {"source": "email"},
            {"created_at": {"$gte": start.timestamp()}},
            {"created_at": {"$lte": end.timestamp()}},
        ]}


class TestDocumentVectorStore:
    def test_add_document_chunks_with_metadata(self):
        collection = FakeCollection()
        store = make_store(collection, chunk_size=50, chunk_overlap=0)
        content = "First paragraph about rollover options.\n\nSecond paragraph about fees and timing."

        document_id = store.add_document(
            "advisor-1", "Re: IRA", content, "email", source_id="msg-1", metadata={"from": "jane@acme.io"}
        )

        batch = collection.added[0]
        assert len(batch["documents"]) == 2
        assert batch["ids"] == [f"{document_id}_0", f"{document_id}_1"]
        meta = batch["metadatas"][1]
        assert meta["user_id"] == "advisor-1"
        assert meta["source_id"] == "msg-1"
        assert meta["chunk_index"] == 1
        assert json.loads(meta["doc_metadata"]) == {"from": "jane@acme.io"}
        assert store.count() == 2

    def test_search_converts_distance_to_similarity(self):
        collection = FakeCollection(results={
            "documents": [["Jane asked about rollovers"]],
            "metadatas": [[{"document_id": "d-1", "title": "Re: IRA", "source": "email", "created_at": 0}]],
            "distances": [[0.25]],
        })
        store = make_store(collection)

        hits = asyncio.run(store.search_similar_documents("advisor-1", "rollover", 3, {"source": "email"}))

        assert hits[0]["similarity"] == 0.75
        assert hits[0]["title"] == "Re: IRA"
        assert hits[0]["createdAt"] is None
        assert collection.queries[0]["n_results"] == 3
        assert collection.queries[0]["where"] == {"$and": [{"user_id": "advisor-1"}, {"source": "email"}]}

    def test_search_failure_returns_empty(self):
        store = make_store(FakeCollection(error=RuntimeError("index corrupted")))
        assert asyncio.run(store.search_similar_documents("advisor-1", "anything")) == []
