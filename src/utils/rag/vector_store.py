"""
Document vector store using ChromaDB

Handles:
- Chunking and embedding user documents (emails, CRM records, notes)
- Per-user similarity search with source and date-range filters
- Persistent storage
"""

import asyncio
import json
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import chromadb
from chromadb.config import Settings as ChromaSettings
from chromadb.utils import embedding_functions
from langchain_text_splitters import RecursiveCharacterTextSplitter
from loguru import logger

from src.config.settings import settings

COLLECTION_NAME = "user_documents"


def build_where_clause(user_id: str, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Build a ChromaDB where clause for one user's documents.

    Args:
        user_id: Owner of the documents
        filters: Optional {"source": str, "dateRange": {"start": datetime, "end": datetime}}

    Returns:
        Where clause (a single condition, or an $and of several)
    """
    conditions: List[Dict[str, Any]] = [{"user_id": user_id}]
    filters = filters or {}

    if filters.get("source"):
        conditions.append({"source": filters["source"]})

    date_range = filters.get("dateRange")
    if date_range:
        conditions.append({"created_at": {"$gte": date_range["start"].timestamp()}})
        conditions.append({"created_at": {"$lte": date_range["end"].timestamp()}})

    if len(conditions) == 1:
        return conditions[0]
    return {"$and": conditions}


class DocumentVectorStore:
    """
    ChromaDB-based document store for context retrieval

    Stores chunked documents with their owner and source in chunk metadata so
    searches can be scoped per user.
    """

    def __init__(
        self,
        persist_directory: Optional[Path] = None,
        client: Optional[Any] = None,
        embedding_function: Optional[Any] = None,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
    ):
        """
        Initialize vector store

        Args:
            persist_directory: Directory for persistent storage (defaults to settings)
            client: Pre-built chromadb client (overrides persist_directory)
            embedding_function: ChromaDB embedding function (defaults to all-MiniLM-L6-v2)
            chunk_size: Characters per chunk
            chunk_overlap: Characters shared between neighbouring chunks
        """
        if client is None:
            persist_directory = Path(persist_directory or settings.vector_store_path_resolved)
            persist_directory.mkdir(parents=True, exist_ok=True)
            client = chromadb.PersistentClient(
                path=str(persist_directory),
                settings=ChromaSettings(anonymized_telemetry=False, allow_reset=True),
            )
            logger.info(f"Initialized DocumentVectorStore at {persist_directory}")

        self.client = client
        self.collection = self.client.get_or_create_collection(
            name=COLLECTION_NAME,
            embedding_function=embedding_function or embedding_functions.DefaultEmbeddingFunction(),
            metadata={"hnsw:space": "cosine"},
        )
        self.splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            separators=["\n\n", "\n", ". ", " ", ""],
            length_function=len,
        )

    def add_document(
        self,
        user_id: str,
        title: str,
        content: str,
        source: str,
        source_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        created_at: Optional[datetime] = None,
    ) -> str:
        """
        Chunk and store one document

        Args:
            user_id: Owner of the document
            title: Document title (email subject, contact name, ...)
            content: Full text
            source: Origin service ("email", "hubspot", "calendar")
            source_id: Id of the record in the origin service
            metadata: Extra document metadata (stored JSON-encoded)
            created_at: Document timestamp (defaults to now)

        Returns:
            Generated document id
        """
        document_id = str(uuid.uuid4())
        created_at = created_at or datetime.utcnow()
        chunks = self.splitter.split_text(content) or [content]

        base_metadata = {
            "user_id": user_id,
            "document_id": document_id,
            "title": title,
            "source": source,
            "source_id": source_id or "",
            "doc_metadata": json.dumps(metadata or {}, default=str),
            "created_at": created_at.timestamp(),
        }

        self.collection.add(
            ids=[f"{document_id}_{i}" for i in range(len(chunks))],
            documents=chunks,
            metadatas=[{**base_metadata, "chunk_index": i} for i in range(len(chunks))],
        )
        logger.info(f"Added document '{title[:50]}' ({source}) as {len(chunks)} chunks")
        return document_id

    def _query(self, user_id: str, query: str, limit: int, filters: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
        results = self.collection.query(
            query_texts=[query],
            n_results=limit,
            where=build_where_clause(user_id, filters),
            include=["documents", "metadatas", "distances"],
        )

        hits: List[Dict[str, Any]] = []
        if not results or not results.get("documents"):
            return hits

        documents = results["documents"][0]
        metadatas = results["metadatas"][0] if results.get("metadatas") else [{}] * len(documents)
        distances = results["distances"][0] if results.get("distances") else [0.0] * len(documents)

        for text, meta, distance in zip(documents, metadatas, distances):
            meta = meta or {}
            hits.append({
                "content": text,
                "documentId": meta.get("document_id"),
                "title": meta.get("title", ""),
                "source": meta.get("source", ""),
                "doc_metadata": json.loads(meta.get("doc_metadata") or "{}"),
                "createdAt": datetime.utcfromtimestamp(meta["created_at"]) if meta.get("created_at") else None,
                "sourceId": meta.get("source_id"),
                "similarity": 1.0 - distance,  # cosine distance
            })
        return hits

    async def search_similar_documents(
        self,
        user_id: str,
        query: str,
        limit: int = 5,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Semantic search over one user's documents

        Args:
            user_id: Owner of the documents
            query: Search text
            limit: Maximum hits
            filters: Optional source / dateRange filters

        Returns:
            Document hits, most similar first ([] when the search fails)
        """
        try:
            hits = await asyncio.to_thread(self._query, user_id, query, limit, filters)
            logger.debug(f"Search for '{query[:50]}' returned {len(hits)} results (filters={filters})")
            return hits
        except Exception as e:
            logger.error(f"❌ Document search failed: {e}")
            return []

    def count(self) -> int:
        return self.collection.count()
