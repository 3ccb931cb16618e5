"""
RAG-related utilities: the document vector store.
"""

from .vector_store import DocumentVectorStore, build_where_clause

__all__ = [
    "DocumentVectorStore",
    "build_where_clause",
]
