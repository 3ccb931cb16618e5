"""
Index exported emails, contacts and notes into the vector store

Reads a JSON file holding a list of documents:

    [{"title": "...", "content": "...", "source": "email", "sourceId": "msg-1", "metadata": {...}}]

Usage:
    python scripts/index_documents.py --user advisor-1 data/export.json
"""

import argparse
import json
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from loguru import logger

from src.utils.logger import setup_logger
from src.utils.rag.vector_store import DocumentVectorStore


def main():
    parser = argparse.ArgumentParser(description="Index documents for one user")
    parser.add_argument("--user", required=True, help="Owner of the documents")
    parser.add_argument("path", type=Path, help="JSON file with a list of documents")
    args = parser.parse_args()

    setup_logger()

    if not args.path.exists():
        logger.error(f"File not found: {args.path}")
        sys.exit(1)

    documents = json.loads(args.path.read_text(encoding="utf-8"))
    store = DocumentVectorStore()

    indexed = 0
    for doc in documents:
        if not doc.get("content"):
            logger.warning(f"⚠️  Skipping document without content: {doc.get('title')}")
            continue
        store.add_document(
            args.user,
            title=doc.get("title") or "Untitled",
            content=doc["content"],
            source=doc.get("source") or "manual",
            source_id=doc.get("sourceId"),
            metadata=doc.get("metadata"),
        )
        indexed += 1

    logger.info(f"✅ Indexed {indexed}/{len(documents)} documents; collection now holds {store.count()} chunks")


if __name__ == "__main__":
    main()
