"""
Infrastructure layer - Database and persistence store
"""

from src.infra.database import Database, get_database
from src.infra.store import SqlAgentStore

__all__ = [
    "Database",
    "get_database",
    "SqlAgentStore",
]
