"""
Database session management and configuration.
"""

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from loguru import logger

from src.models.domain import Base
from src.config.settings import settings


class Database:
    """
    Database connection manager

    Handles engine creation, schema creation and session management.
    """

    def __init__(self, url: Optional[str] = None, echo: bool = False):
        """
        Initialize database connection

        Args:
            url: SQLAlchemy URL (defaults to settings.database_url)
            echo: Log emitted SQL
        """
        self.url = url or settings.database_url

        engine_kwargs = {"echo": echo}
        if self.url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in self.url or self.url == "sqlite://":
                # One shared connection so every session sees the same in-memory DB
                engine_kwargs["poolclass"] = StaticPool
            else:
                db_path = self.url.split("///", 1)[-1]
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        else:
            engine_kwargs.update(pool_pre_ping=True, pool_recycle=3600)

        logger.info(f"Connecting to database: {self.url.split('@')[-1]}")
        self.engine = create_engine(self.url, **engine_kwargs)

        # Session factory
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine
        )

    def create_tables(self) -> None:
        """Create all tables that do not exist yet"""
        Base.metadata.create_all(self.engine)
        logger.info("✅ Database tables ready")

    def ping(self) -> bool:
        """Check the connection with a trivial query"""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"❌ Database ping failed: {e}")
            return False

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope around a series of operations

        Usage:
            with db.session_scope() as session:
                session.add(task)
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Database error: {e}")
            raise
        finally:
            session.close()


# Global database instance (lazy initialization)
_db_instance = None


def get_database() -> Database:
    """Get or create global database instance"""
    global _db_instance
    if _db_instance is None:
        _db_instance = Database()
        _db_instance.create_tables()
    return _db_instance
