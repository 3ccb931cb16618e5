"""
Shared fixtures
"""

import pytest

from src.agents.executor.executor import ActionExecutor
from src.infra.database import Database
from src.infra.store import SqlAgentStore
from tests.fakes import FakeCalendar, FakeDocuments, FakeGmail, FakeHubSpot, hubspot_contact

USER_ID = "advisor-1"


@pytest.fixture
def store():
    """SQLAlchemy store on a private in-memory SQLite database"""
    database = Database("sqlite://")
    database.create_tables()
    return SqlAgentStore(database)


@pytest.fixture
def gmail():
    return FakeGmail()


@pytest.fixture
def calendar():
    return FakeCalendar()


@pytest.fixture
def hubspot():
    return FakeHubSpot(
        contacts=[
            hubspot_contact("c-1", "Jane", "Smith", "jane@acme.io", company="Acme"),
            hubspot_contact("c-2", "Bob", "Stone", "bob@realcompany.io"),
        ],
        notes={
            "c-1": [{"id": "n-1", "properties": {"hs_note_body": "Prefers morning calls", "createdate": "2024-05-01T10:00:00Z"}}],
        },
    )


@pytest.fixture
def documents():
    return FakeDocuments()


@pytest.fixture
def executor(store, gmail, calendar, hubspot, documents):
    return ActionExecutor(store=store, gmail=gmail, calendar=calendar, hubspot=hubspot, documents=documents)
