"""
Main FastAPI application for the Financial Advisor Assistant

This module creates and configures the FastAPI application with:
- CORS middleware for frontend integration
- API routes (query, webhook events, ongoing instructions)
- Health check endpoint
- Auto-generated API documentation
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from src.api.models import HealthResponse
from src.api.routes import events, instructions, query
from src.api.services import ServiceBundle
from src.infra.store import SqlAgentStore
from src.services.protocols import AgentStore

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan events

    Startup: create tables and wire the default store unless one was injected.
    """
    logger.info("🚀 FastAPI application starting...")
    logger.info("📚 API docs available at http://localhost:8000/docs")

    if getattr(app.state, "store", None) is None:
        store = SqlAgentStore()
        store.db.create_tables()
        app.state.store = store
        logger.info("✅ Database tables ready")

    if getattr(app.state, "services", None) is None:
        logger.warning("⚠️  No external services registered; /api/query and /api/events return 503")

    yield

    logger.info("🛑 FastAPI application shutting down...")


def create_app(store: Optional[AgentStore] = None, services: Optional[ServiceBundle] = None) -> FastAPI:
    """
    Build the application

    Args:
        store: Persistence to use (defaults to the SQLAlchemy store on settings.database_url)
        services: Gmail, Calendar, HubSpot, document search and LLM clients
    """
    app = FastAPI(
        title="Financial Advisor Assistant API",
        description="""
    Assistant API for financial advisors working across Gmail, Google Calendar and HubSpot.

    ## Features

    * **Query answering** grounded in emails, contacts and notes
    * **Tool execution** (email, meetings, contacts, notes) tracked as tasks
    * **Ongoing instructions** applied proactively to incoming webhook events
    * **LangGraph orchestration** for the query workflow

    ## Example

    ```bash
    curl -X POST http://localhost:8000/api/query \\
         -H "Content-Type: application/json" \\
         -H "X-User-Id: advisor-1" \\
         -d '{"query": "Show me all my contacts"}'
    ```
    """,
        version=API_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.store = store
    app.state.services = services
    app.state.agents = None

    # CORS Configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",  # React dev server
            "http://localhost:3005",  # Alternative port
            "http://127.0.0.1:3000",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(query.router)
    app.include_router(events.router)
    app.include_router(instructions.router)

    @app.get("/", tags=["root"])
    async def root():
        """
        Root endpoint - API information
        """
        return {
            "service": "Financial Advisor Assistant API",
            "version": API_VERSION,
            "status": "running",
            "docs": "/docs",
            "endpoints": {
                "health": "/health",
                "query": "/api/query",
                "events": "/api/events",
                "instructions": "/api/instructions",
            }
        }

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health_check():
        """
        Health check endpoint

        Returns:
            HealthResponse with service status and database reachability
        """
        store = app.state.store
        database_ok = store.db.ping() if isinstance(store, SqlAgentStore) else True
        return HealthResponse(
            status="healthy" if database_ok else "degraded",
            service="advisor-assistant-api",
            version=API_VERSION,
            database=database_ok,
        )

    return app


app = create_app()
