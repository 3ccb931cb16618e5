"""
FastAPI dependencies: caller identity, store and agents
"""

from fastapi import Header, HTTPException, Request

from src.api.services import AgentBundle, build_agents
from src.services.protocols import AgentStore


def get_user_id(x_user_id: str = Header(..., alias="X-User-Id")) -> str:
    user_id = x_user_id.strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="X-User-Id header is required")
    return user_id


def get_store(request: Request) -> AgentStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Store is not initialised")
    return store


def get_agents(request: Request) -> AgentBundle:
    """Agents built from app.state.services; 503 until the services are registered"""
    state = request.app.state
    agents = getattr(state, "agents", None)
    if agents is not None:
        return agents

    services = getattr(state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="External services are not configured")

    state.agents = build_agents(services, get_store(request))
    return state.agents
