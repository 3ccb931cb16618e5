"""
Webhook event endpoints

/api/events takes an already normalised event. The per-service endpoints take
raw Gmail, Calendar and HubSpot payloads and normalise them first.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from loguru import logger

from src.agents.proactive.events import ProactiveEvent
from src.api.dependencies import get_agents, get_user_id
from src.api.models import EventRequest, EventResponse
from src.api.services import AgentBundle


router = APIRouter(prefix="/api/events", tags=["events"])


async def _handle(event: ProactiveEvent, agents: AgentBundle) -> EventResponse:
    logger.info(f"📨 Event {event.event}/{event.service} for user={event.user_id}")
    report = await agents.proactive.handle_event(event)
    return EventResponse(**report.to_dict())


@router.post("", response_model=EventResponse)
async def receive_event(
    request: EventRequest,
    user_id: str = Depends(get_user_id),
    agents: AgentBundle = Depends(get_agents),
) -> EventResponse:
    event = ProactiveEvent(event=request.event, service=request.service, data=request.data, user_id=user_id)
    return await _handle(event, agents)


@router.post("/gmail", response_model=EventResponse)
async def receive_gmail_message(
    payload: Dict[str, Any] = Body(...),
    user_id: str = Depends(get_user_id),
    agents: AgentBundle = Depends(get_agents),
) -> EventResponse:
    return await _handle(ProactiveEvent.from_gmail(user_id, payload), agents)


@router.post("/calendar", response_model=EventResponse)
async def receive_calendar_event(
    payload: Dict[str, Any] = Body(...),
    user_id: str = Depends(get_user_id),
    agents: AgentBundle = Depends(get_agents),
) -> EventResponse:
    return await _handle(ProactiveEvent.from_calendar(user_id, payload), agents)


@router.post("/hubspot", response_model=EventResponse)
async def receive_hubspot_contact(
    payload: Dict[str, Any] = Body(...),
    user_id: str = Depends(get_user_id),
    agents: AgentBundle = Depends(get_agents),
) -> EventResponse:
    return await _handle(ProactiveEvent.from_hubspot(user_id, payload), agents)
