"""
Ongoing instruction CRUD

Instructions only need the store, so these routes work before the external
services are registered.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from src.api.dependencies import get_store, get_user_id
from src.api.models import InstructionCreate, InstructionResponse, InstructionUpdate
from src.services.protocols import AgentStore, InstructionRecord


router = APIRouter(prefix="/api/instructions", tags=["instructions"])


def _to_response(record: InstructionRecord, stats=None) -> InstructionResponse:
    stats = stats or {}
    return InstructionResponse(
        id=record.id,
        instruction=record.instruction,
        priority=record.priority,
        is_active=record.is_active,
        created_at=record.created_at,
        updated_at=record.updated_at,
        execution_count=stats.get("execution_count", 0),
        last_executed=stats.get("last_executed"),
    )


@router.get("", response_model=List[InstructionResponse])
async def list_instructions(
    user_id: str = Depends(get_user_id),
    store: AgentStore = Depends(get_store),
) -> List[InstructionResponse]:
    """All instructions of the caller, newest first, with execution stats"""
    return [
        _to_response(record, store.instruction_stats(user_id, record.instruction))
        for record in store.list_instructions(user_id)
    ]


@router.post("", response_model=InstructionResponse, status_code=201)
async def create_instruction(
    request: InstructionCreate,
    user_id: str = Depends(get_user_id),
    store: AgentStore = Depends(get_store),
) -> InstructionResponse:
    record = store.create_instruction(
        user_id, request.instruction, priority=request.priority, is_active=request.is_active
    )
    return _to_response(record)


@router.patch("/{instruction_id}", response_model=InstructionResponse)
async def update_instruction(
    instruction_id: int,
    request: InstructionUpdate,
    user_id: str = Depends(get_user_id),
    store: AgentStore = Depends(get_store),
) -> InstructionResponse:
    record = store.update_instruction(user_id, instruction_id, **request.model_dump(exclude_none=True))
    if record is None:
        raise HTTPException(status_code=404, detail="Instruction not found")
    return _to_response(record, store.instruction_stats(user_id, record.instruction))


@router.delete("/{instruction_id}", status_code=204)
async def delete_instruction(
    instruction_id: int,
    user_id: str = Depends(get_user_id),
    store: AgentStore = Depends(get_store),
) -> Response:
    if not store.delete_instruction(user_id, instruction_id):
        raise HTTPException(status_code=404, detail="Instruction not found")
    return Response(status_code=204)
