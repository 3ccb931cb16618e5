"""
Pydantic models for API requests and responses
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Service status")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="API version")
    database: bool = Field(default=True, description="Database reachable")


class ConversationMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class QueryRequest(BaseModel):
    """Request model for the query endpoint"""
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "query": "Schedule a meeting with Sarah Johnson on July 16 at 2pm",
                    "conversationHistory": [
                        {"role": "user", "content": "Who is Sarah Johnson?"},
                        {"role": "assistant", "content": "Sarah is a client at Acme Corp."},
                    ],
                }
            ]
        },
    )

    query: str = Field(..., min_length=1, max_length=5000, description="User's question or command")
    conversation_history: List[ConversationMessage] = Field(
        default_factory=list,
        alias="conversationHistory",
        description="Earlier turns of the conversation, oldest first",
    )


class QueryResponse(BaseModel):
    """Reply plus the tool calls that were run for it"""
    model_config = ConfigDict(populate_by_name=True)

    response: str
    intent: Dict[str, Any]
    tool_calls: List[Dict[str, Any]] = Field(default_factory=list, alias="toolCalls")
    execution_log: List[Dict[str, Any]] = Field(default_factory=list, alias="executionLog")


class EventRequest(BaseModel):
    """
    Normalised webhook event

    The owning user comes from the X-User-Id header.
    """
    event: str = Field(..., description="What happened, e.g. new_email, contact_created")
    service: Literal["gmail", "calendar", "hubspot"]
    data: Dict[str, Any] = Field(default_factory=dict)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "event": "new_email",
                    "service": "gmail",
                    "data": {"senderEmail": "jane@acme.io", "subject": "Hello"},
                }
            ]
        }
    }


class EventResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    matched: int
    results: List[Dict[str, Any]] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    auto_replied: bool = Field(default=False, alias="autoReplied")


class InstructionCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    instruction: str = Field(..., min_length=1, description="Ongoing instruction in plain language")
    priority: Literal["low", "normal", "high"] = "normal"
    is_active: bool = Field(default=True, alias="isActive")


class InstructionUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    instruction: Optional[str] = Field(default=None, min_length=1)
    priority: Optional[Literal["low", "normal", "high"]] = None
    is_active: Optional[bool] = Field(default=None, alias="isActive")


class InstructionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    instruction: str
    priority: str
    is_active: bool = Field(alias="isActive")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    execution_count: int = Field(default=0, alias="executionCount")
    last_executed: Optional[datetime] = Field(default=None, alias="lastExecuted")
