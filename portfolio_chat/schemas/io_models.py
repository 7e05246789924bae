"""Pydantic models for API I/O and conversation turns."""
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

DEFAULT_SESSION = "default"

Role = Literal["user", "assistant"]


class ConversationTurn(BaseModel):
    role: Role
    text: str
    timestamp: datetime = Field(default_factory=datetime.now)


class TurnResult(BaseModel):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None


class ChatRequest(BaseModel):
    message: Optional[str] = None
    session_id: Optional[str] = None


class ChatResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None


class InvalidateResponse(BaseModel):
    invalidated: bool
