from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum
import uuid


class TurnRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ChatTurn(BaseModel):
    role: TurnRole = Field(..., description="Who wrote the turn")
    content: str = Field(..., description="Turn text")


class ChatRequest(BaseModel):
    messages: List[ChatTurn] = Field(..., description="Full turn history, oldest first")
    student_id: Optional[str] = Field(None, description="Owner of the conversation")


class ChatResponse(BaseModel):
    message: str
    chat_id: str


class InterventionRequest(BaseModel):
    student_id: str = Field(..., description="Student the grade belongs to")
    subject: str = Field(..., description="Subject label")
    new_grade: float = Field(..., description="Newly recorded score")
    previous_grade: Optional[float] = Field(None, description="Previous score for the same subject")


class ChatMessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    role: str
    content: str
    meta: Optional[Dict[str, Any]] = Field(None, serialization_alias="metadata")
    created_at: datetime
