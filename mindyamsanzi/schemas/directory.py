from pydantic import BaseModel, ConfigDict
from typing import Optional, List
import uuid


class MentorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    expertise: str
    location: str
    municipality: Optional[str] = None
    contact_info: Optional[str] = None
    bio: Optional[str] = None
    available: bool


class SupportResourceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    resource_type: str
    name: str
    description: Optional[str] = None
    location: Optional[str] = None
    municipality: Optional[str] = None
    contact_info: Optional[str] = None
    available: bool


class MentorDirectoryResponse(BaseModel):
    location: Optional[str] = None
    near_you: List[MentorResponse]
    other: List[MentorResponse]


class SupportDirectoryResponse(BaseModel):
    location: Optional[str] = None
    near_you: List[SupportResourceResponse]
    other: List[SupportResourceResponse]
