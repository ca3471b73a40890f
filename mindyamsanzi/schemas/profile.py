from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
import uuid


class ProfileCreateRequest(BaseModel):
    full_name: str = Field("Student", description="Display name")
    location: str = Field("", description="Free-text location, e.g. a township or town")
    municipality: Optional[str] = Field(None, description="Municipality used for local matching")
    grade: Optional[int] = Field(10, description="School grade level")
    school_name: Optional[str] = Field(None, description="School name")


class ProfileUpdateRequest(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1, description="Display name")
    location: Optional[str] = Field(None, description="Free-text location")
    municipality: Optional[str] = Field(None, description="Municipality")
    grade: Optional[int] = Field(None, description="School grade level")
    school_name: Optional[str] = Field(None, description="School name")


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    full_name: str
    location: str
    municipality: Optional[str] = None
    grade: Optional[int] = None
    school_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime
