from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class PauseRequest(BaseModel):
    duration_minutes: Optional[int] = Field(default=None, gt=0)


class TakeoverResponse(BaseModel):
    success: bool
    session_id: UUID
    human_takeover: bool
    auto_resume_at: Optional[datetime] = None
