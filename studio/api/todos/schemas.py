from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional


class TodoCreate(BaseModel):
    title: str = Field(..., min_length=1)


class TodoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    created_at: Optional[datetime] = None
