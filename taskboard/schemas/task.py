from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
from enum import Enum

class TaskStatus(str, Enum):
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"

def _require_title(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("The title field is required.")
    return value

class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.pending

    @field_validator("title")
    @classmethod
    def clean_title(cls, value: str) -> str:
        return _require_title(value)

class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None

    @field_validator("title", "status", mode="before")
    @classmethod
    def reject_null(cls, value):
        # Omitting a field leaves it unchanged; sending null for these is an error.
        if value is None:
            raise ValueError("This field may not be null.")
        return value

    @field_validator("title")
    @classmethod
    def clean_title(cls, value: Optional[str]) -> Optional[str]:
        return _require_title(value)

class TaskResponse(BaseModel):
    id: int
    user_id: int
    title: str
    description: Optional[str]
    status: TaskStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class PageMeta(BaseModel):
    current_page: int
    last_page: int
    per_page: int
    total: int

class TaskPage(BaseModel):
    data: List[TaskResponse]
    meta: PageMeta

class MessageResponse(BaseModel):
    message: str

def normalize_search(search: Optional[str]) -> Optional[str]:
    """Trim a search term; blank means no search."""
    if search is None:
        return None
    search = search.strip()
    return search or None
