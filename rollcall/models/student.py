"""Class members. Inactive students are kept for historical reports."""
from datetime import datetime
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, Field


class Student(Document):
    full_name: str
    class_id: Indexed(str)
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "students"
        use_state_management = True


class StudentCreate(BaseModel):
    full_name: str
    class_id: str


class StudentUpdate(BaseModel):
    """All fields optional for PATCH."""
    full_name: Optional[str] = None
    class_id: Optional[str] = None
    is_active: Optional[bool] = None
