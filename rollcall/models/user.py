"""Logins for teachers and administrators."""
from datetime import datetime
from enum import Enum
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, Field


class UserRole(str, Enum):
    ADMIN = "admin"
    TEACHER = "teacher"


class User(Document):
    """Teacher or admin account; teachers only see their assigned classes."""

    cpf: Indexed(str, unique=True)  # login identifier
    hashed_password: str
    role: UserRole = UserRole.TEACHER
    full_name: str
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    assigned_class_ids: list[str] = Field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    class Settings:
        name = "users"
        use_state_management = True


class UserCreate(BaseModel):
    cpf: str
    password: str
    full_name: str
    role: UserRole = UserRole.TEACHER
    assigned_class_ids: list[str] = Field(default_factory=list)


class UserInDB(BaseModel):
    id: str
    cpf: str
    role: UserRole
    full_name: str
    is_active: bool
    assigned_class_ids: list[str] = []

    class Config:
        from_attributes = True
