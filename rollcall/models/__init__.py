"""Beanie document models and Pydantic schemas."""
from rollcall.models.user import User, UserRole, UserCreate, UserInDB
from rollcall.models.school_class import SchoolClass, SchoolClassCreate
from rollcall.models.student import Student, StudentCreate, StudentUpdate
from rollcall.models.attendance import AttendanceEntry, AttendanceEntryCreate
from rollcall.models.activity import MissionaryActivity, MissionaryActivityCreate

__all__ = [
    "User",
    "UserRole",
    "UserCreate",
    "UserInDB",
    "SchoolClass",
    "SchoolClassCreate",
    "Student",
    "StudentCreate",
    "StudentUpdate",
    "AttendanceEntry",
    "AttendanceEntryCreate",
    "MissionaryActivity",
    "MissionaryActivityCreate",
]
