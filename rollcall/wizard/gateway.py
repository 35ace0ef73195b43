"""Contract between the wizard and the persistence layer."""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Protocol

from pydantic import BaseModel, Field


class StudentSummary(BaseModel):
    id: str
    full_name: str
    class_id: str
    is_active: bool = True


class AttendanceEntryOut(BaseModel):
    id: Optional[str] = None
    student_id: str
    present: bool
    date: date
    record_date: Optional[datetime] = None


class TodayRecordStatus(BaseModel):
    has_records: bool = False
    attendance_records: list[AttendanceEntryOut] = Field(default_factory=list)
    # Raw mapping on purpose: field names are reconciled on load.
    activity_record: Optional[dict[str, Any]] = None


class RecentRecordDates(BaseModel):
    has_records: bool = False
    dates_found: list[date] = Field(default_factory=list)


class RecordsGateway(Protocol):
    """Async operations the wizard needs from storage.

    Implementations are awaited one call at a time; none of them is expected
    to be transactional with another.
    """

    async def list_active_students(self, class_id: str) -> list[StudentSummary]: ...

    async def get_today_record_status(self, class_id: str, day: date) -> TodayRecordStatus: ...

    async def find_recent_record_dates(self, class_id: str) -> RecentRecordDates: ...

    async def list_attendance(self, class_id: str, day: date) -> list[AttendanceEntryOut]: ...

    async def list_activities(self, class_id: str, day: date) -> list[dict[str, Any]]: ...

    async def create_attendance_record(
        self, student_id: str, present: bool, day: date
    ) -> AttendanceEntryOut: ...

    async def create_activity_record(
        self, class_id: str, day: date, counts: dict[str, int]
    ) -> dict[str, Any]: ...
