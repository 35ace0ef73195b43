"""MongoDB-backed records: the wizard gateway and the history listings."""
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime, timedelta
from typing import Any, Optional

from beanie import PydanticObjectId

from rollcall.config import settings
from rollcall.models.activity import MissionaryActivity
from rollcall.models.attendance import AttendanceEntry
from rollcall.models.school_class import SchoolClass
from rollcall.models.student import Student
from rollcall.wizard.activities import ACTIVITY_KEYS, complete_counts
from rollcall.wizard.gateway import (
    AttendanceEntryOut,
    RecentRecordDates,
    StudentSummary,
    TodayRecordStatus,
)
from rollcall.wizard.session import today_in

logger = logging.getLogger(__name__)


def safe_object_id(value: str | None) -> PydanticObjectId | None:
    if not value:
        return None
    try:
        return PydanticObjectId(value)
    except Exception:
        return None


def student_out(s: Student) -> StudentSummary:
    return StudentSummary(id=str(s.id), full_name=s.full_name, class_id=s.class_id, is_active=s.is_active)


def entry_out(e: AttendanceEntry) -> AttendanceEntryOut:
    return AttendanceEntryOut(
        id=str(e.id),
        student_id=e.student_id,
        present=e.present,
        date=date.fromisoformat(e.date),
        record_date=e.record_date,
    )


def activity_out(a: MissionaryActivity) -> dict[str, Any]:
    return {
        "id": str(a.id),
        "class_id": a.class_id,
        "date": a.date,
        **{key: getattr(a, key) for key in ACTIVITY_KEYS},
        "record_date": a.record_date,
    }


class BeanieRecordsGateway:
    """Attendance and activity writes are upserts keyed by date."""

    def __init__(
        self,
        recent_days: Optional[int] = None,
        timezone: Optional[str] = None,
        clock: Optional[Callable[[], date]] = None,
    ):
        self.recent_days = recent_days if recent_days is not None else settings.recent_record_days
        self.timezone = timezone or settings.timezone
        self._clock = clock or (lambda: today_in(self.timezone))

    async def list_active_students(self, class_id: str) -> list[StudentSummary]:
        students = (
            await Student.find({"class_id": class_id, "is_active": True})
            .sort("full_name")
            .to_list()
        )
        return [student_out(s) for s in students]

    async def get_today_record_status(self, class_id: str, day: date) -> TodayRecordStatus:
        entries = await AttendanceEntry.find({"class_id": class_id, "date": day.isoformat()}).to_list()
        activity = await MissionaryActivity.find_one({"class_id": class_id, "date": day.isoformat()})
        return TodayRecordStatus(
            has_records=bool(entries) or activity is not None,
            attendance_records=[entry_out(e) for e in entries],
            activity_record=activity_out(activity) if activity else None,
        )

    async def find_recent_record_dates(self, class_id: str) -> RecentRecordDates:
        since = (self._clock() - timedelta(days=self.recent_days)).isoformat()
        query = {"class_id": class_id, "date": {"$gte": since}}
        found: set[str] = set()
        for e in await AttendanceEntry.find(query).to_list():
            found.add(e.date)
        for a in await MissionaryActivity.find(query).to_list():
            found.add(a.date)
        dates = sorted((date.fromisoformat(d) for d in found), reverse=True)
        return RecentRecordDates(has_records=bool(dates), dates_found=dates)

    async def list_attendance(self, class_id: str, day: date) -> list[AttendanceEntryOut]:
        entries = await AttendanceEntry.find({"class_id": class_id, "date": day.isoformat()}).to_list()
        return [entry_out(e) for e in entries]

    async def list_activities(self, class_id: str, day: date) -> list[dict[str, Any]]:
        records = (
            await MissionaryActivity.find({"class_id": class_id, "date": day.isoformat()})
            .sort("record_date")
            .to_list()
        )
        return [activity_out(a) for a in records]

    async def create_attendance_record(self, student_id: str, present: bool, day: date) -> AttendanceEntryOut:
        oid = safe_object_id(student_id)
        student = await Student.get(oid) if oid else None
        if not student:
            logger.warning("Attendance recorded for unknown student %s", student_id)

        entry = await AttendanceEntry.find_one({"student_id": student_id, "date": day.isoformat()})
        if entry:
            entry.present = present
            entry.record_date = datetime.utcnow()
            if student:
                entry.class_id = student.class_id
            await entry.save()
            return entry_out(entry)

        entry = AttendanceEntry(
            student_id=student_id,
            class_id=student.class_id if student else "",
            date=day.isoformat(),
            present=present,
        )
        await entry.insert()
        return entry_out(entry)

    async def create_activity_record(
        self, class_id: str, day: date, counts: dict[str, int], created_by: Optional[str] = None
    ) -> dict[str, Any]:
        payload = complete_counts(counts)
        record = await MissionaryActivity.find_one({"class_id": class_id, "date": day.isoformat()})
        if record:
            for key, value in payload.items():
                setattr(record, key, value)
            record.record_date = datetime.utcnow()
            if created_by:
                record.created_by = created_by
            await record.save()
        else:
            record = MissionaryActivity(class_id=class_id, date=day.isoformat(), created_by=created_by, **payload)
            await record.insert()
        return activity_out(record)


def _history_query(class_ids: Optional[list[str]], start: Optional[date], end: Optional[date]) -> dict[str, Any]:
    query: dict[str, Any] = {}
    if class_ids is not None:
        query["class_id"] = {"$in": class_ids}
    date_range = {}
    if start:
        date_range["$gte"] = start.isoformat()
    if end:
        date_range["$lte"] = end.isoformat()
    if date_range:
        query["date"] = date_range
    return query


async def attendance_history(
    class_ids: Optional[list[str]] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[dict[str, Any]]:
    """Attendance marks with the student's name, newest date first.

    `class_ids=None` means every class. Marks whose student no longer exists
    are left out.
    """
    entries = await AttendanceEntry.find(_history_query(class_ids, start, end)).sort("-date").to_list()
    oids = [oid for oid in {safe_object_id(e.student_id) for e in entries} if oid]
    students = await Student.find({"_id": {"$in": oids}}).to_list() if oids else []
    names = {str(s.id): s.full_name for s in students}
    return [
        {**entry_out(e).model_dump(), "class_id": e.class_id, "student_name": names[e.student_id]}
        for e in entries
        if e.student_id in names
    ]


async def activity_history(
    class_ids: Optional[list[str]] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[dict[str, Any]]:
    """Activity records with the class name, newest date first."""
    records = await MissionaryActivity.find(_history_query(class_ids, start, end)).sort("-date").to_list()
    oids = [oid for oid in {safe_object_id(a.class_id) for a in records} if oid]
    classes = await SchoolClass.find({"_id": {"$in": oids}}).to_list() if oids else []
    names = {str(c.id): c.name for c in classes}
    return [
        {**activity_out(a), "class_name": names[a.class_id]}
        for a in records
        if a.class_id in names
    ]
