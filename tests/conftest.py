import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("DEBUG", "1")

from datetime import date  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402

from rollcall.wizard.gateway import (  # noqa: E402
    AttendanceEntryOut,
    RecentRecordDates,
    StudentSummary,
    TodayRecordStatus,
)

WIZARD_DATE = date(2025, 5, 7)


class FakeRecordsGateway:
    """In-memory gateway that records every call in order."""

    def __init__(self, students=None):
        self.students: dict[str, list[StudentSummary]] = {}
        self.attendance: dict[tuple[str, date], AttendanceEntryOut] = {}
        self.activities: dict[tuple[str, date], dict[str, Any]] = {}
        self.calls: list[tuple] = []
        self.fail_on: set[str] = set()
        self.today_status_override: TodayRecordStatus | None = None
        self.recent_override: RecentRecordDates | None = None
        for s in students or []:
            self.students.setdefault(s.class_id, []).append(s)

    def _call(self, name, *args):
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise RuntimeError(f"{name} unavailable")

    def _class_of(self, student_id):
        for class_id, students in self.students.items():
            if any(s.id == student_id for s in students):
                return class_id
        return ""

    async def list_active_students(self, class_id):
        self._call("list_active_students", class_id)
        return [s for s in self.students.get(class_id, []) if s.is_active]

    async def get_today_record_status(self, class_id, day):
        self._call("get_today_record_status", class_id, day)
        if self.today_status_override is not None:
            return self.today_status_override
        entries = [
            e for (sid, d), e in self.attendance.items() if d == day and self._class_of(sid) == class_id
        ]
        activity = self.activities.get((class_id, day))
        return TodayRecordStatus(
            has_records=bool(entries) or activity is not None,
            attendance_records=entries,
            activity_record=activity,
        )

    async def find_recent_record_dates(self, class_id):
        self._call("find_recent_record_dates", class_id)
        if self.recent_override is not None:
            return self.recent_override
        found = {d for (cid, d) in self.activities if cid == class_id}
        found |= {d for (sid, d) in self.attendance if self._class_of(sid) == class_id}
        return RecentRecordDates(has_records=bool(found), dates_found=sorted(found, reverse=True))

    async def list_attendance(self, class_id, day):
        self._call("list_attendance", class_id, day)
        return [e for (sid, d), e in self.attendance.items() if d == day and self._class_of(sid) == class_id]

    async def list_activities(self, class_id, day):
        self._call("list_activities", class_id, day)
        record = self.activities.get((class_id, day))
        return [record] if record else []

    async def create_attendance_record(self, student_id, present, day):
        self._call("create_attendance_record", student_id, present, day)
        entry = AttendanceEntryOut(student_id=student_id, present=present, date=day)
        self.attendance[(student_id, day)] = entry
        return entry

    async def create_activity_record(self, class_id, day, counts):
        self._call("create_activity_record", class_id, day, dict(counts))
        record = {"class_id": class_id, "date": day.isoformat(), **counts}
        self.activities[(class_id, day)] = record
        return dict(record)

    def calls_named(self, name):
        return [c for c in self.calls if c[0] == name]


def make_students(class_id, *names):
    return [
        StudentSummary(id=f"s{i + 1}", full_name=name, class_id=class_id)
        for i, name in enumerate(names)
    ]


@pytest.fixture
def gateway():
    return FakeRecordsGateway(make_students("c1", "Ana", "Carlos"))


@pytest.fixture
def wizard_date():
    return WIZARD_DATE
