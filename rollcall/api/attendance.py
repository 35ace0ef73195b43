import calendar
from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from rollcall.api.deps import Gateway, TeacherOrAdmin, ensure_class_access
from rollcall.config import settings
from rollcall.models.attendance import AttendanceEntryCreate
from rollcall.models.student import Student
from rollcall.models.user import User
from rollcall.services.records import attendance_history, safe_object_id
from rollcall.wizard.session import today_in

router = APIRouter()


def parse_day(date_str: str) -> date:
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date format (YYYY-MM-DD)")


def parse_month(month: str) -> tuple[date, date]:
    """First and last day of a ``YYYY-MM`` month."""
    try:
        year, number = (int(part) for part in month.split("-"))
        last = calendar.monthrange(year, number)[1]
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid month format (YYYY-MM)")
    return date(year, number, 1), date(year, number, last)


def history_range(date_str: Optional[str], month: Optional[str]) -> tuple[Optional[date], Optional[date]]:
    if date_str:
        day = parse_day(date_str)
        return day, day
    if month:
        return parse_month(month)
    return None, None


def history_scope(user: User, class_id: Optional[str]) -> Optional[list[str]]:
    """Classes a history listing may cover; None means all of them."""
    if class_id:
        ensure_class_access(user, class_id)
        return [class_id]
    return None if user.is_admin else list(user.assigned_class_ids)


@router.get("/attendance")
async def list_attendance(
    user: TeacherOrAdmin,
    class_id: Optional[str] = None,
    date_str: Optional[str] = Query(None, alias="date"),
    month: Optional[str] = Query(None, description="YYYY-MM"),
):
    """Attendance history with student names, optionally for one class, date or month."""
    start, end = history_range(date_str, month)
    return await attendance_history(history_scope(user, class_id), start, end)


@router.post("/attendance", status_code=201)
async def create_attendance(data: AttendanceEntryCreate, user: TeacherOrAdmin, gateway: Gateway):
    """Record a mark; an existing mark for the same student and date is replaced."""
    oid = safe_object_id(data.student_id)
    student = await Student.get(oid) if oid else None
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    ensure_class_access(user, student.class_id)
    return await gateway.create_attendance_record(data.student_id, data.present, parse_day(data.date))


@router.get("/records/today/{class_id}")
async def today_record_status(class_id: str, user: TeacherOrAdmin, gateway: Gateway, date_str: str | None = Query(None, alias="date")):
    """Existing records of a class for a date (defaults to today)."""
    ensure_class_access(user, class_id)
    day = parse_day(date_str) if date_str else today_in(settings.timezone)
    return await gateway.get_today_record_status(class_id, day)


@router.get("/records/recent/{class_id}")
async def recent_record_dates(class_id: str, user: TeacherOrAdmin, gateway: Gateway):
    ensure_class_access(user, class_id)
    return await gateway.find_recent_record_dates(class_id)
