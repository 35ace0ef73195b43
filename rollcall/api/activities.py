"""Missionary activity counts per class and date."""
from typing import Optional

from fastapi import APIRouter, Query

from rollcall.api.attendance import history_range, history_scope, parse_day
from rollcall.api.deps import Gateway, TeacherOrAdmin, ensure_class_access
from rollcall.models.activity import MissionaryActivityCreate
from rollcall.services.records import activity_history
from rollcall.wizard.activities import ACTIVITY_KEYS

router = APIRouter()


@router.get("/")
async def list_activities(
    user: TeacherOrAdmin,
    class_id: Optional[str] = None,
    date_str: Optional[str] = Query(None, alias="date"),
    month: Optional[str] = Query(None, description="YYYY-MM"),
):
    """Activity history with class names, optionally for one class, date or month."""
    start, end = history_range(date_str, month)
    return await activity_history(history_scope(user, class_id), start, end)


@router.post("/", status_code=201)
async def create_activity(data: MissionaryActivityCreate, user: TeacherOrAdmin, gateway: Gateway):
    """Save the counts of a class-date, replacing any record already there."""
    ensure_class_access(user, data.class_id)
    counts = {key: getattr(data, key) for key in ACTIVITY_KEYS}
    return await gateway.create_activity_record(data.class_id, parse_day(data.date), counts)
