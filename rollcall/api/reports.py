"""Admin reports: activity totals by trimester, attendance by date."""
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import StreamingResponse

from rollcall.api.attendance import parse_day
from rollcall.api.deps import AdminOnly
from rollcall.config import settings
from rollcall.services.reports import (
    TRIMESTERS,
    activities_csv,
    attendance_summary,
    load_activities,
    load_attendance,
    summarize_activities,
    trimester_bounds,
    trimester_of,
)
from rollcall.wizard.session import today_in

router = APIRouter()


@router.get("/activities")
async def activities_report(
    user: AdminOnly,
    year: Optional[int] = None,
    trimester: Optional[int] = Query(None, ge=1, le=4),
    class_id: str | None = None,
    format: str = Query("json", enum=["json", "csv"]),
):
    """Activity records and totals of a trimester, optionally for one class.

    Year and trimester default to the current ones.
    """
    today = today_in(settings.timezone)
    year = year or today.year
    trimester = trimester or trimester_of(today)
    if trimester not in TRIMESTERS:
        raise HTTPException(status_code=400, detail="Invalid trimester")
    start, end = trimester_bounds(year, trimester)
    records = await load_activities(class_id, start, end)

    if format == "csv":
        filename = f"atividades_{class_id or 'todas'}_{year}_T{trimester}.csv"
        return StreamingResponse(
            iter([activities_csv(records)]),
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
    return {
        "class_id": class_id,
        "from_date": start,
        "to_date": end,
        "records": records,
        "totals": summarize_activities(records),
    }


@router.get("/attendance")
async def attendance_report(
    user: AdminOnly,
    class_id: str,
    date_str: str = Query(..., alias="date"),
):
    """Present/absent counts of a class on one date."""
    entries = await load_attendance(class_id, parse_day(date_str))
    return {"class_id": class_id, "date": date_str, **attendance_summary(entries)}
