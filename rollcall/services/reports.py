"""Aggregations behind the admin reports (by date and by trimester)."""
from __future__ import annotations

import io
from collections.abc import Iterable, Mapping
from datetime import date, timedelta
from typing import Any, Optional

import pandas as pd

from rollcall.models.activity import MissionaryActivity
from rollcall.models.attendance import AttendanceEntry
from rollcall.services.records import activity_out
from rollcall.wizard.activities import ACTIVITY_KEYS, ActivityType, reconcile_counts

TRIMESTERS = (1, 2, 3, 4)


def trimester_bounds(year: int, trimester: int) -> tuple[date, date]:
    """First and last day of a calendar trimester (1 = Jan-Mar ... 4 = Oct-Dec)."""
    if trimester not in TRIMESTERS:
        raise ValueError(f"Trimester must be one of {TRIMESTERS}, got {trimester}")
    start_month = 3 * (trimester - 1) + 1
    start = date(year, start_month, 1)
    if trimester == 4:
        end = date(year, 12, 31)
    else:
        end = date(year, start_month + 3, 1) - timedelta(days=1)
    return start, end


def trimester_of(day: date) -> int:
    return (day.month - 1) // 3 + 1


def summarize_activities(records: Iterable[Mapping[str, Any]]) -> dict[str, int]:
    totals = {key: 0 for key in ACTIVITY_KEYS}
    for record in records:
        for key, value in reconcile_counts(record).items():
            totals[key] += value
    return totals


def attendance_summary(entries: Iterable[AttendanceEntry]) -> dict[str, Any]:
    present = absent = 0
    by_date: dict[str, dict[str, int]] = {}
    for e in entries:
        day = by_date.setdefault(e.date, {"present": 0, "absent": 0})
        if e.present:
            present += 1
            day["present"] += 1
        else:
            absent += 1
            day["absent"] += 1
    return {
        "present": present,
        "absent": absent,
        "total": present + absent,
        "by_date": dict(sorted(by_date.items())),
    }


def activities_dataframe(records: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    rows = []
    for record in records:
        counts = reconcile_counts(record)
        row = {"Data": record.get("date", "")}
        row.update({ActivityType(key).label: counts[key] for key in ACTIVITY_KEYS})
        rows.append(row)
    columns = ["Data"] + [a.label for a in ActivityType]
    return pd.DataFrame(rows, columns=columns)


def activities_csv(records: Iterable[Mapping[str, Any]]) -> str:
    stream = io.StringIO()
    activities_dataframe(records).to_csv(stream, index=False)
    return stream.getvalue()


async def load_activities(class_id: Optional[str], start: date, end: date) -> list[dict[str, Any]]:
    query: dict[str, Any] = {"date": {"$gte": start.isoformat(), "$lte": end.isoformat()}}
    if class_id:
        query["class_id"] = class_id
    records = await MissionaryActivity.find(query).sort("date").to_list()
    return [activity_out(a) for a in records]


async def load_attendance(class_id: str, day: date) -> list[AttendanceEntry]:
    return await AttendanceEntry.find({"class_id": class_id, "date": day.isoformat()}).to_list()
