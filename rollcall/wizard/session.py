"""The attendance/activity recording wizard.

A `WizardSession` belongs to one teacher working on one class. It walks
through three steps:

1. ATTENDANCE - each active student is marked present or absent; marking the
   last student moves on automatically.
2. ACTIVITIES - the weekly activity counts are entered one field at a time,
   optionally through the embedded calculator.
3. COMPLETION - entering this step saves everything for the wizard date.

Selecting a class resets the session and pre-fills it from any records that
already exist for the wizard date, flagging the session as editing.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from enum import IntEnum
from typing import Any, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field

from rollcall.wizard.activities import (
    ACTIVITY_KEYS,
    ActivityType,
    activity_type,
    complete_counts,
    reconcile_counts,
    validate_count,
)
from rollcall.wizard.calculator import ArithmeticHelper
from rollcall.wizard.errors import NoClassSelectedError
from rollcall.wizard.gateway import AttendanceEntryOut, RecordsGateway, StudentSummary
from rollcall.wizard.roster import RosterWalker
from rollcall.wizard.submission import (
    SAVE_FAILED_MESSAGE,
    SubmissionResult,
    SubmissionSynchronizer,
)

logger = logging.getLogger(__name__)


class WizardStep(IntEnum):
    ATTENDANCE = 1
    ACTIVITIES = 2
    COMPLETION = 3


def today_in(timezone: str) -> date:
    return datetime.now(ZoneInfo(timezone)).date()


class CalculatorState(BaseModel):
    is_open: bool
    target: Optional[str] = None
    expression: str = ""
    result: str = "0"


class WizardState(BaseModel):
    """Read model of a session for the hosting UI."""

    step: WizardStep
    total_steps: int = len(WizardStep)
    class_id: Optional[str] = None
    class_name: str = ""
    wizard_date: date
    editing: bool = False
    students: list[StudentSummary] = Field(default_factory=list)
    student_index: int = 0
    current_student: Optional[StudentSummary] = None
    current_student_mark: Optional[bool] = None
    attendance: dict[str, bool] = Field(default_factory=dict)
    activity_index: int = 0
    current_activity: Optional[ActivityType] = None
    activities: dict[str, int] = Field(default_factory=dict)
    present_count: int = 0
    absent_count: int = 0
    calculator: CalculatorState
    submitting: bool = False
    last_submission_ok: Optional[bool] = None
    notification: Optional[str] = None


class WizardSession:
    def __init__(self, gateway: RecordsGateway, wizard_date: Optional[date] = None, timezone: str = "UTC"):
        self._gateway = gateway
        self._synchronizer = SubmissionSynchronizer(gateway)
        self.wizard_date = wizard_date or today_in(timezone)
        self.class_id: Optional[str] = None
        self.class_name = ""
        self.calculator = ArithmeticHelper()
        self.submitting = False
        self.last_submission: Optional[SubmissionResult] = None
        self.notification: Optional[str] = None
        self.roster = RosterWalker()
        self.reset()

    # Navigation

    def reset(self) -> None:
        """Back to step 1 with empty marks and counts."""
        self.step = WizardStep.ATTENDANCE
        self.roster = RosterWalker(self.roster.students)
        self.activities: dict[str, int] = {}
        self.activity_index = 0
        self.editing = False
        self.calculator.close()
        self.last_submission = None
        self.notification = None

    async def go_to_step(self, step: int) -> None:
        if not WizardStep.ATTENDANCE <= step <= WizardStep.COMPLETION:
            return
        previous, self.step = self.step, WizardStep(step)
        if self.step == WizardStep.COMPLETION and previous != WizardStep.COMPLETION:
            await self.submit()

    async def next_step(self) -> None:
        if self.step < WizardStep.COMPLETION:
            await self.go_to_step(self.step + 1)

    def previous_step(self) -> None:
        if self.step > WizardStep.ATTENDANCE:
            self.step = WizardStep(self.step - 1)

    # Class selection and edit detection

    async def select_class(self, class_id: str, class_name: str = "") -> None:
        self.class_id = class_id
        self.class_name = class_name
        self.roster = RosterWalker()
        self.reset()
        try:
            students = await self._gateway.list_active_students(class_id)
        except Exception:
            logger.exception("Error fetching students for class %s", class_id)
            students = []
        self.roster = RosterWalker(students)
        await self._load_existing_records()

    async def _load_existing_records(self) -> None:
        attendance: list[AttendanceEntryOut] = []
        activity: Optional[dict[str, Any]] = None
        try:
            status = await self._gateway.get_today_record_status(self.class_id, self.wizard_date)
            if status.has_records:
                attendance, activity = status.attendance_records, status.activity_record
        except Exception:
            logger.exception("Error checking today's records for class %s", self.class_id)

        if not attendance and activity is None:
            attendance, activity = await self._load_from_recent_dates()

        if not attendance and activity is None:
            return
        try:
            marks = {entry.student_id: entry.present for entry in attendance}
            counts = reconcile_counts(activity) if activity is not None else {}
        except Exception:
            logger.exception("Error reading existing records for class %s", self.class_id)
            return
        self.roster.attendance.update(marks)
        self.activities = counts
        self.editing = True
        logger.info(
            "Editing existing records for class %s on %s (%d attendance entries)",
            self.class_id, self.wizard_date, len(attendance),
        )

    async def _load_from_recent_dates(self) -> tuple[list[AttendanceEntryOut], Optional[dict[str, Any]]]:
        try:
            recent = await self._gateway.find_recent_record_dates(self.class_id)
            if not recent.has_records or self.wizard_date not in recent.dates_found:
                return [], None
            attendance = await self._gateway.list_attendance(self.class_id, self.wizard_date)
            activities = await self._gateway.list_activities(self.class_id, self.wizard_date)
        except Exception:
            logger.exception("Error loading recent records for class %s", self.class_id)
            return [], None
        return attendance, (activities[-1] if activities else None)

    # Attendance

    def mark_attendance(self, student_id: str, present: bool) -> None:
        completed = self.roster.mark(student_id, present)
        if completed and self.step == WizardStep.ATTENDANCE:
            self.step = WizardStep.ACTIVITIES

    def previous_student(self) -> None:
        self.roster.previous()

    # Activities

    @property
    def current_activity(self) -> ActivityType:
        return ActivityType(ACTIVITY_KEYS[self.activity_index])

    def set_activity_value(self, key: str, value: int) -> None:
        self.activities[activity_type(key).value] = validate_count(value)

    def activity_value(self, key: str) -> int:
        return self.activities.get(activity_type(key).value, 0)

    async def advance_activity(self) -> None:
        if self.activity_index < len(ACTIVITY_KEYS) - 1:
            self.activity_index += 1
        else:
            await self.go_to_step(WizardStep.COMPLETION)

    def previous_activity(self) -> None:
        if self.activity_index > 0:
            self.activity_index -= 1

    # Calculator

    def open_calculator(self, key: Optional[str] = None) -> None:
        target = activity_type(key) if key else self.current_activity
        self.calculator.open(target.value, self.activity_value(target.value))

    def calculator_action(self, name: str, value: Optional[str] = None) -> None:
        self.calculator.action(name, value)

    def press_calculator_key(self, key: str) -> bool:
        return self.calculator.press_key(key)

    def apply_calculator(self) -> Optional[int]:
        target, value = self.calculator.confirm()
        if target is None:
            return None
        self.activities[target] = value
        return value

    def close_calculator(self) -> None:
        self.calculator.close()

    # Submission

    async def submit(self) -> SubmissionResult:
        if self.class_id is None:
            raise NoClassSelectedError("Select a class before submitting")
        if self.submitting:
            logger.warning("Submission already in progress for class %s", self.class_id)
            return self.last_submission or SubmissionResult(success=False, error="in progress")
        self.submitting = True
        class_id = self.class_id
        attendance, counts = dict(self.roster.attendance), dict(self.activities)
        try:
            result = await self._synchronizer.submit(class_id, self.wizard_date, attendance, counts)
        finally:
            self.submitting = False
        self.last_submission = result
        if result.success and self.class_id == class_id:
            # Fields edited while the writes were in flight keep the newer value.
            for key, value in result.counts.items():
                if self.activities.get(key) == counts.get(key):
                    self.activities[key] = value
            self.notification = None
        elif not result.success:
            self.notification = SAVE_FAILED_MESSAGE
        return result

    def dismiss_notification(self) -> None:
        self.notification = None

    # Read model

    @property
    def attendance(self) -> dict[str, bool]:
        return self.roster.attendance

    def snapshot(self) -> WizardState:
        current = self.roster.current_student
        return WizardState(
            step=self.step,
            class_id=self.class_id,
            class_name=self.class_name,
            wizard_date=self.wizard_date,
            editing=self.editing,
            students=self.roster.students,
            student_index=self.roster.cursor,
            current_student=current,
            current_student_mark=self.roster.mark_of(current.id) if current else None,
            attendance=dict(self.roster.attendance),
            activity_index=self.activity_index,
            current_activity=self.current_activity,
            activities=complete_counts(self.activities),
            present_count=self.roster.present_count,
            absent_count=self.roster.absent_count,
            calculator=CalculatorState(
                is_open=self.calculator.is_open,
                target=self.calculator.target,
                expression=self.calculator.expression,
                result=self.calculator.result,
            ),
            submitting=self.submitting,
            last_submission_ok=self.last_submission.success if self.last_submission else None,
            notification=self.notification,
        )
