"""Attendance and missionary-activity recording wizard."""
from rollcall.wizard.activities import ACTIVITY_KEYS, ActivityType
from rollcall.wizard.calculator import ArithmeticHelper
from rollcall.wizard.gateway import (
    AttendanceEntryOut,
    RecentRecordDates,
    RecordsGateway,
    StudentSummary,
    TodayRecordStatus,
)
from rollcall.wizard.roster import RosterWalker
from rollcall.wizard.session import WizardSession, WizardState, WizardStep
from rollcall.wizard.submission import SubmissionResult, SubmissionSynchronizer

__all__ = [
    "ACTIVITY_KEYS",
    "ActivityType",
    "ArithmeticHelper",
    "AttendanceEntryOut",
    "RecentRecordDates",
    "RecordsGateway",
    "StudentSummary",
    "TodayRecordStatus",
    "RosterWalker",
    "WizardSession",
    "WizardState",
    "WizardStep",
    "SubmissionResult",
    "SubmissionSynchronizer",
]
