"""One-student-at-a-time attendance collection."""
from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

from rollcall.wizard.gateway import StudentSummary


class RosterWalker:
    """Walks the active roster in listing order, recording present/absent.

    Marks live in `attendance` (student id -> present), in the order they
    were first recorded. Going back never erases a mark.
    """

    def __init__(self, students: Sequence[StudentSummary] = ()):
        self.students: list[StudentSummary] = list(students)
        self.cursor = 0
        self.attendance: dict[str, bool] = {}

    @property
    def is_empty(self) -> bool:
        return not self.students

    @property
    def current_student(self) -> Optional[StudentSummary]:
        if self.is_empty:
            return None
        return self.students[self.cursor]

    @property
    def is_last(self) -> bool:
        return self.cursor >= len(self.students) - 1

    def mark(self, student_id: str, present: bool) -> bool:
        """Record a mark and move on.

        Returns True when the mark was made on the last student, i.e. the
        roster is complete. An empty roster records nothing and never
        completes.
        """
        if self.is_empty:
            return False
        self.attendance[student_id] = bool(present)
        if not self.is_last:
            self.cursor += 1
            return False
        return True

    def previous(self) -> None:
        if self.cursor > 0:
            self.cursor -= 1

    def mark_of(self, student_id: str) -> Optional[bool]:
        return self.attendance.get(student_id)

    @property
    def present_count(self) -> int:
        return sum(1 for present in self.attendance.values() if present)

    @property
    def absent_count(self) -> int:
        return sum(1 for present in self.attendance.values() if not present)
