"""Persisting a finished wizard run.

The write is a short saga of independent collaborator calls with no
transaction around them. Collaborator writes are upserts keyed by
(student, date) and (class, date), so the contract is at-least-once: a run
that fails half-way leaves partial data, and submitting again converges to
the intended state.
"""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from rollcall.wizard.activities import complete_counts, reconcile_counts
from rollcall.wizard.gateway import RecordsGateway

logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = "Não foi possível salvar os dados do registro."


@dataclass
class SagaStep:
    name: str
    action: Callable[[], Awaitable[Any]]
    compensate: Optional[Callable[[], Awaitable[Any]]] = None


class SagaError(Exception):
    def __init__(self, step: str, cause: BaseException):
        super().__init__(f"Step {step!r} failed: {cause}")
        self.step = step
        self.cause = cause


class Saga:
    """Runs steps in order; on failure, compensates applied steps in reverse."""

    def __init__(self, steps: Sequence[SagaStep]):
        self.steps = list(steps)
        self.applied: list[str] = []

    async def run(self) -> dict[str, Any]:
        results: dict[str, Any] = {}
        done: list[SagaStep] = []
        for step in self.steps:
            try:
                results[step.name] = await step.action()
            except Exception as exc:
                logger.error("Saga step %s failed: %s", step.name, exc)
                await self._compensate(done)
                raise SagaError(step.name, exc) from exc
            done.append(step)
            self.applied.append(step.name)
        return results

    async def _compensate(self, done: list[SagaStep]) -> None:
        for step in reversed(done):
            if step.compensate is None:
                continue
            try:
                await step.compensate()
            except Exception:
                logger.exception("Compensation for step %s failed", step.name)


@dataclass
class SubmissionResult:
    success: bool
    counts: dict[str, int] = field(default_factory=dict)
    replaced_existing: bool = False
    failed_step: Optional[str] = None
    error: Optional[str] = None


class SubmissionSynchronizer:
    def __init__(self, gateway: RecordsGateway):
        self._gateway = gateway

    def build_steps(
        self,
        class_id: str,
        day: date,
        attendance: Mapping[str, bool],
        counts: Mapping[str, int],
    ) -> list[SagaStep]:
        gateway = self._gateway
        payload = complete_counts(counts)

        async def check_existing():
            status = await gateway.get_today_record_status(class_id, day)
            if status.has_records:
                logger.info("Replacing existing records for class %s on %s", class_id, day)
            return status.has_records

        async def write_attendance():
            # Sequential on purpose: insertion order of the roster walk.
            written = []
            for student_id, present in attendance.items():
                written.append(await gateway.create_attendance_record(student_id, present, day))
            return written

        async def write_activities():
            return await gateway.create_activity_record(class_id, day, payload)

        return [
            SagaStep("check-existing", check_existing),
            SagaStep("attendance", write_attendance),
            SagaStep("activities", write_activities),
        ]

    async def submit(
        self,
        class_id: str,
        day: date,
        attendance: Mapping[str, bool],
        counts: Mapping[str, int],
    ) -> SubmissionResult:
        saga = Saga(self.build_steps(class_id, day, attendance, counts))
        try:
            results = await saga.run()
        except SagaError as exc:
            logger.error("Could not save wizard data for class %s on %s: %s", class_id, day, exc.cause)
            return SubmissionResult(success=False, failed_step=exc.step, error=str(exc.cause))

        merged = dict(counts)
        stored = results.get("activities")
        if stored:
            merged.update(reconcile_counts(stored))
        logger.info(
            "Saved %d attendance records and activities for class %s on %s",
            len(attendance), class_id, day,
        )
        return SubmissionResult(
            success=True,
            counts=complete_counts(merged),
            replaced_existing=bool(results.get("check-existing")),
        )
