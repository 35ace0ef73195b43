"""Attendance/activity wizard endpoints.

Each user has one wizard session held by the server; every endpoint returns
the resulting `WizardState` for the UI to render.
"""
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from rollcall.api.deps import Registry, TeacherOrAdmin, ensure_class_access
from rollcall.models.user import User
from rollcall.wizard.errors import NoClassSelectedError, WizardError
from rollcall.wizard.session import WizardSession, WizardState

router = APIRouter()


class SelectClassRequest(BaseModel):
    class_id: str
    class_name: str = ""


class MarkAttendanceRequest(BaseModel):
    student_id: str
    present: bool


class ActivityValueRequest(BaseModel):
    value: int


class OpenCalculatorRequest(BaseModel):
    key: Optional[str] = None


class CalculatorActionRequest(BaseModel):
    action: str
    value: Optional[str] = None


class CalculatorKeyRequest(BaseModel):
    key: str


class GoToStepRequest(BaseModel):
    step: int


def _session(registry, user: User) -> WizardSession:
    return registry.get(str(user.id))


def _active_session(registry, user: User) -> WizardSession:
    session = _session(registry, user)
    if session.class_id is None:
        raise HTTPException(status_code=409, detail="Select a class first")
    return session


def _bad_request(exc: WizardError) -> HTTPException:
    return HTTPException(status_code=400, detail=str(exc))


@router.get("/", response_model=WizardState)
async def get_state(user: TeacherOrAdmin, registry: Registry):
    return _session(registry, user).snapshot()


@router.post("/class", response_model=WizardState)
async def select_class(data: SelectClassRequest, user: TeacherOrAdmin, registry: Registry):
    """Start over on a class, pre-filled from today's records if any."""
    ensure_class_access(user, data.class_id)
    session = registry.restart(str(user.id))
    await session.select_class(data.class_id, data.class_name)
    return session.snapshot()


@router.post("/reset", response_model=WizardState)
async def reset(user: TeacherOrAdmin, registry: Registry):
    session = _session(registry, user)
    session.reset()
    return session.snapshot()


@router.post("/attendance", response_model=WizardState)
async def mark_attendance(data: MarkAttendanceRequest, user: TeacherOrAdmin, registry: Registry):
    session = _active_session(registry, user)
    session.mark_attendance(data.student_id, data.present)
    return session.snapshot()


@router.post("/attendance/previous", response_model=WizardState)
async def previous_student(user: TeacherOrAdmin, registry: Registry):
    session = _active_session(registry, user)
    session.previous_student()
    return session.snapshot()


@router.put("/activities/{key}", response_model=WizardState)
async def set_activity_value(key: str, data: ActivityValueRequest, user: TeacherOrAdmin, registry: Registry):
    session = _active_session(registry, user)
    try:
        session.set_activity_value(key, data.value)
    except WizardError as exc:
        raise _bad_request(exc)
    return session.snapshot()


@router.post("/activities/advance", response_model=WizardState)
async def advance_activity(user: TeacherOrAdmin, registry: Registry):
    session = _active_session(registry, user)
    await session.advance_activity()
    return session.snapshot()


@router.post("/activities/previous", response_model=WizardState)
async def previous_activity(user: TeacherOrAdmin, registry: Registry):
    session = _active_session(registry, user)
    session.previous_activity()
    return session.snapshot()


@router.post("/step/next", response_model=WizardState)
async def next_step(user: TeacherOrAdmin, registry: Registry):
    session = _active_session(registry, user)
    await session.next_step()
    return session.snapshot()


@router.post("/step/previous", response_model=WizardState)
async def previous_step(user: TeacherOrAdmin, registry: Registry):
    session = _active_session(registry, user)
    session.previous_step()
    return session.snapshot()


@router.post("/step", response_model=WizardState)
async def go_to_step(data: GoToStepRequest, user: TeacherOrAdmin, registry: Registry):
    session = _active_session(registry, user)
    await session.go_to_step(data.step)
    return session.snapshot()


@router.post("/submit", response_model=WizardState)
async def submit(user: TeacherOrAdmin, registry: Registry):
    """Save again after a failed attempt; failures show up as `notification`."""
    session = _session(registry, user)
    try:
        await session.submit()
    except NoClassSelectedError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return session.snapshot()


@router.post("/notification/dismiss", response_model=WizardState)
async def dismiss_notification(user: TeacherOrAdmin, registry: Registry):
    session = _session(registry, user)
    session.dismiss_notification()
    return session.snapshot()


@router.post("/calculator/open", response_model=WizardState)
async def open_calculator(data: OpenCalculatorRequest, user: TeacherOrAdmin, registry: Registry):
    session = _active_session(registry, user)
    try:
        session.open_calculator(data.key)
    except WizardError as exc:
        raise _bad_request(exc)
    return session.snapshot()


@router.post("/calculator/action", response_model=WizardState)
async def calculator_action(data: CalculatorActionRequest, user: TeacherOrAdmin, registry: Registry):
    session = _active_session(registry, user)
    session.calculator_action(data.action, data.value)
    return session.snapshot()


@router.post("/calculator/key", response_model=WizardState)
async def calculator_key(data: CalculatorKeyRequest, user: TeacherOrAdmin, registry: Registry):
    session = _active_session(registry, user)
    session.press_calculator_key(data.key)
    return session.snapshot()


@router.post("/calculator/apply", response_model=WizardState)
async def apply_calculator(user: TeacherOrAdmin, registry: Registry):
    session = _active_session(registry, user)
    session.apply_calculator()
    return session.snapshot()


@router.post("/calculator/close", response_model=WizardState)
async def close_calculator(user: TeacherOrAdmin, registry: Registry):
    session = _active_session(registry, user)
    session.close_calculator()
    return session.snapshot()
