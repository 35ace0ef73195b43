from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from rollcall.api.deps import get_current_user, get_wizard_registry
from rollcall.main import app
from rollcall.models.user import UserRole
from rollcall.services.wizard_sessions import WizardSessionRegistry
from rollcall.wizard.activities import ACTIVITY_KEYS

from tests.conftest import FakeRecordsGateway, WIZARD_DATE, make_students


@pytest.fixture
def fake_gateway():
    return FakeRecordsGateway(make_students("c1", "Ana", "Carlos"))


@pytest.fixture
def client(fake_gateway):
    teacher = SimpleNamespace(
        id="u1", role=UserRole.TEACHER, is_admin=False, assigned_class_ids=["c1"], is_active=True
    )
    registry = WizardSessionRegistry(lambda: fake_gateway, clock=lambda: WIZARD_DATE)
    app.dependency_overrides[get_current_user] = lambda: teacher
    app.dependency_overrides[get_wizard_registry] = lambda: registry
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_actions_need_a_class(client):
    resp = client.post("/api/wizard/attendance", json={"student_id": "s1", "present": True})
    assert resp.status_code == 409


def test_unassigned_class_is_forbidden(client):
    resp = client.post("/api/wizard/class", json={"class_id": "other"})
    assert resp.status_code == 403


def test_invalid_activity_value(client):
    client.post("/api/wizard/class", json={"class_id": "c1"})
    resp = client.put("/api/wizard/activities/visitantes", json={"value": -1})
    assert resp.status_code == 400
    resp = client.put("/api/wizard/activities/sermons", json={"value": 1})
    assert resp.status_code == 400


def test_full_wizard_over_http(client, fake_gateway):
    state = client.post("/api/wizard/class", json={"class_id": "c1", "class_name": "Adultos"}).json()
    assert state["step"] == 1
    assert state["current_student"]["full_name"] == "Ana"
    assert state["wizard_date"] == "2025-05-07"

    client.post("/api/wizard/attendance", json={"student_id": "s1", "present": True})
    state = client.post("/api/wizard/attendance", json={"student_id": "s2", "present": False}).json()
    assert state["step"] == 2

    client.post("/api/wizard/activities/advance")
    state = client.post("/api/wizard/calculator/open", json={}).json()
    assert state["calculator"]["is_open"] is True
    assert state["calculator"]["target"] == "literaturas_distribuidas"
    for key in ("3", "+", "2", "="):
        state = client.post("/api/wizard/calculator/key", json={"key": key}).json()
    assert state["calculator"]["result"] == "5"
    state = client.post("/api/wizard/calculator/apply").json()
    assert state["activities"]["literaturas_distribuidas"] == 5
    assert state["calculator"]["is_open"] is False

    for _ in range(len(ACTIVITY_KEYS) - 1):
        state = client.post("/api/wizard/activities/advance").json()
    assert state["step"] == 3
    assert state["last_submission_ok"] is True
    assert state["present_count"] == 1
    assert state["absent_count"] == 1
    assert len(fake_gateway.calls_named("create_attendance_record")) == 2


def test_failed_submission_shows_notification(client, fake_gateway):
    fake_gateway.fail_on = {"create_activity_record"}
    client.post("/api/wizard/class", json={"class_id": "c1"})
    state = client.post("/api/wizard/step", json={"step": 3}).json()
    assert state["step"] == 3
    assert state["notification"]
    state = client.post("/api/wizard/notification/dismiss").json()
    assert state["notification"] is None
