import asyncio

import pytest

from rollcall.wizard.activities import ACTIVITY_KEYS, ActivityType
from rollcall.wizard.errors import InvalidCountError, NoClassSelectedError, UnknownActivityError
from rollcall.wizard.gateway import AttendanceEntryOut, RecentRecordDates, TodayRecordStatus
from rollcall.wizard.session import WizardSession, WizardStep
from rollcall.wizard.submission import SAVE_FAILED_MESSAGE

from tests.conftest import FakeRecordsGateway, make_students


@pytest.fixture
async def session(gateway, wizard_date):
    s = WizardSession(gateway, wizard_date=wizard_date)
    await s.select_class("c1", "Classe Adultos")
    return s


async def finish_activities(session):
    for _ in ACTIVITY_KEYS:
        await session.advance_activity()


async def test_select_class_loads_roster(session, gateway):
    assert session.class_id == "c1"
    assert session.class_name == "Classe Adultos"
    assert [s.full_name for s in session.roster.students] == ["Ana", "Carlos"]
    assert session.step == WizardStep.ATTENDANCE
    assert session.editing is False
    assert gateway.calls_named("get_today_record_status")


@pytest.mark.parametrize("size", [1, 3, 6])
async def test_last_mark_advances_to_activities(size, wizard_date):
    students = make_students("c9", *[f"S{i}" for i in range(size)])
    session = WizardSession(FakeRecordsGateway(students), wizard_date=wizard_date)
    await session.select_class("c9")
    for student in students[:-1]:
        session.mark_attendance(student.id, True)
        assert session.step == WizardStep.ATTENDANCE
    session.mark_attendance(students[-1].id, True)
    assert session.step == WizardStep.ACTIVITIES


async def test_empty_roster_never_advances(wizard_date):
    session = WizardSession(FakeRecordsGateway(), wizard_date=wizard_date)
    await session.select_class("empty")
    session.mark_attendance("s1", True)
    assert session.step == WizardStep.ATTENDANCE
    assert session.attendance == {}
    assert session.snapshot().current_student is None


async def test_previous_student(session):
    session.previous_student()
    assert session.roster.cursor == 0
    session.mark_attendance("s1", True)
    session.previous_student()
    assert session.roster.cursor == 0
    assert session.attendance == {"s1": True}
    assert session.snapshot().current_student_mark is True


async def test_mark_after_attendance_step_does_not_jump(session):
    session.mark_attendance("s1", True)
    session.mark_attendance("s2", False)
    assert session.step == WizardStep.ACTIVITIES
    session.mark_attendance("s2", True)
    assert session.step == WizardStep.ACTIVITIES


async def test_set_activity_value_does_not_advance(session):
    session.set_activity_value("visitantes", 4)
    assert session.activities == {"visitantes": 4}
    assert session.activity_index == 0


async def test_set_activity_value_validates(session):
    with pytest.raises(UnknownActivityError):
        session.set_activity_value("sermons", 1)
    with pytest.raises(InvalidCountError):
        session.set_activity_value("visitantes", -2)


async def test_advance_and_previous_activity(session):
    await session.advance_activity()
    assert session.current_activity is ActivityType.LITERATURAS_DISTRIBUIDAS
    session.previous_activity()
    session.previous_activity()
    assert session.activity_index == 0


async def test_steps_are_clamped(session):
    session.previous_step()
    assert session.step == WizardStep.ATTENDANCE
    await session.next_step()
    assert session.step == WizardStep.ACTIVITIES
    await session.go_to_step(7)
    assert session.step == WizardStep.ACTIVITIES
    await session.next_step()
    await session.next_step()
    assert session.step == WizardStep.COMPLETION


async def test_entering_completion_submits_once(session, gateway):
    await session.go_to_step(WizardStep.COMPLETION)
    await session.next_step()
    await session.go_to_step(WizardStep.COMPLETION)
    assert len(gateway.calls_named("create_activity_record")) == 1


async def test_reset_clears_everything(session):
    session.mark_attendance("s1", True)
    session.mark_attendance("s2", True)
    session.set_activity_value("visitantes", 3)
    await session.advance_activity()
    session.editing = True
    session.open_calculator("visitantes")

    session.reset()

    assert session.step == WizardStep.ATTENDANCE
    assert session.roster.cursor == 0
    assert session.activity_index == 0
    assert session.attendance == {}
    assert session.activities == {}
    assert session.editing is False
    assert not session.calculator.is_open
    assert len(session.roster.students) == 2


async def test_calculator_apply_writes_target(session):
    await session.advance_activity()
    session.open_calculator()
    assert session.calculator.target == "literaturas_distribuidas"
    for key in ("3", "+", "2", "="):
        session.press_calculator_key(key)
    assert session.apply_calculator() == 5
    assert session.activities["literaturas_distribuidas"] == 5
    assert session.activity_index == 1


async def test_calculator_close_discards(session):
    session.set_activity_value("visitantes", 2)
    session.open_calculator("visitantes")
    session.calculator_action("number", "9")
    session.close_calculator()
    assert session.activity_value("visitantes") == 2


async def test_calculator_opens_with_stored_value(session):
    session.set_activity_value("visitantes", 11)
    session.open_calculator("visitantes")
    assert session.snapshot().calculator.result == "11"


async def test_prefills_from_today_records(wizard_date):
    gateway = FakeRecordsGateway(make_students("c1", "Ana", "Carlos"))
    gateway.today_status_override = TodayRecordStatus(
        has_records=True,
        attendance_records=[
            AttendanceEntryOut(student_id="s1", present=False, date=wizard_date),
        ],
        activity_record={"literaturasDistribuidas": 8, "Visitantes": 2},
    )
    session = WizardSession(gateway, wizard_date=wizard_date)
    await session.select_class("c1")
    assert session.editing is True
    assert session.attendance == {"s1": False}
    assert session.activities["literaturas_distribuidas"] == 8
    assert session.activities["visitantes"] == 2
    assert not gateway.calls_named("find_recent_record_dates")


async def test_prefills_from_recent_dates(wizard_date):
    gateway = FakeRecordsGateway(make_students("c1", "Ana", "Carlos"))
    gateway.today_status_override = TodayRecordStatus(has_records=False)
    gateway.attendance[("s2", wizard_date)] = AttendanceEntryOut(student_id="s2", present=True, date=wizard_date)
    gateway.activities[("c1", wizard_date)] = {"visitas_missionarias": 3}
    session = WizardSession(gateway, wizard_date=wizard_date)
    await session.select_class("c1")
    assert session.editing is True
    assert session.attendance == {"s2": True}
    assert session.activities["visitas_missionarias"] == 3
    assert gateway.calls_named("list_attendance")
    assert gateway.calls_named("list_activities")


async def test_recent_dates_for_other_days_are_ignored(wizard_date):
    gateway = FakeRecordsGateway(make_students("c1", "Ana"))
    gateway.recent_override = RecentRecordDates(has_records=True, dates_found=[wizard_date.replace(day=1)])
    session = WizardSession(gateway, wizard_date=wizard_date)
    await session.select_class("c1")
    assert session.editing is False
    assert not gateway.calls_named("list_attendance")


async def test_load_failures_are_swallowed(wizard_date):
    gateway = FakeRecordsGateway(make_students("c1", "Ana"))
    gateway.fail_on = {"list_active_students", "get_today_record_status", "find_recent_record_dates"}
    session = WizardSession(gateway, wizard_date=wizard_date)
    await session.select_class("c1")
    assert session.roster.is_empty
    assert session.editing is False
    assert session.step == WizardStep.ATTENDANCE


async def test_selecting_another_class_resets(session, gateway):
    session.mark_attendance("s1", True)
    session.set_activity_value("visitantes", 1)
    await session.select_class("c2", "Jovens")
    assert session.attendance == {}
    assert session.activities == {}
    assert session.roster.is_empty


async def test_submission_failure_stays_in_completion(session, gateway):
    gateway.fail_on = {"create_activity_record"}
    session.mark_attendance("s1", True)
    session.mark_attendance("s2", True)
    await finish_activities(session)
    assert session.step == WizardStep.COMPLETION
    assert session.notification == SAVE_FAILED_MESSAGE
    assert session.last_submission.success is False
    assert session.last_submission.failed_step == "activities"

    session.dismiss_notification()
    assert session.notification is None

    gateway.fail_on = set()
    result = await session.submit()
    assert result.success
    assert session.step == WizardStep.COMPLETION
    assert session.snapshot().last_submission_ok is True


async def test_submit_requires_class(gateway, wizard_date):
    session = WizardSession(gateway, wizard_date=wizard_date)
    with pytest.raises(NoClassSelectedError):
        await session.submit()


async def test_end_to_end_scenario(session, gateway, wizard_date):
    ana, carlos = session.roster.students
    session.mark_attendance(ana.id, True)
    assert session.step == WizardStep.ATTENDANCE
    session.mark_attendance(carlos.id, False)
    assert session.step == WizardStep.ACTIVITIES

    await session.advance_activity()
    assert session.current_activity is ActivityType.LITERATURAS_DISTRIBUIDAS
    session.open_calculator("literaturas_distribuidas")
    assert session.calculator.result == "0"
    session.calculator_action("number", "3")
    session.calculator_action("add")
    session.calculator_action("number", "2")
    session.calculator_action("equals")
    assert session.calculator.result == "5"
    session.apply_calculator()
    assert session.activities["literaturas_distribuidas"] == 5

    while session.step != WizardStep.COMPLETION:
        await session.advance_activity()

    assert gateway.calls_named("create_attendance_record") == [
        ("create_attendance_record", "s1", True, wizard_date),
        ("create_attendance_record", "s2", False, wizard_date),
    ]
    [(_, class_id, day, payload)] = gateway.calls_named("create_activity_record")
    assert (class_id, day) == ("c1", wizard_date)
    assert payload["literaturas_distribuidas"] == 5
    assert set(payload) == set(ACTIVITY_KEYS)
    assert all(v == 0 for k, v in payload.items() if k != "literaturas_distribuidas")
    assert session.last_submission.success
    assert session.snapshot().present_count == 1


async def test_unreadable_stored_counts_do_not_break_class_selection(wizard_date):
    gateway = FakeRecordsGateway(make_students("c1", "Ana"))
    gateway.today_status_override = TodayRecordStatus(
        has_records=True,
        activity_record={"visitantes": "²", "estudosBiblicos": float("inf"), "literaturas_distribuidas": 3},
    )
    session = WizardSession(gateway, wizard_date=wizard_date)
    await session.select_class("c1")
    assert session.editing is True
    assert session.activities["visitantes"] == 0
    assert session.activities["estudos_biblicos"] == 0
    assert session.activities["literaturas_distribuidas"] == 3
    assert session.roster.current_student.full_name == "Ana"


class SlowWriteGateway(FakeRecordsGateway):
    """Blocks the first attendance write until `release` is set."""

    def __init__(self, students=None):
        super().__init__(students)
        self.writing = asyncio.Event()
        self.release = asyncio.Event()

    async def create_attendance_record(self, student_id, present, day):
        self.writing.set()
        await self.release.wait()
        return await super().create_attendance_record(student_id, present, day)


async def test_edits_during_submission_do_not_break_it(wizard_date):
    gateway = SlowWriteGateway(make_students("c1", "Ana", "Carlos"))
    session = WizardSession(gateway, wizard_date=wizard_date)
    await session.select_class("c1")
    session.mark_attendance("s1", True)
    session.set_activity_value("literaturas_distribuidas", 2)

    saving = asyncio.create_task(session.go_to_step(WizardStep.COMPLETION))
    await gateway.writing.wait()
    session.mark_attendance("s2", False)
    session.set_activity_value("visitantes", 9)
    gateway.release.set()
    await saving

    assert session.last_submission.success
    assert [c[1] for c in gateway.calls_named("create_attendance_record")] == ["s1"]
    [(_, _, _, payload)] = gateway.calls_named("create_activity_record")
    assert payload["visitantes"] == 0
    assert session.activities["visitantes"] == 9
    assert session.activities["literaturas_distribuidas"] == 2
    assert session.attendance == {"s1": True, "s2": False}
