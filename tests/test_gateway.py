from dataclasses import replace
from datetime import date

import pytest

from rotaplan.domain.errors import EmployeeUnavailable, PersistenceFailure, PlanNotFound, RotationOverlap
from rotaplan.domain.rotation import PatternConfig, PatternKind, RotationPattern
from rotaplan.domain.shift import ShiftType
from rotaplan.services import PlanningSession, PlanState, WeekSource
from rotaplan_web.services.errors import ServiceError, conflict, not_found
from rotaplan_web.services.gateway import AppBackend, translate

ROTATION = RotationPattern(
    kind=PatternKind.ALTERNATE_FS,
    starts_at=date(2024, 7, 1),
    name="Assembly rotation",
    config=PatternConfig(shift_groups={101: ShiftType.EARLY, 103: ShiftType.LATE}),
)


def open_session(app) -> PlanningSession:
    planning = PlanningSession(AppBackend(app), today=date(2024, 7, 3))
    planning.select_area(1)
    planning.select_department(2)
    planning.select_team(10)
    assert planning.load_context_lists() is None
    assert planning.refresh_employees() is None
    planning.load_week()
    return planning


@pytest.fixture()
def live_session(app) -> PlanningSession:
    return open_session(app)


def test_translate_maps_service_errors():
    assert isinstance(translate(not_found("missing")), PlanNotFound)
    assert isinstance(translate(conflict("ROTATION_OVERLAP", "overlap")), RotationOverlap)
    failure = translate(ServiceError("BAD_REQUEST", "broken", 400))
    assert isinstance(failure, PersistenceFailure)
    assert failure.status == 400


def test_session_reads_seeded_team(live_session):
    assert set(live_session.employees) == {101, 102, 103, 104}
    assert live_session.state is PlanState.NO_PLAN
    assert isinstance(live_session.attempt_assign("2024-07-02", "early", 102).rejection, EmployeeUnavailable)
    assert isinstance(live_session.attempt_assign("2024-07-02", "early", 104).rejection, EmployeeUnavailable)


def test_saved_plan_survives_a_new_session(app, live_session):
    assert live_session.attempt_assign("2024-07-02", "early", 101)
    assert live_session.attempt_assign("2024-07-02", "night", 103)
    assert live_session.save("Inventory on Friday").code == "SAVED"

    reopened = open_session(app)
    assert reopened.state is PlanState.SAVED
    assert reopened.lifecycle.plan_id == live_session.lifecycle.plan_id
    assert reopened.notes == "Inventory on Friday"
    assert reopened.grid.get("2024-07-02", "early") == [101]
    assert reopened.grid.get("2024-07-02", "night") == [103]

    assert reopened.unlock()
    assert reopened.attempt_assign("2024-07-03", "late", 101)
    assert reopened.save().code == "SAVED"
    assert open_session(app).grid.get("2024-07-03", "late") == [101]


def test_reset_deletes_plan_in_database(app, live_session):
    live_session.attempt_assign("2024-07-02", "early", 101)
    live_session.save()
    assert live_session.reset().code == "RESET"
    assert open_session(app).state is PlanState.NO_PLAN


def test_rotation_round_trip_through_database(app, live_session):
    notice = live_session.create_rotation(ROTATION, date(2024, 7, 1), date(2024, 7, 31))
    assert notice.code == "ROTATION_CREATED"
    assert "46 shifts" in notice.message
    assert live_session.state is PlanState.ROTATION
    assert live_session.source is WeekSource.ROTATION
    assert live_session.grid.get("2024-07-01", "early") == [101]
    assert live_session.grid.get("2024-07-01", "late") == [103]

    reopened = open_session(app)
    assert reopened.load_preferences() is None
    assert reopened.preferences.rotation is True
    reopened.reload()
    assert reopened.state is PlanState.ROTATION

    again = live_session.create_rotation(ROTATION, date(2024, 7, 1), date(2024, 7, 31))
    assert again.code == "ROTATION_OVERLAP"

    live_session.set_rotation(False)
    assert live_session.source is WeekSource.MANUAL
    assert live_session.grid.is_empty()
    assert live_session.create_rotation(ROTATION, date(2024, 7, 1), date(2024, 7, 31)).code == "ROTATION_CREATED"


def test_edited_rotation_is_regenerated_through_database(app, live_session):
    live_session.create_rotation(ROTATION, date(2024, 7, 1), date(2024, 7, 31))
    pattern_id = live_session.backend.get_preferences()["rotation_pattern_id"]

    notice = live_session.update_rotation(replace(ROTATION, id=pattern_id, kind=PatternKind.FIXED_N))

    assert notice.code == "ROTATION_UPDATED"
    assert "46 shifts regenerated" in notice.message
    assert live_session.state is PlanState.ROTATION
    assert live_session.grid.get("2024-07-01", "night") == [101, 103]
    assert live_session.grid.get("2024-07-01", "early") == []
    assert open_session(app).backend.fetch_rotation_history("2024-07-31", "2024-07-31", 10)[0]["shiftType"] == "N"
