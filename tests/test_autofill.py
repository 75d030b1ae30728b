from datetime import date

from rotaplan.domain.employee import AvailabilityStatus, Employee
from rotaplan.services.autofill import AutofillAssistant
from rotaplan.services.context import ContextResolver
from rotaplan.domain.scope import Department, OrganizationalScope
from rotaplan.services.grid import AssignmentGrid
from rotaplan.services.validator import AssignmentValidator


def _assistant():
    context = ContextResolver(departments=[Department(2, "Assembly", None)])
    context.restore(OrganizationalScope(department_id=2))
    grid = AssignmentGrid()
    return AutofillAssistant(grid, AssignmentValidator(context, grid)), grid


def test_fills_remaining_weekdays():
    assistant, grid = _assistant()
    anna = Employee(id=101, first_name="Anna")
    grid.toggle("2024-07-03", "early", 101)
    filled = assistant.propagate(anna, "2024-07-03", "early")
    assert filled == [date(2024, 7, 1), date(2024, 7, 2), date(2024, 7, 4), date(2024, 7, 5)]
    assert grid.get("2024-07-06", "early") == []
    assert grid.get("2024-07-05", "early") == [101]


def test_occupied_and_invalid_days_are_skipped():
    assistant, grid = _assistant()
    grid.set("2024-07-02", "early", [200])
    grid.set("2024-07-04", "late", [101])
    anna = Employee(id=101, first_name="Anna")
    filled = assistant.propagate(anna, "2024-07-01", "early")
    assert filled == [date(2024, 7, 3), date(2024, 7, 5)]
    assert grid.get("2024-07-02", "early") == [200]


def test_unavailable_days_are_not_filled():
    assistant, grid = _assistant()
    jonas = Employee(
        id=102,
        availability_status=AvailabilityStatus.SICK,
        availability_start=date(2024, 7, 3),
        availability_end=date(2024, 7, 4),
    )
    assert assistant.propagate(jonas, "2024-07-01", "late") == [date(2024, 7, 2), date(2024, 7, 5)]
