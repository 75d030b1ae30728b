from datetime import date

from rotaplan.domain.shift import ShiftType
from rotaplan.services.grid import AssignmentGrid


def test_toggle_adds_then_removes():
    grid = AssignmentGrid()
    assert grid.toggle("2024-07-01", "early", 101) is True
    assert grid.get("2024-07-01", ShiftType.EARLY) == [101]
    assert grid.toggle("2024-07-01", "F", 101) is False
    assert grid.get("2024-07-01", "early") == []
    assert grid.is_empty()


def test_set_removes_duplicates():
    grid = AssignmentGrid()
    grid.set("2024-07-01", "late", [101, 102, 101])
    assert grid.get("2024-07-01", "late") == [101, 102]


def test_invalid_keys_are_no_data():
    grid = AssignmentGrid()
    assert grid.get("not-a-date", "early") == []
    assert grid.get("2024-07-01", "brunch") == []
    grid.set("2024-13-01", "early", [1])
    assert grid.toggle("2024-07-01", "brunch", 1) is False
    assert grid.is_empty()


def test_load_replaces_contents():
    grid = AssignmentGrid()
    grid.set("2024-07-01", "early", [1])
    entries = [("2024-07-02", ShiftType.NIGHT, 5), ("2024-07-02", ShiftType.NIGHT, 6)]
    grid.load(entries)
    grid.load(entries)
    assert list(grid) == ["2024-07-02"]
    assert grid.get("2024-07-02", "night") == [5, 6]
    assert list(grid.entries()) == entries


def test_day_rows_and_queries():
    grid = AssignmentGrid([("2024-07-03", ShiftType.LATE, 7)])
    assert grid["2024-07-03"] == {ShiftType.EARLY: [], ShiftType.LATE: [7], ShiftType.NIGHT: []}
    assert grid.shifts_of(7, "2024-07-03") == [ShiftType.LATE]
    assert grid.as_dict() == {"2024-07-03": {"late": [7]}}
    assert grid.remove("2024-07-03", "late", 7) is True
    assert grid.remove("2024-07-03", "late", 7) is False


def test_day_keys_must_be_plain_dates():
    grid = AssignmentGrid()
    for key in ("2024-07-08T00:00", " 2024-07-08", "2024-7-8", "20240708"):
        grid.set(key, "early", [1])
        assert grid.get(key, "early") == []
        assert grid.toggle(key, "early", 1) is False
        assert grid.shifts_of(1, key) == []
        assert grid[key] == {ShiftType.EARLY: [], ShiftType.LATE: [], ShiftType.NIGHT: []}
    assert grid.is_empty()

    grid.set(date(2024, 7, 8), "early", [1])
    assert grid.get("2024-07-08", "early") == [1]
    assert grid["2024-07-08T00:00"][ShiftType.EARLY] == []
