from io import BytesIO

from openpyxl import load_workbook

from rotaplan_web.services.export_service import sheet_title

SHIFT = {"userId": 101, "date": "2024-07-02", "type": "F", "startTime": "06:00", "endTime": "14:00"}
PLAN_QUERY = "/api/shifts/plan?areaId=1&departmentId=2&teamId=10&startDate=2024-07-01&endDate=2024-07-07"


def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.data == b"OK"


def test_directory_lists_are_filtered(client):
    assert [a["id"] for a in client.get("/api/areas").get_json()] == [9, 1]
    departments = client.get("/api/departments?areaId=9").get_json()
    assert departments == [{"id": 3, "name": "Shipping", "areaId": 9}]
    machines = client.get("/api/machines?departmentId=2").get_json()
    assert {m["id"] for m in machines} == {5, 6}
    assert all(m["areaId"] == 1 for m in machines)
    teams = client.get("/api/teams?departmentId=2&machineId=5").get_json()
    assert [t["id"] for t in teams] == [10]


def test_employee_directory(client):
    employees = client.get("/api/employees?teamId=10").get_json()
    assert {e["id"] for e in employees} == {101, 102, 103, 104}
    jonas = next(e for e in employees if e["id"] == 102)
    assert jonas["availabilityStatus"] == "vacation"
    assert jonas["availabilityStart"] == "2024-07-01"

    response = client.get("/api/employees?teamId=abc")
    assert response.status_code == 400
    assert response.get_json()["error"]["code"] == "BAD_REQUEST"


def test_plan_lifecycle(client, make_week_payload):
    missing = client.get(PLAN_QUERY)
    assert missing.status_code == 404
    assert missing.get_json()["error"]["code"] == "NOT_FOUND"

    created = client.post("/api/shifts/plan", json=make_week_payload([SHIFT], notes="first"))
    assert created.status_code == 201
    plan_id = created.get_json()["planId"]
    assert len(created.get_json()["shiftIds"]) == 1

    loaded = client.get(PLAN_QUERY).get_json()
    assert loaded["plan"]["id"] == plan_id
    assert loaded["plan"]["name"] == "Week plan CW 27/2024"
    assert loaded["plan"]["notes"] == "first"
    assert [(s["userId"], s["date"], s["type"]) for s in loaded["shifts"]] == [(101, "2024-07-02", "F")]

    second = dict(SHIFT, userId=103, type="N", startTime="22:00", endTime="06:00")
    updated = client.put(f"/api/shifts/plan/{plan_id}", json=make_week_payload([SHIFT, second]))
    assert updated.status_code == 200
    assert len(client.get(f"/api/shifts/plan/{plan_id}").get_json()["shifts"]) == 2

    duplicate = client.post("/api/shifts/plan", json=make_week_payload([]))
    assert duplicate.status_code == 409
    assert duplicate.get_json()["error"]["code"] == "PLAN_EXISTS"

    assert client.delete(f"/api/shifts/plan/{plan_id}").status_code == 200
    assert client.get(PLAN_QUERY).status_code == 404
    assert client.delete(f"/api/shifts/plan/{plan_id}").status_code == 404


def test_plan_validation_errors(client, make_week_payload):
    wrong_area = client.post("/api/shifts/plan", json=make_week_payload(areaId=9))
    assert wrong_area.status_code == 400
    assert wrong_area.get_json()["error"]["code"] == "INVALID_SCOPE"

    double = [SHIFT, dict(SHIFT, type="S")]
    response = client.post("/api/shifts/plan", json=make_week_payload(double))
    assert response.status_code == 400
    assert response.get_json()["error"]["code"] == "DUPLICATE_SHIFT"

    outside = client.post("/api/shifts/plan", json=make_week_payload([dict(SHIFT, date="2024-07-09")]))
    assert outside.status_code == 400

    unknown = client.post("/api/shifts/plan", json=make_week_payload([dict(SHIFT, userId=999)]))
    assert unknown.status_code == 400
    assert "999" in unknown.get_json()["error"]["message"]


def test_export_plan_xlsx(client, make_week_payload):
    plan_id = client.post("/api/shifts/plan", json=make_week_payload([SHIFT], notes="Safety briefing")).get_json()[
        "planId"
    ]
    response = client.get(f"/api/shifts/plan/{plan_id}/export.xlsx")
    assert response.status_code == 200
    assert "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet" in response.headers["Content-Type"]
    assert "shift_plan_2024-07-01.xlsx" in response.headers["Content-Disposition"]

    sheet = load_workbook(BytesIO(response.data)).active
    assert sheet.title == "Week plan CW 27-2024"
    assert sheet.cell(row=1, column=1).value == "Shift"
    assert sheet.cell(row=1, column=3).value == "Tue 2024-07-02"
    assert sheet.cell(row=2, column=1).value == "Early shift (06:00-14:00)"
    assert sheet.cell(row=2, column=3).value == "Anna Berger"
    assert sheet.cell(row=6, column=2).value == "Safety briefing"

    assert client.get("/api/shifts/plan/999/export.xlsx").status_code == 404


def test_preferences(client):
    defaults = client.get("/api/preferences").get_json()
    assert defaults == {"autofill_enabled": False, "rotation_enabled": False, "fallback_enabled": False}

    response = client.put("/api/preferences/autofill_enabled", json={"value": True})
    assert response.get_json() == {"key": "autofill_enabled", "value": True}
    bulk = client.put("/api/preferences", json={"fallback_enabled": True, "rotation_pattern_id": 4})
    assert bulk.get_json()["rotation_pattern_id"] == 4

    current = client.get("/api/preferences").get_json()
    assert current["autofill_enabled"] is True
    assert current["fallback_enabled"] is True

    assert client.put("/api/preferences/Bad-Key", json={"value": 1}).status_code == 400
    assert client.put("/api/preferences/autofill_enabled", json={"enabled": 1}).status_code == 400


def test_favorites(client):
    payload = {"name": "Assembly A", "areaId": 1, "departmentId": 2, "machineId": 5, "teamId": 10}
    created = client.post("/api/shifts/favorites", json=payload)
    assert created.status_code == 201
    favorite = created.get_json()
    assert favorite["teamId"] == 10

    duplicate = client.post("/api/shifts/favorites", json=dict(payload, name="assembly a"))
    assert duplicate.status_code == 409
    assert duplicate.get_json()["error"]["code"] == "DUPLICATE"

    invalid = client.post("/api/shifts/favorites", json={"name": "Broken", "areaId": 9, "departmentId": 2})
    assert invalid.status_code == 400

    assert [f["name"] for f in client.get("/api/shifts/favorites").get_json()] == ["Assembly A"]
    assert client.delete(f"/api/shifts/favorites/{favorite['id']}").status_code == 200
    assert client.delete(f"/api/shifts/favorites/{favorite['id']}").status_code == 404


def test_init_db_command(app):
    result = app.test_cli_runner().invoke(args=["init-db"])
    assert result.exit_code == 0
    assert "Database initialized." in result.output


def test_init_db_force_recreates_the_database(app, client):
    payload = {"name": "Assembly A", "areaId": 1, "departmentId": 2, "machineId": 5, "teamId": 10}
    assert client.post("/api/shifts/favorites", json=payload).status_code == 201

    result = app.test_cli_runner().invoke(args=["init-db", "--force"])

    assert result.exit_code == 0, result.output
    assert client.get("/api/shifts/favorites").get_json() == []
    assert [a["id"] for a in client.get("/api/areas").get_json()] == [9, 1]


def test_sheet_titles_drop_forbidden_characters():
    assert sheet_title("Week plan CW 27/2024") == "Week plan CW 27-2024"
    assert sheet_title("[A]: *x?\\y") == "-A-- -x--y"
    assert sheet_title("/") == "-"
    assert sheet_title("") == "Plan"
    assert len(sheet_title("x" * 40)) == 31
