import pytest

PATTERNS = "/api/shifts/rotation/patterns"
HISTORY = "/api/shifts/rotation/history"


def pattern_payload(**overrides):
    payload = {
        "name": "Assembly rotation",
        "teamId": 10,
        "patternType": "alternate_fs",
        "patternConfig": {"skipWeekends": True},
        "startsAt": "2024-07-01",
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def pattern_id(client):
    created = client.post(PATTERNS, json=pattern_payload())
    assert created.status_code == 201
    pid = created.get_json()["id"]
    assigned = client.post(
        "/api/shifts/rotation/assign", json={"patternId": pid, "shiftGroups": {"101": "F", "103": "S"}}
    )
    assert assigned.status_code == 201
    return pid


def test_create_pattern_caps_to_year_end(client):
    open_ended = client.post(PATTERNS, json=pattern_payload()).get_json()
    assert open_ended["endsAt"] == "2024-12-31"
    assert open_ended["patternType"] == "alternate_fs"
    assert open_ended["isActive"] is True

    long_running = client.post(PATTERNS, json=pattern_payload(teamId=13, endsAt="2025-06-30")).get_json()
    assert long_running["endsAt"] == "2024-12-31"

    assert client.post(PATTERNS, json=pattern_payload(name=" ")).status_code == 400
    assert client.post(PATTERNS, json=pattern_payload(teamId=12, startsAt="2025-01-05")).status_code == 400
    assert client.post(PATTERNS, json=pattern_payload(teamId=12, patternType="weekly")).status_code == 400


def test_overlapping_patterns_conflict_per_team(client):
    assert client.post(PATTERNS, json=pattern_payload(endsAt="2024-08-31")).status_code == 201

    overlap = client.post(PATTERNS, json=pattern_payload(startsAt="2024-08-15"))
    assert overlap.status_code == 409
    assert overlap.get_json()["error"]["code"] == "ROTATION_OVERLAP"

    assert client.post(PATTERNS, json=pattern_payload(startsAt="2024-09-02")).status_code == 201
    assert client.post(PATTERNS, json=pattern_payload(teamId=12)).status_code == 201
    assert len(client.get(f"{PATTERNS}?teamId=10").get_json()) == 2


def test_update_and_delete_pattern(client, pattern_id):
    updated = client.put(f"{PATTERNS}/{pattern_id}", json={"name": "Renamed"})
    assert updated.status_code == 200
    assert updated.get_json()["name"] == "Renamed"
    assert updated.get_json()["patternConfig"]["shiftGroups"] == {"101": "F", "103": "S"}

    assert client.delete(f"{PATTERNS}/{pattern_id}").status_code == 200
    assert client.get(f"{PATTERNS}/{pattern_id}").status_code == 404


def test_assign_rejects_unknown_employees(client, pattern_id):
    response = client.post("/api/shifts/rotation/assign", json={"patternId": pattern_id, "shiftGroups": {"999": "F"}})
    assert response.status_code == 400
    bad_group = client.post("/api/shifts/rotation/assign", json={"patternId": pattern_id, "shiftGroups": {"101": "X"}})
    assert bad_group.status_code == 400
    assert client.post("/api/shifts/rotation/assign", json={"patternId": 999, "userIds": [101]}).status_code == 404


def test_assign_lists_stored_groups(client, pattern_id):
    response = client.post("/api/shifts/rotation/assign", json={"patternId": pattern_id, "userIds": [104]})
    assignments = response.get_json()
    assert [(a["userId"], a["shiftGroup"]) for a in assignments] == [(101, "F"), (103, "S"), (104, "F")]
    assert assignments[0]["startsAt"] == "2024-07-01"
    assert assignments[0]["endsAt"] == "2024-12-31"


def test_preview_stores_nothing(client, pattern_id):
    payload = {"patternId": pattern_id, "startDate": "2024-07-01", "endDate": "2024-07-05", "preview": True}
    response = client.post("/api/shifts/rotation/generate", json=payload)
    assert response.status_code == 200
    result = response.get_json()
    assert result["preview"] is True
    assert len(result["entries"]) == 10
    history = client.get(f"{HISTORY}?startDate=2024-07-01&endDate=2024-07-07&teamId=10").get_json()
    assert history == []


def test_generate_persists_and_skips_existing(client, pattern_id):
    payload = {"patternId": pattern_id, "startDate": "2024-07-01", "endDate": "2024-07-12"}
    first = client.post("/api/shifts/rotation/generate", json=payload)
    assert first.status_code == 201
    assert len(first.get_json()["entries"]) == 20

    history = client.get(f"{HISTORY}?startDate=2024-07-01&endDate=2024-07-12&teamId=10").get_json()
    assert len(history) == 20
    first_week = {(h["userId"], h["shiftType"]) for h in history if h["shiftDate"] == "2024-07-01"}
    second_week = {(h["userId"], h["shiftType"]) for h in history if h["shiftDate"] == "2024-07-08"}
    assert first_week == {(101, "F"), (103, "S")}
    assert second_week == {(101, "S"), (103, "N")}
    assert not [h for h in history if h["shiftDate"] in ("2024-07-06", "2024-07-07")]

    again = client.post("/api/shifts/rotation/generate", json=payload).get_json()
    assert again["entries"] == []
    assert again["skipped"] == 20


def test_generate_requires_assignments_and_valid_window(client):
    pid = client.post(PATTERNS, json=pattern_payload(teamId=12)).get_json()["id"]
    response = client.post("/api/shifts/rotation/generate", json={"patternId": pid})
    assert response.status_code == 400
    assert "no assigned employees" in response.get_json()["error"]["message"]

    client.post("/api/shifts/rotation/assign", json={"patternId": pid, "userIds": [107]})
    same_day = {"patternId": pid, "startDate": "2024-07-03", "endDate": "2024-07-03"}
    assert client.post("/api/shifts/rotation/generate", json=same_day).status_code == 400


def test_history_requires_dates(client):
    response = client.get(f"{HISTORY}?teamId=10")
    assert response.status_code == 400


def test_delete_history_removes_team_rotation(client, pattern_id):
    client.post("/api/shifts/rotation/generate", json={"patternId": pattern_id, "endDate": "2024-07-05"})

    assert client.delete(HISTORY).status_code == 400
    response = client.delete(f"{HISTORY}?teamId=10")
    assert response.status_code == 200
    assert response.get_json()["deletedCounts"] == {"history": 10, "assignments": 2, "patterns": 1}
    assert client.get(f"{PATTERNS}/{pattern_id}").status_code == 404


def test_rotation_generate_command(app, client, pattern_id):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["rotation-generate", str(pattern_id), "2024-07-01", "2024-07-02", "--preview"])
    assert result.exit_code == 0
    assert "2024-07-01 F 101" in result.output
    assert "Previewed 4 shift(s), skipped 0." in result.output

    stored = runner.invoke(args=["rotation-generate", str(pattern_id), "2024-07-01", "2024-07-02"])
    assert "Generated 4 shift(s)" in stored.output
    assert len(client.get(f"{HISTORY}?startDate=2024-07-01&endDate=2024-07-02").get_json()) == 4

    missing = runner.invoke(args=["rotation-generate", "999", "2024-07-01", "2024-07-02"])
    assert missing.exit_code != 0
    assert "not found" in missing.output


def test_editing_a_pattern_regenerates_its_history(client, pattern_id):
    client.post("/api/shifts/rotation/generate", json={"patternId": pattern_id, "endDate": "2024-07-12"})
    window = f"{HISTORY}?startDate=2024-07-01&endDate=2024-07-31&teamId=10"

    night = client.put(f"{PATTERNS}/{pattern_id}", json={"patternType": "fixed_n"})
    assert night.status_code == 200
    assert night.get_json()["regenerated"] == 20
    assert night.get_json()["patternConfig"]["skipWeekends"] is True
    assert {h["shiftType"] for h in client.get(window).get_json()} == {"N"}

    regrouped = client.put(
        f"{PATTERNS}/{pattern_id}", json={"patternType": "custom", "patternConfig": {"shiftGroups": {"101": "F"}}}
    ).get_json()
    assert regrouped["regenerated"] == 10
    assert {(h["userId"], h["shiftType"]) for h in client.get(window).get_json()} == {(101, "F")}

    shortened = client.put(f"{PATTERNS}/{pattern_id}", json={"endsAt": "2024-07-05"}).get_json()
    assert shortened["regenerated"] == 5
    assert max(h["shiftDate"] for h in client.get(window).get_json()) == "2024-07-05"


def test_editing_a_pattern_checks_overlap_and_input(client, pattern_id):
    other = client.post(PATTERNS, json=pattern_payload(teamId=12, startsAt="2024-07-01")).get_json()["id"]
    moved = client.put(f"{PATTERNS}/{other}", json={"teamId": 10})
    assert moved.status_code == 409
    assert moved.get_json()["error"]["code"] == "ROTATION_OVERLAP"

    assert client.put(f"{PATTERNS}/{pattern_id}", json={"patternConfig": "weekly"}).status_code == 400
    assert client.put(f"{PATTERNS}/999", json={"name": "Missing"}).status_code == 404
