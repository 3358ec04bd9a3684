from __future__ import annotations

from io import BytesIO

import pytest
from openpyxl import load_workbook


@pytest.fixture()
def client(app):
    app.config["TODAY"] = "2024-03-01"
    with app.test_client() as client:
        yield client


def _add_units(client, count=3):
    ids = []
    for index in range(count):
        resp = client.post(
            "/api/units",
            json={"name": f"Ward {index}", "duration_days": 2, "workload": "High", "position": index + 1},
        )
        assert resp.status_code == 201
        ids.append(resp.get_json()["id"])
    return ids


def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.data == b"OK"


def test_create_intern_alternates_batches(client):
    first = client.post("/api/interns", json={"name": "Ada Obi", "start_date": "2024-03-02"}).get_json()
    second = client.post("/api/interns", json={"name": "Ben Eze", "start_date": "2024-03-02"}).get_json()
    assert (first["batch"], second["batch"]) == ("A", "B")
    assert first["rotations"] == []


def test_create_intern_with_auto_generation(client):
    unit_ids = _add_units(client)
    client.put("/api/settings/auto-generation", json={"value": {"auto_generate_on_create": True}})

    resp = client.post("/api/interns", json={"name": "Ada Obi", "start_date": "2024-03-02"})
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["auto_generated_rotations"] is True
    assert [r["unit_id"] for r in body["rotations"]] == unit_ids
    assert body["rotations"][0]["start_date"] == "2024-03-02"
    assert body["rotations"][-1]["end_date"] == "2024-03-07"


def test_schedule_seeds_first_rotation(client):
    unit_ids = _add_units(client)
    intern = client.post("/api/interns", json={"name": "Ada Obi", "start_date": "2024-01-01"}).get_json()

    schedule = client.get(f"/api/interns/{intern['id']}/schedule").get_json()
    assert schedule["status"] == "Active"
    assert [r["unit_id"] for r in schedule["rotations"]] == [unit_ids[0]]
    assert schedule["rotations"][0]["start_date"] == "2024-03-02"
    assert [u["unit_id"] for u in schedule["upcoming"]] == unit_ids

    again = client.post(f"/api/interns/{intern['id']}/advance").get_json()
    assert again == {"created": False}


def test_overlapping_manual_rotation_conflicts(client):
    unit_ids = _add_units(client)
    intern = client.post("/api/interns", json={"name": "Ada Obi", "start_date": "2024-01-01"}).get_json()
    payload = {"intern_id": intern["id"], "unit_id": unit_ids[0], "start_date": "2024-03-01", "end_date": "2024-03-04"}

    assert client.post("/api/rotations", json=payload).status_code == 201
    resp = client.post("/api/rotations", json={**payload, "start_date": "2024-03-04", "end_date": "2024-03-06"})
    assert resp.status_code == 409
    assert "error" in resp.get_json()


def test_extend_endpoint(client):
    unit_ids = _add_units(client)
    intern = client.post("/api/interns", json={"name": "Ada Obi", "start_date": "2024-01-01"}).get_json()
    client.post(
        "/api/rotations",
        json={"intern_id": intern["id"], "unit_id": unit_ids[1], "start_date": "2024-02-28", "end_date": "2024-03-02"},
    )

    resp = client.post(f"/api/interns/{intern['id']}/extend", json={"extension_days": 3, "reason": "presentation"})
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["status"] == "Extended"
    assert body["resized_rotation"]["end_date"] == "2024-03-05"

    bad = client.post(f"/api/interns/{intern['id']}/extend", json={"extension_days": 3, "reason": "holiday"})
    assert bad.status_code == 400


def test_errors_map_to_status_codes(client):
    assert client.get("/api/interns/999").status_code == 404
    assert client.post("/api/interns", json={"name": "A", "start_date": "2024-03-01"}).status_code == 400
    assert client.post("/api/units", json={"name": "Ward", "duration_days": 0}).status_code == 400
    _add_units(client, 1)
    assert client.post("/api/units", json={"name": "Ward 0", "duration_days": 3}).status_code == 409


def test_coverage_and_export(client):
    unit_ids = _add_units(client, 2)
    intern = client.post("/api/interns", json={"name": "Ada Obi", "batch": "A", "start_date": "2024-01-01"}).get_json()
    client.post(
        "/api/rotations",
        json={"intern_id": intern["id"], "unit_id": unit_ids[0], "start_date": "2024-03-01", "end_date": "2024-03-02"},
    )

    coverage = client.get("/api/reports/coverage").get_json()
    by_unit = {entry["unit_id"]: entry for entry in coverage["units"]}
    assert [i["intern_name"] for i in by_unit[unit_ids[0]]["batch_a"]] == ["Ada Obi"]
    assert by_unit[unit_ids[0]]["coverage_status"] == "critical"

    resp = client.get("/api/reports/export/xlsx")
    assert resp.status_code == 200
    assert "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet" in resp.headers["Content-Type"]
    sheet = load_workbook(BytesIO(resp.data)).active
    assert sheet.cell(row=1, column=1).value == "Intern"
    assert sheet.cell(row=2, column=1).value == "Ada Obi"


def test_cli_advance_all(app):
    app.config["TODAY"] = "2024-03-01"
    runner = app.test_cli_runner()
    result = runner.invoke(args=["advance-all"])
    assert result.exit_code == 0
    assert "advanced 0 interns" in result.output


def test_unit_with_pending_rotation_cannot_be_deleted(client):
    unit_ids = _add_units(client, 2)
    intern = client.post("/api/interns", json={"name": "Ada Obi", "start_date": "2024-01-01"}).get_json()
    client.post(
        "/api/rotations",
        json={"intern_id": intern["id"], "unit_id": unit_ids[0], "start_date": "2024-03-03", "end_date": "2024-03-05"},
    )
    client.post(
        "/api/rotations",
        json={"intern_id": intern["id"], "unit_id": unit_ids[1], "start_date": "2024-02-01", "end_date": "2024-02-02"},
    )

    resp = client.delete(f"/api/units/{unit_ids[0]}")
    assert resp.status_code == 409
    rotations = client.get(f"/api/interns/{intern['id']}").get_json()["rotations"]
    assert [r["unit_id"] for r in rotations] == [unit_ids[1], unit_ids[0]]

    assert client.delete(f"/api/units/{unit_ids[1]}").status_code == 200


def test_non_numeric_unit_id_is_rejected(client):
    unit_ids = _add_units(client, 1)
    intern = client.post("/api/interns", json={"name": "Ada Obi", "start_date": "2024-01-01"}).get_json()
    rotation = client.post(
        "/api/rotations",
        json={"intern_id": intern["id"], "unit_id": unit_ids[0], "start_date": "2024-03-01", "end_date": "2024-03-02"},
    ).get_json()

    extend = client.post(f"/api/interns/{intern['id']}/extend", json={"extension_days": 2, "unit_id": "ward"})
    assert extend.status_code == 400
    edit = client.put(f"/api/rotations/{rotation['id']}", json={"unit_id": "ward"})
    assert edit.status_code == 400
