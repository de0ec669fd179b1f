"""
Garden API tests (Flask test client against a temporary SQLite file).

Covers gardens, rows and plant CRUD plus the add / remove / move flow and the
error envelope.
"""

from __future__ import annotations

import pytest

API = "/api/v1/garden"


def _data(response):
    body = response.get_json()
    assert body["ok"] is True, body
    return body["data"]


@pytest.fixture()
def garden_id(client):
    gardens = _data(client.get(f"{API}/gardens"))["gardens"]
    return gardens[0]["id"]


@pytest.fixture()
def row(client, garden_id):
    response = client.post(f"{API}/gardens/{garden_id}/rows", json={"name": "Row 1", "length": 240, "row_ends": 10})
    assert response.status_code == 201
    return _data(response)


def _plant(client, name, spacing, quantity=5):
    response = client.post(f"{API}/plants", json={"name": name, "spacing": spacing, "quantity": quantity})
    assert response.status_code == 201
    return _data(response)


def _add(client, row_id, plant_id):
    return client.post(f"{API}/rows/{row_id}/plants", json={"plant_id": plant_id})


class TestCatalogueEndpoints:
    def test_default_garden_exists(self, client):
        data = _data(client.get(f"{API}/gardens"))
        assert data["count"] == 1
        assert data["gardens"][0]["name"] == "My Garden"

    def test_create_rename_delete_garden(self, client):
        created = _data(client.post(f"{API}/gardens", json={"name": "Allotment"}))

        renamed = _data(client.put(f"{API}/gardens/{created['id']}", json={"name": "Plot 7"}))
        assert renamed["name"] == "Plot 7"

        assert client.delete(f"{API}/gardens/{created['id']}").status_code == 200
        assert _data(client.get(f"{API}/gardens"))["count"] == 1

    def test_last_garden_is_kept(self, client, garden_id):
        response = client.delete(f"{API}/gardens/{garden_id}")
        assert response.status_code == 409
        assert response.get_json()["ok"] is False

    def test_row_lifecycle(self, client, garden_id, row):
        assert row["used_space"] == 20
        assert row["state"] == "idle"

        updated = _data(client.put(f"{API}/rows/{row['id']}", json={"name": "Beans", "length": 300}))
        assert updated["name"] == "Beans"
        assert updated["length"] == 300

        rows = _data(client.get(f"{API}/gardens/{garden_id}/rows"))["rows"]
        assert [r["name"] for r in rows] == ["Beans"]

        assert client.delete(f"{API}/rows/{row['id']}").status_code == 200
        assert client.get(f"{API}/rows/{row['id']}/layout").status_code == 404

    def test_row_ends_must_leave_space(self, client, garden_id):
        response = client.post(f"{API}/gardens/{garden_id}/rows", json={"name": "Tiny", "length": 20, "row_ends": 10})

        assert response.status_code == 400
        assert response.get_json()["details"]["errors"]

    def test_plant_crud(self, client):
        plant = _plant(client, "Carrot", 30, quantity=4)
        assert plant["available"] == 4

        updated = _data(client.put(f"{API}/plants/{plant['id']}", json={"quantity": 6}))
        assert updated["quantity"] == 6

        listed = _data(client.get(f"{API}/plants"))
        assert [p["name"] for p in listed["plants"]] == ["Carrot"]

        assert client.delete(f"{API}/plants/{plant['id']}").status_code == 200
        assert _data(client.get(f"{API}/plants"))["count"] == 0

    def test_invalid_plant_body(self, client):
        response = client.post(f"{API}/plants", json={"name": "Carrot", "spacing": 0})
        assert response.status_code == 400


class TestPlantingFlow:
    def test_add_move_remove(self, client, row):
        row_id = row["id"]
        carrot = _plant(client, "Carrot", 30)
        kale = _plant(client, "Kale", 40)

        first = _add(client, row_id, carrot["id"])
        assert first.status_code == 201
        first_data = _data(first)
        assert first_data["applied"] is True
        assert first_data["instance"]["position"] == 10

        second = _data(_add(client, row_id, kale["id"]))
        assert second["instance"]["position"] == 50
        assert second["row"]["used_space"] == 60
        assert second["row"]["used_percentage"] == 25

        moved = _data(client.post(f"{API}/rows/{row_id}/plants/{first_data['instance']['id']}/move", json={"direction": "Right"}))
        assert moved["applied"] is True
        assert [p["name"] for p in moved["row"]["plants"]] == ["Kale", "Carrot"]

        removed = _data(client.delete(f"{API}/rows/{row_id}/plants/{second['instance']['id']}"))
        assert removed["applied"] is True
        assert [(p["name"], p["position"]) for p in removed["row"]["plants"]] == [("Carrot", 10)]

        plants = {p["name"]: p for p in _data(client.get(f"{API}/plants"))["plants"]}
        assert plants["Carrot"]["used_count"] == 1
        assert plants["Kale"]["used_count"] == 0

    def test_boundary_move_is_not_applied(self, client, row):
        carrot = _plant(client, "Carrot", 30)
        instance = _data(_add(client, row["id"], carrot["id"]))["instance"]

        response = client.post(f"{API}/rows/{row['id']}/plants/{instance['id']}/move", json={"direction": "left"})

        assert response.status_code == 200
        assert _data(response)["applied"] is False

    def test_invalid_direction(self, client, row):
        carrot = _plant(client, "Carrot", 30)
        instance = _data(_add(client, row["id"], carrot["id"]))["instance"]

        response = client.post(f"{API}/rows/{row['id']}/plants/{instance['id']}/move", json={"direction": "up"})
        assert response.status_code == 400

    def test_not_enough_space(self, client, garden_id):
        short = _data(client.post(f"{API}/gardens/{garden_id}/rows", json={"name": "Short", "length": 60, "row_ends": 10}))
        squash = _plant(client, "Squash", 50)

        response = _add(client, short["id"], squash["id"])

        assert response.status_code == 400
        body = response.get_json()
        assert body["message"] == "There's not enough space in this row for this plant"
        assert body["details"]["used_space"] == 70
        assert _data(client.get(f"{API}/rows/{short['id']}/layout"))["plants"] == []

    def test_out_of_stock(self, client, row):
        garlic = _plant(client, "Garlic", 10, quantity=1)
        assert _add(client, row["id"], garlic["id"]).status_code == 201

        response = _add(client, row["id"], garlic["id"])

        assert response.status_code == 400
        assert "Garlic" in response.get_json()["message"]

    def test_fit_check(self, client, row):
        kale = _plant(client, "Kale", 40)

        fit = _data(client.get(f"{API}/rows/{row['id']}/fit", query_string={"plant_id": kale["id"]}))

        assert fit["would_fit"] is True
        assert fit["used_space_with_plant"] == 60
        assert fit["next_position"] == 10

    def test_fit_requires_plant_id(self, client, row):
        assert client.get(f"{API}/rows/{row['id']}/fit").status_code == 400

    def test_reload(self, client, row):
        data = _data(client.post(f"{API}/rows/{row['id']}/reload"))
        assert data["applied"] is True
        assert data["row"]["id"] == row["id"]

    def test_remove_unknown_instance(self, client, row):
        response = client.delete(f"{API}/rows/{row['id']}/plants/999")
        assert response.status_code == 404

    def test_unknown_route(self, client):
        response = client.get(f"{API}/nothing-here")
        assert response.status_code == 404
        assert response.get_json()["ok"] is False
