"""Tests for the diagram store API and its SQLite layer."""

import sqlite3

import pytest

from server import diagram_db


def save(api, nodes, connections=None, model_id=None):
    body = {"nodes": nodes, "connections": connections or []}
    if model_id is not None:
        body["modelId"] = model_id
    return api.post("/api/save", json=body)


class TestServiceEndpoints:
    def test_health(self, api):
        response = api.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_root_descriptor(self, api, store_db):
        data = api.get("/").json()
        assert data["status"] == "ok"
        assert data["diagram_db"] == str(store_db)
        assert data["endpoints"]["save"] == "/api/save"


class TestSaveAndLoad:
    """Test the full-replace save contract."""

    def test_round_trip(self, api):
        nodes = [
            {"id": "n1", "x": 10, "y": 20, "text": "PLC", "color": "#FFAA00"},
            {"id": "n2", "x": 300, "y": 20, "text": "HMI"},
        ]
        connections = [
            {
                "id": "c1",
                "fromNodeId": "n1",
                "toNodeId": "n2",
                "style": "dashed",
                "color": "#00AAFF",
                "width": 5,
                "label": "modbus",
            }
        ]
        response = save(api, nodes, connections, model_id="plant-a")
        assert response.status_code == 200
        assert response.json() == {"saved": True, "modelId": "plant-a"}

        data = api.get("/api/load", params={"modelId": "plant-a"}).json()
        assert data["modelId"] == "plant-a"
        assert [(n["id"], n["x"], n["y"], n["text"]) for n in data["nodes"]] == [
            ("n1", 10, 20, "PLC"),
            ("n2", 300, 20, "HMI"),
        ]
        assert [n["color"] for n in data["nodes"]] == ["#FFAA00", "#f4f4f4"]
        assert data["connections"] == [
            {
                "id": "c1",
                "fromNodeId": "n1",
                "toNodeId": "n2",
                "style": "dashed",
                "color": "#00AAFF",
                "width": 5,
                "label": "modbus",
            }
        ]

    def test_defaults_are_applied(self, api):
        """Missing ids, colors, styles and widths get their defaults."""
        save(
            api,
            [{"x": 0, "y": 0, "text": "a"}, {"id": "  ", "x": 1, "y": 1}],
            [{"fromNodeId": "x", "toNodeId": "y", "width": 0}],
        )
        data = api.get("/api/load").json()
        assert data["modelId"] == "default"
        assert all(n["id"].strip() for n in data["nodes"])
        assert data["nodes"][0]["id"] != data["nodes"][1]["id"]
        assert {n["color"] for n in data["nodes"]} == {"#f4f4f4"}
        assert data["nodes"][1]["text"] == ""
        (connection,) = data["connections"]
        assert connection["width"] == 3
        assert connection["style"] == "solid"
        assert connection["label"] == ""

    def test_save_replaces_previous_state(self, api):
        save(api, [{"id": "old", "x": 0, "y": 0}])
        save(api, [{"id": "new", "x": 5, "y": 5}])
        data = api.get("/api/load").json()
        assert [n["id"] for n in data["nodes"]] == ["new"]

    def test_models_are_isolated(self, api):
        save(api, [{"id": "n1", "x": 0, "y": 0}], model_id="a")
        save(api, [{"id": "n1", "x": 9, "y": 9}], model_id="b")
        save(api, [], model_id="a")
        assert api.get("/api/load", params={"modelId": "a"}).json()["nodes"] == []
        assert len(api.get("/api/load", params={"modelId": "b"}).json()["nodes"]) == 1

    def test_blank_model_id_means_default(self, api):
        response = save(api, [{"id": "n1", "x": 0, "y": 0}], model_id="  ")
        assert response.json()["modelId"] == "default"
        assert len(api.get("/api/load", params={"modelId": ""}).json()["nodes"]) == 1

    def test_unknown_model_is_empty(self, api):
        data = api.get("/api/load", params={"modelId": "nothing-here"}).json()
        assert data == {"nodes": [], "connections": [], "modelId": "nothing-here"}

    def test_null_connections_accepted(self, api):
        response = api.post("/api/save", json={"nodes": [], "connections": None})
        assert response.status_code == 200


class TestMalformedRequests:
    """Malformed bodies are rejected with 400 and change nothing."""

    @pytest.mark.parametrize(
        "body",
        [
            {"connections": []},
            {"nodes": [{"id": "n1", "y": 0}]},
            {"nodes": [{"id": "n1", "x": 0, "y": 0, "color": "red"}]},
            {"nodes": [], "connections": [{"fromNodeId": "a"}]},
        ],
    )
    def test_invalid_body(self, api, body):
        save(api, [{"id": "keep", "x": 0, "y": 0}])
        response = api.post("/api/save", json=body)
        assert response.status_code == 400
        assert [n["id"] for n in api.get("/api/load").json()["nodes"]] == ["keep"]

    def test_invalid_json(self, api):
        response = api.post(
            "/api/save",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 400

    def test_store_failure_is_500_and_rolls_back(self, api):
        """Duplicate ids in one save violate the key; the old state survives."""
        save(api, [{"id": "keep", "x": 0, "y": 0}])
        response = save(api, [{"id": "dup", "x": 0, "y": 0}, {"id": "dup", "x": 1, "y": 1}])
        assert response.status_code == 500
        assert "UNIQUE" in response.json()["detail"]
        assert [n["id"] for n in api.get("/api/load").json()["nodes"]] == ["keep"]


class TestConnectionEndpoints:
    """Test adding and deleting single connections."""

    @pytest.fixture
    def stored(self, api):
        save(api, [{"id": "a", "x": 0, "y": 0}, {"id": "b", "x": 300, "y": 0}], model_id="m")
        return api

    def test_create_connection(self, stored):
        response = stored.post(
            "/api/connections",
            json={"modelId": "m", "fromNodeId": "a", "toNodeId": "b", "width": -2},
        )
        assert response.status_code == 200
        created = response.json()
        assert created["modelId"] == "m"
        assert created["width"] == 3
        assert created["id"]
        loaded = stored.get("/api/load", params={"modelId": "m"}).json()
        assert [c["id"] for c in loaded["connections"]] == [created["id"]]

    def test_unknown_node_is_rejected(self, stored):
        response = stored.post(
            "/api/connections",
            json={"modelId": "m", "fromNodeId": "a", "toNodeId": "ghost"},
        )
        assert response.status_code == 400
        assert "ghost" in response.json()["detail"]

    def test_node_from_another_model_is_rejected(self, stored):
        response = stored.post(
            "/api/connections",
            json={"modelId": "other", "fromNodeId": "a", "toNodeId": "b"},
        )
        assert response.status_code == 400

    def test_delete_connection(self, stored):
        created = stored.post(
            "/api/connections",
            json={"modelId": "m", "fromNodeId": "a", "toNodeId": "b"},
        ).json()
        response = stored.delete(f"/api/connections/{created['id']}")
        assert response.status_code == 200
        assert response.json() == {"deleted": True}
        assert stored.delete(f"/api/connections/{created['id']}").status_code == 404

    def test_delete_is_scoped_by_model(self, stored):
        created = stored.post(
            "/api/connections",
            json={"modelId": "m", "fromNodeId": "a", "toNodeId": "b"},
        ).json()
        response = stored.delete(
            f"/api/connections/{created['id']}", params={"modelId": "other"}
        )
        assert response.status_code == 404
        response = stored.delete(
            f"/api/connections/{created['id']}", params={"modelId": "m"}
        )
        assert response.status_code == 200

    def test_blank_model_id_deletes_from_default(self, api):
        save(api, [{"id": "a", "x": 0, "y": 0}, {"id": "b", "x": 300, "y": 0}])
        created = api.post(
            "/api/connections",
            json={"fromNodeId": "a", "toNodeId": "b"},
        ).json()
        assert created["modelId"] == "default"
        response = api.delete(f"/api/connections/{created['id']}", params={"modelId": ""})
        assert response.status_code == 200
        assert api.get("/api/load").json()["connections"] == []


class TestSchemaPatching:
    """Databases from before diagrams were split by model are upgraded."""

    def test_missing_columns_are_added(self, tmp_path, monkeypatch):
        path = tmp_path / "legacy.db"
        conn = sqlite3.connect(path)
        conn.execute("create table nodes (id text primary key, x real, y real, text text)")
        conn.execute("insert into nodes (id, x, y, text) values ('n1', 1, 2, 'old')")
        conn.commit()
        conn.close()
        monkeypatch.setattr(diagram_db, "DIAGRAM_DB_PATH", path)

        diagram_db.init_db()

        nodes, connections = diagram_db.load_model("default")
        assert [(n.id, n.label, n.fill_color) for n in nodes] == [("n1", "old", "#f4f4f4")]
        assert connections == []

    def test_init_is_idempotent(self, store_db):
        diagram_db.init_db()
        diagram_db.init_db()
        assert diagram_db.load_model("default") == ([], [])
