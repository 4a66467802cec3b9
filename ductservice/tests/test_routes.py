"""
Tests for the DuctForge HTTP API.

Validates:
1. Full solves through /api/duct-systems/calculate
2. Engine errors mapped to 400, schema errors to 422
3. Cleanup and export endpoints
4. Library listings and lookups
"""

import csv
import io

import pytest


class TestHealth:

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestCalculate:

    def test_two_branch(self, client, two_branch_payload):
        response = client.post("/api/duct-systems/calculate", json=two_branch_payload)
        assert response.status_code == 200
        data = response.json()
        assert data["total_cfm"] == 1000
        assert data["node_cfm"]["j1"] == 1000
        assert data["segments"]["main"]["duct_size"] == {"shape": "rectangular", "width": 559, "height": 203}
        assert data["segments"]["b1"]["equivalent_length"] == pytest.approx(9.1)
        assert data["critical_path"][0] == "main"
        assert data["total_pressure_drop"] == data["critical_path_pressure"]
        assert data["bom"][-1]["description"] == "Diffuser/Grille"
        assert data["bom"][-1]["quantity"] == 2
        assert data["warnings"] == []

    def test_manual_round_size(self, client, two_branch_payload):
        two_branch_payload["segments"][2]["manual_size"] = {"shape": "round", "diameter": 150}
        data = client.post("/api/duct-systems/calculate", json=two_branch_payload).json()
        b2 = data["segments"]["b2"]
        assert b2["duct_size"] == {"shape": "round", "diameter": 150}
        assert b2["sizing_basis"] == "manual"
        assert len(data["warnings"]) == 1
        assert data["warnings"][0].startswith("Segment to d2: velocity ")

    def test_velocity_method_label(self, client, two_branch_payload):
        two_branch_payload["design_method"] = "velocity-reduction"
        data = client.post("/api/duct-systems/calculate", json=two_branch_payload).json()
        assert {s["sizing_basis"] for s in data["segments"].values()} == {"TableLookupOnly"}

    def test_empty_system(self, client):
        data = client.post("/api/duct-systems/calculate", json={"nodes": [{"id": "ahu-1", "type": "ahu"}]}).json()
        assert data["total_cfm"] == 0
        assert data["critical_path"] == []
        assert data["bom"] == []

    def test_cycle_is_bad_request(self, client):
        payload = {
            "nodes": [
                {"id": "ahu-1", "type": "ahu"},
                {"id": "j1", "type": "junction"},
                {"id": "j2", "type": "junction"},
            ],
            "segments": [
                {"id": "s1", "from_node_id": "ahu-1", "to_node_id": "j1", "length": 3},
                {"id": "s2", "from_node_id": "j1", "to_node_id": "j2", "length": 3},
                {"id": "s3", "from_node_id": "j2", "to_node_id": "j1", "length": 3},
            ],
        }
        response = client.post("/api/duct-systems/calculate", json=payload)
        assert response.status_code == 400
        assert "cycle" in response.json()["detail"]

    def test_strict_fittings(self, client, two_branch_payload):
        two_branch_payload["segments"][0]["fittings"] = [{"fitting_id": "elbow-999"}]
        assert client.post("/api/duct-systems/calculate", json=two_branch_payload).status_code == 200
        response = client.post("/api/duct-systems/calculate?strict_fittings=true", json=two_branch_payload)
        assert response.status_code == 400
        assert "elbow-999" in response.json()["detail"]

    def test_negative_length_rejected(self, client, two_branch_payload):
        two_branch_payload["segments"][0]["length"] = -2
        assert client.post("/api/duct-systems/calculate", json=two_branch_payload).status_code == 422

    def test_unknown_shape_rejected(self, client, two_branch_payload):
        two_branch_payload["segments"][0]["manual_size"] = {"shape": "oval", "width": 300}
        assert client.post("/api/duct-systems/calculate", json=two_branch_payload).status_code == 422


class TestCleanup:

    def test_removes_reversed_segment(self, client, two_branch_payload):
        two_branch_payload["segments"].append(
            {"id": "bad", "from_node_id": "d1", "to_node_id": "ahu-1", "length": 4}
        )
        response = client.post("/api/duct-systems/cleanup", json=two_branch_payload)
        assert response.status_code == 200
        data = response.json()
        assert data["removed"] == 1
        assert [s["id"] for s in data["system"]["segments"]] == ["main", "b1", "b2"]
        assert "bad" not in data["results"]["segments"]
        assert data["results"]["total_cfm"] == 1000


class TestExport:

    def test_csv(self, client, two_branch_payload):
        response = client.post("/api/duct-systems/export", json=two_branch_payload)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "office_bom.csv" in response.headers["content-disposition"]
        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0][0] == "Description"
        assert rows[-1][0] == "TOTAL DUCT"

    def test_json(self, client, two_branch_payload):
        response = client.post("/api/duct-systems/export?format=json", json=two_branch_payload)
        assert response.status_code == 200
        assert response.json()["generated_by"] == "DuctForge Engine"

    def test_bad_format(self, client, two_branch_payload):
        response = client.post("/api/duct-systems/export?format=xml", json=two_branch_payload)
        assert response.status_code == 422


class TestDuctSize:

    def test_rectangular(self, client):
        data = client.post("/api/duct-size", json={"cfm": 500}).json()
        assert data["bracket_cfm"] == 500
        assert data["nominal_inches"] == [18, 6]
        assert data["size"] == {"shape": "rectangular", "width": 457, "height": 152}
        assert data["options"] == [[18, 6], [12, 8], [10, 10]]

    def test_round_saturates(self, client):
        data = client.post("/api/duct-size", json={"cfm": 99999, "shape": "round"}).json()
        assert data["bracket_cfm"] == 30000
        assert data["size"] == {"shape": "round", "diameter": 1626}


class TestLibrary:

    def test_fittings(self, client):
        data = client.get("/api/library/fittings").json()
        assert data["total"] == 27
        with_terminals = client.get("/api/library/fittings?include_terminals=true").json()
        assert with_terminals["total"] == 32

    def test_fittings_by_category(self, client):
        data = client.get("/api/library/fittings?category=boot").json()
        assert {f["id"] for f in data["fittings"]} == {"boot-90", "boot-straight", "boot-end", "boot-stackhead"}

    def test_fitting_detail(self, client):
        elbow = client.get("/api/library/fittings/elbow-90-round-smooth").json()
        assert elbow["size_dependent"] is True
        assert elbow["equivalent_length"] is None
        damper = client.get("/api/library/fittings/damper-balancing").json()
        assert damper["equivalent_length"] == 3.0
        assert damper["k_factor"] == 0.2

    def test_terminal_detail(self, client):
        assert client.get("/api/library/fittings/grille-return").json()["category"] == "diffuser"

    def test_unknown_fitting(self, client):
        assert client.get("/api/library/fittings/nope").status_code == 404

    def test_standard_sizes(self, client):
        sizes = client.get("/api/library/standard-sizes").json()["sizes"]
        assert len(sizes) == 42
        assert sizes[0] == {"cfm": 50, "rectangular": [[6, 4]], "round_diameter": 5}

    def test_air_conditions(self, client):
        data = client.get("/api/library/air-conditions").json()
        assert data["default"] == "air-20c-stp"
        assert len(data["air_conditions"]) == 5

    def test_insulation_materials(self, client):
        materials = client.get("/api/library/insulation-materials").json()["materials"]
        assert materials[0]["id"] == "fiberglass"

    def test_air_properties(self, client):
        data = client.get("/api/library/air-properties?temp_c=20").json()
        assert data["density"] == pytest.approx(1.204, abs=1e-3)
        assert data["pressure_kpa"] == pytest.approx(101.325)

    def test_air_properties_out_of_range(self, client):
        assert client.get("/api/library/air-properties?temp_c=-300").status_code == 422
