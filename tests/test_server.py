"""
Tests for the region lookup FastAPI server.
"""

import pytest
from fastapi.testclient import TestClient

from quhua.core.region import DivisionRecord
from quhua.server import app, get_engine, init_region_tree, reset_region_tree


@pytest.fixture(autouse=True)
def reset_state():
    """Reset server state before each test."""
    reset_region_tree()
    yield
    reset_region_tree()


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def loaded_client(client, sample_records):
    """Test client with the sample tree installed."""
    init_region_tree(sample_records)
    return client


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    def test_health_before_load(self, client):
        response = client.get("/api/regions/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "ok"
        assert data["loaded"] is False
        assert "version" in data

    def test_health_after_load(self, loaded_client):
        assert loaded_client.get("/api/regions/health").json()["loaded"] is True


class TestNotLoaded:
    """Endpoints that need data answer 503 until a tree is installed."""

    def test_lookup_unavailable(self, client):
        assert client.get("/api/regions/110000000000").status_code == 503

    def test_search_unavailable(self, client):
        assert client.get("/api/regions/search", params={"q": "区"}).status_code == 503

    def test_stats_unavailable(self, client):
        assert client.get("/api/regions/stats").status_code == 503


class TestLookupEndpoint:
    """Tests for GET /api/regions/{code}."""

    def test_found(self, loaded_client):
        response = loaded_client.get("/api/regions/110101000000")
        assert response.status_code == 200

        data = response.json()
        assert data["found"] is True
        assert data["region"]["name"] == "东城区"
        assert data["region"]["ancestors"] == [
            {"level": 2, "name": "市辖区"},
            {"level": 1, "name": "北京市"},
        ]

    def test_not_found(self, loaded_client):
        response = loaded_client.get("/api/regions/999999999999")
        assert response.status_code == 404
        assert "999999999999" in response.json()["detail"]

    def test_invalid_code(self, loaded_client):
        response = loaded_client.get("/api/regions/11010A")
        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "QUERY_005"

    def test_short_code_accepted(self, client):
        init_region_tree([DivisionRecord("11", "Beijing", 1, "0")])
        assert client.get("/api/regions/11").json()["region"]["name"] == "Beijing"


class TestSearchEndpoint:
    """Tests for GET /api/regions/search."""

    def test_search(self, loaded_client):
        response = loaded_client.get("/api/regions/search", params={"q": "京"})
        assert response.status_code == 200

        data = response.json()
        assert [m["name"] for m in data["matches"]] == ["北京市", "南京市"]
        assert data["truncated"] is False

    def test_search_limit(self, loaded_client):
        data = loaded_client.get("/api/regions/search", params={"q": "区", "limit": 2}).json()
        assert len(data["matches"]) == 2
        assert data["truncated"] is True
        assert data["limit"] == 2

    def test_default_limit(self, loaded_client):
        data = loaded_client.get("/api/regions/search", params={"q": "区"}).json()
        assert data["limit"] == 5

    def test_blank_query(self, loaded_client):
        response = loaded_client.get("/api/regions/search", params={"q": "   "})
        assert response.status_code == 400

    def test_limit_out_of_range(self, loaded_client):
        response = loaded_client.get("/api/regions/search", params={"q": "区", "limit": 0})
        assert response.status_code == 422

    def test_missing_query(self, loaded_client):
        assert loaded_client.get("/api/regions/search").status_code == 422


class TestStatsEndpoint:
    """Tests for GET /api/regions/stats."""

    def test_stats(self, loaded_client):
        data = loaded_client.get("/api/regions/stats").json()
        assert data["statistics"]["total_nodes"] == 11
        assert data["statistics"]["orphan_count"] == 0
        assert data["config"]["name_search_limit"] == 5


class TestLoadEndpoint:
    """Tests for POST /api/regions/load."""

    def test_load_csv(self, client, tmp_path, sample_csv_text):
        path = tmp_path / "areas.csv"
        path.write_text(sample_csv_text, encoding="utf-8")

        response = client.post(
            "/api/regions/load", json={"path": str(path), "name_search_limit": 3}
        )
        assert response.status_code == 200
        assert response.json()["statistics"]["total_nodes"] == 5

        stats = client.get("/api/regions/stats").json()
        assert stats["config"]["name_search_limit"] == 3
        assert client.get("/api/regions/110101000000").status_code == 200

    def test_load_replaces_tree(self, loaded_client, tmp_path):
        path = tmp_path / "small.csv"
        path.write_text("11,Beijing,1,0,0\n", encoding="utf-8")
        response = loaded_client.post("/api/regions/load", json={"path": str(path)})
        assert response.status_code == 200
        assert loaded_client.get("/api/regions/110101000000").status_code == 404
        assert loaded_client.get("/api/regions/11").status_code == 200

    def test_missing_file(self, client, tmp_path):
        response = client.post("/api/regions/load", json={"path": str(tmp_path / "missing.csv")})
        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "LOAD_005"

    def test_wrong_extension(self, client, tmp_path):
        path = tmp_path / "areas.json"
        path.write_text("{}", encoding="utf-8")
        assert client.post("/api/regions/load", json={"path": str(path)}).status_code == 400

    def test_duplicates_rejected(self, client, tmp_path):
        path = tmp_path / "dup.csv"
        path.write_text("11,Beijing,1,0,0\n11,Again,1,0,0\n", encoding="utf-8")
        response = client.post(
            "/api/regions/load", json={"path": str(path), "duplicate_policy": "reject"}
        )
        assert response.status_code == 422
        assert response.json()["detail"]["error_code"] == "LOAD_004"
        assert client.get("/api/regions/health").json()["loaded"] is False

    def test_deep_chain_file(self, client, tmp_path):
        lines = ["c0,chain0,1,0,0"]
        lines += [f"c{i},chain{i},2,c{i - 1},0" for i in range(1, 1500)]
        path = tmp_path / "chain.csv"
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")

        response = client.post("/api/regions/load", json={"path": str(path)})
        assert response.status_code == 200
        assert response.json()["statistics"]["max_depth"] == 1500

    def test_loader_report_in_response(self, client, tmp_path):
        path = tmp_path / "areas.csv"
        path.write_text("code,name,level,parent_code,type\n11,Beijing,1,0,0\nbroken\n", encoding="utf-8")
        data = client.post("/api/regions/load", json={"path": str(path)}).json()
        assert data["loader"]["loader"] == "csv"
        assert data["loader"]["errors"] == []
        assert len(data["loader"]["warnings"]) == 1
        assert len(data["loader"]["info"]) == 1


class TestTreeReplacement:
    """Replacing the served tree leaves engines already handed out intact."""

    def test_old_engine_keeps_working_after_reload(self, sample_records):
        init_region_tree(sample_records)
        engine = get_engine()
        before = engine.find_by_name("东").to_dict()
        assert before["total_seen"] == 2

        init_region_tree([DivisionRecord("11", "Beijing", 1, "0")])
        assert engine.find_by_name("东").to_dict() == before
        assert engine.find_by_code("110101001001").found
        assert get_engine() is not engine

    def test_old_engine_keeps_working_after_reset(self, sample_records):
        init_region_tree(sample_records)
        engine = get_engine()
        reset_region_tree()
        assert engine.tree.total_nodes == len(sample_records) + 1
        assert engine.find_by_code("110101000000").ancestors
