# app/tests/test_waiver_api.py
"""Tests for the waiver context API routes."""
import pytest
from fastapi.testclient import TestClient

from app.config import AppConfig
from app.main import app
from context.service import ContextService, get_context_service


@pytest.fixture
def service(tmp_path):
    return ContextService(AppConfig(defense_rankings_path=str(tmp_path / "ranks.json")))


@pytest.fixture
def client(service):
    """Test client wired to an isolated ContextService."""
    app.dependency_overrides[get_context_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestDefenseRankingsRoutes:

    def test_list(self, client):
        data = client.get("/api/defense-rankings").json()
        assert data["count"] == 32
        assert data["rankings"][0]["teamAbbr"] == "BAL"

    def test_force_refresh_without_source_still_serves(self, client):
        response = client.get("/api/defense-rankings", params={"refresh": "true"})
        assert response.status_code == 200
        assert response.json()["count"] == 32

    def test_force_refresh_with_undecodable_source(self, tmp_path):
        source = tmp_path / "ranks.csv"
        source.write_bytes(b"team,QB\nKC,\xff\xfe3\n")
        service = ContextService(AppConfig(
            defense_rankings_source=str(source),
            defense_rankings_path=str(tmp_path / "ranks.json"),
        ))
        app.dependency_overrides[get_context_service] = lambda: service
        try:
            response = TestClient(app).get("/api/defense-rankings", params={"refresh": "true"})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        assert response.json()["count"] == 32

    def test_single_team(self, client):
        data = client.get("/api/defense-rankings/buf").json()
        assert data["teamAbbr"] == "BUF"
        assert data["QB"] == 25

    def test_unknown_team(self, client):
        response = client.get("/api/defense-rankings/XYZ")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestMarketRoutes:

    def test_single_team(self, client):
        data = client.get("/api/vegas-implied/KC").json()
        assert data["impliedTotal"] == 25.5
        assert data["spread"] == -2.5
        assert data["opponent"] == "BUF"

    def test_unknown_team(self, client):
        response = client.get("/api/vegas-implied/NYG")
        assert response.status_code == 404
        assert "NYG" in response.json()["detail"]

    def test_all_teams(self, client):
        data = client.get("/api/vegas-implied").json()
        assert data["count"] == 12
        for team, context in data["teams"].items():
            opponent = data["teams"][context["opponent"]]
            assert context["impliedTotal"] + opponent["impliedTotal"] == pytest.approx(context["overUnder"], abs=0.1)


class TestWeatherRoute:

    def test_known_stadium_without_live_data(self, client):
        data = client.get("/api/weather/buf").json()
        assert data == {"team": "BUF", "kickoff": None, "weather": None}

    def test_unknown_stadium(self, client):
        assert client.get("/api/weather/XYZ").status_code == 404


class TestPlayerRoutes:

    def test_search(self, client):
        data = client.get("/api/players/search", params={"q": "mahomes"}).json()
        assert data["results"][0]["fullName"] == "Patrick Mahomes"
        assert data["results"][0]["matchScore"] == 4

    def test_search_requires_query(self, client):
        assert client.get("/api/players/search").status_code == 422

    def test_search_position_filter(self, client):
        data = client.get("/api/players/search", params={"q": "justin", "position": "K"}).json()
        assert [r["fullName"] for r in data["results"]] == ["Justin Tucker"]

    def test_news_and_trending(self, client):
        assert client.get("/api/news").json()["count"] == 3
        trending = client.get("/api/trending").json()
        assert trending["players"][0]["name"] == "Puka Nacua"


class TestScoreRoute:

    def test_score_batch(self, client):
        body = {
            "players": [
                {"name": "Bench Guy", "position": "wr", "team": "NYG"},
                {
                    "name": "Patrick Mahomes",
                    "position": "QB",
                    "team": "kc",
                    "stats": {"passYards": 280, "passTD": 2, "completionPct": 67},
                },
            ],
        }
        response = client.post("/api/score", json=body)
        assert response.status_code == 200

        data = response.json()
        assert data["mode"] == "weekly"
        assert data["count"] == 2
        top = data["players"][0]
        assert top["name"] == "Patrick Mahomes"
        assert top["opponent"] == "BUF"
        assert top["impliedTotal"] == 25.5
        assert all(0 <= p["score"] <= 100 for p in data["players"])

    def test_ros_mode(self, client):
        body = {"mode": "ROS", "players": [{"name": "A", "position": "RB", "stats": {"fantasyPoints": 12}}]}
        data = client.post("/api/score", json=body).json()
        assert data["mode"] == "ros"
        assert data["players"][0]["mode"] == "ros"

    def test_invalid_mode(self, client):
        body = {"mode": "dynasty", "players": [{"name": "A", "position": "RB"}]}
        assert client.post("/api/score", json=body).status_code == 422

    def test_empty_batch(self, client):
        assert client.post("/api/score", json={"players": []}).status_code == 422


class TestCacheRoutes:

    def test_status_and_clear(self, client):
        client.get("/api/vegas-implied/KC")
        status = client.get("/api/cache/status").json()
        assert "scoreboard" in status["scoreboard"]

        cleared = client.post("/api/cache/clear", params={"name": "scoreboard"}).json()
        assert cleared == {"cleared": "scoreboard"}
        assert client.get("/api/cache/status").json()["scoreboard"] == {}
