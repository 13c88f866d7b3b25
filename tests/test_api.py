"""Tests for the public HTTP API: POST /api/check, GET /api/titles, GET /health."""

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from app.errors import CheckError, ErrorKind
from app.main_trust import app

from conftest import STEAMID, bans_payload, games_payload, install_steam_routes, summary_payload


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def steam_api():
    with respx.mock(assert_all_called=False) as router:
        yield router


class TestCheckSuccess:
    def test_full_payload(self, client, steam_api):
        install_steam_routes(steam_api)
        resp = client.post("/api/check", json={"input": STEAMID})
        assert resp.status_code == 200
        data = resp.json()
        assert data["steamid"] == STEAMID
        assert data["persona_name"] == "Rabscuttle"
        assert data["trust_level"] == 100
        assert data["verdict"] == "CERTIFIED LEGIT"
        assert data["openness"] == "Open"
        assert data["region"] == {"code": "NA", "label": "North America (NA)"}
        assert data["selected_game"] is None
        assert data["social_links"][0] == {"label": "YouTube", "url": "https://www.youtube.com/@rabscuttle"}
        assert data["signals"]["age_years"] == 10
        assert data["signals"]["points"]["clean_bans_bonus"] == 14
        assert data["bans"]["vac_bans"] == 0
        assert data["cache"] == "miss"
        assert "Not a cheat detector" in data["disclaimer"]
        assert "X-Request-Id" in resp.headers

    def test_vanity_url_input(self, client, steam_api):
        routes = install_steam_routes(steam_api)
        resp = client.post("/api/check", json={"input": "https://steamcommunity.com/id/gaben/"})
        assert resp.status_code == 200
        assert resp.json()["steamid"] == STEAMID
        assert routes["vanity"].call_count == 1

    def test_selected_title(self, client, steam_api):
        install_steam_routes(
            steam_api,
            games=games_payload(250, games=[{"appid": 730, "playtime_forever": 240}]),
        )
        resp = client.post("/api/check", json={"input": STEAMID, "selectedAppId": 730})
        game = resp.json()["selected_game"]
        assert game == {"appid": 730, "name": "Counter-Strike 2", "hours": 4.0, "adjustment": -10}

    def test_selected_title_not_owned(self, client, steam_api):
        install_steam_routes(steam_api)
        resp = client.post("/api/check", json={
            "input": STEAMID, "selectedTitleId": 99999, "selectedTitleName": "Some Game",
        })
        game = resp.json()["selected_game"]
        assert game["name"] == "Some Game"
        assert game["hours"] is None
        assert game["adjustment"] == 0

    def test_snake_case_request_keys(self, client, steam_api):
        install_steam_routes(steam_api)
        resp = client.post("/api/check", json={
            "input": STEAMID, "selected_title_id": 570, "selected_title_name": "Dota 2",
        })
        data = resp.json()
        assert data["selected_game"]["appid"] == 570
        assert data["selected_game"]["name"] == "Dota 2"
        assert "trust_level" in data and "trustLevel" not in data

    def test_out_of_range_creation_time_still_scores(self, client, steam_api):
        install_steam_routes(steam_api, summary=summary_payload(timecreated=10**12))
        resp = client.post("/api/check", json={"input": STEAMID})
        assert resp.status_code == 200
        data = resp.json()
        assert data["created_at"] is None
        assert data["signals"]["age_days"] is None
        # 7 + 10 + 6 + 14, no age points
        assert data["trust_level"] == 37

    def test_banned_account(self, client, steam_api):
        install_steam_routes(steam_api, bans=bans_payload(vac=1, days=20))
        data = client.post("/api/check", json={"input": STEAMID}).json()
        assert data["signals"]["ban"]["impact"] == "Severe impact"
        assert data["signals"]["points"]["ban_penalty"] == -35
        assert data["trust_level"] < 70

    def test_private_friend_list_still_scores(self, client, steam_api):
        install_steam_routes(steam_api, friends=httpx.Response(401))
        data = client.post("/api/check", json={"input": STEAMID}).json()
        assert data["friends_count"] is None
        assert data["trust_level"] is not None


class TestCache:
    def test_second_call_is_a_hit(self, client, steam_api):
        routes = install_steam_routes(steam_api)
        first = client.post("/api/check", json={"input": STEAMID}).json()
        second = client.post("/api/check", json={"input": f"https://steamcommunity.com/profiles/{STEAMID}"}).json()
        assert first["cache"] == "miss"
        assert second["cache"] == "hit"
        assert routes["summary"].call_count == 1
        first.pop("cache")
        second.pop("cache")
        assert first == second

    def test_title_is_part_of_the_key(self, client, steam_api):
        routes = install_steam_routes(steam_api)
        client.post("/api/check", json={"input": STEAMID})
        data = client.post("/api/check", json={"input": STEAMID, "selectedTitleId": 570}).json()
        assert data["cache"] == "miss"
        assert routes["summary"].call_count == 2

    def test_failures_are_not_cached(self, client, steam_api):
        routes = install_steam_routes(steam_api, bans=httpx.Response(503))
        assert client.post("/api/check", json={"input": STEAMID}).status_code == 503
        routes["bans"].mock(return_value=httpx.Response(200, json=bans_payload()))
        data = client.post("/api/check", json={"input": STEAMID}).json()
        assert data["cache"] == "miss"


class TestCheckErrors:
    @pytest.mark.parametrize("body", [{}, {"input": ""}, {"input": "   "}])
    def test_missing_input(self, client, body):
        resp = client.post("/api/check", json=body)
        assert resp.status_code == 400
        assert resp.json() == {
            "error": "invalid_input",
            "message": "Please paste a Steam profile URL, vanity name, or SteamID64.",
            "status": 400,
        }

    def test_malformed_json(self, client):
        resp = client.post(
            "/api/check", content=b"{not json", headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "bad_request"

    def test_bad_title_id(self, client):
        resp = client.post("/api/check", json={"input": STEAMID, "selectedTitleId": "abc"})
        assert resp.status_code == 400

    def test_unresolvable_vanity(self, client, steam_api):
        install_steam_routes(steam_api, vanity={"response": {"success": 42}})
        resp = client.post("/api/check", json={"input": "no-such-person"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "resolution_failed"

    @pytest.mark.parametrize("source,status,expected,kind", [
        ("summary", 429, 429, "rate_limited"),
        ("level", 429, 429, "rate_limited"),
        ("bans", 500, 503, "upstream_unavailable"),
        ("summary", 502, 503, "upstream_unavailable"),
        ("summary", 404, 502, "upstream_unexpected"),
    ])
    def test_upstream_failures(self, client, steam_api, source, status, expected, kind):
        install_steam_routes(steam_api, **{source: httpx.Response(status)})
        resp = client.post("/api/check", json={"input": STEAMID})
        assert resp.status_code == expected
        body = resp.json()
        assert body["error"] == kind
        assert body["status"] == expected
        assert "trust_level" not in body

    def test_rate_limit_message(self, client, steam_api):
        install_steam_routes(steam_api, summary=httpx.Response(429))
        body = client.post("/api/check", json={"input": STEAMID}).json()
        assert "30-60 seconds" in body["message"]

    def test_missing_api_key(self, client):
        client.app.state.checker.steam.api_key = ""
        resp = client.post("/api/check", json={"input": STEAMID})
        assert resp.status_code == 500
        assert resp.json()["error"] == "configuration"
        assert "STEAM_API_KEY" in resp.json()["message"]

    def test_unexpected_error_is_bad_request(self, client, monkeypatch):
        async def boom(*args, **kwargs):
            raise ValueError("boom")

        monkeypatch.setattr(client.app.state.checker, "check", boom)
        resp = client.post("/api/check", json={"input": STEAMID})
        assert resp.status_code == 400
        assert resp.json() == {"error": "bad_request", "message": "boom", "status": 400}

    def test_check_error_passthrough(self, client, monkeypatch):
        async def fail(*args, **kwargs):
            raise CheckError(ErrorKind.UPSTREAM_UNEXPECTED, "GetPlayerBans HTTP 418.", upstream_status=418)

        monkeypatch.setattr(client.app.state.checker, "check", fail)
        resp = client.post("/api/check", json={"input": STEAMID})
        assert resp.status_code == 502
        # internal detail never reaches the caller
        assert "418" not in resp.json()["message"]


class TestOtherEndpoints:
    def test_titles(self, client):
        titles = client.get("/api/titles").json()["titles"]
        assert {"name": "Dota 2", "appid": 570} in titles

    def test_health(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["checker"]["steam_configured"] is True
        assert data["checker"]["cache"]["max_entries"] == 500

    def test_root(self, client):
        assert "check" in client.get("/").json()["endpoints"]
