# tests/test_api_leaderboard.py

import pytest
from sqlalchemy.exc import OperationalError

from gymxp.models.ranking import RankingSnapshot

MADRID = {"lat": 40.4168, "lon": -3.7038, "country": "Spain", "continent": "Europe"}
BARCELONA = {"lat": 41.3874, "lon": 2.1686, "country": "Spain", "continent": "Europe"}


def register_and_login(client, email, password="pass"):
    client.post("/register", json={"email": email, "password": password, "username": email.split("@")[0]})
    resp = client.post("/login", json={"email": email, "password": password})
    assert resp.status_code == 200
    return resp.get_json()["data"]


def switch_to(client, email):
    client.post("/logout")
    return register_and_login(client, email)


@pytest.fixture
def users(client):
    """alice (50 XP, Madrid), bob (80 XP, Barcelona), carol (0 XP, sin ubicación)."""
    ids = {}
    ids["alice"] = register_and_login(client, "alice@x.com")["id"]
    client.post("/api/progress", json={"workout": "Running", "value": 5, "unit": "km", "is_additional": True})
    client.put("/api/me/location", json=MADRID)

    ids["bob"] = switch_to(client, "bob@x.com")["id"]
    client.post("/api/progress", json={"workout": "Running", "value": 8, "unit": "km", "is_additional": True})
    client.put("/api/me/location", json=BARCELONA)

    ids["carol"] = switch_to(client, "carol@x.com")["id"]
    return ids


def _board(client, qs=""):
    return client.get(f"/api/leaderboard{qs}")


def test_global(client, users):
    data = _board(client).get_json()["data"]
    assert [e["username"] for e in data["entries"]] == ["bob", "alice", "carol"]
    assert [e["rank"] for e in data["entries"]] == [1, 2, 3]
    assert data["entries"][2]["is_current_user"] is True
    assert data["notice"] is None


def test_ventana_diaria_muestra_xp_de_hoy(client, users):
    data = _board(client, "?window=daily").get_json()["data"]
    assert [e["xp"] for e in data["entries"]] == [80, 50, 0]


def test_parametros_invalidos(client, users):
    resp = _board(client, "?dimension=galaxy")
    assert resp.status_code == 400
    assert resp.get_json()["error_code"] == "validation_error"


def test_continental_sin_ubicacion(client, users):
    resp = _board(client, "?dimension=continental")
    assert resp.status_code == 409
    assert resp.get_json()["error_code"] == "location_unavailable"
    assert _board(client, "?dimension=regional").status_code == 409


def test_continental_con_filtro_explicito(client, users):
    data = _board(client, "?dimension=continental&continent=Europe").get_json()["data"]
    assert [e["username"] for e in data["entries"]] == ["bob", "alice"]
    assert data["filter"] == "Europe"


def test_regional(client, users):
    switch_to(client, "alice@x.com")
    data = _board(client, "?dimension=regional").get_json()["data"]
    # Barcelona queda a ~505 km
    assert [e["username"] for e in data["entries"]] == ["alice"]
    assert data["entries"][0]["distance_km"] == 0


def test_country(client, users):
    switch_to(client, "alice@x.com")
    data = _board(client, "?dimension=country").get_json()["data"]
    assert [e["username"] for e in data["entries"]] == ["bob", "alice"]


def test_followers(client, users):
    data = _board(client, "?dimension=followers").get_json()["data"]
    assert data["entries"] == []
    assert data["notice"] == {"code": "no_users_found", "dimension": "followers", "reason": "not_following_anyone"}

    resp = client.post(f"/api/users/{users['alice']}/follow")
    assert resp.get_json()["data"] == {"following": True, "changed": True}
    resp = client.post(f"/api/users/{users['alice']}/follow")
    assert resp.get_json()["data"]["changed"] is False

    data = _board(client, "?dimension=followers").get_json()["data"]
    assert [e["username"] for e in data["entries"]] == ["alice"]
    assert data["entries"][0]["is_followed"] is True

    followers = client.get(f"/api/users/{users['alice']}/followers").get_json()["data"]
    assert [f["username"] for f in followers] == ["carol"]

    client.delete(f"/api/users/{users['alice']}/follow")
    data = _board(client, "?dimension=followers").get_json()["data"]
    assert data["notice"]["reason"] == "not_following_anyone"


def test_no_puedes_seguirte(client, users):
    assert client.post(f"/api/users/{users['carol']}/follow").status_code == 400
    assert client.post("/api/users/9999/follow").status_code == 404


def test_cambio_de_nombre_llega_al_ranking(client, users):
    resp = client.patch("/api/me", json={"username": "carolina"})
    assert resp.status_code == 200
    names = [e["username"] for e in _board(client).get_json()["data"]["entries"]]
    assert "carolina" in names


def test_peso_fuera_de_rango(client, users):
    assert client.patch("/api/me", json={"weight_kg": 5}).status_code == 400


def test_ubicacion_invalida(client, users):
    assert client.put("/api/me/location", json={"lat": 200, "lon": 0}).status_code == 400


def test_perfil_publico(client, users):
    client.post(f"/api/users/{users['alice']}/follow")

    resp = client.get(f"/api/users/{users['alice']}")
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["username"] == "alice"
    assert data["total_xp"] == 50
    assert data["daily_xp"] == 50
    assert data["level"]["level"] == 1
    assert data["streak"] == 1
    assert data["followers_count"] == 1
    assert data["following_count"] == 0
    assert data["is_followed"] is True
    assert data["is_current_user"] is False
    assert data["country"] == "Spain"
    assert data["workouts"] == ["Running"]
    assert data["heatmap"] == {"2026-10-18": 1}


def test_perfil_propio_y_desconocido(client, users):
    data = client.get(f"/api/users/{users['carol']}").get_json()["data"]
    assert data["is_current_user"] is True
    assert data["is_followed"] is False
    assert data["workouts"] == []
    assert client.get("/api/users/9999").status_code == 404


class _BrokenQuery:
    def __getattr__(self, name):
        def boom(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("db caída"))
        return boom


def test_ranking_con_bd_caida(client, users, monkeypatch):
    monkeypatch.setattr(RankingSnapshot, "query", _BrokenQuery())
    resp = _board(client)
    assert resp.status_code == 503
    assert resp.get_json()["error_code"] == "persistence_failure"
