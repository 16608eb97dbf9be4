from __future__ import annotations

import pytest

from app.seed.seed_data import seed_lookups
from conftest import plot_record


@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/dashboard"),
        ("post", "/dashboard/refresh"),
        ("get", "/plots"),
        ("get", "/plots/archived"),
        ("get", "/plots/history"),
        ("get", "/weather"),
        ("get", "/auth/me"),
    ],
)
def test_data_routes_require_authentication(client, method, path) -> None:
    resp = getattr(client, method)(path)
    assert resp.status_code == 401


def test_invalid_token_is_rejected(client) -> None:
    resp = client.get("/plots", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_health_and_root_are_public(client) -> None:
    assert client.get("/health").json() == {"status": "healthy", "poller": "idle"}
    assert client.get("/").json()["data"]["refresh"] == "/dashboard/refresh"


def test_poller_starts_only_after_login(client, scheduler) -> None:
    credentials = {"email": "Agronomo@Parcelas.mx", "password": "Secreto123"}
    assert client.post("/auth/signup", json=credentials).status_code == 201
    assert not scheduler.running

    resp = client.post("/auth/login", json=credentials)

    assert resp.status_code == 200
    assert resp.json()["token_type"] == "bearer"
    assert scheduler.running
    assert len(scheduler.jobs) == 1


def test_me_returns_current_user(client, auth_headers) -> None:
    resp = client.get("/auth/me", headers=auth_headers)

    assert resp.status_code == 200
    assert resp.json()["email"] == "agronomo@parcelas.mx"
    assert resp.json()["is_active"] is True


def test_signup_rejects_duplicate_and_weak_passwords(client, auth_headers) -> None:
    duplicate = client.post("/auth/signup", json={"email": "agronomo@parcelas.mx", "password": "Secreto123"})
    weak = client.post("/auth/signup", json={"email": "otro@parcelas.mx", "password": "secreto"})

    assert duplicate.status_code == 400
    assert weak.status_code == 422


def test_login_with_wrong_password_fails(client, auth_headers, scheduler) -> None:
    resp = client.post("/auth/login", json={"email": "agronomo@parcelas.mx", "password": "Incorrecta1"})
    assert resp.status_code == 401


def test_dashboard_before_first_poll_is_loading(client, auth_headers) -> None:
    body = client.get("/dashboard", headers=auth_headers).json()

    assert body["loading"] is True
    assert body["state"] == "idle"
    assert body["snapshot"] is None
    assert body["archived"] == []


def test_refresh_then_read_plots_history_and_weather(client, auth_headers, feed) -> None:
    feed.serve(plot_record(1, "Parcela A"), plot_record(2, "Parcela B", ubicacion="Tulum"))

    result = client.post("/dashboard/refresh", headers=auth_headers).json()
    assert result["status"] == "ok"
    assert result["upserted"] == 2

    plots = client.get("/plots", headers=auth_headers).json()
    assert [(p["id"], p["name"], p["location_name"]) for p in plots] == [
        (1, "Parcela A", "Cancún"),
        (2, "Parcela B", "Tulum"),
    ]

    history = client.get("/plots/history", params={"limit": 3}, headers=auth_headers).json()
    assert len(history) == 3
    assert {h["kind"] for h in history} <= {"temperatura", "humedad"}
    assert all(h["plot_name"] in {"Parcela A", "Parcela B"} for h in history)

    weather = client.get("/weather", headers=auth_headers).json()
    assert len(weather) == 1
    assert weather[0]["humidity"] == 70.0


def test_dropped_plot_shows_up_as_archived(client, auth_headers, feed) -> None:
    feed.serve(plot_record(1, "Parcela A"), plot_record(2, "Parcela B"))
    client.post("/dashboard/refresh", headers=auth_headers)

    feed.serve(plot_record(1, "Parcela A"))
    result = client.post("/dashboard/refresh", headers=auth_headers).json()

    assert result["archived"] == 1
    archived = client.get("/plots/archived", headers=auth_headers).json()
    assert [(a["id"], a["name"]) for a in archived] == [(2, "Parcela B")]
    assert '"temperatura"' in archived[0]["sensor_data"]

    body = client.get("/dashboard", headers=auth_headers).json()
    assert body["loading"] is False
    assert [p["nombre"] for p in body["snapshot"]["parcelas"]] == ["Parcela A"]
    assert [a["name"] for a in body["archived"]] == ["Parcela B"]


def test_failed_refresh_surfaces_error_and_keeps_data(client, auth_headers, feed) -> None:
    feed.serve(plot_record(1, "Parcela A"))
    client.post("/dashboard/refresh", headers=auth_headers)

    feed.time_out()
    result = client.post("/dashboard/refresh", headers=auth_headers).json()

    assert result["status"] == "failed"
    body = client.get("/dashboard", headers=auth_headers).json()
    assert body["error"].startswith("Feed unavailable")
    assert [p["nombre"] for p in body["snapshot"]["parcelas"]] == ["Parcela A"]
    assert [p["id"] for p in client.get("/plots", headers=auth_headers).json()] == [1]


def test_history_limit_is_validated(client, auth_headers) -> None:
    resp = client.get("/plots/history", params={"limit": 0}, headers=auth_headers)
    assert resp.status_code == 422


def test_plots_carry_seeded_coordinates(client, auth_headers, feed, session_factory) -> None:
    with session_factory() as db:
        seed_lookups(db)
    feed.serve(plot_record(1, "Parcela A"), plot_record(2, "Parcela B", ubicacion="Mahahual"))
    client.post("/dashboard/refresh", headers=auth_headers)

    plots = client.get("/plots", headers=auth_headers).json()

    assert (plots[0]["latitude"], plots[0]["longitude"]) == (pytest.approx(21.0367), pytest.approx(-86.8742))
    assert (plots[1]["latitude"], plots[1]["longitude"]) == (None, None)
