"""End-to-end tests for the REST surface."""

import inspect
import logging

from fastapi.testclient import TestClient
from conftest import auth_headers, register

from coach.services.analysis_service import CANNED_REWRITES
from coach.services.question_service import HR_QUESTIONS


def test_root_and_health(client):
    assert client.get("/").json()["message"] == "Interview Coach API is running"
    health = client.get("/api/health").json()
    assert health["status"] == "healthy"
    assert health["services"]["analysis"] == "heuristic"


def test_register_login_and_me(client):
    created = register(client, role="Data Engineer", experience="Senior")
    assert created["email"] == "ada@example.com"
    assert created["token"]

    login = client.post("/api/auth/login", json={"email": "ADA@example.com", "password": "s3cret"})
    assert login.status_code == 200
    me = client.get("/api/auth/me", headers=auth_headers(login.json()["token"])).json()
    assert me == {
        "_id": created["_id"], "name": "Ada", "email": "ada@example.com",
        "isPro": False, "role": "Data Engineer", "experience": "Senior",
    }


def test_duplicate_registration_is_rejected(client):
    register(client)
    resp = client.post("/api/auth/register", json={"name": "Ada", "email": "ada@example.com", "password": "x"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "User already exists"


def test_wrong_password_is_rejected(client):
    register(client)
    resp = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid email or password"


def test_endpoints_require_a_valid_token(client):
    assert client.get("/api/sessions").status_code == 401
    assert client.get("/api/sessions", headers=auth_headers("garbage")).status_code == 401


def test_analyze_uses_heuristic_without_credentials(client):
    headers = auth_headers(register(client)["token"])
    resp = client.post(
        "/api/analysis/analyze",
        json={"transcript": "um I led the team and achieved the result", "question": "Win?", "durationSeconds": 30},
        headers=headers,
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["overallScore"] == 74
    assert body["fillerWords"] == [{"word": "um", "count": 1}]
    assert body["durationFeedback"] == "Good length"
    assert body["sentiment"] == {"positive": 70, "neutral": 30, "negative": 10}


def test_rewrite_returns_canned_text_without_credentials(client):
    headers = auth_headers(register(client)["token"])
    resp = client.post("/api/analysis/rewrite", json={"transcript": "we did it", "tone": "Sarcastic"}, headers=headers)

    assert resp.json() == {"tone": "Professional", "rewrittenAnswer": CANNED_REWRITES["Professional"]}


def test_question_generation_uses_profile(client):
    headers = auth_headers(register(client, role="QA Engineer")["token"])

    hr = client.post("/api/questions/generate", json={"mode": "HR"}, headers=headers).json()
    assert hr["mode"] == "HR"
    assert hr["question"] in HR_QUESTIONS


def test_session_lifecycle_and_daily_quota(client):
    headers = auth_headers(register(client)["token"])
    analysis = client.post(
        "/api/analysis/analyze",
        json={"transcript": "I led the team", "question": "Lead?", "durationSeconds": 45},
        headers=headers,
    ).json()
    body = {"question": "Lead?", "transcript": "I led the team", "durationSeconds": 45, "analysis": analysis}

    first = client.post("/api/sessions", json=body, headers=headers)
    assert first.status_code == 201
    assert first.json()["analysis"]["overallScore"] == analysis["overallScore"]
    assert client.post("/api/sessions", json={**body, "analysis": None}, headers=headers).status_code == 201

    refused = client.post("/api/sessions", json=body, headers=headers)
    assert refused.status_code == 429
    assert refused.json()["limit"] == 2

    assert len(client.get("/api/sessions", headers=headers).json()) == 2
    usage = client.get("/api/sessions/usage", headers=headers).json()
    assert usage == {"usedToday": 2, "dailyLimit": 2, "remaining": 0, "isPro": False}

    session_id = first.json()["id"]
    fetched = client.get(f"/api/sessions/{session_id}", headers=headers)
    assert fetched.status_code == 200
    assert fetched.json()["question"] == "Lead?"

    progress = client.get("/api/sessions/progress", headers=headers).json()
    assert progress["totalSessions"] == 2
    assert len(progress["chart"]) == 1


def test_sessions_are_private(client):
    owner = auth_headers(register(client)["token"])
    intruder = auth_headers(register(client, email="eve@example.com")["token"])
    created = client.post(
        "/api/sessions", json={"question": "q", "transcript": "", "durationSeconds": 10}, headers=owner
    ).json()

    resp = client.get(f"/api/sessions/{created['id']}", headers=intruder)
    assert resp.status_code == 404
    assert client.get("/api/sessions", headers=intruder).json() == []


def test_logout_drops_cached_sessions(client):
    headers = auth_headers(register(client)["token"])
    client.get("/api/sessions", headers=headers)
    cache = client.app.state.session_service.cache
    user_id = client.get("/api/auth/me", headers=headers).json()["_id"]
    assert user_id in cache

    assert client.post("/api/auth/logout", headers=headers).json()["ok"] is True
    assert user_id not in cache


def test_invalid_payload_is_rejected(client):
    headers = auth_headers(register(client)["token"])
    resp = client.post("/api/sessions", json={"question": "q", "durationSeconds": -3}, headers=headers)
    assert resp.status_code == 422


def test_database_bound_handlers_run_in_threadpool(client):
    for route in client.app.routes:
        path = getattr(route, "path", "")
        if path.startswith(("/api/auth", "/api/sessions")):
            assert not inspect.iscoroutinefunction(route.endpoint), path


def test_unexpected_error_is_logged_with_traceback(client, caplog):
    def boom():
        raise RuntimeError("disk on fire")

    client.app.add_api_route("/api/boom", boom)
    raw = TestClient(client.app, raise_server_exceptions=False)

    with caplog.at_level(logging.ERROR, logger="main"):
        resp = raw.get("/api/boom")

    assert resp.status_code == 500
    assert resp.json()["message"] == "Internal server error"
    record = next(r for r in caplog.records if r.getMessage().startswith("Global exception"))
    assert record.exc_info is not None
    assert record.exc_info[0] is RuntimeError
