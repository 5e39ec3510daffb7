"""
HTTP-level tests for auth, profile, catalog and matching endpoints.
"""

import pytest
from fastapi.testclient import TestClient

import config
from main import app
from matching.logic.contracts import CVAnalysis


def _register(client, email="ada@example.com", password="secret1", name="Ada"):
    return client.post("/api/auth/register", json={"email": email, "password": password, "name": name})


# =============================================================================
# AUTH
# =============================================================================

def test_register_login_logout_flow(client):
    response = _register(client)
    assert response.status_code == 200
    body = response.json()
    assert body["email"] == "ada@example.com"
    assert "passwordHash" not in body and "password" not in body
    assert config.SESSION_COOKIE_NAME in response.cookies

    assert client.get("/api/auth/user").json()["id"] == body["id"]

    assert client.post("/api/auth/logout").json() == {"message": "Logged out"}
    assert client.get("/api/auth/user").status_code == 401

    login = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "secret1"})
    assert login.status_code == 200
    assert client.get("/api/auth/user").status_code == 200


def test_register_rejects_duplicates_and_bad_input(client):
    _register(client)
    duplicate = _register(client)
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "Email already registered"

    assert _register(client, email="not-an-email").status_code == 400
    assert _register(client, email="b@example.com", password="123").status_code == 400


def test_login_with_wrong_password(client):
    _register(client)
    client.cookies.clear()
    response = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "wrong!!"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


def test_current_user_requires_session(client):
    response = client.get("/api/auth/user")
    assert response.status_code == 401
    assert "message" in response.json()


# =============================================================================
# USERS & MATCH RECORDS
# =============================================================================

def test_user_profile_crud(client):
    user_id = _register(client).json()["id"]

    updated = client.put(f"/api/users/{user_id}", json={"skills": ["Python"], "country": "Kenya"})
    assert updated.status_code == 200
    assert updated.json()["skills"] == ["Python"]
    assert updated.json()["name"] == "Ada"

    assert client.get(f"/api/users/{user_id}").json()["country"] == "Kenya"
    assert client.get("/api/users/999").status_code == 404
    assert client.put("/api/users/999", json={"name": "Ghost"}).status_code == 404


def test_save_match_flow(client, oracle):
    user_id = _register(client).json()["id"]
    oracle.reply = {"matches": [{"opportunityId": 1, "matchPercentage": 91, "reasons": ["Python"]}]}
    client.post("/api/get-matches", json={"userId": user_id})

    matches = client.get(f"/api/users/{user_id}/matches").json()
    assert len(matches) == 3
    match = next(m for m in matches if m["opportunityId"] == 1)
    assert match["matchPercentage"] == 91
    assert match["isSaved"] is False

    saved = client.put(f"/api/matches/{match['id']}/save", json={"isSaved": True})
    assert saved.status_code == 200
    assert saved.json()["isSaved"] is True

    assert client.put(f"/api/matches/{match['id']}/save", json={}).status_code == 400
    assert client.put("/api/matches/999/save", json={"isSaved": True}).status_code == 404
    assert client.get("/api/users/999/matches").status_code == 404


# =============================================================================
# CATALOG
# =============================================================================

def test_list_and_get_opportunities(client):
    listing = client.get("/api/opportunities").json()
    assert [o["id"] for o in listing] == [1, 2, 3]
    assert listing[2]["isRemote"] is True

    assert client.get("/api/opportunities/2").json()["title"] == "Research Grant"
    assert client.get("/api/opportunities/99").status_code == 404


def test_list_opportunities_with_filters(client):
    grants = client.get("/api/opportunities", params={"type": "grant"}).json()
    assert [o["id"] for o in grants] == [2]

    by_salary = client.get("/api/opportunities", params={"sort": "highest-salary"}).json()
    assert [o["id"] for o in by_salary] == [1, 3, 2]

    assert client.get("/api/opportunities", params={"sort": "cheapest"}).status_code == 400


def test_seed_requires_admin_token(client, monkeypatch):
    payload = {"title": "New Grant", "organization": "Org", "type": "grant",
               "location": "Global", "description": "Money."}
    monkeypatch.setattr(config, "ADMIN_TOKEN", "s3cret")

    assert client.post("/api/opportunities", json=payload).status_code == 401

    created = client.post("/api/opportunities", json=payload, headers={"X-Admin-Token": "s3cret"})
    assert created.status_code == 201
    assert created.json()["id"] == 4
    assert created.json()["requirements"] == []

    bad_type = dict(payload, type="job")
    assert client.post("/api/opportunities", json=bad_type, headers={"X-Admin-Token": "s3cret"}).status_code == 400


# =============================================================================
# MATCHING
# =============================================================================

def test_get_matches_for_anonymous_profile(client, oracle):
    oracle.reply = {"matches": [
        {"opportunityId": 3, "matchPercentage": 85, "reasons": ["Remote data work"]},
        {"opportunityId": 1, "matchPercentage": 92, "reasons": ["Python match"]},
    ]}

    response = client.post("/api/get-matches", json={"userProfile": {"skills": ["Python"]}})

    assert response.status_code == 200
    body = response.json()
    assert [o["id"] for o in body["opportunities"]] == [1, 3, 2]
    assert body["opportunities"][0]["matchReasons"] == ["Python match"]
    assert body["opportunities"][2]["matchPercentage"] == 0
    assert body["totalMatches"] == 3
    assert body["highMatches"] == 2


def test_get_matches_applies_filters_after_totals(client, oracle):
    oracle.reply = {"matches": [{"opportunityId": 1, "matchPercentage": 92}]}

    body = client.post("/api/get-matches", json={
        "userProfile": {"skills": ["Python"]},
        "filters": {"type": "grant", "sortBy": "best-match"},
    }).json()

    assert [o["id"] for o in body["opportunities"]] == [2]
    assert body["totalMatches"] == 3
    assert body["highMatches"] == 1


def test_get_matches_uses_session_user(client, store, oracle):
    user_id = _register(client).json()["id"]
    client.put(f"/api/users/{user_id}", json={"skills": ["Rust"], "goals": ["Fellowships"]})

    client.post("/api/get-matches", json={})

    _, _, prompt = oracle.calls[-1]
    assert "Skills: Rust" in prompt
    assert "Goals: fellowship" in prompt
    assert len(store.get_user_matches(user_id)) == 3


def test_get_matches_errors(client, oracle, upstream_failure):
    missing = client.post("/api/get-matches", json={})
    assert missing.status_code == 400
    assert missing.json()["message"] == "User ID or profile is required"

    assert client.post("/api/get-matches", json={"userId": 404}).status_code == 404

    oracle.error = upstream_failure
    failed = client.post("/api/get-matches", json={"userProfile": {}})
    assert failed.status_code == 500
    assert "message" in failed.json()


def test_get_matches_rejects_malformed_oracle_reply(client, oracle):
    oracle.reply = {"matches": [{"opportunityId": 1, "matchPercentage": "very high"}]}
    response = client.post("/api/get-matches", json={"userProfile": {"skills": ["Python"]}})
    assert response.status_code == 500
    assert response.json()["message"]


def test_analyze_cv(client, oracle):
    response = client.post("/api/analyze-cv", json={"cvText": "Python developer, BSc CS"})

    assert response.status_code == 200
    body = response.json()
    assert body["analysis"]["skills"] == ["Python", "SQL"]
    assert body["analysis"]["recommendedTypes"] == ["Internships", "Fellowship"]
    assert body["profile"]["goals"] == ["internship", "fellowship"]
    assert body["message"] == "CV analyzed successfully"


def test_analyze_cv_saves_onto_session_user(client, store):
    user_id = _register(client).json()["id"]

    client.post("/api/analyze-cv", json={"cvText": "Python developer"})

    user = store.get_user(user_id)
    assert user.cv_text == "Python developer"
    assert user.skills == ["Python", "SQL"]
    assert user.goals == ["internship", "fellowship"]


@pytest.mark.parametrize("body", [{}, {"cvText": "   "}])
def test_analyze_cv_requires_text(client, body):
    response = client.post("/api/analyze-cv", json=body)
    assert response.status_code == 400
    assert response.json()["message"] == "CV text is required"


def test_analyze_cv_oracle_failure(client, oracle, upstream_failure):
    oracle.error = upstream_failure
    response = client.post("/api/analyze-cv", json={"cvText": "anything"})
    assert response.status_code == 500
    assert "message" in response.json()


def test_chat(client, oracle):
    response = client.post("/api/chat", json={"message": "Where do I start?", "context": {"goal": "grant"}})

    assert response.status_code == 200
    assert response.json()["response"] == oracle.chat_reply
    assert response.json()["timestamp"]
    assert oracle.calls[-1] == ("chat", "Where do I start?", {"goal": "grant"})

    assert client.post("/api/chat", json={}).status_code == 400


def test_questionnaire_round_trip(client):
    questions = client.get("/api/questionnaire").json()["questions"]
    assert [q["id"] for q in questions] == [1, 2, 3]

    response = client.post("/api/profile/questionnaire", json={"answers": {
        "1": "PhD",
        "2": ["Research & Academia"],
        "3": ["grant"],
    }})
    assert response.status_code == 200
    assert response.json()["profile"] == {
        "skills": [],
        "interests": ["Research & Academia"],
        "goals": ["grant"],
        "education": "PhD",
    }

    assert client.post("/api/profile/questionnaire", json={"answers": {"7": "x"}}).status_code == 400


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_analyze_cv_keeps_fields_the_analysis_left_empty(client, store, oracle):
    user_id = client.post("/api/auth/register", json={
        "email": "ada@example.com", "password": "secret1", "name": "Ada",
        "education": "Bachelor's Degree",
    }).json()["id"]
    client.put(f"/api/users/{user_id}", json={"skills": ["Python"]})
    oracle.analysis = CVAnalysis(skills=[], experience_level="", interests=["AI"], recommended_types=[])

    assert client.post("/api/analyze-cv", json={"cvText": "Short CV"}).status_code == 200

    user = store.get_user(user_id)
    assert user.education == "Bachelor's Degree"
    assert user.skills == ["Python"]
    assert user.interests == ["AI"]
    assert user.cv_text == "Short CV"


# =============================================================================
# ERROR BODIES
# =============================================================================

def test_framework_errors_use_message_body(client):
    unknown = client.get("/api/does-not-exist")
    assert unknown.status_code == 404
    assert unknown.json() == {"message": "Not Found"}

    wrong_method = client.delete("/api/opportunities/1")
    assert wrong_method.status_code == 405
    assert wrong_method.json() == {"message": "Method Not Allowed"}


def test_unexpected_errors_use_message_body(client, oracle):
    oracle.error = RuntimeError("boom")
    with TestClient(app, raise_server_exceptions=False) as quiet_client:
        chat = quiet_client.post("/api/chat", json={"message": "Hi"})
        analysis = quiet_client.post("/api/analyze-cv", json={"cvText": "Python"})

    for response in (chat, analysis):
        assert response.status_code == 500
        assert response.json()["message"]
        assert "boom" not in response.json()["message"]
