"""
tests/test_api_routes.py -- Integration tests for the Skillfolio REST API.

These tests exercise the full stack: FastAPI routing -> access guard ->
UserStore/ProfileStore operations -> response model serialization ->
exception handlers.

Coverage:
  - Access guard: missing, malformed, foreign-signed and expired tokens -> 401,
    and tokens for accounts that no longer exist on /auth/me
  - Signup/login: happy path, duplicate email, indistinguishable failures, validation
  - Profile, skills, experience CRUD for the token owner
  - Cross-user isolation: user B can never see or change user A's records
  - Public profile: works without auth, empty for users without data
  - Out-of-range path ids -> 422 before any database access
  - Storage failures -> generic 500 storage_error

Fixtures used (from conftest.py):
  - api_client:    module-scoped TestClient over create_app() with a temp DB
  - register_user: factory returning (token, user_id) for a fresh account
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.exc import OperationalError

from auth.tokens import TokenService


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class TestAccessGuard:
    """Protected routes reject every request without a valid bearer token."""

    def test_missing_header(self, api_client: TestClient) -> None:
        resp = api_client.get("/api/profile")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "unauthorized"

    def test_wrong_scheme(self, api_client: TestClient, register_user) -> None:
        token, _uid = register_user()
        resp = api_client.get("/api/skills", headers={"Authorization": f"Token {token}"})
        assert resp.status_code == 401

    def test_bearer_without_token(self, api_client: TestClient) -> None:
        resp = api_client.get("/api/skills", headers={"Authorization": "Bearer"})
        assert resp.status_code == 401

    def test_garbage_token(self, api_client: TestClient) -> None:
        resp = api_client.get("/api/experience", headers=_auth("not.a.jwt"))
        assert resp.status_code == 401

    def test_token_signed_with_other_secret(self, api_client: TestClient, register_user) -> None:
        _token, uid = register_user()
        forged = TokenService("some-other-secret-0123456789abcdef0123").issue(uid)
        resp = api_client.get("/api/profile", headers=_auth(forged))
        assert resp.status_code == 401

    def test_expired_token(self, api_client: TestClient, register_user) -> None:
        _token, uid = register_user()
        secret = api_client.app.state.settings.secret_key
        expired = jwt.encode(
            {"sub": str(uid), "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
            secret,
            algorithm="HS256",
        )
        resp = api_client.get("/api/profile", headers=_auth(expired))
        assert resp.status_code == 401
        assert resp.json()["error"] == {"code": "unauthorized", "message": "Invalid or expired token."}
        assert resp.headers["www-authenticate"] == "Bearer"

    def test_valid_token_for_missing_account(self, api_client: TestClient) -> None:
        """/auth/me loads the account, so a token for an unknown user id is a 401."""
        orphan = TokenService(api_client.app.state.settings.secret_key).issue(99_999_999)
        resp = api_client.get("/api/auth/me", headers=_auth(orphan))
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "unauthorized"

    def test_guard_applies_to_every_mutation(self, api_client: TestClient) -> None:
        assert api_client.put("/api/profile", json={"title": "x"}).status_code == 401
        assert api_client.post("/api/skills", json={"name": "x"}).status_code == 401
        assert api_client.delete("/api/skills/1").status_code == 401
        assert api_client.post("/api/skills/1/endorse").status_code == 401
        assert api_client.post("/api/experience", json={"role": "r", "company": "c"}).status_code == 401
        assert api_client.delete("/api/experience/1").status_code == 401


class TestAuthRoutes:
    def test_signup_then_login(self, api_client: TestClient) -> None:
        resp = api_client.post("/api/auth/signup", json={"name": "Ann", "email": "ann@x.com", "password": "pw123"})
        assert resp.status_code == 200, resp.text
        assert resp.json() == {"success": True}

        resp = api_client.post("/api/auth/login", json={"email": "ann@x.com", "password": "pw123"})
        assert resp.status_code == 200, resp.text
        assert resp.headers["cache-control"] == "no-store"
        data = resp.json()
        assert data["token"]
        user = data["user"]
        assert set(user) == {"id", "name", "email", "avatar"}
        assert user["name"] == "Ann"
        assert user["email"] == "ann@x.com"
        assert user["avatar"].startswith("https://")

        me = api_client.get("/api/auth/me", headers=_auth(data["token"]))
        assert me.status_code == 200
        assert me.json() == user

    def test_duplicate_signup(self, api_client: TestClient) -> None:
        body = {"name": "Dup", "email": "dup@x.com", "password": "pw123"}
        assert api_client.post("/api/auth/signup", json=body).status_code == 200
        resp = api_client.post("/api/auth/signup", json=body)
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "duplicate_email"

    def test_login_failures_look_identical(self, api_client: TestClient) -> None:
        api_client.post("/api/auth/signup", json={"name": "Eve", "email": "eve@x.com", "password": "right"})

        wrong_password = api_client.post("/api/auth/login", json={"email": "eve@x.com", "password": "wrong"})
        unknown_email = api_client.post("/api/auth/login", json={"email": "ghost@x.com", "password": "right"})

        assert wrong_password.status_code == unknown_email.status_code == 400
        assert wrong_password.json() == unknown_email.json()
        assert wrong_password.json()["error"]["code"] == "invalid_credentials"

    def test_signup_validation(self, api_client: TestClient) -> None:
        resp = api_client.post("/api/auth/signup", json={"name": "No Email", "password": "pw123"})
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "validation_error"

        resp = api_client.post("/api/auth/signup", json={"name": "Bad", "email": "not-an-email", "password": "pw"})
        assert resp.status_code == 422

    def test_signup_rejects_password_over_bcrypt_limit(self, api_client: TestClient) -> None:
        body = {"name": "Long", "email": "long@x.com", "password": "x" * 73}
        assert api_client.post("/api/auth/signup", json=body).status_code == 422


class TestProfileRoutes:
    def test_first_get_creates_blank_profile(self, api_client: TestClient, register_user) -> None:
        token, uid = register_user()
        resp = api_client.get("/api/profile", headers=_auth(token))
        assert resp.status_code == 200
        data = resp.json()
        assert data["user_id"] == uid
        assert (data["title"], data["bio"], data["location"]) == ("", "", "")
        assert api_client.get("/api/profile", headers=_auth(token)).json()["id"] == data["id"]

    def test_put_updates_only_supplied_fields(self, api_client: TestClient, register_user) -> None:
        token, uid = register_user()
        api_client.put("/api/profile", json={"title": "Engineer", "location": "Oslo"}, headers=_auth(token))
        resp = api_client.put("/api/profile", json={"bio": "Hello"}, headers=_auth(token))
        assert resp.status_code == 200
        data = resp.json()
        assert (data["title"], data["bio"], data["location"]) == ("Engineer", "Hello", "Oslo")
        assert data["user_id"] == uid

    def test_put_cannot_reassign_owner(self, api_client: TestClient, register_user) -> None:
        token, uid = register_user()
        resp = api_client.put("/api/profile", json={"title": "Mine", "user_id": uid + 1000}, headers=_auth(token))
        assert resp.status_code == 200
        assert resp.json()["user_id"] == uid


class TestSkillRoutes:
    def test_create_list_endorse_delete(self, api_client: TestClient, register_user) -> None:
        token, uid = register_user()
        headers = _auth(token)

        created = api_client.post("/api/skills", json={"name": "Python", "level": "expert"}, headers=headers)
        assert created.status_code == 200, created.text
        skill = created.json()
        assert skill["endorsements"] == 0
        assert skill["user_id"] == uid

        listed = api_client.get("/api/skills", headers=headers).json()
        assert [s["id"] for s in listed] == [skill["id"]]

        endorsed = api_client.post(f"/api/skills/{skill['id']}/endorse", headers=headers)
        assert endorsed.status_code == 200
        assert endorsed.json()["endorsements"] == 1

        deleted = api_client.delete(f"/api/skills/{skill['id']}", headers=headers)
        assert deleted.json() == {"success": True}
        assert api_client.get("/api/skills", headers=headers).json() == []

    def test_endorse_missing_skill_is_404(self, api_client: TestClient, register_user) -> None:
        token, _uid = register_user()
        resp = api_client.post("/api/skills/987654/endorse", headers=_auth(token))
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "not_found"

    def test_delete_missing_skill_succeeds(self, api_client: TestClient, register_user) -> None:
        token, _uid = register_user()
        resp = api_client.delete("/api/skills/987654", headers=_auth(token))
        assert resp.status_code == 200
        assert resp.json() == {"success": True}

    def test_create_ignores_client_endorsement_count(self, api_client: TestClient, register_user) -> None:
        token, _uid = register_user()
        resp = api_client.post("/api/skills", json={"name": "Go", "endorsements": 99}, headers=_auth(token))
        assert resp.json()["endorsements"] == 0

    @pytest.mark.parametrize("skill_id", [0, -3, 2**63, 2**70])
    def test_out_of_range_skill_id_is_validation_error(
        self, api_client: TestClient, register_user, skill_id: int
    ) -> None:
        token, _uid = register_user()
        for resp in (
            api_client.delete(f"/api/skills/{skill_id}", headers=_auth(token)),
            api_client.post(f"/api/skills/{skill_id}/endorse", headers=_auth(token)),
        ):
            assert resp.status_code == 422
            assert resp.json()["error"]["code"] == "validation_error"

    def test_largest_skill_id_is_a_missing_skill(self, api_client: TestClient, register_user) -> None:
        token, _uid = register_user()
        largest = 2**63 - 1
        assert api_client.delete(f"/api/skills/{largest}", headers=_auth(token)).json() == {"success": True}
        assert api_client.post(f"/api/skills/{largest}/endorse", headers=_auth(token)).status_code == 404


class TestExperienceRoutes:
    def test_create_list_delete(self, api_client: TestClient, register_user) -> None:
        token, uid = register_user()
        headers = _auth(token)
        body = {
            "role": "Engineer",
            "company": "Acme",
            "start_date": "2020-01",
            "end_date": "2022-12",
            "description": "Payments",
        }
        created = api_client.post("/api/experience", json=body, headers=headers)
        assert created.status_code == 200, created.text
        exp = created.json()
        assert exp["user_id"] == uid
        assert exp["company"] == "Acme"

        assert [e["id"] for e in api_client.get("/api/experience", headers=headers).json()] == [exp["id"]]

        assert api_client.delete(f"/api/experience/{exp['id']}", headers=headers).json() == {"success": True}
        assert api_client.get("/api/experience", headers=headers).json() == []

    def test_role_and_company_required(self, api_client: TestClient, register_user) -> None:
        token, _uid = register_user()
        resp = api_client.post("/api/experience", json={"role": "Engineer"}, headers=_auth(token))
        assert resp.status_code == 422

    @pytest.mark.parametrize("experience_id", [0, 2**63, 2**70])
    def test_out_of_range_experience_id_is_validation_error(
        self, api_client: TestClient, register_user, experience_id: int
    ) -> None:
        token, _uid = register_user()
        resp = api_client.delete(f"/api/experience/{experience_id}", headers=_auth(token))
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "validation_error"


class TestCrossUserIsolation:
    """A token for user A never reads or mutates user B's records."""

    def test_skills_are_private_to_owner(self, api_client: TestClient, register_user) -> None:
        token_a, _ = register_user("Alice")
        token_b, _ = register_user("Bob")
        skill = api_client.post("/api/skills", json={"name": "Rust"}, headers=_auth(token_a)).json()

        assert api_client.get("/api/skills", headers=_auth(token_b)).json() == []

        resp = api_client.post(f"/api/skills/{skill['id']}/endorse", headers=_auth(token_b))
        assert resp.status_code == 404

        resp = api_client.delete(f"/api/skills/{skill['id']}", headers=_auth(token_b))
        assert resp.status_code == 200

        mine = api_client.get("/api/skills", headers=_auth(token_a)).json()
        assert len(mine) == 1
        assert mine[0]["endorsements"] == 0

    def test_experience_is_private_to_owner(self, api_client: TestClient, register_user) -> None:
        token_a, _ = register_user("Alice")
        token_b, _ = register_user("Bob")
        exp = api_client.post(
            "/api/experience", json={"role": "CTO", "company": "Initech"}, headers=_auth(token_a)
        ).json()

        assert api_client.get("/api/experience", headers=_auth(token_b)).json() == []
        api_client.delete(f"/api/experience/{exp['id']}", headers=_auth(token_b))
        assert len(api_client.get("/api/experience", headers=_auth(token_a)).json()) == 1

    def test_profiles_are_separate(self, api_client: TestClient, register_user) -> None:
        token_a, uid_a = register_user("Alice")
        token_b, uid_b = register_user("Bob")
        api_client.put("/api/profile", json={"title": "Alice's title"}, headers=_auth(token_a))

        profile_b = api_client.get("/api/profile", headers=_auth(token_b)).json()
        assert profile_b["user_id"] == uid_b
        assert profile_b["title"] == ""
        assert api_client.get("/api/profile", headers=_auth(token_a)).json()["user_id"] == uid_a


class TestPublicProfile:
    def test_user_without_data_gets_empty_page(self, api_client: TestClient, register_user) -> None:
        _token, uid = register_user()
        resp = api_client.get(f"/api/public/{uid}/profile")
        assert resp.status_code == 200
        assert resp.json() == {"profile": None, "skills": [], "experience": []}

    def test_unknown_user_is_not_an_error(self, api_client: TestClient) -> None:
        resp = api_client.get("/api/public/424242/profile")
        assert resp.status_code == 200
        assert resp.json() == {"profile": None, "skills": [], "experience": []}

    def test_public_page_shows_owner_data_without_auth(self, api_client: TestClient, register_user) -> None:
        token, uid = register_user()
        headers = _auth(token)
        api_client.put("/api/profile", json={"title": "Designer"}, headers=headers)
        api_client.post("/api/skills", json={"name": "Figma"}, headers=headers)
        api_client.post("/api/experience", json={"role": "Lead", "company": "Studio"}, headers=headers)

        data = api_client.get(f"/api/public/{uid}/profile").json()
        assert data["profile"]["title"] == "Designer"
        assert [s["name"] for s in data["skills"]] == ["Figma"]
        assert [e["role"] for e in data["experience"]] == ["Lead"]

    def test_non_numeric_user_id_is_validation_error(self, api_client: TestClient) -> None:
        resp = api_client.get("/api/public/abc/profile")
        assert resp.status_code == 422

    @pytest.mark.parametrize("user_id", [0, 2**63, 2**70])
    def test_out_of_range_user_id_is_validation_error(self, api_client: TestClient, user_id: int) -> None:
        resp = api_client.get(f"/api/public/{user_id}/profile")
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "validation_error"


class TestStorageErrors:
    """Database failures surface as a generic 500 without driver details."""

    def test_storage_error_is_generic(self, api_client: TestClient, register_user, monkeypatch) -> None:
        token, _uid = register_user()

        def broken(user_id: int):
            raise OperationalError("SELECT * FROM skills", {}, Exception("disk I/O error at /var/db"))

        monkeypatch.setattr(api_client.app.state.profile_store, "list_skills", broken)
        resp = api_client.get("/api/skills", headers=_auth(token))

        assert resp.status_code == 500
        assert resp.json()["error"] == {"code": "storage_error", "message": "A storage error occurred.", "detail": None}
        assert "disk I/O" not in resp.text
        assert "SELECT" not in resp.text
