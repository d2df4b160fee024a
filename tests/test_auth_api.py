"""End-to-end tests of registration, login and the auth gate."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from fastapi import Depends, FastAPI, Request
from httpx import ASGITransport, AsyncClient

from profusion.api.deps import get_current_claims, get_token_service
from profusion.core.errors import register_error_handlers
from profusion.services.tokens import TokenService

from conftest import STRONG_PASSWORD, TEST_SECRET


class TestRegistration:
    async def test_register_login_and_access(self, client):
        response = await client.post(
            "/api/users/register",
            json={"name": "Alice", "email": "alice@x.com", "password": "Abc123!@"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "alice@x.com"
        assert "password" not in body
        assert "hashed_password" not in body

        response = await client.post("/api/users/login", json={"email": "alice@x.com", "password": "Abc123!@"})
        assert response.status_code == 200
        login = response.json()
        assert login["token_type"] == "bearer"
        assert login["expires_in"] == 3600
        assert login["user"]["id"] == body["id"]

        response = await client.get("/api/users/me", headers={"Authorization": f"Bearer {login['token']}"})
        assert response.status_code == 200
        assert response.json()["email"] == "alice@x.com"

    async def test_first_user_is_admin(self, admin, member):
        assert admin["user"]["role"]["name"] == "admin"
        assert member["user"]["role"]["name"] == "member"

    async def test_weak_password(self, client):
        response = await client.post(
            "/api/users/register",
            json={"name": "Alice", "email": "alice@x.com", "password": "abc123"},
        )
        assert response.status_code == 400
        assert "symbol" in response.json()["error"]

    async def test_duplicate_email(self, client, admin):
        response = await client.post(
            "/api/users/register",
            json={"name": "Imposter", "email": "ADMIN@example.com", "password": STRONG_PASSWORD},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Email already exists"}

    async def test_invalid_email_is_a_schema_error(self, client):
        response = await client.post(
            "/api/users/register",
            json={"name": "Alice", "email": "not-an-email", "password": STRONG_PASSWORD},
        )
        assert response.status_code == 422

    async def test_self_assigned_admin_role_is_forbidden(self, client, admin):
        response = await client.post(
            "/api/users/register",
            json={
                "name": "Mallory",
                "email": "mallory@x.com",
                "password": STRONG_PASSWORD,
                "role_id": admin["user"]["role_id"],
            },
        )
        assert response.status_code == 403


class TestLogin:
    async def test_wrong_password_and_unknown_email_match(self, client, admin):
        wrong = await client.post("/api/users/login", json={"email": "admin@example.com", "password": "Nope123!"})
        unknown = await client.post("/api/users/login", json={"email": "ghost@example.com", "password": "Nope123!"})

        assert wrong.status_code == unknown.status_code == 400
        assert wrong.json() == unknown.json() == {"error": "Invalid email or password"}


class TestAuthGate:
    async def test_missing_token(self, client):
        response = await client.get("/api/users/me")

        assert response.status_code == 401
        assert response.json() == {"error": "Access denied. No token provided."}
        assert response.headers["www-authenticate"] == "Bearer"

    async def test_expired_token(self, client, admin):
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        stale = TokenService(secret=TEST_SECRET, clock=lambda: past)
        token = stale.issue(admin["user"]["id"], admin["user"]["role_id"])

        response = await client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid token"}

    async def test_forged_token(self, client, admin):
        forger = TokenService(secret="some-other-secret-0123456789abcdefghij")
        token = forger.issue(admin["user"]["id"], admin["user"]["role_id"])

        response = await client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_garbage_token(self, client):
        response = await client.get("/api/users/me", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid token"}

    async def test_token_for_unknown_user(self, client, token_service):
        token = token_service.issue(uuid4(), uuid4())

        response = await client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_token_of_deleted_user(self, client, admin, member):
        response = await client.delete(f"/api/users/{member['user']['id']}", headers=admin["headers"])
        assert response.status_code == 200

        response = await client.get("/api/users/me", headers=member["headers"])
        assert response.status_code == 401

    async def test_public_endpoints(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["database"] == "ok"
        assert (await client.get("/")).status_code == 200


class TestUserManagement:
    async def test_user_list_hides_hashes(self, client, admin, member):
        response = await client.get("/api/users/", headers=member["headers"])

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 2
        assert all("hashed_password" not in item for item in body["items"])

    async def test_members_only_edit_themselves(self, client, admin, member):
        response = await client.patch(
            f"/api/users/{admin['user']['id']}", json={"name": "Pwned"}, headers=member["headers"]
        )
        assert response.status_code == 403

        response = await client.patch(
            f"/api/users/{member['user']['id']}", json={"name": "Renamed"}, headers=member["headers"]
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Renamed"

    async def test_members_cannot_change_their_role(self, client, admin, member):
        response = await client.patch(
            f"/api/users/{member['user']['id']}",
            json={"role_id": admin["user"]["role_id"]},
            headers=member["headers"],
        )
        assert response.status_code == 403

    async def test_password_change_is_rehashed(self, client, admin, member):
        response = await client.patch(
            f"/api/users/{member['user']['id']}", json={"password": "Fresh123!"}, headers=member["headers"]
        )
        assert response.status_code == 200

        old = await client.post("/api/users/login", json={"email": "member@example.com", "password": STRONG_PASSWORD})
        new = await client.post("/api/users/login", json={"email": "member@example.com", "password": "Fresh123!"})
        assert old.status_code == 400
        assert new.status_code == 200

    async def test_empty_update(self, client, admin):
        response = await client.patch(f"/api/users/{admin['user']['id']}", json={}, headers=admin["headers"])
        assert response.status_code == 400
        assert response.json() == {"error": "No fields to update"}

    async def test_delete_requires_admin(self, client, admin, member):
        response = await client.delete(f"/api/users/{admin['user']['id']}", headers=member["headers"])
        assert response.status_code == 403


def _claims_echo_app(tokens: TokenService) -> FastAPI:
    """A bare app whose handler only sees the claims the gate left on the request."""
    echo = FastAPI()
    register_error_handlers(echo)
    echo.dependency_overrides[get_token_service] = lambda: tokens

    @echo.get("/whoami", dependencies=[Depends(get_current_claims)])
    async def whoami(request: Request):
        claims = request.state.claims
        return {"user_id": str(claims.user_id), "role_id": str(claims.role_id)}

    return echo


class TestRequestClaims:
    async def test_gate_attaches_claims_to_request_state(self, token_service):
        user_id, role_id = uuid4(), uuid4()
        token = token_service.issue(user_id, role_id)

        transport = ASGITransport(app=_claims_echo_app(token_service))
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/whoami", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json() == {"user_id": str(user_id), "role_id": str(role_id)}

    async def test_rejected_token_never_reaches_handler(self, token_service):
        transport = ASGITransport(app=_claims_echo_app(token_service))
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            missing = await ac.get("/whoami")
            garbage = await ac.get("/whoami", headers={"Authorization": "Bearer garbage"})

        assert missing.status_code == 401
        assert garbage.status_code == 401
        assert garbage.json() == {"error": "Invalid token"}
