"""Sign-up, sign-in, session resolution and sign-out over HTTP."""

import pytest

from intervue.auth.jwt import SESSION_COOKIE

SIGN_UP = {"name": "Katherine Johnson", "email": "Katherine@Example.com", "password": "orbit-1962"}


async def _sign_up(client, **overrides):
    return await client.post("/api/auth/sign-up", json={**SIGN_UP, **overrides})


async def _sign_in(client, email="katherine@example.com", password="orbit-1962"):
    return await client.post("/api/auth/sign-in", json={"email": email, "password": password})


class TestSignUp:
    @pytest.mark.asyncio
    async def test_created(self, client):
        resp = await _sign_up(client)
        assert resp.status_code == 201
        assert resp.json() == {"success": True, "message": "Account created successfully. Please sign in."}

    @pytest.mark.asyncio
    async def test_duplicate_email_any_case(self, client):
        await _sign_up(client)
        resp = await _sign_up(client, email="KATHERINE@example.com")
        assert resp.status_code == 409
        assert "error" in resp.json()

    @pytest.mark.asyncio
    async def test_weak_password(self, client):
        resp = await _sign_up(client, password="abc")
        assert resp.status_code == 400
        assert "at least 6" in resp.json()["error"]

    @pytest.mark.asyncio
    async def test_invalid_email(self, client):
        resp = await _sign_up(client, email="not-an-email")
        assert resp.status_code == 400


class TestSignIn:
    @pytest.mark.asyncio
    async def test_returns_token_and_cookie(self, client):
        await _sign_up(client)
        resp = await _sign_in(client)
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["token"]
        assert resp.cookies.get(SESSION_COOKIE) == data["token"]
        assert "httponly" in resp.headers["set-cookie"].lower()

    @pytest.mark.asyncio
    async def test_email_is_case_insensitive(self, client):
        await _sign_up(client)
        assert (await _sign_in(client, email="KATHERINE@EXAMPLE.COM")).status_code == 200

    @pytest.mark.asyncio
    async def test_wrong_password(self, client):
        await _sign_up(client)
        resp = await _sign_in(client, password="wrong-password")
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid credentials. Please try again."}

    @pytest.mark.asyncio
    async def test_unknown_email(self, client):
        resp = await _sign_in(client, email="nobody@example.com")
        assert resp.status_code == 401


class TestSession:
    @pytest.mark.asyncio
    async def test_me_with_bearer(self, client):
        await _sign_up(client)
        token = (await _sign_in(client)).json()["token"]

        resp = await client.get("/api/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["name"] == "Katherine Johnson"
        assert data["email"] == "katherine@example.com"
        assert data["userId"]

    @pytest.mark.asyncio
    async def test_me_with_cookie(self, client):
        await _sign_up(client)
        token = (await _sign_in(client)).json()["token"]
        client.cookies.clear()

        resp = await client.get("/api/me", headers={"Cookie": f"{SESSION_COOKIE}={token}"})
        assert resp.status_code == 200

    @pytest.mark.asyncio
    async def test_me_without_session(self, client):
        resp = await client.get("/api/me")
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_me_with_bad_token(self, client):
        resp = await client.get("/api/me", headers={"Authorization": "Bearer nonsense"})
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_sign_out_clears_cookie(self, client):
        resp = await client.post("/api/auth/sign-out")
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "message": "Signed out."}
        assert f'{SESSION_COOKIE}=""' in resp.headers["set-cookie"]
