"""Tests for auth_routes: Google OAuth login, callback, status and logout.

Google itself is never contacted; the OAuth client is mocked.
"""

from unittest.mock import AsyncMock, MagicMock, patch

from authlib.integrations.starlette_client import OAuthError
from httpx import AsyncClient
from starlette.responses import RedirectResponse

from models import User

FRONTEND = "http://localhost:5173"


def _google_client(userinfo: dict | None = None, error: bool = False) -> MagicMock:
    google = MagicMock()
    if error:
        google.authorize_access_token = AsyncMock(side_effect=OAuthError("denied"))
    else:
        google.authorize_access_token = AsyncMock(
            return_value={"access_token": "t", "userinfo": userinfo or {}}
        )
    google.authorize_redirect = AsyncMock(
        return_value=RedirectResponse("https://accounts.google.com/o/oauth2/auth")
    )
    return google


class TestLogin:
    async def test_redirects_to_google(self, client: AsyncClient):
        google = _google_client()
        with patch("routes.auth_routes.oauth.create_client", return_value=google):
            response = await client.get("/api/auth/login")

        assert response.status_code in (302, 307)
        assert response.headers["location"].startswith("https://accounts.google.com")
        redirect_uri = google.authorize_redirect.await_args.args[1]
        assert redirect_uri.endswith("/api/auth/callback")

    async def test_not_configured_redirects_to_frontend(self, client: AsyncClient):
        with patch("routes.auth_routes.oauth.create_client", return_value=None):
            response = await client.get("/api/auth/login")

        assert response.status_code == 302
        assert response.headers["location"] == f"{FRONTEND}/?error=auth"


class TestCallback:
    async def test_creates_user_and_session(self, client: AsyncClient):
        google = _google_client(
            {
                "sub": "1098765",
                "email": "Red@Example.com",
                "given_name": "Red",
                "family_name": "Trainer",
            }
        )
        with patch("routes.auth_routes.oauth.create_client", return_value=google):
            response = await client.get("/api/auth/callback")

        assert response.status_code == 302
        assert response.headers["location"] == f"{FRONTEND}/"

        status = await client.get("/api/auth/status")
        body = status.json()
        assert body["authenticated"] is True
        assert body["user"]["email"] == "red@example.com"
        assert body["user"]["firstName"] == "Red"

    async def test_token_exchange_failure(self, client: AsyncClient):
        google = _google_client(error=True)
        with patch("routes.auth_routes.oauth.create_client", return_value=google):
            response = await client.get("/api/auth/callback")

        assert response.status_code == 302
        assert response.headers["location"] == f"{FRONTEND}/?error=auth"

    async def test_missing_email(self, client: AsyncClient):
        google = _google_client({"sub": "1"})
        with patch("routes.auth_routes.oauth.create_client", return_value=google):
            response = await client.get("/api/auth/callback")

        assert response.headers["location"] == f"{FRONTEND}/?error=auth"
        status = await client.get("/api/auth/status")
        assert status.json()["authenticated"] is False


class TestStatusAndLogout:
    async def test_anonymous_status(self, client: AsyncClient):
        response = await client.get("/api/auth/status")

        assert response.status_code == 200
        body = response.json()
        assert body["authenticated"] is False
        assert body["user"] is None
        assert body["csrfToken"] == client.headers["X-CSRFToken"]

    async def test_stale_session_is_anonymous(self, client: AsyncClient, sign_in):
        sign_in(123456)

        response = await client.get("/api/auth/status")

        assert response.json()["authenticated"] is False

    async def test_logout_requires_session(self, client: AsyncClient):
        response = await client.post("/api/auth/logout")

        assert response.status_code == 401

    async def test_logout_clears_session(
        self, client: AsyncClient, sign_in, trainer: User
    ):
        sign_in(trainer.id)

        response = await client.post("/api/auth/logout")

        assert response.status_code == 204
        assert "session=null" in response.headers["set-cookie"]
