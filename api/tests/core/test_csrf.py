"""Tests for core.csrf: Synchronizer Token CSRF middleware.

- Token auto-generated in the session on first request
- Safe methods skip the check
- POST/PUT/DELETE require the X-CSRFToken header to match the session
- 403 with the uniform error body on a missing or wrong token
- Exempt URLs skip the check
- No session means the middleware is a no-op
"""

import json
import re

import pytest
from httpx import AsyncClient

from core.csrf import HEADER_NAME, SESSION_KEY, CSRFMiddleware

_TOKEN = "test-csrf-token-value"


async def _noop_receive():
    return {"type": "http.request", "body": b""}


async def _ok_app(scope, receive, send):
    await send({"type": "http.response.start", "status": 200, "headers": []})
    await send({"type": "http.response.body", "body": b"OK"})


def _http_scope(
    method: str = "GET",
    path: str = "/api/pokemon",
    headers: list[tuple[bytes, bytes]] | None = None,
    session: dict | None = None,
) -> dict:
    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": b"",
        "root_path": "",
        "headers": headers or [],
        "server": ("localhost", 8000),
    }
    if session is not None:
        scope["session"] = session
    return scope


async def _run(middleware: CSRFMiddleware, scope: dict) -> list[dict]:
    sent: list[dict] = []

    async def send(message):
        sent.append(message)

    await middleware(scope, _noop_receive, send)
    return sent


def _status(sent: list[dict]) -> int:
    return next(m["status"] for m in sent if m["type"] == "http.response.start")


@pytest.mark.unit
class TestCSRFMiddleware:
    async def test_get_generates_token(self):
        session: dict = {}
        scope = _http_scope(session=session)

        sent = await _run(CSRFMiddleware(_ok_app), scope)

        assert _status(sent) == 200
        assert session[SESSION_KEY]
        assert scope["csrf_token"] == session[SESSION_KEY]

    async def test_existing_token_is_kept(self):
        session = {SESSION_KEY: _TOKEN}

        await _run(CSRFMiddleware(_ok_app), _http_scope(session=session))

        assert session[SESSION_KEY] == _TOKEN

    @pytest.mark.parametrize("method", ["POST", "PUT", "DELETE"])
    async def test_unsafe_method_without_token_is_403(self, method: str):
        scope = _http_scope(method=method, session={SESSION_KEY: _TOKEN})

        sent = await _run(CSRFMiddleware(_ok_app), scope)

        assert _status(sent) == 403
        body = json.loads(sent[-1]["body"])
        assert body["error"] == "CSRF token missing or invalid"
        assert body["statusCode"] == 403

    async def test_valid_header_passes(self):
        scope = _http_scope(
            method="POST",
            session={SESSION_KEY: _TOKEN},
            headers=[(b"x-csrftoken", _TOKEN.encode())],
        )

        sent = await _run(CSRFMiddleware(_ok_app), scope)

        assert _status(sent) == 200

    async def test_wrong_token_is_403(self):
        scope = _http_scope(
            method="PUT",
            session={SESSION_KEY: _TOKEN},
            headers=[(b"x-csrftoken", b"wrong-token")],
        )

        sent = await _run(CSRFMiddleware(_ok_app), scope)

        assert _status(sent) == 403

    async def test_exempt_url_skips_check(self):
        middleware = CSRFMiddleware(
            _ok_app, exempt_urls=[re.compile(r"^/api/auth/callback$")]
        )
        scope = _http_scope(
            method="POST", path="/api/auth/callback", session={SESSION_KEY: _TOKEN}
        )

        sent = await _run(middleware, scope)

        assert _status(sent) == 200

    async def test_non_exempt_url_still_checked(self):
        middleware = CSRFMiddleware(
            _ok_app, exempt_urls=[re.compile(r"^/api/auth/callback$")]
        )
        scope = _http_scope(
            method="POST", path="/api/auth/logout", session={SESSION_KEY: _TOKEN}
        )

        sent = await _run(middleware, scope)

        assert _status(sent) == 403

    async def test_no_session_passes_through(self):
        sent = await _run(CSRFMiddleware(_ok_app), _http_scope(method="POST"))

        assert _status(sent) == 200

    async def test_non_http_scope_passes_through(self):
        called = False

        async def inner(scope, receive, send):
            nonlocal called
            called = True

        await CSRFMiddleware(inner)({"type": "websocket"}, _noop_receive, None)

        assert called


@pytest.mark.unit
class TestCSRFOnApp:
    """The wired app: SessionMiddleware wraps CSRFMiddleware."""

    async def test_write_without_token_is_rejected(
        self, client: AsyncClient, login_as
    ):
        login_as(1, is_admin=True)
        del client.headers[HEADER_NAME]

        response = await client.post("/api/generation", json={"name": "Kanto"})

        assert response.status_code == 403
        assert response.json()["error"] == "CSRF token missing or invalid"

    async def test_write_with_foreign_token_is_rejected(
        self, client: AsyncClient, login_as
    ):
        login_as(1, is_admin=True)
        client.headers[HEADER_NAME] = "not-the-session-token"

        response = await client.post("/api/generation", json={"name": "Kanto"})

        assert response.status_code == 403

    async def test_write_with_session_token_passes(
        self, client: AsyncClient, login_as
    ):
        login_as(1, is_admin=True)

        response = await client.post("/api/generation", json={"name": "Kanto"})

        assert response.status_code == 201

    async def test_cors_allows_token_header(self, client: AsyncClient):
        response = await client.options(
            "/api/generation",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "x-csrftoken",
            },
        )

        assert response.status_code == 200
        allowed = response.headers["access-control-allow-headers"].lower()
        assert "x-csrftoken" in allowed
