"""CSRF protection middleware, Synchronizer Token Pattern.

Stores a random token in the signed session and validates it on unsafe
requests (POST, PUT, PATCH, DELETE). The browser client reads the token
from ``GET /api/auth/status`` (``csrfToken``) and sends it back in the
``X-CSRFToken`` header.

The token lives in the signed session cookie, so an attacker who can set
cookies on a sibling domain still cannot forge requests.
"""

from __future__ import annotations

import logging
import secrets
from re import Pattern

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from core.errors import error_body

logger = logging.getLogger(__name__)

_SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})
SESSION_KEY = "_csrf_token"
HEADER_NAME = "X-CSRFToken"


class CSRFMiddleware:
    """Synchronizer Token CSRF middleware.

    Must run inside SessionMiddleware (added before it), otherwise there is
    no session to keep the token in and the check is skipped.

    Args:
        app: The ASGI application.
        exempt_urls: Optional regex patterns for paths that skip CSRF
            checks (e.g. OAuth callbacks that receive external redirects).
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        exempt_urls: list[Pattern[str]] | None = None,
    ) -> None:
        self.app = app
        self.exempt_urls = exempt_urls or []

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        session = scope.get("session")
        if session is None:
            await self.app(scope, receive, send)
            return

        if SESSION_KEY not in session:
            session[SESSION_KEY] = secrets.token_urlsafe(32)

        # Routes read it from here to hand it to the client
        scope["csrf_token"] = session[SESSION_KEY]

        request = Request(scope, receive)
        if request.method in _SAFE_METHODS or self._url_is_exempt(request.url.path):
            await self.app(scope, receive, send)
            return

        submitted = request.headers.get(HEADER_NAME)
        if not submitted or not secrets.compare_digest(
            submitted, session[SESSION_KEY]
        ):
            logger.warning(
                "csrf.validation_failed",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                },
            )
            response = JSONResponse(
                status_code=403,
                content=error_body("CSRF token missing or invalid", 403),
            )
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)

    def _url_is_exempt(self, path: str) -> bool:
        return any(pattern.match(path) for pattern in self.exempt_urls)
