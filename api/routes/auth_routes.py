"""Google OAuth authentication routes.

Handles:
- GET /api/auth/login: redirect to Google's consent screen
- GET /api/auth/callback: exchange code for token, create session
- GET /api/auth/status: report whether the caller is logged in
- POST /api/auth/logout: clear session
"""

import logging

from authlib.integrations.starlette_client import OAuthError
from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from core.auth import OptionalSession, oauth
from core.authorization import authorize, is_authenticated
from core.config import get_settings
from core.database import DbSession
from core.ratelimit import AUTH_LIMIT, limiter
from repositories.user_repository import UserRepository
from schemas import AuthStatusResponse, UserResponse
from services.users_service import get_or_create_user_from_google

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _frontend(path: str = "/") -> str:
    return get_settings().frontend_url.rstrip("/") + path


@router.get(
    "/login",
    summary="Redirect to Google OAuth login",
    include_in_schema=False,
)
@limiter.limit(AUTH_LIMIT)
async def login(request: Request) -> RedirectResponse:
    """Initiate the Google OAuth flow.

    After granting access, Google redirects back to /api/auth/callback.
    """
    google = oauth.create_client("google")
    if google is None:
        logger.error("auth.login.google_not_configured")
        return RedirectResponse(url=_frontend("/?error=auth"), status_code=302)

    redirect_uri = str(request.url_for("auth_callback"))
    # TLS terminates at the load balancer; the registered redirect URI is https.
    if get_settings().require_https and redirect_uri.startswith("http://"):
        redirect_uri = redirect_uri.replace("http://", "https://", 1)
    return await google.authorize_redirect(
        request, redirect_uri, prompt="select_account"
    )


@router.get(
    "/callback",
    name="auth_callback",
    summary="Google OAuth callback",
    include_in_schema=False,
)
@limiter.limit(AUTH_LIMIT)
async def callback(request: Request, db: DbSession) -> RedirectResponse:
    """Handle the Google OAuth callback.

    Exchanges the authorization code for tokens, reads the OpenID userinfo,
    creates or links the user and sets the session cookie.
    """
    google = oauth.create_client("google")
    if google is None:
        logger.error("auth.callback.google_not_configured")
        return RedirectResponse(url=_frontend("/?error=auth"), status_code=302)

    try:
        token = await google.authorize_access_token(request)
    except OAuthError:
        logger.exception("auth.callback.token_exchange_failed")
        return RedirectResponse(url=_frontend("/?error=auth"), status_code=302)

    userinfo = token.get("userinfo") or {}
    google_id = userinfo.get("sub")
    email = userinfo.get("email")
    if not google_id or not email:
        logger.error("auth.callback.missing_profile_fields")
        return RedirectResponse(url=_frontend("/?error=auth"), status_code=302)

    user = await get_or_create_user_from_google(
        db,
        google_id=str(google_id),
        email=email,
        first_name=userinfo.get("given_name"),
        last_name=userinfo.get("family_name"),
    )

    request.session["user_id"] = user.id

    logger.info("auth.login.success", extra={"user_id": user.id})

    return RedirectResponse(url=_frontend("/"), status_code=302)


@router.get("/status", response_model=AuthStatusResponse)
async def status(
    request: Request, db: DbSession, session: OptionalSession
) -> AuthStatusResponse:
    """Whether the caller has a valid session, with their basic profile."""
    csrf_token = request.scope.get("csrf_token")
    if session is None:
        return AuthStatusResponse(authenticated=False, csrf_token=csrf_token)

    user = await UserRepository(db).find_one(session.user_id)
    body = UserResponse.model_validate(user).model_dump(mode="json", by_alias=True)
    return AuthStatusResponse(authenticated=True, user=body, csrf_token=csrf_token)


@router.post(
    "/logout",
    status_code=204,
    summary="Log out and clear session",
    dependencies=[Depends(authorize(is_authenticated))],
)
@limiter.limit(AUTH_LIMIT)
async def logout(request: Request) -> None:
    """Clear the session cookie."""
    user_id = request.session.get("user_id")
    request.session.clear()
    logger.info("auth.logout", extra={"user_id": user_id})
