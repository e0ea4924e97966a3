"""Session-based authentication.

Login goes through Google OAuth (Authlib). The signed session cookie holds
only ``user_id``; everything else the authorization chain needs is loaded
once per request into a SessionContext.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from authlib.integrations.starlette_client import OAuth
from fastapi import Depends, Request

from core.config import get_settings
from core.database import DbSession
from core.logger import get_logger
from repositories.user_repository import UserRepository

logger = get_logger(__name__)

oauth = OAuth()

GOOGLE_METADATA_URL = "https://accounts.google.com/.well-known/openid-configuration"


def init_oauth() -> None:
    """Register the Google provider when credentials are configured."""
    settings = get_settings()
    if not settings.google_client_id:
        logger.warning("auth.oauth.google_not_configured")
        return

    oauth.register(
        name="google",
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
        server_metadata_url=GOOGLE_METADATA_URL,
        client_kwargs={"scope": "openid email profile"},
    )


@dataclass(frozen=True, slots=True)
class Membership:
    league_id: int
    is_moderator: bool


@dataclass(frozen=True, slots=True)
class SessionContext:
    """Who is calling: user id, global admin flag and league memberships."""

    user_id: int
    is_admin: bool
    memberships: tuple[Membership, ...] = ()

    def membership(self, league_id: int) -> Membership | None:
        for membership in self.memberships:
            if membership.league_id == league_id:
                return membership
        return None

    def is_member(self, league_id: int) -> bool:
        return self.membership(league_id) is not None

    def is_moderator(self, league_id: int) -> bool:
        membership = self.membership(league_id)
        return membership is not None and membership.is_moderator


def get_user_id_from_session(request: Request) -> int | None:
    user_id = request.session.get("user_id")
    if user_id is None:
        return None
    try:
        return int(user_id)
    except (TypeError, ValueError):
        return None


async def get_session_context(
    request: Request, db: DbSession
) -> SessionContext | None:
    """Resolve the caller once per request.

    Returns None without touching the database when the session holds no
    user. A user id that no longer matches an active user is dropped from
    the session.
    """
    user_id = get_user_id_from_session(request)
    if user_id is None:
        return None

    repo = UserRepository(db)
    user = await repo.get_active(user_id)
    if user is None:
        logger.info("auth.session.stale", user_id=user_id)
        request.session.pop("user_id", None)
        return None

    memberships = await repo.get_memberships(user_id)
    context = SessionContext(
        user_id=user.id,
        is_admin=user.is_admin,
        memberships=tuple(
            Membership(league_id=m.league_id, is_moderator=m.is_moderator)
            for m in memberships
        ),
    )
    request.state.user_id = user.id
    request.state.session_context = context
    return context


OptionalSession = Annotated[SessionContext | None, Depends(get_session_context)]
