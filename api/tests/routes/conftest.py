"""Route test configuration: rate limiter off, shared seed helpers."""

import json
from base64 import b64encode
from collections.abc import Callable
from unittest.mock import patch

import pytest
from httpx import AsyncClient
from itsdangerous import TimestampSigner
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import get_settings
from core.csrf import HEADER_NAME as CSRF_HEADER
from core.csrf import SESSION_KEY as CSRF_SESSION_KEY
from models import League, User
from tests.factories import (
    AdminUserFactory,
    LeagueFactory,
    LeagueUserFactory,
    UserFactory,
    create_async,
)


@pytest.fixture(autouse=True)
def _disable_rate_limiter():
    """Disable slowapi rate limiting so route handlers can be called directly."""
    with patch("core.ratelimit.limiter.enabled", False):
        yield


@pytest.fixture
async def admin(db_session: AsyncSession) -> User:
    user = await create_async(AdminUserFactory, db_session)
    await db_session.commit()
    return user


@pytest.fixture
async def trainer(db_session: AsyncSession) -> User:
    user = await create_async(UserFactory, db_session)
    await db_session.commit()
    return user


@pytest.fixture
async def league(db_session: AsyncSession, trainer: User) -> League:
    """A league moderated by ``trainer``."""
    league = await create_async(LeagueFactory, db_session)
    await create_async(
        LeagueUserFactory,
        db_session,
        league_id=league.id,
        user_id=trainer.id,
        is_moderator=True,
    )
    await db_session.commit()
    return league


def session_cookie(user_id: int, csrf_token: str | None = None) -> str:
    """Signed Starlette session cookie holding ``user_id`` and the CSRF token."""
    session: dict[str, int | str] = {"user_id": user_id}
    if csrf_token:
        session[CSRF_SESSION_KEY] = csrf_token
    data = b64encode(json.dumps(session).encode("utf-8"))
    return TimestampSigner(get_settings().session_secret_key).sign(data).decode()


@pytest.fixture
def sign_in(client: AsyncClient) -> Callable[[int], None]:
    """Log the test client in through a real session cookie.

    Unlike ``login_as``, memberships are loaded from the database.
    """

    def _sign_in(user_id: int) -> None:
        client.cookies.clear()
        csrf_token = client.headers.get(CSRF_HEADER)
        client.cookies.set("session", session_cookie(user_id, csrf_token))

    return _sign_in
