"""Authorization guard chain.

A guard is an async callable that receives a GuardContext and either
returns quietly or raises a typed error. ``authorize(*guards)`` builds one
FastAPI dependency that runs its guards strictly left to right; the first
failure aborts the request before the handler runs.

Usage:
    @router.put("/{id}", dependencies=[Depends(authorize(is_league_moderator("id")))])
"""

import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import OptionalSession, SessionContext
from core.database import DbSession
from core.errors import (
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from core.logger import get_logger

logger = get_logger(__name__)

_ID_PATTERN = re.compile(r"[0-9]+")
MAX_ID = 2**31 - 1


@dataclass(slots=True)
class GuardContext:
    request: Request
    db: AsyncSession
    session: SessionContext | None


type Guard = Callable[[GuardContext], Awaitable[None]]
type ResourceLoader = Callable[[AsyncSession, int], Awaitable[Any]]


def parse_id(raw: Any, name: str = "id") -> int:
    """Parse a path identifier; anything but a base-10 integer is a 400."""
    text = str(raw) if raw is not None else ""
    if not _ID_PATTERN.fullmatch(text):
        raise ValidationError(f"Invalid {name}: must be a numeric identifier")
    value = int(text)
    if value > MAX_ID:
        raise ValidationError(f"Invalid {name}: identifier out of range")
    return value


async def check_path_ids(request: Request) -> None:
    """Reject malformed ``id`` and ``*Id`` path parameters.

    Mounted as a router dependency so it runs ahead of the session lookup
    and every guard; a bad id never reaches the database.
    """
    for name, raw in request.path_params.items():
        if name == "id" or name.endswith("Id"):
            parse_id(raw, name)


def _require_session(ctx: GuardContext) -> SessionContext:
    if ctx.session is None:
        raise UnauthorizedError()
    return ctx.session


def _path_id(ctx: GuardContext, param: str) -> int:
    return parse_id(ctx.request.path_params.get(param), param)


async def is_authenticated(ctx: GuardContext) -> None:
    _require_session(ctx)


async def is_admin(ctx: GuardContext) -> None:
    session = _require_session(ctx)
    if not session.is_admin:
        logger.info("authz.denied", guard="is_admin", user_id=session.user_id)
        raise ForbiddenError("Admin access required")


def is_league_moderator(param: str = "id") -> Guard:
    """Caller moderates the league named by path parameter ``param``."""

    async def guard(ctx: GuardContext) -> None:
        session = _require_session(ctx)
        league_id = _path_id(ctx, param)
        if session.is_admin:
            return
        if not session.is_moderator(league_id):
            logger.info(
                "authz.denied",
                guard="is_league_moderator",
                user_id=session.user_id,
                league_id=league_id,
            )
            raise ForbiddenError("League moderator access required")

    return guard


def is_league_member(param: str = "id") -> Guard:
    """Caller belongs to the league named by path parameter ``param``."""

    async def guard(ctx: GuardContext) -> None:
        session = _require_session(ctx)
        league_id = _path_id(ctx, param)
        if session.is_admin:
            return
        if not session.is_member(league_id):
            logger.info(
                "authz.denied",
                guard="is_league_member",
                user_id=session.user_id,
                league_id=league_id,
            )
            raise ForbiddenError("League membership required")

    return guard


def load_resource(loader: ResourceLoader, param: str = "id") -> Guard:
    """Load the resource named by ``param`` into ``request.state.resource``.

    The loader raises NotFoundError when the resource does not exist.
    """

    async def guard(ctx: GuardContext) -> None:
        entity_id = _path_id(ctx, param)
        ctx.request.state.resource = await loader(ctx.db, entity_id)

    return guard


def is_resource_owner(param: str = "id", owner_field: str = "user_id") -> Guard:
    """Caller owns the resource attached by ``load_resource``."""

    async def guard(ctx: GuardContext) -> None:
        session = _require_session(ctx)
        entity_id = _path_id(ctx, param)
        if session.is_admin:
            return
        resource = getattr(ctx.request.state, "resource", None)
        if resource is None:
            raise NotFoundError("Resource", entity_id)
        if getattr(resource, owner_field, None) != session.user_id:
            logger.info(
                "authz.denied",
                guard="is_resource_owner",
                user_id=session.user_id,
                resource_id=entity_id,
            )
            raise ForbiddenError("You do not own this resource")

    return guard


def authorize(*guards: Guard) -> Callable[..., Awaitable[SessionContext | None]]:
    """Build a dependency running ``guards`` in order; returns the session."""

    async def dependency(
        request: Request, db: DbSession, session: OptionalSession
    ) -> SessionContext | None:
        ctx = GuardContext(request=request, db=db, session=session)
        for guard in guards:
            await guard(ctx)
        return session

    return dependency
