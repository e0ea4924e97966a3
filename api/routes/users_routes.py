"""Current-user and role management endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Request, Response

from core.auth import SessionContext
from core.authorization import (
    authorize,
    check_path_ids,
    is_admin,
    is_authenticated,
    parse_id,
)
from core.database import DbSession
from core.ratelimit import WRITE_LIMIT, limiter
from rendering import project
from routes.crud import is_full
from routes.resources import USER, VIEWS
from schemas import ERROR_RESPONSES, UserProfileInput, validate_partial
from services.entity_service import EntityService
from services.users_service import deactivate_user, set_admin, update_profile

router = APIRouter(
    prefix="/api/user",
    tags=["users"],
    dependencies=[Depends(check_path_ids)],
    responses=ERROR_RESPONSES,
)

CurrentSession = Annotated[SessionContext, Depends(authorize(is_authenticated))]
AdminSession = Annotated[SessionContext, Depends(authorize(is_admin))]


@router.get(
    "/me",
    responses={401: {"description": "Not authenticated"}},
)
async def get_current_user(
    db: DbSession, session: CurrentSession, full: str | None = None
) -> dict[str, Any]:
    """Get the logged-in user; ``full=true`` adds memberships and teams."""
    relations = USER.full_relations if is_full(full) else None
    service = EntityService(db, USER.rules)
    user = await service.find_one(session.user_id, relations)
    return project(user, VIEWS, relations)


@router.put("/me", responses={401: {"description": "Not authenticated"}})
@limiter.limit(WRITE_LIMIT)
async def update_current_user(
    request: Request,
    db: DbSession,
    session: CurrentSession,
    body: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    """Update profile fields; email, Google id and admin flag are not editable."""
    fields = validate_partial(UserProfileInput, body)
    user = await update_profile(db, session.user_id, fields)
    return project(user, VIEWS)


@router.delete("/me", status_code=204)
@limiter.limit(WRITE_LIMIT)
async def delete_current_user(
    request: Request, db: DbSession, session: CurrentSession
) -> Response:
    """Deactivate the account and log out."""
    await deactivate_user(db, session.user_id)
    request.session.clear()
    return Response(status_code=204)


@router.post("/{id}/promote", summary="Grant admin rights")
@limiter.limit(WRITE_LIMIT)
async def promote_user(
    id: str, request: Request, db: DbSession, _session: AdminSession
) -> dict[str, Any]:
    user = await set_admin(db, parse_id(id), True)
    return project(user, VIEWS)


@router.post("/{id}/demote", summary="Revoke admin rights")
@limiter.limit(WRITE_LIMIT)
async def demote_user(
    id: str, request: Request, db: DbSession, _session: AdminSession
) -> dict[str, Any]:
    user = await set_admin(db, parse_id(id), False)
    return project(user, VIEWS)
