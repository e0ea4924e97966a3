"""Pokemon endpoints beyond the generic CRUD routes."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path, Request

from core.auth import SessionContext
from core.authorization import authorize, check_path_ids, is_admin, parse_id
from core.database import DbSession
from core.ratelimit import WRITE_LIMIT, limiter
from rendering import project
from routes.resources import VIEWS
from schemas import ERROR_RESPONSES
from services.pokemon_service import set_type_effectiveness

router = APIRouter(
    prefix="/api/pokemon",
    tags=["pokemon"],
    dependencies=[Depends(check_path_ids)],
    responses=ERROR_RESPONSES,
)


@router.post(
    "/{id}/effectiveness/{typeId}/{value}",
    status_code=201,
    summary="Set a type's effectiveness against a pokemon",
)
@limiter.limit(WRITE_LIMIT)
async def set_pokemon_type_effectiveness(
    id: str,
    typeId: str,
    value: Annotated[float, Path(ge=0, le=4)],
    request: Request,
    db: DbSession,
    _session: Annotated[SessionContext, Depends(authorize(is_admin))],
) -> dict[str, Any]:
    """Upsert the damage multiplier for the (pokemon, type) pair."""
    entry, _created = await set_type_effectiveness(
        db, parse_id(id), parse_id(typeId, "typeId"), value
    )
    return project(entry, VIEWS)
