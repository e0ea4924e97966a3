"""Generic CRUD routes.

``build_crud_router`` mounts the five standard routes for one resource:

    GET    /api/<resource>        ?page&pageSize&sortBy&sortOrder&full&<filters>
    GET    /api/<resource>/{id}   ?full
    POST   /api/<resource>
    PUT    /api/<resource>/{id}   ?full
    DELETE /api/<resource>/{id}

Resources with a LeagueScope are mounted a second time under
``/api/league/{leagueId}/<resource>``; every read and write there is limited
to rows belonging to that league.
"""

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request, Response
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import SessionContext
from core.authorization import (
    Guard,
    authorize,
    check_path_ids,
    is_admin,
    is_league_member,
    is_league_moderator,
    parse_id,
)
from core.config import get_settings
from core.database import DbSession
from core.errors import ForbiddenError, NotFoundError, ValidationError
from core.ratelimit import WRITE_LIMIT, limiter
from rendering import Views, project, project_page
from repositories.base_repository import Pagination, RelationMap, Scope, Sort
from schemas import (
    ERROR_RESPONSES,
    InputSchema,
    OutputSchema,
    PageResponse,
    validate_partial,
)
from services.entity_service import EntityRules, EntityService

RESERVED_PARAMS = frozenset({"page", "pageSize", "sortBy", "sortOrder", "full"})

type CreateHook = Callable[
    [AsyncSession, Any, SessionContext | None], Awaitable[None]
]


@dataclass(frozen=True)
class AccessPolicy:
    """Guards per operation; an empty tuple means public.

    ``read_list`` guards the list route and falls back to ``read``.
    """

    read: tuple[Guard, ...] = ()
    read_list: tuple[Guard, ...] | None = None
    create: tuple[Guard, ...] = ()
    update: tuple[Guard, ...] = ()
    delete: tuple[Guard, ...] = ()


ADMIN_WRITES = AccessPolicy(
    create=(is_admin,),
    update=(is_admin,),
    delete=(is_admin,),
)

LEAGUE_MEMBER_READS_MODERATOR_WRITES = AccessPolicy(
    read=(is_league_member("leagueId"),),
    create=(is_league_moderator("leagueId"),),
    update=(is_league_moderator("leagueId"),),
    delete=(is_league_moderator("leagueId"),),
)


@dataclass(frozen=True)
class LeagueScope:
    """Many-to-one path from the entity to the row holding ``league_id``."""

    path: tuple[str, ...] = ()
    column: str = "league_id"
    policy: AccessPolicy = LEAGUE_MEMBER_READS_MODERATOR_WRITES

    def for_league(self, league_id: int) -> Scope:
        return Scope(self.path, self.column, league_id)


@dataclass(frozen=True)
class ResourceConfig:
    path: str
    rules: EntityRules
    input_schema: type[InputSchema]
    output_schema: type[OutputSchema]
    full_relations: RelationMap = field(default_factory=dict)
    base_relations: RelationMap = field(default_factory=dict)
    sort_fields: tuple[str, ...] = ("id", "created_at", "updated_at")
    policy: AccessPolicy = ADMIN_WRITES
    league_scope: LeagueScope | None = None
    on_create: CreateHook | None = None
    # Fields a non-admin may change through the top-level update route;
    # None leaves every input field open to whoever passes the guards.
    owner_update_fields: tuple[str, ...] | None = None


def is_full(value: str | None) -> bool:
    return value == "true"


def parse_sort(
    resource: ResourceConfig, sort_by: str | None, sort_order: str
) -> Sort | None:
    order = sort_order.upper()
    if order not in ("ASC", "DESC"):
        raise ValidationError("sortOrder must be ASC or DESC")
    if not sort_by:
        return None
    allowed = {to_camel(name): name for name in resource.sort_fields}
    allowed.update({name: name for name in resource.sort_fields})
    if sort_by not in allowed:
        choices = ", ".join(sorted(to_camel(name) for name in resource.sort_fields))
        raise ValidationError(f"sortBy must be one of: {choices}")
    return Sort(field=allowed[sort_by], descending=order == "DESC")


def parse_filters(
    resource: ResourceConfig, params: Mapping[str, str]
) -> dict[str, Any]:
    """Equality filter from query keys matching a column of the input shape."""
    columns = resource.rules.model.__table__.columns.keys()
    candidates = {k: v for k, v in params.items() if k not in RESERVED_PARAMS}
    values = validate_partial(resource.input_schema, candidates)
    return {name: value for name, value in values.items() if name in columns}


def build_crud_router(
    resource: ResourceConfig, views: Views, scoped: bool = False
) -> APIRouter:
    """Mount the five routes for ``resource``.

    With ``scoped=True`` the routes live under ``/api/league/{leagueId}`` and
    use the league scope's policy instead of the resource's own.
    """
    if scoped and resource.league_scope is None:
        raise ValueError(f"{resource.path} has no league scope")

    league_scope = resource.league_scope if scoped else None
    policy = league_scope.policy if league_scope else resource.policy
    if scoped:
        prefix = f"/api/league/{{leagueId}}/{resource.path}"
    else:
        prefix = f"/api/{resource.path}"
    name = f"league_{resource.path}" if scoped else resource.path
    router = APIRouter(
        prefix=prefix,
        tags=[resource.path],
        dependencies=[Depends(check_path_ids)],
        responses=ERROR_RESPONSES,
    )
    input_schema = resource.input_schema
    list_guards = policy.read if policy.read_list is None else policy.read_list
    entity_name = resource.rules.entity_name

    def scope_for(request: Request) -> Scope | None:
        if league_scope is None:
            return None
        league_id = parse_id(request.path_params.get("leagueId"), "leagueId")
        return league_scope.for_league(league_id)

    def check_owner_fields(
        fields: Mapping[str, Any], session: SessionContext | None
    ) -> None:
        """Non-admins may only touch ``owner_update_fields`` at the top level."""
        allowed = resource.owner_update_fields
        if scoped or allowed is None or (session is not None and session.is_admin):
            return
        locked = [to_camel(name) for name in fields if name not in allowed]
        if locked:
            names = ", ".join(sorted(locked))
            raise ForbiddenError(f"Only an admin can change {names}")

    async def ensure_in_scope(
        service: EntityService, entity: Any, scope: Scope | None
    ) -> None:
        """A write through a league route must leave the row inside that league."""
        if scope is None:
            return
        try:
            await service.find_one(entity.id, scope=scope)
        except NotFoundError:
            raise ValidationError(
                f"{entity_name} must belong to league {scope.value}"
            ) from None

    @router.get(
        "",
        name=f"{name}_list",
        summary=f"List {entity_name} records",
        response_model=PageResponse,
    )
    async def list_entities(
        request: Request,
        db: DbSession,
        _session: Annotated[SessionContext | None, Depends(authorize(*list_guards))],
        page: int = 1,
        page_size: Annotated[int | None, Query(alias="pageSize")] = None,
        sort_by: Annotated[str | None, Query(alias="sortBy")] = None,
        sort_order: Annotated[str, Query(alias="sortOrder")] = "ASC",
        full: str | None = None,
    ) -> dict[str, Any]:
        if page_size is None:
            page_size = get_settings().default_page_size
        scope = scope_for(request)
        sort = parse_sort(resource, sort_by, sort_order)
        where = parse_filters(resource, request.query_params)
        full_view = is_full(full)
        relations = resource.full_relations if full_view else resource.base_relations

        service = EntityService(db, resource.rules)
        result = await service.find_all(
            where=where,
            relations=relations,
            pagination=Pagination(page=page, page_size=page_size),
            sort=sort,
            scope=scope,
        )
        return project_page(result, views, relations if full_view else None)

    @router.get("/{id}", name=f"{name}_get", summary=f"Get one {entity_name}")
    async def get_entity(
        id: str,
        request: Request,
        db: DbSession,
        _session: Annotated[SessionContext | None, Depends(authorize(*policy.read))],
        full: str | None = None,
    ) -> dict[str, Any]:
        entity_id = parse_id(id)
        full_view = is_full(full)
        relations = resource.full_relations if full_view else resource.base_relations
        service = EntityService(db, resource.rules)
        entity = await service.find_one(entity_id, relations, scope_for(request))
        return project(entity, views, relations if full_view else None)

    @router.post(
        "", name=f"{name}_create", status_code=201, summary=f"Create a {entity_name}"
    )
    @limiter.limit(WRITE_LIMIT)
    async def create_entity(
        request: Request,
        db: DbSession,
        payload: input_schema,
        session: Annotated[SessionContext | None, Depends(authorize(*policy.create))],
    ) -> dict[str, Any]:
        scope = scope_for(request)
        service = EntityService(db, resource.rules)
        entity = await service.create(payload.model_dump())
        await ensure_in_scope(service, entity, scope)
        if resource.on_create is not None:
            await resource.on_create(db, entity, session)
        return project(entity, views)

    @router.put("/{id}", name=f"{name}_update", summary=f"Update a {entity_name}")
    @limiter.limit(WRITE_LIMIT)
    async def update_entity(
        id: str,
        request: Request,
        db: DbSession,
        body: Annotated[dict[str, Any], Body()],
        session: Annotated[SessionContext | None, Depends(authorize(*policy.update))],
        full: str | None = None,
    ) -> dict[str, Any]:
        entity_id = parse_id(id)
        fields = validate_partial(input_schema, body)
        check_owner_fields(fields, session)
        scope = scope_for(request)
        service = EntityService(db, resource.rules)
        entity = await service.update(entity_id, fields, scope)
        await ensure_in_scope(service, entity, scope)
        if is_full(full):
            entity = await service.find_one(entity_id, resource.full_relations, scope)
            return project(entity, views, resource.full_relations)
        return project(entity, views)

    @router.delete(
        "/{id}",
        name=f"{name}_delete",
        status_code=204,
        summary=f"Delete a {entity_name}",
    )
    @limiter.limit(WRITE_LIMIT)
    async def delete_entity(
        id: str,
        request: Request,
        db: DbSession,
        _session: Annotated[SessionContext | None, Depends(authorize(*policy.delete))],
    ) -> Response:
        entity_id = parse_id(id)
        service = EntityService(db, resource.rules)
        await service.delete(entity_id, scope_for(request))
        return Response(status_code=204)

    return router
