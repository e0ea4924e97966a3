"""Generic repository shared by every entity.

All reads exclude soft-deleted rows (``is_active = false``), including rows
reached through eagerly loaded relations. Relations are loaded only when a
relation map asks for them.
"""

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import ColumnElement, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import RelationshipProperty, selectinload
from sqlalchemy.orm.interfaces import LoaderOption

from core.errors import NotFoundError
from core.logger import get_logger
from models import utcnow
from repositories.utils import log_slow_query

logger = get_logger(__name__)

# {"league_users": {"user": {}}, "seasons": {}}
type RelationMap = Mapping[str, RelationMap]


@dataclass(frozen=True, slots=True)
class Pagination:
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass(frozen=True, slots=True)
class Sort:
    field: str
    descending: bool = False


@dataclass(frozen=True, slots=True)
class Scope:
    """Restricts rows to those whose many-to-one path ends in ``column == value``.

    ``Scope(("week", "season"), "league_id", 3)`` on Match keeps only matches
    whose week belongs to a season of league 3. An empty path compares the
    column on the entity itself.
    """

    path: tuple[str, ...]
    column: str
    value: int

    def clause(self, model: type) -> ColumnElement[bool]:
        if not self.path:
            return getattr(model, self.column) == self.value
        attr = getattr(model, self.path[0])
        target = attr.property.mapper.class_
        nested = Scope(self.path[1:], self.column, self.value)
        return attr.has(nested.clause(target))


@dataclass(slots=True)
class Page[M]:
    data: list[M]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.page_size else 0


def relation_load_options(model: type, relations: RelationMap) -> list[LoaderOption]:
    """Build selectin loaders for a relation map, skipping inactive targets."""
    options: list[LoaderOption] = []
    for name, nested in relations.items():
        attr = getattr(model, name, None)
        if not isinstance(getattr(attr, "property", None), RelationshipProperty):
            raise ValueError(f"{model.__name__} has no relation named {name!r}")
        target = attr.property.mapper.class_
        loader = selectinload(attr.and_(target.is_active.is_(True)))
        if nested:
            loader = loader.options(*relation_load_options(target, nested))
        options.append(loader)
    return options


class EntityRepository[M]:
    """CRUD access to one mapped model."""

    def __init__(
        self, db: AsyncSession, model: type[M], entity_name: str | None = None
    ):
        self.db = db
        self.model = model
        self.entity_name = entity_name or model.__name__

    def _active(self):
        return select(self.model).where(self.model.is_active.is_(True))

    def _filtered(self, where: Mapping[str, Any] | None, scope: Scope | None):
        stmt = self._active()
        for field, value in (where or {}).items():
            stmt = stmt.where(getattr(self.model, field) == value)
        if scope is not None:
            stmt = stmt.where(scope.clause(self.model))
        return stmt

    def _with_relations(self, stmt, relations: RelationMap | None):
        if not relations:
            return stmt
        return stmt.options(
            *relation_load_options(self.model, relations)
        ).execution_options(populate_existing=True)

    @log_slow_query("find_all")
    async def find_all(
        self,
        where: Mapping[str, Any] | None = None,
        relations: RelationMap | None = None,
        pagination: Pagination | None = None,
        sort: Sort | None = None,
        scope: Scope | None = None,
    ) -> Page[M] | list[M]:
        """Active rows matching ``where``; a Page when paginated, else a list."""
        stmt = self._filtered(where, scope)

        if sort is not None:
            column = getattr(self.model, sort.field)
            stmt = stmt.order_by(column.desc() if sort.descending else column.asc())
        stmt = stmt.order_by(self.model.id.asc())
        stmt = self._with_relations(stmt, relations)

        if pagination is None:
            result = await self.db.execute(stmt)
            return list(result.scalars().all())

        count_stmt = select(func.count()).select_from(
            self._filtered(where, scope).subquery()
        )
        total = (await self.db.execute(count_stmt)).scalar_one()

        stmt = stmt.offset(pagination.offset).limit(pagination.page_size)
        result = await self.db.execute(stmt)
        return Page(
            data=list(result.scalars().all()),
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        )

    @log_slow_query("find_one")
    async def find_one(
        self,
        entity_id: int,
        relations: RelationMap | None = None,
        scope: Scope | None = None,
    ) -> M:
        """Raises NotFoundError when no active row has this id."""
        stmt = self._filtered({"id": entity_id}, scope)
        stmt = self._with_relations(stmt, relations)
        entity = (await self.db.execute(stmt)).scalar_one_or_none()
        if entity is None:
            raise NotFoundError(self.entity_name, entity_id)
        return entity

    async def find_by(self, where: Mapping[str, Any]) -> M | None:
        """First active row matching ``where``, or None."""
        stmt = self._filtered(where, None).order_by(self.model.id.asc()).limit(1)
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def exists(
        self, where: Mapping[str, Any], exclude_id: int | None = None
    ) -> bool:
        stmt = self._filtered(where, None)
        if exclude_id is not None:
            stmt = stmt.where(self.model.id != exclude_id)
        stmt = select(stmt.exists())
        return bool((await self.db.execute(stmt)).scalar())

    async def find_active_ids(self, ids: Sequence[int]) -> list[M]:
        """Active rows among ``ids``; missing or inactive ids are left out."""
        if not ids:
            return []
        stmt = self._active().where(self.model.id.in_(ids))
        return list((await self.db.execute(stmt)).scalars().all())

    @log_slow_query("create")
    async def create(self, fields: Mapping[str, Any]) -> M:
        entity = self.model(**fields)
        now = utcnow()
        entity.created_at = now
        entity.updated_at = now
        entity.is_active = True
        self.db.add(entity)
        await self.db.flush()
        logger.info("entity.created", entity=self.entity_name, entity_id=entity.id)
        return entity

    @log_slow_query("update")
    async def update(
        self,
        entity_id: int,
        fields: Mapping[str, Any],
        preload: Sequence[str] = (),
        scope: Scope | None = None,
    ) -> M:
        """Merge ``fields`` into the row and refresh ``updated_at``.

        ``preload`` names collections that ``fields`` replaces; they are
        loaded in full so the association rows can be rewritten.
        """
        stmt = self._filtered({"id": entity_id}, scope)
        if preload:
            stmt = stmt.options(
                *(selectinload(getattr(self.model, name)) for name in preload)
            ).execution_options(populate_existing=True)
        entity = (await self.db.execute(stmt)).scalar_one_or_none()
        if entity is None:
            raise NotFoundError(self.entity_name, entity_id)

        for field, value in fields.items():
            setattr(entity, field, value)
        entity.updated_at = utcnow()
        await self.db.flush()
        logger.info("entity.updated", entity=self.entity_name, entity_id=entity_id)
        return entity

    @log_slow_query("delete")
    async def delete(self, entity_id: int) -> bool:
        """Soft delete. Returns False when no active row had this id."""
        stmt = (
            update(self.model)
            .where(self.model.id == entity_id, self.model.is_active.is_(True))
            .values(is_active=False, updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        result = await self.db.execute(stmt)
        affected = result.rowcount > 0
        if affected:
            logger.info("entity.deleted", entity=self.entity_name, entity_id=entity_id)
        return affected
