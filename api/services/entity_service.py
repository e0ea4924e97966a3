"""Business rules shared by every entity.

EntityService wraps EntityRepository and adds:
- pagination range checks
- natural-key uniqueness among active rows
- existence checks for foreign keys and many-to-many link ids
- referential guards that refuse a delete while active dependents remain

Storage errors never escape: IntegrityError becomes ConflictError.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from pydantic.alias_generators import to_camel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import get_settings
from core.database import Base
from core.errors import ConflictError, NotFoundError, ValidationError
from core.logger import get_logger
from repositories.base_repository import (
    EntityRepository,
    Page,
    Pagination,
    RelationMap,
    Scope,
    Sort,
)

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class DeleteGuard:
    """Blocks a delete while any of ``relations`` still holds an active row."""

    label: str
    relations: tuple[str, ...]


@dataclass(frozen=True)
class EntityRules:
    """Per-entity declarations consumed by EntityService.

    ``links`` maps an input field holding a list of ids to the many-to-many
    relation it replaces, e.g. ``{"pokemon_type_ids": "pokemon_types"}``.
    """

    model: type
    entity_name: str
    unique_together: tuple[tuple[str, ...], ...] = ()
    delete_guards: tuple[DeleteGuard, ...] = ()
    links: Mapping[str, str] = field(default_factory=dict)


def join_labels(labels: Sequence[str]) -> str:
    """["a"] -> "a", ["a", "b"] -> "a and b", ["a", "b", "c"] -> "a, b and c"."""
    if len(labels) <= 1:
        return "".join(labels)
    return f"{', '.join(labels[:-1])} and {labels[-1]}"


def _model_for_table(table_name: str) -> type:
    for mapper in Base.registry.mappers:
        if mapper.local_table.name == table_name:
            return mapper.class_
    raise LookupError(f"No mapped class for table {table_name!r}")


def check_pagination(pagination: Pagination | None) -> None:
    if pagination is None:
        return
    if pagination.page < 1:
        raise ValidationError("page must be a positive integer")
    if pagination.page_size < 1:
        raise ValidationError("pageSize must be a positive integer")
    max_page_size = get_settings().max_page_size
    if pagination.page_size > max_page_size:
        raise ValidationError(f"pageSize must not exceed {max_page_size}")


class EntityService[M]:
    """Generic CRUD with the rules declared in an EntityRules."""

    def __init__(self, db: AsyncSession, rules: EntityRules):
        self.db = db
        self.rules = rules
        self.repository: EntityRepository[M] = EntityRepository(
            db, rules.model, rules.entity_name
        )

    @property
    def entity_name(self) -> str:
        return self.rules.entity_name

    async def find_all(
        self,
        where: Mapping[str, Any] | None = None,
        relations: RelationMap | None = None,
        pagination: Pagination | None = None,
        sort: Sort | None = None,
        scope: Scope | None = None,
    ) -> Page[M] | list[M]:
        check_pagination(pagination)
        return await self.repository.find_all(
            where=where,
            relations=relations,
            pagination=pagination,
            sort=sort,
            scope=scope,
        )

    async def find_one(
        self,
        entity_id: int,
        relations: RelationMap | None = None,
        scope: Scope | None = None,
    ) -> M:
        return await self.repository.find_one(entity_id, relations, scope)

    async def create(self, fields: Mapping[str, Any]) -> M:
        values, links = self._split_links(fields)
        await self._check_references(values)
        await self._check_unique(values)
        values.update(await self._resolve_links(links))
        try:
            return await self.repository.create(values)
        except IntegrityError as e:
            logger.warning(
                "entity.create.conflict", entity=self.entity_name, error=str(e.orig)
            )
            raise ConflictError(
                f"{self.entity_name} conflicts with existing data"
            ) from e

    async def update(
        self,
        entity_id: int,
        fields: Mapping[str, Any],
        scope: Scope | None = None,
    ) -> M:
        """Partial merge: only keys present in ``fields`` change."""
        current = await self.repository.find_one(entity_id, scope=scope)
        values, links = self._split_links(fields)
        await self._check_references(values)
        await self._check_unique(values, current=current)
        values.update(await self._resolve_links(links))
        try:
            return await self.repository.update(
                entity_id,
                values,
                preload=[self.rules.links[name] for name in links],
                scope=scope,
            )
        except IntegrityError as e:
            logger.warning(
                "entity.update.conflict",
                entity=self.entity_name,
                entity_id=entity_id,
                error=str(e.orig),
            )
            raise ConflictError(
                f"{self.entity_name} conflicts with existing data"
            ) from e

    async def delete(self, entity_id: int, scope: Scope | None = None) -> None:
        """Soft delete after checking the referential guards."""
        guards = self.rules.delete_guards
        relations = {name: {} for guard in guards for name in guard.relations}
        entity = await self.repository.find_one(entity_id, relations, scope)

        blocking = [
            guard.label
            for guard in guards
            if any(getattr(entity, name) for name in guard.relations)
        ]
        if blocking:
            logger.info(
                "entity.delete.blocked",
                entity=self.entity_name,
                entity_id=entity_id,
                blocking=blocking,
            )
            raise ConflictError(
                f"Cannot delete {self.entity_name}: it still has "
                f"{join_labels(blocking)}. Remove them first."
            )

        if not await self.repository.delete(entity_id):
            raise NotFoundError(self.entity_name, entity_id)

    async def update_or_create(
        self, where: Mapping[str, Any], fields: Mapping[str, Any]
    ) -> tuple[M, bool]:
        """Update the first active match with ``fields``, creating it when absent."""
        existing = await self.repository.find_by(where)
        if existing is not None:
            return await self.update(existing.id, fields), False
        return await self.create({**fields, **where}), True

    def _split_links(
        self, fields: Mapping[str, Any]
    ) -> tuple[dict[str, Any], dict[str, list[int]]]:
        values: dict[str, Any] = {}
        links: dict[str, list[int]] = {}
        for name, value in fields.items():
            if name in self.rules.links:
                links[name] = list(value or [])
            else:
                values[name] = value
        return values, links

    async def _check_unique(
        self, values: Mapping[str, Any], current: Any | None = None
    ) -> None:
        for group in self.rules.unique_together:
            if not any(name in values for name in group):
                continue
            key = {
                name: values[name] if name in values else getattr(current, name)
                for name in group
            }
            if any(value is None for value in key.values()):
                continue
            exclude_id = current.id if current is not None else None
            if await self.repository.exists(key, exclude_id=exclude_id):
                described = " and ".join(
                    f"{to_camel(name)} {value!r}" for name, value in key.items()
                )
                raise ConflictError(
                    f"{self.entity_name} with {described} already exists"
                )

    async def _check_references(self, values: Mapping[str, Any]) -> None:
        """Every provided foreign key must point at an active row."""
        for fk in self.rules.model.__table__.foreign_keys:
            name = fk.parent.name
            value = values.get(name)
            if value is None:
                continue
            target = _model_for_table(fk.column.table.name)
            found = await EntityRepository(self.db, target).find_by({"id": value})
            if found is None:
                raise ValidationError(
                    f"Invalid {to_camel(name)}: {target.__name__} "
                    f"with identifier {value} not found"
                )

    async def _resolve_links(self, links: Mapping[str, list[int]]) -> dict[str, list]:
        resolved: dict[str, list] = {}
        for name, ids in links.items():
            relation = self.rules.links[name]
            target = getattr(self.rules.model, relation).property.mapper.class_
            unique_ids = list(dict.fromkeys(ids))
            rows = await EntityRepository(self.db, target).find_active_ids(unique_ids)
            found = {row.id for row in rows}
            missing = [i for i in unique_ids if i not in found]
            if missing:
                raise ValidationError(
                    f"Invalid {to_camel(name)}: {target.__name__} "
                    f"not found for identifiers {missing}"
                )
            by_id = {row.id: row for row in rows}
            resolved[relation] = [by_id[i] for i in unique_ids]
        return resolved
