"""Basic and full view projection.

The basic view is the entity's response schema: scalar columns only.
The full view adds one camelCase key per relation in the relation map,
projected recursively with the related entity's own response schema.
Relation fields never appear unless a relation map is passed.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from repositories.base_repository import Page, RelationMap
    from schemas import OutputSchema

type Views = Mapping[type, type[OutputSchema]]


def project(
    entity: Any, views: Views, relations: RelationMap | None = None
) -> dict[str, Any]:
    """Project one entity; ``relations`` selects the full view."""
    schema = views[type(entity)]
    data = schema.model_validate(entity).model_dump(mode="json", by_alias=True)

    for name, nested in (relations or {}).items():
        value = getattr(entity, name)
        key = to_camel(name)
        if value is None:
            data[key] = None
        elif isinstance(value, list):
            data[key] = [project(item, views, nested) for item in value]
        else:
            data[key] = project(value, views, nested)
    return data


def project_many(
    entities: Iterable[Any], views: Views, relations: RelationMap | None = None
) -> list[dict[str, Any]]:
    return [project(entity, views, relations) for entity in entities]


def project_page(
    page: Page, views: Views, relations: RelationMap | None = None
) -> dict[str, Any]:
    """``{data, total, page, pageSize, totalPages}``."""
    return {
        "data": project_many(page.data, views, relations),
        "total": page.total,
        "page": page.page,
        "pageSize": page.page_size,
        "totalPages": page.total_pages,
    }
