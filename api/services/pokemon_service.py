"""Pokemon reference data operations beyond plain CRUD."""

from sqlalchemy.ext.asyncio import AsyncSession

from core.logger import get_logger
from models import TypeEffective
from services.entity_service import EntityService
from services.rules import POKEMON_RULES, POKEMON_TYPE_RULES, TYPE_EFFECTIVE_RULES

logger = get_logger(__name__)


async def set_type_effectiveness(
    db: AsyncSession, pokemon_id: int, pokemon_type_id: int, value: float
) -> tuple[TypeEffective, bool]:
    """Set the damage multiplier of a type against a pokemon.

    Updates the active entry for the pair, or creates one. Returns the
    entry and whether it was created. Raises NotFoundError when either
    side does not exist.
    """
    await EntityService(db, POKEMON_RULES).find_one(pokemon_id)
    await EntityService(db, POKEMON_TYPE_RULES).find_one(pokemon_type_id)

    service = EntityService(db, TYPE_EFFECTIVE_RULES)
    entry, created = await service.update_or_create(
        {"pokemon_id": pokemon_id, "pokemon_type_id": pokemon_type_id},
        {"value": value},
    )
    logger.info(
        "pokemon.effectiveness_set",
        pokemon_id=pokemon_id,
        pokemon_type_id=pokemon_type_id,
        value=value,
        created=created,
    )
    return entry, created
