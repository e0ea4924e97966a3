"""Tests for the pokemon type effectiveness upsert."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import NotFoundError
from services.pokemon_service import set_type_effectiveness
from tests.factories import (
    PokemonFactory,
    PokemonTypeFactory,
    TypeEffectiveFactory,
    create_async,
)


class TestSetTypeEffectiveness:
    async def test_creates_missing_entry(self, db_session: AsyncSession):
        pokemon = await create_async(PokemonFactory, db_session)
        water = await create_async(PokemonTypeFactory, db_session)

        entry, created = await set_type_effectiveness(
            db_session, pokemon.id, water.id, 2.0
        )

        assert created is True
        assert entry.pokemon_id == pokemon.id
        assert entry.value == 2.0

    async def test_updates_active_entry(self, db_session: AsyncSession):
        pokemon = await create_async(PokemonFactory, db_session)
        water = await create_async(PokemonTypeFactory, db_session)
        existing = await create_async(
            TypeEffectiveFactory,
            db_session,
            pokemon_id=pokemon.id,
            pokemon_type_id=water.id,
            value=1.0,
        )

        entry, created = await set_type_effectiveness(
            db_session, pokemon.id, water.id, 0.25
        )

        assert created is False
        assert entry.id == existing.id
        assert entry.value == 0.25

    async def test_missing_pokemon_is_not_found(self, db_session: AsyncSession):
        water = await create_async(PokemonTypeFactory, db_session)

        with pytest.raises(NotFoundError):
            await set_type_effectiveness(db_session, 31337, water.id, 2.0)
