"""Tests for basic and full view projection."""

from datetime import UTC, datetime

import pytest

from models import Ability, Generation, Pokemon, PokemonType
from rendering import project, project_page
from repositories.base_repository import Page
from routes.resources import VIEWS

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def _audit(entity, entity_id: int):
    entity.id = entity_id
    entity.is_active = True
    entity.created_at = NOW
    entity.updated_at = NOW
    return entity


def _pikachu() -> Pokemon:
    pokemon = Pokemon(
        dex_id=25,
        name="Pikachu",
        hp=35,
        attack=55,
        defense=40,
        special_attack=50,
        special_defense=50,
        speed=90,
        base_stat_total=320,
        height=0.4,
        weight=6.0,
    )
    pokemon.pokemon_types = [_audit(PokemonType(name="Electric", color="#F8D030"), 4)]
    pokemon.abilities = [_audit(Ability(name="Static", generation_id=None), 9)]
    return _audit(pokemon, 25)


@pytest.mark.unit
class TestProject:
    def test_basic_view_has_scalars_only(self):
        body = project(_pikachu(), VIEWS)

        assert body["name"] == "Pikachu"
        assert body["dexId"] == 25
        assert body["specialAttack"] == 50
        assert body["isActive"] is True
        assert "createdAt" in body
        assert "pokemonTypes" not in body
        assert "abilities" not in body

    def test_full_view_adds_requested_relations(self):
        body = project(_pikachu(), VIEWS, {"pokemon_types": {}})

        assert body["pokemonTypes"] == [
            {
                "id": 4,
                "isActive": True,
                "createdAt": NOW.isoformat().replace("+00:00", "Z"),
                "updatedAt": NOW.isoformat().replace("+00:00", "Z"),
                "name": "Electric",
                "color": "#F8D030",
            }
        ]
        assert "abilities" not in body

    def test_nested_relations(self):
        generation = _audit(Generation(name="Generation I"), 1)
        ability = _audit(Ability(name="Overgrow", generation_id=1), 3)
        ability.generation = generation

        body = project(ability, VIEWS, {"generation": {}})

        assert body["generation"]["name"] == "Generation I"
        assert body["generationId"] == 1

    def test_missing_to_one_relation_is_null(self):
        ability = _audit(Ability(name="Levitate", generation_id=None), 3)
        ability.generation = None

        body = project(ability, VIEWS, {"generation": {}})

        assert body["generation"] is None


@pytest.mark.unit
class TestProjectPage:
    def test_envelope(self):
        page = Page(data=[_pikachu()], total=11, page=2, page_size=5)

        body = project_page(page, VIEWS)

        assert body["total"] == 11
        assert body["page"] == 2
        assert body["pageSize"] == 5
        assert body["totalPages"] == 3
        assert [item["name"] for item in body["data"]] == ["Pikachu"]
