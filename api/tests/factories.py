"""Factory Boy factories for generating test data.

Factories provide a clean way to create test objects with sensible defaults.
Override specific fields as needed in tests.

Usage:
    # Create a user
    user = UserFactory.build()  # In-memory only
    user = await create_async(UserFactory, db_session)  # Persisted

    # Related objects take their parent ids explicitly
    season = await create_async(
        SeasonFactory, db_session, league_id=league.id, generation_id=gen.id
    )
"""

import factory
from faker import Faker
from sqlalchemy.ext.asyncio import AsyncSession

from models import (
    Ability,
    Game,
    GameStat,
    Generation,
    League,
    LeagueUser,
    Match,
    MatchTeam,
    Move,
    MoveCategory,
    Pokemon,
    PokemonMove,
    PokemonType,
    Season,
    SeasonPokemon,
    SeasonPokemonTeam,
    SpecialMoveCategory,
    Team,
    TypeEffective,
    User,
    Week,
)

fake = Faker()


# =============================================================================
# Async Factory Helpers
# =============================================================================


async def create_async(
    factory_class: type[factory.Factory], db: AsyncSession, **kwargs
):
    """Create an instance using a factory and persist to database.

    Usage:
        user = await create_async(UserFactory, db_session, email="test@example.com")
    """
    instance = factory_class.build(**kwargs)
    db.add(instance)
    await db.flush()
    await db.refresh(instance)
    return instance


async def create_batch_async(
    factory_class: type[factory.Factory], db: AsyncSession, size: int, **kwargs
):
    """Create multiple instances and persist to database."""
    instances = factory_class.build_batch(size, **kwargs)
    for instance in instances:
        db.add(instance)
    await db.flush()
    for instance in instances:
        await db.refresh(instance)
    return instances


# =============================================================================
# Users and leagues
# =============================================================================


class UserFactory(factory.Factory):
    """Factory for creating User instances."""

    class Meta:
        model = User

    email = factory.Sequence(lambda n: f"trainer{n}@example.com")
    first_name = factory.LazyAttribute(lambda _: fake.first_name())
    last_name = factory.LazyAttribute(lambda _: fake.last_name())
    google_id = factory.Sequence(lambda n: f"google-{100000 + n}")
    is_admin = False


class AdminUserFactory(UserFactory):
    """Factory for creating admin users."""

    is_admin = True


class LeagueFactory(factory.Factory):
    class Meta:
        model = League

    name = factory.Sequence(lambda n: f"Draft League {n}")
    abbreviation = factory.Sequence(lambda n: f"DL{n}")


class LeagueUserFactory(factory.Factory):
    class Meta:
        model = LeagueUser

    is_moderator = False


class SeasonFactory(factory.Factory):
    class Meta:
        model = Season

    name = factory.Sequence(lambda n: f"Season {n}")
    status = "DRAFT"
    point_limit = 100
    max_point_value = 20


class TeamFactory(factory.Factory):
    class Meta:
        model = Team

    name = factory.Sequence(lambda n: f"Team {n}")


class WeekFactory(factory.Factory):
    class Meta:
        model = Week

    name = factory.Sequence(lambda n: f"Week {n}")


class MatchFactory(factory.Factory):
    class Meta:
        model = Match


class MatchTeamFactory(factory.Factory):
    class Meta:
        model = MatchTeam


class GameFactory(factory.Factory):
    class Meta:
        model = Game

    differential = factory.LazyAttribute(lambda _: fake.random_int(0, 6))
    replay_link = factory.LazyAttribute(
        lambda _: f"https://replay.pokemonshowdown.com/gen9-{fake.random_int()}"
    )


class GameStatFactory(factory.Factory):
    class Meta:
        model = GameStat

    direct_kills = 1
    indirect_kills = 0
    deaths = 0


class SeasonPokemonFactory(factory.Factory):
    class Meta:
        model = SeasonPokemon

    point_value = factory.LazyAttribute(lambda _: fake.random_int(1, 20))


class SeasonPokemonTeamFactory(factory.Factory):
    class Meta:
        model = SeasonPokemonTeam


# =============================================================================
# Pokemon reference data
# =============================================================================


class GenerationFactory(factory.Factory):
    class Meta:
        model = Generation

    name = factory.Sequence(lambda n: f"Generation {n}")


class PokemonTypeFactory(factory.Factory):
    class Meta:
        model = PokemonType

    name = factory.Sequence(lambda n: f"Type {n}")
    color = factory.LazyAttribute(lambda _: fake.hex_color())


class PokemonFactory(factory.Factory):
    class Meta:
        model = Pokemon

    dex_id = factory.Sequence(lambda n: n + 1000)
    name = factory.Sequence(lambda n: f"Pokemon {n}")
    hp = factory.LazyAttribute(lambda _: fake.random_int(20, 150))
    attack = factory.LazyAttribute(lambda _: fake.random_int(20, 150))
    defense = factory.LazyAttribute(lambda _: fake.random_int(20, 150))
    special_attack = factory.LazyAttribute(lambda _: fake.random_int(20, 150))
    special_defense = factory.LazyAttribute(lambda _: fake.random_int(20, 150))
    speed = factory.LazyAttribute(lambda _: fake.random_int(20, 150))
    base_stat_total = factory.LazyAttribute(
        lambda o: o.hp
        + o.attack
        + o.defense
        + o.special_attack
        + o.special_defense
        + o.speed
    )
    height = 0.4
    weight = 6.0


class AbilityFactory(factory.Factory):
    class Meta:
        model = Ability

    name = factory.Sequence(lambda n: f"Ability {n}")
    description = factory.LazyAttribute(lambda _: fake.sentence())


class SpecialMoveCategoryFactory(factory.Factory):
    class Meta:
        model = SpecialMoveCategory

    name = factory.Sequence(lambda n: f"Category {n}")


class MoveFactory(factory.Factory):
    class Meta:
        model = Move

    name = factory.Sequence(lambda n: f"Move {n}")
    category = MoveCategory.PHYSICAL
    power = 40
    accuracy = 100
    priority = 0
    pp = 35
    description = ""


class TypeEffectiveFactory(factory.Factory):
    class Meta:
        model = TypeEffective

    value = 2.0


class PokemonMoveFactory(factory.Factory):
    class Meta:
        model = PokemonMove
