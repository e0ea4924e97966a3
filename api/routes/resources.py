"""Resource declarations: path, schemas, relation graphs and access policy.

Reference data (pokemon, types, moves, abilities, generations) is public to
read and admin-only to write. League data is public at the top level with
admin-only writes, and is additionally served under
``/api/league/{leagueId}/...`` to members (reads) and moderators (writes).
"""

from sqlalchemy.ext.asyncio import AsyncSession

from core.authorization import (
    is_admin,
    is_authenticated,
    is_league_moderator,
    is_resource_owner,
    load_resource,
)
from models import Team
from rendering import Views
from repositories.base_repository import EntityRepository
from routes.crud import AccessPolicy, LeagueScope, ResourceConfig
from schemas import (
    AbilityInput,
    AbilityResponse,
    GameInput,
    GameResponse,
    GameStatInput,
    GameStatResponse,
    GenerationInput,
    GenerationResponse,
    LeagueInput,
    LeagueResponse,
    LeagueUserInput,
    LeagueUserResponse,
    MatchInput,
    MatchResponse,
    MatchTeamInput,
    MatchTeamResponse,
    MoveInput,
    MoveResponse,
    PokemonInput,
    PokemonMoveInput,
    PokemonMoveResponse,
    PokemonResponse,
    PokemonTypeInput,
    PokemonTypeResponse,
    SeasonInput,
    SeasonPokemonInput,
    SeasonPokemonResponse,
    SeasonPokemonTeamInput,
    SeasonPokemonTeamResponse,
    SeasonResponse,
    SpecialMoveCategoryInput,
    SpecialMoveCategoryResponse,
    TeamInput,
    TeamResponse,
    TypeEffectiveInput,
    TypeEffectiveResponse,
    UserInput,
    UserResponse,
    WeekInput,
    WeekResponse,
)
from services import rules
from services.leagues_service import add_creator_as_moderator

TIMESTAMPS = ("id", "created_at", "updated_at")


async def load_team(db: AsyncSession, team_id: int) -> Team:
    return await EntityRepository(db, Team).find_one(team_id)


# -- Pokemon reference data --------------------------------------------------

POKEMON = ResourceConfig(
    path="pokemon",
    rules=rules.POKEMON_RULES,
    input_schema=PokemonInput,
    output_schema=PokemonResponse,
    full_relations={
        "pokemon_types": {},
        "abilities": {},
        "generations": {},
        "type_effectiveness": {"pokemon_type": {}},
        "pokemon_moves": {"move": {}},
    },
    sort_fields=(
        *TIMESTAMPS,
        "dex_id",
        "name",
        "hp",
        "attack",
        "defense",
        "special_attack",
        "special_defense",
        "speed",
        "base_stat_total",
    ),
)

POKEMON_TYPE = ResourceConfig(
    path="pokemon-type",
    rules=rules.POKEMON_TYPE_RULES,
    input_schema=PokemonTypeInput,
    output_schema=PokemonTypeResponse,
    full_relations={"moves": {}, "pokemon": {}, "type_effectiveness": {}},
    sort_fields=(*TIMESTAMPS, "name"),
)

MOVE = ResourceConfig(
    path="move",
    rules=rules.MOVE_RULES,
    input_schema=MoveInput,
    output_schema=MoveResponse,
    full_relations={
        "pokemon_type": {},
        "generation": {},
        "special_move_categories": {},
    },
    sort_fields=(*TIMESTAMPS, "name", "power", "accuracy", "priority", "pp"),
)

ABILITY = ResourceConfig(
    path="ability",
    rules=rules.ABILITY_RULES,
    input_schema=AbilityInput,
    output_schema=AbilityResponse,
    full_relations={"generation": {}, "pokemon": {}},
    sort_fields=(*TIMESTAMPS, "name"),
)

GENERATION = ResourceConfig(
    path="generation",
    rules=rules.GENERATION_RULES,
    input_schema=GenerationInput,
    output_schema=GenerationResponse,
    full_relations={"pokemon": {}, "moves": {}, "abilities": {}},
    sort_fields=(*TIMESTAMPS, "name"),
)

SPECIAL_MOVE_CATEGORY = ResourceConfig(
    path="special-move-category",
    rules=rules.SPECIAL_MOVE_CATEGORY_RULES,
    input_schema=SpecialMoveCategoryInput,
    output_schema=SpecialMoveCategoryResponse,
    full_relations={"moves": {}},
    sort_fields=(*TIMESTAMPS, "name"),
)

TYPE_EFFECTIVE = ResourceConfig(
    path="type-effective",
    rules=rules.TYPE_EFFECTIVE_RULES,
    input_schema=TypeEffectiveInput,
    output_schema=TypeEffectiveResponse,
    full_relations={"pokemon": {}, "pokemon_type": {}},
    sort_fields=(*TIMESTAMPS, "value"),
)

POKEMON_MOVE = ResourceConfig(
    path="pokemon-move",
    rules=rules.POKEMON_MOVE_RULES,
    input_schema=PokemonMoveInput,
    output_schema=PokemonMoveResponse,
    full_relations={"pokemon": {}, "move": {}, "generation": {}},
)

# -- Leagues -----------------------------------------------------------------

LEAGUE = ResourceConfig(
    path="league",
    rules=rules.LEAGUE_RULES,
    input_schema=LeagueInput,
    output_schema=LeagueResponse,
    full_relations={"league_users": {"user": {}}, "seasons": {}},
    sort_fields=(*TIMESTAMPS, "name", "abbreviation"),
    policy=AccessPolicy(
        create=(is_authenticated,),
        update=(is_league_moderator("id"),),
        delete=(is_league_moderator("id"),),
    ),
    on_create=add_creator_as_moderator,
)

LEAGUE_USER = ResourceConfig(
    path="league-user",
    rules=rules.LEAGUE_USER_RULES,
    input_schema=LeagueUserInput,
    output_schema=LeagueUserResponse,
    full_relations={"league": {}, "user": {}},
    league_scope=LeagueScope(),
)

SEASON = ResourceConfig(
    path="season",
    rules=rules.SEASON_RULES,
    input_schema=SeasonInput,
    output_schema=SeasonResponse,
    full_relations={
        "league": {},
        "generation": {},
        "teams": {},
        "weeks": {},
        "season_pokemon": {},
    },
    sort_fields=(*TIMESTAMPS, "name", "status"),
    league_scope=LeagueScope(),
)

TEAM = ResourceConfig(
    path="team",
    rules=rules.TEAM_RULES,
    input_schema=TeamInput,
    output_schema=TeamResponse,
    full_relations={
        "season": {},
        "user": {},
        "season_pokemon_teams": {"season_pokemon": {"pokemon": {}}},
        "won_games": {},
        "lost_games": {},
        "match_teams": {"match": {}},
    },
    sort_fields=(*TIMESTAMPS, "name"),
    policy=AccessPolicy(
        create=(is_admin,),
        update=(
            is_authenticated,
            load_resource(load_team, "id"),
            is_resource_owner("id", "user_id"),
        ),
        delete=(is_admin,),
    ),
    owner_update_fields=("name",),
    league_scope=LeagueScope(path=("season",)),
)

WEEK = ResourceConfig(
    path="week",
    rules=rules.WEEK_RULES,
    input_schema=WeekInput,
    output_schema=WeekResponse,
    full_relations={"season": {}, "matches": {}},
    sort_fields=(*TIMESTAMPS, "name"),
    league_scope=LeagueScope(path=("season",)),
)

MATCH = ResourceConfig(
    path="match",
    rules=rules.MATCH_RULES,
    input_schema=MatchInput,
    output_schema=MatchResponse,
    full_relations={"week": {}, "match_teams": {"team": {}}, "games": {}},
    league_scope=LeagueScope(path=("week", "season")),
)

MATCH_TEAM = ResourceConfig(
    path="match-team",
    rules=rules.MATCH_TEAM_RULES,
    input_schema=MatchTeamInput,
    output_schema=MatchTeamResponse,
    full_relations={"match": {}, "team": {}},
    sort_fields=(*TIMESTAMPS, "status"),
    league_scope=LeagueScope(path=("match", "week", "season")),
)

GAME = ResourceConfig(
    path="game",
    rules=rules.GAME_RULES,
    input_schema=GameInput,
    output_schema=GameResponse,
    full_relations={
        "match": {},
        "winning_team": {},
        "losing_team": {},
        "game_stats": {},
    },
    sort_fields=(*TIMESTAMPS, "differential"),
    league_scope=LeagueScope(path=("match", "week", "season")),
)

GAME_STAT = ResourceConfig(
    path="game-stat",
    rules=rules.GAME_STAT_RULES,
    input_schema=GameStatInput,
    output_schema=GameStatResponse,
    full_relations={"game": {}, "season_pokemon": {"pokemon": {}}},
    sort_fields=(*TIMESTAMPS, "direct_kills", "indirect_kills", "deaths"),
    league_scope=LeagueScope(path=("game", "match", "week", "season")),
)

SEASON_POKEMON = ResourceConfig(
    path="season-pokemon",
    rules=rules.SEASON_POKEMON_RULES,
    input_schema=SeasonPokemonInput,
    output_schema=SeasonPokemonResponse,
    full_relations={
        "season": {},
        "pokemon": {},
        "season_pokemon_teams": {},
        "game_stats": {},
    },
    sort_fields=(*TIMESTAMPS, "point_value"),
    league_scope=LeagueScope(path=("season",)),
)

SEASON_POKEMON_TEAM = ResourceConfig(
    path="season-pokemon-team",
    rules=rules.SEASON_POKEMON_TEAM_RULES,
    input_schema=SeasonPokemonTeamInput,
    output_schema=SeasonPokemonTeamResponse,
    full_relations={"season_pokemon": {"pokemon": {}}, "team": {}},
    league_scope=LeagueScope(path=("team", "season")),
)

# -- Users -------------------------------------------------------------------

USER = ResourceConfig(
    path="user",
    rules=rules.USER_RULES,
    input_schema=UserInput,
    output_schema=UserResponse,
    full_relations={"league_users": {"league": {}}, "teams": {}},
    sort_fields=(*TIMESTAMPS, "email", "first_name", "last_name"),
    policy=AccessPolicy(
        read_list=(is_admin,),
        create=(is_admin,),
        update=(is_admin,),
        delete=(is_admin,),
    ),
)

RESOURCES: tuple[ResourceConfig, ...] = (
    POKEMON,
    POKEMON_TYPE,
    MOVE,
    ABILITY,
    GENERATION,
    SPECIAL_MOVE_CATEGORY,
    TYPE_EFFECTIVE,
    POKEMON_MOVE,
    LEAGUE,
    LEAGUE_USER,
    SEASON,
    TEAM,
    WEEK,
    MATCH,
    MATCH_TEAM,
    GAME,
    GAME_STAT,
    SEASON_POKEMON,
    SEASON_POKEMON_TEAM,
    USER,
)

VIEWS: Views = {resource.rules.model: resource.output_schema for resource in RESOURCES}
