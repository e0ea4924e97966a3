"""Uniqueness, referential-guard and link declarations for every entity."""

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
from services.entity_service import DeleteGuard, EntityRules

USER_RULES = EntityRules(
    model=User,
    entity_name="User",
    unique_together=(("email",), ("google_id",)),
    delete_guards=(
        DeleteGuard("teams", ("teams",)),
        DeleteGuard("league memberships", ("league_users",)),
    ),
)

LEAGUE_RULES = EntityRules(
    model=League,
    entity_name="League",
    unique_together=(("name",), ("abbreviation",)),
    delete_guards=(
        DeleteGuard("seasons", ("seasons",)),
        DeleteGuard("league users", ("league_users",)),
    ),
)

LEAGUE_USER_RULES = EntityRules(
    model=LeagueUser,
    entity_name="LeagueUser",
    unique_together=(("league_id", "user_id"),),
)

GENERATION_RULES = EntityRules(
    model=Generation,
    entity_name="Generation",
    unique_together=(("name",),),
    delete_guards=(
        DeleteGuard("pokemon", ("pokemon",)),
        DeleteGuard("moves", ("moves", "pokemon_moves")),
        DeleteGuard("abilities", ("abilities",)),
        DeleteGuard("seasons", ("seasons",)),
    ),
)

SEASON_RULES = EntityRules(
    model=Season,
    entity_name="Season",
    unique_together=(("league_id", "name"),),
    delete_guards=(
        DeleteGuard("teams", ("teams",)),
        DeleteGuard("weeks", ("weeks",)),
        DeleteGuard("season pokemon", ("season_pokemon",)),
    ),
)

TEAM_RULES = EntityRules(
    model=Team,
    entity_name="Team",
    unique_together=(("season_id", "name"), ("season_id", "user_id")),
    delete_guards=(
        DeleteGuard("drafted pokemon", ("season_pokemon_teams",)),
        DeleteGuard("games", ("won_games", "lost_games")),
        DeleteGuard("matches", ("match_teams",)),
    ),
)

WEEK_RULES = EntityRules(
    model=Week,
    entity_name="Week",
    unique_together=(("season_id", "name"),),
    delete_guards=(DeleteGuard("matches", ("matches",)),),
)

MATCH_RULES = EntityRules(
    model=Match,
    entity_name="Match",
    delete_guards=(
        DeleteGuard("teams", ("match_teams",)),
        DeleteGuard("games", ("games",)),
    ),
)

MATCH_TEAM_RULES = EntityRules(
    model=MatchTeam,
    entity_name="MatchTeam",
    unique_together=(("match_id", "team_id"),),
)

GAME_RULES = EntityRules(
    model=Game,
    entity_name="Game",
    delete_guards=(DeleteGuard("game stats", ("game_stats",)),),
)

GAME_STAT_RULES = EntityRules(
    model=GameStat,
    entity_name="GameStat",
    unique_together=(("game_id", "season_pokemon_id"),),
)

POKEMON_TYPE_RULES = EntityRules(
    model=PokemonType,
    entity_name="PokemonType",
    unique_together=(("name",),),
    delete_guards=(
        DeleteGuard("moves", ("moves",)),
        DeleteGuard("type effectiveness entries", ("type_effectiveness",)),
    ),
)

POKEMON_RULES = EntityRules(
    model=Pokemon,
    entity_name="Pokemon",
    unique_together=(("name",), ("dex_id",)),
    delete_guards=(
        DeleteGuard("moves", ("pokemon_moves",)),
        DeleteGuard("season entries", ("season_pokemon",)),
        DeleteGuard("type effectiveness entries", ("type_effectiveness",)),
    ),
    links={
        "pokemon_type_ids": "pokemon_types",
        "ability_ids": "abilities",
        "generation_ids": "generations",
    },
)

MOVE_RULES = EntityRules(
    model=Move,
    entity_name="Move",
    unique_together=(("name",),),
    delete_guards=(DeleteGuard("pokemon", ("pokemon_moves",)),),
    links={"special_move_category_ids": "special_move_categories"},
)

ABILITY_RULES = EntityRules(
    model=Ability,
    entity_name="Ability",
    unique_together=(("name",),),
)

SPECIAL_MOVE_CATEGORY_RULES = EntityRules(
    model=SpecialMoveCategory,
    entity_name="SpecialMoveCategory",
    unique_together=(("name",),),
)

TYPE_EFFECTIVE_RULES = EntityRules(
    model=TypeEffective,
    entity_name="TypeEffective",
    unique_together=(("pokemon_id", "pokemon_type_id"),),
)

POKEMON_MOVE_RULES = EntityRules(
    model=PokemonMove,
    entity_name="PokemonMove",
    unique_together=(("pokemon_id", "move_id", "generation_id"),),
)

SEASON_POKEMON_RULES = EntityRules(
    model=SeasonPokemon,
    entity_name="SeasonPokemon",
    unique_together=(("season_id", "pokemon_id"),),
    delete_guards=(
        DeleteGuard("team assignments", ("season_pokemon_teams",)),
        DeleteGuard("game stats", ("game_stats",)),
    ),
)

SEASON_POKEMON_TEAM_RULES = EntityRules(
    model=SeasonPokemonTeam,
    entity_name="SeasonPokemonTeam",
    unique_together=(("season_pokemon_id",),),
)
