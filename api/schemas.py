"""Pydantic schemas for API request/response validation.

Wire format is camelCase; Python attributes stay snake_case. Input schemas
reject unknown fields on create. Updates go through ``validate_partial``,
which validates only the fields present and ignores the rest.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from core.errors import ValidationError
from models import MatchTeamStatus, MoveCategory

NameStr = Annotated[str, Field(min_length=1, max_length=255)]


class InputSchema(BaseModel):
    """Base for request bodies."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
    )


class OutputSchema(BaseModel):
    """Base for the basic projection of an entity."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


def format_errors(exc: PydanticValidationError) -> str:
    """Join pydantic errors as "loc: msg; loc: msg"."""
    parts = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error["loc"] if part != "body")
        parts.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return "; ".join(parts)


def validate_partial(
    schema: type[InputSchema], data: Mapping[str, Any]
) -> dict[str, Any]:
    """Validate the subset of ``data`` that belongs to ``schema``.

    Keys may be aliases (camelCase) or field names. Unknown keys are ignored
    and missing fields are not required. Returns snake_case field values.
    """
    if not isinstance(data, Mapping):
        raise ValidationError("Request body must be a JSON object")

    names: dict[str, str] = {}
    for name, info in schema.model_fields.items():
        names[name] = name
        names[info.alias or name] = name

    instance = schema.model_construct()
    provided: list[str] = []
    errors: list[str] = []
    for key, value in data.items():
        name = names.get(key)
        if name is None:
            continue
        try:
            setattr(instance, name, value)
        except PydanticValidationError as e:
            errors.append(format_errors(e))
            continue
        provided.append(name)

    if errors:
        raise ValidationError("; ".join(errors))
    return {name: getattr(instance, name) for name in provided}


# -- Users -------------------------------------------------------------------


class UserInput(InputSchema):
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    is_admin: bool = False
    showdown_username: str | None = Field(default=None, max_length=255)
    discord_username: str | None = Field(default=None, max_length=255)
    timezone: str | None = Field(default=None, max_length=64)


class UserProfileInput(InputSchema):
    """Fields a user may change on their own profile."""

    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    showdown_username: str | None = Field(default=None, max_length=255)
    discord_username: str | None = Field(default=None, max_length=255)
    timezone: str | None = Field(default=None, max_length=64)


class UserResponse(OutputSchema):
    first_name: str | None = None
    last_name: str | None = None
    email: str
    is_admin: bool = False
    showdown_username: str | None = None
    discord_username: str | None = None
    timezone: str | None = None


# -- Leagues -----------------------------------------------------------------


class LeagueInput(InputSchema):
    name: NameStr
    abbreviation: str = Field(min_length=1, max_length=32)


class LeagueResponse(OutputSchema):
    name: str
    abbreviation: str


class LeagueUserInput(InputSchema):
    league_id: int = Field(ge=1)
    user_id: int = Field(ge=1)
    is_moderator: bool = False


class LeagueUserResponse(OutputSchema):
    league_id: int
    user_id: int
    is_moderator: bool


class SeasonInput(InputSchema):
    name: NameStr
    status: str = Field(min_length=1, max_length=32)
    rules: str | None = None
    point_limit: int | None = Field(default=None, ge=0)
    max_point_value: int | None = Field(default=None, ge=0)
    league_id: int = Field(ge=1)
    generation_id: int = Field(ge=1)


class SeasonResponse(OutputSchema):
    name: str
    status: str
    rules: str | None = None
    point_limit: int | None = None
    max_point_value: int | None = None
    league_id: int
    generation_id: int


class TeamInput(InputSchema):
    name: NameStr
    season_id: int = Field(ge=1)
    user_id: int = Field(ge=1)


class TeamResponse(OutputSchema):
    name: str
    season_id: int
    user_id: int


class WeekInput(InputSchema):
    name: NameStr
    season_id: int = Field(ge=1)


class WeekResponse(OutputSchema):
    name: str
    season_id: int


class MatchInput(InputSchema):
    week_id: int = Field(ge=1)


class MatchResponse(OutputSchema):
    week_id: int


class MatchTeamInput(InputSchema):
    match_id: int = Field(ge=1)
    team_id: int = Field(ge=1)
    status: MatchTeamStatus | None = None


class MatchTeamResponse(OutputSchema):
    match_id: int
    team_id: int
    status: MatchTeamStatus | None


class GameInput(InputSchema):
    match_id: int = Field(ge=1)
    winning_team_id: int = Field(ge=1)
    losing_team_id: int = Field(ge=1)
    differential: int = Field(ge=0, le=6)
    replay_link: str | None = Field(default=None, max_length=2048)


class GameResponse(OutputSchema):
    match_id: int
    winning_team_id: int
    losing_team_id: int
    differential: int
    replay_link: str | None = None


class GameStatInput(InputSchema):
    game_id: int = Field(ge=1)
    season_pokemon_id: int = Field(ge=1)
    direct_kills: int = Field(default=0, ge=0)
    indirect_kills: int = Field(default=0, ge=0)
    deaths: int = Field(default=0, ge=0, le=1)


class GameStatResponse(OutputSchema):
    game_id: int
    season_pokemon_id: int
    direct_kills: int
    indirect_kills: int
    deaths: int


class SeasonPokemonInput(InputSchema):
    season_id: int = Field(ge=1)
    pokemon_id: int = Field(ge=1)
    condition: str | None = Field(default=None, max_length=255)
    point_value: int | None = Field(default=None, ge=0)


class SeasonPokemonResponse(OutputSchema):
    season_id: int
    pokemon_id: int
    condition: str | None = None
    point_value: int | None = None


class SeasonPokemonTeamInput(InputSchema):
    season_pokemon_id: int = Field(ge=1)
    team_id: int = Field(ge=1)


class SeasonPokemonTeamResponse(OutputSchema):
    season_pokemon_id: int
    team_id: int


# -- Pokemon reference data --------------------------------------------------


class GenerationInput(InputSchema):
    name: str = Field(min_length=1, max_length=64)


class GenerationResponse(OutputSchema):
    name: str


class PokemonTypeInput(InputSchema):
    name: str = Field(min_length=1, max_length=64)
    color: str = Field(min_length=1, max_length=32)


class PokemonTypeResponse(OutputSchema):
    name: str
    color: str


class PokemonInput(InputSchema):
    dex_id: int = Field(ge=1)
    name: NameStr
    hp: int = Field(ge=1)
    attack: int = Field(ge=1)
    defense: int = Field(ge=1)
    special_attack: int = Field(ge=1)
    special_defense: int = Field(ge=1)
    speed: int = Field(ge=1)
    base_stat_total: int = Field(ge=1)
    height: float = Field(ge=0)
    weight: float = Field(ge=0)
    pokemon_type_ids: list[int] = Field(default_factory=list, max_length=2)
    ability_ids: list[int] = Field(default_factory=list)
    generation_ids: list[int] = Field(default_factory=list)


class PokemonResponse(OutputSchema):
    dex_id: int
    name: str
    hp: int
    attack: int
    defense: int
    special_attack: int
    special_defense: int
    speed: int
    base_stat_total: int
    height: float
    weight: float


class MoveInput(InputSchema):
    name: NameStr
    pokemon_type_id: int = Field(ge=1)
    generation_id: int = Field(ge=1)
    category: MoveCategory
    power: int = Field(default=0, ge=0)
    accuracy: int = Field(default=0, ge=0, le=100)
    priority: int = Field(default=0, ge=-7, le=5)
    pp: int = Field(ge=1)
    description: str = ""
    special_move_category_ids: list[int] = Field(default_factory=list)


class MoveResponse(OutputSchema):
    name: str
    pokemon_type_id: int
    generation_id: int
    category: MoveCategory
    power: int
    accuracy: int
    priority: int
    pp: int
    description: str


class AbilityInput(InputSchema):
    name: NameStr
    description: str | None = None
    generation_id: int | None = Field(default=None, ge=1)


class AbilityResponse(OutputSchema):
    name: str
    description: str | None = None
    generation_id: int | None = None


class SpecialMoveCategoryInput(InputSchema):
    name: NameStr


class SpecialMoveCategoryResponse(OutputSchema):
    name: str


class TypeEffectiveInput(InputSchema):
    pokemon_id: int = Field(ge=1)
    pokemon_type_id: int = Field(ge=1)
    value: float = Field(ge=0, le=4)


class TypeEffectiveResponse(OutputSchema):
    pokemon_id: int
    pokemon_type_id: int
    value: float


class PokemonMoveInput(InputSchema):
    pokemon_id: int = Field(ge=1)
    move_id: int = Field(ge=1)
    generation_id: int = Field(ge=1)


class PokemonMoveResponse(OutputSchema):
    pokemon_id: int
    move_id: int
    generation_id: int


# -- Envelopes ---------------------------------------------------------------


class PageResponse(BaseModel):
    """Paginated list envelope."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    data: list[dict[str, Any]]
    total: int
    page: int
    page_size: int
    total_pages: int


class ErrorResponse(BaseModel):
    """Uniform error body."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    error: str
    status_code: int
    timestamp: datetime


# Documents the uniform error body on every status a route can fail with.
ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    status: {"model": ErrorResponse} for status in (400, 401, 403, 404, 409, 429)
}


class AuthStatusResponse(BaseModel):
    """Login state plus the CSRF token to echo on writes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    authenticated: bool
    user: dict[str, Any] | None = None
    csrf_token: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str


class DetailedHealthResponse(BaseModel):
    """Readiness check response including database and pool state."""

    status: str
    database: bool
    pool: dict[str, int] | None = None
