"""SQLAlchemy models for the Draftmons league backend.

Every table carries an integer id, an ``is_active`` soft-delete flag and
audit timestamps. Soft-deleted rows stay in place; reads filter them out.
"""

from datetime import UTC, datetime
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import Mapped, declared_attr, mapped_column, relationship

from core.database import Base


def utcnow() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(UTC)


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamp columns."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), default=utcnow)

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class SoftDeleteMixin:
    """Mixin that adds the is_active flag used for soft deletes."""

    @declared_attr
    def is_active(cls) -> Mapped[bool]:
        return mapped_column(Boolean, default=True, nullable=False, index=True)


class MoveCategory(str, PyEnum):
    PHYSICAL = "PHYSICAL"
    SPECIAL = "SPECIAL"
    STATUS = "STATUS"


class MatchTeamStatus(str, PyEnum):
    WINNER = "WINNER"
    LOSER = "LOSER"


pokemon_pokemon_types = Table(
    "pokemon_pokemon_types",
    Base.metadata,
    Column("pokemon_id", ForeignKey("pokemon.id"), primary_key=True),
    Column("pokemon_type_id", ForeignKey("pokemon_types.id"), primary_key=True),
)

pokemon_abilities = Table(
    "pokemon_abilities",
    Base.metadata,
    Column("pokemon_id", ForeignKey("pokemon.id"), primary_key=True),
    Column("ability_id", ForeignKey("abilities.id"), primary_key=True),
)

pokemon_generations = Table(
    "pokemon_generations",
    Base.metadata,
    Column("pokemon_id", ForeignKey("pokemon.id"), primary_key=True),
    Column("generation_id", ForeignKey("generations.id"), primary_key=True),
)

move_special_move_categories = Table(
    "move_special_move_categories",
    Base.metadata,
    Column("move_id", ForeignKey("moves.id"), primary_key=True),
    Column(
        "special_move_category_id",
        ForeignKey("special_move_categories.id"),
        primary_key=True,
    ),
)


class User(TimestampMixin, SoftDeleteMixin, Base):
    """Player or organizer, created on first Google sign-in."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    google_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True
    )
    showdown_username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    discord_username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    timezone: Mapped[str | None] = mapped_column(String(64), nullable=True)

    league_users: Mapped[list["LeagueUser"]] = relationship(back_populates="user")
    teams: Mapped[list["Team"]] = relationship(back_populates="user")


class League(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "leagues"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    abbreviation: Mapped[str] = mapped_column(String(32), nullable=False)

    league_users: Mapped[list["LeagueUser"]] = relationship(back_populates="league")
    seasons: Mapped[list["Season"]] = relationship(back_populates="league")


class LeagueUser(TimestampMixin, SoftDeleteMixin, Base):
    """Membership of a user in a league; moderators manage the league."""

    __tablename__ = "league_users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    league_id: Mapped[int] = mapped_column(
        ForeignKey("leagues.id"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    is_moderator: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    league: Mapped["League"] = relationship(back_populates="league_users")
    user: Mapped["User"] = relationship(back_populates="league_users")


class Generation(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "generations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False)

    pokemon: Mapped[list["Pokemon"]] = relationship(
        secondary=pokemon_generations, back_populates="generations"
    )
    pokemon_moves: Mapped[list["PokemonMove"]] = relationship(
        back_populates="generation"
    )
    moves: Mapped[list["Move"]] = relationship(back_populates="generation")
    abilities: Mapped[list["Ability"]] = relationship(back_populates="generation")
    seasons: Mapped[list["Season"]] = relationship(back_populates="generation")


class Season(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "seasons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    rules: Mapped[str | None] = mapped_column(Text, nullable=True)
    point_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    max_point_value: Mapped[int | None] = mapped_column(Integer, nullable=True)
    league_id: Mapped[int] = mapped_column(
        ForeignKey("leagues.id"), nullable=False, index=True
    )
    generation_id: Mapped[int] = mapped_column(
        ForeignKey("generations.id"), nullable=False, index=True
    )

    league: Mapped["League"] = relationship(back_populates="seasons")
    generation: Mapped["Generation"] = relationship(back_populates="seasons")
    teams: Mapped[list["Team"]] = relationship(back_populates="season")
    weeks: Mapped[list["Week"]] = relationship(back_populates="season")
    season_pokemon: Mapped[list["SeasonPokemon"]] = relationship(
        back_populates="season"
    )


class Team(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    season_id: Mapped[int] = mapped_column(
        ForeignKey("seasons.id"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )

    season: Mapped["Season"] = relationship(back_populates="teams")
    user: Mapped["User"] = relationship(back_populates="teams")
    season_pokemon_teams: Mapped[list["SeasonPokemonTeam"]] = relationship(
        back_populates="team"
    )
    won_games: Mapped[list["Game"]] = relationship(
        back_populates="winning_team", foreign_keys="Game.winning_team_id"
    )
    lost_games: Mapped[list["Game"]] = relationship(
        back_populates="losing_team", foreign_keys="Game.losing_team_id"
    )
    match_teams: Mapped[list["MatchTeam"]] = relationship(back_populates="team")


class Week(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "weeks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    season_id: Mapped[int] = mapped_column(
        ForeignKey("seasons.id"), nullable=False, index=True
    )

    season: Mapped["Season"] = relationship(back_populates="weeks")
    matches: Mapped[list["Match"]] = relationship(back_populates="week")


class Match(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "matches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    week_id: Mapped[int] = mapped_column(
        ForeignKey("weeks.id"), nullable=False, index=True
    )

    week: Mapped["Week"] = relationship(back_populates="matches")
    games: Mapped[list["Game"]] = relationship(back_populates="match")
    match_teams: Mapped[list["MatchTeam"]] = relationship(back_populates="match")


class MatchTeam(TimestampMixin, SoftDeleteMixin, Base):
    """A team playing in a match; status is set once the match is decided."""

    __tablename__ = "match_teams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(
        ForeignKey("matches.id"), nullable=False, index=True
    )
    team_id: Mapped[int] = mapped_column(
        ForeignKey("teams.id"), nullable=False, index=True
    )
    status: Mapped[MatchTeamStatus | None] = mapped_column(
        Enum(MatchTeamStatus, name="match_team_status"), nullable=True
    )

    match: Mapped["Match"] = relationship(back_populates="match_teams")
    team: Mapped["Team"] = relationship(back_populates="match_teams")


class Game(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "games"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(
        ForeignKey("matches.id"), nullable=False, index=True
    )
    winning_team_id: Mapped[int] = mapped_column(
        ForeignKey("teams.id"), nullable=False, index=True
    )
    losing_team_id: Mapped[int] = mapped_column(
        ForeignKey("teams.id"), nullable=False, index=True
    )
    differential: Mapped[int] = mapped_column(Integer, nullable=False)
    replay_link: Mapped[str | None] = mapped_column(Text, nullable=True)

    match: Mapped["Match"] = relationship(back_populates="games")
    winning_team: Mapped["Team"] = relationship(
        back_populates="won_games", foreign_keys=[winning_team_id]
    )
    losing_team: Mapped["Team"] = relationship(
        back_populates="lost_games", foreign_keys=[losing_team_id]
    )
    game_stats: Mapped[list["GameStat"]] = relationship(back_populates="game")


class GameStat(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "game_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    game_id: Mapped[int] = mapped_column(
        ForeignKey("games.id"), nullable=False, index=True
    )
    season_pokemon_id: Mapped[int] = mapped_column(
        ForeignKey("season_pokemon.id"), nullable=False, index=True
    )
    direct_kills: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    indirect_kills: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    deaths: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    game: Mapped["Game"] = relationship(back_populates="game_stats")
    season_pokemon: Mapped["SeasonPokemon"] = relationship(
        back_populates="game_stats"
    )


class PokemonType(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "pokemon_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    color: Mapped[str] = mapped_column(String(32), nullable=False)

    pokemon: Mapped[list["Pokemon"]] = relationship(
        secondary=pokemon_pokemon_types, back_populates="pokemon_types"
    )
    moves: Mapped[list["Move"]] = relationship(back_populates="pokemon_type")
    type_effectiveness: Mapped[list["TypeEffective"]] = relationship(
        back_populates="pokemon_type"
    )


class Pokemon(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "pokemon"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    dex_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    hp: Mapped[int] = mapped_column(Integer, nullable=False)
    attack: Mapped[int] = mapped_column(Integer, nullable=False)
    defense: Mapped[int] = mapped_column(Integer, nullable=False)
    special_attack: Mapped[int] = mapped_column(Integer, nullable=False)
    special_defense: Mapped[int] = mapped_column(Integer, nullable=False)
    speed: Mapped[int] = mapped_column(Integer, nullable=False)
    base_stat_total: Mapped[int] = mapped_column(Integer, nullable=False)
    height: Mapped[float] = mapped_column(Float, nullable=False)
    weight: Mapped[float] = mapped_column(Float, nullable=False)

    pokemon_types: Mapped[list["PokemonType"]] = relationship(
        secondary=pokemon_pokemon_types, back_populates="pokemon"
    )
    abilities: Mapped[list["Ability"]] = relationship(
        secondary=pokemon_abilities, back_populates="pokemon"
    )
    generations: Mapped[list["Generation"]] = relationship(
        secondary=pokemon_generations, back_populates="pokemon"
    )
    pokemon_moves: Mapped[list["PokemonMove"]] = relationship(
        back_populates="pokemon"
    )
    type_effectiveness: Mapped[list["TypeEffective"]] = relationship(
        back_populates="pokemon"
    )
    season_pokemon: Mapped[list["SeasonPokemon"]] = relationship(
        back_populates="pokemon"
    )


class Ability(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "abilities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    generation_id: Mapped[int | None] = mapped_column(
        ForeignKey("generations.id"), nullable=True, index=True
    )

    generation: Mapped[Optional["Generation"]] = relationship(
        back_populates="abilities"
    )
    pokemon: Mapped[list["Pokemon"]] = relationship(
        secondary=pokemon_abilities, back_populates="abilities"
    )


class SpecialMoveCategory(TimestampMixin, SoftDeleteMixin, Base):
    """Tag such as "sound" or "punch" shared by several moves."""

    __tablename__ = "special_move_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    moves: Mapped[list["Move"]] = relationship(
        secondary=move_special_move_categories,
        back_populates="special_move_categories",
    )


class Move(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "moves"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    pokemon_type_id: Mapped[int] = mapped_column(
        ForeignKey("pokemon_types.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    generation_id: Mapped[int] = mapped_column(
        ForeignKey("generations.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    category: Mapped[MoveCategory] = mapped_column(
        Enum(MoveCategory, name="move_category"), nullable=False
    )
    power: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    accuracy: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    priority: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    pp: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)

    pokemon_type: Mapped["PokemonType"] = relationship(back_populates="moves")
    generation: Mapped["Generation"] = relationship(back_populates="moves")
    pokemon_moves: Mapped[list["PokemonMove"]] = relationship(back_populates="move")
    special_move_categories: Mapped[list["SpecialMoveCategory"]] = relationship(
        secondary=move_special_move_categories, back_populates="moves"
    )


class TypeEffective(TimestampMixin, SoftDeleteMixin, Base):
    """Damage multiplier of an attacking type against a pokemon."""

    __tablename__ = "type_effectiveness"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    pokemon_id: Mapped[int] = mapped_column(
        ForeignKey("pokemon.id"), nullable=False, index=True
    )
    pokemon_type_id: Mapped[int] = mapped_column(
        ForeignKey("pokemon_types.id"), nullable=False, index=True
    )
    value: Mapped[float] = mapped_column(Float, nullable=False)

    pokemon: Mapped["Pokemon"] = relationship(back_populates="type_effectiveness")
    pokemon_type: Mapped["PokemonType"] = relationship(
        back_populates="type_effectiveness"
    )


class PokemonMove(TimestampMixin, SoftDeleteMixin, Base):
    """A move a pokemon can learn in a given generation."""

    __tablename__ = "pokemon_moves"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    pokemon_id: Mapped[int] = mapped_column(
        ForeignKey("pokemon.id"), nullable=False, index=True
    )
    move_id: Mapped[int] = mapped_column(
        ForeignKey("moves.id"), nullable=False, index=True
    )
    generation_id: Mapped[int] = mapped_column(
        ForeignKey("generations.id"), nullable=False, index=True
    )

    pokemon: Mapped["Pokemon"] = relationship(back_populates="pokemon_moves")
    move: Mapped["Move"] = relationship(back_populates="pokemon_moves")
    generation: Mapped["Generation"] = relationship(back_populates="pokemon_moves")


class SeasonPokemon(TimestampMixin, SoftDeleteMixin, Base):
    """A pokemon in a season's draft pool with its point cost."""

    __tablename__ = "season_pokemon"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    season_id: Mapped[int] = mapped_column(
        ForeignKey("seasons.id"), nullable=False, index=True
    )
    pokemon_id: Mapped[int] = mapped_column(
        ForeignKey("pokemon.id"), nullable=False, index=True
    )
    condition: Mapped[str | None] = mapped_column(String(255), nullable=True)
    point_value: Mapped[int | None] = mapped_column(Integer, nullable=True)

    season: Mapped["Season"] = relationship(back_populates="season_pokemon")
    pokemon: Mapped["Pokemon"] = relationship(back_populates="season_pokemon")
    season_pokemon_teams: Mapped[list["SeasonPokemonTeam"]] = relationship(
        back_populates="season_pokemon"
    )
    game_stats: Mapped[list["GameStat"]] = relationship(
        back_populates="season_pokemon"
    )


class SeasonPokemonTeam(TimestampMixin, SoftDeleteMixin, Base):
    """A drafted pokemon assigned to a team."""

    __tablename__ = "season_pokemon_teams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    season_pokemon_id: Mapped[int] = mapped_column(
        ForeignKey("season_pokemon.id"), nullable=False, index=True
    )
    team_id: Mapped[int] = mapped_column(
        ForeignKey("teams.id"), nullable=False, index=True
    )

    season_pokemon: Mapped["SeasonPokemon"] = relationship(
        back_populates="season_pokemon_teams"
    )
    team: Mapped["Team"] = relationship(back_populates="season_pokemon_teams")
