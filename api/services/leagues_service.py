"""League-specific behavior on top of the generic entity service."""

from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import SessionContext
from core.logger import get_logger
from models import League
from services.entity_service import EntityService
from services.rules import LEAGUE_USER_RULES

logger = get_logger(__name__)


async def add_creator_as_moderator(
    db: AsyncSession, league: League, session: SessionContext | None
) -> None:
    """The user who creates a league becomes its first moderator."""
    if session is None:
        return
    await EntityService(db, LEAGUE_USER_RULES).create(
        {"league_id": league.id, "user_id": session.user_id, "is_moderator": True}
    )
    logger.info("league.moderator_added", league_id=league.id, user_id=session.user_id)
