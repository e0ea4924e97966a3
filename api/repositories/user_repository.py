"""User repository for session, sign-in and membership lookups."""

from sqlalchemy import select, update

from models import LeagueUser, User, utcnow
from repositories.base_repository import EntityRepository
from repositories.utils import log_slow_query


class UserRepository(EntityRepository[User]):
    """Repository for User database operations beyond generic CRUD."""

    def __init__(self, db):
        super().__init__(db, User)

    @log_slow_query("get_active_user")
    async def get_active(self, user_id: int) -> User | None:
        """Get an active user by ID, or None if missing or soft-deleted."""
        return await self.find_by({"id": user_id})

    async def get_by_google_id(self, google_id: str) -> User | None:
        return await self.find_by({"google_id": google_id})

    async def get_by_email(self, email: str) -> User | None:
        """Expects email to be pre-normalized (lowercase) by service layer."""
        return await self.find_by({"email": email})

    @log_slow_query("get_memberships")
    async def get_memberships(self, user_id: int) -> list[LeagueUser]:
        """Active league memberships of a user, ordered by league id."""
        result = await self.db.execute(
            select(LeagueUser)
            .where(
                LeagueUser.user_id == user_id,
                LeagueUser.is_active.is_(True),
            )
            .order_by(LeagueUser.league_id)
        )
        return list(result.scalars().all())

    async def set_admin(self, user_id: int, is_admin: bool) -> User:
        """Raises NotFoundError when the user is missing or soft-deleted."""
        return await self.update(user_id, {"is_admin": is_admin})

    async def deactivate_memberships(self, user_id: int) -> int:
        """Soft delete every membership of a user. Returns the affected count."""
        result = await self.db.execute(
            update(LeagueUser)
            .where(LeagueUser.user_id == user_id, LeagueUser.is_active.is_(True))
            .values(is_active=False, updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount
