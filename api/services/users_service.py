"""User service for sign-in, profile and role management."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import ValidationError
from core.logger import get_logger
from models import User
from repositories.user_repository import UserRepository
from services.entity_service import EntityService
from services.rules import USER_RULES

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    """Emails are matched case-insensitively, so store them lowercase."""
    return email.strip().lower()


def parse_display_name(name: str | None) -> tuple[str | None, str | None]:
    """Split "Ash Ketchum" into ("Ash", "Ketchum"); single words have no last name."""
    parts = (name or "").strip().split(maxsplit=1)
    if not parts:
        return None, None
    if len(parts) == 1:
        return parts[0], None
    return parts[0], parts[1]


async def get_or_create_user_from_google(
    db: AsyncSession,
    *,
    google_id: str,
    email: str,
    first_name: str | None = None,
    last_name: str | None = None,
) -> User:
    """Find the user by Google id, then by email; create one if neither matches.

    An existing account found by email is linked to the Google id.
    """
    if not google_id or not email:
        raise ValidationError("Google profile is missing an id or email")

    repo = UserRepository(db)
    email = normalize_email(email)

    user = await repo.get_by_google_id(google_id)
    if user is not None:
        return user

    user = await repo.get_by_email(email)
    if user is not None:
        logger.info("user.google_linked", user_id=user.id)
        return await repo.update(user.id, {"google_id": google_id})

    service: EntityService[User] = EntityService(db, USER_RULES)
    user = await service.create(
        {
            "google_id": google_id,
            "email": email,
            "first_name": first_name,
            "last_name": last_name,
        }
    )
    logger.info("user.registered", user_id=user.id)
    return user


async def update_profile(
    db: AsyncSession, user_id: int, fields: dict[str, Any]
) -> User:
    service: EntityService[User] = EntityService(db, USER_RULES)
    return await service.update(user_id, fields)


async def set_admin(db: AsyncSession, user_id: int, is_admin: bool) -> User:
    """Promote or demote a user. Raises NotFoundError for unknown users."""
    user = await UserRepository(db).set_admin(user_id, is_admin)
    logger.info(
        "user.promoted" if is_admin else "user.demoted",
        user_id=user_id,
    )
    return user


async def deactivate_user(db: AsyncSession, user_id: int) -> None:
    """Leave every league, then soft delete the account.

    Still refused with ConflictError while the user owns active teams.
    """
    await UserRepository(db).deactivate_memberships(user_id)
    service: EntityService[User] = EntityService(db, USER_RULES)
    await service.delete(user_id)
    logger.info("user.deactivated", user_id=user_id)
