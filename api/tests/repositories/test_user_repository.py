"""Tests for UserRepository."""

from sqlalchemy.ext.asyncio import AsyncSession

from repositories.user_repository import UserRepository
from tests.factories import (
    LeagueFactory,
    LeagueUserFactory,
    UserFactory,
    create_async,
)


class TestUserLookups:
    async def test_get_by_google_id(self, db_session: AsyncSession):
        user = await create_async(UserFactory, db_session, google_id="g-123")
        repo = UserRepository(db_session)

        assert (await repo.get_by_google_id("g-123")).id == user.id
        assert await repo.get_by_google_id("g-404") is None

    async def test_get_by_email(self, db_session: AsyncSession):
        user = await create_async(UserFactory, db_session, email="ash@example.com")
        repo = UserRepository(db_session)

        assert (await repo.get_by_email("ash@example.com")).id == user.id

    async def test_get_active_ignores_deactivated(self, db_session: AsyncSession):
        user = await create_async(UserFactory, db_session, is_active=False)
        repo = UserRepository(db_session)

        assert await repo.get_active(user.id) is None


class TestMemberships:
    async def test_get_memberships_ordered_and_active(self, db_session: AsyncSession):
        user = await create_async(UserFactory, db_session)
        first = await create_async(LeagueFactory, db_session)
        second = await create_async(LeagueFactory, db_session)
        left = await create_async(LeagueFactory, db_session)
        await create_async(
            LeagueUserFactory, db_session, league_id=second.id, user_id=user.id
        )
        await create_async(
            LeagueUserFactory,
            db_session,
            league_id=first.id,
            user_id=user.id,
            is_moderator=True,
        )
        await create_async(
            LeagueUserFactory,
            db_session,
            league_id=left.id,
            user_id=user.id,
            is_active=False,
        )
        repo = UserRepository(db_session)

        memberships = await repo.get_memberships(user.id)

        assert [(m.league_id, m.is_moderator) for m in memberships] == [
            (first.id, True),
            (second.id, False),
        ]

    async def test_deactivate_memberships(self, db_session: AsyncSession):
        user = await create_async(UserFactory, db_session)
        league = await create_async(LeagueFactory, db_session)
        await create_async(
            LeagueUserFactory, db_session, league_id=league.id, user_id=user.id
        )
        repo = UserRepository(db_session)

        assert await repo.deactivate_memberships(user.id) == 1
        assert await repo.get_memberships(user.id) == []

    async def test_set_admin(self, db_session: AsyncSession):
        user = await create_async(UserFactory, db_session)
        repo = UserRepository(db_session)

        updated = await repo.set_admin(user.id, True)

        assert updated.is_admin is True
