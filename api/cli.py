#!/usr/bin/env python3
"""CLI for Draftmons API management tasks.

Usage:
    python -m cli <command>

Commands:
    create-tables          Create missing database tables
    promote-admin EMAIL    Grant admin rights to an existing user
"""

import argparse
import asyncio
import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def _create_tables() -> None:
    from core.database import create_engine, create_tables, dispose_engine

    engine = create_engine()
    try:
        await create_tables(engine)
    finally:
        await dispose_engine(engine)


async def _promote_admin(email: str) -> bool:
    from core.database import create_engine, create_session_maker, dispose_engine
    from repositories.user_repository import UserRepository
    from services.users_service import normalize_email, set_admin

    engine = create_engine()
    try:
        async with create_session_maker(engine)() as session:
            user = await UserRepository(session).get_by_email(normalize_email(email))
            if user is None:
                return False
            await set_admin(session, user.id, True)
            await session.commit()
            return True
    finally:
        await dispose_engine(engine)


def cmd_create_tables() -> int:
    """Create every table that does not exist yet."""
    logger.info("Creating database tables...")
    asyncio.run(_create_tables())
    logger.info("Tables ready")
    return 0


def cmd_promote_admin(email: str) -> int:
    """Grant admin rights to the active user with this email."""
    if not asyncio.run(_promote_admin(email)):
        logger.error(f"No active user with email {email}")
        return 1
    logger.info(f"Promoted {email} to admin")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Draftmons API CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "create-tables",
        help="Create missing database tables",
    )
    promote = subparsers.add_parser(
        "promote-admin",
        help="Grant admin rights to an existing user",
    )
    promote.add_argument("email", help="Email the user signed in with")

    args = parser.parse_args(argv)

    if args.command == "create-tables":
        return cmd_create_tables()
    elif args.command == "promote-admin":
        return cmd_promote_admin(args.email)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
