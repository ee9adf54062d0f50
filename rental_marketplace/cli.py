"""
Database management commands: create, drop and reset tables, seed a demo host.

Usage::

    rental-marketplace-db create
    rental-marketplace-db seed --email host@example.com --password <password>
    rental-marketplace-db reset --confirm
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from rental_marketplace.config import settings
from rental_marketplace.database import AsyncSessionLocal, create_tables, drop_tables, close_db_connection
from rental_marketplace.models.user import User, UserRole
from rental_marketplace.repositories.user import UserRepository

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def seed_host(session: AsyncSession, email: str, password: str, fullname: str = "Demo Host") -> User:
    """
    Create a host account unless one already uses the email.

    Returns:
        The existing or newly created user
    """
    user_repo = UserRepository(session)
    existing = await user_repo.get_by_email(email)
    if existing:
        logger.info(f"User {email} already exists, skipping seed")
        return existing

    user = await user_repo.create_user({
        "email": email,
        "password": password,
        "fullname": fullname,
        "role": UserRole.TENANT,
        "is_verified": True,
    })
    logger.info(f"Seeded host account {user.email} (ID: {user.id})")
    return user


async def _seed(email: str, password: str) -> None:
    async with AsyncSessionLocal() as session:
        await seed_host(session, email, password)


async def _reset() -> None:
    await drop_tables()
    await create_tables()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rental marketplace database management")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("create", help="Create all tables")
    subparsers.add_parser("drop", help="Drop all tables (development and testing only)")

    reset_parser = subparsers.add_parser("reset", help="Drop and recreate all tables")
    reset_parser.add_argument("--confirm", action="store_true", help="Confirm database reset")

    seed_parser = subparsers.add_parser("seed", help="Create a demo host account")
    seed_parser.add_argument("--email", default="host@example.com", help="Host email")
    seed_parser.add_argument("--password", required=True, help="Host password (minimum 8 characters)")

    return parser


async def _run(args: argparse.Namespace) -> None:
    try:
        if args.command == "create":
            await create_tables()
        elif args.command == "drop":
            await drop_tables()
        elif args.command == "reset":
            await _reset()
        elif args.command == "seed":
            await _seed(args.email, args.password)
    finally:
        await close_db_connection()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI interface for database management."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "reset" and not args.confirm:
        print("Database reset requires --confirm flag")
        return 1

    logger.info(f"Running '{args.command}' against {settings.environment} database")
    try:
        asyncio.run(_run(args))
    except Exception as e:
        logger.error(f"Command failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
