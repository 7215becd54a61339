#!/usr/bin/env python3
"""Create a journal account from the command line."""
import argparse
import asyncio
import sys
from typing import Optional

from tradelog.auth.security import PasswordHasher, SessionTokenCodec
from tradelog.config.settings import get_settings
from tradelog.db.repositories import UserRepository
from tradelog.db.session import Database
from tradelog.exceptions import TradelogError
from tradelog.services.auth_service import AuthService


async def create_user(email: str, password: str, name: Optional[str] = None) -> int:
    """Create the account and report the outcome; returns an exit code."""
    settings = get_settings()
    database = Database.from_settings(settings)

    try:
        if settings.AUTO_CREATE_TABLES:
            await database.create_all()

        async with database.session() as db:
            service = AuthService(
                UserRepository(db),
                PasswordHasher(rounds=settings.BCRYPT_ROUNDS),
                SessionTokenCodec(settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
            )
            try:
                result = await service.signup(email, password, name)
            except TradelogError as e:
                print(f"Could not create user: {e}", file=sys.stderr)
                return 1

        print(f"Created user {result.user.email} ({result.user.id})")
        return 0
    finally:
        await database.dispose()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create a Tradelog user")
    parser.add_argument("email")
    parser.add_argument("password")
    parser.add_argument("--name", default=None)
    args = parser.parse_args(argv)
    return asyncio.run(create_user(args.email, args.password, args.name))


if __name__ == "__main__":
    sys.exit(main())
