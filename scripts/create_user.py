"""Create a LIMS user (Postgres only). Creates missing tables first.

Usage:
    python -m scripts.create_user <email> <role> [name] [password]
If password is omitted, a random one is printed. The user row is recorded
in the audit trail like any other write.
"""

import asyncio
import secrets
import sys

from app.core.config import get_settings
from app.domain.enums import UserRole
from app.infrastructure.persistence import database
from app.infrastructure.persistence.repositories import UserRepository
from app.shared.context import RequestContext, run_async


async def main() -> None:
    """Create one user from command-line arguments."""
    if len(sys.argv) < 3:
        print(
            "Usage: python -m scripts.create_user <email> <role> [name] [password]",
            file=sys.stderr,
        )
        sys.exit(1)
    email = sys.argv[1]
    try:
        role = UserRole(sys.argv[2].upper())
    except ValueError:
        print(f"Unknown role: {sys.argv[2]}", file=sys.stderr)
        sys.exit(1)
    name = sys.argv[3] if len(sys.argv) > 3 else email.split("@")[0]
    password = sys.argv[4] if len(sys.argv) > 4 else secrets.token_urlsafe(12)

    get_settings()
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        print("DATABASE_URL not configured", file=sys.stderr)
        sys.exit(1)
    await database.create_all()

    async def _create() -> None:
        async with database.AsyncSessionLocal() as session:
            async with session.begin():
                user_repo = UserRepository(session)
                if await user_repo.get_by_email(email):
                    print(f"User already exists: {email}", file=sys.stderr)
                    sys.exit(1)
                user = await user_repo.create_user(email, name, role.value, password)
                print(f"Created user: {user.id} ({user.email}, {user.role})")
                print(f"Password: {password}")

    ctx = RequestContext(role=UserRole.SYSTEMADMIN.value, reason="Created from command line")
    await run_async(ctx, _create)
    await database.engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
