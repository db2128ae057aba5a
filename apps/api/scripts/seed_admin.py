"""
Seed Admin User

Creates the first user able to sign in to the school registry.
Credentials come from the environment so nothing secret is committed.

Usage:
    cd apps/api
    SEED_EMAIL=admin@example.org SEED_PASSWORD='...' python scripts/seed_admin.py

Optional: SEED_NAME sets the display name.
"""

import asyncio
import os
import sys

from school_registry.core.database import async_session_maker, engine
from school_registry.core.security import hash_password
from school_registry.modules.users.repository import UserRepository


async def seed_admin(email: str, password: str, name: str | None) -> None:
    """Create the user if the email is not registered yet."""
    async with async_session_maker() as db:
        existing_user = await UserRepository.get_by_email(db, email)

        if existing_user:
            print(f"User already exists: {email}")
            print(f"  ID: {existing_user.id}")
            return

        user = await UserRepository.create(
            db,
            email=email,
            password_hash=hash_password(password),
            name=name,
        )
        await db.commit()

        print("User created successfully!")
        print(f"  Email: {user.email}")
        print(f"  ID: {user.id}")

    await engine.dispose()


if __name__ == "__main__":
    seed_email = os.environ.get("SEED_EMAIL")
    seed_password = os.environ.get("SEED_PASSWORD")
    if not seed_email or not seed_password:
        print("SEED_EMAIL and SEED_PASSWORD must be set", file=sys.stderr)
        sys.exit(1)

    asyncio.run(seed_admin(seed_email, seed_password, os.environ.get("SEED_NAME")))
