"""
Seed script to create the first ADMIN account.

Run once (e.g. after schema_check) with env set:
  SEED_ADMIN_USERNAME=admin
  SEED_ADMIN_PASSWORD=YourSecurePassword

Creates the admin user if the username is free; if it already exists as an
admin, its password is reset to the configured one.
"""
import asyncio
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.db import base as _models  # noqa: F401
from app.auth.accounts import new_admin
from app.auth.models import User
from app.auth.security import hash_password
from app.core.app_logger import get_logger, setup_logging
from app.core.config import settings
from app.core.enums import Role
from app.core.exceptions import ServiceError
from app.db.session import AsyncSessionLocal
from app.repositories.users import AdminRepository, UserRepository

DEFAULT_ADMIN_FIRST_NAME = "School"
DEFAULT_ADMIN_LAST_NAME = "Admin"

logger = get_logger("seed_admin")


async def seed_admin(
    db: AsyncSession,
    username: Optional[str] = None,
    password: Optional[str] = None,
) -> Optional[User]:
    username = username or settings.seed_admin_username
    password = password or settings.seed_admin_password
    if not username or not password:
        logger.info("No seed admin username/password; skipping admin account.")
        return None

    admins = AdminRepository(db)
    existing = await UserRepository(db).find_by_username(username)
    if existing is not None:
        if existing.role != Role.ADMIN:
            raise ServiceError(f"Username {username} is taken by a {existing.role.value} account")
        existing.password = hash_password(password)
        await admins.save(existing)
        logger.info("Reset password of existing admin %s", username)
        return existing

    admin = new_admin(username, hash_password(password), DEFAULT_ADMIN_FIRST_NAME, DEFAULT_ADMIN_LAST_NAME)
    await admins.save(admin)
    logger.info("Created admin %s", username)
    return admin


async def main() -> None:
    setup_logging()
    async with AsyncSessionLocal() as db:
        await seed_admin(db)


if __name__ == "__main__":
    asyncio.run(main())
