"""
Seed script to create the first administrator account.

Run once (after schema_check) with env set:
  ADMIN_EMAIL=admin@school.edu.py
  ADMIN_PASSWORD=YourSecurePassword

Creates or updates:
- users: one user with that email
- user_roles: the admin role for that user
"""
import asyncio

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User, UserRole
from app.auth.security import hash_password
from app.core.config import settings
from app.core.enums import AppRole
from app.core.logger import log
from app.db.session import AsyncSessionLocal

DEFAULT_ADMIN_FULL_NAME = "Administrador"


async def seed_admin(db: AsyncSession) -> None:
    email = (settings.admin_email or "").strip().lower()
    password = settings.admin_password
    if not email or not password:
        log.warning("ADMIN_EMAIL / ADMIN_PASSWORD not set; skipping admin user.")
        return

    # 1. Create or update the user
    result = await db.execute(select(User).where(func.lower(User.email) == email))
    admin = result.scalar_one_or_none()
    if not admin:
        admin = User(
            email=email,
            full_name=DEFAULT_ADMIN_FULL_NAME,
            password_hash=hash_password(password),
        )
        db.add(admin)
        await db.flush()
        log.info(f"Created admin user: {email}")
    else:
        admin.password_hash = hash_password(password)
        log.info(f"Updated password of existing user: {email}")

    # 2. Ensure the admin role row exists
    role_result = await db.execute(
        select(UserRole).where(UserRole.user_id == admin.id, UserRole.role == AppRole.admin.value)
    )
    if role_result.scalar_one_or_none() is None:
        db.add(UserRole(user_id=admin.id, role=AppRole.admin.value))
        log.info("Granted admin role.")

    await db.commit()
    log.info("Admin seed done.")


async def main() -> None:
    async with AsyncSessionLocal() as db:
        try:
            await seed_admin(db)
        except Exception as e:
            await db.rollback()
            log.error(f"Admin seed failed: {e}")
            raise


if __name__ == "__main__":
    asyncio.run(main())
