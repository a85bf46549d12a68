"""
Auth Service - admin login and account bootstrap
"""

from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import undefer

from fyp_repository.core.exceptions import InvalidCredentialsError, ValidationFailedError
from fyp_repository.core.logging_config import logger, set_admin_id
from fyp_repository.core.security import create_access_token
from fyp_repository.models.admin import Admin, AdminRole


MIN_ADMIN_PASSWORD_LENGTH = 8


async def get_admin_by_email(db: AsyncSession, email: str, with_password: bool = False) -> Optional[Admin]:
    query = select(Admin).where(Admin.email == (email or "").strip().lower())
    if with_password:
        query = query.options(undefer(Admin.password_hash))
    result = await db.execute(query)
    return result.scalar_one_or_none()


def create_admin_token(admin: Admin) -> str:
    role = admin.role.value if admin.role else AdminRole.ADMIN.value
    return create_access_token(data={"sub": str(admin.id), "email": admin.email, "role": role})


async def authenticate_admin(
    db: AsyncSession,
    email: str,
    password: str,
    client_ip: Optional[str] = None,
) -> Tuple[Admin, str]:
    """
    Check credentials and issue an access token.

    Unknown email and wrong password fail with the same error; last_login is
    only touched on success.
    """
    admin = await get_admin_by_email(db, email, with_password=True)

    if not admin or not admin.check_password(password):
        logger.log_auth_event(
            event="login",
            success=False,
            admin_email=email,
            reason="Invalid credentials",
            client_ip=client_ip,
        )
        raise InvalidCredentialsError()

    admin.last_login = datetime.utcnow()
    await db.commit()

    set_admin_id(str(admin.id))
    logger.log_auth_event(event="login", success=True, admin_email=admin.email, client_ip=client_ip)

    return admin, create_admin_token(admin)


async def bootstrap_admin(
    db: AsyncSession,
    email: str,
    password: str,
    role: AdminRole = AdminRole.ADMIN,
    reset_password: bool = False,
) -> Tuple[Admin, bool]:
    """
    Create the admin account if it does not exist.

    With reset_password an existing account gets the new password. Returns
    (admin, created).
    """
    if not email or not email.strip():
        raise ValidationFailedError("Admin email is required", field="email")
    if not password or len(password) < MIN_ADMIN_PASSWORD_LENGTH:
        raise ValidationFailedError(
            f"Admin password must be at least {MIN_ADMIN_PASSWORD_LENGTH} characters",
            field="password",
        )

    admin = await get_admin_by_email(db, email)
    if admin:
        if reset_password:
            admin.password = password
            await db.commit()
            logger.info(f"[Auth] Password reset for admin {admin.email}")
        return admin, False

    admin = Admin(email=email, role=role)
    admin.password = password
    db.add(admin)
    await db.commit()

    logger.info(f"[Auth] Created admin account {admin.email}")
    return admin, True
