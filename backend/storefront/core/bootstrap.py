# storefront/core/bootstrap.py
"""
Bootstrap module for application initialization.
Handles initial setup tasks such as creating default admin user on first startup.
"""
import logging

from storefront.config import Settings
from storefront.core.security import CredentialService
from storefront.models.user import User

logger = logging.getLogger("uvicorn.error")


async def ensure_default_admin(settings: Settings, credentials: CredentialService) -> User | None:
    """
    If no admin exists in the database, create a default admin from Settings.
    Only takes effect under the following conditions:
      - Currently no user with role="admin"
      - And ADMIN_PASSWORD is set (to avoid using default weak password)
    """
    if await User.filter(role="admin").exists():
        return None  # Skip creation if admin already exists

    if not settings.admin_password:
        logger.warning("[bootstrap] No admin present, but ADMIN_PASSWORD not set -> skip creating default admin.")
        return None

    # If username or email is already taken by a regular account, pick a non-conflicting one
    base_username = settings.admin_username
    admin_username = base_username
    suffix = 1
    while await User.filter(username=admin_username).exists():
        suffix += 1
        admin_username = f"{base_username}{suffix}"

    admin_email = settings.admin_email
    if await User.filter(email=admin_email).exists():
        local, _, domain = admin_email.partition("@")
        admin_email = f"{local}+{admin_username}@{domain}"

    u = await User.create(
        fullname=settings.admin_fullname,
        username=admin_username,
        email=admin_email,
        password_hash=await credentials.hash_async(settings.admin_password),
        role="admin",
    )
    logger.warning("[bootstrap] Created default admin -> username=%s email=%s id=%s",
                   u.username, u.email, u.id)
    return u
