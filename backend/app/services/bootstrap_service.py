"""Bootstrap helpers for default data."""

from __future__ import annotations

import logging

from app.core.config import get_settings
from app.db.session import get_sessionmaker
from app.models import UserRole
from app.services.user_service import create_user, get_user_by_email

logger = logging.getLogger(__name__)


async def ensure_default_admin() -> None:
    """Create the configured admin user if one does not yet exist."""

    settings = get_settings()
    if not settings.admin_password:
        logger.info("ADMIN_PASSWORD not set; skipping admin bootstrap")
        return
    sessionmaker = get_sessionmaker(settings.database_url)
    async with sessionmaker() as session:
        existing = await get_user_by_email(session, settings.admin_email)
        if existing is not None:
            return
        await create_user(
            session,
            email=settings.admin_email,
            password=settings.admin_password,
            name=settings.admin_name,
            role=UserRole.ADMIN,
        )
        logger.info("Created default admin account")
