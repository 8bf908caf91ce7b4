from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

import sukuu.models  # noqa: F401
from sukuu.core.config import get_settings
from sukuu.core.security import get_password_hash
from sukuu.db.base import Base
from sukuu.db.session import SessionLocal, engine
from sukuu.models.user import User, UserRole

logger = logging.getLogger(__name__)


def ensure_super_admin(db: Session, *, email: str, password: str, first_name: str = "Sukuu", last_name: str = "SuperAdmin") -> bool:
    """Create the super-admin account unless a user with ``email`` already exists."""
    email = email.strip().lower()
    existing = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if existing is not None:
        if existing.role != UserRole.super_admin:
            logger.warning("Seed email %s belongs to a %s account; leaving it unchanged", email, existing.role.value)
        return False
    db.add(
        User(
            first_name=first_name,
            last_name=last_name,
            email=email,
            hashed_password=get_password_hash(password),
            role=UserRole.super_admin,
        )
    )
    db.commit()
    logger.warning("Seeded super admin %s. Change the password after first login.", email)
    return True


def bootstrap_database() -> None:
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Database bootstrap failed")
        raise RuntimeError("Database bootstrap failed") from exc

    settings = get_settings()
    if not (settings.seed_super_admin_email and settings.seed_super_admin_password):
        return
    with SessionLocal() as db:
        ensure_super_admin(db, email=settings.seed_super_admin_email, password=settings.seed_super_admin_password)
