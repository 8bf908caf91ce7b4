"""Create the Sukuu super-admin account.

Run:
  PYTHONPATH=backend python scripts/seed_super_admin.py admin@example.com 'a-strong-password'

Without arguments the SEED_SUPER_ADMIN_EMAIL / SEED_SUPER_ADMIN_PASSWORD
settings are used. Existing accounts are left untouched.
"""

from __future__ import annotations

import argparse
import logging
import sys

from sukuu.core.config import get_settings
from sukuu.core.logging import setup_logging
from sukuu.db.base import Base
from sukuu.db.bootstrap import ensure_super_admin
from sukuu.db.session import SessionLocal, engine

logger = logging.getLogger("sukuu.scripts.seed_super_admin")


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("email", nargs="?", default=settings.seed_super_admin_email)
    parser.add_argument("password", nargs="?", default=settings.seed_super_admin_password)
    parser.add_argument("--first-name", default="Sukuu")
    parser.add_argument("--last-name", default="SuperAdmin")
    args = parser.parse_args(argv)

    setup_logging(level=settings.log_level)
    if not args.email or not args.password:
        parser.error("email and password are required (or set SEED_SUPER_ADMIN_EMAIL / SEED_SUPER_ADMIN_PASSWORD)")
    if len(args.password) < 8:
        parser.error("password must be at least 8 characters")

    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        created = ensure_super_admin(
            db,
            email=args.email,
            password=args.password,
            first_name=args.first_name,
            last_name=args.last_name,
        )
    if not created:
        logger.info("A user with email %s already exists; nothing to do.", args.email)
    return 0


if __name__ == "__main__":
    sys.exit(main())
