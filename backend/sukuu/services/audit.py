from __future__ import annotations

from sqlalchemy.orm import Session

from sukuu.models.activity_log import ActivityLog
from sukuu.models.user import User


def log_activity(
    db: Session,
    *,
    user: User | None,
    action: str,
    school_id: str | None = None,
    entity_type: str | None = None,
    entity_id: str | None = None,
    details: dict | None = None,
) -> None:
    """Stage an audit row on ``db``; it is committed with the caller's change."""
    db.add(
        ActivityLog(
            user_id=user.id if user is not None else None,
            school_id=school_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details or {},
        )
    )
