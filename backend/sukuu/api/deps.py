from collections.abc import Callable, Generator, Iterable
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from sukuu.core.exceptions import PermissionDeniedError, ResourceNotFoundError, ScheduleConflictError
from sukuu.core.security import decode_token
from sukuu.db.session import SessionLocal
from sukuu.models.school import School, SchoolAdmin
from sukuu.models.user import User, UserRole

security = HTTPBearer()
logger = logging.getLogger(__name__)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(credentials.credentials)
    except JWTError as exc:
        raise credentials_exception from exc
    user_id = payload.get("sub")
    if not user_id:
        raise credentials_exception

    user = db.get(User, user_id)
    if user is None:
        raise credentials_exception
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive")
    return user


def require_roles(*roles: UserRole) -> Callable[[User], User]:
    allowed_roles: Iterable[UserRole] = set(roles)

    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed_roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return current_user

    return role_checker


def is_school_admin(db: Session, user: User, school_id: str) -> bool:
    """Whether ``user`` may act on ``school_id``. Re-queried on every call."""
    if user.role == UserRole.super_admin:
        return True
    if user.role != UserRole.school_admin:
        return False
    assignment = db.execute(
        select(SchoolAdmin.id).where(SchoolAdmin.user_id == user.id, SchoolAdmin.school_id == school_id)
    ).first()
    return assignment is not None


def require_school_access(
    school_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> School:
    if not is_school_admin(db, current_user, school_id):
        raise PermissionDeniedError()
    school = db.get(School, school_id)
    if school is None:
        raise ResourceNotFoundError("School", school_id)
    return school


def get_school_owned(db: Session, model, entity_id: str, school_id: str, resource_type: str):
    """Load ``model`` by id, treating rows of another school as missing."""
    entity = db.get(model, entity_id)
    if entity is None or entity.school_id != school_id:
        raise ResourceNotFoundError(resource_type, entity_id)
    return entity


def commit_or_conflict(db: Session, message: str, *, field_errors: dict[str, list[str]] | None = None) -> None:
    """Commit, mapping a unique-constraint race onto the same 409 the pre-checks raise."""
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Integrity conflict at commit: %s", exc.orig)
        raise ScheduleConflictError(message, field_errors=field_errors) from exc
