from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from sukuu.api.deps import get_db, require_roles
from sukuu.core.exceptions import ResourceNotFoundError
from sukuu.models.user import User, UserRole
from sukuu.schemas.user import UserOut, UserStatusUpdate
from sukuu.services.audit import log_activity

router = APIRouter()


@router.patch("/{user_id}/status", response_model=UserOut)
def update_user_status(
    user_id: str,
    payload: UserStatusUpdate,
    current_user: User = Depends(require_roles(UserRole.super_admin)),
    db: Session = Depends(get_db),
) -> UserOut:
    user = db.get(User, user_id)
    if user is None:
        raise ResourceNotFoundError("User", user_id)
    if user.id == current_user.id and not payload.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot deactivate your own account")

    user.is_active = payload.is_active
    log_activity(
        db,
        user=current_user,
        action="user.activate" if payload.is_active else "user.deactivate",
        entity_type="user",
        entity_id=user.id,
    )
    db.commit()
    db.refresh(user)
    return user
