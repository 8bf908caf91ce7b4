import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from sukuu.api.deps import get_db, require_roles
from sukuu.core.exceptions import ResourceNotFoundError
from sukuu.core.security import get_password_hash
from sukuu.models.school import School, SchoolAdmin
from sukuu.models.user import User, UserRole
from sukuu.schemas.school import SchoolAdminCreate, SchoolAdminOut, SchoolCreate, SchoolOut, SchoolUpdate
from sukuu.schemas.user import UserOut
from sukuu.services.audit import log_activity

router = APIRouter()
logger = logging.getLogger(__name__)

require_super_admin = require_roles(UserRole.super_admin)


def _get_school(db: Session, school_id: str) -> School:
    school = db.get(School, school_id)
    if school is None:
        raise ResourceNotFoundError("School", school_id)
    return school


def _email_taken(db: Session, email: str, *, exclude_school_id: str | None = None) -> bool:
    statement = select(School.id).where(func.lower(School.school_email) == email)
    if exclude_school_id is not None:
        statement = statement.where(School.id != exclude_school_id)
    return db.execute(statement).first() is not None


@router.get("/schools", response_model=list[SchoolOut])
def list_schools(current_user: User = Depends(require_super_admin), db: Session = Depends(get_db)) -> list[SchoolOut]:
    return list(db.execute(select(School).order_by(School.name)).scalars())


@router.post("/schools", response_model=SchoolOut, status_code=status.HTTP_201_CREATED)
def create_school(
    payload: SchoolCreate,
    current_user: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
) -> SchoolOut:
    if _email_taken(db, payload.school_email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="School email already exists")
    school = School(**payload.model_dump())
    db.add(school)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="School email already exists") from exc
    db.refresh(school)
    log_activity(
        db,
        user=current_user,
        action="school.create",
        school_id=school.id,
        entity_type="school",
        entity_id=school.id,
    )
    db.commit()
    logger.info("School %s created by %s", school.id, current_user.email)
    return school


@router.get("/schools/{school_id}", response_model=SchoolOut)
def get_school(
    school_id: str,
    current_user: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
) -> SchoolOut:
    return _get_school(db, school_id)


@router.put("/schools/{school_id}", response_model=SchoolOut)
def update_school(
    school_id: str,
    payload: SchoolUpdate,
    current_user: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
) -> SchoolOut:
    school = _get_school(db, school_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("school_email") and _email_taken(db, data["school_email"], exclude_school_id=school_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="School email already exists")

    for key, value in data.items():
        setattr(school, key, value)
    if data:
        log_activity(
            db,
            user=current_user,
            action="school.update",
            school_id=school.id,
            entity_type="school",
            entity_id=school.id,
            details={"fields": sorted(data)},
        )
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="School email already exists") from exc
    db.refresh(school)
    return school


@router.delete("/schools/{school_id}")
def delete_school(
    school_id: str,
    current_user: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
) -> dict:
    school = _get_school(db, school_id)
    log_activity(
        db,
        user=current_user,
        action="school.delete",
        entity_type="school",
        entity_id=school.id,
        details={"name": school.name},
    )
    db.delete(school)
    db.commit()
    return {"success": True}


@router.get("/schools/{school_id}/admins", response_model=list[SchoolAdminOut])
def list_school_admins(
    school_id: str,
    current_user: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
) -> list[SchoolAdminOut]:
    _get_school(db, school_id)
    rows = db.execute(
        select(SchoolAdmin, User)
        .join(User, User.id == SchoolAdmin.user_id)
        .where(SchoolAdmin.school_id == school_id)
        .order_by(User.last_name, User.first_name)
    ).all()
    return [
        SchoolAdminOut(id=assignment.id, school_id=assignment.school_id, user=UserOut.model_validate(user))
        for assignment, user in rows
    ]


@router.post("/schools/{school_id}/admins", response_model=SchoolAdminOut, status_code=status.HTTP_201_CREATED)
def create_school_admin(
    school_id: str,
    payload: SchoolAdminCreate,
    current_user: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
) -> SchoolAdminOut:
    _get_school(db, school_id)
    existing = db.execute(select(User).where(User.email == payload.email)).scalar_one_or_none()
    if existing is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    user = User(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        hashed_password=get_password_hash(payload.password),
        role=UserRole.school_admin,
    )
    try:
        db.add(user)
        db.flush()
        assignment = SchoolAdmin(user_id=user.id, school_id=school_id)
        db.add(assignment)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered") from exc
    db.refresh(user)
    log_activity(
        db,
        user=current_user,
        action="school_admin.create",
        school_id=school_id,
        entity_type="school_admin",
        entity_id=assignment.id,
        details={"email": user.email},
    )
    db.commit()
    return SchoolAdminOut(id=assignment.id, school_id=school_id, user=UserOut.model_validate(user))


@router.delete("/schools/{school_id}/admins/{admin_id}")
def remove_school_admin(
    school_id: str,
    admin_id: str,
    current_user: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
) -> dict:
    assignment = db.get(SchoolAdmin, admin_id)
    if assignment is None or assignment.school_id != school_id:
        raise ResourceNotFoundError("School admin", admin_id)
    log_activity(
        db,
        user=current_user,
        action="school_admin.remove",
        school_id=school_id,
        entity_type="school_admin",
        entity_id=assignment.id,
        details={"user_id": assignment.user_id},
    )
    db.delete(assignment)
    db.commit()
    return {"success": True}
