from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from sukuu.api.deps import commit_or_conflict, get_current_user, get_db, get_school_owned, require_school_access
from sukuu.core.exceptions import ScheduleConflictError
from sukuu.models.school import School
from sukuu.models.teacher import Teacher
from sukuu.models.timetable import TimetableSlot
from sukuu.models.user import User
from sukuu.schemas.academics import TeacherCreate, TeacherOut, TeacherUpdate
from sukuu.services.audit import log_activity

router = APIRouter()

DUPLICATE_TEACHER = "A teacher with this email or staff ID already exists."


def _check_unique(db: Session, school_id: str, *, email: str | None, staff_id: str | None, exclude_id: str | None = None) -> None:
    field_errors: dict[str, list[str]] = {}
    base = select(Teacher.id).where(Teacher.school_id == school_id)
    if exclude_id is not None:
        base = base.where(Teacher.id != exclude_id)
    if email and db.execute(base.where(Teacher.email == email)).first() is not None:
        field_errors["email"] = ["Email already in use."]
    if staff_id and db.execute(base.where(Teacher.staff_id == staff_id)).first() is not None:
        field_errors["staff_id"] = ["Staff ID already in use."]
    if field_errors:
        raise ScheduleConflictError(DUPLICATE_TEACHER, field_errors=field_errors)


@router.get("", response_model=list[TeacherOut])
def list_teachers(school: School = Depends(require_school_access), db: Session = Depends(get_db)) -> list[TeacherOut]:
    statement = select(Teacher).where(Teacher.school_id == school.id).order_by(Teacher.last_name, Teacher.first_name)
    return list(db.execute(statement).scalars())


@router.post("", response_model=TeacherOut, status_code=status.HTTP_201_CREATED)
def create_teacher(
    payload: TeacherCreate,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TeacherOut:
    _check_unique(db, school.id, email=payload.email, staff_id=payload.staff_id)
    teacher = Teacher(school_id=school.id, **payload.model_dump())
    db.add(teacher)
    commit_or_conflict(db, DUPLICATE_TEACHER)
    db.refresh(teacher)
    log_activity(
        db,
        user=current_user,
        action="teacher.create",
        school_id=school.id,
        entity_type="teacher",
        entity_id=teacher.id,
        details={"email": teacher.email},
    )
    db.commit()
    return teacher


@router.put("/{teacher_id}", response_model=TeacherOut)
def update_teacher(
    teacher_id: str,
    payload: TeacherUpdate,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TeacherOut:
    teacher = get_school_owned(db, Teacher, teacher_id, school.id, "Teacher")
    data = payload.model_dump(exclude_unset=True)
    for required in ("first_name", "last_name", "email"):
        if data.get(required) is None:
            data.pop(required, None)
    _check_unique(db, school.id, email=data.get("email"), staff_id=data.get("staff_id"), exclude_id=teacher_id)

    for key, value in data.items():
        setattr(teacher, key, value)
    if data:
        log_activity(
            db,
            user=current_user,
            action="teacher.update",
            school_id=school.id,
            entity_type="teacher",
            entity_id=teacher_id,
            details={"fields": sorted(data)},
        )
    commit_or_conflict(db, DUPLICATE_TEACHER)
    db.refresh(teacher)
    return teacher


@router.delete("/{teacher_id}")
def delete_teacher(
    teacher_id: str,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    teacher = get_school_owned(db, Teacher, teacher_id, school.id, "Teacher")
    in_use = db.execute(select(TimetableSlot.id).where(TimetableSlot.teacher_id == teacher_id)).first()
    if in_use is not None:
        raise ScheduleConflictError("Teacher is assigned to timetable slots; reassign them first.")
    log_activity(
        db,
        user=current_user,
        action="teacher.delete",
        school_id=school.id,
        entity_type="teacher",
        entity_id=teacher_id,
        details={"email": teacher.email},
    )
    db.delete(teacher)
    db.commit()
    return {"success": True}
