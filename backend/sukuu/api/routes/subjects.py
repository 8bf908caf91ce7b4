from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from sukuu.api.deps import commit_or_conflict, get_current_user, get_db, get_school_owned, require_school_access
from sukuu.core.exceptions import ScheduleConflictError
from sukuu.models.assessment import Assessment
from sukuu.models.school import School
from sukuu.models.subject import Subject
from sukuu.models.timetable import TimetableSlot
from sukuu.models.user import User
from sukuu.schemas.academics import SubjectCreate, SubjectOut, SubjectUpdate
from sukuu.services.audit import log_activity

router = APIRouter()

DUPLICATE_SUBJECT = "A subject with this name or code already exists."


def _check_unique(db: Session, school_id: str, *, name: str | None, code: str | None, exclude_id: str | None = None) -> None:
    field_errors: dict[str, list[str]] = {}
    base = select(Subject.id).where(Subject.school_id == school_id)
    if exclude_id is not None:
        base = base.where(Subject.id != exclude_id)
    if name and db.execute(base.where(func.lower(Subject.name) == name.lower())).first() is not None:
        field_errors["name"] = ["Subject name already exists."]
    if code and db.execute(base.where(Subject.code == code)).first() is not None:
        field_errors["code"] = ["Subject code already exists."]
    if field_errors:
        raise ScheduleConflictError(DUPLICATE_SUBJECT, field_errors=field_errors)


@router.get("", response_model=list[SubjectOut])
def list_subjects(school: School = Depends(require_school_access), db: Session = Depends(get_db)) -> list[SubjectOut]:
    return list(db.execute(select(Subject).where(Subject.school_id == school.id).order_by(Subject.name)).scalars())


@router.post("", response_model=SubjectOut, status_code=status.HTTP_201_CREATED)
def create_subject(
    payload: SubjectCreate,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SubjectOut:
    _check_unique(db, school.id, name=payload.name, code=payload.code)
    subject = Subject(school_id=school.id, **payload.model_dump())
    db.add(subject)
    commit_or_conflict(db, DUPLICATE_SUBJECT)
    db.refresh(subject)
    log_activity(
        db,
        user=current_user,
        action="subject.create",
        school_id=school.id,
        entity_type="subject",
        entity_id=subject.id,
        details={"name": subject.name, "code": subject.code},
    )
    db.commit()
    return subject


@router.put("/{subject_id}", response_model=SubjectOut)
def update_subject(
    subject_id: str,
    payload: SubjectUpdate,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SubjectOut:
    subject = get_school_owned(db, Subject, subject_id, school.id, "Subject")
    data = payload.model_dump(exclude_unset=True)
    if data.get("name") is None:
        data.pop("name", None)
    _check_unique(db, school.id, name=data.get("name"), code=data.get("code"), exclude_id=subject_id)

    for key, value in data.items():
        setattr(subject, key, value)
    if data:
        log_activity(
            db,
            user=current_user,
            action="subject.update",
            school_id=school.id,
            entity_type="subject",
            entity_id=subject_id,
            details={"fields": sorted(data)},
        )
    commit_or_conflict(db, DUPLICATE_SUBJECT)
    db.refresh(subject)
    return subject


@router.delete("/{subject_id}")
def delete_subject(
    subject_id: str,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    subject = get_school_owned(db, Subject, subject_id, school.id, "Subject")
    in_use = db.execute(select(TimetableSlot.id).where(TimetableSlot.subject_id == subject_id)).first()
    if in_use is not None:
        raise ScheduleConflictError("Subject is used by timetable slots; remove them first.")
    has_assessments = db.execute(select(Assessment.id).where(Assessment.subject_id == subject_id)).first()
    if has_assessments is not None:
        raise ScheduleConflictError("Subject has assessments; delete them first.")
    log_activity(
        db,
        user=current_user,
        action="subject.delete",
        school_id=school.id,
        entity_type="subject",
        entity_id=subject_id,
        details={"name": subject.name},
    )
    db.delete(subject)
    db.commit()
    return {"success": True}
