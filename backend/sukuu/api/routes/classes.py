from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from sukuu.api.deps import commit_or_conflict, get_current_user, get_db, get_school_owned, require_school_access
from sukuu.core.exceptions import InvalidInputError, ScheduleConflictError
from sukuu.models.school import School
from sukuu.models.school_class import SchoolClass
from sukuu.models.student import Student
from sukuu.models.teacher import Teacher
from sukuu.models.user import User
from sukuu.schemas.academics import ClassCreate, ClassOut, ClassUpdate
from sukuu.schemas.student import StudentBasicOut
from sukuu.services.audit import log_activity

router = APIRouter()

DUPLICATE_CLASS = "A class with this name and section already exists for this academic year."


def _check_homeroom_teacher(db: Session, school_id: str, teacher_id: str | None) -> None:
    if teacher_id is None:
        return
    teacher = db.get(Teacher, teacher_id)
    if teacher is None or teacher.school_id != school_id:
        raise InvalidInputError(
            "Homeroom teacher not found in this school.",
            field_errors={"homeroom_teacher_id": ["Unknown teacher."]},
        )


def _check_unique(db: Session, school_id: str, name: str, section: str | None, academic_year: str, exclude_id: str | None = None) -> None:
    statement = select(SchoolClass.id).where(
        SchoolClass.school_id == school_id,
        SchoolClass.name == name,
        SchoolClass.academic_year == academic_year,
        SchoolClass.section.is_(None) if section is None else SchoolClass.section == section,
    )
    if exclude_id is not None:
        statement = statement.where(SchoolClass.id != exclude_id)
    if db.execute(statement).first() is not None:
        raise ScheduleConflictError(DUPLICATE_CLASS, field_errors={"name": [DUPLICATE_CLASS]})


@router.get("", response_model=list[ClassOut])
def list_classes(school: School = Depends(require_school_access), db: Session = Depends(get_db)) -> list[ClassOut]:
    statement = (
        select(SchoolClass)
        .where(SchoolClass.school_id == school.id)
        .order_by(SchoolClass.academic_year.desc(), SchoolClass.name, SchoolClass.section)
    )
    return list(db.execute(statement).scalars())


@router.post("", response_model=ClassOut, status_code=status.HTTP_201_CREATED)
def create_class(
    payload: ClassCreate,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ClassOut:
    _check_homeroom_teacher(db, school.id, payload.homeroom_teacher_id)
    _check_unique(db, school.id, payload.name, payload.section, payload.academic_year)

    school_class = SchoolClass(school_id=school.id, **payload.model_dump())
    db.add(school_class)
    commit_or_conflict(db, DUPLICATE_CLASS)
    db.refresh(school_class)
    log_activity(
        db,
        user=current_user,
        action="class.create",
        school_id=school.id,
        entity_type="class",
        entity_id=school_class.id,
        details={"name": school_class.name, "section": school_class.section},
    )
    db.commit()
    return school_class


@router.get("/{class_id}/students", response_model=list[StudentBasicOut])
def list_class_students(
    class_id: str,
    school: School = Depends(require_school_access),
    db: Session = Depends(get_db),
) -> list[StudentBasicOut]:
    """Active students currently placed in the class, for attendance and marks sheets."""
    get_school_owned(db, SchoolClass, class_id, school.id, "Class")
    statement = (
        select(Student)
        .where(Student.school_id == school.id, Student.current_class_id == class_id, Student.is_active.is_(True))
        .order_by(Student.last_name, Student.first_name)
    )
    return list(db.execute(statement).scalars())


@router.put("/{class_id}", response_model=ClassOut)
def update_class(
    class_id: str,
    payload: ClassUpdate,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ClassOut:
    school_class = get_school_owned(db, SchoolClass, class_id, school.id, "Class")
    data = payload.model_dump(exclude_unset=True)
    if "homeroom_teacher_id" in data:
        _check_homeroom_teacher(db, school.id, data["homeroom_teacher_id"])
    if "name" in data or "section" in data:
        _check_unique(
            db,
            school.id,
            data.get("name") or school_class.name,
            data["section"] if "section" in data else school_class.section,
            school_class.academic_year,
            exclude_id=class_id,
        )

    for key, value in data.items():
        if key == "name" and value is None:
            continue
        setattr(school_class, key, value)
    if data:
        log_activity(
            db,
            user=current_user,
            action="class.update",
            school_id=school.id,
            entity_type="class",
            entity_id=class_id,
            details={"fields": sorted(data)},
        )
    commit_or_conflict(db, DUPLICATE_CLASS)
    db.refresh(school_class)
    return school_class


@router.delete("/{class_id}")
def delete_class(
    class_id: str,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    school_class = get_school_owned(db, SchoolClass, class_id, school.id, "Class")
    log_activity(
        db,
        user=current_user,
        action="class.delete",
        school_id=school.id,
        entity_type="class",
        entity_id=class_id,
        details={"name": school_class.name},
    )
    db.delete(school_class)
    db.commit()
    return {"success": True}
