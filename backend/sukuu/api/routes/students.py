from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from sukuu.api.deps import commit_or_conflict, get_current_user, get_db, get_school_owned, require_school_access
from sukuu.core.exceptions import InvalidInputError, ScheduleConflictError
from sukuu.models.school import School
from sukuu.models.school_class import SchoolClass
from sukuu.models.student import Student
from sukuu.models.user import User
from sukuu.schemas.student import StudentCreate, StudentOut, StudentUpdate
from sukuu.services.audit import log_activity

router = APIRouter()

DUPLICATE_ID_NUMBER = "A student with this ID number already exists in this school."


def check_class_in_school(db: Session, school_id: str, class_id: str | None, field: str = "current_class_id") -> None:
    if class_id is None:
        return
    school_class = db.get(SchoolClass, class_id)
    if school_class is None or school_class.school_id != school_id:
        raise InvalidInputError("Selected class does not belong to this school.", field_errors={field: ["Invalid class."]})


def _check_unique(db: Session, school_id: str, student_id_number: str, exclude_id: str | None = None) -> None:
    statement = select(Student.id).where(Student.school_id == school_id, Student.student_id_number == student_id_number)
    if exclude_id is not None:
        statement = statement.where(Student.id != exclude_id)
    if db.execute(statement).first() is not None:
        raise ScheduleConflictError(
            DUPLICATE_ID_NUMBER, field_errors={"student_id_number": ["This ID number is already in use."]}
        )


@router.get("", response_model=list[StudentOut])
def list_students(
    class_id: str | None = None,
    is_active: bool | None = None,
    school: School = Depends(require_school_access),
    db: Session = Depends(get_db),
) -> list[StudentOut]:
    statement = select(Student).where(Student.school_id == school.id)
    if class_id is not None:
        statement = statement.where(Student.current_class_id == class_id)
    if is_active is not None:
        statement = statement.where(Student.is_active.is_(is_active))
    statement = statement.order_by(Student.last_name, Student.first_name, Student.student_id_number)
    return list(db.execute(statement).scalars())


@router.post("", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
def create_student(
    payload: StudentCreate,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> StudentOut:
    check_class_in_school(db, school.id, payload.current_class_id)
    _check_unique(db, school.id, payload.student_id_number)

    student = Student(school_id=school.id, **payload.model_dump())
    db.add(student)
    commit_or_conflict(db, DUPLICATE_ID_NUMBER)
    db.refresh(student)
    log_activity(
        db,
        user=current_user,
        action="student.create",
        school_id=school.id,
        entity_type="student",
        entity_id=student.id,
        details={"student_id_number": student.student_id_number, "class_id": student.current_class_id},
    )
    db.commit()
    return student


@router.get("/{student_id}", response_model=StudentOut)
def get_student(
    student_id: str,
    school: School = Depends(require_school_access),
    db: Session = Depends(get_db),
) -> StudentOut:
    return get_school_owned(db, Student, student_id, school.id, "Student")


@router.put("/{student_id}", response_model=StudentOut)
def update_student(
    student_id: str,
    payload: StudentUpdate,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> StudentOut:
    student = get_school_owned(db, Student, student_id, school.id, "Student")
    data = payload.model_dump(exclude_unset=True)
    # Required columns cannot be cleared; an explicit null leaves them as stored.
    for key in ("student_id_number", "first_name", "last_name", "date_of_birth", "gender", "enrollment_date", "is_active"):
        if key in data and data[key] is None:
            del data[key]
    if "current_class_id" in data:
        check_class_in_school(db, school.id, data["current_class_id"])
    if data.get("student_id_number", student.student_id_number) != student.student_id_number:
        _check_unique(db, school.id, data["student_id_number"], exclude_id=student_id)

    for key, value in data.items():
        setattr(student, key, value)
    if data:
        log_activity(
            db,
            user=current_user,
            action="student.update",
            school_id=school.id,
            entity_type="student",
            entity_id=student_id,
            details={"fields": sorted(data)},
        )
    commit_or_conflict(db, DUPLICATE_ID_NUMBER)
    db.refresh(student)
    return student


@router.delete("/{student_id}")
def delete_student(
    student_id: str,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    student = get_school_owned(db, Student, student_id, school.id, "Student")
    log_activity(
        db,
        user=current_user,
        action="student.delete",
        school_id=school.id,
        entity_type="student",
        entity_id=student_id,
        details={"name": student.full_name, "student_id_number": student.student_id_number},
    )
    db.delete(student)
    db.commit()
    return {"success": True}
