from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from sukuu.api.deps import commit_or_conflict, get_current_user, get_db, get_school_owned, require_school_access
from sukuu.core.exceptions import InvalidInputError, ResourceNotFoundError, ScheduleConflictError
from sukuu.models.school import School
from sukuu.models.school_class import ClassSubjectAssignment, SchoolClass
from sukuu.models.subject import Subject
from sukuu.models.teacher import Teacher
from sukuu.models.user import User
from sukuu.schemas.academics import (
    ClassSubjectAssignmentCreate,
    ClassSubjectAssignmentOut,
    ClassSubjectAssignmentUpdate,
)
from sukuu.services.audit import log_activity

router = APIRouter()

ALREADY_ASSIGNED = "This subject is already assigned to this class for this academic year."


def _check_teacher(db: Session, school_id: str, teacher_id: str | None) -> None:
    if teacher_id is None:
        return
    teacher = db.get(Teacher, teacher_id)
    if teacher is None or teacher.school_id != school_id:
        raise InvalidInputError("Selected teacher not found in this school.", field_errors={"teacher_id": ["Invalid teacher."]})


def _get_assignment(db: Session, school_class: SchoolClass, assignment_id: str) -> ClassSubjectAssignment:
    assignment = db.get(ClassSubjectAssignment, assignment_id)
    if assignment is None or assignment.class_id != school_class.id:
        raise ResourceNotFoundError("Subject assignment", assignment_id)
    return assignment


@router.get("", response_model=list[ClassSubjectAssignmentOut])
def list_assignments(
    class_id: str,
    school: School = Depends(require_school_access),
    db: Session = Depends(get_db),
) -> list[ClassSubjectAssignmentOut]:
    get_school_owned(db, SchoolClass, class_id, school.id, "Class")
    statement = (
        select(ClassSubjectAssignment)
        .join(Subject, Subject.id == ClassSubjectAssignment.subject_id)
        .where(ClassSubjectAssignment.class_id == class_id)
        .order_by(Subject.name)
    )
    return list(db.execute(statement).scalars())


@router.post("", response_model=ClassSubjectAssignmentOut, status_code=status.HTTP_201_CREATED)
def create_assignment(
    class_id: str,
    payload: ClassSubjectAssignmentCreate,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ClassSubjectAssignmentOut:
    school_class = get_school_owned(db, SchoolClass, class_id, school.id, "Class")
    subject = db.get(Subject, payload.subject_id)
    if subject is None or subject.school_id != school.id:
        raise InvalidInputError("Selected subject not found in this school.", field_errors={"subject_id": ["Invalid subject."]})
    _check_teacher(db, school.id, payload.teacher_id)

    # The assignment always takes the class's own academic year.
    existing = db.execute(
        select(ClassSubjectAssignment.id).where(
            ClassSubjectAssignment.class_id == class_id,
            ClassSubjectAssignment.subject_id == payload.subject_id,
            ClassSubjectAssignment.academic_year == school_class.academic_year,
        )
    ).first()
    if existing is not None:
        raise ScheduleConflictError(ALREADY_ASSIGNED, field_errors={"subject_id": ["Subject already assigned."]})

    assignment = ClassSubjectAssignment(
        class_id=class_id,
        subject_id=payload.subject_id,
        teacher_id=payload.teacher_id,
        academic_year=school_class.academic_year,
    )
    db.add(assignment)
    commit_or_conflict(db, ALREADY_ASSIGNED, field_errors={"subject_id": ["Subject already assigned."]})
    db.refresh(assignment)
    log_activity(
        db,
        user=current_user,
        action="class_subject.assign",
        school_id=school.id,
        entity_type="class_subject_assignment",
        entity_id=assignment.id,
        details={"class_id": class_id, "subject_id": assignment.subject_id, "teacher_id": assignment.teacher_id},
    )
    db.commit()
    return assignment


@router.put("/{assignment_id}", response_model=ClassSubjectAssignmentOut)
def update_assignment(
    class_id: str,
    assignment_id: str,
    payload: ClassSubjectAssignmentUpdate,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ClassSubjectAssignmentOut:
    """Only the teacher can change; a different subject or year is a new assignment."""
    school_class = get_school_owned(db, SchoolClass, class_id, school.id, "Class")
    assignment = _get_assignment(db, school_class, assignment_id)
    data = payload.model_dump(exclude_unset=True)
    if "teacher_id" in data:
        _check_teacher(db, school.id, data["teacher_id"])
        assignment.teacher_id = data["teacher_id"]
        log_activity(
            db,
            user=current_user,
            action="class_subject.update",
            school_id=school.id,
            entity_type="class_subject_assignment",
            entity_id=assignment_id,
            details={"teacher_id": data["teacher_id"]},
        )
    db.commit()
    db.refresh(assignment)
    return assignment


@router.delete("/{assignment_id}")
def delete_assignment(
    class_id: str,
    assignment_id: str,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    school_class = get_school_owned(db, SchoolClass, class_id, school.id, "Class")
    assignment = _get_assignment(db, school_class, assignment_id)
    log_activity(
        db,
        user=current_user,
        action="class_subject.unassign",
        school_id=school.id,
        entity_type="class_subject_assignment",
        entity_id=assignment_id,
        details={"class_id": class_id, "subject_id": assignment.subject_id},
    )
    db.delete(assignment)
    db.commit()
    return {"success": True}
