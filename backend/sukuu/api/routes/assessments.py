import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from sukuu.api.deps import commit_or_conflict, get_current_user, get_db, get_school_owned, require_school_access
from sukuu.api.routes.students import check_class_in_school
from sukuu.core.exceptions import InvalidInputError, ScheduleConflictError
from sukuu.models.assessment import Assessment, StudentMark
from sukuu.models.school import School
from sukuu.models.student import Student
from sukuu.models.subject import Subject
from sukuu.models.user import User
from sukuu.schemas.assessment import (
    AssessmentCreate,
    AssessmentOut,
    AssessmentUpdate,
    StudentMarkOut,
    StudentMarksBatch,
)
from sukuu.services.audit import log_activity

router = APIRouter()
logger = logging.getLogger(__name__)

DUPLICATE_ASSESSMENT = "This assessment (name, class, subject, year and term) already exists."
DEFINITION_FIELDS = ("name", "class_id", "subject_id", "academic_year", "term")


def _check_subject_in_school(db: Session, school_id: str, subject_id: str) -> None:
    subject = db.get(Subject, subject_id)
    if subject is None or subject.school_id != school_id:
        raise InvalidInputError("Selected subject not found in this school.", field_errors={"subject_id": ["Invalid subject."]})


def _check_unique(db: Session, definition: dict, exclude_id: str | None = None) -> None:
    statement = select(Assessment.id).where(
        *(getattr(Assessment, field) == definition[field] for field in DEFINITION_FIELDS)
    )
    if exclude_id is not None:
        statement = statement.where(Assessment.id != exclude_id)
    if db.execute(statement).first() is not None:
        raise ScheduleConflictError(DUPLICATE_ASSESSMENT, field_errors={"name": ["Assessment already defined."]})


@router.get("", response_model=list[AssessmentOut])
def list_assessments(
    class_id: str | None = None,
    subject_id: str | None = None,
    school: School = Depends(require_school_access),
    db: Session = Depends(get_db),
) -> list[AssessmentOut]:
    statement = select(Assessment).where(Assessment.school_id == school.id)
    if class_id is not None:
        statement = statement.where(Assessment.class_id == class_id)
    if subject_id is not None:
        statement = statement.where(Assessment.subject_id == subject_id)
    statement = statement.order_by(
        Assessment.academic_year.desc(), Assessment.term, Assessment.assessment_date.desc(), Assessment.name
    )
    return list(db.execute(statement).scalars())


@router.post("", response_model=AssessmentOut, status_code=status.HTTP_201_CREATED)
def create_assessment(
    payload: AssessmentCreate,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AssessmentOut:
    check_class_in_school(db, school.id, payload.class_id, field="class_id")
    _check_subject_in_school(db, school.id, payload.subject_id)
    _check_unique(db, payload.model_dump())

    assessment = Assessment(school_id=school.id, created_by_user_id=current_user.id, **payload.model_dump())
    db.add(assessment)
    commit_or_conflict(db, DUPLICATE_ASSESSMENT)
    db.refresh(assessment)
    log_activity(
        db,
        user=current_user,
        action="assessment.create",
        school_id=school.id,
        entity_type="assessment",
        entity_id=assessment.id,
        details={"name": assessment.name, "class_id": assessment.class_id, "term": assessment.term.value},
    )
    db.commit()
    return assessment


@router.get("/{assessment_id}", response_model=AssessmentOut)
def get_assessment(
    assessment_id: str,
    school: School = Depends(require_school_access),
    db: Session = Depends(get_db),
) -> AssessmentOut:
    return get_school_owned(db, Assessment, assessment_id, school.id, "Assessment")


@router.put("/{assessment_id}", response_model=AssessmentOut)
def update_assessment(
    assessment_id: str,
    payload: AssessmentUpdate,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AssessmentOut:
    assessment = get_school_owned(db, Assessment, assessment_id, school.id, "Assessment")
    # Only description may be cleared; other explicit nulls leave the stored value.
    data = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key == "description"
    }

    if data.get("class_id", assessment.class_id) != assessment.class_id:
        check_class_in_school(db, school.id, data["class_id"], field="class_id")
    if data.get("subject_id", assessment.subject_id) != assessment.subject_id:
        _check_subject_in_school(db, school.id, data["subject_id"])
    if "max_marks" in data:
        highest = db.execute(
            select(StudentMark.marks_obtained)
            .where(StudentMark.assessment_id == assessment_id, StudentMark.marks_obtained.is_not(None))
            .order_by(StudentMark.marks_obtained.desc())
            .limit(1)
        ).scalar_one_or_none()
        if highest is not None and highest > data["max_marks"]:
            raise InvalidInputError(
                "Maximum marks cannot be lower than marks already recorded.",
                field_errors={"max_marks": [f"A recorded mark of {highest:g} exceeds this maximum."]},
            )
    definition = {field: data.get(field, getattr(assessment, field)) for field in DEFINITION_FIELDS}
    if any(definition[field] != getattr(assessment, field) for field in DEFINITION_FIELDS):
        _check_unique(db, definition, exclude_id=assessment_id)

    for key, value in data.items():
        setattr(assessment, key, value)
    if data:
        log_activity(
            db,
            user=current_user,
            action="assessment.update",
            school_id=school.id,
            entity_type="assessment",
            entity_id=assessment_id,
            details={"fields": sorted(data)},
        )
    commit_or_conflict(db, DUPLICATE_ASSESSMENT)
    db.refresh(assessment)
    return assessment


@router.delete("/{assessment_id}")
def delete_assessment(
    assessment_id: str,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    assessment = get_school_owned(db, Assessment, assessment_id, school.id, "Assessment")
    log_activity(
        db,
        user=current_user,
        action="assessment.delete",
        school_id=school.id,
        entity_type="assessment",
        entity_id=assessment_id,
        details={"name": assessment.name},
    )
    db.delete(assessment)
    db.commit()
    return {"success": True}


@router.get("/{assessment_id}/marks", response_model=list[StudentMarkOut])
def list_marks(
    assessment_id: str,
    school: School = Depends(require_school_access),
    db: Session = Depends(get_db),
) -> list[StudentMarkOut]:
    get_school_owned(db, Assessment, assessment_id, school.id, "Assessment")
    statement = (
        select(StudentMark)
        .join(Student, Student.id == StudentMark.student_id)
        .where(StudentMark.assessment_id == assessment_id)
        .order_by(Student.last_name, Student.first_name)
    )
    return list(db.execute(statement).scalars())


@router.put("/{assessment_id}/marks", response_model=list[StudentMarkOut])
def save_marks(
    assessment_id: str,
    payload: StudentMarksBatch,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[StudentMarkOut]:
    """Upsert one mark per student. The whole batch is rejected if any entry is invalid."""
    assessment = get_school_owned(db, Assessment, assessment_id, school.id, "Assessment")

    field_errors: dict[str, list[str]] = {}
    seen: set[str] = set()
    for index, entry in enumerate(payload.marks):
        if entry.student_id in seen:
            field_errors[f"marks.{index}.student_id"] = ["Student appears more than once."]
        seen.add(entry.student_id)
        if entry.marks_obtained is not None and entry.marks_obtained > assessment.max_marks:
            field_errors[f"marks.{index}.marks_obtained"] = [f"Marks cannot exceed {assessment.max_marks:g}."]

    in_class = set(
        db.execute(
            select(Student.id).where(
                Student.id.in_(seen),
                Student.school_id == school.id,
                Student.current_class_id == assessment.class_id,
            )
        ).scalars()
    )
    for index, entry in enumerate(payload.marks):
        if entry.student_id not in in_class:
            field_errors.setdefault(f"marks.{index}.student_id", []).append("Student is not in this assessment's class.")
    if field_errors:
        raise InvalidInputError("Some marks could not be saved.", field_errors=field_errors)

    existing = {
        mark.student_id: mark
        for mark in db.execute(select(StudentMark).where(StudentMark.assessment_id == assessment_id)).scalars()
    }
    saved: list[StudentMark] = []
    for entry in payload.marks:
        mark = existing.get(entry.student_id)
        if mark is None:
            mark = StudentMark(assessment_id=assessment_id, student_id=entry.student_id)
            db.add(mark)
        mark.marks_obtained = entry.marks_obtained
        mark.remarks = entry.remarks
        mark.recorded_by_id = current_user.id
        saved.append(mark)
    log_activity(
        db,
        user=current_user,
        action="assessment.marks_saved",
        school_id=school.id,
        entity_type="assessment",
        entity_id=assessment_id,
        details={"count": len(saved)},
    )
    commit_or_conflict(db, "Marks were saved concurrently; reload and try again.")
    for mark in saved:
        db.refresh(mark)
    logger.info("Saved %s mark(s) for assessment %s", len(saved), assessment_id)
    return saved
