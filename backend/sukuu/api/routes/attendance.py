from datetime import date
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from sukuu.api.deps import commit_or_conflict, get_current_user, get_db, get_school_owned, require_school_access
from sukuu.core.exceptions import InvalidInputError
from sukuu.models.attendance import StudentAttendance
from sukuu.models.school import School
from sukuu.models.school_class import SchoolClass
from sukuu.models.student import Student
from sukuu.models.user import User
from sukuu.schemas.attendance import DailyAttendanceBatch, StudentAttendanceOut
from sukuu.services.audit import log_activity

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/daily", response_model=list[StudentAttendanceOut])
def list_daily_attendance(
    class_id: str,
    attendance_date: date,
    school: School = Depends(require_school_access),
    db: Session = Depends(get_db),
) -> list[StudentAttendanceOut]:
    get_school_owned(db, SchoolClass, class_id, school.id, "Class")
    statement = (
        select(StudentAttendance)
        .join(Student, Student.id == StudentAttendance.student_id)
        .where(StudentAttendance.class_id == class_id, StudentAttendance.attendance_date == attendance_date)
        .order_by(Student.last_name, Student.first_name)
    )
    return list(db.execute(statement).scalars())


@router.put("/daily", response_model=list[StudentAttendanceOut])
def save_daily_attendance(
    payload: DailyAttendanceBatch,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[StudentAttendanceOut]:
    """Record a class register for one day. Re-submitting a day overwrites its records."""
    school_class = db.get(SchoolClass, payload.class_id)
    if school_class is None or school_class.school_id != school.id:
        raise InvalidInputError("Class not found in this school.", field_errors={"class_id": ["Invalid class."]})
    if payload.attendance_date > date.today():
        raise InvalidInputError(
            "Attendance cannot be recorded for a future date.",
            field_errors={"attendance_date": ["Date cannot be in the future."]},
        )

    student_ids = [record.student_id for record in payload.records]
    in_class = set(
        db.execute(
            select(Student.id).where(
                Student.id.in_(student_ids),
                Student.school_id == school.id,
                Student.current_class_id == payload.class_id,
            )
        ).scalars()
    )
    field_errors: dict[str, list[str]] = {}
    seen: set[str] = set()
    for index, record in enumerate(payload.records):
        if record.student_id in seen:
            field_errors[f"records.{index}.student_id"] = ["Student appears more than once."]
        elif record.student_id not in in_class:
            field_errors[f"records.{index}.student_id"] = ["Student is not in this class."]
        seen.add(record.student_id)
    if field_errors:
        raise InvalidInputError("Some attendance records could not be saved.", field_errors=field_errors)

    existing = {
        row.student_id: row
        for row in db.execute(
            select(StudentAttendance).where(
                StudentAttendance.class_id == payload.class_id,
                StudentAttendance.attendance_date == payload.attendance_date,
                StudentAttendance.academic_year == payload.academic_year,
                StudentAttendance.term == payload.term,
            )
        ).scalars()
    }
    saved: list[StudentAttendance] = []
    for record in payload.records:
        row = existing.get(record.student_id)
        if row is None:
            row = StudentAttendance(
                school_id=school.id,
                student_id=record.student_id,
                class_id=payload.class_id,
                attendance_date=payload.attendance_date,
                academic_year=payload.academic_year,
                term=payload.term,
            )
            db.add(row)
        row.status = record.status
        row.remarks = record.remarks
        row.recorded_by_id = current_user.id
        saved.append(row)
    log_activity(
        db,
        user=current_user,
        action="attendance.daily_saved",
        school_id=school.id,
        entity_type="class",
        entity_id=payload.class_id,
        details={"date": payload.attendance_date.isoformat(), "count": len(saved)},
    )
    commit_or_conflict(db, "Attendance was saved concurrently; reload and try again.")
    for row in saved:
        db.refresh(row)
    logger.info(
        "Saved %s attendance record(s) for class %s on %s", len(saved), payload.class_id, payload.attendance_date
    )
    return saved
