from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from sukuu.api.deps import commit_or_conflict, get_current_user, get_db, get_school_owned, require_school_access
from sukuu.core.exceptions import ScheduleConflictError
from sukuu.models.school import School
from sukuu.models.timetable import SchoolPeriod
from sukuu.models.user import User
from sukuu.schemas.timetable import SchoolPeriodCreate, SchoolPeriodOut, SchoolPeriodUpdate
from sukuu.services.audit import log_activity
from sukuu.services.conflict_service import ConflictService, school_period_request
from sukuu.services.conflict_sources import SqlIntervalSource

router = APIRouter()

PERIOD_CLASH = "A period with this name or order already exists."


def _check_name_and_order(
    db: Session,
    school_id: str,
    *,
    name: str | None,
    sort_order: int | None,
    exclude_id: str | None = None,
) -> None:
    field_errors: dict[str, list[str]] = {}
    base = select(SchoolPeriod.id).where(SchoolPeriod.school_id == school_id)
    if exclude_id is not None:
        base = base.where(SchoolPeriod.id != exclude_id)
    if name is not None and db.execute(base.where(func.lower(SchoolPeriod.name) == name.lower())).first() is not None:
        field_errors["name"] = ["Period name already exists."]
    if sort_order is not None and db.execute(base.where(SchoolPeriod.sort_order == sort_order)).first() is not None:
        field_errors["sort_order"] = ["Sort order already in use."]
    if field_errors:
        raise ScheduleConflictError(PERIOD_CLASH, field_errors=field_errors)


@router.get("", response_model=list[SchoolPeriodOut])
def list_periods(school: School = Depends(require_school_access), db: Session = Depends(get_db)) -> list[SchoolPeriodOut]:
    statement = select(SchoolPeriod).where(SchoolPeriod.school_id == school.id).order_by(SchoolPeriod.sort_order)
    return list(db.execute(statement).scalars())


@router.post("", response_model=SchoolPeriodOut, status_code=status.HTTP_201_CREATED)
def create_period(
    payload: SchoolPeriodCreate,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SchoolPeriodOut:
    outcome = ConflictService(SqlIntervalSource(db)).validate(
        school_period_request(school_id=school.id, start_time=payload.start_time, end_time=payload.end_time)
    )
    outcome.raise_for_status()
    _check_name_and_order(db, school.id, name=payload.name, sort_order=payload.sort_order)

    period = SchoolPeriod(school_id=school.id, **payload.model_dump())
    db.add(period)
    commit_or_conflict(db, PERIOD_CLASH)
    db.refresh(period)
    log_activity(
        db,
        user=current_user,
        action="period.create",
        school_id=school.id,
        entity_type="school_period",
        entity_id=period.id,
        details={"name": period.name, "start_time": period.start_time, "end_time": period.end_time},
    )
    db.commit()
    return period


@router.put("/{period_id}", response_model=SchoolPeriodOut)
def update_period(
    period_id: str,
    payload: SchoolPeriodUpdate,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SchoolPeriodOut:
    period = get_school_owned(db, SchoolPeriod, period_id, school.id, "Period")
    data = {key: value for key, value in payload.model_dump(exclude_unset=True).items() if value is not None}

    start_time = data.get("start_time", period.start_time)
    end_time = data.get("end_time", period.end_time)
    if start_time != period.start_time or end_time != period.end_time:
        outcome = ConflictService(SqlIntervalSource(db)).validate(
            school_period_request(
                school_id=school.id,
                start_time=start_time,
                end_time=end_time,
                exclude_period_id=period_id,
            )
        )
        outcome.raise_for_status()
    _check_name_and_order(
        db,
        school.id,
        name=data.get("name"),
        sort_order=data.get("sort_order"),
        exclude_id=period_id,
    )

    for key, value in data.items():
        setattr(period, key, value)
    if data:
        log_activity(
            db,
            user=current_user,
            action="period.update",
            school_id=school.id,
            entity_type="school_period",
            entity_id=period_id,
            details={"fields": sorted(data)},
        )
    commit_or_conflict(db, PERIOD_CLASH)
    db.refresh(period)
    return period


@router.delete("/{period_id}")
def delete_period(
    period_id: str,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    period = get_school_owned(db, SchoolPeriod, period_id, school.id, "Period")
    log_activity(
        db,
        user=current_user,
        action="period.delete",
        school_id=school.id,
        entity_type="school_period",
        entity_id=period_id,
        details={"name": period.name},
    )
    db.delete(period)
    db.commit()
    return {"success": True}
