from typing import Literal

from pydantic import BaseModel, Field, model_validator

from sukuu.services.conflict_service import Dimension
from sukuu.services.intervals import BoundaryPolicy

FILTER_KEYS: dict[Dimension, set[str]] = {
    Dimension.class_: {"class_id", "day_of_week"},
    Dimension.teacher: {"teacher_id", "day_of_week"},
    Dimension.room: {"room", "day_of_week"},
    Dimension.scale: {"grade_scale_id"},
    Dimension.period: set(),
}


class CandidateRaw(BaseModel):
    start: float | str
    end: float | str


class ConflictCheckPayload(BaseModel):
    """Dry-run input for the conflict checker. The school scope comes from the URL."""

    dimension_filters: dict[Dimension, dict[str, str]] = Field(min_length=1, max_length=5)
    candidate_raw: CandidateRaw
    boundary_policy: BoundaryPolicy
    exclude_entity_id: str | None = Field(default=None, max_length=36)

    @model_validator(mode="after")
    def validate_filters(self) -> "ConflictCheckPayload":
        if Dimension.scale in self.dimension_filters and len(self.dimension_filters) > 1:
            raise ValueError("The scale dimension cannot be mixed with time dimensions")
        for dimension, filters in self.dimension_filters.items():
            unknown = set(filters) - FILTER_KEYS[dimension]
            if unknown:
                raise ValueError(f"Unsupported filter(s) for {dimension.value}: {', '.join(sorted(unknown))}")
            missing = FILTER_KEYS[dimension] - set(filters)
            if missing:
                raise ValueError(f"Missing filter(s) for {dimension.value}: {', '.join(sorted(missing))}")
        return self


class ConflictOut(BaseModel):
    dimension: str
    entityId: str
    label: str | None = None


class ConflictCheckOut(BaseModel):
    status: Literal["CLEAR", "CONFLICT", "INVALID"]
    conflicts: list[ConflictOut] | None = None
    reason: str | None = None
