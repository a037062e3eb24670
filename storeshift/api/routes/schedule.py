import random
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storeshift.api.deps import get_db
from storeshift.schemas.schedule import (
    GenerateRequest,
    GenerateResponse,
    ShiftResponse,
    UnmetRequirementResponse,
    ValidateRequest,
    ValidateResponse,
    WarningResponse,
)
from storeshift.services.scheduling import (
    ConfigurationError,
    InvalidRangeError,
    LocationNotFoundError,
    PersistenceError,
    SchedulingError,
    generate_schedule_from_context,
    load_schedule_context,
    persist_generated_shifts,
    validate_schedule,
)

router = APIRouter(prefix="/schedule", tags=["schedule"])


def _http_error(e: SchedulingError) -> HTTPException:
    if isinstance(e, LocationNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, InvalidRangeError):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, ConfigurationError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, PersistenceError):
        return HTTPException(
            status_code=503,
            detail={"message": str(e), "committed_shifts": len(e.committed_shifts)},
        )
    return HTTPException(status_code=500, detail=str(e))


@router.post("/generate", response_model=GenerateResponse)
def generate(
    payload: GenerateRequest,
    db: Session = Depends(get_db),
):
    rng = random.Random(payload.seed) if payload.seed is not None else None
    try:
        context = load_schedule_context(db, payload.location_id, payload.week_start, payload.week_end)
        result = generate_schedule_from_context(context, rng=rng)
        if payload.persist:
            persist_generated_shifts(db, context, result)
    except SchedulingError as e:
        raise _http_error(e)

    return GenerateResponse(
        location_id=context.location_id,
        week_start=context.week.start,
        week_end=context.week.end,
        new_shifts=[ShiftResponse.model_validate(s) for s in result.new_shifts],
        phase_one_count=len(result.phase_one_shifts),
        phase_two_count=len(result.phase_two_shifts),
        unmet_requirements=[UnmetRequirementResponse.model_validate(u) for u in result.unmet_requirements],
        warnings=[WarningResponse.model_validate(w) for w in result.warnings],
        persisted=payload.persist,
    )


@router.post("/validate", response_model=ValidateResponse)
def validate(
    payload: ValidateRequest,
    db: Session = Depends(get_db),
):
    try:
        context = load_schedule_context(db, payload.location_id, payload.week_start, payload.week_end)
    except SchedulingError as e:
        raise _http_error(e)

    week = context.week
    shifts = [
        s for s in context.existing_shifts
        if s.location_id == context.location_id and week.contains(s.work_date)
    ]
    # other-location shifts still count toward each employee's hours
    warnings = validate_schedule(context, context.existing_shifts)
    return ValidateResponse(
        location_id=context.location_id,
        week_start=week.start,
        week_end=week.end,
        shift_count=len(shifts),
        warnings=[WarningResponse.model_validate(w) for w in warnings],
    )
