"""
Training Reference API Routes

Stateless periodization helpers: heart-rate zones and phase lookup.
"""

from fastapi import APIRouter, HTTPException, Query, status

from adaptive_planner.api.models.responses import PhaseResponse, ZonesResponse
from adaptive_planner.phases import MAX_PLAN_WEEKS, hr_zones, is_recovery_week, phase_for

router = APIRouter()


@router.get("/zones", response_model=ZonesResponse)
async def get_zones(
    lthr: int = Query(..., gt=0, le=230, description="Lactate threshold heart rate (bpm)"),
) -> ZonesResponse:
    """Five heart-rate zones as fixed percentage bands of LTHR."""
    return ZonesResponse(lthr=lthr, zones=hr_zones(lthr).as_list())


@router.get("/phase", response_model=PhaseResponse)
async def get_phase(
    week: int = Query(..., ge=1),
    total: int = Query(..., ge=1, le=MAX_PLAN_WEEKS),
) -> PhaseResponse:
    """Training phase and recovery flag for a week of a plan."""
    if week > total:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "Invalid Week",
                "message": f"Week {week} lies beyond a {total}-week plan",
            },
        )
    return PhaseResponse(
        week=week,
        total_weeks=total,
        phase=phase_for(week, total).value,
        is_recovery_week=is_recovery_week(week),
    )
