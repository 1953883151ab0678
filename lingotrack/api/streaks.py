"""
Streak API routes.
"""

import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from lingotrack.api.dependencies import get_streak_service
from lingotrack.common.exceptions import StoreUnavailableError, ValidationError
from lingotrack.common.logger import get_logger
from lingotrack.streaks.models import StreakData
from lingotrack.streaks.service import StreakService

logger = get_logger(__name__)

router = APIRouter()


class StreakResponse(BaseModel):
    current_streak: int
    longest_streak: int
    last_activity_date: Optional[datetime.date] = None
    streak_active: bool
    is_at_risk: bool = False
    risk_hours_remaining: Optional[int] = None

    @classmethod
    def from_data(cls, data: StreakData) -> "StreakResponse":
        return cls(**data.to_dict())


class ActivityDayResponse(BaseModel):
    date: datetime.date
    has_activity: bool
    exercise_count: int


@router.get("/{user_id}/{language}", response_model=StreakResponse)
async def get_streak(
    user_id: str,
    language: str,
    service: StreakService = Depends(get_streak_service)
) -> StreakResponse:
    """Get the current streak of a user for a language."""
    try:
        data = await service.get_streak(user_id, language)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)
    return StreakResponse.from_data(data)


@router.post("/{user_id}/{language}/activity", response_model=StreakResponse)
async def record_activity(
    user_id: str,
    language: str,
    service: StreakService = Depends(get_streak_service)
) -> StreakResponse:
    """Credit a completed activity toward today's streak."""
    try:
        data = await service.record_activity(user_id, language)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)
    except StoreUnavailableError as e:
        logger.error(f"Streak not recorded for {user_id}/{language}: {e.message}")
        raise HTTPException(
            status_code=503,
            detail={"message": "Streak could not be saved, please retry", "retryable": True}
        )
    return StreakResponse.from_data(data)


@router.get("/{user_id}/{language}/calendar", response_model=List[ActivityDayResponse])
async def get_activity_calendar(
    user_id: str,
    language: str,
    months: Optional[int] = Query(None, gt=0, le=24),
    service: StreakService = Depends(get_streak_service)
) -> List[ActivityDayResponse]:
    """Get the daily activity calendar ending today."""
    try:
        days = await service.get_activity_calendar(user_id, language, months=months)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)
    return [ActivityDayResponse(**day.to_dict()) for day in days]
