# backend/tutorly/routes/v1/time_off.py
"""
Time-off routes - API v1

Versioned time-off endpoints under /api/v1/availability/time-off.

Endpoints:
    GET /                   → List the caller's time-off ranges
    POST /                  → Add a time-off range
    DELETE /{time_off_id}   → Remove a time-off range
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.params import Path

from ...api.dependencies import get_availability_service, get_current_user
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.time_off import DeleteTimeOffResponse, TimeOffCreate, TimeOffResponse
from ...services.availability_service import AvailabilityService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["time-off-v1"])

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


@router.get("", response_model=List[TimeOffResponse])
async def list_time_off(
    current_user: User = Depends(get_current_user),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> List[TimeOffResponse]:
    try:
        entries = await asyncio.to_thread(availability_service.list_time_off, current_user)
        return [TimeOffResponse.model_validate(entry) for entry in entries]
    except DomainException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error listing time off for user {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error"
        )


@router.post("", response_model=TimeOffResponse, status_code=status.HTTP_201_CREATED)
async def add_time_off(
    payload: TimeOffCreate,
    current_user: User = Depends(get_current_user),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> TimeOffResponse:
    """Record a closed date range when the caller takes no lessons."""
    try:
        entry = await asyncio.to_thread(
            availability_service.add_time_off,
            current_user,
            payload.start_date,
            payload.end_date,
            payload.reason,
        )
        return TimeOffResponse.model_validate(entry)
    except DomainException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error adding time off for user {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error"
        )


@router.delete("/{time_off_id}", response_model=DeleteTimeOffResponse)
async def delete_time_off(
    time_off_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: User = Depends(get_current_user),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> DeleteTimeOffResponse:
    try:
        await asyncio.to_thread(availability_service.delete_time_off, current_user, time_off_id)
        return DeleteTimeOffResponse(success=True, time_off_id=time_off_id)
    except DomainException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error deleting time off {time_off_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error"
        )
