# backend/tutorly/routes/v1/availability.py
"""
Availability routes - API v1

Versioned availability endpoints under /api/v1/availability.
All business logic delegated to AvailabilityService.

Endpoints:
    GET /dates                  → List a teacher's dated slots
    POST /dates                 → Publish a slot on a date
    DELETE /dates/{slot_id}     → Remove a dated slot
    GET /weekly                 → List a teacher's weekly slots
    POST /weekly                → Publish a weekly slot
    DELETE /weekly/{slot_id}    → Remove a weekly slot
    POST /settings              → Update booking buffer settings
"""

import asyncio
from datetime import date
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.params import Path

from ...api.dependencies import get_availability_service, get_current_user
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.availability import (
    BufferSettingsResponse,
    BufferSettingsUpdate,
    DateSlotCreate,
    DateSlotResponse,
    DeleteSlotResponse,
    WeeklySlotCreate,
    WeeklySlotResponse,
)
from ...services.availability_service import AvailabilityService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["availability-v1"])

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


@router.get("/dates", response_model=List[DateSlotResponse])
async def list_date_slots(
    teacher_id: str = Query(..., min_length=1),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    exclude_time_off: bool = Query(False),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> List[DateSlotResponse]:
    """
    List a teacher's dated slots, ordered by date then start time.

    Public: students browse these before booking.
    """
    try:
        slots = await asyncio.to_thread(
            availability_service.list_date_slots,
            teacher_id,
            start_date=start_date,
            end_date=end_date,
            exclude_time_off=exclude_time_off,
        )
        return [DateSlotResponse.model_validate(slot) for slot in slots]
    except DomainException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error listing slots for teacher {teacher_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error"
        )


@router.post("/dates", response_model=DateSlotResponse, status_code=status.HTTP_201_CREATED)
async def add_date_slot(
    payload: DateSlotCreate,
    current_user: User = Depends(get_current_user),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> DateSlotResponse:
    """
    Publish a slot on a specific date.

    Returns 409 when the window overlaps another slot on that date and 403
    when ``teacher_id`` is not the caller's own profile.
    """
    try:
        slot = await asyncio.to_thread(
            availability_service.add_date_slot,
            current_user,
            teacher_id=payload.teacher_id,
            available_date=payload.available_date,
            start_time=payload.start_time,
            end_time=payload.end_time,
            lesson_type=payload.lesson_type,
            max_students=payload.max_students,
        )
        return DateSlotResponse.model_validate(slot)
    except DomainException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error adding slot for user {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error"
        )


@router.delete("/dates/{slot_id}", response_model=DeleteSlotResponse)
async def delete_date_slot(
    slot_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: User = Depends(get_current_user),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> DeleteSlotResponse:
    """Remove one of the caller's dated slots."""
    try:
        await asyncio.to_thread(availability_service.delete_date_slot, current_user, slot_id)
        return DeleteSlotResponse(success=True, slot_id=slot_id)
    except DomainException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error deleting slot {slot_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error"
        )


@router.get("/weekly", response_model=List[WeeklySlotResponse])
async def list_weekly_slots(
    teacher_id: str = Query(..., min_length=1),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> List[WeeklySlotResponse]:
    """List a teacher's weekly slots, ordered by weekday then start time."""
    try:
        slots = await asyncio.to_thread(availability_service.list_weekly_slots, teacher_id)
        return [WeeklySlotResponse.model_validate(slot) for slot in slots]
    except DomainException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error listing weekly slots for teacher {teacher_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error"
        )


@router.post("/weekly", response_model=WeeklySlotResponse, status_code=status.HTTP_201_CREATED)
async def add_weekly_slot(
    payload: WeeklySlotCreate,
    current_user: User = Depends(get_current_user),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> WeeklySlotResponse:
    """
    Publish a window that repeats every week.

    Returns 409 when it overlaps another weekly slot on the same weekday.
    """
    try:
        slot = await asyncio.to_thread(
            availability_service.add_weekly_slot,
            current_user,
            day_of_week=payload.day_of_week,
            start_time=payload.start_time,
            end_time=payload.end_time,
            session_type=payload.session_type,
            max_students=payload.max_students,
            subject=payload.subject,
            teacher_id=payload.teacher_id,
        )
        return WeeklySlotResponse.model_validate(slot)
    except DomainException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error adding weekly slot for user {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error"
        )


@router.delete("/weekly/{slot_id}", response_model=DeleteSlotResponse)
async def delete_weekly_slot(
    slot_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: User = Depends(get_current_user),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> DeleteSlotResponse:
    """Remove one of the caller's weekly slots."""
    try:
        await asyncio.to_thread(availability_service.delete_weekly_slot, current_user, slot_id)
        return DeleteSlotResponse(success=True, slot_id=slot_id)
    except DomainException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error deleting weekly slot {slot_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error"
        )


@router.post("/settings", response_model=BufferSettingsResponse)
async def update_buffer_settings(
    payload: BufferSettingsUpdate,
    current_user: User = Depends(get_current_user),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> BufferSettingsResponse:
    """Update the gap the booking flow keeps between lessons."""
    try:
        profile = await asyncio.to_thread(
            availability_service.update_buffer_settings,
            current_user,
            payload.buffer_minutes,
            payload.is_buffer_enabled,
        )
        return BufferSettingsResponse.model_validate(profile)
    except DomainException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error updating buffer settings for user {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error"
        )
