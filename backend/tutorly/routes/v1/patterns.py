# backend/tutorly/routes/v1/patterns.py
"""
Recurring pattern routes - API v1

Versioned pattern endpoints under /api/v1/availability/patterns.
Saving a pattern as active regenerates its weekly slots; saving it
inactive removes them.

Endpoints:
    GET /                   → List the caller's patterns
    POST /                  → Create a pattern
    PUT /{pattern_id}       → Update a pattern
    DELETE /{pattern_id}    → Delete a pattern and its slots
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.params import Path

from ...api.dependencies import get_current_user, get_pattern_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.base import SuccessResponse
from ...schemas.pattern import PatternCreate, PatternResponse, PatternUpdate
from ...services.pattern_service import PatternService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["patterns-v1"])

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


@router.get("", response_model=List[PatternResponse])
async def list_patterns(
    current_user: User = Depends(get_current_user),
    pattern_service: PatternService = Depends(get_pattern_service),
) -> List[PatternResponse]:
    """List the caller's patterns, oldest first."""
    try:
        patterns = await asyncio.to_thread(pattern_service.list_patterns, current_user)
        return [PatternResponse.model_validate(p) for p in patterns]
    except DomainException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error listing patterns for user {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error"
        )


@router.post("", response_model=PatternResponse, status_code=status.HTTP_201_CREATED)
async def create_pattern(
    payload: PatternCreate,
    current_user: User = Depends(get_current_user),
    pattern_service: PatternService = Depends(get_pattern_service),
) -> PatternResponse:
    """
    Create a pattern.

    When created active its weekly slots are generated immediately; a 409
    means one of them would overlap an existing weekly slot.
    """
    try:
        pattern = await asyncio.to_thread(
            pattern_service.create_pattern,
            current_user,
            name=payload.name,
            days_of_week=payload.days_of_week,
            start_time=payload.start_time,
            duration_minutes=payload.duration_minutes,
            is_active=payload.is_active,
        )
        return PatternResponse.model_validate(pattern)
    except DomainException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error creating pattern for user {current_user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error"
        )


@router.put("/{pattern_id}", response_model=PatternResponse)
async def update_pattern(
    payload: PatternUpdate,
    pattern_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: User = Depends(get_current_user),
    pattern_service: PatternService = Depends(get_pattern_service),
) -> PatternResponse:
    """Apply a partial update and bring the generated slots in line."""
    try:
        pattern = await asyncio.to_thread(
            pattern_service.update_pattern,
            current_user,
            pattern_id,
            **{field: getattr(payload, field) for field in payload.model_fields_set},
        )
        return PatternResponse.model_validate(pattern)
    except DomainException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error updating pattern {pattern_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error"
        )


@router.delete("/{pattern_id}", response_model=SuccessResponse)
async def delete_pattern(
    pattern_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: User = Depends(get_current_user),
    pattern_service: PatternService = Depends(get_pattern_service),
) -> SuccessResponse:
    """Delete a pattern together with the weekly slots it generated."""
    try:
        await asyncio.to_thread(pattern_service.delete_pattern, current_user, pattern_id)
        return SuccessResponse(success=True, message="Pattern deleted")
    except DomainException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error deleting pattern {pattern_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error"
        )
