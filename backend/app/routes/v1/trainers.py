# backend/app/routes/v1/trainers.py
"""
Trainer routes - API v1

Versioned trainer endpoints under /api/v1/training.
All business logic delegated to TrainerService and BookingService.

Endpoints:
    GET /trainers                       → Filtered, paginated directory (public)
    GET /trainers/specialties           → Distinct specialties (public)
    GET /trainers/{trainer_id}          → Trainer detail (public)
    POST /trainers/{trainer_id}/book    → Book a session (subscribed user)
"""

import asyncio
from decimal import Decimal
import logging
from typing import Literal, NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, status

from ...api.dependencies.auth import require_subscription
from ...api.dependencies.services import get_booking_service, get_trainer_service
from ...core.constants import DEFAULT_PAGE_SIZE
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.base_responses import ApiResponse, PaginationMeta
from ...schemas.trainer import (
    SpecialtiesEnvelope,
    TrainerDetailEnvelope,
    TrainerDetailResponse,
    TrainerFilterParams,
    TrainerListEnvelope,
    TrainerSummaryResponse,
)
from ...schemas.training_session import SessionBookingRequest, SessionEnvelope, SessionResponse
from ...services.booking_service import BookingService
from ...services.trainer_service import TrainerService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["trainers-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if exc.status_code >= 500:
        # The app-level handler logs these and masks the message
        raise exc
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


# Static routes first (before dynamic routes with path parameters)


@router.get("/trainers", response_model=ApiResponse[TrainerListEnvelope])
async def list_trainers(
    page: int = Query(1),
    limit: int = Query(DEFAULT_PAGE_SIZE),
    specialty: Optional[str] = Query(None),
    min_rate: Optional[Decimal] = Query(None, alias="minRate"),
    max_rate: Optional[Decimal] = Query(None, alias="maxRate"),
    min_rating: Optional[float] = Query(None, alias="minRating"),
    search: Optional[str] = Query(None),
    sort_by: str = Query("rating", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    service: TrainerService = Depends(get_trainer_service),
) -> ApiResponse[TrainerListEnvelope]:
    """
    Browse verified, available trainers.

    Public endpoint - no authentication required. Each trainer carries
    its three most recent reviews.
    """
    # Bounds are enforced by TrainerFilterParams; failures answer 400
    params = TrainerFilterParams(
        page=page,
        limit=limit,
        specialty=specialty,
        min_rate=min_rate,
        max_rate=max_rate,
        min_rating=min_rating,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    try:
        result = await asyncio.to_thread(service.list_trainers, params)
    except DomainException as e:
        handle_domain_exception(e)

    return ApiResponse(
        data=TrainerListEnvelope(
            trainers=[
                TrainerSummaryResponse.from_trainer(t, result.recent_reviews.get(t.id, []))
                for t in result.trainers
            ],
            pagination=PaginationMeta.build(result.page, result.limit, result.total),
        )
    )


@router.get("/trainers/specialties", response_model=ApiResponse[SpecialtiesEnvelope])
async def list_specialties(
    service: TrainerService = Depends(get_trainer_service),
) -> ApiResponse[SpecialtiesEnvelope]:
    """Sorted distinct specialties across the public directory."""
    specialties = await asyncio.to_thread(service.list_specialties)
    return ApiResponse(data=SpecialtiesEnvelope(specialties=specialties))


@router.get("/trainers/{trainer_id}", response_model=ApiResponse[TrainerDetailEnvelope])
async def get_trainer(
    trainer_id: str = Path(..., min_length=1, max_length=26),
    service: TrainerService = Depends(get_trainer_service),
) -> ApiResponse[TrainerDetailEnvelope]:
    """
    Trainer detail page.

    Includes every review (newest first) and up to ten upcoming sessions.
    """
    try:
        detail = await asyncio.to_thread(service.get_trainer_detail, trainer_id)
    except DomainException as e:
        handle_domain_exception(e)

    return ApiResponse(
        data=TrainerDetailEnvelope(
            trainer=TrainerDetailResponse.from_detail(
                detail.trainer, detail.reviews, detail.upcoming_sessions
            )
        )
    )


@router.post(
    "/trainers/{trainer_id}/book",
    response_model=ApiResponse[SessionEnvelope],
    status_code=status.HTTP_201_CREATED,
)
async def book_session(
    trainer_id: str = Path(..., min_length=1, max_length=26),
    payload: SessionBookingRequest = Body(...),
    current_user: User = Depends(require_subscription()),
    service: BookingService = Depends(get_booking_service),
) -> ApiResponse[SessionEnvelope]:
    """
    Book a training session.

    Requires an active subscription on one of the booking tiers. The price
    is fixed at booking time from the trainer's hourly rate.
    """
    try:
        session = await asyncio.to_thread(
            service.book_session,
            current_user,
            trainer_id,
            payload.scheduled_at,
            payload.duration,
            payload.type,
            payload.notes,
        )
    except DomainException as e:
        handle_domain_exception(e)

    return ApiResponse(
        message="Session booked successfully",
        data=SessionEnvelope(session=SessionResponse.from_session(session)),
    )
