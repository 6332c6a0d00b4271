# backend/app/routes/v1/sessions.py
"""
Training session routes - API v1

Versioned session endpoints under /api/v1/training.

Endpoints:
    GET /sessions                        → Caller's sessions, newest first
    POST /sessions/{session_id}/cancel   → Cancel a scheduled session (owner)
"""

import asyncio
import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_booking_service
from ...core.exceptions import DomainException
from ...models.training_session import SessionStatus
from ...models.user import User
from ...schemas.base_responses import ApiResponse
from ...schemas.training_session import SessionEnvelope, SessionListEnvelope, SessionResponse
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["sessions-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if exc.status_code >= 500:
        # The app-level handler logs these and masks the message
        raise exc
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get("/sessions", response_model=ApiResponse[SessionListEnvelope])
async def list_my_sessions(
    session_status: Optional[SessionStatus] = Query(None, alias="status"),
    upcoming: bool = Query(False),
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> ApiResponse[SessionListEnvelope]:
    """
    List the caller's sessions.

    ``upcoming=true`` returns only SCHEDULED sessions that have not started
    yet and ignores ``status``.
    """
    try:
        sessions = await asyncio.to_thread(
            service.list_user_sessions, current_user, session_status, upcoming
        )
    except DomainException as e:
        handle_domain_exception(e)

    return ApiResponse(
        data=SessionListEnvelope(sessions=[SessionResponse.from_session(s) for s in sessions])
    )


@router.post("/sessions/{session_id}/cancel", response_model=ApiResponse[SessionEnvelope])
async def cancel_session(
    session_id: str = Path(..., min_length=1, max_length=26),
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> ApiResponse[SessionEnvelope]:
    """
    Cancel a session.

    Only the booking user may cancel, only while the session is SCHEDULED,
    and no later than 24 hours before it starts.
    """
    try:
        session = await asyncio.to_thread(service.cancel_session, current_user, session_id)
    except DomainException as e:
        handle_domain_exception(e)

    logger.info(f"Session {session_id} cancelled by user {current_user.id}")
    return ApiResponse(
        message="Session cancelled successfully",
        data=SessionEnvelope(session=SessionResponse.from_session(session)),
    )
