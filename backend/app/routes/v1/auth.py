# backend/app/routes/v1/auth.py
"""
Authentication routes - API v1

Versioned authentication endpoints under /api/v1/auth.
Handles registration, login, token refresh, email verification,
password reset and profile completion.

Endpoints:
    POST /register              → User registration
    POST /login                 → Credential login, sets the refresh cookie
    POST /refresh-token         → New access token from the refresh cookie
    POST /logout                → Clears the refresh cookie
    GET /me                     → Current user
    POST /verify-email          → Confirm an email address
    POST /resend-verification   → Send a new verification link
    POST /forgot-password       → Send a reset link (same answer for unknown emails)
    POST /reset-password        → Set a new password
    POST /complete-profile      → Fill in the fitness profile and goals
"""

import asyncio
import logging
from typing import NoReturn

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response, status

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_auth_service
from ...core.config import settings
from ...core.constants import REFRESH_COOKIE_MAX_AGE_DEFAULT, REFRESH_COOKIE_MAX_AGE_REMEMBER
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.auth import (
    AccessTokenPayload,
    CompleteProfileRequest,
    EmailRequest,
    LoginPayload,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenRequest,
    UserEnvelope,
    UserResponse,
)
from ...schemas.base_responses import ApiResponse, MessageResponse
from ...services.auth_service import AuthService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["auth-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if exc.status_code >= 500:
        # The app-level handler logs these and masks the message
        raise exc
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _set_refresh_cookie(response: Response, token: str, remember_me: bool) -> None:
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=token,
        max_age=REFRESH_COOKIE_MAX_AGE_REMEMBER if remember_me else REFRESH_COOKIE_MAX_AGE_DEFAULT,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        path="/",
    )


@router.post(
    "/register", response_model=ApiResponse[UserEnvelope], status_code=status.HTTP_201_CREATED
)
async def register(
    payload: RegisterRequest = Body(...),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[UserEnvelope]:
    """
    Register a new user.

    The account starts unverified on the FREE tier; a verification link
    is emailed.
    """
    try:
        user = await asyncio.to_thread(
            auth_service.register_user, payload.email, payload.password, payload.name
        )
    except DomainException as e:
        handle_domain_exception(e)

    return ApiResponse(
        message="Registration successful. Please check your email to verify your account.",
        data=UserEnvelope(user=UserResponse.from_user(user)),
    )


@router.post("/login", response_model=ApiResponse[LoginPayload])
async def login(
    response: Response,
    payload: LoginRequest = Body(...),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[LoginPayload]:
    """
    Log in with email and password.

    Returns a bearer access token and sets the refresh token as an
    httpOnly cookie.
    """
    try:
        user = await asyncio.to_thread(
            auth_service.authenticate_user, payload.email, payload.password
        )
    except DomainException as e:
        logger.info(f"Failed login attempt for {payload.email}")
        handle_domain_exception(e)

    tokens = auth_service.issue_tokens(user)
    _set_refresh_cookie(response, tokens.refresh_token, payload.remember_me)

    return ApiResponse(
        message="Login successful",
        data=LoginPayload(
            user=UserResponse.from_user(user),
            access_token=tokens.access_token,
            expires_in=tokens.expires_in,
        ),
    )


@router.post("/refresh-token", response_model=ApiResponse[AccessTokenPayload])
async def refresh_token(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[AccessTokenPayload]:
    """Issue a new access token from the refresh cookie."""
    cookie = request.cookies.get(settings.refresh_cookie_name)
    try:
        tokens = await asyncio.to_thread(auth_service.refresh_access_token, cookie)
    except DomainException as e:
        handle_domain_exception(e)

    return ApiResponse(
        data=AccessTokenPayload(access_token=tokens.access_token, expires_in=tokens.expires_in)
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    """Clear the refresh cookie. Access tokens simply expire."""
    response.delete_cookie(key=settings.refresh_cookie_name, path="/")
    logger.info(f"User {current_user.id} logged out")
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=ApiResponse[UserEnvelope])
async def read_users_me(
    current_user: User = Depends(get_current_user),
) -> ApiResponse[UserEnvelope]:
    return ApiResponse(data=UserEnvelope(user=UserResponse.from_user(current_user)))


@router.post("/verify-email", response_model=ApiResponse[UserEnvelope])
async def verify_email(
    payload: TokenRequest = Body(...),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[UserEnvelope]:
    try:
        user = await asyncio.to_thread(auth_service.verify_email, payload.token)
    except DomainException as e:
        handle_domain_exception(e)

    return ApiResponse(
        message="Email verified successfully",
        data=UserEnvelope(user=UserResponse.from_user(user)),
    )


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(
    payload: EmailRequest = Body(...),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    try:
        await asyncio.to_thread(auth_service.resend_verification, payload.email)
    except DomainException as e:
        handle_domain_exception(e)

    return MessageResponse(message="Verification email sent")


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    payload: EmailRequest = Body(...),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """
    Request a password reset link.

    Answers identically whether or not the email is registered.
    """
    message = await asyncio.to_thread(auth_service.request_password_reset, payload.email)
    return MessageResponse(message=message)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    payload: ResetPasswordRequest = Body(...),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    try:
        await asyncio.to_thread(auth_service.reset_password, payload.token, payload.password)
    except DomainException as e:
        handle_domain_exception(e)

    return MessageResponse(message="Password reset successfully")


@router.post("/complete-profile", response_model=ApiResponse[UserEnvelope])
async def complete_profile(
    payload: CompleteProfileRequest = Body(...),
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse[UserEnvelope]:
    try:
        user = await asyncio.to_thread(auth_service.complete_profile, current_user, payload)
    except DomainException as e:
        handle_domain_exception(e)

    return ApiResponse(
        message="Profile completed successfully",
        data=UserEnvelope(user=UserResponse.from_user(user)),
    )
