"""Authentication API routes.

Provides endpoints for registration, login, token refresh, logout, the
current user's profile, email verification and password reset. Business
rule failures surface as ``AuthError`` and are rendered by the exception
handler registered in ``app.py``.
"""

from dataclasses import asdict

from fastapi import APIRouter, Request, status

from gatehouse.core.logging import get_logger
from gatehouse.infrastructure.api.dependencies import AuthServiceDep, CurrentSession
from gatehouse.infrastructure.api.schemas import (
    EmailRequest,
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    TokenPairResponse,
    UserProfileResponse,
    VerifyEmailRequest,
)

logger = get_logger(__name__)

router = APIRouter()

FORGOT_PASSWORD_MESSAGE = "If the email is registered, a password reset link has been sent."


def _client_info(request: Request) -> tuple[str | None, str | None]:
    user_agent = request.headers.get("user-agent")
    ip_address = request.client.host if request.client else None
    return user_agent, ip_address


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=RegisterResponse,
    responses={409: {"model": ErrorResponse, "description": "Email already registered"}},
)
async def register(body: RegisterRequest, auth_service: AuthServiceDep) -> RegisterResponse:
    """Register a new user and send a verification email."""
    result = await auth_service.register(
        name=body.name.strip(),
        email=body.email,
        password=body.password,
    )
    return RegisterResponse.model_validate(asdict(result))


@router.post(
    "/login",
    response_model=TokenPairResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        403: {"model": ErrorResponse, "description": "Account inactive or locked"},
    },
)
async def login(
    body: LoginRequest, request: Request, auth_service: AuthServiceDep
) -> TokenPairResponse:
    """Authenticate with email and password.

    All credential failures return the same generic 401 message, and a
    dummy hash is verified for unknown users to keep timing uniform.
    """
    user_agent, ip_address = _client_info(request)
    tokens = await auth_service.login(
        email=body.email,
        password=body.password,
        user_agent=user_agent,
        ip_address=ip_address,
    )
    return TokenPairResponse(access_token=tokens.access_token, refresh_token=tokens.refresh_token)


@router.post(
    "/refresh",
    response_model=TokenPairResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid refresh token"}},
)
async def refresh(
    body: RefreshRequest, request: Request, auth_service: AuthServiceDep
) -> TokenPairResponse:
    """Rotate a refresh token. The presented token cannot be used again."""
    user_agent, ip_address = _client_info(request)
    tokens = await auth_service.refresh(
        refresh_token=body.refresh_token,
        user_agent=user_agent,
        ip_address=ip_address,
    )
    return TokenPairResponse(access_token=tokens.access_token, refresh_token=tokens.refresh_token)


@router.post(
    "/logout",
    response_model=MessageResponse,
    responses={401: {"model": ErrorResponse, "description": "Missing or invalid token"}},
)
async def logout(current: CurrentSession, auth_service: AuthServiceDep) -> MessageResponse:
    """Revoke the session of the presented access token."""
    await auth_service.logout(current)
    return MessageResponse(message="Logged out")


@router.get(
    "/me",
    response_model=UserProfileResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Missing or invalid token"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def me(current: CurrentSession, auth_service: AuthServiceDep) -> UserProfileResponse:
    """Return the authenticated user's profile."""
    profile = await auth_service.get_profile(current.user_id)
    return UserProfileResponse.model_validate(profile)


@router.post(
    "/verify-email",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Token used or expired"},
        404: {"model": ErrorResponse, "description": "Unknown token"},
    },
)
async def verify_email(body: VerifyEmailRequest, auth_service: AuthServiceDep) -> MessageResponse:
    """Verify an email address with the emailed token."""
    await auth_service.verify_email(body.token)
    return MessageResponse(message="Email verified successfully")


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(body: EmailRequest, auth_service: AuthServiceDep) -> MessageResponse:
    """Request a password reset email.

    The response is identical whether or not the email is registered.
    """
    await auth_service.forgot_password(body.email)
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Token used or expired"},
        404: {"model": ErrorResponse, "description": "Unknown token"},
    },
)
async def reset_password(
    body: ResetPasswordRequest, auth_service: AuthServiceDep
) -> MessageResponse:
    """Set a new password. All of the user's sessions are revoked."""
    await auth_service.reset_password(body.token, body.password)
    return MessageResponse(message="Password reset successfully")
