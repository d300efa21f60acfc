"""
FastAPI router for sign-up and sign-in.

Both routes are rate limited with the heavy limit. Sign-in failures
always carry the same message, whichever credential was wrong.
"""

from fastapi import APIRouter, Depends, Request
from starlette.responses import Response

from app.application.shop.auth_service import AuthService
from app.application.shop.dtos import LoginCommand, RegisterCommand
from app.interfaces.shop.dependencies import get_auth_service
from app.interfaces.shop.schemas import (
    AuthResponse,
    ErrorResponse,
    SignInRequest,
    SignUpRequest,
)
from app.shared.errors.app_error import ErrorType
from app.shared.errors.projection import created, ok, project
from app.shared.security.rate_limiting import HEAVY_RATE_LIMIT, limiter

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/signup",
    status_code=201,
    response_model=AuthResponse,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Register a new user",
)
@limiter.limit(HEAVY_RATE_LIMIT)
async def sign_up(
    request: Request,
    body: SignUpRequest,
    service: AuthService = Depends(get_auth_service),
) -> Response:
    """Register with the default role and return a session token."""
    result = await service.sign_up(
        RegisterCommand(username=body.username, email=body.email, password=body.password)
    )
    return project(
        result,
        lambda auth: created(auth, str(request.url_for("get_me"))),
        handled=(ErrorType.VALIDATION, ErrorType.CONFLICT),
    )


@router.post(
    "/signin",
    response_model=AuthResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
    summary="Sign in",
)
@limiter.limit(HEAVY_RATE_LIMIT)
async def sign_in(
    request: Request,
    body: SignInRequest,
    service: AuthService = Depends(get_auth_service),
) -> Response:
    result = await service.sign_in(
        LoginCommand(username=body.username, password=body.password)
    )
    return project(
        result,
        ok,
        handled=(ErrorType.VALIDATION, ErrorType.UNAUTHORIZED),
    )
