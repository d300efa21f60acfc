"""
FastAPI router for users.

``/users/me`` serves any signed-in user; every other route requires
the ADMIN role. The caller's principal arrives as a Result, and each
route binds its service call onto it, so authentication failures flow
through the same projection as service failures.
"""

from fastapi import APIRouter, Depends, Request
from starlette.responses import Response

from app.application.shop.dtos import RegisterCommand, UserUpdateCommand
from app.application.shop.user_service import UserService
from app.domain.shop.entities import Principal
from app.interfaces.shop.dependencies import (
    get_admin_principal,
    get_current_principal,
    get_user_service,
)
from app.interfaces.shop.schemas import (
    ErrorResponse,
    SignUpRequest,
    UserResponse,
    UserUpdateRequest,
)
from app.shared.errors.app_error import AppError, ErrorType
from app.shared.errors.projection import created, no_content, ok, project
from app.shared.result import Result

router = APIRouter(prefix="/users", tags=["users"])

_AUTH_ERRORS = (ErrorType.UNAUTHORIZED, ErrorType.FORBIDDEN)


@router.get(
    "/me",
    response_model=UserResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Get the signed-in user",
)
async def get_me(
    principal: Result[Principal, AppError] = Depends(get_current_principal),
    service: UserService = Depends(get_user_service),
) -> Response:
    result = await principal.bind_async(lambda p: service.find_by_id(p.user_id))
    return project(result, ok, handled=(ErrorType.UNAUTHORIZED, ErrorType.NOT_FOUND))


@router.get(
    "",
    response_model=list[UserResponse],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    summary="List users",
)
async def list_users(
    principal: Result[Principal, AppError] = Depends(get_admin_principal),
    service: UserService = Depends(get_user_service),
) -> Response:
    result = await principal.bind_async(lambda _: service.find_all())
    return project(result, ok, handled=_AUTH_ERRORS)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Get a user",
)
async def get_user(
    user_id: int,
    principal: Result[Principal, AppError] = Depends(get_admin_principal),
    service: UserService = Depends(get_user_service),
) -> Response:
    result = await principal.bind_async(lambda _: service.find_by_id(user_id))
    return project(result, ok, handled=(*_AUTH_ERRORS, ErrorType.NOT_FOUND))


@router.post(
    "",
    status_code=201,
    response_model=UserResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Create a user",
)
async def create_user(
    body: SignUpRequest,
    request: Request,
    principal: Result[Principal, AppError] = Depends(get_admin_principal),
    service: UserService = Depends(get_user_service),
) -> Response:
    command = RegisterCommand(
        username=body.username, email=body.email, password=body.password
    )
    result = await principal.bind_async(lambda _: service.create(command))
    return project(
        result,
        lambda dto: created(dto, str(request.url_for("get_user", user_id=dto.id))),
        handled=(*_AUTH_ERRORS, ErrorType.VALIDATION, ErrorType.CONFLICT),
    )


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Update a user's email or password",
)
async def update_user(
    user_id: int,
    body: UserUpdateRequest,
    principal: Result[Principal, AppError] = Depends(get_admin_principal),
    service: UserService = Depends(get_user_service),
) -> Response:
    command = UserUpdateCommand(email=body.email, password=body.password)
    result = await principal.bind_async(lambda _: service.update(user_id, command))
    return project(
        result,
        ok,
        handled=(
            *_AUTH_ERRORS,
            ErrorType.VALIDATION,
            ErrorType.NOT_FOUND,
            ErrorType.CONFLICT,
        ),
    )


@router.delete(
    "/{user_id}",
    status_code=204,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Delete a user",
)
async def delete_user(
    user_id: int,
    principal: Result[Principal, AppError] = Depends(get_admin_principal),
    service: UserService = Depends(get_user_service),
) -> Response:
    result = await principal.bind_async(lambda _: service.delete(user_id))
    return project(
        result,
        lambda _: no_content(),
        handled=(*_AUTH_ERRORS, ErrorType.NOT_FOUND),
    )
