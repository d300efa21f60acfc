"""
FastAPI router for categories.

All routes delegate to CategoryService and project its Result.
Each route lists the error categories its operation can produce;
anything else becomes a generic 500.
"""

from fastapi import APIRouter, Depends, Request
from starlette.responses import Response

from app.application.shop.category_service import CategoryService
from app.application.shop.dtos import CategoryCommand
from app.interfaces.shop.dependencies import get_category_service
from app.interfaces.shop.schemas import (
    CategoryRequest,
    CategoryResponse,
    ErrorResponse,
)
from app.shared.errors.app_error import ErrorType
from app.shared.errors.projection import created, no_content, ok, project

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get(
    "",
    response_model=list[CategoryResponse],
    summary="List categories",
)
async def list_categories(
    service: CategoryService = Depends(get_category_service),
) -> Response:
    """Return every active category."""
    return project(await service.find_all(), ok)


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get a category",
)
async def get_category(
    category_id: int,
    service: CategoryService = Depends(get_category_service),
) -> Response:
    return project(
        await service.find_by_id(category_id),
        ok,
        handled=(ErrorType.NOT_FOUND,),
    )


@router.post(
    "",
    status_code=201,
    response_model=CategoryResponse,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Create a category",
)
async def create_category(
    body: CategoryRequest,
    request: Request,
    service: CategoryService = Depends(get_category_service),
) -> Response:
    """Create a category. The Location header points to the new resource."""
    result = await service.create(CategoryCommand(name=body.name))
    return project(
        result,
        lambda dto: created(
            dto, str(request.url_for("get_category", category_id=dto.id))
        ),
        handled=(ErrorType.VALIDATION, ErrorType.CONFLICT),
    )


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Rename a category",
)
async def update_category(
    category_id: int,
    body: CategoryRequest,
    service: CategoryService = Depends(get_category_service),
) -> Response:
    return project(
        await service.update(category_id, CategoryCommand(name=body.name)),
        ok,
        handled=(ErrorType.VALIDATION, ErrorType.NOT_FOUND, ErrorType.CONFLICT),
    )


@router.delete(
    "/{category_id}",
    status_code=204,
    responses={404: {"model": ErrorResponse}},
    summary="Delete a category",
)
async def delete_category(
    category_id: int,
    service: CategoryService = Depends(get_category_service),
) -> Response:
    """Soft-delete a category."""
    return project(
        await service.delete(category_id),
        lambda _: no_content(),
        handled=(ErrorType.NOT_FOUND,),
    )
