"""
FastAPI router for products.

Products use the raise-and-handle model: the service raises domain
exceptions and the centralized handlers in
``app.shared.errors.handlers`` turn them into responses.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from starlette.responses import Response

from app.application.shop.dtos import ProductCommand
from app.application.shop.product_service import ProductService
from app.interfaces.shop.dependencies import get_product_service
from app.interfaces.shop.schemas import ErrorResponse, ProductRequest, ProductResponse

router = APIRouter(prefix="/products", tags=["products"])


def _to_command(body: ProductRequest) -> ProductCommand:
    return ProductCommand(
        name=body.name,
        description=body.description or "",
        price=body.price,
        stock=body.stock,
        category_id=body.category_id,
    )


@router.get("", response_model=list[ProductResponse], summary="List products")
async def list_products(
    service: ProductService = Depends(get_product_service),
) -> list[ProductResponse]:
    return [ProductResponse(**vars(p)) for p in await service.find_all()]


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get a product",
)
async def get_product(
    product_id: int,
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    return ProductResponse(**vars(await service.find_by_id(product_id)))


@router.post(
    "",
    status_code=201,
    response_model=ProductResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Create a product",
)
async def create_product(
    body: ProductRequest,
    request: Request,
    service: ProductService = Depends(get_product_service),
) -> JSONResponse:
    """Create a product. Raises into the handlers on invalid input."""
    dto = await service.create(_to_command(body))
    return JSONResponse(
        status_code=201,
        content=jsonable_encoder(ProductResponse(**vars(dto))),
        headers={"Location": str(request.url_for("get_product", product_id=dto.id))},
    )


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Update a product",
)
async def update_product(
    product_id: int,
    body: ProductRequest,
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    return ProductResponse(**vars(await service.update(product_id, _to_command(body))))


@router.delete(
    "/{product_id}",
    status_code=204,
    responses={404: {"model": ErrorResponse}},
    summary="Delete a product",
)
async def delete_product(
    product_id: int,
    service: ProductService = Depends(get_product_service),
) -> Response:
    await service.delete(product_id)
    return Response(status_code=204)
