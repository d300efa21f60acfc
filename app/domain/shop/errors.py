"""
Domain exceptions for the product resource family.

Products stay on the raise-and-handle model: their service raises these
errors and ``app.shared.errors.handlers`` maps them to HTTP responses.
Every other resource returns ``AppError`` values through ``Result``.
No framework imports allowed.
"""


class ShopDomainError(Exception):
    """Base error for the raise-based product path."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class ProductNotFoundError(ShopDomainError):
    """Raised when a product does not exist or was deleted."""

    def __init__(self, product_id: int) -> None:
        super().__init__(f"Product with id {product_id} not found")
        self.product_id = product_id


class CategoryNotFoundError(ShopDomainError):
    """Raised when a product references a missing category."""

    def __init__(self, category_id: int) -> None:
        super().__init__(f"Category with id {category_id} not found")
        self.category_id = category_id


class ProductValidationError(ShopDomainError):
    """Raised when product input breaks a field rule."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("Invalid product data")
        self.errors = errors
