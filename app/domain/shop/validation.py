"""
Field validators for the shop bounded context.

Each validator is a pure function returning ``Result[Unit, AppError]``
so rules compose with ``bind``: the first broken rule wins and later
rules are not evaluated. Validation never performs IO.
"""

from typing import Optional

from email_validator import EmailNotValidError, validate_email

from app.shared.errors.app_error import AppError
from app.shared.result import Result, Unit

CATEGORY_NAME_MIN_LEN = 3
CATEGORY_NAME_MAX_LEN = 100
USERNAME_MIN_LEN = 3
PASSWORD_MIN_LEN = 6
PRODUCT_NAME_MIN_LEN = 3
PRODUCT_NAME_MAX_LEN = 100

ValidationResult = Result[Unit, AppError]


def require_text(value: Optional[str], label: str) -> ValidationResult:
    """Fail when the value is missing or only whitespace."""
    if value is None or not value.strip():
        return Result.failure(AppError.validation(f"{label} is required"))
    return Result.unit()


def check_min_length(value: str, minimum: int, label: str) -> ValidationResult:
    if len(value) < minimum:
        return Result.failure(
            AppError.validation(f"{label} must be at least {minimum} characters")
        )
    return Result.unit()


def check_max_length(value: str, maximum: int, label: str) -> ValidationResult:
    if len(value) > maximum:
        return Result.failure(
            AppError.validation(f"{label} cannot exceed {maximum} characters")
        )
    return Result.unit()


def check_length(
    value: Optional[str], minimum: int, maximum: int, label: str
) -> ValidationResult:
    """Require the value and keep its length within [minimum, maximum]."""
    return (
        require_text(value, label)
        .bind(lambda _: check_min_length(value, minimum, label))
        .bind(lambda _: check_max_length(value, maximum, label))
    )


def is_valid_email(value: str) -> bool:
    """Return True when the value is a syntactically valid address."""
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def check_email(value: Optional[str], label: str = "Email") -> ValidationResult:
    return require_text(value, label).bind(
        lambda _: Result.unit()
        if is_valid_email(value)
        else Result.failure(AppError.validation(f"A valid {label.lower()} is required"))
    )


def validate_category_name(name: Optional[str]) -> ValidationResult:
    return check_length(
        name, CATEGORY_NAME_MIN_LEN, CATEGORY_NAME_MAX_LEN, "Category name"
    )


def validate_password(password: Optional[str]) -> ValidationResult:
    return require_text(password, "Password").bind(
        lambda _: check_min_length(password, PASSWORD_MIN_LEN, "Password")
    )


def validate_registration(
    username: Optional[str], email: Optional[str], password: Optional[str]
) -> ValidationResult:
    """Username (3+ chars), well-formed email, password (6+ chars)."""
    return (
        require_text(username, "Username")
        .bind(lambda _: check_min_length(username, USERNAME_MIN_LEN, "Username"))
        .bind(lambda _: check_email(email))
        .bind(lambda _: validate_password(password))
    )


def validate_login(username: Optional[str], password: Optional[str]) -> ValidationResult:
    return require_text(username, "Username").bind(
        lambda _: require_text(password, "Password")
    )


def collect_product_errors(
    name: Optional[str], price, stock: Optional[int]
) -> list[str]:
    """Return every broken product rule, in field order.

    Used by the raise-based product path, which reports all problems at once.
    """
    errors: list[str] = []
    name_check = check_length(
        name, PRODUCT_NAME_MIN_LEN, PRODUCT_NAME_MAX_LEN, "Product name"
    )
    if name_check.is_failure:
        errors.append(name_check.error.message)
    if price is None or price <= 0:
        errors.append("Price must be greater than 0")
    if stock is None or stock < 0:
        errors.append("Stock cannot be negative")
    return errors
