"""
Dependency injection for the shop bounded context.

Provides FastAPI dependency functions that wire infrastructure
adapters into services via constructor injection.
These are the composition root for the shop context.

The notification hub and e-mail outbox are process-wide singletons
owned by the application lifespan (see ``app.main``).
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.application.shop.auth_service import AuthService
from app.application.shop.category_service import CategoryService
from app.application.shop.order_service import OrderService
from app.application.shop.product_service import ProductService
from app.application.shop.user_service import UserService
from app.core.config import settings
from app.domain.shop.entities import Principal
from app.infrastructure.shop.category_repository import CategoryRepositoryAdapter
from app.infrastructure.shop.database import get_engine
from app.infrastructure.shop.notifications import EmailOutbox, NotificationHub
from app.infrastructure.shop.order_repository import OrderRepositoryAdapter
from app.infrastructure.shop.product_repository import ProductRepositoryAdapter
from app.infrastructure.shop.security import BcryptPasswordHasher, JwtTokenService
from app.infrastructure.shop.user_repository import UserRepositoryAdapter
from app.shared.errors.app_error import AppError
from app.shared.result import Result

ADMIN_REQUIRED_MESSAGE = "Administrator role required"

# ── Singletons (initialized by the app lifespan) ─────────────────
_notification_hub: NotificationHub | None = None
_email_outbox: EmailOutbox | None = None


def set_notification_components(hub: NotificationHub, outbox: EmailOutbox) -> None:
    """Called by the app lifespan to inject the singleton instances."""
    global _notification_hub, _email_outbox
    _notification_hub = hub
    _email_outbox = outbox


def get_notification_hub() -> NotificationHub:
    if _notification_hub is None:
        raise RuntimeError(
            "NotificationHub not initialized. "
            "Ensure the app lifespan starts the notification components."
        )
    return _notification_hub


def get_email_outbox() -> EmailOutbox:
    if _email_outbox is None:
        raise RuntimeError(
            "EmailOutbox not initialized. "
            "Ensure the app lifespan starts the notification components."
        )
    return _email_outbox


@lru_cache(maxsize=1)
def get_password_hasher() -> BcryptPasswordHasher:
    return BcryptPasswordHasher(rounds=settings.bcrypt_rounds)


@lru_cache(maxsize=1)
def get_token_service() -> JwtTokenService:
    return JwtTokenService(
        secret=settings.jwt_secret,
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
        expire_minutes=settings.jwt_expire_minutes,
    )


# ------------------------------------------------------------------
# Services
# ------------------------------------------------------------------


def get_category_service() -> CategoryService:
    """Build CategoryService with its infrastructure dependencies."""
    return CategoryService(repository=CategoryRepositoryAdapter(get_engine()))


def get_user_service() -> UserService:
    """Build UserService with its infrastructure dependencies."""
    return UserService(
        user_repo=UserRepositoryAdapter(get_engine()),
        password_hasher=get_password_hasher(),
    )


def get_auth_service() -> AuthService:
    """Build AuthService with its infrastructure dependencies."""
    return AuthService(
        user_repo=UserRepositoryAdapter(get_engine()),
        password_hasher=get_password_hasher(),
        token_service=get_token_service(),
    )


def get_product_service() -> ProductService:
    """Build ProductService with its infrastructure dependencies."""
    engine = get_engine()
    return ProductService(
        product_repo=ProductRepositoryAdapter(engine),
        category_repo=CategoryRepositoryAdapter(engine),
        notifier=get_notification_hub(),
    )


def get_order_service() -> OrderService:
    """Build OrderService with its infrastructure dependencies."""
    engine = get_engine()
    return OrderService(
        order_repo=OrderRepositoryAdapter(engine),
        product_repo=ProductRepositoryAdapter(engine),
        user_repo=UserRepositoryAdapter(engine),
        notifier=get_notification_hub(),
        email_queue=get_email_outbox(),
    )


# ------------------------------------------------------------------
# Authentication
# ------------------------------------------------------------------

bearer_scheme = HTTPBearer(auto_error=False)


def require_admin(principal: Principal) -> Result[Principal, AppError]:
    if not principal.is_admin:
        return Result.failure(AppError.forbidden(ADMIN_REQUIRED_MESSAGE))
    return Result.success(principal)


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> Result[Principal, AppError]:
    """Resolve the bearer token into a Principal result.

    Routes bind their service call onto this result, so a missing or
    bad token short-circuits into Unauthorized without raising.
    """
    token = credentials.credentials if credentials else None
    return auth_service.authenticate(token)


def get_admin_principal(
    principal: Result[Principal, AppError] = Depends(get_current_principal),
) -> Result[Principal, AppError]:
    """Like ``get_current_principal``, with Forbidden for non-admins."""
    return principal.bind(require_admin)
