"""
Rate limiting configuration and setup.

Uses slowapi to enforce per-endpoint rate limits.
The authentication endpoints carry the stricter ``rate_limit_heavy``
limit to slow down credential stuffing.
"""

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.core.config import settings

DEFAULT_RATE_LIMIT = settings.rate_limit_default
HEAVY_RATE_LIMIT = settings.rate_limit_heavy

limiter = Limiter(key_func=get_remote_address, default_limits=[DEFAULT_RATE_LIMIT])


async def rate_limit_exceeded_handler(
    _request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Handle rate limit exceeded errors with a clean JSON response.

    Args:
        _request: The incoming HTTP request.
        exc: The rate limit exceeded exception.

    Returns:
        A 429 JSON response in the same shape as every other error.
    """
    return JSONResponse(
        status_code=429,
        content={"message": "Rate limit exceeded", "errors": [str(exc.detail)]},
    )
