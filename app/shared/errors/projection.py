"""
Response projector: Result to protocol response.

Routes hand the Result of a service call to ``project`` together with
the error categories that operation is documented to produce. The
projector pattern-matches through ``Result.match``; it never intercepts
exceptions. Categories outside the handled set, and INTERNAL, become a
generic 500 so no internal detail reaches the client.
"""

import logging
from typing import Any, Callable, Iterable

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.responses import Response

from app.shared.errors.app_error import AppError, ErrorType
from app.shared.result import Result

logger = logging.getLogger(__name__)

HTTP_200 = 200
HTTP_201 = 201
HTTP_204 = 204
HTTP_500 = 500

INTERNAL_ERROR_MESSAGE = "Internal server error"

HTTP_STATUS_BY_ERROR_TYPE: dict[ErrorType, int] = {
    ErrorType.NOT_FOUND: 404,
    ErrorType.VALIDATION: 400,
    ErrorType.CONFLICT: 409,
    ErrorType.UNAUTHORIZED: 401,
    ErrorType.FORBIDDEN: 403,
    ErrorType.BUSINESS_RULE: 400,
    ErrorType.INTERNAL: HTTP_500,
}

WS_POLICY_VIOLATION = 1008
WS_UNSUPPORTED_DATA = 1003
WS_INTERNAL_ERROR = 1011

WS_CLOSE_CODE_BY_ERROR_TYPE: dict[ErrorType, int] = {
    ErrorType.UNAUTHORIZED: WS_POLICY_VIOLATION,
    ErrorType.FORBIDDEN: WS_POLICY_VIOLATION,
    ErrorType.VALIDATION: WS_UNSUPPORTED_DATA,
}


def http_status_for(error: AppError, handled: Iterable[ErrorType] | None = None) -> int:
    """Return the HTTP status for an error, 500 when it is not handled."""
    if handled is not None and error.type not in set(handled):
        return HTTP_500
    return HTTP_STATUS_BY_ERROR_TYPE.get(error.type, HTTP_500)


def error_body(error: AppError) -> dict[str, Any]:
    """Build the JSON body for a client-visible error."""
    body: dict[str, Any] = {"message": error.message}
    if error.validation_errors:
        body["errors"] = list(error.validation_errors)
    return body


def error_response(
    error: AppError, handled: Iterable[ErrorType] | None = None
) -> JSONResponse:
    """Map an AppError onto a JSON error response."""
    status_code = http_status_for(error, handled)
    if status_code == HTTP_500:
        logger.error("Unhandled application error: %s", error)
        return JSONResponse(
            status_code=HTTP_500, content={"message": INTERNAL_ERROR_MESSAGE}
        )
    logger.info("Request rejected with %d: %s", status_code, error)
    return JSONResponse(status_code=status_code, content=error_body(error))


def ok(body: Any) -> JSONResponse:
    return JSONResponse(status_code=HTTP_200, content=jsonable_encoder(body))


def created(body: Any, location: str) -> JSONResponse:
    return JSONResponse(
        status_code=HTTP_201,
        content=jsonable_encoder(body),
        headers={"Location": location},
    )


def no_content() -> Response:
    return Response(status_code=HTTP_204)


def project(
    result: Result[Any, AppError],
    on_success: Callable[[Any], Response],
    handled: Iterable[ErrorType] = (),
) -> Response:
    """Project a service Result onto an HTTP response.

    Args:
        result: Outcome of a service call.
        on_success: Builds the success response from the value.
        handled: Error categories this operation maps to their own status.

    Returns:
        The response for whichever variant the Result holds.
    """
    handled = tuple(handled)
    return result.match(
        on_success=on_success,
        on_failure=lambda error: error_response(error, handled),
    )


# ------------------------------------------------------------------
# WebSocket channel
# ------------------------------------------------------------------


def ws_close_code_for(error: AppError) -> int:
    return WS_CLOSE_CODE_BY_ERROR_TYPE.get(error.type, WS_INTERNAL_ERROR)


def to_ws_rejection(error: AppError) -> dict[str, Any]:
    """Build the rejection event sent before closing a WebSocket."""
    status_code = http_status_for(error)
    message = (
        INTERNAL_ERROR_MESSAGE if status_code == HTTP_500 else error.message
    )
    return {
        "event": "error",
        "type": error.type.value,
        "status": status_code,
        "message": message,
    }
