"""
Tests for the response projector.

Validates the error-type to status mapping, the handled-set fallback
to 500, success helpers, and WebSocket rejections.
"""

import json

import pytest

from app.shared.errors.app_error import AppError, ErrorType
from app.shared.errors.projection import (
    INTERNAL_ERROR_MESSAGE,
    created,
    http_status_for,
    no_content,
    ok,
    project,
    to_ws_rejection,
    ws_close_code_for,
)
from app.shared.result import UNIT, Result


def _body(response) -> dict:
    return json.loads(response.body)


class TestStatusMapping:
    """Every error category maps to exactly one HTTP status."""

    @pytest.mark.parametrize(
        ("error", "status"),
        [
            (AppError.not_found("x"), 404),
            (AppError.validation("x"), 400),
            (AppError.conflict("x"), 409),
            (AppError.unauthorized("x"), 401),
            (AppError.forbidden("x"), 403),
            (AppError.business_rule("x"), 400),
            (AppError.internal("x"), 500),
        ],
    )
    def test_status_for_each_category(self, error: AppError, status: int) -> None:
        assert http_status_for(error) == status

    def test_unhandled_category_becomes_500(self) -> None:
        error = AppError.conflict("duplicate")
        assert http_status_for(error, handled=(ErrorType.NOT_FOUND,)) == 500


class TestProject:
    """Tests for project()."""

    def test_success_uses_success_builder(self) -> None:
        response = project(Result.success({"id": 1}), ok, handled=())
        assert response.status_code == 200
        assert _body(response) == {"id": 1}

    def test_handled_failure_keeps_message(self) -> None:
        response = project(
            Result.failure(AppError.not_found("Category with id 42 not found")),
            ok,
            handled=(ErrorType.NOT_FOUND,),
        )
        assert response.status_code == 404
        assert _body(response) == {"message": "Category with id 42 not found"}

    def test_validation_failure_lists_field_errors(self) -> None:
        error = AppError.validation("Invalid order data", ["lines[0].quantity must be greater than 0"])
        response = project(Result.failure(error), ok, handled=(ErrorType.VALIDATION,))
        assert response.status_code == 400
        assert _body(response)["errors"] == ["lines[0].quantity must be greater than 0"]

    def test_unhandled_failure_hides_detail(self) -> None:
        response = project(
            Result.failure(AppError.conflict("secret detail")),
            ok,
            handled=(ErrorType.NOT_FOUND,),
        )
        assert response.status_code == 500
        assert _body(response) == {"message": INTERNAL_ERROR_MESSAGE}

    def test_internal_failure_hides_detail(self) -> None:
        response = project(
            Result.failure(AppError.internal("db password wrong")),
            ok,
            handled=(ErrorType.INTERNAL,),
        )
        assert response.status_code == 500
        assert "db password" not in response.body.decode()


class TestSuccessHelpers:
    """Tests for ok / created / no_content."""

    def test_created_sets_location(self) -> None:
        response = created({"id": 7}, "http://testserver/api/v1/categories/7")
        assert response.status_code == 201
        assert response.headers["location"] == "http://testserver/api/v1/categories/7"

    def test_no_content_has_empty_body(self) -> None:
        response = project(Result.success(UNIT), lambda _: no_content())
        assert response.status_code == 204
        assert response.body == b""


class TestWebSocketProjection:
    """Tests for the WebSocket rejection mapping."""

    def test_unauthorized_closes_with_policy_violation(self) -> None:
        error = AppError.unauthorized("Invalid or expired token")
        assert ws_close_code_for(error) == 1008
        assert to_ws_rejection(error) == {
            "event": "error",
            "type": "unauthorized",
            "status": 401,
            "message": "Invalid or expired token",
        }

    def test_validation_closes_with_unsupported_data(self) -> None:
        assert ws_close_code_for(AppError.validation("bad frame")) == 1003

    def test_other_errors_close_with_internal_error(self) -> None:
        error = AppError.internal("boom")
        assert ws_close_code_for(error) == 1011
        assert to_ws_rejection(error)["message"] == INTERNAL_ERROR_MESSAGE
