"""Unit tests for the error taxonomy."""

import pytest

from opsdesk.core.errors import (
    ErrorCode,
    ErrorKind,
    NotFoundError,
    StateConflictError,
    TaskLifecycleError,
    ValidationError,
    build_error_response,
)


@pytest.mark.unit
class TestTaskLifecycleErrors:
    """Tests for the error classes."""

    @pytest.mark.parametrize(
        ("error_class", "kind", "status_code"),
        [
            (ValidationError, ErrorKind.VALIDATION, 400),
            (NotFoundError, ErrorKind.NOT_FOUND, 404),
            (StateConflictError, ErrorKind.STATE_CONFLICT, 409),
        ],
    )
    def test_kind_and_status_code(self, error_class, kind, status_code):
        error = error_class("boom", "SOME_CODE")

        assert isinstance(error, TaskLifecycleError)
        assert error.kind is kind
        assert error.status_code == status_code
        assert error.code == "SOME_CODE"
        assert str(error) == "boom"

    def test_invalid_id_code(self):
        assert ErrorCode.invalid_id("inspector") == "INVALID_INSPECTOR_ID"


@pytest.mark.unit
class TestBuildErrorResponse:
    """Tests for build_error_response."""

    def test_response_carries_code_and_status(self):
        error = StateConflictError("Work order is already cancelled", ErrorCode.ALREADY_CANCELLED)

        response = build_error_response(error)

        assert response.code == "ALREADY_CANCELLED"
        assert response.message == "Work order is already cancelled"
        assert response.kind is ErrorKind.STATE_CONFLICT
        assert response.status_code == 409
        assert response.model_dump(mode="json")["kind"] == "state_conflict"
