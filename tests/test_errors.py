import pytest

from polkarena.api.errors import http_error_from_service, status_for
from polkarena.services.error_codes import ErrorCode
from polkarena.services.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ServiceError,
    ShortCodeLookupError,
    UpstreamError,
    ValidationError,
)


@pytest.mark.parametrize(
    "error_type, status",
    [
        (NotFoundError, 404),
        (PermissionDeniedError, 403),
        (ConflictError, 409),
        (ValidationError, 422),
        (UpstreamError, 502),
        (ShortCodeLookupError, 502),
        (ServiceError, 500),
    ],
)
def test_status_for(error_type, status):
    assert status_for(error_type("X")) == status


def test_enum_codes_are_normalized():
    err = ConflictError(ErrorCode.SUBMISSION_IN_PROGRESS, "busy")
    assert err.code == "SUBMISSION_IN_PROGRESS"
    assert err.to_detail() == {"code": "SUBMISSION_IN_PROGRESS", "message": "busy"}


def test_message_defaults_to_code():
    http_error = http_error_from_service(NotFoundError("EVENT_NOT_FOUND"))
    assert http_error.status_code == 404
    assert http_error.detail == {"code": "EVENT_NOT_FOUND", "message": "EVENT_NOT_FOUND"}
