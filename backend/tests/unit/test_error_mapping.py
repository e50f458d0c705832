"""Unit tests for the domain-exception → HTTP mapping."""

import pytest

from carelog.domain.exceptions import (
    AuthenticationRequiredError,
    BulkOperationError,
    DomainValidationError,
    DuplicateEntityError,
    EntityNotFoundError,
    InvalidExportFormatError,
    PermissionDeniedError,
)
from carelog.presentation.api.v1.errors import to_http_exception


@pytest.mark.parametrize(
    "exc, status_code",
    [
        (EntityNotFoundError("Client", 7), 404),
        (DuplicateEntityError("Client", "name", "North"), 409),
        (DomainValidationError("bad"), 400),
        (InvalidExportFormatError("pdf"), 400),
        (AuthenticationRequiredError(), 401),
        (PermissionDeniedError("delete"), 403),
        (BulkOperationError("Client", 2, EntityNotFoundError("Outcome", 1)), 404),
    ],
)
def test_status_codes(exc, status_code):
    assert to_http_exception(exc).status_code == status_code


def test_bulk_error_detail_carries_index():
    exc = BulkOperationError("Client", 3, DuplicateEntityError("Client", "name", "A"))
    detail = to_http_exception(exc).detail
    assert detail["index"] == 3
    assert "already exists" in detail["error"]


def test_validation_error_detail_names_the_field():
    detail = to_http_exception(DomainValidationError("nope", field="date_from")).detail
    assert detail == {"message": "nope", "field": "date_from"}
