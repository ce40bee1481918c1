from __future__ import annotations

import logging

import pytest
from django.db import OperationalError
from rest_framework.exceptions import ParseError

from modules.core.exceptions import (
    Forbidden,
    InvalidRequest,
    ServiceError,
    UpstreamFailure,
    api_exception_handler,
)
from modules.core.results import ServiceResult, service_boundary

pytestmark = pytest.mark.unit


@service_boundary("test.op")
def _run(outcome):
    if isinstance(outcome, Exception):
        raise outcome
    return outcome


class TestServiceBoundary:
    def test_success(self):
        result = _run("value")
        assert result.ok
        assert result.value == "value"
        assert result.unwrap() == "value"

    def test_service_error_is_kept(self):
        result = _run(Forbidden())
        assert not result.ok
        assert isinstance(result.error, Forbidden)
        assert result.error.status_code == 403

    def test_database_error_becomes_upstream_failure(self, caplog):
        with caplog.at_level(logging.ERROR):
            result = _run(OperationalError('relation "orders" does not exist'))
        assert isinstance(result.error, UpstreamFailure)
        assert result.error.message == "Order store unavailable"
        assert result.error.status_code == 500
        messages = [record.getMessage() for record in caplog.records]
        assert any("test.op.store_unavailable" in m and "does not exist" in m for m in messages)

    def test_unexpected_error_is_hidden(self):
        result = _run(KeyError("secret internals"))
        assert isinstance(result.error, UpstreamFailure)
        assert "secret" not in result.error.message

    def test_unwrap_reraises(self):
        with pytest.raises(InvalidRequest):
            ServiceResult.failure(InvalidRequest("bad")).unwrap()


class TestErrorTaxonomy:
    def test_default_messages(self):
        assert ServiceError().message == "Internal server error"
        assert InvalidRequest().code == "invalid_request"

    def test_handler_renders_service_errors(self):
        response = api_exception_handler(Forbidden(), {})
        assert response.status_code == 403
        assert response.data == {"error": "Admin access required"}

    def test_handler_reshapes_framework_errors(self):
        response = api_exception_handler(ParseError("Malformed JSON"), {})
        assert response.status_code == 400
        assert response.data == {"error": "Malformed JSON"}

    def test_handler_ignores_unknown_exceptions(self):
        assert api_exception_handler(RuntimeError("boom"), {}) is None
