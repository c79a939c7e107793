"""Tests for api/base.py - Unified API response format."""

from datetime import timezone

from api.base import (
    HTTP_STATUS_BY_CODE,
    success_response,
    error_response,
    ErrorCodes,
)


class TestSuccessResponse:
    """Tests for success_response()."""

    def test_structure(self):
        resp = success_response({"foo": "bar"}, "Done")
        assert resp.success is True
        assert resp.data == {"foo": "bar"}
        assert resp.error is None
        assert resp.meta.message == "Done"

    def test_request_id_generated(self):
        resp = success_response({})
        assert len(resp.meta.request_id) > 0

    def test_timestamp_is_utc(self):
        resp = success_response({})
        assert resp.meta.timestamp.tzinfo == timezone.utc


class TestErrorResponse:
    """Tests for error_response()."""

    def test_structure(self):
        resp = error_response(ErrorCodes.NOT_FOUND, "Invoice not found")
        assert resp.success is False
        assert resp.data is None
        assert resp.error.code == "NOT_FOUND"
        assert resp.error.message == "Invoice not found"
        assert resp.error.details == []

    def test_details_kept(self):
        resp = error_response(ErrorCodes.VALIDATION_ERROR, "a b", ["a", "b"])
        assert resp.error.details == ["a", "b"]


class TestStatusMapping:

    def test_every_code_has_a_status(self):
        codes = [v for k, v in vars(ErrorCodes).items() if k.isupper()]
        assert set(codes) == set(HTTP_STATUS_BY_CODE)

    def test_business_codes(self):
        assert HTTP_STATUS_BY_CODE[ErrorCodes.NOT_FOUND] == 404
        assert HTTP_STATUS_BY_CODE[ErrorCodes.INVALID_TRANSITION] == 409
        assert HTTP_STATUS_BY_CODE[ErrorCodes.VALIDATION_ERROR] == 422
        assert HTTP_STATUS_BY_CODE[ErrorCodes.UNAUTHORIZED] == 403
