"""Tests for request/reseller log context."""

import logging

from tuning_catalog.core.logging import log_error, log_request, log_response, request_reseller


class TestRequestReseller:
    def test_storefront_path(self):
        assert request_reseller("/api/reseller/test2/volvo/xc60", {}) == "test2"

    def test_reseller_api_header(self):
        assert request_reseller("/api/overrides", {"x-reseller-id": "test2"}) == "test2"

    def test_public_route(self):
        assert request_reseller("/api/brands", {}) is None


class TestLogLines:
    def test_request_carries_reseller(self, caplog):
        with caplog.at_level(logging.INFO, logger="tuning_catalog"):
            log_request("GET", "/api/reseller/test2/brands", "test2")
        assert caplog.messages == ["REQUEST GET /api/reseller/test2/brands reseller=test2"]

    def test_public_request_has_no_reseller_field(self, caplog):
        with caplog.at_level(logging.INFO, logger="tuning_catalog"):
            log_request("GET", "/api/brands")
        assert caplog.messages == ["REQUEST GET /api/brands"]

    def test_server_errors_are_warnings(self, caplog):
        with caplog.at_level(logging.INFO, logger="tuning_catalog"):
            log_response("GET", "/api/brands", 502, 12.5)
            log_response("GET", "/api/brands", 200, 3.0, "test2")
        assert [r.levelno for r in caplog.records] == [logging.WARNING, logging.INFO]
        assert caplog.messages[1] == (
            "RESPONSE GET /api/brands status=200 duration_ms=3.00 reseller=test2"
        )

    def test_error_skips_empty_fields(self, caplog):
        with caplog.at_level(logging.ERROR, logger="tuning_catalog"):
            log_error("Brand list failed", RuntimeError("down"), reseller_id=None, lang="sv")
        assert caplog.messages == ["ERROR Brand list failed lang=sv"]
        assert caplog.records[0].exc_info is not None
