"""Tests for error_handler and custom exceptions."""

from __future__ import annotations

import pytest

from ttn_exporter.client.errors import (
    BodyReadError,
    ConfigurationError,
    DecodeError,
    ExporterError,
    FieldParseError,
    GatewayAPIError,
    GatewayConnectionError,
    InvalidDuration,
    InvalidNumber,
    RequestBuildError,
    TransportError,
    error_handler,
)


class TestExceptionHierarchy:
    def test_base_error(self):
        exc = ExporterError("test")
        assert str(exc) == "test"
        assert exc.exit_code == 1

    def test_configuration_error(self):
        exc = ConfigurationError("TTN_GATEWAY_ID is required")
        assert isinstance(exc, ExporterError)
        assert exc.exit_code == 2

    @pytest.mark.parametrize(
        "cls", [RequestBuildError, GatewayConnectionError, BodyReadError],
    )
    def test_transport_errors(self, cls):
        exc = cls("boom")
        assert isinstance(exc, TransportError)
        assert exc.exit_code == 3

    def test_api_error_carries_status(self):
        exc = GatewayAPIError(500, "server error")
        assert isinstance(exc, TransportError)
        assert exc.status_code == 500
        assert "500" in str(exc)
        assert "server error" in str(exc)

    def test_api_error_without_detail(self):
        assert str(GatewayAPIError(404)) == "Unexpected status code: 404"

    def test_decode_error_is_not_transport(self):
        exc = DecodeError("bad json")
        assert not isinstance(exc, TransportError)
        assert exc.exit_code == 4

    def test_invalid_duration_names_raw(self):
        exc = InvalidDuration("fiftyoneseconds")
        assert str(exc) == "invalid duration 'fiftyoneseconds'"

    def test_invalid_number_with_cause(self):
        exc = InvalidNumber("three.onefour", "invalid syntax")
        assert str(exc) == "invalid number 'three.onefour': invalid syntax"

    def test_field_parse_error_wraps(self):
        inner = InvalidDuration("x")
        exc = FieldParseError("min", inner)
        assert exc.field == "min"
        assert exc.raw == "x"
        assert exc.error is inner
        assert str(exc) == "error parsing min: invalid duration 'x'"


class TestErrorHandler:
    def test_catches_configuration_error(self):
        @error_handler
        def raises_config():
            raise ConfigurationError("no gateway id")

        with pytest.raises(SystemExit) as exc_info:
            raises_config()
        assert exc_info.value.code == 2

    def test_catches_transport_error(self):
        @error_handler
        def raises_transport():
            raise GatewayAPIError(503)

        with pytest.raises(SystemExit) as exc_info:
            raises_transport()
        assert exc_info.value.code == 3

    def test_catches_value_error(self):
        @error_handler
        def raises_value():
            raise ValueError("bad format")

        with pytest.raises(SystemExit) as exc_info:
            raises_value()
        assert exc_info.value.code == 1

    def test_passes_through_normal_return(self):
        @error_handler
        def ok():
            return 42

        assert ok() == 42
