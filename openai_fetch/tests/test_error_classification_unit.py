from __future__ import annotations

import types

from openai_fetch.base.cancellation import CancelledError
from openai_fetch.base.errors import (
    APIConnectionError,
    APIConnectionTimeoutError,
    APIError,
    ConfigurationError,
    ErrorCode,
    RequestValidationError,
    StreamDecodeError,
    classify_exception,
    status_to_code,
)


def test_classify_package_errors():
    assert classify_exception(CancelledError("x")) is ErrorCode.CANCELLED  # nosec B101 - assert is appropriate in unit tests
    assert classify_exception(ConfigurationError("x")) is ErrorCode.CONFIGURATION  # nosec B101 - assert is appropriate in unit tests
    assert classify_exception(RequestValidationError("x")) is ErrorCode.VALIDATION  # nosec B101 - assert is appropriate in unit tests
    assert classify_exception(StreamDecodeError("x")) is ErrorCode.DECODE  # nosec B101 - assert is appropriate in unit tests
    assert classify_exception(APIConnectionTimeoutError()) is ErrorCode.TIMEOUT  # nosec B101 - assert is appropriate in unit tests
    assert classify_exception(APIConnectionError()) is ErrorCode.CONNECTION  # nosec B101 - assert is appropriate in unit tests


def test_classify_api_error_by_status():
    assert classify_exception(APIError(429, {"message": "slow down"})) is ErrorCode.RATE_LIMIT  # nosec B101 - assert is appropriate in unit tests
    assert classify_exception(APIError(401)) is ErrorCode.AUTH  # nosec B101 - assert is appropriate in unit tests


def test_classify_http_status_mapping():
    # Direct attr
    e1 = types.SimpleNamespace(status_code=404)
    assert classify_exception(e1) is ErrorCode.NOT_FOUND  # nosec B101 - assert is appropriate in unit tests
    # response.status_code
    e2 = types.SimpleNamespace(response=types.SimpleNamespace(status_code=503))
    assert classify_exception(e2) is ErrorCode.UNAVAILABLE  # nosec B101 - assert is appropriate in unit tests


def test_status_to_code_fallbacks():
    assert status_to_code(None) is ErrorCode.CONNECTION  # nosec B101 - assert is appropriate in unit tests
    assert status_to_code(599) is ErrorCode.SERVER_ERROR  # nosec B101 - assert is appropriate in unit tests
    assert status_to_code(418) is ErrorCode.UNKNOWN  # nosec B101 - assert is appropriate in unit tests


def test_classify_heuristics():
    assert classify_exception(Exception("timed out waiting")) is ErrorCode.TIMEOUT  # nosec B101 - assert is appropriate in unit tests
    assert classify_exception(Exception("connection reset")) is ErrorCode.CONNECTION  # nosec B101 - assert is appropriate in unit tests
    assert classify_exception(Exception("random")) is ErrorCode.UNKNOWN  # nosec B101 - assert is appropriate in unit tests
