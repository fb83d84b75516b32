"""Unit tests for error classification, retries and status polling."""

from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError

from tfaws.utils.errors import (
    ErrorCategory,
    ErrorContext,
    NotFoundError,
    ProviderError,
    error_handler,
    error_message_contains,
    is_error_code,
)
from tfaws.utils.retry import RetryStrategy, UnexpectedStatusError, WaitTimeoutError, wait_for_status, with_retry


def _client_error(code, message="error"):
    return ClientError(
        {"Error": {"Code": code, "Message": message}, "ResponseMetadata": {"RequestId": "req-1"}},
        "Operation",
    )


class TestErrors:
    """Error helpers and the ErrorHandler."""

    def test_code_helpers(self):
        error = _client_error("ValidationException", "Account is not whitelisted to use this feature")
        assert is_error_code(error, "ResourceNotFoundException", "ValidationException")
        assert error_message_contains(error, "ValidationException", "not whitelisted")
        assert not is_error_code(RuntimeError("x"), "ValidationException")

    def test_not_found_mapped(self):
        error = error_handler.handle_exception(_client_error("ResourceNotFoundException", "gone"))
        assert isinstance(error, NotFoundError)
        assert error.category == ErrorCategory.NOT_FOUND
        assert error.context.request_id == "req-1"

    def test_unknown_code(self):
        error = error_handler.handle_exception(_client_error("WeirdException", "odd"))
        assert error.category == ErrorCategory.AWS
        assert "AWS Error (WeirdException): odd" in error.message

    def test_provider_error_passthrough(self):
        original = ProviderError("x")
        assert error_handler.handle_exception(original) is original

    def test_user_message(self):
        error = ProviderError(
            "deleting thing",
            context=ErrorContext(resource_id="r-1", region="us-west-2"),
            suggestions=["try again"],
        )
        message = error.to_user_message()
        assert "ERROR: deleting thing" in message
        assert "Resource: r-1" in message
        assert "1. try again" in message
        assert error.to_dict()["context"]["region"] == "us-west-2"


class TestRetryStrategy:
    """Exponential backoff for retryable errors."""

    def test_retries_then_succeeds(self, no_sleep):
        func = Mock(side_effect=[_client_error("ThrottlingException"), "ok"])
        assert RetryStrategy(max_retries=3).execute_with_retry(func, 1, key="v") == "ok"
        func.assert_called_with(1, key="v")
        assert no_sleep.call_count == 1

    def test_non_retryable_raises_immediately(self, no_sleep):
        func = Mock(side_effect=_client_error("ValidationException"))
        with pytest.raises(ClientError):
            RetryStrategy().execute_with_retry(func)
        assert func.call_count == 1

    def test_extra_retryable_codes(self, no_sleep):
        func = Mock(side_effect=[_client_error("ResourceNotFoundException"), "ok"])
        strategy = RetryStrategy(max_retries=2, retryable_codes=["ResourceNotFoundException"])
        assert strategy.execute_with_retry(func) == "ok"

    def test_gives_up_after_max_retries(self, no_sleep):
        func = Mock(side_effect=_client_error("ThrottlingException"))
        with pytest.raises(ClientError):
            RetryStrategy(max_retries=2).execute_with_retry(func)
        assert func.call_count == 3

    def test_delay_capped(self):
        strategy = RetryStrategy(base_delay=1.0, max_delay=5.0, jitter=False)
        assert strategy.get_delay(0) == 1.0
        assert strategy.get_delay(10) == 5.0

    def test_decorator(self, no_sleep):
        calls = []

        @with_retry(max_retries=1)
        def flaky():
            calls.append(1)
            if len(calls) == 1:
                raise ConnectionError("reset")
            return "done"

        assert flaky() == "done"


class TestWaitForStatus:
    """Polling until a target status."""

    def test_reaches_target(self, no_sleep):
        refresh = Mock(side_effect=["PENDING", "PENDING", "ACTIVE"])
        assert wait_for_status(refresh, ["ACTIVE"], ["PENDING"], poll_interval=1) == "ACTIVE"
        assert no_sleep.call_count == 2

    def test_waiting_for_deletion(self, no_sleep):
        refresh = Mock(side_effect=["DELETING", None])
        assert wait_for_status(refresh, [], ["DELETING"]) is None

    def test_disappears_unexpectedly(self, no_sleep):
        with pytest.raises(NotFoundError):
            wait_for_status(Mock(return_value=None), ["ACTIVE"], ["PENDING"])

    def test_unexpected_status(self, no_sleep):
        with pytest.raises(UnexpectedStatusError) as exc_info:
            wait_for_status(Mock(return_value="ERROR"), ["ACTIVE"], ["PENDING"])
        assert exc_info.value.status == "ERROR"

    def test_timeout(self, no_sleep):
        with pytest.raises(WaitTimeoutError, match="timeout while waiting"):
            wait_for_status(Mock(return_value="PENDING"), ["ACTIVE"], ["PENDING"], timeout=0)
