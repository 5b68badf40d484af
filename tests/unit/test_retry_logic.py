"""Unit tests for host_client.retry_logic module."""

import logging

import pytest
from unittest.mock import patch, MagicMock

from src.host_client.errors import HostBusyError, HostError
from src.host_client.retry_logic import (
    DEFAULT_BUSY_CODES,
    HOST_BUSY,
    RPC_CALL_REJECTED,
    ErrorClass,
    RetryPolicy,
    as_decorator,
    classify_host_error,
    invoke_with_retry,
    normalize_status_code,
    parse_status_codes,
    status_code_of,
)
from tests.helpers.fake_host import HostCallError, busy_error


class TestStatusCodes:
    """Test cases for status code helpers."""

    def test_normalizes_signed_hresult(self):
        """normalize_status_code should map a signed HRESULT to unsigned."""
        assert normalize_status_code(-2147213264) == HOST_BUSY

    def test_unsigned_code_unchanged(self):
        """normalize_status_code should leave unsigned codes alone."""
        assert normalize_status_code(HOST_BUSY) == HOST_BUSY

    def test_parses_hex_and_int_values(self):
        """parse_status_codes should accept hex strings and ints."""
        codes = parse_status_codes(["0x80042030", 0x8001010A, "-2147418111"])
        assert codes == DEFAULT_BUSY_CODES

    def test_parse_rejects_garbage(self):
        """parse_status_codes should raise ValueError on non-numeric strings."""
        with pytest.raises(ValueError):
            parse_status_codes(["busy"])

    def test_status_code_from_host_error(self):
        """status_code_of should read HostError.status_code."""
        assert status_code_of(HostError(RPC_CALL_REJECTED, "op")) == RPC_CALL_REJECTED

    def test_status_code_from_hresult_attribute(self):
        """status_code_of should read and normalize an hresult attribute."""
        assert status_code_of(busy_error()) == HOST_BUSY

    def test_status_code_from_status_code_attribute(self):
        """status_code_of should fall back to a status_code attribute."""
        error = Exception("failed")
        error.status_code = 0x80070005
        assert status_code_of(error) == 0x80070005

    def test_no_status_code(self):
        """status_code_of should return None when nothing is carried."""
        assert status_code_of(ValueError("boom")) is None

    def test_bool_is_not_a_status_code(self):
        """status_code_of should ignore boolean attributes."""
        error = Exception("failed")
        error.hresult = True
        assert status_code_of(error) is None


class TestClassifyHostError:
    """Test cases for classify_host_error function."""

    def test_busy_hresult_is_transient(self):
        """The host busy code should classify as transient."""
        assert classify_host_error(busy_error()) is ErrorClass.TRANSIENT

    def test_rpc_retry_later_is_transient(self):
        """RPC retry-later codes should classify as transient."""
        assert classify_host_error(HostCallError(0x8001010A)) is ErrorClass.TRANSIENT

    def test_host_busy_error_is_transient(self):
        """HostBusyError should classify as transient without a code."""
        assert classify_host_error(HostBusyError(None, "op")) is ErrorClass.TRANSIENT

    def test_other_code_is_permanent(self):
        """Any other status code should classify as permanent."""
        assert classify_host_error(HostCallError(0x80042014)) is ErrorClass.PERMANENT

    def test_plain_exception_is_permanent(self):
        """Exceptions without a code should classify as permanent."""
        assert classify_host_error(RuntimeError("boom")) is ErrorClass.PERMANENT

    def test_custom_busy_codes(self):
        """Only the given busy codes should classify as transient."""
        error = HostCallError(0x80042014)
        assert classify_host_error(error, frozenset({0x80042014})) is ErrorClass.TRANSIENT
        assert classify_host_error(busy_error(), frozenset({0x80042014})) is ErrorClass.PERMANENT


class TestInvokeWithRetry:
    """Test cases for invoke_with_retry function."""

    def test_success_on_first_attempt(self):
        """invoke_with_retry should return the result of the work."""
        work = MagicMock(return_value="result")

        assert invoke_with_retry(work) == "result"
        work.assert_called_once_with()

    @patch('time.sleep')
    def test_retries_while_busy(self, mock_sleep):
        """invoke_with_retry should retry busy failures and return the result."""
        work = MagicMock(side_effect=[busy_error(), busy_error(), "result"])

        assert invoke_with_retry(work) == "result"
        assert work.call_count == 3

    @patch('time.sleep')
    def test_linear_backoff_delays(self, mock_sleep):
        """Delays should be 250ms then 500ms."""
        work = MagicMock(side_effect=[busy_error(), busy_error(), "result"])

        invoke_with_retry(work)

        calls = [call[0][0] for call in mock_sleep.call_args_list]
        assert calls == [0.25, 0.5]

    @patch('time.sleep')
    def test_abandons_after_three_attempts(self, mock_sleep):
        """invoke_with_retry should stop after 3 attempts and not raise."""
        work = MagicMock(side_effect=busy_error())

        assert invoke_with_retry(work) is None
        assert work.call_count == 3
        # No sleep after the final attempt
        assert mock_sleep.call_count == 2

    @patch('time.sleep')
    def test_logs_abandoned_work(self, mock_sleep, caplog):
        """Exhausted retries should be logged as an error."""
        work = MagicMock(side_effect=busy_error())

        with caplog.at_level(logging.ERROR, logger="src.host_client.retry_logic"):
            invoke_with_retry(work, description="sync_hierarchy(nb-1)")

        assert "abandoning sync_hierarchy(nb-1)" in caplog.text

    @patch('time.sleep')
    def test_permanent_error_is_not_retried(self, mock_sleep):
        """Permanent errors should be logged once and swallowed."""
        work = MagicMock(side_effect=HostCallError(0x80042014, "object does not exist"))

        assert invoke_with_retry(work) is None
        work.assert_called_once()
        mock_sleep.assert_not_called()

    def test_permanent_error_is_logged_with_traceback(self, caplog):
        """Permanent errors should carry exception info in the log record."""
        work = MagicMock(side_effect=RuntimeError("boom"))

        with caplog.at_level(logging.ERROR, logger="src.host_client.retry_logic"):
            invoke_with_retry(work, description="update_hierarchy")

        record = caplog.records[-1]
        assert "Error invoking update_hierarchy: boom" in record.getMessage()
        assert record.exc_info is not None

    @patch('time.sleep')
    def test_logs_retry_count_on_success(self, mock_sleep, caplog):
        """Success after retries should log how many retries were needed."""
        work = MagicMock(side_effect=[busy_error(), "result"])

        with caplog.at_level(logging.INFO, logger="src.host_client.retry_logic"):
            invoke_with_retry(work, description="get_hierarchy")

        assert "get_hierarchy completed successfully after 1 retries" in caplog.text

    def test_no_retry_log_on_first_success(self, caplog):
        """A first-attempt success should not log anything."""
        with caplog.at_level(logging.DEBUG, logger="src.host_client.retry_logic"):
            invoke_with_retry(lambda: 42)

        assert caplog.records == []

    @patch('time.sleep')
    def test_custom_policy(self, mock_sleep):
        """max_attempts and base_delay should come from the policy."""
        work = MagicMock(side_effect=busy_error())
        policy = RetryPolicy(max_attempts=4, base_delay=0.1)

        invoke_with_retry(work, policy=policy)

        assert work.call_count == 4
        calls = [round(call[0][0], 3) for call in mock_sleep.call_args_list]
        assert calls == [0.1, 0.2, 0.3]

    def test_single_attempt_policy_never_sleeps(self):
        """With one attempt a busy failure is abandoned immediately."""
        work = MagicMock(side_effect=busy_error())

        with patch('time.sleep') as mock_sleep:
            assert invoke_with_retry(work, policy=RetryPolicy(max_attempts=1)) is None

        work.assert_called_once()
        mock_sleep.assert_not_called()


class TestAsDecorator:
    """Test cases for as_decorator function."""

    @patch('time.sleep')
    def test_decorator_retries_while_busy(self, mock_sleep):
        """as_decorator should wrap a function with busy retries."""
        call_count = 0

        @as_decorator()
        def sync_notebook(notebook_id):
            nonlocal call_count
            call_count += 1
            if call_count < 2:
                raise busy_error()
            return notebook_id

        assert sync_notebook("nb-1") == "nb-1"
        assert call_count == 2

    def test_decorator_preserves_function_name(self):
        """as_decorator should preserve the wrapped function's __name__."""
        @as_decorator()
        def my_special_function():
            return "success"

        assert my_special_function.__name__ == "my_special_function"

    def test_decorator_swallows_permanent_errors(self):
        """Decorated functions return None on permanent errors."""
        @as_decorator()
        def failing():
            raise RuntimeError("boom")

        assert failing() is None
