"""Tests for the retry policy."""

import pytest
from unittest.mock import Mock

from lookml_transfer.api.exceptions import ApiCallError
from lookml_transfer.transfer.retry import RetryPolicy, WriteMode


class TestWriteMode:
    def test_first_attempt_creates(self):
        assert WriteMode.for_attempt(0) == WriteMode.CREATE
        assert WriteMode.CREATE.value == 'POST'

    @pytest.mark.parametrize('attempt', [1, 2, 5])
    def test_retries_update(self, attempt):
        assert WriteMode.for_attempt(attempt) == WriteMode.UPDATE
        assert WriteMode.UPDATE.value == 'PUT'


class TestRetryPolicy:
    """Test bounded retry behaviour."""

    def setup_method(self):
        self.sleep = Mock()
        self.policy = RetryPolicy(sleep=self.sleep)

    def test_success_first_attempt(self):
        action = Mock(return_value='ok')

        assert self.policy.run(action) == 'ok'
        action.assert_called_once_with(0)
        self.sleep.assert_not_called()

    def test_success_after_retries(self):
        action = Mock(side_effect=[ApiCallError('boom'), ApiCallError('boom'), 'ok'])

        assert self.policy.run(action) == 'ok'
        assert [c.args[0] for c in action.call_args_list] == [0, 1, 2]
        assert [c.args[0] for c in self.sleep.call_args_list] == [20.0, 60.0]

    def test_exhausted_reraises_last_error(self):
        errors = [ApiCallError('first'), ApiCallError('second'), ApiCallError('third')]
        action = Mock(side_effect=errors)

        with pytest.raises(ApiCallError) as exc_info:
            self.policy.run(action)

        assert exc_info.value is errors[-1]
        assert action.call_count == 3
        assert self.sleep.call_count == 2

    def test_on_retry_callback(self):
        callback = Mock()
        error = ApiCallError('boom')
        action = Mock(side_effect=[error, 'ok'])

        self.policy.run(action, on_retry=callback)

        callback.assert_called_once_with(1, error, 20.0)

    def test_non_retryable_error_propagates(self):
        policy = RetryPolicy(retry_on=(ApiCallError,), sleep=self.sleep)
        action = Mock(side_effect=KeyError('x'))

        with pytest.raises(KeyError):
            policy.run(action)

        action.assert_called_once_with(0)
        self.sleep.assert_not_called()

    def test_custom_schedule(self):
        policy = RetryPolicy(max_attempts=4, delays=[1, 2, 3], sleep=self.sleep)
        action = Mock(side_effect=ValueError('nope'))

        with pytest.raises(ValueError):
            policy.run(action)

        assert [c.args[0] for c in self.sleep.call_args_list] == [1, 2, 3]

    def test_invalid_configuration(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)

        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=3, delays=[20])
