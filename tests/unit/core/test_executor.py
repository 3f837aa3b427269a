"""
Tests for RequestExecutor (requests backend) using responses mocks.
"""

import json
from unittest.mock import Mock, call

import pytest
import requests
import responses as responses_lib
from responses import matchers

from chatroutes.core.config import ClientConfig
from chatroutes.core.exceptions import ChatRoutesError, ErrorKind
from chatroutes.core.executor import RequestExecutor
from chatroutes.core.logging import ChatRoutesLogger

PATH = "/api/v1/conversations"


@pytest.fixture
def url(base_url):
    return f"{base_url}{PATH}"


@pytest.fixture
def executor(config, sleep):
    executor = RequestExecutor(config, sleep=sleep)
    yield executor
    executor.close()


class TestRequestBuilding:
    """URL, headers and body of the outgoing request."""

    def test_build_url(self, executor, base_url):
        assert executor.build_url(PATH) == f"{base_url}{PATH}"
        assert executor.build_url("api/v1/auth/me") == f"{base_url}/api/v1/auth/me"
        assert executor.build_url("https://other.test/x") == "https://other.test/x"

    def test_auth_and_content_headers(self, executor, mock_responses, url):
        mock_responses.add(responses_lib.GET, url, json={"success": True, "data": []})

        executor.execute("GET", PATH)

        headers = mock_responses.calls[0].request.headers
        assert headers["Authorization"] == "ApiKey cr_test_key_123456"
        assert headers["Content-Type"] == "application/json"
        assert headers["X-Correlation-ID"]

    def test_skip_auth(self, executor, mock_responses, url):
        mock_responses.add(responses_lib.POST, url, json={"success": True})

        executor.execute("POST", PATH, {"email": "a@b.c"}, skip_auth=True)

        assert "Authorization" not in mock_responses.calls[0].request.headers

    def test_no_auth_without_key(self, sleep, mock_responses, base_url, url):
        executor = RequestExecutor(ClientConfig(base_url=base_url), sleep=sleep)
        mock_responses.add(responses_lib.GET, url, json={"success": True})

        executor.execute("GET", PATH)

        assert "Authorization" not in mock_responses.calls[0].request.headers

    def test_caller_and_config_headers(self, sleep, mock_responses, base_url, url):
        config = ClientConfig(api_key="cr_test_key_123456", base_url=base_url,
                              headers={"X-Team": "research"})
        executor = RequestExecutor(config, sleep=sleep)
        mock_responses.add(responses_lib.GET, url, json={"success": True})

        executor.execute("GET", PATH, headers={"X-Correlation-ID": "req-42"})

        headers = mock_responses.calls[0].request.headers
        assert headers["X-Team"] == "research"
        assert headers["X-Correlation-ID"] == "req-42"

    def test_post_sends_json_body(self, executor, mock_responses, url):
        mock_responses.add(responses_lib.POST, url, json={"success": True, "data": {}})

        executor.execute("POST", PATH, {"title": "Hello"})

        assert json.loads(mock_responses.calls[0].request.body) == {"title": "Hello"}

    def test_get_never_sends_body(self, executor, mock_responses, url):
        mock_responses.add(responses_lib.GET, url, json={"success": True})

        executor.execute("GET", PATH, {"ignored": True})

        assert mock_responses.calls[0].request.body is None

    def test_query_params(self, executor, mock_responses, url):
        mock_responses.add(
            responses_lib.GET, url, json={"success": True},
            match=[matchers.query_param_matcher({"page": "2", "limit": "10"})],
        )

        executor.execute("GET", PATH, params={"page": 2, "limit": 10})

        assert len(mock_responses.calls) == 1


class TestEnvelope:
    """Response body -> ApiResponse."""

    def test_success_envelope(self, executor, mock_responses, url):
        mock_responses.add(
            responses_lib.GET, url,
            json={"success": True, "data": {"conversations": []}, "requestId": "r1"},
        )

        envelope = executor.execute("GET", PATH)

        assert envelope.success is True
        assert envelope.data == {"conversations": []}
        assert envelope.status_code == 200
        assert envelope.model_extra == {"requestId": "r1"}

    def test_unsuccessful_envelope_is_returned(self, executor, mock_responses, url):
        mock_responses.add(
            responses_lib.GET, url,
            json={"success": False, "message": "Quota exhausted"},
        )

        envelope = executor.execute("GET", PATH)

        assert envelope.success is False
        with pytest.raises(ChatRoutesError) as exc_info:
            envelope.unwrap("Failed")
        assert exc_info.value.kind is ErrorKind.GENERIC
        assert exc_info.value.message == "Quota exhausted"

    def test_empty_body(self, executor, mock_responses, url):
        mock_responses.add(responses_lib.DELETE, url, status=204)

        envelope = executor.execute("DELETE", PATH)

        assert envelope.success is True
        assert envelope.status_code == 204

    def test_non_json_error_body(self, executor, mock_responses, url):
        mock_responses.add(responses_lib.GET, url, status=404, body="<html>Not Found</html>")

        with pytest.raises(ChatRoutesError) as exc_info:
            executor.execute("GET", PATH)

        assert exc_info.value.kind is ErrorKind.NOT_FOUND
        assert exc_info.value.message == "Resource not found"


class TestTerminalErrors:
    """4xx: exactly one attempt, no sleep."""

    @pytest.mark.parametrize("status, kind", [
        (400, ErrorKind.VALIDATION),
        (401, ErrorKind.AUTHENTICATION),
        (404, ErrorKind.NOT_FOUND),
        (429, ErrorKind.RATE_LIMIT),
        (403, ErrorKind.GENERIC),
    ])
    def test_single_attempt(self, executor, mock_responses, url, sleep, status, kind):
        mock_responses.add(responses_lib.GET, url, status=status, json={"message": "nope"})

        with pytest.raises(ChatRoutesError) as exc_info:
            executor.execute("GET", PATH)

        assert exc_info.value.kind is kind
        assert exc_info.value.http_status == status
        assert len(mock_responses.calls) == 1
        sleep.assert_not_called()

    def test_rate_limit_retry_after(self, executor, mock_responses, url):
        mock_responses.add(
            responses_lib.POST, url, status=429,
            json={"message": "Too many requests"},
            headers={"Retry-After": "60"},
        )

        with pytest.raises(ChatRoutesError) as exc_info:
            executor.execute("POST", PATH, {"title": "x"})

        assert exc_info.value.kind is ErrorKind.RATE_LIMIT
        assert exc_info.value.retry_after == 60.0
        assert exc_info.value.message == "Too many requests"


class TestRetries:
    """Transient failures: backoff and attempt budget."""

    def test_recovers_after_server_errors(self, executor, mock_responses, url, sleep):
        mock_responses.add(responses_lib.GET, url, status=503)
        mock_responses.add(responses_lib.GET, url, status=503)
        mock_responses.add(responses_lib.GET, url, json={"success": True, "data": {"ok": 1}})

        envelope = executor.execute("GET", PATH)

        assert envelope.data == {"ok": 1}
        assert len(mock_responses.calls) == 3
        assert sleep.call_args_list == [call(1.0), call(2.0)]

    def test_persistent_server_error(self, executor, mock_responses, url, sleep):
        mock_responses.add(responses_lib.GET, url, status=503, json={"error": "UNAVAILABLE"})

        with pytest.raises(ChatRoutesError) as exc_info:
            executor.execute("GET", PATH)

        error = exc_info.value
        assert error.kind is ErrorKind.GENERIC
        assert error.http_status == 503
        assert error.code == "UNAVAILABLE"
        assert len(mock_responses.calls) == 4
        assert sleep.call_args_list == [call(1.0), call(2.0), call(4.0)]

    def test_zero_retries(self, sleep, mock_responses, base_url, url):
        config = ClientConfig(api_key="cr_test_key_123456", base_url=base_url, retry_attempts=0)
        executor = RequestExecutor(config, sleep=sleep)
        mock_responses.add(responses_lib.GET, url, status=500)

        with pytest.raises(ChatRoutesError):
            executor.execute("GET", PATH)

        assert len(mock_responses.calls) == 1
        sleep.assert_not_called()

    def test_custom_delay(self, sleep, mock_responses, base_url, url):
        config = ClientConfig(base_url=base_url, retry_attempts=2, retry_delay=0.5)
        executor = RequestExecutor(config, sleep=sleep)
        mock_responses.add(responses_lib.GET, url, status=502)

        with pytest.raises(ChatRoutesError):
            executor.execute("GET", PATH)

        assert sleep.call_args_list == [call(0.5), call(1.0)]

    def test_network_error_exhausted(self, executor, mock_responses, url, sleep):
        mock_responses.add(responses_lib.GET, url, body=requests.exceptions.ConnectionError("refused"))

        with pytest.raises(ChatRoutesError) as exc_info:
            executor.execute("GET", PATH)

        error = exc_info.value
        assert error.kind is ErrorKind.NETWORK
        assert error.http_status == 0
        assert error.message == "Request failed after retries"
        assert error.details["attempts"] == 4
        assert isinstance(error.__cause__, ChatRoutesError)
        assert len(mock_responses.calls) == 4
        assert sleep.call_count == 3

    def test_network_error_then_success(self, executor, mock_responses, url):
        mock_responses.add(responses_lib.GET, url, body=requests.exceptions.ReadTimeout("slow"))
        mock_responses.add(responses_lib.GET, url, json={"success": True, "data": [1]})

        assert executor.execute("GET", PATH).data == [1]
        assert len(mock_responses.calls) == 2

    def test_invalid_json_success_is_retried(self, executor, mock_responses, url):
        mock_responses.add(responses_lib.GET, url, body="not json")
        mock_responses.add(responses_lib.GET, url, json={"success": True, "data": "ok"})

        assert executor.execute("GET", PATH).data == "ok"
        assert len(mock_responses.calls) == 2

    def test_terminal_after_transient(self, executor, mock_responses, url, sleep):
        mock_responses.add(responses_lib.GET, url, status=500)
        mock_responses.add(responses_lib.GET, url, status=404)

        with pytest.raises(ChatRoutesError) as exc_info:
            executor.execute("GET", PATH)

        assert exc_info.value.kind is ErrorKind.NOT_FOUND
        assert len(mock_responses.calls) == 2
        assert sleep.call_args_list == [call(1.0)]


class TestExecutorLogging:
    """Structured request logs."""

    def test_logs_retry_and_completion(self, config, sleep, mock_responses, url,
                                       logging_config_with_file):
        logger = ChatRoutesLogger(logging_config_with_file, name="chatroutes.test.executor")
        executor = RequestExecutor(config, logger=logger, sleep=sleep)
        mock_responses.add(responses_lib.GET, url, status=503)
        mock_responses.add(responses_lib.GET, url, json={"success": True})

        executor.execute("GET", PATH)
        logger.close()

        with open(logging_config_with_file.file_path, encoding="utf-8") as f:
            records = [json.loads(line) for line in f]

        messages = [record["message"] for record in records]
        assert messages == ["Request started", "Request error (will retry)", "Request completed"]
        assert records[1]["wait_time_s"] == 1.0
        assert records[2]["attempt"] == 2
        assert all(record["correlation_id"] for record in records)

    def test_logs_failure(self, config, sleep, mock_responses, url, logging_config_with_file):
        logger = ChatRoutesLogger(logging_config_with_file, name="chatroutes.test.executor")
        executor = RequestExecutor(config, logger=logger, sleep=sleep)
        mock_responses.add(responses_lib.GET, url, status=401)

        with pytest.raises(ChatRoutesError):
            executor.execute("GET", PATH)
        logger.close()

        with open(logging_config_with_file.file_path, encoding="utf-8") as f:
            records = [json.loads(line) for line in f]

        assert records[-1]["message"] == "Request failed"
        assert records[-1]["level"] == "ERROR"
        assert records[-1]["error_kind"] == "authentication"

    def test_api_key_not_logged(self, config, sleep, mock_responses, url, logging_config_with_file):
        logger = ChatRoutesLogger(logging_config_with_file, name="chatroutes.test.executor")
        executor = RequestExecutor(config, logger=logger, sleep=sleep)
        mock_responses.add(responses_lib.GET, url, json={"success": True})

        executor.execute("GET", PATH)
        logger.close()

        with open(logging_config_with_file.file_path, encoding="utf-8") as f:
            assert "cr_test_key_123456" not in f.read()


class TestSession:
    """Session ownership."""

    def test_external_session_not_closed(self, config):
        session = Mock(spec=requests.Session)
        executor = RequestExecutor(config, session=session)
        executor.close()
        assert executor.session is session
        session.close.assert_not_called()

    def test_own_session_closed(self, config):
        executor = RequestExecutor(config)
        executor._session = Mock(spec=requests.Session)
        executor.close()
        executor.session.close.assert_called_once()

    def test_config_exposed(self, executor, config):
        assert executor.config is config
