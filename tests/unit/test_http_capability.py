"""
Unit tests for the requests-backed HTTP capability.
"""

import pytest
from unittest.mock import Mock
from requests.exceptions import ConnectionError, HTTPError
from miniapp_flows.capabilities.http import RequestsHttpClient
from miniapp_flows.capabilities.registry import Capabilities
from miniapp_shared.exceptions import CapabilityError
from miniapp_shared.logging_config import set_correlation_id


def make_response(status_code=200, headers=None, json_body=None, text="", reason="OK"):
    response = Mock()
    response.status_code = status_code
    response.headers = headers or {}
    response.reason = reason
    response.text = text
    response.json.return_value = json_body
    response.raise_for_status.return_value = None
    return response


def test_json_response_returned():
    """JSON bodies are parsed and returned"""
    session = Mock()
    session.request.return_value = make_response(headers={"content-type": "application/json"}, json_body={"id": 1})
    client = RequestsHttpClient(timeout=5, session=session)

    result = client.send_http_request("https://api.example.com/x", "post", {"a": 1}, {"X-Test": "1"})

    assert result == {"id": 1}
    args, kwargs = session.request.call_args
    assert args == ("POST", "https://api.example.com/x")
    assert kwargs["json"] == {"a": 1}
    assert kwargs["timeout"] == 5
    assert kwargs["headers"]["X-Test"] == "1"
    assert kwargs["headers"]["Content-Type"] == "application/json"


def test_get_sends_body_as_query():
    """GET requests carry the body as query parameters"""
    session = Mock()
    session.request.return_value = make_response(text="hello")
    client = RequestsHttpClient(session=session)

    result = client.send_http_request("https://api.example.com/x", "GET", {"q": "1"}, {})

    assert result == {"text": "hello", "status_code": 200}
    kwargs = session.request.call_args[1]
    assert kwargs["params"] == {"q": "1"}
    assert kwargs["json"] is None


def test_correlation_id_forwarded():
    """The logging correlation id is sent as a header"""
    session = Mock()
    session.request.return_value = make_response()
    client = RequestsHttpClient(session=session)
    set_correlation_id("corr-123")

    try:
        client.send_http_request("https://api.example.com/x", "POST", {}, {})
    finally:
        set_correlation_id("")

    assert session.request.call_args[1]["headers"]["X-Correlation-ID"] == "corr-123"


def test_rate_limit_is_retryable_with_retry_after():
    """429 responses become retryable errors carrying Retry-After"""
    session = Mock()
    session.request.return_value = make_response(
        status_code=429, headers={"Retry-After": "12"}, reason="Too Many Requests"
    )
    client = RequestsHttpClient(session=session)

    with pytest.raises(CapabilityError, match="HTTP 429") as exc_info:
        client.send_http_request("https://api.example.com/x", "POST", {}, {})

    error = exc_info.value.error
    assert error.is_retryable is True
    assert error.retry_after_seconds == 12
    assert error.http_status_code == 429


def test_network_error_is_retryable():
    """Connection problems are retryable"""
    session = Mock()
    session.request.side_effect = ConnectionError("refused")
    client = RequestsHttpClient(session=session)

    with pytest.raises(CapabilityError, match="Network error") as exc_info:
        client.send_http_request("https://api.example.com/x", "POST", {}, {})

    assert exc_info.value.error.error_type == "NETWORK_ERROR"
    assert exc_info.value.error.is_retryable is True


def test_client_error_not_retryable():
    """4xx responses are not retryable"""
    response = make_response(status_code=404, reason="Not Found")
    response.raise_for_status.side_effect = HTTPError("404 Client Error", response=response)
    session = Mock()
    session.request.return_value = response
    client = RequestsHttpClient(session=session)

    with pytest.raises(CapabilityError, match="Request failed") as exc_info:
        client.send_http_request("https://api.example.com/x", "POST", {}, {})

    assert exc_info.value.error.is_retryable is False
    assert exc_info.value.error.http_status_code == 404


def test_close_releases_session():
    """close() closes the pooled session"""
    session = Mock()
    client = RequestsHttpClient(session=session)

    client.close()

    session.close.assert_called_once()


def test_default_http_client_is_shared():
    """Executors without their own HTTP client share one pooled client"""
    first, second = Capabilities(), Capabilities()

    assert isinstance(first.http, RequestsHttpClient)
    assert first.http is second.http
    assert first.chain is not second.chain
