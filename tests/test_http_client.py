"""Tests for the Meshery HTTP helper."""

from unittest.mock import Mock, patch

import httpx
import pytest

from meshctl.utils.errors import APIError, ServerUnreachableError
from meshctl.utils.http import HTTPClient

BASE_URL = "http://localhost:9081"


def make_response(data=None, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = data
    response.content = b"{}" if data is not None else b""
    response.raise_for_status = Mock()
    return response


def status_error(status_code: int, text: str = "") -> httpx.HTTPStatusError:
    return httpx.HTTPStatusError(
        f"HTTP {status_code}",
        request=Mock(),
        response=Mock(status_code=status_code, text=text),
    )


class TestHTTPClient:
    """Tests for HTTPClient."""

    def test_url_joining(self):
        client = HTTPClient(f"{BASE_URL}/")
        assert client.base_url == BASE_URL
        assert client.url("/api/meshmodels/models") == f"{BASE_URL}/api/meshmodels/models"
        assert client.url("api/system/version") == f"{BASE_URL}/api/system/version"

    @patch("meshctl.utils.http.httpx.Client")
    def test_client_carries_cookies_and_timeout(self, mock_client_class):
        mock_client_class.return_value.request.return_value = make_response({})
        client = HTTPClient(BASE_URL, cookies={"token": "abc", "meshery-provider": "Meshery"}, timeout=4.0)
        client.get_json("/api/meshmodels/models")

        kwargs = mock_client_class.call_args.kwargs
        assert kwargs["cookies"] == {"token": "abc", "meshery-provider": "Meshery"}
        assert kwargs["timeout"] == 4.0

    @patch("meshctl.utils.http.httpx.Client")
    def test_get_json_success(self, mock_client_class):
        mock_client = Mock()
        mock_client.request.return_value = make_response({"count": 1, "models": []})
        mock_client_class.return_value = mock_client

        data = HTTPClient(BASE_URL).get_json("/api/meshmodels/models", params={"page": 1})

        assert data == {"count": 1, "models": []}
        mock_client.request.assert_called_once_with(
            "GET", f"{BASE_URL}/api/meshmodels/models", params={"page": 1}
        )

    @patch("meshctl.utils.http.httpx.Client")
    def test_client_is_reused_and_closed(self, mock_client_class):
        mock_client = Mock()
        mock_client.request.return_value = make_response({})
        mock_client_class.return_value = mock_client

        with HTTPClient(BASE_URL) as client:
            client.get_json("/a")
            client.get_json("/b")

        assert mock_client_class.call_count == 1
        mock_client.close.assert_called_once()

    @patch("meshctl.utils.http.httpx.Client")
    def test_http_error_status(self, mock_client_class):
        response = make_response()
        response.raise_for_status.side_effect = status_error(500, "internal error")
        mock_client_class.return_value.request.return_value = response

        with pytest.raises(APIError) as exc_info:
            HTTPClient(BASE_URL).get_json("/api/meshmodels/models")

        assert exc_info.value.status_code == 500
        assert "HTTP 500" in str(exc_info.value)
        assert "internal error" in str(exc_info.value)

    @patch("meshctl.utils.http.httpx.Client")
    def test_unauthorized(self, mock_client_class):
        response = make_response()
        response.raise_for_status.side_effect = status_error(401)
        mock_client_class.return_value.request.return_value = response

        with pytest.raises(APIError, match="authentication failed") as exc_info:
            HTTPClient(BASE_URL).get_json("/api/meshmodels/models")
        assert exc_info.value.status_code == 401

    @patch("meshctl.utils.http.httpx.Client")
    def test_transport_error(self, mock_client_class):
        mock_client_class.return_value.request.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(APIError, match="connection refused") as exc_info:
            HTTPClient(BASE_URL).get_json("/api/meshmodels/models")
        assert exc_info.value.status_code is None

    @patch("meshctl.utils.http.httpx.Client")
    def test_decode_error(self, mock_client_class):
        response = make_response()
        response.json.side_effect = ValueError("Expecting value")
        mock_client_class.return_value.request.return_value = response

        with pytest.raises(APIError, match="unable to decode"):
            HTTPClient(BASE_URL).get_json("/api/meshmodels/models")

    @patch("meshctl.utils.http.httpx.Client")
    def test_post_json(self, mock_client_class):
        mock_client = mock_client_class.return_value
        mock_client.request.return_value = make_response({"message": "ok"})

        result = HTTPClient(BASE_URL).post_json("/api/meshmodels/register", {"uploadType": "url"})

        assert result == {"message": "ok"}
        mock_client.request.assert_called_once_with(
            "POST", f"{BASE_URL}/api/meshmodels/register", json={"uploadType": "url"}
        )

    @patch("meshctl.utils.http.httpx.Client")
    def test_post_json_empty_body(self, mock_client_class):
        mock_client_class.return_value.request.return_value = make_response(None)
        assert HTTPClient(BASE_URL).post_json("/api/meshmodels/register", {}) == {}


class TestServerChecks:
    @patch("meshctl.utils.http.httpx.Client")
    def test_server_running(self, mock_client_class):
        mock_client = mock_client_class.return_value
        mock_client.get.return_value = make_response(status_code=404)

        HTTPClient(BASE_URL, ping_timeout=1.5).is_server_running()

        mock_client.get.assert_called_once_with(BASE_URL, timeout=1.5)

    @patch("meshctl.utils.http.httpx.Client")
    def test_server_not_running(self, mock_client_class):
        mock_client_class.return_value.get.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(ServerUnreachableError, match="not reachable"):
            HTTPClient(BASE_URL).is_server_running()

    @patch("meshctl.utils.http.httpx.Client")
    def test_server_version(self, mock_client_class):
        mock_client = mock_client_class.return_value
        mock_client.request.return_value = make_response({"build": "v0.7.2", "commitsha": "abc"})

        assert HTTPClient(BASE_URL).get_server_version() == "v0.7.2"
        assert mock_client.request.call_args.args == ("GET", f"{BASE_URL}/api/system/version")

    @patch("meshctl.utils.http.httpx.Client")
    def test_server_version_missing(self, mock_client_class):
        mock_client_class.return_value.request.return_value = make_response({"commitsha": "abc"})
        assert HTTPClient(BASE_URL).get_server_version() is None

    @patch("meshctl.utils.http.httpx.Client")
    def test_server_version_not_a_string(self, mock_client_class):
        mock_client_class.return_value.request.return_value = make_response({"build": 7.2})

        with pytest.raises(APIError, match="unexpected version response"):
            HTTPClient(BASE_URL).get_server_version()
