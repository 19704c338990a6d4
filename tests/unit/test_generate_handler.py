"""Tests for the generate and history endpoints."""

import httpx
import pytest
from fastapi.testclient import TestClient

from namecraft.config import HistorySettings, Settings, UpstreamSettings
from namecraft.main import create_app

UPSTREAM_URL = "https://names.example.test/"


class StubUpstream:
    """Stub name generation service."""

    def __init__(self, response: httpx.Response):
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response


def make_client(upstream: StubUpstream, **settings_kwargs) -> TestClient:
    settings = Settings(
        upstream=UpstreamSettings(base_url=UPSTREAM_URL),
        **settings_kwargs,
    )
    app = create_app(settings, transport=httpx.MockTransport(upstream))
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def both_upstream():
    """Upstream returning two name/username pairs."""
    return StubUpstream(
        httpx.Response(
            200,
            json=[
                {"name": "Ava", "username": "ava99"},
                {"name": "Leo", "username": "leo_x"},
            ],
        )
    )


class TestGenerateEndpoint:
    """Tests for POST /api/generate."""

    def test_end_to_end_both(self, both_upstream):
        """Test a both request yields both fields in upstream order."""
        client = make_client(both_upstream)

        response = client.post(
            "/api/generate",
            json={"type": "both", "count": 2, "platform": "twitter"},
        )

        assert response.status_code == 200
        assert response.json() == [
            {"name": "Ava", "username": "ava99"},
            {"name": "Leo", "username": "leo_x"},
        ]
        assert len(both_upstream.requests) == 1
        params = both_upstream.requests[0].url.params
        assert params["type"] == "both"
        assert params["count"] == "2"
        assert params["platform"] == "twitter"

    def test_warning_wrapped_payload(self):
        """Test a warning-wrapped upstream payload is unwrapped."""
        upstream = StubUpstream(
            httpx.Response(
                200,
                json={"warning": True, "rawResponse": {"response": '[{"username":"x"}]'}},
            )
        )
        client = make_client(upstream)

        response = client.post(
            "/api/generate",
            json={"type": "username", "count": 1, "platform": "github"},
        )

        assert response.status_code == 200
        assert response.json() == [{"username": "x"}]

    def test_malformed_wrapped_payload(self):
        """Test an unparseable wrapped payload returns an error body."""
        upstream = StubUpstream(
            httpx.Response(
                200,
                json={"warning": True, "rawResponse": {"response": "not-json"}},
            )
        )
        client = make_client(upstream)

        response = client.post(
            "/api/generate",
            json={"type": "username", "count": 1, "platform": "github"},
        )

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "MALFORMED_RESPONSE"
        assert body["error"]

    def test_odd_field_value_keeps_other_results(self):
        """Test a numeric username does not fail the whole response."""
        upstream = StubUpstream(httpx.Response(200, json=[{"username": 123}, {"username": "b"}]))
        client = make_client(upstream)

        response = client.post(
            "/api/generate",
            json={"type": "username", "count": 2, "platform": "github"},
        )

        assert response.status_code == 200
        assert response.json() == [{"username": 123}, {"username": "b"}]
        assert client.get("/api/history").json()["entries"][0]["preview"] == [
            {"username": 123},
            {"username": "b"},
        ]

    def test_missing_fields_returns_400_without_upstream_call(self, both_upstream):
        """Test validation failures return 400 and never call upstream."""
        client = make_client(both_upstream)

        response = client.post("/api/generate", json={"count": 2})

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required parameters"
        assert both_upstream.requests == []

    def test_non_numeric_count_returns_400(self, both_upstream):
        """Test a string count is rejected."""
        client = make_client(both_upstream)

        response = client.post(
            "/api/generate",
            json={"type": "both", "count": "two", "platform": "twitter"},
        )

        assert response.status_code == 400
        assert both_upstream.requests == []

    def test_unreadable_body_returns_400(self, both_upstream):
        """Test a body that is not JSON is rejected."""
        client = make_client(both_upstream)

        response = client.post(
            "/api/generate",
            content=b"type=both",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Failed to process request"

    def test_upstream_status_passed_through(self):
        """Test a non-2xx upstream status becomes the response status."""
        upstream = StubUpstream(httpx.Response(429, text="slow down"))
        client = make_client(upstream)

        response = client.post(
            "/api/generate",
            json={"type": "name", "count": 3, "platform": "blog"},
        )

        assert response.status_code == 429
        body = response.json()
        assert body["error"] == "API request failed with status 429"
        assert body["code"] == "UPSTREAM_ERROR"

    def test_connection_failure_returns_500(self):
        """Test transport failures return 500 with a readable message."""

        def refusing(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        settings = Settings(upstream=UpstreamSettings(base_url=UPSTREAM_URL))
        app = create_app(settings, transport=httpx.MockTransport(refusing))
        client = TestClient(app, raise_server_exceptions=False)

        response = client.post(
            "/api/generate",
            json={"type": "name", "count": 3, "platform": "blog"},
        )

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to connect to name generation service"

    def test_timeout_returns_408(self):
        """Test upstream timeouts return 408."""

        def timing_out(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        settings = Settings(upstream=UpstreamSettings(base_url=UPSTREAM_URL))
        app = create_app(settings, transport=httpx.MockTransport(timing_out))
        client = TestClient(app, raise_server_exceptions=False)

        response = client.post(
            "/api/generate",
            json={"type": "name", "count": 3, "platform": "blog"},
        )

        assert response.status_code == 408
        assert response.json()["error"] == "Request timed out. Please try again."

    def test_error_includes_request_id(self, both_upstream):
        """Test error bodies echo the request ID header."""
        client = make_client(both_upstream)
        request_id = "550e8400-e29b-41d4-a716-446655440000"

        response = client.post(
            "/api/generate",
            json={},
            headers={"X-Request-ID": request_id},
        )

        assert response.json()["request_id"] == request_id
        assert response.headers["X-Request-ID"] == request_id


class TestHistoryEndpoints:
    """Tests for the history endpoints."""

    def test_successful_generation_recorded(self, both_upstream):
        """Test a successful generation appears in history."""
        client = make_client(both_upstream)
        client.post("/api/generate", json={"type": "both", "count": 2, "platform": "twitter"})

        response = client.get("/api/history")

        assert response.status_code == 200
        data = response.json()
        assert data["capacity"] == 20
        assert len(data["entries"]) == 1
        entry = data["entries"][0]
        assert entry["params"]["type"] == "both"
        assert entry["params"]["platform"] == "twitter"
        assert entry["preview"] == [
            {"name": "Ava", "username": "ava99"},
            {"name": "Leo", "username": "leo_x"},
        ]

    def test_failed_generation_not_recorded(self, both_upstream):
        """Test validation failures leave history untouched."""
        client = make_client(both_upstream)
        client.post("/api/generate", json={"type": "both"})

        assert client.get("/api/history").json()["entries"] == []

    def test_preview_limited_to_four(self):
        """Test previews show at most four results."""
        upstream = StubUpstream(
            httpx.Response(200, json=[{"username": f"u{i}"} for i in range(6)])
        )
        client = make_client(upstream)
        client.post("/api/generate", json={"type": "username", "count": 6, "platform": "x"})

        entry = client.get("/api/history").json()["entries"][0]

        assert len(entry["results"]) == 6
        assert entry["preview"] == [{"username": f"u{i}"} for i in range(4)]

    def test_capacity_from_settings(self, both_upstream):
        """Test the configured capacity evicts the oldest entries."""
        client = make_client(both_upstream, history=HistorySettings(capacity=2))
        for platform in ["a", "b", "c"]:
            client.post("/api/generate", json={"type": "both", "count": 2, "platform": platform})

        entries = client.get("/api/history").json()["entries"]

        assert [e["params"]["platform"] for e in entries] == ["c", "b"]

    def test_clear_history(self, both_upstream):
        """Test DELETE clears history."""
        client = make_client(both_upstream)
        client.post("/api/generate", json={"type": "both", "count": 2, "platform": "twitter"})

        response = client.delete("/api/history")

        assert response.status_code == 200
        assert response.json() == {"cleared": 1}
        assert client.get("/api/history").json()["entries"] == []

    def test_history_disabled(self, both_upstream):
        """Test generation still works with history disabled."""
        client = make_client(both_upstream, history=HistorySettings(enabled=False))

        response = client.post(
            "/api/generate", json={"type": "both", "count": 2, "platform": "twitter"}
        )

        assert response.status_code == 200
        assert client.get("/api/history").json() == {"entries": [], "capacity": 0}
