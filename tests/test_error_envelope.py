import httpx
from fastapi.testclient import TestClient

from src.main import app


def test_error_responses_include_request_id_in_body_and_header():
    client = TestClient(app)

    r = client.get("/this-route-does-not-exist")
    assert r.status_code == 404

    payload = r.json()
    assert payload["success"] is False
    assert "request_id" in payload
    assert payload["request_id"], payload

    assert r.headers.get("x-request-id") == payload["request_id"]


def test_caller_request_id_is_reused():
    client = TestClient(app)

    r = client.get("/api/support/applications/unknown_type/1", headers={"X-Request-ID": "req-123"})
    assert r.status_code == 400
    assert r.json()["request_id"] == "req-123"
    assert r.headers.get("x-request-id") == "req-123"


def test_transport_failure_is_distinct_and_retryable(client, upstream):
    upstream.error = httpx.ConnectError("connection refused")

    r = client.get("/api/support/applications/carrier_application/5")
    assert r.status_code == 502
    body = r.json()
    assert body["success"] is False
    assert body["retryable"] is True
    assert body["message"]


def test_upstream_timeout_maps_to_504(client, upstream):
    upstream.error = httpx.ReadTimeout("timed out")

    r = client.get("/api/support/applications/dealer-forms")
    assert r.status_code == 504
    assert r.json()["retryable"] is True
