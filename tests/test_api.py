# tests/test_api.py
import json
import random
import pytest
from fastapi.testclient import TestClient

from triunity.api.server import create_app
from triunity.config.service_config import ServiceConfig
from triunity.exceptions import ConfigurationError
from triunity.telemetry import generators
from triunity.telemetry.clock import FixedClock

WEDNESDAY_NOON_MS = 1704283200000
OPERATIONS = {"metrics", "status", "validators", "blocks", "health", "transactions"}

CORS_HEADERS = {
    "access-control-allow-origin": "*",
    "access-control-allow-headers": "Content-Type, Authorization",
    "cache-control": "s-maxage=5, stale-while-revalidate=10",
    "x-content-type-options": "nosniff",
    "x-frame-options": "DENY",
}

DOCUMENTED_FIELDS = {
    "metrics": {"tps", "block_time_ms", "validator_count", "active_validators", "ai_mode",
                "health_percentage", "current_block_height", "quantum_security_level"},
    "status": {"network", "status", "ai_mode", "current_block_height", "protocol_version"},
    "validators": {"total_validators", "active_validators", "validators"},
    "blocks": {"latest_height", "blocks"},
    "health": {"status", "checks", "uptime_percentage", "version"},
    "transactions": {"count", "pending_count", "transactions"},
}

VALID_SUBMISSION = {
    "from_address": "0x" + "12" * 20,
    "to_address": "0x" + "34" * 20,
    "amount": 3.5,
}


def make_app(profile: str = "enhanced", seed: int = 1234, dev_mode: bool = False):
    config = ServiceConfig.from_dict({
        "telemetry": {"profile": profile},
        "api": {"dev_mode": dev_mode},
    })
    return create_app(config, clock=FixedClock(WEDNESDAY_NOON_MS), rng=random.Random(seed))


def assert_cors_headers(response):
    for name, value in CORS_HEADERS.items():
        assert response.headers[name] == value
    assert "strict-transport-security" in response.headers


class TestTelemetryApi:
    @pytest.fixture
    def app(self):
        return make_app()

    @pytest.fixture
    def client(self, app):
        return TestClient(app)

    @pytest.mark.parametrize("operation", sorted(OPERATIONS))
    def test_read_operations_return_envelope(self, client, operation):
        response = client.get(f"/api/{operation}")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["timestamp"] == "2024-01-03T12:00:00.000Z"
        assert body["network"] == "TriUnity Mainnet"
        assert DOCUMENTED_FIELDS[operation] <= set(body["data"])

        metadata = body["metadata"]
        assert metadata["api_version"] == "3.0.0"
        assert metadata["profile"] == "enhanced"
        assert 10 <= metadata["response_time_ms"] <= 60
        assert metadata["cache_status"] in ("HIT", "MISS")
        assert metadata["node"]["id"] == "triunity-node-01"
        assert metadata["rate_limit"]["limit"] == 1000
        assert 800 <= metadata["rate_limit"]["remaining"] < 1000
        assert metadata["rate_limit"]["reset"] == WEDNESDAY_NOON_MS // 1000 + 60

    def test_status_envelope_carries_status(self, client):
        body = client.get("/api/status").json()
        assert body["status"] == body["data"]["status"]
        assert body["network"] == body["data"]["network"]

    def test_headers_on_success(self, client):
        response = client.get("/api/metrics")

        assert_cors_headers(response)
        assert response.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"
        assert response.headers["strict-transport-security"] == "max-age=31536000; includeSubDomains"
        assert "content-security-policy" in response.headers
        assert response.headers["referrer-policy"] == "strict-origin-when-cross-origin"

    @pytest.mark.parametrize("path", ["/api/metrics", "/api/transactions", "/api/unknown", "/api", "/elsewhere"])
    def test_options_preflight(self, client, path):
        response = client.options(path)

        assert response.status_code == 200
        assert response.content == b""
        assert_cors_headers(response)

    @pytest.mark.parametrize("method", ["delete", "put", "patch"])
    def test_disallowed_methods(self, client, method):
        response = client.request(method.upper(), "/api/metrics")

        assert response.status_code == 405
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "METHOD_NOT_ALLOWED"
        assert body["error"]["allowed_methods"] == ["GET", "POST"]
        assert_cors_headers(response)

    def test_post_on_read_only_operation(self, client):
        response = client.post("/api/metrics", json=VALID_SUBMISSION)

        assert response.status_code == 405
        assert response.json()["error"]["allowed_methods"] == ["GET"]

    def test_unknown_operation(self, client):
        response = client.get("/api/consensus")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "NOT_FOUND"
        assert set(body["available_endpoints"]) == OPERATIONS
        assert_cors_headers(response)

    @pytest.mark.parametrize("path", ["/api", "/elsewhere", "/openapi.json", "/docs", "/redoc"])
    def test_paths_without_operation(self, client, path):
        response = client.get(path)

        assert response.status_code == 404
        assert set(response.json()["available_endpoints"]) == OPERATIONS
        assert_cors_headers(response)

    def test_submit_transaction(self, client):
        response = client.post("/api/transactions", json=VALID_SUBMISSION)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "pending"
        assert data["to_address"] == VALID_SUBMISSION["to_address"]
        assert data["transaction_hash"].startswith("0x")

    def test_submit_invalid_json(self, client):
        response = client.post(
            "/api/transactions",
            content=b"{not json",
            headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_submit_invalid_fields(self, client):
        payload = dict(VALID_SUBMISSION, from_address="alice", amount=-1)
        response = client.post("/api/transactions", json=payload)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "INVALID_REQUEST"
        assert {d["field"] for d in error["details"]} == {"from_address", "amount"}

    @pytest.mark.parametrize("field, value", [
        ("amount", float("inf")),
        ("amount", float("nan")),
        ("fee", float("inf")),
    ])
    def test_submit_non_finite_numbers(self, client, field, value):
        # json.dumps writes these as the bare Infinity / NaN literals
        payload = dict(VALID_SUBMISSION, fee=0.1)
        payload[field] = value
        body = json.dumps(payload)
        response = client.post(
            "/api/transactions",
            content=body.encode(),
            headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "INVALID_REQUEST"
        assert {d["field"] for d in error["details"]} == {field}
        assert_cors_headers(response)

    def test_generator_failure_returns_500(self, client, app, mocker):
        boom = mocker.Mock(side_effect=RuntimeError("boom"))
        mocker.patch.dict(generators.READ_GENERATORS, {"metrics": boom})

        response = client.get("/api/metrics")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["error"] == {"code": "INTERNAL_SERVER_ERROR", "message": "Internal server error"}
        assert_cors_headers(response)
        registry = app.state.metrics.registry
        assert registry.get_sample_value("triunity_generator_errors_total", {"operation": "metrics"}) == 1

    def test_dev_mode_echoes_error_details(self, mocker):
        client = TestClient(make_app(dev_mode=True))
        mocker.patch.dict(
            generators.READ_GENERATORS,
            {"blocks": mocker.Mock(side_effect=ValueError("bad block"))}
        )

        response = client.get("/api/blocks")

        assert response.status_code == 500
        assert response.json()["error"]["details"] == "bad block"

    def test_requests_are_counted(self, client, app):
        client.get("/api/metrics")
        client.get("/api/metrics")
        client.delete("/api/metrics")
        client.get("/api/nope")

        metrics = app.state.metrics
        assert metrics.request_count("metrics", "GET", 200) == 2
        assert metrics.request_count("metrics", "DELETE", 405) == 1
        assert metrics.request_count("unknown", "GET", 404) == 1

    def test_seeded_apps_are_reproducible(self):
        first = TestClient(make_app(seed=99)).get("/api/validators").json()
        second = TestClient(make_app(seed=99)).get("/api/validators").json()
        assert first == second

    def test_consecutive_calls_differ(self, client):
        first = client.get("/api/transactions").json()["data"]
        second = client.get("/api/transactions").json()["data"]
        assert first != second


class TestProfiles:
    def test_clean_profile(self):
        client = TestClient(make_app(profile="clean"))

        response = client.get("/api/metrics")
        body = response.json()
        assert body["data"]["quantum_security_level"] == "256-bit"
        assert body["metadata"]["api_version"] == "2.2.0"
        assert "network" not in body
        assert "rate_limit" not in body["metadata"]
        assert response.headers["access-control-allow-methods"] == "GET, OPTIONS"
        assert response.headers["strict-transport-security"] == "max-age=31536000"
        assert "content-security-policy" not in response.headers

    def test_clean_profile_rejects_post(self):
        client = TestClient(make_app(profile="clean"))
        response = client.post("/api/metrics", json={})

        assert response.status_code == 405
        assert response.json()["error"]["allowed_methods"] == ["GET"]

    def test_clean_profile_lists_only_metrics(self):
        client = TestClient(make_app(profile="clean"))
        response = client.get("/api/status")

        assert response.status_code == 404
        assert response.json()["available_endpoints"] == ["metrics"]

    def test_standard_profile_is_read_only(self):
        client = TestClient(make_app(profile="standard"))

        assert client.get("/api/transactions").status_code == 200
        response = client.post("/api/transactions", json=VALID_SUBMISSION)
        assert response.status_code == 405
        assert client.get("/api/metrics").json()["data"]["quantum_security_level"] == 256

    def test_unknown_profile_fails_fast(self):
        with pytest.raises(ConfigurationError):
            make_app(profile="v9")
