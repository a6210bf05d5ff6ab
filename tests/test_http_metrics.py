from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from coach_api.main import app


def _get_metric_count(name: str, labels: dict) -> float:
    val = REGISTRY.get_sample_value(name, labels)
    return float(val) if val is not None else 0.0


def test_http_metrics_increment_on_2xx_and_4xx():
    with TestClient(app) as client:
        # Baselines
        before_ok = _get_metric_count(
            "speechcoach_http_requests_total", {"method": "GET", "path": "/api/health", "status_class": "2xx"}
        )
        before_dur_ok = _get_metric_count(
            "speechcoach_http_request_duration_seconds_count", {"method": "GET", "path": "/api/health"}
        )
        before_404 = _get_metric_count(
            "speechcoach_http_requests_total",
            {"method": "GET", "path": "/api/sessions/{session_id}", "status_class": "4xx"},
        )

        assert client.get("/api/health").status_code == 200
        assert client.get("/api/sessions/missing").status_code == 404

        after_ok = _get_metric_count(
            "speechcoach_http_requests_total", {"method": "GET", "path": "/api/health", "status_class": "2xx"}
        )
        after_dur_ok = _get_metric_count(
            "speechcoach_http_request_duration_seconds_count", {"method": "GET", "path": "/api/health"}
        )
        after_404 = _get_metric_count(
            "speechcoach_http_requests_total",
            {"method": "GET", "path": "/api/sessions/{session_id}", "status_class": "4xx"},
        )

    assert after_ok >= before_ok + 1
    assert after_dur_ok >= before_dur_ok + 1
    assert after_404 >= before_404 + 1


def test_analysis_counter_increments():
    with TestClient(app) as client:
        before = _get_metric_count("speechcoach_analyses_total", {"provider": "random"})
        files = {"audio": ("clip.webm", b"abc", "audio/webm")}
        r = client.post("/api/analyze-voice", data={"duration": "4", "sessionId": "m1"}, files=files)
        assert r.status_code == 200
        after = _get_metric_count("speechcoach_analyses_total", {"provider": "random"})
    assert after >= before + 1


def test_metrics_endpoint_exposes_prometheus_text():
    with TestClient(app) as client:
        r = client.get("/metrics")
        assert r.status_code == 200
        assert "speechcoach_http_requests_total" in r.text


def test_service_metrics():
    with TestClient(app) as client:
        files = {"audio": ("clip.webm", b"abc", "audio/webm")}
        client.post("/api/analyze-voice", data={"duration": "4", "sessionId": "sm"}, files=files)
        client.post("/api/analyze-voice", data={"duration": "4", "sessionId": "sm"}, files=files)
        body = client.get("/service-metrics").json()
    assert body == {
        "sessionCount": 1,
        "recordingCount": 2,
        "conversationCount": 1,
        "mentorMode": "NO_CREDENTIALS",
    }


def test_http_metrics_use_route_templates_not_raw_paths():
    with TestClient(app) as client:
        before_unmatched = _get_metric_count(
            "speechcoach_http_requests_total", {"method": "GET", "path": "unmatched", "status_class": "4xx"}
        )
        for sid in ("raw-a", "raw-b", "raw-c"):
            assert client.get(f"/api/sessions/{sid}").status_code == 404
        assert client.get("/definitely/not/a/route").status_code == 404

    for sid in ("raw-a", "raw-b", "raw-c"):
        assert REGISTRY.get_sample_value(
            "speechcoach_http_requests_total",
            {"method": "GET", "path": f"/api/sessions/{sid}", "status_class": "4xx"},
        ) is None
    assert REGISTRY.get_sample_value(
        "speechcoach_http_requests_total",
        {"method": "GET", "path": "/definitely/not/a/route", "status_class": "4xx"},
    ) is None
    after_unmatched = _get_metric_count(
        "speechcoach_http_requests_total", {"method": "GET", "path": "unmatched", "status_class": "4xx"}
    )
    assert after_unmatched >= before_unmatched + 1
