from fastapi.testclient import TestClient

from coach_api.main import app


def _analyze(client: TestClient, session_id=None, duration="12.5", audio=b"RIFF....WAVEfmt "):
    data = {"duration": duration}
    if session_id is not None:
        data["sessionId"] = session_id
    files = {"audio": ("clip.webm", audio, "audio/webm")}
    return client.post("/api/analyze-voice", data=data, files=files)


def test_health():
    with TestClient(app) as client:
        r = client.get("/api/health")
        assert r.status_code == 200
        assert r.json() == {"status": "ok"}


def test_analyze_voice_returns_camel_case_analysis():
    with TestClient(app) as client:
        r = _analyze(client, session_id="s-shape")
        assert r.status_code == 200, r.text
        body = r.json()
        assert body["success"] is True
        assert body["sessionId"] == "s-shape"
        analysis = body["analysis"]
        for key in ("tone", "speed", "clarity", "volume", "pauses", "modulation",
                    "ratings", "suggestions", "confidenceScore", "duration", "timestamp"):
            assert key in analysis
        assert analysis["duration"] == 12.5
        assert 0 <= analysis["confidenceScore"] <= 100


def test_same_session_id_accumulates_recordings_in_order():
    with TestClient(app) as client:
        first = _analyze(client, session_id="s-twice").json()["analysis"]
        second = _analyze(client, session_id="s-twice").json()["analysis"]

        r = client.get("/api/sessions/s-twice")
        assert r.status_code == 200
        session = r.json()
        assert session["id"] == "s-twice"
        assert "createdAt" in session
        assert len(session["recordings"]) == 2
        assert session["recordings"][0]["analysis"] == first
        assert session["recordings"][1]["analysis"] == second

        sessions = client.get("/api/sessions").json()
        assert [s["id"] for s in sessions] == ["s-twice"]


def test_sessions_list_counts_distinct_ids():
    with TestClient(app) as client:
        assert client.get("/api/sessions").json() == []
        for sid in ("a", "b", "a", "c"):
            assert _analyze(client, session_id=sid).status_code == 200
        sessions = client.get("/api/sessions").json()
        assert [s["id"] for s in sessions] == ["a", "b", "c"]
        assert [len(s["recordings"]) for s in sessions] == [2, 1, 1]


def test_missing_session_id_gets_generated():
    with TestClient(app) as client:
        body = _analyze(client).json()
        assert body["sessionId"].startswith("session-")
        assert client.get(f"/api/sessions/{body['sessionId']}").status_code == 200


def test_unknown_session_is_404():
    with TestClient(app) as client:
        r = client.get("/api/sessions/never-used")
        assert r.status_code == 404
        assert r.json() == {"error": "Session not found"}


def test_missing_audio_is_400_and_creates_nothing():
    with TestClient(app) as client:
        r = client.post("/api/analyze-voice", data={"duration": "3", "sessionId": "no-audio"})
        assert r.status_code == 400
        assert r.json() == {"error": "No audio file provided"}
        assert client.get("/api/sessions").json() == []


def test_unparsable_duration_defaults_to_zero():
    with TestClient(app) as client:
        analysis = _analyze(client, session_id="s-dur", duration="abc").json()["analysis"]
        assert analysis["duration"] == 0
        assert analysis["pauses"] in ("too-few", "adequate")


def test_long_duration_uses_long_pause_labels():
    with TestClient(app) as client:
        for _ in range(10):
            analysis = _analyze(client, session_id="s-long", duration="45").json()["analysis"]
            assert analysis["pauses"] in ("adequate", "good", "excellent")


def test_oversized_upload_is_rejected(monkeypatch):
    monkeypatch.setenv("MAX_UPLOAD_BYTES", "16")
    with TestClient(app) as client:
        r = _analyze(client, session_id="s-big", audio=b"x" * 64)
        assert r.status_code == 413
        assert r.json() == {"error": "Audio file too large"}
        assert client.get("/api/sessions/s-big").status_code == 404


def test_analysis_failure_is_500():
    class BrokenProvider:
        provider_name = "broken"

        def analyze(self, audio, duration):
            raise RuntimeError("decoder exploded")

    with TestClient(app) as client:
        client.app.state.analysis_provider = BrokenProvider()
        r = _analyze(client, session_id="s-broken")
        assert r.status_code == 500
        assert r.json() == {"error": "Failed to analyze voice recording"}


def test_unknown_route_uses_error_shape():
    with TestClient(app) as client:
        r = client.get("/api/nope")
        assert r.status_code == 404
        assert "error" in r.json()


def test_duration_reads_leading_number():
    with TestClient(app) as client:
        analysis = _analyze(client, session_id="s-prefix", duration="45s").json()["analysis"]
        assert analysis["duration"] == 45
        assert analysis["pauses"] in ("adequate", "good", "excellent")
        assert _analyze(client, session_id="s-prefix", duration=" 2.5e1sec").json()["analysis"]["duration"] == 25
        assert _analyze(client, session_id="s-prefix", duration="sec45").json()["analysis"]["duration"] == 0


def test_openapi_documents_error_shape():
    with TestClient(app) as client:
        schema = client.get("/openapi.json").json()
    assert "ErrorResponse" in schema["components"]["schemas"]
    not_found = schema["paths"]["/api/sessions/{session_id}"]["get"]["responses"]["404"]
    assert not_found["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")
