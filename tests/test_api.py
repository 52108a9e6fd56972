from fastapi.testclient import TestClient

from hue_scheduler.main import app


def test_parse_endpoint():
    client = TestClient(app)
    resp = client.post("/api/parse", json={"name": "Natural light (8AM-10:30h, 17h-sunset)"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["display_name"] == "Natural light"
    assert body["windows"] == [
        {"start": "8:00h", "end": "10:30h"},
        {"start": "17:00h", "end": "sunset"},
    ]
    assert body["is_attached"] is False
    assert body["error"] is None


def test_parse_endpoint_reports_malformed_schedule():
    client = TestClient(app)
    body = client.post("/api/parse", json={"name": "Broken (10h-25h)"}).json()
    assert body["windows"] == []
    assert "out of range" in body["error"]


def test_controller_toggle():
    client = TestClient(app)
    assert client.post("/api/controller/disable").json() == {"ok": True, "enabled": False}
    assert client.post("/api/controller/enable").json() == {"ok": True, "enabled": True}


def test_solar_endpoint():
    client = TestClient(app)
    body = client.get("/api/solar").json()
    assert set(body) == {"date", "sunrise", "sunset"}
