from unittest.mock import patch

import config


def test_health_ok(client, tmp_path, monkeypatch):
    monkeypatch.setattr(config, "UPLOAD_DIR", str(tmp_path))
    monkeypatch.setattr(config, "GENERATION_PROVIDER", "gateway")
    monkeypatch.setattr(config, "GATEWAY_API_KEY", "test_key")

    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert set(body["checks"]) == {"application", "database", "generation_provider", "uploads"}


def test_health_degraded_without_provider_credentials(client, tmp_path, monkeypatch):
    monkeypatch.setattr(config, "UPLOAD_DIR", str(tmp_path))
    monkeypatch.setattr(config, "GENERATION_PROVIDER", "vertex")
    monkeypatch.setattr(config, "GOOGLE_PROJECT_ID", None)
    monkeypatch.setattr(config, "GEMINI_API_KEY", None)

    body = client.get("/health").json()

    assert body["status"] == "degraded"
    assert body["checks"]["generation_provider"]["status"] == "degraded"


def test_health_unavailable_when_database_down(client, tmp_path, monkeypatch):
    monkeypatch.setattr(config, "UPLOAD_DIR", str(tmp_path))

    with patch("tryon.db.ping", side_effect=RuntimeError("db down")):
        body = client.get("/health").json()

    assert body["status"] == "unavailable"
    assert body["checks"]["database"] == {"status": "unavailable", "message": "Database connection failed"}
