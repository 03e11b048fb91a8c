"""Tests for observability endpoints and metrics."""

from __future__ import annotations

from docflow.observability import metrics_registry


def test_metrics_endpoint_tracks_requests(client):
    metrics_registry.reset()
    response = client.get("/api/health")
    assert response.status_code == 200

    metrics_response = client.get("/api/metrics")
    assert metrics_response.status_code == 200
    payload = metrics_response.json()

    assert payload["requests_total"] >= 1
    assert payload["status_codes"]["2xx"] >= 1
    assert payload["routes"]["GET /api/health"]["count"] == 1


def test_metrics_group_routes_by_template(client):
    metrics_registry.reset()
    client.get("/api/documents/1")
    client.get("/api/documents/2")

    routes = client.get("/api/metrics").json()["routes"]

    assert routes["GET /api/documents/{document_id}"]["count"] == 2


def test_status_endpoint_reports_database_and_version(client):
    metrics_registry.reset()
    status_response = client.get("/api/status")
    assert status_response.status_code == 200
    payload = status_response.json()

    assert payload["database"]["ok"] is True
    assert payload["database"]["documents"] == {}
    assert payload["app"]["version"]
    assert payload["extraction"]["configured"] is True
    assert payload["extraction"]["require_review"] is True
    assert "requests_total" in payload["metrics"]


def test_status_counts_documents_by_state(client):
    files = {"file": ("notes.txt", b"hello world!", "text/plain")}
    assert client.post("/api/documents/upload", files=files).status_code == 201

    payload = client.get("/api/status").json()

    assert payload["database"]["documents"] == {"uploaded": 1}
    assert payload["metrics"]["uploads"]["outcomes"] == {"uploaded": 1}
    assert payload["metrics"]["uploads"]["bytes_stored"] == 12
