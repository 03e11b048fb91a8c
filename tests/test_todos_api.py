"""Tests for the todo list endpoints."""

from __future__ import annotations

from fastapi.testclient import TestClient


def test_todo_lifecycle(client: TestClient) -> None:
    created = client.post("/api/todos", json={"title": "Review invoices"})
    assert created.status_code == 201
    todo = created.json()
    assert todo["title"] == "Review invoices"
    assert todo["completed"] is False
    assert todo["description"] is None

    listing = client.get("/api/todos")
    assert [item["id"] for item in listing.json()] == [todo["id"]]

    updated = client.patch(f"/api/todos/{todo['id']}", json={"completed": True})
    assert updated.status_code == 200
    assert updated.json()["completed"] is True
    assert updated.json()["title"] == "Review invoices"

    deleted = client.delete(f"/api/todos/{todo['id']}")
    assert deleted.json() == {"success": True}
    assert client.get(f"/api/todos/{todo['id']}").status_code == 404


def test_patch_changes_only_given_fields(client: TestClient) -> None:
    todo = client.post(
        "/api/todos", json={"title": "File receipts", "description": "Q1"}
    ).json()

    response = client.patch(f"/api/todos/{todo['id']}", json={"title": "File Q1 receipts"})

    assert response.json()["title"] == "File Q1 receipts"
    assert response.json()["description"] == "Q1"
    assert response.json()["completed"] is False


def test_blank_title_is_rejected(client: TestClient) -> None:
    assert client.post("/api/todos", json={"title": ""}).status_code == 422
    assert client.get("/api/todos").json() == []


def test_unknown_todo_returns_404(client: TestClient) -> None:
    assert client.get("/api/todos/42").json() == {"detail": "Todo not found"}
    assert client.patch("/api/todos/42", json={"completed": True}).status_code == 404
    assert client.delete("/api/todos/42").status_code == 404
