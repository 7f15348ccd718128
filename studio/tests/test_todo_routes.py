from unittest.mock import patch

from sqlalchemy.exc import OperationalError


def test_list_is_empty_initially(client):
    response = client.get("/api/todos")

    assert response.status_code == 200
    assert response.json() == []


def test_create_then_list(client):
    first = client.post("/api/todos", json={"title": "Buy a blazer"})
    client.post("/api/todos", json={"title": "  Book a stylist  "})

    assert first.status_code == 201
    assert first.json()["title"] == "Buy a blazer"

    titles = [todo["title"] for todo in client.get("/api/todos").json()]
    assert titles == ["Buy a blazer", "Book a stylist"]


def test_blank_title_is_rejected(client):
    response = client.post("/api/todos", json={"title": "   "})

    assert response.status_code == 400
    assert response.json() == {"error": "Title is required"}


def test_database_error_is_500(client):
    with patch("sqlalchemy.orm.Session.execute", side_effect=OperationalError("SELECT", {}, Exception("db down"))):
        response = client.get("/api/todos")

    assert response.status_code == 500
    assert response.json() == {"error": "Server Error"}
