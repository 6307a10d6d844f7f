"""Tests for the /api/users endpoints."""

from storefront.models import User

from conftest import seed


def test_create_user_without_name_is_rejected(client):
    response = client.post("/api/users", json={})

    assert response.status_code == 400
    assert response.json() == {"message": "name required"}


def test_create_user_blank_name_is_rejected(client):
    response = client.post("/api/users", json={"name": "   "})

    assert response.status_code == 400
    assert response.json()["message"] == "name required"


def test_create_user_returns_row(client):
    response = client.post("/api/users", json={"name": "Ali"})

    assert response.status_code == 201
    assert response.json() == {"id": 1, "name": "Ali"}


def test_list_and_get_users(client, engine):
    seed(engine, User(name="Ali"), User(name="Mona"))

    response = client.get("/api/users")
    assert response.status_code == 200
    assert response.json() == [{"id": 1, "name": "Ali"}, {"id": 2, "name": "Mona"}]

    response = client.get("/api/users/2")
    assert response.status_code == 200
    assert response.json() == {"id": 2, "name": "Mona"}


def test_get_missing_user_returns_404(client):
    response = client.get("/api/users/42")

    assert response.status_code == 404
    assert response.json() == {"message": "User not found"}


def test_update_user(client, engine):
    seed(engine, User(name="Ali"))

    response = client.put("/api/users/1", json={"name": "Ali Hassan"})

    assert response.status_code == 200
    assert response.json() == {"id": 1, "name": "Ali Hassan"}
    assert client.get("/api/users/1").json()["name"] == "Ali Hassan"


def test_update_user_requires_name(client, engine):
    seed(engine, User(name="Ali"))

    response = client.put("/api/users/1", json={})

    assert response.status_code == 400
    assert client.get("/api/users/1").json()["name"] == "Ali"


def test_update_missing_user_returns_404(client):
    response = client.put("/api/users/7", json={"name": "Nobody"})

    assert response.status_code == 404


def test_delete_user(client, engine):
    seed(engine, User(name="Ali"))

    response = client.delete("/api/users/1")

    assert response.status_code == 204
    assert response.content == b""
    assert client.get("/api/users/1").status_code == 404


def test_delete_missing_user_changes_nothing(client, engine):
    seed(engine, User(name="Ali"))

    response = client.delete("/api/users/99")

    assert response.status_code == 404
    assert response.json() == {"message": "User not found"}
    assert client.get("/api/users").json() == [{"id": 1, "name": "Ali"}]


def test_non_integer_id_is_a_client_error(client):
    response = client.get("/api/users/abc")

    assert response.status_code == 400
    assert "message" in response.json()
