"""
User API tests - register, login, lookup.
"""

import pytest

# Shared by every fixture user (see conftest)
PASSWORD = "password123"


@pytest.mark.asyncio
async def test_register(client):
    r = await client.post(
        "/api/v1/users/register",
        json={"email": "new@example.com", "password": "s3cret", "full_name": "New Collector"},
    )
    assert r.status_code == 201
    data = r.json()
    assert data["email"] == "new@example.com"
    assert data["is_admin"] is False
    assert "password" not in data
    assert "hashed_password" not in data


@pytest.mark.asyncio
async def test_register_duplicate_email(client, test_user):
    r = await client.post(
        "/api/v1/users/register",
        json={"email": test_user.email, "password": "s3cret", "full_name": "Copycat"},
    )
    assert r.status_code == 409


@pytest.mark.asyncio
async def test_register_invalid_email(client):
    r = await client.post(
        "/api/v1/users/register",
        json={"email": "not-an-email", "password": "s3cret", "full_name": "Nobody"},
    )
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_login_and_me(client, test_user):
    r = await client.post("/api/v1/users/login", json={"email": test_user.email, "password": PASSWORD})
    assert r.status_code == 200
    token = r.json()
    assert token["token_type"] == "bearer"
    assert token["user_id"] == test_user.id

    r = await client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token['access_token']}"})
    assert r.status_code == 200
    assert r.json()["id"] == test_user.id


@pytest.mark.asyncio
async def test_login_wrong_password(client, test_user):
    r = await client.post("/api/v1/users/login", json={"email": test_user.email, "password": "wrong"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_lookup_by_email(client, test_user):
    r = await client.get("/api/v1/users", params={"email": test_user.email})
    assert r.status_code == 200
    assert r.json()["id"] == test_user.id

    r = await client.get("/api/v1/users", params={"email": "ghost@example.com"})
    assert r.status_code == 404
