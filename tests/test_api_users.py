"""Tests for the Users API."""

import pytest

USERS = "/api/v1/users"


@pytest.mark.asyncio
async def test_get_profile(client, register):
    alice = await register("alice")
    r = await client.get(f"{USERS}/{alice['user']['id']}")
    assert r.status_code == 200
    assert r.json()["username"] == "alice"
    assert r.json()["bio"] == ""


@pytest.mark.asyncio
async def test_get_unknown_user(client):
    r = await client.get(f"{USERS}/00000000-0000-0000-0000-000000000000")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_update_own_profile(client, register):
    alice = await register("alice")
    r = await client.put(
        f"{USERS}/{alice['user']['id']}",
        data={"username": "alice_2", "bio": "I write Python"},
        headers=alice["headers"],
    )
    assert r.status_code == 200
    assert r.json()["username"] == "alice_2"
    assert r.json()["bio"] == "I write Python"


@pytest.mark.asyncio
async def test_update_profile_image(client, register):
    alice = await register("alice")
    r = await client.put(
        f"{USERS}/{alice['user']['id']}",
        files={"profile_image": ("me.jpg", b"\xff\xd8\xff\xe0jpeg", "image/jpeg")},
        headers=alice["headers"],
    )
    assert r.status_code == 200
    assert r.json()["profile_image"].endswith(".jpg")


@pytest.mark.asyncio
async def test_update_someone_else_forbidden(client, register):
    alice = await register("alice")
    bob = await register("bob")
    r = await client.put(
        f"{USERS}/{alice['user']['id']}", data={"bio": "hacked"}, headers=bob["headers"]
    )
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_update_to_taken_username_conflicts(client, register):
    alice = await register("alice")
    await register("bob")
    r = await client.put(
        f"{USERS}/{alice['user']['id']}", data={"username": "bob"}, headers=alice["headers"]
    )
    assert r.status_code == 409
    assert r.json()["detail"] == "Username already taken"


@pytest.mark.asyncio
async def test_update_requires_auth(client, register):
    alice = await register("alice")
    r = await client.put(f"{USERS}/{alice['user']['id']}", data={"bio": "x"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_user_posts(client, register):
    alice = await register("alice")
    bob = await register("bob")
    await client.post(
        "/api/v1/posts", data={"title": "mine", "code": "1", "language": "c"},
        headers=alice["headers"],
    )
    await client.post(
        "/api/v1/posts", data={"title": "theirs", "code": "2", "language": "c"},
        headers=bob["headers"],
    )
    data = (await client.get(f"{USERS}/{alice['user']['id']}/posts")).json()
    assert [p["title"] for p in data["items"]] == ["mine"]
    assert data["pagination"]["total"] == 1
