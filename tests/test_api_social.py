"""Tests for comments and likes."""

import pytest

POSTS = "/api/v1/posts"


async def _post(client, headers):
    r = await client.post(
        POSTS, data={"title": "t", "code": "x = 1", "language": "python"}, headers=headers
    )
    return r.json()


@pytest.mark.asyncio
async def test_comment_lifecycle_keeps_count(client, register):
    alice = await register("alice")
    bob = await register("bob")
    post = await _post(client, alice["headers"])
    url = f"{POSTS}/{post['id']}/comments"

    r = await client.post(url, json={"content": "  first!  "}, headers=bob["headers"])
    assert r.status_code == 201
    comment = r.json()
    assert comment["content"] == "first!"
    assert comment["author"]["username"] == "bob"
    await client.post(url, json={"content": "second"}, headers=alice["headers"])

    assert (await client.get(f"{POSTS}/{post['id']}")).json()["comments_count"] == 2

    listing = (await client.get(url)).json()
    assert [c["content"] for c in listing["items"]] == ["second", "first!"]
    assert listing["pagination"]["total"] == 2

    r = await client.delete(f"/api/v1/comments/{comment['id']}", headers=alice["headers"])
    assert r.status_code == 403
    r = await client.delete(f"/api/v1/comments/{comment['id']}", headers=bob["headers"])
    assert r.status_code == 204
    assert (await client.get(f"{POSTS}/{post['id']}")).json()["comments_count"] == 1

    r = await client.delete(f"/api/v1/comments/{comment['id']}", headers=bob["headers"])
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_comment_validation_and_auth(client, register):
    alice = await register("alice")
    post = await _post(client, alice["headers"])
    url = f"{POSTS}/{post['id']}/comments"

    assert (await client.post(url, json={"content": "hi"})).status_code == 401
    r = await client.post(url, json={"content": "   "}, headers=alice["headers"])
    assert r.status_code == 422
    r = await client.post(url, json={"content": "x" * 501}, headers=alice["headers"])
    assert r.status_code == 422
    r = await client.post(
        f"{POSTS}/00000000-0000-0000-0000-000000000000/comments",
        json={"content": "hi"}, headers=alice["headers"],
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_like_toggle(client, register):
    alice = await register("alice")
    bob = await register("bob")
    post = await _post(client, alice["headers"])
    url = f"{POSTS}/{post['id']}/like"

    r = await client.post(url, headers=bob["headers"])
    assert r.json() == {"is_liked": True, "likes_count": 1}
    r = await client.post(url, headers=alice["headers"])
    assert r.json() == {"is_liked": True, "likes_count": 2}
    r = await client.post(url, headers=bob["headers"])
    assert r.json() == {"is_liked": False, "likes_count": 1}

    detail = (await client.get(f"{POSTS}/{post['id']}", headers=alice["headers"])).json()
    assert detail["likes_count"] == 1
    assert detail["is_liked"] is True


@pytest.mark.asyncio
async def test_like_requires_auth_and_existing_post(client, register):
    alice = await register("alice")
    post = await _post(client, alice["headers"])
    assert (await client.post(f"{POSTS}/{post['id']}/like")).status_code == 401
    r = await client.post(
        f"{POSTS}/00000000-0000-0000-0000-000000000000/like", headers=alice["headers"]
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_list_likers(client, register):
    alice = await register("alice")
    bob = await register("bob")
    post = await _post(client, alice["headers"])
    await client.post(f"{POSTS}/{post['id']}/like", headers=alice["headers"])
    await client.post(f"{POSTS}/{post['id']}/like", headers=bob["headers"])

    data = (await client.get(f"{POSTS}/{post['id']}/likes")).json()
    assert {u["username"] for u in data["items"]} == {"alice", "bob"}
    assert data["pagination"]["total"] == 2
    assert "email" not in data["items"][0]
