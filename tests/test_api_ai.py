"""Tests for AI code explanations (upstream API mocked with httpx.MockTransport)."""

import json

import httpx
import pytest

from codeshare.api.dependencies import get_explanation_service
from codeshare.core.ai import ExplanationService
from codeshare.core.config import Settings


def _service(handler) -> ExplanationService:
    return ExplanationService(
        Settings(openai_api_key="test-key"), transport=httpx.MockTransport(handler)
    )


def _completion(text: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


@pytest.fixture
def upstream_calls():
    return []


@pytest.fixture
def mock_ai(app, upstream_calls):
    """Route explanation requests to a canned upstream that numbers its answers."""

    def handler(request: httpx.Request) -> httpx.Response:
        upstream_calls.append(request)
        return httpx.Response(200, json=_completion(f"explanation #{len(upstream_calls)}"))

    app.dependency_overrides[get_explanation_service] = lambda: _service(handler)
    return upstream_calls


async def _post(client, headers) -> str:
    r = await client.post(
        "/api/v1/posts",
        data={"title": "fib", "code": "def fib(n): ...", "language": "python"},
        headers=headers,
    )
    return r.json()["id"]


@pytest.mark.asyncio
async def test_explain_then_cached(client, register, mock_ai):
    alice = await register("alice")
    post_id = await _post(client, alice["headers"])
    url = f"/api/v1/ai/explain/{post_id}"

    r = await client.post(url, headers=alice["headers"])
    assert r.status_code == 200
    assert r.json() == {"explanation": "explanation #1", "cached": False}

    r = await client.post(url, headers=alice["headers"])
    assert r.json() == {"explanation": "explanation #1", "cached": True}
    assert len(mock_ai) == 1

    sent = json.loads(mock_ai[0].content)
    assert "def fib(n): ..." in sent["messages"][0]["content"]
    assert mock_ai[0].headers["Authorization"] == "Bearer test-key"


@pytest.mark.asyncio
async def test_explain_refresh_replaces_cache(client, register, mock_ai):
    alice = await register("alice")
    post_id = await _post(client, alice["headers"])
    url = f"/api/v1/ai/explain/{post_id}"

    await client.post(url, headers=alice["headers"])
    r = await client.post(url, params={"refresh": "true"}, headers=alice["headers"])
    assert r.json() == {"explanation": "explanation #2", "cached": False}

    r = await client.post(url, headers=alice["headers"])
    assert r.json() == {"explanation": "explanation #2", "cached": True}


@pytest.mark.asyncio
async def test_explain_requires_auth(client, register, mock_ai):
    alice = await register("alice")
    post_id = await _post(client, alice["headers"])
    r = await client.post(f"/api/v1/ai/explain/{post_id}")
    assert r.status_code == 401
    assert mock_ai == []


@pytest.mark.asyncio
async def test_explain_unknown_post(client, register, mock_ai):
    alice = await register("alice")
    r = await client.post(
        "/api/v1/ai/explain/00000000-0000-0000-0000-000000000000", headers=alice["headers"]
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_explain_without_api_key(app, client, register):
    app.dependency_overrides[get_explanation_service] = lambda: ExplanationService(
        Settings(openai_api_key="")
    )
    alice = await register("alice")
    post_id = await _post(client, alice["headers"])
    r = await client.post(f"/api/v1/ai/explain/{post_id}", headers=alice["headers"])
    assert r.status_code == 503
    assert r.json()["detail"] == "AI service not configured"


@pytest.mark.asyncio
async def test_explain_upstream_failure(app, client, register):
    app.dependency_overrides[get_explanation_service] = lambda: _service(
        lambda request: httpx.Response(500, json={"error": "boom"})
    )
    alice = await register("alice")
    post_id = await _post(client, alice["headers"])
    r = await client.post(f"/api/v1/ai/explain/{post_id}", headers=alice["headers"])
    assert r.status_code == 502

    detail = (await client.get(f"/api/v1/posts/{post_id}")).json()
    assert detail["ai_explanation"] is None


@pytest.mark.asyncio
async def test_explain_empty_choices_falls_back(app, client, register):
    app.dependency_overrides[get_explanation_service] = lambda: _service(
        lambda request: httpx.Response(200, json={"choices": []})
    )
    alice = await register("alice")
    post_id = await _post(client, alice["headers"])
    r = await client.post(f"/api/v1/ai/explain/{post_id}", headers=alice["headers"])
    assert r.json()["explanation"] == "Unable to generate explanation"


@pytest.mark.asyncio
async def test_explain_rate_limited_per_user(client, register, mock_ai):
    alice = await register("alice")
    bob = await register("bob")
    post_id = await _post(client, alice["headers"])
    url = f"/api/v1/ai/explain/{post_id}"

    for _ in range(10):
        assert (await client.post(url, headers=alice["headers"])).status_code == 200
    assert (await client.post(url, headers=alice["headers"])).status_code == 429
    assert (await client.post(url, headers=bob["headers"])).status_code == 200
