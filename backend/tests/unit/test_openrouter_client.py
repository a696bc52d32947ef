"""Unit tests for the OpenRouterClient."""

import json

import httpx
import pytest

from task_search.infrastructure.openrouter.openrouter_client import OpenRouterClient
from task_search.domain.entities import ChatMessage
from task_search.domain.exceptions import ChatProviderError


# ── Helpers ──


def _mock_openrouter_response(
    content: str = '{"matches": []}',
    model: str = "google/gemini-3-flash-preview",
    prompt_tokens: int = 10,
    completion_tokens: int = 5,
    total_tokens: int = 15,
) -> dict:
    """Build a mock OpenRouter JSON response."""
    return {
        "id": "chatcmpl-test123",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "model": model,
        "usage": {
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
            "total_tokens": total_tokens,
        },
    }


def _make_mock_transport(
    response_data: dict | None = None,
    status_code: int = 200,
    captured: list[httpx.Request] | None = None,
) -> httpx.MockTransport:
    """Create a mock transport that returns a fixed response."""

    def handler(request: httpx.Request) -> httpx.Response:
        if captured is not None:
            captured.append(request)
        return httpx.Response(status_code, json=response_data or {})

    return httpx.MockTransport(handler)


# ── Tests ──


@pytest.mark.asyncio
async def test_complete_parses_response():
    """Non-streaming call correctly parses OpenRouter JSON response."""
    transport = _make_mock_transport(_mock_openrouter_response())
    http_client = httpx.AsyncClient(transport=transport)
    client = OpenRouterClient(api_key="test-key", http_client=http_client)

    result = await client.complete(
        messages=[ChatMessage(role="user", content="find my dentist task")],
        model="google/gemini-3-flash-preview",
    )

    assert result.content == '{"matches": []}'
    assert result.model == "google/gemini-3-flash-preview"
    assert result.finish_reason == "stop"
    assert result.usage.total_tokens == 15
    assert result.provider == "openrouter"

    await http_client.aclose()


@pytest.mark.asyncio
async def test_complete_sends_payload_and_headers():
    """Request carries the model, messages, sampling options and auth headers."""
    captured: list[httpx.Request] = []
    transport = _make_mock_transport(_mock_openrouter_response(), captured=captured)
    http_client = httpx.AsyncClient(transport=transport)
    client = OpenRouterClient(
        api_key="test-key",
        base_url="https://openrouter.test/api/v1/",
        app_name="Task Search Tests",
        http_client=http_client,
    )

    await client.complete(
        messages=[
            ChatMessage(role="system", content="rank tasks"),
            ChatMessage(role="user", content="dentist"),
        ],
        model="test/model",
        temperature=0.1,
        max_tokens=256,
    )

    request = captured[0]
    assert str(request.url) == "https://openrouter.test/api/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer test-key"
    assert request.headers["X-Title"] == "Task Search Tests"
    payload = json.loads(request.content)
    assert payload == {
        "model": "test/model",
        "messages": [
            {"role": "system", "content": "rank tasks"},
            {"role": "user", "content": "dentist"},
        ],
        "temperature": 0.1,
        "max_tokens": 256,
    }

    await http_client.aclose()


@pytest.mark.asyncio
async def test_complete_error_handling():
    """Non-200 response raises ChatProviderError."""
    transport = _make_mock_transport(
        {"error": {"message": "Invalid API key", "code": 401}},
        status_code=401,
    )
    http_client = httpx.AsyncClient(transport=transport)
    client = OpenRouterClient(api_key="bad-key", http_client=http_client)

    with pytest.raises(ChatProviderError) as exc_info:
        await client.complete(
            messages=[ChatMessage(role="user", content="Hi")],
            model="test/model",
        )

    assert exc_info.value.status_code == 401
    assert "Invalid API key" in exc_info.value.message
    assert exc_info.value.provider == "openrouter"

    await http_client.aclose()


@pytest.mark.asyncio
async def test_error_in_200_body_raises():
    """OpenRouter can report upstream errors inside a 200 body."""
    transport = _make_mock_transport({"error": {"message": "Upstream overloaded", "code": 502}})
    http_client = httpx.AsyncClient(transport=transport)
    client = OpenRouterClient(api_key="test-key", http_client=http_client)

    with pytest.raises(ChatProviderError) as exc_info:
        await client.complete(messages=[ChatMessage(role="user", content="Hi")], model="m")

    assert exc_info.value.status_code == 502

    await http_client.aclose()


@pytest.mark.asyncio
async def test_missing_choices_raises():
    transport = _make_mock_transport({"model": "m", "choices": []})
    http_client = httpx.AsyncClient(transport=transport)
    client = OpenRouterClient(api_key="test-key", http_client=http_client)

    with pytest.raises(ChatProviderError, match="No choices"):
        await client.complete(messages=[ChatMessage(role="user", content="Hi")], model="m")

    await http_client.aclose()


@pytest.mark.asyncio
async def test_provider_name():
    """Provider name should be 'openrouter'."""
    client = OpenRouterClient(api_key="test")
    assert client.provider_name == "openrouter"
