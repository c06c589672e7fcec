import json

import httpx
import pytest

from pitchlab.common.errors import CompletionError
from pitchlab.llm.client import OpenAIChatCompletionClient


def _client(handler):
    http = httpx.AsyncClient(base_url="https://api.openai.test/v1", transport=httpx.MockTransport(handler))
    return OpenAIChatCompletionClient(model="gpt-test", client=http)


@pytest.mark.anyio
async def test_complete_posts_payload_and_returns_first_choice():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "choices": [
                    {"message": {"role": "assistant", "content": "Who am I speaking with?"}},
                    {"message": {"role": "assistant", "content": "ignored"}},
                ]
            },
        )

    client = _client(handler)
    messages = [{"role": "system", "content": "be a buyer"}]
    text = await client.complete(messages, temperature=0.8, max_tokens=200)

    assert text == "Who am I speaking with?"
    assert seen["path"] == "/v1/chat/completions"
    assert seen["body"] == {
        "model": "gpt-test",
        "messages": messages,
        "temperature": 0.8,
        "max_tokens": 200,
    }


@pytest.mark.anyio
async def test_complete_returns_none_without_choices():
    client = _client(lambda request: httpx.Response(200, json={"choices": []}))
    assert await client.complete([], temperature=0.5, max_tokens=10) is None


@pytest.mark.anyio
async def test_complete_maps_http_errors():
    client = _client(lambda request: httpx.Response(429, json={"error": {"message": "Rate limit reached"}}))
    with pytest.raises(CompletionError) as excinfo:
        await client.complete([], temperature=0.8, max_tokens=200)
    assert "429" in excinfo.value.message
    assert "Rate limit reached" in excinfo.value.message
    assert excinfo.value.details == {"status_code": 429}


@pytest.mark.anyio
async def test_complete_maps_transport_errors():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    with pytest.raises(CompletionError):
        await client.complete([], temperature=0.8, max_tokens=200)
