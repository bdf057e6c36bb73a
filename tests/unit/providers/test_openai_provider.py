"""Tests for the OpenAI adapter against a mocked upstream."""

import json

import httpx
import pytest

from unigate.errors import AdapterError
from unigate.models import ChatMessage, ProviderConfig
from unigate.providers.openai_provider import OpenAIProvider


def _provider(base_url="https://openai.test"):
    return ProviderConfig(id=1, name="openai", api_key="sk-test", base_url=base_url)


@pytest.mark.asyncio
async def test_get_models_parses_data_list():
    def handler(request: httpx.Request):
        assert request.url == "https://openai.test/v1/models"
        assert request.headers["Authorization"] == "Bearer sk-test"
        return httpx.Response(200, json={
            "object": "list",
            "data": [{"id": "gpt-4o", "object": "model"}, {"id": "gpt-4o-mini"}, {"object": "model"}],
        })

    adapter = OpenAIProvider(_provider(), transport=httpx.MockTransport(handler))
    models = await adapter.get_models()
    await adapter.close()

    assert [m.model_id for m in models] == ["gpt-4o", "gpt-4o-mini"]
    assert models[0].name == "gpt-4o"


@pytest.mark.asyncio
async def test_chat_sends_messages_and_returns_first_choice():
    seen = {}

    def handler(request: httpx.Request):
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={
            "choices": [{"index": 0, "message": {"role": "assistant", "content": "Hello"}}],
        })

    adapter = OpenAIProvider(_provider(), transport=httpx.MockTransport(handler))
    text = await adapter.chat("gpt-4o", [ChatMessage("system", "be brief"), ChatMessage("user", "hi")])

    assert text == "Hello"
    assert seen["url"] == "https://openai.test/v1/chat/completions"
    assert seen["body"] == {
        "model": "gpt-4o",
        "messages": [{"role": "system", "content": "be brief"}, {"role": "user", "content": "hi"}],
    }


@pytest.mark.asyncio
async def test_chat_empty_choices_is_error():
    adapter = OpenAIProvider(
        _provider(),
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"choices": []})),
    )
    with pytest.raises(AdapterError, match="no response content"):
        await adapter.chat("gpt-4o", [ChatMessage("user", "hi")])


@pytest.mark.asyncio
async def test_chat_non_success_status_carries_upstream_message():
    def handler(request):
        return httpx.Response(429, json={"error": {"message": "quota exceeded", "type": "insufficient_quota"}})

    adapter = OpenAIProvider(_provider(), transport=httpx.MockTransport(handler))
    with pytest.raises(AdapterError) as exc:
        await adapter.chat("gpt-4o", [ChatMessage("user", "hi")])

    assert "429" in str(exc.value)
    assert "quota exceeded" in str(exc.value)


@pytest.mark.asyncio
async def test_transport_failure_is_adapter_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    adapter = OpenAIProvider(_provider(), transport=httpx.MockTransport(handler))
    with pytest.raises(AdapterError, match="failed"):
        await adapter.get_models()


@pytest.mark.asyncio
async def test_timeout_is_adapter_error():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    adapter = OpenAIProvider(_provider(), transport=httpx.MockTransport(handler))
    with pytest.raises(AdapterError, match="timed out"):
        await adapter.chat("gpt-4o", [ChatMessage("user", "hi")])


def test_default_base_url_used_when_not_configured():
    adapter = OpenAIProvider(_provider(base_url=""))
    assert adapter.base_url == "https://api.openai.com"


@pytest.mark.asyncio
@pytest.mark.parametrize("reply", [
    {"choices": ["oops"]},
    {"choices": [{"message": "oops"}]},
    {"choices": {"0": {"message": {"content": "hi"}}}},
])
async def test_chat_malformed_reply_is_adapter_error(reply):
    adapter = OpenAIProvider(_provider(), transport=httpx.MockTransport(lambda request: httpx.Response(200, json=reply)))

    with pytest.raises(AdapterError, match="no response content"):
        await adapter.chat("gpt-4o", [ChatMessage("user", "hi")])


@pytest.mark.asyncio
@pytest.mark.parametrize("listing", [{"data": ["gpt-4o"]}, {"data": "gpt-4o"}, {"object": "list"}])
async def test_get_models_malformed_listing_is_adapter_error(listing):
    adapter = OpenAIProvider(_provider(), transport=httpx.MockTransport(lambda request: httpx.Response(200, json=listing)))

    with pytest.raises(AdapterError, match="unexpected model listing format"):
        await adapter.get_models()
