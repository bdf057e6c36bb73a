"""Tests for the unified response shapes."""

import datetime
import json

from unigate.models import ModelRecord, ProviderConfig
from unigate.responses import (
    SystemClock,
    to_chat_envelope,
    to_generate_envelope,
    to_model_info,
    to_model_list,
    to_ollama_chat_envelope,
    to_tag_list,
)


def test_chat_envelope_shape(clock):
    envelope = to_chat_envelope("demo-1", "Hello", clock)

    assert envelope["id"] == "chatcmpl-1001"
    assert envelope["object"] == "chat.completion"
    assert envelope["created"] == int(clock.moment.timestamp())
    assert envelope["model"] == "demo-1"
    assert envelope["choices"] == [{
        "index": 0,
        "message": {"role": "assistant", "content": "Hello"},
        "finish_reason": "stop",
    }]
    assert envelope["usage"] == {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}


def test_chat_envelope_content_survives_json(clock):
    text = 'multi\nline "quoted" ünïcode'
    decoded = json.loads(json.dumps(to_chat_envelope("m", text, clock)))

    assert decoded["choices"][0]["message"]["content"] == text
    assert decoded["model"] == "m"


def test_ids_are_distinct_per_call(clock):
    first = to_chat_envelope("m", "a", clock)["id"]
    second = to_chat_envelope("m", "a", clock)["id"]
    assert first != second


def test_generate_envelope_shape(clock):
    envelope = to_generate_envelope("claude-3-sonnet", "This is a generated response.", clock)

    assert envelope == {
        "model": "claude-3-sonnet",
        "created_at": "2024-01-01T12:00:00Z",
        "response": "This is a generated response.",
        "done": True,
    }


def test_ollama_chat_envelope_shape(clock):
    envelope = to_ollama_chat_envelope("gpt-3.5-turbo", "Hello, how can I help you today?", clock)

    assert envelope["model"] == "gpt-3.5-turbo"
    assert envelope["done"] is True
    assert envelope["message"] == {"role": "assistant", "content": "Hello, how can I help you today?"}
    assert datetime.datetime.fromisoformat(envelope["created_at"].replace("Z", "+00:00"))


def test_system_clock_ids_strictly_increase():
    clock = SystemClock()
    readings = [clock.monotonic_ns() for _ in range(1000)]
    assert readings == sorted(set(readings))
    assert clock.now().tzinfo is not None


def _entries():
    openai = ProviderConfig(id=1, name="openai", api_key="", base_url="")
    ollama = ProviderConfig(id=2, name="ollama", api_key="", base_url="")
    return [
        (openai, ModelRecord(name="gpt-4o", model_id="gpt-4o", provider_id=1)),
        (ollama, ModelRecord(name="llama3.2:latest", model_id="llama3.2:latest", provider_id=2)),
    ]


def test_model_list_shape():
    listing = to_model_list(_entries())

    assert listing["object"] == "list"
    assert listing["data"][0] == {"id": "gpt-4o", "object": "model", "created": 0, "owned_by": "openai"}
    assert listing["data"][1]["owned_by"] == "ollama"


def test_tag_list_shape():
    listing = to_tag_list(_entries())

    assert listing["models"][1] == {
        "name": "llama3.2:latest",
        "modified_at": "1970-01-01T00:00:00.000Z",
        "size": 0,
        "digest": "",
    }


def test_model_info_uses_provider_as_family():
    info = to_model_info(ProviderConfig(id=1, name="anthropic", api_key="", base_url=""))

    assert info["license"] == "Unknown"
    assert info["modelfile"] == "# Model information for anthropic model"
    assert info["details"]["family"] == "anthropic"
    assert info["details"]["families"] == ["anthropic"]
