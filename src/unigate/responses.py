"""
Response shapes emitted by the gateway.

All functions are pure apart from reading the clock passed in, so tests can pin
timestamps and ids with a fake clock.
"""
import datetime
import threading
import time
from typing import Any, Dict, Iterable, List, Tuple

from unigate.models import ModelRecord, ProviderConfig

TAG_MODIFIED_AT = "1970-01-01T00:00:00.000Z"


class SystemClock:
    """Wall clock for timestamps, monotonic clock for response ids."""

    def __init__(self):
        self._lock = threading.Lock()
        self._last_ns = 0

    def now(self) -> datetime.datetime:
        return datetime.datetime.now(datetime.timezone.utc)

    def monotonic_ns(self) -> int:
        # strictly increasing, even if two calls land on the same clock tick
        with self._lock:
            value = max(time.monotonic_ns(), self._last_ns + 1)
            self._last_ns = value
            return value


def _rfc3339(moment: datetime.datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=datetime.timezone.utc)
    return moment.astimezone(datetime.timezone.utc).isoformat().replace("+00:00", "Z")


def generate_id(clock) -> str:
    return f"chatcmpl-{clock.monotonic_ns()}"


def to_chat_envelope(model_id: str, text: str, clock) -> Dict[str, Any]:
    """OpenAI ``chat.completion`` object. Token usage is not tracked and reported as zero."""
    return {
        "id": generate_id(clock),
        "object": "chat.completion",
        "created": int(clock.now().timestamp()),
        "model": model_id,
        "choices": [
            {
                "index": 0,
                "message": {
                    "role": "assistant",
                    "content": text,
                },
                "finish_reason": "stop",
            }
        ],
        "usage": {
            "prompt_tokens": 0,
            "completion_tokens": 0,
            "total_tokens": 0,
        },
    }


def to_generate_envelope(model_id: str, text: str, clock) -> Dict[str, Any]:
    """Ollama ``/api/generate`` reply."""
    return {
        "model": model_id,
        "created_at": _rfc3339(clock.now()),
        "response": text,
        "done": True,
    }


def to_ollama_chat_envelope(model_id: str, text: str, clock) -> Dict[str, Any]:
    """Ollama ``/api/chat`` reply."""
    return {
        "model": model_id,
        "created_at": _rfc3339(clock.now()),
        "message": {
            "role": "assistant",
            "content": text,
        },
        "done": True,
    }


def to_model_list(entries: Iterable[Tuple[ProviderConfig, ModelRecord]]) -> Dict[str, Any]:
    data: List[Dict[str, Any]] = []
    for provider, model in entries:
        data.append({
            "id": model.model_id,
            "object": "model",
            "created": 0,
            "owned_by": provider.name,
        })
    return {"object": "list", "data": data}


def to_tag_list(entries: Iterable[Tuple[ProviderConfig, ModelRecord]]) -> Dict[str, Any]:
    models: List[Dict[str, Any]] = []
    for _, model in entries:
        models.append({
            "name": model.model_id,
            "modified_at": TAG_MODIFIED_AT,
            "size": 0,
            "digest": "",
        })
    return {"models": models}


def to_model_info(provider: ProviderConfig) -> Dict[str, Any]:
    """
    Ollama ``/api/show`` reply. None of the providers expose this metadata, so most
    fields are placeholders.
    """
    return {
        "license": "Unknown",
        "modelfile": f"# Model information for {provider.name} model",
        "parameters": "N/A",
        "template": "{{ .Prompt }}",
        "system": "You are a helpful AI assistant.",
        "details": {
            "parent_model": "",
            "format": "gguf",
            "family": provider.name,
            "families": [provider.name],
            "parameter_size": "unknown",
            "quantization_level": "N/A",
        },
    }
