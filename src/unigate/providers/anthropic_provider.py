"""
Anthropic adapter.

The Messages API takes the system prompt as a top-level field rather than as a
message, and there is no model listing call used here, so ``get_models`` serves a
built-in catalog.
"""

from typing import Dict, List

from unigate.errors import AdapterError
from unigate.models import ChatMessage, ModelRecord
from unigate.providers.base import ProviderAdapter

ANTHROPIC_VERSION = "2023-06-01"
MAX_TOKENS = 1024

KNOWN_MODELS = (
    ("Claude 3 Opus", "claude-3-opus-20240229"),
    ("Claude 3 Sonnet", "claude-3-sonnet-20240229"),
    ("Claude 3 Haiku", "claude-3-haiku-20240307"),
)


class AnthropicProvider(ProviderAdapter):
    default_base_url = "https://api.anthropic.com"
    timeout = 30.0

    def _auth_headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.provider.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

    async def get_models(self) -> List[ModelRecord]:
        return [ModelRecord(name=name, model_id=model_id) for name, model_id in KNOWN_MODELS]

    async def chat(self, model_id: str, messages: List[ChatMessage]) -> str:
        system = ""
        turns = []
        for msg in messages:
            if msg.role == "system":
                # last system message wins
                system = msg.content
            else:
                turns.append(msg.to_dict())

        payload = {
            "model": model_id,
            "max_tokens": MAX_TOKENS,
            "messages": turns,
        }
        if system:
            payload["system"] = system

        data = await self._request_json("POST", "/v1/messages", payload)
        content = data.get("content") if isinstance(data, dict) else None
        if not isinstance(content, list) or not content or not isinstance(content[0], dict):
            raise AdapterError("no response content found")
        return content[0].get("text") or ""
