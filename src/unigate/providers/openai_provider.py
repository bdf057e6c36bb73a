"""
OpenAI adapter. Translated kind: requests and replies are reshaped by the dispatch core.
"""

from typing import Dict, List

from unigate.errors import AdapterError
from unigate.models import ChatMessage, ModelRecord
from unigate.providers.base import ProviderAdapter


class OpenAIProvider(ProviderAdapter):
    default_base_url = "https://api.openai.com"
    timeout = 30.0

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.provider.api_key}"}

    async def get_models(self) -> List[ModelRecord]:
        data = await self._request_json("GET", "/v1/models")
        items = data.get("data") if isinstance(data, dict) else None
        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            raise AdapterError("unexpected model listing format from openai")
        models: List[ModelRecord] = []
        for item in items:
            model_id = item.get("id")
            if model_id:
                models.append(ModelRecord(name=model_id, model_id=model_id))
        return models

    async def chat(self, model_id: str, messages: List[ChatMessage]) -> str:
        payload = {
            "model": model_id,
            "messages": [m.to_dict() for m in messages],
        }
        data = await self._request_json("POST", "/v1/chat/completions", payload)
        choices = data.get("choices") if isinstance(data, dict) else None
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise AdapterError("no response content found")
        message = choices[0].get("message") or {}
        if not isinstance(message, dict):
            raise AdapterError("no response content found")
        return message.get("content") or ""
