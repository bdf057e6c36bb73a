"""
Ollama adapter.

Ollama serves both wire dialects the gateway exposes (``/api/*`` natively and
``/v1/chat/completions`` OpenAI-compatible), so requests for its models are relayed
byte for byte through ``forward_raw`` instead of being translated.
"""

import logging
from typing import AsyncIterator, Dict, List, Mapping

import httpx

from unigate.errors import AdapterError
from unigate.models import ChatMessage, ModelRecord, RawResponse
from unigate.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)


class OllamaProvider(ProviderAdapter):
    default_base_url = "http://localhost:11434"
    # local models can take a while to load on first use
    timeout = 120.0

    @property
    def supports_passthrough(self) -> bool:
        return True

    def _auth_headers(self) -> Dict[str, str]:
        # uncommon for Ollama, but supported behind an authenticating proxy
        if self.provider.api_key:
            return {"Authorization": f"Bearer {self.provider.api_key}"}
        return {}

    async def get_models(self) -> List[ModelRecord]:
        data = await self._request_json("GET", "/api/tags")
        items = data.get("models") if isinstance(data, dict) else None
        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            raise AdapterError("unexpected model listing format from ollama")
        models: List[ModelRecord] = []
        for item in items:
            model_name = item.get("name") or item.get("model")
            if model_name:
                models.append(ModelRecord(name=model_name, model_id=model_name))
        return models

    async def chat(self, model_id: str, messages: List[ChatMessage]) -> str:
        payload = {
            "model": model_id,
            "messages": [m.to_dict() for m in messages],
            "stream": False,
        }
        data = await self._request_json("POST", "/api/chat", payload)
        message = data.get("message") if isinstance(data, dict) else None
        if not isinstance(message, dict):
            raise AdapterError("no response content found")
        return message.get("content") or ""

    async def forward_raw(self, method: str, path: str, content: bytes,
                          headers: Mapping[str, str]) -> RawResponse:
        """
        Send *content* unmodified to ``{base_url}{path}`` and relay the reply unmodified.

        The reply body is not buffered: ``RawResponse.stream`` yields it as Ollama
        sends it, so streamed chat and generate replies reach the caller chunk by chunk.

        Raises:
            AdapterError: When the upstream cannot be reached or times out. Non-success
                statuses are not errors here; they are relayed to the caller.
        """
        url = self._url(path)
        logger.debug("Forwarding %s %s (%d bytes)", method, url, len(content))
        send_headers = dict(headers)
        if not any(k.lower() == "authorization" for k in send_headers):
            send_headers.update(self._auth_headers())
        request = self._client.build_request(method, url, content=content or None, headers=send_headers)
        try:
            resp = await self._client.send(request, stream=True)
        except httpx.TimeoutException as e:
            raise AdapterError(f"request to {self.name} timed out after {self.timeout:g}s") from e
        except httpx.HTTPError as e:
            raise AdapterError(f"Failed to proxy request to Ollama: {e}") from e
        return RawResponse(
            status_code=resp.status_code,
            content_type=resp.headers.get("content-type"),
            stream=self._relay(resp),
        )

    async def _relay(self, resp: httpx.Response) -> AsyncIterator[bytes]:
        try:
            async for chunk in resp.aiter_bytes():
                yield chunk
        except httpx.HTTPError as e:
            # status and headers are already on the wire; the body just ends early
            logger.warning("Ollama reply interrupted after status %d: %s", resp.status_code, e)
        finally:
            await resp.aclose()
