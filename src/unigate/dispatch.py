"""
Dispatch core: from a raw request body to the gateway's reply.

A request moves through these steps:

1. extract the ``model`` field from the body (nothing else is validated yet)
2. resolve the owning provider in the model registry
3. passthrough providers get the original bytes forwarded and their reply relayed
   verbatim; every other provider gets a fully parsed request, a ``chat`` call through
   its adapter and a reply rebuilt in the unified envelope

Failures end the request with a ``GatewayError`` whose status tells client mistakes
(4xx) from upstream and internal faults (5xx).
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Dict, Mapping, Optional, Type

from pydantic import BaseModel, ValidationError

from unigate.errors import (
    AdapterError,
    ClientError,
    GatewayError,
    InternalFault,
    RegistryError,
    UpstreamError,
)
from unigate.providers.pool import AdapterPool
from unigate.registry import ModelRegistry
from unigate.responses import (
    SystemClock,
    to_chat_envelope,
    to_generate_envelope,
    to_ollama_chat_envelope,
)
from unigate.schemas import ChatRequest, GenerateRequest

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"

# Not forwarded upstream: framing is re-done by the outbound client.
EXCLUDED_FORWARD_HEADERS = {
    "host",
    "content-length",
    "transfer-encoding",
    "connection",
    "keep-alive",
    "proxy-connection",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailer",
    "upgrade",
    "accept-encoding",
}


@dataclass(frozen=True)
class Route:
    """A gateway chat endpoint and how each dispatch path serves it."""
    name: str
    upstream_path: str
    request_model: Type[BaseModel]
    envelope: Callable[[str, str, Any], Dict[str, Any]]


OPENAI_CHAT = Route("chat_completions", "/v1/chat/completions", ChatRequest, to_chat_envelope)
OLLAMA_CHAT = Route("ollama_chat", "/api/chat", ChatRequest, to_ollama_chat_envelope)
OLLAMA_GENERATE = Route("ollama_generate", "/api/generate", GenerateRequest, to_generate_envelope)


@dataclass(frozen=True)
class DispatchResult:
    status_code: int
    content: bytes
    media_type: Optional[str] = JSON_MEDIA_TYPE
    # set for relayed upstream bodies that are sent on as they arrive
    stream: Optional[AsyncIterator[bytes]] = None

    def json(self) -> Any:
        return json.loads(self.content)


def extract_model(raw_body: bytes) -> str:
    """
    Read only the ``model`` field from *raw_body*.

    Raises:
        ClientError: When the body is not a JSON object or ``model`` is missing or not a string.
    """
    try:
        body = json.loads(raw_body) if raw_body else None
    except (ValueError, UnicodeDecodeError) as e:
        raise ClientError("Invalid request body: missing or invalid model field") from e
    if not isinstance(body, dict) or not isinstance(body.get("model"), str):
        raise ClientError("Invalid request body: missing or invalid model field")
    return body["model"]


def forward_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """Headers of the inbound request that are safe to send upstream unchanged."""
    out = {k: v for k, v in headers.items() if k.lower() not in EXCLUDED_FORWARD_HEADERS}
    if not any(k.lower() == "content-type" for k in out):
        out["Content-Type"] = JSON_MEDIA_TYPE
    return out


class DispatchCore:
    """
    Orchestrates registry lookup, adapter selection and the passthrough-or-translate decision.

    All collaborators are injected so tests can swap any of them.
    """

    def __init__(self, registry: ModelRegistry, adapters: AdapterPool, clock=None):
        self.registry = registry
        self.adapters = adapters
        self.clock = clock or SystemClock()

    async def dispatch(self, route: Route, raw_body: bytes, headers: Mapping[str, str],
                       method: str = "POST") -> DispatchResult:
        try:
            return await self._dispatch(route, raw_body, headers, method)
        except GatewayError:
            raise
        except Exception as e:
            logger.exception("Unhandled error while dispatching %s", route.name)
            raise InternalFault("Internal server error") from e

    async def _dispatch(self, route: Route, raw_body: bytes, headers: Mapping[str, str],
                        method: str) -> DispatchResult:
        model_id = extract_model(raw_body)

        try:
            provider = self.registry.resolve_provider(model_id)
        except RegistryError as e:
            raise InternalFault(f"Failed to resolve provider: {e}") from e
        if provider is None:
            raise ClientError(f"Unsupported model: {model_id}")

        adapter = self.adapters.get(provider.id)
        if adapter is None:
            raise InternalFault(f"Provider {provider.name} is not available")

        if adapter.supports_passthrough:
            logger.info("Passing %s request for %s through to %s", route.name, model_id, provider.name)
            return await self._pass_through(adapter, route, raw_body, headers, method)

        logger.info("Translating %s request for %s via %s", route.name, model_id, provider.name)
        return await self._translate(adapter, route, raw_body)

    async def _pass_through(self, adapter, route: Route, raw_body: bytes,
                            headers: Mapping[str, str], method: str) -> DispatchResult:
        try:
            raw = await adapter.forward_raw(method, route.upstream_path, raw_body, forward_headers(headers))
        except AdapterError as e:
            raise UpstreamError(str(e), status_code=502) from e
        return DispatchResult(
            status_code=raw.status_code,
            content=raw.content,
            media_type=raw.content_type,
            stream=raw.stream,
        )

    async def _translate(self, adapter, route: Route, raw_body: bytes) -> DispatchResult:
        try:
            request = route.request_model.model_validate_json(raw_body)
        except ValidationError as e:
            detail = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ClientError(f"Invalid request body: {detail}") from e

        try:
            text = await adapter.chat(request.model, request.to_messages())
        except AdapterError as e:
            logger.warning("Chat with %s failed: %s", adapter.name, e)
            raise UpstreamError(f"Chat completion error: {e}") from e

        envelope = route.envelope(request.model, text, self.clock)
        return DispatchResult(status_code=200, content=json.dumps(envelope).encode("utf-8"))
