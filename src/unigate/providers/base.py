"""
Common interface for upstream provider adapters.

Every adapter owns a single ``httpx.AsyncClient`` created at construction time and
reused for all calls. Adapters never retry: one invocation is one upstream call,
bounded by the adapter's fixed timeout.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

import httpx

from unigate.errors import AdapterError
from unigate.models import ChatMessage, ModelRecord, ProviderConfig, RawResponse

logger = logging.getLogger(__name__)


def _error_detail(resp: httpx.Response) -> str:
    """Best-effort extraction of the upstream's own error text."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text.strip()[:500]
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and isinstance(err.get("message"), str):
            return err["message"]
        if isinstance(err, str):
            return err
    return resp.text.strip()[:500]


class ProviderAdapter(ABC):
    """Uniform capability set over all provider kinds."""

    default_base_url: str = ""
    timeout: float = 30.0

    def __init__(self, provider: ProviderConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.provider = provider
        self.base_url = (provider.base_url or self.default_base_url).rstrip("/")
        self._client = httpx.AsyncClient(timeout=self.timeout, transport=transport)

    @property
    def name(self) -> str:
        return self.provider.name

    @property
    def supports_passthrough(self) -> bool:
        return False

    @abstractmethod
    async def get_models(self) -> List[ModelRecord]:
        """Return the models this provider offers."""

    @abstractmethod
    async def chat(self, model_id: str, messages: List[ChatMessage]) -> str:
        """Send *messages* to *model_id* and return the assistant's reply text."""

    async def forward_raw(self, method: str, path: str, content: bytes,
                          headers: Mapping[str, str]) -> RawResponse:
        raise AdapterError(f"Provider {self.name} does not support raw forwarding")

    async def close(self) -> None:
        await self._client.aclose()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _auth_headers(self) -> Dict[str, str]:
        return {}

    async def _request_json(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        """
        Issue one request to the provider and decode its JSON reply.

        Raises:
            AdapterError: On transport failure, timeout, non-success status or undecodable body.
        """
        url = self._url(path)
        headers = {"Content-Type": "application/json", **self._auth_headers()}
        try:
            resp = await self._client.request(method, url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            raise AdapterError(f"request to {self.name} timed out after {self.timeout:g}s") from e
        except httpx.HTTPError as e:
            raise AdapterError(f"request to {self.name} failed: {e}") from e

        if not resp.is_success:
            detail = _error_detail(resp)
            logger.warning("%s returned status %d: %s", self.name, resp.status_code, detail)
            message = f"unexpected status code: {resp.status_code}"
            if detail:
                message = f"{message}: {detail}"
            raise AdapterError(message)

        try:
            return resp.json()
        except ValueError as e:
            raise AdapterError(f"invalid JSON in response from {self.name}") from e
