"""
Adapter selection.

The provider kind is looked at once, when the pool is built at startup; afterwards
callers get a ready adapter by provider id instead of re-dispatching on the name.
"""

import logging
from typing import Callable, Dict, Iterable, Optional

import httpx

from unigate.models import ProviderConfig, ProviderKind
from unigate.providers.anthropic_provider import AnthropicProvider
from unigate.providers.base import ProviderAdapter
from unigate.providers.ollama_provider import OllamaProvider
from unigate.providers.openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)

ADAPTER_CLASSES = {
    ProviderKind.OPENAI: OpenAIProvider,
    ProviderKind.ANTHROPIC: AnthropicProvider,
    ProviderKind.OLLAMA: OllamaProvider,
}

AdapterFactory = Callable[[ProviderConfig], Optional[ProviderAdapter]]


def create_adapter(provider: ProviderConfig,
                   transport: Optional[httpx.AsyncBaseTransport] = None) -> Optional[ProviderAdapter]:
    """Instantiate the adapter for *provider*, or ``None`` for an unknown provider name."""
    kind = provider.kind
    if kind is None:
        logger.warning("Unknown provider: %s, cannot create instance", provider.name)
        return None
    return ADAPTER_CLASSES[kind](provider, transport=transport)


class AdapterPool:
    """One long-lived adapter (and thus one HTTP client) per configured provider."""

    def __init__(self, factory: AdapterFactory = create_adapter):
        self._factory = factory
        self._adapters: Dict[int, ProviderAdapter] = {}

    def register(self, provider: ProviderConfig) -> Optional[ProviderAdapter]:
        adapter = self._adapters.get(provider.id)
        if adapter is None:
            adapter = self._factory(provider)
            if adapter is not None:
                self._adapters[provider.id] = adapter
        return adapter

    def register_all(self, providers: Iterable[ProviderConfig]) -> None:
        for provider in providers:
            self.register(provider)

    def get(self, provider_id: int) -> Optional[ProviderAdapter]:
        return self._adapters.get(provider_id)

    def __len__(self) -> int:
        return len(self._adapters)

    async def close(self) -> None:
        for adapter in self._adapters.values():
            try:
                await adapter.close()
            except Exception as e:
                logger.warning("Failed to close adapter %s: %s", adapter.name, e)
        self._adapters.clear()
