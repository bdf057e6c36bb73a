"""
Upstream provider adapters.

- OpenAIProvider, AnthropicProvider: translated kinds
- OllamaProvider: passthrough kind, additionally supports ``forward_raw``

Callers normally go through ``AdapterPool``, which builds one adapter per configured
provider at startup.
"""

from .base import ProviderAdapter
from .openai_provider import OpenAIProvider
from .anthropic_provider import AnthropicProvider
from .ollama_provider import OllamaProvider
from .pool import AdapterPool, AdapterFactory, create_adapter

__all__ = [
    'ProviderAdapter',
    'OpenAIProvider',
    'AnthropicProvider',
    'OllamaProvider',
    'AdapterPool',
    'AdapterFactory',
    'create_adapter',
]
