"""
Startup population of the model registry.

Each active provider from the settings is stored, gets its adapter built, and is
asked for its models once. Requests served afterwards only read what was stored
here; discovery never runs per request.
"""

import logging
from typing import List

from unigate.config import Settings
from unigate.errors import AdapterError, RegistryError
from unigate.models import ModelRecord, ProviderConfig
from unigate.providers.pool import AdapterPool
from unigate.registry import ModelRegistry

logger = logging.getLogger(__name__)


async def fetch_models_for_provider(registry: ModelRegistry, pool: AdapterPool,
                                    provider: ProviderConfig) -> List[ModelRecord]:
    """
    Ask *provider* for its models and store them. Failures are logged and leave the
    provider without models; they never abort startup.
    """
    logger.info("Fetching models for provider: %s", provider.name)

    adapter = pool.register(provider)
    if adapter is None:
        logger.error("Failed to create provider instance for: %s", provider.name)
        return []

    try:
        discovered = await adapter.get_models()
    except AdapterError as e:
        logger.warning("Failed to fetch models for %s: %s", provider.name, e)
        return []

    stored: List[ModelRecord] = []
    for model in discovered:
        try:
            record = registry.add_model(provider.id, model)
        except RegistryError as e:
            logger.error("Failed to add model %s for provider %s: %s", model.model_id, provider.name, e)
            continue
        stored.append(record)
    logger.info("Discovered %d model(s) for provider %s", len(stored), provider.name)
    return stored


async def populate_registry(settings: Settings, registry: ModelRegistry, pool: AdapterPool) -> List[ProviderConfig]:
    """Register every enabled provider and discover its models, in registration order."""
    providers: List[ProviderConfig] = []
    for name, cfg in settings.enabled_providers():
        try:
            provider = registry.add_provider(name=name, api_key=cfg.api_key, base_url=cfg.host)
        except RegistryError as e:
            logger.error("Failed to add %s provider: %s", name, e)
            continue
        logger.info("Added %s provider with ID: %d", name, provider.id)
        providers.append(provider)
        await fetch_models_for_provider(registry, pool, provider)

    if not providers:
        logger.warning("No providers enabled; set IS_<PROVIDER>_ACTIVE=true to enable one")
    return providers
