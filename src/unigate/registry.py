"""
Model registry: which provider serves which model.

Backed by the persisted ``providers`` / ``models`` tables. Populated once at startup
(see ``unigate.discovery``) and only read while requests are served.
"""

import logging
from typing import Callable, List, Optional, Tuple

import sqlalchemy.exc

from unigate.dbutils.dbmanager import DBManager
from unigate.errors import RegistryError
from unigate.models import ModelRecord, ProviderConfig

logger = logging.getLogger(__name__)


def _to_provider(row: dict) -> ProviderConfig:
    return ProviderConfig(
        id=row["id"],
        name=row["name"],
        api_key=row["api_key"] or "",
        base_url=row["base_url"] or "",
        is_active=row["is_active"],
    )


def _to_model(row: dict) -> ModelRecord:
    return ModelRecord(
        id=row["id"],
        provider_id=row["provider_id"],
        name=row["name"],
        model_id=row["model_id"],
        is_active=row["is_active"],
    )


class ModelRegistry:
    """
    Query layer over the registry tables.

    ``resolve_provider`` returns ``None`` when a model is unknown and raises
    ``RegistryError`` when the storage itself fails, so callers can tell a client
    mistake from a server fault.
    """

    def __init__(self, db_factory: Callable[[], DBManager] = DBManager):
        self._db_factory = db_factory

    def active_providers(self) -> List[ProviderConfig]:
        try:
            with self._db_factory() as db:
                rows = db.get_active_providers()
        except sqlalchemy.exc.SQLAlchemyError as e:
            logger.error("Failed to read providers: %s", e)
            raise RegistryError("Failed to retrieve providers") from e
        return [_to_provider(row) for row in rows]

    def models_of(self, provider_id: int) -> List[ModelRecord]:
        try:
            with self._db_factory() as db:
                rows = db.get_models_by_provider_id(provider_id)
        except sqlalchemy.exc.SQLAlchemyError as e:
            logger.error("Failed to read models of provider %s: %s", provider_id, e)
            raise RegistryError("Failed to retrieve models") from e
        return [_to_model(row) for row in rows if row["is_active"]]

    def list_models(self) -> List[Tuple[ProviderConfig, ModelRecord]]:
        """All active models with their providers, in registration order."""
        return [(provider, model)
                for provider in self.active_providers()
                for model in self.models_of(provider.id)]

    def find_model(self, model_id: str) -> Optional[Tuple[ProviderConfig, ModelRecord]]:
        """
        Scan active providers in registration order and return the first
        ``(provider, model)`` pair whose model matches *model_id* exactly.

        A model id registered under two providers is a configuration error; the
        provider registered first wins.
        """
        if not model_id:
            return None
        for provider in self.active_providers():
            for model in self.models_of(provider.id):
                if model.model_id == model_id:
                    return provider, model
        return None

    def resolve_provider(self, model_id: str) -> Optional[ProviderConfig]:
        match = self.find_model(model_id)
        if match is None:
            return None
        return match[0]

    def add_provider(self, name: str, api_key: str, base_url: str, is_active: bool = True) -> ProviderConfig:
        try:
            with self._db_factory() as db:
                row = db.add_provider(name, api_key, base_url, is_active)
        except sqlalchemy.exc.SQLAlchemyError as e:
            raise RegistryError(f"Failed to add provider {name}") from e
        return _to_provider(row)

    def add_model(self, provider_id: int, model: ModelRecord) -> ModelRecord:
        try:
            with self._db_factory() as db:
                row = db.add_model(provider_id, model.name, model.model_id, model.is_active)
        except sqlalchemy.exc.SQLAlchemyError as e:
            raise RegistryError(f"Failed to add model {model.model_id}") from e
        return _to_model(row)
