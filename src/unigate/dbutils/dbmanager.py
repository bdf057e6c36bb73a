"""
Central Manager for all Database-related actions for unigate
"""
import logging
import threading
from typing import Dict, Any, Optional

from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from unigate.dbutils.dbmodules import Base, Provider, Model

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///./unigate.db"

_engines: Dict[str, Engine] = {}
_engines_lock = threading.Lock()
_default_url = DEFAULT_DATABASE_URL


def get_engine(database_url: str) -> Engine:
    """
    Return the process-wide engine for *database_url*, creating it on first use.
    In-memory SQLite databases share one connection so that every session sees the same data.
    """
    with _engines_lock:
        engine = _engines.get(database_url)
        if engine is None:
            if database_url.startswith("sqlite"):
                kwargs: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
                if database_url in ("sqlite://", "sqlite:///:memory:"):
                    kwargs["poolclass"] = StaticPool
                engine = create_engine(database_url, **kwargs)
            else:
                engine = create_engine(database_url)
            _engines[database_url] = engine
        return engine


def _provider_to_dict(provider: Provider) -> Dict[str, Any]:
    return {
        "id": provider.id,
        "name": provider.name,
        "api_key": provider.api_key,
        "base_url": provider.base_url,
        "is_active": bool(provider.is_active),
    }


def _model_to_dict(model: Model) -> Dict[str, Any]:
    return {
        "id": model.id,
        "provider_id": model.provider_id,
        "name": model.name,
        "model_id": model.model_id,
        "is_active": bool(model.is_active),
    }


class DBManager:
    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine or get_engine(_default_url)

    @staticmethod
    def configure(database_url: str) -> None:
        """Set the database used by managers created without an explicit engine."""
        global _default_url
        _default_url = database_url

    def create_all(self):
        Base.metadata.create_all(self.engine)

    def drop_all(self):
        Base.metadata.drop_all(self.engine)

    def reset(self):
        """Drops and recreates the schema so discovery starts from a clean state."""
        logger.info("Resetting database schema")
        self.drop_all()
        self.create_all()

    def add_provider(self, name: str, api_key: str, base_url: str, is_active: bool = True) -> Dict[str, Any]:
        provider = Provider(name=name, api_key=api_key, base_url=base_url, is_active=is_active)
        self.session.add(provider)
        self.session.commit()
        return _provider_to_dict(provider)

    def add_model(self, provider_id: int, name: str, model_id: str, is_active: bool = True) -> Dict[str, Any]:
        model = Model(provider_id=provider_id, name=name, model_id=model_id, is_active=is_active)
        self.session.add(model)
        self.session.commit()
        return _model_to_dict(model)

    def get_active_providers(self) -> list[Dict[str, Any]]:
        stmt = select(Provider).where(Provider.is_active.is_(True)).order_by(Provider.id)
        return [_provider_to_dict(p) for p in self.session.execute(stmt).scalars().all()]

    def get_models_by_provider_id(self, provider_id: int) -> list[Dict[str, Any]]:
        stmt = select(Model).where(Model.provider_id == provider_id).order_by(Model.id)
        return [_model_to_dict(m) for m in self.session.execute(stmt).scalars().all()]

    def __enter__(self):
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)
        self.session = self.Session()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.session.close()
