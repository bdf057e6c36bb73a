"""
Configuration for unigate.

Settings come from a YAML file when ``UNIGATE_CONFIG_PATH`` is set, otherwise from
environment variables (``PORT``, ``DATABASE_URL``, ``IS_OPENAI_ACTIVE``,
``OPENAI_API_KEY``, ``OPENAI_HOST``, ...).
"""
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from unigate.dbutils.dbmanager import DEFAULT_DATABASE_URL
from unigate.models import ProviderKind

# Order in which providers are registered, and therefore the tie-break order for
# model ids offered by more than one provider.
PROVIDER_ORDER = [ProviderKind.OPENAI, ProviderKind.ANTHROPIC, ProviderKind.OLLAMA]

TRUE_VALUES = {"1", "true", "yes", "on"}


class ProviderSettings(BaseModel):
    active: bool = Field(default=False)
    api_key: str = Field(default="")
    host: str = Field(default="")


class Settings(BaseModel):
    """Settings of the gateway process."""

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=11435)
    database_url: str = Field(default=DEFAULT_DATABASE_URL)
    log_level: str = Field(default="INFO")
    reset_database_on_start: bool = Field(default=True)
    providers: Dict[str, ProviderSettings] = Field(default_factory=dict)

    @field_validator("providers")
    @classmethod
    def validate_provider_names(cls, value: Dict[str, ProviderSettings]):
        unknown = [name for name in value if ProviderKind.from_name(name) is None]
        if unknown:
            raise ValueError(f"Unknown provider(s): {', '.join(sorted(unknown))}")
        return {name.lower(): cfg for name, cfg in value.items()}

    def enabled_providers(self) -> List[tuple[str, ProviderSettings]]:
        """Active providers in registration order."""
        enabled = []
        for kind in PROVIDER_ORDER:
            cfg = self.providers.get(kind.value)
            if cfg is not None and cfg.active:
                enabled.append((kind.value, cfg))
        return enabled

    @classmethod
    def from_yaml(cls, file_path: Path) -> "Settings":
        try:
            with open(file_path, "r", encoding="utf-8") as file:
                settings_file = yaml.safe_load(file) or {}
            return cls.model_validate(settings_file)
        except FileNotFoundError as e:
            raise FileNotFoundError(
                f"Configuration file not found at {file_path}."
            ) from e
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Error parsing YAML file at {file_path}.") from e

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        database_url = env.get("DATABASE_URL")
        if not database_url and env.get("DATABASE_PATH"):
            database_url = f"sqlite:///{env['DATABASE_PATH']}"

        providers = {}
        for kind in PROVIDER_ORDER:
            prefix = kind.value.upper()
            providers[kind.value] = ProviderSettings(
                active=env.get(f"IS_{prefix}_ACTIVE", "").strip().lower() in TRUE_VALUES,
                api_key=env.get(f"{prefix}_API_KEY", ""),
                host=env.get(f"{prefix}_HOST", ""),
            )

        return cls(
            host=env.get("HOST", "0.0.0.0"),
            port=int(env.get("PORT", "11435")),
            database_url=database_url or DEFAULT_DATABASE_URL,
            log_level=env.get("LOG_LEVEL", "INFO"),
            reset_database_on_start=env.get("RESET_DATABASE_ON_START", "true").strip().lower() in TRUE_VALUES,
            providers=providers,
        )

    @classmethod
    def get_settings(cls) -> "Settings":
        """Get the settings from the configuration file, or the environment if none is given."""
        file_path_env = os.environ.get("UNIGATE_CONFIG_PATH")
        if file_path_env:
            return cls.from_yaml(Path(file_path_env))
        return cls.from_env()
