import pytest
from pydantic import ValidationError

from unigate.config import Settings
from unigate.dbutils.dbmanager import DEFAULT_DATABASE_URL


def test_from_env_defaults():
    settings = Settings.from_env({})

    assert settings.port == 11435
    assert settings.host == "0.0.0.0"
    assert settings.database_url == DEFAULT_DATABASE_URL
    assert settings.reset_database_on_start is True
    assert settings.enabled_providers() == []


def test_from_env_reads_provider_flags():
    settings = Settings.from_env({
        "PORT": "8080",
        "DATABASE_PATH": "/tmp/gw.db",
        "IS_OLLAMA_ACTIVE": "true",
        "OLLAMA_HOST": "http://ollama:11434",
        "IS_OPENAI_ACTIVE": "1",
        "OPENAI_API_KEY": "sk-test",
        "IS_ANTHROPIC_ACTIVE": "false",
        "RESET_DATABASE_ON_START": "no",
    })

    assert settings.port == 8080
    assert settings.database_url == "sqlite:////tmp/gw.db"
    assert settings.reset_database_on_start is False
    enabled = settings.enabled_providers()
    assert [name for name, _ in enabled] == ["openai", "ollama"]
    assert enabled[0][1].api_key == "sk-test"
    assert enabled[1][1].host == "http://ollama:11434"


def test_database_url_wins_over_path():
    settings = Settings.from_env({"DATABASE_URL": "sqlite://", "DATABASE_PATH": "/tmp/ignored.db"})
    assert settings.database_url == "sqlite://"


def test_from_yaml(tmp_path):
    config_file = tmp_path / "config.yml"
    config_file.write_text(
        "port: 9000\n"
        "log_level: DEBUG\n"
        "providers:\n"
        "  Ollama:\n"
        "    active: true\n"
        "    host: http://localhost:11434\n"
        "  anthropic:\n"
        "    active: true\n"
        "    api_key: ak\n",
        encoding="utf-8",
    )

    settings = Settings.from_yaml(config_file)

    assert settings.port == 9000
    assert settings.log_level == "DEBUG"
    assert [name for name, _ in settings.enabled_providers()] == ["anthropic", "ollama"]


def test_from_yaml_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        Settings.from_yaml(tmp_path / "absent.yml")


def test_unknown_provider_is_rejected():
    with pytest.raises(ValidationError, match="Unknown provider"):
        Settings.model_validate({"providers": {"mistral": {"active": True}}})


def test_get_settings_prefers_config_file(tmp_path, monkeypatch):
    config_file = tmp_path / "config.yml"
    config_file.write_text("port: 7000\n", encoding="utf-8")
    monkeypatch.setenv("UNIGATE_CONFIG_PATH", str(config_file))
    monkeypatch.setenv("PORT", "1234")

    assert Settings.get_settings().port == 7000
