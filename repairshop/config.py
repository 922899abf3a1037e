"""Application configuration loaded from config.yaml + environment variables."""

from __future__ import annotations

import yaml
from pathlib import Path
from pydantic import BaseModel, Field
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"


def _load_yaml() -> dict:
    if _CONFIG_PATH.exists():
        with open(_CONFIG_PATH) as f:
            return yaml.safe_load(f) or {}
    return {}


_yaml = _load_yaml()


class SessionConfig(BaseModel):
    max_age_days: int = 7
    cookie_name: str = "session_token"


class InvoiceConfig(BaseModel):
    tax_rate: float = 0.13
    default_payment_method: str = "cash"
    default_workshop_name: str = "Repair Workshop"


class AccountsConfig(BaseModel):
    min_password_length: int = 6


class YamlConfigSource(PydanticBaseSettingsSource):
    """config.yaml values, keyed by Settings field name."""

    def _values(self) -> dict:
        y = _yaml
        values = {key: y[key] for key in ("log_level", "session", "invoice", "accounts") if key in y}
        db_url = (y.get("database") or {}).get("url")
        if db_url:
            values["database_url"] = db_url
        return values

    def get_field_value(self, field: FieldInfo, field_name: str):
        return self._values().get(field_name), field_name, False

    def __call__(self) -> dict:
        return self._values()


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///data/repairshop.db"
    log_level: str = "INFO"
    session: SessionConfig = Field(default_factory=SessionConfig)
    invoice: InvoiceConfig = Field(default_factory=InvoiceConfig)
    accounts: AccountsConfig = Field(default_factory=AccountsConfig)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "REPAIRSHOP_",
        "env_nested_delimiter": "__",
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Environment beats config.yaml, config.yaml beats field defaults
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSource(settings_cls),
            file_secret_settings,
        )


def get_settings() -> Settings:
    """Build Settings by merging env overrides over YAML values."""
    return Settings()
