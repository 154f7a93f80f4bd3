"""Settings for the assessment service and its HTTP client.

Sources, highest precedence first:
1) environment variables;
2) one-value text files under ``config/`` named after the setting
   (``config/database.url``, ``config/client.base_url``, ...);
3) ``assessment_config.json`` in the working directory;
4) development defaults (in-memory SQLite, local API).

The assembled values are checked by pydantic before use.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

CONFIG_DIR = Path("config")
ROOT_CONFIG = Path("assessment_config.json")
logger = logging.getLogger(__name__)


def _override_file(name: str) -> Optional[str]:
    target = CONFIG_DIR / name
    if not target.is_file():
        return None
    try:
        return target.read_text(encoding="utf-8").strip() or None
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("config_override_unreadable path=%s error=%s", target, exc)
        return None


def _truthy(text: Optional[str]) -> bool:
    return str(text or "").strip().lower() in {"1", "true", "yes", "on"}


class DatabaseConfig(BaseModel):
    dsn: str

    @field_validator("dsn")
    @classmethod
    def dsn_present(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("database.dsn is empty")
        return value.strip()


class ClientConfig(BaseModel):
    base_url: str = "http://localhost:8000/api/v1"
    timeout_seconds: float = Field(default=10.0, gt=0)

    @field_validator("base_url")
    @classmethod
    def base_url_must_be_http(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("client.base_url must start with http:// or https://")
        return value.rstrip("/")


class MigrationsConfig(BaseModel):
    auto_apply: bool = True


class AppConfig(BaseModel):
    database: DatabaseConfig
    client: ClientConfig = Field(default_factory=ClientConfig)
    migrations: MigrationsConfig = Field(default_factory=MigrationsConfig)


def _json_settings(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        loaded = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.error("config_json_invalid path=%s error=%s", path, exc)
        return {}
    return loaded if isinstance(loaded, dict) else {}


def _dotted(settings: Dict[str, Any], dotted_key: str) -> Optional[str]:
    node: Any = settings
    for part in dotted_key.split("."):
        if not isinstance(node, dict):
            return None
        node = node.get(part)
    return None if node is None else str(node)


def load_config() -> AppConfig:
    """Assemble and validate the service settings.

    Raises pydantic's ``ValidationError`` when a value is out of range.
    """
    settings = _json_settings(ROOT_CONFIG)

    def pick(env_keys: tuple, dotted_key: str, default: str) -> str:
        for key in env_keys:
            if os.environ.get(key):
                return os.environ[key]
        return _override_file(dotted_key) or _dotted(settings, dotted_key) or default

    dsn = (
        os.environ.get("TEST_DATABASE_URL")
        or os.environ.get("DATABASE_URL")
        or _override_file("database.url")
        or _dotted(settings, "database.dsn")
        or "sqlite+pysqlite:///:memory:"
    )
    base_url = pick(("ASSESSMENT_API_BASE_URL",), "client.base_url", "http://localhost:8000/api/v1")
    timeout = pick(("ASSESSMENT_API_TIMEOUT",), "client.timeout_seconds", "10")
    auto_apply = pick(("AUTO_APPLY_MIGRATIONS",), "migrations.auto_apply", "true")

    try:
        return AppConfig(
            database=DatabaseConfig(dsn=dsn),
            client=ClientConfig(base_url=base_url, timeout_seconds=float(timeout.strip())),
            migrations=MigrationsConfig(auto_apply=_truthy(auto_apply)),
        )
    except (PydanticValidationError, ValueError) as exc:
        logger.error("config_invalid error=%s", exc)
        raise


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "ClientConfig",
    "MigrationsConfig",
    "load_config",
]
