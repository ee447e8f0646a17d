import logging
import os
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

CONFIG_FILE_ENV = "DDD_CONFIG_FILE"
LOG_FILE_ENV = "DDD_LOG_FILE"


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Settings read from the YAML document named by ``DDD_CONFIG_FILE``.

    A missing variable or a missing file contributes nothing.
    """

    def _read(self) -> dict[str, Any]:
        location = os.environ.get(CONFIG_FILE_ENV)
        if not location or not Path(location).is_file():
            return {}
        with open(location, encoding="utf-8") as fh:
            return yaml.safe_load(fh) or {}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._read().get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return self._read()


class DatabaseConfig(BaseModel):
    """Storage settings (``DDD_DATABASE__URL`` and friends)."""

    url: str = "sqlite:///:memory:"
    echo: bool = False
    pool_size: int = 5  # Ignored for SQLite
    max_overflow: int = 10


class LoggingConfig(BaseModel):
    """Log level and line layout (``DDD_LOGGING__LEVEL`` and friends)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    date_format: str = "%Y-%m-%dT%H:%M:%S"

    @property
    def file(self) -> str | None:
        """Optional log file, taken from ``DDD_LOG_FILE``."""
        return os.environ.get(LOG_FILE_ENV)


class EventsConfig(BaseModel):
    """Domain event publication settings."""

    log_payloads: bool = False  # Log full event payloads at DEBUG


class Config(BaseSettings):
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    events: EventsConfig = EventsConfig()

    model_config = {
        "env_prefix": "DDD_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # DDD_DATABASE__URL -> database.url
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Explicit values win, then the environment, then .env, then YAML, then secrets."""
        yaml_settings = YamlConfigSettingsSource(settings_cls)
        return init_settings, env_settings, dotenv_settings, yaml_settings, file_secret_settings


def _log_handler(config: LoggingConfig) -> logging.Handler:
    if not config.file:
        return logging.StreamHandler(sys.stderr)
    target = Path(config.file).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(target, encoding="utf-8")


def configure_logging(config: LoggingConfig) -> None:
    """Route all library loggers through a single root handler.

    Call once at startup. Replaces whatever handlers the root logger had.
    """
    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)

    handler = _log_handler(config)
    handler.setFormatter(logging.Formatter(config.format, datefmt=config.date_format))
    handler.setLevel(config.level)
    root.addHandler(handler)
    root.setLevel(config.level)

    # SQL echo is controlled by DatabaseConfig.echo, not by the root level
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        "Logging configured: level=%s, file=%s", config.level, config.file or "<stderr>"
    )
