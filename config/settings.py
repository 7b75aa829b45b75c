"""
Configuration loader for the tablequeue producer.
Reads settings from YAML file with environment variable substitution.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml


@dataclass
class DatabaseConfig:
    url: str = "sqlite:///./tablequeue.db"        # postgresql:// | mysql:// | sqlite://


@dataclass
class ProducerConfig:
    table_name: str = "enqueue"
    priority: Optional[int] = None
    delivery_delay: Optional[int] = None           # milliseconds
    time_to_live: Optional[int] = None             # milliseconds


@dataclass
class Settings:
    app_name: str = "tablequeue"
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool = False
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    producer: ProducerConfig = field(default_factory=ProducerConfig)


_settings: Optional[Settings] = None


def _substitute_env_vars(value: str) -> str:
    """Replace ${VAR_NAME} patterns with environment variable values."""
    pattern = re.compile(r'\$\{(\w+)\}')
    def replacer(match):
        var_name = match.group(1)
        return os.environ.get(var_name, match.group(0))
    return pattern.sub(replacer, value)


def _process_values(obj: Any) -> Any:
    """Recursively substitute env vars in all string values."""
    if isinstance(obj, str):
        return _substitute_env_vars(obj)
    elif isinstance(obj, dict):
        return {k: _process_values(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_process_values(v) for v in obj]
    return obj


def _optional_int(value: Any) -> Optional[int]:
    # Env substitution leaves strings behind; empty means "unset".
    if value is None or value == "":
        return None
    return int(value)


def load_settings(config_path: str = None) -> Settings:
    """Load settings from YAML file."""
    global _settings

    if config_path is None:
        config_path = os.environ.get(
            "TABLEQUEUE_CONFIG",
            str(Path(__file__).parent / "settings.yaml"),
        )

    settings = Settings()

    if Path(config_path).exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
        raw = _process_values(raw)

        settings.app_name = raw.get("app_name", settings.app_name)
        settings.debug = raw.get("debug", settings.debug)
        settings.log_level = raw.get("log_level", settings.log_level)
        settings.log_json = raw.get("log_json", settings.log_json)

        if "database" in raw:
            db = raw["database"] or {}
            settings.database = DatabaseConfig(
                url=db.get("url", settings.database.url),
            )

        if "producer" in raw:
            p = raw["producer"] or {}
            settings.producer = ProducerConfig(
                table_name=p.get("table_name", "enqueue"),
                priority=_optional_int(p.get("priority")),
                delivery_delay=_optional_int(p.get("delivery_delay")),
                time_to_live=_optional_int(p.get("time_to_live")),
            )

    _settings = settings
    return settings


def get_settings() -> Settings:
    """Return cached settings or load from default path."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Drop cached settings (for testing)."""
    global _settings
    _settings = None
