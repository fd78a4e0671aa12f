from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, asdict
from typing import Any

from loguru import logger

# If you set APP_CONFIG_PATH, it overrides the default location (useful for production/testing).
ENV_CONFIG_PATH_VAR = "APP_CONFIG_PATH"
DEFAULT_CONFIG_PATH = "config/app_config.json"


def get_config_path() -> str:
    """
    Canonical config path resolver.

    Priority:
      1) APP_CONFIG_PATH env override (absolute or relative)
      2) config/app_config.json
    """
    return os.environ.get(ENV_CONFIG_PATH_VAR) or DEFAULT_CONFIG_PATH


# ------------------------------------------------------------------ Config models

@dataclass
class BackendConfig:
    """Recording server the console talks to."""
    base_url: str = "http://localhost:9981"
    timeout_s: float = 10.0
    verify_ssl: bool = True
    headers: dict[str, str] = field(default_factory=dict)
    docs_path: str = "docs"


@dataclass
class LoggingConfig:
    console_level: str = "INFO"
    file_level: str = "DEBUG"
    log_dir: str = "log"


@dataclass
class UiConfig:
    title: str = "Recording Console"
    language: str = "en"
    port: int = 8080
    dark_mode: bool = False


@dataclass
class AppConfig:
    backend: BackendConfig = field(default_factory=BackendConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    ui: UiConfig = field(default_factory=UiConfig)


_APP_CONFIG: AppConfig | None = None


def clear_app_config_cache() -> None:
    global _APP_CONFIG
    _APP_CONFIG = None


def get_app_config() -> AppConfig:
    global _APP_CONFIG
    if _APP_CONFIG is None:
        _APP_CONFIG = load_app_config()
    return _APP_CONFIG


def load_app_config(path: str | None = None) -> AppConfig:
    config_path = path or get_config_path()
    log = logger.bind(component="AppConfig", path=config_path)

    if not os.path.exists(config_path):
        log.warning("Config not found. Writing defaults.")
        cfg = AppConfig()
        save_app_config(cfg, config_path)
        return cfg

    with open(config_path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"Config file {config_path} must contain a JSON object")
    return _from_dict(raw)


def save_app_config(cfg: AppConfig, path: str | None = None) -> None:
    global _APP_CONFIG
    config_path = path or get_config_path()
    config_dir = os.path.dirname(config_path)
    if config_dir:
        os.makedirs(config_dir, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(_to_dict(cfg), f, indent=2, sort_keys=True)

    # Keep cache in sync
    _APP_CONFIG = cfg


def _to_dict(cfg: AppConfig) -> dict[str, Any]:
    return asdict(cfg)


# ------------------------------------------------------------------ Parsing

def _section(data: dict[str, Any], name: str, model: type) -> Any:
    raw = data.get(name, {})
    if not isinstance(raw, dict):
        raise ValueError(f"Config section '{name}' must be an object")
    known = {k: v for k, v in raw.items() if k in model.__dataclass_fields__}
    unknown = sorted(set(raw) - set(known))
    if unknown:
        logger.warning(f"[_section] - unknown_config_keys_ignored - section={name} keys={unknown}")
    return model(**known)


def _from_dict(data: dict[str, Any]) -> AppConfig:
    backend = _section(data, "backend", BackendConfig)
    backend.timeout_s = float(backend.timeout_s)
    backend.verify_ssl = bool(backend.verify_ssl)
    backend.headers = {str(k): str(v) for k, v in (backend.headers or {}).items()}

    logging_cfg = _section(data, "logging", LoggingConfig)
    logging_cfg.console_level = str(logging_cfg.console_level or "INFO").upper()
    logging_cfg.file_level = str(logging_cfg.file_level or "DEBUG").upper()

    ui_cfg = _section(data, "ui", UiConfig)
    ui_cfg.port = int(ui_cfg.port)
    ui_cfg.dark_mode = bool(ui_cfg.dark_mode)

    return AppConfig(backend=backend, logging=logging_cfg, ui=ui_cfg)
