from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml
from dotenv import load_dotenv

_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "config" / "defaults.yaml"
_ENV_PREFIX = "TRAVEL_PLANNER_"
load_dotenv()


def _bool_from_env(value: str | None) -> Optional[bool]:
    if value is None:
        return None
    value = value.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return None


def _number_from_env(value: str | None, cast=float):
    if value is None:
        return None
    try:
        return cast(value)
    except ValueError:
        return None


def _merge_dicts(base: Dict, overrides: Mapping) -> Dict:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), Mapping):
            merged[key] = _merge_dicts(base[key], value)
        else:
            merged[key] = value
    return merged


def _load_yaml(path: Path) -> Dict:
    if not path.exists():
        return {}
    return yaml.safe_load(path.read_text()) or {}


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 3000
    env: str = "development"


@dataclass
class OpenMeteoConfig:
    forecast_url: str = "https://api.open-meteo.com/v1"
    geocoding_url: str = "https://geocoding-api.open-meteo.com/v1"
    timeout_seconds: float = 10.0
    forecast_days: int = 7
    max_attempts: int = 3
    backoff_factor: float = 0.5


@dataclass
class LoggingConfig:
    level: str = "INFO"
    json: bool = True


@dataclass
class AppConfig:
    server: ServerConfig = field(default_factory=ServerConfig)
    open_meteo: OpenMeteoConfig = field(default_factory=OpenMeteoConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(*, config_path: str | None = None, env: Mapping[str, str] | None = None) -> AppConfig:
    env = dict(os.environ if env is None else env)
    data = _load_yaml(_DEFAULT_CONFIG_PATH)

    explicit_path = config_path or env.get(f"{_ENV_PREFIX}CONFIG_PATH")
    if explicit_path:
        data = _merge_dicts(data, _load_yaml(Path(explicit_path)))

    server_data = dict(data.get("server") or {})
    host_override = env.get(f"{_ENV_PREFIX}HOST")
    if host_override:
        server_data["host"] = host_override
    port_override = _number_from_env(env.get(f"{_ENV_PREFIX}PORT"), int)
    if port_override is not None:
        server_data["port"] = port_override
    env_override = env.get(f"{_ENV_PREFIX}ENV")
    if env_override:
        server_data["env"] = env_override

    open_meteo_data = dict(data.get("open_meteo") or {})
    forecast_url = env.get(f"{_ENV_PREFIX}FORECAST_URL")
    if forecast_url:
        open_meteo_data["forecast_url"] = forecast_url
    geocoding_url = env.get(f"{_ENV_PREFIX}GEOCODING_URL")
    if geocoding_url:
        open_meteo_data["geocoding_url"] = geocoding_url
    timeout_override = _number_from_env(env.get(f"{_ENV_PREFIX}REQUEST_TIMEOUT"))
    if timeout_override is not None:
        open_meteo_data["timeout_seconds"] = timeout_override

    logging_data = dict(data.get("logging") or {})
    level_override = env.get(f"{_ENV_PREFIX}LOG_LEVEL")
    if level_override:
        logging_data["level"] = level_override
    json_override = _bool_from_env(env.get(f"{_ENV_PREFIX}LOG_JSON"))
    if json_override is not None:
        logging_data["json"] = json_override

    return AppConfig(
        server=ServerConfig(**server_data),
        open_meteo=OpenMeteoConfig(**open_meteo_data),
        logging=LoggingConfig(**logging_data),
    )


app_config = load_config()
