"""Load app configuration from config/jobflow.yaml, .env and the environment."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from jobflow.log import get_logger

log = get_logger(__name__)

load_dotenv()

PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = PROJECT_ROOT / "config"
CONFIG_PATH: Path = CONFIG_DIR / "jobflow.yaml"
DATA_DIR: Path = PROJECT_ROOT / "data"

GEMINI_OPENAI_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"

DEFAULTS: dict[str, Any] = {
    "data_dir": str(DATA_DIR),
    "base_url": GEMINI_OPENAI_URL,
    "text_model": "gemini-1.5-flash",
    "chat_model": "gemini-2.5-flash-lite",
    "vision_model": "gemini-2.5-flash-lite",
    "chat_timeout": 60.0,
}

# config key -> environment variable that overrides it
_ENV_OVERRIDES: dict[str, str] = {
    "data_dir": "JOBFLOW_DATA_DIR",
    "base_url": "JOBFLOW_BASE_URL",
    "text_model": "JOBFLOW_TEXT_MODEL",
    "chat_model": "JOBFLOW_CHAT_MODEL",
    "vision_model": "JOBFLOW_VISION_MODEL",
    "chat_timeout": "JOBFLOW_CHAT_TIMEOUT",
}


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Defaults, then the YAML file (if any), then environment overrides."""
    path = path or CONFIG_PATH
    data: dict[str, Any] = dict(DEFAULTS)

    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            log.warning("Ignoring unreadable config %s: %s", path.name, exc)
            loaded = {}
        if isinstance(loaded, dict):
            data.update({k: v for k, v in loaded.items() if k in DEFAULTS})
        else:
            log.warning("Ignoring config %s: expected a mapping", path.name)

    for key, env_name in _ENV_OVERRIDES.items():
        value = get_env(env_name)
        if value:
            data[key] = value

    try:
        data["chat_timeout"] = float(data["chat_timeout"])
    except (TypeError, ValueError):
        log.warning("Bad chat_timeout %r, using %s", data["chat_timeout"], DEFAULTS["chat_timeout"])
        data["chat_timeout"] = DEFAULTS["chat_timeout"]

    data_dir = Path(data["data_dir"]).expanduser()
    data["data_dir"] = data_dir if data_dir.is_absolute() else PROJECT_ROOT / data_dir
    return data


def ensure_dirs(config: dict[str, Any]) -> None:
    Path(config["data_dir"]).mkdir(parents=True, exist_ok=True)


def resolve_api_key(settings: Any) -> str:
    """Stored credential first; GEMINI_API_KEY from the environment as fallback."""
    stored = (getattr(settings, "api_key", "") or "").strip()
    return stored or get_env("GEMINI_API_KEY")


def open_store(config: dict[str, Any] | None = None):
    """Construct the JSON-backed store for the configured data directory."""
    from jobflow.storage import JsonFileStorage
    from jobflow.store import JobStore

    config = config or load_config()
    ensure_dirs(config)
    return JobStore(JsonFileStorage(config["data_dir"]))
