from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"
DEFAULT_SCHEDULE = "@every 1h"
DEFAULT_TIMEOUT = 25.0

"""
config.yaml layout:

telegram:
  token: "<bot token>"
  chat_id: "<chat id>"
tracking:
  url: "https://shop.example/steaks"
  interval: "@every 1h"          # or a 5-field crontab
  steaks_to_track:
    - ribeye
    - t-bone

Environment (and .env) values override the file:
TARGET_URL, CHECK_SCHEDULE, TRACKED_ITEMS, TELEGRAM_TOKEN, TELEGRAM_CHAT_ID, REQUEST_TIMEOUT
"""


@dataclass(frozen=True)
class Settings:
    url: str
    schedule: str = DEFAULT_SCHEDULE
    tracked: tuple[str, ...] = ()
    telegram_token: str = ""
    telegram_chat_id: str = ""
    timeout: float = DEFAULT_TIMEOUT


def split_terms(raw: str) -> list[str]:
    """Split a comma or newline separated list, dropping blanks."""
    return [p.strip() for p in re.split(r"[,\n]", raw or "") if p.strip()]


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    val = data.get(key) or {}
    if not isinstance(val, dict):
        raise ConfigError(f"'{key}' must be a mapping")
    return val


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        logger.info("Config file %s not found; using environment only", path)
        return {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    return data


def _env(name: str) -> str:
    return os.getenv(name, "").strip()


def load_settings(
    path: str | Path | None = DEFAULT_CONFIG_PATH, dotenv_path: str | None = None
) -> Settings:
    load_dotenv(dotenv_path=dotenv_path)

    data = _read_yaml(Path(path)) if path else {}
    telegram = _section(data, "telegram")
    tracking = _section(data, "tracking")

    url = _env("TARGET_URL") or str(tracking.get("url") or "").strip()
    if not url:
        raise ConfigError("Set tracking.url in the config file or TARGET_URL in env")

    schedule = _env("CHECK_SCHEDULE") or str(tracking.get("interval") or "").strip()

    env_terms = _env("TRACKED_ITEMS")
    if env_terms:
        tracked = split_terms(env_terms)
    else:
        raw_terms = tracking.get("steaks_to_track") or []
        if isinstance(raw_terms, str):
            tracked = split_terms(raw_terms)
        elif isinstance(raw_terms, list):
            tracked = [str(t).strip() for t in raw_terms if str(t).strip()]
        else:
            raise ConfigError("tracking.steaks_to_track must be a list of strings")

    raw_timeout = _env("REQUEST_TIMEOUT")
    try:
        timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
    except ValueError:
        raise ConfigError(f"REQUEST_TIMEOUT must be a number, got {raw_timeout!r}") from None
    if timeout <= 0:
        raise ConfigError("REQUEST_TIMEOUT must be positive")

    if not tracked:
        logger.warning("No tracked items configured; nothing will ever match")

    return Settings(
        url=url,
        schedule=schedule or DEFAULT_SCHEDULE,
        tracked=tuple(tracked),
        telegram_token=_env("TELEGRAM_TOKEN") or str(telegram.get("token") or "").strip(),
        telegram_chat_id=_env("TELEGRAM_CHAT_ID") or str(telegram.get("chat_id") or "").strip(),
        timeout=timeout,
    )
