from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import yaml


WEBHOOK_URL_ENV = "TEAMS_WEBHOOK_URL"


class ConfigError(RuntimeError):
    pass


def _read_raw(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Failed to read config {path}: {e}") from e
    if path.suffix.lower() == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Failed to parse JSON config {path}: {e}") from e
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config {path}: {e}") from e


def _as_str(raw: dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = raw.get(key)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise ConfigError(f"{key} must be a string.")
        return str(value).strip()
    return ""


def load_config(path: Path, *, webhook_url: str | None = None) -> dict[str, Any]:
    """Read the message file; an explicit ``webhook_url`` wins over the file and the environment."""
    if not path.exists():
        raise ConfigError(f"Config not found: {path}")

    raw = _read_raw(path) or {}
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping (JSON object or YAML dict).")

    cfg: dict[str, Any] = {}
    cfg["webhook_url"] = (
        (webhook_url or "").strip()
        or _as_str(raw, "webhookURL", "webhook_url")
        or os.getenv(WEBHOOK_URL_ENV, "").strip()
    )
    # Title and text are checked by MessageCard.validate() at send time.
    cfg["title"] = _as_str(raw, "title")
    cfg["text"] = _as_str(raw, "text")
    cfg["color"] = _as_str(raw, "color")

    if not cfg["webhook_url"]:
        raise ConfigError(f"Missing webhook URL (set webhookURL in {path.name} or {WEBHOOK_URL_ENV}).")
    return cfg
