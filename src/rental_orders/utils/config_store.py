"""Shared JSON configuration storage."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional


def load_config_data(config_path: Path) -> dict[str, Any]:
    """Load configuration JSON data from disk."""
    if not config_path.exists():
        return {}
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    if isinstance(data, dict):
        return data
    return {}


def save_config_data(config_path: Path, data: dict[str, Any]) -> None:
    """Persist configuration JSON data to disk."""
    config_path.write_text(
        json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8"
    )


def load_current_user_id(config_path: Path) -> Optional[int]:
    value = load_config_data(config_path).get("current_user_id")
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def save_current_user_id(config_path: Path, user_id: Optional[int]) -> None:
    payload = load_config_data(config_path)
    payload["current_user_id"] = user_id
    save_config_data(config_path, payload)
