"""Persistent JSON config helpers.

Stores the default target directory name, walker concurrency, and preferred
deletion strategy. All access is defensive: malformed or missing config falls
back safely.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from platformdirs import user_config_dir

from ..strategies import available_strategy_names
from ..walker import DEFAULT_CONCURRENCY_LIMIT
from .scan import DEFAULT_TARGET_NAME

logger = logging.getLogger(__name__)

APP_NAME = "dirsweep"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.debug("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Write failures are logged and otherwise ignored.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.warning("could not write config %s: %s", CONFIG_PATH, exc)


def load_target_name() -> str:
    value = load_config().get("target_name")
    if not isinstance(value, str):
        return DEFAULT_TARGET_NAME
    stripped = value.strip()
    if not stripped or "/" in stripped or "\\" in stripped:
        return DEFAULT_TARGET_NAME
    return stripped


def save_target_name(target_name: str) -> None:
    stripped = str(target_name).strip()
    if not stripped:
        return
    config = load_config()
    config["target_name"] = stripped
    save_config(config)


def load_concurrency_limit() -> int:
    """Return persisted walker concurrency; booleans and non-positive values are invalid."""
    value = load_config().get("concurrency_limit")
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return DEFAULT_CONCURRENCY_LIMIT
    return value


def save_concurrency_limit(limit: int) -> None:
    if limit < 1:
        return
    config = load_config()
    config["concurrency_limit"] = int(limit)
    save_config(config)


def load_deletion_strategy_name() -> str | None:
    """Return the configured strategy name, or ``None`` for automatic selection."""
    value = load_config().get("deletion_strategy")
    if not isinstance(value, str) or value not in available_strategy_names():
        return None
    return value


def save_deletion_strategy_name(name: str | None) -> None:
    config = load_config()
    if name is None:
        config.pop("deletion_strategy", None)
    elif name in available_strategy_names():
        config["deletion_strategy"] = name
    else:
        return
    save_config(config)


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "DEFAULT_CONFIG_PATH",
    "load_concurrency_limit",
    "load_config",
    "load_deletion_strategy_name",
    "load_target_name",
    "save_concurrency_limit",
    "save_config",
    "save_deletion_strategy_name",
    "save_target_name",
]
