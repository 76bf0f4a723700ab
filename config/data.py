import json
import os
from typing import Optional

from loguru import logger

APP_NAME = "seekr"
APP_NAME_CAP = "Seekr"

# Single instance coordination, loopback only
INSTANCE_HOST = "127.0.0.1"
INSTANCE_PORT = 27262
INSTANCE_BACKLOG = 10
INSTANCE_TOKEN = "io.seekr.Launcher"

CONFIG_DIR = os.path.expanduser(f"~/.config/{APP_NAME}")
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")

DEFAULT_CONFIG = {
    "max_results": 10,
    "disabled_plugins": [],
    "plugins": {},
    "search_workers": 1,
    "plugin_timeout": None,
    "search_debounce_ms": 150,
}


def parse_timeout_string(timeout_str) -> Optional[float]:
    """
    Parse timeout string in format like '500ms', '2s', '1m' etc.
    Returns timeout in seconds, or None for no timeout.
    """
    if timeout_str is None:
        return None

    if isinstance(timeout_str, (int, float)) and not isinstance(timeout_str, bool):
        return float(timeout_str) if timeout_str > 0 else None

    if not isinstance(timeout_str, str) or not timeout_str.strip():
        return None

    timeout_str = timeout_str.strip().lower()

    try:
        if timeout_str.endswith("ms"):
            seconds = int(timeout_str[:-2]) / 1000
        elif timeout_str.endswith("s"):
            seconds = float(timeout_str[:-1])
        elif timeout_str.endswith("m"):
            seconds = float(timeout_str[:-1]) * 60
        else:
            seconds = float(timeout_str)
    except ValueError:
        logger.warning(f"[Config] Invalid timeout '{timeout_str}', searching without timeout")
        return None

    return seconds if seconds > 0 else None


def load_config(path: Optional[str] = None) -> dict:
    """Load the configuration from config.json, falling back to defaults."""
    path = path or CONFIG_FILE
    config = dict(DEFAULT_CONFIG)

    if os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"[Config] Error loading config {path}: {e}")
            loaded = {}

        if isinstance(loaded, dict):
            config.update(loaded)
        else:
            logger.error(f"[Config] Ignoring config {path}: expected a JSON object")

    config["plugin_timeout"] = parse_timeout_string(config.get("plugin_timeout"))
    disabled = config.get("disabled_plugins") or []
    if isinstance(disabled, str):
        disabled = [disabled]
    config["disabled_plugins"] = [str(name).lower() for name in disabled]

    plugins = config.get("plugins")
    if not isinstance(plugins, dict):
        if plugins is not None:
            logger.error("[Config] Ignoring plugins section: expected a JSON object")
        plugins = {}
    config["plugins"] = {
        str(name).lower(): settings
        for name, settings in plugins.items()
        if isinstance(settings, dict)
    }

    try:
        config["max_results"] = max(1, int(config["max_results"]))
        config["search_workers"] = max(1, int(config["search_workers"]))
        config["search_debounce_ms"] = max(0, int(config["search_debounce_ms"]))
    except (TypeError, ValueError) as e:
        logger.error(f"[Config] Invalid numeric option, using defaults: {e}")
        for key in ("max_results", "search_workers", "search_debounce_ms"):
            config[key] = DEFAULT_CONFIG[key]

    return config
