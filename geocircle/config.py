"""
Configuration management for geocircle.

Runtime tunables come from, in order of priority:
1. Environment variables (GEOCIRCLE_*), including those in a .env file
2. A JSON config file (GEOCIRCLE_CONFIG, default geocircle.json in the cwd)
3. Built-in defaults

Circle styling lives in CircleOptions, not here. Settings only hold the
interaction and logging knobs shared by every circle.
"""

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "geocircle.json"
CONFIG_ENV_VAR = "GEOCIRCLE_CONFIG"

_ENV_KEYS = {
    'hover_reset_delay_s': 'GEOCIRCLE_HOVER_RESET_DELAY',
    'small_radius_threshold_m': 'GEOCIRCLE_SMALL_RADIUS_THRESHOLD',
    'coordinate_precision': 'GEOCIRCLE_COORDINATE_PRECISION',
    'default_before_layer': 'GEOCIRCLE_DEFAULT_BEFORE_LAYER',
    'frame_interval_s': 'GEOCIRCLE_FRAME_INTERVAL',
    'log_level': 'GEOCIRCLE_LOG_LEVEL',
}


@dataclass(frozen=True)
class Settings:
    """Interaction and logging settings shared by all circles."""
    # Delay before a handle hover highlight is reset while a drag may restart
    hover_reset_delay_s: float = 0.125
    # Below this radius a center drag renders a screen-space stroke instead of the polygon
    small_radius_threshold_m: float = 10000.0
    # Decimal places kept for dragged center coordinates and bounds
    coordinate_precision: int = 6
    # Layer that circle layers are inserted below when the host has it
    default_before_layer: Optional[str] = 'waterway-label'
    # Frame length used by hosts without a native animation frame
    frame_interval_s: float = 1 / 60
    log_level: str = 'WARNING'


def get_config_path() -> Path:
    """Get the path to the JSON config file."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return Path.cwd() / CONFIG_FILENAME


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the JSON config file, or {} if it is missing or invalid."""
    config_path = path or get_config_path()
    if not config_path.exists():
        return {}
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config {config_path}: expected a JSON object")
        return {}
    return data


def _coerce(name: str, raw: Any, default: Any) -> Any:
    if raw is None:
        return default
    if name == 'default_before_layer':
        return raw or None
    if name == 'log_level':
        return str(raw).upper()
    try:
        return type(default)(raw)
    except (TypeError, ValueError):
        logger.warning(f"Invalid value for {name}: {raw!r}, using default {default!r}")
        return default


def get_settings(path: Optional[Path] = None) -> Settings:
    """
    Resolve settings from environment, config file and defaults.

    Args:
        path: Explicit config file path (overrides GEOCIRCLE_CONFIG)

    Returns:
        Settings instance
    """
    load_dotenv()
    config = load_config(path)
    defaults = Settings()

    values = {}
    for f in fields(Settings):
        default = getattr(defaults, f.name)
        raw = os.environ.get(_ENV_KEYS[f.name])
        if raw is None:
            raw = config.get(f.name)
        values[f.name] = _coerce(f.name, raw, default)
    return Settings(**values)


def configure_logging(level: Optional[str] = None) -> None:
    """Set the geocircle logger level from settings or an explicit level."""
    level = (level or get_settings().log_level).upper()
    logging.getLogger('geocircle').setLevel(getattr(logging, level, logging.WARNING))
