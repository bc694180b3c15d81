"""
Global Configuration and Defaults.

Module-level constants are the defaults; an ``EngineConfig`` can be loaded
from ``.sigscope/config.yaml`` and overridden by environment variables:

    engine:
      cascade_window_ms: 50
      max_log_entries: 1000
      hide_internal: true
      active_origin: null
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

# --- Cascade reconstruction ---
# Events later than this after the root write are not attributed to it
CASCADE_WINDOW_MS = 50

# Event types that open a new cascade
CASCADE_ROOT_EVENTS = frozenset({"signal:write"})

# Event types that can join an open cascade
CASCADE_EFFECT_EVENTS = frozenset({
    "computed:value",
    "computed:read",
    "effect:run",
    "effect:created",
    "subscribe:notify",
})

# --- Event log ---
# Oldest entries are dropped beyond this
MAX_LOG_ENTRIES = 1000

DEFAULT_CONFIG_PATH = Path(".sigscope/config.yaml")

ENV_PREFIX = "SIGSCOPE_"


class EngineConfig(BaseModel):
    """Tunables for one InspectorEngine."""
    cascade_window_ms: float = Field(default=CASCADE_WINDOW_MS, ge=0)
    max_log_entries: int = Field(default=MAX_LOG_ENTRIES, gt=0)
    hide_internal: bool = True
    active_origin: Optional[str] = None


def _env_overrides() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for key in ("cascade_window_ms", "max_log_entries", "hide_internal"):
        value = os.getenv(f"{ENV_PREFIX}{key.upper()}")
        if value is not None:
            overrides[key] = value
    return overrides


def load_config(config_path: Optional[Path] = None) -> EngineConfig:
    """
    Load engine settings.

    Precedence: environment > config file > defaults. A missing file is
    not an error; an unreadable or invalid one falls back to defaults.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    data: Dict[str, Any] = {}

    if path.exists():
        try:
            with open(path, "r") as f:
                loaded = yaml.safe_load(f) or {}
            data = dict(loaded.get("engine") or {})
        except (OSError, yaml.YAMLError, AttributeError, TypeError) as e:
            logger.warning("Ignoring unreadable config %s: %s", path, e)

    data.update(_env_overrides())

    try:
        return EngineConfig.model_validate(data)
    except ValidationError as e:
        logger.warning("Invalid engine config, using defaults: %s", e)
        return EngineConfig()
