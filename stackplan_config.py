"""
stackplan_config.py

Configuration for the StackPlan planner.

Defaults come from common.constants and can be overridden by a YAML file.
The file is looked up in this order:
    1. Path in the STACKPLAN_CONFIG environment variable
    2. stackplan.yaml in the current working directory

Usage:
    from stackplan_config import get_config

    config = get_config()
    timeout = config.get("search_timeout_seconds", 10.0)
"""

import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from common.constants import (
    BURIED_OBJECT_WEIGHT,
    DEFAULT_HEURISTIC,
    DEFAULT_MAX_EXPANSIONS,
    DEFAULT_SEARCH_TIMEOUT_SECONDS,
    HEURISTIC_CACHE_MAXSIZE,
)
from component_15_logging_config import get_logger
from stackplan_exceptions import InvalidConfigError, wrap_exception

logger = get_logger(__name__)

CONFIG_ENV_VAR = "STACKPLAN_CONFIG"
DEFAULT_CONFIG_FILE = "stackplan.yaml"

DEFAULTS: Dict[str, Any] = {
    "search_timeout_seconds": DEFAULT_SEARCH_TIMEOUT_SECONDS,
    "search_max_expansions": DEFAULT_MAX_EXPANSIONS,
    "heuristic": DEFAULT_HEURISTIC,
    "heuristic_buried_weight": BURIED_OBJECT_WEIGHT,
    "heuristic_cache_size": HEURISTIC_CACHE_MAXSIZE,
    "narrate_plan": False,
}

# Accepted types per key (None allowed only where listed)
_TYPES: Dict[str, tuple] = {
    "search_timeout_seconds": (int, float),
    "search_max_expansions": (int, type(None)),
    "heuristic": (str,),
    "heuristic_buried_weight": (int, float),
    "heuristic_cache_size": (int,),
    "narrate_plan": (bool,),
}


class PlannerConfig:
    """
    Read-only view over the merged planner configuration.

    Values are validated on load; unknown keys are rejected so that typos in
    stackplan.yaml do not silently fall back to defaults.
    """

    def __init__(self, overrides: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, Any] = dict(DEFAULTS)
        if overrides:
            self._values.update(self._validate(overrides))

    @staticmethod
    def _validate(overrides: Dict[str, Any]) -> Dict[str, Any]:
        for key, value in overrides.items():
            if key not in _TYPES:
                raise InvalidConfigError(
                    f"Unknown configuration key '{key}'", context={"key": key}
                )
            # bool is an int subclass; only accept it where bool is expected
            if isinstance(value, bool) and bool not in _TYPES[key]:
                raise InvalidConfigError(
                    f"Invalid type for '{key}'",
                    context={"key": key, "value": value},
                )
            if not isinstance(value, _TYPES[key]):
                raise InvalidConfigError(
                    f"Invalid type for '{key}'",
                    context={"key": key, "value": value},
                )
        return overrides

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "PlannerConfig":
        """
        Load configuration overrides from a YAML file.

        Raises:
            InvalidConfigError: File unreadable, not a mapping, or invalid values
        """
        config_path = Path(path)
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise wrap_exception(
                e, InvalidConfigError, "Cannot read configuration file", path=str(config_path)
            ) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise InvalidConfigError(
                "Configuration file must contain a mapping",
                context={"path": str(config_path)},
            )

        logger.debug("Configuration loaded", extra={"path": str(config_path)})
        return cls(data)

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)


_config: Optional[PlannerConfig] = None
_config_lock = threading.Lock()


def _locate_config_file() -> Optional[Path]:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)

    local = Path.cwd() / DEFAULT_CONFIG_FILE
    if local.exists():
        return local
    return None


def get_config() -> PlannerConfig:
    """
    Return the process-wide planner configuration (loaded lazily).
    """
    global _config
    with _config_lock:
        if _config is None:
            path = _locate_config_file()
            _config = PlannerConfig.from_yaml(path) if path else PlannerConfig()
        return _config


def reset_config() -> None:
    """Forget the cached configuration (used by tests)."""
    global _config
    with _config_lock:
        _config = None
