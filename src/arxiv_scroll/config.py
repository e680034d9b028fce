"""Configuration persistence: load and save user settings."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from arxiv_scroll.models import (
    CONFIG_APP_NAME,
    DEFAULT_BATCH_SIZE,
    DEFAULT_LOW_WATER_MARK,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_REOPENS,
    DEFAULT_MIN_LOAD_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SORT_BY,
    DEFAULT_SORT_ORDER,
    MAX_ATTEMPTS_LIMIT,
    MAX_BATCH_SIZE,
    MAX_MIN_LOAD_INTERVAL,
    MAX_REQUEST_TIMEOUT,
    MIN_REQUEST_TIMEOUT,
    SORT_BY_OPTIONS,
    SORT_ORDER_OPTIONS,
    UserConfig,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Configuration Persistence
# ============================================================================
#
# _dict_to_config() returns a valid UserConfig for any input:
#
#   Field                      Rule                        Handler
#   ─────────────────────────  ──────────────────────────  ─────────────────────
#   batch_size                 1 ≤ x ≤ 200                 coerce_batch_size
#   request_timeout_seconds    15 ≤ x ≤ 60                 coerce_request_timeout
#   min_load_interval_seconds  1.0 ≤ x ≤ 3.0               _coerce_min_interval
#   max_attempts               1 ≤ x ≤ 10                  _coerce_int_range
#   sort_by / sort_order       in SORT_*_OPTIONS           _coerce_choice
#   default_categories[]       non-empty strings           _parse_categories
#   scalar fields              type-checked via _safe_get  _dict_to_config
#
CONFIG_FILENAME = "config.json"


def get_config_path() -> Path:
    """Get the path to the configuration file.

    Uses platformdirs for cross-platform config directory:
    - Linux: ~/.config/arxiv-scroll/config.json
    - macOS: ~/Library/Application Support/arxiv-scroll/config.json
    - Windows: %APPDATA%/arxiv-scroll/config.json
    """
    config_dir = Path(user_config_dir(CONFIG_APP_NAME))
    return config_dir / CONFIG_FILENAME


def _safe_get(data: dict, key: str, default: Any, expected_type: type) -> Any:
    """Safely get a value from dict with type validation.

    Returns the default if key is missing or value has wrong type.
    """
    value = data.get(key, default)
    if not isinstance(value, expected_type) or (
        expected_type is int and isinstance(value, bool)
    ):
        return default
    return value


def _coerce_int_range(value: Any, default: int, low: int, high: int) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        return default
    return max(low, min(value, high))


def coerce_batch_size(value: Any) -> int:
    """Validate and clamp the page size used for feed requests."""
    return _coerce_int_range(value, DEFAULT_BATCH_SIZE, 1, MAX_BATCH_SIZE)


def coerce_request_timeout(value: Any) -> int:
    """Validate and clamp the per-request deadline."""
    return _coerce_int_range(
        value, DEFAULT_REQUEST_TIMEOUT, MIN_REQUEST_TIMEOUT, MAX_REQUEST_TIMEOUT
    )


def _coerce_min_interval(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_MIN_LOAD_INTERVAL
    return max(DEFAULT_MIN_LOAD_INTERVAL, min(float(value), MAX_MIN_LOAD_INTERVAL))


def _coerce_choice(value: Any, options: tuple[str, ...], default: str) -> str:
    if isinstance(value, str) and value in options:
        return value
    if value is not None:
        logger.warning("Invalid config value %r, expected one of %s", value, options)
    return default


def _parse_categories(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    return list(dict.fromkeys(c.strip() for c in raw if isinstance(c, str) and c.strip()))


def _config_to_dict(config: UserConfig) -> dict[str, Any]:
    """Serialize UserConfig to a JSON-compatible dictionary."""
    return {
        "version": config.version,
        "batch_size": coerce_batch_size(config.batch_size),
        "request_timeout_seconds": coerce_request_timeout(config.request_timeout_seconds),
        "min_load_interval_seconds": _coerce_min_interval(config.min_load_interval_seconds),
        "max_attempts": config.max_attempts,
        "low_water_mark": config.low_water_mark,
        "max_underfill_reopens": config.max_underfill_reopens,
        "sort_by": config.sort_by,
        "sort_order": config.sort_order,
        "default_categories": config.default_categories,
        "show_abstract_preview": config.show_abstract_preview,
    }


def _dict_to_config(data: dict[str, Any]) -> UserConfig:
    """Deserialize a dictionary to UserConfig with type validation."""
    return UserConfig(
        batch_size=coerce_batch_size(data.get("batch_size", DEFAULT_BATCH_SIZE)),
        request_timeout_seconds=coerce_request_timeout(
            data.get("request_timeout_seconds", DEFAULT_REQUEST_TIMEOUT)
        ),
        min_load_interval_seconds=_coerce_min_interval(
            data.get("min_load_interval_seconds", DEFAULT_MIN_LOAD_INTERVAL)
        ),
        max_attempts=_coerce_int_range(
            data.get("max_attempts"), DEFAULT_MAX_ATTEMPTS, 1, MAX_ATTEMPTS_LIMIT
        ),
        low_water_mark=_coerce_int_range(
            data.get("low_water_mark"), DEFAULT_LOW_WATER_MARK, 0, MAX_BATCH_SIZE
        ),
        max_underfill_reopens=_coerce_int_range(
            data.get("max_underfill_reopens"), DEFAULT_MAX_REOPENS, 0, 10
        ),
        sort_by=_coerce_choice(data.get("sort_by"), SORT_BY_OPTIONS, DEFAULT_SORT_BY),
        sort_order=_coerce_choice(data.get("sort_order"), SORT_ORDER_OPTIONS, DEFAULT_SORT_ORDER),
        default_categories=_parse_categories(data.get("default_categories")),
        show_abstract_preview=_safe_get(data, "show_abstract_preview", True, bool),
        version=_safe_get(data, "version", 1, int),
    )


def load_config(path: Path | None = None) -> UserConfig:
    """Load configuration from disk.

    Returns default config if file doesn't exist or is corrupted.
    Logs specific errors to help diagnose config issues.
    """
    config_path = path if path is not None else get_config_path()

    if not config_path.exists():
        return UserConfig()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        logger.warning("Config file has invalid JSON, using defaults: %s", e)
        return UserConfig()
    except OSError as e:
        logger.warning("Could not read config file, using defaults: %s", e)
        return UserConfig()

    if not isinstance(data, dict):
        logger.warning("Config file has invalid structure, using defaults")
        return UserConfig()
    return _dict_to_config(data)


def save_config(config: UserConfig, path: Path | None = None) -> bool:
    """Save configuration to disk atomically.

    Uses write-to-tempfile + os.replace() to prevent partial writes
    on crash/interrupt from corrupting the config file.

    Creates the config directory if it doesn't exist.
    Returns True on success, False on failure.
    """
    config_path = path if path is not None else get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        json_str = json.dumps(_config_to_dict(config), indent=2, ensure_ascii=False)
        fd, tmp_path = tempfile.mkstemp(dir=config_path.parent, suffix=".tmp", prefix=".config-")
        closed = False
        try:
            os.write(fd, json_str.encode("utf-8"))
            os.close(fd)
            closed = True
            os.replace(tmp_path, config_path)
        except BaseException:
            if not closed:
                os.close(fd)
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
        return True
    except OSError as e:
        logger.error("Failed to save config: %s", e)
        return False


__all__ = [
    "CONFIG_APP_NAME",
    "CONFIG_FILENAME",
    "coerce_batch_size",
    "coerce_request_timeout",
    "get_config_path",
    "load_config",
    "save_config",
]
