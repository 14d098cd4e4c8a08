from __future__ import annotations

"""Configuration loading and validation for examprep.

This module loads YAML configuration, applies defaults, and validates that
enumerations and numeric ranges are sane before the sections are turned into
the scoring and analytics models.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from analytics.config import AnalyticsConfig

from ..scoring.scheme import MarkingScheme

logger = logging.getLogger(__name__)

ALLOWED_ATTEMPT_POLICIES = {"all", "first", "latest"}
ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
DATA_DIR_ENV = "EXAMPREP_DATA_DIR"


def _load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping at top level")
    return data


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML or defaults.

    Args:
        path: Optional path to a YAML config. If None, use package defaults.

    Returns:
        A dictionary with configuration values.

    Raises:
        FileNotFoundError: when ``path`` does not exist.
    """
    if path:
        cfg = _load_yaml(Path(path))
    else:
        default_path = Path(__file__).with_name("defaults.yml")
        cfg = _load_yaml(default_path)
    return cfg


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply defaults and validate configuration values.

    Unknown enum values fall back to their default with a warning; the
    ``EXAMPREP_DATA_DIR`` environment variable overrides ``storage.data_dir``.

    Args:
        cfg: The raw configuration dictionary.

    Returns:
        The validated and merged configuration dictionary.
    """
    # Shallow defaults for missing sections
    for section in ("scoring", "analytics", "storage", "logging"):
        if not isinstance(cfg.get(section), dict):
            cfg[section] = {}

    scoring = cfg["scoring"]
    analytics = cfg["analytics"]
    storage = cfg["storage"]
    log_cfg = cfg["logging"]

    # Apply section defaults
    for name, field in MarkingScheme.model_fields.items():
        scoring.setdefault(name, field.default)

    analytics.setdefault("attempt_policy", "all")
    analytics.setdefault("timezone", "UTC")
    analytics.setdefault("session_break_minutes", 30)
    analytics.setdefault("consistency_threshold_days", 3)

    storage.setdefault("data_dir", "./storage/data")
    storage.setdefault("cache_ttl_seconds", 300)

    log_cfg.setdefault("level", "INFO")

    # Enum validations
    policy = str(analytics.get("attempt_policy")).lower()
    if policy not in ALLOWED_ATTEMPT_POLICIES:
        logger.warning("Unsupported attempt_policy '%s', using 'all'.", analytics.get("attempt_policy"))
        policy = "all"
    analytics["attempt_policy"] = policy

    tz = str(analytics.get("timezone"))
    try:
        ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone '%s', using 'UTC'.", tz)
        tz = "UTC"
    analytics["timezone"] = tz

    if int(analytics.get("session_break_minutes", 0)) <= 0:
        logger.warning("session_break_minutes must be > 0, using 30.")
        analytics["session_break_minutes"] = 30

    level = str(log_cfg.get("level")).upper()
    if level not in ALLOWED_LOG_LEVELS:
        logger.warning("Unsupported log level '%s', using 'INFO'.", log_cfg.get("level"))
        level = "INFO"
    log_cfg["level"] = level

    if float(storage.get("cache_ttl_seconds", 0)) <= 0:
        logger.warning("cache_ttl_seconds must be > 0, using 300.")
        storage["cache_ttl_seconds"] = 300

    env_dir = os.environ.get(DATA_DIR_ENV)
    if env_dir:
        storage["data_dir"] = env_dir

    return cfg


def build_marking_scheme(cfg: Dict[str, Any]) -> MarkingScheme:
    return MarkingScheme.model_validate(cfg.get("scoring", {}))


def build_analytics_config(cfg: Dict[str, Any]) -> AnalyticsConfig:
    return AnalyticsConfig.model_validate(cfg.get("analytics", {}))
