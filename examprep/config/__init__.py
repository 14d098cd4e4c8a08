from .config import (
    load_config,
    validate_config,
    build_marking_scheme,
    build_analytics_config,
)

__all__ = ["load_config", "validate_config", "build_marking_scheme", "build_analytics_config"]
