"""
Configuration loading.
"""

from .config import (
    DEFAULT_TOLERANCE, PrimitiveConfig, config_from_dict, load_config, resolve_tolerance
)
