"""
Numeric configuration for primitive construction.

Every constructor accepts an optional ``tol`` argument. When it is left
as None the package default below is used. The tolerance is the
threshold under which a norm, a chord length or a determinant is
treated as zero.

Settings can also be read from a JSON file:

    {
      "tolerance": 1e-9,
      "log_level": "DEBUG"
    }

Both keys are optional.
"""

import json
import logging
import math
from dataclasses import dataclass
from typing import Dict, Any, Optional

from ..errors import InvalidArgumentError


DEFAULT_TOLERANCE = 1e-10

_KNOWN_KEYS = {"tolerance", "log_level"}


@dataclass(frozen=True)
class PrimitiveConfig:
    """
    Settings shared by the primitive constructors.

    Attributes:
        tolerance: Zero threshold for norms, lengths and determinants
        log_level: Level for the 'nurbsmake' logger
    """
    tolerance: float = DEFAULT_TOLERANCE
    log_level: int = logging.WARNING

    def __post_init__(self):
        resolve_tolerance(self.tolerance)


def resolve_tolerance(tol: Optional[float] = None) -> float:
    """
    Return the tolerance to use for a computation.

    Parameters:
        tol: Explicit tolerance, or None for DEFAULT_TOLERANCE

    Returns:
        A finite, non-negative float
    """
    if tol is None:
        return DEFAULT_TOLERANCE
    tol = float(tol)
    if not math.isfinite(tol) or tol < 0.0:
        raise InvalidArgumentError(f"Tolerance must be finite and non-negative, got {tol}")
    return tol


def _parse_log_level(value: Any) -> int:
    if isinstance(value, int):
        return value
    level = getattr(logging, str(value).upper(), None)
    if not isinstance(level, int):
        raise InvalidArgumentError(f"Unknown log level: {value}")
    return level


def config_from_dict(data: Dict[str, Any]) -> PrimitiveConfig:
    """
    Build a PrimitiveConfig from a plain dictionary.

    Parameters:
        data: Mapping with optional 'tolerance' and 'log_level' keys

    Returns:
        PrimitiveConfig
    """
    unknown = set(data) - _KNOWN_KEYS
    if unknown:
        raise InvalidArgumentError(f"Unknown configuration keys: {sorted(unknown)}")

    kwargs = {}
    if "tolerance" in data:
        kwargs["tolerance"] = resolve_tolerance(data["tolerance"])
    if "log_level" in data:
        kwargs["log_level"] = _parse_log_level(data["log_level"])
    return PrimitiveConfig(**kwargs)


def load_config(filename: str) -> PrimitiveConfig:
    """
    Load primitive settings from a JSON file.

    Parameters:
        filename: Path to the JSON file

    Returns:
        PrimitiveConfig
    """
    with open(filename, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise InvalidArgumentError("Configuration file must contain a JSON object")

    return config_from_dict(data)
