"""Structural validation and stability checks for chaos map parameters.

Both entry points are pure functions of their input and report problems as
data: :func:`validate_parameters` returns a :class:`ValidationResult` listing
every structural error, and :func:`check_parameter_stability` returns advisory
warnings for values outside the empirical stable ranges.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Dict, List, Mapping, Optional, Union

from .schema import LEGACY_KEY_ALIASES, STABLE_RANGES, MapType, to_map_type

TYPE_KEY = "type"


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    parameters: Optional[Dict[str, Any]] = None


@dataclass
class StabilityResult:
    is_stable: bool
    warnings: List[str] = field(default_factory=list)


def runtime_type_name(value: Any) -> str:
    """Name a value's type the way a JSON payload would describe it."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, Real):
        return "number"
    if isinstance(value, str):
        return "string"
    if value is None or isinstance(value, (list, tuple, dict)):
        return "object"
    return type(value).__name__


def is_finite_number(value: Any) -> bool:
    # bool is an int subclass but never a valid parameter value
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints beyond the float range would be Infinity once read as a double
        return False


def format_number(value: float) -> str:
    """Render numbers without a trailing ``.0`` for integral floats."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_legacy_keys(map_type: MapType, candidate: Mapping[str, Any]) -> Dict[str, Any]:
    """Rewrite deprecated key spellings to their canonical names.

    An existing canonical key always wins over its alias, and the alias is
    dropped from the output either way.
    """
    normalized = dict(candidate)
    for alias, canonical in LEGACY_KEY_ALIASES.get(map_type, {}).items():
        if alias not in normalized:
            continue
        legacy_value = normalized.pop(alias)
        normalized.setdefault(canonical, legacy_value)
    return normalized


def validate_parameters(map_type: Union[str, MapType], candidate: Any) -> ValidationResult:
    """Check ``candidate`` against the key set and value types of ``map_type``.

    All errors are accumulated so callers can show the complete list. On
    success ``parameters`` holds the alias-normalized mapping.
    """
    if not isinstance(candidate, Mapping):
        return ValidationResult(is_valid=False, errors=["Parameters must be an object"])

    resolved = to_map_type(map_type)
    if resolved is None:
        return ValidationResult(is_valid=False, errors=[f"Unknown map type: {map_type}"])

    errors: List[str] = []
    normalized = normalize_legacy_keys(resolved, candidate)
    expected_keys = list(STABLE_RANGES[resolved])
    allowed_extras = {TYPE_KEY, *LEGACY_KEY_ALIASES.get(resolved, {})}

    missing_keys = [key for key in expected_keys if key not in normalized]
    if missing_keys:
        errors.append(f"Missing required parameters: {', '.join(missing_keys)}")

    extra_keys = [key for key in candidate if key not in expected_keys and key not in allowed_extras]
    if extra_keys:
        errors.append(f"Unexpected parameters: {', '.join(str(key) for key in extra_keys)}")

    for key, value in normalized.items():
        if key == TYPE_KEY:
            continue
        if not is_finite_number(value):
            errors.append(f"Parameter '{key}' must be a valid number, got: {runtime_type_name(value)}")

    if errors:
        return ValidationResult(is_valid=False, errors=errors)
    return ValidationResult(is_valid=True, errors=[], parameters=normalized)


def _relationship_warnings(map_type: MapType, params: Mapping[str, float]) -> List[str]:
    warnings: List[str] = []
    if map_type is MapType.NEWTON:
        if params["xMin"] >= params["xMax"]:
            warnings.append("xMin must be less than xMax")
        if params["yMin"] >= params["yMax"]:
            warnings.append("yMin must be less than yMax")
    elif map_type in (MapType.BIFURCATION_LOGISTIC, MapType.LYAPUNOV):
        if params["rMin"] >= params["rMax"]:
            warnings.append("rMin must be less than rMax")
        if map_type is MapType.LYAPUNOV and params["transientIterations"] > params["iterations"]:
            warnings.append("transientIterations must be <= iterations")
    elif map_type is MapType.BIFURCATION_HENON:
        if params["aMin"] >= params["aMax"]:
            warnings.append("aMin must be less than aMax")
    return warnings


def check_parameter_stability(map_type: Union[str, MapType], params: Any) -> StabilityResult:
    """Flag parameters outside their stable range or inconsistent with each other.

    Structural errors from :func:`validate_parameters` are surfaced as
    warnings too. Range bounds are inclusive.

    Example::

        >>> check_parameter_stability("lorenz", {"sigma": 100, "rho": 28, "beta": 2.667}).warnings
        ['sigma (100) is outside stable range [0, 50]']
    """
    validation = validate_parameters(map_type, params)
    if not validation.is_valid or validation.parameters is None:
        return StabilityResult(is_stable=False, warnings=list(validation.errors))

    resolved = MapType(map_type)
    ranges = STABLE_RANGES[resolved]
    normalized = validation.parameters
    warnings: List[str] = []

    for key, value in normalized.items():
        bounds = ranges.get(key)
        if bounds is None:
            continue
        if not bounds.contains(value):
            warnings.append(
                f"{key} ({format_number(value)}) is outside stable range "
                f"[{format_number(bounds.min)}, {format_number(bounds.max)}]"
            )

    warnings.extend(_relationship_warnings(resolved, normalized))
    return StabilityResult(is_stable=not warnings, warnings=warnings)
