"""Parameter schema for every supported chaos map.

The stable range table is the single source of truth for both the required key
set of each map type and the numeric interval each parameter is expected to
stay inside. Ranges are empirical: values outside them are allowed but flagged
by the stability checker.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Literal, Mapping, Optional, TypedDict, Union


class MapType(str, Enum):
    """Discriminant for the eleven supported chaos maps."""

    LORENZ = "lorenz"
    ROSSLER = "rossler"
    HENON = "henon"
    LOZI = "lozi"
    LOGISTIC = "logistic"
    NEWTON = "newton"
    STANDARD = "standard"
    BIFURCATION_LOGISTIC = "bifurcation-logistic"
    BIFURCATION_HENON = "bifurcation-henon"
    CHAOS_ESTHETIQUE = "chaos-esthetique"
    LYAPUNOV = "lyapunov"

    def __str__(self) -> str:
        return self.value


# ---------------------------------------------------------------------------
# Parameter set variants
# ---------------------------------------------------------------------------


class LorenzParameters(TypedDict):
    type: Literal["lorenz"]
    sigma: float
    rho: float
    beta: float


class RosslerParameters(TypedDict):
    type: Literal["rossler"]
    a: float
    b: float
    c: float


class HenonParameters(TypedDict):
    type: Literal["henon"]
    a: float
    b: float
    iterations: float


class LoziParameters(TypedDict):
    type: Literal["lozi"]
    a: float
    b: float
    x0: float
    y0: float
    iterations: float


class LogisticParameters(TypedDict):
    type: Literal["logistic"]
    r: float
    x0: float
    iterations: float


class NewtonParameters(TypedDict):
    type: Literal["newton"]
    xMin: float
    xMax: float
    yMin: float
    yMax: float
    maxIterations: float


class StandardParameters(TypedDict):
    type: Literal["standard"]
    k: float
    numP: float
    numQ: float
    iterations: float


class BifurcationLogisticParameters(TypedDict):
    type: Literal["bifurcation-logistic"]
    rMin: float
    rMax: float
    maxIterations: float


class BifurcationHenonParameters(TypedDict):
    type: Literal["bifurcation-henon"]
    aMin: float
    aMax: float
    b: float
    maxIterations: float


class ChaosEsthetiqueParameters(TypedDict):
    type: Literal["chaos-esthetique"]
    a: float
    b: float
    x0: float
    y0: float
    iterations: float


class LyapunovParameters(TypedDict):
    type: Literal["lyapunov"]
    rMin: float
    rMax: float
    iterations: float
    transientIterations: float


ChaosMapParameters = Union[
    LorenzParameters,
    RosslerParameters,
    HenonParameters,
    LoziParameters,
    LogisticParameters,
    NewtonParameters,
    StandardParameters,
    BifurcationLogisticParameters,
    BifurcationHenonParameters,
    ChaosEsthetiqueParameters,
    LyapunovParameters,
]


# ---------------------------------------------------------------------------
# Stable range table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParameterRange:
    """Closed interval ``[min, max]``; both bounds count as stable."""

    min: float
    max: float

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


STABLE_RANGES: Dict[MapType, Dict[str, ParameterRange]] = {
    MapType.LORENZ: {
        "sigma": ParameterRange(0, 50),
        "rho": ParameterRange(0, 100),
        "beta": ParameterRange(0, 10),
    },
    MapType.ROSSLER: {
        "a": ParameterRange(0.126, 0.43295),
        "b": ParameterRange(0.01, 2),
        "c": ParameterRange(1, 30),
    },
    MapType.HENON: {
        "a": ParameterRange(0, 2),
        "b": ParameterRange(-1, 1),
        "iterations": ParameterRange(1, 50000),
    },
    MapType.LOZI: {
        "a": ParameterRange(0, 2),
        "b": ParameterRange(0, 1),
        "x0": ParameterRange(-2, 2),
        "y0": ParameterRange(-2, 2),
        "iterations": ParameterRange(1, 50000),
    },
    MapType.LOGISTIC: {
        "r": ParameterRange(0, 4),
        "x0": ParameterRange(0, 1),
        "iterations": ParameterRange(1, 1000),
    },
    MapType.NEWTON: {
        "xMin": ParameterRange(-10, 10),
        "xMax": ParameterRange(-10, 10),
        "yMin": ParameterRange(-10, 10),
        "yMax": ParameterRange(-10, 10),
        "maxIterations": ParameterRange(1, 200),
    },
    MapType.STANDARD: {
        "k": ParameterRange(0, 10),
        "numP": ParameterRange(1, 100),
        "numQ": ParameterRange(1, 100),
        "iterations": ParameterRange(1, 100000),
    },
    MapType.BIFURCATION_LOGISTIC: {
        "rMin": ParameterRange(0, 4),
        "rMax": ParameterRange(0, 4),
        "maxIterations": ParameterRange(1, 5000),
    },
    MapType.BIFURCATION_HENON: {
        "aMin": ParameterRange(0, 2),
        "aMax": ParameterRange(0, 2),
        "b": ParameterRange(-1, 1),
        "maxIterations": ParameterRange(1, 5000),
    },
    MapType.CHAOS_ESTHETIQUE: {
        "a": ParameterRange(0, 2),
        "b": ParameterRange(0, 2),
        "x0": ParameterRange(-50, 50),
        "y0": ParameterRange(-50, 50),
        "iterations": ParameterRange(1, 100000),
    },
    MapType.LYAPUNOV: {
        "rMin": ParameterRange(0, 4),
        "rMax": ParameterRange(0, 4),
        "iterations": ParameterRange(100, 10000),
        "transientIterations": ParameterRange(50, 5000),
    },
}

_MAP_TYPE_VALUES = frozenset(str(map_type) for map_type in STABLE_RANGES)

# Deprecated spellings accepted on read and rewritten to the canonical key.
# Only ``standard.K`` exists; it predates the lowercase ``k`` parameter.
LEGACY_KEY_ALIASES: Dict[MapType, Dict[str, str]] = {
    MapType.STANDARD: {"K": "k"},
}

DISPLAY_NAMES: Dict[MapType, str] = {
    MapType.LORENZ: "LORENZ_ATTRACTOR",
    MapType.ROSSLER: "RÖSSLER_ATTRACTOR",
    MapType.HENON: "HÉNON_MAP",
    MapType.LOZI: "LOZI_MAP",
    MapType.LOGISTIC: "LOGISTIC_MAP",
    MapType.NEWTON: "NEWTON_FRACTAL",
    MapType.STANDARD: "STANDARD_MAP",
    MapType.BIFURCATION_LOGISTIC: "BIFURCATION_LOGISTIC",
    MapType.BIFURCATION_HENON: "BIFURCATION_HÉNON",
    MapType.CHAOS_ESTHETIQUE: "CHAOS_ESTHÉTIQUE",
    MapType.LYAPUNOV: "LYAPUNOV_EXPONENT",
}


def is_valid_map_type(candidate: object) -> bool:
    """Return True iff ``candidate`` names a map type in the range table."""
    if not isinstance(candidate, str):
        return False
    return candidate in _MAP_TYPE_VALUES


def to_map_type(candidate: Union[str, MapType]) -> Optional[MapType]:
    """Coerce a string tag to :class:`MapType`, or None when unknown."""
    if not is_valid_map_type(candidate):
        return None
    return MapType(candidate)


def get_stable_ranges(map_type: Union[str, MapType]) -> Optional[Dict[str, ParameterRange]]:
    """Return a copy of the stable ranges for ``map_type``.

    Returns None only for an unrecognized map type.
    """
    resolved = to_map_type(map_type)
    if resolved is None:
        return None
    return dict(STABLE_RANGES[resolved])


def get_required_keys(map_type: Union[str, MapType]) -> Optional[tuple[str, ...]]:
    ranges = get_stable_ranges(map_type)
    return tuple(ranges) if ranges is not None else None


def get_default_parameters(map_type: Union[str, MapType]) -> ChaosMapParameters:
    """Built-in defaults used for fresh pages and failed URL decodes."""
    resolved = MapType(map_type)
    defaults: Dict[MapType, Mapping[str, float]] = {
        MapType.LORENZ: {"sigma": 10, "rho": 28, "beta": 8 / 3},
        MapType.ROSSLER: {"a": 0.2, "b": 0.2, "c": 5.7},
        MapType.HENON: {"a": 1.4, "b": 0.3, "iterations": 2000},
        MapType.LOZI: {"a": 1.7, "b": 0.5, "x0": 0, "y0": 0, "iterations": 5000},
        MapType.LOGISTIC: {"r": 3.9, "x0": 0.1, "iterations": 100},
        MapType.NEWTON: {"xMin": -2, "xMax": 2, "yMin": -2, "yMax": 2, "maxIterations": 50},
        MapType.STANDARD: {"k": 0.97, "numP": 20, "numQ": 20, "iterations": 20000},
        MapType.BIFURCATION_LOGISTIC: {"rMin": 2.5, "rMax": 4.0, "maxIterations": 1000},
        MapType.BIFURCATION_HENON: {"aMin": 0.8, "aMax": 1.4, "b": 0.3, "maxIterations": 500},
        MapType.CHAOS_ESTHETIQUE: {"a": 1.4, "b": 0.3, "x0": 0, "y0": 0, "iterations": 10000},
        MapType.LYAPUNOV: {"rMin": 2.5, "rMax": 4.0, "iterations": 100, "transientIterations": 100},
    }
    params = {"type": resolved.value}
    params.update(defaults[resolved])
    return params  # type: ignore[return-value]


def is_parameters_of_type(params: Optional[Mapping[str, object]], map_type: Union[str, MapType]) -> bool:
    """Narrow a parameter set by its ``type`` tag."""
    if params is None:
        return False
    return params.get("type") == str(map_type)
