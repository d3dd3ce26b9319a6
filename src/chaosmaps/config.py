"""Runtime configuration for parsers, loaders and kernels.

Configs are nested ``ml_collections.ConfigDict`` objects with upper-case keys so
they read the same way at every call site (``cfg.KERNELS.LORENZ_DT``). Named
configurations are available through :func:`get_config`. The module-level
constants are the defaults kernels and parsers fall back to when called
without a config.
"""

from __future__ import annotations

from typing import Callable, Dict

import ml_collections

MAX_DECODED_CONFIG_PARAM_LENGTH = 50 * 1024
MAX_JSON_NESTING_DEPTH = 20
MAX_LOG_MESSAGE_LENGTH = 2000

API_BASE = ""
API_TIMEOUT = 10.0

MAX_WORKER_POINTS = 100_000
LORENZ_STEPS = 15_000
LORENZ_DT = 0.005
ROSSLER_STEPS = 10_000
ROSSLER_DT = 0.01
RASTER_WIDTH = 800
RASTER_HEIGHT = 600
BIFURCATION_WARMUP = 100
LYAPUNOV_SAMPLES = 400


def get_default_config() -> ml_collections.ConfigDict:
    _C = ml_collections.ConfigDict()

    _C.PARSER = ml_collections.ConfigDict()
    _C.PARSER.MAX_DECODED_CONFIG_PARAM_LENGTH = MAX_DECODED_CONFIG_PARAM_LENGTH
    _C.PARSER.MAX_JSON_NESTING_DEPTH = MAX_JSON_NESTING_DEPTH
    _C.PARSER.MAX_LOG_MESSAGE_LENGTH = MAX_LOG_MESSAGE_LENGTH

    _C.API = ml_collections.ConfigDict()
    _C.API.BASE = API_BASE  # prefix for /api/saved-config and /api/shared
    _C.API.TIMEOUT = API_TIMEOUT  # seconds

    _C.KERNELS = ml_collections.ConfigDict()
    _C.KERNELS.MAX_WORKER_POINTS = MAX_WORKER_POINTS
    _C.KERNELS.LORENZ_STEPS = LORENZ_STEPS
    _C.KERNELS.LORENZ_DT = LORENZ_DT
    _C.KERNELS.ROSSLER_STEPS = ROSSLER_STEPS
    _C.KERNELS.ROSSLER_DT = ROSSLER_DT
    _C.KERNELS.RASTER_WIDTH = RASTER_WIDTH
    _C.KERNELS.RASTER_HEIGHT = RASTER_HEIGHT
    _C.KERNELS.BIFURCATION_WARMUP = BIFURCATION_WARMUP
    _C.KERNELS.LYAPUNOV_SAMPLES = LYAPUNOV_SAMPLES

    return _C


def get_preview_config() -> ml_collections.ConfigDict:
    """Small rasters and short trajectories for quick CLI previews."""
    cfg = get_default_config()
    cfg.KERNELS.MAX_WORKER_POINTS = 10_000
    cfg.KERNELS.LORENZ_STEPS = 2_000
    cfg.KERNELS.ROSSLER_STEPS = 2_000
    cfg.KERNELS.RASTER_WIDTH = 200
    cfg.KERNELS.RASTER_HEIGHT = 150
    cfg.KERNELS.LYAPUNOV_SAMPLES = 100
    return cfg


_CONFIG_REGISTRY: Dict[str, Callable[[], ml_collections.ConfigDict]] = {
    "default": get_default_config,
    "preview": get_preview_config,
}


def get_config(name: str = "default") -> ml_collections.ConfigDict:
    """Return a fresh copy of a named configuration."""
    try:
        factory = _CONFIG_REGISTRY[name]
    except KeyError:
        raise ValueError(f"Unknown config '{name}'. Available: {sorted(_CONFIG_REGISTRY)}") from None
    return factory()
