"""Tests for the config system (chaosmaps/config.py).

Tests configuration defaults, named configs, and registry functionality.
"""

import pytest

from chaosmaps.config import (
    LORENZ_DT,
    LORENZ_STEPS,
    MAX_DECODED_CONFIG_PARAM_LENGTH,
    MAX_JSON_NESTING_DEPTH,
    MAX_LOG_MESSAGE_LENGTH,
    MAX_WORKER_POINTS,
    get_config,
    get_default_config,
    get_preview_config,
)


def test_get_default_config():
    """Test that default config has expected structure and values."""
    cfg = get_default_config()

    # Check top-level groups
    assert hasattr(cfg, "PARSER")
    assert hasattr(cfg, "API")
    assert hasattr(cfg, "KERNELS")

    assert cfg.PARSER.MAX_DECODED_CONFIG_PARAM_LENGTH == 50 * 1024
    assert cfg.PARSER.MAX_JSON_NESTING_DEPTH == 20
    assert cfg.PARSER.MAX_LOG_MESSAGE_LENGTH == 2000

    assert cfg.API.BASE == ""
    assert cfg.API.TIMEOUT > 0

    assert cfg.KERNELS.MAX_WORKER_POINTS == 100_000
    assert cfg.KERNELS.LORENZ_STEPS == 15_000
    assert cfg.KERNELS.LORENZ_DT == pytest.approx(0.005)


def test_module_constants_match_defaults():
    cfg = get_default_config()
    assert cfg.PARSER.MAX_DECODED_CONFIG_PARAM_LENGTH == MAX_DECODED_CONFIG_PARAM_LENGTH
    assert cfg.PARSER.MAX_JSON_NESTING_DEPTH == MAX_JSON_NESTING_DEPTH
    assert cfg.PARSER.MAX_LOG_MESSAGE_LENGTH == MAX_LOG_MESSAGE_LENGTH
    assert cfg.KERNELS.MAX_WORKER_POINTS == MAX_WORKER_POINTS
    assert cfg.KERNELS.LORENZ_STEPS == LORENZ_STEPS
    assert cfg.KERNELS.LORENZ_DT == LORENZ_DT


def test_get_named_configs():
    """Test that named configurations load correctly."""
    preview = get_preview_config()
    assert preview.KERNELS.MAX_WORKER_POINTS < MAX_WORKER_POINTS
    assert preview.KERNELS.RASTER_WIDTH == 200
    assert preview.KERNELS.RASTER_HEIGHT == 150
    # Parser limits are not relaxed for previews
    assert preview.PARSER.MAX_DECODED_CONFIG_PARAM_LENGTH == MAX_DECODED_CONFIG_PARAM_LENGTH


def test_config_registry():
    """Test the config registry system."""
    assert get_config("default").KERNELS.RASTER_WIDTH == 800
    assert get_config("preview").KERNELS.RASTER_WIDTH == 200

    with pytest.raises(ValueError):
        get_config("nonexistent_config")


def test_config_modification():
    """Modifying one config must not leak into freshly created ones."""
    cfg = get_config("default")
    cfg.KERNELS.LORENZ_STEPS = 10

    assert cfg.KERNELS.LORENZ_STEPS == 10
    assert get_config("default").KERNELS.LORENZ_STEPS == LORENZ_STEPS


def test_to_dict_is_nested():
    data = get_default_config().to_dict()
    assert set(data) == {"PARSER", "API", "KERNELS"}
    assert data["KERNELS"]["LORENZ_DT"] == LORENZ_DT
