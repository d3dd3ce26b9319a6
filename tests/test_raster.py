import numpy as np
import pytest

from chaosmaps.kernels.raster import (
    ROOT_COLORS,
    SENTINEL_COLOR,
    calculate_bifurcation_henon,
    calculate_bifurcation_logistic,
    calculate_newton,
)

NEWTON = {"xMin": -2, "xMax": 2, "yMin": -2, "yMax": 2, "maxIterations": 50}


def test_newton_writes_every_pixel():
    image = calculate_newton(NEWTON, width=40, height=30)
    assert image.shape == (30, 40, 4)
    assert image.dtype == np.uint8
    assert np.all(image[..., 3] == 255)


def test_newton_degenerate_origin_gets_sentinel():
    # 5x5 over [-2, 2]^2 puts z = 0 at the centre pixel
    image = calculate_newton(NEWTON, width=5, height=5)
    np.testing.assert_array_equal(image[2, 2], SENTINEL_COLOR)


def test_newton_root_pixel_has_full_brightness():
    image = calculate_newton(NEWTON, width=5, height=5)
    # row 2, column 3 is z = 1 + 0j, already a root
    np.testing.assert_array_equal(image[2, 3, :3], ROOT_COLORS[0].astype(np.uint8))


def test_newton_real_axis_converges_to_real_root():
    # 1x1 viewports pin z to a single point on the positive real axis
    params = dict(NEWTON, xMin=2, xMax=2, yMin=0, yMax=0)
    pixel = calculate_newton(params, width=1, height=1)[0, 0]
    assert pixel[3] == 255
    assert pixel[0] == 0
    assert pixel[1] > 0 and pixel[2] > 0
    # brightness fades with iteration count
    assert pixel[2] < 255


def test_newton_single_iteration_leaves_far_pixels_black():
    image = calculate_newton(dict(NEWTON, maxIterations=1), width=20, height=20)
    assert np.all(image[..., 3] == 255)
    # the corner is far from every root after one step
    np.testing.assert_array_equal(image[0, 0], SENTINEL_COLOR)


def test_newton_rejects_empty_raster():
    with pytest.raises(ValueError):
        calculate_newton(NEWTON, width=0, height=10)


def test_bifurcation_logistic_shape_and_range():
    params = {"rMin": 2.5, "rMax": 4.0, "maxIterations": 200}
    image = calculate_bifurcation_logistic(params, width=50, height=40)
    assert image.shape == (40, 50)
    assert image.dtype == np.float32
    assert np.all((image >= 0.0) & (image <= 1.0))


def test_bifurcation_logistic_fixed_point_column():
    params = {"rMin": 2.5, "rMax": 4.0, "maxIterations": 200}
    image = calculate_bifurcation_logistic(params, width=50, height=40)
    # r = 2.5 settles on x = 0.6, a single row
    assert np.count_nonzero(image[:, 0]) == 1
    assert int(np.argmax(image[:, 0])) == round((1.0 - 0.6) * 39)
    # column 46 is r ~ 3.908, chaotic and spread over many rows
    assert np.count_nonzero(image[:, 46]) > 10


def test_bifurcation_henon_shape_and_range():
    params = {"aMin": 0.8, "aMax": 1.4, "b": 0.3, "maxIterations": 300}
    image = calculate_bifurcation_henon(params, width=30, height=20)
    assert image.shape == (20, 30)
    assert np.all((image >= 0.0) & (image <= 1.0))
    assert np.count_nonzero(image) > 0


def test_bifurcation_henon_divergent_columns_are_empty():
    params = {"aMin": 5.0, "aMax": 6.0, "b": 0.3, "maxIterations": 100}
    image = calculate_bifurcation_henon(params, width=10, height=10)
    assert np.count_nonzero(image) == 0


def test_bifurcation_fractional_iterations_round_up():
    whole = calculate_bifurcation_logistic({"rMin": 2.5, "rMax": 2.5, "maxIterations": 3}, width=1, height=10, warmup=0)
    fractional = calculate_bifurcation_logistic(
        {"rMin": 2.5, "rMax": 2.5, "maxIterations": 2.5}, width=1, height=10, warmup=0
    )
    np.testing.assert_array_equal(fractional, whole)
