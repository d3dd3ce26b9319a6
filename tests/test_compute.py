from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from chaosmaps.compute import ComputeDelegate, handle_worker_message
from chaosmaps.kernels import calculate_chaos_esthetique, calculate_standard

STANDARD = {"type": "standard", "k": 0.97, "numP": 3, "numQ": 3, "iterations": 50}
CHAOS = {"type": "chaos-esthetique", "a": 1.5, "b": 0.5, "x0": 0.1, "y0": 0.0, "iterations": 200}


def test_handles_standard_map_messages():
    response = handle_worker_message(
        {"type": "standard", "id": 1, "numP": 1, "numQ": 1, "iterations": 2, "k": 1, "maxPoints": 10}
    )
    assert response["type"] == "standardResult"
    assert response["id"] == 1
    assert len(response["points"]) == 2


def test_handles_chaos_map_messages():
    response = handle_worker_message(
        {"type": "chaos", "id": 2, "a": 1.5, "b": 0.5, "x0": 0, "y0": 0, "iterations": 3, "maxPoints": 10}
    )
    assert response["type"] == "chaosResult"
    assert response["id"] == 2
    assert len(response["points"]) == 3


@pytest.mark.parametrize("message", [None, {}, {"type": "mandelbrot", "id": 3}])
def test_ignores_empty_and_unknown_payloads(message):
    assert handle_worker_message(message) is None


def test_worker_points_respect_max_points():
    response = handle_worker_message(
        {"type": "standard", "id": 4, "numP": 10, "numQ": 10, "iterations": 100, "k": 1, "maxPoints": 25}
    )
    assert len(response["points"]) == 25


def test_request_ids_increase():
    delegate = ComputeDelegate()
    first = delegate.build_request("standard", STANDARD)
    second = delegate.build_request("chaos-esthetique", CHAOS)
    assert (first["id"], second["id"]) == (1, 2)
    assert delegate.last_request_id == 2
    assert first["maxPoints"] == delegate.max_points
    assert second["type"] == "chaos"


def test_unsupported_map_type_is_rejected():
    with pytest.raises(ValueError):
        ComputeDelegate().build_request("lorenz", {"sigma": 10, "rho": 28, "beta": 2.667})


def test_in_process_matches_direct_kernels():
    delegate = ComputeDelegate(max_points=1000)
    np.testing.assert_array_equal(delegate.compute("standard", STANDARD), calculate_standard(STANDARD, max_points=1000))
    np.testing.assert_array_equal(
        delegate.compute("chaos-esthetique", CHAOS), calculate_chaos_esthetique(CHAOS, max_points=1000)
    )


def test_executor_matches_in_process():
    in_process = ComputeDelegate().compute("standard", STANDARD)
    with ThreadPoolExecutor(max_workers=2) as executor:
        via_worker = ComputeDelegate(executor).compute("standard", STANDARD)
    np.testing.assert_array_equal(via_worker, in_process)


def test_stale_response_is_dropped():
    delegate = ComputeDelegate()
    first_id, first = delegate.submit("standard", STANDARD)
    second_id, second = delegate.submit("standard", dict(STANDARD, k=2.0))
    assert second_id == first_id + 1
    assert not delegate.is_current(first_id)

    assert delegate.accept(first.result()) is None
    points = delegate.accept(second.result())
    assert points.shape == (3 * 3 * 50, 2)


def test_shut_down_executor_falls_back_to_in_process():
    executor = ThreadPoolExecutor(max_workers=1)
    executor.shutdown()
    delegate = ComputeDelegate(executor)
    points = delegate.compute("chaos-esthetique", CHAOS)
    assert points.shape == (200, 2)


def test_accept_none_response():
    assert ComputeDelegate().accept(None) is None


def test_worker_rounds_fractional_iterations_up():
    response = handle_worker_message(
        {"type": "chaos", "id": 5, "a": 1.5, "b": 0.5, "x0": 0, "y0": 0, "iterations": 2.5, "maxPoints": 10}
    )
    assert len(response["points"]) == 3
