"""Offload the two heaviest kernels to a background worker.

The worker speaks a small message protocol (:func:`handle_worker_message`) so
the same pure function serves both a ``concurrent.futures`` executor and the
in-process fallback; results are identical on either path. Each request gets a
monotonically increasing id and only the response to the latest request is
accepted, which gives last-request-wins behaviour under rapid parameter
changes. Stale work is not interrupted, its result is just dropped.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import numpy as np

from .config import MAX_WORKER_POINTS
from .kernels.discrete import chaos_esthetique, standard_map
from .schema import MapType

logger = logging.getLogger(__name__)

REQUEST_KINDS: Dict[MapType, str] = {
    MapType.STANDARD: "standard",
    MapType.CHAOS_ESTHETIQUE: "chaos",
}
RESPONSE_KINDS = {"standard": "standardResult", "chaos": "chaosResult"}


def handle_worker_message(message: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """Worker entry point: compute the requested map and echo the request id.

    Empty payloads and unknown request types produce no response.
    """
    if not message:
        return None
    kind = message.get("type")
    if kind == "standard":
        points = standard_map(
            float(message["numP"]),
            float(message["numQ"]),
            float(message["iterations"]),
            float(message["k"]),
            int(message["maxPoints"]),
        )
    elif kind == "chaos":
        points = chaos_esthetique(
            float(message["a"]),
            float(message["b"]),
            float(message["x0"]),
            float(message["y0"]),
            float(message["iterations"]),
            int(message["maxPoints"]),
        )
    else:
        return None
    return {"type": RESPONSE_KINDS[kind], "id": message["id"], "points": [list(point) for point in points]}


class ComputeDelegate:
    """Per-call-site state for worker-backed kernel calls.

    Args:
        executor: Optional executor standing in for the background worker.
            Without one, or when it refuses new work, requests run in-process.
        max_points: Point budget sent with every request.
    """

    def __init__(self, executor: Optional[Executor] = None, max_points: int = MAX_WORKER_POINTS) -> None:
        self._executor = executor
        self.max_points = int(max_points)
        self._lock = threading.Lock()
        self._last_request_id = 0

    @property
    def last_request_id(self) -> int:
        return self._last_request_id

    def build_request(self, map_type: Union[str, MapType], params: Mapping[str, Any]) -> Dict[str, Any]:
        resolved = MapType(map_type)
        if resolved not in REQUEST_KINDS:
            raise ValueError(f"Map type '{resolved}' is not computed by the worker")
        with self._lock:
            self._last_request_id += 1
            request_id = self._last_request_id

        if resolved is MapType.STANDARD:
            return {
                "type": "standard",
                "id": request_id,
                "numP": params["numP"],
                "numQ": params["numQ"],
                "iterations": params["iterations"],
                "k": params["k"],
                "maxPoints": self.max_points,
            }
        return {
            "type": "chaos",
            "id": request_id,
            "a": params["a"],
            "b": params["b"],
            "x0": params["x0"],
            "y0": params["y0"],
            "iterations": params["iterations"],
            "maxPoints": self.max_points,
        }

    def submit(self, map_type: Union[str, MapType], params: Mapping[str, Any]) -> Tuple[int, Future]:
        """Send a request and return its id with a future for the raw response."""
        request = self.build_request(map_type, params)
        if self._executor is not None:
            try:
                return request["id"], self._executor.submit(handle_worker_message, request)
            except RuntimeError as exc:
                logger.warning("Worker unavailable, computing in-process: %s", exc)

        future: Future = Future()
        try:
            future.set_result(handle_worker_message(request))
        except Exception as exc:
            future.set_exception(exc)
        return request["id"], future

    def is_current(self, request_id: int) -> bool:
        return request_id == self._last_request_id

    def accept(self, response: Optional[Mapping[str, Any]]) -> Optional[np.ndarray]:
        """Return the points of ``response`` unless a newer request superseded it."""
        if response is None:
            return None
        if not self.is_current(response["id"]):
            logger.debug("Dropping stale worker response %s (latest is %s)", response["id"], self._last_request_id)
            return None
        points: List[List[float]] = response["points"]
        return np.asarray(points, dtype=np.float64).reshape(-1, 2)

    def compute(self, map_type: Union[str, MapType], params: Mapping[str, Any]) -> Optional[np.ndarray]:
        """Submit and wait; None means the result arrived after a newer request."""
        _, future = self.submit(map_type, params)
        return self.accept(future.result())
