from typing import Any, Callable, Dict, Mapping, Union

from ..schema import MapType
from .continuous import calculate_lorenz, calculate_rossler, euler_step, rk4_step
from .discrete import (
    calculate_chaos_esthetique,
    calculate_henon,
    calculate_logistic,
    calculate_lozi,
    calculate_standard,
    chaos_esthetique,
    normalize_angle,
    standard_map,
)
from .lyapunov import calculate_lyapunov, lyapunov_exponent
from .raster import calculate_bifurcation_henon, calculate_bifurcation_logistic, calculate_newton

KERNEL_REGISTRY: Dict[MapType, Callable[..., Any]] = {
    MapType.LORENZ: calculate_lorenz,
    MapType.ROSSLER: calculate_rossler,
    MapType.HENON: calculate_henon,
    MapType.LOZI: calculate_lozi,
    MapType.LOGISTIC: calculate_logistic,
    MapType.NEWTON: calculate_newton,
    MapType.STANDARD: calculate_standard,
    MapType.BIFURCATION_LOGISTIC: calculate_bifurcation_logistic,
    MapType.BIFURCATION_HENON: calculate_bifurcation_henon,
    MapType.CHAOS_ESTHETIQUE: calculate_chaos_esthetique,
    MapType.LYAPUNOV: calculate_lyapunov,
}


def run_kernel(map_type: Union[str, MapType], params: Mapping[str, Any], **options: Any) -> Any:
    """Dispatch ``params`` to the kernel registered for ``map_type``.

    ``options`` are forwarded as keyword arguments (raster size, point caps).
    """
    try:
        kernel = KERNEL_REGISTRY[MapType(map_type)]
    except ValueError:
        raise KeyError(f"No kernel registered for map type '{map_type}'") from None
    return kernel(params, **options)


__all__ = [
    "KERNEL_REGISTRY",
    "run_kernel",
    "rk4_step",
    "euler_step",
    "calculate_lorenz",
    "calculate_rossler",
    "calculate_henon",
    "calculate_lozi",
    "calculate_logistic",
    "calculate_newton",
    "calculate_standard",
    "standard_map",
    "normalize_angle",
    "calculate_bifurcation_logistic",
    "calculate_bifurcation_henon",
    "calculate_chaos_esthetique",
    "chaos_esthetique",
    "calculate_lyapunov",
    "lyapunov_exponent",
]
