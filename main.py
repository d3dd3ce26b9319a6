"""Command-line interface for validating parameters and running chaos map kernels."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from concurrent.futures import ProcessPoolExecutor
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Optional

import ml_collections
import numpy as np

from chaosmaps.comparison import ComparisonState, build_comparison_url
from chaosmaps.compute import REQUEST_KINDS, ComputeDelegate
from chaosmaps.config import get_config
from chaosmaps.config_loader import ConfigLoader
from chaosmaps.kernels import run_kernel
from chaosmaps.loaders import parse_config_param
from chaosmaps.schema import MapType, get_default_parameters, get_stable_ranges
from chaosmaps.utils import configure_logging, load_json, save_json
from chaosmaps.validation import check_parameter_stability, validate_parameters
from plotting import save_kernel_output

logger = logging.getLogger(__name__)

MAP_TYPE_CHOICES = [map_type.value for map_type in MapType]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Chaos map parameter tools")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    # ------------------------------------------------------------------
    # Schema inspection
    # ------------------------------------------------------------------
    ranges_parser = subparsers.add_parser("ranges", help="Print stable parameter ranges")
    ranges_parser.add_argument("map_type", nargs="?", choices=MAP_TYPE_CHOICES)
    ranges_parser.set_defaults(func=run_ranges)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    validate_parser = subparsers.add_parser("validate", help="Validate a parameter set")
    _add_params_arguments(validate_parser)
    validate_parser.set_defaults(func=run_validate)

    stability_parser = subparsers.add_parser("stability", help="Check a parameter set against stable ranges")
    _add_params_arguments(stability_parser)
    stability_parser.set_defaults(func=run_stability)

    parse_parser = subparsers.add_parser("parse-config", help="Parse a percent-encoded config query value")
    parse_parser.add_argument("map_type", choices=MAP_TYPE_CHOICES)
    parse_parser.add_argument("config_param", type=str)
    parse_parser.add_argument("--config", type=str, default="default", help="Named runtime config")
    parse_parser.set_defaults(func=run_parse_config)

    load_parser = subparsers.add_parser("load", help="Load parameters from a share code, saved id or inline config")
    load_parser.add_argument("map_type", choices=MAP_TYPE_CHOICES)
    load_parser.add_argument("--share", type=str, default=None, help="Short share code")
    load_parser.add_argument("--config-id", type=str, default=None, help="Saved configuration id")
    load_parser.add_argument("--config-param", type=str, default=None, help="Percent-encoded inline config")
    load_parser.add_argument("--base", type=str, default=None, help="Defaults to the configured API base")
    load_parser.set_defaults(func=run_load)

    # ------------------------------------------------------------------
    # Kernels
    # ------------------------------------------------------------------
    compute_parser = subparsers.add_parser("compute", help="Run a map kernel")
    _add_params_arguments(compute_parser)
    compute_parser.add_argument("--config", type=str, default="default", help="Named runtime config")
    compute_parser.add_argument("--workers", type=int, default=0, help="Worker processes for standard/chaos maps")
    compute_parser.add_argument("--output", type=str, default=None, help="Write the raw output as JSON")
    compute_parser.add_argument("--plot-dir", type=str, default=None, help="Export a PNG figure here")
    compute_parser.set_defaults(func=run_compute)

    compare_parser = subparsers.add_parser("compare-url", help="Build a comparison-mode URL")
    compare_parser.add_argument("map_type", choices=MAP_TYPE_CHOICES)
    compare_parser.add_argument("--base", type=str, default=None, help="Defaults to the configured API base")
    compare_parser.add_argument("--left", type=str, default=None, help="Left parameters as JSON")
    compare_parser.add_argument("--right", type=str, default=None, help="Right parameters as JSON")
    compare_parser.set_defaults(func=run_compare_url)

    return parser


def _add_params_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("map_type", choices=MAP_TYPE_CHOICES)
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--params", type=str, default=None, help="Parameters as a JSON object")
    group.add_argument("--file", type=str, default=None, help="Read parameters from a JSON file")


def _load_params(args: argparse.Namespace) -> Any:
    if args.params is not None:
        return json.loads(args.params)
    if args.file is not None:
        return load_json(args.file)
    return get_default_parameters(args.map_type)


def _print(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def run_ranges(args: argparse.Namespace) -> int:
    map_types = [args.map_type] if args.map_type else MAP_TYPE_CHOICES
    payload = {
        map_type: {key: asdict(bounds) for key, bounds in get_stable_ranges(map_type).items()}
        for map_type in map_types
    }
    _print(payload)
    return 0


def run_validate(args: argparse.Namespace) -> int:
    result = validate_parameters(args.map_type, _load_params(args))
    _print(asdict(result))
    return 0 if result.is_valid else 1


def run_stability(args: argparse.Namespace) -> int:
    result = check_parameter_stability(args.map_type, _load_params(args))
    _print(asdict(result))
    return 0 if result.is_stable else 1


def run_parse_config(args: argparse.Namespace) -> int:
    limits = get_config(args.config).PARSER
    result = parse_config_param(
        args.map_type,
        args.config_param,
        max_length=limits.MAX_DECODED_CONFIG_PARAM_LENGTH,
        max_depth=limits.MAX_JSON_NESTING_DEPTH,
    )
    _print(asdict(result))
    return 0 if result.ok else 1


def run_load(args: argparse.Namespace) -> int:
    query = {
        key: value
        for key, value in (("share", args.share), ("configId", args.config_id), ("config", args.config_param))
        if value
    }
    loaded: list = []
    base = args.base if args.base is not None else get_config().API.BASE
    loader = ConfigLoader(args.map_type, loaded.append, base=base)
    state = loader.load(query)
    _print(
        {
            "parameters": loaded[0] if loaded else None,
            "errors": state.errors,
            "warnings": state.warnings,
        }
    )
    return 1 if state.show_error or not loaded else 0


def kernel_options(map_type: MapType, cfg: ml_collections.ConfigDict) -> Dict[str, Any]:
    """Keyword arguments each kernel takes from the runtime config."""
    kernels = cfg.KERNELS
    if map_type is MapType.LORENZ:
        return {"steps": kernels.LORENZ_STEPS, "dt": kernels.LORENZ_DT}
    if map_type is MapType.ROSSLER:
        return {"steps": kernels.ROSSLER_STEPS, "dt": kernels.ROSSLER_DT}
    if map_type is MapType.NEWTON:
        return {"width": kernels.RASTER_WIDTH, "height": kernels.RASTER_HEIGHT}
    if map_type in (MapType.BIFURCATION_LOGISTIC, MapType.BIFURCATION_HENON):
        return {
            "width": kernels.RASTER_WIDTH,
            "height": kernels.RASTER_HEIGHT,
            "warmup": kernels.BIFURCATION_WARMUP,
        }
    if map_type in (MapType.STANDARD, MapType.CHAOS_ESTHETIQUE):
        return {"max_points": kernels.MAX_WORKER_POINTS}
    if map_type is MapType.LYAPUNOV:
        return {"samples": kernels.LYAPUNOV_SAMPLES}
    return {}


def compute(map_type: MapType, params: Dict[str, Any], cfg: ml_collections.ConfigDict, workers: int = 0) -> Any:
    if map_type in REQUEST_KINDS and workers > 0:
        with ProcessPoolExecutor(max_workers=workers) as executor:
            delegate = ComputeDelegate(executor, max_points=cfg.KERNELS.MAX_WORKER_POINTS)
            return delegate.compute(map_type, params)
    return run_kernel(map_type, params, **kernel_options(map_type, cfg))


def summarize(output: Any) -> Dict[str, Any]:
    if isinstance(output, list):
        defined = [value for _, value in output if value is not None]
        return {
            "samples": len(output),
            "undefined": len(output) - len(defined),
            "min": min(defined) if defined else None,
            "max": max(defined) if defined else None,
        }
    summary: Dict[str, Any] = {"shape": list(output.shape)}
    if output.size:
        with np.errstate(invalid="ignore"):
            summary["finite"] = bool(np.all(np.isfinite(output)))
    return summary


def run_compute(args: argparse.Namespace) -> int:
    map_type = MapType(args.map_type)
    cfg = get_config(args.config)

    validation = validate_parameters(map_type, _load_params(args))
    if not validation.is_valid or validation.parameters is None:
        _print({"errors": validation.errors})
        return 1
    params = validation.parameters

    stability = check_parameter_stability(map_type, params)
    for warning in stability.warnings:
        logger.warning("%s", warning)

    output = compute(map_type, params, cfg, workers=args.workers)
    payload: Dict[str, Any] = {"map_type": map_type.value, "warnings": stability.warnings, "summary": summarize(output)}

    if args.output:
        data = output if isinstance(output, list) else output.tolist()
        save_json({"map_type": map_type.value, "parameters": params, "output": data}, args.output)
        payload["output"] = args.output
    if args.plot_dir:
        payload["plot"] = str(save_kernel_output(map_type, output, Path(args.plot_dir)))

    _print(payload)
    return 0


def run_compare_url(args: argparse.Namespace) -> int:
    defaults = get_default_parameters(args.map_type)
    state = ComparisonState(
        left=json.loads(args.left) if args.left else dict(defaults),
        right=json.loads(args.right) if args.right else dict(defaults),
    )
    base = args.base if args.base is not None else get_config().API.BASE
    print(build_comparison_url(base, args.map_type, state))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    if not hasattr(args, "func"):
        parser.print_help()
        return 0
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
