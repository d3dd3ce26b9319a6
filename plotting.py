"""Plotting utilities for exporting kernel output as figures."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Sequence, Tuple

import numpy as np
import matplotlib

# Use non-interactive backend for headless environments
matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from chaosmaps.schema import DISPLAY_NAMES, MapType  # noqa: E402

BACKGROUND = "#05050f"
PRIMARY = "#00f3ff"
SECONDARY = "#bc13fe"

RASTER_TYPES = frozenset({MapType.NEWTON, MapType.BIFURCATION_LOGISTIC, MapType.BIFURCATION_HENON})


def generate_filename(map_type: str, extension: str = "png", now: Optional[datetime] = None) -> str:
    """``<mapType>_<YYYY-MM-DD_HH-MM-SS>.<extension>``"""
    stamp = (now or datetime.now()).strftime("%Y-%m-%d_%H-%M-%S")
    return f"{map_type}_{stamp}.{extension}"


def _new_axes(title: str) -> Tuple[plt.Figure, plt.Axes]:
    fig, ax = plt.subplots(1, 1, figsize=(6, 5), facecolor=BACKGROUND)
    ax.set_facecolor(BACKGROUND)
    ax.set_title(title, color=PRIMARY)
    ax.tick_params(colors="gray")
    return fig, ax


def save_trajectory_plot(points: np.ndarray, path: Path, title: str = "Trajectory") -> None:
    """Plot a point cloud or orbit.

    Two-column input is drawn as a scatter of (x, y); three-column input as the
    (x, z) projection of the orbit.
    """
    if points.ndim != 2 or points.shape[1] not in (2, 3):
        raise ValueError("points must have shape (n, 2) or (n, 3)")
    fig, ax = _new_axes(title)
    if points.shape[1] == 3:
        ax.plot(points[:, 0], points[:, 2], color=PRIMARY, linewidth=0.4)
        ax.set_xlabel("x")
        ax.set_ylabel("z")
    else:
        ax.scatter(points[:, 0], points[:, 1], s=0.2, color=PRIMARY, alpha=0.6, linewidths=0)
        ax.set_xlabel("x")
        ax.set_ylabel("y")
    fig.tight_layout()
    fig.savefig(path, dpi=150, facecolor=BACKGROUND)
    plt.close(fig)


def save_curve_plot(samples: Sequence[Tuple[float, Optional[float]]], path: Path, title: str = "Curve") -> None:
    """Plot ``(x, value)`` samples; None values leave a gap instead of a cliff."""
    xs = np.array([x for x, _ in samples], dtype=np.float64)
    ys = np.array([np.nan if value is None else value for _, value in samples], dtype=np.float64)
    fig, ax = _new_axes(title)
    ax.plot(xs, ys, color=PRIMARY, linewidth=1.0)
    ax.axhline(0.0, color=SECONDARY, lw=0.5)
    ax.grid(True, linestyle=":", alpha=0.3)
    fig.tight_layout()
    fig.savefig(path, dpi=150, facecolor=BACKGROUND)
    plt.close(fig)


def save_raster(image: np.ndarray, path: Path, title: str = "Raster") -> None:
    """Save an RGBA image or a single-channel opacity map."""
    fig, ax = _new_axes(title)
    if image.ndim == 2:
        ax.imshow(image, cmap="magma", vmin=0.0, vmax=1.0, aspect="auto")
    else:
        ax.imshow(image, aspect="auto")
    ax.axis("off")
    fig.tight_layout()
    fig.savefig(path, dpi=150, facecolor=BACKGROUND)
    plt.close(fig)


def save_kernel_output(map_type: str, output: Any, directory: Path, now: Optional[datetime] = None) -> Path:
    """Write the figure that suits ``output`` and return its path."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / generate_filename(str(map_type), "png", now=now)
    resolved = MapType(map_type)
    title = DISPLAY_NAMES[resolved]
    if resolved is MapType.LYAPUNOV:
        save_curve_plot(output, path, title)
    elif resolved in RASTER_TYPES:
        save_raster(output, path, title)
    elif resolved is MapType.LOGISTIC:
        save_curve_plot([(float(i), float(x)) for i, x in output], path, title)
    else:
        save_trajectory_plot(output, path, title)
    return path
