"""Utility helpers for logging and JSON handling."""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Dict

from .config import MAX_LOG_MESSAGE_LENGTH

TRUNCATION_SUFFIX = "... (truncated)"


def iteration_count(value: float) -> int:
    """Number of passes made by a loop over ``i = 0, 1, ...`` while ``i < value``.

    Fractional counts round up, so ``2.5`` iterations run three times.
    """
    return max(0, math.ceil(value))


def configure_logging(level: int = logging.INFO) -> None:
    """Configure a simple logging setup for command line usage."""
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )


def ensure_dir(path: str | Path) -> Path:
    """Create a directory path if it does not already exist."""
    path_obj = Path(path)
    path_obj.mkdir(parents=True, exist_ok=True)
    return path_obj


def save_json(data: Dict[str, Any], path: str | Path) -> None:
    """Persist a JSON file with indentation for readability."""
    path_obj = Path(path)
    ensure_dir(path_obj.parent)
    with path_obj.open("w", encoding="utf-8") as fp:
        json.dump(data, fp, indent=2, sort_keys=True)


def load_json(path: str | Path) -> Dict[str, Any]:
    """Load a JSON file from disk."""
    with Path(path).open("r", encoding="utf-8") as fp:
        return json.load(fp)


def compact_json(data: Any) -> str:
    """Serialize without whitespace, matching what browsers put in URLs."""
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def truncate_for_log(value: Any, max_length: int = MAX_LOG_MESSAGE_LENGTH) -> str:
    """Return a string form of ``value`` no longer than ``max_length``.

    Strings are used as-is, everything else through ``repr``.
    """
    text = value if isinstance(value, str) else repr(value)
    if len(text) <= max_length:
        return text
    keep = max(0, max_length - len(TRUNCATION_SUFFIX))
    return text[:keep] + TRUNCATION_SUFFIX
