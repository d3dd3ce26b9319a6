"""URL state for side-by-side comparison mode.

URL format: ``<base>/<mapType>/compare?compare=true&left=<b64>&right=<b64>``.
Each side is the parameter set as compact JSON without its ``type`` tag,
base64-encoded from UTF-8. Decoding re-attaches the route's map type and falls
back to the built-in defaults whenever a side cannot be decoded or validated.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Union
from urllib.parse import parse_qs, urlencode, urlsplit

from .schema import MapType, get_default_parameters, is_valid_map_type
from .utils import compact_json, truncate_for_log
from .validation import TYPE_KEY, validate_parameters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComparisonState:
    left: Dict[str, Any]
    right: Dict[str, Any]
    compare: bool = True


def base64_encode(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def base64_decode(encoded: str) -> str:
    return base64.b64decode(encoded.encode("ascii"), validate=True).decode("utf-8")


def encode_params(params: Dict[str, Any]) -> str:
    """Encode one side, dropping the ``type`` tag that the route already carries."""
    stripped = {key: value for key, value in params.items() if key != TYPE_KEY}
    return base64_encode(compact_json(stripped))


def decode_params(encoded: str, map_type: Union[str, MapType]) -> Optional[Dict[str, Any]]:
    try:
        decoded = json.loads(base64_decode(encoded))
    except (ValueError, binascii.Error) as exc:
        logger.warning("Failed to decode comparison parameters: %s", truncate_for_log(str(exc)))
        return None
    if not isinstance(decoded, dict):
        logger.warning("Comparison parameters are not an object: %s", truncate_for_log(decoded))
        return None

    params = {**decoded, TYPE_KEY: str(map_type)}
    validation = validate_parameters(map_type, params)
    if not validation.is_valid or validation.parameters is None:
        logger.warning("Invalid comparison parameters: %s", validation.errors)
        return None
    return validation.parameters


def encode_comparison_state(state: ComparisonState) -> Dict[str, str]:
    return {
        "compare": "true",
        "left": encode_params(state.left),
        "right": encode_params(state.right),
    }


def build_comparison_url(base: str, map_type: Union[str, MapType], state: ComparisonState) -> str:
    cleaned_base = base.rstrip("/")
    return f"{cleaned_base}/{map_type}/compare?{urlencode(encode_comparison_state(state))}"


def decode_comparison_state(url: str, map_type: Union[str, MapType]) -> Optional[ComparisonState]:
    """Return the comparison state carried by ``url``, or None outside comparison mode.

    An unknown ``map_type`` has no defaults to fall back to and also yields None.
    """
    if not is_valid_map_type(map_type):
        logger.warning("Ignoring comparison state for unknown map type: %s", truncate_for_log(map_type))
        return None
    query = parse_qs(urlsplit(url).query)
    if query.get("compare", [None])[0] != "true":
        return None

    defaults = get_default_parameters(map_type)
    sides = {}
    for side in ("left", "right"):
        encoded = query.get(side, [None])[0]
        decoded = decode_params(encoded, map_type) if encoded else None
        sides[side] = decoded if decoded is not None else dict(defaults)
    return ComparisonState(left=sides["left"], right=sides["right"])


def swap_parameters(state: ComparisonState) -> ComparisonState:
    return replace(state, left=state.right, right=state.left)


def create_comparison_state_from_current(map_type: Union[str, MapType], current: Dict[str, Any]) -> ComparisonState:
    """Start comparison mode with the current parameters on the left and defaults on the right."""
    return ComparisonState(left=dict(current), right=dict(get_default_parameters(map_type)))
