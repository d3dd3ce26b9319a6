"""Turn untrusted configuration payloads into validated parameter sets.

Three entry points cover the ways a configuration reaches a page:

* :func:`parse_config_param`: percent-encoded JSON carried inline in a URL.
* :func:`load_saved_config_parameters`: a saved record fetched by id, with a
  one-shot session cache as fallback.
* :func:`load_shared_config_parameters`: a shared record fetched by short code.

Every failure is returned as a :class:`LoadFailure`; nothing raises past these
functions except :class:`LoadCancelled`, which callers treat as a silent no-op.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, MutableMapping, Optional, Protocol, Union
from urllib.parse import quote, unquote

import requests

from .config import API_TIMEOUT, MAX_DECODED_CONFIG_PARAM_LENGTH, MAX_JSON_NESTING_DEPTH
from .schema import MapType
from .utils import truncate_for_log
from .validation import validate_parameters

logger = logging.getLogger(__name__)

PARSE_FAILED = "Failed to parse configuration parameters"
TOO_LARGE = "Configuration parameter is too large"
TOO_DEEPLY_NESTED = "Configuration parameter is too deeply nested"
INVALID_STRUCTURE = "Invalid parameters structure"
LOAD_FAILED = "Failed to load configuration parameters"
SHARE_EXPIRED = "This shared configuration has expired"
SHARE_NETWORK_ERROR = "Failed to load shared configuration (network error)"
SHARE_INVALID_DATA = "Invalid shared configuration data"

HTTP_GONE = 410

_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class LoadCancelled(Exception):
    """Raised when a pending load was superseded or aborted."""


class CancellationToken:
    """Per-call-site abort flag shared between a caller and its pending load."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise LoadCancelled("configuration load was cancelled")


class ResponseLike(Protocol):
    ok: bool
    status_code: int

    def json(self) -> Any: ...


FetchFn = Callable[[str], ResponseLike]


@dataclass
class LoadSuccess:
    parameters: Dict[str, Any]
    source: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    ok: bool = field(default=True, init=False)


@dataclass
class LoadFailure:
    error: str
    errors: List[str]
    code: str
    log_message: str = ""
    log_details: Any = None
    validation_errors: Optional[List[str]] = None
    ok: bool = field(default=False, init=False)


LoadResult = Union[LoadSuccess, LoadFailure]


def default_fetch(url: str, timeout: float = API_TIMEOUT) -> requests.Response:
    return requests.get(url, timeout=timeout)


# ---------------------------------------------------------------------------
# Inline URL configuration
# ---------------------------------------------------------------------------


def decode_uri_component(encoded: str) -> str:
    """Strict percent-decoding: malformed escapes and invalid UTF-8 raise ValueError."""
    if _MALFORMED_ESCAPE.search(encoded):
        raise ValueError("malformed percent-escape sequence")
    return unquote(encoded, encoding="utf-8", errors="strict")


def max_nesting_depth(text: str, limit: Optional[int] = None) -> int:
    """Return the deepest ``{``/``[`` nesting in ``text``.

    Brackets inside string literals are ignored and backslash escapes are
    honoured. When ``limit`` is given the scan stops as soon as it is exceeded.
    """
    depth = 0
    deepest = 0
    in_string = False
    escaped = False
    for char in text:
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in "{[":
            depth += 1
            if depth > deepest:
                deepest = depth
                if limit is not None and deepest > limit:
                    return deepest
        elif char in "}]":
            depth = max(0, depth - 1)
    return deepest


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {name}")


def _parse_failure(code: str, message: str, config_param: str, exc: Optional[BaseException] = None) -> LoadFailure:
    details = {"reason": code, "config_param": truncate_for_log(config_param)}
    if exc is not None:
        details["exception"] = truncate_for_log(str(exc))
    logger.warning("Invalid config parameter: %s", details)
    return LoadFailure(
        error=message,
        errors=[message],
        code=code,
        log_message="Invalid config parameter:",
        log_details=details,
    )


def parse_config_param(
    map_type: Union[str, MapType],
    config_param: str,
    *,
    max_length: int = MAX_DECODED_CONFIG_PARAM_LENGTH,
    max_depth: int = MAX_JSON_NESTING_DEPTH,
) -> LoadResult:
    """Decode, bound-check, parse and validate an inline ``config`` value."""
    try:
        decoded = decode_uri_component(config_param)
    except ValueError as exc:
        return _parse_failure("decode_error", PARSE_FAILED, config_param, exc)

    if len(decoded) > max_length:
        return _parse_failure("too_large", TOO_LARGE, config_param)

    if max_nesting_depth(decoded, limit=max_depth) > max_depth:
        return _parse_failure("too_deeply_nested", TOO_DEEPLY_NESTED, config_param)

    try:
        parsed = json.loads(decoded, parse_constant=_reject_constant)
    except ValueError as exc:
        return _parse_failure("invalid_json", PARSE_FAILED, config_param, exc)

    validation = validate_parameters(map_type, parsed)
    if not validation.is_valid or validation.parameters is None:
        logger.warning("Invalid parameters structure: %s", truncate_for_log(validation.errors))
        return LoadFailure(
            error=INVALID_STRUCTURE,
            errors=list(validation.errors),
            code="invalid_parameters",
            log_message="Invalid parameters structure:",
            log_details=validation.errors,
            validation_errors=list(validation.errors),
        )
    return LoadSuccess(parameters=validation.parameters)


# ---------------------------------------------------------------------------
# Saved and shared configurations
# ---------------------------------------------------------------------------


def _read_json_body(response: ResponseLike) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _validated(map_type: Union[str, MapType], candidate: Any, source: str, metadata: Optional[Dict[str, Any]] = None) -> LoadResult:
    validation = validate_parameters(map_type, candidate)
    if not validation.is_valid or validation.parameters is None:
        logger.warning("Invalid parameters structure from %s: %s", source, truncate_for_log(validation.errors))
        return LoadFailure(
            error=INVALID_STRUCTURE,
            errors=list(validation.errors),
            code="invalid_parameters",
            log_message="Invalid parameters structure:",
            log_details=validation.errors,
            validation_errors=list(validation.errors),
        )
    return LoadSuccess(parameters=validation.parameters, source=source, metadata=metadata or {})


def saved_config_storage_key(config_id: str) -> str:
    return f"saved-config:{config_id}"


def load_saved_config_parameters(
    config_id: str,
    map_type: Union[str, MapType],
    base: str = "",
    fetch_fn: Optional[FetchFn] = None,
    *,
    session_store: Optional[MutableMapping[str, str]] = None,
    token: Optional[CancellationToken] = None,
) -> LoadResult:
    """Load a saved configuration from the API, falling back to the session cache.

    The session entry is removed once consumed so a followed link only spends
    its temporary transfer once.
    """
    fetch = fetch_fn or default_fetch
    loaded: Any = None
    source: Optional[str] = None

    url = f"{base}/api/saved-config/{quote(str(config_id), safe='')}"
    try:
        if token is not None:
            token.raise_if_cancelled()
        response = fetch(url)
        if response.ok:
            data = _read_json_body(response)
            if isinstance(data, dict) and data.get("mapType") == str(map_type):
                loaded = data.get("parameters")
                source = "api" if loaded is not None else None
        else:
            logger.warning("Saved config request %s returned status %s", url, response.status_code)
    except LoadCancelled:
        raise
    except Exception as exc:
        logger.warning("Saved config request %s failed: %s", url, truncate_for_log(str(exc)))

    if token is not None:
        token.raise_if_cancelled()

    if loaded is None and session_store is not None:
        storage_key = saved_config_storage_key(config_id)
        raw = session_store.get(storage_key)
        if raw:
            try:
                loaded = json.loads(raw)
            except ValueError as exc:
                logger.warning("Discarding unreadable session entry %s: %s", storage_key, exc)
            else:
                session_store.pop(storage_key, None)
                source = "session" if loaded is not None else None

    if loaded is None or source is None:
        return LoadFailure(error=LOAD_FAILED, errors=[LOAD_FAILED], code="not_found")

    return _validated(map_type, loaded, source)


def load_shared_config_parameters(
    share_code: str,
    map_type: Union[str, MapType],
    base: str = "",
    fetch_fn: Optional[FetchFn] = None,
    *,
    token: Optional[CancellationToken] = None,
) -> LoadResult:
    """Load a shared configuration by short code.

    HTTP 410 means the share has expired and is reported as such.
    """
    fetch = fetch_fn or default_fetch
    url = f"{base}/api/shared/{quote(str(share_code), safe='')}"
    try:
        if token is not None:
            token.raise_if_cancelled()
        response = fetch(url)
    except LoadCancelled:
        raise
    except Exception as exc:
        logger.warning("Shared config request %s failed: %s", url, truncate_for_log(str(exc)))
        return LoadFailure(error=SHARE_NETWORK_ERROR, errors=[SHARE_NETWORK_ERROR], code="network_error")

    if token is not None:
        token.raise_if_cancelled()

    if not response.ok:
        if response.status_code == HTTP_GONE:
            return LoadFailure(error=SHARE_EXPIRED, errors=[SHARE_EXPIRED], code="expired")
        message = f"Failed to load shared configuration (status {response.status_code})"
        return LoadFailure(error=message, errors=[message], code="http_error")

    data = _read_json_body(response)
    if not isinstance(data, dict) or data.get("mapType") != str(map_type) or data.get("parameters") is None:
        logger.warning("Shared config %s returned unusable body: %s", share_code, truncate_for_log(data))
        return LoadFailure(error=SHARE_INVALID_DATA, errors=[SHARE_INVALID_DATA], code="invalid_data")

    metadata = {key: value for key, value in data.items() if key not in ("mapType", "parameters")}
    return _validated(map_type, data["parameters"], "shared_api", metadata)
